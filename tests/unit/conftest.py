"""
Unit test fixtures.

All unit tests should be:
- Fast (< 100ms)
- Isolated (no external dependencies)
- Deterministic (same result every time)
"""

import pytest
from models import ProbeResult, Submission


@pytest.fixture
def submission():
    """Fresh pending submission."""
    return Submission(url="https://site.com/article")


@pytest.fixture
def result_factory():
    """Build ProbeResults with only the fields a test cares about."""
    def make(found_in_sources=False, found_in_citations=False, citation_rank=None, response_time_ms=100, **kwargs):
        return ProbeResult(
            question=kwargs.pop("question", "What is it?"),
            found_in_sources=found_in_sources,
            found_in_citations=found_in_citations,
            citation_rank=citation_rank,
            response_time_ms=response_time_ms,
            **kwargs,
        )
    return make

