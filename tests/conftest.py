"""
Root test configuration.

Test organization:
- unit/        Fast, isolated, no I/O, mocked dependencies
- integration/ Component boundaries, real I/O to temp locations

Run specific levels:
    pytest tests/unit -v           # Fast feedback loop
    pytest tests/integration -v    # Before commit
    pytest tests -v                # Everything
"""

import json
import sys
from pathlib import Path

# Add project root (and this directory, for the shared fakes) to path
sys.path.insert(0, str(Path(__file__).parent.parent))
sys.path.insert(0, str(Path(__file__).parent))

import pytest

from config import Settings
from analyzer.retry import RetryPolicy
from fakes import FIVE_FAQS


def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line("markers", "unit: Fast isolated tests")
    config.addinivalue_line("markers", "integration: Component boundary tests")
    config.addinivalue_line("markers", "slow: Tests that take > 1s")


@pytest.fixture
def fast_settings(tmp_path):
    """Settings with every delay removed."""
    return Settings(
        fetch_retry_delay=0,
        retry_base_delay=0,
        inter_probe_delay=0,
        data_dir=tmp_path,
    )


@pytest.fixture
def no_sleep_policy():
    """Factory for RetryPolicies that record sleeps instead of sleeping."""
    def make(max_retries: int = 2, base_delay: float = 1.0):
        sleeps = []
        policy = RetryPolicy(max_retries=max_retries, base_delay=base_delay, sleep=sleeps.append)
        policy.sleeps = sleeps
        return policy
    return make


@pytest.fixture
def five_faqs_json():
    return json.dumps({"faqs": FIVE_FAQS})
