"""
Integration test fixtures.

Integration tests:
- Test component boundaries
- Use real I/O but to temp locations
- Should be deterministic
"""

import pytest
import tempfile
import shutil
from pathlib import Path


@pytest.fixture
def temp_dir():
    """Temporary directory for test data."""
    d = tempfile.mkdtemp()
    yield Path(d)
    shutil.rmtree(d, ignore_errors=True)


@pytest.fixture
def submissions_dir(temp_dir):
    """Temporary submissions directory."""
    p = temp_dir / "submissions"
    p.mkdir()
    return p


@pytest.fixture
def json_repo(submissions_dir):
    from repositories.json_backend import JsonRepository
    return JsonRepository(base_path=submissions_dir)
