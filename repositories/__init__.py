"""
Repository layer - abstracts persistence.

Usage:
    from repositories import get_repository

    repo = get_repository()  # Returns configured backend
    submission = repo.submissions.create("https://example.com/article")
    repo.results.list_for_submission(submission.id)

Backends are swappable via configure_backend().
"""

from pathlib import Path

from .base import Repository, SubmissionRepository, ResultsRepository
from .json_backend import JsonRepository

# Default backend - can be changed via configure_backend
_backend: str = "json"
_base_path: Path = None
_instance: Repository = None


def get_repository() -> Repository:
    """Get the configured repository instance."""
    global _instance

    if _instance is None:
        if _backend == "json":
            _instance = JsonRepository(base_path=_base_path)
        else:
            raise ValueError(f"Unknown backend: {_backend}")

    return _instance


def configure_backend(backend: str, base_path: Path = None) -> None:
    """Configure the repository backend."""
    global _backend, _base_path, _instance
    _backend = backend
    _base_path = base_path
    _instance = None  # Force re-initialization


__all__ = [
    "get_repository",
    "configure_backend",
    "Repository",
    "SubmissionRepository",
    "ResultsRepository",
    "JsonRepository",
]
