"""
Repository base classes - define the interface.
"""

from abc import ABC, abstractmethod
from typing import Generic, TypeVar, Optional, Iterator

from models import (
    Submission,
    SubmissionStatus,
    Phase,
    Probe,
    ProbeResult,
    Metrics,
)

T = TypeVar("T")


class BaseRepository(ABC, Generic[T]):
    """Abstract base for entity repositories."""

    @abstractmethod
    def get(self, id: str) -> Optional[T]:
        """Get entity by ID."""
        pass

    @abstractmethod
    def save(self, entity: T) -> None:
        """Save entity."""
        pass

    @abstractmethod
    def delete(self, id: str) -> bool:
        """Delete entity by ID. Returns True if deleted."""
        pass

    @abstractmethod
    def list(self) -> list[T]:
        """List all entities."""
        pass

    @abstractmethod
    def exists(self, id: str) -> bool:
        """Check if entity exists."""
        pass


class SubmissionRepository(BaseRepository[Submission]):
    """
    Repository for submissions.

    Every update is safe to repeat: writing the same value twice leaves the
    record unchanged apart from updated_at.
    """

    @abstractmethod
    def create(self, url: str) -> Submission:
        """Create a pending submission for a URL."""
        pass

    @abstractmethod
    def update_status(self, id: str, status: SubmissionStatus, error_message: str = None) -> Submission:
        """Apply a lifecycle transition. Raises InvalidTransition if forbidden."""
        pass

    @abstractmethod
    def start_run(self, id: str) -> Submission:
        """Enter processing with a new run index, even if already processing."""
        pass

    @abstractmethod
    def update_phase(self, id: str, phase: Phase) -> None:
        """Record the phase currently running."""
        pass

    @abstractmethod
    def update_extracted_content(self, id: str, title: str, content: str, word_count: int = 0) -> None:
        """Store scraped title and (length-capped) body text."""
        pass

    @abstractmethod
    def update_probes(self, id: str, probes: list[Probe]) -> None:
        """Store the generated probes."""
        pass

    @abstractmethod
    def update_metrics(self, id: str, metrics: Metrics) -> None:
        """Overwrite the metrics snapshot."""
        pass

    @abstractmethod
    def list_recent(self, limit: int = 10) -> list[Submission]:
        """Newest submissions first."""
        pass

    @abstractmethod
    def list_by_status(self, status: SubmissionStatus) -> list[Submission]:
        """Submissions in a given status, oldest first."""
        pass


class ResultsRepository(ABC):
    """Repository for probe results (append-only)."""

    @abstractmethod
    def append(self, submission_id: str, result: ProbeResult) -> None:
        """Append a result."""
        pass

    @abstractmethod
    def list_for_submission(self, submission_id: str, attempt: int = None) -> list[ProbeResult]:
        """All results for a submission in write order, optionally for one run."""
        pass

    @abstractmethod
    def count(self, submission_id: str) -> int:
        """Count results for a submission."""
        pass

    @abstractmethod
    def iterate(self, submission_id: str) -> Iterator[ProbeResult]:
        """Iterate results without loading all into memory."""
        pass


class Repository:
    """
    Aggregate repository - provides access to all entity repositories.

    This is what consumers use. Backend implementations provide
    concrete versions of each sub-repository.
    """

    @property
    @abstractmethod
    def submissions(self) -> SubmissionRepository:
        """Access submission repository."""
        pass

    @property
    @abstractmethod
    def results(self) -> ResultsRepository:
        """Access probe result repository."""
        pass
