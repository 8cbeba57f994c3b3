"""
Submission model - one analyzed URL and its lifecycle.
"""

from datetime import datetime
from enum import Enum
from typing import Optional
from uuid import uuid4
from pydantic import Field

from .base import BaseEntity, utcnow
from .probe import Probe
from .metrics import Metrics


class SubmissionStatus(str, Enum):
    PENDING = "pending"
    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        return self in (SubmissionStatus.COMPLETED, SubmissionStatus.FAILED)


class Phase(str, Enum):
    """Finer-grained progress marker within processing."""
    QUEUED = "queued"
    FETCHING = "fetching"
    GENERATING = "generating"
    CONTROL = "control"
    PROBING = "probing"
    AGGREGATING = "aggregating"
    DONE = "done"


ALLOWED_TRANSITIONS: dict[SubmissionStatus, frozenset] = {
    SubmissionStatus.PENDING: frozenset({SubmissionStatus.PROCESSING}),
    SubmissionStatus.PROCESSING: frozenset({SubmissionStatus.COMPLETED, SubmissionStatus.FAILED}),
    SubmissionStatus.FAILED: frozenset({SubmissionStatus.PROCESSING}),
    SubmissionStatus.COMPLETED: frozenset(),
}


class InvalidTransition(ValueError):
    """Raised when a status change is not allowed by the lifecycle."""

    def __init__(self, current: SubmissionStatus, requested: SubmissionStatus):
        self.current = current
        self.requested = requested
        super().__init__(f"Cannot move submission from {current.value} to {requested.value}")


def new_submission_id() -> str:
    return uuid4().hex


class Submission(BaseEntity):
    """
    An article URL submitted for citation analysis.

    completed_at is set exactly when status is terminal.
    """
    id: str = Field(default_factory=new_submission_id)
    url: str

    status: SubmissionStatus = SubmissionStatus.PENDING
    phase: Phase = Phase.QUEUED
    attempts: int = 0

    article_title: Optional[str] = None
    article_content: Optional[str] = None
    word_count: int = 0

    probes: list[Probe] = Field(default_factory=list)
    metrics: Optional[Metrics] = None

    error_message: Optional[str] = None
    failed_phase: Optional[Phase] = None
    completed_at: Optional[datetime] = None

    @property
    def is_terminal(self) -> bool:
        return self.status.is_terminal

    def can_transition(self, status: SubmissionStatus) -> bool:
        return status in ALLOWED_TRANSITIONS[self.status]

    def transition(self, status: SubmissionStatus, error_message: str = None) -> bool:
        """
        Move to a new status, keeping completed_at and attempts consistent.

        Re-applying the current status is a no-op (returns False) so retried
        writes stay harmless. Forbidden moves raise InvalidTransition.
        """
        if status == self.status:
            if error_message:
                self.error_message = error_message
            self.touch()
            return False

        if not self.can_transition(status):
            raise InvalidTransition(self.status, status)

        self.status = status
        if status == SubmissionStatus.PROCESSING:
            self._open_run()
        elif status.is_terminal:
            self.completed_at = utcnow()
            if status == SubmissionStatus.FAILED:
                self.error_message = error_message
                self.failed_phase = self.phase
            self.phase = Phase.DONE

        self.touch()
        return True

    def begin_run(self) -> None:
        """
        Enter processing with a fresh run index.

        A submission already processing was abandoned mid-run (worker died,
        job redelivered), so it gets a new index instead of sharing the old one.
        """
        if self.status == SubmissionStatus.PROCESSING:
            self._open_run()
            self.touch()
        else:
            self.transition(SubmissionStatus.PROCESSING)

    def _open_run(self) -> None:
        self.attempts += 1
        self.phase = Phase.QUEUED
        self.error_message = None
        self.failed_phase = None
        self.completed_at = None
