"""
Domain models - single source of truth for all entities.

Design principles:
- Every entity defined once
- Validation at the boundary
- Backend-agnostic (repository handles persistence)
"""

from .base import BaseEntity, TimestampMixin, utcnow
from .probe import Probe, ProbeCategory, Citation, ProbeResult
from .metrics import Metrics
from .submission import (
    Submission,
    SubmissionStatus,
    Phase,
    InvalidTransition,
    ALLOWED_TRANSITIONS,
)
from .worker import WorkerStats

__all__ = [
    # Base
    "BaseEntity",
    "TimestampMixin",
    "utcnow",
    # Probes
    "Probe",
    "ProbeCategory",
    "Citation",
    "ProbeResult",
    # Metrics
    "Metrics",
    # Submission
    "Submission",
    "SubmissionStatus",
    "Phase",
    "InvalidTransition",
    "ALLOWED_TRANSITIONS",
    # Worker
    "WorkerStats",
]
