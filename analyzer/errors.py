"""
Error taxonomy for the analysis pipeline.

One exception type, tagged with a kind. Callers dispatch on `kind`,
never on subclass identity.
"""

from enum import Enum
from typing import Optional


class ErrorKind(str, Enum):
    TRANSIENT = "transient"                    # network, DNS, timeout, 429, 5xx
    DETERMINISTIC = "deterministic"            # other 4xx, bad input, schema violations
    NOT_FOUND = "not_found"
    ACCESS_DENIED = "access_denied"
    CONTENT_TOO_SHORT = "content_too_short"
    GENERATION_INVALID = "generation_invalid"


class AnalysisError(Exception):
    """Pipeline failure with a kind, optional HTTP status, and free-form context."""

    def __init__(
        self,
        kind: ErrorKind,
        message: str,
        status_code: Optional[int] = None,
        context: Optional[dict] = None,
    ):
        super().__init__(message)
        self.kind = kind
        self.message = message
        self.status_code = status_code
        self.context = context or {}

    @property
    def retryable(self) -> bool:
        return self.kind == ErrorKind.TRANSIENT

    def __repr__(self) -> str:
        status = f", status={self.status_code}" if self.status_code is not None else ""
        return f"AnalysisError({self.kind.value}{status}: {self.message})"


class SubmissionNotFound(LookupError):
    """The trigger referenced a submission the repository does not know."""


def transient(message: str, **context) -> AnalysisError:
    return AnalysisError(ErrorKind.TRANSIENT, message, context=context)


def is_retryable(error: Exception) -> bool:
    """Default retry predicate: only transient AnalysisErrors."""
    return isinstance(error, AnalysisError) and error.retryable


def describe(error: Exception) -> str:
    """Human-readable message for a submission's failure reason."""
    if isinstance(error, AnalysisError):
        return error.message
    return str(error) or error.__class__.__name__
