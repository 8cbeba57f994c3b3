"""
Worker models - shared by background workers.
"""

from datetime import datetime
from typing import Optional
from pydantic import BaseModel

from .base import utcnow


class WorkerStats(BaseModel):
    """Statistics for a background worker."""
    runs: int = 0
    successes: int = 0
    errors: int = 0

    items_processed: int = 0
    items_failed: int = 0

    # Timing
    last_run: Optional[datetime] = None
    last_success: Optional[datetime] = None
    last_error: Optional[datetime] = None
    last_error_message: Optional[str] = None

    last_submission: Optional[str] = None

    def record_run(self) -> None:
        """Record a poll cycle."""
        self.runs += 1
        self.last_run = utcnow()

    def record_success(self, items: int = 0) -> None:
        """Record successful cycle."""
        self.successes += 1
        self.last_success = utcnow()
        self.items_processed += items

    def record_error(self, message: str = None) -> None:
        """Record an error."""
        self.errors += 1
        self.last_error = utcnow()
        self.last_error_message = message

    @property
    def success_rate(self) -> float:
        """Fraction of cycles that succeeded."""
        if self.runs == 0:
            return 0.0
        return self.successes / self.runs

    @property
    def is_healthy(self) -> bool:
        """Check if worker is healthy (recent success, low error rate)."""
        if self.runs < 3:
            return True  # Not enough data
        return self.success_rate > 0.5

    def to_dict(self) -> dict:
        """Export for display."""
        return {
            "runs": self.runs,
            "successes": self.successes,
            "errors": self.errors,
            "items_processed": self.items_processed,
            "items_failed": self.items_failed,
            "last_run": self.last_run.isoformat() if self.last_run else None,
            "last_error": self.last_error_message,
            "last_submission": self.last_submission,
            "healthy": self.is_healthy,
        }
