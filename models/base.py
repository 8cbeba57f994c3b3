"""
Base entity classes.
"""

from datetime import datetime, timezone
from pydantic import BaseModel, Field, ConfigDict


def utcnow() -> datetime:
    """Timezone-aware current time; every persisted timestamp uses it."""
    return datetime.now(timezone.utc)


class TimestampMixin(BaseModel):
    """Mixin for created/updated timestamps."""
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)


class BaseEntity(TimestampMixin):
    """
    Base for all persistent entities.

    Subclasses define their own id field with appropriate type.
    """
    model_config = ConfigDict(
        validate_assignment=True,
        extra="ignore",  # Tolerate fields written by newer versions
        str_strip_whitespace=True,
    )

    def touch(self) -> None:
        """Update the updated_at timestamp."""
        self.updated_at = utcnow()
