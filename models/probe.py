"""
Probe models - questions put to the answer engine and what came back.
"""

from datetime import datetime
from enum import Enum
from typing import Optional
from pydantic import BaseModel, Field, ConfigDict

from .base import utcnow


class ProbeCategory(str, Enum):
    """Strategic FAQ categories - one per slot in a five-probe batch."""
    WHAT_IS = "what-is"
    HOW_WHY = "how-why"
    TECHNICAL = "technical"
    COMPARATIVE = "comparative"
    ACTION = "action"


class Probe(BaseModel):
    """A generated question (with its expected answer) for one submission."""
    model_config = ConfigDict(frozen=True, str_strip_whitespace=True)

    question: str = Field(min_length=1)
    answer: Optional[str] = None
    category: ProbeCategory = ProbeCategory.WHAT_IS
    numbers: list[str] = Field(default_factory=list)

    @property
    def has_numbers(self) -> bool:
        return bool(self.numbers)


class Citation(BaseModel):
    """A URL cited inline in the answer text. Rank is emission order, 1-indexed."""
    model_config = ConfigDict(frozen=True)

    url: str
    title: Optional[str] = None
    rank: int = Field(ge=1)


class ProbeResult(BaseModel):
    """
    Outcome of one probe against the answer engine.

    Append-only: created once per probe and never rewritten.
    """
    model_config = ConfigDict(frozen=True, extra="ignore")

    # Identity
    submission_id: str = ""
    probe_index: int = 0
    attempt: int = 1
    timestamp: datetime = Field(default_factory=utcnow)

    # Content
    question: str
    answer_text: Optional[str] = None

    # Classification
    found_in_sources: bool = False
    found_in_citations: bool = False
    citation_rank: Optional[int] = None

    citations: list[Citation] = Field(default_factory=list)
    sources: list[str] = Field(default_factory=list)

    response_time_ms: int = 0
    engine: str = ""

    @property
    def target_found(self) -> bool:
        """Target appeared anywhere in the engine output."""
        return self.found_in_sources or self.found_in_citations
