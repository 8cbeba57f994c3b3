"""
Tiered visibility metrics for a submission.
"""

from typing import Optional
from pydantic import BaseModel


class Metrics(BaseModel):
    """
    Snapshot of the three visibility tiers.

    Tier 1: the engine can reach the page at all (control probe)
    Tier 2: target URL among the sources the engine consulted
    Tier 3: target URL cited inline in the answer

    Rates are percentages with one decimal place, None when nothing was probed.
    """
    is_accessible: bool = False
    in_sources_count: int = 0
    in_citations_count: int = 0
    total_probes: int = 0

    tier2_rate: Optional[float] = None
    tier3_rate: Optional[float] = None
    average_citation_rank: Optional[float] = None
    average_response_time_ms: Optional[float] = None

    @property
    def tier1(self) -> bool:
        """Alias for is_accessible."""
        return self.is_accessible

    @property
    def tier2_count(self) -> int:
        return self.in_sources_count

    @property
    def tier3_count(self) -> int:
        return self.in_citations_count

    def to_dict(self) -> dict:
        """Export for display."""
        return {
            "accessible": self.is_accessible,
            "in_sources": self.in_sources_count,
            "in_citations": self.in_citations_count,
            "total_probes": self.total_probes,
            "tier2_rate": self.tier2_rate,
            "tier3_rate": self.tier3_rate,
            "average_citation_rank": self.average_citation_rank,
        }
