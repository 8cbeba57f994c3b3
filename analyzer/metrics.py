"""
Metrics aggregation - reduce probe results to tier counts and rates.
"""

from typing import Optional, Sequence

from models import Metrics, ProbeResult


def rate(count: int, total: int) -> Optional[float]:
    """Percentage with one decimal place; None (not 0) when total is zero."""
    if total <= 0:
        return None
    return round(count / total * 100, 1)


def _mean(values: Sequence[float]) -> Optional[float]:
    if not values:
        return None
    return sum(values) / len(values)


def aggregate(
    results: Sequence[ProbeResult],
    is_accessible: bool = True,
    total_probes: int = None,
) -> Metrics:
    """
    Pure reduction over one run's results.

    Args:
        results: Probe results of the run
        is_accessible: Outcome of the control probe
        total_probes: Probes planned for the run; defaults to len(results).
            Skipped or failed probes still count toward the denominator.
    """
    total = len(results) if total_probes is None else max(total_probes, len(results))

    in_sources = sum(1 for r in results if r.found_in_sources)
    in_citations = sum(1 for r in results if r.found_in_citations)

    ranks = [r.citation_rank for r in results if r.found_in_citations and r.citation_rank is not None]
    latencies = [r.response_time_ms for r in results]

    avg_rank = _mean(ranks)
    avg_latency = _mean(latencies)

    return Metrics(
        is_accessible=is_accessible,
        in_sources_count=in_sources,
        in_citations_count=in_citations,
        total_probes=total,
        tier2_rate=rate(in_sources, total),
        tier3_rate=rate(in_citations, total),
        average_citation_rank=round(avg_rank, 2) if avg_rank is not None else None,
        average_response_time_ms=round(avg_latency, 1) if avg_latency is not None else None,
    )
