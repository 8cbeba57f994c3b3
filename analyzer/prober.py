"""
Answer prober - run probes through the web-search answer engine and
classify where the target URL shows up.
"""

import time

from config import Settings
from models import ProbeResult
from .citations import (
    extract_citations,
    extract_sources,
    is_target_in_citations,
    is_target_in_sources,
)
from .engine import AnswerEngine
from .prompts import control_question
from .retry import RetryPolicy


def retry_any(error: Exception) -> bool:
    """Every engine failure is worth another attempt until the bound."""
    return True


class AnswerProber:
    """
    Issues probes and builds ProbeResults.

    Has no persistence concerns: the caller decides what to do with each
    result (the orchestrator stores it and refreshes metrics).
    """

    def __init__(self, engine: AnswerEngine, settings: Settings = None, policy: RetryPolicy = None):
        self.engine = engine
        self.settings = settings or Settings()
        self.policy = policy or RetryPolicy(
            max_retries=self.settings.search_max_retries,
            base_delay=self.settings.retry_base_delay,
        )

    def _on_retry(self, label: str):
        def log(attempt: int, error: Exception) -> None:
            print(f"[probe] {label} attempt {attempt} failed: {error}; retrying")
        return log

    def probe(
        self,
        question: str,
        target_url: str,
        submission_id: str = "",
        probe_index: int = 0,
        attempt: int = 1,
    ) -> ProbeResult:
        """
        Ask one question and classify the target's presence.

        Latency covers the successful request only, from send to structured
        response. Raises the last engine error once retries are exhausted.
        """
        def ask():
            start = time.perf_counter()
            response = self.engine.search(question)
            return response, int((time.perf_counter() - start) * 1000)

        response, elapsed_ms = self.policy.run(
            ask, retryable=retry_any, on_retry=self._on_retry(f"Probe {probe_index + 1}")
        )

        citations = extract_citations(response.output)
        sources = extract_sources(response.output)
        found_in_citations, rank = is_target_in_citations(target_url, citations)
        found_in_sources = is_target_in_sources(target_url, sources)

        print(
            f"[probe] Probe {probe_index + 1}: sources={found_in_sources} "
            f"citations={found_in_citations} rank={rank} "
            f"({len(sources)} sources, {len(citations)} citations, {elapsed_ms}ms)"
        )

        return ProbeResult(
            submission_id=submission_id,
            probe_index=probe_index,
            attempt=attempt,
            question=question,
            answer_text=response.answer_text or None,
            found_in_sources=found_in_sources,
            found_in_citations=found_in_citations,
            citation_rank=rank,
            citations=citations,
            sources=sources,
            response_time_ms=elapsed_ms,
            engine=response.model,
        )

    def check_accessibility(self, target_url: str) -> bool:
        """
        Control probe (tier 1): can the engine reach the target at all?

        Only presence of the URL in sources or citations is inspected; the
        answer text is discarded. Engine failure counts as not accessible.
        """
        question = control_question(target_url)
        print(f"[probe] Control probe: {question}")

        try:
            response = self.policy.run(
                lambda: self.engine.search(question),
                retryable=retry_any,
                on_retry=self._on_retry("Control probe"),
            )
        except Exception as e:
            print(f"[probe] Control probe failed: {e}")
            return False

        sources = extract_sources(response.output)
        found_in_citations, _ = is_target_in_citations(target_url, extract_citations(response.output))
        found_in_sources = is_target_in_sources(target_url, sources)
        accessible = found_in_sources or found_in_citations

        print(
            f"[probe] Control probe result: {'PASS' if accessible else 'FAIL'} "
            f"(in_sources={found_in_sources}, in_citations={found_in_citations})"
        )
        return accessible
