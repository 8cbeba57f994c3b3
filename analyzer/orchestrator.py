"""
Job orchestrator - drives one submission from pending to a terminal status.

Phases run strictly in order:

    fetch + extract  ->  generate probes  ->  control probe  ->  probes  ->  aggregate

Failure policy:
- fetch/extract: fatal, submission ends `failed` with the error message
- generation: recoverable, a single fallback probe is substituted
- control probe negative or failed: probing is skipped, submission still completes
- a single probe: recoverable, logged and skipped
- anything else: recorded as the failure reason and re-raised to the caller
"""

import time
from dataclasses import dataclass, field
from typing import Callable, Optional

from config import Settings
from models import (
    Metrics,
    Phase,
    Probe,
    ProbeResult,
    Submission,
    SubmissionStatus,
)
from repositories import Repository
from .errors import AnalysisError, SubmissionNotFound, describe
from .fetcher import Fetcher
from .generator import ProbeGenerator, fallback_probes
from .metrics import aggregate
from .prober import AnswerProber

ResultCallback = Callable[[str, ProbeResult, Metrics], None]


@dataclass
class RunState:
    """Mutable state for one processing run of a submission."""
    submission_id: str
    url: str
    attempt: int
    title: str = ""
    content: str = ""
    probes: list[Probe] = field(default_factory=list)
    accessible: bool = False
    results: list[ProbeResult] = field(default_factory=list)
    skipped: int = 0

    def snapshot(self) -> Metrics:
        return aggregate(self.results, is_accessible=self.accessible, total_probes=len(self.probes))


class JobOrchestrator:
    """
    Sequences the pipeline for one submission at a time.

    Collaborators are passed in; the orchestrator owns the submission record
    while it runs and writes progress after every step so pollers see it grow.
    """

    def __init__(
        self,
        repo: Repository,
        fetcher: Fetcher,
        generator: ProbeGenerator,
        prober: AnswerProber,
        settings: Settings = None,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.repo = repo
        self.fetcher = fetcher
        self.generator = generator
        self.prober = prober
        self.settings = settings or Settings()
        self.sleep = sleep
        self._callbacks: list[ResultCallback] = []

    # === Result events ===

    def add_callback(self, callback: ResultCallback) -> None:
        """Register a listener called after each probe result is stored."""
        self._callbacks.append(callback)

    def remove_callback(self, callback: ResultCallback) -> None:
        if callback in self._callbacks:
            self._callbacks.remove(callback)

    def _on_result(self, run: RunState, result: ProbeResult) -> None:
        """Persist a result, refresh the metrics snapshot, then tell listeners."""
        run.results.append(result)
        self.repo.results.append(run.submission_id, result)
        metrics = run.snapshot()
        self.repo.submissions.update_metrics(run.submission_id, metrics)

        for cb in self._callbacks:
            try:
                cb(run.submission_id, result, metrics)
            except Exception as e:
                print(f"[orchestrator] Callback error: {e}")

    # === Entry point ===

    def execute(self, submission_id: str, url: str = None) -> Submission:
        """
        Process a submission to a terminal status and return it.

        Returns normally for handled outcomes, including a fatal fetch failure.
        Raises whatever escaped the phases after recording it as the failure
        reason, so a redelivery mechanism can decide whether to retry.
        """
        submission = self.repo.submissions.get(submission_id)
        if submission is None:
            raise SubmissionNotFound(submission_id)

        url = url or submission.url
        start = time.perf_counter()
        print(f"[orchestrator] Starting submission {submission_id}: {url}")

        try:
            submission = self.repo.submissions.start_run(submission_id)
            run = RunState(submission_id=submission_id, url=url, attempt=submission.attempts)

            if not self._fetch_phase(run):
                return self.repo.submissions.get(submission_id)

            self._generate_phase(run)

            if self._control_phase(run):
                self._probe_phase(run)
            else:
                print(f"[orchestrator] Target not accessible, skipping {len(run.probes)} probes")

            metrics = self._aggregate_phase(run)
            submission = self.repo.submissions.update_status(submission_id, SubmissionStatus.COMPLETED)

            elapsed = time.perf_counter() - start
            print(
                f"[orchestrator] Completed {submission_id} in {elapsed:.1f}s: "
                f"accessible={metrics.is_accessible} sources={metrics.in_sources_count}/{metrics.total_probes} "
                f"citations={metrics.in_citations_count}/{metrics.total_probes}"
            )
            return submission

        except Exception as e:
            print(f"[orchestrator] Submission {submission_id} failed: {e!r}")
            self._mark_failed(submission_id, e)
            raise

    def _mark_failed(self, submission_id: str, error: Exception) -> Optional[Submission]:
        """Best-effort failure write; the original error is what propagates."""
        try:
            return self.repo.submissions.update_status(submission_id, SubmissionStatus.FAILED, describe(error))
        except Exception as write_error:
            print(f"[orchestrator] Could not record failure for {submission_id}: {write_error}")
            return None

    # === Phases ===

    def _fetch_phase(self, run: RunState) -> bool:
        """Scrape the article. False means the submission is already marked failed."""
        self.repo.submissions.update_phase(run.submission_id, Phase.FETCHING)
        print(f"[orchestrator] Phase 1: fetching {run.url}")

        try:
            article = self.fetcher.scrape(run.url)
        except AnalysisError as e:
            print(f"[orchestrator] Fetch failed ({e.kind.value}, {self.fetcher.attempts} attempts): {e}")
            self.repo.submissions.update_status(run.submission_id, SubmissionStatus.FAILED, e.message)
            return False

        run.title = article.title
        run.content = article.content
        self.repo.submissions.update_extracted_content(
            run.submission_id,
            article.title,
            article.content[: self.settings.max_stored_content],
            article.word_count,
        )
        print(f"[orchestrator] Scraped: {article.title[:60]} ({article.word_count} words)")
        return True

    def _generate_phase(self, run: RunState) -> None:
        self.repo.submissions.update_phase(run.submission_id, Phase.GENERATING)
        print("[orchestrator] Phase 2: generating probes")

        try:
            result = self.generator.generate(run.title, run.content, self.settings.probe_count)
            run.probes = result.probes
        except AnalysisError as e:
            print(f"[orchestrator] Probe generation failed ({e.kind.value}): {e}; using fallback probe")
            run.probes = fallback_probes(run.title)

        self.repo.submissions.update_probes(run.submission_id, run.probes)

    def _control_phase(self, run: RunState) -> bool:
        self.repo.submissions.update_phase(run.submission_id, Phase.CONTROL)
        print("[orchestrator] Phase 3: control probe")

        run.accessible = self.prober.check_accessibility(run.url)
        self.repo.submissions.update_metrics(run.submission_id, run.snapshot())
        return run.accessible

    def _probe_phase(self, run: RunState) -> None:
        self.repo.submissions.update_phase(run.submission_id, Phase.PROBING)
        total = len(run.probes)
        print(f"[orchestrator] Phase 4: running {total} probes")

        for i, probe in enumerate(run.probes):
            if i > 0 and self.settings.inter_probe_delay > 0:
                self.sleep(self.settings.inter_probe_delay)

            try:
                result = self.prober.probe(
                    probe.question,
                    run.url,
                    submission_id=run.submission_id,
                    probe_index=i,
                    attempt=run.attempt,
                )
            except Exception as e:
                run.skipped += 1
                print(f"[orchestrator] Probe {i + 1}/{total} skipped after retries: {e}")
                continue

            self._on_result(run, result)

        if run.skipped:
            print(f"[orchestrator] {run.skipped}/{total} probes skipped")

    def _aggregate_phase(self, run: RunState) -> Metrics:
        self.repo.submissions.update_phase(run.submission_id, Phase.AGGREGATING)
        metrics = run.snapshot()
        self.repo.submissions.update_metrics(run.submission_id, metrics)
        return metrics


def build_orchestrator(repo: Repository, client, settings: Settings = None) -> JobOrchestrator:
    """Wire the production pipeline around one OpenAI client."""
    from .engine import AnswerEngine

    settings = settings or Settings()
    engine = AnswerEngine(client, settings)
    return JobOrchestrator(
        repo=repo,
        fetcher=Fetcher(settings),
        generator=ProbeGenerator(engine, settings),
        prober=AnswerProber(engine, settings),
        settings=settings,
    )
