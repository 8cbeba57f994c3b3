"""
Analysis Worker - drains pending submissions through the orchestrator.

One submission at a time, oldest first. Each job is independent; a job that
raises is recorded and the worker moves on to the next one. Failed
submissions are left for an explicit retry.
"""

from typing import Optional

from analyzer.orchestrator import JobOrchestrator
from models import SubmissionStatus
from repositories import Repository
from .base import BaseWorker


class AnalysisWorker(BaseWorker):
    """Background worker that processes pending submissions."""

    def __init__(
        self,
        repo: Repository,
        orchestrator: JobOrchestrator,
        interval: float = 5.0,
        max_jobs_per_run: Optional[int] = None,
    ):
        """
        Args:
            repo: Where pending submissions are read from
            orchestrator: Runs each job
            interval: Seconds between polls
            max_jobs_per_run: Cap per poll cycle (None = drain the queue)
        """
        super().__init__(name="ANALYSIS-WORKER", interval=interval)
        self.repo = repo
        self.orchestrator = orchestrator
        self.max_jobs_per_run = max_jobs_per_run

    def _do_work(self) -> int:
        pending = self.repo.submissions.list_by_status(SubmissionStatus.PENDING)
        if self.max_jobs_per_run is not None:
            pending = pending[: self.max_jobs_per_run]

        processed = 0
        for submission in pending:
            if self.stopping:
                break

            self.stats.last_submission = submission.id
            self.notify("job_started", {"submission_id": submission.id, "url": submission.url})
            try:
                result = self.orchestrator.execute(submission.id, submission.url)
            except Exception as e:
                self.stats.items_failed += 1
                print(f"[{self.name}] Job {submission.id} raised: {e}")
                self.notify("job_failed", {"submission_id": submission.id, "error": str(e)})
                continue

            processed += 1
            if result.status == SubmissionStatus.FAILED:
                self.stats.items_failed += 1
            self.notify("job_finished", {
                "submission_id": submission.id,
                "status": result.status.value,
                "metrics": result.metrics.to_dict() if result.metrics else None,
            })

        return processed
