"""Unit tests for AnalysisWorker."""

import pytest
from unittest.mock import MagicMock

from models import Metrics, Submission, SubmissionStatus
from workers import AnalysisWorker


def pending(*urls):
    return [Submission(url=u) for u in urls]


def finished(submission, status=SubmissionStatus.COMPLETED):
    return submission.model_copy(update={"status": status, "metrics": Metrics(total_probes=5)})


@pytest.fixture
def repo():
    return MagicMock()


@pytest.fixture
def orchestrator():
    return MagicMock()


class TestAnalysisWorker:

    def test_name(self, repo, orchestrator):
        assert AnalysisWorker(repo, orchestrator).name == "ANALYSIS-WORKER"

    def test_processes_pending_in_order(self, repo, orchestrator):
        queue = pending("https://a.com/1", "https://a.com/2")
        repo.submissions.list_by_status.return_value = queue
        orchestrator.execute.side_effect = [finished(s) for s in queue]
        worker = AnalysisWorker(repo, orchestrator)

        processed = worker.run_once()

        assert processed == 2
        repo.submissions.list_by_status.assert_called_once_with(SubmissionStatus.PENDING)
        assert [c.args for c in orchestrator.execute.call_args_list] == [(s.id, s.url) for s in queue]
        assert worker.stats.items_processed == 2
        assert worker.stats.last_submission == queue[-1].id

    def test_nothing_pending(self, repo, orchestrator):
        repo.submissions.list_by_status.return_value = []
        worker = AnalysisWorker(repo, orchestrator)

        assert worker.run_once() == 0
        orchestrator.execute.assert_not_called()
        assert worker.stats.successes == 1

    def test_max_jobs_per_run(self, repo, orchestrator):
        queue = pending("https://a.com/1", "https://a.com/2", "https://a.com/3")
        repo.submissions.list_by_status.return_value = queue
        orchestrator.execute.side_effect = lambda sid, url: finished(next(s for s in queue if s.id == sid))
        worker = AnalysisWorker(repo, orchestrator, max_jobs_per_run=1)

        assert worker.run_once() == 1
        assert orchestrator.execute.call_count == 1

    def test_raising_job_does_not_stop_queue(self, repo, orchestrator):
        queue = pending("https://a.com/1", "https://a.com/2")
        repo.submissions.list_by_status.return_value = queue
        orchestrator.execute.side_effect = [RuntimeError("engine down"), finished(queue[1])]
        worker = AnalysisWorker(repo, orchestrator)
        events = []
        worker.add_callback(lambda event, data: events.append(event))

        processed = worker.run_once()

        assert processed == 1
        assert worker.stats.items_failed == 1
        assert worker.stats.errors == 0
        assert events == ["job_started", "job_failed", "job_started", "job_finished"]

    def test_failed_submission_counted(self, repo, orchestrator):
        queue = pending("https://a.com/404")
        repo.submissions.list_by_status.return_value = queue
        orchestrator.execute.return_value = finished(queue[0], SubmissionStatus.FAILED)
        worker = AnalysisWorker(repo, orchestrator)
        payloads = []
        worker.add_callback(lambda event, data: payloads.append(data))

        worker.run_once()

        assert worker.stats.items_failed == 1
        assert payloads[-1]["status"] == "failed"
        assert payloads[-1]["metrics"]["total_probes"] == 5

    def test_repository_error_recorded(self, repo, orchestrator):
        repo.submissions.list_by_status.side_effect = OSError("disk gone")
        worker = AnalysisWorker(repo, orchestrator)

        assert worker.run_once() == 0
        assert worker.stats.errors == 1
        assert worker.stats.last_error_message == "disk gone"
