"""
Repository Contract Tests.

Any repository implementation MUST pass these tests.
This ensures backends are interchangeable.

To add a new backend:
1. Implement the Repository interface
2. Add a test class that inherits RepositoryContractTests
3. Provide a `repo` fixture that returns your implementation
"""

import time
import typing

import pytest
from abc import ABC

from models import (
    InvalidTransition,
    Metrics,
    Phase,
    Probe,
    ProbeResult,
    Submission,
    SubmissionStatus,
)
from repositories.json_backend import JsonSubmissionRepository


class RepositoryContractTests(ABC):
    """
    Contract tests that any repository must pass.

    Subclass this and provide a `repo` fixture.
    """

    # === Submission Repository ===

    def test_create_and_load(self, repo):
        created = repo.submissions.create("https://site.com/article")

        loaded = repo.submissions.get(created.id)

        assert loaded is not None
        assert loaded.url == "https://site.com/article"
        assert loaded.status == SubmissionStatus.PENDING

    def test_load_nonexistent_returns_none(self, repo):
        assert repo.submissions.get("does-not-exist") is None

    def test_exists(self, repo):
        assert not repo.submissions.exists("nope")
        s = repo.submissions.create("https://a.com")
        assert repo.submissions.exists(s.id)

    def test_delete(self, repo):
        s = repo.submissions.create("https://a.com")
        repo.results.append(s.id, ProbeResult(question="Q"))

        assert repo.submissions.delete(s.id) is True
        assert repo.submissions.get(s.id) is None
        assert repo.results.count(s.id) == 0
        assert repo.submissions.delete(s.id) is False

    def test_list_empty(self, repo):
        assert repo.submissions.list() == []
        assert repo.submissions.list_recent() == []

    def test_list_recent_newest_first(self, repo):
        ids = []
        for i in range(3):
            ids.append(repo.submissions.create(f"https://a.com/{i}").id)
            time.sleep(0.01)

        recent = repo.submissions.list_recent(limit=2)

        assert [s.id for s in recent] == [ids[2], ids[1]]

    def test_list_by_status_oldest_first(self, repo):
        first = repo.submissions.create("https://a.com/1")
        time.sleep(0.01)
        second = repo.submissions.create("https://a.com/2")
        repo.submissions.update_status(first.id, SubmissionStatus.PROCESSING)

        pending = repo.submissions.list_by_status(SubmissionStatus.PENDING)
        processing = repo.submissions.list_by_status(SubmissionStatus.PROCESSING)

        assert [s.id for s in pending] == [second.id]
        assert [s.id for s in processing] == [first.id]

    def test_update_status_lifecycle(self, repo):
        s = repo.submissions.create("https://a.com")

        repo.submissions.update_status(s.id, SubmissionStatus.PROCESSING)
        done = repo.submissions.update_status(s.id, SubmissionStatus.COMPLETED)

        loaded = repo.submissions.get(s.id)
        assert done.status == SubmissionStatus.COMPLETED
        assert loaded.completed_at is not None
        assert loaded.attempts == 1

    def test_update_status_twice_is_harmless(self, repo):
        s = repo.submissions.create("https://a.com")
        repo.submissions.update_status(s.id, SubmissionStatus.PROCESSING)
        repo.submissions.update_status(s.id, SubmissionStatus.FAILED, "boom")

        again = repo.submissions.update_status(s.id, SubmissionStatus.FAILED, "boom")

        assert again.status == SubmissionStatus.FAILED
        assert again.error_message == "boom"

    def test_start_run_opens_new_index_when_already_processing(self, repo):
        s = repo.submissions.create("https://a.com")
        repo.submissions.start_run(s.id)
        repo.submissions.update_phase(s.id, Phase.PROBING)

        restarted = repo.submissions.start_run(s.id)

        assert restarted.status == SubmissionStatus.PROCESSING
        assert restarted.attempts == 2
        assert repo.submissions.get(s.id).phase == Phase.QUEUED

    def test_forbidden_transition_raises(self, repo):
        s = repo.submissions.create("https://a.com")
        with pytest.raises(InvalidTransition):
            repo.submissions.update_status(s.id, SubmissionStatus.COMPLETED)
        assert repo.submissions.get(s.id).status == SubmissionStatus.PENDING

    def test_update_unknown_raises(self, repo):
        with pytest.raises(KeyError):
            repo.submissions.update_status("missing", SubmissionStatus.PROCESSING)

    def test_update_fields(self, repo):
        s = repo.submissions.create("https://a.com")

        repo.submissions.update_phase(s.id, Phase.PROBING)
        repo.submissions.update_extracted_content(s.id, "Title", "Body text", word_count=2)
        repo.submissions.update_probes(s.id, [Probe(question="Q1?"), Probe(question="Q2?", category="action")])
        repo.submissions.update_metrics(s.id, Metrics(is_accessible=True, total_probes=2, tier2_rate=50.0))

        loaded = repo.submissions.get(s.id)
        assert loaded.phase == Phase.PROBING
        assert loaded.article_title == "Title"
        assert loaded.article_content == "Body text"
        assert loaded.word_count == 2
        assert [p.question for p in loaded.probes] == ["Q1?", "Q2?"]
        assert loaded.metrics.tier2_rate == 50.0

    # === Results Repository ===

    def test_results_append_only_in_order(self, repo):
        s = repo.submissions.create("https://a.com")
        for i in range(3):
            repo.results.append(s.id, ProbeResult(submission_id=s.id, probe_index=i, question=f"Q{i}"))

        results = repo.results.list_for_submission(s.id)

        assert [r.probe_index for r in results] == [0, 1, 2]
        assert repo.results.count(s.id) == 3

    def test_results_filtered_by_attempt(self, repo):
        s = repo.submissions.create("https://a.com")
        repo.results.append(s.id, ProbeResult(question="old", attempt=1))
        repo.results.append(s.id, ProbeResult(question="new", attempt=2))

        assert [r.question for r in repo.results.list_for_submission(s.id, attempt=2)] == ["new"]
        assert len(repo.results.list_for_submission(s.id)) == 2

    def test_results_empty(self, repo):
        assert repo.results.list_for_submission("nope") == []
        assert repo.results.count("nope") == 0


class TestJsonBackendContract(RepositoryContractTests):
    """Test JSON backend passes contract."""

    @pytest.fixture
    def repo(self, submissions_dir):
        """Provide JSON repository with temp directory."""
        from repositories.json_backend import JsonRepository
        return JsonRepository(base_path=submissions_dir)


class TestJsonBackendFiles:
    """JSON-specific layout and corruption handling."""

    @pytest.fixture
    def repo(self, submissions_dir):
        from repositories.json_backend import JsonRepository
        return JsonRepository(base_path=submissions_dir)

    def test_layout(self, repo, submissions_dir):
        s = repo.submissions.create("https://a.com")
        repo.results.append(s.id, ProbeResult(question="Q"))

        assert (submissions_dir / s.id / "submission.json").exists()
        assert (submissions_dir / s.id / "results.jsonl").exists()
        assert not (submissions_dir / s.id / "submission.json.tmp").exists()

    def test_corrupt_result_line_skipped(self, repo, submissions_dir, capsys):
        s = repo.submissions.create("https://a.com")
        repo.results.append(s.id, ProbeResult(question="good"))
        with open(submissions_dir / s.id / "results.jsonl", "a") as f:
            f.write("{broken\n")
        repo.results.append(s.id, ProbeResult(question="also good"))

        results = repo.results.list_for_submission(s.id)

        assert [r.question for r in results] == ["good", "also good"]
        assert "[WARN]" in capsys.readouterr().out

    def test_corrupt_submission_reads_as_missing(self, repo, submissions_dir):
        s = repo.submissions.create("https://a.com")
        (submissions_dir / s.id / "submission.json").write_text("{")

        assert repo.submissions.get(s.id) is None

    def test_annotations_resolve_to_builtins(self):
        hints = typing.get_type_hints(JsonSubmissionRepository.update_probes)
        assert hints["probes"] == list[Probe]
        assert typing.get_type_hints(JsonSubmissionRepository.list_by_status)["return"] == list[Submission]
