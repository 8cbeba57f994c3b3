"""
JSON file backend - stores data as JSON/JSONL files.

Directory structure:
    submissions/{id}/
        submission.json   - Submission record (status, content, probes, metrics)
        results.jsonl     - Probe results (append-only)
"""

from __future__ import annotations

import json
import shutil
import threading
from pathlib import Path
from typing import Callable, Optional, Iterator

from config import SUBMISSIONS_DIR
from models import (
    Submission,
    SubmissionStatus,
    Phase,
    Probe,
    ProbeResult,
    Metrics,
)
from .base import (
    Repository,
    SubmissionRepository,
    ResultsRepository,
)


class WriteQueue:
    """Thread-safe write serialization."""

    def __init__(self):
        self._lock = threading.Lock()

    def write_json(self, path: Path, data: dict) -> None:
        """Atomic JSON write."""
        with self._lock:
            temp = path.with_suffix(".json.tmp")
            with open(temp, "w") as f:
                json.dump(data, f, indent=2, default=str)
            temp.replace(path)

    def append_jsonl(self, path: Path, data: dict) -> None:
        """Append to JSONL file."""
        with self._lock:
            with open(path, "a") as f:
                f.write(json.dumps(data, default=str) + "\n")


_write_queue = WriteQueue()


class JsonSubmissionRepository(SubmissionRepository):
    """JSON file implementation of submission repository."""

    def __init__(self, base_path: Path = None):
        self._base_path = base_path or SUBMISSIONS_DIR
        # Serializes read-modify-write cycles on submission.json
        self._update_lock = threading.RLock()

    def _submission_dir(self, id: str) -> Path:
        return self._base_path / id

    def _submission_file(self, id: str) -> Path:
        return self._submission_dir(id) / "submission.json"

    def get(self, id: str) -> Optional[Submission]:
        path = self._submission_file(id)
        if not path.exists():
            return None

        try:
            with open(path) as f:
                data = json.load(f)
        except json.JSONDecodeError as e:
            print(f"[WARN] Corrupt submission.json for {id}: {e}")
            return None

        return Submission.model_validate(data)

    def save(self, entity: Submission) -> None:
        submission_dir = self._submission_dir(entity.id)
        submission_dir.mkdir(parents=True, exist_ok=True)

        entity.touch()
        data = entity.model_dump(mode="json")

        _write_queue.write_json(self._submission_file(entity.id), data)

    def delete(self, id: str) -> bool:
        submission_dir = self._submission_dir(id)
        if not submission_dir.exists():
            return False
        shutil.rmtree(submission_dir)
        return True

    def list(self) -> list[Submission]:
        if not self._base_path.exists():
            return []

        submissions = []
        for d in self._base_path.iterdir():
            if d.is_dir():
                submission = self.get(d.name)
                if submission:
                    submissions.append(submission)

        return sorted(submissions, key=lambda s: s.created_at, reverse=True)

    def exists(self, id: str) -> bool:
        return self._submission_file(id).exists()

    # Extended methods

    def _mutate(self, id: str, change: Callable[[Submission], None]) -> Submission:
        """Load, apply a change, and write back under the update lock."""
        with self._update_lock:
            submission = self.get(id)
            if submission is None:
                raise KeyError(f"Unknown submission: {id}")
            change(submission)
            self.save(submission)
            return submission

    def create(self, url: str) -> Submission:
        submission = Submission(url=url)
        self.save(submission)
        return submission

    def update_status(self, id: str, status: SubmissionStatus, error_message: str = None) -> Submission:
        return self._mutate(id, lambda s: s.transition(status, error_message))

    def start_run(self, id: str) -> Submission:
        return self._mutate(id, lambda s: s.begin_run())

    def update_phase(self, id: str, phase: Phase) -> None:
        def change(s: Submission) -> None:
            s.phase = phase
        self._mutate(id, change)

    def update_extracted_content(self, id: str, title: str, content: str, word_count: int = 0) -> None:
        def change(s: Submission) -> None:
            s.article_title = title
            s.article_content = content
            s.word_count = word_count
        self._mutate(id, change)

    def update_probes(self, id: str, probes: list[Probe]) -> None:
        def change(s: Submission) -> None:
            s.probes = list(probes)
        self._mutate(id, change)

    def update_metrics(self, id: str, metrics: Metrics) -> None:
        def change(s: Submission) -> None:
            s.metrics = metrics
        self._mutate(id, change)

    def list_recent(self, limit: int = 10) -> list[Submission]:
        return self.list()[:limit]

    def list_by_status(self, status: SubmissionStatus) -> list[Submission]:
        matching = [s for s in self.list() if s.status == status]
        return sorted(matching, key=lambda s: s.created_at)


class JsonResultsRepository(ResultsRepository):
    """JSON file implementation of probe result repository."""

    def __init__(self, base_path: Path = None):
        self._base_path = base_path or SUBMISSIONS_DIR

    def _results_file(self, submission_id: str) -> Path:
        return self._base_path / submission_id / "results.jsonl"

    def append(self, submission_id: str, result: ProbeResult) -> None:
        path = self._results_file(submission_id)
        path.parent.mkdir(parents=True, exist_ok=True)
        _write_queue.append_jsonl(path, result.model_dump(mode="json"))

    def list_for_submission(self, submission_id: str, attempt: int = None) -> list[ProbeResult]:
        results = self.iterate(submission_id)
        if attempt is None:
            return list(results)
        return [r for r in results if r.attempt == attempt]

    def count(self, submission_id: str) -> int:
        path = self._results_file(submission_id)
        if not path.exists():
            return 0

        count = 0
        with open(path) as f:
            for line in f:
                if line.strip():
                    count += 1
        return count

    def iterate(self, submission_id: str) -> Iterator[ProbeResult]:
        path = self._results_file(submission_id)
        if not path.exists():
            return

        with open(path) as f:
            for line_num, line in enumerate(f, 1):
                line = line.strip()
                if not line:
                    continue
                try:
                    yield ProbeResult.model_validate(json.loads(line))
                except ValueError as e:
                    print(f"[WARN] Corrupt line {line_num} in {submission_id}/results.jsonl: {e}")


class JsonRepository(Repository):
    """JSON file backend implementation."""

    def __init__(self, base_path: Path = None):
        self._base_path = base_path or SUBMISSIONS_DIR
        self._submissions = JsonSubmissionRepository(self._base_path)
        self._results = JsonResultsRepository(self._base_path)

    @property
    def submissions(self) -> SubmissionRepository:
        return self._submissions

    @property
    def results(self) -> ResultsRepository:
        return self._results
