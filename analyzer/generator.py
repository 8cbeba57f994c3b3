"""
Probe generation - turn an article into FAQ-style probe questions.

Malformed or schema-violating output fails fast (GENERATION_INVALID).
Engine/transport errors retry with linear backoff. Callers that cannot
afford to stop substitute fallback_probes().
"""

import json
import re
import time
from dataclasses import dataclass, field
from typing import Any

from pydantic import BaseModel

from config import Settings
from models import Probe, ProbeCategory
from .engine import AnswerEngine
from .errors import AnalysisError, ErrorKind
from .prompts import (
    PROBE_GENERATION_SYSTEM_PROMPT,
    QUESTION_LENGTH,
    ANSWER_LENGTH,
    build_probe_prompt,
    fallback_question,
)
from .retry import RetryPolicy

# Keys models have been seen to wrap the array in
LIST_KEYS = ("faqs", "questions", "probes", "result")
VALID_CATEGORIES = {c.value for c in ProbeCategory}
MIN_DISTINCT_CATEGORIES = 4

_DIGIT = re.compile(r"\d")


class GenerationReport(BaseModel):
    """Soft quality checks. Logged, never fatal."""
    requested: int
    returned: int
    has_strategic_distribution: bool = False
    all_questions_in_range: bool = False
    all_answers_in_range: bool = False
    has_numbers: bool = False
    numbers_grounded: bool = False


@dataclass
class GenerationResult:
    probes: list[Probe]
    report: GenerationReport
    model: str = ""
    generation_time_ms: int = 0
    warnings: list[str] = field(default_factory=list)


def _invalid(message: str, **context) -> AnalysisError:
    return AnalysisError(ErrorKind.GENERATION_INVALID, message, context=context)


def fallback_probes(title: str) -> list[Probe]:
    """The single deterministic probe used when generation fails."""
    return [Probe(question=fallback_question(title or "Untitled"), category=ProbeCategory.WHAT_IS)]


def parse_items(raw: str) -> list[Any]:
    """Decode model output into the list of raw FAQ items."""
    try:
        data = json.loads(raw)
    except (json.JSONDecodeError, TypeError) as e:
        raise _invalid(f"Malformed JSON from generation model: {e}")

    if isinstance(data, list):
        return data
    if isinstance(data, dict):
        for key in LIST_KEYS:
            if isinstance(data.get(key), list):
                return data[key]
        raise _invalid("Invalid response format: no FAQ array found", keys=sorted(data.keys()))
    raise _invalid(f"Invalid response format: expected array or object, got {type(data).__name__}")


def to_probe(item: Any, index: int) -> Probe:
    """Validate one raw item. Schema violations raise GENERATION_INVALID."""
    if not isinstance(item, dict):
        raise _invalid(f"Probe {index + 1} is not an object")

    question = item.get("question")
    if not isinstance(question, str) or not question.strip():
        raise _invalid(f"Probe {index + 1} is missing question text")

    answer = item.get("answer")
    if answer is not None and not isinstance(answer, str):
        raise _invalid(f"Probe {index + 1} has a non-text answer")

    category = item.get("category")
    if not isinstance(category, str) or category not in VALID_CATEGORIES:
        raise _invalid(f"Probe {index + 1} has invalid category: {category!r}")

    numbers = item.get("numbers") or []
    if not isinstance(numbers, list):
        numbers = [numbers]

    return Probe(
        question=question,
        answer=answer or None,
        category=ProbeCategory(category),
        numbers=[str(n).strip() for n in numbers if str(n).strip()],
    )


def _in_range(text: str, bounds: tuple[int, int]) -> bool:
    return bounds[0] <= len(text) <= bounds[1]


def build_report(probes: list[Probe], requested: int, content: str) -> tuple[GenerationReport, list[str]]:
    warnings = []

    questions_ok = all(_in_range(p.question, QUESTION_LENGTH) for p in probes)
    answers_ok = all(p.answer is not None and _in_range(p.answer, ANSWER_LENGTH) for p in probes)
    if not questions_ok:
        for i, p in enumerate(probes, 1):
            if not _in_range(p.question, QUESTION_LENGTH):
                warnings.append(f"Question {i} length out of range ({len(p.question)} chars)")
    if not answers_ok:
        for i, p in enumerate(probes, 1):
            if p.answer is None or not _in_range(p.answer, ANSWER_LENGTH):
                warnings.append(f"Answer {i} length out of range ({len(p.answer or '')} chars)")

    has_numbers = any(p.has_numbers for p in probes)
    grounded = any(n in content for p in probes for n in p.numbers)
    if _DIGIT.search(content) and not grounded:
        warnings.append("No probe references a number from the article")

    distinct = len({p.category for p in probes})
    distribution_ok = distinct >= min(MIN_DISTINCT_CATEGORIES, requested)
    if not distribution_ok:
        warnings.append(f"Only {distinct} distinct categories")

    if len(probes) < requested:
        warnings.append(f"Requested {requested} probes, got {len(probes)}")

    report = GenerationReport(
        requested=requested,
        returned=len(probes),
        has_strategic_distribution=distribution_ok,
        all_questions_in_range=questions_ok,
        all_answers_in_range=answers_ok,
        has_numbers=has_numbers,
        numbers_grounded=grounded,
    )
    return report, warnings


class ProbeGenerator:
    """Generates probes for an article through the answer engine."""

    def __init__(self, engine: AnswerEngine, settings: Settings = None, policy: RetryPolicy = None):
        self.engine = engine
        self.settings = settings or Settings()
        self.policy = policy or RetryPolicy(
            max_retries=self.settings.generation_max_retries,
            base_delay=self.settings.retry_base_delay,
        )

    def _attempt(self, title: str, content: str, count: int) -> list[Probe]:
        prompt = build_probe_prompt(title, content, count, self.settings.max_prompt_content)
        raw = self.engine.generate(PROBE_GENERATION_SYSTEM_PROMPT, prompt)

        items = parse_items(raw)
        if not items:
            raise _invalid("No probes generated")
        if len(items) > count:
            print(f"[generate] Model returned {len(items)} probes, keeping first {count}")
            items = items[:count]

        return [to_probe(item, i) for i, item in enumerate(items)]

    def generate(self, title: str, content: str, count: int = None) -> GenerationResult:
        """
        Generate up to `count` probes (default from settings).

        Raises AnalysisError: GENERATION_INVALID immediately, TRANSIENT after
        retries are exhausted.
        """
        count = count or self.settings.probe_count
        start = time.perf_counter()
        print(f"[generate] Generating {count} probes for: {title[:60]}")

        def on_retry(attempt: int, error: Exception) -> None:
            print(f"[generate] Attempt {attempt} failed: {error}; retrying")

        probes = self.policy.run(lambda: self._attempt(title, content, count), on_retry=on_retry)

        report, warnings = build_report(probes, count, content)
        for w in warnings:
            print(f"[generate] WARNING: {w}")

        elapsed_ms = int((time.perf_counter() - start) * 1000)
        print(f"[generate] Generated {len(probes)} probes in {elapsed_ms}ms")

        return GenerationResult(
            probes=probes,
            report=report,
            model=self.settings.generation_model,
            generation_time_ms=elapsed_ms,
            warnings=warnings,
        )
