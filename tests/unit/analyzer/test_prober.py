"""Unit tests for the answer prober."""

import pytest

from analyzer.errors import AnalysisError, transient
from analyzer.prober import AnswerProber
from fakes import TARGET_URL, FakeEngine, search_response


@pytest.fixture
def make_prober(fast_settings, no_sleep_policy):
    def make(replies):
        engine = FakeEngine(search_replies=replies)
        policy = no_sleep_policy(max_retries=2, base_delay=1.0)
        return AnswerProber(engine, fast_settings, policy=policy), engine, policy
    return make


class TestProbe:

    def test_found_in_sources_and_citations(self, make_prober):
        reply = search_response(
            sources=["https://other.com/a", "https://site.com/article/"],
            citations=["https://other.com/a", "https://www.site.com/article"],
        )
        prober, engine, policy = make_prober([reply])

        result = prober.probe("What are solar panels?", TARGET_URL, submission_id="sub1", probe_index=2, attempt=3)

        assert result.found_in_sources is True
        assert result.found_in_citations is True
        assert result.citation_rank == 2
        assert result.submission_id == "sub1"
        assert result.probe_index == 2
        assert result.attempt == 3
        assert result.engine == "test-engine"
        assert result.answer_text == "Answer text."
        assert len(result.sources) == 2
        assert [c.rank for c in result.citations] == [1, 2]
        assert isinstance(result.response_time_ms, int)
        assert result.response_time_ms >= 0
        assert engine.search_calls == ["What are solar panels?"]

    def test_in_sources_only(self, make_prober):
        prober, engine, policy = make_prober([search_response(sources=[TARGET_URL], citations=["https://x.com"])])

        result = prober.probe("Q?", TARGET_URL)

        assert result.found_in_sources is True
        assert result.found_in_citations is False
        assert result.citation_rank is None

    def test_not_found(self, make_prober):
        prober, engine, policy = make_prober([search_response(sources=["https://x.com"])])

        result = prober.probe("Q?", TARGET_URL)

        assert not result.target_found

    def test_empty_answer_text_stored_as_none(self, make_prober):
        prober, engine, policy = make_prober([search_response(text="")])
        assert prober.probe("Q?", TARGET_URL).answer_text is None

    def test_retries_any_error(self, make_prober):
        replies = [transient("timeout"), RuntimeError("sdk"), search_response(sources=[TARGET_URL])]
        prober, engine, policy = make_prober(replies)

        result = prober.probe("Q?", TARGET_URL)

        assert result.found_in_sources
        assert len(engine.search_calls) == 3
        assert policy.sleeps == [1.0, 2.0]

    def test_exhausted_raises_last_error(self, make_prober):
        prober, engine, policy = make_prober([transient("a"), transient("b"), transient("c")])

        with pytest.raises(AnalysisError, match="c"):
            prober.probe("Q?", TARGET_URL)

        assert len(engine.search_calls) == 3


class TestAccessibility:

    def test_accessible_via_sources(self, make_prober):
        prober, engine, policy = make_prober([search_response(sources=[TARGET_URL])])

        assert prober.check_accessibility(TARGET_URL) is True
        assert engine.search_calls == [f"What's in this article: {TARGET_URL}"]

    def test_accessible_via_citation(self, make_prober):
        prober, engine, policy = make_prober([search_response(citations=["https://www.site.com/article/"])])
        assert prober.check_accessibility(TARGET_URL) is True

    def test_not_accessible(self, make_prober):
        prober, engine, policy = make_prober([search_response(sources=["https://x.com"])])
        assert prober.check_accessibility(TARGET_URL) is False

    def test_engine_failure_means_not_accessible(self, make_prober):
        prober, engine, policy = make_prober([transient("a"), transient("b"), transient("c")])

        assert prober.check_accessibility(TARGET_URL) is False
        assert len(engine.search_calls) == 3
