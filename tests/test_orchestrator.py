"""
Tests for concurrent batch orchestration.

Tests ordering, the worker bound, partial failure, summaries and the
shared deadline.
"""

import logging
import time

import pytest

from gemini_search.core.exceptions import EngineCallError
from gemini_search.query_executor import BatchOrchestrator, SUMMARY_FAILED_SENTINEL

from tests.conftest import KeyedEngine


@pytest.fixture
def make_orchestrator(make_executor, make_summarizer):
    """Build an orchestrator around an engine."""

    def factory(engine, verbose: bool = False) -> BatchOrchestrator:
        return BatchOrchestrator(
            executor=make_executor(engine),
            summarizer=make_summarizer(engine),
            verbose=verbose,
        )

    return factory


class TestOrdering:
    """Outcomes must follow input order, not completion order."""

    @pytest.mark.asyncio
    @pytest.mark.parametrize("delays", [
        [0.08, 0.06, 0.04, 0.02],
        [0.02, 0.08, 0.04, 0.06],
        [0.04, 0.02, 0.08, 0.01],
    ])
    async def test_outcomes_index_aligned(self, make_orchestrator, delays):
        """outcomes[i].query should equal queries[i] for any completion order."""
        queries = ["alpha", "beta", "gamma", "delta"]
        engine = KeyedEngine(delays=dict(zip(queries, delays)))

        batch = await make_orchestrator(engine).run_batch(
            queries, worker_limit=4, total_timeout=10, include_summary=False)

        assert len(batch.outcomes) == len(queries)
        assert [o.query for o in batch.outcomes] == queries
        assert [o.answer_text for o in batch.outcomes] == [
            f"Answer about {q}" for q in queries]

    @pytest.mark.asyncio
    async def test_completion_order_differs_from_input(self, make_orchestrator):
        """Sanity check that the engine really completes out of order."""
        queries = ["slow", "fast"]
        engine = KeyedEngine(delays={"slow": 0.1, "fast": 0.01})

        batch = await make_orchestrator(engine).run_batch(
            queries, worker_limit=2, total_timeout=10, include_summary=False)

        assert engine.completed == ["fast", "slow"]
        assert [o.query for o in batch.outcomes] == queries


class TestConcurrencyBound:
    """The worker limit is a hard ceiling on in-flight engine calls."""

    @pytest.mark.asyncio
    @pytest.mark.parametrize("worker_limit", [1, 2, 3, 5])
    async def test_in_flight_never_exceeds_limit(self, make_orchestrator, worker_limit):
        """The engine should never see more than worker_limit concurrent calls."""
        queries = [f"q{i}" for i in range(8)]
        engine = KeyedEngine(delays={q: 0.03 for q in queries})

        await make_orchestrator(engine).run_batch(
            queries, worker_limit=worker_limit, total_timeout=10, include_summary=False)

        assert engine.max_in_flight <= worker_limit
        assert engine.max_in_flight == worker_limit

    @pytest.mark.asyncio
    @pytest.mark.parametrize("worker_limit", [0, 6])
    async def test_invalid_worker_limit(self, make_orchestrator, worker_limit):
        """Worker limits outside 1-5 should be rejected."""
        with pytest.raises(ValueError):
            await make_orchestrator(KeyedEngine()).run_batch(
                ["q"], worker_limit=worker_limit)

    @pytest.mark.asyncio
    async def test_empty_query_rejected(self, make_orchestrator):
        """Empty query strings should be rejected."""
        with pytest.raises(ValueError):
            await make_orchestrator(KeyedEngine()).run_batch(["ok", ""])


class TestBatchSuccess:
    """Tests for all_succeeded and failure_summary."""

    @pytest.mark.asyncio
    async def test_all_succeeded(self, make_orchestrator):
        """A clean batch should have no failure summary."""
        batch = await make_orchestrator(KeyedEngine()).run_batch(
            ["a", "b"], worker_limit=2, include_summary=False)

        assert batch.all_succeeded is True
        assert batch.failure_summary is None
        assert batch.total_elapsed > 0

    @pytest.mark.asyncio
    async def test_partial_failure(self, make_orchestrator):
        """A failing query should not affect its siblings."""
        engine = KeyedEngine(answers={"bad": EngineCallError("down")})

        batch = await make_orchestrator(engine).run_batch(
            ["a", "bad", "c"], worker_limit=3, include_summary=False)

        assert [o.success for o in batch.outcomes] == [True, False, True]
        assert batch.outcomes[1].failure_reason == "Search failed"
        assert batch.all_succeeded is False
        assert batch.failure_summary == "Completed 2/3 queries successfully"


class TestSummaries:
    """Tests for per-query summaries inside a batch."""

    @pytest.mark.asyncio
    async def test_go_python_scenario(self, make_orchestrator):
        """Two successful queries should each carry a summary, in order."""
        engine = KeyedEngine(answers={"Go": "Go text", "Python": "Python text"})

        batch = await make_orchestrator(engine).run_batch(
            ["Go", "Python"], worker_limit=2, total_timeout=10, include_summary=True)

        assert [o.query for o in batch.outcomes] == ["Go", "Python"]
        assert [o.answer_text for o in batch.outcomes] == ["Go text", "Python text"]
        assert batch.all_succeeded is True
        assert all(o.summary_text for o in batch.outcomes)
        assert batch.outcomes[0].summary_text == "summary of Go"

    @pytest.mark.asyncio
    async def test_summary_failure_keeps_success(self, make_orchestrator):
        """A failed summary should become the sentinel without failing the query."""
        engine = KeyedEngine(summary=EngineCallError("down"))

        batch = await make_orchestrator(engine).run_batch(
            ["a", "b"], worker_limit=2, include_summary=True)

        assert batch.all_succeeded is True
        assert all(o.success for o in batch.outcomes)
        assert all(o.summary_text == SUMMARY_FAILED_SENTINEL for o in batch.outcomes)

    @pytest.mark.asyncio
    async def test_failed_query_is_not_summarized(self, make_orchestrator):
        """Only successful answers should be summarized."""
        engine = KeyedEngine(answers={"bad": ""})

        batch = await make_orchestrator(engine).run_batch(
            ["ok", "bad"], worker_limit=2, include_summary=True)

        assert engine.summarized == ["ok"]
        assert batch.outcomes[1].summary_text is None
        assert batch.outcomes[1].failure_reason == "Empty response"

    @pytest.mark.asyncio
    async def test_no_summary_when_not_requested(self, make_orchestrator):
        """include_summary=False should skip the summarizer entirely."""
        engine = KeyedEngine()

        batch = await make_orchestrator(engine).run_batch(
            ["a", "b"], worker_limit=2, include_summary=False)

        assert engine.summarized == []
        assert all(o.summary_text is None for o in batch.outcomes)


class TestDeadline:
    """Tests for the shared batch deadline."""

    @pytest.mark.asyncio
    async def test_slow_query_recorded_as_failure(self, make_orchestrator):
        """A query running past the deadline should fail promptly."""
        engine = KeyedEngine(delays={"slow": 5.0, "fast": 0.01})
        start = time.perf_counter()

        batch = await make_orchestrator(engine).run_batch(
            ["slow", "fast"], worker_limit=2, total_timeout=0.2, include_summary=False)

        assert time.perf_counter() - start < 2.0
        assert batch.outcomes[0].success is False
        assert batch.outcomes[0].failure_reason == "Timed out"
        assert batch.outcomes[1].success is True
        assert batch.all_succeeded is False
        assert batch.failure_summary == "Completed 1/2 queries successfully"
        assert engine.cancelled == ["slow"]

    @pytest.mark.asyncio
    async def test_queued_queries_time_out(self, make_orchestrator):
        """Queries still waiting for a worker at the deadline should fail too."""
        engine = KeyedEngine(delays={"first": 5.0})

        batch = await make_orchestrator(engine).run_batch(
            ["first", "second"], worker_limit=1, total_timeout=0.2, include_summary=False)

        assert [o.success for o in batch.outcomes] == [False, False]
        assert "second" not in engine.completed

    @pytest.mark.asyncio
    async def test_summary_cut_off_keeps_answer(self, make_orchestrator):
        """A search that finished before the deadline stays successful without its summary."""
        engine = KeyedEngine(summary_delay=5.0)
        start = time.perf_counter()

        batch = await make_orchestrator(engine).run_batch(
            ["Go", "Python"], worker_limit=2, total_timeout=0.3, include_summary=True)

        assert time.perf_counter() - start < 2.0
        assert sorted(engine.summarized) == ["Go", "Python"]
        for outcome, query in zip(batch.outcomes, ["Go", "Python"]):
            assert outcome.success is True
            assert outcome.answer_text == f"Answer about {query}"
            assert outcome.summary_text == SUMMARY_FAILED_SENTINEL
        assert batch.all_succeeded is True


class TestLogging:
    """Per-query and batch log lines are gated on verbosity."""

    @pytest.mark.asyncio
    async def test_verbose_logs_completion(self, make_orchestrator, caplog):
        """Verbose runs should log each query and the batch."""
        caplog.set_level(logging.INFO, logger="gemini_search")

        await make_orchestrator(KeyedEngine(), verbose=True).run_batch(
            ["a", "b"], worker_limit=2, include_summary=False)

        messages = [r.getMessage() for r in caplog.records]
        assert sum("Query completed" in m for m in messages) == 2
        assert any("Query execution completed" in m for m in messages)

    @pytest.mark.asyncio
    async def test_quiet_by_default(self, make_orchestrator, caplog):
        """Non-verbose runs should not emit completion lines."""
        caplog.set_level(logging.INFO, logger="gemini_search")

        await make_orchestrator(KeyedEngine()).run_batch(
            ["a"], worker_limit=1, include_summary=False)

        assert not any("Query completed" in r.getMessage() for r in caplog.records)
