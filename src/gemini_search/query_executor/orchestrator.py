"""
Concurrent execution of multiple queries.

Fans queries out over a bounded number of asyncio tasks under one
shared deadline and collects outcomes in input order.
"""

import asyncio
import logging
import time
from datetime import datetime, timezone
from typing import Sequence

from gemini_search.config import Settings
from gemini_search.llm.base import AnswerEngine
from gemini_search.query_executor.executor import QueryExecutor
from gemini_search.query_executor.models import (
    SUMMARY_FAILED_SENTINEL,
    BatchOutcome,
    QueryOutcome,
)
from gemini_search.query_executor.summarizer import Summarizer
from gemini_search.utils.logging import get_logger
from gemini_search.utils.metrics import Metrics

MIN_WORKERS = 1
MAX_WORKERS = 5
DEFAULT_TIMEOUT_SECONDS = 180.0

TIMED_OUT = "Timed out"


class BatchOrchestrator:
    """
    Runs a batch of queries with bounded concurrency.

    Each query holds one worker slot for its search and, when requested,
    its summary. Work still running at the batch deadline is cancelled
    and recorded as a failure.

    Example:
        >>> orchestrator = BatchOrchestrator.from_settings(settings, engine)
        >>> batch = await orchestrator.run_batch(
        ...     ["Go", "Python"], worker_limit=2, total_timeout=60,
        ...     include_summary=True,
        ... )
        >>> [o.query for o in batch.outcomes]
        ['Go', 'Python']
    """

    def __init__(
        self,
        executor: QueryExecutor,
        summarizer: Summarizer | None = None,
        verbose: bool = False,
        logger: logging.Logger | None = None,
    ) -> None:
        """
        Initialize the orchestrator.

        Args:
            executor: Executor used for every query
            summarizer: Required when summaries are requested
            verbose: Log per-query and batch completion lines
            logger: Diagnostic logger
        """
        self.executor = executor
        self.summarizer = summarizer
        self.verbose = verbose
        self.logger = logger or get_logger(__name__)

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        engine: AnswerEngine,
        verbose: bool = False,
    ) -> "BatchOrchestrator":
        """Create an orchestrator with executor and summarizer from settings."""
        return cls(
            executor=QueryExecutor.from_settings(settings, engine),
            summarizer=Summarizer.from_settings(settings, engine),
            verbose=verbose,
        )

    async def run_batch(
        self,
        queries: Sequence[str],
        worker_limit: int = 3,
        total_timeout: float = DEFAULT_TIMEOUT_SECONDS,
        include_summary: bool = True,
    ) -> BatchOutcome:
        """
        Execute all queries and collect their outcomes.

        Args:
            queries: Non-empty query strings
            worker_limit: Maximum concurrently executing queries (1-5)
            total_timeout: Seconds until the whole batch is cancelled
            include_summary: Summarize each successful answer

        Returns:
            BatchOutcome with outcomes[i] belonging to queries[i]
        """
        if not MIN_WORKERS <= worker_limit <= MAX_WORKERS:
            raise ValueError(
                f"worker_limit must be between {MIN_WORKERS} and {MAX_WORKERS}")
        if total_timeout <= 0:
            raise ValueError("total_timeout must be positive")
        if any(not query for query in queries):
            raise ValueError("queries must be non-empty strings")
        if include_summary and self.summarizer is None:
            raise ValueError("include_summary requires a summarizer")

        start = time.perf_counter()
        loop = asyncio.get_running_loop()
        deadline = loop.time() + total_timeout
        semaphore = asyncio.Semaphore(worker_limit)

        outcomes = await asyncio.gather(*(
            self._run_query(query, semaphore, deadline, include_summary)
            for query in queries
        ))
        batch = BatchOutcome(
            outcomes=tuple(outcomes),
            total_elapsed=time.perf_counter() - start,
        )

        if self.verbose:
            self.logger.info(
                f"Query execution completed: total_queries={len(queries)} "
                f"successful={batch.success_count} "
                f"total_duration={batch.total_elapsed:.3f}s "
                f"engine_calls={Metrics.get().get_counter('engine_calls')}"
            )

        return batch

    async def _run_query(
        self,
        query: str,
        semaphore: asyncio.Semaphore,
        deadline: float,
        include_summary: bool,
    ) -> QueryOutcome:
        """Run one query (and its summary) inside a worker slot."""
        loop = asyncio.get_running_loop()
        started_at = datetime.now(timezone.utc)
        start = time.perf_counter()
        outcome: QueryOutcome | None = None

        async def process() -> None:
            nonlocal outcome
            async with semaphore:
                outcome = await self.executor.execute(query)
                if include_summary and outcome.success:
                    summary = await self.summarizer.summarize_or_sentinel(
                        query, outcome.answer_text)
                    outcome = outcome.with_summary(summary)

        try:
            await asyncio.wait_for(process(), timeout=max(0.0, deadline - loop.time()))
        except asyncio.TimeoutError:
            if outcome is None:
                self.logger.warning(f"Query cancelled at batch deadline: {query!r}")
                outcome = QueryOutcome.failed(
                    query, TIMED_OUT, time.perf_counter() - start, started_at)
            elif include_summary and outcome.success and outcome.summary_text is None:
                self.logger.warning(
                    f"Summary cancelled at batch deadline: {query!r}")
                outcome = outcome.with_summary(SUMMARY_FAILED_SENTINEL)

        if self.verbose:
            self.logger.info(
                f"Query completed: {outcome.query!r} success={outcome.success} "
                f"duration={outcome.elapsed:.3f}s"
            )

        return outcome
