"""
Query execution against an answer engine.

Runs one search query under the shared retry policy and records the
outcome, either as a single response or as a live stream of chunks.
"""

import logging
import sys
import time
from datetime import date, datetime, timezone
from typing import Callable

from gemini_search.config import Settings
from gemini_search.config.settings import EngineSettings, SearchSettings
from gemini_search.llm.base import AnswerEngine, EngineRequest
from gemini_search.llm.prompt_templates import build_search_prompt
from gemini_search.query_executor.models import QueryOutcome
from gemini_search.query_executor.retry import AttemptResult, RetryPolicy
from gemini_search.utils.logging import get_logger
from gemini_search.utils.metrics import observe_query_latency, time_engine_call

# Closes a streamed answer block
STREAM_RULE = "─" * 77

SEARCH_FAILED = "Search failed"
EMPTY_RESPONSE = "Empty response"
STREAM_SEARCH_FAILED = "Stream search failed"
EMPTY_STREAM_RESPONSE = "Empty stream response"


def write_stdout(text: str) -> None:
    """Write text to stdout immediately."""
    sys.stdout.write(text)
    sys.stdout.flush()


class QueryExecutor:
    """
    Executes search queries with a fixed retry policy.

    Example:
        >>> executor = QueryExecutor.from_settings(settings, engine)
        >>> outcome = await executor.execute("What is Go?")
        >>> outcome.success
        True
    """

    def __init__(
        self,
        engine: AnswerEngine,
        search_settings: SearchSettings | None = None,
        engine_settings: EngineSettings | None = None,
        retry_policy: RetryPolicy | None = None,
        today: Callable[[], date] = date.today,
        logger: logging.Logger | None = None,
    ) -> None:
        """
        Initialize the executor.

        Args:
            engine: Answer engine to query
            search_settings: Instructions and retry settings
            engine_settings: Thinking budget and tool capabilities
            retry_policy: Overrides the policy derived from search_settings
            today: Clock supplying the time context date
            logger: Diagnostic logger
        """
        self.engine = engine
        self.search_settings = search_settings or SearchSettings()
        self.engine_settings = engine_settings or EngineSettings()
        self.retry_policy = retry_policy or RetryPolicy.from_settings(
            self.search_settings)
        self._today = today
        self.logger = logger or get_logger(__name__)

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        engine: AnswerEngine,
        logger: logging.Logger | None = None,
    ) -> "QueryExecutor":
        """Create an executor from application settings."""
        return cls(
            engine=engine,
            search_settings=settings.search,
            engine_settings=settings.engine,
            logger=logger,
        )

    def build_request(self, query: str) -> EngineRequest:
        """Build the search request for a query, stamped with today's date."""
        return EngineRequest(
            prompt=build_search_prompt(query, self._today()),
            system_instruction=self.search_settings.system_instruction,
            tools=self.engine_settings.tools,
            thinking_budget=self.engine_settings.thinking_budget,
        )

    async def execute(self, query: str) -> QueryOutcome:
        """
        Execute a query and return its outcome.

        Elapsed time covers every attempt and the delay between them.

        Args:
            query: Search query text

        Returns:
            QueryOutcome, failed with "Search failed" or "Empty response"
            when attempts are exhausted
        """
        started_at = datetime.now(timezone.utc)
        start = time.perf_counter()
        request = self.build_request(query)

        self.logger.info(f"Performing search: {query!r}")

        async def attempt(number: int) -> AttemptResult:
            try:
                with time_engine_call():
                    text = await self.engine.generate(request)
            except Exception as e:
                self.logger.warning(
                    f"Search attempt {number} failed for {query!r}: {e}")
                return AttemptResult(error=e)
            return AttemptResult(text=text or "")

        def on_retry(number: int) -> None:
            self.logger.info(
                f"Retrying search request: {query!r} (attempt {number})")

        result = await self.retry_policy.run(attempt, on_retry=on_retry)
        elapsed = time.perf_counter() - start
        observe_query_latency(elapsed * 1000)

        if result.ok:
            return QueryOutcome.succeeded(query, result.text, elapsed, started_at)

        reason = SEARCH_FAILED if result.error is not None else EMPTY_RESPONSE
        self.logger.error(
            f"Search failed after {self.retry_policy.max_attempts} attempts: "
            f"{query!r} ({reason})")
        return QueryOutcome.failed(query, reason, elapsed, started_at)

    async def execute_streaming(
        self,
        query: str,
        echo: Callable[[str], None] = write_stdout,
    ) -> QueryOutcome:
        """
        Execute a query, echoing chunks as they arrive.

        Only valid for a single in-flight query; chunks go straight to
        the shared output sink. An attempt that errors or produces no
        text is retried. Once attempts are exhausted, text collected by
        the last attempt is kept as the answer even if that attempt
        ended in an error.

        Args:
            query: Search query text
            echo: Sink receiving the header, chunks, retry notice and rule

        Returns:
            QueryOutcome, failed with "Stream search failed" when some
            attempt errored and the last one produced no text, or with
            "Empty stream response" when no attempt errored
        """
        started_at = datetime.now(timezone.utc)
        start = time.perf_counter()
        request = self.build_request(query)
        last_error: Exception | None = None

        self.logger.info(f"Performing streaming search: {query!r}")
        echo(f"\n=== {query} ===\n")

        async def attempt(number: int) -> AttemptResult:
            nonlocal last_error
            buffer: list[str] = []
            try:
                with time_engine_call():
                    async for chunk in self.engine.generate_stream(request):
                        if not chunk:
                            continue
                        echo(chunk)
                        buffer.append(chunk)
            except Exception as e:
                self.logger.warning(
                    f"Stream attempt {number} failed for {query!r}: {e}")
                last_error = e
                return AttemptResult(text="".join(buffer), error=e)
            return AttemptResult(text="".join(buffer))

        def on_retry(number: int) -> None:
            self.logger.info(
                f"Retrying stream search request: {query!r} (attempt {number})")
            echo("\n[Retrying...]\n")

        result = await self.retry_policy.run(attempt, on_retry=on_retry)
        echo(f"\n{STREAM_RULE}\n")

        elapsed = time.perf_counter() - start
        observe_query_latency(elapsed * 1000)

        if result.text:
            if result.error is not None:
                self.logger.warning(
                    f"Stream ended with an error, keeping partial answer: {query!r}")
            return QueryOutcome.succeeded(query, result.text, elapsed, started_at)

        reason = STREAM_SEARCH_FAILED if last_error is not None else EMPTY_STREAM_RESPONSE
        self.logger.error(
            f"Stream search failed after {self.retry_policy.max_attempts} attempts: "
            f"{query!r} ({reason})")
        return QueryOutcome.failed(query, reason, elapsed, started_at)
