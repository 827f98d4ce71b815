"""
Summaries of completed query/answer pairs.
"""

import logging

from gemini_search.config import Settings
from gemini_search.config.settings import EngineSettings, SearchSettings
from gemini_search.core.exceptions import SummarizationError
from gemini_search.llm.base import AnswerEngine, EngineRequest
from gemini_search.llm.prompt_templates import build_summary_prompt
from gemini_search.query_executor.models import SUMMARY_FAILED_SENTINEL
from gemini_search.query_executor.retry import AttemptResult, RetryPolicy
from gemini_search.utils.logging import get_logger
from gemini_search.utils.metrics import time_engine_call


class Summarizer:
    """
    Generates a short summary of a search answer.

    Uses the summary instruction and no tools, under the same retry
    policy as search queries.
    """

    def __init__(
        self,
        engine: AnswerEngine,
        search_settings: SearchSettings | None = None,
        engine_settings: EngineSettings | None = None,
        retry_policy: RetryPolicy | None = None,
        logger: logging.Logger | None = None,
    ) -> None:
        self.engine = engine
        self.search_settings = search_settings or SearchSettings()
        self.engine_settings = engine_settings or EngineSettings()
        self.retry_policy = retry_policy or RetryPolicy.from_settings(
            self.search_settings)
        self.logger = logger or get_logger(__name__)

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        engine: AnswerEngine,
        logger: logging.Logger | None = None,
    ) -> "Summarizer":
        """Create a summarizer from application settings."""
        return cls(
            engine=engine,
            search_settings=settings.search,
            engine_settings=settings.engine,
            logger=logger,
        )

    async def summarize(self, query: str, answer_text: str) -> str:
        """
        Summarize an answer.

        Raises:
            SummarizationError: If every attempt errored or came back empty
        """
        request = EngineRequest(
            prompt=build_summary_prompt(query, answer_text),
            system_instruction=self.search_settings.summary_instruction,
            thinking_budget=self.engine_settings.thinking_budget,
        )

        async def attempt(number: int) -> AttemptResult:
            try:
                with time_engine_call():
                    text = await self.engine.generate(request)
            except Exception as e:
                self.logger.warning(
                    f"Summary attempt {number} failed for {query!r}: {e}")
                return AttemptResult(error=e)
            return AttemptResult(text=text or "")

        result = await self.retry_policy.run(attempt)
        if result.ok:
            return result.text

        if result.error is not None:
            raise SummarizationError(
                "Failed to generate summary after retries",
                details={"query": query, "error": str(result.error)},
            ) from result.error
        raise SummarizationError(
            "Received empty summary after retries", details={"query": query})

    async def summarize_or_sentinel(self, query: str, answer_text: str) -> str:
        """Summarize an answer, substituting the sentinel on failure."""
        try:
            return await self.summarize(query, answer_text)
        except SummarizationError as e:
            self.logger.warning(f"Summary unavailable: {e}")
            return SUMMARY_FAILED_SENTINEL
