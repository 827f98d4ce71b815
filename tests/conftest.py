"""
Shared pytest fixtures for Gemini Search tests.

Provides reusable fixtures for:
- Canned answer engines (scripted, streaming, keyed by query)
- Settings and retry policies without real delays
- Global logging and metrics reset
"""

import asyncio
import re
from datetime import date
from typing import AsyncIterator

import pytest

from gemini_search.config.settings import EngineSettings, SearchSettings
from gemini_search.llm.base import EngineRequest
from gemini_search.query_executor import QueryExecutor, RetryPolicy, Summarizer
from gemini_search.utils.logging import reset_logging
from gemini_search.utils.metrics import Metrics

_QUERY_PATTERN = re.compile(r"<query>\n(.*)\n</query>", re.DOTALL)
_SUMMARY_QUERY_PATTERN = re.compile(r"^Query: (.*?)\n\nSearch Results:", re.DOTALL)


class ScriptedEngine:
    """
    Engine returning scripted results in call order.

    Each item is either answer text or an exception to raise. The last
    item repeats once the script is exhausted.
    """

    def __init__(self, results: list, stream_attempts: list[list] | None = None) -> None:
        self.results = list(results)
        self.stream_attempts = list(stream_attempts or [])
        self.requests: list[EngineRequest] = []
        self.stream_requests: list[EngineRequest] = []

    async def generate(self, request: EngineRequest) -> str:
        self.requests.append(request)
        index = min(len(self.requests) - 1, len(self.results) - 1)
        result = self.results[index]
        if isinstance(result, Exception):
            raise result
        return result

    async def generate_stream(self, request: EngineRequest) -> AsyncIterator[str]:
        self.stream_requests.append(request)
        index = min(len(self.stream_requests) - 1, len(self.stream_attempts) - 1)
        for item in self.stream_attempts[index]:
            if isinstance(item, Exception):
                raise item
            yield item


class KeyedEngine:
    """
    Engine answering by query text, with optional per-query delays.

    Tracks the number of concurrent search calls so tests can check the
    worker bound.
    """

    def __init__(
        self,
        answers: dict[str, str | Exception] | None = None,
        delays: dict[str, float] | None = None,
        summary: str | Exception = "summary",
        summary_delay: float = 0.0,
    ) -> None:
        self.answers = answers or {}
        self.delays = delays or {}
        self.summary = summary
        self.summary_delay = summary_delay
        self.in_flight = 0
        self.max_in_flight = 0
        self.completed: list[str] = []
        self.summarized: list[str] = []
        self.cancelled: list[str] = []

    async def generate(self, request: EngineRequest) -> str:
        summary_match = _SUMMARY_QUERY_PATTERN.match(request.prompt)
        if summary_match:
            self.summarized.append(summary_match.group(1))
            if self.summary_delay:
                await asyncio.sleep(self.summary_delay)
            if isinstance(self.summary, Exception):
                raise self.summary
            return f"{self.summary} of {summary_match.group(1)}"

        query = _QUERY_PATTERN.search(request.prompt).group(1)
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            await asyncio.sleep(self.delays.get(query, 0.01))
        except asyncio.CancelledError:
            self.cancelled.append(query)
            raise
        finally:
            self.in_flight -= 1

        self.completed.append(query)
        answer = self.answers.get(query, f"Answer about {query}")
        if isinstance(answer, Exception):
            raise answer
        return answer

    async def generate_stream(self, request: EngineRequest) -> AsyncIterator[str]:
        yield await self.generate(request)


@pytest.fixture(autouse=True)
def reset_global_state():
    """Reset logging handlers and metrics around every test."""
    reset_logging()
    Metrics.reset()
    yield
    reset_logging()
    Metrics.reset()


@pytest.fixture(autouse=True)
def isolated_config(monkeypatch, tmp_path):
    """Keep user config files and GEMINI_SEARCH__* variables out of tests."""
    import os

    for key in list(os.environ):
        if key.startswith("GEMINI_SEARCH__"):
            monkeypatch.delenv(key)
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("HOME", str(tmp_path))


@pytest.fixture
def search_settings() -> SearchSettings:
    """Search settings with no delay between attempts."""
    return SearchSettings(retry_delay_seconds=0.0)


@pytest.fixture
def engine_settings() -> EngineSettings:
    """Default engine settings."""
    return EngineSettings()


@pytest.fixture
def fast_policy() -> RetryPolicy:
    """Two attempts, no delay."""
    return RetryPolicy(max_attempts=2, delay_seconds=0.0)


@pytest.fixture
def fixed_today() -> date:
    """Date used as time context in requests."""
    return date(2025, 3, 14)


@pytest.fixture
def make_executor(search_settings, engine_settings, fixed_today):
    """Build a QueryExecutor around an engine."""

    def factory(engine) -> QueryExecutor:
        return QueryExecutor(
            engine=engine,
            search_settings=search_settings,
            engine_settings=engine_settings,
            today=lambda: fixed_today,
        )

    return factory


@pytest.fixture
def make_summarizer(search_settings, engine_settings):
    """Build a Summarizer around an engine."""

    def factory(engine) -> Summarizer:
        return Summarizer(
            engine=engine,
            search_settings=search_settings,
            engine_settings=engine_settings,
        )

    return factory
