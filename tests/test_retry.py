"""
Tests for the fixed-delay retry policy.
"""

import pytest

from gemini_search.config.settings import SearchSettings
from gemini_search.query_executor import AttemptResult, RetryPolicy


class TestAttemptResult:
    """Tests for AttemptResult."""

    def test_ok_requires_text_and_no_error(self):
        """Only error-free, non-empty attempts are ok."""
        assert AttemptResult(text="x").ok is True
        assert AttemptResult(text="").ok is False
        assert AttemptResult(text="x", error=RuntimeError()).ok is False


class TestRetryPolicy:
    """Tests for RetryPolicy.run."""

    @pytest.fixture
    def sleeps(self) -> list[float]:
        return []

    @pytest.fixture
    def policy(self, sleeps) -> RetryPolicy:
        async def fake_sleep(seconds: float) -> None:
            sleeps.append(seconds)

        return RetryPolicy(max_attempts=2, delay_seconds=3.0, sleep=fake_sleep)

    @pytest.mark.asyncio
    async def test_stops_after_success(self, policy, sleeps):
        """A successful first attempt should not sleep or retry."""
        calls = []

        async def attempt(number: int) -> AttemptResult:
            calls.append(number)
            return AttemptResult(text="done")

        result = await policy.run(attempt)

        assert result.text == "done"
        assert calls == [1]
        assert sleeps == []

    @pytest.mark.asyncio
    async def test_at_most_two_attempts(self, policy, sleeps):
        """Failing attempts should stop after the second with one delay."""
        calls = []

        async def attempt(number: int) -> AttemptResult:
            calls.append(number)
            return AttemptResult(error=RuntimeError(f"fail {number}"))

        result = await policy.run(attempt)

        assert calls == [1, 2]
        assert sleeps == [3.0]
        assert str(result.error) == "fail 2"

    @pytest.mark.asyncio
    async def test_retry_hook_receives_next_attempt(self, policy):
        """The hook should be told which attempt comes next."""
        hooked = []

        async def attempt(number: int) -> AttemptResult:
            return AttemptResult(text="" if number == 1 else "ok")

        await policy.run(attempt, on_retry=hooked.append)

        assert hooked == [2]

    def test_from_settings(self):
        """Policy should mirror the search settings."""
        policy = RetryPolicy.from_settings(
            SearchSettings(max_attempts=3, retry_delay_seconds=0.5))

        assert policy.max_attempts == 3
        assert policy.delay_seconds == 0.5

    def test_invalid_arguments(self):
        """Zero attempts or a negative delay should be rejected."""
        with pytest.raises(ValueError):
            RetryPolicy(max_attempts=0)
        with pytest.raises(ValueError):
            RetryPolicy(delay_seconds=-1)
