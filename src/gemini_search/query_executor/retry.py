"""
Fixed-delay retry policy shared by the executors and the summarizer.
"""

import asyncio
from dataclasses import dataclass
from typing import Awaitable, Callable

from gemini_search.config.settings import SearchSettings
from gemini_search.utils.metrics import increment_retries


@dataclass(frozen=True)
class AttemptResult:
    """
    Result of one attempt.

    Attributes:
        text: Text produced by the attempt (may be partial if it errored)
        error: Exception that ended the attempt, if any
    """

    text: str = ""
    error: Exception | None = None

    @property
    def ok(self) -> bool:
        """An attempt succeeds when it finished without error and produced text."""
        return self.error is None and self.text != ""


# Called with the 1-based attempt number; returns that attempt's result
Attempt = Callable[[int], Awaitable[AttemptResult]]

# Called with the upcoming attempt number before the retry delay
RetryHook = Callable[[int], None]


class RetryPolicy:
    """
    Run an attempt up to max_attempts times with a fixed delay in between.

    Not exponential: every retry waits the same delay. The sleep is a
    suspension point, so cancellation interrupts it.

    Example:
        >>> policy = RetryPolicy(max_attempts=2, delay_seconds=3.0)
        >>> result = await policy.run(attempt)
        >>> if result.ok:
        ...     print(result.text)
    """

    def __init__(
        self,
        max_attempts: int = 2,
        delay_seconds: float = 3.0,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        if max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        if delay_seconds < 0:
            raise ValueError("delay_seconds must be non-negative")
        self.max_attempts = max_attempts
        self.delay_seconds = delay_seconds
        self._sleep = sleep

    @classmethod
    def from_settings(cls, settings: SearchSettings) -> "RetryPolicy":
        """Create a policy from search settings."""
        return cls(
            max_attempts=settings.max_attempts,
            delay_seconds=settings.retry_delay_seconds,
        )

    async def run(
        self,
        attempt: Attempt,
        on_retry: RetryHook | None = None,
    ) -> AttemptResult:
        """
        Run attempts until one succeeds or attempts are exhausted.

        Returns:
            The successful attempt's result, or the last attempt's result
        """
        result = AttemptResult()
        for number in range(1, self.max_attempts + 1):
            result = await attempt(number)
            if result.ok:
                return result

            if number < self.max_attempts:
                increment_retries()
                if on_retry is not None:
                    on_retry(number + 1)
                await self._sleep(self.delay_seconds)

        return result
