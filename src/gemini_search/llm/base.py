"""
Answer engine interface.

The query executors only depend on this protocol. Backends implement a
one-shot call and an incremental call; cancellation is delivered through
asyncio task cancellation.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import AsyncIterator, Protocol, runtime_checkable


class ToolCapability(str, Enum):
    """Backend tools a request may enable."""

    WEB_SEARCH = "web_search"
    URL_CONTEXT = "url_context"


@dataclass(frozen=True)
class EngineRequest:
    """
    A single request to an answer engine.

    Attributes:
        prompt: User prompt text
        system_instruction: Instruction steering the backend
        tools: Tool capabilities passed through to the backend
        thinking_budget: Backend effort knob
    """

    prompt: str
    system_instruction: str
    tools: tuple[ToolCapability, ...] = field(default_factory=tuple)
    thinking_budget: int = 512


@runtime_checkable
class AnswerEngine(Protocol):
    """
    Capability producing natural-language answers.

    Implementations raise EngineCallError for transport/backend failures.
    """

    async def generate(self, request: EngineRequest) -> str:
        """Return the full answer text for a request."""
        ...

    def generate_stream(self, request: EngineRequest) -> AsyncIterator[str]:
        """
        Yield answer text chunks as they arrive.

        The iterator is finite and not restartable. A failure mid-stream
        is raised from the iterator after the chunks already yielded.
        """
        ...
