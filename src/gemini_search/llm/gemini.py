"""
Gemini answer engine using the google-genai SDK.

Sends requests through the SDK's async client so that asyncio
cancellation (the batch deadline) aborts in-flight HTTP calls.
"""

import os
from typing import AsyncIterator

from google import genai
from google.genai import types

from gemini_search.config import Settings
from gemini_search.config.settings import EngineSettings
from gemini_search.core.exceptions import EngineCallError, EngineInitializationError
from gemini_search.llm.base import EngineRequest, ToolCapability
from gemini_search.utils.logging import get_logger

logger = get_logger(__name__)


def _to_genai_tool(capability: ToolCapability) -> types.Tool:
    """Map a tool capability onto the SDK tool declaration."""
    if capability is ToolCapability.WEB_SEARCH:
        return types.Tool(google_search=types.GoogleSearch())
    return types.Tool(url_context=types.UrlContext())


class GeminiAnswerEngine:
    """
    Answer engine backed by the Gemini API.

    Example:
        >>> engine = GeminiAnswerEngine.from_settings(settings)
        >>> text = await engine.generate(request)
    """

    def __init__(self, client: genai.Client, model_name: str) -> None:
        """
        Initialize the engine.

        Args:
            client: Configured google-genai client
            model_name: Gemini model identifier
        """
        self.client = client
        self.model_name = model_name

    @classmethod
    def from_settings(cls, settings: Settings | EngineSettings) -> "GeminiAnswerEngine":
        """
        Create the engine from settings.

        Raises:
            EngineInitializationError: If the client cannot be created
        """
        engine_settings = settings.engine if isinstance(
            settings, Settings) else settings

        api_key = os.environ.get(engine_settings.api_key_env_var)
        try:
            # With api_key=None the SDK falls back to GOOGLE_API_KEY / GEMINI_API_KEY
            client = genai.Client(api_key=api_key)
        except Exception as e:
            raise EngineInitializationError(
                f"Failed to create Gemini client: {e}",
                model_name=engine_settings.model_name,
                details={"api_key_env_var": engine_settings.api_key_env_var},
            ) from e

        logger.info(f"Gemini client initialized (model={engine_settings.model_name})")
        return cls(client=client, model_name=engine_settings.model_name)

    def _build_config(self, request: EngineRequest) -> types.GenerateContentConfig:
        """Translate an engine request into SDK generation config."""
        tools = [_to_genai_tool(tool) for tool in request.tools]
        return types.GenerateContentConfig(
            system_instruction=request.system_instruction,
            tools=tools or None,
            thinking_config=types.ThinkingConfig(
                thinking_budget=request.thinking_budget,
            ),
        )

    async def generate(self, request: EngineRequest) -> str:
        """Return the full answer text, empty when the model produced none."""
        try:
            response = await self.client.aio.models.generate_content(
                model=self.model_name,
                contents=request.prompt,
                config=self._build_config(request),
            )
        except Exception as e:
            raise EngineCallError(
                f"Gemini request failed: {e}",
                details={"model": self.model_name},
            ) from e

        return response.text or ""

    async def generate_stream(self, request: EngineRequest) -> AsyncIterator[str]:
        """Yield answer text chunks as the model produces them."""
        try:
            stream = await self.client.aio.models.generate_content_stream(
                model=self.model_name,
                contents=request.prompt,
                config=self._build_config(request),
            )
            async for chunk in stream:
                if chunk.candidates and chunk.text:
                    yield chunk.text
        except Exception as e:
            raise EngineCallError(
                f"Gemini stream failed: {e}",
                details={"model": self.model_name},
            ) from e
