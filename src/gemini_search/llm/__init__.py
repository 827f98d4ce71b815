"""
LLM module for Gemini Search.

Provides the answer engine interface and prompt templates. The Gemini
backend lives in gemini_search.llm.gemini and is imported on demand.
"""

from gemini_search.llm.base import (
    AnswerEngine,
    EngineRequest,
    ToolCapability,
)
from gemini_search.llm.prompt_templates import (
    PromptTemplate,
    SearchPrompts,
    SEARCH_SYSTEM_INSTRUCTION,
    SUMMARY_SYSTEM_INSTRUCTION,
    build_search_prompt,
    build_summary_prompt,
)

__all__ = [
    # Engine interface
    "AnswerEngine",
    "EngineRequest",
    "ToolCapability",
    # Prompts
    "PromptTemplate",
    "SearchPrompts",
    "SEARCH_SYSTEM_INSTRUCTION",
    "SUMMARY_SYSTEM_INSTRUCTION",
    "build_search_prompt",
    "build_summary_prompt",
]
