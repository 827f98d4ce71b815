"""
Gemini Search - a command-line web search powered by Gemini.

Issues one or more natural-language queries to Gemini with Google Search
grounding, optionally summarizes each answer, and renders the results
as text or JSON.
"""

__version__ = "0.1.0"

from gemini_search.config import Settings, load_config
from gemini_search.utils.logging import setup_logging, get_logger
from gemini_search.core.exceptions import GeminiSearchError
from gemini_search.query_executor import (
    QueryOutcome,
    BatchOutcome,
    QueryExecutor,
    Summarizer,
    BatchOrchestrator,
)

__all__ = [
    "Settings",
    "load_config",
    "setup_logging",
    "get_logger",
    "GeminiSearchError",
    "QueryOutcome",
    "BatchOutcome",
    "QueryExecutor",
    "Summarizer",
    "BatchOrchestrator",
]
