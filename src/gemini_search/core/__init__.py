"""
Core module for Gemini Search.

Provides the exception hierarchy shared by all subsystems.
"""

from gemini_search.core.exceptions import (
    GeminiSearchError,
    ConfigurationError,
    EngineError,
    EngineInitializationError,
    EngineCallError,
    QueryError,
    SummarizationError,
)

__all__ = [
    "GeminiSearchError",
    "ConfigurationError",
    # Engine
    "EngineError",
    "EngineInitializationError",
    "EngineCallError",
    # Query
    "QueryError",
    "SummarizationError",
]
