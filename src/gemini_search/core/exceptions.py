"""
Custom exceptions for Gemini Search.

Provides a hierarchy of exceptions for precise error handling across
all subsystems. All exceptions inherit from GeminiSearchError.

Exception Hierarchy:
    GeminiSearchError (base)
    ├── ConfigurationError
    ├── EngineError
    │   ├── EngineInitializationError
    │   └── EngineCallError
    └── QueryError
        └── SummarizationError
"""

from typing import Any


class GeminiSearchError(Exception):
    """
    Base exception for all Gemini Search errors.

    Attributes:
        message: Human-readable error description
        details: Optional dictionary with additional context
    """

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def __str__(self) -> str:
        if self.details:
            details_str = ", ".join(
                f"{k}={v!r}" for k, v in self.details.items())
            return f"{self.message} ({details_str})"
        return self.message

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.message!r}, details={self.details!r})"


# =============================================================================
# Configuration Errors
# =============================================================================


class ConfigurationError(GeminiSearchError):
    """
    Error in configuration loading or validation.

    Raised when:
    - Configuration file is missing or malformed
    - Setting values fail validation
    - Command-line options conflict (e.g. --query with -q)
    """

    pass


# =============================================================================
# Engine Errors
# =============================================================================


class EngineError(GeminiSearchError):
    """Base error for answer engine operations."""

    pass


class EngineInitializationError(EngineError):
    """
    Error creating the answer engine client.

    Raised when:
    - API key is missing
    - Client construction fails

    The process cannot run any query after this error.
    """

    def __init__(
        self,
        message: str,
        model_name: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        details = dict(details or {})
        if model_name:
            details["model_name"] = model_name
        super().__init__(message, details)
        self.model_name = model_name


class EngineCallError(EngineError):
    """
    Error during a single answer engine call.

    Raised when the backend request fails or a stream breaks
    mid-generation. The executors retry these under their fixed policy.
    """

    pass


# =============================================================================
# Query Errors
# =============================================================================


class QueryError(GeminiSearchError):
    """Base error for query processing operations."""

    pass


class SummarizationError(QueryError):
    """
    Summary generation failed after all attempts.

    Never fatal: callers substitute a sentinel summary.
    """

    pass
