"""
Utilities module for Gemini Search.

Provides common utilities including logging setup and metrics.
"""

from gemini_search.utils.logging import setup_logging, get_logger, reset_logging
from gemini_search.utils.metrics import (
    Metrics,
    TimingStats,
    increment_retries,
    observe_query_latency,
    time_engine_call,
)

__all__ = [
    # Logging
    "setup_logging",
    "get_logger",
    "reset_logging",
    # Metrics
    "Metrics",
    "TimingStats",
    "increment_retries",
    "observe_query_latency",
    "time_engine_call",
]
