"""
Query executor module for Gemini Search.

Provides query execution and aggregation:
- Retrying and streaming executors
- Answer summaries with a degraded sentinel
- Bounded-concurrency batch orchestration
"""

from gemini_search.query_executor.models import (
    QueryOutcome,
    BatchOutcome,
    SUMMARY_FAILED_SENTINEL,
)
from gemini_search.query_executor.retry import (
    RetryPolicy,
    AttemptResult,
)
from gemini_search.query_executor.executor import (
    QueryExecutor,
    STREAM_RULE,
)
from gemini_search.query_executor.summarizer import Summarizer
from gemini_search.query_executor.orchestrator import (
    BatchOrchestrator,
    MIN_WORKERS,
    MAX_WORKERS,
    DEFAULT_TIMEOUT_SECONDS,
)

__all__ = [
    "QueryOutcome",
    "BatchOutcome",
    "SUMMARY_FAILED_SENTINEL",
    "RetryPolicy",
    "AttemptResult",
    "QueryExecutor",
    "STREAM_RULE",
    "Summarizer",
    "BatchOrchestrator",
    "MIN_WORKERS",
    "MAX_WORKERS",
    "DEFAULT_TIMEOUT_SECONDS",
]
