"""
Outcome records produced by the executors and the orchestrator.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any


SUMMARY_FAILED_SENTINEL = "Summary generation failed"


@dataclass(frozen=True)
class QueryOutcome:
    """
    Result of one query.

    Exactly one of (non-empty answer_text, success=True) or
    (non-empty failure_reason, success=False) holds.
    """

    query: str
    success: bool
    answer_text: str = ""
    summary_text: str | None = None
    failure_reason: str | None = None
    elapsed: float = 0.0
    started_at: datetime = field(
        default_factory=lambda: datetime.now(timezone.utc))

    def __post_init__(self) -> None:
        if not self.query:
            raise ValueError("query must be non-empty")
        if self.success and (not self.answer_text or self.failure_reason):
            raise ValueError(
                "successful outcome needs answer_text and no failure_reason")
        if not self.success and (self.answer_text or not self.failure_reason):
            raise ValueError(
                "failed outcome needs failure_reason and no answer_text")

    @classmethod
    def succeeded(
        cls,
        query: str,
        answer_text: str,
        elapsed: float,
        started_at: datetime,
    ) -> "QueryOutcome":
        return cls(
            query=query,
            success=True,
            answer_text=answer_text,
            elapsed=elapsed,
            started_at=started_at,
        )

    @classmethod
    def failed(
        cls,
        query: str,
        reason: str,
        elapsed: float,
        started_at: datetime,
    ) -> "QueryOutcome":
        return cls(
            query=query,
            success=False,
            failure_reason=reason,
            elapsed=elapsed,
            started_at=started_at,
        )

    def with_summary(self, summary_text: str) -> "QueryOutcome":
        """Return a copy carrying a summary."""
        return QueryOutcome(
            query=self.query,
            success=self.success,
            answer_text=self.answer_text,
            summary_text=summary_text,
            failure_reason=self.failure_reason,
            elapsed=self.elapsed,
            started_at=self.started_at,
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert to a JSON-ready dictionary, omitting absent optional fields."""
        data: dict[str, Any] = {
            "query": self.query,
            "answer_text": self.answer_text,
        }
        if self.summary_text is not None:
            data["summary_text"] = self.summary_text
        data["success"] = self.success
        if self.failure_reason is not None:
            data["failure_reason"] = self.failure_reason
        data["elapsed"] = round(self.elapsed, 3)
        data["started_at"] = self.started_at.isoformat()
        return data


@dataclass(frozen=True)
class BatchOutcome:
    """
    Result of a multi-query run.

    Outcomes are index-aligned with the input queries.
    """

    outcomes: tuple[QueryOutcome, ...]
    total_elapsed: float = 0.0

    @property
    def success_count(self) -> int:
        """Number of successful outcomes."""
        return sum(1 for outcome in self.outcomes if outcome.success)

    @property
    def all_succeeded(self) -> bool:
        """True iff every outcome succeeded."""
        return self.success_count == len(self.outcomes)

    @property
    def failure_summary(self) -> str | None:
        """Human-readable k/n line, present only when something failed."""
        if self.all_succeeded:
            return None
        return f"Completed {self.success_count}/{len(self.outcomes)} queries successfully"

    def to_dict(self) -> dict[str, Any]:
        """Convert to a JSON-ready dictionary."""
        data: dict[str, Any] = {
            "outcomes": [outcome.to_dict() for outcome in self.outcomes],
            "total_elapsed": round(self.total_elapsed, 3),
            "all_succeeded": self.all_succeeded,
        }
        if self.failure_summary is not None:
            data["failure_summary"] = self.failure_summary
        return data
