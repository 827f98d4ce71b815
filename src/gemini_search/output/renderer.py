"""
Rendering of query outcomes as text or JSON.

All functions are pure: identical outcomes and flags always produce
identical output. Printing is left to the CLI.
"""

import json
from typing import Any

from gemini_search.query_executor.models import BatchOutcome, QueryOutcome

NO_SUMMARY = "No summary available"


def _to_json(data: dict[str, Any]) -> str:
    return json.dumps(data, indent=2, ensure_ascii=False) + "\n"


def render_outcome_json(outcome: QueryOutcome) -> str:
    """Serialize one outcome as indented JSON."""
    return _to_json(outcome.to_dict())


def render_batch_json(batch: BatchOutcome) -> str:
    """
    Serialize a batch as indented JSON.

    Summaries are included whenever present; the text-mode
    include_summary layout switch does not apply.
    """
    return _to_json(batch.to_dict())


def render_failure_line(outcome: QueryOutcome) -> str:
    """Line reported on the diagnostic stream for a failed single query."""
    return f"Search failed: {outcome.failure_reason}"


def render_summary_block(summary_text: str) -> str:
    """The SUMMARY block shown ahead of a detailed answer."""
    return f"## SUMMARY\n{summary_text}\n\n"


def render_outcome_text(outcome: QueryOutcome) -> str:
    """
    Render a successful single-query outcome.

    With a summary: SUMMARY block, DETAILED RESPONSE label, answer.
    Without: the answer only.

    Raises:
        ValueError: If the outcome failed; use render_failure_line
    """
    if not outcome.success:
        raise ValueError("cannot render a failed outcome as a response body")

    parts = []
    if outcome.summary_text:
        parts.append(render_summary_block(outcome.summary_text))
        parts.append("## DETAILED RESPONSE\n")
    parts.append(f"{outcome.answer_text}\n")
    return "".join(parts)


def render_completion_banner(batch: BatchOutcome) -> str:
    """Banner closing a streamed run whose answers were already printed."""
    return f"\n🏁 COMPLETED: {batch.success_count}/{len(batch.outcomes)} queries\n"


def render_batch_text(
    batch: BatchOutcome,
    stream: bool = False,
    include_summary: bool = True,
) -> str:
    """
    Render a batch as human-readable text.

    | stream | include_summary | output                                  |
    |--------|-----------------|-----------------------------------------|
    | True   | any             | completion banner only                  |
    | False  | True            | overview, one line per query, details   |
    | False  | False           | detailed sections only                  |
    """
    if stream:
        return render_completion_banner(batch)

    total = len(batch.outcomes)
    lines: list[str] = []

    if include_summary:
        lines.append("## SEARCH RESULTS")
        lines.append(
            f"{batch.success_count}/{total} queries completed successfully, "
            "here is a summary for each query:"
        )
        lines.append("")
        for outcome in batch.outcomes:
            if outcome.success:
                lines.append(f"✓ {outcome.query}: {outcome.summary_text or NO_SUMMARY}")
            else:
                lines.append(f"✗ {outcome.query}: {outcome.failure_reason}")
        lines.append("")
        lines.append("## DETAILED RESPONSES")
        lines.append("")

    for outcome in batch.outcomes:
        if total > 1:
            lines.append(f"=== {outcome.query} ===")
        if outcome.success:
            lines.append(outcome.answer_text)
        else:
            lines.append(f"Status: FAILED - {outcome.failure_reason}")
        lines.append("")

    return "\n".join(lines) + "\n" if lines else ""
