"""
Output module for Gemini Search.

Renders single outcomes and batches as text or JSON.
"""

from gemini_search.output.renderer import (
    render_outcome_json,
    render_batch_json,
    render_outcome_text,
    render_batch_text,
    render_failure_line,
    render_summary_block,
    render_completion_banner,
)

__all__ = [
    "render_outcome_json",
    "render_batch_json",
    "render_outcome_text",
    "render_batch_text",
    "render_failure_line",
    "render_summary_block",
    "render_completion_banner",
]
