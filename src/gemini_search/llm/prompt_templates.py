"""
Prompt templates for answer engine requests.

Provides the default system instructions and the request bodies for:
- Search queries (with time context)
- Summaries of a completed query/answer pair
"""

from dataclasses import dataclass
from datetime import date
from typing import Any


SEARCH_SYSTEM_INSTRUCTION = (
    "You are a search assistant with access to Google Search and the ability "
    "to read the content of URLs. Answer the user's query using current, "
    "verifiable information from the web. Search before answering whenever the "
    "query concerns facts, recent events, releases, prices or documentation.\n\n"
    "Guidelines:\n"
    "- Lead with the direct answer, then supporting detail.\n"
    "- Prefer primary and official sources; mention them by name.\n"
    "- Use the supplied time context to judge what \"latest\" or \"current\" means.\n"
    "- If sources disagree or information is unavailable, say so plainly.\n"
    "- Format the answer as concise Markdown suitable for a terminal."
)

SUMMARY_SYSTEM_INSTRUCTION = (
    "You summarize search results. Given a query and the full search response, "
    "write a single short paragraph (at most two sentences) that answers the "
    "query directly. Do not add information that is not in the response. "
    "Return plain text without headings, lists or Markdown."
)


@dataclass
class PromptTemplate:
    """
    A reusable prompt template with variable substitution.

    Example:
        >>> template = PromptTemplate(
        ...     name="summary",
        ...     system=SUMMARY_SYSTEM_INSTRUCTION,
        ...     user="Query: {query}",
        ... )
        >>> template.format_user(query="What is Go?")
        'Query: What is Go?'
    """

    name: str
    system: str
    user: str

    def format_user(self, **kwargs: Any) -> str:
        """Format just the user prompt."""
        return self.user.format(**kwargs) if kwargs else self.user


class SearchPrompts:
    """Prompt templates used by the executors and the summarizer."""

    SEARCH = PromptTemplate(
        name="search",
        system=SEARCH_SYSTEM_INSTRUCTION,
        user=(
            "\n<query>\n{query}\n</query>\n\n"
            "Time Context: today is {today}\n\n"
        ),
    )

    SUMMARY = PromptTemplate(
        name="summary",
        system=SUMMARY_SYSTEM_INSTRUCTION,
        user="Query: {query}\n\nSearch Results:\n{answer}",
    )


def build_search_prompt(query: str, today: date | None = None) -> str:
    """
    Build the user prompt for a search query.

    Args:
        query: The user's query
        today: Date used as time context (defaults to the local date)

    Returns:
        Prompt text embedding the query and an ISO date
    """
    today = today or date.today()
    return SearchPrompts.SEARCH.format_user(query=query, today=today.isoformat())


def build_summary_prompt(query: str, answer: str) -> str:
    """Build the user prompt asking for a summary of an answer."""
    return SearchPrompts.SUMMARY.format_user(query=query, answer=answer)
