"""
Main CLI application for Gemini Search.

Runs one query (optionally streamed) or several queries concurrently
and prints the answers as text or JSON.
"""

import asyncio
import re
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional

import typer
from pydantic import ValidationError
from rich.console import Console
from rich.markup import escape

from gemini_search import __version__
from gemini_search.config import Settings, load_config, get_default_config_path
from gemini_search.config.settings import SearchSettings
from gemini_search.core.exceptions import ConfigurationError, EngineInitializationError
from gemini_search.llm.base import AnswerEngine
from gemini_search.output import (
    render_batch_json,
    render_batch_text,
    render_failure_line,
    render_outcome_json,
    render_outcome_text,
    render_summary_block,
)
from gemini_search.query_executor import (
    BatchOrchestrator,
    MAX_WORKERS,
    MIN_WORKERS,
    QueryExecutor,
    Summarizer,
)
from gemini_search.utils.logging import setup_logging, get_logger
from gemini_search.utils.metrics import Metrics

app = typer.Typer(
    name="gemini-search",
    help="A CLI search engine powered by Gemini with Google Search grounding",
    add_completion=False,
)

# Result bodies bypass rendering and go to console.file unchanged
console = Console(highlight=False, markup=False, emoji=False, soft_wrap=True)
err_console = Console(stderr=True, highlight=False, soft_wrap=True)
logger = get_logger(__name__)

_DURATION_PART = re.compile(r"(\d+(?:\.\d+)?)(ms|s|m|h)")
_DURATION_UNITS = {"ms": 0.001, "s": 1.0, "m": 60.0, "h": 3600.0}


@dataclass(frozen=True)
class RunOptions:
    """Validated command-line options for one invocation."""

    queries: tuple[str, ...]
    single: bool
    output_json: bool
    stream: bool
    include_summary: bool
    verbose: bool


def parse_duration(value: str) -> float:
    """
    Parse a duration such as "180", "90s", "2m" or "1m30s" into seconds.

    Raises:
        ConfigurationError: If the value is not a positive duration
    """
    text = value.strip().lower()
    try:
        seconds = float(text)
    except ValueError:
        parts = _DURATION_PART.findall(text)
        if not parts or "".join(n + u for n, u in parts) != text:
            raise ConfigurationError(
                f"invalid duration: {value!r} (use e.g. 90s, 2m, 1m30s)")
        seconds = sum(float(n) * _DURATION_UNITS[u] for n, u in parts)

    if seconds <= 0:
        raise ConfigurationError(f"timeout must be positive: {value!r}")
    return seconds


def validate_options(
    query_arg: Optional[str],
    query: Optional[str],
    queries: Optional[List[str]],
    output_json: bool,
    stream: bool,
    include_summary: Optional[bool],
    verbose: bool,
) -> RunOptions:
    """
    Check query inputs and mode flags before any network activity.

    A single -q with --stream takes the single-query path; otherwise -q
    always takes the batch path.

    Raises:
        ConfigurationError: On missing, empty or conflicting inputs
    """
    multi = list(queries or [])

    if query is not None and multi:
        raise ConfigurationError("cannot use both --query and -q simultaneously")
    if query_arg is not None and (query is not None or multi):
        raise ConfigurationError(
            "cannot combine a positional query with --query or -q")

    single_query = query if query is not None else query_arg
    if single_query is None and not multi:
        raise ConfigurationError(
            "search query is required (use --query, -q, or a positional argument)")

    all_queries = [single_query] if single_query is not None else multi
    if any(not q.strip() for q in all_queries):
        raise ConfigurationError("search queries must not be empty")

    if stream and len(all_queries) > 1:
        raise ConfigurationError(
            "streaming mode is not supported for multiple queries (use single query only)")
    if stream and output_json:
        raise ConfigurationError("--stream cannot be combined with --json")

    if include_summary is None:
        # Summaries default on only when several queries run together
        include_summary = len(all_queries) > 1

    return RunOptions(
        queries=tuple(all_queries),
        single=single_query is not None or stream,
        output_json=output_json,
        stream=stream,
        include_summary=include_summary,
        verbose=verbose,
    )


def resolve_settings(
    config_file: Optional[Path],
    workers: Optional[int],
    timeout: Optional[str],
) -> Settings:
    """
    Load settings and apply command-line overrides.

    Raises:
        ConfigurationError: On unreadable files or out-of-range values
    """
    settings = load_config(config_file or get_default_config_path())

    overrides: dict = {}
    if workers is not None:
        if not MIN_WORKERS <= workers <= MAX_WORKERS:
            raise ConfigurationError(
                f"workers must be between {MIN_WORKERS} and {MAX_WORKERS}")
        overrides["workers"] = workers
    if timeout is not None:
        overrides["timeout_seconds"] = parse_duration(timeout)

    if not overrides:
        return settings

    try:
        search = SearchSettings(**{**settings.search.model_dump(), **overrides})
    except ValidationError as e:
        raise ConfigurationError(f"Invalid command-line override: {e}") from e
    return settings.model_copy(update={"search": search})


def create_engine(settings: Settings) -> AnswerEngine:
    """Create the Gemini answer engine."""
    from gemini_search.llm.gemini import GeminiAnswerEngine

    return GeminiAnswerEngine.from_settings(settings)


def _echo(text: str) -> None:
    """Write result text to stdout exactly as produced."""
    console.file.write(text)
    console.file.flush()


async def run_single(options: RunOptions, settings: Settings, engine: AnswerEngine) -> int:
    """Run one query and print it. Returns the exit status."""
    query = options.queries[0]
    executor = QueryExecutor.from_settings(settings, engine)

    if options.stream:
        outcome = await executor.execute_streaming(query, echo=_echo)
    else:
        outcome = await executor.execute(query)

    if not outcome.success:
        if options.output_json:
            _echo(render_outcome_json(outcome))
        err_console.print(render_failure_line(outcome), markup=False)
        return 1

    if options.include_summary:
        summarizer = Summarizer.from_settings(settings, engine)
        summary = await summarizer.summarize_or_sentinel(query, outcome.answer_text)
        outcome = outcome.with_summary(summary)

    if options.output_json:
        _echo(render_outcome_json(outcome))
    elif options.stream:
        # The answer is already on screen
        if outcome.summary_text:
            _echo("\n" + render_summary_block(outcome.summary_text))
    else:
        _echo(render_outcome_text(outcome))

    return 0


async def run_batch(options: RunOptions, settings: Settings, engine: AnswerEngine) -> int:
    """Run several queries concurrently and print them. Returns the exit status."""
    orchestrator = BatchOrchestrator.from_settings(
        settings, engine, verbose=options.verbose)

    batch = await orchestrator.run_batch(
        list(options.queries),
        worker_limit=settings.search.workers,
        total_timeout=settings.search.timeout_seconds,
        include_summary=options.include_summary,
    )

    if options.output_json:
        _echo(render_batch_json(batch))
    else:
        _echo(render_batch_text(
            batch,
            stream=options.stream,
            include_summary=options.include_summary,
        ))

    if not batch.all_succeeded:
        logger.error(batch.failure_summary)
        return 1
    return 0


def version_callback(value: bool) -> None:
    """Show version and exit."""
    if value:
        console.print(f"gemini-search v{__version__}")
        raise typer.Exit()


@app.command()
def search(
    query_arg: Optional[str] = typer.Argument(
        None,
        metavar="[QUERY]",
        help="Search query (flags must come before it)",
        show_default=False,
    ),
    query: Optional[str] = typer.Option(
        None,
        "--query",
        help="Single search query",
    ),
    queries: Optional[List[str]] = typer.Option(
        None,
        "-q",
        help="Search query (can be repeated)",
    ),
    output_json: bool = typer.Option(
        False,
        "--json",
        help="Output in JSON format",
    ),
    stream: bool = typer.Option(
        False,
        "--stream",
        help="Stream the answer as it is generated (single query only)",
    ),
    include_summary: Optional[bool] = typer.Option(
        None,
        "--include-summary/--no-include-summary",
        help="Include AI-generated summaries (default: off for one query, on for several)",
        show_default=False,
    ),
    workers: Optional[int] = typer.Option(
        None,
        "--workers",
        "-w",
        help="Max concurrent queries (1-5) [default: 3]",
    ),
    timeout: Optional[str] = typer.Option(
        None,
        "--timeout",
        "-t",
        help="Total operation timeout, e.g. 180s, 2m [default: 180s]",
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Enable verbose logging",
    ),
    config_file: Optional[Path] = typer.Option(
        None,
        "--config",
        "-c",
        help="Path to configuration file",
        dir_okay=False,
    ),
    version: bool = typer.Option(
        False,
        "--version",
        callback=version_callback,
        is_eager=True,
        help="Show version and exit",
    ),
) -> None:
    """
    Search the web with Gemini and print the answers.

    Examples:
        gemini-search "What is Go programming?"
        gemini-search --include-summary "What is Go programming?"
        gemini-search -q Go -q Python -q Rust
        gemini-search -q Go -q Python --no-include-summary
        gemini-search --stream "What is Go programming?"
    """
    try:
        options = validate_options(
            query_arg=query_arg,
            query=query,
            queries=queries,
            output_json=output_json,
            stream=stream,
            include_summary=include_summary,
            verbose=verbose,
        )
        settings = resolve_settings(config_file, workers, timeout)
    except ConfigurationError as e:
        err_console.print(f"[red]Error:[/red] Configuration validation failed: {escape(str(e))}")
        raise typer.Exit(1)

    setup_logging(settings.logging, verbose=verbose)

    try:
        engine = create_engine(settings)
    except EngineInitializationError as e:
        logger.error(f"Failed to initialize client: {e}")
        err_console.print(
            f"[red]Error:[/red] Failed to initialize client: {escape(str(e))}")
        raise typer.Exit(1)

    runner = run_single if options.single else run_batch
    try:
        exit_code = asyncio.run(runner(options, settings, engine))
    except KeyboardInterrupt:
        err_console.print("\n[yellow]Search cancelled by user[/yellow]")
        raise typer.Exit(130)

    if verbose:
        logger.info(f"Run metrics: {Metrics.get().snapshot()}")

    raise typer.Exit(exit_code)


if __name__ == "__main__":
    app()
