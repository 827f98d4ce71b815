"""
CLI module for Gemini Search.

Provides the command-line interface using Typer:
- Single query, optionally streamed
- Multiple concurrent queries (-q, repeatable)
- Text or JSON output
"""

from gemini_search.cli.main import app

__all__ = ["app"]
