"""
Configuration module for Gemini Search.

Provides Pydantic-based settings management with YAML file support
and environment variable overrides.
"""

from gemini_search.config.settings import (
    Settings,
    EngineSettings,
    SearchSettings,
    LoggingSettings,
)
from gemini_search.config.loader import load_config, get_default_config_path

__all__ = [
    "Settings",
    "EngineSettings",
    "SearchSettings",
    "LoggingSettings",
    "load_config",
    "get_default_config_path",
]
