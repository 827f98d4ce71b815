"""
Pydantic settings models for Gemini Search.

All configuration is defined here with defaults matching the
interactive CLI: three workers, a 180 second batch deadline and
two attempts per engine call.
"""

from pathlib import Path
from typing import Literal

from pydantic import BaseModel, Field, field_validator

from gemini_search.llm.base import ToolCapability
from gemini_search.llm.prompt_templates import (
    SEARCH_SYSTEM_INSTRUCTION,
    SUMMARY_SYSTEM_INSTRUCTION,
)


class EngineSettings(BaseModel):
    """Gemini answer engine configuration."""

    model_name: str = Field(
        default="gemini-2.5-flash",
        description="Gemini model identifier",
    )
    api_key_env_var: str = Field(
        default="GEMINI_API_KEY",
        description="Environment variable name containing the API key",
    )
    thinking_budget: int = Field(
        default=512,
        ge=0,
        le=24576,
        description="Thinking token budget passed with every request",
    )
    google_search: bool = Field(
        default=True,
        description="Enable the Google Search tool for search queries",
    )
    url_context: bool = Field(
        default=True,
        description="Enable the URL context tool for search queries",
    )

    model_config = {"frozen": True}

    @property
    def tools(self) -> tuple[ToolCapability, ...]:
        """Tool capabilities enabled for search requests."""
        tools = []
        if self.google_search:
            tools.append(ToolCapability.WEB_SEARCH)
        if self.url_context:
            tools.append(ToolCapability.URL_CONTEXT)
        return tuple(tools)


class SearchSettings(BaseModel):
    """Query execution configuration."""

    workers: int = Field(
        default=3,
        ge=1,
        le=5,
        description="Maximum queries executed concurrently",
    )
    timeout_seconds: float = Field(
        default=180.0,
        gt=0,
        le=3600,
        description="Deadline for a whole multi-query batch",
    )
    max_attempts: int = Field(
        default=2,
        ge=1,
        le=5,
        description="Attempts per engine call",
    )
    retry_delay_seconds: float = Field(
        default=3.0,
        ge=0.0,
        le=60.0,
        description="Fixed delay between attempts",
    )
    system_instruction: str = Field(
        default=SEARCH_SYSTEM_INSTRUCTION,
        min_length=1,
        description="System instruction for search requests",
    )
    summary_instruction: str = Field(
        default=SUMMARY_SYSTEM_INSTRUCTION,
        min_length=1,
        description="System instruction for summary requests",
    )

    model_config = {"frozen": True}


class LoggingSettings(BaseModel):
    """Logging configuration."""

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="ERROR",
        description="Minimum logging level",
    )
    format: str = Field(
        default="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
        description="Log message format string",
    )
    date_format: str = Field(
        default="%Y-%m-%d %H:%M:%S",
        description="Date format for log timestamps",
    )
    file_path: Path | None = Field(
        default=None,
        description="Path to log file. None means console only.",
    )
    max_file_size_mb: int = Field(
        default=10,
        ge=1,
        le=100,
        description="Maximum log file size before rotation",
    )
    backup_count: int = Field(
        default=3,
        ge=0,
        le=10,
        description="Number of backup log files to keep",
    )
    log_to_console: bool = Field(
        default=True,
        description="Whether to output logs to stderr",
    )

    @field_validator("file_path", mode="before")
    @classmethod
    def convert_file_path(cls, v: str | Path | None) -> Path | None:
        """Convert string paths to Path objects."""
        if v is None:
            return None
        return Path(v) if isinstance(v, str) else v


class Settings(BaseModel):
    """
    Root configuration model containing all subsystem settings.

    Settings are loaded from YAML with environment variable overrides.
    """

    engine: EngineSettings = Field(
        default_factory=EngineSettings,
        description="Answer engine settings",
    )
    search: SearchSettings = Field(
        default_factory=SearchSettings,
        description="Query execution settings",
    )
    logging: LoggingSettings = Field(
        default_factory=LoggingSettings,
        description="Logging configuration",
    )

    model_config = {
        "extra": "forbid",
        "validate_default": True,
    }
