"""
Configuration loader with YAML file support and environment variable overrides.

Supports loading from:
1. Default values (defined in settings.py)
2. YAML configuration file
3. Environment variables (highest priority)

Environment variables use the pattern: GEMINI_SEARCH__{SECTION}__{KEY}
Example: GEMINI_SEARCH__SEARCH__WORKERS=5
"""

import os
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from gemini_search.config.settings import Settings
from gemini_search.core.exceptions import ConfigurationError


def _deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """
    Deep merge two dictionaries, with override taking precedence.

    Args:
        base: Base dictionary to merge into
        override: Dictionary with values to override

    Returns:
        Merged dictionary with override values taking precedence
    """
    result = base.copy()

    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = _deep_merge(result[key], value)
        else:
            result[key] = value

    return result


def _parse_env_value(value: str) -> Any:
    """
    Parse environment variable string into appropriate Python type.

    Args:
        value: String value from environment variable

    Returns:
        Parsed value (bool, int, float, or string)
    """
    # Handle booleans
    if value.lower() in ("true", "yes", "on"):
        return True
    if value.lower() in ("false", "no", "off"):
        return False

    # Handle None
    if value.lower() in ("none", "null", ""):
        return None

    # Try integer
    try:
        return int(value)
    except ValueError:
        pass

    # Try float
    try:
        return float(value)
    except ValueError:
        pass

    return value


def _load_env_overrides(prefix: str = "GEMINI_SEARCH") -> dict[str, Any]:
    """
    Load configuration overrides from environment variables.

    Environment variables should follow the pattern:
    {PREFIX}__{SECTION}__{KEY}

    For example:
    - GEMINI_SEARCH__SEARCH__WORKERS=5
    - GEMINI_SEARCH__ENGINE__MODEL_NAME=gemini-2.5-pro

    Args:
        prefix: Environment variable prefix to look for

    Returns:
        Dictionary of configuration overrides
    """
    overrides: dict[str, Any] = {}
    prefix_with_sep = f"{prefix}__"

    for key, value in os.environ.items():
        if not key.startswith(prefix_with_sep):
            continue

        key_path = key[len(prefix_with_sep):].lower().split("__")

        if len(key_path) < 2:
            continue

        # Build nested dictionary
        current = overrides
        for part in key_path[:-1]:
            if part not in current:
                current[part] = {}
            current = current[part]

        current[key_path[-1]] = _parse_env_value(value)

    return overrides


def _load_yaml_file(path: Path) -> dict[str, Any]:
    """
    Load configuration from a YAML file.

    Args:
        path: Path to the YAML configuration file

    Returns:
        Dictionary of configuration values

    Raises:
        ConfigurationError: If the file is missing, invalid YAML, or not a mapping
    """
    if not path.exists():
        raise ConfigurationError(
            "Configuration file not found", details={"path": str(path)})

    try:
        with open(path, "r", encoding="utf-8") as f:
            content = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigurationError(
            f"Invalid YAML in configuration file: {e}",
            details={"path": str(path)},
        ) from e

    # Handle empty files
    if content is None:
        return {}

    if not isinstance(content, dict):
        raise ConfigurationError(
            f"Configuration file must contain a mapping, got: {type(content).__name__}",
            details={"path": str(path)},
        )

    return content


def load_config(
    config_path: Path | str | None = None,
    env_prefix: str = "GEMINI_SEARCH",
) -> Settings:
    """
    Load configuration from YAML file with environment variable overrides.

    Priority (highest to lowest):
    1. Environment variables
    2. YAML configuration file
    3. Default values

    Args:
        config_path: Path to YAML configuration file. If None, uses defaults only.
        env_prefix: Prefix for environment variables

    Returns:
        Validated Settings instance

    Raises:
        ConfigurationError: If the file cannot be read or values are invalid
    """
    config_data: dict[str, Any] = {}

    if config_path is not None:
        path = Path(config_path) if isinstance(
            config_path, str) else config_path
        config_data = _deep_merge(config_data, _load_yaml_file(path))

    config_data = _deep_merge(config_data, _load_env_overrides(env_prefix))

    try:
        return Settings(**config_data)
    except ValidationError as e:
        raise ConfigurationError(f"Invalid configuration: {e}") from e


def get_default_config_path() -> Path | None:
    """
    Find the default configuration file path.

    Searches for a configuration file in:
    1. Current working directory (gemini-search.yaml)
    2. User's home directory (~/.gemini_search/config.yaml)

    Returns:
        Path to configuration file if found, None otherwise
    """
    search_paths = [
        Path.cwd() / "gemini-search.yaml",
        Path.home() / ".gemini_search" / "config.yaml",
    ]

    for path in search_paths:
        if path.exists():
            return path

    return None
