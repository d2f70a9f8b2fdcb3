"""Configuration resolution with XDG paths and precedence handling.

This module handles the (small) persistent configuration of specgraph:

* **Directory layout** -- XDG Base Directory compliant on Linux/BSD,
  ``~/.specgraph/`` on macOS and Windows. Only the data directory is used,
  for crash logs. See :func:`get_data_dir`.
* **Project config** -- an optional ``./specgraph.json`` pinning path
  selection and output preferences for a repository.
* **Precedence resolution** -- :func:`resolve_config` merges CLI flags,
  environment variables and the project file into one
  :class:`~specgraph.models.AnalysisConfig`.
"""

from __future__ import annotations

import json
import logging
import os
import platform
from pathlib import Path
from typing import Any, Optional

from specgraph.exceptions import ConfigError
from specgraph.models import AnalysisConfig

_APP_NAME = "specgraph"
_PROJECT_CONFIG_FILENAME = "specgraph.json"

ENV_LOG_LEVEL = "SPECGRAPH_LOG_LEVEL"
ENV_FORMAT = "SPECGRAPH_FORMAT"
ENV_INCLUDE_PREFIX = "SPECGRAPH_INCLUDE_PREFIX"

_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")
_FORMATS = ("auto", "json", "plain", "rich")


# --- XDG path resolution ---


def _is_xdg_platform() -> bool:
    """Return True if the platform supports XDG Base Directory spec (Linux/FreeBSD)."""
    return platform.system() == "Linux" or platform.system().endswith("BSD")


def get_data_dir() -> Path:
    """Return the data directory (crash logs), creating it if necessary.

    On Linux/BSD: ``$XDG_DATA_HOME/specgraph/`` (default ``~/.local/share/specgraph/``).
    On macOS/Windows: ``~/.specgraph/``.
    """
    if _is_xdg_platform():
        env_value = os.environ.get("XDG_DATA_HOME", "")
        base = Path(env_value) if env_value else Path.home() / ".local" / "share"
        path = base / _APP_NAME
    else:
        path = Path.home() / f".{_APP_NAME}"
    path.mkdir(parents=True, exist_ok=True)
    return path


# --- Project-local config ---


def load_project_config(directory: Optional[Path] = None) -> Optional[dict[str, Any]]:
    """Load project-local configuration from ``specgraph.json``.

    Args:
        directory: Where to look; the current working directory by default.

    Returns:
        The parsed JSON as a dict, or ``None`` if the file does not exist.

    Raises:
        ConfigError: If the file exists but is not a JSON object.
    """
    path = (directory or Path.cwd()) / _PROJECT_CONFIG_FILENAME
    if not path.is_file():
        return None
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (json.JSONDecodeError, OSError) as exc:
        raise ConfigError(f"Invalid project config at {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise ConfigError(f"Invalid project config at {path}: expected a JSON object")
    return data


# --- Precedence resolution ---


def resolve_config(
    cli_log_level: Optional[str] = None,
    cli_format: Optional[str] = None,
    cli_include_prefix: Optional[list[str]] = None,
    directory: Optional[Path] = None,
) -> AnalysisConfig:
    """Resolve the analysis config with its full precedence chain.

    Precedence (high to low):
        1. CLI flags (``cli_log_level``, ``cli_format``, ``cli_include_prefix``)
        2. Environment variables (``SPECGRAPH_LOG_LEVEL``, ``SPECGRAPH_FORMAT``,
           ``SPECGRAPH_INCLUDE_PREFIX`` as a comma-separated list)
        3. Project config (``./specgraph.json``)
        4. Defaults

    Raises:
        ConfigError: If the project file is invalid or a value is unknown.
    """
    values: dict[str, Any] = {}

    # 3. Project-local config
    project = load_project_config(directory)
    if project is not None:
        values.update(project)

    # 2. Environment variables
    env_level = os.environ.get(ENV_LOG_LEVEL)
    if env_level:
        values["log_level"] = env_level
    env_format = os.environ.get(ENV_FORMAT)
    if env_format:
        values["output_format"] = env_format
    env_prefix = os.environ.get(ENV_INCLUDE_PREFIX)
    if env_prefix:
        values["include_prefix"] = [p.strip() for p in env_prefix.split(",") if p.strip()]

    # 1. CLI flags (highest precedence)
    if cli_log_level is not None:
        values["log_level"] = cli_log_level
    if cli_format is not None:
        values["output_format"] = cli_format
    if cli_include_prefix:
        values["include_prefix"] = list(cli_include_prefix)

    try:
        config = AnalysisConfig.model_validate(values)
    except ValueError as exc:
        raise ConfigError(f"Invalid configuration: {exc}") from exc

    level = config.log_level.upper()
    if level not in _LOG_LEVELS:
        raise ConfigError(
            f"Unknown log level '{config.log_level}', expected one of {', '.join(_LOG_LEVELS)}"
        )
    if config.output_format not in _FORMATS:
        raise ConfigError(
            f"Unknown output format '{config.output_format}', expected one of {', '.join(_FORMATS)}"
        )
    return config.model_copy(update={"log_level": level})


def configure_logging(level: str) -> None:
    """Send log records at *level* and above to stderr.

    Called once by the CLI; library users configure logging themselves.
    """
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.WARNING),
        format="[%(levelname)s] %(name)s: %(message)s",
        force=True,
    )
