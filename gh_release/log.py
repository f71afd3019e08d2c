"""Logging setup.

Logging is off unless ENABLE_LOGGING=true. When on, loguru writes to a file
only; the console is reserved for the pipeline's own step output and
warnings, so enabling logs never changes what the operator sees.
"""

from __future__ import annotations

import os
from pathlib import Path

from loguru import logger

DEFAULT_LOG_FILE = "./logs/gh-release.log"
FILE_FORMAT = "[{time:YYYY-MM-DD HH:mm:ss}] [{level}] [{function}] {message}"

# Shell-style level names accepted in LOG_LEVEL
_LEVEL_ALIASES = {"WARN": "WARNING"}
_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR"}


def _normalize_level(level: str) -> str:
    name = level.strip().upper()
    name = _LEVEL_ALIASES.get(name, name)
    return name if name in _LEVELS else "INFO"


def configure_logging(
    enabled: bool | None = None,
    level: str | None = None,
    log_file: str | Path | None = None,
) -> Path | None:
    """Configure loguru from arguments or the environment.

    Args:
        enabled: Defaults to ENABLE_LOGGING == "true".
        level: Defaults to LOG_LEVEL, then INFO. Unknown levels fall back
               to INFO.
        log_file: Defaults to LOG_FILE, then ./logs/gh-release.log.

    Returns:
        Path of the log file, or None when logging is disabled.
    """
    if enabled is None:
        enabled = os.getenv("ENABLE_LOGGING", "false").strip().lower() == "true"

    # Drop loguru's default stderr handler
    logger.remove()
    if not enabled:
        return None

    level = _normalize_level(level or os.getenv("LOG_LEVEL", "INFO"))
    path = Path(log_file or os.getenv("LOG_FILE") or DEFAULT_LOG_FILE)
    path.parent.mkdir(parents=True, exist_ok=True)

    logger.add(str(path), format=FILE_FORMAT, level=level)
    logger.info("Logging initialized - Level: {}, File: {}", level, path)
    return path
