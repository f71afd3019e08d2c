"""Shell and gh utilities.

Provides a simple wrapper around the GitHub CLI, plus output formatting
helpers shared by the pipeline stages.
"""

from __future__ import annotations

import subprocess
import sys

from loguru import logger


def gh(*args: str, check: bool = True) -> str:
    """Run a gh command and return stdout.

    Args:
        *args: Arguments to pass to gh (e.g., "release", "list").
        check: If True (default), raise on non-zero exit.

    Returns:
        Stripped stdout from the gh command.

    Raises:
        subprocess.CalledProcessError: If check is True and gh fails.
        FileNotFoundError: If the gh binary is not installed.
    """
    logger.debug("gh {}", " ".join(args))
    result = subprocess.run(["gh", *args], capture_output=True, text=True, check=check)
    return result.stdout.strip()


def step(msg: str) -> None:
    """Print a visually distinct step header.

    Used to separate major phases of the release pipeline in terminal output.
    """
    print(f"\n{'─' * 60}\n{msg}\n{'─' * 60}")
    logger.info(msg)


def warn(msg: str) -> None:
    """Report a recoverable problem without stopping the pipeline."""
    print(f"  Warning: {msg}", file=sys.stderr)
    logger.warning(msg)


def fatal(msg: str) -> None:
    """Print an error message and exit with code 1.

    Use for unrecoverable errors that should halt the pipeline.
    """
    logger.error(msg)
    print(f"ERROR: {msg}", file=sys.stderr)
    sys.exit(1)
