"""Exception types for the release pipeline.

Everything raised on purpose derives from ReleaseError so the CLI can turn
it into a single ``ERROR: ...`` line and exit code 1. Recoverable
conditions (a missing release date, a failed issue closure) are never
raised past the stage that hit them.
"""

from __future__ import annotations


class ReleaseError(Exception):
    """Base class for fatal release pipeline errors."""


class ConfigurationError(ReleaseError):
    """A version tag or a settings value is malformed."""


class TrackerError(ReleaseError):
    """A call to the issue tracker failed.

    Attributes:
        stderr: Captured error output from the tracker command, if any.
    """

    def __init__(self, message: str, stderr: str = "") -> None:
        super().__init__(message)
        self.stderr = stderr

    def __str__(self) -> str:
        base = super().__str__()
        detail = self.stderr.strip()
        return f"{base}: {detail}" if detail else base


class PublishError(ReleaseError):
    """The release record could not be created."""


class ChangelogWriteError(ReleaseError):
    """The changelog document could not be read or written."""
