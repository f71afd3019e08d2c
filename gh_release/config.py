"""Project settings from pyproject.toml.

Settings live in the ``[tool.gh-release]`` table of the project's
pyproject.toml. Every key is optional; a missing file or table yields the
defaults. Keys use TOML-style hyphenated names (``changelog-file``).
"""

from __future__ import annotations

from pathlib import Path

import tomlkit
from pydantic import BaseModel, ConfigDict, Field
from pydantic import ValidationError as PydanticValidationError
from tomlkit.exceptions import TOMLKitError

from .errors import ConfigurationError

TOOL_TABLE = "gh-release"


def _hyphenate(name: str) -> str:
    return name.replace("_", "-")


class ReleaseSettings(BaseModel):
    """Settings for one repository.

    Attributes:
        changelog_file: Changelog path, relative to the project root.
        ready_label: Label marking open issues to close once released.
        skip_label: Label excluding a closed issue from the changelog.
        blocker_label: Label of open issues reported before publishing.
        draft: Create releases as drafts that need a manual publish.
        repo: "OWNER/NAME" passed to gh; inferred from git when unset.
        issue_limit: Maximum issues fetched per tracker list call.
    """

    model_config = ConfigDict(
        alias_generator=_hyphenate, populate_by_name=True, extra="forbid"
    )

    changelog_file: str = "CHANGELOG.md"
    ready_label: str = "fixed-in-next-release"
    skip_label: str = "skip-changelog"
    blocker_label: str = "release-blocker"
    draft: bool = True
    repo: str | None = None
    issue_limit: int = Field(default=500, gt=0)


def load_pyproject(path: Path) -> tomlkit.TOMLDocument:
    """Load and parse a pyproject.toml file."""
    return tomlkit.parse(path.read_text())


def get_tool_table(doc: tomlkit.TOMLDocument) -> dict:
    """Extract ``[tool.gh-release]`` as plain Python values ({} if absent)."""
    table = doc.unwrap().get("tool", {}).get(TOOL_TABLE, {})
    if not isinstance(table, dict):
        raise ConfigurationError(f"[tool.{TOOL_TABLE}] must be a table")
    return table


def load_settings(root: Path | None = None) -> ReleaseSettings:
    """Read settings for the project rooted at ``root`` (default: cwd).

    Raises:
        ConfigurationError: If pyproject.toml is not valid TOML, or the
            table has unknown keys or values of the wrong type.
    """
    root = root or Path.cwd()
    pyproject = root / "pyproject.toml"
    if not pyproject.exists():
        return ReleaseSettings()

    try:
        table = get_tool_table(load_pyproject(pyproject))
    except TOMLKitError as exc:
        raise ConfigurationError(f"Cannot parse {pyproject}: {exc}") from exc

    try:
        return ReleaseSettings.model_validate(table)
    except PydanticValidationError as exc:
        raise ConfigurationError(f"Invalid [tool.{TOOL_TABLE}] settings:\n{exc}") from exc
