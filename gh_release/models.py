"""Data models for gh-release.

These Pydantic models represent the core data structures used throughout
the release pipeline.
"""

from __future__ import annotations

from enum import Enum

import semver
from pydantic import BaseModel, ConfigDict, Field


class BumpKind(str, Enum):
    """Which version component a release increments."""

    MAJOR = "major"
    MINOR = "minor"
    PATCH = "patch"


class PrereleaseKind(str, Enum):
    """Pre-release channel appended to a computed version."""

    ALPHA = "alpha"
    BETA = "beta"


class Prerelease(BaseModel):
    """A requested pre-release suffix such as ``alpha.1``.

    Attributes:
        kind: The pre-release channel.
        tag: Free-form identifier appended after the channel (e.g. "1", "rc").
    """

    kind: PrereleaseKind
    tag: str

    @property
    def suffix(self) -> str:
        return f"{self.kind.value}.{self.tag}"


class Issue(BaseModel):
    """An issue as returned by the tracker.

    Attributes:
        number: Issue number within the repository.
        title: Issue title.
        url: Browser URL of the issue.
        labels: Names of all labels on the issue.
        milestone: Title of the milestone the issue belongs to, if any.
    """

    number: int
    title: str
    url: str = ""
    labels: set[str] = Field(default_factory=set)
    milestone: str | None = None


class ChangelogEntry(BaseModel):
    """One line of a changelog section, derived from a closed issue."""

    issue_number: int
    title: str
    url: str
    labels: set[str] = Field(default_factory=set)


class ReleaseRecord(BaseModel):
    """The release to create on the tracker.

    Attributes:
        tag: Git tag for the release, e.g. "v1.3.0" or "v1.3.0-beta.2".
        title: Human-readable release title.
        notes: Markdown body of the release.
        draft: Create the release unpublished, pending a manual publish.
        prerelease: Mark the release as a pre-release.
    """

    tag: str
    title: str
    notes: str
    draft: bool = True
    prerelease: bool = False


class ClosureResult(BaseModel):
    """Outcome of closing every issue tagged for the release.

    Attributes:
        closed: Issue numbers that were closed.
        failed: Issue numbers whose close call failed.
    """

    closed: list[int] = Field(default_factory=list)
    failed: list[int] = Field(default_factory=list)


class ReleaseOptions(BaseModel):
    """What the operator asked for on the command line."""

    bump: BumpKind = BumpKind.PATCH
    prerelease: Prerelease | None = None
    dry_run: bool = False


class PipelineState(str, Enum):
    RESOLVING_VERSION = "resolving_version"
    AGGREGATING_CHANGES = "aggregating_changes"
    DRY_RUN_REPORT = "dry_run_report"
    WRITING_CHANGELOG = "writing_changelog"
    GUARDING_MILESTONE = "guarding_milestone"
    PUBLISHING = "publishing"
    CLOSING_ISSUES = "closing_issues"
    DONE = "done"
    FAILED = "failed"


class PipelineContext(BaseModel):
    """Values threaded through the release stages.

    Each stage reads what earlier stages produced and fills in its own
    fields; nothing outside the context is shared between stages.
    """

    model_config = ConfigDict(arbitrary_types_allowed=True)

    options: ReleaseOptions
    state: PipelineState = PipelineState.RESOLVING_VERSION
    last_tag: str | None = None
    current: semver.Version | None = None
    next_version: semver.Version | None = None
    since: str | None = None
    entries: list[ChangelogEntry] = Field(default_factory=list)
    section: str = ""
    record: ReleaseRecord | None = None
    release_url: str | None = None
    milestone_issues: list[Issue] = Field(default_factory=list)
    blocker_issues: list[Issue] = Field(default_factory=list)
    closure: ClosureResult | None = None

    @property
    def tag(self) -> str:
        """Tag of the version being released ("" before it is computed)."""
        return f"v{self.next_version}" if self.next_version is not None else ""
