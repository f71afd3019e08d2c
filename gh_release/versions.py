"""Version parsing and bumping utilities.

Handles conversion between release tags and semver objects. Tags may carry
a leading "v" and a pre-release suffix ("v1.2.3-beta.1"); anything else is
rejected, since every later stage depends on the computed version.
"""

from __future__ import annotations

import re

import semver

from .errors import ConfigurationError
from .models import BumpKind, Prerelease
from .shell import step
from .tracker import IssueTrackerClient

_TAG_RE = re.compile(r"^v?(\d+)\.(\d+)\.(\d+)(?:-([0-9A-Za-z][0-9A-Za-z.-]*))?$")

INITIAL_VERSION = semver.Version(0, 0, 0)


def parse_tag(tag: str) -> semver.Version:
    """Parse a release tag into a semver.Version.

    Examples:
        "v1.2.3" → 1.2.3
        "1.2.3-alpha.1" → 1.2.3-alpha.1

    Raises:
        ConfigurationError: If the tag is not MAJOR.MINOR.PATCH(-suffix)?.
    """
    m = _TAG_RE.match(tag.strip())
    if m is None:
        raise ConfigurationError(f"Invalid version tag: {tag!r}")
    major, minor, patch, pre = m.groups()
    return semver.Version(int(major), int(minor), int(patch), prerelease=pre)


def format_tag(version: semver.Version) -> str:
    return f"v{version}"


def find_last_release(tracker: IssueTrackerClient) -> tuple[str | None, semver.Version]:
    """Find the most recent published release tag and its version.

    Returns (None, 0.0.0) if the repository has no releases yet; that is
    the normal starting point, not an error.

    Raises:
        ConfigurationError: If the latest tag is not a semantic version.
        TrackerError: If the release list cannot be fetched.
    """
    step("Resolving current version")
    tag = tracker.get_latest_release_tag()
    if tag is None:
        print(f"  <none, starting from {INITIAL_VERSION}>")
        return None, INITIAL_VERSION
    version = parse_tag(tag)
    print(f"  {tag}")
    return tag, version


def resolve_current(tracker: IssueTrackerClient) -> semver.Version:
    """Version of the most recent published release (0.0.0 if none)."""
    return find_last_release(tracker)[1]


def compute_next(
    current: semver.Version,
    bump: BumpKind,
    prerelease: Prerelease | None = None,
) -> semver.Version:
    """Compute the next version.

    The bumped component is incremented and every less significant one is
    reset to zero. Any pre-release on ``current`` is dropped; the requested
    ``prerelease`` suffix is appended afterwards.

    Examples:
        1.2.3 + minor → 1.3.0
        1.2.3 + major, alpha/1 → 2.0.0-alpha.1
    """
    if bump is BumpKind.MAJOR:
        nxt = current.bump_major()
    elif bump is BumpKind.MINOR:
        nxt = current.bump_minor()
    elif bump is BumpKind.PATCH:
        nxt = current.bump_patch()
    else:
        raise AssertionError(f"unexpected bump kind: {bump}")

    if prerelease is not None:
        nxt = nxt.replace(prerelease=prerelease.suffix)
    return nxt
