"""Changelog aggregation and the CHANGELOG.md document.

Closed issues become one bullet each; the bullets for a release form a
section headed ``## vX.Y.Z (YYYY-MM-DD)``. Sections are kept newest first:
a new one is always spliced directly below the document header, never
appended at the end, and everything already in the file is left untouched.
"""

from __future__ import annotations

from pathlib import Path

from loguru import logger

from .errors import ChangelogWriteError, TrackerError
from .models import ChangelogEntry
from .shell import step, warn
from .tracker import IssueTrackerClient

SKIP_LABEL = "skip-changelog"
HEADER = "# Changelog\n"
NO_CHANGES = "- No significant changes."


def aggregate(
    tracker: IssueTrackerClient,
    since: str | None = None,
    skip_label: str = SKIP_LABEL,
) -> list[ChangelogEntry]:
    """Collect changelog entries from issues closed since the last release.

    Issues labelled ``skip_label`` are left out. The tracker's ordering is
    kept as-is. A failed tracker query degrades to an empty changelog
    rather than stopping the release.

    Args:
        tracker: Source of closed issues.
        since: ISO 8601 lower bound on the close date. None means every
               closed issue is a candidate (first release).
        skip_label: Label that excludes an issue from the changelog.
    """
    step(f"Collecting issues closed since {since or 'the beginning'}")

    try:
        issues = tracker.list_closed_issues(since)
    except TrackerError as exc:
        warn(f"could not list closed issues, changelog will be empty ({exc})")
        return []

    entries: list[ChangelogEntry] = []
    for issue in issues:
        if skip_label in issue.labels:
            logger.debug("Skipping #{} ({})", issue.number, skip_label)
            continue
        entries.append(
            ChangelogEntry(
                issue_number=issue.number,
                title=issue.title,
                url=issue.url,
                labels=issue.labels,
            )
        )

    skipped = len(issues) - len(entries)
    print(f"  {len(entries)} entries ({skipped} skipped)")
    return entries


def render_entry(entry: ChangelogEntry) -> str:
    return f"- {entry.title} (#{entry.issue_number}) [Link]({entry.url})"


def render_lines(entries: list[ChangelogEntry]) -> list[str]:
    """Render entries as bullet lines, falling back to NO_CHANGES when empty."""
    if not entries:
        return [NO_CHANGES]
    return [render_entry(e) for e in entries]


def render_release_notes(
    lines: list[str], repo_url: str | None, previous: str | None, tag: str
) -> str:
    """Release body: the changelog lines plus a "Full Changelog" link.

    The link compares ``previous...tag``, or lists the commits of ``tag``
    on a first release. It is left out when the repository URL is unknown.
    """
    notes = "\n".join(lines)
    if not repo_url:
        return notes
    if previous:
        link = f"{repo_url}/compare/{previous}...{tag}"
    else:
        link = f"{repo_url}/commits/{tag}"
    return f"{notes}\n\n**Full Changelog**: {link}"


def render_section(version: str, date: str, lines: list[str]) -> str:
    """Build one changelog section.

    Example:
        ## v1.3.0 (2024-05-01)
        - Fix crash (#42) [Link](https://x/42)
    """
    body = "\n".join(lines)
    return f"## {version} ({date})\n{body}\n"


def splice_section(existing: str | None, section: str) -> str:
    """Insert ``section`` into a changelog document.

    The header is everything before the first ``## `` heading. It is kept
    verbatim (only completed with a trailing blank line if it lacks one),
    followed by the new section and then every older section unchanged.
    A document that starts directly with a section gets ``# Changelog``.

    Args:
        existing: Current document text, or None if there is no document.
        section: Rendered section from render_section().
    """
    if not existing or not existing.strip():
        return f"{HEADER}\n{section}"

    header, older = _split_header(existing)
    if not header.strip():
        header = HEADER
    if not header.endswith("\n"):
        header += "\n"
    if not header.endswith("\n\n"):
        header += "\n"

    if not older:
        return header + section
    return f"{header}{section}\n{older}"


def _split_header(text: str) -> tuple[str, str]:
    """Split a document into (header, sections) at the first ``## `` line."""
    offset = 0
    for line in text.splitlines(keepends=True):
        if line.startswith("## "):
            return text[:offset], text[offset:]
        offset += len(line)
    return text, ""


def write_changelog(path: Path, version: str, date: str, lines: list[str]) -> None:
    """Prepend a section for ``version`` to the changelog at ``path``.

    Creates the document (and its parent directory) if it does not exist.

    Raises:
        ChangelogWriteError: If the file cannot be read or written.
    """
    step(f"Updating {path}")

    section = render_section(version, date, lines)
    try:
        existing = path.read_text(encoding="utf-8") if path.exists() else None
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(splice_section(existing, section), encoding="utf-8")
    except OSError as exc:
        raise ChangelogWriteError(f"Failed to update {path}: {exc}") from exc

    print(f"  {'Added' if existing else 'Created'} section {version} ({date})")
