"""Release pipeline: resolve → changelog → guard → publish → close.

This module orchestrates the gh-release process:
1. Resolve the current version from the latest release and compute the next
2. Collect issues closed since that release into changelog entries
3. (dry run) Print the version and changelog section, then stop
4. Prepend the section to CHANGELOG.md
5. Warn about open issues still in the version's milestone, and open
   release blockers
6. Create the release on GitHub (a draft by default)
7. Close every open issue labelled as ready for release

Steps 1 and 6 are the only fatal ones besides a failed changelog write.
The release is created before any issue is closed, so a failed publish
leaves the tracker untouched, and a failed closure never undoes a release.
"""

from __future__ import annotations

from datetime import date
from pathlib import Path

from loguru import logger

from .changelog import (
    aggregate,
    render_lines,
    render_release_notes,
    render_section,
    write_changelog,
)
from .config import ReleaseSettings
from .errors import PublishError, ReleaseError, TrackerError
from .models import (
    ClosureResult,
    Issue,
    PipelineContext,
    PipelineState,
    ReleaseOptions,
    ReleaseRecord,
)
from .shell import step, warn
from .tracker import IssueTrackerClient
from .versions import compute_next, find_last_release, format_tag


def find_last_release_date(tracker: IssueTrackerClient, tag: str | None) -> str | None:
    """Return when the release ``tag`` was created, as an ISO 8601 string.

    Returns None when there is no previous release, or when the lookup
    fails; in the latter case every closed issue ends up in the changelog.
    """
    if tag is None:
        return None
    try:
        return tracker.get_release_created_at(tag)
    except TrackerError as exc:
        warn(f"could not read creation date of {tag}, using all closed issues ({exc})")
        return None


def check_milestone(tracker: IssueTrackerClient, version_name: str) -> list[Issue]:
    """List open issues still assigned to the milestone for ``version_name``.

    A milestone matches when its title equals the tag ("v1.3.0") or the
    bare version ("1.3.0"). This is informational only: the release goes
    ahead regardless, and a failed lookup just yields an empty list.
    """
    step(f"Checking milestone {version_name}")

    pending: dict[int, Issue] = {}
    for name in dict.fromkeys([version_name, version_name.removeprefix("v")]):
        try:
            issues = tracker.list_open_issues(milestone=name)
        except TrackerError as exc:
            warn(f"could not check milestone {name} ({exc})")
            continue
        for issue in issues:
            pending.setdefault(issue.number, issue)

    if not pending:
        print("  No open issues in milestone")
        return []

    warn(f"{len(pending)} open issue(s) in milestone {version_name}:")
    for issue in pending.values():
        print(f"    #{issue.number} {issue.title}")
    return list(pending.values())


def check_release_blockers(tracker: IssueTrackerClient, label: str) -> list[Issue]:
    """List open issues labelled ``label``. Warns only, never raises."""
    step(f"Checking for open '{label}' issues")

    try:
        blockers = tracker.list_open_issues(label)
    except TrackerError as exc:
        warn(f"could not list '{label}' issues ({exc})")
        return []

    if not blockers:
        print("  No release blockers")
        return []

    warn(f"{len(blockers)} open '{label}' issue(s):")
    for issue in blockers:
        print(f"    #{issue.number} {issue.title}")
    return blockers


def build_release_notes(
    tracker: IssueTrackerClient, lines: list[str], previous: str | None, tag: str
) -> str:
    """Release body with a "Full Changelog" link when the repo URL is known."""
    try:
        repo_url = tracker.get_repo_url()
    except TrackerError as exc:
        warn(f"could not read repository URL, omitting changelog link ({exc})")
        repo_url = None
    return render_release_notes(lines, repo_url, previous, tag)


def publish_release(tracker: IssueTrackerClient, record: ReleaseRecord) -> str:
    """Create the release on the tracker and return its URL.

    Raises:
        PublishError: If the release cannot be created. Nothing downstream
            (issue closing) may run after this.
    """
    kind = "draft " if record.draft else ""
    kind += "pre-release" if record.prerelease else "release"
    step(f"Creating {kind} {record.tag}")

    try:
        url = tracker.create_release(
            record.tag,
            record.title,
            record.notes,
            draft=record.draft,
            prerelease=record.prerelease,
        )
    except TrackerError as exc:
        raise PublishError(f"Failed to create release {record.tag}: {exc}") from exc

    print(f"  {url}")
    if record.draft:
        print("  Draft created; publish it manually once reviewed.")
    return url


def close_tagged_issues(
    tracker: IssueTrackerClient, label: str, tag: str
) -> ClosureResult:
    """Close every open issue carrying ``label``.

    Issues are closed one at a time. A failure on one issue is reported and
    recorded, then the next is attempted; this function never raises, even
    when every closure fails, because the release itself already exists.
    """
    step(f"Closing issues labelled '{label}'")

    result = ClosureResult()
    try:
        issues = tracker.list_open_issues(label)
    except TrackerError as exc:
        warn(f"could not list issues labelled '{label}' ({exc})")
        return result

    if not issues:
        print("  No issues to close")
        return result

    comment = f"This issue has been released in {tag}."
    for issue in issues:
        try:
            tracker.close_issue(issue.number, comment=comment)
        except TrackerError as exc:
            warn(f"failed to close #{issue.number} ({exc})")
            result.failed.append(issue.number)
            continue
        print(f"  Closed #{issue.number} {issue.title}")
        result.closed.append(issue.number)

    print(f"  {len(result.closed)} closed, {len(result.failed)} failed")
    return result


def report_dry_run(ctx: PipelineContext) -> None:
    step("Dry run: no changes made")
    print(f"  Current version: {format_tag(ctx.current)}")
    print(f"  Next version:    {ctx.tag}")
    print()
    print(ctx.section)


def run_release(
    options: ReleaseOptions,
    tracker: IssueTrackerClient,
    settings: ReleaseSettings | None = None,
    *,
    root: Path | None = None,
    today: date | None = None,
) -> PipelineContext:
    """Execute the full release pipeline.

    Args:
        options: Bump kind, optional pre-release and dry-run flag.
        tracker: Issue tracker to read from and publish to.
        settings: Project settings; defaults when None.
        root: Project root the changelog path is relative to (default: cwd).
        today: Release date for the changelog section (default: today).

    Returns:
        The final pipeline context, in state DONE or DRY_RUN_REPORT.

    Raises:
        ReleaseError: On any fatal error; ctx.state is FAILED at that point.
    """
    settings = settings or ReleaseSettings()
    root = root or Path.cwd()
    release_date = (today or date.today()).isoformat()
    ctx = PipelineContext(options=options)

    try:
        # Phase 1: Version
        ctx.state = PipelineState.RESOLVING_VERSION
        ctx.last_tag, ctx.current = find_last_release(tracker)
        ctx.next_version = compute_next(ctx.current, options.bump, options.prerelease)
        print(f"  Next version: {ctx.tag} ({options.bump.value})")

        # Phase 2: Changelog
        ctx.state = PipelineState.AGGREGATING_CHANGES
        ctx.since = find_last_release_date(tracker, ctx.last_tag)
        ctx.entries = aggregate(tracker, ctx.since, skip_label=settings.skip_label)
        lines = render_lines(ctx.entries)
        ctx.section = render_section(ctx.tag, release_date, lines)

        if options.dry_run:
            ctx.state = PipelineState.DRY_RUN_REPORT
            report_dry_run(ctx)
            return ctx

        ctx.state = PipelineState.WRITING_CHANGELOG
        write_changelog(root / settings.changelog_file, ctx.tag, release_date, lines)

        # Phase 3: Release
        ctx.state = PipelineState.GUARDING_MILESTONE
        ctx.milestone_issues = check_milestone(tracker, ctx.tag)
        ctx.blocker_issues = check_release_blockers(tracker, settings.blocker_label)

        ctx.state = PipelineState.PUBLISHING
        ctx.record = ReleaseRecord(
            tag=ctx.tag,
            title=f"Release {ctx.tag}",
            notes=build_release_notes(tracker, lines, ctx.last_tag, ctx.tag),
            draft=settings.draft,
            prerelease=options.prerelease is not None,
        )
        ctx.release_url = publish_release(tracker, ctx.record)

        ctx.state = PipelineState.CLOSING_ISSUES
        ctx.closure = close_tagged_issues(tracker, settings.ready_label, ctx.tag)
    except ReleaseError:
        logger.error("Release failed during {}", ctx.state.value)
        ctx.state = PipelineState.FAILED
        raise

    ctx.state = PipelineState.DONE
    print(f"\n{'=' * 60}\nDone! {ctx.tag}\n{'=' * 60}")
    return ctx
