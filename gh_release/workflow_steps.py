"""Helpers for script-based GitHub Actions workflow steps."""

from __future__ import annotations

import argparse
import sys
import uuid

from gh_release.changelog import SKIP_LABEL, aggregate, render_lines
from gh_release.cli import options_from_args, prerelease_tag
from gh_release.config import load_settings
from gh_release.errors import ReleaseError
from gh_release.models import BumpKind, ReleaseOptions
from gh_release.pipeline import find_last_release_date
from gh_release.shell import fatal
from gh_release.tracker import GhIssueTracker, IssueTrackerClient
from gh_release.versions import compute_next, find_last_release, format_tag


def _write_output(output_path: str, name: str, value: str) -> None:
    with open(output_path, "a") as fh:
        if "\n" in value:
            delimiter = f"ghadelimiter_{uuid.uuid4().hex}"
            fh.write(f"{name}<<{delimiter}\n{value}\n{delimiter}\n")
        else:
            fh.write(f"{name}={value}\n")


def plan(
    options: ReleaseOptions,
    tracker: IssueTrackerClient,
    github_output: str,
    skip_label: str = SKIP_LABEL,
) -> str:
    """Compute the next release and emit it as GitHub step outputs.

    Writes ``version``, ``previous``, ``prerelease`` and a multi-line
    ``notes`` output. Nothing is written to the tracker or the changelog.

    Returns:
        The computed release tag.
    """
    last_tag, current = find_last_release(tracker)
    tag = format_tag(compute_next(current, options.bump, options.prerelease))
    since = find_last_release_date(tracker, last_tag)
    notes = "\n".join(render_lines(aggregate(tracker, since, skip_label=skip_label)))

    _write_output(github_output, "version", tag)
    _write_output(github_output, "previous", last_tag or "")
    _write_output(github_output, "prerelease", str(options.prerelease is not None).lower())
    _write_output(github_output, "notes", notes)
    return tag


def main(argv: list[str] | None = None) -> None:
    """Run a workflow step command."""
    args = argv if argv is not None else sys.argv[1:]
    parser = argparse.ArgumentParser(prog="python -m gh_release.workflow_steps")
    subparsers = parser.add_subparsers(dest="command", required=True)

    plan_parser = subparsers.add_parser("plan")
    bump = plan_parser.add_mutually_exclusive_group()
    for flag, kind in (
        ("--major", BumpKind.MAJOR),
        ("--minor", BumpKind.MINOR),
        ("--patch", BumpKind.PATCH),
    ):
        bump.add_argument(flag, dest="bump", action="store_const", const=kind)
    plan_parser.set_defaults(bump=BumpKind.PATCH, dry_run=True)
    pre = plan_parser.add_mutually_exclusive_group()
    pre.add_argument("--alpha", metavar="TAG", type=prerelease_tag)
    pre.add_argument("--beta", metavar="TAG", type=prerelease_tag)
    plan_parser.add_argument(
        "--github-output", required=True, help="Path to GitHub step output file."
    )

    parsed = parser.parse_args(args)
    if parsed.command == "plan":
        try:
            settings = load_settings()
            tracker = GhIssueTracker(repo=settings.repo, limit=settings.issue_limit)
            tag = plan(
                options_from_args(parsed),
                tracker,
                parsed.github_output,
                skip_label=settings.skip_label,
            )
        except ReleaseError as exc:
            fatal(str(exc))
        print(f"Planned {tag}")


if __name__ == "__main__":
    main()
