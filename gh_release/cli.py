"""CLI entry point for gh-release."""

from __future__ import annotations

import argparse
import re
import sys
from importlib.metadata import version as pkg_version
from pathlib import Path

from dotenv import find_dotenv, load_dotenv

from gh_release.config import load_settings
from gh_release.errors import ReleaseError
from gh_release.log import configure_logging
from gh_release.models import BumpKind, Prerelease, PrereleaseKind, ReleaseOptions
from gh_release.pipeline import run_release
from gh_release.shell import fatal
from gh_release.tracker import GhIssueTracker

__version__ = pkg_version("gh-release")

_PRERELEASE_TAG_RE = re.compile(r"^[0-9A-Za-z.-]+$")

EPILOG = """\
examples:
  gh-release            create patch release (1.2.3 -> 1.2.4)
  gh-release -m         create minor release (1.2.3 -> 1.3.0)
  gh-release -M         create major release (1.2.3 -> 2.0.0)
  gh-release -a 1       create alpha release (1.2.3 -> 1.2.4-alpha.1)
  gh-release -d -m      dry run for minor release

environment variables:
  ENABLE_LOGGING        enable logging (default: false)
  LOG_LEVEL             DEBUG, INFO, WARN, ERROR (default: INFO)
  LOG_FILE              log file path (default: ./logs/gh-release.log)
"""


class ReleaseArgumentParser(argparse.ArgumentParser):
    """ArgumentParser that exits with status 1 on usage errors."""

    def error(self, message: str) -> None:  # type: ignore[override]
        self.print_usage(sys.stderr)
        self.exit(1, f"{self.prog}: error: {message}\n")


def prerelease_tag(value: str) -> str:
    """argparse type for the TAG of -a/--alpha and -b/--beta."""
    if not _PRERELEASE_TAG_RE.match(value):
        raise argparse.ArgumentTypeError(
            f"invalid pre-release tag {value!r} (use letters, digits, '.' or '-')"
        )
    return value


def build_parser() -> ReleaseArgumentParser:
    parser = ReleaseArgumentParser(
        prog="gh-release",
        description="Create a GitHub release from the issues closed since the last one.",
        epilog=EPILOG,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "--version", action="version", version=f"%(prog)s {__version__}"
    )

    bump = parser.add_mutually_exclusive_group()
    bump.add_argument(
        "-M",
        "--major",
        dest="bump",
        action="store_const",
        const=BumpKind.MAJOR,
        help="Increment major version (X.y.z -> X+1.0.0).",
    )
    bump.add_argument(
        "-m",
        "--minor",
        dest="bump",
        action="store_const",
        const=BumpKind.MINOR,
        help="Increment minor version (x.Y.z -> x.Y+1.0).",
    )
    bump.add_argument(
        "-p",
        "--patch",
        dest="bump",
        action="store_const",
        const=BumpKind.PATCH,
        help="Increment patch version (x.y.Z -> x.y.Z+1). This is the default.",
    )
    parser.set_defaults(bump=BumpKind.PATCH)

    pre = parser.add_mutually_exclusive_group()
    pre.add_argument(
        "-a",
        "--alpha",
        metavar="TAG",
        type=prerelease_tag,
        help="Create an alpha pre-release (x.y.z-alpha.TAG).",
    )
    pre.add_argument(
        "-b",
        "--beta",
        metavar="TAG",
        type=prerelease_tag,
        help="Create a beta pre-release (x.y.z-beta.TAG).",
    )

    parser.add_argument(
        "-d",
        "--dry-run",
        action="store_true",
        help="Show what would be done without making changes.",
    )
    return parser


def options_from_args(args: argparse.Namespace) -> ReleaseOptions:
    prerelease = None
    if args.alpha is not None:
        prerelease = Prerelease(kind=PrereleaseKind.ALPHA, tag=args.alpha)
    elif args.beta is not None:
        prerelease = Prerelease(kind=PrereleaseKind.BETA, tag=args.beta)
    return ReleaseOptions(bump=args.bump, prerelease=prerelease, dry_run=args.dry_run)


def cli(argv: list[str] | None = None) -> None:
    """Main CLI entry point."""
    args = build_parser().parse_args(argv)
    options = options_from_args(args)

    load_dotenv(find_dotenv(usecwd=True))
    configure_logging()

    root = Path.cwd()
    try:
        settings = load_settings(root)
        tracker = GhIssueTracker(repo=settings.repo, limit=settings.issue_limit)
        run_release(options, tracker, settings, root=root)
    except ReleaseError as exc:
        fatal(str(exc))


if __name__ == "__main__":
    cli()
