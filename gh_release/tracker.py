"""Issue tracker access.

The pipeline only talks to the tracker through IssueTrackerClient, so tests
can substitute an in-memory fake. GhIssueTracker is the real implementation,
built on the GitHub CLI (``gh``), which must already be authenticated.
"""

from __future__ import annotations

import json
import subprocess
from typing import Any, Protocol

from .errors import TrackerError
from .models import Issue
from .shell import gh, warn

ISSUE_FIELDS = "number,title,url,labels,milestone"


class IssueTrackerClient(Protocol):
    """Read/write operations the release pipeline needs from a tracker."""

    def get_latest_release_tag(self) -> str | None:
        """Tag of the most recent published release, or None if there is none."""
        ...

    def get_release_created_at(self, tag: str) -> str:
        """ISO 8601 creation timestamp of the release with ``tag``."""
        ...

    def list_closed_issues(self, since: str | None = None) -> list[Issue]:
        """Closed issues, optionally only those closed after ``since``."""
        ...

    def list_open_issues(
        self, label: str | None = None, milestone: str | None = None
    ) -> list[Issue]:
        """Open issues, optionally filtered by label and milestone title."""
        ...

    def get_repo_url(self) -> str:
        """Web URL of the repository, e.g. "https://github.com/acme/widgets"."""
        ...

    def close_issue(self, number: int, comment: str | None = None) -> None:
        """Close an issue, leaving ``comment`` on it if given."""
        ...

    def create_release(
        self, tag: str, title: str, notes: str, draft: bool, prerelease: bool
    ) -> str:
        """Create a release and return its URL."""
        ...


def _parse_json(output: str, what: str) -> Any:
    if not output:
        return []
    try:
        return json.loads(output)
    except json.JSONDecodeError as exc:
        raise TrackerError(f"Unparsable gh output for {what}", str(exc)) from exc


def _parse_issue(raw: dict[str, Any]) -> Issue:
    """Convert one ``gh issue list --json`` object into an Issue."""
    milestone = raw.get("milestone") or {}
    return Issue(
        number=raw["number"],
        title=raw.get("title", ""),
        url=raw.get("url", ""),
        labels={label["name"] for label in raw.get("labels") or []},
        milestone=milestone.get("title") or None,
    )


class GhIssueTracker:
    """IssueTrackerClient backed by the GitHub CLI.

    Args:
        repo: "OWNER/NAME" to operate on. When None, gh infers the
              repository from the current directory's git remote.
        limit: Maximum number of issues fetched per list call.
    """

    def __init__(self, repo: str | None = None, limit: int = 500) -> None:
        self.repo = repo
        self.limit = limit

    def _gh(self, *args: str, repo_flag: bool = True) -> str:
        cmd = list(args)
        if self.repo and repo_flag:
            cmd.extend(["--repo", self.repo])
        try:
            return gh(*cmd)
        except subprocess.CalledProcessError as exc:
            raise TrackerError(f"gh {' '.join(args[:2])} failed", exc.stderr or "") from exc
        except FileNotFoundError as exc:
            raise TrackerError("gh CLI not found", "install it from https://cli.github.com/") from exc

    def get_latest_release_tag(self) -> str | None:
        output = self._gh(
            "release", "list", "--exclude-drafts", "--limit", "1", "--json", "tagName"
        )
        releases = _parse_json(output, "release list")
        if not releases:
            return None
        return releases[0].get("tagName") or None

    def get_release_created_at(self, tag: str) -> str:
        output = self._gh("release", "view", tag, "--json", "createdAt")
        data = _parse_json(output, "release view")
        created = data.get("createdAt") if isinstance(data, dict) else None
        if not created:
            raise TrackerError(f"Release {tag} has no creation date")
        return created

    def list_closed_issues(self, since: str | None = None) -> list[Issue]:
        args = ["issue", "list", "--state", "closed", "--limit", str(self.limit)]
        if since:
            args.extend(["--search", f"closed:>{since}"])
        return self._list_issues(args)

    def list_open_issues(
        self, label: str | None = None, milestone: str | None = None
    ) -> list[Issue]:
        args = ["issue", "list", "--state", "open", "--limit", str(self.limit)]
        if label:
            args.extend(["--label", label])
        if milestone:
            # A search qualifier matches nothing for an unknown milestone,
            # where --milestone would make gh exit non-zero.
            args.extend(["--search", f'milestone:"{milestone}"'])
        return self._list_issues(args)

    def _list_issues(self, args: list[str]) -> list[Issue]:
        raw_issues = _parse_json(self._gh(*args, "--json", ISSUE_FIELDS), "issue list")
        if len(raw_issues) >= self.limit:
            warn(
                f"gh issue list returned {len(raw_issues)} issues, the configured "
                "limit; older issues may be missing (raise issue-limit)"
            )
        return [_parse_issue(raw) for raw in raw_issues]

    def get_repo_url(self) -> str:
        args = ["repo", "view"]
        if self.repo:
            args.append(self.repo)
        data = _parse_json(self._gh(*args, "--json", "url", repo_flag=False), "repo view")
        url = data.get("url") if isinstance(data, dict) else None
        if not url:
            raise TrackerError("Repository has no URL")
        return url

    def close_issue(self, number: int, comment: str | None = None) -> None:
        args = ["issue", "close", str(number)]
        if comment:
            args.extend(["--comment", comment])
        self._gh(*args)

    def create_release(
        self, tag: str, title: str, notes: str, draft: bool, prerelease: bool
    ) -> str:
        args = ["release", "create", tag, "--title", title, "--notes", notes]
        if draft:
            args.append("--draft")
        if prerelease:
            args.append("--prerelease")
        return self._gh(*args)
