"""Shared test fixtures."""

from __future__ import annotations

from dataclasses import dataclass, field

import pytest
from loguru import logger

from gh_release.errors import TrackerError
from gh_release.models import Issue


@dataclass
class FakeTracker:
    """In-memory IssueTrackerClient.

    ``fail`` names methods that should raise TrackerError; ``fail_close``
    lists issue numbers whose close_issue call fails.
    """

    latest_tag: str | None = None
    created_at: str = "2024-01-01T00:00:00Z"
    closed_issues: list[Issue] = field(default_factory=list)
    open_issues: list[Issue] = field(default_factory=list)
    release_url: str = "https://github.com/acme/widgets/releases/tag/untagged-1"
    repo_url: str = "https://github.com/acme/widgets"
    fail: set[str] = field(default_factory=set)
    fail_close: set[int] = field(default_factory=set)

    closed_calls: list[tuple[int, str | None]] = field(default_factory=list)
    releases: list[dict] = field(default_factory=list)
    since_calls: list[str | None] = field(default_factory=list)
    milestone_calls: list[str] = field(default_factory=list)

    def _check(self, name: str) -> None:
        if name in self.fail:
            raise TrackerError(f"{name} failed", "HTTP 502")

    def get_latest_release_tag(self) -> str | None:
        self._check("get_latest_release_tag")
        return self.latest_tag

    def get_release_created_at(self, tag: str) -> str:
        self._check("get_release_created_at")
        return self.created_at

    def list_closed_issues(self, since: str | None = None) -> list[Issue]:
        self._check("list_closed_issues")
        self.since_calls.append(since)
        return list(self.closed_issues)

    def list_open_issues(
        self, label: str | None = None, milestone: str | None = None
    ) -> list[Issue]:
        self._check("list_open_issues")
        issues = list(self.open_issues)
        if label is not None:
            issues = [i for i in issues if label in i.labels]
        if milestone is not None:
            self.milestone_calls.append(milestone)
            issues = [i for i in issues if i.milestone == milestone]
        return issues

    def get_repo_url(self) -> str:
        self._check("get_repo_url")
        return self.repo_url

    def close_issue(self, number: int, comment: str | None = None) -> None:
        self._check("close_issue")
        if number in self.fail_close:
            raise TrackerError(f"close #{number} failed")
        self.closed_calls.append((number, comment))

    def create_release(
        self, tag: str, title: str, notes: str, draft: bool, prerelease: bool
    ) -> str:
        self._check("create_release")
        self.releases.append(
            {
                "tag": tag,
                "title": title,
                "notes": notes,
                "draft": draft,
                "prerelease": prerelease,
            }
        )
        return self.release_url


@pytest.fixture(autouse=True)
def _quiet_logger():
    """Keep loguru's default stderr handler out of test output."""
    logger.remove()
    yield
    logger.remove()


@pytest.fixture
def tracker() -> FakeTracker:
    return FakeTracker()


@pytest.fixture
def fix_crash() -> Issue:
    return Issue(number=42, title="Fix crash", url="https://x/42", labels=set())
