"""Tests for gh_release.versions."""

from __future__ import annotations

import pytest
import semver

from gh_release.errors import ConfigurationError, TrackerError
from gh_release.models import BumpKind, Prerelease, PrereleaseKind
from gh_release.versions import (
    compute_next,
    find_last_release,
    format_tag,
    parse_tag,
    resolve_current,
)


class TestParseTag:
    def test_with_v_prefix(self) -> None:
        v = parse_tag("v1.2.3")
        assert (v.major, v.minor, v.patch) == (1, 2, 3)
        assert v.prerelease is None

    def test_without_prefix(self) -> None:
        assert parse_tag("10.0.7") == semver.Version(10, 0, 7)

    def test_with_suffix(self) -> None:
        v = parse_tag("v1.2.3-beta.2")
        assert (v.major, v.minor, v.patch) == (1, 2, 3)
        assert v.prerelease == "beta.2"

    @pytest.mark.parametrize(
        "tag", ["", "v1.2", "1", "release-1.2.3", "v1.2.3.4", "v1.2.x", "v1.2.3-"]
    )
    def test_malformed_tag_raises(self, tag: str) -> None:
        with pytest.raises(ConfigurationError):
            parse_tag(tag)


class TestComputeNext:
    @pytest.mark.parametrize(
        ("bump", "expected"),
        [
            (BumpKind.MAJOR, "2.0.0"),
            (BumpKind.MINOR, "1.3.0"),
            (BumpKind.PATCH, "1.2.4"),
        ],
    )
    def test_bump_resets_lower_components(self, bump: BumpKind, expected: str) -> None:
        assert str(compute_next(semver.Version(1, 2, 3), bump)) == expected

    def test_bump_from_zero(self) -> None:
        assert str(compute_next(semver.Version(0, 0, 0), BumpKind.PATCH)) == "0.0.1"

    def test_high_patch(self) -> None:
        nxt = compute_next(semver.Version(1, 0, 99), BumpKind.PATCH)
        assert str(nxt) == "1.0.100"

    def test_prerelease_suffix_appended(self) -> None:
        pre = Prerelease(kind=PrereleaseKind.ALPHA, tag="1")
        nxt = compute_next(semver.Version(1, 2, 3), BumpKind.PATCH, pre)
        assert str(nxt) == "1.2.4-alpha.1"

    def test_prerelease_does_not_change_arithmetic(self) -> None:
        pre = Prerelease(kind=PrereleaseKind.BETA, tag="rc")
        nxt = compute_next(semver.Version(1, 2, 3), BumpKind.MAJOR, pre)
        assert (nxt.major, nxt.minor, nxt.patch) == (2, 0, 0)
        assert nxt.prerelease == "beta.rc"

    def test_existing_prerelease_is_dropped(self) -> None:
        nxt = compute_next(parse_tag("v1.2.3-alpha.4"), BumpKind.MINOR)
        assert str(nxt) == "1.3.0"


class TestResolveCurrent:
    def test_no_releases_is_zero(self, tracker) -> None:
        assert resolve_current(tracker) == semver.Version(0, 0, 0)

    def test_latest_tag(self, tracker) -> None:
        tracker.latest_tag = "v1.2.3"
        assert find_last_release(tracker) == ("v1.2.3", semver.Version(1, 2, 3))

    def test_malformed_latest_tag_is_fatal(self, tracker) -> None:
        tracker.latest_tag = "nightly"
        with pytest.raises(ConfigurationError):
            resolve_current(tracker)

    def test_tracker_failure_propagates(self, tracker) -> None:
        tracker.fail.add("get_latest_release_tag")
        with pytest.raises(TrackerError):
            resolve_current(tracker)


def test_format_tag() -> None:
    assert format_tag(semver.Version(1, 3, 0, prerelease="alpha.1")) == "v1.3.0-alpha.1"
