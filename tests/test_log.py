"""Tests for gh_release.log."""

from __future__ import annotations

from pathlib import Path

import pytest
from loguru import logger

from gh_release.log import configure_logging


def test_disabled_by_default(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("ENABLE_LOGGING", raising=False)

    assert configure_logging() is None


def test_writes_to_log_file(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    log_file = tmp_path / "logs" / "release.log"
    monkeypatch.setenv("ENABLE_LOGGING", "true")
    monkeypatch.setenv("LOG_LEVEL", "WARN")
    monkeypatch.setenv("LOG_FILE", str(log_file))

    assert configure_logging() == log_file
    logger.info("not written")
    logger.warning("written")
    logger.complete()

    content = log_file.read_text()
    assert "[WARNING]" in content
    assert "written" in content
    assert "not written" not in content


def test_unknown_level_falls_back_to_info(tmp_path: Path) -> None:
    log_file = tmp_path / "gh.log"

    configure_logging(enabled=True, level="chatty", log_file=log_file)
    logger.debug("hidden")
    logger.info("shown")

    content = log_file.read_text()
    assert "Level: INFO" in content
    assert "shown" in content
    assert "hidden" not in content
