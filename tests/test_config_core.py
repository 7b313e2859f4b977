from __future__ import annotations

from pathlib import Path

import pytest

from disasterprep.config import (
    HISTORY_PATH_ENV,
    LOG_LEVEL_ENV,
    STORE_PATH_ENV,
    AppConfig,
    default_history_path,
    default_log_level,
    default_store_path,
)


def test_defaults_live_in_home(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    monkeypatch.delenv(STORE_PATH_ENV, raising=False)
    monkeypatch.delenv(HISTORY_PATH_ENV, raising=False)
    monkeypatch.delenv(LOG_LEVEL_ENV, raising=False)
    monkeypatch.setenv("HOME", str(tmp_path))

    assert default_store_path() == tmp_path / ".disasterprep_edu.json"
    assert default_history_path() == tmp_path / ".disasterprep_edu_history.sqlite3"
    assert default_log_level() == "WARNING"


def test_env_overrides(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    monkeypatch.setenv(STORE_PATH_ENV, str(tmp_path / "s.json"))
    monkeypatch.setenv(HISTORY_PATH_ENV, str(tmp_path / "h.sqlite3"))
    monkeypatch.setenv(LOG_LEVEL_ENV, "debug")

    cfg = AppConfig.from_env()

    assert cfg.store_path == tmp_path / "s.json"
    assert cfg.history_path == tmp_path / "h.sqlite3"
    assert cfg.log_level == "DEBUG"
    assert cfg.drill.duration_s == 30


def test_empty_history_path_disables_history(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv(HISTORY_PATH_ENV, "")

    assert default_history_path() is None


def test_unknown_log_level_falls_back(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv(LOG_LEVEL_ENV, "chatty")

    assert default_log_level() == "WARNING"
