# tests/test_config.py

from __future__ import annotations

from pathlib import Path

from tasknest.config import Settings


def test_settings_defaults(monkeypatch) -> None:
    for name in ("DATA_DIR", "STORAGE_PATH", "SEED", "UPCOMING_DAYS", "CONSOLE_ENABLED", "APP_NAME", "LOG_LEVEL"):
        monkeypatch.delenv(f"TASKNEST_{name}", raising=False)

    s = Settings.from_env()

    assert s.app_name == "tasknest"
    assert s.storage_path == s.data_dir / "tasknest.sqlite3"
    assert s.seed_on_first_run is True
    assert s.upcoming_days == 3


def test_settings_from_env(monkeypatch, tmp_path: Path) -> None:
    monkeypatch.setenv("TASKNEST_DATA_DIR", str(tmp_path))
    monkeypatch.delenv("TASKNEST_STORAGE_PATH", raising=False)
    monkeypatch.setenv("TASKNEST_SEED", "no")
    monkeypatch.setenv("TASKNEST_UPCOMING_DAYS", "not-a-number")
    monkeypatch.setenv("TASKNEST_CONSOLE_ENABLED", "0")

    s = Settings.from_env()

    assert s.data_dir == tmp_path
    assert s.storage_path == tmp_path / "tasknest.sqlite3"
    assert s.seed_on_first_run is False
    assert s.upcoming_days == 3
    assert s.console_enabled is False
