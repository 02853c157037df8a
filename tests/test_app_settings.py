# tests/test_app_settings.py
"""App-level settings file."""

from __future__ import annotations

from core.settings import DEFAULT_BACKUP_RETENTION, AppSettings


def test_defaults_when_file_missing(tmp_path):
    settings = AppSettings(tmp_path / "config.json")
    assert settings.get("auto_sync") is True
    assert settings.get("require_backup") is False
    assert settings.backup_retention == DEFAULT_BACKUP_RETENTION


def test_values_persist_across_instances(tmp_path):
    path = tmp_path / "nested" / "config.json"
    AppSettings(path).set("last_profile", "work")
    assert AppSettings(path)["last_profile"] == "work"


def test_unreadable_file_falls_back_to_defaults(tmp_path):
    path = tmp_path / "config.json"
    path.write_text("{truncated", encoding="utf-8")
    assert AppSettings(path).get("confirm_before_switch") is True


def test_backup_retention_is_sanitised(tmp_path):
    settings = AppSettings(tmp_path / "config.json")
    settings["backup_retention"] = "lots"
    assert settings.backup_retention == DEFAULT_BACKUP_RETENTION
    settings["backup_retention"] = 0
    assert settings.backup_retention == 1

