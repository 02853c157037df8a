# tests/test_drift.py
"""Drift between the live files and the stored copy of the active profile."""

from __future__ import annotations

import pytest

from core.drift import DriftDetector
from core.errors import ProfileNotFoundError


@pytest.fixture
def applied(paths, switcher, make_profile):
    """Profile 'a' switched in, so the live files match it exactly."""
    make_profile("a", instructions="# A\n", services={"s": {"command": "s"}}, env={"X": "1"})
    switcher.switch_to("a")
    return DriftDetector(switcher.pm, paths)


def test_no_drift_right_after_switch(applied):
    assert applied.has_changed("a") is False
    assert applied.changed_documents("a") == []


def test_instructions_edit_then_revert(applied, paths):
    paths.instructions_file.write_text("# A\nextra line\n", encoding="utf-8")
    assert applied.changed_documents("a") == ["instructions"]

    paths.instructions_file.write_text("# A\n", encoding="utf-8")
    assert applied.has_changed("a") is False


def test_settings_reformat_is_not_drift(applied, live):
    data = live.read_settings()
    live.write_settings(dict(reversed(list(data.items()))))
    assert applied.has_changed("a") is False


def test_settings_value_change_is_drift(applied, live):
    data = live.read_settings()
    data["model"] = "haiku"
    live.write_settings(data)
    assert applied.changed_documents("a") == ["settings"]


def test_services_change_is_drift(applied, live):
    registry = live.read_registry()
    registry["mcpServers"]["t"] = {"command": "t"}
    live.write_registry(registry)
    assert applied.changed_documents("a") == ["services"]


def test_foreign_registry_keys_are_not_drift(applied, live):
    registry = live.read_registry()
    registry["numStartups"] = 99
    live.write_registry(registry)
    assert applied.has_changed("a") is False


def test_unreadable_live_settings_count_as_changed(applied, paths):
    paths.settings_file.write_text("{broken", encoding="utf-8")
    assert "settings" in applied.changed_documents("a")


def test_missing_profile_raises(applied):
    with pytest.raises(ProfileNotFoundError):
        applied.has_changed("ghost")


def test_blank_live_instructions_match_profile_without_any(paths, switcher, make_profile):
    make_profile("plain")
    switcher.switch_to("plain")
    paths.instructions_file.write_text("\n  \n", encoding="utf-8")

    detector = DriftDetector(switcher.pm, paths)
    assert detector.has_changed("plain") is False
