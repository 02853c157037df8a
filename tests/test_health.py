# tests/test_health.py
"""Health report shown next to each profile."""

from __future__ import annotations

from core.health import (
    check_env_vars, check_model, check_permissions, check_profile, is_known_model,
)
from core.profile_manager import SettingsDocument


def test_healthy_profile_without_warnings():
    settings = SettingsDocument({"model": "claude-sonnet-4", "env": {"A": "1"}})
    report = check_profile("work", settings)
    assert report.is_healthy
    assert report.total_warnings == 0
    assert report.summary == "Healthy"


def test_missing_settings_is_unhealthy():
    report = check_profile("broken", None)
    assert not report.is_healthy
    assert report.summary == "Unhealthy"
    assert "empty" in report.overall.error


def test_oversized_model_is_unhealthy():
    report = check_profile("x", SettingsDocument({"model": "m" * 256}))
    assert not report.is_healthy


def test_warnings_are_collected():
    settings = SettingsDocument({
        "model": "my-custom-model",
        "env": {"EMPTY": ""},
        "permissions": {"allow": ["*"], "deny": ["Bash(rm)"]},
    })
    report = check_profile("odd", settings)

    assert report.is_healthy
    assert report.summary == "Healthy (with warnings)"
    assert report.total_warnings == 4


def test_known_models_match_by_substring():
    assert is_known_model("claude-opus-4-1")
    assert is_known_model("Sonnet")
    assert not is_known_model("gpt-4")


def test_check_model_blank_warns():
    assert check_model("").warnings


def test_check_permissions_clean():
    assert check_permissions({"allow": ["Read"]}).warnings == []


def test_check_env_vars_flags_each_empty_value():
    result = check_env_vars({"A": "", "B": "x", "C": ""})
    assert len(result.warnings) == 2
