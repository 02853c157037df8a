# tests/test_profile_manager.py
"""
Profile store: save/load, listing, delete/rename/duplicate and the
current/previous pointer markers.
"""

from __future__ import annotations

import pytest

from core.errors import (
    InvalidInputError, InvalidProfileError, InvalidProfileNameError,
    ProfileExistsError, ProfileInUseError, ProfileNotFoundError,
)
from core.paths import INSTRUCTIONS_FILENAME, SERVICES_FILENAME
from core.profile_manager import Profile, ProfilePointers, SettingsDocument


# ---------------------------------------------------------------------------
# Save / load
# ---------------------------------------------------------------------------


def test_save_then_load_returns_same_content(pm):
    settings = SettingsDocument({
        "model": "sonnet",
        "env": {"ANTHROPIC_BASE_URL": "https://proxy.example"},
        "permissions": {"allow": ["Bash(ls)"], "deny": []},
        "statusLine": {"type": "command"},
    })
    services = {"files": {"command": "mcp-files", "args": ["--root", "/tmp"]}}
    pm.save(Profile(name="work", settings=settings, instructions="# Rules\r\nBe terse.\r\n",
                    services=services, notes="day job"))

    loaded = pm.load("work")

    assert loaded.settings == settings
    assert loaded.settings.to_dict()["statusLine"] == {"type": "command"}
    assert loaded.instructions == "# Rules\r\nBe terse.\r\n"
    assert loaded.services == services
    assert loaded.notes == "day job"


def test_load_missing_profile_raises_not_found(pm):
    with pytest.raises(ProfileNotFoundError):
        pm.load("nope")


def test_load_malformed_settings_raises_invalid_input(pm, paths):
    d = paths.profile_dir("broken")
    d.mkdir(parents=True)
    (d / "settings.json").write_text("{not json", encoding="utf-8")

    with pytest.raises(InvalidInputError):
        pm.load("broken")


def test_save_rejects_missing_settings(pm):
    with pytest.raises(InvalidProfileError):
        pm.save(Profile(name="x", settings=None))


def test_save_rejects_empty_name(pm):
    with pytest.raises(InvalidProfileError):
        pm.save(Profile(name=""))


def test_resave_with_blank_instructions_removes_stale_file(pm, paths, make_profile):
    profile = make_profile("a", instructions="old rules", services={"s": {"command": "x"}})
    assert paths.profile_file("a", INSTRUCTIONS_FILENAME).exists()
    assert paths.profile_file("a", SERVICES_FILENAME).exists()

    profile.instructions = "   \n"
    profile.services = {}
    pm.save(profile)

    assert not paths.profile_file("a", INSTRUCTIONS_FILENAME).exists()
    assert not paths.profile_file("a", SERVICES_FILENAME).exists()
    assert pm.load("a").instructions == ""


# ---------------------------------------------------------------------------
# Listing
# ---------------------------------------------------------------------------


def test_list_returns_only_valid_profiles_sorted(pm, paths, make_profile):
    make_profile("zeta")
    make_profile("alpha")

    (paths.profiles_dir / "no-settings").mkdir()
    bad = paths.profiles_dir / "bad-json"
    bad.mkdir()
    (bad / "settings.json").write_text("[1, 2]", encoding="utf-8")
    (paths.profiles_dir / "stray.txt").write_text("hi", encoding="utf-8")

    assert pm.list() == ["alpha", "zeta"]


def test_list_skips_directories_with_unusable_names(pm, paths, make_profile):
    make_profile("work")
    odd = paths.profiles_dir / "has space"
    odd.mkdir()
    (odd / "settings.json").write_text('{"model": "m"}', encoding="utf-8")

    assert pm.list() == ["work"]


def test_list_empty_store(pm):
    assert pm.list() == []


def test_exists_rejects_unsafe_names(pm):
    assert pm.exists("..") is False
    assert pm.exists("a/b") is False
    assert pm.exists("") is False


# ---------------------------------------------------------------------------
# Create / delete / rename / duplicate
# ---------------------------------------------------------------------------


def test_create_empty_profile(pm):
    profile = pm.create_empty("blank")
    assert pm.exists("blank")
    assert profile.is_empty()


def test_create_empty_rejects_duplicate_and_bad_names(pm):
    pm.create_empty("blank")
    with pytest.raises(ProfileExistsError):
        pm.create_empty("blank")
    with pytest.raises(InvalidProfileNameError):
        pm.create_empty("has space")


def test_delete_current_profile_is_refused(pm, make_profile):
    make_profile("a")
    make_profile("b")
    pm.save_pointers(ProfilePointers(current="a", previous="b"))

    with pytest.raises(ProfileInUseError):
        pm.delete("a")

    assert pm.exists("a")
    assert pm.load_pointers() == ProfilePointers(current="a", previous="b")


def test_delete_previous_profile_clears_previous_marker(pm, paths, make_profile):
    make_profile("a")
    make_profile("b")
    pm.save_pointers(ProfilePointers(current="a", previous="b"))

    pm.delete("b")

    assert not pm.exists("b")
    assert pm.get_previous() == ""
    assert not paths.previous_marker.exists()
    assert pm.get_current() == "a"


def test_delete_missing_profile_raises(pm):
    with pytest.raises(ProfileNotFoundError):
        pm.delete("ghost")


def test_rename_moves_profile_and_updates_pointers(pm, make_profile):
    make_profile("a", instructions="keep me")
    make_profile("b")
    pm.save_pointers(ProfilePointers(current="a", previous="b"))

    pm.rename("a", "c")

    assert not pm.exists("a")
    assert pm.load("c").instructions == "keep me"
    assert pm.load_pointers() == ProfilePointers(current="c", previous="b")


def test_rename_onto_existing_profile_fails(pm, make_profile):
    make_profile("a")
    make_profile("b")
    with pytest.raises(ProfileExistsError):
        pm.rename("a", "b")


def test_duplicate_copies_content_independently(pm, make_profile):
    make_profile("a", services={"s": {"command": "x"}})

    dup = pm.duplicate("a", "a-copy")
    dup.services["s"]["command"] = "changed"

    assert pm.load("a").services == {"s": {"command": "x"}}
    assert pm.load("a-copy").settings == pm.load("a").settings


# ---------------------------------------------------------------------------
# Pointers
# ---------------------------------------------------------------------------


def test_pointers_default_to_empty(pm):
    assert pm.load_pointers() == ProfilePointers()


def test_pointer_round_trip_and_clear(pm, paths):
    pm.set_current("work")
    pm.set_previous("home")
    assert pm.get_current() == "work"
    assert pm.get_previous() == "home"

    pm.set_current("")
    assert pm.get_current() == ""
    assert not paths.current_marker.exists()


def test_marker_whitespace_is_ignored(pm, paths):
    paths.current_marker.write_text("work\n", encoding="utf-8")
    assert pm.get_current() == "work"


# ---------------------------------------------------------------------------
# SettingsDocument
# ---------------------------------------------------------------------------


def test_settings_equality_ignores_key_order():
    a = SettingsDocument({"model": "opus", "env": {"A": "1", "B": "2"}})
    b = SettingsDocument({"env": {"B": "2", "A": "1"}, "model": "opus"})
    assert a == b
    assert a.canonical_json() == b.canonical_json()


def test_settings_model_setter_removes_key_when_blank():
    s = SettingsDocument({"model": "opus"})
    s.model = ""
    assert "model" not in s.to_dict()
    assert s.is_empty()


def test_settings_copy_is_isolated():
    raw = {"env": {"A": "1"}}
    s = SettingsDocument(raw)
    raw["env"]["A"] = "2"
    assert s.env == {"A": "1"}
