from __future__ import annotations

import json

import pytest

from core.paths import ConfigPaths
from core.profile_manager import Profile, ProfileManager, SettingsDocument
from core.backup_manager import BackupManager
from core.switcher import Switcher


# ---------------------------------------------------------------------------
# Filesystem layout rooted in a throwaway home directory
# ---------------------------------------------------------------------------


@pytest.fixture
def paths(tmp_path) -> ConfigPaths:
    p = ConfigPaths.from_home(tmp_path)
    p.tool_dir.mkdir(parents=True)
    return p


@pytest.fixture
def pm(paths) -> ProfileManager:
    return ProfileManager(paths)


@pytest.fixture
def backups(paths) -> BackupManager:
    return BackupManager(paths)


@pytest.fixture
def switcher(pm, backups) -> Switcher:
    return Switcher(pm, backups=backups)


@pytest.fixture
def make_profile(pm):
    """
    Factory that saves a profile and returns it.
    Settings default to a distinct model per name so profiles never compare equal.
    """
    def _make(name: str, model: str = "", instructions: str = "",
              services: dict | None = None, **extra) -> Profile:
        data = {"model": model or f"model-{name}"}
        data.update(extra)
        profile = Profile(
            name=name,
            settings=SettingsDocument(data),
            instructions=instructions,
            services=services or {},
        )
        pm.save(profile)
        return profile

    return _make


@pytest.fixture
def live(paths):
    """Read/write access to the active files, as the tool would see them."""
    class _Live:
        def write_settings(self, data: dict):
            paths.settings_file.write_text(json.dumps(data, indent=2), encoding="utf-8")

        def read_settings(self) -> dict:
            return json.loads(paths.settings_file.read_text(encoding="utf-8"))

        def write_registry(self, data: dict):
            paths.registry_file.write_text(json.dumps(data, indent=2), encoding="utf-8")

        def read_registry(self) -> dict:
            return json.loads(paths.registry_file.read_text(encoding="utf-8"))

    return _Live()
