"""
Profile Manager
Handles creation, deletion, listing, and serialization of user profiles,
plus the current/previous pointer markers.

Profile storage layout:
  ~/.claude/profiles/
    <profile_name>/
      settings.json       ← settings document (required)
      CLAUDE.md           ← instructions, only when non-blank
      mcp.json            ← service descriptors, only when non-empty
      profile.json        ← metadata (timestamps, notes)
"""

from __future__ import annotations
import copy
import json
import hashlib
import logging
from datetime import datetime, timezone
from dataclasses import dataclass, field
from typing import Any

from core import config_io
from core.errors import (
    ConfigIOError, InvalidInputError, InvalidProfileError,
    ProfileExistsError, ProfileInUseError, ProfileNotFoundError,
)
from core.paths import (
    ConfigPaths, INSTRUCTIONS_FILENAME, PROFILE_META_FILENAME,
    SERVICES_FILENAME, SETTINGS_FILENAME,
)
from core.validator import validate_profile_name

logger = logging.getLogger(__name__)


class SettingsDocument:
    """
    The tool's settings.json. Only `model`, `env` and `permissions` are
    interpreted; every other key is carried through untouched.
    """

    def __init__(self, data: dict[str, Any] | None = None):
        self._data: dict[str, Any] = copy.deepcopy(data) if data else {}

    @property
    def model(self) -> str:
        value = self._data.get("model")
        return value if isinstance(value, str) else ""

    @model.setter
    def model(self, value: str):
        if value:
            self._data["model"] = value
        else:
            self._data.pop("model", None)

    @property
    def env(self) -> dict[str, str]:
        value = self._data.get("env")
        return dict(value) if isinstance(value, dict) else {}

    @property
    def permissions(self) -> dict[str, Any]:
        value = self._data.get("permissions")
        return dict(value) if isinstance(value, dict) else {}

    def is_empty(self) -> bool:
        perms = self.permissions
        return not (self.model or self.env or perms.get("allow") or perms.get("deny"))

    def to_dict(self) -> dict[str, Any]:
        return copy.deepcopy(self._data)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "SettingsDocument":
        return cls(data)

    def canonical_json(self) -> str:
        return canonical_json(self._data)

    def __eq__(self, other) -> bool:
        if not isinstance(other, SettingsDocument):
            return NotImplemented
        return self.canonical_json() == other.canonical_json()

    def __repr__(self) -> str:
        return f"<SettingsDocument model={self.model!r} keys={sorted(self._data)}>"


def canonical_json(data: Any) -> str:
    """Key-order independent serialization used for hashing and equality."""
    return json.dumps(data, sort_keys=True, separators=(",", ":"), ensure_ascii=False)


def fingerprint(text: str) -> str:
    return hashlib.sha256(text.encode("utf-8")).hexdigest()


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


@dataclass
class Profile:
    name: str
    settings: SettingsDocument | None = field(default_factory=SettingsDocument)
    instructions: str = ""
    services: dict[str, dict] = field(default_factory=dict)
    created_at: str = ""
    updated_at: str = ""
    notes: str = ""

    def __post_init__(self):
        if not self.created_at:
            self.created_at = _now_iso()
        if not self.updated_at:
            self.updated_at = self.created_at

    def touch(self):
        self.updated_at = _now_iso()

    def has_instructions(self) -> bool:
        return bool(self.instructions.strip())

    def is_empty(self) -> bool:
        return (
            (self.settings is None or self.settings.is_empty())
            and not self.has_instructions()
            and not self.services
        )

    def meta_dict(self) -> dict:
        return {
            "name": self.name,
            "created_at": self.created_at,
            "updated_at": self.updated_at,
            "notes": self.notes,
        }


@dataclass
class ProfilePointers:
    """The only persistent state outside profile directories and backups."""
    current: str = ""
    previous: str = ""


class ProfileManager:
    """Manages profiles stored on disk under ConfigPaths.profiles_dir."""

    def __init__(self, paths: ConfigPaths):
        self.paths = paths
        self.paths.profiles_dir.mkdir(parents=True, exist_ok=True)

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def exists(self, name: str) -> bool:
        if not self._is_safe_name(name):
            return False
        return self._read_settings(self.paths.profile_file(name, SETTINGS_FILENAME)) is not None

    def list(self) -> list[str]:
        """Names of every directory holding a valid settings document."""
        if not self.paths.profiles_dir.is_dir():
            return []
        names = []
        for d in sorted(self.paths.profiles_dir.iterdir()):
            if not d.is_dir():
                continue
            if not self._is_safe_name(d.name):
                logger.debug(f"Skipping {d}: not a valid profile name")
                continue
            if self._read_settings(d / SETTINGS_FILENAME) is not None:
                names.append(d.name)
            else:
                logger.debug(f"Skipping {d}: no valid {SETTINGS_FILENAME}")
        return names

    def load(self, name: str) -> Profile:
        if not self._is_safe_name(name):
            raise ProfileNotFoundError(name)
        d = self.paths.profile_dir(name)
        settings_path = d / SETTINGS_FILENAME
        if not settings_path.is_file():
            raise ProfileNotFoundError(name)

        try:
            settings = SettingsDocument.from_dict(config_io.read_json_object(settings_path))
        except InvalidInputError as e:
            raise InvalidInputError(f"Profile '{name}' has a malformed settings document: {e}") from e

        instructions = ""
        md_path = d / INSTRUCTIONS_FILENAME
        if md_path.is_file():
            instructions = config_io.read_text(md_path)

        services: dict[str, dict] = {}
        services_path = d / SERVICES_FILENAME
        if services_path.is_file():
            services = config_io.read_json_object(services_path)

        meta = self._read_meta(d / PROFILE_META_FILENAME)
        return Profile(
            name=name,
            settings=settings,
            instructions=instructions,
            services=services,
            created_at=meta.get("created_at", ""),
            updated_at=meta.get("updated_at", ""),
            notes=meta.get("notes", ""),
        )

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def save(self, profile: Profile):
        if not profile.name:
            raise InvalidProfileError("Profile name cannot be empty")
        if profile.settings is None:
            raise InvalidProfileError("Profile settings cannot be empty")
        if not self._is_safe_name(profile.name):
            raise InvalidProfileError(f"Profile name '{profile.name}' is not filesystem-safe")

        d = self.paths.profile_dir(profile.name)
        try:
            d.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise ConfigIOError(f"Failed to create profile directory {d}: {e}", d) from e

        config_io.write_json(d / SETTINGS_FILENAME, profile.settings.to_dict())

        # Blank instructions / no services: drop what an earlier save left behind
        if profile.has_instructions():
            config_io.write_text(d / INSTRUCTIONS_FILENAME, profile.instructions)
        else:
            config_io.remove_file(d / INSTRUCTIONS_FILENAME)

        if profile.services:
            config_io.write_json(d / SERVICES_FILENAME, profile.services)
        else:
            config_io.remove_file(d / SERVICES_FILENAME)

        config_io.write_json(d / PROFILE_META_FILENAME, profile.meta_dict())
        logger.debug(f"Saved profile: {profile.name}")

    def create_empty(self, name: str, notes: str = "") -> Profile:
        validate_profile_name(name)
        if self.exists(name):
            raise ProfileExistsError(name)
        profile = Profile(name=name, notes=notes)
        self.save(profile)
        logger.info(f"Created profile: {name}")
        return profile

    def delete(self, name: str):
        if not self.exists(name):
            raise ProfileNotFoundError(name)
        pointers = self.load_pointers()
        if pointers.current == name:
            raise ProfileInUseError(name)

        config_io.remove_tree(self.paths.profile_dir(name))
        logger.info(f"Deleted profile: {name}")

        if pointers.previous == name:
            self.set_previous("")

    def rename(self, old_name: str, new_name: str) -> Profile:
        validate_profile_name(new_name)
        if not self.exists(old_name):
            raise ProfileNotFoundError(old_name)
        if self.exists(new_name):
            raise ProfileExistsError(new_name)

        profile = self.load(old_name)
        profile.name = new_name
        profile.touch()
        self.save(profile)

        try:
            config_io.remove_tree(self.paths.profile_dir(old_name))
        except ConfigIOError:
            config_io.remove_tree(self.paths.profile_dir(new_name))
            raise

        pointers = self.load_pointers()
        if pointers.current == old_name:
            pointers.current = new_name
        if pointers.previous == old_name:
            pointers.previous = new_name
        self.save_pointers(pointers)

        logger.info(f"Renamed profile: {old_name} → {new_name}")
        return profile

    def duplicate(self, src_name: str, new_name: str) -> Profile:
        validate_profile_name(new_name)
        if self.exists(new_name):
            raise ProfileExistsError(new_name)
        src = self.load(src_name)
        copy_profile = Profile(
            name=new_name,
            settings=SettingsDocument(src.settings.to_dict()),
            instructions=src.instructions,
            services=copy.deepcopy(src.services),
            notes=src.notes,
        )
        self.save(copy_profile)
        logger.info(f"Duplicated profile: {src_name} → {new_name}")
        return copy_profile

    # ------------------------------------------------------------------
    # Current / previous pointers
    # ------------------------------------------------------------------

    def load_pointers(self) -> ProfilePointers:
        return ProfilePointers(
            current=self._read_marker(self.paths.current_marker),
            previous=self._read_marker(self.paths.previous_marker),
        )

    def save_pointers(self, pointers: ProfilePointers):
        """Writes previous first, then current."""
        self._write_marker(self.paths.previous_marker, pointers.previous)
        self._write_marker(self.paths.current_marker, pointers.current)

    def get_current(self) -> str:
        return self._read_marker(self.paths.current_marker)

    def set_current(self, name: str):
        self._write_marker(self.paths.current_marker, name)

    def get_previous(self) -> str:
        return self._read_marker(self.paths.previous_marker)

    def set_previous(self, name: str):
        self._write_marker(self.paths.previous_marker, name)

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    @staticmethod
    def _is_safe_name(name: str) -> bool:
        try:
            validate_profile_name(name)
        except InvalidInputError:
            return False
        return True

    @staticmethod
    def _read_settings(path) -> SettingsDocument | None:
        if not path.is_file():
            return None
        try:
            return SettingsDocument.from_dict(config_io.read_json_object(path))
        except (InvalidInputError, ConfigIOError) as e:
            logger.debug(f"Unreadable settings document {path}: {e}")
            return None

    @staticmethod
    def _read_meta(path) -> dict:
        if not path.is_file():
            return {}
        try:
            return config_io.read_json_object(path)
        except (InvalidInputError, ConfigIOError) as e:
            logger.warning(f"Ignoring unreadable profile metadata {path}: {e}")
            return {}

    @staticmethod
    def _read_marker(path) -> str:
        if not path.exists():
            return ""
        return config_io.read_text(path).strip()

    @staticmethod
    def _write_marker(path, name: str):
        if not name:
            config_io.remove_file(path)
            return
        config_io.write_text(path, name)
