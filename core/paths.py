"""
Path Resolver
Computes every well-known location from a single tool directory.

Layout (defaults shown for a home directory ~):
  ~/.claude/
    settings.json           ← active settings document
    CLAUDE.md               ← active instructions document
    .claudectx-current      ← current profile marker
    .claudectx-previous     ← previous profile marker
    profiles/<name>/        ← one directory per profile
    backups/<id>/           ← snapshots of the active files
    claudectx/              ← app config + log file
  ~/.claude.json            ← service registry (shared with the tool)
"""

from __future__ import annotations
import os
from dataclasses import dataclass
from pathlib import Path

SETTINGS_FILENAME = "settings.json"
INSTRUCTIONS_FILENAME = "CLAUDE.md"
SERVICES_FILENAME = "mcp.json"
PROFILE_META_FILENAME = "profile.json"


@dataclass(frozen=True)
class ConfigPaths:
    tool_dir: Path
    registry_file: Path

    @classmethod
    def from_home(cls, home: Path) -> "ConfigPaths":
        home = Path(home)
        return cls(tool_dir=home / ".claude", registry_file=home / ".claude.json")

    @classmethod
    def default(cls) -> "ConfigPaths":
        """Honour CLAUDE_CONFIG_DIR the same way the tool itself does."""
        override = os.environ.get("CLAUDE_CONFIG_DIR")
        if override:
            tool_dir = Path(override).expanduser()
            return cls(tool_dir=tool_dir, registry_file=tool_dir / ".claude.json")
        return cls.from_home(Path.home())

    # Active configuration
    @property
    def settings_file(self) -> Path:
        return self.tool_dir / SETTINGS_FILENAME

    @property
    def instructions_file(self) -> Path:
        return self.tool_dir / INSTRUCTIONS_FILENAME

    # Bookkeeping
    @property
    def profiles_dir(self) -> Path:
        return self.tool_dir / "profiles"

    @property
    def backups_dir(self) -> Path:
        return self.tool_dir / "backups"

    @property
    def current_marker(self) -> Path:
        return self.tool_dir / ".claudectx-current"

    @property
    def previous_marker(self) -> Path:
        return self.tool_dir / ".claudectx-previous"

    @property
    def app_data_dir(self) -> Path:
        return self.tool_dir / "claudectx"

    @property
    def app_config_file(self) -> Path:
        return self.app_data_dir / "config.json"

    @property
    def log_file(self) -> Path:
        return self.app_data_dir / "claudectx.log"

    def profile_dir(self, name: str) -> Path:
        if not name:
            raise ValueError("Profile name cannot be empty")
        return self.profiles_dir / name

    def profile_file(self, name: str, filename: str) -> Path:
        return self.profile_dir(name) / filename

    def backup_dir(self, backup_id: str) -> Path:
        return self.backups_dir / backup_id
