"""
Settings Document
The tool's main configuration file.

  ~/.claude/settings.json
    -- model, env, permissions (allow/deny) and any other keys the tool adds
       in later versions; unknown keys are kept as-is.
"""

from __future__ import annotations
from pathlib import Path

from core import config_io
from core.document_base import ActiveDocument
from core.profile_manager import Profile, SettingsDocument, fingerprint


class SettingsFileDocument(ActiveDocument):
    id = "settings"
    display_name = "Settings"
    icon = "⚙️"
    description = "settings.json — model, environment variables and permissions"
    snapshot_name = "settings.json"

    def live_path(self) -> Path:
        return self.paths.settings_file

    def load_live(self) -> SettingsDocument:
        return SettingsDocument.from_dict(config_io.read_json_object(self.live_path()))

    def apply(self, profile: Profile):
        config_io.write_json(self.live_path(), profile.settings.to_dict())

    def read_into(self, profile: Profile):
        # No live settings yet is a valid starting point for a new profile
        if not self.exists():
            profile.settings = SettingsDocument()
            return
        profile.settings = self.load_live()

    def fingerprint_live(self) -> str:
        return fingerprint(self.load_live().canonical_json())

    def fingerprint_profile(self, profile: Profile) -> str:
        if profile.settings is None:
            return "nil"
        return fingerprint(profile.settings.canonical_json())
