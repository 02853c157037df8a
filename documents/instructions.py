"""
Instructions Document
  ~/.claude/CLAUDE.md -- free-form user instructions. Optional: a profile
  without instructions means the live file must not exist.
"""

from __future__ import annotations
from pathlib import Path

from core import config_io
from core.document_base import ActiveDocument
from core.profile_manager import Profile, fingerprint


class InstructionsDocument(ActiveDocument):
    id = "instructions"
    display_name = "Instructions"
    icon = "📝"
    description = "CLAUDE.md — user-level instructions"
    snapshot_name = "CLAUDE.md"

    def live_path(self) -> Path:
        return self.paths.instructions_file

    def load_live(self) -> str:
        if not self.exists():
            return ""
        return config_io.read_text(self.live_path())

    def apply(self, profile: Profile):
        if profile.has_instructions():
            config_io.write_text(self.live_path(), profile.instructions)
        else:
            config_io.remove_file(self.live_path())

    def _effective_live(self) -> str:
        # Blank text counts as no instructions, matching apply()
        text = self.load_live()
        return text if text.strip() else ""

    def read_into(self, profile: Profile):
        profile.instructions = self._effective_live()

    def fingerprint_live(self) -> str:
        return fingerprint(self._effective_live())

    def fingerprint_profile(self, profile: Profile) -> str:
        return fingerprint(profile.instructions if profile.has_instructions() else "")
