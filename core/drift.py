"""
Drift Detector
Decides whether the live configuration has moved away from the stored copy of
the profile that owns it. Read-only: nothing here writes to disk.
"""

from __future__ import annotations
import logging

from core.errors import ProfileError
from core.paths import ConfigPaths
from core.profile_manager import ProfileManager
from documents import all_documents

logger = logging.getLogger(__name__)


class DriftDetector:
    def __init__(self, profile_manager: ProfileManager, paths: ConfigPaths):
        self.pm = profile_manager
        self.documents = all_documents(paths)

    def has_changed(self, profile_name: str) -> bool:
        """
        Compare content fingerprints of every active document against the
        stored profile. A live document that cannot be read counts as changed.
        Raises ProfileNotFoundError if the profile itself is gone.
        """
        return bool(self.changed_documents(profile_name))

    def changed_documents(self, profile_name: str) -> list[str]:
        stored = self.pm.load(profile_name)
        changed = []
        for doc in self.documents:
            try:
                live = doc.fingerprint_live()
            except ProfileError as e:
                logger.debug(f"[{doc.id}] live document unreadable, treating as changed: {e}")
                changed.append(doc.id)
                continue
            if live != doc.fingerprint_profile(stored):
                changed.append(doc.id)
        if changed:
            logger.debug(f"Drift in '{profile_name}': {', '.join(changed)}")
        return changed
