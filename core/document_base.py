"""
Active Document Base Class
Each live file the tool reads (settings, instructions, service registry) is
wrapped by one ActiveDocument. The backup manager, drift detector and switcher
iterate over them in registry order and never touch the files directly.
Adding a new managed file = subclass ActiveDocument + register in documents/__init__.py
"""

from __future__ import annotations
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path

from core import config_io
from core.paths import ConfigPaths
from core.profile_manager import Profile

logger = logging.getLogger(__name__)


@dataclass
class DocumentStatus:
    """Snapshot of a live document for display."""
    exists: bool = False
    size: int = 0
    notes: str = ""


class ActiveDocument(ABC):
    """
    Abstract base class for one piece of the active configuration.

    Subclasses must implement:
      - id, display_name, snapshot_name (class attributes)
      - live_path()
      - apply()          → overwrite the live file from a profile
      - read_into()      → copy live content into a profile
      - fingerprint_live() / fingerprint_profile()

    Subclasses may override:
      - backup() / restore() for anything beyond a plain file copy
    """

    id: str = ""
    display_name: str = ""
    icon: str = "📄"
    description: str = ""
    snapshot_name: str = ""   # filename inside a backup directory

    def __init__(self, paths: ConfigPaths):
        self.paths = paths

    # ------------------------------------------------------------------
    # Abstract interface
    # ------------------------------------------------------------------

    @abstractmethod
    def live_path(self) -> Path:
        ...

    @abstractmethod
    def apply(self, profile: Profile):
        """Make the live file reflect `profile`. Raises ProfileError on failure."""
        ...

    @abstractmethod
    def read_into(self, profile: Profile):
        """Copy the live content into `profile` (in memory only)."""
        ...

    @abstractmethod
    def fingerprint_live(self) -> str:
        """Raises ProfileError if the live document cannot be read."""
        ...

    @abstractmethod
    def fingerprint_profile(self, profile: Profile) -> str:
        ...

    # ------------------------------------------------------------------
    # Backup / Restore (plain file copy unless overridden)
    # ------------------------------------------------------------------

    def exists(self) -> bool:
        return self.live_path().is_file()

    def backup(self, dest_dir: Path) -> bool:
        """
        Copy the live file into dest_dir/{snapshot_name}.
        Returns False when there was nothing to capture.
        """
        src = self.live_path()
        if not src.is_file():
            logger.debug(f"[{self.id}] backup: {src} not present")
            return False
        config_io.copy_file(src, dest_dir / self.snapshot_name)
        return True

    def restore(self, src_dir: Path):
        """
        Reproduce the live file as captured in src_dir. A missing snapshot
        means the file did not exist at capture time, so the live file is removed.
        """
        snapshot = src_dir / self.snapshot_name
        if snapshot.is_file():
            config_io.copy_file(snapshot, self.live_path())
            logger.debug(f"[{self.id}] restored from {snapshot}")
        elif config_io.remove_file(self.live_path()):
            logger.debug(f"[{self.id}] removed (absent from snapshot)")

    # ------------------------------------------------------------------
    # Status
    # ------------------------------------------------------------------

    def get_status(self) -> DocumentStatus:
        path = self.live_path()
        if not path.is_file():
            return DocumentStatus(exists=False, notes="missing")
        return DocumentStatus(exists=True, size=path.stat().st_size)

    def __repr__(self) -> str:
        return f"<ActiveDocument id={self.id!r} path={str(self.live_path())!r}>"
