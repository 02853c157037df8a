"""
Backup Manager
Snapshots the active documents into timestamped directories and restores them.

  ~/.claude/backups/
    backup-01729350000123456789/
      settings.json     ← only if the live file existed
      CLAUDE.md         ← only if the live file existed
      mcp.json          ← only if any servers were registered

Ids embed a nanosecond timestamp zero-padded to a fixed width, so sorting ids
sorts backups by creation time. A new id is always greater than the newest
existing one, even within one clock tick.
"""

from __future__ import annotations
import re
import time
import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone

from core import config_io
from core.errors import (
    BackupError, BackupNotFoundError, ConfigIOError, NoBackupsError,
    ProfileError, RestoreError,
)
from core.paths import ConfigPaths
from documents import all_documents

logger = logging.getLogger(__name__)

BACKUP_PREFIX = "backup-"
_ID_RE = re.compile(rf"^{BACKUP_PREFIX}(\d{{20}})$")


@dataclass(frozen=True)
class Backup:
    id: str
    created_at: datetime
    contents: frozenset[str] = field(default_factory=frozenset)


def _make_id(ns: int) -> str:
    return f"{BACKUP_PREFIX}{ns:020d}"


def _parse_id(backup_id: str) -> int | None:
    m = _ID_RE.match(backup_id)
    return int(m.group(1)) if m else None


class BackupManager:
    """Manages snapshots of the active configuration under ConfigPaths.backups_dir."""

    def __init__(self, paths: ConfigPaths):
        self.paths = paths
        self.documents = all_documents(paths)
        self.paths.backups_dir.mkdir(parents=True, exist_ok=True)

    # ------------------------------------------------------------------
    # Create / restore
    # ------------------------------------------------------------------

    def create(self) -> str:
        """Capture every active document. All-or-nothing: raises BackupError."""
        backup_id = self._next_id()
        backup_dir = self.paths.backup_dir(backup_id)
        try:
            backup_dir.mkdir(parents=True)
        except OSError as e:
            raise BackupError(f"Failed to create backup directory {backup_dir}: {e}") from e

        captured = []
        for doc in self.documents:
            try:
                if doc.backup(backup_dir):
                    captured.append(doc.id)
            except ProfileError as e:
                logger.error(f"[{doc.id}] backup failed, discarding {backup_id}: {e}")
                try:
                    config_io.remove_tree(backup_dir)
                except ConfigIOError as cleanup_err:
                    logger.error(f"Could not remove partial backup {backup_dir}: {cleanup_err}")
                raise BackupError(f"Failed to back up {doc.display_name}: {e}") from e

        logger.info(f"Created backup {backup_id} ({', '.join(captured) or 'empty'})")
        return backup_id

    def restore(self, backup_id: str):
        """
        Make the active files match the snapshot exactly. Every document is
        attempted; failures are raised together as RestoreError.
        """
        backup_dir = self.paths.backup_dir(backup_id)
        if _parse_id(backup_id) is None or not backup_dir.is_dir():
            raise BackupNotFoundError(backup_id)

        failures = []
        for doc in self.documents:
            try:
                doc.restore(backup_dir)
            except ProfileError as e:
                failures.append(f"{doc.display_name}: {e}")
                logger.error(f"[{doc.id}] restore from {backup_id} failed: {e}")

        if failures:
            raise RestoreError(backup_id, failures)
        logger.info(f"Restored backup {backup_id}")

    def restore_latest(self) -> str:
        latest = self.get_latest()
        if not latest:
            raise NoBackupsError()
        self.restore(latest)
        return latest

    # ------------------------------------------------------------------
    # Listing / deletion
    # ------------------------------------------------------------------

    def list(self) -> list[Backup]:
        """All backups, newest first. Foreign directories are ignored."""
        if not self.paths.backups_dir.is_dir():
            return []
        backups = []
        for d in self.paths.backups_dir.iterdir():
            ns = _parse_id(d.name)
            if ns is None or not d.is_dir():
                continue
            contents = frozenset(
                doc.id for doc in self.documents if (d / doc.snapshot_name).is_file()
            )
            backups.append(Backup(
                id=d.name,
                created_at=datetime.fromtimestamp(ns / 1e9, tz=timezone.utc),
                contents=contents,
            ))
        backups.sort(key=lambda b: b.id, reverse=True)
        return backups

    def get_latest(self) -> str:
        backups = self.list()
        return backups[0].id if backups else ""

    def delete(self, backup_id: str):
        backup_dir = self.paths.backup_dir(backup_id)
        if _parse_id(backup_id) is None or not backup_dir.is_dir():
            raise BackupNotFoundError(backup_id)
        config_io.remove_tree(backup_dir)
        logger.debug(f"Deleted backup {backup_id}")

    def prune(self, keep: int) -> int:
        """
        Delete all but the `keep` newest backups. Each delete is attempted
        even if an earlier one failed. Returns the number deleted.
        """
        if keep < 0:
            raise ValueError("keep must be >= 0")
        backups = self.list()
        if len(backups) <= keep:
            return 0

        deleted = 0
        errors = []
        for backup in backups[keep:]:
            try:
                self.delete(backup.id)
                deleted += 1
            except ProfileError as e:
                errors.append(f"{backup.id}: {e}")
                logger.warning(f"Failed to prune backup {backup.id}: {e}")

        if errors:
            raise BackupError(f"Failed to prune {len(errors)} backup(s): {'; '.join(errors)}")
        logger.info(f"Pruned {deleted} old backup(s), kept {keep}")
        return deleted

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _next_id(self) -> str:
        ns = time.time_ns()
        latest = _parse_id(self.get_latest())
        if latest is not None and ns <= latest:
            ns = latest + 1
        return _make_id(ns)
