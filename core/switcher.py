"""
Switcher
Orchestrates a profile switch over the three active documents.

There is no multi-file transaction on a plain filesystem, so a switch is an
explicit sequence of writes with a compensating action (restoring the backup
taken at the start). One switch walks this state machine:

  PENDING → VALIDATED → SNAPSHOT → SYNCED → WRITING → POINTERS → COMMITTED
                                               │          │
                                               └────┬─────┘
                                                    ▼
                                               ROLLED_BACK

  - VALIDATED:  target name, existence and content rules checked; any failure
                raises before anything on disk changes
  - SNAPSHOT:   backup of the live files; failure only costs the rollback
  - SYNCED:     drift in the outgoing profile written back to it (optional)
  - WRITING:    settings, instructions, services, in registry order; the first
                failure stops the writes and rolls back
  - POINTERS:   previous ← outgoing, current ← incoming
  - afterwards old backups are pruned; failures there are warnings
"""

from __future__ import annotations
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable

from core.backup_manager import BackupManager
from core.drift import DriftDetector
from core.errors import (
    BackupError, ConfigIOError, NoCurrentProfileError, NoPreviousProfileError,
    ProfileError, ProfileExistsError, ProfileNotFoundError, SwitchError,
    ValidationError,
)
from core.document_base import DocumentStatus
from core.profile_manager import Profile, ProfileManager, ProfilePointers
from core.settings import AppSettings, DEFAULT_BACKUP_RETENTION
from core.tool_status import ToolStatus, get_tool_status
from core.validator import validate_instructions, validate_profile_name, validate_settings
from documents import all_documents
from documents.service_registry import load_services

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[str, str, str], None]


class SwitchState(Enum):
    PENDING = "pending"
    VALIDATED = "validated"
    SNAPSHOT = "snapshot"
    SYNCED = "synced"
    WRITING = "writing"
    POINTERS = "pointers"
    COMMITTED = "committed"
    ROLLED_BACK = "rolled_back"


@dataclass
class OperationResult:
    success: bool
    profile: str = ""
    state: SwitchState = SwitchState.PENDING
    backup_id: str = ""
    synced_profile: str = ""
    rollback_ok: bool = False
    document_results: dict[str, tuple[bool, str]] = field(default_factory=dict)
    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    @property
    def summary(self) -> str:
        ok = sum(1 for ok, _ in self.document_results.values() if ok)
        fail = len(self.document_results) - ok
        parts = [f"{ok} file(s) written"]
        if fail:
            parts.append(f"{fail} failed")
        if self.synced_profile:
            parts.append(f"auto-synced '{self.synced_profile}'")
        return ", ".join(parts)


class Switcher:
    """
    Coordinates switch, toggle and sync operations.
    Stateless between calls: everything persistent lives in the
    ProfileManager (profiles + pointers) and BackupManager.
    """

    def __init__(
        self,
        profile_manager: ProfileManager,
        backups: BackupManager | None = None,
        drift: DriftDetector | None = None,
        auto_sync: bool = True,
        require_backup: bool = False,
        backup_retention: int = DEFAULT_BACKUP_RETENTION,
    ):
        self.pm = profile_manager
        self.paths = profile_manager.paths
        self.backups = backups or BackupManager(self.paths)
        self.drift = drift or DriftDetector(profile_manager, self.paths)
        self.documents = all_documents(self.paths)
        self.auto_sync = auto_sync
        self.require_backup = require_backup
        self.backup_retention = backup_retention

    @classmethod
    def from_settings(cls, profile_manager: ProfileManager, settings: AppSettings) -> "Switcher":
        return cls(
            profile_manager,
            auto_sync=bool(settings.get("auto_sync", True)),
            require_backup=bool(settings.get("require_backup", False)),
            backup_retention=settings.backup_retention,
        )

    # ------------------------------------------------------------------ #
    # Switch                                                               #
    # ------------------------------------------------------------------ #

    def switch_to(self, name: str, progress: ProgressCallback | None = None) -> OperationResult:
        """
        Make `name` the active profile. Returns a committed OperationResult,
        raises a ProfileError before any side effect if validation fails, and
        raises SwitchError (chained from the original failure) after rolling
        back if a write fails.
        """
        result = OperationResult(success=False, profile=name)

        incoming = self._validate(name)
        self._advance(result, SwitchState.VALIDATED)

        before = self.pm.load_pointers()
        outgoing = before.current

        if progress:
            progress("__backup", "backup", "Backing up active configuration...")
        result.backup_id = self._snapshot(result)
        if not result.backup_id and self.require_backup:
            raise BackupError(f"Switch to '{name}' aborted: no backup could be taken")
        self._advance(result, SwitchState.SNAPSHOT)

        if self.auto_sync and outgoing and outgoing != name:
            if progress:
                progress("__sync", "sync", f"Checking '{outgoing}' for unsaved changes...")
            self._auto_sync(outgoing, result)
        self._advance(result, SwitchState.SYNCED)

        after = ProfilePointers(
            current=name,
            previous=outgoing or before.previous,
        )
        try:
            self._commit(incoming, after, result, progress)
        except (ProfileError, OSError) as e:
            logger.error(f"Switch to '{name}' failed in state {result.state.value}: {e}")
            self._rollback(result, before, e)
            raise SwitchError(f"Failed to switch to profile '{name}': {e}", result) from e

        result.success = True
        self._advance(result, SwitchState.COMMITTED)
        logger.info(f"Switched to profile '{name}' ({result.summary})")

        try:
            self.backups.prune(self.backup_retention)
        except ProfileError as e:
            logger.warning(f"Failed to prune old backups: {e}")
            result.warnings.append(f"Failed to prune old backups: {e}")

        return result

    def toggle(self, progress: ProgressCallback | None = None) -> OperationResult:
        """Switch to the previous profile, like `cd -`."""
        previous = self.pm.get_previous()
        if not previous:
            raise NoPreviousProfileError()
        if not self.pm.exists(previous):
            raise ProfileNotFoundError(previous)
        return self.switch_to(previous, progress=progress)

    # ------------------------------------------------------------------ #
    # Live state → profile                                                 #
    # ------------------------------------------------------------------ #

    def sync_to_profile(self, name: str = "") -> Profile:
        """Save the active configuration into `name` (default: the current profile)."""
        if not name:
            name = self.pm.get_current()
            if not name:
                raise NoCurrentProfileError()
        if not self.pm.exists(name):
            raise ProfileNotFoundError(name)
        if not self.paths.settings_file.is_file():
            raise ConfigIOError(
                f"Active settings file {self.paths.settings_file} is missing",
                self.paths.settings_file,
            )

        profile = self.pm.load(name)
        for doc in self.documents:
            doc.read_into(profile)
        profile.touch()
        self.pm.save(profile)
        logger.info(f"Synced active configuration to profile '{name}'")
        return profile

    def create_from_current(self, name: str, notes: str = "") -> tuple[Profile, list[str]]:
        """
        New profile holding the live configuration. Content that fails the
        validation rules is still captured; the problems come back as warnings.
        """
        validate_profile_name(name)
        if self.pm.exists(name):
            raise ProfileExistsError(name)

        profile = Profile(name=name, notes=notes)
        for doc in self.documents:
            doc.read_into(profile)

        warnings = []
        try:
            validate_settings(profile.settings)
            validate_instructions(profile.instructions)
        except ValidationError as e:
            logger.warning(f"Current configuration may be invalid: {e}")
            warnings.append(f"Current configuration may be invalid: {e}")

        self.pm.save(profile)
        logger.info(f"Created profile '{name}' from current configuration")
        return profile, warnings

    # ------------------------------------------------------------------ #
    # Status                                                               #
    # ------------------------------------------------------------------ #

    def check_conflicts(self) -> ToolStatus:
        return get_tool_status()

    def get_all_statuses(self) -> dict[str, DocumentStatus]:
        return {doc.id: doc.get_status() for doc in self.documents}

    def has_unsaved_changes(self) -> bool:
        current = self.pm.get_current()
        if not current or not self.pm.exists(current):
            return False
        return self.drift.has_changed(current)

    # ------------------------------------------------------------------ #
    # Internal helpers                                                     #
    # ------------------------------------------------------------------ #

    def _validate(self, name: str) -> Profile:
        validate_profile_name(name)
        if not self.pm.exists(name):
            raise ProfileNotFoundError(name)
        profile = self.pm.load(name)
        try:
            validate_settings(profile.settings)
            validate_instructions(profile.instructions)
        except ValidationError as e:
            raise ValidationError(f"Profile '{name}' is invalid: {e}") from e
        # A malformed registry aborts here, before any write
        load_services(self.paths.registry_file)
        return profile

    def _snapshot(self, result: OperationResult) -> str:
        try:
            return self.backups.create()
        except ProfileError as e:
            logger.warning(f"Failed to create backup, continuing without rollback: {e}")
            result.warnings.append(f"Failed to create backup: {e}")
            return ""

    def _auto_sync(self, outgoing: str, result: OperationResult):
        try:
            changed = self.drift.has_changed(outgoing)
        except ProfileError as e:
            logger.warning(f"Could not detect config changes in '{outgoing}': {e}")
            result.warnings.append(f"Could not detect config changes in '{outgoing}': {e}")
            return
        if not changed:
            return
        try:
            self.sync_to_profile(outgoing)
            result.synced_profile = outgoing
        except ProfileError as e:
            logger.warning(f"Failed to auto-sync '{outgoing}', continuing: {e}")
            result.warnings.append(f"Failed to auto-sync profile '{outgoing}': {e}")

    def _commit(
        self,
        incoming: Profile,
        after: ProfilePointers,
        result: OperationResult,
        progress: ProgressCallback | None,
    ):
        self._advance(result, SwitchState.WRITING)
        for doc in self.documents:
            if progress:
                progress(doc.id, "write", f"Writing {doc.display_name}...")
            try:
                doc.apply(incoming)
            except (ProfileError, OSError) as e:
                result.document_results[doc.id] = (False, str(e))
                raise
            result.document_results[doc.id] = (True, "written")

        self._advance(result, SwitchState.POINTERS)
        self.pm.save_pointers(after)

    def _rollback(self, result: OperationResult, before: ProfilePointers, error: Exception):
        result.errors.append(str(error))
        if result.backup_id:
            try:
                self.backups.restore(result.backup_id)
                result.rollback_ok = True
                logger.info(f"Rolled back active configuration from {result.backup_id}")
            except ProfileError as e:
                logger.error(f"Rollback failed: {e}")
                result.warnings.append(
                    f"Rollback failed: {e}. Restore manually from backup {result.backup_id}"
                )
        else:
            result.warnings.append(
                "No backup was available: the active configuration may be inconsistent"
            )

        try:
            self.pm.save_pointers(before)
        except ProfileError as e:
            result.rollback_ok = False
            logger.error(f"Could not restore profile pointers: {e}")
            result.warnings.append(f"Could not restore profile pointers: {e}")

        self._advance(result, SwitchState.ROLLED_BACK)

    @staticmethod
    def _advance(result: OperationResult, state: SwitchState):
        logger.debug(f"switch '{result.profile}': {result.state.value} → {state.value}")
        result.state = state
