"""
Exception hierarchy shared by the store, backup manager and switcher.
Everything raised on purpose derives from ProfileError so the GUI can catch one type.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from core.switcher import OperationResult


class ProfileError(Exception):
    """Base class for all profile switching errors."""


# --- Not found ---

class NotFoundError(ProfileError):
    pass


class ProfileNotFoundError(NotFoundError):
    def __init__(self, name: str):
        super().__init__(f"Profile '{name}' does not exist")
        self.name = name


class BackupNotFoundError(NotFoundError):
    def __init__(self, backup_id: str):
        super().__init__(f"Backup '{backup_id}' does not exist")
        self.backup_id = backup_id


class NoBackupsError(NotFoundError):
    def __init__(self):
        super().__init__("No backups available to restore")


class NoPreviousProfileError(NotFoundError):
    def __init__(self):
        super().__init__("No previous profile to switch to")


class NoCurrentProfileError(NotFoundError):
    def __init__(self):
        super().__init__("No profile is currently active")


# --- Collisions ---

class AlreadyExistsError(ProfileError):
    pass


class ProfileExistsError(AlreadyExistsError):
    def __init__(self, name: str):
        super().__init__(f"Profile '{name}' already exists")
        self.name = name


class ProfileInUseError(ProfileError):
    def __init__(self, name: str):
        super().__init__(
            f"Cannot delete current profile '{name}' - switch to another profile first"
        )
        self.name = name


# --- Bad input / domain rules ---

class InvalidInputError(ProfileError):
    pass


class InvalidProfileNameError(InvalidInputError):
    pass


class InvalidProfileError(InvalidInputError):
    pass


class ValidationError(ProfileError):
    pass


# --- Filesystem ---

class ConfigIOError(ProfileError):
    """A read, write, copy or delete failed. The OSError is chained as __cause__."""

    def __init__(self, message: str, path=None):
        super().__init__(message)
        self.path = path


class BackupError(ProfileError):
    pass


class RestoreError(BackupError):
    def __init__(self, backup_id: str, failures: list[str]):
        super().__init__(f"Restore of '{backup_id}' failed: {'; '.join(failures)}")
        self.backup_id = backup_id
        self.failures = failures


class SwitchError(ProfileError):
    """
    The commit phase of a switch failed. The original failure is chained as
    __cause__; `result` carries the rollback outcome and any warnings.
    """

    def __init__(self, message: str, result: "OperationResult"):
        super().__init__(message)
        self.result = result
