"""
Pure validation rules applied before anything is written.
Each function returns None or raises InvalidProfileNameError / ValidationError.
"""

from __future__ import annotations
from typing import TYPE_CHECKING, Any

from core.errors import InvalidProfileNameError, ValidationError

if TYPE_CHECKING:
    from core.profile_manager import SettingsDocument

MAX_MODEL_LENGTH = 255
MAX_PERMISSION_ENTRIES = 1000
MAX_ENV_ENTRIES = 1000
MAX_INSTRUCTIONS_BYTES = 10 * 1024 * 1024

_NAME_FORBIDDEN = ("/", "\\", " ", "\t", "\n", "\r")


def validate_profile_name(name: str):
    if not name:
        raise InvalidProfileNameError("Profile name cannot be empty")
    if any(ch in name for ch in _NAME_FORBIDDEN):
        raise InvalidProfileNameError(
            "Profile name cannot contain spaces or path separators"
        )
    if name in (".", ".."):
        raise InvalidProfileNameError("Profile name cannot be '.' or '..'")


def validate_settings(settings: "SettingsDocument | None"):
    if settings is None:
        raise ValidationError("Settings cannot be empty")

    validate_model(settings.model)

    perms = settings.permissions
    validate_permissions(perms.get("allow"), perms.get("deny"))

    env = settings.env
    if len(env) > MAX_ENV_ENTRIES:
        raise ValidationError(f"Too many environment variables (max {MAX_ENV_ENTRIES})")


def validate_model(model: str):
    # Custom model names are allowed, only the length is limited
    if model and len(model) > MAX_MODEL_LENGTH:
        raise ValidationError(f"Model name too long (max {MAX_MODEL_LENGTH} characters)")


def validate_permissions(allow: Any, deny: Any):
    for label, entries in (("allow", allow), ("deny", deny)):
        if entries is None:
            continue
        if not isinstance(entries, list):
            raise ValidationError(f"Permission '{label}' must be a list")
        if len(entries) > MAX_PERMISSION_ENTRIES:
            raise ValidationError(
                f"Too many entries in {label} list (max {MAX_PERMISSION_ENTRIES})"
            )


def validate_instructions(text: str):
    if len(text.encode("utf-8")) > MAX_INSTRUCTIONS_BYTES:
        raise ValidationError("CLAUDE.md file too large (max 10MB)")
