"""
Export / import of a single profile as one JSON document, for moving
profiles between machines.
"""

from __future__ import annotations
import json
import logging
from datetime import datetime, timezone
from typing import IO

from core.errors import InvalidInputError, ProfileExistsError
from core.profile_manager import Profile, ProfileManager, SettingsDocument
from core.validator import validate_instructions, validate_profile_name, validate_settings

logger = logging.getLogger(__name__)

EXPORT_VERSION = "1.0.0"


def export_profile(pm: ProfileManager, name: str, fp: IO[str]):
    profile = pm.load(name)
    data = {
        "version": EXPORT_VERSION,
        "name": profile.name,
        "settings": profile.settings.to_dict(),
    }
    if profile.has_instructions():
        data["claude_md"] = profile.instructions
    if profile.services:
        data["services"] = profile.services
    data["exported_at"] = datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")

    json.dump(data, fp, indent=2, ensure_ascii=False)
    fp.write("\n")
    logger.info(f"Exported profile '{name}'")


def import_profile(pm: ProfileManager, fp: IO[str], new_name: str = "") -> Profile:
    try:
        data = json.load(fp)
    except json.JSONDecodeError as e:
        raise InvalidInputError(f"Failed to decode profile: {e}") from e
    if not isinstance(data, dict):
        raise InvalidInputError("Exported profile must be a JSON object")

    version = data.get("version")
    if version != EXPORT_VERSION:
        raise InvalidInputError(
            f"Incompatible export version {version!r} (expected {EXPORT_VERSION!r})"
        )

    name = new_name or data.get("name") or ""
    validate_profile_name(name)
    if pm.exists(name):
        raise ProfileExistsError(name)

    raw_settings = data.get("settings")
    if not isinstance(raw_settings, dict):
        raise InvalidInputError("Exported profile has no settings object")
    services = data.get("services")
    if services is None:
        services = {}
    if not isinstance(services, dict):
        raise InvalidInputError("Exported services must be a JSON object")

    instructions = data.get("claude_md") or ""
    if not isinstance(instructions, str):
        raise InvalidInputError("Exported claude_md must be a string")

    profile = Profile(
        name=name,
        settings=SettingsDocument.from_dict(raw_settings),
        instructions=instructions,
        services=services,
    )
    validate_settings(profile.settings)
    validate_instructions(profile.instructions)

    pm.save(profile)
    logger.info(f"Imported profile '{name}'")
    return profile
