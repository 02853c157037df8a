"""
Service Registry Document
  ~/.claude.json -- shared with the tool, which keeps project history, UI
  state and caches in it. Only the top-level "mcpServers" key is managed here;
  every other key is read and written back unchanged and in its original order.

Backups and profiles store the managed value on its own, as mcp.json.
"""

from __future__ import annotations
import logging
from pathlib import Path
from typing import Any

from core import config_io
from core.document_base import ActiveDocument
from core.errors import ProfileError
from core.profile_manager import Profile, canonical_json, fingerprint

logger = logging.getLogger(__name__)

MANAGED_KEY = "mcpServers"


def load_services(path: Path) -> dict[str, Any]:
    """Return the managed services mapping; a missing file or key gives {}."""
    if not path.exists():
        return {}
    data = config_io.read_json_object(path)
    services = data.get(MANAGED_KEY)
    return dict(services) if isinstance(services, dict) else {}


def save_services(path: Path, services: dict[str, Any]) -> bool:
    """
    Replace only the managed key, keeping all foreign keys. An empty mapping
    removes the key. Returns False when the file already held these services
    and was left untouched.
    """
    data: dict[str, Any] = config_io.read_json_object(path) if path.exists() else {}

    existing = data.get(MANAGED_KEY)
    existing = existing if isinstance(existing, dict) else {}
    if canonical_json(existing) == canonical_json(services or {}):
        return False

    if services:
        data[MANAGED_KEY] = services
    else:
        data.pop(MANAGED_KEY, None)

    config_io.write_json(path, data)
    logger.debug(f"[services] wrote {len(services or {})} service(s) to {path}")
    return True


class ServiceRegistryDocument(ActiveDocument):
    id = "services"
    display_name = "MCP Servers"
    icon = "🔌"
    description = "~/.claude.json — mcpServers only, other keys are preserved"
    snapshot_name = "mcp.json"

    def live_path(self) -> Path:
        return self.paths.registry_file

    def apply(self, profile: Profile):
        save_services(self.live_path(), profile.services)

    def read_into(self, profile: Profile):
        profile.services = load_services(self.live_path())

    def fingerprint_live(self) -> str:
        return fingerprint(canonical_json(load_services(self.live_path())))

    def fingerprint_profile(self, profile: Profile) -> str:
        return fingerprint(canonical_json(profile.services or {}))

    def backup(self, dest_dir: Path) -> bool:
        services = load_services(self.live_path())
        if not services:
            return False
        config_io.write_json(dest_dir / self.snapshot_name, services)
        return True

    def restore(self, src_dir: Path):
        snapshot = src_dir / self.snapshot_name
        if snapshot.is_file():
            save_services(self.live_path(), config_io.read_json_object(snapshot))
        elif self.live_path().exists():
            # Nothing was registered at capture time
            save_services(self.live_path(), {})

    def get_status(self):
        status = super().get_status()
        if status.exists:
            try:
                status.notes = f"{len(load_services(self.live_path()))} server(s)"
            except ProfileError as e:
                status.notes = f"unreadable: {e}"
        return status
