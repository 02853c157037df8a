"""
App-level settings persisted to config.json in the app data directory.
"""

from __future__ import annotations
import json
import logging
from pathlib import Path

logger = logging.getLogger(__name__)

DEFAULT_BACKUP_RETENTION = 10

DEFAULT_SETTINGS = {
    "auto_sync": True,
    "require_backup": False,
    "backup_retention": DEFAULT_BACKUP_RETENTION,
    "confirm_before_switch": True,
    "check_running_tool": True,
    "log_level": "INFO",
    "window_geometry": "",
    "last_profile": "",
}


class AppSettings:
    def __init__(self, config_path: Path):
        self.config_path = config_path
        self._data: dict = dict(DEFAULT_SETTINGS)
        self.load()

    def load(self):
        if not self.config_path.exists():
            return
        try:
            loaded = json.loads(self.config_path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as e:
            logger.warning(f"Ignoring unreadable app config {self.config_path}: {e}")
            return
        if isinstance(loaded, dict):
            self._data.update(loaded)

    def save(self):
        self.config_path.parent.mkdir(parents=True, exist_ok=True)
        self.config_path.write_text(
            json.dumps(self._data, indent=2),
            encoding="utf-8",
        )

    @property
    def backup_retention(self) -> int:
        try:
            return max(1, int(self._data.get("backup_retention", DEFAULT_BACKUP_RETENTION)))
        except (TypeError, ValueError):
            return DEFAULT_BACKUP_RETENTION

    def get(self, key: str, default=None):
        return self._data.get(key, default)

    def set(self, key: str, value):
        self._data[key] = value
        self.save()

    def __getitem__(self, key):
        return self._data[key]

    def __setitem__(self, key, value):
        self.set(key, value)
