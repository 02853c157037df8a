"""
Small filesystem helpers. Every OSError leaves here as ConfigIOError and every
JSON parse error as InvalidInputError, so callers only handle ProfileError.
"""

from __future__ import annotations
import json
import shutil
import logging
from pathlib import Path
from typing import Any

from core.errors import ConfigIOError, InvalidInputError

logger = logging.getLogger(__name__)


def read_text(path: Path) -> str:
    """Read UTF-8 text with line endings left exactly as stored."""
    try:
        with open(path, encoding="utf-8", newline="") as f:
            return f.read()
    except OSError as e:
        raise ConfigIOError(f"Failed to read {path}: {e}", path) from e
    except UnicodeDecodeError as e:
        raise InvalidInputError(f"{path} is not valid UTF-8: {e}") from e


def write_text(path: Path, content: str):
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w", encoding="utf-8", newline="") as f:
            f.write(content)
    except OSError as e:
        raise ConfigIOError(f"Failed to write {path}: {e}", path) from e


def read_json_object(path: Path) -> dict[str, Any]:
    """Read a file that must hold a JSON object. Key order is kept."""
    raw = read_text(path)
    try:
        data = json.loads(raw)
    except json.JSONDecodeError as e:
        raise InvalidInputError(f"Invalid JSON in {path}: {e}") from e
    if not isinstance(data, dict):
        raise InvalidInputError(f"Expected a JSON object in {path}")
    return data


def write_json(path: Path, data: Any):
    write_text(path, json.dumps(data, indent=2, ensure_ascii=False) + "\n")


def copy_file(src: Path, dst: Path):
    try:
        dst.parent.mkdir(parents=True, exist_ok=True)
        shutil.copy2(src, dst)
    except OSError as e:
        raise ConfigIOError(f"Failed to copy {src} → {dst}: {e}", dst) from e
    logger.debug(f"copied: {src} → {dst}")


def remove_file(path: Path) -> bool:
    """Remove a file if present. Returns True if something was removed."""
    if not path.exists():
        return False
    try:
        path.unlink()
    except OSError as e:
        raise ConfigIOError(f"Failed to remove {path}: {e}", path) from e
    logger.debug(f"removed: {path}")
    return True


def remove_tree(path: Path):
    try:
        shutil.rmtree(path)
    except OSError as e:
        raise ConfigIOError(f"Failed to remove directory {path}: {e}", path) from e
