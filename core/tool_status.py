"""
Running-tool detection.
The tool re-reads some of its files only at startup, so switching while it runs
may leave a session on the old configuration. The GUI uses this to warn first.
"""

from __future__ import annotations
import logging
from dataclasses import dataclass, field

import psutil

logger = logging.getLogger(__name__)

TOOL_PROCESS_NAMES = ("claude", "claude.exe")


@dataclass
class ToolStatus:
    is_running: bool = False
    process_pids: list[int] = field(default_factory=list)


def _is_tool_process(name: str, cmdline: list[str]) -> bool:
    if name in TOOL_PROCESS_NAMES:
        return True
    # Installed through npm the process is "node .../claude-code/cli.js"
    if name in ("node", "node.exe"):
        return any("claude-code" in part for part in cmdline)
    return False


def get_tool_status() -> ToolStatus:
    pids = []
    try:
        for proc in psutil.process_iter(["pid", "name", "cmdline"]):
            name = (proc.info.get("name") or "").lower()
            cmdline = proc.info.get("cmdline") or []
            if _is_tool_process(name, cmdline):
                pids.append(proc.info["pid"])
    except psutil.Error as e:
        logger.error(f"Process scan error: {e}")
    return ToolStatus(is_running=bool(pids), process_pids=pids)
