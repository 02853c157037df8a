# tests/test_tool_status.py
"""Detection of running Claude CLI processes."""

from __future__ import annotations

from types import SimpleNamespace

import psutil

from core import tool_status


def _proc(pid, name, cmdline=()):
    return SimpleNamespace(info={"pid": pid, "name": name, "cmdline": list(cmdline)})


def test_detects_native_and_npm_installs(monkeypatch):
    procs = [
        _proc(1, "systemd"),
        _proc(10, "claude"),
        _proc(11, "node", ["node", "/usr/lib/node_modules/@anthropic-ai/claude-code/cli.js"]),
        _proc(12, "node", ["node", "server.js"]),
        _proc(13, "Claude.exe"),
    ]
    monkeypatch.setattr(tool_status.psutil, "process_iter", lambda attrs: iter(procs))

    status = tool_status.get_tool_status()

    assert status.is_running
    assert status.process_pids == [10, 11, 13]


def test_no_matching_process_is_not_running(monkeypatch):
    procs = [_proc(1, "systemd"), _proc(12, "node", ["node", "server.js"])]
    monkeypatch.setattr(tool_status.psutil, "process_iter", lambda attrs: iter(procs))

    status = tool_status.get_tool_status()
    assert not status.is_running
    assert status.process_pids == []


def test_scan_error_reports_not_running(monkeypatch):
    def denied(attrs):
        raise psutil.AccessDenied()

    monkeypatch.setattr(tool_status.psutil, "process_iter", denied)

    status = tool_status.get_tool_status()
    assert not status.is_running
    assert status.process_pids == []
