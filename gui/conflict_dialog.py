"""
Running Tool Dialog
Shown when a switch is requested while a session of the tool is still open.
Open sessions keep the configuration they started with, so the user can close
them and click "Check Again", or switch anyway.
"""

from __future__ import annotations
from PyQt6.QtWidgets import (
    QDialog, QVBoxLayout, QHBoxLayout, QLabel, QPushButton, QFrame,
)
from PyQt6.QtCore import QTimer
from PyQt6.QtGui import QFont

from core.tool_status import ToolStatus

FORCED = 2


class ConflictDialog(QDialog):
    def __init__(self, parent=None, status: ToolStatus | None = None, recheck_fn=None):
        super().__init__(parent)
        self.recheck_fn = recheck_fn  # Callable[[], ToolStatus]
        self.setWindowTitle("Sessions Still Running")
        self.setModal(True)
        self.setMinimumWidth(420)
        self._build_ui()
        self._refresh(status or ToolStatus())

    def _build_ui(self):
        layout = QVBoxLayout(self)
        layout.setSpacing(14)
        layout.setContentsMargins(20, 20, 20, 20)

        header = QLabel(
            "⚠️  Running sessions keep their old configuration.\n"
            "Close them before switching, or switch anyway and restart them later."
        )
        header.setFont(QFont("Segoe UI", 11, QFont.Weight.Medium))
        header.setWordWrap(True)
        layout.addWidget(header)

        self.pid_label = QLabel("")
        self.pid_label.setStyleSheet(
            "background: #2a1818; color: #ff8080; border-radius: 4px;"
            "padding: 6px 10px; font-family: 'Consolas', monospace;"
        )
        layout.addWidget(self.pid_label)

        self.status_label = QLabel("")
        self.status_label.setStyleSheet("color: #5ce05c; font-weight: bold;")
        layout.addWidget(self.status_label)

        sep = QFrame()
        sep.setFrameShape(QFrame.Shape.HLine)
        layout.addWidget(sep)

        btn_row = QHBoxLayout()
        recheck_btn = QPushButton("🔄  Check Again")
        recheck_btn.clicked.connect(self._on_recheck)

        self.proceed_btn = QPushButton("▶  Switch Anyway")
        self.proceed_btn.setObjectName("danger")
        self.proceed_btn.clicked.connect(self._on_force_proceed)

        cancel_btn = QPushButton("Cancel")
        cancel_btn.clicked.connect(self.reject)

        btn_row.addWidget(recheck_btn)
        btn_row.addStretch()
        btn_row.addWidget(self.proceed_btn)
        btn_row.addWidget(cancel_btn)
        layout.addLayout(btn_row)

    def _refresh(self, status: ToolStatus):
        if not status.is_running:
            self.pid_label.setVisible(False)
            self.proceed_btn.setVisible(False)
            self.status_label.setText("✅ No sessions running — switching now")
            QTimer.singleShot(1000, self.accept)
            return
        pids = ", ".join(str(p) for p in status.process_pids)
        self.pid_label.setText(f"  PID: {pids}")
        self.pid_label.setVisible(True)
        self.status_label.setText("")

    def _on_recheck(self):
        if self.recheck_fn:
            self._refresh(self.recheck_fn())

    def _on_force_proceed(self):
        self.done(FORCED)
