"""
ClaudeCtx Switcher — Main Window
Layout: left sidebar (profile list) + right panel (profile detail + actions).
Long-running operations run on a WorkerThread, one at a time.
"""

from __future__ import annotations
import itertools
import logging
from typing import Optional

from PyQt6.QtWidgets import (
    QMainWindow, QWidget, QVBoxLayout, QHBoxLayout, QListWidget,
    QListWidgetItem, QLabel, QPushButton, QSplitter, QPlainTextEdit, QGroupBox,
    QMessageBox, QProgressBar, QStatusBar, QMenu, QInputDialog, QFileDialog,
    QFormLayout,
)
from PyQt6.QtCore import Qt, QThread, pyqtSignal, QTimer, QSize
from PyQt6.QtGui import QFont

from core.errors import ProfileError, SwitchError
from core.exporter import export_profile, import_profile
from core.health import check_profile
from core.profile_manager import Profile, ProfileManager
from core.settings import AppSettings
from core.switcher import OperationResult, Switcher
from documents import DOCUMENT_REGISTRY
from gui.conflict_dialog import ConflictDialog
from gui.profile_editor import ProfileEditorDialog

logger = logging.getLogger(__name__)

DARK_STYLESHEET = """
QMainWindow, QWidget {
    background-color: #121212;
    color: #e0dcd4;
    font-family: 'Segoe UI', sans-serif;
    font-size: 13px;
}
QListWidget {
    background-color: #181716;
    border: none;
    border-right: 1px solid #2a2725;
    outline: none;
}
QListWidget::item {
    padding: 10px 14px;
    border-bottom: 1px solid #1f1d1b;
}
QListWidget::item:selected {
    background-color: #2c241e;
    color: #f0b27a;
    border-left: 3px solid #d97757;
}
QPushButton {
    background-color: #2a2420;
    color: #f0c8a8;
    border: 1px solid #5a4030;
    border-radius: 6px;
    padding: 7px 16px;
}
QPushButton:hover {
    background-color: #3a2e26;
}
QPushButton:disabled {
    color: #5a5048;
    border-color: #302a26;
}
QPushButton#primary {
    background-color: #d97757;
    color: #1a1410;
    font-weight: 600;
}
QPushButton#danger {
    background-color: #501818;
    color: #ffa0a0;
    border-color: #803030;
}
QGroupBox {
    border: 1px solid #2a2725;
    border-radius: 8px;
    margin-top: 10px;
    padding-top: 8px;
    font-weight: 600;
    color: #c09070;
}
QGroupBox::title {
    subcontrol-origin: margin;
    left: 12px;
    padding: 0 6px;
}
QPlainTextEdit {
    background-color: #181716;
    border: 1px solid #2a2725;
    border-radius: 6px;
    font-family: 'Consolas', monospace;
    font-size: 11px;
}
QStatusBar {
    background-color: #0e0e0e;
    color: #807060;
}
QLabel#header {
    font-size: 22px;
    font-weight: 700;
    color: #d97757;
}
"""


class WorkerThread(QThread):
    """Runs one switch/sync/restore off the UI thread."""
    progress = pyqtSignal(str, str, str)   # document_id, step, message
    finished = pyqtSignal(object)           # OperationResult, Profile or ProfileError

    def __init__(self, fn, parent=None):
        super().__init__(parent)
        self._fn = fn

    def run(self):
        try:
            result = self._fn(progress=self.progress.emit)
        except ProfileError as e:
            logger.error(f"Operation failed: {e}", exc_info=True)
            result = e
        self.finished.emit(result)


class ProfileListItem(QListWidgetItem):
    def __init__(self, name: str, is_current: bool, is_previous: bool):
        super().__init__()
        self.profile_name = name
        marker = "●  active" if is_current else ("↩  previous" if is_previous else "")
        self.setText(f"  {name}\n  {marker}")
        self.setSizeHint(QSize(0, 56))


class MainWindow(QMainWindow):
    def __init__(self, pm: ProfileManager, settings: AppSettings):
        super().__init__()
        self.pm = pm
        self.settings = settings
        self.switcher = Switcher.from_settings(pm, settings)
        self._selected: Optional[Profile] = None
        self._worker: Optional[WorkerThread] = None

        self.setWindowTitle("ClaudeCtx Switcher")
        self.setMinimumSize(860, 600)
        self.setStyleSheet(DARK_STYLESHEET)

        self._build_ui()
        self._refresh_profile_list()

        geom = self.settings.get("window_geometry", "")
        if geom:
            try:
                self.restoreGeometry(bytes.fromhex(geom))
            except ValueError:
                logger.debug("Ignoring malformed window geometry")

        self._status_timer = QTimer(self)
        self._status_timer.timeout.connect(self._refresh_live_status)
        self._status_timer.start(5000)

    # ------------------------------------------------------------------
    # UI Construction
    # ------------------------------------------------------------------

    def _build_ui(self):
        central = QWidget()
        self.setCentralWidget(central)
        root = QHBoxLayout(central)
        root.setContentsMargins(0, 0, 0, 0)

        splitter = QSplitter(Qt.Orientation.Horizontal)
        root.addWidget(splitter)
        splitter.addWidget(self._build_sidebar())
        splitter.addWidget(self._build_detail_panel())
        splitter.setSizes([240, 620])
        splitter.setStretchFactor(1, 1)

        self.status_bar = QStatusBar()
        self.setStatusBar(self.status_bar)
        self.status_bar.showMessage("Ready")

    def _button(self, text: str, slot, role: str = "", tip: str = "") -> QPushButton:
        btn = QPushButton(text)
        if role:
            btn.setObjectName(role)
        if tip:
            btn.setToolTip(tip)
        btn.clicked.connect(slot)
        return btn

    def _build_sidebar(self) -> QWidget:
        side = QWidget()
        side.setMinimumWidth(200)
        side.setMaximumWidth(280)
        col = QVBoxLayout(side)
        col.setContentsMargins(0, 0, 0, 0)
        col.setSpacing(0)

        brand = QLabel("  ClaudeCtx")
        brand.setObjectName("header")
        brand.setContentsMargins(6, 14, 6, 12)
        col.addWidget(brand)

        lst = QListWidget()
        lst.setFont(QFont("Segoe UI", 10))
        lst.setContextMenuPolicy(Qt.ContextMenuPolicy.CustomContextMenu)
        lst.currentItemChanged.connect(self._on_profile_selected)
        lst.customContextMenuRequested.connect(self._show_profile_context_menu)
        col.addWidget(lst)
        self.profile_list = lst

        self.dup_btn = self._button("⧉ Duplicate", self._on_duplicate_profile)
        self.del_btn = self._button("🗑 Delete", self._on_delete_profile, role="danger")
        buttons = QHBoxLayout()
        buttons.setContentsMargins(8, 8, 8, 8)
        for btn in (self._button("＋ New", self._on_new_profile), self.dup_btn, self.del_btn):
            buttons.addWidget(btn)
        col.addLayout(buttons)
        return side

    def _build_detail_panel(self) -> QWidget:
        panel = QWidget()
        col = QVBoxLayout(panel)
        col.setContentsMargins(24, 20, 24, 16)
        col.setSpacing(14)

        self.title_lbl = QLabel("Select a profile →")
        self.title_lbl.setFont(QFont("Segoe UI", 16, QFont.Weight.Bold))
        self.edit_btn = self._button("✏ Edit", self._on_edit_profile)
        title_row = QHBoxLayout()
        title_row.addWidget(self.title_lbl)
        title_row.addStretch()
        title_row.addWidget(self.edit_btn)
        col.addLayout(title_row)

        self.notes_lbl = QLabel("")
        self.notes_lbl.setWordWrap(True)
        self.notes_lbl.setStyleSheet("color: #807060; font-style: italic;")
        col.addWidget(self.notes_lbl)

        contents = QGroupBox("Profile Contents")
        form = QFormLayout(contents)
        self._fields: dict[str, QLabel] = {}
        for key, caption in (
            ("model", "Model:"),
            ("env", "Environment:"),
            ("permissions", "Permissions:"),
            ("instructions", "CLAUDE.md:"),
            ("services", "MCP servers:"),
            ("health", "Health:"),
        ):
            value = QLabel("")
            value.setWordWrap(True)
            form.addRow(caption, value)
            self._fields[key] = value
        col.addWidget(contents)

        live_group = QGroupBox("Live Configuration")
        live_col = QVBoxLayout(live_group)
        self._document_rows: dict[str, QLabel] = {}
        for doc_id, cls in DOCUMENT_REGISTRY.items():
            row = QLabel(f"{cls.icon}  {cls.display_name}")
            live_col.addWidget(row)
            self._document_rows[doc_id] = row
        self.drift_lbl = QLabel("")
        self.drift_lbl.setStyleSheet("color: #e0b050;")
        live_col.addWidget(self.drift_lbl)
        col.addWidget(live_group)

        self.switch_btn = self._button("▶  Switch To This Profile", self._on_switch, role="primary")
        self.toggle_btn = self._button("⇄  Switch Back", self._on_toggle,
                                       tip="Switch to the previously active profile")
        self.sync_btn = self._button("💾  Save Live → Profile", self._on_sync,
                                     tip="Overwrite this profile with the current live configuration")
        actions = QGroupBox("Actions")
        action_row = QHBoxLayout(actions)
        for btn in (self.switch_btn, self.toggle_btn, self.sync_btn):
            action_row.addWidget(btn)
        col.addWidget(actions)

        self.restore_btn = self._button("↩  Restore Latest Backup", self._on_restore_latest)
        self.export_btn = self._button("⬆ Export…", self._on_export)
        backup_row = QHBoxLayout()
        backup_row.addWidget(self.restore_btn)
        backup_row.addStretch()
        backup_row.addWidget(self.export_btn)
        backup_row.addWidget(self._button("⬇ Import…", self._on_import))
        col.addLayout(backup_row)

        self.busy_bar = QProgressBar()
        self.busy_bar.setRange(0, 0)
        self.busy_bar.setVisible(False)
        col.addWidget(self.busy_bar)

        log_group = QGroupBox("Operation Log")
        self.log_view = QPlainTextEdit()
        self.log_view.setReadOnly(True)
        self.log_view.setMaximumBlockCount(500)
        self.log_view.setMaximumHeight(130)
        QVBoxLayout(log_group).addWidget(self.log_view)
        col.addWidget(log_group)

        col.addStretch()
        return panel

    # ------------------------------------------------------------------
    # Profile list management
    # ------------------------------------------------------------------

    def _refresh_profile_list(self, select: str = ""):
        pointers = self.pm.load_pointers()
        wanted = select or (self._selected.name if self._selected else "") or self.settings.get("last_profile", "")

        lst = self.profile_list
        lst.blockSignals(True)
        lst.clear()
        items = [ProfileListItem(n, n == pointers.current, n == pointers.previous) for n in self.pm.list()]
        for item in items:
            lst.addItem(item)
        match = next((i for i in items if i.profile_name == wanted), items[0] if items else None)
        if match is not None:
            lst.setCurrentItem(match)
        lst.blockSignals(False)

        self._on_profile_selected(match, None)

    def _on_profile_selected(self, current: QListWidgetItem, previous):
        profile = None
        if isinstance(current, ProfileListItem):
            try:
                profile = self.pm.load(current.profile_name)
            except ProfileError as e:
                self._log(f"❌ {e}")
        self._selected = profile
        self._show_profile(profile)
        self._set_busy(self._worker is not None)
        if profile:
            self.settings.set("last_profile", profile.name)

    def _show_profile(self, profile: Optional[Profile]):
        if profile is None:
            self.title_lbl.setText("Select a profile →")
            self.notes_lbl.setText("")
            for value in self._fields.values():
                value.setText("")
            return

        settings = profile.settings
        perms = settings.permissions
        report = check_profile(profile.name, settings, profile.instructions)
        details = report.overall.error or "; ".join(report.overall.warnings)

        self.title_lbl.setText(profile.name)
        self.notes_lbl.setText(profile.notes)
        texts = {
            "model": settings.model or "(default)",
            "env": f"{len(settings.env)} variable(s)",
            "permissions": f"{len(perms.get('allow') or [])} allow / {len(perms.get('deny') or [])} deny",
            "instructions": (
                f"{len(profile.instructions.splitlines())} line(s)" if profile.has_instructions() else "none"
            ),
            "services": ", ".join(sorted(profile.services)) or "none",
            "health": report.summary + (f": {details}" if details else ""),
        }
        for key, text in texts.items():
            self._fields[key].setText(text)
        self._refresh_live_status()

    def _refresh_live_status(self):
        """Live document presence and drift of the active profile."""
        for doc_id, status in self.switcher.get_all_statuses().items():
            cls = DOCUMENT_REGISTRY[doc_id]
            state = status.notes or ("present" if status.exists else "missing")
            self._document_rows[doc_id].setText(f"{cls.icon}  {cls.display_name} — {state}")

        try:
            dirty = self.switcher.has_unsaved_changes()
        except ProfileError as e:
            dirty = False
            logger.debug(f"Drift check failed: {e}")
        current = self.pm.get_current()
        self.drift_lbl.setText(
            f"⚠ Live configuration differs from saved profile '{current}'" if dirty else ""
        )

    # ------------------------------------------------------------------
    # Profile actions
    # ------------------------------------------------------------------

    def _on_new_profile(self):
        dlg = ProfileEditorDialog(self, profile=None, existing_names=self.pm.list())
        if not dlg.exec():
            return
        profile = dlg.profile
        try:
            if dlg.capture_current:
                _, warnings = self.switcher.create_from_current(profile.name, profile.notes)
                for w in warnings:
                    self._log(f"⚠ {w}")
                self._log(f"✅ Created profile '{profile.name}' from current configuration")
            else:
                self.pm.save(profile)
                self._log(f"✅ Created empty profile '{profile.name}'")
        except ProfileError as e:
            QMessageBox.warning(self, "Error", str(e))
            return
        self._refresh_profile_list(select=profile.name)

    def _on_duplicate_profile(self):
        if not self._selected:
            return
        src = self._selected.name
        taken = set(self.pm.list())
        suggestion = next(
            s for s in (f"{src}-copy{i or ''}" for i in itertools.count()) if s not in taken
        )

        name, ok = QInputDialog.getText(self, "Duplicate Profile", "Name for the duplicate:", text=suggestion)
        name = name.strip()
        if not ok or not name:
            return
        try:
            self.pm.duplicate(src, name)
        except ProfileError as e:
            QMessageBox.warning(self, "Duplicate failed", str(e))
            return
        self._log(f"✅ Duplicated '{src}' → '{name}'")
        self._refresh_profile_list(select=name)

    def _on_edit_profile(self):
        if not self._selected:
            return
        original = self._selected
        existing = [n for n in self.pm.list() if n != original.name]
        dlg = ProfileEditorDialog(self, profile=original, existing_names=existing)
        if not dlg.exec():
            return
        updated = dlg.profile
        try:
            if updated.name != original.name:
                self.pm.rename(original.name, updated.name)
            updated.touch()
            self.pm.save(updated)
        except ProfileError as e:
            QMessageBox.warning(self, "Edit failed", str(e))
            return
        self._log(f"✅ Updated profile '{updated.name}'")
        self._refresh_profile_list(select=updated.name)

    def _on_delete_profile(self):
        if not self._selected:
            return
        name = self._selected.name
        if not self._ask("Delete Profile", f"Delete profile '{name}'?\nThis cannot be undone."):
            return
        try:
            self.pm.delete(name)
        except ProfileError as e:
            QMessageBox.warning(self, "Delete failed", str(e))
            return
        self._selected = None
        self._log(f"🗑 Deleted profile '{name}'")
        self._refresh_profile_list()

    def _show_profile_context_menu(self, pos):
        item = self.profile_list.itemAt(pos)
        if not isinstance(item, ProfileListItem):
            return
        menu = QMenu(self)
        menu.addAction("▶ Switch To", self._on_switch)
        menu.addAction("💾 Save Live → Profile", self._on_sync)
        menu.addAction("✏ Edit", self._on_edit_profile)
        menu.addAction("⧉ Duplicate", self._on_duplicate_profile)
        menu.addSeparator()
        menu.addAction("🗑 Delete", self._on_delete_profile)
        menu.exec(self.profile_list.viewport().mapToGlobal(pos))

    # ------------------------------------------------------------------
    # Switch / toggle / sync
    # ------------------------------------------------------------------

    def _on_switch(self):
        if not self._selected:
            return
        name = self._selected.name
        if not self._confirm_sessions_closed():
            return
        if self.settings.get("confirm_before_switch", True) and not self._ask(
            "Switch Profile",
            f"Switch the live configuration to '{name}'?\n"
            "The current configuration is backed up first.",
        ):
            return
        self._log(f"▶ Switching to '{name}'...")
        self._run_worker(lambda progress: self.switcher.switch_to(name, progress=progress),
                         on_done=self._on_switch_done)

    def _on_toggle(self):
        if not self.pm.get_previous():
            QMessageBox.information(self, "Switch Back", "There is no previous profile yet.")
            return
        if not self._confirm_sessions_closed():
            return
        self._log("⇄ Switching back to the previous profile...")
        self._run_worker(lambda progress: self.switcher.toggle(progress=progress),
                         on_done=self._on_switch_done)

    def _confirm_sessions_closed(self) -> bool:
        if not self.settings.get("check_running_tool", True):
            return True
        status = self.switcher.check_conflicts()
        if not status.is_running:
            return True
        dlg = ConflictDialog(self, status=status, recheck_fn=self.switcher.check_conflicts)
        return dlg.exec() != 0

    def _on_switch_done(self, result):
        if isinstance(result, SwitchError):
            self._log(f"❌ {result}")
            self._log_result(result.result)
            self._log("↩ Rolled back" if result.result.rollback_ok else "⚠ Rollback incomplete")
            self.status_bar.showMessage("Switch failed — check log")
        elif isinstance(result, ProfileError):
            self._log(f"❌ {result}")
            self.status_bar.showMessage("Switch failed — nothing was changed")
        else:
            self._log_result(result)
            self._log(f"✅ Switched to '{result.profile}' — {result.summary}")
            self.status_bar.showMessage(f"Active profile: {result.profile}")
            self._refresh_profile_list(select=result.profile)
            return
        self._refresh_profile_list()

    def _on_sync(self):
        if not self._selected:
            return
        name = self._selected.name
        if not self._ask("Save Live Configuration",
                         f"Overwrite profile '{name}' with the current live configuration?"):
            return

        def done(result):
            if isinstance(result, ProfileError):
                self._log(f"❌ {result}")
            else:
                self._log(f"✅ Saved live configuration to '{name}'")
            self._refresh_profile_list(select=name)

        self._run_worker(lambda progress: self.switcher.sync_to_profile(name), on_done=done)

    # ------------------------------------------------------------------
    # Backups / export
    # ------------------------------------------------------------------

    def _on_restore_latest(self):
        latest = self.switcher.backups.get_latest()
        if not latest:
            QMessageBox.information(self, "No Backup", "No backups found.")
            return
        if not self._ask(
            "Restore Latest Backup",
            f"Overwrite the live configuration with backup {latest}?\n"
            "The active profile marker is not changed.",
        ):
            return

        def done(result):
            self._log(f"❌ {result}" if isinstance(result, ProfileError) else f"✅ Restored {result}")
            self._refresh_profile_list()

        self._run_worker(lambda progress: self.switcher.backups.restore_latest(), on_done=done)

    def _on_export(self):
        if not self._selected:
            return
        path, _ = QFileDialog.getSaveFileName(
            self, "Export Profile", f"{self._selected.name}.json", "JSON (*.json)"
        )
        if not path:
            return
        try:
            with open(path, "w", encoding="utf-8") as fp:
                export_profile(self.pm, self._selected.name, fp)
        except (OSError, ProfileError) as e:
            QMessageBox.warning(self, "Export failed", str(e))
            return
        self._log(f"⬆ Exported '{self._selected.name}' to {path}")

    def _on_import(self):
        path, _ = QFileDialog.getOpenFileName(self, "Import Profile", "", "JSON (*.json)")
        if not path:
            return
        new_name, ok = QInputDialog.getText(
            self, "Import Profile", "Profile name (leave empty to keep the exported name):"
        )
        if not ok:
            return
        try:
            with open(path, encoding="utf-8") as fp:
                profile = import_profile(self.pm, fp, new_name.strip())
        except (OSError, ProfileError) as e:
            QMessageBox.warning(self, "Import failed", str(e))
            return
        self._log(f"⬇ Imported profile '{profile.name}'")
        self._refresh_profile_list(select=profile.name)

    # ------------------------------------------------------------------
    # Worker / progress
    # ------------------------------------------------------------------

    def _run_worker(self, fn, on_done):
        self._set_busy(True)
        self._worker = WorkerThread(fn, parent=self)
        self._worker.progress.connect(self._on_progress)
        self._worker.finished.connect(lambda _: setattr(self, "_worker", None))
        self._worker.finished.connect(on_done)
        self._worker.start()

    def _on_progress(self, doc_id: str, step: str, message: str):
        self._log(f"  [{doc_id}] {message}")
        self.status_bar.showMessage(message)

    def _set_busy(self, busy: bool):
        self.busy_bar.setVisible(busy)
        has_profile = not busy and bool(self._selected)
        for btn in (self.switch_btn, self.sync_btn, self.edit_btn, self.dup_btn,
                    self.del_btn, self.export_btn):
            btn.setEnabled(has_profile)
        self.toggle_btn.setEnabled(not busy)
        self.restore_btn.setEnabled(not busy)

    # ------------------------------------------------------------------
    # Logging
    # ------------------------------------------------------------------

    def _ask(self, title: str, text: str) -> bool:
        buttons = QMessageBox.StandardButton.Yes | QMessageBox.StandardButton.Cancel
        return QMessageBox.question(self, title, text, buttons) == QMessageBox.StandardButton.Yes

    def _log(self, message: str):
        self.log_view.appendPlainText(message)
        logger.info(message.strip())

    def _log_result(self, result: OperationResult):
        if result.backup_id:
            self._log(f"  backup: {result.backup_id}")
        for doc_id, (ok, msg) in result.document_results.items():
            if not ok:
                self._log(f"   {doc_id}: {msg}")
        for w in result.warnings:
            self._log(f"⚠ {w}")

    # ------------------------------------------------------------------
    # Window lifecycle
    # ------------------------------------------------------------------

    def closeEvent(self, event):
        geom = self.saveGeometry().toHex().data().decode()
        self.settings.set("window_geometry", geom)
        super().closeEvent(event)
