"""
Profile Editor Dialog
Shown when creating a new profile or clicking "Edit" on an existing one.
New profiles either capture the live configuration or start empty; editing
covers name, notes, model and instructions. Everything else in settings.json
is left as it is.
"""

from __future__ import annotations
import copy

from PyQt6.QtWidgets import (
    QDialog, QVBoxLayout, QFormLayout, QLineEdit, QTextEdit,
    QCheckBox, QDialogButtonBox, QLabel,
)

from core.errors import InvalidProfileNameError
from core.profile_manager import Profile
from core.validator import validate_profile_name


class ProfileEditorDialog(QDialog):
    """
    Modal dialog to create or edit a profile.
    On accept, the edited Profile is available via .profile and the
    "capture current configuration" choice via .capture_current.
    """

    def __init__(self, parent=None, profile: Profile | None = None, existing_names: list[str] | None = None):
        super().__init__(parent)
        self.is_new = profile is None
        self.existing_names = set(existing_names or [])
        self.profile = Profile(name="") if self.is_new else copy.deepcopy(profile)
        self.capture_current = self.is_new

        self.setWindowTitle("New Profile" if self.is_new else f"Edit — {self.profile.name}")
        self.setMinimumWidth(520)
        self.setModal(True)
        self._build_ui()
        self._populate()

    def _build_ui(self):
        layout = QVBoxLayout(self)
        layout.setSpacing(16)
        layout.setContentsMargins(20, 20, 20, 20)

        form = QFormLayout()
        form.setSpacing(8)

        self.name_edit = QLineEdit()
        self.name_edit.setPlaceholderText("e.g. work, personal, bedrock...")
        self.name_edit.setMaxLength(64)
        form.addRow("Profile name:", self.name_edit)

        self.notes_edit = QLineEdit()
        self.notes_edit.setPlaceholderText("Optional notes about this profile...")
        form.addRow("Notes:", self.notes_edit)

        self.capture_cb = QCheckBox("Start from the current live configuration")
        self.capture_cb.setVisible(self.is_new)
        self.capture_cb.stateChanged.connect(self._on_capture_toggled)
        form.addRow("", self.capture_cb)

        self.model_edit = QLineEdit()
        self.model_edit.setPlaceholderText("(tool default)")
        form.addRow("Model:", self.model_edit)

        self.instructions_edit = QTextEdit()
        self.instructions_edit.setPlaceholderText("CLAUDE.md contents (leave empty for none)")
        self.instructions_edit.setMinimumHeight(160)
        form.addRow("Instructions:", self.instructions_edit)

        layout.addLayout(form)

        self.error_label = QLabel("")
        self.error_label.setStyleSheet("color: #e05c5c; font-size: 12px;")
        self.error_label.setWordWrap(True)
        layout.addWidget(self.error_label)

        buttons = QDialogButtonBox(QDialogButtonBox.StandardButton.Ok | QDialogButtonBox.StandardButton.Cancel)
        buttons.accepted.connect(self._on_accept)
        buttons.rejected.connect(self.reject)
        layout.addWidget(buttons)

    def _populate(self):
        self.name_edit.setText(self.profile.name)
        self.notes_edit.setText(self.profile.notes)
        self.capture_cb.setChecked(self.capture_current)
        if self.profile.settings is not None:
            self.model_edit.setText(self.profile.settings.model)
        self.instructions_edit.setPlainText(self.profile.instructions)
        self._on_capture_toggled(self.capture_cb.isChecked())

    def _on_capture_toggled(self, state):
        # Content comes from the live files when capturing
        editable = not (self.is_new and bool(state))
        self.model_edit.setEnabled(editable)
        self.instructions_edit.setEnabled(editable)

    def _on_accept(self):
        name = self.name_edit.text().strip()
        try:
            validate_profile_name(name)
        except InvalidProfileNameError as e:
            self.error_label.setText(f"⚠ {e}")
            return
        if name in self.existing_names:
            self.error_label.setText(f"⚠ A profile named '{name}' already exists.")
            return

        self.profile.name = name
        self.profile.notes = self.notes_edit.text().strip()
        self.capture_current = self.is_new and self.capture_cb.isChecked()
        if not self.capture_current:
            self.profile.settings.model = self.model_edit.text().strip()
            self.profile.instructions = self.instructions_edit.toPlainText()

        self.accept()
