from dataclasses import fields

from PySide6.QtWidgets import (
    QWidget, QVBoxLayout, QHBoxLayout, QLabel, QPushButton, QFormLayout,
    QLineEdit, QSpinBox, QCheckBox, QComboBox, QFileDialog, QApplication,
    QMessageBox
)
from PySide6.QtCore import Qt, Signal
from qt_material import apply_stylesheet, list_themes

from core.config import MAX_QUEUE_SIZE, Settings, save_settings
from core.paths import validate_binaries


class SettingsPage(QWidget):
    """
    Application settings page.

    Edits the Settings instance shared with the JobQueue in place, so a
    new output suffix or ffmpeg path applies to the next job dispatched.
    """

    settings_changed = Signal(object)   # Settings

    def __init__(self, switch_callback, settings: Settings, parent=None):
        super().__init__(parent)
        self.switch_callback = switch_callback
        self.settings = settings

        root = QVBoxLayout(self)
        root.setContentsMargins(0, 0, 0, 0)
        root.setSpacing(0)

        # ── Page header bar ───────────────────────────────────────────────────
        header_bar = QWidget()
        header_bar.setFixedHeight(56)
        header_bar.setStyleSheet("background-color: #1e1e1e; border-bottom: 1px solid #333;")
        header_layout = QHBoxLayout(header_bar)
        header_layout.setContentsMargins(16, 0, 16, 0)

        back_btn = QPushButton("← Back")
        back_btn.setFixedHeight(32)
        back_btn.setCursor(Qt.PointingHandCursor)
        back_btn.setStyleSheet("""
            QPushButton {
                background-color: transparent;
                color: #aaaaaa;
                border: 1px solid #444;
                border-radius: 6px;
                padding: 0 12px;
                font-size: 10pt;
            }
            QPushButton:hover { color: #e0e0e0; border-color: #666; }
        """)
        back_btn.clicked.connect(self._go_back)
        header_layout.addWidget(back_btn)

        page_title = QLabel("Settings")
        page_title.setAlignment(Qt.AlignCenter)
        page_title.setStyleSheet("color: #e0e0e0; font-size: 14pt; font-weight: 700;")
        header_layout.addWidget(page_title)
        header_layout.addStretch()

        save_btn = QPushButton("Save")
        save_btn.setFixedHeight(32)
        save_btn.setCursor(Qt.PointingHandCursor)
        save_btn.setStyleSheet("""
            QPushButton {
                background-color: #558B6E;
                color: white;
                border: none;
                border-radius: 6px;
                padding: 0 14px;
                font-size: 10pt;
                font-weight: 600;
            }
            QPushButton:hover  { background-color: #67a382; }
        """)
        save_btn.clicked.connect(self._save)
        header_layout.addWidget(save_btn)

        root.addWidget(header_bar)

        # ── Form ──────────────────────────────────────────────────────────────
        content = QWidget()
        content.setStyleSheet("background-color: #121212; color: #e0e0e0;")
        form = QFormLayout(content)
        form.setContentsMargins(32, 24, 32, 24)
        form.setSpacing(12)

        self.ffmpeg_input = QLineEdit()
        self.ffmpeg_input.setPlaceholderText("Bundled or from PATH")
        form.addRow("FFmpeg:", self._with_browse(self.ffmpeg_input, self._browse_binary))

        self.ffprobe_input = QLineEdit()
        self.ffprobe_input.setPlaceholderText("Bundled or from PATH")
        form.addRow("FFprobe:", self._with_browse(self.ffprobe_input, self._browse_binary))

        self.suffix_input = QLineEdit()
        form.addRow("Output Suffix:", self.suffix_input)

        self.queue_size_spin = QSpinBox()
        self.queue_size_spin.setRange(1, MAX_QUEUE_SIZE * 10)
        form.addRow("Max Queue Size:", self.queue_size_spin)

        self.download_dir_input = QLineEdit()
        form.addRow("Download Folder:", self._with_browse(self.download_dir_input, self._browse_dir))

        self.notify_chk = QCheckBox("Tell me when the queue finishes")
        form.addRow("", self.notify_chk)

        self.theme_combo = QComboBox()
        self.theme_combo.addItems(list_themes())
        form.addRow("Theme:", self.theme_combo)

        root.addWidget(content, 1)

        self._load_into_form()

    # ── Helpers ───────────────────────────────────────────────────────────────

    def _with_browse(self, line: QLineEdit, handler) -> QHBoxLayout:
        row = QHBoxLayout()
        btn = QPushButton("Browse...")
        btn.clicked.connect(lambda: handler(line))
        row.addWidget(line, 1)
        row.addWidget(btn)
        return row

    def _browse_binary(self, target: QLineEdit):
        path, _ = QFileDialog.getOpenFileName(self, "Select Executable")
        if path:
            target.setText(path)

    def _browse_dir(self, target: QLineEdit):
        path = QFileDialog.getExistingDirectory(self, "Select Folder")
        if path:
            target.setText(path)

    def _load_into_form(self):
        s = self.settings
        self.ffmpeg_input.setText(s.ffmpeg_path)
        self.ffprobe_input.setText(s.ffprobe_path)
        self.suffix_input.setText(s.output_suffix)
        self.queue_size_spin.setValue(s.max_queue_size)
        self.download_dir_input.setText(s.download_dir)
        self.notify_chk.setChecked(s.notify_on_complete)
        self.theme_combo.setCurrentText(s.theme)

    def _form_settings(self) -> Settings:
        return Settings(
            ffmpeg_path=self.ffmpeg_input.text().strip(),
            ffprobe_path=self.ffprobe_input.text().strip(),
            output_suffix=self.suffix_input.text().strip(),
            max_queue_size=self.queue_size_spin.value(),
            download_dir=self.download_dir_input.text().strip(),
            notify_on_complete=self.notify_chk.isChecked(),
            theme=self.theme_combo.currentText(),
        )

    # ── Actions ───────────────────────────────────────────────────────────────

    def _save(self):
        updated = self._form_settings()

        errors = validate_binaries(updated.ffmpeg_path, updated.ffprobe_path)
        if errors:
            QMessageBox.warning(self, "FFmpeg not found", "\n".join(errors))

        theme_changed = updated.theme != self.settings.theme
        for f in fields(Settings):
            setattr(self.settings, f.name, getattr(updated, f.name))
        save_settings(self.settings)

        if theme_changed:
            apply_stylesheet(QApplication.instance(), theme=self.settings.theme)

        self.settings_changed.emit(self.settings)
        self.switch_callback("queue")

    def _go_back(self):
        # Discard unsaved edits
        self._load_into_form()
        self.switch_callback("queue")
