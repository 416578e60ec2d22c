from pathlib import Path

from PySide6.QtWidgets import (
    QWidget, QVBoxLayout, QHBoxLayout, QLabel,
    QPushButton, QScrollArea, QFrame, QDialog,
    QMessageBox, QFileDialog
)
from PySide6.QtCore import Qt, QUrl, Signal
from PySide6.QtGui import QDesktopServices

from core.job_queue import JobQueue
from core.models import Job, ProgressEvent, TaskType
from core.scanner import encode_options_for_folder
from ui.dialogs.add_job import AddJobDialog
from ui.pages._job_card import JobCard


def _open_local(path: str) -> bool:
    """Hand a file or folder to the desktop's default application."""
    print(f"[UI] Opening '{path}'")
    return QDesktopServices.openUrl(QUrl.fromLocalFile(path))


def _header_button(label: str, color: str, hover: str, pressed: str) -> QPushButton:
    btn = QPushButton(label)
    btn.setFixedHeight(32)
    btn.setCursor(Qt.CursorShape.PointingHandCursor)
    btn.setStyleSheet(f"""
        QPushButton {{
            background-color: {color};
            color: white;
            border: none;
            border-radius: 6px;
            padding: 0 14px;
            font-size: 10pt;
            font-weight: 600;
        }}
        QPushButton:hover    {{ background-color: {hover}; }}
        QPushButton:pressed  {{ background-color: {pressed}; }}
        QPushButton:disabled {{ background-color: #333; color: #777; }}
    """)
    return btn


class QueuePage(QWidget):
    """Main queue page: one card per job plus the run controls."""

    job_selected   = Signal(object)   # Job
    job_deselected = Signal()

    def __init__(self, switch_callback, queue: JobQueue,
                 hw_encoders: dict | None = None, parent=None):
        super().__init__(parent)
        self.switch_callback = switch_callback
        self.queue = queue
        self.hw_encoders = hw_encoders or {}
        self._job_cards: dict[str, JobCard] = {}   # job id → card
        self._selected_card: JobCard | None = None

        # Connect queue signals
        self.queue.job_added.connect(self._on_job_added)
        self.queue.job_removed.connect(self._on_job_removed)
        self.queue.job_changed.connect(self._on_job_changed)
        self.queue.progress.connect(self._on_progress)
        self.queue.running_changed.connect(self._on_running_changed)
        self.queue.busy_changed.connect(self._on_busy_changed)
        self.queue.notice.connect(self._on_notice)
        self.queue.drained.connect(self._on_drained)
        self.queue.cleared.connect(self._on_cleared)

        root = QVBoxLayout(self)
        root.setContentsMargins(0, 0, 0, 0)
        root.setSpacing(0)

        # ── Header bar ────────────────────────────────────────────────────────
        header_bar = QWidget()
        header_bar.setFixedHeight(56)
        header_bar.setStyleSheet("background-color: #1e1e1e; border-bottom: 1px solid #333;")
        header_layout = QHBoxLayout(header_bar)
        header_layout.setContentsMargins(16, 0, 16, 0)
        header_layout.setSpacing(8)

        page_title = QLabel("Queue")
        page_title.setStyleSheet("color: #e0e0e0; font-size: 14pt; font-weight: 700;")
        header_layout.addWidget(page_title)

        self.count_label = QLabel()
        self.count_label.setStyleSheet("color: #777; font-size: 9pt;")
        header_layout.addWidget(self.count_label)
        header_layout.addStretch()

        self.add_job_btn = _header_button("＋  Add", "#558B6E", "#67a382", "#446e58")
        self.add_job_btn.clicked.connect(self._add_job)
        header_layout.addWidget(self.add_job_btn)

        self.add_folder_btn = _header_button("📁  Folder", "#3a3a3a", "#4a4a4a", "#2a2a2a")
        self.add_folder_btn.clicked.connect(self._add_folder)
        header_layout.addWidget(self.add_folder_btn)

        self.start_btn = _header_button("▶  Start", "#27ae60", "#2ecc71", "#1e8449")
        self.start_btn.clicked.connect(self.queue.advance)
        header_layout.addWidget(self.start_btn)

        self.pause_btn = _header_button("⏸  Pause", "#f39c12", "#f5b041", "#b9770e")
        self.pause_btn.setToolTip("Finish the current job, then stop")
        self.pause_btn.clicked.connect(self.queue.pause)
        header_layout.addWidget(self.pause_btn)

        self.stop_btn = _header_button("■  Stop", "#c0392b", "#e74c3c", "#922b21")
        self.stop_btn.setToolTip("Cancel the current job and stop")
        self.stop_btn.clicked.connect(self.queue.cancel_active_and_pause)
        header_layout.addWidget(self.stop_btn)

        self.clear_btn = _header_button("Clear", "#444444", "#666666", "#333333")
        self.clear_btn.clicked.connect(self._clear)
        header_layout.addWidget(self.clear_btn)

        self.settings_btn = QPushButton("⚙")
        self.settings_btn.setFixedSize(32, 32)
        self.settings_btn.setCursor(Qt.CursorShape.PointingHandCursor)
        self.settings_btn.setStyleSheet("""
            QPushButton {
                background-color: transparent;
                color: #aaaaaa;
                border: 1px solid #444;
                border-radius: 6px;
                font-size: 14pt;
            }
            QPushButton:hover { color: #e0e0e0; border-color: #666; }
        """)
        self.settings_btn.clicked.connect(lambda: switch_callback("settings"))
        header_layout.addWidget(self.settings_btn)

        root.addWidget(header_bar)

        # ── Scroll area ───────────────────────────────────────────────────────
        scroll = QScrollArea()
        scroll.setWidgetResizable(True)
        scroll.setFrameShape(QFrame.Shape.NoFrame)
        scroll.setStyleSheet("background-color: #121212;")
        root.addWidget(scroll)

        canvas = QWidget()
        canvas.setStyleSheet("background-color: #121212;")
        canvas_layout = QHBoxLayout(canvas)
        canvas_layout.setContentsMargins(0, 16, 0, 16)
        scroll.setWidget(canvas)

        self._jobs_column = QWidget()
        self._jobs_column.setStyleSheet("background: transparent;")
        self._jobs_layout = QVBoxLayout(self._jobs_column)
        self._jobs_layout.setSpacing(10)
        self._jobs_layout.setContentsMargins(0, 0, 0, 0)
        self._jobs_layout.setAlignment(Qt.AlignmentFlag.AlignTop)

        canvas_layout.addStretch(1)
        canvas_layout.addWidget(self._jobs_column, 8)
        canvas_layout.addStretch(1)

        # ── Empty-state label ─────────────────────────────────────────────────
        self._empty_label = QLabel("The queue is empty.\nClick  ＋ Add  to get started.")
        self._empty_label.setAlignment(Qt.AlignmentFlag.AlignCenter)
        self._empty_label.setStyleSheet("color: #555; font-size: 11pt;")
        self._jobs_layout.addStretch()
        self._jobs_layout.addWidget(self._empty_label)
        self._jobs_layout.addStretch()

        self._refresh_controls()

    # ── Add via dialog ────────────────────────────────────────────────────────

    def _new_dialog(self, title: str) -> AddJobDialog:
        return AddJobDialog(
            self, title=title,
            hw_encoders=self.hw_encoders,
            download_dir=self.queue.settings.download_dir,
        )

    def _add_job(self):
        dialog = self._new_dialog("Add to Queue")
        if dialog.exec() == QDialog.DialogCode.Accepted:
            self.queue.enqueue(
                dialog.get_options(),
                dialog.task_type,
                preset_used=dialog.get_preset_used(),
            )

    def _add_folder(self):
        folder = QFileDialog.getExistingDirectory(self, "Select Folder to Encode")
        if not folder:
            return

        dialog = self._new_dialog("Encode Folder")
        dialog.use_as_template()
        if dialog.exec() != QDialog.DialogCode.Accepted:
            return

        batch = encode_options_for_folder(
            Path(folder), dialog.get_options(), self.queue.settings.output_suffix
        )
        if not batch:
            QMessageBox.information(self, "Encode Folder", "No video files found in that folder.")
            return

        preset = dialog.get_preset_used()
        for options in batch:
            # enqueue() reports the limit itself
            if self.queue.enqueue(options, TaskType.ENCODE, preset_used=preset) is None:
                break

    def _clear(self):
        if not len(self.queue):
            return
        reply = QMessageBox.question(
            self,
            "Clear Queue",
            "Remove every job from the queue?\n\nA running encode will be stopped.",
            QMessageBox.StandardButton.Yes | QMessageBox.StandardButton.Cancel,
        )
        if reply == QMessageBox.StandardButton.Yes:
            self.queue.clear()

    # ── Card factory ──────────────────────────────────────────────────────────

    def _create_card(self, job: Job) -> JobCard:
        card = JobCard(job)
        self._job_cards[job.id] = card
        card.card_selected.connect(self._on_card_selected)
        card.edit_requested.connect(self._on_edit_requested)
        card.retry_requested.connect(self.queue.retry)
        card.remove_requested.connect(self._on_remove_requested)
        card.open_requested.connect(self._on_open_requested)
        card.folder_requested.connect(self._on_open_requested)
        return card

    def _drop_card(self, job_id: str):
        card = self._job_cards.pop(job_id, None)
        if card is None:
            return
        if self._selected_card is card:
            self._selected_card = None
            self.job_deselected.emit()
        self._jobs_layout.removeWidget(card)
        card.deleteLater()

    # ── Empty-state helpers ───────────────────────────────────────────────────

    def _hide_empty_state(self):
        if not self._job_cards:
            self._empty_label.hide()
            self._jobs_layout.removeWidget(self._empty_label)
            for i in reversed(range(self._jobs_layout.count())):
                item = self._jobs_layout.itemAt(i)
                if item and item.spacerItem():
                    self._jobs_layout.removeItem(item)

    def _maybe_show_empty_state(self):
        if not self._job_cards:
            self._jobs_layout.addStretch()
            self._jobs_layout.addWidget(self._empty_label)
            self._jobs_layout.addStretch()
            self._empty_label.show()

    def _refresh_controls(self):
        running = self.queue.is_running
        has_jobs = len(self.queue) > 0
        self.start_btn.setVisible(not running)
        self.start_btn.setEnabled(has_jobs)
        self.pause_btn.setVisible(running)
        self.stop_btn.setEnabled(running or self.queue.is_busy)
        self.clear_btn.setEnabled(has_jobs)
        self.count_label.setText(f"{len(self.queue)} / {self.queue.max_size}")

    # ── Card signal handlers ──────────────────────────────────────────────────

    def _on_card_selected(self, clicked_card: JobCard):
        if self._selected_card and self._selected_card is not clicked_card:
            self._selected_card.collapse()
            self.job_deselected.emit()
        self._selected_card = clicked_card
        self.job_selected.emit(clicked_card.job)

    def _on_edit_requested(self, job_id: str):
        job = self.queue.get(job_id)
        if job is None:
            return

        dialog = self._new_dialog("Edit Job")
        dialog.populate_from_job(job)
        if dialog.exec() != QDialog.DialogCode.Accepted:
            return

        if not self.queue.update_options(job_id, dialog.get_options(), dialog.get_preset_used()):
            QMessageBox.warning(self, "Edit Job", "This job has started and can no longer be edited.")

    def _on_open_requested(self, path: str):
        if not _open_local(path):
            QMessageBox.warning(self, "Open", f"Could not open:\n{path}")

    def _on_remove_requested(self, job_id: str):
        job = self.queue.get(job_id)
        if job is None:
            return
        if job is self.queue.active_job:
            reply = QMessageBox.question(
                self,
                "Remove Job",
                f"\"{job.name}\" is encoding right now.\n\nStop it and pause the queue?",
                QMessageBox.StandardButton.Yes | QMessageBox.StandardButton.Cancel,
            )
            if reply != QMessageBox.StandardButton.Yes:
                return
        self.queue.remove(job_id)

    # ── Queue signal handlers ─────────────────────────────────────────────────

    def _on_job_added(self, job: Job):
        self._hide_empty_state()
        self._jobs_layout.addWidget(self._create_card(job))
        self._refresh_controls()

    def _on_job_removed(self, job_id: str):
        self._drop_card(job_id)
        self._maybe_show_empty_state()
        self._refresh_controls()

    def _on_job_changed(self, job: Job):
        card = self._job_cards.get(job.id)
        if card:
            card.refresh()
            if self._selected_card is card:
                self.job_selected.emit(job)
        self._refresh_controls()

    def _on_progress(self, job_id: str, event: ProgressEvent):
        card = self._job_cards.get(job_id)
        if card:
            card.update_progress(event)

    def _on_running_changed(self, _running: bool):
        self._refresh_controls()

    def _on_busy_changed(self, _busy: bool):
        # A cleared job's process can exit after the queue is already empty
        self._refresh_controls()

    def _on_notice(self, message: str):
        QMessageBox.information(self, "Queue", message)

    def _on_drained(self):
        if self.queue.settings.notify_on_complete:
            QMessageBox.information(self, "Queue", "All jobs in the queue have finished.")

    def _on_cleared(self):
        for job_id in list(self._job_cards):
            self._drop_card(job_id)
        self._maybe_show_empty_state()
        self._refresh_controls()
