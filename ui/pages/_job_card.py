from pathlib import Path

from PySide6.QtWidgets import (
    QFrame, QVBoxLayout, QSizePolicy, QLabel, QHBoxLayout,
    QProgressBar, QWidget, QPushButton
)
from PySide6.QtCore import Qt, Signal

from core.models import Job, JobStatus, ProgressEvent, TaskType
from core.presets import VIDEO_CODEC_LABELS, format_preset_name


class StatusBadge(QLabel):
    """A colored status indicator badge."""

    def __init__(self, status: JobStatus, parent=None):
        super().__init__(parent)
        self.set_status(status)

    def set_status(self, status: JobStatus):
        status_map = {
            JobStatus.PENDING:   ("Pending",    "#666666"),
            JobStatus.ENCODING:  ("Encoding…",  "#27ae60"),
            JobStatus.COMPLETED: ("Done",       "#558B6E"),
            JobStatus.FAILED:    ("Failed",     "#e74c3c"),
        }
        text, color = status_map.get(status, ("Unknown", "#888888"))
        self.setText(text)
        self.setStyleSheet(f"""
            QLabel {{
                background-color: {color};
                color: white;
                padding: 4px 12px;
                border-radius: 4px;
                font-size: 8pt;
                font-weight: 600;
            }}
        """)


def _action_button(label: str, color: str, hover: str) -> QPushButton:
    """Factory for the small action-bar buttons."""
    btn = QPushButton(label)
    btn.setFixedHeight(28)
    btn.setCursor(Qt.CursorShape.PointingHandCursor)
    btn.setStyleSheet(f"""
        QPushButton {{
            background-color: {color};
            color: white;
            border: none;
            border-radius: 5px;
            padding: 0 16px;
            font-size: 9pt;
            font-weight: 600;
        }}
        QPushButton:hover   {{ background-color: {hover}; }}
        QPushButton:pressed {{ opacity: 0.8; }}
    """)
    return btn


def describe_job(job: Job) -> str:
    """One-line summary shown under the job name."""
    opts = job.options
    if job.task_type == TaskType.ENCODE:
        parts = [VIDEO_CODEC_LABELS.get(opts.codec, opts.codec), opts.format]
        if job.preset_used:
            parts.insert(0, format_preset_name(job.preset_used))
        return "  •  ".join(parts)
    if job.task_type == TaskType.TRIM:
        span = f"{opts.start or 'start'} → {opts.end or 'end'}"
        return f"Trim  •  {span}  •  {'re-encode' if opts.reencode else 'stream copy'}"
    if job.task_type == TaskType.EXTRACT:
        return f"Extract audio  •  {opts.format}"
    return f"Download  •  {opts.format}  •  {opts.output_dir}"


class JobCard(QFrame):
    """
    Clickable job card.

    Clicking anywhere on the card toggles a compact action bar that
    exposes Edit / Retry / Remove buttons, plus Open / Show in Folder
    once the job has produced its output.

    Signals
    -------
    card_selected(JobCard)   – emitted when this card is clicked so the
                               queue page can collapse other cards
    edit_requested(str)      – job id
    retry_requested(str)     – job id
    remove_requested(str)    – job id
    open_requested(str)      – output file to open
    folder_requested(str)    – folder holding the output
    """

    card_selected    = Signal(object)   # passes self
    edit_requested   = Signal(str)
    retry_requested  = Signal(str)
    remove_requested = Signal(str)
    open_requested   = Signal(str)
    folder_requested = Signal(str)

    # ── base / selected border colours ────────────────────────────────────────
    _STYLE_BASE = """
        QFrame#JobCard {{
            background-color: #2a2a2a;
            border: 1px solid {border};
            border-radius: 8px;
        }}
    """

    def __init__(self, job: Job, parent=None):
        super().__init__(parent)
        self.job = job
        self._expanded = False

        self.setObjectName("JobCard")
        self.setSizePolicy(QSizePolicy.Policy.Expanding, QSizePolicy.Policy.Fixed)
        self._apply_style(selected=False)
        self._setup_ui()
        self.refresh()

    # ── Style helpers ─────────────────────────────────────────────────────────

    def _apply_style(self, selected: bool):
        border = "#558B6E" if selected else "#3a3a3a"
        self.setStyleSheet(self._STYLE_BASE.format(border=border))

    # ── UI construction ───────────────────────────────────────────────────────

    def _setup_ui(self):
        root = QVBoxLayout(self)
        root.setContentsMargins(14, 12, 14, 12)
        root.setSpacing(8)

        # ── Top row ───────────────────────────────────────────────────────────
        top_row = QHBoxLayout()
        top_row.setSpacing(12)

        info_col = QVBoxLayout()
        info_col.setSpacing(2)
        info_col.setContentsMargins(0, 0, 0, 0)

        self.title_label = QLabel()
        self.title_label.setStyleSheet(
            "color: #e0e0e0; font-size: 11pt; font-weight: 600; background: transparent;"
        )
        info_col.addWidget(self.title_label)

        self.details_label = QLabel()
        self.details_label.setStyleSheet("color: #888; font-size: 8pt; background: transparent;")
        self.details_label.setWordWrap(True)
        info_col.addWidget(self.details_label)

        top_row.addLayout(info_col)
        top_row.addStretch()

        self.status_badge = StatusBadge(self.job.status)
        top_row.addWidget(self.status_badge)

        root.addLayout(top_row)

        # ── Progress bar ──────────────────────────────────────────────────────
        self.progress_bar = QProgressBar()
        self.progress_bar.setStyleSheet("""
            QProgressBar {
                border: 1px solid #444;
                border-radius: 4px;
                background-color: #1a1a1a;
                text-align: center;
                height: 18px;
            }
            QProgressBar::chunk { background-color: #558B6E; }
        """)
        self.progress_bar.setRange(0, 100)
        self.progress_bar.setValue(0)
        self.progress_bar.setVisible(False)
        root.addWidget(self.progress_bar)

        # ── Live speed / elapsed ──────────────────────────────────────────────
        self.stats_label = QLabel()
        self.stats_label.setStyleSheet("color: #999; font-size: 8pt; background: transparent;")
        self.stats_label.setVisible(False)
        root.addWidget(self.stats_label)

        # ── Error label ───────────────────────────────────────────────────────
        self.error_label = QLabel()
        self.error_label.setStyleSheet("color: #e74c3c; font-size: 8pt; background: transparent;")
        self.error_label.setVisible(False)
        self.error_label.setWordWrap(True)
        root.addWidget(self.error_label)

        # ── Action bar (hidden until card is clicked) ─────────────────────────
        self._action_bar = self._build_action_bar()
        self._action_bar.setVisible(False)
        root.addWidget(self._action_bar)

        self.setMinimumHeight(90)

    def _build_action_bar(self) -> QWidget:
        """Create the Edit / Retry / Open / Folder / Remove row."""
        bar = QWidget()
        bar.setStyleSheet("background: transparent;")

        layout = QVBoxLayout(bar)
        layout.setContentsMargins(0, 4, 0, 0)
        layout.setSpacing(6)

        sep = QFrame()
        sep.setFrameShape(QFrame.Shape.HLine)
        sep.setStyleSheet("color: #3a3a3a;")
        layout.addWidget(sep)

        btn_row = QHBoxLayout()
        btn_row.setSpacing(8)

        self._edit_btn   = _action_button("✎  Edit",    "#3d7ec9", "#5294dc")
        self._retry_btn  = _action_button("↻  Retry",   "#27ae60", "#2ecc71")
        self._open_btn   = _action_button("▶  Open file", "#558B6E", "#67a382")
        self._folder_btn = _action_button("📁  Show in folder", "#3a3a3a", "#4a4a4a")
        self._remove_btn = _action_button("🗑  Remove",  "#444444", "#666666")

        self._edit_btn.clicked.connect(  lambda: self.edit_requested.emit(self.job.id))
        self._retry_btn.clicked.connect( lambda: self.retry_requested.emit(self.job.id))
        self._remove_btn.clicked.connect(lambda: self.remove_requested.emit(self.job.id))
        self._open_btn.clicked.connect(  lambda: self.open_requested.emit(self.job.output_path))
        self._folder_btn.clicked.connect(
            lambda: self.folder_requested.emit(str(Path(self.job.output_path).parent))
        )

        btn_row.addWidget(self._edit_btn)
        btn_row.addWidget(self._retry_btn)
        btn_row.addWidget(self._open_btn)
        btn_row.addWidget(self._folder_btn)
        btn_row.addStretch()
        btn_row.addWidget(self._remove_btn)

        layout.addLayout(btn_row)
        return bar

    # ── Click handling ────────────────────────────────────────────────────────

    def mousePressEvent(self, event):
        """Toggle the action bar on left-click."""
        if event.button() == Qt.MouseButton.LeftButton:
            if self._expanded:
                self.collapse()
            else:
                self.card_selected.emit(self)   # let queue page collapse others
                self.expand()
        super().mousePressEvent(event)

    def expand(self):
        self._expanded = True
        self._action_bar.setVisible(True)
        self._apply_style(selected=True)

    def collapse(self):
        self._expanded = False
        self._action_bar.setVisible(False)
        self._apply_style(selected=False)

    # ── Updates (called by QueuePage) ─────────────────────────────────────────

    def refresh(self):
        """Redraw everything from self.job."""
        status = self.job.status
        self.title_label.setText(self.job.name)
        self.details_label.setText(describe_job(self.job))
        self.status_badge.set_status(status)

        self.progress_bar.setRange(0, 100)
        self.progress_bar.setValue(self.job.progress)
        self.progress_bar.setVisible(status == JobStatus.ENCODING)
        self.stats_label.setVisible(status == JobStatus.ENCODING)
        if status != JobStatus.ENCODING:
            self.stats_label.setText("")

        if status == JobStatus.FAILED and self.job.error_message:
            self.error_label.setText(f"Error: {self.job.error_message}")
            self.error_label.setVisible(True)
        else:
            self.error_label.setVisible(False)

        editable = status in (JobStatus.PENDING, JobStatus.FAILED)
        self._edit_btn.setEnabled(editable)
        self._retry_btn.setVisible(status == JobStatus.FAILED)

        has_output = status == JobStatus.COMPLETED and bool(self.job.output_path)
        self._open_btn.setVisible(has_output)
        self._folder_btn.setVisible(has_output)

    def update_progress(self, event: ProgressEvent):
        self.progress_bar.setValue(self.job.progress)
        if event.percent is None:
            # Unknown duration: show a busy bar instead of a stuck 0%
            self.progress_bar.setRange(0, 0)
        else:
            self.progress_bar.setRange(0, 100)
        self.stats_label.setText(f"Elapsed {event.elapsed}  •  Speed {event.speed}")
