from PySide6.QtWidgets import (
    QMainWindow, QWidget, QHBoxLayout, QVBoxLayout,
    QLabel, QStackedWidget, QSizePolicy, QMessageBox
)
from PySide6.QtCore import Qt

from core import JobQueue
from core.command_builder import build_command, command_as_string
from core.config import Settings
from core.models import Job, ProgressEvent, TaskType
from core.paths import ffmpeg_bin, validate_binaries
from core.presets import VIDEO_CODEC_LABELS, format_preset_name
from core.probe import detect_hw_encoders, media_summary, probe_or_none
from ui.pages import QueuePage, SettingsPage


class _Row(QWidget):
    """A label/value pair for the details panel."""

    def __init__(self, label: str, parent=None):
        super().__init__(parent)
        self.setStyleSheet("background: transparent;")
        col = QVBoxLayout(self)
        col.setContentsMargins(0, 0, 0, 0)
        col.setSpacing(1)

        lbl = QLabel(label.upper())
        lbl.setStyleSheet("color: #555; font-size: 8pt; font-weight: 700; letter-spacing: 1px;")
        col.addWidget(lbl)

        self.value = QLabel("—")
        self.value.setStyleSheet("color: #cccccc; font-size: 11pt;")
        self.value.setWordWrap(True)
        self.value.setTextInteractionFlags(Qt.TextInteractionFlag.TextSelectableByMouse)
        col.addWidget(self.value)

    def set(self, text: str):
        self.value.setText(text or "—")


def _settings_summary(job: Job) -> str:
    opts = job.options
    if job.task_type == TaskType.ENCODE:
        codec = VIDEO_CODEC_LABELS.get(opts.codec, opts.codec)
        if opts.codec == "copy":
            return f"{codec}, {opts.format}"
        rate = f"{opts.bitrate} kbps" if opts.rate_mode == "bitrate" else f"CRF {opts.crf}"
        return f"{codec}, {opts.preset}, {rate}, audio {opts.audio_codec}"
    if job.task_type == TaskType.TRIM:
        mode = "re-encode" if opts.reencode else "stream copy"
        return f"{opts.start or 'start'} → {opts.end or 'end'} ({mode})"
    if job.task_type == TaskType.EXTRACT:
        return f"{opts.format}" + (f" @ {opts.bitrate}" if opts.bitrate else "")
    return f"{opts.format} → {opts.output_dir}"


class _SidePanel(QWidget):
    """Right-hand details panel: shows info about the selected job."""

    def __init__(self, settings: Settings, parent=None):
        super().__init__(parent)
        self.settings = settings
        self._job_id: str | None = None
        self._media_cache: dict[str, dict[str, str] | None] = {}   # input path → summary

        self.setStyleSheet("background-color: #1a1a1a;")
        self.setSizePolicy(QSizePolicy.Policy.Fixed, QSizePolicy.Policy.Expanding)

        root = QVBoxLayout(self)
        root.setContentsMargins(0, 16, 0, 16)
        root.setSpacing(0)

        # ── Header ────────────────────────────────────────────────────────────
        title = QLabel("DETAILS")
        title.setAlignment(Qt.AlignmentFlag.AlignCenter)
        title.setStyleSheet(
            "color: #666; font-size: 8pt; font-weight: 700; letter-spacing: 2px;"
        )
        root.addWidget(title)

        sep = QWidget()
        sep.setFixedHeight(1)
        sep.setStyleSheet("background-color: #2e2e2e; margin-top: 8px; margin-bottom: 12px;")
        root.addWidget(sep)

        # ── Stacked: placeholder vs content ───────────────────────────────────
        self._stack = QStackedWidget()
        root.addWidget(self._stack, 1)

        # Page 0: placeholder
        ph = QLabel("Select a job\nto see details.")
        ph.setAlignment(Qt.AlignmentFlag.AlignCenter)
        ph.setStyleSheet("color: #444; font-size: 9pt;")
        self._stack.addWidget(ph)

        # Page 1: job details
        content = QWidget()
        content.setStyleSheet("background: transparent;")
        col = QVBoxLayout(content)
        col.setContentsMargins(16, 0, 16, 0)
        col.setSpacing(14)

        col.addStretch()

        self._r_name     = _Row("Name")
        self._r_task     = _Row("Task")
        self._r_status   = _Row("Status")
        self._r_preset   = _Row("Preset")
        self._r_duration = _Row("Duration")
        self._r_res      = _Row("Resolution")
        self._r_bitrate  = _Row("Bitrate")
        self._r_settings = _Row("Settings")
        self._r_output   = _Row("Output")
        self._r_speed    = _Row("Speed")
        self._r_elapsed  = _Row("Elapsed")
        self._r_command  = _Row("FFmpeg Command")
        self._r_command.value.setStyleSheet("color: #999; font-size: 8pt; font-family: monospace;")

        for row in (
            self._r_name, self._r_task, self._r_status, self._r_preset,
            self._r_duration, self._r_res, self._r_bitrate, self._r_settings,
            self._r_output, self._r_speed, self._r_elapsed, self._r_command,
        ):
            col.addWidget(row)

            sep = QWidget()
            sep.setFixedHeight(1)
            sep.setStyleSheet("background-color: #2e2e2e;")
            col.addWidget(sep)

        col.addStretch()
        self._stack.addWidget(content)

    # ── Public API ────────────────────────────────────────────────────────────

    def show_job(self, job: Job) -> None:
        """Populate the panel with the given job's data."""
        if job.id != self._job_id:
            self._r_speed.set("")
            self._r_elapsed.set("")
        self._job_id = job.id

        cmd = build_command(job, ffmpeg_bin(self.settings.ffmpeg_path), self.settings.output_suffix)

        status = job.status.value.capitalize()
        if job.error_message:
            status = f"{status}: {job.error_message}"

        self._r_name.set(job.name)
        self._r_task.set(job.task_type.value.capitalize())
        self._r_status.set(f"{status} ({job.progress}%)")
        self._r_preset.set(format_preset_name(job.preset_used) if job.preset_used else "")
        self._r_settings.set(_settings_summary(job))
        self._r_output.set(job.output_path or cmd[-1])
        self._r_command.set(command_as_string(cmd))
        self._show_media(job)

        self._stack.setCurrentIndex(1)

    def _show_media(self, job: Job) -> None:
        """Source metadata from ffprobe; cached per input, skipped for URLs."""
        info = None
        if job.task_type != TaskType.DOWNLOAD:
            path = job.options.input
            if path not in self._media_cache:
                result = probe_or_none(path, self.settings.ffprobe_path)
                self._media_cache[path] = media_summary(result) if result else None
            info = self._media_cache[path]

        info = info or {}
        self._r_duration.set(info.get("duration", ""))
        self._r_res.set(info.get("resolution", ""))
        self._r_bitrate.set(info.get("bitrate", ""))

    def show_progress(self, job_id: str, event: ProgressEvent) -> None:
        if job_id != self._job_id:
            return
        self._r_speed.set(event.speed)
        self._r_elapsed.set(event.elapsed)

    def clear(self) -> None:
        """Go back to the placeholder."""
        self._job_id = None
        self._stack.setCurrentIndex(0)


# ── Main Window ───────────────────────────────────────────────────────────────

class MainWindow(QMainWindow):
    """Top-level application window."""

    def __init__(self, settings: Settings | None = None):
        super().__init__()
        self.settings = settings or Settings()

        self.queue = JobQueue(settings=self.settings, parent=self)
        hw = detect_hw_encoders(ffmpeg_bin(self.settings.ffmpeg_path))

        self.setWindowTitle("Video Toolbox")
        self.resize(1100, 660)
        self.setMinimumSize(760, 420)
        self.setStyleSheet("background-color: #121212;")
        self.setContentsMargins(0, 0, 0, 0)

        central = QWidget()
        self.setCentralWidget(central)

        outer = QHBoxLayout(central)
        outer.setContentsMargins(0, 0, 0, 0)
        outer.setSpacing(0)

        self._stack = QStackedWidget()
        self._queue_page = QueuePage(self._switch_page, self.queue, hw_encoders=hw)
        self._settings_page = SettingsPage(self._switch_page, self.settings)
        self._stack.addWidget(self._queue_page)
        self._stack.addWidget(self._settings_page)
        self._stack.setCurrentWidget(self._queue_page)

        self._side_panel = _SidePanel(self.settings)
        self._side_panel.setFixedWidth(300)

        separator = QWidget()
        separator.setFixedWidth(1)
        separator.setStyleSheet("background-color: #2e2e2e;")

        outer.addWidget(self._stack, 1)
        outer.addWidget(separator)
        outer.addWidget(self._side_panel)

        # ── Wire detail panel signals ─────────────────────────────────────────
        self._queue_page.job_selected.connect(self._side_panel.show_job)
        self._queue_page.job_deselected.connect(self._side_panel.clear)
        self.queue.progress.connect(self._side_panel.show_progress)

    def showEvent(self, event):
        super().showEvent(event)
        if getattr(self, "_checked_binaries", False):
            return
        self._checked_binaries = True
        errors = validate_binaries(self.settings.ffmpeg_path, self.settings.ffprobe_path)
        if errors:
            QMessageBox.warning(
                self,
                "FFmpeg not found",
                "\n".join(errors)
                + "\n\nInstall FFmpeg or set its location under Settings. "
                "Jobs will fail until it can be found.",
            )

    def closeEvent(self, event):
        if self.queue.is_busy:
            reply = QMessageBox.question(
                self,
                "Quit",
                "A job is still running. Stop it and quit?",
                QMessageBox.StandardButton.Yes | QMessageBox.StandardButton.Cancel,
            )
            if reply != QMessageBox.StandardButton.Yes:
                event.ignore()
                return
        self.queue.shutdown()
        super().closeEvent(event)

    def _switch_page(self, page_name: str):
        pages = {
            "queue":    self._queue_page,
            "settings": self._settings_page,
        }
        widget = pages.get(page_name)
        if widget:
            self._stack.setCurrentWidget(widget)
