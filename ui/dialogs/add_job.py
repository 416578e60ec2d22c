# ui/dialogs/add_job.py

from pathlib import Path

from PySide6.QtWidgets import (
    QDialog, QVBoxLayout, QHBoxLayout, QFormLayout, QLineEdit,
    QPushButton, QFileDialog, QSpinBox, QComboBox, QStackedWidget,
    QWidget, QSlider, QLabel, QDialogButtonBox, QCheckBox, QListWidget,
    QMessageBox,
)
from PySide6.QtCore import Qt

from core import presets
from core.models import (
    AudioTrack, DownloadOptions, EncodeOptions, ExtractOptions, Job,
    SubtitleTrack, TaskType, TrimOptions,
)
from core.progress import hhmmss_to_seconds

VIDEO_FILTER = "Videos (*.mp4 *.mkv *.avi *.mov *.webm *.flv *.wmv);;All files (*)"

_TASK_LABELS = [
    (TaskType.ENCODE,   "Encode"),
    (TaskType.TRIM,     "Trim"),
    (TaskType.EXTRACT,  "Extract audio"),
    (TaskType.DOWNLOAD, "Download"),
]

_FPS_CHOICES = ["source", "24", "25", "30", "50", "60"]
_AUDIO_BITRATES = ["96k", "128k", "160k", "192k", "256k", "320k"]


def _path_row(label: QLabel, on_click) -> QHBoxLayout:
    row = QHBoxLayout()
    btn = QPushButton("Browse...")
    btn.clicked.connect(on_click)
    row.addWidget(label, 1)
    row.addWidget(btn)
    return row


class AddJobDialog(QDialog):
    """
    One dialog for every task type. The task combo switches between
    per-type forms; get_options() returns the matching options dataclass.

    *hw_encoders* ({"nvenc": bool, ...}) hides codecs the local ffmpeg
    can't use.
    """

    def __init__(self, parent=None, title: str = "Add to Queue",
                 hw_encoders: dict | None = None, download_dir: str = ""):
        super().__init__(parent)
        self.setWindowTitle(title)
        self.setMinimumWidth(520)
        self.setStyleSheet("background-color: #1a1a1a; color: #e0e0e0;")

        self._hw = hw_encoders or {}
        self._template = False
        self._download_dir = download_dir

        self._build_ui()
        self._populate_combos()
        self._wire_signals()

    # ── UI construction ───────────────────────────────────────────────────────

    def _build_ui(self):
        layout = QVBoxLayout(self)

        top = QFormLayout()
        self.task_combo = QComboBox()
        for task_type, label in _TASK_LABELS:
            self.task_combo.addItem(label, userData=task_type)
        top.addRow("Task:", self.task_combo)
        layout.addLayout(top)

        self.forms = QStackedWidget()
        self.forms.addWidget(self._build_encode_form())    # index 0
        self.forms.addWidget(self._build_trim_form())      # index 1
        self.forms.addWidget(self._build_extract_form())   # index 2
        self.forms.addWidget(self._build_download_form())  # index 3
        layout.addWidget(self.forms)

        self.buttons = QDialogButtonBox(QDialogButtonBox.Ok | QDialogButtonBox.Cancel)
        self.buttons.accepted.connect(self._validate_and_accept)
        self.buttons.rejected.connect(self.reject)
        layout.addWidget(self.buttons)

    def _build_encode_form(self) -> QWidget:
        page = QWidget()
        form = QFormLayout(page)

        self.enc_input_lbl = QLabel("No file selected")
        self._enc_input_row = _path_row(self.enc_input_lbl, lambda: self._browse_file(self.enc_input_lbl))
        form.addRow("Input File:", self._enc_input_row)

        self.preset_combo = QComboBox()
        form.addRow("Preset:", self.preset_combo)

        form.addRow(QLabel("──────────────────────────────────"))

        self.format_combo = QComboBox()
        form.addRow("Output Format:", self.format_combo)

        self.codec_combo = QComboBox()
        form.addRow("Video Codec:", self.codec_combo)

        self.speed_combo = QComboBox()
        form.addRow("Speed Preset:", self.speed_combo)

        self.rate_combo = QComboBox()
        self.rate_combo.addItem("Constant quality (CRF)", userData="crf")
        self.rate_combo.addItem("Average bitrate", userData="bitrate")
        form.addRow("Rate Control:", self.rate_combo)

        # Dynamic rate widget
        self.rate_stack = QStackedWidget()

        self.crf_widget = QWidget()
        crf_layout = QHBoxLayout(self.crf_widget)
        crf_layout.setContentsMargins(0, 0, 0, 0)
        self.crf_slider = QSlider(Qt.Horizontal)
        self.crf_slider.setRange(0, 51)
        self.crf_slider.setValue(23)
        self.crf_value_lbl = QLabel("23")
        self.crf_slider.valueChanged.connect(lambda v: self.crf_value_lbl.setText(str(v)))
        crf_layout.addWidget(self.crf_slider)
        crf_layout.addWidget(self.crf_value_lbl)
        self.rate_stack.addWidget(self.crf_widget)         # index 0

        self.bitrate_spin = QSpinBox()
        self.bitrate_spin.setRange(100, 200_000)
        self.bitrate_spin.setValue(5000)
        self.bitrate_spin.setSuffix(" kbps")
        self.rate_stack.addWidget(self.bitrate_spin)       # index 1

        form.addRow("Quality:", self.rate_stack)

        self.fps_combo = QComboBox()
        self.fps_combo.addItems(_FPS_CHOICES)
        form.addRow("Frame Rate:", self.fps_combo)

        self.audio_combo = QComboBox()
        self.audio_combo.addItems(presets.AUDIO_PRESETS)
        form.addRow("Audio:", self.audio_combo)

        self.audio_bitrate_combo = QComboBox()
        self.audio_bitrate_combo.addItems(_AUDIO_BITRATES)
        self.audio_bitrate_combo.setCurrentText(presets.DEFAULT_AUDIO_BITRATE)
        form.addRow("Audio Bitrate:", self.audio_bitrate_combo)

        self.source_audio_chk = QCheckBox("Keep source audio track")
        self.source_audio_chk.setChecked(True)
        form.addRow("", self.source_audio_chk)

        self.audio_list = QListWidget()
        self.audio_list.setMaximumHeight(60)
        form.addRow("Extra Audio:", self._list_with_buttons(self.audio_list, "Audio"))

        self.subtitle_list = QListWidget()
        self.subtitle_list.setMaximumHeight(60)
        form.addRow("Subtitles:", self._list_with_buttons(self.subtitle_list, "Subtitle"))

        self.chapters_lbl = QLabel("")
        form.addRow("Chapters:", _path_row(self.chapters_lbl, lambda: self._browse_file(self.chapters_lbl, "All files (*)")))

        self.custom_args_input = QLineEdit()
        self.custom_args_input.setPlaceholderText("e.g. -tune film -movflags +faststart")
        form.addRow("Custom Args:", self.custom_args_input)

        return page

    def _list_with_buttons(self, widget: QListWidget, kind: str) -> QHBoxLayout:
        row = QHBoxLayout()
        row.addWidget(widget, 1)
        col = QVBoxLayout()
        add_btn = QPushButton("+")
        del_btn = QPushButton("−")
        for btn in (add_btn, del_btn):
            btn.setFixedWidth(28)
        add_btn.clicked.connect(lambda: self._add_list_file(widget, kind))
        del_btn.clicked.connect(lambda: widget.takeItem(widget.currentRow()))
        col.addWidget(add_btn)
        col.addWidget(del_btn)
        col.addStretch()
        row.addLayout(col)
        return row

    def _build_trim_form(self) -> QWidget:
        page = QWidget()
        form = QFormLayout(page)

        self.trim_input_lbl = QLabel("No file selected")
        form.addRow("Input File:", _path_row(self.trim_input_lbl, lambda: self._browse_file(self.trim_input_lbl)))

        self.trim_start = QLineEdit()
        self.trim_start.setPlaceholderText("00:00:00")
        form.addRow("Start:", self.trim_start)

        self.trim_end = QLineEdit()
        self.trim_end.setPlaceholderText("end of file")
        form.addRow("End:", self.trim_end)

        self.trim_format_combo = QComboBox()
        self.trim_format_combo.addItem("Same as input", userData=None)
        for fmt in presets.OUTPUT_FORMATS:
            self.trim_format_combo.addItem(fmt, userData=fmt)
        form.addRow("Output Format:", self.trim_format_combo)

        self.trim_reencode_chk = QCheckBox("Re-encode (frame-accurate, slower)")
        form.addRow("", self.trim_reencode_chk)
        return page

    def _build_extract_form(self) -> QWidget:
        page = QWidget()
        form = QFormLayout(page)

        self.extract_input_lbl = QLabel("No file selected")
        form.addRow("Input File:", _path_row(self.extract_input_lbl, lambda: self._browse_file(self.extract_input_lbl)))

        self.extract_format_combo = QComboBox()
        self.extract_format_combo.addItems(list(presets.EXTRACT_CODECS))
        form.addRow("Audio Format:", self.extract_format_combo)

        self.extract_bitrate_lbl = QLabel("Bitrate:")
        self.extract_bitrate_combo = QComboBox()
        self.extract_bitrate_combo.addItems(_AUDIO_BITRATES)
        self.extract_bitrate_combo.setCurrentText(presets.DEFAULT_AUDIO_BITRATE)
        form.addRow(self.extract_bitrate_lbl, self.extract_bitrate_combo)
        return page

    def _build_download_form(self) -> QWidget:
        page = QWidget()
        form = QFormLayout(page)

        self.url_input = QLineEdit()
        self.url_input.setPlaceholderText("https://…/stream.m3u8")
        form.addRow("URL:", self.url_input)

        self.download_dir_lbl = QLabel(self._download_dir or "No folder selected")
        form.addRow("Save To:", _path_row(self.download_dir_lbl, self._browse_download_dir))

        self.download_name_input = QLineEdit()
        self.download_name_input.setPlaceholderText("from URL")
        form.addRow("File Name:", self.download_name_input)

        self.download_format_combo = QComboBox()
        self.download_format_combo.addItems(presets.OUTPUT_FORMATS + ["mp3", "m4a"])
        form.addRow("Format:", self.download_format_combo)
        return page

    def _populate_combos(self):
        self.preset_combo.addItem("None", userData=None)
        for name in presets.BUILT_IN_PRESETS:
            self.preset_combo.addItem(presets.format_preset_name(name), userData=name)

        self.format_combo.addItems(presets.OUTPUT_FORMATS)

        for logical, label in presets.VIDEO_CODEC_LABELS.items():
            family = logical.rsplit("_", 1)[-1] if "_" in logical else ""
            if family in ("nvenc", "amf", "qsv") and not self._hw.get(family, False):
                continue
            self.codec_combo.addItem(label, userData=logical)

        self.speed_combo.addItems(list(presets.SPEED_PRESETS))
        self.speed_combo.setCurrentText("medium")

        self._on_codec_changed()
        self._on_extract_format_changed()

    def _wire_signals(self):
        self.task_combo.currentIndexChanged.connect(self.forms.setCurrentIndex)
        self.codec_combo.currentIndexChanged.connect(self._on_codec_changed)
        self.rate_combo.currentIndexChanged.connect(self.rate_stack.setCurrentIndex)
        self.audio_combo.currentTextChanged.connect(self._on_audio_changed)
        self.preset_combo.currentIndexChanged.connect(self._on_preset_changed)
        self.extract_format_combo.currentTextChanged.connect(self._on_extract_format_changed)

    def _on_codec_changed(self):
        is_copy = self.codec_combo.currentData() == "copy"
        for w in (self.speed_combo, self.rate_combo, self.rate_stack, self.fps_combo):
            w.setEnabled(not is_copy)

    def _on_audio_changed(self, codec: str):
        self.audio_bitrate_combo.setEnabled(codec not in ("copy", "none"))

    def _on_extract_format_changed(self, *_):
        lossless = self.extract_format_combo.currentText() in presets.LOSSLESS_FORMATS
        self.extract_bitrate_lbl.setVisible(not lossless)
        self.extract_bitrate_combo.setVisible(not lossless)

    def _on_preset_changed(self):
        name = self.preset_combo.currentData()
        if name:
            self._show_encode_options(presets.apply_preset(name, self._encode_options()))

    # ── Collect ───────────────────────────────────────────────────────────────

    @property
    def task_type(self) -> TaskType:
        return self.task_combo.currentData()

    def get_options(self):
        """The options dataclass for the selected task type."""
        task_type = self.task_type
        if task_type == TaskType.TRIM:
            return TrimOptions(
                input=self._path_of(self.trim_input_lbl),
                start=self.trim_start.text().strip() or None,
                end=self.trim_end.text().strip() or None,
                format=self.trim_format_combo.currentData(),
                reencode=self.trim_reencode_chk.isChecked(),
            )
        if task_type == TaskType.EXTRACT:
            fmt = self.extract_format_combo.currentText()
            return ExtractOptions(
                input=self._path_of(self.extract_input_lbl),
                format=fmt,
                bitrate=None if fmt in presets.LOSSLESS_FORMATS else self.extract_bitrate_combo.currentText(),
            )
        if task_type == TaskType.DOWNLOAD:
            return DownloadOptions(
                url=self.url_input.text().strip(),
                output_dir=self._path_of(self.download_dir_lbl),
                format=self.download_format_combo.currentText(),
                filename=self.download_name_input.text().strip() or None,
            )
        return self._encode_options()

    def get_preset_used(self) -> str | None:
        if self.task_type != TaskType.ENCODE:
            return None
        return self.preset_combo.currentData()

    def _encode_options(self) -> EncodeOptions:
        tracks = []
        if self.source_audio_chk.isChecked():
            tracks.append(AudioTrack(is_source=True))
        tracks += [AudioTrack(path=self.audio_list.item(i).text()) for i in range(self.audio_list.count())]
        subs = [SubtitleTrack(path=self.subtitle_list.item(i).text()) for i in range(self.subtitle_list.count())]

        return EncodeOptions(
            input=self._path_of(self.enc_input_lbl),
            format=self.format_combo.currentText(),
            codec=self.codec_combo.currentData() or "h264",
            preset=self.speed_combo.currentText(),
            crf=self.crf_slider.value(),
            rate_mode=self.rate_combo.currentData(),
            bitrate=self.bitrate_spin.value(),
            fps=self.fps_combo.currentText(),
            audio_codec=self.audio_combo.currentText(),
            audio_bitrate=self.audio_bitrate_combo.currentText(),
            audio_tracks=tuple(tracks),
            subtitle_tracks=tuple(subs),
            chapters_file=self.chapters_lbl.text() or None,
            custom_args=self.custom_args_input.text().strip(),
        )

    def _validate_and_accept(self):
        options = self.get_options()
        if not options.input and not self._template:
            QMessageBox.warning(self, "Missing input", "Pick an input file or URL first.")
            return
        if isinstance(options, TrimOptions) and options.start and options.end:
            if hhmmss_to_seconds(options.end) <= hhmmss_to_seconds(options.start):
                QMessageBox.warning(self, "Invalid range", "End time must be after the start time.")
                return
        if isinstance(options, DownloadOptions) and not options.output_dir:
            QMessageBox.warning(self, "Missing folder", "Pick a folder to save the download to.")
            return
        self.accept()

    def use_as_template(self) -> None:
        """
        Encode-only mode for folder batches: the chosen settings are applied
        to every video in the folder, so no input file is picked here.
        """
        self._template = True
        self.task_combo.setCurrentIndex(0)
        self.task_combo.setEnabled(False)
        self.enc_input_lbl.setText("")
        browse_btn = self._enc_input_row.itemAt(1).widget()
        browse_btn.setEnabled(False)

    # ── Pre-populate for editing ──────────────────────────────────────────────

    def populate_from_job(self, job: Job) -> None:
        """Fill every field from an existing job so the user can edit it."""
        index = next(i for i, (t, _) in enumerate(_TASK_LABELS) if t == job.task_type)
        self.task_combo.setCurrentIndex(index)
        # The task type of a queued job is fixed
        self.task_combo.setEnabled(False)

        opts = job.options
        if job.task_type == TaskType.TRIM:
            self.trim_input_lbl.setText(opts.input)
            self.trim_start.setText(opts.start or "")
            self.trim_end.setText(opts.end or "")
            self.trim_format_combo.setCurrentIndex(max(0, self.trim_format_combo.findData(opts.format)))
            self.trim_reencode_chk.setChecked(opts.reencode)
        elif job.task_type == TaskType.EXTRACT:
            self.extract_input_lbl.setText(opts.input)
            self.extract_format_combo.setCurrentText(opts.format)
            if opts.bitrate:
                self.extract_bitrate_combo.setCurrentText(opts.bitrate)
        elif job.task_type == TaskType.DOWNLOAD:
            self.url_input.setText(opts.url)
            self.download_dir_lbl.setText(opts.output_dir)
            self.download_name_input.setText(opts.filename or "")
            self.download_format_combo.setCurrentText(opts.format)
        else:
            # Block signals so _on_preset_changed doesn't overwrite the
            # job's own values with the preset's.
            self.preset_combo.blockSignals(True)
            self.preset_combo.setCurrentIndex(max(0, self.preset_combo.findData(job.preset_used)))
            self.preset_combo.blockSignals(False)
            self._show_encode_options(opts)

    def _show_encode_options(self, opts: EncodeOptions) -> None:
        self.enc_input_lbl.setText(opts.input or "No file selected")
        self.format_combo.setCurrentText(opts.format)
        codec_index = self.codec_combo.findData(opts.codec)
        if codec_index >= 0:
            self.codec_combo.setCurrentIndex(codec_index)
        self.speed_combo.setCurrentText(opts.preset)
        self.rate_combo.setCurrentIndex(1 if opts.rate_mode == "bitrate" else 0)
        self.crf_slider.setValue(opts.crf)
        self.bitrate_spin.setValue(opts.bitrate)
        self.fps_combo.setCurrentText(opts.fps)
        self.audio_combo.setCurrentText(opts.audio_codec)
        self.audio_bitrate_combo.setCurrentText(opts.audio_bitrate)

        self.source_audio_chk.setChecked(any(t.is_source for t in opts.audio_tracks))
        self.audio_list.clear()
        self.audio_list.addItems([t.path for t in opts.audio_tracks if t.path and not t.is_source])
        self.subtitle_list.clear()
        self.subtitle_list.addItems([t.path for t in opts.subtitle_tracks if t.path])
        self.chapters_lbl.setText(opts.chapters_file or "")
        self.custom_args_input.setText(opts.custom_args)

    # ── Browse helpers ────────────────────────────────────────────────────────

    def _browse_file(self, target: QLabel, file_filter: str = VIDEO_FILTER):
        path, _ = QFileDialog.getOpenFileName(self, "Select File", "", file_filter)
        if path:
            target.setText(path)

    def _browse_download_dir(self):
        path = QFileDialog.getExistingDirectory(self, "Select Download Folder")
        if path:
            self.download_dir_lbl.setText(path)

    def _add_list_file(self, widget: QListWidget, kind: str):
        path, _ = QFileDialog.getOpenFileName(self, f"Select {kind} File", "", "All files (*)")
        if path:
            widget.addItem(path)

    @staticmethod
    def _path_of(label: QLabel) -> str:
        text = label.text()
        if text in ("No file selected", "No folder selected"):
            return ""
        return str(Path(text)) if text else ""
