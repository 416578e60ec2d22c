"""
core.models
~~~~~~~~~~~
Pure dataclasses — no Qt, no I/O.
These travel freely between core and ui.

Job options form a tagged union: one frozen dataclass per task type, each
carrying its ``TASK_TYPE`` so the queue never has to guess which fields
are present.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import ClassVar, Optional, Union


# ── Enums ─────────────────────────────────────────────────────────────────────

class TaskType(Enum):
    ENCODE   = "encode"
    TRIM     = "trim"
    EXTRACT  = "extract"
    DOWNLOAD = "download"


class JobStatus(Enum):
    PENDING   = "pending"    # waiting for its turn
    ENCODING  = "encoding"   # ffmpeg is running for this job (any task type)
    COMPLETED = "completed"
    FAILED    = "failed"


# ── Track descriptors (encode only) ───────────────────────────────────────────

@dataclass(frozen=True)
class AudioTrack:
    """Either the source file's first audio stream or an external file."""
    path: Optional[str] = None
    is_source: bool = False


@dataclass(frozen=True)
class SubtitleTrack:
    path: Optional[str] = None


def _source_audio() -> tuple[AudioTrack, ...]:
    return (AudioTrack(is_source=True),)


# ── Options, one per task type ────────────────────────────────────────────────

@dataclass(frozen=True)
class EncodeOptions:
    """
    Everything the encoder view collects for one file.
    Codec / preset / audio names are *logical* names (``"h264"``,
    ``"h264_nvenc"``, ``"opus"``…) — the command builder translates them.
    """
    TASK_TYPE: ClassVar[TaskType] = TaskType.ENCODE

    input: str
    format: str = "mp4"
    codec: str = "h264"
    preset: str = "medium"
    crf: int = 23
    rate_mode: str = "crf"          # "crf" | "bitrate"
    bitrate: int = 5000             # kbps, only used in bitrate mode
    fps: str = "source"
    audio_codec: str = "aac"        # "aac" | "opus" | "copy" | "none"
    audio_bitrate: str = "192k"
    audio_tracks: tuple[AudioTrack, ...] = field(default_factory=_source_audio)
    subtitle_tracks: tuple[SubtitleTrack, ...] = ()
    chapters_file: Optional[str] = None
    custom_args: str = ""
    output_suffix: Optional[str] = None   # None → settings default


@dataclass(frozen=True)
class TrimOptions:
    TASK_TYPE: ClassVar[TaskType] = TaskType.TRIM

    input: str
    start: Optional[str] = None     # "HH:MM:SS[.ms]"
    end: Optional[str] = None
    format: Optional[str] = None    # None → keep the input's extension
    output_suffix: str = "_trimmed"
    reencode: bool = False


@dataclass(frozen=True)
class ExtractOptions:
    TASK_TYPE: ClassVar[TaskType] = TaskType.EXTRACT

    input: str
    format: str = "mp3"
    bitrate: Optional[str] = "192k"  # ignored for flac / wav


@dataclass(frozen=True)
class DownloadOptions:
    TASK_TYPE: ClassVar[TaskType] = TaskType.DOWNLOAD

    url: str
    output_dir: str
    format: str = "mp4"
    filename: Optional[str] = None   # None → derived from the URL

    @property
    def input(self) -> str:
        return self.url


JobOptions = Union[EncodeOptions, TrimOptions, ExtractOptions, DownloadOptions]


# ── Queue entry ───────────────────────────────────────────────────────────────

def _new_id() -> str:
    return str(uuid.uuid4())


def display_name(options: JobOptions) -> str:
    """URL for downloads, file basename for everything else."""
    source = options.input
    if not source:
        return "Unknown"
    if options.TASK_TYPE == TaskType.DOWNLOAD:
        return source
    # Handle both separators regardless of platform
    return source.replace("\\", "/").rsplit("/", 1)[-1]


@dataclass
class Job:
    """
    One queued unit of work.
    Only JobQueue writes ``status`` / ``progress``; the UI reads them.
    """
    task_type: TaskType
    options: JobOptions
    id: str = field(default_factory=_new_id)
    name: str = ""
    preset_used: Optional[str] = None   # display only

    # Runtime state, managed by JobQueue
    status: JobStatus = field(default=JobStatus.PENDING, compare=False)
    progress: int = field(default=0, compare=False)     # 0–99 running, 100 done
    error_message: str = field(default="", compare=False)
    output_path: str = field(default="", compare=False)

    def __post_init__(self):
        if not self.name:
            self.name = display_name(self.options)


# ── Process events ────────────────────────────────────────────────────────────

@dataclass(frozen=True)
class ProgressEvent:
    """
    One normalised progress sample.
    ``percent`` is None until the total duration has been seen.
    """
    percent: Optional[int]
    elapsed: str = "00:00:00"
    speed: str = "0.00x"


# ── Probe result (returned by core.probe) ─────────────────────────────────────

@dataclass
class ProbeResult:
    """Metadata extracted from a media file via ffprobe."""
    path: Path
    duration_seconds: float        # 0.0 if unknown
    width: int  = 0
    height: int = 0
    video_codec: str = ""
    audio_codec: str = ""
    bitrate_kbps: int = 0
    fps: float = 0.0

    @property
    def resolution(self) -> str:
        if not self.width or not self.height:
            return "Unknown"
        return f"{self.width}x{self.height}"
