from .models import (
    Job, JobStatus, TaskType, ProgressEvent, ProbeResult,
    EncodeOptions, TrimOptions, ExtractOptions, DownloadOptions,
    AudioTrack, SubtitleTrack,
)
from .command_builder import build_command, build_args
from .progress import ProgressParser
from .supervisor import ProcessSupervisor
from .job_queue import JobQueue
from .config import Settings, load_settings, save_settings

__all__ = [
    "Job", "JobStatus", "TaskType", "ProgressEvent", "ProbeResult",
    "EncodeOptions", "TrimOptions", "ExtractOptions", "DownloadOptions",
    "AudioTrack", "SubtitleTrack",
    "build_command", "build_args",
    "ProgressParser",
    "ProcessSupervisor",
    "JobQueue",
    "Settings", "load_settings", "save_settings",
]
