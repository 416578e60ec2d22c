"""
core.command_builder
~~~~~~~~~~~~~~~~~~~~
Builds ffmpeg CLI commands as plain list[str].

Keeping command construction separate means you can:
  - log / print the exact command before running it
  - paste it straight into a terminal for debugging
  - unit-test flag generation without running any process

Every builder returns the arguments *without* the ffmpeg binary and always
puts the resolved output path last. Unknown option values never raise; they
fall back to the defaults in core.presets.
"""

from __future__ import annotations

import os
import shlex
from pathlib import PurePosixPath
from urllib.parse import unquote, urlparse

from core import presets
from core.models import (
    DownloadOptions, EncodeOptions, ExtractOptions, Job, TaskType, TrimOptions,
)

DEFAULT_OUTPUT_SUFFIX = "_encoded"
EXTRACT_SUFFIX = "_audio"


# ── Output paths ──────────────────────────────────────────────────────────────

def replace_extension(input_path: str, suffix: str, extension: str) -> str:
    """
    Swap the extension of *input_path* for ``<suffix>.<extension>``.

    Example:
        replace_extension("/rushes/clip.mov", "_encoded", "mp4")
        → "/rushes/clip_encoded.mp4"
    """
    root, _ = os.path.splitext(input_path)
    return f"{root}{suffix}.{extension}"


def encode_output_path(options: EncodeOptions, default_suffix: str = DEFAULT_OUTPUT_SUFFIX) -> str:
    suffix = options.output_suffix if options.output_suffix is not None else default_suffix
    return replace_extension(options.input, suffix, options.format or "mp4")


def trim_output_path(options: TrimOptions) -> str:
    extension = options.format or os.path.splitext(options.input)[1].lstrip(".") or "mp4"
    return replace_extension(options.input, options.output_suffix, extension)


def extract_output_path(options: ExtractOptions) -> str:
    return replace_extension(options.input, EXTRACT_SUFFIX, _extract_format(options.format))


def download_output_path(options: DownloadOptions) -> str:
    stem = options.filename or _url_stem(options.url)
    return os.path.join(options.output_dir, f"{stem}.{options.format or 'mp4'}")


# ── Encode ────────────────────────────────────────────────────────────────────

def build_encode_args(
    options: EncodeOptions,
    default_suffix: str = DEFAULT_OUTPUT_SUFFIX,
) -> list[str]:
    """
    Build the full argument list for one encode.

    Input order is fixed: the source is input 0, then every external
    audio track, then every external subtitle track, then the chapters file.

    Example output (source audio, no extras):
        ['-i', '/in/clip.mov', '-y',
         '-map', '0:v:0', '-map', '0:a:0', '-map', '0:s?',
         '-c:v', 'libx264', '-preset', 'medium', '-crf', '23',
         '-c:a', 'aac', '-b:a', '192k', '-c:s', 'mov_text',
         '/in/clip_encoded.mp4']
    """
    output_path = encode_output_path(options, default_suffix)

    # ── Inputs ────────────────────────────────────────────────────────────────
    args = ["-i", options.input]
    next_input = 1

    audio_inputs: dict[int, int] = {}      # track position → input index
    for pos, track in enumerate(options.audio_tracks):
        if track.path and not track.is_source:
            args += ["-i", track.path]
            audio_inputs[pos] = next_input
            next_input += 1

    subtitle_inputs: dict[int, int] = {}
    for pos, track in enumerate(options.subtitle_tracks):
        if track.path:
            args += ["-i", track.path]
            subtitle_inputs[pos] = next_input
            next_input += 1

    chapters_input = None
    if options.chapters_file:
        args += ["-i", options.chapters_file]
        chapters_input = next_input
        next_input += 1

    args.append("-y")

    # ── Stream mapping ────────────────────────────────────────────────────────
    args += ["-map", "0:v:0"]

    audio_enabled = options.audio_codec != "none" and len(options.audio_tracks) > 0
    if not audio_enabled:
        args.append("-an")
    else:
        for pos, track in enumerate(options.audio_tracks):
            if track.is_source:
                args += ["-map", "0:a:0"]
            elif pos in audio_inputs:
                args += ["-map", f"{audio_inputs[pos]}:a"]

    args += ["-map", "0:s?"]
    for pos in sorted(subtitle_inputs):
        args += ["-map", f"{subtitle_inputs[pos]}:s"]

    if chapters_input is not None:
        args += ["-map_metadata", str(chapters_input)]

    # ── Video ─────────────────────────────────────────────────────────────────
    args += _video_args(options)

    # ── Audio ─────────────────────────────────────────────────────────────────
    if audio_enabled:
        if options.audio_codec == "copy":
            args += ["-c:a", "copy"]
        else:
            encoder = presets.AUDIO_CODECS.get(options.audio_codec, presets.DEFAULT_AUDIO_ENCODER)
            args += ["-c:a", encoder, "-b:a", options.audio_bitrate or presets.DEFAULT_AUDIO_BITRATE]

    # ── Subtitles ─────────────────────────────────────────────────────────────
    if (options.format or "mp4").lower() in presets.MOV_TEXT_FORMATS:
        args += ["-c:s", "mov_text"]
    else:
        args += ["-c:s", "copy"]

    # ── Escape hatch: user flags, verbatim ────────────────────────────────────
    args += split_custom_args(options.custom_args)

    args.append(output_path)
    return args


def _video_args(options: EncodeOptions) -> list[str]:
    if options.codec == "copy":
        return ["-c:v", "copy"]

    encoder = presets.VIDEO_CODECS.get(options.codec, presets.DEFAULT_VIDEO_ENCODER)
    args = ["-c:v", encoder]
    args += preset_args(encoder, options.preset)

    if options.rate_mode == "bitrate":
        args += ["-b:v", f"{options.bitrate}k"]
    else:
        args += ["-crf", str(options.crf)]

    if options.fps and options.fps != "source":
        args += ["-r", str(options.fps)]
    return args


def preset_args(encoder: str, preset: str) -> list[str]:
    """
    Translate a logical x264-style preset for *encoder*.
    The family is read from the resolved encoder name, so an unknown codec
    that fell back to libx264 gets a software preset.
    """
    if encoder.endswith("_nvenc"):
        return ["-preset", presets.NVENC_PRESETS.get(preset, presets.NVENC_DEFAULT)]
    if encoder.endswith("_amf"):
        return ["-quality", presets.AMF_QUALITY.get(preset, presets.AMF_DEFAULT)]
    if encoder.endswith("_qsv"):
        return ["-preset", presets.QSV_PRESETS.get(preset, presets.QSV_DEFAULT)]
    return ["-preset", preset or "medium"]


def split_custom_args(custom_args: str | None) -> list[str]:
    """Whitespace tokenisation, empty tokens dropped. No quoting rules."""
    if not custom_args:
        return []
    return custom_args.split()


# ── Trim ──────────────────────────────────────────────────────────────────────

def build_trim_args(options: TrimOptions) -> list[str]:
    """
    Cut [start, end] out of the input. Stream copy unless re-encoding
    was requested (copy cuts snap to keyframes).
    """
    args = ["-i", options.input]
    if options.start:
        args += ["-ss", options.start]
    if options.end:
        args += ["-to", options.end]
    args += ["-map", "0"]

    if options.reencode:
        args += ["-c:v", presets.DEFAULT_VIDEO_ENCODER, "-c:a", presets.DEFAULT_AUDIO_ENCODER]
    else:
        args += ["-c", "copy"]

    args += ["-y", trim_output_path(options)]
    return args


# ── Extract audio ─────────────────────────────────────────────────────────────

def _extract_format(fmt: str | None) -> str:
    fmt = (fmt or "").lower()
    return fmt if fmt in presets.EXTRACT_CODECS else presets.DEFAULT_EXTRACT_FORMAT


def _audio_only_args(fmt: str, bitrate: str | None) -> list[str]:
    args = ["-vn", "-c:a", presets.EXTRACT_CODECS[fmt]]
    if fmt not in presets.LOSSLESS_FORMATS:
        args += ["-b:a", bitrate or presets.DEFAULT_AUDIO_BITRATE]
    return args


def build_extract_args(options: ExtractOptions) -> list[str]:
    fmt = _extract_format(options.format)
    return [
        "-i", options.input,
        "-y",
        "-map", "0:a:0",
        *_audio_only_args(fmt, options.bitrate),
        extract_output_path(options),
    ]


# ── Download ──────────────────────────────────────────────────────────────────

def _url_stem(url: str) -> str:
    name = PurePosixPath(unquote(urlparse(url).path)).stem
    return name or "download"


def build_download_args(options: DownloadOptions) -> list[str]:
    """
    Let ffmpeg pull a direct media / HLS URL. Container targets are
    stream-copied; audio targets are re-encoded like an extract.
    """
    args = ["-i", options.url, "-y"]
    fmt = (options.format or "mp4").lower()
    if fmt in presets.EXTRACT_CODECS and fmt not in presets.OUTPUT_FORMATS:
        args += _audio_only_args(fmt, None)
    else:
        args += ["-c", "copy"]
    args.append(download_output_path(options))
    return args


# ── Dispatch ──────────────────────────────────────────────────────────────────

def build_args(job: Job, default_suffix: str = DEFAULT_OUTPUT_SUFFIX) -> list[str]:
    """Arguments for *job* according to its task type."""
    if job.task_type == TaskType.ENCODE:
        return build_encode_args(job.options, default_suffix)
    if job.task_type == TaskType.TRIM:
        return build_trim_args(job.options)
    if job.task_type == TaskType.EXTRACT:
        return build_extract_args(job.options)
    if job.task_type == TaskType.DOWNLOAD:
        return build_download_args(job.options)
    raise ValueError(f"Unknown task type: {job.task_type!r}")


def build_command(
    job: Job,
    ffmpeg_bin: str,
    default_suffix: str = DEFAULT_OUTPUT_SUFFIX,
) -> list[str]:
    """The full command: binary first, output path last."""
    return [str(ffmpeg_bin), *build_args(job, default_suffix)]


def command_as_string(cmd: list[str]) -> str:
    """Human-readable version of the command for logging."""
    return " ".join(shlex.quote(part) for part in cmd)
