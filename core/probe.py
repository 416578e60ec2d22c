"""
core.probe
~~~~~~~~~~
Media metadata and encoder discovery through the ffprobe / ffmpeg CLIs.

probe()            ffprobe JSON → ProbeResult (raises on failure)
probe_or_none()    same, but None when the file can't be read; for the UI
media_summary()    ProbeResult → display strings (duration, resolution, …)
detect_hw_encoders() / parse_encoders()
                   which of nvenc / amf / qsv this ffmpeg build offers
"""

from __future__ import annotations

import json
import subprocess
from pathlib import Path

from core.models import ProbeResult
from core.paths import ffmpeg_bin, ffprobe_bin

HW_FAMILIES = ("nvenc", "amf", "qsv")
PROBE_TIMEOUT = 20   # seconds; network shares can be slow


# ── Media metadata ────────────────────────────────────────────────────────────

def probe(file: Path, ffprobe: str = "") -> ProbeResult:
    """
    Read duration, resolution, codecs, bitrate and frame rate of *file*.

    Raises FileNotFoundError for a missing input and RuntimeError when
    ffprobe fails, times out or prints something that isn't JSON.
    """
    file = Path(file)
    if not file.is_file():
        raise FileNotFoundError(f"Input file not found: {file}")

    cmd = [
        ffprobe_bin(ffprobe),
        "-v", "error",
        "-print_format", "json",
        "-show_format",
        "-show_streams",
        str(file),
    ]
    try:
        result = subprocess.run(
            cmd,
            stdout=subprocess.PIPE,
            stderr=subprocess.PIPE,
            stdin=subprocess.DEVNULL,
            text=True,
            timeout=PROBE_TIMEOUT,
        )
    except subprocess.TimeoutExpired as exc:
        raise RuntimeError(f"ffprobe timed out on {file.name}") from exc

    if result.returncode != 0:
        raise RuntimeError(f"ffprobe failed on {file.name}: {result.stderr.strip()}")

    try:
        data = json.loads(result.stdout)
    except ValueError as exc:
        raise RuntimeError(f"ffprobe returned unreadable output for {file.name}") from exc
    return parse_probe_output(file, data)


def probe_or_none(file: Path | str, ffprobe: str = "") -> ProbeResult | None:
    """probe() for display purposes: any failure is logged and gives None."""
    if not file:
        return None
    try:
        return probe(Path(file), ffprobe)
    except (OSError, RuntimeError) as exc:
        print(f"[PROBE] {exc}")
        return None


def media_summary(result: ProbeResult) -> dict[str, str]:
    """Human-readable fields for the details panel."""
    codecs = " / ".join(c for c in (result.video_codec, result.audio_codec) if c)
    return {
        "duration":   format_duration(result.duration_seconds) if result.duration_seconds else "Unknown",
        "resolution": result.resolution,
        "bitrate":    f"{result.bitrate_kbps} kb/s" if result.bitrate_kbps else "Unknown",
        "fps":        f"{result.fps:.3g} fps" if result.fps else "Unknown",
        "codecs":     codecs or "Unknown",
    }


def format_duration(seconds: float) -> str:
    """3723.9 → '01:02:03'"""
    total = max(0, int(seconds))
    h, rest = divmod(total, 3600)
    m, s = divmod(rest, 60)
    return f"{h:02d}:{m:02d}:{s:02d}"


def parse_probe_output(file: Path, data: dict) -> ProbeResult:
    """Map ffprobe's -show_format / -show_streams JSON onto a ProbeResult."""
    fmt = data.get("format", {})
    streams = data.get("streams", [])

    video = next((s for s in streams if s.get("codec_type") == "video"), {})
    audio = next((s for s in streams if s.get("codec_type") == "audio"), {})

    return ProbeResult(
        path=Path(file),
        duration_seconds=_to_float(fmt.get("duration")),
        width=int(video.get("width", 0)),
        height=int(video.get("height", 0)),
        video_codec=video.get("codec_name", ""),
        audio_codec=audio.get("codec_name", ""),
        bitrate_kbps=int(_to_float(fmt.get("bit_rate")) // 1000),
        fps=_frame_rate(video.get("r_frame_rate", "")),
    )


# ── Encoder discovery ─────────────────────────────────────────────────────────

def detect_hw_encoders(ffmpeg: str = "") -> dict[str, bool]:
    """
    Which hardware encoder families this ffmpeg build ships.
    All False if ffmpeg cannot be run.
    """
    try:
        result = subprocess.run(
            [ffmpeg_bin(ffmpeg), "-hide_banner", "-encoders"],
            stdout=subprocess.PIPE,
            stderr=subprocess.DEVNULL,
            stdin=subprocess.DEVNULL,
            text=True,
            timeout=15,
        )
    except (OSError, subprocess.TimeoutExpired) as exc:
        print(f"[PROBE] Encoder detection failed: {exc}")
        return {family: False for family in HW_FAMILIES}
    return parse_encoders(result.stdout)


def parse_encoders(output: str) -> dict[str, bool]:
    """Look for e.g. ``h264_nvenc`` in the ``-encoders`` listing."""
    return {family: f"_{family}" in output for family in HW_FAMILIES}


# ── Helpers ───────────────────────────────────────────────────────────────────

def _to_float(value) -> float:
    try:
        return float(value)
    except (TypeError, ValueError):
        return 0.0


def _frame_rate(rate: str) -> float:
    """'24000/1001' → 23.976…; '' or '0/0' → 0.0"""
    num, _, den = str(rate).partition("/")
    numerator, denominator = _to_float(num), _to_float(den or "1")
    return numerator / denominator if denominator else 0.0
