# core/presets.py

from __future__ import annotations

from dataclasses import replace
from types import MappingProxyType

from core.models import EncodeOptions


# ── Video encoders ────────────────────────────────────────────────────────────

DEFAULT_VIDEO_ENCODER = "libx264"

VIDEO_CODECS = MappingProxyType({
    "h264":       "libx264",
    "h265":       "libx265",
    "vp9":        "libvpx-vp9",
    "h264_nvenc": "h264_nvenc",
    "hevc_nvenc": "hevc_nvenc",
    "h264_amf":   "h264_amf",
    "hevc_amf":   "hevc_amf",
    "h264_qsv":   "h264_qsv",
    "hevc_qsv":   "hevc_qsv",
})

# Display names for the encoder combo box, in menu order
VIDEO_CODEC_LABELS = MappingProxyType({
    "h264":       "H.264 (x264)",
    "h265":       "H.265 (x265)",
    "vp9":        "VP9",
    "h264_nvenc": "H.264 (NVIDIA NVENC)",
    "hevc_nvenc": "H.265 (NVIDIA NVENC)",
    "h264_amf":   "H.264 (AMD AMF)",
    "hevc_amf":   "H.265 (AMD AMF)",
    "h264_qsv":   "H.264 (Intel QSV)",
    "hevc_qsv":   "H.265 (Intel QSV)",
    "copy":       "Copy (Remux)",
})

SPEED_PRESETS = (
    "ultrafast", "superfast", "veryfast", "faster", "fast",
    "medium", "slow", "slower", "veryslow",
)

# ── Hardware preset tiers ─────────────────────────────────────────────────────

NVENC_PRESETS = MappingProxyType({
    "ultrafast": "p1", "superfast": "p2", "veryfast": "p3",
    "faster":    "p4", "fast":      "p5", "medium":   "p6",
    "slow":      "p7", "slower":    "p7", "veryslow": "p7",
})
NVENC_DEFAULT = "p4"

AMF_QUALITY = MappingProxyType({
    "ultrafast": "speed",    "superfast": "speed",    "veryfast": "speed",
    "faster":    "speed",    "fast":      "balanced", "medium":   "balanced",
    "slow":      "quality",  "slower":    "quality",  "veryslow": "quality",
})
AMF_DEFAULT = "balanced"

# QSV has no ultrafast / superfast tiers
QSV_PRESETS = MappingProxyType({
    "ultrafast": "veryfast", "superfast": "veryfast", "veryfast": "veryfast",
    "faster":    "faster",   "fast":      "fast",     "medium":   "medium",
    "slow":      "slow",     "slower":    "slower",   "veryslow": "veryslow",
})
QSV_DEFAULT = "medium"

# ── Audio ─────────────────────────────────────────────────────────────────────

AUDIO_CODECS = MappingProxyType({
    "aac":  "aac",
    "opus": "libopus",
})
DEFAULT_AUDIO_ENCODER = "aac"
DEFAULT_AUDIO_BITRATE = "192k"

AUDIO_PRESETS = ["aac", "opus", "copy", "none"]

# ── Containers ────────────────────────────────────────────────────────────────

OUTPUT_FORMATS = ["mp4", "mkv", "mov", "webm"]

# Containers that only accept mov_text subtitles
MOV_TEXT_FORMATS = frozenset({"mp4", "mov"})

# Audio-only targets for extract / download: format → encoder
EXTRACT_CODECS = MappingProxyType({
    "mp3":  "libmp3lame",
    "aac":  "aac",
    "m4a":  "aac",
    "opus": "libopus",
    "ogg":  "libvorbis",
    "flac": "flac",
    "wav":  "pcm_s16le",
})
DEFAULT_EXTRACT_FORMAT = "mp3"
LOSSLESS_FORMATS = frozenset({"flac", "wav"})


# ── Named encode presets ──────────────────────────────────────────────────────
# Only the fields a preset changes; everything else keeps EncodeOptions defaults.

BUILT_IN_PRESETS: MappingProxyType = MappingProxyType({
    "general-fast": {
        "label": "Fast 1080p",
        "options": {"codec": "h264", "preset": "veryfast", "crf": 23},
    },
    "general-hq": {
        "label": "HQ 1080p",
        "options": {"codec": "h264", "preset": "slow", "crf": 18},
    },
    "general-super-hq": {
        "label": "Super HQ",
        "options": {"codec": "h265", "preset": "slower", "crf": 16},
    },
    "web-youtube": {
        "options": {"codec": "h264", "preset": "medium", "rate_mode": "bitrate",
                    "bitrate": 8000, "audio_bitrate": "256k"},
    },
    "web-vp9": {
        "options": {"format": "webm", "codec": "vp9", "crf": 31,
                    "audio_codec": "opus", "audio_bitrate": "128k"},
    },
    "device-iphone": {
        "options": {"format": "mov", "codec": "hevc_qsv", "preset": "medium"},
    },
    "mkv-hevc-remux-audio": {
        "options": {"format": "mkv", "codec": "h265", "audio_codec": "copy"},
    },
    "production-archive": {
        "options": {"format": "mkv", "codec": "copy", "audio_codec": "copy"},
    },
})

_SPECIAL_CASES = {
    "hq":       "HQ",
    "super-hq": "Super HQ",
    "iphone":   "iPhone",
    "ipad":     "iPad",
    "hevc":     "HEVC",
}

_GROUP_PREFIXES = ("general-", "web-", "device-", "mkv-", "production-")


def format_preset_name(name: str) -> str:
    """
    Human label for a preset key.

        "general-hq"          → "HQ 1080p"  (explicit label)
        "device-iphone"       → "iPhone"
        "mkv-hevc-remux-audio" → "HEVC Remux Audio"
    """
    preset = BUILT_IN_PRESETS.get(name)
    if preset and preset.get("label"):
        return preset["label"]

    formatted = name
    for prefix in _GROUP_PREFIXES:
        if formatted.startswith(prefix):
            formatted = formatted[len(prefix):]
            break

    for key, value in _SPECIAL_CASES.items():
        if formatted.startswith(key):
            formatted = formatted.replace(key, value, 1)

    words = []
    for word in formatted.split("-"):
        # Already-cased words ("HEVC", "iPhone") are kept as they are
        if any(c.isupper() for c in word):
            words.append(word)
        else:
            words.append(word[:1].upper() + word[1:])
    return " ".join(words)


def apply_preset(name: str, base: EncodeOptions) -> EncodeOptions:
    """
    Return *base* with the preset's fields applied.
    Unknown preset names leave *base* untouched.
    """
    preset = BUILT_IN_PRESETS.get(name)
    if preset is None:
        return base
    return replace(base, **preset["options"])
