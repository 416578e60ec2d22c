"""
core.scanner
~~~~~~~~~~~~
Pure functions for turning a folder into encode jobs.
No Qt, no subprocess — easy to unit-test in isolation.
"""

from __future__ import annotations

from dataclasses import replace
from pathlib import Path

from core.models import EncodeOptions

# Video extensions we accept for folder batches
VIDEO_EXTENSIONS: frozenset[str] = frozenset({
    ".mp4", ".mkv", ".avi", ".mov", ".webm", ".flv", ".wmv",
})


# ── Public API ────────────────────────────────────────────────────────────────

def find_video_files(folder: Path) -> list[Path]:
    """
    Return all video files directly inside *folder* (non-recursive),
    sorted by name. Returns an empty list if the folder doesn't exist.
    """
    folder = Path(folder)
    if not folder.is_dir():
        return []
    return sorted(
        f for f in folder.iterdir()
        if f.is_file() and f.suffix.lower() in VIDEO_EXTENSIONS
    )


def encode_options_for_folder(
    folder: Path,
    template: EncodeOptions,
    default_suffix: str = "_encoded",
) -> list[EncodeOptions]:
    """
    One EncodeOptions per video file in *folder*, all sharing *template*'s
    settings. Files that already look like our own output (same stem
    suffix) are skipped so a second batch doesn't re-encode them.

    Example:
        folder   = /rushes  (clip1.mov, clip1_encoded.mp4, clip2.mkv)
        template = EncodeOptions(input="", format="mp4")
        → [EncodeOptions(input="/rushes/clip1.mov", …),
           EncodeOptions(input="/rushes/clip2.mkv", …)]
    """
    suffix = template.output_suffix if template.output_suffix is not None else default_suffix
    return [
        replace(template, input=str(f))
        for f in find_video_files(folder)
        if not (suffix and f.stem.endswith(suffix))
    ]
