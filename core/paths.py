"""
core.paths
~~~~~~~~~~
Single source of truth for filesystem paths used across the app.
Import these instead of hard-coding strings anywhere else.

A bundled binary in ``<project>/bin`` wins; otherwise the one on PATH is used.
"""

from __future__ import annotations

import shutil
import sys
from pathlib import Path

# Project root = the directory that contains main.py
PROJECT_ROOT = Path(__file__).resolve().parent.parent

BIN_DIR = PROJECT_ROOT / "bin"
_EXE = ".exe" if sys.platform == "win32" else ""


def _resolve(name: str, override: str = "") -> str:
    if override:
        return shutil.which(override) or override
    bundled = BIN_DIR / f"{name}{_EXE}"
    if bundled.is_file():
        return str(bundled)
    return shutil.which(name) or name


def ffmpeg_bin(override: str = "") -> str:
    return _resolve("ffmpeg", override)


def ffprobe_bin(override: str = "") -> str:
    return _resolve("ffprobe", override)


def validate_binaries(ffmpeg_override: str = "", ffprobe_override: str = "") -> list[str]:
    """
    Return a list of error strings for any missing/non-executable binaries.
    Empty list means all good.

    Call this at startup and show a dialog if errors is non-empty.
    """
    errors: list[str] = []
    for binary in (ffmpeg_bin(ffmpeg_override), ffprobe_bin(ffprobe_override)):
        path = Path(binary)
        if not path.is_absolute():
            # Not bundled and not on PATH
            errors.append(f"Binary not found: {binary}")
        elif not path.is_file():
            errors.append(f"Not a file: {binary}")
        elif sys.platform != "win32" and not path.stat().st_mode & 0o111:
            errors.append(f"Not executable: {binary}")
    return errors
