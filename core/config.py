"""
core.config
~~~~~~~~~~~
Persists application Settings to a JSON file in the platform's
standard config directory.

Config location
---------------
  Windows  : %APPDATA%\\VideoToolbox\\settings.json
  macOS    : ~/Library/Application Support/VideoToolbox/settings.json
  Linux    : ~/.config/VideoToolbox/settings.json

Missing keys fall back to their defaults, so older files keep working
after new settings are added.
"""

from __future__ import annotations

import json
import sys
from dataclasses import asdict, dataclass, fields
from pathlib import Path

MAX_QUEUE_SIZE = 50


# ── Settings ──────────────────────────────────────────────────────────────────

@dataclass
class Settings:
    ffmpeg_path: str = ""                 # empty → bundled bin/ or PATH
    ffprobe_path: str = ""
    output_suffix: str = "_encoded"
    max_queue_size: int = MAX_QUEUE_SIZE
    download_dir: str = str(Path.home() / "Downloads")
    notify_on_complete: bool = True
    theme: str = "dark_teal.xml"          # qt_material theme file


# ── Config directory ──────────────────────────────────────────────────────────

def config_dir() -> Path:
    if sys.platform == "win32":
        base = Path.home() / "AppData" / "Roaming"
    elif sys.platform == "darwin":
        base = Path.home() / "Library" / "Application Support"
    else:
        base = Path.home() / ".config"
    return base / "VideoToolbox"


def settings_file() -> Path:
    return config_dir() / "settings.json"


# ── Public API ────────────────────────────────────────────────────────────────

def load_settings(path: Path | None = None) -> Settings:
    """
    Read *path* (default: settings_file()) and return Settings.
    Returns defaults if the file is missing, empty, or malformed.
    """
    path = path or settings_file()
    if not path.exists():
        return Settings()
    try:
        payload = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, ValueError) as exc:
        print(f"[CONFIG] Could not read {path}: {exc} — using defaults")
        return Settings()
    if not isinstance(payload, dict):
        return Settings()
    return _dict_to_settings(payload)


def save_settings(settings: Settings, path: Path | None = None) -> None:
    """
    Serialise *settings* to *path*, overwriting any previous data.
    Silently ignores I/O errors so a config issue never crashes the app.
    """
    path = path or settings_file()
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(json.dumps(asdict(settings), indent=2), encoding="utf-8")
    except OSError as exc:
        print(f"[CONFIG] Could not write {path}: {exc}")


# ── Serialisation helpers ─────────────────────────────────────────────────────

def _dict_to_settings(d: dict) -> Settings:
    defaults = Settings()
    values = {}
    for f in fields(Settings):
        if f.name not in d:
            continue
        default = getattr(defaults, f.name)
        value = d[f.name]
        # Drop values whose type doesn't match the default (hand-edited files)
        if isinstance(default, bool):
            if isinstance(value, bool):
                values[f.name] = value
        elif isinstance(default, int):
            if isinstance(value, int) and not isinstance(value, bool) and value > 0:
                values[f.name] = value
        elif isinstance(value, str):
            values[f.name] = value
    return Settings(**values)
