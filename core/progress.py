"""
core.progress
~~~~~~~~~~~~~
Incremental parser for ffmpeg's stderr.

ffmpeg prints a banner containing

    Duration: 00:01:40.00, start: 0.000000, bitrate: 1205 kb/s

followed by status lines such as

    frame=  240 fps= 48 q=28.0 size=    512kB time=00:00:10.00 bitrate= 419.4kbits/s speed=2.01x

Feed it whatever chunks arrive; it remembers the total duration and turns
each status line into a ProgressEvent. Never raises on unexpected input.
"""

from __future__ import annotations

import math
import re

from core.models import ProgressEvent

DURATION_PATTERN = re.compile(r"Duration:\s*(\d{2}):(\d{2}):(\d{2}(?:\.\d+)?)")
TIME_PATTERN     = re.compile(r"time=\s*(\d{2}):(\d{2}):(\d{2})(\.\d+)?")
SPEED_PATTERN    = re.compile(r"speed=\s*(\d+(?:\.\d+)?x)")

# 100% only ever comes from a clean exit, never from parsing
MAX_PARSED_PERCENT = 99
DEFAULT_SPEED = "0.00x"


class ProgressParser:
    """
    Usage:
        parser = ProgressParser()
        for chunk in ffmpeg_stderr:
            event = parser.feed(chunk)
            if event:
                update_ui(event)
    """

    def __init__(self):
        self.duration: float = 0.0

    def reset(self) -> None:
        self.duration = 0.0

    def feed(self, chunk: str) -> ProgressEvent | None:
        if not chunk:
            return None

        # The first declared duration wins; later ones (e.g. from a second
        # input) are ignored.
        if not self.duration:
            dur = DURATION_PATTERN.search(chunk)
            if dur:
                self.duration = _to_seconds(dur.group(1), dur.group(2), dur.group(3))

        # A chunk can hold several status lines; the last one is the freshest
        times = list(TIME_PATTERN.finditer(chunk))
        if not times:
            return None
        match = times[-1]

        position = _to_seconds(match.group(1), match.group(2), match.group(3) + (match.group(4) or ""))
        elapsed  = f"{match.group(1)}:{match.group(2)}:{match.group(3)}"

        speeds = SPEED_PATTERN.findall(chunk)
        speed  = speeds[-1] if speeds else DEFAULT_SPEED

        percent = None
        if self.duration > 0:
            percent = math.floor(min(MAX_PARSED_PERCENT, 100.0 * position / self.duration))
            percent = max(0, percent)

        return ProgressEvent(percent=percent, elapsed=elapsed, speed=speed)


def _to_seconds(hours: str, minutes: str, seconds: str) -> float:
    return int(hours) * 3600 + int(minutes) * 60 + float(seconds)


def hhmmss_to_seconds(time_str: str) -> float:
    """'01:02:03.5' → 3723.5; 0.0 when it cannot be parsed."""
    try:
        h, m, s = time_str.strip().split(":")
        return _to_seconds(h, m, s)
    except ValueError:
        return 0.0
