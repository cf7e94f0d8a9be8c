"""Timecode helpers for captions and summaries"""

from __future__ import annotations

import math


def round_half_up(value: float) -> int:
    """Round to the nearest integer with .5 going up (2.5 -> 3, not banker's 2)."""
    return int(math.floor(value + 0.5))


def format_time(seconds: float) -> str:
    """MM:SS display used in scene summaries."""
    total = max(0, int(math.floor(seconds)))
    minutes, secs = divmod(total, 60)
    return f"{minutes:02d}:{secs:02d}"


def srt_time(seconds: float) -> str:
    ms = round_half_up(max(0.0, seconds) * 1000)
    h, rem = divmod(ms, 3600000)
    m, rem = divmod(rem, 60000)
    s, rem = divmod(rem, 1000)
    return f"{h:02d}:{m:02d}:{s:02d},{rem:03d}"
