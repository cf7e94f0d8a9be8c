"""Timeline Builder

Converts a finished Timeline into frame-accurate display intervals that a
rendering/playback surface can consume, and persists timeline artifacts
(timeline.json, subtitles.srt) next to the other run outputs.
"""

from __future__ import annotations

import json
import math
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List

from ..media_generation.errors import InvalidInput
from ..media_generation.media_models import AudioAsset, Timeline
from ..utils.timecode import round_half_up, srt_time
from .video_models import DisplayInterval


def _check_fps(fps: int) -> None:
    if not isinstance(fps, int) or isinstance(fps, bool) or fps <= 0:
        raise InvalidInput(f"fps must be a positive integer, got {fps!r}")


def compose(timeline: Timeline, fps: int) -> List[DisplayInterval]:
    """Map every timeline segment onto a frame window at ``fps``.

    Pure: no state, no I/O. Re-invoke with another fps to retarget the same
    timeline. Durations are clamped to at least one frame.
    """
    _check_fps(fps)
    intervals = []
    for seg in timeline.segments:
        start_frame = round_half_up(seg.start_seconds * fps)
        duration_frames = max(1, round_half_up((seg.end_seconds - seg.start_seconds) * fps))
        intervals.append(DisplayInterval(
            segment_id=seg.id,
            start_frame=start_frame,
            duration_frames=duration_frames,
            caption=seg.text,
            image_url=seg.image.url if seg.image else None,
            flagged=bool(seg.image and seg.image.flagged),
        ))
    return intervals


def total_frames(timeline: Timeline, fps: int) -> int:
    """Composition length in frames.

    The latest segment end rounded up to whole frames, extended to the end
    of the last composed interval so no interval runs past the composition.
    """
    _check_fps(fps)
    if not timeline.segments:
        return 0
    latest_end = max(seg.end_seconds for seg in timeline.segments)
    last_frame = max(interval.end_frame for interval in compose(timeline, fps))
    return max(int(math.ceil(latest_end * fps)), last_frame)


def build_srt(timeline: Timeline) -> str:
    """One subtitle cue per segment, captioned with the segment text."""
    entries = []
    idx = 1
    for seg in timeline.segments:
        caption = seg.text.strip()
        if not caption:
            continue
        entries.append(f"{idx}\n{srt_time(seg.start_seconds)} --> {srt_time(seg.end_seconds)}\n{caption}\n")
        idx += 1
    return "\n".join(entries)


def timeline_to_dict(timeline: Timeline, fps: int) -> Dict[str, Any]:
    data = timeline.model_dump(mode="json", exclude={"audio": {"payload"}})
    data["fps"] = fps
    data["total_frames"] = total_frames(timeline, fps)
    data["display_intervals"] = [i.model_dump(mode="json") for i in compose(timeline, fps)]
    data["degraded_segments"] = timeline.degraded_segments
    return data


def write_timeline_artifacts(timeline: Timeline, fps: int, artifacts_dir: str) -> Dict[str, Path]:
    """Write timeline.json and subtitles.srt; returns their paths."""
    out_dir = Path(artifacts_dir)
    out_dir.mkdir(parents=True, exist_ok=True)

    timeline_path = out_dir / "timeline.json"
    timeline_path.write_text(json.dumps(timeline_to_dict(timeline, fps), indent=2), encoding='utf-8')

    srt_path = out_dir / "subtitles.srt"
    srt_path.write_text(build_srt(timeline), encoding='utf-8')

    return {"timeline": timeline_path, "subtitles": srt_path}


def load_timeline(path: str) -> Timeline:
    """Read a persisted timeline back. The audio payload is not persisted,
    so the returned AudioAsset carries only its URL."""
    data = json.loads(Path(path).read_text(encoding='utf-8'))
    audio = data.get("audio") or {}
    return Timeline(
        audio=AudioAsset(
            payload=b"",
            url=audio.get("url", ""),
            format_hint=audio.get("format_hint", "wav"),
        ),
        segments=data.get("segments", []),
        details=data.get("details", {}),
        created_at=data.get("created_at") or datetime.now(),
    )
