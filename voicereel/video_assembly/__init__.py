"""
Video Assembly

Turns a finished Timeline into what a renderer consumes:
- Frame-accurate display intervals per segment
- Total composition length
- Persisted timeline.json and subtitles.srt
"""

from .timeline_builder import compose, total_frames, write_timeline_artifacts, load_timeline
from .video_models import DisplayInterval

__all__ = [
    'compose',
    'total_frames',
    'write_timeline_artifacts',
    'load_timeline',
    'DisplayInterval',
]
