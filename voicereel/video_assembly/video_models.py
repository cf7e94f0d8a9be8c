"""
Video Assembly Data Models

Pydantic models describing what a rendering/playback surface consumes.
"""

from typing import Optional, Tuple
from pydantic import BaseModel, ConfigDict, Field


class DisplayInterval(BaseModel):
    """A frame-accurate on-screen window for one segment"""
    model_config = ConfigDict(frozen=True)

    segment_id: int
    start_frame: int
    duration_frames: int = Field(ge=1)
    caption: str
    image_url: Optional[str] = None
    flagged: bool = False

    @property
    def end_frame(self) -> int:
        return self.start_frame + self.duration_frames


def parse_resolution(resolution: str) -> Tuple[int, int]:
    """'1280x720' -> (1280, 720)"""
    width, height = resolution.lower().split("x")
    return int(width), int(height)
