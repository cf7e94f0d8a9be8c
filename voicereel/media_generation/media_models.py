"""Data models for media generation pipeline"""

from datetime import datetime
from typing import List, Optional, Tuple
from pydantic import BaseModel, ConfigDict, Field, PrivateAttr, field_validator
from enum import Enum


class AspectRatio(str, Enum):
    """Screen sizes offered for the final video"""
    LANDSCAPE = "16:9"
    SQUARE = "1:1"
    PORTRAIT = "9:16"


class VideoDetails(BaseModel):
    """Title and presentation choices for a narration video"""
    model_config = ConfigDict(frozen=True)

    title: str = "Untitled narration"
    description: Optional[str] = None
    style: str = "anime"
    aspect_ratio: AspectRatio = AspectRatio.LANDSCAPE

    @field_validator("title")
    @classmethod
    def _title_not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("title must not be empty")
        return value.strip()


class PipelineStage(str, Enum):
    """Stages of a generation session"""
    IDLE = "idle"
    AWAITING_AUDIO = "awaiting_audio"
    TRANSCRIBING = "transcribing"
    ENRICHING = "enriching"
    COMPOSING = "composing"
    READY = "ready"
    FAILED = "failed"
    ABANDONED = "abandoned"

    @property
    def is_terminal(self) -> bool:
        return self in (PipelineStage.READY, PipelineStage.FAILED, PipelineStage.ABANDONED)


class FailureKind(str, Enum):
    """Why a segment field was left empty"""
    PROMPT_GENERATION_ERROR = "prompt_generation_error"
    IMAGE_GENERATION_ERROR = "image_generation_error"
    IMAGE_DECLINED = "image_declined"
    EMPTY_TEXT = "empty_text"


class SegmentFailure(BaseModel):
    """Recorded outcome of a failed per-segment call"""
    model_config = ConfigDict(frozen=True)

    kind: FailureKind
    message: str = ""


class AudioAsset(BaseModel):
    """A finished recording: payload plus a dereferenceable URL"""
    model_config = ConfigDict(frozen=True)

    payload: bytes
    url: str
    format_hint: str = "wav"
    _released: bool = PrivateAttr(default=False)

    @property
    def released(self) -> bool:
        return self._released

    def release(self) -> None:
        self._released = True


class Segment(BaseModel):
    """Time-bounded span of transcribed speech"""
    model_config = ConfigDict(frozen=True)

    id: int
    start_seconds: float
    end_seconds: float
    text: str


class Transcript(BaseModel):
    model_config = ConfigDict(frozen=True)

    full_text: str
    segments: Tuple[Segment, ...] = ()


class ImageResult(BaseModel):
    """Generated image reference with generation metadata"""
    model_config = ConfigDict(frozen=True)

    url: str
    seed: int
    flagged: bool = False


class EnrichedSegment(Segment):
    """A segment with its (optional) visual prompt and generated image"""

    prompt: Optional[str] = None
    image: Optional[ImageResult] = None
    prompt_error: Optional[SegmentFailure] = None
    image_error: Optional[SegmentFailure] = None

    @classmethod
    def from_segment(cls, segment: Segment, **fields) -> "EnrichedSegment":
        return cls(
            id=segment.id,
            start_seconds=segment.start_seconds,
            end_seconds=segment.end_seconds,
            text=segment.text,
            **fields,
        )

    @property
    def is_degraded(self) -> bool:
        return self.image is None

    @property
    def failure(self) -> Optional[SegmentFailure]:
        return self.prompt_error or self.image_error


class Timeline(BaseModel):
    """Terminal artifact: audio paired with the ordered enriched segments"""
    model_config = ConfigDict(frozen=True)

    audio: AudioAsset
    segments: Tuple[EnrichedSegment, ...] = ()
    details: VideoDetails = VideoDetails()
    created_at: datetime = Field(default_factory=datetime.now)

    @property
    def duration_seconds(self) -> float:
        return self.segments[-1].end_seconds if self.segments else 0.0

    @property
    def degraded_segments(self) -> List[int]:
        return [seg.id for seg in self.segments if seg.is_degraded]

    @property
    def flagged_segments(self) -> List[int]:
        return [seg.id for seg in self.segments if seg.image is not None and seg.image.flagged]


class PipelineState(BaseModel):
    """Process-scoped state of one generation session"""

    session_id: str
    stage: PipelineStage = PipelineStage.IDLE
    progress: float = 0.0
    message: str = ""
    transcript: Optional[Transcript] = None
    enriched_segments: List[EnrichedSegment] = []
    timeline: Optional[Timeline] = None
    error: Optional[str] = None
    started_at: datetime = Field(default_factory=datetime.now)
    updated_at: datetime = Field(default_factory=datetime.now)

    @property
    def degraded_segments(self) -> List[int]:
        return [seg.id for seg in self.enriched_segments if seg.is_degraded]
