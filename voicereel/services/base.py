"""Capability interfaces for the external AI services.

Each capability is a request/response contract over a network boundary.
Implementations raise the capability's declared error
(TranscriptionServiceError, PromptGenerationError, ImageGenerationError)
and apply their own timeouts.
"""

from abc import ABC, abstractmethod
from typing import List, Optional

from pydantic import BaseModel

from ..media_generation.media_models import ImageResult


class RawSegment(BaseModel):
    """One speech unit as reported by a speech-to-text service"""
    text: str
    start: float
    end: float


class RawTranscription(BaseModel):
    text: str
    segments: List[RawSegment] = []


class SpeechToTextService(ABC):
    @abstractmethod
    async def transcribe(self, payload: bytes, format_hint: str = "wav") -> RawTranscription:
        """Transcribe an audio payload into full text and timed segments."""

    async def close(self) -> None:
        """Release network resources held by the service."""


class TextGenerationService(ABC):
    @abstractmethod
    async def generate(self, instruction: str, text: str) -> str:
        """Return a single descriptive string for the given source text."""

    async def close(self) -> None:
        """Release network resources held by the service."""


class ImageGenerationService(ABC):
    @abstractmethod
    async def generate(self, prompt: str, width: int, height: int) -> Optional[ImageResult]:
        """Generate an image; None when the service declines without error."""

    async def close(self) -> None:
        """Release network resources held by the service."""
