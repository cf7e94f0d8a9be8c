import asyncio
from typing import Dict, List, Optional, Sequence, Tuple

import pytest

from voicereel.media_generation.errors import (
    ImageGenerationError, PromptGenerationError, TranscriptionServiceError,
)
from voicereel.media_generation.media_models import AudioAsset, ImageResult, Segment
from voicereel.services.base import (
    ImageGenerationService, RawSegment, RawTranscription,
    SpeechToTextService, TextGenerationService,
)


class FakeSpeechToText(SpeechToTextService):
    """Returns a fixed transcription; can fail the first ``failures`` calls."""

    def __init__(self, segments: Sequence[Tuple[str, float, float]], failures: int = 0,
                 error: Optional[Exception] = None):
        self.segments = list(segments)
        self.failures = failures
        self.error = error or TranscriptionServiceError("speech-to-text unavailable")
        self.calls = 0

    async def transcribe(self, payload: bytes, format_hint: str = "wav") -> RawTranscription:
        self.calls += 1
        if self.calls <= self.failures:
            raise self.error
        raw = [RawSegment(text=t, start=s, end=e) for t, s, e in self.segments]
        return RawTranscription(text=" ".join(t for t, _, _ in self.segments), segments=raw)


class FakeTextGeneration(TextGenerationService):
    """Echoes the text as a prompt; fails for texts listed in ``fail_on``."""

    def __init__(self, fail_on: Sequence[str] = (), delays: Optional[Dict[str, float]] = None,
                 on_call=None):
        self.fail_on = set(fail_on)
        self.delays = delays or {}
        self.on_call = on_call
        self.calls: List[str] = []

    async def generate(self, instruction: str, text: str) -> str:
        self.calls.append(text)
        if self.on_call:
            self.on_call(text)
        await asyncio.sleep(self.delays.get(text, 0))
        if text in self.fail_on:
            raise PromptGenerationError(f"no prompt for {text!r}")
        return f"P({text})"


class FakeImageGeneration(ImageGenerationService):
    """Generates ``img://<prompt>`` urls; can fail, decline or flag per prompt."""

    def __init__(self, fail_on: Sequence[str] = (), decline_on: Sequence[str] = (),
                 flag_on: Sequence[str] = ()):
        self.fail_on = set(fail_on)
        self.decline_on = set(decline_on)
        self.flag_on = set(flag_on)
        self.calls: List[Tuple[str, int, int]] = []
        self.closed = False

    def _matches(self, prompt: str, names) -> bool:
        return any(name in prompt for name in names)

    async def generate(self, prompt: str, width: int, height: int) -> Optional[ImageResult]:
        self.calls.append((prompt, width, height))
        await asyncio.sleep(0)
        if self._matches(prompt, self.fail_on):
            raise ImageGenerationError(f"no image for {prompt!r}")
        if self._matches(prompt, self.decline_on):
            return None
        return ImageResult(
            url=f"img://{prompt}",
            seed=len(self.calls),
            flagged=self._matches(prompt, self.flag_on),
        )

    async def close(self) -> None:
        self.closed = True


def make_segments(*texts: str, step: float = 2.0) -> List[Segment]:
    return [
        Segment(id=i, start_seconds=i * step, end_seconds=(i + 1) * step, text=text)
        for i, text in enumerate(texts)
    ]


@pytest.fixture
def audio():
    return AudioAsset(payload=b"RIFF....WAVEfmt ", url="file:///tmp/narration.wav")


@pytest.fixture
def hello_world_stt():
    return FakeSpeechToText([("Hello", 0.0, 1.2), ("World", 1.2, 2.5)])
