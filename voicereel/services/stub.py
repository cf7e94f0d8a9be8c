"""Deterministic offline service implementations.

Safe to use without network access or API keys. Transcription timing is a
sentence-level heuristic: each sentence gets a window proportional to its
word count at an average speaking pace.
"""

from __future__ import annotations

import re
from typing import List, Optional

from ..media_generation.media_models import ImageResult
from ..utils.seed import seed_for_prompt
from .base import (
    ImageGenerationService, RawSegment, RawTranscription,
    SpeechToTextService, TextGenerationService,
)

WORDS_PER_MINUTE = 150  # average speaking pace

_SENTENCE_END = re.compile(r"(?<=[.!?])\s+")


def split_sentences(text: str) -> List[str]:
    return [s.strip() for s in _SENTENCE_END.split(text.replace("\n", " ")) if s.strip()]


class StubTranscriptionService(SpeechToTextService):
    def __init__(self, script: str, words_per_minute: int = WORDS_PER_MINUTE):
        self.script = script
        self.words_per_minute = words_per_minute

    async def transcribe(self, payload: bytes, format_hint: str = "wav") -> RawTranscription:
        segments = []
        t = 0.0
        for sentence in split_sentences(self.script):
            words = max(1, len(sentence.split()))
            dur = words / self.words_per_minute * 60
            segments.append(RawSegment(text=sentence, start=round(t, 3), end=round(t + dur, 3)))
            t += dur
        return RawTranscription(text=" ".join(s.text for s in segments), segments=segments)


class StubPromptService(TextGenerationService):
    async def generate(self, instruction: str, text: str) -> str:
        return f"{text.strip().rstrip('.!?')}, detailed illustration, cinematic composition"


class StubImageService(ImageGenerationService):
    async def generate(self, prompt: str, width: int, height: int) -> Optional[ImageResult]:
        seed = seed_for_prompt(prompt, width, height)
        return ImageResult(url=f"stub://images/{seed:08x}_{width}x{height}.png", seed=seed, flagged=False)
