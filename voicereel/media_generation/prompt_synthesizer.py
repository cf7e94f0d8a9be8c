"""Prompt synthesis: one segment's narration -> one image-generation instruction"""

import re

from ..services.base import TextGenerationService
from ..utils.config import DEFAULT_PROMPT_INSTRUCTION
from ..utils.logger import LoggerMixin
from .errors import InvalidInput, PromptGenerationError, VoiceReelError


def clean_prompt(text: str) -> str:
    """Collapse whitespace and strip wrapping quotes the model sometimes adds."""
    text = re.sub(r"\s+", " ", text).strip()
    if len(text) >= 2 and text[0] == text[-1] and text[0] in "\"'":
        text = text[1:-1].strip()
    return text


class PromptSynthesizer(LoggerMixin):
    def __init__(self, service: TextGenerationService, instruction: str = DEFAULT_PROMPT_INSTRUCTION):
        self.service = service
        self.instruction = instruction

    async def synthesize(self, segment_text: str) -> str:
        if not segment_text or not segment_text.strip():
            raise InvalidInput("Segment text is empty")

        try:
            raw = await self.service.generate(self.instruction, segment_text.strip())
        except VoiceReelError:
            raise
        except Exception as e:
            raise PromptGenerationError(f"Prompt service failed: {e}") from e

        prompt = clean_prompt(raw or "")
        if not prompt:
            raise PromptGenerationError("Prompt service returned an empty prompt")
        return prompt
