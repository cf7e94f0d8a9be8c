"""OpenAI-backed speech-to-text (Whisper) and prompt generation (chat completions)"""

import logging
from typing import Optional

import openai

from ..llm.openai_client import get_openai_client, choose_model
from ..media_generation.errors import PromptGenerationError, TranscriptionServiceError
from .base import RawSegment, RawTranscription, SpeechToTextService, TextGenerationService


class WhisperTranscriptionService(SpeechToTextService):
    """Whisper transcription with segment-level timestamps"""

    def __init__(self, config, client: Optional[openai.AsyncOpenAI] = None):
        self.config = config.transcription
        self.logger = logging.getLogger('voicereel.whisper')
        self.client = client or get_openai_client()
        self.model_name = choose_model("stt", self.config.model_name)

    async def transcribe(self, payload: bytes, format_hint: str = "wav") -> RawTranscription:
        self.logger.info(f"Sending {len(payload)} bytes to {self.model_name} (format={format_hint})")
        try:
            response = await self.client.audio.transcriptions.create(
                model=self.model_name,
                file=(f"audio.{format_hint}", payload),
                response_format=self.config.response_format,
                timestamp_granularities=["segment"],
                timeout=self.config.timeout_seconds,
            )
        except openai.OpenAIError as e:
            raise TranscriptionServiceError(f"Whisper request failed: {e}") from e

        segments = getattr(response, "segments", None)
        if segments is None:
            raise TranscriptionServiceError("Whisper response carried no segments")

        return RawTranscription(
            text=(getattr(response, "text", "") or "").strip(),
            segments=[
                RawSegment(text=(seg.text or "").strip(), start=float(seg.start), end=float(seg.end))
                for seg in segments
            ],
        )


class ChatPromptService(TextGenerationService):
    """Turns narration text into an image prompt with a chat model"""

    def __init__(self, config, client: Optional[openai.AsyncOpenAI] = None):
        self.config = config.prompt_generation
        self.logger = logging.getLogger('voicereel.chat_prompts')
        self.client = client or get_openai_client()
        self.model_name = choose_model("prompt", self.config.model_name)

    async def generate(self, instruction: str, text: str) -> str:
        try:
            response = await self.client.chat.completions.create(
                model=self.model_name,
                messages=[
                    {"role": "system", "content": self.config.system_message},
                    {"role": "user", "content": f'{instruction}: "{text}"'},
                ],
                max_tokens=self.config.max_tokens,
                temperature=self.config.temperature,
                timeout=self.config.timeout_seconds,
            )
        except openai.OpenAIError as e:
            raise PromptGenerationError(f"Chat completion failed: {e}") from e

        if not response.choices:
            raise PromptGenerationError("Chat completion returned no choices")
        content = (response.choices[0].message.content or "").strip()
        if not content:
            raise PromptGenerationError("Chat completion returned an empty prompt")
        return content
