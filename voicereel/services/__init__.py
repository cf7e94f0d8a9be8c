"""
External AI capabilities

Speech-to-text, prompt generation and image generation, each behind an
abstract interface with a networked and an offline (stub) implementation.
"""

import logging
from typing import NamedTuple

from .base import (
    ImageGenerationService, RawSegment, RawTranscription,
    SpeechToTextService, TextGenerationService,
)

logger = logging.getLogger('voicereel.services')


class ServiceBundle(NamedTuple):
    speech_to_text: SpeechToTextService
    text_generation: TextGenerationService
    image_generation: ImageGenerationService

    async def __aenter__(self):
        """Async context manager entry"""
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Async context manager exit"""
        await self.close()

    async def close(self) -> None:
        for service in self:
            await service.close()


def create_services(config) -> ServiceBundle:
    """Create the three capability implementations named in the config.

    Uses lazy imports so unused client libraries are never loaded.
    """
    stt_engine = config.transcription.engine.lower()
    if stt_engine == "openai":
        from .openai_services import WhisperTranscriptionService
        stt = WhisperTranscriptionService(config)
    elif stt_engine == "stub":
        from .stub import StubTranscriptionService
        stt = StubTranscriptionService(config.transcription.stub_script)
    else:
        raise ValueError(f"Unknown transcription engine: {stt_engine!r}. Valid options: openai, stub")

    prompt_engine = config.prompt_generation.engine.lower()
    if prompt_engine == "openai":
        from .openai_services import ChatPromptService
        prompts = ChatPromptService(config)
    elif prompt_engine == "stub":
        from .stub import StubPromptService
        prompts = StubPromptService()
    else:
        raise ValueError(f"Unknown prompt engine: {prompt_engine!r}. Valid options: openai, stub")

    image_engine = config.image_generation.engine.lower()
    if image_engine == "livepeer":
        from .livepeer import LivepeerImageService
        images = LivepeerImageService(config)
    elif image_engine == "stub":
        from .stub import StubImageService
        images = StubImageService()
    else:
        raise ValueError(f"Unknown image engine: {image_engine!r}. Valid options: livepeer, stub")

    logger.info(
        f"Services: transcription={type(stt).__name__}, prompts={type(prompts).__name__}, "
        f"images={type(images).__name__}"
    )
    return ServiceBundle(stt, prompts, images)


__all__ = [
    'ImageGenerationService',
    'RawSegment',
    'RawTranscription',
    'ServiceBundle',
    'SpeechToTextService',
    'TextGenerationService',
    'create_services',
]
