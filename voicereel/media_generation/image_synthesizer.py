"""Image synthesis: visual description -> generated image reference"""

from typing import Optional

from ..services.base import ImageGenerationService
from ..utils.config import StyleTemplate
from ..utils.logger import LoggerMixin
from .errors import ImageGenerationError, InvalidInput, VoiceReelError
from .media_models import ImageResult


def apply_style(prompt: str, style: Optional[StyleTemplate]) -> str:
    """Append the style locks (base style, mood) to a prompt."""
    if style is None:
        return prompt.strip()
    style_bits = ", ".join(x for x in [style.base_style, style.mood] if x)
    if not style_bits:
        return prompt.strip()
    return f"{prompt.strip().rstrip(',.')}, {style_bits}"


class ImageSynthesizer(LoggerMixin):
    """Wraps an image-generation capability.

    None means the service declined without an error condition. Content
    policy flags are passed through untouched on the result.
    """

    def __init__(self, service: ImageGenerationService, width: int, height: int,
                 style: Optional[StyleTemplate] = None):
        if width <= 0 or height <= 0:
            raise InvalidInput(f"Invalid image size {width}x{height}")
        self.service = service
        self.width = width
        self.height = height
        self.style = style

    async def synthesize(self, prompt: str) -> Optional[ImageResult]:
        if not prompt or not prompt.strip():
            raise InvalidInput("Image prompt is empty")

        styled = apply_style(prompt, self.style)
        try:
            result = await self.service.generate(styled, self.width, self.height)
        except VoiceReelError:
            raise
        except Exception as e:
            raise ImageGenerationError(f"Image service failed: {e}") from e

        if result is not None and result.flagged:
            self.logger.warning(f"Image flagged by content policy: seed={result.seed} url={result.url}")
        return result
