"""Livepeer AI gateway text-to-image client"""

import asyncio
import logging
import os
from typing import Any, Dict, Optional

import aiohttp

from ..media_generation.errors import ImageGenerationError
from ..media_generation.media_models import ImageResult
from .base import ImageGenerationService


def parse_image_response(data: Any) -> Optional[ImageResult]:
    """Pick the first image out of a text-to-image response body.

    Returns None when the gateway answered successfully but produced no image.
    """
    if not isinstance(data, dict):
        raise ImageGenerationError(f"Unexpected image response type: {type(data).__name__}")
    images = data.get("images") or []
    if not images:
        return None
    first = images[0]
    url = first.get("url")
    if not url:
        return None
    try:
        seed = int(first.get("seed", 0))
    except (TypeError, ValueError) as e:
        raise ImageGenerationError(f"Invalid seed in image response: {first.get('seed')!r}") from e
    return ImageResult(url=url, seed=seed, flagged=bool(first.get("nsfw", False)))


class LivepeerImageService(ImageGenerationService):
    """Text-to-image over the Livepeer AI gateway"""

    def __init__(self, config, api_key: Optional[str] = None):
        self.config = config.image_generation
        self.logger = logging.getLogger('voicereel.livepeer')
        self.api_key = api_key or os.environ.get("LIVEPEER_API_KEY")
        if not self.api_key:
            raise RuntimeError("LIVEPEER_API_KEY is not set; please add it to .env.local")
        self.endpoint = f"{self.config.base_url.rstrip('/')}/text-to-image"
        self.session: Optional[aiohttp.ClientSession] = None

    def _ensure_session(self) -> aiohttp.ClientSession:
        if self.session is None or self.session.closed:
            self.session = aiohttp.ClientSession(
                timeout=aiohttp.ClientTimeout(total=self.config.timeout_seconds),
                headers={
                    'Authorization': f'Bearer {self.api_key}',
                    'User-Agent': 'VoiceReel/1.0 (Narration Video Generation)'
                }
            )
        return self.session

    async def close(self) -> None:
        if self.session and not self.session.closed:
            await self.session.close()

    async def generate(self, prompt: str, width: int, height: int) -> Optional[ImageResult]:
        body: Dict[str, Any] = {
            "model_id": self.config.model_id,
            "prompt": prompt,
            "width": width,
            "height": height,
        }
        session = self._ensure_session()
        try:
            async with session.post(self.endpoint, json=body) as response:
                if response.status != 200:
                    detail = (await response.text())[:200]
                    raise ImageGenerationError(f"Image gateway returned {response.status}: {detail}")
                data = await response.json()
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            raise ImageGenerationError(f"Image request failed: {e}") from e

        return parse_image_response(data)
