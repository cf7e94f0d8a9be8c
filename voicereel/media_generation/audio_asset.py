"""Scoped acquisition of narration audio.

An AudioAsset carries both the raw payload (for transcription) and a URL a
player can dereference. The URL stays valid for the lifetime of the ``with``
block and is released on exit whether the pipeline succeeded or not.
"""

from __future__ import annotations

import logging
import tempfile
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, Optional

from .errors import InvalidInput
from .media_models import AudioAsset


logger = logging.getLogger('voicereel.audio_asset')


def _format_hint(path: Path, default: str = "wav") -> str:
    suffix = path.suffix.lstrip(".").lower()
    return suffix or default


@contextmanager
def open_audio_file(path: str) -> Iterator[AudioAsset]:
    """Load a recording from disk; the URL points at the original file."""
    audio_path = Path(path)
    if not audio_path.is_file():
        raise InvalidInput(f"Audio file not found: {path}")

    asset = AudioAsset(
        payload=audio_path.read_bytes(),
        url=audio_path.resolve().as_uri(),
        format_hint=_format_hint(audio_path),
    )
    logger.info(f"Audio loaded: {audio_path.name} ({len(asset.payload)} bytes)")
    try:
        yield asset
    finally:
        asset.release()


@contextmanager
def audio_from_bytes(payload: bytes, format_hint: str = "wav",
                     temp_dir: Optional[str] = None) -> Iterator[AudioAsset]:
    """Expose an in-memory recording through a temporary file URL.

    The temporary file is removed when the block exits.
    """
    if temp_dir:
        Path(temp_dir).mkdir(parents=True, exist_ok=True)
    handle = tempfile.NamedTemporaryFile(
        suffix=f".{format_hint}", prefix="narration_", dir=temp_dir, delete=False
    )
    temp_path = Path(handle.name)
    try:
        with handle:
            handle.write(payload)
        asset = AudioAsset(payload=payload, url=temp_path.resolve().as_uri(), format_hint=format_hint)
        try:
            yield asset
        finally:
            asset.release()
    finally:
        temp_path.unlink(missing_ok=True)
