"""Speech-to-text adapter: audio payload -> ordered, timestamped Transcript"""

from typing import List

from ..services.base import RawSegment, SpeechToTextService
from ..utils.logger import LoggerMixin
from .errors import InvalidInput, TranscriptionServiceError, VoiceReelError
from .media_models import AudioAsset, Segment, Transcript


class TranscriptionAdapter(LoggerMixin):
    """Wraps a speech-to-text capability.

    Segment ids are assigned densely from 0 in transcript order. The
    reported full text is kept as the service returned it. No retries happen
    here; the caller decides whether to try again.
    """

    def __init__(self, service: SpeechToTextService, validate_timing: bool = False):
        self.service = service
        self.validate_timing = validate_timing

    async def transcribe(self, audio: AudioAsset) -> Transcript:
        if audio is None or not audio.payload:
            raise InvalidInput("Audio payload is empty")
        if audio.released:
            raise InvalidInput("Audio asset has already been released")

        try:
            raw = await self.service.transcribe(audio.payload, audio.format_hint)
        except VoiceReelError:
            raise
        except Exception as e:
            raise TranscriptionServiceError(f"Speech-to-text service failed: {e}") from e

        if self.validate_timing:
            self._check_timing(raw.segments)

        segments = tuple(
            Segment(id=idx, start_seconds=seg.start, end_seconds=seg.end, text=seg.text)
            for idx, seg in enumerate(raw.segments)
        )
        self.logger.info(f"Transcribed {len(segments)} segments ({len(raw.text)} chars)")
        return Transcript(full_text=raw.text, segments=segments)

    def _check_timing(self, segments: List[RawSegment]) -> None:
        previous_start = None
        for idx, seg in enumerate(segments):
            if seg.end <= seg.start:
                raise TranscriptionServiceError(
                    f"Segment {idx} ends before it starts ({seg.start:.3f}s -> {seg.end:.3f}s)"
                )
            if previous_start is not None and seg.start < previous_start:
                raise TranscriptionServiceError(f"Segment {idx} is out of time order")
            previous_start = seg.start
