"""Main media generation pipeline: drives transcription, enrichment and composition"""

import asyncio
import logging
import uuid
from datetime import datetime
from typing import Callable, Dict, FrozenSet, List, Optional

from ..video_assembly.timeline_builder import compose
from ..video_assembly.video_models import DisplayInterval, parse_resolution
from .errors import (
    InvalidInput, InvalidTransition, PipelineAbandoned, TranscriptionServiceError,
)
from .image_synthesizer import ImageSynthesizer
from .media_models import (
    AudioAsset, EnrichedSegment, PipelineStage, PipelineState, Timeline, Transcript, VideoDetails,
)
from .prompt_synthesizer import PromptSynthesizer
from .segment_enricher import SegmentEnricher
from .transcription import TranscriptionAdapter

ProgressCallback = Callable[[float, str], None]

# Progress at the end of each stage: transcription, enrichment (prompts then
# images, interleaved per segment), composition.
TRANSCRIBED_PROGRESS = 25.0
ENRICHED_PROGRESS = 75.0
READY_PROGRESS = 100.0

_S = PipelineStage
ALLOWED_TRANSITIONS: Dict[PipelineStage, FrozenSet[PipelineStage]] = {
    _S.IDLE: frozenset({_S.AWAITING_AUDIO, _S.ABANDONED}),
    _S.AWAITING_AUDIO: frozenset({_S.TRANSCRIBING, _S.ABANDONED}),
    _S.TRANSCRIBING: frozenset({_S.ENRICHING, _S.FAILED, _S.ABANDONED}),
    _S.ENRICHING: frozenset({_S.COMPOSING, _S.FAILED, _S.ABANDONED}),
    _S.COMPOSING: frozenset({_S.READY, _S.ABANDONED}),
    _S.READY: frozenset(),
    _S.FAILED: frozenset(),
    _S.ABANDONED: frozenset(),
}


class PipelineController:
    """One generation session: Idle -> AwaitingAudio -> Transcribing ->
    Enriching -> Composing -> Ready, with Failed and Abandoned as the other
    terminal stages.

    Per-segment prompt/image failures never fail the session; only a
    transcription failure (or an unexpected fault during enrichment) does.
    """

    def __init__(self, transcription: TranscriptionAdapter, enricher: SegmentEnricher,
                 details: Optional[VideoDetails] = None, fps: int = 30,
                 max_transcription_retries: int = 0,
                 progress_callback: Optional[ProgressCallback] = None):
        if not isinstance(fps, int) or isinstance(fps, bool) or fps <= 0:
            raise InvalidInput(f"fps must be a positive integer, got {fps!r}")
        self.transcription = transcription
        self.enricher = enricher
        self.details = details or VideoDetails()
        self.fps = fps
        self.max_transcription_retries = max(0, int(max_transcription_retries))
        self.progress_callback = progress_callback

        self.logger = logging.getLogger('voicereel.media_pipeline')
        self.state = PipelineState(session_id=uuid.uuid4().hex[:12])
        self.display_intervals: List[DisplayInterval] = []
        self._cancel_event = asyncio.Event()

    @classmethod
    def from_config(cls, config, services, details: Optional[VideoDetails] = None,
                    progress_callback: Optional[ProgressCallback] = None) -> "PipelineController":
        """Wire adapters for the given services using config defaults."""
        details = details or VideoDetails(
            style=config.image_generation.style,
            aspect_ratio=config.video.aspect_ratio,
        )
        width, height = parse_resolution(config.video.get_resolution(details.aspect_ratio.value))
        transcription = TranscriptionAdapter(
            services.speech_to_text,
            validate_timing=config.transcription.validate_timing,
        )
        enricher = SegmentEnricher(
            PromptSynthesizer(services.text_generation, config.prompt_generation.instruction),
            ImageSynthesizer(
                services.image_generation, width, height,
                style=config.image_generation.get_style_template(details.style),
            ),
            max_workers=config.enrichment.max_workers,
        )
        return cls(
            transcription, enricher,
            details=details,
            fps=config.video.fps,
            max_transcription_retries=config.transcription.max_retries,
            progress_callback=progress_callback,
        )

    # ------------------------ Observability ------------------------
    @property
    def stage(self) -> PipelineStage:
        return self.state.stage

    @property
    def progress(self) -> float:
        return self.state.progress

    @property
    def partial_segments(self) -> List[EnrichedSegment]:
        """Segments enriched so far; always a prefix of the final sequence."""
        return list(self.state.enriched_segments)

    @property
    def timeline(self) -> Optional[Timeline]:
        return self.state.timeline

    # ------------------------ Lifecycle ------------------------
    def start_session(self) -> None:
        self._transition(PipelineStage.AWAITING_AUDIO, "Waiting for narration audio")

    def abandon(self) -> None:
        """Stop issuing new service calls; in-flight results are discarded."""
        self._cancel_event.set()
        if not self.stage.is_terminal:
            self._transition(PipelineStage.ABANDONED, "Session abandoned")
            self.logger.info(f"Session {self.state.session_id} abandoned")

    async def run(self, audio: AudioAsset) -> Timeline:
        """Drive the whole session for one AudioAsset and return the Timeline."""
        if self.stage == PipelineStage.IDLE:
            self.start_session()
        self._raise_if_abandoned()

        self._transition(PipelineStage.TRANSCRIBING, "Converting your audio to text")
        transcript = await self._transcribe(audio)

        self.state.transcript = transcript
        self._transition(PipelineStage.ENRICHING, "Creating prompts and images for each scene")
        self._advance(TRANSCRIBED_PROGRESS, f"Transcribed {len(transcript.segments)} segments")

        enriched = await self._enrich(transcript)

        self._transition(PipelineStage.COMPOSING, "Combining everything into the final timeline")
        self._advance(ENRICHED_PROGRESS, "Composing timeline")
        timeline = Timeline(audio=audio, segments=tuple(enriched), details=self.details)
        self.display_intervals = compose(timeline, self.fps)
        self.state.timeline = timeline

        self._transition(PipelineStage.READY, "Timeline ready")
        self._advance(READY_PROGRESS, "Timeline ready")
        self.logger.info(
            f"Session {self.state.session_id} ready: {len(timeline.segments)} segments, "
            f"{len(timeline.degraded_segments)} degraded"
        )
        return timeline

    # ------------------------ Stages ------------------------
    async def _transcribe(self, audio: AudioAsset) -> Transcript:
        attempts = 1 + self.max_transcription_retries
        attempt = 0
        while True:
            attempt += 1
            try:
                transcript = await self.transcription.transcribe(audio)
            except InvalidInput as e:
                self._fail(e)
                raise
            except TranscriptionServiceError as e:
                self._raise_if_abandoned()
                if attempt < attempts:
                    self.logger.warning(f"Transcription attempt {attempt}/{attempts} failed: {e}")
                    continue
                self._fail(e)
                raise
            self._raise_if_abandoned()
            return transcript

    async def _enrich(self, transcript: Transcript) -> List[EnrichedSegment]:
        span = ENRICHED_PROGRESS - TRANSCRIBED_PROGRESS

        def on_segment(attempted: int, total: int, prefix: List[EnrichedSegment]) -> None:
            if self._cancel_event.is_set():
                return
            self.state.enriched_segments = prefix
            self._advance(
                TRANSCRIBED_PROGRESS + span * attempted / total,
                f"Enriched scene {attempted}/{total}",
            )

        try:
            enriched = await self.enricher.enrich(
                transcript.segments, progress_callback=on_segment, cancel_event=self._cancel_event
            )
        except PipelineAbandoned:
            self._raise_if_abandoned()
            raise
        except Exception as e:
            self._fail(e)
            raise
        self._raise_if_abandoned()
        self.state.enriched_segments = list(enriched)
        return enriched

    # ------------------------ State helpers ------------------------
    def _transition(self, target: PipelineStage, message: str = "") -> None:
        current = self.state.stage
        if target not in ALLOWED_TRANSITIONS[current]:
            raise InvalidTransition(current, target)
        self.state.stage = target
        self.state.message = message or self.state.message
        self.state.updated_at = datetime.now()
        self.logger.info(f"Stage {current.value} -> {target.value}")

    def _advance(self, value: float, message: str) -> None:
        # 100 only at Ready
        ceiling = READY_PROGRESS if self.state.stage == PipelineStage.READY else ENRICHED_PROGRESS
        value = max(self.state.progress, min(value, ceiling))
        if value == self.state.progress and message == self.state.message:
            return
        self.state.progress = value
        self.state.message = message
        self.state.updated_at = datetime.now()
        if self.progress_callback:
            self.progress_callback(value, message)

    def _fail(self, error: Exception) -> None:
        if self.stage.is_terminal:
            return
        self.state.error = f"{type(error).__name__}: {error}"
        self._transition(PipelineStage.FAILED, "Generation failed")
        self.logger.error(f"Session {self.state.session_id} failed: {self.state.error}")

    def _raise_if_abandoned(self) -> None:
        if self._cancel_event.is_set():
            if not self.stage.is_terminal:
                self._transition(PipelineStage.ABANDONED, "Session abandoned")
            raise PipelineAbandoned(f"Session {self.state.session_id} was abandoned")
