"""Per-segment enrichment: prompt + image for every transcript segment.

Segments are worked off an ordered task list. With one worker this is the
sequential baseline: segment i's calls start only after segment i-1's
attempt finished. With more workers a bounded pool drains the same list and
writes each result into a pre-sized array at the segment's position, so the
assembled output order always equals the input order.

Prompt and image failures are segment-local: they are recorded on the
EnrichedSegment as SegmentFailure values and never abort the batch.
"""

import asyncio
from typing import Callable, List, Optional, Sequence

from ..utils.logger import LoggerMixin
from .errors import ImageGenerationError, PipelineAbandoned, PromptGenerationError
from .image_synthesizer import ImageSynthesizer
from .media_models import EnrichedSegment, FailureKind, Segment, SegmentFailure
from .prompt_synthesizer import PromptSynthesizer

# (attempted, total, completed prefix)
EnrichmentCallback = Callable[[int, int, List[EnrichedSegment]], None]


class SegmentEnricher(LoggerMixin):

    def __init__(self, prompt_synthesizer: PromptSynthesizer, image_synthesizer: ImageSynthesizer,
                 max_workers: int = 1):
        self.prompt_synthesizer = prompt_synthesizer
        self.image_synthesizer = image_synthesizer
        self.max_workers = max(1, int(max_workers))

    async def enrich(self, segments: Sequence[Segment],
                     progress_callback: Optional[EnrichmentCallback] = None,
                     cancel_event: Optional[asyncio.Event] = None) -> List[EnrichedSegment]:
        """Enrich all segments; output length and order equal the input's."""
        tasks = list(enumerate(segments))
        total = len(tasks)
        results: List[Optional[EnrichedSegment]] = [None] * total
        if total == 0:
            return []

        state = {"attempted": 0, "prefix": 0}

        def record(position: int, enriched: EnrichedSegment) -> None:
            results[position] = enriched
            state["attempted"] += 1
            while state["prefix"] < total and results[state["prefix"]] is not None:
                state["prefix"] += 1
            if progress_callback:
                progress_callback(state["attempted"], total, list(results[:state["prefix"]]))

        workers = min(self.max_workers, total)
        self.logger.info(f"Enriching {total} segments with {workers} worker(s)")

        if workers == 1:
            for position, segment in tasks:
                self._check_cancelled(cancel_event)
                record(position, await self._enrich_one(segment, cancel_event))
        else:
            queue: asyncio.Queue = asyncio.Queue()
            for item in tasks:
                queue.put_nowait(item)

            async def worker() -> None:
                while True:
                    if cancel_event is not None and cancel_event.is_set():
                        return
                    try:
                        position, segment = queue.get_nowait()
                    except asyncio.QueueEmpty:
                        return
                    record(position, await self._enrich_one(segment, cancel_event))

            pool = [asyncio.ensure_future(worker()) for _ in range(workers)]
            try:
                await asyncio.gather(*pool)
            finally:
                for task in pool:
                    if not task.done():
                        task.cancel()
                # in-flight calls end here; their results are dropped
                await asyncio.gather(*pool, return_exceptions=True)

        self._check_cancelled(cancel_event)

        enriched = [r for r in results if r is not None]
        degraded = sum(1 for r in enriched if r.is_degraded)
        self.logger.info(f"Enrichment finished: {total - degraded}/{total} segments with images, {degraded} degraded")
        return enriched

    async def _enrich_one(self, segment: Segment,
                          cancel_event: Optional[asyncio.Event]) -> EnrichedSegment:
        if not segment.text.strip():
            return EnrichedSegment.from_segment(
                segment,
                prompt_error=SegmentFailure(kind=FailureKind.EMPTY_TEXT, message="segment has no text"),
            )

        try:
            prompt = await self.prompt_synthesizer.synthesize(segment.text)
        except PromptGenerationError as e:
            self.logger.warning(f"Prompt generation failed for segment {segment.id}: {e}")
            self._check_cancelled(cancel_event)
            return EnrichedSegment.from_segment(
                segment,
                prompt_error=SegmentFailure(kind=FailureKind.PROMPT_GENERATION_ERROR, message=str(e)),
            )

        # a result arriving after abandonment is discarded
        self._check_cancelled(cancel_event)

        try:
            image = await self.image_synthesizer.synthesize(prompt)
        except ImageGenerationError as e:
            self.logger.warning(f"Image generation failed for segment {segment.id}: {e}")
            self._check_cancelled(cancel_event)
            return EnrichedSegment.from_segment(
                segment,
                prompt=prompt,
                image_error=SegmentFailure(kind=FailureKind.IMAGE_GENERATION_ERROR, message=str(e)),
            )

        self._check_cancelled(cancel_event)

        if image is None:
            self.logger.warning(f"Image service declined segment {segment.id}")
            return EnrichedSegment.from_segment(
                segment,
                prompt=prompt,
                image_error=SegmentFailure(kind=FailureKind.IMAGE_DECLINED, message="no image returned"),
            )

        self.logger.debug(f"Segment {segment.id} enriched: seed={image.seed} flagged={image.flagged}")
        return EnrichedSegment.from_segment(segment, prompt=prompt, image=image)

    @staticmethod
    def _check_cancelled(cancel_event: Optional[asyncio.Event]) -> None:
        if cancel_event is not None and cancel_event.is_set():
            raise PipelineAbandoned("Enrichment abandoned")
