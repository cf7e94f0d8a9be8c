import pytest

from voicereel.media_generation.errors import (
    InvalidInput, InvalidTransition, PipelineAbandoned, TranscriptionServiceError,
)
from voicereel.media_generation.image_synthesizer import ImageSynthesizer
from voicereel.media_generation.media_models import AudioAsset, FailureKind, PipelineStage, VideoDetails
from voicereel.media_generation.media_pipeline import PipelineController
from voicereel.media_generation.prompt_synthesizer import PromptSynthesizer
from voicereel.media_generation.segment_enricher import SegmentEnricher
from voicereel.media_generation.transcription import TranscriptionAdapter
from voicereel.services import ServiceBundle
from voicereel.utils.config import Config

from conftest import FakeImageGeneration, FakeSpeechToText, FakeTextGeneration


def _controller(stt, text_service=None, image_service=None, max_workers=1, **kwargs):
    enricher = SegmentEnricher(
        PromptSynthesizer(text_service or FakeTextGeneration()),
        ImageSynthesizer(image_service or FakeImageGeneration(), 1280, 720),
        max_workers=max_workers,
    )
    return PipelineController(TranscriptionAdapter(stt), enricher, **kwargs)


@pytest.mark.asyncio
async def test_hello_world_with_one_failed_image(audio, hello_world_stt):
    updates = []
    controller = _controller(
        hello_world_stt,
        image_service=FakeImageGeneration(fail_on=["P(World)"]),
        progress_callback=lambda percent, message: updates.append(percent),
    )

    timeline = await controller.run(audio)

    assert controller.stage == PipelineStage.READY
    assert controller.timeline is timeline
    assert timeline.audio.url == audio.url
    assert [s.text for s in timeline.segments] == ["Hello", "World"]
    assert timeline.segments[0].image.url == "img://P(Hello)"
    assert timeline.segments[1].prompt == "P(World)"
    assert timeline.segments[1].image is None
    assert timeline.segments[1].image_error.kind == FailureKind.IMAGE_GENERATION_ERROR
    assert timeline.degraded_segments == [1]

    # frame windows at the default 30 fps
    assert [(i.start_frame, i.duration_frames) for i in controller.display_intervals] == [(0, 36), (36, 39)]

    assert updates == sorted(updates)
    assert updates.count(100.0) == 1
    assert updates[-1] == 100.0
    assert controller.progress == 100.0


@pytest.mark.asyncio
async def test_transcription_failure_fails_session(audio):
    text_service = FakeTextGeneration()
    controller = _controller(FakeSpeechToText([("Hello", 0.0, 1.0)], failures=1), text_service)

    with pytest.raises(TranscriptionServiceError):
        await controller.run(audio)

    assert controller.stage == PipelineStage.FAILED
    assert controller.timeline is None
    assert controller.state.error.startswith("TranscriptionServiceError")
    assert controller.progress < 100.0
    assert text_service.calls == []


@pytest.mark.asyncio
async def test_transcription_retries_when_configured(audio):
    stt = FakeSpeechToText([("Hello", 0.0, 1.0)], failures=2)
    controller = _controller(stt, max_transcription_retries=2)

    timeline = await controller.run(audio)

    assert stt.calls == 3
    assert len(timeline.segments) == 1
    assert controller.stage == PipelineStage.READY


@pytest.mark.asyncio
async def test_invalid_audio_is_not_retried():
    stt = FakeSpeechToText([("Hello", 0.0, 1.0)])
    controller = _controller(stt, max_transcription_retries=3)

    with pytest.raises(InvalidInput):
        await controller.run(AudioAsset(payload=b"", url="file:///tmp/none.wav"))

    assert stt.calls == 0
    assert controller.stage == PipelineStage.FAILED


@pytest.mark.asyncio
async def test_silent_audio_gives_empty_ready_timeline(audio):
    image_service = FakeImageGeneration()
    controller = _controller(FakeSpeechToText([]), image_service=image_service)

    timeline = await controller.run(audio)

    assert controller.stage == PipelineStage.READY
    assert timeline.segments == ()
    assert controller.display_intervals == []
    assert image_service.calls == []


@pytest.mark.asyncio
async def test_all_prompts_failing_still_reaches_ready(audio, hello_world_stt):
    controller = _controller(hello_world_stt, FakeTextGeneration(fail_on=["Hello", "World"]))

    timeline = await controller.run(audio)

    assert controller.stage == PipelineStage.READY
    assert timeline.degraded_segments == [0, 1]
    assert all(s.prompt_error.kind == FailureKind.PROMPT_GENERATION_ERROR for s in timeline.segments)


@pytest.mark.asyncio
async def test_abandon_during_enrichment(audio):
    controller = None

    def on_call(text):
        if text == "Second":
            controller.abandon()

    stt = FakeSpeechToText([("First", 0.0, 1.0), ("Second", 1.0, 2.0), ("Third", 2.0, 3.0)])
    text_service = FakeTextGeneration(on_call=on_call)
    controller = _controller(stt, text_service)

    with pytest.raises(PipelineAbandoned):
        await controller.run(audio)

    assert controller.stage == PipelineStage.ABANDONED
    assert controller.timeline is None
    assert text_service.calls == ["First", "Second"]
    assert [s.text for s in controller.partial_segments] == ["First"]


@pytest.mark.asyncio
async def test_abandon_during_pooled_enrichment(audio):
    controller = None

    def on_call(text):
        if text == "Fourth":
            controller.abandon()

    texts = ["First", "Second", "Third", "Fourth", "Fifth", "Sixth"]
    stt = FakeSpeechToText([(t, float(i), float(i + 1)) for i, t in enumerate(texts)])
    # First finishes while Second and Third are still in flight
    text_service = FakeTextGeneration(on_call=on_call, delays={"Second": 0.05, "Third": 0.05})
    image_service = FakeImageGeneration()
    updates = []
    controller = _controller(
        stt, text_service, image_service, max_workers=3,
        progress_callback=lambda percent, message: updates.append(percent),
    )

    with pytest.raises(PipelineAbandoned):
        await controller.run(audio)

    assert controller.stage == PipelineStage.ABANDONED
    assert controller.timeline is None
    # no prompt call starts after the abandon point
    assert text_service.calls == ["First", "Second", "Third", "Fourth"]
    # in-flight results are discarded
    assert [prompt for prompt, _, _ in image_service.calls] == ["P(First)"]
    assert [s.text for s in controller.partial_segments] == ["First"]
    assert 100.0 not in updates


@pytest.mark.asyncio
async def test_abandoned_session_cannot_run(audio, hello_world_stt):
    controller = _controller(hello_world_stt)
    controller.abandon()

    with pytest.raises(PipelineAbandoned):
        await controller.run(audio)
    assert hello_world_stt.calls == 0
    assert controller.stage == PipelineStage.ABANDONED


@pytest.mark.asyncio
async def test_terminal_stage_rejects_new_run(audio, hello_world_stt):
    controller = _controller(hello_world_stt)
    await controller.run(audio)

    with pytest.raises(InvalidTransition):
        controller.start_session()
    with pytest.raises(InvalidTransition):
        await controller.run(audio)


def test_invalid_fps_rejected(hello_world_stt):
    with pytest.raises(InvalidInput):
        _controller(hello_world_stt, fps=0)


@pytest.mark.asyncio
async def test_from_config_uses_aspect_ratio_size(audio, hello_world_stt):
    image_service = FakeImageGeneration()
    services = ServiceBundle(hello_world_stt, FakeTextGeneration(), image_service)
    details = VideoDetails(title="Harbor", style="sketch", aspect_ratio="9:16")

    controller = PipelineController.from_config(Config(), services, details=details)
    timeline = await controller.run(audio)

    assert {(w, h) for _, w, h in image_service.calls} == {(720, 1280)}
    assert all("pencil sketch" in prompt for prompt, _, _ in image_service.calls)
    assert timeline.details.title == "Harbor"
