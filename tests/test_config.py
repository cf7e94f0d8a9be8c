import logging

import pytest
import yaml
from pydantic import ValidationError

from voicereel.media_generation.media_models import AspectRatio, VideoDetails
from voicereel.utils.config import Config
from voicereel.utils.logger import LoggerMixin, setup_logging


def test_load_partial_yaml_keeps_defaults(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text(yaml.safe_dump({
        "transcription": {"engine": "stub", "max_retries": 2},
        "video": {"fps": 24},
    }), encoding="utf-8")

    config = Config.load(str(path))

    assert config.transcription.engine == "stub"
    assert config.transcription.max_retries == 2
    assert config.transcription.model_name == "whisper-1"
    assert config.video.fps == 24
    assert config.prompt_generation.model_name == "gpt-4o-mini"
    assert config.enrichment.max_workers == 1


def test_empty_file_gives_defaults(tmp_path):
    path = tmp_path / "empty.yaml"
    path.write_text("", encoding="utf-8")
    assert Config.load(str(path)) == Config()


def test_missing_file_raises(tmp_path):
    with pytest.raises(FileNotFoundError):
        Config.load(str(tmp_path / "nope.yaml"))


def test_save_and_reload(tmp_path):
    config = Config()
    config.image_generation.style = "watercolor"
    path = tmp_path / "nested" / "saved.yaml"

    config.save(str(path))

    assert Config.load(str(path)).image_generation.style == "watercolor"


def test_invalid_values_are_rejected():
    with pytest.raises(ValidationError):
        Config(enrichment={"max_workers": 0})
    with pytest.raises(ValidationError):
        Config(video={"fps": 0})


def test_styles_and_resolutions():
    config = Config()

    assert set(config.get_available_styles()) == {"anime", "sketch", "watercolor", "minimal", "3d", "realistic"}
    assert config.is_style_supported("Watercolor")
    assert not config.is_style_supported("cubism")
    # unknown styles fall back to the configured default
    assert config.image_generation.get_style_template("cubism").name == "Anime Style"
    assert config.video.get_resolution("9:16") == "720x1280"
    assert config.video.get_resolution("4:3") == "1280x720"


def test_video_details_validation():
    assert VideoDetails().title == "Untitled narration"

    details = VideoDetails(title="  Harbor  ", aspect_ratio="1:1")
    assert details.title == "Harbor"
    assert details.aspect_ratio == AspectRatio.SQUARE

    with pytest.raises(ValidationError):
        VideoDetails(title="   ")
    with pytest.raises(ValidationError):
        VideoDetails(aspect_ratio="4:3")


def test_setup_logging_writes_to_configured_file(tmp_path):
    config = Config(logging={"level": "DEBUG", "file": str(tmp_path / "logs" / "run.log")})
    logger = setup_logging(config)

    class Worker(LoggerMixin):
        pass

    Worker().logger.info("segment enriched")
    for handler in logger.handlers:
        handler.flush()

    assert logger.level == logging.DEBUG
    assert Worker().logger.name == "voicereel.Worker"
    assert "segment enriched" in (tmp_path / "logs" / "run.log").read_text(encoding="utf-8")

    for handler in list(logger.handlers):
        handler.close()
        logger.removeHandler(handler)
