"""Configuration management for the narration video system"""

import yaml
from pathlib import Path
from typing import Any, Dict, List, Optional
from pydantic import BaseModel, Field


DEFAULT_PROMPT_SYSTEM_MESSAGE = (
    "You are an expert at converting narrative text into detailed image generation prompts. "
    "Create vivid, descriptive prompts that capture the essence of the narrative in a visual way. "
    "Focus on style, mood, composition, and important details."
)

DEFAULT_PROMPT_INSTRUCTION = (
    "Convert this narrative text into a detailed image generation prompt. "
    "Focus on visual elements, style, and mood"
)


class TranscriptionConfig(BaseModel):
    engine: str = "openai"  # openai | stub
    model_name: str = "whisper-1"
    response_format: str = "verbose_json"
    format_hint: str = "wav"
    timeout_seconds: float = 120.0
    max_retries: int = Field(default=0, ge=0)
    validate_timing: bool = False
    stub_script: str = ""


class PromptGenerationConfig(BaseModel):
    engine: str = "openai"  # openai | stub
    model_name: str = "gpt-4o-mini"
    temperature: float = 0.7
    max_tokens: int = 256
    timeout_seconds: float = 60.0
    system_message: str = DEFAULT_PROMPT_SYSTEM_MESSAGE
    instruction: str = DEFAULT_PROMPT_INSTRUCTION


class StyleTemplate(BaseModel):
    name: str
    base_style: str
    mood: str = ""


DEFAULT_STYLE_TEMPLATES: Dict[str, StyleTemplate] = {
    "anime": StyleTemplate(
        name="Anime Style",
        base_style="japanese animation artwork, bold lines, expressive characters",
        mood="vibrant, dynamic",
    ),
    "sketch": StyleTemplate(
        name="Hand Drawn Sketch",
        base_style="natural pencil sketch, organic lines, paper texture",
        mood="intimate, handmade",
    ),
    "watercolor": StyleTemplate(
        name="Watercolor",
        base_style="watercolor painting, flowing colors, gentle transitions",
        mood="soft, dreamy",
    ),
    "minimal": StyleTemplate(
        name="Minimalist",
        base_style="minimalist illustration, clean shapes, essential elements only",
        mood="calm, uncluttered",
    ),
    "3d": StyleTemplate(
        name="3D Animation",
        base_style="modern 3d render, depth and dimension, soft global illumination",
        mood="playful, polished",
    ),
    "realistic": StyleTemplate(
        name="Realistic",
        base_style="photorealistic, detailed textures, natural lighting",
        mood="cinematic, grounded",
    ),
}


class ImageGenerationConfig(BaseModel):
    engine: str = "livepeer"  # livepeer | stub
    model_id: str = "SG161222/RealVisXL_V4.0_Lightning"
    base_url: str = "https://dream-gateway.livepeer.cloud"
    timeout_seconds: float = 120.0
    style: str = "anime"
    style_templates: Dict[str, StyleTemplate] = Field(
        default_factory=lambda: dict(DEFAULT_STYLE_TEMPLATES)
    )

    def get_style_template(self, style: Optional[str] = None) -> StyleTemplate:
        """Get the template for a style, falling back to the configured default"""
        key = (style or self.style or "").lower()
        if key in self.style_templates:
            return self.style_templates[key]
        return self.style_templates.get(self.style, DEFAULT_STYLE_TEMPLATES["anime"])


class EnrichmentConfig(BaseModel):
    max_workers: int = Field(default=1, ge=1)


class VideoConfig(BaseModel):
    fps: int = Field(default=30, gt=0)
    aspect_ratio: str = "16:9"
    resolutions: Dict[str, str] = {
        "16:9": "1280x720",
        "1:1": "1024x1024",
        "9:16": "720x1280",
    }

    def get_resolution(self, aspect_ratio: Optional[str] = None) -> str:
        return self.resolutions.get(aspect_ratio or self.aspect_ratio, self.resolutions["16:9"])


class PathsConfig(BaseModel):
    """Storage paths configuration"""
    output: str = "./output"
    artifacts: str = "./output/artifacts"
    temp: str = "./temp"
    logs: str = "./logs"


class LoggingConfig(BaseModel):
    level: str = "INFO"
    format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    file: str = "./logs/voicereel.log"
    max_size_mb: int = 100
    backup_count: int = 5


class Config(BaseModel):
    transcription: TranscriptionConfig = TranscriptionConfig()
    prompt_generation: PromptGenerationConfig = PromptGenerationConfig()
    image_generation: ImageGenerationConfig = ImageGenerationConfig()
    enrichment: EnrichmentConfig = EnrichmentConfig()
    video: VideoConfig = VideoConfig()
    paths: PathsConfig = PathsConfig()
    logging: LoggingConfig = LoggingConfig()

    def get_available_styles(self) -> List[str]:
        """Get list of configured art styles"""
        return list(self.image_generation.style_templates.keys())

    def is_style_supported(self, style: str) -> bool:
        return style.lower() in self.image_generation.style_templates

    @classmethod
    def load(cls, config_path: str) -> "Config":
        """Load configuration from YAML file"""
        config_file = Path(config_path)
        if not config_file.exists():
            raise FileNotFoundError(f"Configuration file not found: {config_path}")

        with open(config_file, 'r', encoding='utf-8') as f:
            config_data: Dict[str, Any] = yaml.safe_load(f) or {}

        return cls(**config_data)

    def save(self, config_path: str):
        """Save configuration to YAML file"""
        config_file = Path(config_path)
        config_file.parent.mkdir(parents=True, exist_ok=True)

        with open(config_file, 'w', encoding='utf-8') as f:
            yaml.safe_dump(self.model_dump(), f, default_flow_style=False)
