from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import AliasChoices, Field, PrivateAttr, model_validator
from typing import List, Optional
from dotenv import load_dotenv, find_dotenv

from shotscript.exceptions import ConfigurationError


# Defaults for the OpenAI-compatible endpoints we know how to talk to.
PROVIDER_PRESETS = {
    "qwen": {
        "base_url": "https://dashscope.aliyuncs.com/compatible-mode/v1",
        "text_model": "qwen-plus",
        "vision_model": "qwen-vl-max",
        "audio_model": "qwen2-audio-instruct",
    },
    "glm": {
        "base_url": "https://open.bigmodel.cn/api/paas/v4",
        "text_model": "glm-4.7",
        "vision_model": "glm-4v-plus",
        "audio_model": "glm-4-voice",
    },
    "openai": {
        "base_url": None,
        "text_model": "gpt-4o-mini",
        "vision_model": "gpt-4o",
        "audio_model": "gpt-4o-audio-preview",
    },
}

DEFAULT_PLATFORMS = (
    "douyin.com,iesdouyin.com,tiktok.com,kuaishou.com,bilibili.com,b23.tv,"
    "xiaohongshu.com,xhslink.com,weibo.com,youtube.com,youtu.be,instagram.com"
)

_SETTINGS = dict(
    env_file=".env",
    env_file_encoding="utf-8",
    validate_assignment=True,
    extra="ignore",
    case_sensitive=False,
    populate_by_name=True,
)


class AIConfig(BaseSettings):
    """Remote multimodal model configuration."""

    provider: str = Field(default="qwen", validation_alias=AliasChoices("AI_PROVIDER"))
    api_key: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices(
            "AI_API_KEY", "QWEN_API_KEY", "ZHIPU_API_KEY", "GLM_API_KEY", "OPENAI_API_KEY"
        ),
    )
    base_url: Optional[str] = Field(default=None, validation_alias=AliasChoices("AI_BASE_URL"))
    text_model: Optional[str] = Field(default=None, validation_alias=AliasChoices("AI_TEXT_MODEL"))
    vision_model: Optional[str] = Field(default=None, validation_alias=AliasChoices("AI_VISION_MODEL"))
    audio_model: Optional[str] = Field(default=None, validation_alias=AliasChoices("AI_AUDIO_MODEL"))
    timeout: float = Field(default=120.0, validation_alias=AliasChoices("AI_TIMEOUT"))
    temperature: float = Field(default=0.7, validation_alias=AliasChoices("AI_TEMPERATURE"))
    max_tokens: int = Field(default=4000, validation_alias=AliasChoices("AI_MAX_TOKENS"))

    model_config = SettingsConfigDict(**_SETTINGS)

    def __init__(self, **kwargs):
        # Force load environment variables before validation
        load_dotenv(find_dotenv())
        super().__init__(**kwargs)

    @model_validator(mode="after")
    def _apply_preset(self):
        preset = PROVIDER_PRESETS.get(self.provider.lower())
        if preset is None:
            raise ValueError(
                f"Unknown AI provider: {self.provider}. "
                f"Supported providers: {list(PROVIDER_PRESETS.keys())}"
            )
        # object.__setattr__ avoids re-triggering validate_assignment
        for field_name, default in preset.items():
            if getattr(self, field_name) is None and default is not None:
                object.__setattr__(self, field_name, default)
        return self


class CacheConfig(BaseSettings):
    """Local artifact cache and output locations."""

    root: str = Field(default=".shotscript-cache", validation_alias=AliasChoices("CACHE_ROOT"))
    output_dir: str = Field(default="output", validation_alias=AliasChoices("OUTPUT_DIR"))

    model_config = SettingsConfigDict(**_SETTINGS)

    def __init__(self, **kwargs):
        load_dotenv(find_dotenv())
        super().__init__(**kwargs)


class SamplingConfig(BaseSettings):
    """Keyframe sampling policy."""

    target_frame_count: int = Field(default=20, validation_alias=AliasChoices("SAMPLING_TARGET_FRAMES"))
    min_interval: int = Field(default=2, validation_alias=AliasChoices("SAMPLING_MIN_INTERVAL"))
    fixed_interval: Optional[float] = Field(
        default=None, validation_alias=AliasChoices("SAMPLING_FIXED_INTERVAL")
    )

    model_config = SettingsConfigDict(**_SETTINGS)

    def __init__(self, **kwargs):
        load_dotenv(find_dotenv())
        super().__init__(**kwargs)


class PipelineConfig(BaseSettings):
    """Thresholds and external tool locations for the analysis pipeline."""

    min_duration: float = Field(default=5.0, validation_alias=AliasChoices("MIN_DURATION"))
    max_duration: float = Field(default=300.0, validation_alias=AliasChoices("MAX_DURATION"))
    max_frames: int = Field(default=20, validation_alias=AliasChoices("MAX_FRAMES"))
    max_image_edge: int = Field(default=768, validation_alias=AliasChoices("MAX_IMAGE_EDGE"))
    supported_platforms: str = Field(
        default=DEFAULT_PLATFORMS, validation_alias=AliasChoices("SUPPORTED_PLATFORMS")
    )
    ytdlp_binary: str = Field(default="yt-dlp", validation_alias=AliasChoices("YTDLP_BINARY"))
    ffmpeg_binary: str = Field(default="ffmpeg", validation_alias=AliasChoices("FFMPEG_BINARY"))
    prompts_dir: Optional[str] = Field(default=None, validation_alias=AliasChoices("PROMPTS_DIR"))

    model_config = SettingsConfigDict(**_SETTINGS)

    def __init__(self, **kwargs):
        load_dotenv(find_dotenv())
        super().__init__(**kwargs)

    @property
    def platforms(self) -> List[str]:
        return [p.strip().lower() for p in self.supported_platforms.split(",") if p.strip()]


class LoggingConfig(BaseSettings):
    """Logging configuration."""

    level: str = Field(default="INFO", validation_alias=AliasChoices("LOG_LEVEL"))
    log_file: Optional[str] = Field(default=None, validation_alias=AliasChoices("LOG_FILE"))

    model_config = SettingsConfigDict(**_SETTINGS)


class ShotScriptConfig(BaseSettings):
    """Main configuration class.

    Sub-configurations are built lazily from the environment unless they are
    passed in explicitly, which is what tests and embedding code do.
    """

    model_config = SettingsConfigDict(**_SETTINGS)

    _ai: Optional[AIConfig] = PrivateAttr(default=None)
    _cache: Optional[CacheConfig] = PrivateAttr(default=None)
    _sampling: Optional[SamplingConfig] = PrivateAttr(default=None)
    _pipeline: Optional[PipelineConfig] = PrivateAttr(default=None)
    _logging: Optional[LoggingConfig] = PrivateAttr(default=None)

    def __init__(
        self,
        ai: Optional[AIConfig] = None,
        cache: Optional[CacheConfig] = None,
        sampling: Optional[SamplingConfig] = None,
        pipeline: Optional[PipelineConfig] = None,
        logging: Optional[LoggingConfig] = None,
        **kwargs,
    ):
        load_dotenv(find_dotenv())
        super().__init__(**kwargs)
        self._ai = ai
        self._cache = cache
        self._sampling = sampling
        self._pipeline = pipeline
        self._logging = logging

    @property
    def ai(self) -> AIConfig:
        if self._ai is None:
            self._ai = AIConfig()
        return self._ai

    @property
    def cache(self) -> CacheConfig:
        if self._cache is None:
            self._cache = CacheConfig()
        return self._cache

    @property
    def sampling(self) -> SamplingConfig:
        if self._sampling is None:
            self._sampling = SamplingConfig()
        return self._sampling

    @property
    def pipeline(self) -> PipelineConfig:
        if self._pipeline is None:
            self._pipeline = PipelineConfig()
        return self._pipeline

    @property
    def logging(self) -> LoggingConfig:
        if self._logging is None:
            self._logging = LoggingConfig()
        return self._logging

    def validate_runtime(self) -> "ShotScriptConfig":
        """Fail fast on settings without which no run can succeed."""
        if not self.ai.api_key:
            raise ConfigurationError(
                "No API key configured. Set AI_API_KEY (or QWEN_API_KEY / ZHIPU_API_KEY / OPENAI_API_KEY)."
            )
        if self.sampling.target_frame_count <= 0:
            raise ConfigurationError("SAMPLING_TARGET_FRAMES must be positive")
        if self.sampling.fixed_interval is not None and self.sampling.fixed_interval <= 0:
            raise ConfigurationError("SAMPLING_FIXED_INTERVAL must be positive")
        if self.pipeline.max_frames <= 0:
            raise ConfigurationError("MAX_FRAMES must be positive")
        if self.pipeline.min_duration > self.pipeline.max_duration:
            raise ConfigurationError("MIN_DURATION must not exceed MAX_DURATION")
        return self
