from .settings import (
    AIConfig,
    CacheConfig,
    LoggingConfig,
    PipelineConfig,
    SamplingConfig,
    ShotScriptConfig,
    PROVIDER_PRESETS,
)

__all__ = [
    "AIConfig",
    "CacheConfig",
    "LoggingConfig",
    "PipelineConfig",
    "SamplingConfig",
    "ShotScriptConfig",
    "PROVIDER_PRESETS",
]
