from typing import Any, Dict, Type
from loguru import logger

from .base import LLMProvider, TranscriptionProvider, VisionProvider
from .openai_providers import OpenAILLMProvider, OpenAITranscriptionProvider, OpenAIVisionProvider
from ..config.settings import AIConfig
from ..exceptions import ConfigurationError


class ProviderFactory:
    """Factory class for creating provider instances from an AIConfig."""

    # Qwen (DashScope compatible mode) and Zhipu GLM both speak the OpenAI wire format
    _llm_providers: Dict[str, Type[LLMProvider]] = {
        'qwen': OpenAILLMProvider,
        'glm': OpenAILLMProvider,
        'openai': OpenAILLMProvider,
    }

    _vision_providers: Dict[str, Type[VisionProvider]] = {
        'qwen': OpenAIVisionProvider,
        'glm': OpenAIVisionProvider,
        'openai': OpenAIVisionProvider,
    }

    _transcription_providers: Dict[str, Type[TranscriptionProvider]] = {
        'qwen': OpenAITranscriptionProvider,
        'glm': OpenAITranscriptionProvider,
        'openai': OpenAITranscriptionProvider,
    }

    @staticmethod
    def _provider_config(config: AIConfig) -> Dict[str, Any]:
        data = config.model_dump()
        data["provider"] = config.provider.lower()
        return data

    @classmethod
    def _create(cls, registry: Dict[str, Type], kind: str, config: AIConfig):
        provider_name = config.provider.lower()
        if provider_name not in registry:
            raise ConfigurationError(
                f"Unknown {kind} provider: {provider_name}. "
                f"Supported providers: {list(registry.keys())}"
            )
        logger.info(f"Creating {kind} provider: {provider_name}")
        return registry[provider_name](cls._provider_config(config))

    @classmethod
    def create_llm_provider(cls, config: AIConfig) -> LLMProvider:
        return cls._create(cls._llm_providers, "LLM", config)

    @classmethod
    def create_vision_provider(cls, config: AIConfig) -> VisionProvider:
        return cls._create(cls._vision_providers, "vision", config)

    @classmethod
    def create_transcription_provider(cls, config: AIConfig) -> TranscriptionProvider:
        return cls._create(cls._transcription_providers, "transcription", config)


provider_factory = ProviderFactory()
