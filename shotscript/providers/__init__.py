from .base import LLMProvider, TranscriptionProvider, VisionProvider
from .factory import ProviderFactory, provider_factory
from .response_content import normalize_content

__all__ = [
    "LLMProvider",
    "VisionProvider",
    "TranscriptionProvider",
    "ProviderFactory",
    "provider_factory",
    "normalize_content",
]
