from .llm_provider import LLMProvider
from .transcription_provider import TranscriptionProvider
from .vision_provider import VisionProvider

__all__ = [
    'LLMProvider',
    'VisionProvider',
    'TranscriptionProvider',
]
