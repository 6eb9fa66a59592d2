from .llm_provider import OpenAILLMProvider
from .transcription_provider import OpenAITranscriptionProvider
from .vision_provider import OpenAIVisionProvider

__all__ = [
    'OpenAILLMProvider',
    'OpenAIVisionProvider',
    'OpenAITranscriptionProvider',
]
