from abc import ABC, abstractmethod


class TranscriptionProvider(ABC):
    """Abstract base class for transcription providers."""

    @abstractmethod
    async def transcribe(self, audio_data: bytes, audio_format: str = "mp3", **kwargs) -> str:
        """Transcribe audio to plain text."""
        pass

    @abstractmethod
    async def transcribe_file(self, audio_path: str, **kwargs) -> str:
        """Transcribe audio file to plain text."""
        pass

    @abstractmethod
    async def close(self):
        """Close the provider and cleanup resources."""
        pass
