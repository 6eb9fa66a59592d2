from abc import ABC, abstractmethod
from typing import Dict, Any, List


class VisionProvider(ABC):
    """Abstract base class for multimodal (image + text) providers."""

    @abstractmethod
    async def analyze_frames(self, frames_base64: List[str], prompt: str, **kwargs) -> Dict[str, Any]:
        """Send all frames plus one prompt in a single request.

        Returns a dict with ``analysis`` (text), ``model`` and ``usage``.
        """
        pass

    @abstractmethod
    async def close(self):
        """Close the provider and cleanup resources."""
        pass
