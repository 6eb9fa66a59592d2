from abc import ABC, abstractmethod
from typing import Dict, Any, List


class LLMProvider(ABC):
    """Abstract base class for text chat providers."""

    @abstractmethod
    async def chat_completion(self, messages: List[Dict], **kwargs) -> Dict[str, Any]:
        """Generate a chat completion. Returns at least ``content`` and ``model``."""
        pass

    @abstractmethod
    async def close(self):
        """Close the provider and cleanup resources."""
        pass
