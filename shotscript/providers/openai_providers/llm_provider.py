import openai
from loguru import logger
from typing import Dict, Any, List

from shotscript.exceptions import RemoteServiceError
from shotscript.providers.base import LLMProvider
from shotscript.providers.openai_providers.client import build_async_client, first_message_text, usage_dict
from shotscript.utils.error_handler import convert_exceptions


class OpenAILLMProvider(LLMProvider):
    """Chat completions against an OpenAI-compatible endpoint."""

    def __init__(self, config: Dict[str, Any]):
        self.config = config
        self.client = build_async_client(config)

    @convert_exceptions({openai.APIError: RemoteServiceError})
    async def chat_completion(self, messages: List[Dict], **kwargs) -> Dict[str, Any]:
        model = kwargs.pop("model", None) or self.config.get("text_model")
        temperature = kwargs.pop("temperature", self.config.get("temperature", 0.7))
        max_tokens = kwargs.pop("max_tokens", self.config.get("max_tokens", 4000))

        response = await self.client.chat.completions.create(
            model=model,
            messages=messages,
            temperature=temperature,
            max_tokens=max_tokens,
            **kwargs
        )
        content = first_message_text(response)
        logger.debug(f"Chat completion from {response.model}: {len(content)} chars")
        return {
            "content": content,
            "usage": usage_dict(response),
            "model": getattr(response, "model", model),
            "finish_reason": response.choices[0].finish_reason,
        }

    async def close(self):
        """Close the LLM client and cleanup resources."""
        if self.client:
            logger.info("Closing OpenAI-compatible LLM client")
            await self.client.close()
