import openai
from loguru import logger
from typing import Dict, Any, List

from shotscript.exceptions import RemoteServiceError
from shotscript.providers.base import VisionProvider
from shotscript.providers.openai_providers.client import build_async_client, first_message_text, usage_dict
from shotscript.utils.error_handler import convert_exceptions


class OpenAIVisionProvider(VisionProvider):
    """Multi-image analysis through an OpenAI-compatible vision model."""

    def __init__(self, config: Dict[str, Any]):
        self.config = config
        self.client = build_async_client(config)

    @convert_exceptions({openai.APIError: RemoteServiceError})
    async def analyze_frames(self, frames_base64: List[str], prompt: str, **kwargs) -> Dict[str, Any]:
        model = kwargs.get("model") or self.config.get("vision_model")

        content = [{"type": "text", "text": prompt}]
        for frame in frames_base64:
            content.append({
                "type": "image_url",
                "image_url": {"url": f"data:image/jpeg;base64,{frame}"},
            })

        logger.info(f"Sending {len(frames_base64)} frames to {model}")
        response = await self.client.chat.completions.create(
            model=model,
            messages=[{"role": "user", "content": content}],
            max_tokens=kwargs.get("max_tokens", self.config.get("max_tokens", 4000)),
            temperature=kwargs.get("temperature", self.config.get("temperature", 0.7)),
        )
        return {
            "analysis": first_message_text(response),
            "model": getattr(response, "model", model),
            "usage": usage_dict(response),
        }

    async def close(self):
        if self.client:
            logger.info("Closing OpenAI-compatible vision client")
            await self.client.close()
