import os
import base64
import aiofiles
import openai
from loguru import logger
from typing import Dict, Any

from shotscript.exceptions import RemoteServiceError
from shotscript.providers.base import TranscriptionProvider
from shotscript.providers.openai_providers.client import build_async_client, first_message_text
from shotscript.utils.error_handler import convert_exceptions

DEFAULT_INSTRUCTION = (
    "Transcribe the speech in this audio verbatim. "
    "Return only the spoken words, without commentary or timestamps."
)


class OpenAITranscriptionProvider(TranscriptionProvider):
    """
    Transcription through a chat-style audio model: the audio travels inline
    (base64) next to a verbatim-transcription instruction.
    """

    def __init__(self, config: Dict[str, Any]):
        self.config = config
        self.client = build_async_client(config)

    def _audio_payload(self, audio_data: bytes, audio_format: str) -> Dict[str, Any]:
        encoded = base64.b64encode(audio_data).decode("utf-8")
        # DashScope and Zhipu expect a data URI; OpenAI expects bare base64
        if self.config.get("provider") != "openai":
            encoded = f"data:audio/{audio_format};base64,{encoded}"
        return {"data": encoded, "format": audio_format}

    @convert_exceptions({openai.APIError: RemoteServiceError})
    async def transcribe(self, audio_data: bytes, audio_format: str = "mp3", **kwargs) -> str:
        model = kwargs.get("model") or self.config.get("audio_model")
        instruction = kwargs.get("prompt") or DEFAULT_INSTRUCTION

        response = await self.client.chat.completions.create(
            model=model,
            messages=[{
                "role": "user",
                "content": [
                    {"type": "input_audio", "input_audio": self._audio_payload(audio_data, audio_format)},
                    {"type": "text", "text": instruction},
                ],
            }],
        )
        text = first_message_text(response)
        logger.info(f"Transcription from {model}: {len(text)} chars")
        return text

    async def transcribe_file(self, audio_path: str, **kwargs) -> str:
        async with aiofiles.open(audio_path, "rb") as f:
            audio_data = await f.read()
        audio_format = os.path.splitext(audio_path)[1].lstrip(".").lower() or "mp3"
        return await self.transcribe(audio_data, audio_format=audio_format, **kwargs)

    async def close(self):
        if self.client:
            logger.info("Closing OpenAI-compatible transcription client")
            await self.client.close()
