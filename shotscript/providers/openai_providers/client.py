from typing import Any, Dict
from openai import AsyncOpenAI

from shotscript.exceptions import ConfigurationError, RemoteServiceError
from shotscript.providers.response_content import normalize_content


def build_async_client(config: Dict[str, Any]) -> AsyncOpenAI:
    """AsyncOpenAI client for any OpenAI-compatible endpoint; never retries on its own."""
    api_key = config.get("api_key")
    if not api_key:
        raise ConfigurationError("An API key is required for the AI provider")
    return AsyncOpenAI(
        api_key=api_key,
        base_url=config.get("base_url"),
        timeout=config.get("timeout", 120),
        max_retries=0,
    )


def first_message_text(response) -> str:
    """Plain text of the first choice, or RemoteServiceError when the body is unusable."""
    choices = getattr(response, "choices", None)
    if not choices:
        raise RemoteServiceError("Response contained no choices", error_code="unparseable_response")
    message = getattr(choices[0], "message", None)
    if message is None:
        raise RemoteServiceError("Response choice has no message", error_code="unparseable_response")
    return normalize_content(message.content)


def usage_dict(response):
    usage = getattr(response, "usage", None)
    return usage.model_dump() if usage is not None and hasattr(usage, "model_dump") else None
