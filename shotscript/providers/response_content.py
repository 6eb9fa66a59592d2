"""
Shapes a model response ``content`` field can take, and the single
function that turns any of them into plain text.

Compatible-mode endpoints disagree on how they return text: a bare string,
a list of segments (``{"type": "text", "text": ...}`` or plain strings), or
an object carrying ``text``.
"""

from dataclasses import dataclass
from typing import Any, Dict, List, Union

from shotscript.exceptions import RemoteServiceError


@dataclass(frozen=True)
class PlainText:
    text: str


@dataclass(frozen=True)
class SegmentList:
    segments: List[Any]


@dataclass(frozen=True)
class TextObject:
    payload: Dict[str, Any]


ResponseContent = Union[PlainText, SegmentList, TextObject]

_TEXT_KEYS = ("text", "transcript", "content")


def classify_content(raw: Any) -> ResponseContent:
    if isinstance(raw, str):
        return PlainText(raw)
    if isinstance(raw, (list, tuple)):
        return SegmentList(list(raw))
    if isinstance(raw, dict):
        return TextObject(raw)
    # SDK objects (pydantic models) expose their fields through model_dump
    if hasattr(raw, "model_dump"):
        return classify_content(raw.model_dump())
    raise RemoteServiceError(
        f"Unrecognised response content of type {type(raw).__name__}",
        error_code="unparseable_response",
    )


def _object_text(payload: Dict[str, Any]) -> str:
    for key in _TEXT_KEYS:
        value = payload.get(key)
        if isinstance(value, str):
            return value
        if isinstance(value, (list, dict)):
            return content_to_text(classify_content(value))
    return ""


def content_to_text(content: ResponseContent) -> str:
    if isinstance(content, PlainText):
        return content.text.strip()
    if isinstance(content, SegmentList):
        parts = []
        for segment in content.segments:
            if isinstance(segment, str):
                parts.append(segment)
            elif isinstance(segment, dict):
                parts.append(_object_text(segment))
        return "".join(parts).strip()
    if isinstance(content, TextObject):
        return _object_text(content.payload).strip()
    raise RemoteServiceError(f"Unknown response content variant: {content!r}", error_code="unparseable_response")


def normalize_content(raw: Any) -> str:
    """Plain text for any supported content shape; empty text is an error."""
    if raw is None:
        raise RemoteServiceError("Response message has no content", error_code="unparseable_response")
    text = content_to_text(classify_content(raw))
    if not text:
        raise RemoteServiceError("Response content contained no text", error_code="unparseable_response")
    return text
