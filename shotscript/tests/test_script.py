import asyncio
import os

import pytest

from shotscript.pipeline.models import (
    AnalysisContext,
    KeyframeSet,
    TranscriptionSuccess,
    TranscriptionUnavailable,
    VideoMetadata,
    VisualAnalysisResult,
)
from shotscript.script import MarkdownWriter, ScriptComposer, load_prompt, render_prompt
from shotscript.script.composer import transcript_for_prompt
from shotscript.script.prompts import TRANSCRIPT_MISSING_NOTE
from shotscript.tests.fakes import FakeLLMProvider


def _context(transcription):
    return AnalysisContext(
        key="0123456789abcdef",
        url="https://www.douyin.com/video/1",
        metadata=VideoMetadata(duration=60.0, width=1080, height=1920, has_audio=True),
        keyframes=KeyframeSet.from_paths([f"/f/frame_{i:04d}.jpg" for i in range(1, 21)], interval=3),
        visual=VisualAnalysisResult(text="Shot 1: unboxing close-up", frame_count=20, model="vl"),
        transcription=transcription,
    )


@pytest.fixture
def with_transcript():
    return _context(TranscriptionSuccess(text="Let's unbox it together.", source_audio_path="/a.mp3"))


@pytest.fixture
def without_transcript():
    return _context(TranscriptionUnavailable(reason="HTTP 500"))


def test_transcript_for_prompt(with_transcript, without_transcript):
    assert transcript_for_prompt(with_transcript) == ("Let's unbox it together.", "")
    assert transcript_for_prompt(without_transcript) == (
        TranscriptionUnavailable.PLACEHOLDER, TRANSCRIPT_MISSING_NOTE
    )


def test_breakdown_prompt_carries_context(with_transcript):
    prompt = ScriptComposer(FakeLLMProvider()).breakdown_prompt(with_transcript)

    assert "Shot 1: unboxing close-up" in prompt
    assert "Let's unbox it together." in prompt
    assert "1080x1920" in prompt
    assert TRANSCRIPT_MISSING_NOTE not in prompt


def test_breakdown_prompt_flags_missing_transcript(without_transcript):
    prompt = ScriptComposer(FakeLLMProvider()).breakdown_prompt(without_transcript)

    assert TranscriptionUnavailable.PLACEHOLDER in prompt
    assert TRANSCRIPT_MISSING_NOTE in prompt


def test_compose_breakdown_and_rewrite(with_transcript):
    llm = FakeLLMProvider(replies=["breakdown table", "rewritten script"])
    composer = ScriptComposer(llm)

    breakdown = asyncio.run(composer.compose_breakdown(with_transcript))
    rewrite = asyncio.run(composer.compose_rewrite(with_transcript, breakdown))

    assert (breakdown, rewrite) == ("breakdown table", "rewritten script")
    assert "breakdown table" in llm.messages[1][0]["content"]


def test_load_prompt_unknown_name():
    with pytest.raises(KeyError):
        load_prompt("does-not-exist")


def test_render_prompt_leaves_unknown_placeholders():
    assert render_prompt("$a and $b", a=1) == "1 and $b"


def test_writer_outputs_breakdown_and_rewrite(tmp_path, without_transcript):
    writer = MarkdownWriter(str(tmp_path / "out"))

    path = writer.write(without_transcript, "| 1 | 0s | close-up |", "New script")

    breakdown_path = os.path.join(str(tmp_path / "out"), "0123456789abcdef-breakdown.md")
    assert path.endswith("0123456789abcdef-rewrite.md")
    with open(breakdown_path, encoding="utf-8") as f:
        text = f.read()
    assert text.startswith("# Shot Breakdown")
    assert "- Source: https://www.douyin.com/video/1" in text
    assert "- Transcript: unavailable" in text
    assert "---\n\n| 1 | 0s | close-up |" in text


def test_writer_breakdown_only(tmp_path, with_transcript):
    path = MarkdownWriter(str(tmp_path)).write(with_transcript, "table")

    assert path.endswith("-breakdown.md")
    assert not os.path.exists(os.path.join(str(tmp_path), "0123456789abcdef-rewrite.md"))
