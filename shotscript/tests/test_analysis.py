import asyncio
import base64
import os
from io import BytesIO

import pytest
from PIL import Image

from shotscript.cache import ArtifactCategory
from shotscript.exceptions import RemoteServiceError, TranscriptionError
from shotscript.pipeline.analysis import AudioTranscriber, VisualAnalyzer
from shotscript.pipeline.models import KeyframeSet, VideoMetadata
from shotscript.tests.fakes import FakeTranscriptionProvider, FakeVisionProvider, write_jpeg

KEY = "0123456789abcdef"
METADATA = VideoMetadata(duration=60.0, width=1080, height=1920, has_audio=True)


@pytest.fixture
def keyframes(tmp_path):
    paths = [
        write_jpeg(str(tmp_path / "frames" / f"frame_{i:04d}.jpg"), size=(1920, 1080))
        for i in range(1, 9)
    ]
    return KeyframeSet.from_paths(paths, interval=3)


def test_visual_analysis_sends_capped_frames(cache, keyframes):
    vision = FakeVisionProvider()
    analyzer = VisualAnalyzer(cache, vision, max_frames=5, max_image_edge=768)

    result = asyncio.run(analyzer.analyze(KEY, keyframes, METADATA))

    request = vision.requests[0]
    assert len(request["frames"]) == 5
    assert result.frame_count == 5
    assert result.text == vision.analysis
    assert result.model == "fake-vl"
    assert "Frame 5: 12s" in request["prompt"]
    assert "Frame 6" not in request["prompt"]

    image = Image.open(BytesIO(base64.b64decode(request["frames"][0])))
    assert max(image.size) == 768


def test_visual_analysis_is_cached(cache, keyframes):
    vision = FakeVisionProvider()
    analyzer = VisualAnalyzer(cache, vision)
    asyncio.run(analyzer.analyze(KEY, keyframes, METADATA))

    again = asyncio.run(analyzer.analyze(KEY, keyframes, METADATA))

    assert again.from_cache is True
    assert again.text == vision.analysis
    assert len(vision.requests) == 1

    asyncio.run(analyzer.analyze(KEY, keyframes, METADATA, force_refresh=True))
    assert len(vision.requests) == 2


def test_empty_visual_answer_is_an_error(cache, keyframes):
    analyzer = VisualAnalyzer(cache, FakeVisionProvider(analysis="   "))

    with pytest.raises(RemoteServiceError):
        asyncio.run(analyzer.analyze(KEY, keyframes, METADATA))
    assert cache.read_json(KEY, ArtifactCategory.VISUAL) is None


def test_prompt_override_directory(cache, keyframes, tmp_path):
    prompts_dir = tmp_path / "prompts"
    prompts_dir.mkdir()
    (prompts_dir / "shot_analysis.md").write_text("Describe $frame_count frames every ${interval}s.")
    vision = FakeVisionProvider()

    asyncio.run(VisualAnalyzer(cache, vision, max_frames=4, prompts_dir=str(prompts_dir)).analyze(
        KEY, keyframes, METADATA
    ))

    assert vision.requests[0]["prompt"] == "Describe 4 frames every 3s."


def _audio_file(cache):
    path = cache.resolve(KEY, ArtifactCategory.AUDIO)
    with open(path, "wb") as f:
        f.write(b"ID3fake-audio")
    return path


def test_transcription_success_is_cached(cache):
    provider = FakeTranscriptionProvider(text="大家好")
    transcriber = AudioTranscriber(cache, provider)
    audio_path = _audio_file(cache)

    result = asyncio.run(transcriber.transcribe(KEY, audio_path))
    again = asyncio.run(transcriber.transcribe(KEY, audio_path))

    assert result.text == "大家好"
    assert result.source_audio_path == audio_path
    assert again.from_cache is True
    assert provider.calls == [audio_path]


def test_missing_audio_raises_transcription_error(cache):
    transcriber = AudioTranscriber(cache, FakeTranscriptionProvider())

    with pytest.raises(TranscriptionError) as exc_info:
        asyncio.run(transcriber.transcribe(KEY, os.path.join(cache.root, "nope.mp3")))
    assert exc_info.value.error_code == "audio_missing"


def test_remote_failure_becomes_transcription_error(cache):
    transcriber = AudioTranscriber(cache, FakeTranscriptionProvider(fail=True))

    with pytest.raises(TranscriptionError):
        asyncio.run(transcriber.transcribe(KEY, _audio_file(cache)))
    assert cache.read_json(KEY, ArtifactCategory.ASR) is None


@pytest.mark.parametrize("content", ['{"text": "half-writ', '{"source_audio_path": "/a.mp3"}'])
def test_damaged_transcription_cache_is_a_miss(cache, content):
    provider = FakeTranscriptionProvider(text="fresh transcript")
    audio_path = _audio_file(cache)
    with open(cache.resolve(KEY, ArtifactCategory.ASR), "w", encoding="utf-8") as f:
        f.write(content)

    result = asyncio.run(AudioTranscriber(cache, provider).transcribe(KEY, audio_path))

    assert result.text == "fresh transcript"
    assert result.from_cache is False
    assert cache.read_json(KEY, ArtifactCategory.ASR)["text"] == "fresh transcript"


def test_damaged_visual_cache_is_a_miss(cache, keyframes):
    with open(cache.resolve(KEY, ArtifactCategory.VISUAL), "w", encoding="utf-8") as f:
        f.write('{"frame_count": 4}')
    vision = FakeVisionProvider()

    result = asyncio.run(VisualAnalyzer(cache, vision).analyze(KEY, keyframes, METADATA))

    assert result.from_cache is False
    assert len(vision.requests) == 1
