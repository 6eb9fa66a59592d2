import asyncio
import os
from typing import Optional
from loguru import logger

from shotscript.cache import ArtifactCategory, ContentCache
from shotscript.exceptions import RemoteServiceError, TranscriptionError
from shotscript.pipeline.models import (
    KeyframeSet,
    TranscriptionSuccess,
    VideoMetadata,
    VisualAnalysisResult,
)
from shotscript.providers.base import TranscriptionProvider, VisionProvider
from shotscript.script.prompts import load_prompt, render_prompt
from shotscript.utils.helper import encode_image_to_base64

MAX_FRAMES_PER_REQUEST = 20


def _load_cached(cache: ContentCache, key: str, category: ArtifactCategory, model):
    """Cached result for ``category``, or None when it is absent or lacks required fields."""
    payload = cache.read_json(key, category)
    if payload is None:
        return None
    try:
        return model.from_dict(payload, from_cache=True)
    except (KeyError, TypeError, ValueError) as e:
        logger.warning(f"Ignoring incomplete cached {category.value} result for {key}: {e!r}")
        return None


class VisualAnalyzer:
    """
    Shot analysis over a keyframe set: one multimodal request carrying the
    first ``max_frames`` frames and a single structured prompt.

    Frames past the cap are dropped, not resampled. The raw text answer is
    cached per key.
    """

    def __init__(
        self,
        cache: ContentCache,
        vision_provider: VisionProvider,
        max_frames: int = MAX_FRAMES_PER_REQUEST,
        max_image_edge: Optional[int] = 768,
        prompts_dir: Optional[str] = None,
    ):
        self.cache = cache
        self.vision_provider = vision_provider
        self.max_frames = max_frames
        self.max_image_edge = max_image_edge
        self.prompts_dir = prompts_dir

    def build_prompt(self, keyframes: KeyframeSet, frame_count: int, metadata: VideoMetadata) -> str:
        timestamps = "\n".join(
            f"- Frame {frame.index + 1}: {frame.timestamp:g}s" for frame in keyframes.head(frame_count)
        )
        return render_prompt(
            load_prompt("shot_analysis", self.prompts_dir),
            frame_count=frame_count,
            interval=f"{keyframes.interval:g}",
            duration=f"{metadata.duration:.1f}",
            timestamps=timestamps,
        )

    async def analyze(
        self,
        key: str,
        keyframes: KeyframeSet,
        metadata: VideoMetadata,
        force_refresh: bool = False,
    ) -> VisualAnalysisResult:
        if not force_refresh:
            cached = _load_cached(self.cache, key, ArtifactCategory.VISUAL, VisualAnalysisResult)
            if cached is not None:
                logger.info(f"Reusing cached visual analysis for {key}")
                return cached

        selected = keyframes.head(self.max_frames)
        if len(keyframes) > len(selected):
            logger.info(
                f"Sending the first {len(selected)} of {len(keyframes)} keyframes; "
                f"{len(keyframes) - len(selected)} dropped"
            )

        encoded = []
        for frame in selected:
            encoded.append(await asyncio.to_thread(encode_image_to_base64, frame.path, self.max_image_edge))

        prompt = self.build_prompt(keyframes, len(selected), metadata)
        response = await self.vision_provider.analyze_frames(encoded, prompt)
        analysis = (response.get("analysis") or "").strip()
        if not analysis:
            raise RemoteServiceError("Vision model returned an empty analysis", error_code="unparseable_response")

        result = VisualAnalysisResult(text=analysis, frame_count=len(selected), model=response.get("model"))
        self.cache.write_json(key, ArtifactCategory.VISUAL, result.to_dict())
        logger.info(f"Visual analysis complete ({len(analysis)} chars)")
        return result


class AudioTranscriber:
    """Speech-to-text for the cached audio file. Every failure surfaces as TranscriptionError."""

    def __init__(
        self,
        cache: ContentCache,
        transcription_provider: TranscriptionProvider,
        prompts_dir: Optional[str] = None,
    ):
        self.cache = cache
        self.transcription_provider = transcription_provider
        self.prompts_dir = prompts_dir

    async def transcribe(self, key: str, audio_path: str, force_refresh: bool = False) -> TranscriptionSuccess:
        if not force_refresh:
            cached = _load_cached(self.cache, key, ArtifactCategory.ASR, TranscriptionSuccess)
            if cached is not None:
                logger.info(f"Reusing cached transcription for {key}")
                return cached

        if not os.path.isfile(audio_path):
            raise TranscriptionError(f"Audio file not found: {audio_path}", error_code="audio_missing")

        try:
            text = await self.transcription_provider.transcribe_file(
                audio_path, prompt=load_prompt("transcription", self.prompts_dir)
            )
        except (RemoteServiceError, OSError) as e:
            raise TranscriptionError(f"Transcription request failed: {e}", details={"audio_path": audio_path}) from e

        result = TranscriptionSuccess(text=text, source_audio_path=audio_path)
        self.cache.write_json(key, ArtifactCategory.ASR, result.to_dict())
        logger.info(f"Transcription complete ({len(text)} chars)")
        return result
