from typing import Optional
from loguru import logger

from shotscript.cache import ContentCache
from shotscript.config.settings import ShotScriptConfig
from shotscript.exceptions import TranscriptionError
from shotscript.pipeline.acquisition import MediaAcquirer
from shotscript.pipeline.analysis import AudioTranscriber, VisualAnalyzer
from shotscript.pipeline.keyframes import FrameExtractor
from shotscript.pipeline.models import (
    AnalysisContext,
    TranscriptionOutcome,
    TranscriptionUnavailable,
)
from shotscript.pipeline.probing import MediaProber
from shotscript.pipeline.sampling import SamplingStrategy, build_sampling_strategy
from shotscript.pipeline.validation import DurationValidator
from shotscript.providers.factory import ProviderFactory


class AnalysisPipeline:
    """
    Turns a video URL into an AnalysisContext.

    Stages run strictly in order, each awaiting the previous one:

        acquire -> validate duration -> plan interval -> extract frames
        -> visual analysis -> audio transcription (best effort) -> context

    Acquisition, validation, extraction and visual analysis errors abort the
    run unchanged. A transcription failure is logged and replaced by
    ``TranscriptionUnavailable`` so the run can finish on visuals alone.

    Example Usage:
    ---------------
    >>> import asyncio
    >>> from shotscript.config import ShotScriptConfig
    >>> from shotscript.pipeline import build_pipeline
    >>>
    >>> async def main():
    >>>     pipeline = build_pipeline(ShotScriptConfig())
    >>>     try:
    >>>         context = await pipeline("https://v.douyin.com/xxxx/")
    >>>     finally:
    >>>         await pipeline.close()
    >>>
    >>> asyncio.run(main())
    """

    def __init__(
        self,
        acquirer: MediaAcquirer,
        validator: DurationValidator,
        sampling: SamplingStrategy,
        extractor: FrameExtractor,
        visual_analyzer: VisualAnalyzer,
        transcriber: AudioTranscriber,
    ):
        self.acquirer = acquirer
        self.validator = validator
        self.sampling = sampling
        self.extractor = extractor
        self.visual_analyzer = visual_analyzer
        self.transcriber = transcriber

    async def _transcribe_best_effort(self, key: str, audio_path: str, force_refresh: bool) -> TranscriptionOutcome:
        try:
            return await self.transcriber.transcribe(key, audio_path, force_refresh=force_refresh)
        except TranscriptionError as e:
            logger.warning(f"Audio transcription unavailable, continuing with visual analysis only: {e}")
            return TranscriptionUnavailable(reason=str(e))

    async def run(self, url: str, force_refresh: bool = False) -> AnalysisContext:
        logger.info(f"[1/6] Acquiring media for {url}")
        media = await self.acquirer.acquire(url, force_refresh=force_refresh)

        logger.info(f"[2/6] Validating duration ({media.metadata.duration:.1f}s)")
        self.validator.validate(media.metadata.duration)

        interval = self.sampling.interval_for(media.metadata.duration)
        logger.info(f"[3/6] Sampling one frame every {interval:g}s ({self.sampling!r})")

        logger.info("[4/6] Extracting keyframes")
        keyframes = await self.extractor.extract_frames(
            media.key, media.video_path, interval, force_refresh=force_refresh
        )

        logger.info("[5/6] Analysing visuals")
        # Analysis cached against an earlier frame set no longer describes these frames
        visual = await self.visual_analyzer.analyze(
            media.key, keyframes, media.metadata, force_refresh=force_refresh or not keyframes.from_cache
        )

        logger.info("[6/6] Transcribing audio")
        transcription = await self._transcribe_best_effort(media.key, media.audio_path, force_refresh)

        context = AnalysisContext(
            key=media.key,
            url=url,
            metadata=media.metadata,
            keyframes=keyframes,
            visual=visual,
            transcription=transcription,
        )
        logger.info(
            f"Analysis ready for {media.key}: {len(keyframes)} keyframes, "
            f"transcript {'available' if context.transcript_available else 'unavailable'}"
        )
        return context

    async def __call__(self, url: str, force_refresh: bool = False) -> AnalysisContext:
        return await self.run(url, force_refresh=force_refresh)

    async def close(self):
        await self.visual_analyzer.vision_provider.close()
        await self.transcriber.transcription_provider.close()


def build_pipeline(config: ShotScriptConfig, cache: Optional[ContentCache] = None) -> AnalysisPipeline:
    """Validate configuration once and wire every stage from it."""
    config.validate_runtime()
    pipeline_config = config.pipeline
    cache = cache or ContentCache(config.cache.root)

    return AnalysisPipeline(
        acquirer=MediaAcquirer(cache, MediaProber(), pipeline_config),
        validator=DurationValidator(pipeline_config.min_duration, pipeline_config.max_duration),
        sampling=build_sampling_strategy(config.sampling),
        extractor=FrameExtractor(cache, pipeline_config),
        visual_analyzer=VisualAnalyzer(
            cache,
            ProviderFactory.create_vision_provider(config.ai),
            max_frames=pipeline_config.max_frames,
            max_image_edge=pipeline_config.max_image_edge,
            prompts_dir=pipeline_config.prompts_dir,
        ),
        transcriber=AudioTranscriber(
            cache,
            ProviderFactory.create_transcription_provider(config.ai),
            prompts_dir=pipeline_config.prompts_dir,
        ),
    )
