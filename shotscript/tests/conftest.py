import pytest
from loguru import logger

from shotscript.cache import ContentCache
from shotscript.config import PipelineConfig
from shotscript.pipeline.acquisition import MediaAcquirer
from shotscript.pipeline.analysis import AudioTranscriber, VisualAnalyzer
from shotscript.pipeline.analysis_pipeline import AnalysisPipeline
from shotscript.pipeline.keyframes import FrameExtractor
from shotscript.pipeline.probing import MediaProber
from shotscript.pipeline.sampling import ProportionalSampling
from shotscript.pipeline.validation import DurationValidator
from shotscript.tests.fakes import (
    FakeCommandRunner,
    FakeProbe,
    FakeTranscriptionProvider,
    FakeVisionProvider,
)


@pytest.fixture
def cache(tmp_path):
    return ContentCache(str(tmp_path / "cache"))


@pytest.fixture
def pipeline_config():
    return PipelineConfig(ytdlp_binary="yt-dlp", ffmpeg_binary="ffmpeg")


@pytest.fixture
def runner():
    return FakeCommandRunner()


@pytest.fixture
def probe():
    return FakeProbe()


@pytest.fixture
def vision():
    return FakeVisionProvider()


@pytest.fixture
def transcription():
    return FakeTranscriptionProvider()


@pytest.fixture
def make_pipeline(cache, pipeline_config):
    """Build an AnalysisPipeline over fakes; every collaborator can be swapped per test."""

    def _make(runner=None, probe=None, vision=None, transcription=None, max_frames=20):
        runner = runner or FakeCommandRunner()
        return AnalysisPipeline(
            acquirer=MediaAcquirer(cache, MediaProber(probe or FakeProbe()), pipeline_config, runner),
            validator=DurationValidator(5, 300),
            sampling=ProportionalSampling(20, 2),
            extractor=FrameExtractor(cache, pipeline_config, runner),
            visual_analyzer=VisualAnalyzer(cache, vision or FakeVisionProvider(), max_frames=max_frames),
            transcriber=AudioTranscriber(cache, transcription or FakeTranscriptionProvider()),
        )

    return _make


@pytest.fixture
def log_records():
    """Loguru records emitted while the test runs."""
    records = []
    handler_id = logger.add(lambda message: records.append(message.record), level="DEBUG")
    yield records
    logger.remove(handler_id)
