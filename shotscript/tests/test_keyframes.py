import asyncio
import os

import pytest

from shotscript.exceptions import ExtractionError
from shotscript.pipeline.keyframes import FrameExtractor
from shotscript.pipeline.models import KeyframeSet
from shotscript.tests.fakes import FakeCommandRunner, write_jpeg

KEY = "0123456789abcdef"


def _extract(extractor, interval=3, force_refresh=False):
    return asyncio.run(extractor.extract_frames(KEY, "/tmp/video.mp4", interval, force_refresh=force_refresh))


def test_extracts_ordered_frames(cache, pipeline_config):
    runner = FakeCommandRunner(frame_count=12)
    keyframes = _extract(FrameExtractor(cache, pipeline_config, runner))

    assert len(keyframes) == 12
    assert [f.index for f in keyframes] == list(range(12))
    assert [f.timestamp for f in keyframes][:4] == [0, 3, 6, 9]
    assert os.path.basename(keyframes.frames[-1].path) == "frame_000012.jpg"
    assert keyframes.from_cache is False

    ffmpeg_call = runner.calls_to("ffmpeg")[0]
    assert ffmpeg_call[ffmpeg_call.index("-vf") + 1] == "fps=1/3"


def test_fractional_interval_in_filter(cache, pipeline_config):
    runner = FakeCommandRunner()
    _extract(FrameExtractor(cache, pipeline_config, runner), interval=1.5)

    ffmpeg_call = runner.calls_to("ffmpeg")[0]
    assert ffmpeg_call[ffmpeg_call.index("-vf") + 1] == "fps=1/1.5"


def test_existing_frames_are_reused(cache, pipeline_config):
    runner = FakeCommandRunner(frame_count=4)
    extractor = FrameExtractor(cache, pipeline_config, runner)
    first = _extract(extractor)

    second = _extract(extractor)

    assert second.from_cache is True
    assert second.paths == first.paths
    assert len(runner.calls_to("ffmpeg")) == 1


def test_force_refresh_discards_stale_frames(cache, pipeline_config):
    stale = write_jpeg(os.path.join(cache.keyframe_dir(KEY), "frame_0099.jpg"))
    runner = FakeCommandRunner(frame_count=2)

    keyframes = _extract(FrameExtractor(cache, pipeline_config, runner), force_refresh=True)

    assert len(keyframes) == 2
    assert not os.path.exists(stale)


def test_tool_failure_raises(cache, pipeline_config):
    extractor = FrameExtractor(cache, pipeline_config, FakeCommandRunner(fail_ffmpeg=True))

    with pytest.raises(ExtractionError) as exc_info:
        _extract(extractor)
    assert "Invalid data" in str(exc_info.value)


def test_zero_frames_raises(cache, pipeline_config):
    extractor = FrameExtractor(cache, pipeline_config, FakeCommandRunner(frame_count=0))

    with pytest.raises(ExtractionError):
        _extract(extractor)


def test_non_positive_interval_raises(cache, pipeline_config):
    with pytest.raises(ExtractionError):
        _extract(FrameExtractor(cache, pipeline_config, FakeCommandRunner()), interval=0)


def test_keyframe_set_is_stable_across_reads():
    paths = [f"/frames/frame_{i:04d}.jpg" for i in range(1, 6)]
    keyframes = KeyframeSet.from_paths(paths, interval=2)

    assert [f.path for f in keyframes] == [f.path for f in keyframes] == paths
    assert [f.path for f in keyframes.head(3)] == paths[:3]
    assert keyframes.head(50) == keyframes.frames


def test_changed_interval_re_extracts_with_matching_timestamps(cache, pipeline_config):
    runner = FakeCommandRunner(frame_count=4)
    extractor = FrameExtractor(cache, pipeline_config, runner)
    _extract(extractor, interval=3)

    runner.frame_count = 3
    keyframes = _extract(extractor, interval=5)

    assert keyframes.from_cache is False
    assert [f.timestamp for f in keyframes] == [0, 5, 10]
    assert len(runner.calls_to("ffmpeg")) == 2

    again = _extract(extractor, interval=5)
    assert again.from_cache is True
    assert [f.timestamp for f in again] == [0, 5, 10]


def test_frames_without_manifest_are_extracted_again(cache, pipeline_config):
    write_jpeg(os.path.join(cache.keyframe_dir(KEY), "frame_000001.jpg"))
    runner = FakeCommandRunner(frame_count=2)

    keyframes = _extract(FrameExtractor(cache, pipeline_config, runner))

    assert keyframes.from_cache is False
    assert len(runner.calls_to("ffmpeg")) == 1


def test_manifest_records_extraction_interval(cache, pipeline_config):
    _extract(FrameExtractor(cache, pipeline_config, FakeCommandRunner(frame_count=2)), interval=1.5)

    assert cache.read_keyframe_manifest(KEY) == {"interval": 1.5, "frame_count": 2}
