import asyncio
import os

import pytest

from shotscript.cache import ArtifactCategory
from shotscript.exceptions import AcquisitionError, ProbeError
from shotscript.pipeline.acquisition import MediaAcquirer
from shotscript.pipeline.probing import MediaProber
from shotscript.tests.fakes import VIDEO_URL, FakeCommandRunner, FakeProbe, probe_report
from shotscript.utils.helper import get_url_hash


def _acquire(acquirer, url=VIDEO_URL, force_refresh=False):
    return asyncio.run(acquirer.acquire(url, force_refresh=force_refresh))


def test_fresh_download_populates_complete_entry(cache, pipeline_config, runner, probe):
    acquirer = MediaAcquirer(cache, MediaProber(probe), pipeline_config, runner)

    media = _acquire(acquirer)

    key = get_url_hash(VIDEO_URL)
    assert media.key == key
    assert media.from_cache is False
    assert os.path.isfile(media.video_path)
    assert os.path.isfile(media.audio_path)
    assert media.metadata.duration == 60.0
    assert cache.has_complete(key)
    assert cache.read_json(key, ArtifactCategory.METADATA)["duration"] == 60.0
    assert len(runner.calls_to("yt-dlp")) == 2
    assert probe.paths == [media.video_path]


def test_complete_entry_skips_download(cache, pipeline_config, runner, probe):
    acquirer = MediaAcquirer(cache, MediaProber(probe), pipeline_config, runner)
    _acquire(acquirer)
    runner.calls.clear()

    media = _acquire(acquirer)

    assert media.from_cache is True
    assert media.metadata.duration == 60.0
    assert runner.calls == []
    assert len(probe.paths) == 1


def test_force_refresh_downloads_again(cache, pipeline_config, runner, probe):
    acquirer = MediaAcquirer(cache, MediaProber(probe), pipeline_config, runner)
    _acquire(acquirer)

    media = _acquire(acquirer, force_refresh=True)

    assert media.from_cache is False
    assert len(runner.calls_to("yt-dlp")) == 4


def test_audio_with_other_extension_is_renamed(cache, pipeline_config, probe):
    runner = FakeCommandRunner(audio_ext="m4a")
    acquirer = MediaAcquirer(cache, MediaProber(probe), pipeline_config, runner)

    media = _acquire(acquirer)

    assert media.audio_path.endswith(".mp3")
    assert os.path.isfile(media.audio_path)
    assert not os.path.exists(media.audio_path[:-len(".mp3")] + ".m4a")


def test_video_download_failure_raises(cache, pipeline_config, probe):
    acquirer = MediaAcquirer(cache, MediaProber(probe), pipeline_config, FakeCommandRunner(fail_video=True))

    with pytest.raises(AcquisitionError) as exc_info:
        _acquire(acquirer)

    assert str(exc_info.value).startswith("Acquisition failed")
    assert "Unsupported URL" in str(exc_info.value)
    assert exc_info.value.details["returncode"] == 1
    assert not cache.has_complete(get_url_hash(VIDEO_URL))


def test_success_without_output_file_raises(cache, pipeline_config, probe):
    acquirer = MediaAcquirer(cache, MediaProber(probe), pipeline_config, FakeCommandRunner(write_video=False))

    with pytest.raises(AcquisitionError):
        _acquire(acquirer)


def test_audio_failure_leaves_entry_incomplete(cache, pipeline_config, probe):
    runner = FakeCommandRunner(fail_audio=True)
    acquirer = MediaAcquirer(cache, MediaProber(probe), pipeline_config, runner)

    media = _acquire(acquirer)

    assert os.path.isfile(media.video_path)
    assert not os.path.exists(media.audio_path)
    assert not cache.has_complete(media.key)

    # The next run retries the download instead of trusting the partial entry
    _acquire(acquirer)
    assert len(runner.calls_to("yt-dlp")) == 4


def test_probe_failure_propagates(cache, pipeline_config, runner):
    acquirer = MediaAcquirer(
        cache, MediaProber(FakeProbe({"streams": []})), pipeline_config, runner
    )
    with pytest.raises(ProbeError):
        _acquire(acquirer)


def test_unknown_platform_is_attempted(cache, pipeline_config, runner, probe):
    acquirer = MediaAcquirer(cache, MediaProber(probe), pipeline_config, runner)

    assert acquirer.check_platform("https://www.douyin.com/video/1") is True
    assert acquirer.check_platform("https://v.douyin.com/abc/") is True
    assert acquirer.check_platform("https://example.org/clip.mp4") is False

    media = _acquire(acquirer, url="https://example.org/clip.mp4")
    assert media.metadata.duration == 60.0


def test_download_command_line(cache, pipeline_config, runner, probe):
    acquirer = MediaAcquirer(cache, MediaProber(probe), pipeline_config, runner)
    media = _acquire(acquirer)

    video_call, audio_call = runner.calls_to("yt-dlp")
    assert video_call[-1] == VIDEO_URL
    assert "--no-playlist" in video_call
    assert video_call[video_call.index("-o") + 1] == media.video_path
    assert "-x" in audio_call
    assert audio_call[audio_call.index("--audio-format") + 1] == "mp3"


def test_cached_metadata_is_read_back(cache, pipeline_config, runner):
    acquirer = MediaAcquirer(cache, MediaProber(FakeProbe(probe_report(duration=33.3))), pipeline_config, runner)
    _acquire(acquirer)

    fresh = MediaAcquirer(cache, MediaProber(FakeProbe()), pipeline_config, runner)
    media = _acquire(fresh)
    assert media.from_cache is True
    assert media.metadata.duration == 33.3
    assert media.metadata.width == 1080


@pytest.mark.parametrize("content", ['{"duration": 6', '{"width": 1080}'])
def test_damaged_metadata_downloads_again(cache, pipeline_config, runner, probe, content):
    acquirer = MediaAcquirer(cache, MediaProber(probe), pipeline_config, runner)
    media = _acquire(acquirer)
    with open(cache.resolve(media.key, ArtifactCategory.METADATA), "w", encoding="utf-8") as f:
        f.write(content)

    media = _acquire(acquirer)

    assert media.from_cache is False
    assert media.metadata.duration == 60.0
    assert len(runner.calls_to("yt-dlp")) == 4
