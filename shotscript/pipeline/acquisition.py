import os
from typing import Awaitable, Callable, Optional, Sequence
from loguru import logger

from shotscript.cache import ArtifactCategory, ContentCache
from shotscript.config import PipelineConfig
from shotscript.exceptions import AcquisitionError
from shotscript.pipeline.models import MediaArtifacts, VideoMetadata
from shotscript.pipeline.probing import MediaProber
from shotscript.utils.helper import CommandResult, get_url_hash, run_command, url_host

CommandRunner = Callable[[Sequence[str]], Awaitable[CommandResult]]

_VIDEO_FORMAT = "bv*[ext=mp4]+ba[ext=m4a]/b[ext=mp4]/bv*+ba/b"


class MediaAcquirer:
    """
    Fetches the video and audio renditions of a URL into the content cache.

    A complete cache entry (video, audio and metadata) short-circuits the
    download entirely. Otherwise ``yt-dlp`` runs twice, once per rendition,
    and the fresh video is probed before returning.
    """

    def __init__(
        self,
        cache: ContentCache,
        prober: MediaProber,
        config: Optional[PipelineConfig] = None,
        command_runner: CommandRunner = run_command,
    ):
        self.cache = cache
        self.prober = prober
        self.config = config or PipelineConfig()
        self.run_command = command_runner

    def check_platform(self, url: str) -> bool:
        """Warn (never reject) when the URL's host is not a known-good platform."""
        host = url_host(url)
        supported = any(host == p or host.endswith("." + p) for p in self.config.platforms)
        if not supported:
            logger.warning(
                f"Host '{host or url}' is not in the supported platform list; attempting download anyway"
            )
        return supported

    async def acquire(self, url: str, force_refresh: bool = False) -> MediaArtifacts:
        key = get_url_hash(url)
        video_path = self.cache.resolve(key, ArtifactCategory.VIDEO)
        audio_path = self.cache.resolve(key, ArtifactCategory.AUDIO)

        if not force_refresh and self.cache.has_complete(key):
            metadata = self._cached_metadata(key)
            if metadata is not None:
                logger.info(f"Cache hit for {url} (key={key}), skipping download")
                return MediaArtifacts(
                    key=key,
                    video_path=video_path,
                    audio_path=audio_path,
                    metadata=metadata,
                    from_cache=True,
                )

        self.check_platform(url)
        logger.info(f"Downloading video for {url} (key={key})")
        await self._download_video(url, video_path)
        await self._download_audio(url, key, audio_path)

        metadata = await self.prober.probe(video_path)
        self.cache.write_json(key, ArtifactCategory.METADATA, metadata.to_dict())
        logger.info(
            f"Acquired {url}: {metadata.duration:.1f}s, {metadata.width}x{metadata.height}, "
            f"audio={'yes' if metadata.has_audio else 'no'}"
        )
        return MediaArtifacts(key=key, video_path=video_path, audio_path=audio_path, metadata=metadata)

    def _cached_metadata(self, key: str) -> Optional[VideoMetadata]:
        payload = self.cache.read_json(key, ArtifactCategory.METADATA)
        if payload is None:
            return None
        try:
            return VideoMetadata.from_dict(payload)
        except TypeError as e:
            logger.warning(f"Cached metadata for {key} is incomplete ({e}); downloading again")
            return None

    async def _download_video(self, url: str, video_path: str):
        result = await self.run_command([
            self.config.ytdlp_binary,
            "--no-playlist",
            "--no-progress",
            "--force-overwrites",
            "-f", _VIDEO_FORMAT,
            "--merge-output-format", "mp4",
            "-o", video_path,
            url,
        ])
        if not result.ok:
            raise AcquisitionError(
                f"downloader exited with status {result.returncode} for {url}: {_tail(result.stderr)}",
                details={"url": url, "returncode": result.returncode},
            )
        if not os.path.isfile(video_path):
            raise AcquisitionError(
                f"downloader reported success but no video file was written for {url}",
                details={"url": url, "expected_path": video_path},
            )

    async def _download_audio(self, url: str, key: str, audio_path: str):
        audio_dir = os.path.dirname(audio_path)
        result = await self.run_command([
            self.config.ytdlp_binary,
            "--no-playlist",
            "--no-progress",
            "--force-overwrites",
            "-x",
            "--audio-format", "mp3",
            "-o", os.path.join(audio_dir, f"{key}.%(ext)s"),
            url,
        ])
        if not result.ok:
            logger.warning(
                f"Audio download failed with status {result.returncode}: {_tail(result.stderr)}"
            )
        if not os.path.isfile(audio_path):
            self._adopt_audio_file(key, audio_path)
        if not os.path.isfile(audio_path):
            # Transcription will degrade to its placeholder; the entry stays incomplete
            logger.warning(f"No audio file available for {url}; transcription will be skipped")

    def _adopt_audio_file(self, key: str, audio_path: str):
        """Move a differently-named audio output (tool-dependent suffix) into place."""
        audio_dir = os.path.dirname(audio_path)
        candidates = sorted(
            name for name in os.listdir(audio_dir)
            if name.startswith(key) and os.path.join(audio_dir, name) != audio_path
        )
        if candidates:
            source = os.path.join(audio_dir, candidates[0])
            logger.info(f"Renaming audio output {candidates[0]} -> {os.path.basename(audio_path)}")
            os.replace(source, audio_path)


def _tail(text: str, limit: int = 500) -> str:
    text = (text or "").strip()
    return text[-limit:] if len(text) > limit else text
