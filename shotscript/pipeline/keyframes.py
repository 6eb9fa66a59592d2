import os
from typing import Optional
from loguru import logger

from shotscript.cache import ContentCache
from shotscript.config import PipelineConfig
from shotscript.exceptions import ExtractionError
from shotscript.pipeline.acquisition import CommandRunner
from shotscript.pipeline.models import KeyframeSet
from shotscript.utils.helper import run_command

FRAME_PATTERN = "frame_%06d.jpg"


class FrameExtractor:
    """
    Samples one JPEG every ``interval`` seconds with ffmpeg into the per-video
    keyframe directory of the cache.

    A non-empty keyframe directory is trusted as a complete set when its
    manifest records the interval being asked for; any other interval (or no
    manifest) is a miss and the frames are extracted again. There is no
    partial-set recovery. Frames come back as an index-stamped KeyframeSet so
    callers never depend on directory enumeration order.
    """

    def __init__(
        self,
        cache: ContentCache,
        config: Optional[PipelineConfig] = None,
        command_runner: CommandRunner = run_command,
    ):
        self.cache = cache
        self.config = config or PipelineConfig()
        self.run_command = command_runner

    async def extract_frames(
        self,
        key: str,
        video_path: str,
        interval: float,
        force_refresh: bool = False,
    ) -> KeyframeSet:
        if interval <= 0:
            raise ExtractionError(f"interval must be positive, got {interval}")

        if not force_refresh:
            cached = self.cache.list_keyframes(key)
            if cached and self._cached_interval(key) == interval:
                logger.info(f"Reusing {len(cached)} cached keyframes for {key}")
                return KeyframeSet.from_paths(cached, interval, from_cache=True)
            if cached:
                logger.info(f"Cached keyframes for {key} were not sampled every {interval:g}s; re-extracting")

        keyframes_dir = self.cache.reset_keyframe_dir(key)
        logger.info(f"Extracting keyframes every {interval}s from {os.path.basename(video_path)}")

        result = await self.run_command([
            self.config.ffmpeg_binary,
            "-hide_banner",
            "-loglevel", "error",
            "-y",
            "-i", video_path,
            "-vf", f"fps=1/{interval:g}",
            "-q:v", "2",
            os.path.join(keyframes_dir, FRAME_PATTERN),
        ])
        if not result.ok:
            raise ExtractionError(
                f"ffmpeg exited with status {result.returncode}: {result.stderr.strip()[-300:]}",
                details={"video_path": video_path, "returncode": result.returncode},
            )

        frames = self.cache.list_keyframes(key)
        if not frames:
            raise ExtractionError(
                f"ffmpeg produced no frames for {video_path}",
                details={"video_path": video_path, "keyframes_dir": keyframes_dir},
            )

        self.cache.write_keyframe_manifest(key, {"interval": interval, "frame_count": len(frames)})
        logger.info(f"FrameExtractor: extracted {len(frames)} keyframes -> {keyframes_dir}")
        return KeyframeSet.from_paths(frames, interval)

    def _cached_interval(self, key: str) -> Optional[float]:
        manifest = self.cache.read_keyframe_manifest(key)
        if not manifest:
            return None
        try:
            return float(manifest["interval"])
        except (KeyError, TypeError, ValueError):
            return None
