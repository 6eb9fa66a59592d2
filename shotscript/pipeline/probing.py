import asyncio
import ffmpeg
from typing import Any, Callable, Dict, Optional
from loguru import logger

from shotscript.exceptions import ProbeError
from shotscript.pipeline.models import VideoMetadata
from shotscript.utils.helper import parse_frame_rate


def _to_int(value: Any) -> Optional[int]:
    try:
        return int(value) if value not in (None, "", "N/A") else None
    except (TypeError, ValueError):
        return None


def _first_stream(streams, codec_type: str) -> Optional[Dict[str, Any]]:
    return next((s for s in streams if s.get("codec_type") == codec_type), None)


def parse_probe_output(probe: Dict[str, Any]) -> VideoMetadata:
    """
    Build VideoMetadata from an ffprobe JSON report.

    Missing streams only blank out the matching fields; a missing ``format``
    record or an unreadable duration is fatal because nothing downstream can
    plan without a duration.
    """
    fmt = probe.get("format")
    if not fmt:
        raise ProbeError("prober output has no format record")
    try:
        duration = float(fmt["duration"])
    except (KeyError, TypeError, ValueError):
        raise ProbeError(f"cannot read duration from format record: {fmt.get('duration')!r}")

    streams = probe.get("streams") or []
    video = _first_stream(streams, "video") or {}
    audio = _first_stream(streams, "audio")

    fps = parse_frame_rate(video.get("avg_frame_rate")) or parse_frame_rate(video.get("r_frame_rate"))

    return VideoMetadata(
        duration=duration,
        width=_to_int(video.get("width")),
        height=_to_int(video.get("height")),
        fps=fps,
        has_audio=audio is not None,
        codec=video.get("codec_name"),
        audio_codec=audio.get("codec_name") if audio else None,
        size=_to_int(fmt.get("size")),
        bitrate=_to_int(fmt.get("bit_rate")),
    )


class MediaProber:
    """Runs ffprobe (through ffmpeg-python) against a local media file."""

    def __init__(self, probe_fn: Callable[[str], Dict[str, Any]] = ffmpeg.probe):
        self.probe_fn = probe_fn

    async def probe(self, video_path: str) -> VideoMetadata:
        try:
            report = await asyncio.to_thread(self.probe_fn, video_path)
        except ffmpeg.Error as e:
            stderr = e.stderr.decode(errors="replace") if isinstance(e.stderr, bytes) else str(e.stderr)
            raise ProbeError(f"ffprobe failed for {video_path}: {stderr.strip()[-300:]}")
        except FileNotFoundError as e:
            raise ProbeError(f"ffprobe is not available: {e}")
        metadata = parse_probe_output(report)
        logger.info(f"Video duration: {metadata.duration:.2f} seconds ({metadata.duration / 60:.2f} minutes)")
        return metadata
