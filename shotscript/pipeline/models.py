"""
Data models for the video analysis pipeline.
"""

from dataclasses import dataclass, field, asdict
from typing import Any, Dict, Iterator, List, Optional, Union


@dataclass(frozen=True)
class VideoMetadata:
    """Probed properties of a downloaded video."""
    duration: float
    width: Optional[int] = None
    height: Optional[int] = None
    fps: Optional[float] = None
    has_audio: bool = False
    codec: Optional[str] = None
    audio_codec: Optional[str] = None
    size: Optional[int] = None
    bitrate: Optional[int] = None

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "VideoMetadata":
        known = {k: v for k, v in data.items() if k in cls.__dataclass_fields__}
        return cls(**known)


@dataclass
class MediaArtifacts:
    """Video and audio files for one cache key, with their metadata."""
    key: str
    video_path: str
    audio_path: str
    metadata: VideoMetadata
    from_cache: bool = False


@dataclass(frozen=True)
class Keyframe:
    """One extracted still; timestamp is index * interval seconds from start."""
    index: int
    timestamp: float
    path: str


@dataclass
class KeyframeSet:
    """Time-ascending, index-stamped keyframes for one video."""
    interval: float
    frames: List[Keyframe] = field(default_factory=list)
    from_cache: bool = False

    @classmethod
    def from_paths(cls, paths: List[str], interval: float, from_cache: bool = False) -> "KeyframeSet":
        """Stamp already-ordered paths with their positional index and timestamp."""
        frames = [
            Keyframe(index=i, timestamp=i * interval, path=path)
            for i, path in enumerate(paths)
        ]
        return cls(interval=interval, frames=frames, from_cache=from_cache)

    @property
    def paths(self) -> List[str]:
        return [frame.path for frame in self.frames]

    def head(self, limit: int) -> List[Keyframe]:
        return self.frames[:limit]

    def __iter__(self) -> Iterator[Keyframe]:
        return iter(self.frames)

    def __len__(self) -> int:
        return len(self.frames)


@dataclass
class VisualAnalysisResult:
    """Shot analysis text produced from a keyframe set."""
    text: str
    frame_count: int
    model: Optional[str] = None
    from_cache: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {"text": self.text, "frame_count": self.frame_count, "model": self.model}

    @classmethod
    def from_dict(cls, data: Dict[str, Any], from_cache: bool = False) -> "VisualAnalysisResult":
        return cls(
            text=data["text"],
            frame_count=int(data.get("frame_count", 0)),
            model=data.get("model"),
            from_cache=from_cache,
        )


@dataclass(frozen=True)
class TranscriptionSuccess:
    text: str
    source_audio_path: str
    from_cache: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {"text": self.text, "source_audio_path": self.source_audio_path}

    @classmethod
    def from_dict(cls, data: Dict[str, Any], from_cache: bool = False) -> "TranscriptionSuccess":
        return cls(text=data["text"], source_audio_path=data.get("source_audio_path", ""), from_cache=from_cache)


@dataclass(frozen=True)
class TranscriptionUnavailable:
    reason: str

    PLACEHOLDER = "[Audio transcription unavailable - analysis is based on visual content only]"

    @property
    def placeholder(self) -> str:
        return self.PLACEHOLDER


TranscriptionOutcome = Union[TranscriptionSuccess, TranscriptionUnavailable]


@dataclass
class AnalysisContext:
    """Everything script composition needs from one pipeline run."""
    key: str
    url: str
    metadata: VideoMetadata
    keyframes: KeyframeSet
    visual: VisualAnalysisResult
    transcription: TranscriptionOutcome

    @property
    def transcript_available(self) -> bool:
        return isinstance(self.transcription, TranscriptionSuccess)

    @property
    def transcript_text(self) -> str:
        if isinstance(self.transcription, TranscriptionSuccess):
            return self.transcription.text
        return self.transcription.placeholder
