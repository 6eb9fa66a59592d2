from .models import (
    AnalysisContext,
    Keyframe,
    KeyframeSet,
    MediaArtifacts,
    TranscriptionOutcome,
    TranscriptionSuccess,
    TranscriptionUnavailable,
    VideoMetadata,
    VisualAnalysisResult,
)
from .sampling import FixedIntervalSampling, ProportionalSampling, plan_interval
from .analysis_pipeline import AnalysisPipeline, build_pipeline

__all__ = [
    "AnalysisPipeline",
    "build_pipeline",
    "plan_interval",
    "ProportionalSampling",
    "FixedIntervalSampling",
    # Models
    "AnalysisContext",
    "Keyframe",
    "KeyframeSet",
    "MediaArtifacts",
    "TranscriptionOutcome",
    "TranscriptionSuccess",
    "TranscriptionUnavailable",
    "VideoMetadata",
    "VisualAnalysisResult",
]
