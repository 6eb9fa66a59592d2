"""
shotscript: short-video URL to shot-by-shot breakdown script.
"""

from .config import ShotScriptConfig
from .exceptions import (
    AcquisitionError,
    ConfigurationError,
    ExtractionError,
    ProbeError,
    RemoteServiceError,
    ShotScriptException,
    TranscriptionError,
    ValidationError,
)

__version__ = "1.0.0"

__all__ = [
    "ShotScriptConfig",
    "ShotScriptException",
    "AcquisitionError",
    "ConfigurationError",
    "ExtractionError",
    "ProbeError",
    "RemoteServiceError",
    "TranscriptionError",
    "ValidationError",
]
