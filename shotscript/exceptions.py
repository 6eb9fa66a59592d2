from typing import Dict, Optional


class ShotScriptException(Exception):
    """Base exception for the shotscript pipeline."""

    def __init__(self, message: str, error_code: str = None, details: Dict = None):
        super().__init__(message)
        self.error_code = error_code
        self.details = details or {}


class ConfigurationError(ShotScriptException):
    """Raised when configuration is invalid or incomplete."""
    pass


class AcquisitionError(ShotScriptException):
    """Raised when the downloader fails or produces no output."""

    def __init__(self, message: str, error_code: str = "acquisition_failed", details: Dict = None):
        super().__init__(f"Acquisition failed: {message}", error_code, details)


class ProbeError(ShotScriptException):
    """Raised when media metadata (duration) cannot be determined."""

    def __init__(self, message: str, error_code: str = "probe_failed", details: Dict = None):
        super().__init__(f"Probe failed: {message}", error_code, details)


class ValidationError(ShotScriptException):
    """Raised when the input video is rejected (e.g. too short)."""
    pass


class ExtractionError(ShotScriptException):
    """Raised when keyframe extraction fails or yields no frames."""

    def __init__(self, message: str, error_code: str = "extraction_failed", details: Dict = None):
        super().__init__(f"Frame extraction failed: {message}", error_code, details)


class TranscriptionError(ShotScriptException):
    """Raised when audio transcription fails. Never fatal for a run."""
    pass


class RemoteServiceError(ShotScriptException):
    """Raised when the AI service returns a non-2xx status or an unusable body."""

    def __init__(
        self,
        message: str,
        error_code: str = "remote_service_error",
        details: Dict = None,
        status_code: Optional[int] = None,
    ):
        details = dict(details or {})
        if status_code is not None:
            details.setdefault("status_code", status_code)
        super().__init__(message, error_code, details)
        self.status_code = details.get("status_code")
