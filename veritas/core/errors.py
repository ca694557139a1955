"""
Errors - иерархия исключений сервиса.

Все ошибки наследуются от VeritasError, чтобы API/CLI могли
отличать ожидаемые отказы от программных ошибок.
"""
from __future__ import annotations


class VeritasError(Exception):
    """Base error for the verification service."""


class ConfigurationError(VeritasError):
    """Required configuration is missing or invalid."""


class UnsupportedFileError(VeritasError, ValueError):
    """The uploaded file cannot be analyzed (type or size)."""


# === Sampling ===

class SamplingError(VeritasError):
    """Base error for the video sampler."""


class VideoLoadError(SamplingError):
    """Video metadata never became available (decode failure, corrupt container)."""


class VideoProcessingError(SamplingError):
    """Seek, decode or draw failed while frames were being captured."""

    def __init__(self, message: str, frame_index: int | None = None, timestamp: float | None = None) -> None:
        super().__init__(message)
        self.frame_index = frame_index
        self.timestamp = timestamp


class CaptureUnavailableError(SamplingError):
    """The platform cannot provide a capture surface for frames."""


class SamplingCancelled(SamplingError):
    """Sampling was stopped through its cancellation token."""


# === Remote model ===

class AnalysisError(VeritasError):
    """The analysis model did not return a valid verdict."""


class TranslationError(VeritasError):
    """The translation model did not return a valid translation."""
