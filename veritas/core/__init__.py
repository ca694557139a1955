"""Core package for the verification service.

Экспортирует:
- BaseHandler, ExtractorHandler, AnalyzerHandler: базовые классы handlers
- run_pipeline: линейный асинхронный пайплайн
- CancellationToken: сигнал отмены
- ошибки сервиса
"""

from veritas.core.base_handler import AnalyzerHandler, BaseHandler, ExtractorHandler
from veritas.core.cancellation import CancellationToken
from veritas.core.errors import (
    AnalysisError,
    CaptureUnavailableError,
    ConfigurationError,
    SamplingCancelled,
    SamplingError,
    TranslationError,
    UnsupportedFileError,
    VeritasError,
    VideoLoadError,
    VideoProcessingError,
)
from veritas.core.pipeline import run_pipeline

__all__ = [
    # Handlers
    "BaseHandler",
    "ExtractorHandler",
    "AnalyzerHandler",
    # Pipeline
    "run_pipeline",
    "CancellationToken",
    # Errors
    "VeritasError",
    "ConfigurationError",
    "UnsupportedFileError",
    "SamplingError",
    "VideoLoadError",
    "VideoProcessingError",
    "CaptureUnavailableError",
    "SamplingCancelled",
    "AnalysisError",
    "TranslationError",
]
