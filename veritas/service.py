"""
Сборка пайплайна верификации из настроек.

Используется и CLI, и API: один и тот же набор handlers,
разница только в источнике файла и обработке прогресса.
"""
from __future__ import annotations

from typing import Optional

from veritas.config.settings import Context, VeritasSettings
from veritas.core.base_handler import BaseHandler
from veritas.core.pipeline import ProgressCallback, run_pipeline
from veritas.features.analysis import AnalysisHandler, TranslationHandler
from veritas.features.file_io import ReadFileHandler
from veritas.features.report import ReportHandler
from veritas.features.sampling import OpenCVCaptureBackend, OpenCVResourceProvider, VideoSampler, VideoSamplingHandler
from veritas.llm.base import AnalysisClient


def build_sampler(settings: VeritasSettings) -> VideoSampler:
    return VideoSampler(
        provider=OpenCVResourceProvider(temp_dir=settings.temp_dir),
        capture_backend=OpenCVCaptureBackend(jpeg_quality=settings.sampler_jpeg_quality),
        failure_policy=settings.sampler_failure_policy,
        settle_delay_seconds=settings.sampler_settle_delay_seconds,
        metadata_timeout_seconds=settings.sampler_metadata_timeout_seconds,
    )


def build_handlers(
    settings: VeritasSettings,
    client: AnalysisClient,
    sampler: Optional[VideoSampler] = None,
) -> list[BaseHandler]:
    return [
        ReadFileHandler(max_file_size_bytes=settings.max_upload_size_bytes),
        VideoSamplingHandler(
            sampler=sampler or build_sampler(settings),
            max_frames=settings.sampler_max_frames,
            size_threshold_bytes=settings.sampling_size_threshold_bytes,
        ),
        AnalysisHandler(client),
        TranslationHandler(client),
        ReportHandler(),
    ]


async def run_verification(
    context: Context,
    settings: VeritasSettings,
    client: AnalysisClient,
    sampler: Optional[VideoSampler] = None,
    on_progress: Optional[ProgressCallback] = None,
) -> Context:
    """Прогоняет файл из context через весь пайплайн."""
    handlers = build_handlers(settings, client, sampler=sampler)
    return await run_pipeline(context, handlers, on_progress=on_progress)
