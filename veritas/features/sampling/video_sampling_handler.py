"""
VideoSamplingHandler - семплирует большие видео в EvidenceBundle.

Видео больше порога (10MB по умолчанию) сжимаются до max_frames кадров,
остальные файлы уходят в модель как есть.
"""
from __future__ import annotations

from pathlib import Path
from typing import Any, ClassVar, FrozenSet

from veritas.core.base_handler import ExtractorHandler
from veritas.features.sampling.video_sampler import DEFAULT_MAX_FRAMES, VideoSampler
from veritas.models.keys import Key
from veritas.models.media import FileType, MediaFile


DEFAULT_SIZE_THRESHOLD_BYTES: int = 10 * 1024 * 1024


class VideoSamplingHandler(ExtractorHandler):
    """Provides:
    - EVIDENCE_BUNDLE: кадры + метаданные + транскрипт
    - VIDEO_METADATA
    """

    requires: ClassVar[FrozenSet[Key]] = frozenset({Key.MEDIA_FILE})
    provides: ClassVar[FrozenSet[Key]] = frozenset({Key.EVIDENCE_BUNDLE, Key.VIDEO_METADATA})
    progress_message: ClassVar[str | None] = "preprocessing_video"

    def __init__(
        self,
        sampler: VideoSampler | None = None,
        max_frames: int = DEFAULT_MAX_FRAMES,
        size_threshold_bytes: int = DEFAULT_SIZE_THRESHOLD_BYTES,
    ) -> None:
        self.sampler = sampler or VideoSampler()
        self.max_frames = max_frames
        self.size_threshold_bytes = size_threshold_bytes

    def should_run(self, context: dict[str, Any]) -> bool:
        media: MediaFile | None = context.get("media_file")
        if media is None:
            return True  # пусть runner сообщит о missing requires
        return media.file_type is FileType.VIDEO and media.size_bytes > self.size_threshold_bytes

    async def handle(self, context: dict[str, Any]) -> dict[str, Any]:
        print("[2] VideoSamplingHandler")

        media: MediaFile = context["media_file"]
        bundle = await self.sampler.sample(
            media.path,
            max_frames=self.max_frames,
            cancel_token=context.get("cancel_token"),
            suffix=Path(media.path).suffix or ".mp4",
            source_name=media.name,
        )

        context["evidence_bundle"] = bundle
        context["video_metadata"] = bundle.metadata
        context.setdefault("warnings", []).extend(bundle.warnings)

        print(f"✓ Evidence bundle: {bundle.frame_count} frames from {media.name}")

        return context
