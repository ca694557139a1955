"""
Video Models - метаданные, кадры и evidence bundle.

EvidenceBundle = кадры + метаданные + транскрипт, единица передачи
в Analysis Service. Создаётся заново на каждый запрос и не кэшируется.
"""
from __future__ import annotations

import base64
import math
from dataclasses import dataclass, field
from typing import Any, Optional


@dataclass(frozen=True)
class VideoMetadata:
    """Метаданные видео, снятые один раз при открытии."""
    duration: float
    video_width: int
    video_height: int

    def __post_init__(self) -> None:
        if self.video_width <= 0 or self.video_height <= 0:
            raise ValueError(
                f"Video dimensions must be positive, got {self.video_width}x{self.video_height}"
            )
        if math.isfinite(self.duration) and self.duration < 0:
            raise ValueError(f"Video duration must be >= 0, got {self.duration}")

    @property
    def has_finite_duration(self) -> bool:
        return math.isfinite(self.duration)

    def to_dict(self) -> dict[str, Any]:
        # Ключи совпадают с тем, что видит модель в промпте
        return {
            "duration": self.duration if self.has_finite_duration else None,
            "videoWidth": self.video_width,
            "videoHeight": self.video_height,
        }


@dataclass(frozen=True)
class FrameSample:
    """JPEG кадр на одном sampled timestamp."""
    data: bytes
    timestamp: float
    index: int
    mime_type: str = "image/jpeg"

    @property
    def b64(self) -> str:
        """Base64 payload без data-URI префикса."""
        return base64.b64encode(self.data).decode("ascii")

    def to_dict(self) -> dict[str, Any]:
        return {
            "index": self.index,
            "timestamp": self.timestamp,
            "mime_type": self.mime_type,
            "size_bytes": len(self.data),
        }


@dataclass(frozen=True)
class EvidenceBundle:
    """Bounded evidence package produced by the video sampler."""
    frames: tuple[FrameSample, ...]
    metadata: VideoMetadata
    audio_transcript: str
    source_name: Optional[str] = field(default=None, compare=False)
    # Сообщения о кадрах, потерянных в режиме best_effort
    warnings: tuple[str, ...] = field(default=(), compare=False)

    @property
    def frame_count(self) -> int:
        return len(self.frames)

    @property
    def timestamps(self) -> list[float]:
        return [f.timestamp for f in self.frames]

    def to_dict(self) -> dict[str, Any]:
        return {
            "frames": [f.to_dict() for f in self.frames],
            "metadata": self.metadata.to_dict(),
            "audioTranscript": self.audio_transcript,
            "source_name": self.source_name,
            "warnings": list(self.warnings),
        }
