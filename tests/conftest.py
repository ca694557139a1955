"""Pytest configuration and fixtures."""
from __future__ import annotations

import sys
import threading
import time
from pathlib import Path
from typing import Optional

import numpy as np
import pytest

# Добавляем корень проекта в path
PROJECT_ROOT = Path(__file__).parent.parent
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from veritas.core.errors import CaptureUnavailableError
from veritas.models.video import VideoMetadata


class FakeVideoHandle:
    """VideoHandle с заданными метаданными и управляемыми сбоями."""

    def __init__(
        self,
        metadata: Optional[VideoMetadata] = None,
        fail_seek_at: Optional[int] = None,
        fail_frame_at: Optional[int] = None,
        synchronous_frames: bool = True,
        metadata_delay: float = 0.0,
        frame_delay: float = 0.0,
        nudge_error: Optional[Exception] = None,
        nudge_delay: float = 0.0,
    ) -> None:
        self.metadata = metadata
        self.fail_seek_at = fail_seek_at
        self.fail_frame_at = fail_frame_at
        self.synchronous_frames = synchronous_frames
        self.metadata_delay = metadata_delay
        self.frame_delay = frame_delay
        self.nudge_error = nudge_error
        self.nudge_delay = nudge_delay

        self.seeks: list[float] = []
        self.frames_read = 0
        self.nudged = False
        self.closed = False
        self.busy = threading.Event()
        self.on_seek = None  # callback(index) для тестов отмены

    def load_metadata(self) -> Optional[VideoMetadata]:
        self.busy.set()
        try:
            if self.metadata_delay:
                time.sleep(self.metadata_delay)
            return self.metadata
        finally:
            self.busy.clear()

    def nudge(self) -> bool:
        self.busy.set()
        try:
            self.nudged = True
            if self.nudge_delay:
                time.sleep(self.nudge_delay)
            if self.nudge_error is not None:
                raise self.nudge_error
            return True
        finally:
            self.busy.clear()

    def seek(self, timestamp: float) -> bool:
        index = len(self.seeks)
        self.seeks.append(timestamp)
        if self.on_seek is not None:
            self.on_seek(index)
        return index != self.fail_seek_at

    def grab_frame(self) -> Optional[np.ndarray]:
        self.busy.set()
        try:
            if self.frame_delay:
                time.sleep(self.frame_delay)
            index = self.frames_read
            self.frames_read += 1
            if index == self.fail_frame_at:
                return None
            h = self.metadata.video_height if self.metadata else 4
            w = self.metadata.video_width if self.metadata else 4
            return np.full((h, w, 3), index % 255, dtype=np.uint8)
        finally:
            self.busy.clear()


class FakeResourceProvider:
    """Считает open/release и запоминает, был ли handle занят при release."""

    def __init__(self, handle: FakeVideoHandle, open_error: Optional[Exception] = None) -> None:
        self.handle = handle
        self.open_error = open_error
        self.opened = 0
        self.released = 0
        self.released_while_busy = False

    def open(self, source, suffix: str = ".mp4") -> FakeVideoHandle:
        if self.open_error is not None:
            raise self.open_error
        self.opened += 1
        return self.handle

    def release(self, handle: FakeVideoHandle) -> None:
        self.released += 1
        if handle.busy.is_set():
            self.released_while_busy = True
        handle.closed = True


class FakeSurface:
    def __init__(self, width: int, height: int) -> None:
        self.width = width
        self.height = height
        self.captured = 0
        self.discarded = False

    def capture(self, frame: np.ndarray) -> bytes:
        self.captured += 1
        return b"\xff\xd8fake-jpeg-" + str(int(frame[0, 0, 0])).encode()

    def discard(self) -> None:
        self.discarded = True


class FakeCaptureBackend:
    def __init__(self, available: bool = True) -> None:
        self.available = available
        self.surfaces: list[FakeSurface] = []

    def ensure_available(self) -> None:
        if not self.available:
            raise CaptureUnavailableError("no capture surface in this environment")

    def create_surface(self, width: int, height: int) -> FakeSurface:
        surface = FakeSurface(width, height)
        self.surfaces.append(surface)
        return surface


@pytest.fixture
def metadata_32s() -> VideoMetadata:
    return VideoMetadata(duration=32.0, video_width=64, video_height=36)


@pytest.fixture
def make_sampler():
    """Фабрика (sampler, provider, backend) поверх fake handle."""
    from veritas.features.sampling.video_sampler import VideoSampler

    def factory(handle: FakeVideoHandle, available: bool = True, **kwargs):
        provider = FakeResourceProvider(handle)
        backend = FakeCaptureBackend(available=available)
        kwargs.setdefault("settle_delay_seconds", 0.0)
        sampler = VideoSampler(provider=provider, capture_backend=backend, **kwargs)
        return sampler, provider, backend

    return factory


@pytest.fixture
def verdict_payload() -> dict:
    """Вердикт в том виде, в каком его возвращает модель."""
    return {
        "trustScore": 82,
        "status": "Authentic",
        "summary": "No signs of manipulation were found.",
        "findings": [
            {
                "finding": "Consistent lighting",
                "explanation": "Shadows match a single light source across all frames.",
                "verdict": "Authentic",
            },
            {
                "finding": "Lip-sync",
                "explanation": "Mouth movements could not be compared with the placeholder transcript.",
                "verdict": "Suspicious",
            },
        ],
        "publicResearch": [
            {
                "title": "Original broadcast",
                "summary": "The clip matches a 2023 news broadcast.",
                "sourceUrl": "https://example.org/news/1",
                "sourceName": "Example News",
            }
        ],
        "documents": [],
        "sources": [{"title": "Fact check", "url": "https://example.org/fact-check"}],
    }
