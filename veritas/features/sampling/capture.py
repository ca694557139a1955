"""
Capture Surface - копирует декодированный кадр и кодирует его в JPEG.

Поверхность создаётся под нативное разрешение видео (без даунскейла).
"""
from __future__ import annotations

from typing import Protocol

import cv2
import numpy as np

from veritas.core.errors import CaptureUnavailableError


class CaptureSurface(Protocol):
    width: int
    height: int

    def capture(self, frame: np.ndarray) -> bytes:
        ...

    def discard(self) -> None:
        ...


class CaptureBackend(Protocol):
    def ensure_available(self) -> None:
        """Raises CaptureUnavailableError if surfaces cannot be created."""
        ...

    def create_surface(self, width: int, height: int) -> CaptureSurface:
        ...


class OpenCVCaptureSurface:
    """Буфер width x height, в который рисуется кадр перед JPEG кодированием."""

    def __init__(self, width: int, height: int, jpeg_quality: int = 80) -> None:
        self.width = width
        self.height = height
        self.jpeg_quality = jpeg_quality
        self._buffer: np.ndarray | None = np.zeros((height, width, 3), dtype=np.uint8)

    def capture(self, frame: np.ndarray) -> bytes:
        if self._buffer is None:
            raise RuntimeError("Capture surface was discarded")
        if frame.ndim == 2:
            frame = cv2.cvtColor(frame, cv2.COLOR_GRAY2BGR)
        elif frame.shape[2] == 4:
            frame = cv2.cvtColor(frame, cv2.COLOR_BGRA2BGR)

        h, w = frame.shape[:2]
        if (w, h) != (self.width, self.height):
            frame = cv2.resize(frame, (self.width, self.height), interpolation=cv2.INTER_LINEAR)

        np.copyto(self._buffer, frame)

        ok, encoded = cv2.imencode(".jpg", self._buffer, [int(cv2.IMWRITE_JPEG_QUALITY), self.jpeg_quality])
        if not ok:
            raise RuntimeError("JPEG encoding failed")
        return encoded.tobytes()

    def discard(self) -> None:
        self._buffer = None


class OpenCVCaptureBackend:
    """Capture backend на OpenCV (imencode)."""

    def __init__(self, jpeg_quality: int = 80) -> None:
        self.jpeg_quality = jpeg_quality
        self._available: bool | None = None

    def ensure_available(self) -> None:
        if self._available is None:
            try:
                probe = np.zeros((2, 2, 3), dtype=np.uint8)
                ok, _ = cv2.imencode(".jpg", probe)
                self._available = bool(ok)
            except cv2.error:
                self._available = False

        if not self._available:
            raise CaptureUnavailableError("OpenCV JPEG encoder is not available")

    def create_surface(self, width: int, height: int) -> OpenCVCaptureSurface:
        return OpenCVCaptureSurface(width, height, jpeg_quality=self.jpeg_quality)
