"""
Video Source - временный ресурс видео и доступ к декодеру.

VideoResourceProvider открывает ресурс (bytes -> временный файл, либо путь)
и обязан освободить его ровно один раз через release().
OpenCV реализация повторяет логику извлечения метаданных из VideoMetaHandler.
"""
from __future__ import annotations

import math
import os
import tempfile
from pathlib import Path
from typing import Optional, Protocol, Union

import cv2
import numpy as np

from veritas.models.video import VideoMetadata


VideoSource = Union[str, os.PathLike, bytes]


class VideoHandle(Protocol):
    """Открытый видео ресурс. Все методы блокирующие, вызываются из worker thread."""

    # True если grab_frame() декодирует синхронно и settle delay не нужен
    synchronous_frames: bool

    def load_metadata(self) -> Optional[VideoMetadata]:
        ...

    def nudge(self) -> bool:
        ...

    def seek(self, timestamp: float) -> bool:
        ...

    def grab_frame(self) -> Optional[np.ndarray]:
        ...


class VideoResourceProvider(Protocol):
    def open(self, source: VideoSource, suffix: str = ".mp4") -> VideoHandle:
        ...

    def release(self, handle: VideoHandle) -> None:
        ...


class OpenCVVideoHandle:
    """VideoHandle поверх cv2.VideoCapture."""

    synchronous_frames = True

    def __init__(self, path: str, temporary: bool = False) -> None:
        self.path = path
        self.temporary = temporary
        self._cap: Optional[cv2.VideoCapture] = None

    def load_metadata(self) -> Optional[VideoMetadata]:
        cap = cv2.VideoCapture(self.path)
        self._cap = cap
        if not cap.isOpened():
            return None

        width = int(cap.get(cv2.CAP_PROP_FRAME_WIDTH))
        height = int(cap.get(cv2.CAP_PROP_FRAME_HEIGHT))
        if width <= 0 or height <= 0:
            return None

        fps = float(cap.get(cv2.CAP_PROP_FPS))
        frame_count_raw = float(cap.get(cv2.CAP_PROP_FRAME_COUNT))

        # Контейнер может не сообщать длительность (stream, битый индекс)
        duration = math.nan
        if np.isfinite(fps) and fps > 0 and np.isfinite(frame_count_raw) and frame_count_raw >= 0:
            duration = frame_count_raw / fps

        return VideoMetadata(duration=duration, video_width=width, video_height=height)

    def nudge(self) -> bool:
        if self._cap is None:
            return False
        ok = self._cap.grab()
        self._cap.set(cv2.CAP_PROP_POS_MSEC, 0.0)
        return bool(ok)

    def seek(self, timestamp: float) -> bool:
        if self._cap is None:
            return False
        return bool(self._cap.set(cv2.CAP_PROP_POS_MSEC, max(0.0, timestamp) * 1000.0))

    def grab_frame(self) -> Optional[np.ndarray]:
        if self._cap is None:
            return None
        ok, frame = self._cap.read()
        if not ok or frame is None:
            return None
        return frame

    def close(self) -> None:
        if self._cap is not None:
            self._cap.release()
            self._cap = None


class OpenCVResourceProvider:
    """Открывает видео для OpenCV. Байты пишутся во временный файл в temp_dir."""

    def __init__(self, temp_dir: Optional[str] = None) -> None:
        self.temp_dir = temp_dir

    def open(self, source: VideoSource, suffix: str = ".mp4") -> OpenCVVideoHandle:
        if isinstance(source, (bytes, bytearray)):
            if self.temp_dir:
                Path(self.temp_dir).mkdir(parents=True, exist_ok=True)
            fd, path = tempfile.mkstemp(prefix="veritas_", suffix=suffix, dir=self.temp_dir)
            with os.fdopen(fd, "wb") as f:
                f.write(source)
            return OpenCVVideoHandle(path, temporary=True)

        return OpenCVVideoHandle(str(Path(source)), temporary=False)

    def release(self, handle: OpenCVVideoHandle) -> None:
        handle.close()
        if handle.temporary:
            Path(handle.path).unlink(missing_ok=True)
