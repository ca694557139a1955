"""Tests for sampling policies, capture surface and the OpenCV resource provider."""
from __future__ import annotations

import asyncio
import math
import time
from pathlib import Path

import cv2
import numpy as np
import pytest

from veritas.core.errors import VideoLoadError
from veritas.features.sampling import video_source
from veritas.features.sampling.capture import OpenCVCaptureBackend, OpenCVCaptureSurface
from veritas.features.sampling.policy import UniformSamplingPolicy
from veritas.features.sampling.video_sampler import VideoSampler
from veritas.features.sampling.video_source import OpenCVResourceProvider


CLIP_FPS = 10
CLIP_FRAMES = 40
CLIP_SIZE = (64, 48)


@pytest.fixture
def mjpg_clip(tmp_path: Path) -> Path:
    """4 секунды MJPG, яркость кадра i равна 5 * i."""
    path = tmp_path / "clip.avi"
    writer = cv2.VideoWriter(str(path), cv2.VideoWriter_fourcc(*"MJPG"), CLIP_FPS, CLIP_SIZE)
    if not writer.isOpened():
        pytest.skip("OpenCV build cannot write MJPG")
    for i in range(CLIP_FRAMES):
        writer.write(np.full((CLIP_SIZE[1], CLIP_SIZE[0], 3), 5 * i, dtype=np.uint8))
    writer.release()
    return path


class TestUniformSamplingPolicy:
    def setup_method(self) -> None:
        self.policy = UniformSamplingPolicy()

    def test_even_interval(self) -> None:
        assert self.policy.timestamps(32.0, 16) == [float(t) for t in range(0, 32, 2)]

    def test_short_video(self) -> None:
        ts = self.policy.timestamps(1.0, 4)
        assert ts == [0.0, 0.25, 0.5, 0.75]

    def test_all_timestamps_inside_duration(self) -> None:
        ts = self.policy.timestamps(10.0, 3)
        assert len(ts) == 3
        assert all(0.0 <= t < 10.0 for t in ts)
        assert ts == sorted(ts)

    def test_degenerate_inputs(self) -> None:
        assert self.policy.timestamps(0.0, 16) == []
        assert self.policy.timestamps(math.inf, 16) == [0.0]
        assert self.policy.timestamps(math.nan, 16) == [0.0]
        assert self.policy.timestamps(12.0, 0) == []
        assert self.policy.timestamps(math.nan, 0) == []

    def test_negative_budget(self) -> None:
        with pytest.raises(ValueError):
            self.policy.timestamps(10.0, -1)


class TestOpenCVCapture:
    def test_jpeg_at_native_size(self) -> None:
        surface = OpenCVCaptureSurface(32, 16, jpeg_quality=80)
        frame = np.random.randint(0, 255, (16, 32, 3), dtype=np.uint8)

        data = surface.capture(frame)

        assert data[:2] == b"\xff\xd8"
        assert data[-2:] == b"\xff\xd9"

    def test_grayscale_and_mismatched_frames(self) -> None:
        surface = OpenCVCaptureSurface(16, 16)
        assert surface.capture(np.zeros((8, 8), dtype=np.uint8))[:2] == b"\xff\xd8"
        assert surface.capture(np.zeros((16, 16, 4), dtype=np.uint8))[:2] == b"\xff\xd8"

    def test_discarded_surface_rejects_frames(self) -> None:
        surface = OpenCVCaptureSurface(4, 4)
        surface.discard()
        with pytest.raises(RuntimeError):
            surface.capture(np.zeros((4, 4, 3), dtype=np.uint8))

    def test_backend_probe(self) -> None:
        backend = OpenCVCaptureBackend(jpeg_quality=70)
        backend.ensure_available()
        surface = backend.create_surface(8, 6)
        assert (surface.width, surface.height) == (8, 6)


class TestOpenCVResourceProvider:
    def test_bytes_materialised_and_removed(self, tmp_path: Path) -> None:
        provider = OpenCVResourceProvider(temp_dir=str(tmp_path))

        handle = provider.open(b"not really a video", suffix=".mp4")
        path = Path(handle.path)
        assert path.exists()
        assert path.suffix == ".mp4"

        provider.release(handle)
        assert not path.exists()

    def test_existing_path_is_kept(self, tmp_path: Path) -> None:
        video = tmp_path / "clip.mp4"
        video.write_bytes(b"\x00" * 16)
        provider = OpenCVResourceProvider()

        handle = provider.open(str(video))
        provider.release(handle)

        assert video.exists()

    def test_undecodable_file_has_no_metadata(self, tmp_path: Path) -> None:
        provider = OpenCVResourceProvider(temp_dir=str(tmp_path))
        handle = provider.open(b"garbage bytes")
        try:
            assert handle.load_metadata() is None
        finally:
            provider.release(handle)

    def test_real_clip_seek_and_grab(self, mjpg_clip: Path) -> None:
        provider = OpenCVResourceProvider()
        handle = provider.open(str(mjpg_clip), suffix=".avi")
        try:
            meta = handle.load_metadata()
            assert meta is not None
            assert (meta.video_width, meta.video_height) == CLIP_SIZE
            assert meta.duration == pytest.approx(4.0, abs=0.2)

            assert handle.seek(0.0)
            first = handle.grab_frame()
            assert handle.seek(3.0)
            later = handle.grab_frame()
        finally:
            provider.release(handle)

        assert first.shape == (CLIP_SIZE[1], CLIP_SIZE[0], 3)
        assert later.mean() > first.mean() + 50

    def test_sampler_on_real_clip(self, mjpg_clip: Path) -> None:
        sampler = VideoSampler(
            provider=OpenCVResourceProvider(temp_dir=str(mjpg_clip.parent)),
            settle_delay_seconds=0.0,
        )

        bundle = asyncio.run(sampler.sample(mjpg_clip.read_bytes(), max_frames=4, suffix=".avi"))

        assert bundle.frame_count == 4
        assert bundle.timestamps == pytest.approx([0.0, 1.0, 2.0, 3.0], abs=0.05)
        assert all(f.data[:2] == b"\xff\xd8" for f in bundle.frames)
        assert list(mjpg_clip.parent.glob("veritas_*")) == []

    def test_slow_open_is_released_after_timeout(self, tmp_path: Path, monkeypatch) -> None:
        opened = []

        class SlowCapture:
            def __init__(self, path: str) -> None:
                time.sleep(0.3)
                self.path = path
                self.released = False
                opened.append(self)

            def isOpened(self) -> bool:
                return True

            def get(self, prop: int) -> float:
                return {cv2.CAP_PROP_FRAME_WIDTH: 8, cv2.CAP_PROP_FRAME_HEIGHT: 8}.get(prop, 0.0)

            def release(self) -> None:
                self.released = True

        monkeypatch.setattr(video_source.cv2, "VideoCapture", SlowCapture)
        sampler = VideoSampler(
            provider=OpenCVResourceProvider(temp_dir=str(tmp_path)),
            metadata_timeout_seconds=0.05,
        )

        with pytest.raises(VideoLoadError):
            asyncio.run(sampler.sample(b"video bytes"))

        # asyncio.run дожидается executor, release делает поток открытия
        assert len(opened) == 1
        assert opened[0].released
        assert list(tmp_path.glob("veritas_*")) == []
