"""Tests for VideoSampler."""
from __future__ import annotations

import asyncio
import math

import pytest

from conftest import FakeResourceProvider, FakeVideoHandle
from veritas.core.cancellation import CancellationToken
from veritas.core.errors import (
    CaptureUnavailableError,
    SamplingCancelled,
    VideoLoadError,
    VideoProcessingError,
)
from veritas.features.sampling.policy import FailurePolicy
from veritas.features.sampling.transcript import PLACEHOLDER_TRANSCRIPT
from veritas.features.sampling.video_sampler import VideoSampler
from veritas.models.video import VideoMetadata


class TestSamplingPlan:
    def test_32_seconds_16_frames(self, make_sampler, metadata_32s) -> None:
        sampler, provider, _ = make_sampler(FakeVideoHandle(metadata_32s))

        bundle = asyncio.run(sampler.sample(b"video", max_frames=16))

        assert bundle.timestamps == [float(t) for t in range(0, 32, 2)]
        assert [f.index for f in bundle.frames] == list(range(16))
        assert bundle.metadata == metadata_32s
        assert bundle.audio_transcript == PLACEHOLDER_TRANSCRIPT
        assert provider.released == 1

    @pytest.mark.parametrize("duration,max_frames", [(0.5, 16), (5.0, 1), (7.3, 3), (1000.0, 16)])
    def test_frame_count_bounds(self, make_sampler, duration, max_frames) -> None:
        meta = VideoMetadata(duration=duration, video_width=8, video_height=8)
        sampler, _, _ = make_sampler(FakeVideoHandle(meta))

        bundle = asyncio.run(sampler.sample("clip.mp4", max_frames=max_frames))

        assert 1 <= bundle.frame_count <= max_frames
        assert bundle.timestamps == sorted(bundle.timestamps)
        assert all(t < duration for t in bundle.timestamps)

    def test_zero_max_frames_keeps_metadata(self, make_sampler, metadata_32s) -> None:
        handle = FakeVideoHandle(metadata_32s)
        sampler, provider, _ = make_sampler(handle)

        bundle = asyncio.run(sampler.sample(b"video", max_frames=0))

        assert bundle.frames == ()
        assert bundle.metadata.video_width == 64
        assert handle.seeks == []
        assert provider.released == 1

    def test_zero_duration(self, make_sampler) -> None:
        meta = VideoMetadata(duration=0.0, video_width=8, video_height=8)
        sampler, _, _ = make_sampler(FakeVideoHandle(meta))

        bundle = asyncio.run(sampler.sample(b"video"))

        assert bundle.frame_count == 0
        assert bundle.metadata.duration == 0.0

    @pytest.mark.parametrize("duration", [math.inf, math.nan])
    def test_non_finite_duration_single_frame(self, make_sampler, duration) -> None:
        meta = VideoMetadata(duration=duration, video_width=8, video_height=8)
        sampler, _, _ = make_sampler(FakeVideoHandle(meta))

        bundle = asyncio.run(sampler.sample(b"video", max_frames=16))

        assert bundle.timestamps == [0.0]

    def test_negative_max_frames(self, make_sampler, metadata_32s) -> None:
        sampler, provider, _ = make_sampler(FakeVideoHandle(metadata_32s))

        with pytest.raises(ValueError):
            asyncio.run(sampler.sample(b"video", max_frames=-1))
        assert provider.opened == 0

    def test_surface_uses_native_size_and_is_discarded(self, make_sampler, metadata_32s) -> None:
        sampler, _, backend = make_sampler(FakeVideoHandle(metadata_32s))

        asyncio.run(sampler.sample(b"video", max_frames=2))

        surface = backend.surfaces[0]
        assert (surface.width, surface.height) == (64, 36)
        assert surface.captured == 2
        assert surface.discarded

    def test_failed_nudge_is_ignored(self, make_sampler, metadata_32s) -> None:
        handle = FakeVideoHandle(metadata_32s, nudge_error=RuntimeError("decoder not ready"))
        sampler, _, _ = make_sampler(handle)

        bundle = asyncio.run(sampler.sample(b"video", max_frames=4))

        assert handle.nudged
        assert bundle.frame_count == 4


class TestSamplingFailures:
    def test_capture_unavailable_before_open(self, make_sampler, metadata_32s) -> None:
        sampler, provider, _ = make_sampler(FakeVideoHandle(metadata_32s), available=False)

        with pytest.raises(CaptureUnavailableError):
            asyncio.run(sampler.sample(b"video"))
        assert provider.opened == 0
        assert provider.released == 0

    def test_metadata_never_loads(self, make_sampler) -> None:
        sampler, provider, backend = make_sampler(FakeVideoHandle(metadata=None))

        with pytest.raises(VideoLoadError):
            asyncio.run(sampler.sample(b"corrupt"))
        assert provider.released == 1
        assert backend.surfaces == []

    def test_metadata_timeout(self, make_sampler, metadata_32s) -> None:
        handle = FakeVideoHandle(metadata_32s, metadata_delay=0.3)
        sampler, provider, _ = make_sampler(handle, metadata_timeout_seconds=0.05)

        with pytest.raises(VideoLoadError):
            asyncio.run(sampler.sample(b"video"))
        assert provider.released == 1
        assert not provider.released_while_busy

    def test_cancel_while_metadata_loads_defers_release(self, make_sampler, metadata_32s) -> None:
        handle = FakeVideoHandle(metadata_32s, metadata_delay=0.3)
        sampler, provider, _ = make_sampler(handle)

        async def scenario() -> int:
            token = CancellationToken()
            asyncio.get_running_loop().call_later(0.05, token.cancel)
            with pytest.raises(SamplingCancelled):
                await sampler.sample(b"video", cancel_token=token)
            released_on_return = provider.released
            await asyncio.sleep(0.5)
            return released_on_return

        assert asyncio.run(scenario()) == 0
        assert provider.released == 1
        assert not provider.released_while_busy

    def test_open_error_is_load_error(self, metadata_32s) -> None:
        from conftest import FakeCaptureBackend

        provider = FakeResourceProvider(FakeVideoHandle(metadata_32s), open_error=OSError("disk full"))
        sampler = VideoSampler(provider=provider, capture_backend=FakeCaptureBackend())

        with pytest.raises(VideoLoadError):
            asyncio.run(sampler.sample(b"video"))
        assert provider.released == 0

    def test_seek_failure_fail_fast(self, make_sampler, metadata_32s) -> None:
        sampler, provider, _ = make_sampler(FakeVideoHandle(metadata_32s, fail_seek_at=3))

        with pytest.raises(VideoProcessingError) as exc_info:
            asyncio.run(sampler.sample(b"video", max_frames=16))

        assert exc_info.value.frame_index == 3
        assert exc_info.value.timestamp == 6.0
        assert provider.released == 1

    def test_decode_failure_fail_fast(self, make_sampler, metadata_32s) -> None:
        sampler, provider, backend = make_sampler(FakeVideoHandle(metadata_32s, fail_frame_at=5))

        with pytest.raises(VideoProcessingError):
            asyncio.run(sampler.sample(b"video"))
        assert provider.released == 1
        assert backend.surfaces[0].discarded

    def test_best_effort_returns_captured_prefix(self, make_sampler, metadata_32s) -> None:
        sampler, provider, _ = make_sampler(
            FakeVideoHandle(metadata_32s, fail_frame_at=5),
            failure_policy=FailurePolicy.BEST_EFFORT,
        )

        bundle = asyncio.run(sampler.sample(b"video"))

        assert bundle.timestamps == [0.0, 2.0, 4.0, 6.0, 8.0]
        assert provider.released == 1
        assert len(bundle.warnings) == 1
        assert "kept 5 of 16 frames" in bundle.warnings[0]

    def test_failure_policy_accepts_string(self, make_sampler, metadata_32s) -> None:
        sampler, _, _ = make_sampler(FakeVideoHandle(metadata_32s), failure_policy="best_effort")
        assert sampler.failure_policy is FailurePolicy.BEST_EFFORT


class TestSamplingCancellation:
    def test_cancelled_before_start(self, make_sampler, metadata_32s) -> None:
        sampler, provider, _ = make_sampler(FakeVideoHandle(metadata_32s))
        token = CancellationToken()
        token.cancel("user retried")

        with pytest.raises(SamplingCancelled):
            asyncio.run(sampler.sample(b"video", cancel_token=token))
        assert provider.opened == 0

    def test_cancel_mid_loop_releases_once(self, make_sampler, metadata_32s) -> None:
        handle = FakeVideoHandle(metadata_32s)
        sampler, provider, _ = make_sampler(handle)

        async def scenario() -> None:
            token = CancellationToken()
            loop = asyncio.get_running_loop()

            def on_seek(index: int) -> None:
                if index == 2:
                    loop.call_soon_threadsafe(token.cancel)

            handle.on_seek = on_seek
            await sampler.sample(b"video", cancel_token=token)

        with pytest.raises(SamplingCancelled):
            asyncio.run(scenario())

        assert len(handle.seeks) <= 4
        assert provider.released == 1

    def test_cancel_during_settle_delay(self, make_sampler, metadata_32s) -> None:
        handle = FakeVideoHandle(metadata_32s, synchronous_frames=False)
        sampler, provider, _ = make_sampler(handle, settle_delay_seconds=5.0)

        async def scenario() -> float:
            token = CancellationToken()
            loop = asyncio.get_running_loop()
            loop.call_later(0.1, token.cancel)
            started = loop.time()
            try:
                await sampler.sample(b"video", cancel_token=token)
            except SamplingCancelled:
                return loop.time() - started
            raise AssertionError("sampling was not cancelled")

        elapsed = asyncio.run(scenario())

        assert elapsed < 2.0
        assert handle.frames_read == 0
        assert provider.released == 1

    def test_task_cancel_waits_for_decoder_before_release(self, make_sampler, metadata_32s) -> None:
        handle = FakeVideoHandle(metadata_32s, frame_delay=0.2)
        sampler, provider, _ = make_sampler(handle)

        async def scenario() -> None:
            task = asyncio.create_task(sampler.sample(b"video"))
            await asyncio.sleep(0.05)
            task.cancel()
            await asyncio.gather(task, return_exceptions=True)
            assert task.cancelled()

        asyncio.run(scenario())

        assert provider.released == 1
        assert not provider.released_while_busy

    def test_task_cancel_during_nudge_waits_before_release(self, make_sampler, metadata_32s) -> None:
        handle = FakeVideoHandle(metadata_32s, nudge_delay=0.3)
        sampler, provider, _ = make_sampler(handle)

        async def scenario() -> None:
            task = asyncio.create_task(sampler.sample(b"video"))
            await asyncio.sleep(0.05)
            task.cancel()
            await asyncio.gather(task, return_exceptions=True)
            assert task.cancelled()

        asyncio.run(scenario())

        assert handle.nudged
        assert provider.released == 1
        assert not provider.released_while_busy

    def test_token_cancel_during_nudge(self, make_sampler, metadata_32s) -> None:
        handle = FakeVideoHandle(metadata_32s, nudge_delay=0.3)
        sampler, provider, _ = make_sampler(handle)

        async def scenario() -> None:
            token = CancellationToken()
            asyncio.get_running_loop().call_later(0.05, token.cancel)
            await sampler.sample(b"video", cancel_token=token)

        with pytest.raises(SamplingCancelled):
            asyncio.run(scenario())

        assert handle.seeks == []
        assert provider.released == 1
        assert not provider.released_while_busy

    def test_settle_delay_skipped_for_synchronous_decoder(self, make_sampler, metadata_32s) -> None:
        handle = FakeVideoHandle(metadata_32s, synchronous_frames=True)
        sampler, _, _ = make_sampler(handle, settle_delay_seconds=5.0)

        async def scenario() -> float:
            loop = asyncio.get_running_loop()
            started = loop.time()
            await sampler.sample(b"video", max_frames=4)
            return loop.time() - started

        assert asyncio.run(scenario()) < 2.0
