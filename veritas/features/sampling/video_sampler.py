"""
VideoSampler - превращает видео в ограниченный EvidenceBundle.

Последовательность:
1. Проверка capture backend (до открытия ресурса)
2. Открытие временного ресурса и ожидание метаданных      [suspension a]
3. Capture surface под нативное разрешение
4. Nudge декодера (ошибка игнорируется)
5. Для каждого timestamp: seek [b] -> settle delay [c] -> кадр -> JPEG
6. Release ресурса на любом пути выхода. Если вызов декодера брошен по
   таймауту, release выполняет поток этого вызова после его завершения.

Кадры снимаются строго последовательно: у декодера одна текущая позиция.
"""
from __future__ import annotations

import asyncio
import math
import threading
import time
from typing import Any, Callable, Optional

from veritas.core.cancellation import CancellationToken
from veritas.core.errors import (
    SamplingCancelled,
    SamplingError,
    VideoLoadError,
    VideoProcessingError,
)
from veritas.features.sampling.capture import CaptureBackend, CaptureSurface, OpenCVCaptureBackend
from veritas.features.sampling.policy import FailurePolicy, SamplingPolicy, UniformSamplingPolicy
from veritas.features.sampling.transcript import PlaceholderTranscriptProvider, TranscriptProvider
from veritas.features.sampling.video_source import (
    OpenCVResourceProvider,
    VideoHandle,
    VideoResourceProvider,
    VideoSource,
)
from veritas.models.video import EvidenceBundle, FrameSample, VideoMetadata


DEFAULT_MAX_FRAMES = 16
DEFAULT_SETTLE_DELAY_SECONDS = 0.1


class _ReleaseGuard:
    """Release ресурса, которым ещё может пользоваться поток декодера."""

    def __init__(self, release: Callable[[], None]) -> None:
        self._release = release
        self._lock = threading.Lock()
        self._in_flight = 0
        self._closing = False

    def bind(self, func: Callable[..., Any]) -> Callable[..., Any]:
        with self._lock:
            self._in_flight += 1

        def call(*args: Any) -> Any:
            try:
                return func(*args)
            finally:
                with self._lock:
                    self._in_flight -= 1
                    last = self._closing and self._in_flight == 0
                if last:
                    self._release()

        return call

    def close(self) -> None:
        with self._lock:
            self._closing = True
            now = self._in_flight == 0
        if now:
            self._release()


class VideoSampler:
    """Sequential seek-and-capture sampler.

    Args:
        provider: открывает/освобождает видео ресурс.
        capture_backend: создаёт capture surface и кодирует JPEG.
        policy: выбирает timestamps (по умолчанию равномерно).
        transcript_provider: источник транскрипта (по умолчанию placeholder).
        failure_policy: fail_fast или best_effort при ошибке кадра.
        settle_delay_seconds: пауза после seek, если декодер не синхронный.
        metadata_timeout_seconds: сколько ждать метаданные.
    """

    def __init__(
        self,
        provider: Optional[VideoResourceProvider] = None,
        capture_backend: Optional[CaptureBackend] = None,
        policy: Optional[SamplingPolicy] = None,
        transcript_provider: Optional[TranscriptProvider] = None,
        failure_policy: FailurePolicy | str = FailurePolicy.FAIL_FAST,
        settle_delay_seconds: float = DEFAULT_SETTLE_DELAY_SECONDS,
        metadata_timeout_seconds: float = 10.0,
    ) -> None:
        self.provider = provider or OpenCVResourceProvider()
        self.capture_backend = capture_backend or OpenCVCaptureBackend()
        self.policy = policy or UniformSamplingPolicy()
        self.transcript_provider = transcript_provider or PlaceholderTranscriptProvider()
        self.failure_policy = FailurePolicy(failure_policy)
        self.settle_delay_seconds = max(0.0, settle_delay_seconds)
        self.metadata_timeout_seconds = metadata_timeout_seconds

    async def sample(
        self,
        source: VideoSource,
        max_frames: int = DEFAULT_MAX_FRAMES,
        cancel_token: Optional[CancellationToken] = None,
        suffix: str = ".mp4",
        source_name: Optional[str] = None,
    ) -> EvidenceBundle:
        if max_frames < 0:
            raise ValueError(f"max_frames must be >= 0, got {max_frames}")

        token = cancel_token or CancellationToken()
        token.raise_if_cancelled()

        # Без capture surface ресурс даже не открываем
        self.capture_backend.ensure_available()

        try:
            handle = self.provider.open(source, suffix=suffix)
        except OSError as exc:
            raise VideoLoadError(f"Failed to open video resource: {exc}") from exc

        surface: Optional[CaptureSurface] = None
        guard = _ReleaseGuard(lambda: self.provider.release(handle))
        warnings: list[str] = []
        started = time.monotonic()
        try:
            metadata = await self._wait_for_metadata(handle, guard, token)
            surface = self.capture_backend.create_surface(metadata.video_width, metadata.video_height)

            await self._nudge(handle, guard, token)

            timestamps = self.policy.timestamps(metadata.duration, max_frames)[:max_frames]
            print(
                f"VideoSampler: {metadata.video_width}x{metadata.video_height}, "
                f"duration={metadata.duration:.2f}s, sampling {len(timestamps)}/{max_frames} frames"
            )

            frames = await self._capture_frames(handle, guard, surface, timestamps, token, warnings)
            transcript = self.transcript_provider.transcribe(metadata)

            print(f"✓ Sampled {len(frames)} frames in {time.monotonic() - started:.2f}s")

            return EvidenceBundle(
                frames=tuple(frames),
                metadata=metadata,
                audio_transcript=transcript,
                source_name=source_name,
                warnings=tuple(warnings),
            )
        finally:
            if surface is not None:
                surface.discard()
            guard.close()

    async def _wait_for_metadata(
        self, handle: VideoHandle, guard: _ReleaseGuard, token: CancellationToken
    ) -> VideoMetadata:
        try:
            metadata = await self._suspend(
                handle.load_metadata,
                guard=guard,
                token=token,
                timeout=self.metadata_timeout_seconds,
                drain=False,
            )
        except asyncio.TimeoutError as exc:
            raise VideoLoadError(
                f"Video metadata did not load within {self.metadata_timeout_seconds:.1f}s"
            ) from exc
        except SamplingError:
            raise
        except Exception as exc:
            raise VideoLoadError(f"Failed to load video file metadata: {exc}") from exc

        if metadata is None:
            raise VideoLoadError(
                "Failed to load video file metadata. It may be corrupt or in an unsupported format."
            )
        return metadata

    async def _nudge(self, handle: VideoHandle, guard: _ReleaseGuard, token: CancellationToken) -> None:
        try:
            ok = await self._suspend(handle.nudge, guard=guard, token=token)
        except SamplingError:
            raise
        except Exception as exc:
            print(f"VideoSampler: decoder nudge failed, continuing: {exc}")
            return
        if not ok:
            print("VideoSampler: decoder nudge had no effect, continuing")

    async def _capture_frames(
        self,
        handle: VideoHandle,
        guard: _ReleaseGuard,
        surface: CaptureSurface,
        timestamps: list[float],
        token: CancellationToken,
        warnings: list[str],
    ) -> list[FrameSample]:
        frames: list[FrameSample] = []
        needs_settle = self.settle_delay_seconds > 0 and not getattr(handle, "synchronous_frames", False)

        for index, timestamp in enumerate(timestamps):
            token.raise_if_cancelled()
            try:
                data = await self._capture_one(handle, guard, surface, index, timestamp, token, needs_settle)
            except VideoProcessingError as exc:
                if self.failure_policy is FailurePolicy.BEST_EFFORT:
                    warnings.append(f"{exc}; kept {len(frames)} of {len(timestamps)} frames")
                    print(f"VideoSampler: {exc}; returning {len(frames)} captured frames")
                    break
                raise

            frames.append(FrameSample(data=data, timestamp=timestamp, index=index))

        return frames

    async def _capture_one(
        self,
        handle: VideoHandle,
        guard: _ReleaseGuard,
        surface: CaptureSurface,
        index: int,
        timestamp: float,
        token: CancellationToken,
        needs_settle: bool,
    ) -> bytes:
        try:
            seeked = await self._suspend(handle.seek, timestamp, guard=guard, token=token)
            if not seeked:
                raise VideoProcessingError(f"Seek to {timestamp:.2f}s failed", index, timestamp)

            if needs_settle:
                await token.sleep(self.settle_delay_seconds)

            pixels = await self._suspend(handle.grab_frame, guard=guard, token=token)
            if pixels is None:
                raise VideoProcessingError(f"No decodable frame at {timestamp:.2f}s", index, timestamp)

            return surface.capture(pixels)
        except SamplingError:
            raise
        except Exception as exc:
            raise VideoProcessingError(
                f"Frame capture failed at {timestamp:.2f}s: {exc}", index, timestamp
            ) from exc

    async def _suspend(
        self,
        func: Callable[..., Any],
        *args: Any,
        guard: _ReleaseGuard,
        token: CancellationToken,
        timeout: Optional[float] = None,
        drain: bool = True,
    ) -> Any:
        """Runs a blocking decoder call in a thread, racing it against cancellation.

        drain=True: при отмене дожидаемся завершения вызова, чтобы release
        не выполнялся параллельно с операцией на том же handle.
        drain=False: вызов бросается, release за него сделает guard.
        """
        token.raise_if_cancelled()
        loop = asyncio.get_running_loop()
        # Plain executor future: отмена задач при остановке loop его не трогает
        call = loop.run_in_executor(None, guard.bind(func), *args)
        cancelled = asyncio.ensure_future(token.wait())
        try:
            done, _ = await asyncio.wait(
                {call, cancelled},
                timeout=timeout if timeout is None or math.isfinite(timeout) else None,
                return_when=asyncio.FIRST_COMPLETED,
            )
        except asyncio.CancelledError:
            await self._settle(call, drain)
            raise
        finally:
            cancelled.cancel()

        if call in done:
            return call.result()

        await self._settle(call, drain)

        if token.cancelled:
            raise SamplingCancelled(token.reason or "cancelled")
        raise asyncio.TimeoutError()

    @staticmethod
    async def _settle(call: asyncio.Future, drain: bool) -> None:
        if drain:
            await asyncio.gather(call, return_exceptions=True)
        else:
            # Результат брошенного вызова никому не нужен
            call.add_done_callback(lambda f: f.cancelled() or f.exception())
