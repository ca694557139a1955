"""
CancellationToken - явный сигнал отмены для долгих операций.

Токен проверяется в каждой точке приостановки (ожидание метаданных,
seek, settle delay), поэтому новая попытка анализа не конкурирует
со старой за видео ресурс.
"""
from __future__ import annotations

import asyncio

from veritas.core.errors import SamplingCancelled


class CancellationToken:
    """Cooperative cancellation flag shared between a caller and a running operation."""

    def __init__(self) -> None:
        self._event = asyncio.Event()
        self.reason: str | None = None

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def cancel(self, reason: str = "cancelled by caller") -> None:
        if not self._event.is_set():
            self.reason = reason
            self._event.set()

    def raise_if_cancelled(self) -> None:
        if self._event.is_set():
            raise SamplingCancelled(self.reason or "cancelled")

    async def wait(self) -> None:
        await self._event.wait()

    async def sleep(self, seconds: float) -> None:
        """Sleeps up to *seconds*, waking early (and raising) on cancellation."""
        self.raise_if_cancelled()
        if seconds <= 0:
            return
        try:
            await asyncio.wait_for(self._event.wait(), timeout=seconds)
        except asyncio.TimeoutError:
            return
        self.raise_if_cancelled()
