"""
Sampling policies - какие timestamps снимать и что делать при сбое кадра.
"""
from __future__ import annotations

import math
from enum import Enum
from typing import Protocol


class FailurePolicy(str, Enum):
    """Поведение при ошибке seek/decode посреди цикла."""
    FAIL_FAST = "fail_fast"      # ошибка, кадры отбрасываются
    BEST_EFFORT = "best_effort"  # вернуть уже снятые кадры


class SamplingPolicy(Protocol):
    def timestamps(self, duration: float, max_frames: int) -> list[float]:
        ...


class UniformSamplingPolicy:
    """Равномерные timestamps: interval = duration / max_frames, начиная с 0.

    Вырожденные длительности:
    - duration == 0 -> пустой список
    - duration не конечна -> один кадр на 0.0
    """

    def timestamps(self, duration: float, max_frames: int) -> list[float]:
        if max_frames < 0:
            raise ValueError(f"max_frames must be >= 0, got {max_frames}")
        if max_frames == 0:
            return []
        if not math.isfinite(duration):
            return [0.0]
        if duration <= 0:
            return []

        interval = duration / max_frames
        result: list[float] = []
        for i in range(max_frames):
            t = i * interval
            if t >= duration:
                break
            result.append(t)
        return result
