"""Video sampling feature.

Экспортирует:
- VideoSampler: последовательный seek-and-capture семплер
- VideoSamplingHandler: шаг пайплайна для больших видео
- политики, провайдеры ресурса и capture backend
"""

from veritas.features.sampling.capture import OpenCVCaptureBackend, OpenCVCaptureSurface
from veritas.features.sampling.policy import FailurePolicy, UniformSamplingPolicy
from veritas.features.sampling.transcript import PLACEHOLDER_TRANSCRIPT, PlaceholderTranscriptProvider
from veritas.features.sampling.video_sampler import DEFAULT_MAX_FRAMES, VideoSampler
from veritas.features.sampling.video_sampling_handler import VideoSamplingHandler
from veritas.features.sampling.video_source import OpenCVResourceProvider, OpenCVVideoHandle

__all__ = [
    "VideoSampler",
    "VideoSamplingHandler",
    "DEFAULT_MAX_FRAMES",
    "FailurePolicy",
    "UniformSamplingPolicy",
    "PLACEHOLDER_TRANSCRIPT",
    "PlaceholderTranscriptProvider",
    "OpenCVCaptureBackend",
    "OpenCVCaptureSurface",
    "OpenCVResourceProvider",
    "OpenCVVideoHandle",
]
