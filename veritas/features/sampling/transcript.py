from __future__ import annotations

from typing import Protocol

from veritas.models.video import VideoMetadata


PLACEHOLDER_TRANSCRIPT = (
    "Audio was present in the video. The content of the audio should be analyzed for "
    "authenticity and consistency with the video frames. [Placeholder for actual transcript]"
)


class TranscriptProvider(Protocol):
    def transcribe(self, metadata: VideoMetadata) -> str:
        ...


class PlaceholderTranscriptProvider:
    """Stub: аудио дорожка не распознаётся, возвращается фиксированный текст."""

    def transcribe(self, metadata: VideoMetadata) -> str:
        return PLACEHOLDER_TRANSCRIPT
