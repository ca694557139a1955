from __future__ import annotations

from typing import Protocol, Union

from veritas.models.media import FileType, Language, MediaFile
from veritas.models.verdict import AnalysisResult
from veritas.models.video import EvidenceBundle


AnalysisInput = Union[MediaFile, EvidenceBundle]


class AnalysisClient(Protocol):
    async def analyze(
        self,
        media: AnalysisInput,
        file_type: FileType,
        language: Language,
    ) -> AnalysisResult:
        ...

    async def translate_text(self, text: str, language: Language) -> str:
        ...

    async def translate_result(
        self,
        result: AnalysisResult,
        language: Language,
    ) -> AnalysisResult:
        ...

    async def aclose(self) -> None:
        ...
