from __future__ import annotations

from veritas.llm.base import AnalysisClient, AnalysisInput
from veritas.models.media import FileType, Language
from veritas.models.verdict import AnalysisResult


class NullAnalysisClient(AnalysisClient):
    """Клиент для работы без модели (llm_enabled=False)."""

    async def analyze(self, media: AnalysisInput, file_type: FileType, language: Language) -> AnalysisResult:
        return AnalysisResult.inconclusive(
            "Analysis model is disabled; no forensic analysis was performed.",
            language=language,
        )

    async def translate_text(self, text: str, language: Language) -> str:
        return text

    async def translate_result(self, result: AnalysisResult, language: Language) -> AnalysisResult:
        return result.model_copy(update={"language": language})

    async def aclose(self) -> None:
        return None
