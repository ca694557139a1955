"""
AnalysisHandler - отправляет файл (или evidence bundle) в Analysis Service.

Большие видео к этому моменту уже сжаты VideoSamplingHandler'ом,
в модель уходит bundle. Остальные файлы уходят целиком.
"""
from __future__ import annotations

import time
from typing import Any, ClassVar, FrozenSet

from veritas.core.base_handler import AnalyzerHandler
from veritas.llm.base import AnalysisClient
from veritas.models.keys import Key
from veritas.models.media import Language


class AnalysisHandler(AnalyzerHandler):
    """Provides:
    - ANALYSIS_RESULT: AnalysisResult на языке LANGUAGE
    """

    requires: ClassVar[FrozenSet[Key]] = frozenset({Key.MEDIA_FILE, Key.LANGUAGE})
    provides: ClassVar[FrozenSet[Key]] = frozenset({Key.ANALYSIS_RESULT})
    progress_message: ClassVar[str | None] = "analyzing"

    def __init__(self, client: AnalysisClient) -> None:
        self.client = client

    async def handle(self, context: dict[str, Any]) -> dict[str, Any]:
        print("[3] AnalysisHandler")

        media = context["media_file"]
        bundle = context.get("evidence_bundle")
        language: Language = context["language"]

        start = time.monotonic()
        result = await self.client.analyze(bundle or media, media.file_type, language)

        context["analysis_result"] = result

        source = f"{bundle.frame_count} frames" if bundle is not None else "full file"
        print(
            f"✓ Analysis: {result.status.value}, trust={result.trust_score} "
            f"({source}, {time.monotonic() - start:.2f}s)"
        )

        return context
