"""
TranslationHandler - переводит готовый вердикт на другой язык.

Выполняется только если TARGET_LANGUAGE задан и отличается от языка анализа.
"""
from __future__ import annotations

from typing import Any, ClassVar, FrozenSet

from veritas.core.base_handler import AnalyzerHandler
from veritas.llm.base import AnalysisClient
from veritas.models.keys import Key
from veritas.models.media import Language


class TranslationHandler(AnalyzerHandler):
    """Provides:
    - TRANSLATED_RESULT: AnalysisResult с переведёнными текстовыми полями
    """

    requires: ClassVar[FrozenSet[Key]] = frozenset({Key.ANALYSIS_RESULT, Key.TARGET_LANGUAGE})
    provides: ClassVar[FrozenSet[Key]] = frozenset({Key.TRANSLATED_RESULT})
    progress_message: ClassVar[str | None] = "translating"

    def __init__(self, client: AnalysisClient) -> None:
        self.client = client

    def should_run(self, context: dict[str, Any]) -> bool:
        target: Language | None = context.get("target_language")
        if target is None:
            return False
        return target != context.get("language")

    async def handle(self, context: dict[str, Any]) -> dict[str, Any]:
        print("[4] TranslationHandler")

        target: Language = context["target_language"]
        translated = await self.client.translate_result(context["analysis_result"], target)

        context["translated_result"] = translated

        print(f"✓ Translated verdict to {target.display_name}")

        return context
