"""LLM package.

Экспортирует:
- AnalysisClient: протокол Analysis/Translation Service
- GeminiClient, NullAnalysisClient: реализации
- build_client: выбор реализации по настройкам
"""

from veritas.llm.base import AnalysisClient, AnalysisInput
from veritas.llm.gemini_client import GeminiClient
from veritas.llm.null_client import NullAnalysisClient
from veritas.llm.settings import GeminiSettings


def build_client(settings: GeminiSettings) -> AnalysisClient:
    """NullAnalysisClient если модель отключена, иначе GeminiClient (нужен API key)."""
    if not settings.enabled:
        print("LLM disabled: using NullAnalysisClient")
        return NullAnalysisClient()
    return GeminiClient(settings)


__all__ = [
    "AnalysisClient",
    "AnalysisInput",
    "GeminiClient",
    "GeminiSettings",
    "NullAnalysisClient",
    "build_client",
]
