"""Analysis feature: обращение к Analysis/Translation Service."""

from veritas.features.analysis.analysis_handler import AnalysisHandler
from veritas.features.analysis.translation_handler import TranslationHandler

__all__ = ["AnalysisHandler", "TranslationHandler"]
