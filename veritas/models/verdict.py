"""
Verdict Models - структурированный ответ Analysis Service.

Сериализуются с camelCase alias (trustScore, publicResearch, sourceUrl),
как их возвращает модель по JSON-схеме.
"""
from __future__ import annotations

from enum import Enum
from typing import Any, List, Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .media import Language


class VerdictStatus(str, Enum):
    """Общий вердикт по файлу."""
    AUTHENTIC = "Authentic"
    SUSPICIOUS = "Suspicious"
    LIKELY_FAKE = "Likely Fake"
    INCONCLUSIVE = "Inconclusive"


class FindingVerdict(str, Enum):
    """Вердикт по отдельной находке."""
    AUTHENTIC = "Authentic"
    SUSPICIOUS = "Suspicious"
    MANIPULATED = "Manipulated"


class _VerdictModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")


class AnalysisFinding(_VerdictModel):
    finding: str
    explanation: str
    verdict: FindingVerdict


class PublicResearchFinding(_VerdictModel):
    title: str
    summary: str
    source_url: str = Field(alias="sourceUrl")
    source_name: str = Field(alias="sourceName")


class DocumentReference(_VerdictModel):
    title: str
    url: str


class SourceLink(_VerdictModel):
    title: str
    url: str


class AnalysisResult(_VerdictModel):
    """Verdict returned by the analysis model."""
    trust_score: int = Field(alias="trustScore")
    status: VerdictStatus
    summary: str
    findings: List[AnalysisFinding] = Field(default_factory=list)
    public_research: List[PublicResearchFinding] = Field(default_factory=list, alias="publicResearch")
    documents: List[DocumentReference] = Field(default_factory=list)
    sources: List[SourceLink] = Field(default_factory=list)
    language: Optional[Language] = None

    @field_validator("trust_score", mode="before")
    @classmethod
    def _clamp_score(cls, v: Any) -> int:
        # Модель иногда отдаёт float или выходит за диапазон
        return max(0, min(int(round(float(v))), 100))

    @field_validator("public_research", "documents", "sources", mode="before")
    @classmethod
    def _none_to_empty(cls, v: Any) -> Any:
        return [] if v is None else v

    def to_dict(self) -> dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)

    def with_translated_text(self, translated: Mapping[str, Any], language: Optional[Language] = None) -> AnalysisResult:
        """Берёт из *translated* только текстовые поля.

        Score, status, verdicts и URL остаются от оригинала. Если длины
        списков не совпадают, структура считается нарушенной (ValueError).
        """
        def items(key: str, expected: int) -> list[Any]:
            value = translated.get(key)
            if value is None:
                value = []
            if not isinstance(value, list) or len(value) != expected:
                got = len(value) if isinstance(value, list) else type(value).__name__
                raise ValueError(f"Translated '{key}' does not match original structure ({got} != {expected})")
            return value

        findings = items("findings", len(self.findings))
        research = items("publicResearch", len(self.public_research))
        documents = items("documents", len(self.documents))
        sources = items("sources", len(self.sources))

        return self.model_copy(update={
            "summary": _text(translated, "summary", self.summary),
            "findings": [
                f.model_copy(update={
                    "finding": _text(t, "finding", f.finding),
                    "explanation": _text(t, "explanation", f.explanation),
                })
                for f, t in zip(self.findings, findings)
            ],
            "public_research": [
                r.model_copy(update={
                    "title": _text(t, "title", r.title),
                    "summary": _text(t, "summary", r.summary),
                })
                for r, t in zip(self.public_research, research)
            ],
            "documents": [
                d.model_copy(update={"title": _text(t, "title", d.title)})
                for d, t in zip(self.documents, documents)
            ],
            "sources": [
                s.model_copy(update={"title": _text(t, "title", s.title)})
                for s, t in zip(self.sources, sources)
            ],
            "language": language if language is not None else self.language,
        })

    @classmethod
    def inconclusive(cls, summary: str, language: Optional[Language] = None) -> AnalysisResult:
        return cls(
            trust_score=50,
            status=VerdictStatus.INCONCLUSIVE,
            summary=summary,
            findings=[],
            language=language,
        )


def _text(item: Any, field: str, fallback: str) -> str:
    value = item.get(field) if isinstance(item, Mapping) else None
    if isinstance(value, str) and value.strip():
        return value
    return fallback
