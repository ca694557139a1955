"""Models package.

Экспортирует:
- Key: ключи контекста пайплайна
- VideoMetadata, FrameSample, EvidenceBundle: модели семплера
- FileType, Language, MediaFile: входной файл
- AnalysisResult и вложенные модели: вердикт
- to_jsonable: сериализация
"""

from .keys import Key, INPUT_KEYS, LARGE_KEYS
from .media import (
    FileType,
    Language,
    LANGUAGE_NAMES,
    MediaFile,
    detect_file_type,
    guess_mime_type,
    parse_language,
)
from .serde import to_jsonable, to_json_file, to_json_str
from .verdict import (
    AnalysisFinding,
    AnalysisResult,
    DocumentReference,
    FindingVerdict,
    PublicResearchFinding,
    SourceLink,
    VerdictStatus,
)
from .video import EvidenceBundle, FrameSample, VideoMetadata

__all__ = [
    # Keys
    "Key",
    "INPUT_KEYS",
    "LARGE_KEYS",
    # Media
    "FileType",
    "Language",
    "LANGUAGE_NAMES",
    "MediaFile",
    "detect_file_type",
    "guess_mime_type",
    "parse_language",
    # Video
    "VideoMetadata",
    "FrameSample",
    "EvidenceBundle",
    # Verdict
    "AnalysisResult",
    "AnalysisFinding",
    "PublicResearchFinding",
    "DocumentReference",
    "SourceLink",
    "VerdictStatus",
    "FindingVerdict",
    # Serde
    "to_jsonable",
    "to_json_file",
    "to_json_str",
]
