"""
Media Models - типы файлов, языки и входной файл.
"""
from __future__ import annotations

import mimetypes
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any, Optional


class FileType(str, Enum):
    """Категория загруженного файла."""
    IMAGE = "image"
    VIDEO = "video"
    DOCUMENT = "document"
    AUDIO = "audio"
    UNSUPPORTED = "unsupported"


class Language(str, Enum):
    """Языки ответа модели и перевода."""
    EN = "en"
    ES = "es"
    FR = "fr"
    AR = "ar"
    ZH = "zh"
    HI = "hi"
    TR = "tr"
    AM = "am"
    DE = "de"
    PT = "pt"
    RU = "ru"
    JA = "ja"
    OM = "om"

    @property
    def display_name(self) -> str:
        return LANGUAGE_NAMES[self]


LANGUAGE_NAMES: dict[Language, str] = {
    Language.EN: "English",
    Language.ES: "Spanish",
    Language.FR: "French",
    Language.AR: "Arabic",
    Language.ZH: "Chinese",
    Language.HI: "Hindi",
    Language.TR: "Turkish",
    Language.AM: "Amharic",
    Language.DE: "German",
    Language.PT: "Portuguese",
    Language.RU: "Russian",
    Language.JA: "Japanese",
    Language.OM: "Oromo",
}


DOCUMENT_MIME_TYPES: frozenset[str] = frozenset({
    "application/pdf",
    "application/msword",
    "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
})


def detect_file_type(mime_type: Optional[str]) -> FileType:
    """Maps a MIME type onto a FileType."""
    mime = (mime_type or "").strip().lower()
    if mime.startswith("image/"):
        return FileType.IMAGE
    if mime.startswith("video/"):
        return FileType.VIDEO
    if mime in DOCUMENT_MIME_TYPES:
        return FileType.DOCUMENT
    if mime.startswith("audio/"):
        return FileType.AUDIO
    return FileType.UNSUPPORTED


def guess_mime_type(file_name: str) -> str:
    mime, _ = mimetypes.guess_type(file_name)
    return mime or "application/octet-stream"


def parse_language(value: Any, default: Language = Language.EN) -> Language:
    """Accepts a code ("ru") or an English name ("Russian")."""
    if isinstance(value, Language):
        return value
    if not isinstance(value, str) or not value.strip():
        return default
    x = value.strip().lower()
    try:
        return Language(x)
    except ValueError:
        pass
    for lang, name in LANGUAGE_NAMES.items():
        if name.lower() == x:
            return lang
    raise ValueError(f"Unsupported language: {value}")


@dataclass(frozen=True)
class MediaFile:
    """Загруженный файл, готовый к анализу."""
    path: str
    name: str
    mime_type: str
    file_type: FileType
    size_bytes: int

    def read_bytes(self) -> bytes:
        return Path(self.path).read_bytes()

    def to_dict(self) -> dict[str, Any]:
        return {
            "path": self.path,
            "name": self.name,
            "mime_type": self.mime_type,
            "file_type": self.file_type.value,
            "size_bytes": self.size_bytes,
        }
