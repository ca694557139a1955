"""
ReadFileHandler - валидирует и регистрирует входной файл.

Extractor: проверяет существование, определяет FileType по MIME
(или по имени файла), отклоняет неподдерживаемые и слишком большие файлы.
"""
from __future__ import annotations

from pathlib import Path
from typing import Any, ClassVar, FrozenSet, Optional

from veritas.core.base_handler import ExtractorHandler
from veritas.core.errors import UnsupportedFileError
from veritas.models.keys import Key
from veritas.models.media import FileType, MediaFile, detect_file_type, guess_mime_type


DEFAULT_MAX_FILE_SIZE_BYTES: int = 200 * 1024 * 1024


def read_media_file(
    input_path: str,
    mime_type: Optional[str] = None,
    max_file_size_bytes: int = DEFAULT_MAX_FILE_SIZE_BYTES,
    original_name: Optional[str] = None,
) -> MediaFile:
    """Builds a MediaFile for *input_path* or raises."""
    path = Path(input_path).resolve()

    if not path.exists():
        raise FileNotFoundError(f"File not found: {path}")
    if not path.is_file():
        raise IsADirectoryError(f"Path is not a file: {path}")

    name = original_name or path.name
    mime = (mime_type or "").strip() or guess_mime_type(name)
    file_type = detect_file_type(mime)
    if file_type is FileType.UNSUPPORTED:
        raise UnsupportedFileError(f"Unsupported file type: {mime} ({name})")

    size_bytes = path.stat().st_size
    if size_bytes > max_file_size_bytes:
        max_mb = max_file_size_bytes / (1024 ** 2)
        file_mb = size_bytes / (1024 ** 2)
        raise UnsupportedFileError(f"File too large: {file_mb:.1f}MB (max: {max_mb:.1f}MB)")

    return MediaFile(
        path=str(path),
        name=name,
        mime_type=mime,
        file_type=file_type,
        size_bytes=size_bytes,
    )


class ReadFileHandler(ExtractorHandler):
    """Handler для чтения и валидации загруженного файла.

    Provides:
    - MEDIA_FILE: MediaFile
    - FILE_TYPE, FILE_NAME, FILE_SIZE_BYTES
    """

    requires: ClassVar[FrozenSet[Key]] = frozenset({Key.INPUT_PATH})
    provides: ClassVar[FrozenSet[Key]] = frozenset({
        Key.MEDIA_FILE,
        Key.FILE_TYPE,
        Key.FILE_NAME,
        Key.FILE_SIZE_BYTES,
    })

    def __init__(self, max_file_size_bytes: int | None = None) -> None:
        self.max_file_size_bytes = max_file_size_bytes or DEFAULT_MAX_FILE_SIZE_BYTES

    async def handle(self, context: dict[str, Any]) -> dict[str, Any]:
        print("[1] ReadFileHandler")

        media = read_media_file(
            context["input_path"],
            mime_type=context.get("mime_type"),
            max_file_size_bytes=self.max_file_size_bytes,
            original_name=context.get("file_name"),
        )

        context["media_file"] = media
        context["file_type"] = media.file_type
        context["file_name"] = media.name
        context["file_size_bytes"] = media.size_bytes

        print(f"✓ File read: {media.name} ({media.file_type.value}, {media.size_bytes / 1024 / 1024:.1f} MB)")

        return context
