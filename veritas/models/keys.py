"""
Pipeline Keys - перечень ключей контекста для requires/provides контрактов.

Handler'ы работают с context dict по строковым значениям ключей,
runner проверяет requires перед каждым шагом.
"""
from __future__ import annotations

from enum import Enum
from typing import Final


class Key(str, Enum):
    """Все ключи контекста пайплайна."""

    # === Inputs ===
    INPUT_PATH = "input_path"
    MIME_TYPE = "mime_type"
    LANGUAGE = "language"
    TARGET_LANGUAGE = "target_language"
    REPORT_PATH = "report_path"
    CANCEL_TOKEN = "cancel_token"

    # === Intake ===
    MEDIA_FILE = "media_file"
    FILE_TYPE = "file_type"
    FILE_NAME = "file_name"
    FILE_SIZE_BYTES = "file_size_bytes"

    # === Sampling ===
    EVIDENCE_BUNDLE = "evidence_bundle"
    VIDEO_METADATA = "video_metadata"

    # === Results ===
    ANALYSIS_RESULT = "analysis_result"
    TRANSLATED_RESULT = "translated_result"
    REPORT_WRITTEN = "report_written"

    # === Metrics ===
    PROCESSING_TIME = "processing_time_seconds"
    COMPLETED_STAGES = "completed_stages"
    WARNINGS = "warnings"


# Ключи, которые задаёт вызывающий код, а не handler'ы
INPUT_KEYS: Final[frozenset[Key]] = frozenset({
    Key.INPUT_PATH,
    Key.MIME_TYPE,
    Key.LANGUAGE,
    Key.TARGET_LANGUAGE,
    Key.REPORT_PATH,
    Key.CANCEL_TOKEN,
})


# Ключи с бинарными/большими данными - не печатаются целиком
LARGE_KEYS: Final[frozenset[Key]] = frozenset({
    Key.EVIDENCE_BUNDLE,
})
