from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class GeminiSettings:
    enabled: bool = True
    api_key: str = ""
    base_url: str = "https://generativelanguage.googleapis.com/v1beta"
    analysis_model: str = "gemini-3-pro-preview"
    translation_model: str = "gemini-3-flash-preview"
    analysis_temperature: float = 0.2
    translation_temperature: float = 0.3
    timeout_seconds: float = 120.0
    retries: int = 2
    backoff_seconds: float = 0.5

    cache_enabled: bool = True
    cache_max_items: int = 512
