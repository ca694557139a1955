from __future__ import annotations

import asyncio
import base64
import hashlib
import json
import re
import time
from dataclasses import dataclass
from typing import Any

import httpx
from pydantic import ValidationError

from veritas.core.errors import AnalysisError, ConfigurationError, TranslationError
from veritas.llm.base import AnalysisClient, AnalysisInput
from veritas.llm.prompts import (
    TRANSLATION_SYSTEM,
    build_analysis_system,
    build_bundle_parts,
    build_file_parts,
    build_translate_result_prompt,
    build_translate_text_prompt,
)
from veritas.llm.schemas import ANALYSIS_RESULT_SCHEMA
from veritas.llm.settings import GeminiSettings
from veritas.models.media import FileType, Language, MediaFile
from veritas.models.verdict import AnalysisResult
from veritas.models.video import EvidenceBundle


_JSON_RE = re.compile(r"\{.*\}", re.DOTALL)


def _safe_json_loads(s: str) -> Any | None:
    s = (s or "").strip()
    if not s:
        return None
    try:
        return json.loads(s)
    except json.JSONDecodeError:
        m = _JSON_RE.search(s)
        if not m:
            return None
        try:
            return json.loads(m.group(0))
        except json.JSONDecodeError:
            return None


def _extract_text(data: Any) -> str:
    """Склеивает text части первого кандидата generateContent ответа."""
    if not isinstance(data, dict):
        return ""
    candidates = data.get("candidates")
    if not isinstance(candidates, list) or not candidates:
        return ""
    content = candidates[0].get("content") if isinstance(candidates[0], dict) else None
    parts = content.get("parts") if isinstance(content, dict) else None
    if not isinstance(parts, list):
        return ""
    return "".join(p.get("text", "") for p in parts if isinstance(p, dict) and isinstance(p.get("text"), str))


@dataclass
class _Cache:
    enabled: bool
    max_items: int
    items: dict[str, Any]

    def get(self, key: str) -> Any | None:
        if not self.enabled:
            return None
        return self.items.get(key)

    def set(self, key: str, value: Any) -> None:
        if not self.enabled:
            return
        if len(self.items) >= self.max_items:
            self.items.pop(next(iter(self.items)))
        self.items[key] = value


class GeminiClient(AnalysisClient):
    """Analysis + translation через Gemini REST API (models/{model}:generateContent)."""

    def __init__(self, settings: GeminiSettings, transport: httpx.AsyncBaseTransport | None = None) -> None:
        if not settings.api_key:
            raise ConfigurationError("Gemini API key is not set (VERITAS_GEMINI_API_KEY)")

        self.settings = settings
        self._client = httpx.AsyncClient(
            timeout=settings.timeout_seconds,
            transport=transport,
            headers={"x-goog-api-key": settings.api_key},
        )
        self._cache = _Cache(settings.cache_enabled, settings.cache_max_items, {})

    async def analyze(self, media: AnalysisInput, file_type: FileType, language: Language) -> AnalysisResult:
        if isinstance(media, EvidenceBundle):
            parts = build_bundle_parts(media)
        elif isinstance(media, MediaFile):
            raw = await asyncio.to_thread(media.read_bytes)
            parts = build_file_parts(media, base64.b64encode(raw).decode("ascii"))
        else:
            raise TypeError(f"Unsupported analysis input: {type(media).__name__}")

        started = time.time()
        text = await self._generate(
            model=self.settings.analysis_model,
            contents=[{"role": "user", "parts": parts}],
            system_instruction=build_analysis_system(language),
            generation_config={
                "responseMimeType": "application/json",
                "responseSchema": ANALYSIS_RESULT_SCHEMA,
                "temperature": self.settings.analysis_temperature,
            },
        )
        print(f"GeminiClient: analysis ({file_type.value}, {len(parts)} parts) {time.time() - started:.2f}s")

        if not text:
            raise AnalysisError("Failed to get a valid analysis from the AI model: empty response")

        parsed = _safe_json_loads(text)
        if not isinstance(parsed, dict):
            raise AnalysisError("Failed to get a valid analysis from the AI model: response is not JSON")

        try:
            result = AnalysisResult.model_validate(parsed)
        except ValidationError as exc:
            raise AnalysisError(f"Failed to get a valid analysis from the AI model: {exc}") from exc

        return result.model_copy(update={"language": language})

    async def translate_text(self, text: str, language: Language) -> str:
        if not (text or "").strip():
            return text

        cache_key = self._cache_key("text", language.value, text)
        cached = self._cache.get(cache_key)
        if cached is not None:
            return str(cached)

        translated = await self._generate(
            model=self.settings.translation_model,
            contents=[{"role": "user", "parts": [{"text": build_translate_text_prompt(text, language)}]}],
            generation_config={"temperature": self.settings.translation_temperature},
        )
        translated = (translated or "").strip()
        if not translated:
            raise TranslationError("Failed to get a valid translation from the AI model: empty response")

        self._cache.set(cache_key, translated)
        return translated

    async def translate_result(self, result: AnalysisResult, language: Language) -> AnalysisResult:
        text = await self._generate(
            model=self.settings.translation_model,
            contents=[{"role": "user", "parts": [{"text": build_translate_result_prompt(result, language)}]}],
            system_instruction=TRANSLATION_SYSTEM,
            generation_config={
                "responseMimeType": "application/json",
                "responseSchema": ANALYSIS_RESULT_SCHEMA,
            },
        )
        if not text:
            raise TranslationError("Failed to get a valid translation from the AI model: empty response")

        parsed = _safe_json_loads(text)
        if not isinstance(parsed, dict):
            raise TranslationError("Failed to get a valid translation from the AI model: response is not JSON")

        try:
            return result.with_translated_text(parsed, language=language)
        except ValueError as exc:
            raise TranslationError(f"Failed to get a valid translation from the AI model: {exc}") from exc

    async def aclose(self) -> None:
        await self._client.aclose()

    async def _generate(
        self,
        model: str,
        contents: list[dict[str, Any]],
        generation_config: dict[str, Any],
        system_instruction: str | None = None,
    ) -> str | None:
        url = f"{self.settings.base_url.rstrip('/')}/models/{model}:generateContent"
        payload: dict[str, Any] = {
            "contents": contents,
            "generationConfig": generation_config,
        }
        if system_instruction:
            payload["systemInstruction"] = {"parts": [{"text": system_instruction}]}

        attempt = 0
        last_exc: Exception | None = None

        while attempt <= self.settings.retries:
            attempt += 1
            started = time.time()
            try:
                r = await self._client.post(url, json=payload)
                r.raise_for_status()
                return _extract_text(r.json())
            except (httpx.HTTPError, ValueError) as exc:
                last_exc = exc
                elapsed_ms = int((time.time() - started) * 1000)
                print(f"GeminiClient: generateContent failed (model={model}, attempt={attempt}, {elapsed_ms}ms): {exc}")

                if attempt > self.settings.retries:
                    break
                await asyncio.sleep(self.settings.backoff_seconds * (2 ** (attempt - 1)))

        print(f"GeminiClient: giving up after retries, last error: {last_exc}")
        return None

    def _cache_key(self, kind: str, lang: str, text: str) -> str:
        src = f"{kind}|{lang}|{text}"
        return hashlib.sha256(src.encode("utf-8")).hexdigest()
