from __future__ import annotations

from typing import Any, Literal, Optional, TypedDict

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from veritas.core.cancellation import CancellationToken
from veritas.llm.settings import GeminiSettings
from veritas.models.media import Language, parse_language


FailurePolicyName = Literal["fail_fast", "best_effort"]


class VeritasSettings(BaseSettings):
    # Video sampler
    sampler_max_frames: int = Field(16, ge=0, description="Frame budget for large videos")
    sampler_jpeg_quality: int = Field(80, ge=1, le=100)
    sampler_settle_delay_seconds: float = Field(
        0.1,
        ge=0.0,
        description="Wait after each seek before reading pixels (skipped for synchronous decoders)",
    )
    sampler_metadata_timeout_seconds: float = Field(10.0, gt=0.0)
    sampler_failure_policy: FailurePolicyName = Field("fail_fast")
    sampling_size_threshold_mb: float = Field(
        10.0,
        ge=0.0,
        description="Videos above this size are sampled; smaller ones are sent raw",
    )

    # Intake
    max_upload_size_mb: float = Field(200.0, gt=0.0)
    temp_dir: str = Field("temp")
    max_finished_tasks: int = Field(100, ge=0, description="Finished API tasks kept in memory")

    default_language: str = Field("en")

    # LLM settings
    llm_enabled: bool = Field(True)
    gemini_api_key: str = Field("", description="API key for the Gemini REST API")
    gemini_base_url: str = Field("https://generativelanguage.googleapis.com/v1beta")
    analysis_model: str = Field("gemini-3-pro-preview")
    translation_model: str = Field("gemini-3-flash-preview")
    analysis_temperature: float = Field(0.2)
    translation_temperature: float = Field(0.3)
    llm_timeout_seconds: float = Field(120.0)
    llm_retries: int = Field(2, ge=0)
    llm_backoff_seconds: float = Field(0.5, ge=0.0)

    model_config = SettingsConfigDict(
        env_prefix="VERITAS_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    @property
    def sampling_size_threshold_bytes(self) -> int:
        return int(self.sampling_size_threshold_mb * 1024 * 1024)

    @property
    def max_upload_size_bytes(self) -> int:
        return int(self.max_upload_size_mb * 1024 * 1024)

    @property
    def language(self) -> Language:
        return parse_language(self.default_language)

    def gemini_settings(self) -> GeminiSettings:
        return GeminiSettings(
            enabled=self.llm_enabled,
            api_key=self.gemini_api_key,
            base_url=self.gemini_base_url,
            analysis_model=self.analysis_model,
            translation_model=self.translation_model,
            analysis_temperature=self.analysis_temperature,
            translation_temperature=self.translation_temperature,
            timeout_seconds=self.llm_timeout_seconds,
            retries=self.llm_retries,
            backoff_seconds=self.llm_backoff_seconds,
        )


class Context(TypedDict, total=False):
    input_path: str
    mime_type: Optional[str]
    language: Language
    target_language: Optional[Language]
    report_path: Optional[str]
    cancel_token: CancellationToken

    media_file: Any
    file_type: Any
    file_name: str
    file_size_bytes: int

    evidence_bundle: Any
    sampled_frames: int
    video_metadata: Any

    analysis_result: Any
    translated_result: Any
    report_written: str

    processing_time_seconds: float
    completed_stages: list[str]
    warnings: list[str]


def build_initial_context(
    settings: VeritasSettings,
    input_path: str,
    *,
    mime_type: Optional[str] = None,
    language: Any = None,
    target_language: Any = None,
    report_path: Optional[str] = None,
    cancel_token: Optional[CancellationToken] = None,
) -> Context:
    if not input_path:
        raise ValueError("input_path is required")

    lang = parse_language(language, default=settings.language)
    target = parse_language(target_language) if target_language else None

    return Context(
        input_path=input_path,
        mime_type=mime_type,
        language=lang,
        target_language=target,
        report_path=report_path,
        cancel_token=cancel_token or CancellationToken(),
        completed_stages=[],
        warnings=[],
    )
