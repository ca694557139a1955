"""
Veritas - FastAPI Application

REST API для проверки подлинности медиа файлов.
Анализ выполняется in-process asyncio задачей, отмена через CancellationToken.

Запуск:
    uvicorn veritas.api.main:app --reload

Документация:
    http://localhost:8000/docs
"""
from __future__ import annotations

import asyncio
import uuid
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict, List, Optional

from fastapi import Depends, FastAPI, File, Form, HTTPException, Query, Request, UploadFile
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response
from pydantic import BaseModel, Field

from veritas import __version__
from veritas.api.tasks import TaskRecord, TaskRegistry, public_error_message
from veritas.config.settings import Context, VeritasSettings, build_initial_context
from veritas.core.errors import ConfigurationError, TranslationError
from veritas.features.report import render_report
from veritas.features.sampling import VideoSampler
from veritas.llm import AnalysisClient, build_client
from veritas.models.media import FileType, Language, detect_file_type, guess_mime_type, parse_language
from veritas.models.verdict import AnalysisResult
from veritas.service import run_verification


UPLOAD_CHUNK_SIZE = 1024 * 1024


# ============================================================================
# Pydantic Models
# ============================================================================

class TaskStatus(BaseModel):
    """Статус задачи анализа."""
    task_id: str
    status: str  # pending, processing, completed, failed, cancelled
    progress: float = 0.0
    message: Optional[str] = None
    created_at: Optional[str] = None
    completed_at: Optional[str] = None
    result_url: Optional[str] = None
    error: Optional[str] = None
    error_type: Optional[str] = None


class AnalysisResultResponse(BaseModel):
    """Результат анализа."""
    task_id: str
    file_name: str
    file_type: str
    language: str
    result: Dict[str, Any]
    translated_result: Optional[Dict[str, Any]] = None
    sampled_frames: Optional[int] = None
    warnings: List[str] = Field(default_factory=list)
    processing_time_seconds: float = 0.0


class TranslateRequest(BaseModel):
    text: str = Field(..., description="Текст для перевода")
    language: str = Field(..., min_length=2, description="Код или название языка")


class TranslateResponse(BaseModel):
    text: str
    language: str


class HealthResponse(BaseModel):
    """Health check response."""
    status: str
    version: str
    timestamp: str
    llm_enabled: bool
    analysis_model: str


# ============================================================================
# Dependencies
# ============================================================================

@lru_cache(maxsize=1)
def get_settings() -> VeritasSettings:
    return VeritasSettings()


def get_registry(request: Request) -> TaskRegistry:
    return request.app.state.registry


def get_client(request: Request, settings: VeritasSettings = Depends(get_settings)) -> AnalysisClient:
    """Клиент модели создаётся при первом запросе (нужен API key)."""
    client = getattr(request.app.state, "client", None)
    if client is None:
        client = build_client(settings.gemini_settings())
        request.app.state.client = client
    return client


def get_sampler() -> Optional[VideoSampler]:
    """None = семплер по настройкам."""
    return None


# ============================================================================
# FastAPI App
# ============================================================================

@asynccontextmanager
async def lifespan(app: FastAPI):
    app.state.registry = TaskRegistry(max_finished=get_settings().max_finished_tasks)
    app.state.client = None
    yield
    await app.state.registry.shutdown()
    if app.state.client is not None:
        await app.state.client.aclose()


app = FastAPI(
    title="Veritas API",
    description="REST API для проверки медиа на манипуляции и AI генерацию",
    version=__version__,
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # В production ограничить
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def _require_record(registry: TaskRegistry, task_id: str) -> TaskRecord:
    record = registry.get(task_id)
    if record is None:
        raise HTTPException(404, "Task not found")
    return record


def _require_completed(registry: TaskRegistry, task_id: str) -> Context:
    record = _require_record(registry, task_id)
    if record.status != "completed" or record.context is None:
        raise HTTPException(400, f"Task not completed. Status: {record.status}")
    return record.context


def _parse_language_or_400(value: Optional[str], default: Language) -> Language:
    try:
        return parse_language(value, default=default)
    except ValueError as exc:
        raise HTTPException(400, str(exc))


def _upstream_error(exc: Exception, status_code: int = 502) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"detail": public_error_message(exc), "error_type": type(exc).__name__},
    )


@app.exception_handler(ConfigurationError)
async def configuration_error_handler(request: Request, exc: ConfigurationError) -> JSONResponse:
    print(f"Veritas API: analysis client unavailable: {exc}")
    return _upstream_error(exc, status_code=503)


async def _save_upload(upload: UploadFile, path: Path, max_bytes: int) -> int:
    size = 0
    path.parent.mkdir(parents=True, exist_ok=True)
    try:
        with open(path, "wb") as f:
            while chunk := await upload.read(UPLOAD_CHUNK_SIZE):
                size += len(chunk)
                if size > max_bytes:
                    raise HTTPException(413, f"File too large (max: {max_bytes / 1024 / 1024:.0f}MB)")
                f.write(chunk)
    except BaseException:
        path.unlink(missing_ok=True)
        raise
    return size


# ============================================================================
# Endpoints
# ============================================================================

@app.get("/health", response_model=HealthResponse, tags=["System"])
async def health_check(settings: VeritasSettings = Depends(get_settings)):
    """Health check endpoint."""
    return HealthResponse(
        status="healthy",
        version=__version__,
        timestamp=datetime.now(timezone.utc).isoformat(),
        llm_enabled=settings.llm_enabled,
        analysis_model=settings.analysis_model,
    )


@app.post("/analyze", response_model=TaskStatus, status_code=202, tags=["Analysis"])
async def create_analysis(
    file: UploadFile = File(...),
    language: Optional[str] = Form(None),
    translate_to: Optional[str] = Form(None),
    settings: VeritasSettings = Depends(get_settings),
    registry: TaskRegistry = Depends(get_registry),
    client: AnalysisClient = Depends(get_client),
    sampler: Optional[VideoSampler] = Depends(get_sampler),
):
    """
    Создаёт задачу анализа файла.

    Возвращает task_id для отслеживания прогресса.
    Большие видео сначала сжимаются в evidence bundle.
    """
    if not file.filename:
        raise HTTPException(400, "Filename is required")

    lang = _parse_language_or_400(language, settings.language)
    target = _parse_language_or_400(translate_to, settings.language) if translate_to else None

    mime = (file.content_type or "").strip()
    if not mime or mime == "application/octet-stream":
        mime = guess_mime_type(file.filename)
    if detect_file_type(mime) is FileType.UNSUPPORTED:
        raise HTTPException(400, f"Unsupported file type: {mime}")

    task_id = str(uuid.uuid4())
    upload_path = Path(settings.temp_dir) / f"{task_id}{Path(file.filename).suffix.lower()}"
    await _save_upload(file, upload_path, settings.max_upload_size_bytes)

    record = registry.create(file.filename, upload_path=upload_path, task_id=task_id)

    async def runner(rec: TaskRecord) -> Context:
        context = build_initial_context(
            settings,
            str(upload_path),
            mime_type=mime,
            language=lang,
            target_language=target,
            cancel_token=rec.token,
        )
        context["file_name"] = rec.file_name
        return await run_verification(
            context,
            settings,
            client,
            sampler=sampler,
            on_progress=registry.progress(rec),
        )

    registry.start(record, runner)
    return TaskStatus(**registry.to_status(record))


@app.get("/tasks", response_model=List[TaskStatus], tags=["Analysis"])
async def list_tasks(
    limit: int = Query(10, ge=1, le=100),
    status: Optional[str] = None,
    registry: TaskRegistry = Depends(get_registry),
):
    """Список задач."""
    records = [r for r in registry.all() if status is None or r.status == status]
    return [TaskStatus(**registry.to_status(r)) for r in records[:limit]]


@app.get("/tasks/{task_id}", response_model=TaskStatus, tags=["Analysis"])
async def get_task_status(task_id: str, registry: TaskRegistry = Depends(get_registry)):
    """Получает статус задачи анализа."""
    return TaskStatus(**registry.to_status(_require_record(registry, task_id)))


@app.delete("/tasks/{task_id}", tags=["Analysis"])
async def delete_task(task_id: str, registry: TaskRegistry = Depends(get_registry)):
    """Отменяет задачу (если она ещё идёт) и удаляет её вместе с файлами."""
    record = registry.get(task_id)
    if record is None:
        raise HTTPException(404, "Task not found")

    was_running = not record.finished
    await registry.delete(task_id)
    return {"message": "Task cancelled" if was_running else "Task deleted", "task_id": task_id}


@app.get("/results/{task_id}", response_model=AnalysisResultResponse, tags=["Results"])
async def get_analysis_result(task_id: str, registry: TaskRegistry = Depends(get_registry)):
    """Получает вердикт."""
    context = _require_completed(registry, task_id)
    result: AnalysisResult = context["analysis_result"]
    translated: Optional[AnalysisResult] = context.get("translated_result")

    return AnalysisResultResponse(
        task_id=task_id,
        file_name=context.get("file_name", ""),
        file_type=context["file_type"].value,
        language=context["language"].value,
        result=result.to_dict(),
        translated_result=translated.to_dict() if translated is not None else None,
        sampled_frames=context.get("sampled_frames"),
        warnings=list(context.get("warnings", [])),
        processing_time_seconds=context.get("processing_time_seconds", 0.0),
    )


@app.get("/results/{task_id}/report", tags=["Results"])
async def download_report(
    task_id: str,
    translated: bool = Query(True, description="Использовать переведённый вердикт, если он есть"),
    registry: TaskRegistry = Depends(get_registry),
):
    """Скачивает PDF отчёт."""
    context = _require_completed(registry, task_id)
    result = (translated and context.get("translated_result")) or context["analysis_result"]
    file_name = context.get("file_name", "file")

    pdf = await asyncio.to_thread(render_report, result, file_name)
    return Response(
        content=pdf,
        media_type="application/pdf",
        headers={"Content-Disposition": f'attachment; filename="veritas_report_{task_id}.pdf"'},
    )


@app.post("/results/{task_id}/translate", tags=["Results"])
async def translate_result(
    task_id: str,
    language: str = Query(..., min_length=2),
    registry: TaskRegistry = Depends(get_registry),
    client: AnalysisClient = Depends(get_client),
):
    """Переводит вердикт задачи; результат сохраняется как translated_result."""
    context = _require_completed(registry, task_id)
    lang = _parse_language_or_400(language, context["language"])

    result: AnalysisResult = context["analysis_result"]
    if lang == context["language"]:
        context.pop("translated_result", None)
        return result.to_dict()

    try:
        translated = await client.translate_result(result, lang)
    except TranslationError as exc:
        return _upstream_error(exc)

    context["translated_result"] = translated
    return translated.to_dict()


@app.post("/translate", response_model=TranslateResponse, tags=["Translation"])
async def translate_text(
    request: TranslateRequest,
    client: AnalysisClient = Depends(get_client),
):
    """Переводит произвольный текст (подписи UI, фрагменты вердикта)."""
    lang = _parse_language_or_400(request.language, Language.EN)
    try:
        text = await client.translate_text(request.text, lang)
    except TranslationError as exc:
        return _upstream_error(exc)
    return TranslateResponse(text=text, language=lang.value)
