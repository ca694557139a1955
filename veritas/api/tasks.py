"""
In-process реестр задач анализа.

Каждая задача это asyncio.Task + CancellationToken. Отмена через токен
останавливает семплер в ближайшей точке приостановки, поэтому повторная
попытка не конкурирует со старой за тот же видео ресурс.
"""
from __future__ import annotations

import asyncio
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Awaitable, Callable, Dict, List, Optional

from veritas.config.settings import Context
from veritas.core.cancellation import CancellationToken
from veritas.core.errors import (
    AnalysisError,
    ConfigurationError,
    SamplingCancelled,
    SamplingError,
    TranslationError,
    UnsupportedFileError,
    VideoLoadError,
)


# Пользователь видит общее сообщение, тип исключения уходит в error_type
PUBLIC_ERRORS: Dict[type, str] = {
    UnsupportedFileError: "Unsupported file. Please upload an image, video, document or audio file within the size limit.",
    VideoLoadError: "Failed to load the video. It may be corrupt or in an unsupported format.",
    SamplingError: "Failed to process the video.",
    AnalysisError: "Failed to get a valid analysis from the AI model.",
    TranslationError: "Failed to translate the analysis.",
    ConfigurationError: "The analysis service is not configured.",
}
GENERIC_ERROR = "An unexpected error occurred during analysis."


def public_error_message(exc: BaseException) -> str:
    for cls in type(exc).__mro__:
        if cls in PUBLIC_ERRORS:
            return PUBLIC_ERRORS[cls]
    return GENERIC_ERROR


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


@dataclass
class TaskRecord:
    task_id: str
    file_name: str
    upload_path: Optional[Path] = None
    status: str = "pending"  # pending, processing, completed, failed, cancelled
    progress: float = 0.0
    message: Optional[str] = None
    created_at: str = field(default_factory=_now)
    completed_at: Optional[str] = None
    error: Optional[str] = None
    error_type: Optional[str] = None
    context: Optional[Context] = None
    token: CancellationToken = field(default_factory=CancellationToken)
    task: Optional[asyncio.Task] = field(default=None, repr=False)

    @property
    def finished(self) -> bool:
        return self.status in {"completed", "failed", "cancelled"}

    def cleanup_upload(self) -> None:
        if self.upload_path is None:
            return
        try:
            self.upload_path.unlink(missing_ok=True)
        except OSError as exc:
            print(f"TaskRegistry: failed to remove upload {self.upload_path}: {exc}")
        self.upload_path = None


Runner = Callable[[TaskRecord], Awaitable[Context]]


DEFAULT_MAX_FINISHED = 100


def compact_context(context: Context) -> Context:
    """Оставляет в контексте задачи только то, что нужно для /results."""
    bundle = context.pop("evidence_bundle", None)
    if bundle is not None:
        context["sampled_frames"] = bundle.frame_count
    context.pop("cancel_token", None)
    return context


class TaskRegistry:
    """Задачи в памяти процесса.

    Хранится не больше max_finished завершённых задач, самые старые вытесняются.
    """

    def __init__(self, max_finished: int = DEFAULT_MAX_FINISHED) -> None:
        self.max_finished = max(0, max_finished)
        self._tasks: Dict[str, TaskRecord] = {}

    def get(self, task_id: str) -> Optional[TaskRecord]:
        return self._tasks.get(task_id)

    def create(self, file_name: str, upload_path: Optional[Path] = None, task_id: Optional[str] = None) -> TaskRecord:
        record = TaskRecord(task_id=task_id or str(uuid.uuid4()), file_name=file_name, upload_path=upload_path)
        self._tasks[record.task_id] = record
        return record

    def start(self, record: TaskRecord, runner: Runner) -> asyncio.Task:
        record.task = asyncio.create_task(self._run(record, runner), name=f"analysis-{record.task_id}")
        return record.task

    def progress(self, record: TaskRecord) -> Callable[[str, float], None]:
        def on_progress(message: str, fraction: float) -> None:
            if record.finished:
                return
            record.status = "processing"
            record.message = message
            record.progress = round(max(record.progress, fraction), 3)
        return on_progress

    async def _run(self, record: TaskRecord, runner: Runner) -> None:
        record.status = "processing"
        try:
            record.context = compact_context(await runner(record))
            record.status = "completed"
            record.progress = 1.0
            record.message = "completed"
        except SamplingCancelled as exc:
            record.status = "cancelled"
            record.message = str(exc)
        except asyncio.CancelledError:
            record.status = "cancelled"
            record.message = record.token.reason or "cancelled"
            raise
        except Exception as exc:
            print(f"TaskRegistry: task {record.task_id} failed: {type(exc).__name__}: {exc}")
            record.status = "failed"
            record.error = public_error_message(exc)
            record.error_type = type(exc).__name__
        finally:
            record.completed_at = _now()
            record.cleanup_upload()
            self._evict_finished()

    async def cancel(self, task_id: str, reason: str = "cancelled by caller") -> Optional[TaskRecord]:
        """Отменяет задачу и ждёт, пока она освободит ресурсы."""
        record = self._tasks.get(task_id)
        if record is None:
            return None

        record.token.cancel(reason)
        if record.task is not None and not record.task.done():
            record.task.cancel()
            await asyncio.gather(record.task, return_exceptions=True)

        if not record.finished:
            record.status = "cancelled"
            record.message = reason
            record.completed_at = _now()

        record.cleanup_upload()
        return record

    def _evict_finished(self) -> None:
        finished = [r for r in self._tasks.values() if r.finished]
        if len(finished) <= self.max_finished:
            return
        finished.sort(key=lambda r: r.completed_at or r.created_at)
        for record in finished[: len(finished) - self.max_finished]:
            self._tasks.pop(record.task_id, None)

    async def delete(self, task_id: str) -> Optional[TaskRecord]:
        record = await self.cancel(task_id, reason="task deleted")
        if record is not None:
            self._tasks.pop(task_id, None)
        return record

    async def shutdown(self) -> None:
        for task_id in list(self._tasks):
            await self.cancel(task_id, reason="service shutdown")

    def all(self) -> List[TaskRecord]:
        # Новые первыми, порядок вставки совпадает с порядком создания
        return list(reversed(self._tasks.values()))

    def to_status(self, record: TaskRecord) -> Dict[str, Any]:
        return {
            "task_id": record.task_id,
            "status": record.status,
            "progress": record.progress,
            "message": record.message,
            "created_at": record.created_at,
            "completed_at": record.completed_at,
            "result_url": f"/results/{record.task_id}" if record.status == "completed" else None,
            "error": record.error,
            "error_type": record.error_type,
        }
