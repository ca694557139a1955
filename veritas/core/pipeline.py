from __future__ import annotations

import time
from typing import Any, Callable, Iterable, Optional

from veritas.core.base_handler import BaseHandler
from veritas.core.cancellation import CancellationToken


ProgressCallback = Callable[[str, float], None]


async def run_pipeline(
    context: dict[str, Any],
    handlers: Iterable[BaseHandler],
    on_progress: Optional[ProgressCallback] = None,
) -> dict[str, Any]:
    """Выполняет handlers последовательно.

    Перед каждым шагом проверяются токен отмены и requires.
    on_progress(message, fraction) вызывается перед шагами с progress_message.
    """
    handlers = list(handlers)
    token: Optional[CancellationToken] = context.get("cancel_token")
    started = time.monotonic()

    context.setdefault("completed_stages", [])
    context.setdefault("warnings", [])

    for i, h in enumerate(handlers):
        if token is not None:
            token.raise_if_cancelled()

        if not h.should_run(context):
            continue

        missing = h.missing_requirements(context)
        if missing:
            raise ValueError(f"Handler '{h.name}' missing required keys: {', '.join(missing)}")

        if on_progress is not None and h.progress_message:
            on_progress(h.progress_message, i / max(len(handlers), 1))

        context = await h.handle(context)
        context["completed_stages"].append(h.name)

    context["processing_time_seconds"] = time.monotonic() - started
    if on_progress is not None:
        on_progress("completed", 1.0)
    return context
