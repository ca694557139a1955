"""
ReportHandler - сохраняет PDF отчёт, если запрошен REPORT_PATH.

Берёт переведённый вердикт, если он есть, иначе исходный.
"""
from __future__ import annotations

import asyncio
from typing import Any, ClassVar, FrozenSet

from veritas.core.base_handler import ExtractorHandler
from veritas.features.report.pdf_report import write_report
from veritas.models.keys import Key


class ReportHandler(ExtractorHandler):
    """Provides:
    - REPORT_WRITTEN: путь к PDF
    """

    requires: ClassVar[FrozenSet[Key]] = frozenset({Key.ANALYSIS_RESULT, Key.REPORT_PATH})
    provides: ClassVar[FrozenSet[Key]] = frozenset({Key.REPORT_WRITTEN})
    progress_message: ClassVar[str | None] = "rendering_report"

    def should_run(self, context: dict[str, Any]) -> bool:
        return bool(context.get("report_path"))

    async def handle(self, context: dict[str, Any]) -> dict[str, Any]:
        print("[5] ReportHandler")

        result = context.get("translated_result") or context["analysis_result"]
        file_name = context.get("file_name") or "unknown"

        out = await asyncio.to_thread(write_report, result, file_name, context["report_path"])
        context["report_written"] = str(out)

        print(f"✓ Report saved: {out}")

        return context
