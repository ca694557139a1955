"""Report feature: PDF отчёт по вердикту."""

from veritas.features.report.pdf_report import render_report, write_report
from veritas.features.report.report_handler import ReportHandler

__all__ = ["ReportHandler", "render_report", "write_report"]
