"""
PDF отчёт по вердикту.

Рендерится через matplotlib (Figure + PdfPages без pyplot, рендер идёт из
worker thread). Каждая страница это figure формата A4, строки
раскладываются сверху вниз, длинный текст переносится по ширине,
при переполнении начинается новая страница.
"""
from __future__ import annotations

import io
import textwrap
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Iterator, List, Optional

from matplotlib.backends.backend_pdf import PdfPages
from matplotlib.figure import Figure

from veritas.models.verdict import AnalysisResult, FindingVerdict, VerdictStatus


PAGE_SIZE = (8.27, 11.69)  # A4, inches
TOP = 0.94
BOTTOM = 0.06
LEFT = 0.08
WRAP_WIDTH = 95

STATUS_COLORS = {
    VerdictStatus.AUTHENTIC: "#16a34a",
    VerdictStatus.SUSPICIOUS: "#ca8a04",
    VerdictStatus.LIKELY_FAKE: "#dc2626",
    VerdictStatus.INCONCLUSIVE: "#6b7280",
}

FINDING_COLORS = {
    FindingVerdict.AUTHENTIC: "#16a34a",
    FindingVerdict.SUSPICIOUS: "#ca8a04",
    FindingVerdict.MANIPULATED: "#dc2626",
}


@dataclass(frozen=True)
class _Line:
    text: str
    size: float = 10.0
    weight: str = "normal"
    color: str = "#111827"
    indent: float = 0.0
    gap: float = 0.0  # доп. отступ перед строкой (доля высоты страницы)

    @property
    def height(self) -> float:
        return self.size / 72.0 * 1.45 / PAGE_SIZE[1] + self.gap


def _wrap(text: str, width: int = WRAP_WIDTH, **style) -> List[_Line]:
    lines = textwrap.wrap(text or "", width=width) or [""]
    first, rest = lines[0], lines[1:]
    out = [_Line(first, **style)]
    style.pop("gap", None)
    out.extend(_Line(line, **style) for line in rest)
    return out


def _layout(result: AnalysisResult, file_name: str, generated_at: datetime) -> List[_Line]:
    lines: List[_Line] = [
        _Line("Veritas Verification Report", size=18, weight="bold"),
        _Line(f"File: {file_name}", size=10, color="#374151", gap=0.01),
        _Line(f"Generated: {generated_at.strftime('%Y-%m-%d %H:%M:%S')}", size=10, color="#374151"),
        _Line(
            f"Verdict: {result.status.value}  |  Trust score: {result.trust_score}/100",
            size=13,
            weight="bold",
            color=STATUS_COLORS.get(result.status, "#111827"),
            gap=0.02,
        ),
        _Line("Summary", size=12, weight="bold", gap=0.02),
    ]
    lines.extend(_wrap(result.summary, size=10))

    if result.findings:
        lines.append(_Line("Findings", size=12, weight="bold", gap=0.02))
        for i, f in enumerate(result.findings, start=1):
            lines.extend(_wrap(
                f"{i}. {f.finding} [{f.verdict.value}]",
                width=WRAP_WIDTH - 5,
                size=10,
                weight="bold",
                color=FINDING_COLORS.get(f.verdict, "#111827"),
                gap=0.008,
            ))
            lines.extend(_wrap(f.explanation, width=WRAP_WIDTH - 8, size=9.5, indent=0.03))

    if result.public_research:
        lines.append(_Line("Public research", size=12, weight="bold", gap=0.02))
        for r in result.public_research:
            lines.extend(_wrap(f"{r.title} ({r.source_name})", size=10, weight="bold", gap=0.008))
            lines.extend(_wrap(r.summary, width=WRAP_WIDTH - 8, size=9.5, indent=0.03))
            lines.extend(_wrap(r.source_url, width=WRAP_WIDTH - 8, size=9, color="#1d4ed8", indent=0.03))

    links = [*result.sources, *result.documents]
    if links:
        lines.append(_Line("Sources", size=12, weight="bold", gap=0.02))
        for link in links:
            lines.extend(_wrap(f"- {link.title}: {link.url}", size=9.5, color="#1d4ed8"))

    return lines


def _paginate(lines: List[_Line]) -> Iterator[List[_Line]]:
    page: List[_Line] = []
    used = 0.0
    available = TOP - BOTTOM
    for line in lines:
        if page and used + line.height > available:
            yield page
            page, used = [], 0.0
        page.append(line)
        used += line.height
    if page:
        yield page


def render_report(result: AnalysisResult, file_name: str, generated_at: Optional[datetime] = None) -> bytes:
    """Рендерит вердикт в PDF и возвращает байты документа."""
    generated_at = generated_at or datetime.now()
    pages = list(_paginate(_layout(result, file_name, generated_at)))

    buf = io.BytesIO()
    with PdfPages(buf) as pdf:
        for number, page in enumerate(pages, start=1):
            fig = Figure(figsize=PAGE_SIZE)
            y = TOP
            for line in page:
                y -= line.height
                fig.text(
                    LEFT + line.indent,
                    y,
                    line.text,
                    fontsize=line.size,
                    fontweight=line.weight,
                    color=line.color,
                    va="bottom",
                    parse_math=False,
                )
            fig.text(0.5, 0.03, f"{number} / {len(pages)}", fontsize=8, color="#6b7280", ha="center")
            pdf.savefig(fig)

        info = pdf.infodict()
        info["Title"] = f"Veritas report: {file_name}"
        info["CreationDate"] = generated_at

    return buf.getvalue()


def write_report(result: AnalysisResult, file_name: str, path: str | Path) -> Path:
    out = Path(path)
    out.parent.mkdir(parents=True, exist_ok=True)
    out.write_bytes(render_report(result, file_name))
    return out
