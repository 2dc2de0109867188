"""Spreadsheet rendering — one summary sheet plus one sheet per repository."""

from __future__ import annotations

import io
import re
from datetime import datetime
from typing import Any

from openpyxl import Workbook
from openpyxl.cell.cell import ILLEGAL_CHARACTERS_RE
from openpyxl.styles import Font, PatternFill
from openpyxl.utils import get_column_letter
from openpyxl.worksheet.worksheet import Worksheet

from pubsentinel.engines.report.builder import OverallStatus, Report
from pubsentinel.engines.version_checker.models import CheckResult, PackageCheck, Severity

MAX_SHEET_TITLE = 31
SUMMARY_TITLE = "Summary"
RUNTIME_LABEL = "Flutter SDK"

_INVALID_TITLE_RE = re.compile(r"[\\*?:/\[\]]")

# aRGB colours; downstream readers triage by these.
HEADER_FILL = PatternFill(fill_type="solid", fgColor="FFE0E0E0")
HIGH_SEVERITY_FONT = Font(color="FFFF0000")
LOW_SEVERITY_FONT = Font(color="FF0066CC")
ATTENTION_FONT = Font(color="FFFF6600")
ERROR_FONT = Font(color="FFFF0000")
NEEDS_UPDATE_FILL = PatternFill(fill_type="solid", fgColor="FFFFEB9C")
NEEDS_UPDATE_FONT = Font(color="FF9C5700", bold=True)
UP_TO_DATE_FILL = PatternFill(fill_type="solid", fgColor="FFC6EFCE")
UP_TO_DATE_FONT = Font(color="FF006100", bold=True)

SUMMARY_COLUMNS = [
    ("Repository", 25),
    ("Flutter (current)", 20),
    ("Flutter (latest)", 20),
    ("Flutter update", 15),
    ("Outdated packages", 20),
    ("Total packages", 15),
    ("Status", 15),
]
REPOSITORY_COLUMNS = [
    ("Package", 30),
    ("Current version", 20),
    ("Latest version", 20),
    ("Flutter version", 25),
]

_RUNTIME_UPDATE_COL = 4
_STATUS_COL = 7

_STATUS_LABELS = {
    OverallStatus.UP_TO_DATE: "Up to date",
    OverallStatus.NEEDS_UPDATE: "Needs update",
    OverallStatus.ERROR: "Error",
}


def report_filename(checked_at: datetime) -> str:
    """``flutter-dependencies-2025-01-31T09-00-00-000Z.xlsx`` for *checked_at* (UTC)."""
    stamp = checked_at.strftime("%Y-%m-%dT%H:%M:%S.") + f"{checked_at.microsecond // 1000:03d}Z"
    return f"flutter-dependencies-{re.sub(r'[:.]', '-', stamp)}.xlsx"


def _text(value: Any) -> Any:
    if value is None:
        return ""
    if isinstance(value, str):
        # Control characters survive YAML escapes but are rejected by the xlsx writer.
        return ILLEGAL_CHARACTERS_RE.sub("", value)
    return value


def _sheet_title(name: str, used: set[str]) -> str:
    base = _INVALID_TITLE_RE.sub("_", _text(name or "")).strip() or "repository"
    title = base[:MAX_SHEET_TITLE]
    n = 2
    while title.lower() in used:
        suffix = f"~{n}"
        title = base[: MAX_SHEET_TITLE - len(suffix)] + suffix
        n += 1
    used.add(title.lower())
    return title


def _write_header(ws: Worksheet, columns: list[tuple[str, int]]) -> None:
    ws.append([header for header, _ in columns])
    for idx, (_, width) in enumerate(columns, start=1):
        ws.column_dimensions[get_column_letter(idx)].width = width
    for cell in ws[1]:
        cell.font = Font(bold=True)
        cell.fill = HEADER_FILL
    ws.freeze_panes = "A2"


def _style_row(ws: Worksheet, row: int, font: Font) -> None:
    for cell in ws[row]:
        cell.font = font


def package_font(package: PackageCheck) -> Font | None:
    """Row font for a package: red for major updates, blue for any other update."""
    record = package.record
    if not record.update_available:
        return None
    if record.severity is Severity.MAJOR:
        return HIGH_SEVERITY_FONT
    return LOW_SEVERITY_FONT


def _write_summary(ws: Worksheet, report: Report) -> None:
    ws.title = SUMMARY_TITLE
    _write_header(ws, SUMMARY_COLUMNS)

    for summary in report.summary:
        if summary.overall_status is OverallStatus.ERROR:
            ws.append([_text(summary.repository), "Error", "", "", "", "", "Error"])
            _style_row(ws, ws.max_row, ERROR_FONT)
            continue

        ws.append(
            [
                _text(summary.repository),
                _text(summary.runtime_current),
                _text(summary.runtime_latest),
                "Needs update" if summary.runtime_update_needed else "Up to date",
                summary.outdated_package_count,
                summary.total_package_count,
                _STATUS_LABELS[summary.overall_status],
            ]
        )
        row = ws.max_row
        status_cell = ws.cell(row=row, column=_STATUS_COL)
        if summary.overall_status is OverallStatus.NEEDS_UPDATE:
            status_cell.fill = NEEDS_UPDATE_FILL
            status_cell.font = NEEDS_UPDATE_FONT
        else:
            status_cell.fill = UP_TO_DATE_FILL
            status_cell.font = UP_TO_DATE_FONT

        if summary.runtime_update_needed:
            runtime_cell = ws.cell(row=row, column=_RUNTIME_UPDATE_COL)
            runtime_cell.fill = NEEDS_UPDATE_FILL
            runtime_cell.font = NEEDS_UPDATE_FONT


def _write_repository(ws: Worksheet, result: CheckResult) -> None:
    _write_header(ws, REPOSITORY_COLUMNS)

    if result.error:
        ws.append(["Error", _text(result.error), "", ""])
        _style_row(ws, ws.max_row, ERROR_FONT)
        return

    runtime = result.runtime
    note = f"{runtime.current} → {runtime.latest}" if runtime.update_available else runtime.current
    ws.append([RUNTIME_LABEL, _text(runtime.current), _text(runtime.latest), _text(note)])
    if runtime.update_available:
        _style_row(ws, ws.max_row, ATTENTION_FONT)

    for package in result.packages:
        ws.append(
            [_text(package.name), _text(package.record.current), _text(package.record.latest), ""]
        )
        font = package_font(package)
        if font is not None:
            _style_row(ws, ws.max_row, font)


def render_workbook(report: Report) -> bytes:
    """Serialize *report* to xlsx bytes."""
    wb = Workbook()
    used_titles = {SUMMARY_TITLE.lower()}
    _write_summary(wb.active, report)

    for result in report.results:
        ws = wb.create_sheet(_sheet_title(result.repository.name, used_titles))
        _write_repository(ws, result)

    buffer = io.BytesIO()
    wb.save(buffer)
    return buffer.getvalue()
