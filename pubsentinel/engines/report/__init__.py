"""Report engine — summary rows and the xlsx artifact."""

from pubsentinel.engines.report.builder import OverallStatus, Report, SummaryRow, build_report
from pubsentinel.engines.report.spreadsheet import render_workbook, report_filename

__all__ = [
    "OverallStatus",
    "Report",
    "SummaryRow",
    "build_report",
    "render_workbook",
    "report_filename",
]
