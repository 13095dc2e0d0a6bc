"""Student progress and teaching plan reports (PDF and Excel)."""

from preprimary.reports.data import (
    PlanReportRow,
    ReportOptions,
    StudentReportRow,
    collect_plan_report,
    collect_student_report,
    report_filename,
)
from preprimary.reports.excel import (
    build_student_progress_workbook,
    build_teaching_plans_workbook,
)
from preprimary.reports.pdf import (
    ReportError,
    ReportPDFGenerator,
    build_student_progress_pdf,
    build_teaching_plans_pdf,
)

__all__ = [
    "PlanReportRow",
    "ReportOptions",
    "StudentReportRow",
    "collect_plan_report",
    "collect_student_report",
    "report_filename",
    "build_student_progress_workbook",
    "build_teaching_plans_workbook",
    "ReportError",
    "ReportPDFGenerator",
    "build_student_progress_pdf",
    "build_teaching_plans_pdf",
]
