"""Excel workbooks for student progress and teaching plans."""

from __future__ import annotations

from datetime import datetime
from io import BytesIO

import structlog
from openpyxl import Workbook
from openpyxl.cell.cell import ILLEGAL_CHARACTERS_RE
from openpyxl.styles import Alignment, Font, PatternFill
from openpyxl.utils import get_column_letter
from openpyxl.worksheet.worksheet import Worksheet

from preprimary.config.app_config import SchoolConfig, load_app_config
from preprimary.core.domain import SKILL_FIELDS, format_enum_value
from preprimary.reports.data import PlanReportRow, StudentReportRow

logger = structlog.get_logger(__name__)

HEADER_FONT = Font(bold=True, color="FFFFFF")
HEADER_FILL = PatternFill(start_color="7C3AED", end_color="7C3AED", fill_type="solid")
NO_DATA = "No data"
MAX_COLUMN_WIDTH = 60
FORMULA_PREFIXES = ("=", "+", "-", "@")


def _cell_text(value):
    """Strip characters that worksheets cannot store."""
    if isinstance(value, str):
        return ILLEGAL_CHARACTERS_RE.sub("", value)
    return value


def _append_row(ws: Worksheet, values: list) -> None:
    ws.append([_cell_text(value) for value in values])
    # Text typed by users is never evaluated as a formula
    for cell in ws[ws.max_row]:
        if isinstance(cell.value, str) and cell.value.startswith(FORMULA_PREFIXES):
            cell.data_type = "s"


def _write_table(ws: Worksheet, headers: list[str], rows: list[list]) -> None:
    """Header row plus data rows, with styled header and fitted widths."""
    _append_row(ws, headers)
    for cell in ws[1]:
        cell.font = HEADER_FONT
        cell.fill = HEADER_FILL
    for row in rows:
        _append_row(ws, row)

    for index, header in enumerate(headers, start=1):
        width = max([len(str(header))] + [len(str(row[index - 1] or "")) for row in rows])
        ws.column_dimensions[get_column_letter(index)].width = min(width + 2, MAX_COLUMN_WIDTH)
    ws.freeze_panes = "A2"


def _report_info(wb: Workbook, title: str, lines: list[str], school: SchoolConfig) -> None:
    ws = wb.create_sheet("Report Info")
    now = datetime.now()
    rows = [[title]] + [[line] for line in lines] + [
        [f"Generated On: {now.strftime('%Y-%m-%d %H:%M')}"],
        [f"{school.name}, {school.address}"],
    ]
    _write_table(ws, ["Report"], rows)


def _to_bytes(wb: Workbook) -> bytes:
    buffer = BytesIO()
    wb.save(buffer)
    return buffer.getvalue()


def build_student_progress_workbook(
    rows: list[StudentReportRow],
    class_level: str | None = None,
    school: SchoolConfig | None = None,
) -> bytes:
    """Workbook with Students, Latest Progress, All Progress Entries and Report Info.

    The All Progress Entries sheet is only added when there is at least one
    entry.
    """
    school = school or load_app_config().school
    skill_labels = [label for _, label in SKILL_FIELDS]

    wb = Workbook()
    ws = wb.active
    ws.title = "Students"
    _write_table(
        ws,
        ["Name", "Class", "Age", "Learning Ability", "Writing Speed", "Parent Contact", "Teacher"],
        [
            [
                row.student.name,
                row.student.class_level,
                row.student.age,
                row.student.learning_ability,
                format_enum_value(row.student.writing_speed),
                row.student.parent_contact or "N/A",
                row.teacher_name,
            ]
            for row in rows
        ],
    )

    latest_rows = []
    for row in rows:
        latest = row.latest
        ratings = list(latest.ratings().values()) if latest else [NO_DATA] * len(skill_labels)
        latest_rows.append(
            [
                row.student.name,
                row.student.class_level,
                row.student.learning_ability,
                format_enum_value(row.student.writing_speed),
                latest.date if latest else NO_DATA,
            ]
            + ratings
            + [(latest.comments or "") if latest else ""]
        )
    _write_table(
        wb.create_sheet("Latest Progress"),
        ["Student Name", "Class", "Learning Ability", "Writing Speed", "Latest Assessment Date"]
        + skill_labels
        + ["Comments"],
        latest_rows,
    )

    all_entries = [
        [row.student.name, row.student.class_level, entry.date]
        + list(entry.ratings().values())
        + [entry.comments or ""]
        for row in rows
        for entry in row.entries
    ]
    if all_entries:
        _write_table(
            wb.create_sheet("All Progress Entries"),
            ["Student Name", "Class", "Assessment Date"] + skill_labels + ["Comments"],
            all_entries,
        )

    title = "Student Progress Report"
    if class_level:
        title += f" - {class_level}"
    _report_info(wb, title, [f"Total Students: {len(rows)}"], school)

    data = _to_bytes(wb)
    logger.info("reports.excel_generated", kind="students", rows=len(rows), bytes=len(data))
    return data


def _plan_detail(ws: Worksheet, row: PlanReportRow) -> None:
    plan = row.plan
    _write_table(
        ws,
        ["Field", "Value"],
        [
            ["Title", plan.title],
            ["Type", plan.type],
            ["Class", plan.class_level],
            ["Start Date", plan.start_date],
            ["End Date", plan.end_date],
            ["Teacher", row.teacher_name],
            ["Description", plan.description],
            ["Activities", plan.activities],
            ["Learning Goals", plan.goals],
            ["Created At", plan.created_at[:10]],
        ],
    )
    for cell in ws["B"]:
        cell.alignment = Alignment(wrap_text=True, vertical="top")


def build_teaching_plans_workbook(
    rows: list[PlanReportRow],
    plan_type: str | None = None,
    class_level: str | None = None,
    school: SchoolConfig | None = None,
) -> bytes:
    """Workbook with Plans Overview, one "Plan N Detail" sheet per plan and Report Info."""
    school = school or load_app_config().school

    wb = Workbook()
    ws = wb.active
    ws.title = "Plans Overview"
    _write_table(
        ws,
        ["Title", "Type", "Class", "Start Date", "End Date", "Teacher", "Created At"],
        [
            [
                row.plan.title,
                row.plan.type,
                row.plan.class_level,
                row.plan.start_date,
                row.plan.end_date,
                row.teacher_name,
                row.plan.created_at[:10],
            ]
            for row in rows
        ],
    )

    for index, row in enumerate(rows, start=1):
        _plan_detail(wb.create_sheet(f"Plan {index} Detail"), row)

    title = "Teaching Plans Report"
    if plan_type:
        title += f" - {plan_type}"
    if class_level:
        title += f" - {class_level}"
    _report_info(wb, title, [f"Total Plans: {len(rows)}"], school)

    data = _to_bytes(wb)
    logger.info("reports.excel_generated", kind="plans", rows=len(rows), bytes=len(data))
    return data
