"""Report endpoints: JSON previews and PDF/Excel downloads."""

from datetime import date
from enum import Enum

import structlog
from fastapi import APIRouter, Depends, HTTPException, Query, Response, status

from preprimary.core.domain import ClassLevel, PlanType
from preprimary.db.users_repository import UserRecord
from preprimary.reports.data import (
    ReportOptions,
    collect_plan_report,
    collect_student_report,
    report_filename,
)
from preprimary.reports.excel import build_student_progress_workbook, build_teaching_plans_workbook
from preprimary.reports.pdf import ReportError, ReportPDFGenerator
from preprimary.utils.validators import check_date_range
from preprimary.web.deps import get_current_user
from preprimary.web.schemas import (
    PlanReportItem,
    PlanReportResponse,
    PlanResponse,
    ProgressResponse,
    StudentReportItem,
    StudentReportResponse,
    StudentResponse,
)

logger = structlog.get_logger(__name__)

router = APIRouter(prefix="/api/reports", tags=["reports"])

PDF_MEDIA_TYPE = "application/pdf"
XLSX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"


class ReportFormat(str, Enum):
    PDF = "pdf"
    EXCEL = "excel"


def _options(
    class_level: ClassLevel | None = Query(default=None, alias="class"),
    teacher_id: int | None = None,
    start_date: date | None = None,
    end_date: date | None = None,
) -> ReportOptions:
    try:
        check_date_range(start_date, end_date)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e)) from e

    return ReportOptions(
        class_level=class_level.value if class_level else None,
        teacher_id=teacher_id,
        start_date=start_date,
        end_date=end_date,
    )


def _download(content: bytes, fmt: ReportFormat, filename: str) -> Response:
    return Response(
        content=content,
        media_type=PDF_MEDIA_TYPE if fmt is ReportFormat.PDF else XLSX_MEDIA_TYPE,
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


def _render_failed(e: ReportError) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail=str(e),
    )


@router.get("/students", response_model=StudentReportResponse)
async def student_report_preview(
    options: ReportOptions = Depends(_options),
    user: UserRecord = Depends(get_current_user),
) -> StudentReportResponse:
    """Students with their teacher and progress entries, as JSON."""
    rows = collect_student_report(user, options)
    return StudentReportResponse(
        rows=[
            StudentReportItem(
                student=StudentResponse.model_validate(row.student),
                teacher_name=row.teacher_name,
                entries=[ProgressResponse.model_validate(e) for e in row.entries],
            )
            for row in rows
        ],
        count=len(rows),
    )


@router.get("/plans", response_model=PlanReportResponse)
async def plan_report_preview(
    plan_type: PlanType | None = Query(default=None, alias="type"),
    options: ReportOptions = Depends(_options),
    user: UserRecord = Depends(get_current_user),
) -> PlanReportResponse:
    """Teaching plans with their author, as JSON."""
    options.plan_type = plan_type.value if plan_type else None
    rows = collect_plan_report(user, options)
    return PlanReportResponse(
        rows=[
            PlanReportItem(plan=PlanResponse.model_validate(row.plan), teacher_name=row.teacher_name)
            for row in rows
        ],
        count=len(rows),
    )


@router.get("/students/{fmt}")
def download_student_report(
    fmt: ReportFormat,
    include_photos: bool = False,
    options: ReportOptions = Depends(_options),
    user: UserRecord = Depends(get_current_user),
) -> Response:
    """Student progress report as a PDF or Excel download."""
    options.include_photos = include_photos
    rows = collect_student_report(user, options)

    try:
        if fmt is ReportFormat.PDF:
            content = ReportPDFGenerator().build_student_progress(rows, options)
        else:
            content = build_student_progress_workbook(rows, options.class_level)
    except ReportError as e:
        raise _render_failed(e) from e

    filename = report_filename("students", fmt.value, class_level=options.class_level)
    logger.info("reports.downloaded", kind="students", fmt=fmt.value, user_id=user.id)
    return _download(content, fmt, filename)


@router.get("/plans/{fmt}")
def download_plan_report(
    fmt: ReportFormat,
    plan_type: PlanType | None = Query(default=None, alias="type"),
    options: ReportOptions = Depends(_options),
    user: UserRecord = Depends(get_current_user),
) -> Response:
    """Teaching plans report as a PDF or Excel download."""
    options.plan_type = plan_type.value if plan_type else None
    rows = collect_plan_report(user, options)

    try:
        if fmt is ReportFormat.PDF:
            content = ReportPDFGenerator().build_teaching_plans(rows, options)
        else:
            content = build_teaching_plans_workbook(rows, options.plan_type, options.class_level)
    except ReportError as e:
        raise _render_failed(e) from e

    filename = report_filename(
        "plans", fmt.value, class_level=options.class_level, plan_type=options.plan_type
    )
    logger.info("reports.downloaded", kind="plans", fmt=fmt.value, user_id=user.id)
    return _download(content, fmt, filename)
