"""PDF reports for student progress and teaching plans.

Layout: school header, report title, optional period line, one block per
student or plan separated by rules, and a footer on every page with the
generation date and "Page N of M".
"""

from __future__ import annotations

from datetime import date
from functools import partial
from io import BytesIO
from typing import Callable
from xml.sax.saxutils import escape

import httpx
import structlog
from reportlab.lib import colors
from reportlab.lib.colors import HexColor
from reportlab.lib.enums import TA_CENTER
from reportlab.lib.pagesizes import A4
from reportlab.lib.styles import ParagraphStyle, getSampleStyleSheet
from reportlab.lib.units import mm
from reportlab.lib.utils import ImageReader
from reportlab.pdfgen import canvas
from reportlab.platypus import (
    HRFlowable,
    Image as RLImage,
    KeepTogether,
    Paragraph,
    SimpleDocTemplate,
    Spacer,
    Table,
    TableStyle,
)

from preprimary.config.app_config import SchoolConfig, load_app_config
from preprimary.core.domain import format_enum_value
from preprimary.reports.data import PlanReportRow, ReportOptions, StudentReportRow

logger = structlog.get_logger(__name__)

PURPLE = HexColor("#7C3AED")
GREY = HexColor("#646464")
RULE_GREY = HexColor("#C8C8C8")

# Progress rows printed per student
MAX_PROGRESS_ROWS = 5

PROGRESS_HEADERS = [
    "Date",
    "Social Skills",
    "Pre-Literacy",
    "Pre-Numeracy",
    "Motor Skills",
    "Emotional Dev.",
]

PhotoFetcher = Callable[[str], bytes]


class ReportError(Exception):
    """Report could not be produced."""

    pass


class NumberedCanvas(canvas.Canvas):
    """Canvas that defers footers until the total page count is known."""

    def __init__(self, *args, generated_on: str = "", **kwargs):
        super().__init__(*args, **kwargs)
        self._saved_page_states: list[dict] = []
        self.generated_on = generated_on

    def showPage(self):
        self._saved_page_states.append(dict(self.__dict__))
        self._startPage()

    def save(self):
        total = len(self._saved_page_states)
        for state in self._saved_page_states:
            self.__dict__.update(state)
            self._draw_footer(total)
            super().showPage()
        super().save()

    def _draw_footer(self, total: int) -> None:
        width, _ = self._pagesize
        self.saveState()
        self.setStrokeColor(RULE_GREY)
        self.setLineWidth(0.2)
        self.line(20 * mm, 17 * mm, width - 20 * mm, 17 * mm)
        self.setFont("Helvetica", 8)
        self.setFillColor(GREY)
        self.drawString(20 * mm, 12 * mm, f"Generated on: {self.generated_on}")
        self.drawRightString(
            width - 20 * mm, 12 * mm, f"Page {self._pageNumber} of {total}"
        )
        self.restoreState()


def fetch_photo(url: str, timeout: float = 10.0) -> bytes:
    """Download a photo over HTTP(S)."""
    response = httpx.get(url, timeout=timeout, follow_redirects=True)
    response.raise_for_status()
    return response.content


def period_text(start: date | None, end: date | None) -> str | None:
    """Header line for a date window; either end may be open."""
    if start and end:
        return f"Period: {start.isoformat()} to {end.isoformat()}"
    if start:
        return f"Period: from {start.isoformat()}"
    if end:
        return f"Period: until {end.isoformat()}"
    return None


def _text(value: str | None) -> str:
    """Escape free text for Paragraph markup, keeping line breaks."""
    return escape(value or "").replace("\n", "<br/>")


class ReportPDFGenerator:
    """Builds report PDFs in memory."""

    def __init__(
        self,
        school: SchoolConfig | None = None,
        photo_fetcher: PhotoFetcher | None = None,
        today: date | None = None,
    ):
        self.school = school or load_app_config().school
        self.photo_fetcher = photo_fetcher or fetch_photo
        self.today = today or date.today()
        self.styles = getSampleStyleSheet()
        self._setup_custom_styles()

    def _setup_custom_styles(self) -> None:
        """Paragraph styles used by both reports."""
        self.styles.add(ParagraphStyle(
            name="SchoolName",
            parent=self.styles["Title"],
            fontSize=18,
            textColor=PURPLE,
            alignment=TA_CENTER,
            spaceAfter=4,
        ))
        self.styles.add(ParagraphStyle(
            name="SchoolSubtitle",
            parent=self.styles["Normal"],
            fontSize=13,
            alignment=TA_CENTER,
            spaceAfter=3,
        ))
        self.styles.add(ParagraphStyle(
            name="SchoolAddress",
            parent=self.styles["Normal"],
            fontSize=10,
            textColor=GREY,
            alignment=TA_CENTER,
        ))
        self.styles.add(ParagraphStyle(
            name="ReportTitle",
            parent=self.styles["Heading2"],
            alignment=TA_CENTER,
            spaceBefore=6,
        ))
        self.styles.add(ParagraphStyle(
            name="Period",
            parent=self.styles["Normal"],
            alignment=TA_CENTER,
            fontSize=10,
            spaceAfter=6,
        ))
        self.styles.add(ParagraphStyle(
            name="EntityTitle",
            parent=self.styles["Heading3"],
            textColor=PURPLE,
            spaceBefore=4,
            spaceAfter=4,
        ))
        self.styles.add(ParagraphStyle(
            name="Detail",
            parent=self.styles["Normal"],
            fontSize=10,
            leading=14,
        ))
        self.styles.add(ParagraphStyle(
            name="SectionLabel",
            parent=self.styles["Normal"],
            fontName="Helvetica-Bold",
            fontSize=11,
            textColor=PURPLE,
            spaceBefore=6,
            spaceAfter=2,
        ))
        self.styles.add(ParagraphStyle(
            name="Body",
            parent=self.styles["Normal"],
            fontSize=9,
            leading=12,
        ))
        self.styles.add(ParagraphStyle(
            name="Muted",
            parent=self.styles["Normal"],
            fontSize=10,
            textColor=GREY,
            spaceBefore=6,
        ))
        self.styles.add(ParagraphStyle(
            name="Cell",
            parent=self.styles["Normal"],
            fontSize=8,
            leading=10,
        ))

    # -------------------------------------------------------------------------
    # Shared pieces
    # -------------------------------------------------------------------------

    def _header(self, title: str, options: ReportOptions | None = None) -> list:
        story = [
            Paragraph(escape(self.school.name), self.styles["SchoolName"]),
            Paragraph(escape(self.school.subtitle), self.styles["SchoolSubtitle"]),
            Paragraph(escape(self.school.address), self.styles["SchoolAddress"]),
            Spacer(1, 3 * mm),
            HRFlowable(width="100%", thickness=0.5, color=PURPLE),
            Paragraph(escape(title), self.styles["ReportTitle"]),
        ]
        period = period_text(options.start_date, options.end_date) if options else None
        if period:
            story.append(Paragraph(period, self.styles["Period"]))
        story.append(Spacer(1, 4 * mm))
        return story

    def _separator(self) -> list:
        return [
            Spacer(1, 4 * mm),
            HRFlowable(width="100%", thickness=0.2, color=RULE_GREY),
            Spacer(1, 3 * mm),
        ]

    def _render(self, story: list) -> bytes:
        buffer = BytesIO()
        doc = SimpleDocTemplate(
            buffer,
            pagesize=A4,
            leftMargin=20 * mm,
            rightMargin=20 * mm,
            topMargin=15 * mm,
            bottomMargin=25 * mm,
            title=self.school.name,
        )
        generated_on = self.today.strftime("%B %d, %Y")
        try:
            doc.build(story, canvasmaker=partial(NumberedCanvas, generated_on=generated_on))
        except Exception as e:
            logger.error("reports.pdf_failed", error=str(e))
            raise ReportError(f"Failed to render PDF: {e}") from e
        return buffer.getvalue()

    def _photo(self, url: str | None, student_id: int) -> RLImage | None:
        """Photo flowable, or None when missing or unreadable."""
        if not url or not url.startswith("http"):
            return None
        try:
            data = self.photo_fetcher(url)
            ImageReader(BytesIO(data)).getSize()
        except Exception as e:
            logger.warning("reports.photo_skipped", student_id=student_id, error=str(e))
            return None
        return RLImage(BytesIO(data), width=35 * mm, height=35 * mm)

    # -------------------------------------------------------------------------
    # Student progress
    # -------------------------------------------------------------------------

    def _progress_table(self, row: StudentReportRow) -> Table:
        data = [[Paragraph(f"<b>{h}</b>", self.styles["Cell"]) for h in PROGRESS_HEADERS]]
        for entry in row.entries[:MAX_PROGRESS_ROWS]:
            data.append(
                [Paragraph(escape(entry.date), self.styles["Cell"])]
                + [
                    Paragraph(escape(format_enum_value(value)), self.styles["Cell"])
                    for value in entry.ratings().values()
                ]
            )

        table = Table(data, colWidths=[28 * mm] * len(PROGRESS_HEADERS), repeatRows=1)
        table.setStyle(TableStyle([
            ("BACKGROUND", (0, 0), (-1, 0), PURPLE),
            ("TEXTCOLOR", (0, 0), (-1, 0), colors.white),
            ("GRID", (0, 0), (-1, -1), 0.25, RULE_GREY),
            ("VALIGN", (0, 0), (-1, -1), "MIDDLE"),
            ("ROWBACKGROUNDS", (0, 1), (-1, -1), [colors.white, HexColor("#F5F3FF")]),
        ]))
        return table

    def _student_block(self, row: StudentReportRow, include_photos: bool) -> list:
        student = row.student
        details = [
            Paragraph(escape(student.name), self.styles["EntityTitle"]),
            Paragraph(f"Class: {escape(student.class_level.upper())}", self.styles["Detail"]),
            Paragraph(f"Age: {student.age} years", self.styles["Detail"]),
            Paragraph(
                f"Learning Ability: {escape(format_enum_value(student.learning_ability))}",
                self.styles["Detail"],
            ),
            Paragraph(
                f"Writing Speed: {escape(format_enum_value(student.writing_speed))}",
                self.styles["Detail"],
            ),
            Paragraph(f"Teacher: {escape(row.teacher_name)}", self.styles["Detail"]),
        ]

        photo = self._photo(student.photo_url, student.id) if include_photos else None
        if photo is not None:
            summary = Table([[details, photo]], colWidths=[130 * mm, 40 * mm])
            summary.setStyle(TableStyle([
                ("VALIGN", (0, 0), (-1, -1), "TOP"),
                ("LEFTPADDING", (0, 0), (-1, -1), 0),
            ]))
            block: list = [summary]
        else:
            block = list(details)

        if row.entries:
            block.append(Paragraph("Progress History:", self.styles["SectionLabel"]))
            block.append(self._progress_table(row))
        else:
            block.append(Paragraph(
                "No progress entries found for this student.", self.styles["Muted"]
            ))

        return [KeepTogether(block)]

    def build_student_progress(
        self, rows: list[StudentReportRow], options: ReportOptions | None = None
    ) -> bytes:
        """Render the student progress report."""
        options = options or ReportOptions()
        story = self._header("Student Progress Report", options)

        if not rows:
            story.append(Paragraph("No students match the selected filters.", self.styles["Muted"]))

        for row in rows:
            story.extend(self._student_block(row, options.include_photos))
            story.extend(self._separator())

        pdf = self._render(story)
        logger.info("reports.pdf_generated", kind="students", rows=len(rows), bytes=len(pdf))
        return pdf

    # -------------------------------------------------------------------------
    # Teaching plans
    # -------------------------------------------------------------------------

    def _plan_block(self, row: PlanReportRow) -> list:
        plan = row.plan
        block = [
            Paragraph(escape(plan.title), self.styles["EntityTitle"]),
            Paragraph(f"Type: {escape(format_enum_value(plan.type))}", self.styles["Detail"]),
            Paragraph(f"Class: {escape(plan.class_level.upper())}", self.styles["Detail"]),
            Paragraph(
                f"Period: {escape(plan.start_date)} to {escape(plan.end_date)}",
                self.styles["Detail"],
            ),
            Paragraph(f"Teacher: {escape(row.teacher_name)}", self.styles["Detail"]),
        ]
        for label, text in (
            ("Description:", plan.description),
            ("Activities:", plan.activities),
            ("Goals:", plan.goals),
        ):
            block.append(Paragraph(label, self.styles["SectionLabel"]))
            block.append(Paragraph(_text(text), self.styles["Body"]))
        return block

    def build_teaching_plans(
        self, rows: list[PlanReportRow], options: ReportOptions | None = None
    ) -> bytes:
        """Render the teaching plans report."""
        options = options or ReportOptions()
        story = self._header("Teaching Plans Report", options)

        if not rows:
            story.append(Paragraph("No teaching plans match the selected filters.", self.styles["Muted"]))

        for row in rows:
            story.extend(self._plan_block(row))
            story.extend(self._separator())

        pdf = self._render(story)
        logger.info("reports.pdf_generated", kind="plans", rows=len(rows), bytes=len(pdf))
        return pdf


def build_student_progress_pdf(
    rows: list[StudentReportRow], options: ReportOptions | None = None
) -> bytes:
    """Convenience wrapper using the configured school."""
    return ReportPDFGenerator().build_student_progress(rows, options)


def build_teaching_plans_pdf(
    rows: list[PlanReportRow], options: ReportOptions | None = None
) -> bytes:
    """Convenience wrapper using the configured school."""
    return ReportPDFGenerator().build_teaching_plans(rows, options)
