"""Tests for PDF report rendering (F4)."""

from dataclasses import replace
from datetime import date
from io import BytesIO

import pytest
from PIL import Image

from preprimary.reports.data import (
    ReportOptions,
    collect_plan_report,
    collect_student_report,
)
from preprimary.reports.pdf import ReportError, ReportPDFGenerator, period_text


def _png_bytes() -> bytes:
    buffer = BytesIO()
    Image.new("RGB", (40, 40), color=(124, 58, 237)).save(buffer, format="PNG")
    return buffer.getvalue()


class RecordingFetcher:
    """Photo fetcher that returns canned bytes and remembers the URLs asked for."""

    def __init__(self, data: bytes | None = None, error: Exception | None = None):
        self.data = data
        self.error = error
        self.urls: list[str] = []

    def __call__(self, url: str) -> bytes:
        self.urls.append(url)
        if self.error is not None:
            raise self.error
        return self.data


@pytest.fixture
def student_rows(records):
    return collect_student_report(records["admin"], ReportOptions())


class TestStudentProgressPDF:
    def test_renders_pdf(self, school, student_rows):
        generator = ReportPDFGenerator(school=school, today=date(2024, 5, 1))
        pdf = generator.build_student_progress(student_rows)
        assert pdf.startswith(b"%PDF")
        assert len(pdf) > 1000

    def test_empty_report(self, school):
        pdf = ReportPDFGenerator(school=school).build_student_progress([])
        assert pdf.startswith(b"%PDF")

    def test_period_and_many_students(self, school, student_rows):
        rows = student_rows * 20
        options = ReportOptions(start_date=date(2024, 1, 1), end_date=date(2024, 3, 31))
        pdf = ReportPDFGenerator(school=school).build_student_progress(rows, options)
        assert pdf.startswith(b"%PDF")

    def test_photos_fetched_only_when_requested(self, school, student_rows):
        student_rows[0].student = replace(
            student_rows[0].student, photo_url="https://img.example.com/gita.png"
        )
        fetcher = RecordingFetcher(data=_png_bytes())
        generator = ReportPDFGenerator(school=school, photo_fetcher=fetcher)

        generator.build_student_progress(student_rows, ReportOptions())
        assert fetcher.urls == []

        pdf = generator.build_student_progress(student_rows, ReportOptions(include_photos=True))
        assert fetcher.urls == ["https://img.example.com/gita.png"]
        assert pdf.startswith(b"%PDF")

    def test_broken_photo_is_skipped(self, school, student_rows):
        student_rows[0].student = replace(
            student_rows[0].student, photo_url="https://img.example.com/gita.png"
        )
        for fetcher in (
            RecordingFetcher(error=ConnectionError("unreachable")),
            RecordingFetcher(data=b"not an image"),
        ):
            generator = ReportPDFGenerator(school=school, photo_fetcher=fetcher)
            pdf = generator.build_student_progress(student_rows, ReportOptions(include_photos=True))
            assert pdf.startswith(b"%PDF")
            assert len(fetcher.urls) == 1

    def test_render_failure_raises_report_error(self, school, student_rows, monkeypatch):
        def boom(self, *args, **kwargs):
            raise RuntimeError("layout exploded")

        monkeypatch.setattr("preprimary.reports.pdf.SimpleDocTemplate.build", boom)
        with pytest.raises(ReportError, match="layout exploded"):
            ReportPDFGenerator(school=school).build_student_progress(student_rows)


class TestTeachingPlansPDF:
    def test_renders_pdf(self, school, records):
        rows = collect_plan_report(records["admin"], ReportOptions())
        pdf = ReportPDFGenerator(school=school).build_teaching_plans(rows)
        assert pdf.startswith(b"%PDF")

    def test_markup_in_text_is_escaped(self, school, records):
        rows = collect_plan_report(records["admin"], ReportOptions())
        rows[0].plan = replace(
            rows[0].plan,
            title="Shapes <b> & colours",
            activities="Line one\nLine two <unclosed",
        )
        pdf = ReportPDFGenerator(school=school).build_teaching_plans(rows)
        assert pdf.startswith(b"%PDF")

    def test_empty_report(self, school):
        pdf = ReportPDFGenerator(school=school).build_teaching_plans([])
        assert pdf.startswith(b"%PDF")


class TestPeriodLine:
    @pytest.mark.parametrize(
        "start, end, expected",
        [
            (date(2024, 1, 1), date(2024, 3, 31), "Period: 2024-01-01 to 2024-03-31"),
            (date(2024, 1, 1), None, "Period: from 2024-01-01"),
            (None, date(2024, 3, 31), "Period: until 2024-03-31"),
            (None, None, None),
        ],
    )
    def test_period_text(self, start, end, expected):
        assert period_text(start, end) == expected

    def test_one_sided_window_in_header(self, school):
        generator = ReportPDFGenerator(school=school)
        story = generator._header("Student Progress Report", ReportOptions(end_date=date(2024, 3, 31)))
        texts = [flowable.getPlainText() for flowable in story if hasattr(flowable, "getPlainText")]
        assert "Period: until 2024-03-31" in texts
