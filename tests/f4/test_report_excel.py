"""Tests for Excel report workbooks (F4)."""

from datetime import date
from io import BytesIO

import pytest
from openpyxl import load_workbook

from preprimary.db.plans_repository import create_plan
from preprimary.db.progress_repository import create_progress
from preprimary.db.students_repository import create_student
from preprimary.db.users_repository import create_user
from preprimary.reports.data import ReportOptions, collect_plan_report, collect_student_report
from preprimary.reports.excel import build_student_progress_workbook, build_teaching_plans_workbook


RATINGS = dict.fromkeys(
    ["social_skills", "pre_literacy", "pre_numeracy", "motor_skills", "emotional_development"],
    "Good",
)


def _load(data: bytes):
    return load_workbook(BytesIO(data))


class TestStudentProgressWorkbook:
    def test_sheets(self, school, records):
        rows = collect_student_report(records["admin"], ReportOptions())
        wb = _load(build_student_progress_workbook(rows, school=school))
        assert wb.sheetnames == ["Students", "Latest Progress", "All Progress Entries", "Report Info"]

    def test_students_sheet(self, school, records):
        rows = collect_student_report(records["admin"], ReportOptions())
        ws = _load(build_student_progress_workbook(rows, school=school))["Students"]

        assert [c.value for c in ws[1]] == [
            "Name", "Class", "Age", "Learning Ability", "Writing Speed", "Parent Contact", "Teacher",
        ]
        assert ws[1][0].font.bold
        assert ws.freeze_panes == "A2"
        assert [c.value for c in ws[2]] == ["Gita", "LKG", 4, "Talented", "N/A", "N/A", "Sita Sharma"]
        assert ws["E3"].value == "Slow Writing"
        assert ws["F4"].value == "9800000000"

    def test_latest_progress(self, school, records):
        rows = collect_student_report(records["admin"], ReportOptions())
        ws = _load(build_student_progress_workbook(rows, school=school))["Latest Progress"]

        values = {row[0].value: [c.value for c in row] for row in ws.iter_rows(min_row=2)}
        assert values["Ram"][4] == "2024-03-15"
        assert values["Ram"][5] == "Excellent"
        assert values["Ram"][-1] == "Big jump"
        assert values["Gita"][4] == "No data"

    def test_all_entries(self, school, records):
        rows = collect_student_report(records["admin"], ReportOptions())
        ws = _load(build_student_progress_workbook(rows, school=school))["All Progress Entries"]
        assert ws.max_row == 4  # header + three entries

    def test_no_entries_sheet_without_progress(self, school, records):
        rows = collect_student_report(records["sita"], ReportOptions())
        for row in rows:
            row.entries = []
        wb = _load(build_student_progress_workbook(rows, school=school))
        assert "All Progress Entries" not in wb.sheetnames

    def test_report_info(self, school, records):
        rows = collect_student_report(records["admin"], ReportOptions(class_level="LKG"))
        ws = _load(build_student_progress_workbook(rows, "LKG", school=school))["Report Info"]
        assert ws["A2"].value == "Student Progress Report - LKG"
        assert ws["A3"].value == "Total Students: 2"
        assert ws["A4"].value.startswith("Generated On: ")
        assert ws["A5"].value == "Test School, Kathmandu"


class TestTeachingPlansWorkbook:
    def test_sheets(self, school, records):
        rows = collect_plan_report(records["admin"], ReportOptions())
        wb = _load(build_teaching_plans_workbook(rows, school=school))
        assert wb.sheetnames == [
            "Plans Overview", "Plan 1 Detail", "Plan 2 Detail", "Plan 3 Detail", "Report Info",
        ]

    def test_overview_and_detail(self, school, records):
        rows = collect_plan_report(records["admin"], ReportOptions())
        wb = _load(build_teaching_plans_workbook(rows, school=school))

        overview = wb["Plans Overview"]
        assert [c.value for c in overview[2]][:6] == [
            "Numbers week", "Weekly", "LKG", "2024-04-01", "2024-04-05", "Sita Sharma",
        ]

        detail = {row[0].value: row[1].value for row in wb["Plan 3 Detail"].iter_rows(min_row=2)}
        assert detail["Title"] == "UKG year"
        assert detail["Teacher"] == "Hari Thapa"
        assert detail["Learning Goals"] == "Count to ten confidently."

    def test_title_reflects_filters(self, school, records):
        rows = collect_plan_report(records["admin"], ReportOptions(plan_type="Weekly", class_level="LKG"))
        ws = _load(build_teaching_plans_workbook(rows, "Weekly", "LKG", school=school))["Report Info"]
        assert ws["A2"].value == "Teaching Plans Report - Weekly - LKG"
        assert ws["A3"].value == "Total Plans: 1"

    def test_empty(self, school):
        wb = _load(build_teaching_plans_workbook([], school=school))
        assert wb.sheetnames == ["Plans Overview", "Report Info"]


class TestUntrustedText:
    """Names, comments and plan text are typed by teachers and exported as-is."""

    @pytest.fixture
    def admin(self, db):
        return create_user("admin@test.com", "x", "Admin User", role="admin")

    @pytest.fixture
    def teacher(self, db):
        return create_user("sita@test.com", "x", "Sita Sharma", assigned_classes=["LKG"])

    def test_formula_prefixes_stay_text(self, school, admin, teacher):
        names = ['=HYPERLINK("http://evil.example","click")', "+977 Ram", "-Gita", "@Maya"]
        for name in names:
            create_student(name, 4, "LKG", "Average", teacher.id)

        rows = collect_student_report(admin, ReportOptions())
        ws = _load(build_student_progress_workbook(rows, school=school))["Students"]

        cells = [row[0] for row in ws.iter_rows(min_row=2)]
        assert sorted(c.value for c in cells) == sorted(names)
        assert all(c.data_type == "s" for c in cells)

    def test_control_characters_removed(self, school, admin, teacher):
        ram = create_student("Ram", 4, "LKG", "Average", teacher.id)
        create_progress(ram.id, RATINGS, entry_date=date(2024, 1, 15), comments="pasted\x0btext\x0c")

        rows = collect_student_report(admin, ReportOptions())
        wb = _load(build_student_progress_workbook(rows, school=school))

        assert wb["Latest Progress"]["K2"].value == "pastedtext"
        assert wb["All Progress Entries"]["I2"].value == "pastedtext"

    def test_multiline_and_long_plan_text(self, school, admin, teacher):
        long_goals = "Count objects up to twenty. " * 150
        create_plan(
            "Weekly", "LKG", "=1+1 week",
            "Line one\nLine two\n\tindented line",
            "Songs, stories and games.",
            long_goals,
            start_date=date(2024, 4, 1), end_date=date(2024, 4, 5), created_by=teacher.id,
        )

        rows = collect_plan_report(admin, ReportOptions())
        wb = _load(build_teaching_plans_workbook(rows, school=school))

        assert wb["Plans Overview"]["A2"].value == "=1+1 week"
        assert wb["Plans Overview"]["A2"].data_type == "s"
        detail = {row[0].value: row[1].value for row in wb["Plan 1 Detail"].iter_rows(min_row=2)}
        assert detail["Description"] == "Line one\nLine two\n\tindented line"
        assert detail["Learning Goals"] == long_goals
        assert wb["Plan 1 Detail"].column_dimensions["B"].width == 60
