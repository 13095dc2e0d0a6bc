"""CLI commands for the pre-primary record system.

Commands:
- init-db: Create the database and default accounts
- serve: Run the Web API with uvicorn
- add-teacher: Create a teacher account
- list-students: Show students, optionally filtered
- report: Write a student progress or teaching plan report to disk
"""

import os
import sqlite3
from datetime import datetime
from enum import Enum
from pathlib import Path

import typer
from rich.console import Console
from rich.table import Table

from preprimary.config.app_config import load_app_config
from preprimary.core.auth import hash_password
from preprimary.core.domain import ClassLevel, PlanType, format_enum_value
from preprimary.db.database import init_db
from preprimary.db.seed import seed_default_users
from preprimary.db.students_repository import list_students
from preprimary.db.users_repository import (
    UserRecord,
    create_user,
    get_teacher_names,
    get_user_by_email,
)
from preprimary.reports.data import (
    ReportOptions,
    collect_plan_report,
    collect_student_report,
    report_filename,
)
from preprimary.reports.excel import build_student_progress_workbook, build_teaching_plans_workbook
from preprimary.reports.pdf import ReportError, ReportPDFGenerator
from preprimary.utils.validators import normalize_email, validate_email

app = typer.Typer(
    name="preprimary",
    help="Pre-primary student records: students, progress, teaching plans and reports.",
    no_args_is_help=True,
)

console = Console()

# Reports from the command line see every record, like an admin
CLI_OPERATOR = UserRecord(id=0, email="cli@localhost", password_hash="", role="admin", name="CLI")


class ReportKind(str, Enum):
    STUDENTS = "students"
    PLANS = "plans"


class ReportFormat(str, Enum):
    PDF = "pdf"
    EXCEL = "excel"


def _open_db() -> Path:
    """Point the repositories at the configured database, creating it if needed."""
    db_path = load_app_config().database_path
    init_db(db_path)
    return db_path


@app.command(name="init-db")
def init_database() -> None:
    """Create the database schema and seed default accounts."""
    db_path = _open_db()
    created = seed_default_users()

    console.print(f"[green]✓ Database ready[/green] [dim]({db_path})[/dim]")
    if created:
        password = load_app_config().auth.default_password
        console.print(f"  Created {created} default accounts (password: {password})")
    else:
        console.print("  [dim]Users already present; nothing seeded[/dim]")


@app.command()
def serve(
    host: str = typer.Option("127.0.0.1", "--host", help="Bind address"),
    port: int = typer.Option(8000, "--port", "-p", help="Port"),
    reload: bool = typer.Option(False, "--reload", help="Reload on code changes"),
) -> None:
    """Run the Web API."""
    import uvicorn

    auth = load_app_config().auth
    if not os.environ.get(auth.secret_env):
        console.print(
            f"[yellow]⚠ {auth.secret_env} is not set; using a random secret, "
            "so tokens will not survive a restart[/yellow]"
        )
    console.print(f"[green]Serving on http://{host}:{port}[/green] (docs at /docs)")
    uvicorn.run("preprimary.web.api:app", host=host, port=port, reload=reload)


@app.command(name="add-teacher")
def add_teacher(
    name: str = typer.Argument(..., help="Teacher's full name"),
    email: str = typer.Argument(..., help="Login email"),
    password: str = typer.Option(
        ..., "--password", prompt=True, hide_input=True, help="Login password (min 6 chars)"
    ),
    classes: list[ClassLevel] = typer.Option(
        [], "--class", "-c", help="Assigned class (repeatable)"
    ),
) -> None:
    """Create a teacher account."""
    if len(name.strip()) < 2:
        console.print("[red]✗ Name must be at least 2 characters[/red]")
        raise typer.Exit(code=1)
    if not validate_email(email):
        console.print(f"[red]✗ Invalid email format: {email}[/red]")
        raise typer.Exit(code=1)
    if len(password) < 6:
        console.print("[red]✗ Password must be at least 6 characters[/red]")
        raise typer.Exit(code=1)

    _open_db()
    email = normalize_email(email)
    if get_user_by_email(email) is not None:
        console.print(f"[yellow]⚠ Email '{email}' is already registered[/yellow]")
        raise typer.Exit(code=1)

    try:
        teacher = create_user(
            email=email,
            password_hash=hash_password(password),
            name=name.strip(),
            role="teacher",
            assigned_classes=[c.value for c in classes],
        )
    except sqlite3.IntegrityError as e:
        console.print(f"[red]✗ {e}[/red]")
        raise typer.Exit(code=1)

    console.print(f"[green]✓ Teacher created[/green] {teacher.name} [dim](id {teacher.id})[/dim]")


@app.command(name="list-students")
def list_students_cmd(
    class_level: ClassLevel | None = typer.Option(None, "--class", "-c", help="Only this class"),
    teacher_id: int | None = typer.Option(None, "--teacher", "-t", help="Only this teacher's students"),
    search: str | None = typer.Option(None, "--search", "-s", help="Name contains"),
) -> None:
    """Show students in a table."""
    _open_db()
    students = list_students(
        class_level=class_level.value if class_level else None,
        teacher_id=teacher_id,
        search=search,
    )

    if not students:
        console.print("[dim]No students found[/dim]")
        return

    names = get_teacher_names()
    table = Table(show_header=True, header_style="bold")
    table.add_column("ID", justify="right")
    table.add_column("Name")
    table.add_column("Class")
    table.add_column("Age", justify="right")
    table.add_column("Learning Ability")
    table.add_column("Writing Speed")
    table.add_column("Teacher")

    for s in students:
        table.add_row(
            str(s.id),
            s.name,
            s.class_level,
            str(s.age),
            s.learning_ability,
            format_enum_value(s.writing_speed),
            names.get(s.teacher_id, "Unknown"),
        )

    console.print(table)
    console.print(f"[dim]{len(students)} student(s)[/dim]")


@app.command()
def report(
    kind: ReportKind = typer.Argument(..., help="students or plans"),
    fmt: ReportFormat = typer.Option(ReportFormat.PDF, "--format", "-f", help="pdf or excel"),
    output: Path | None = typer.Option(
        None, "--output", "-o", help="Output file (default: dated name in current directory)"
    ),
    class_level: ClassLevel | None = typer.Option(None, "--class", "-c", help="Only this class"),
    plan_type: PlanType | None = typer.Option(None, "--type", help="Plan type (plans only)"),
    teacher_id: int | None = typer.Option(None, "--teacher", "-t", help="Only this teacher"),
    start: datetime | None = typer.Option(None, "--start", formats=["%Y-%m-%d"], help="From date"),
    end: datetime | None = typer.Option(None, "--end", formats=["%Y-%m-%d"], help="To date"),
    photos: bool = typer.Option(False, "--photos", help="Include student photos (PDF only)"),
) -> None:
    """Write a report file."""
    if start and end and end < start:
        console.print("[red]✗ --end must be on or after --start[/red]")
        raise typer.Exit(code=1)

    _open_db()
    options = ReportOptions(
        class_level=class_level.value if class_level else None,
        plan_type=plan_type.value if plan_type else None,
        teacher_id=teacher_id,
        start_date=start.date() if start else None,
        end_date=end.date() if end else None,
        include_photos=photos,
    )

    try:
        if kind is ReportKind.STUDENTS:
            rows = collect_student_report(CLI_OPERATOR, options)
            if fmt is ReportFormat.PDF:
                content = ReportPDFGenerator().build_student_progress(rows, options)
            else:
                content = build_student_progress_workbook(rows, options.class_level)
        else:
            rows = collect_plan_report(CLI_OPERATOR, options)
            if fmt is ReportFormat.PDF:
                content = ReportPDFGenerator().build_teaching_plans(rows, options)
            else:
                content = build_teaching_plans_workbook(rows, options.plan_type, options.class_level)
    except ReportError as e:
        console.print(f"[red]✗ {e}[/red]")
        raise typer.Exit(code=1)

    if output is None:
        output = Path(
            report_filename(
                kind.value,
                fmt.value,
                class_level=options.class_level,
                plan_type=options.plan_type,
            )
        )
    output.parent.mkdir(parents=True, exist_ok=True)
    output.write_bytes(content)

    console.print(f"[green]✓ Report written[/green] {output} [dim]({len(rows)} rows)[/dim]")


if __name__ == "__main__":
    app()
