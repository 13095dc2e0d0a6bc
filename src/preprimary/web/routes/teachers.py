"""Teacher account endpoints (admin only)."""

import sqlite3

import structlog
from fastapi import APIRouter, Depends, HTTPException, status

from preprimary.core.auth import hash_password
from preprimary.db.students_repository import count_students_for_teacher
from preprimary.db.users_repository import (
    UserRecord,
    create_user,
    delete_user,
    get_user,
    get_user_by_email,
    list_teachers,
    update_user,
)
from preprimary.web.deps import not_found, require_admin
from preprimary.web.schemas import (
    TeacherCreate,
    TeacherListResponse,
    TeacherResponse,
    TeacherUpdate,
)

logger = structlog.get_logger(__name__)

router = APIRouter(
    prefix="/api/teachers",
    tags=["teachers"],
    dependencies=[Depends(require_admin)],
)


def _to_response(teacher: UserRecord) -> TeacherResponse:
    return TeacherResponse(
        id=teacher.id,
        email=teacher.email,
        name=teacher.name,
        role=teacher.role,
        assigned_classes=teacher.assigned_classes,
        created_at=teacher.created_at,
        student_count=count_students_for_teacher(teacher.id),
    )


def _get_teacher_or_404(teacher_id: int) -> UserRecord:
    teacher = get_user(teacher_id)
    if teacher is None or not teacher.is_teacher:
        raise not_found(f"Teacher {teacher_id}")
    return teacher


def _email_taken(email: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_409_CONFLICT,
        detail=f"Email '{email}' is already registered",
    )


@router.get("", response_model=TeacherListResponse)
async def list_all_teachers() -> TeacherListResponse:
    """List all teachers with their student counts."""
    teachers = [_to_response(t) for t in list_teachers()]
    return TeacherListResponse(teachers=teachers, count=len(teachers))


@router.post("", response_model=TeacherResponse, status_code=status.HTTP_201_CREATED)
async def create_teacher(teacher_data: TeacherCreate) -> TeacherResponse:
    """Create a teacher account."""
    if get_user_by_email(teacher_data.email) is not None:
        raise _email_taken(teacher_data.email)

    try:
        teacher = create_user(
            email=teacher_data.email,
            password_hash=hash_password(teacher_data.password),
            name=teacher_data.name,
            role="teacher",
            assigned_classes=[c.value for c in teacher_data.assigned_classes],
        )
    except sqlite3.IntegrityError as e:
        raise _email_taken(teacher_data.email) from e

    logger.info("teachers.created", teacher_id=teacher.id)
    return _to_response(teacher)


@router.get("/{teacher_id}", response_model=TeacherResponse)
async def get_teacher(teacher_id: int) -> TeacherResponse:
    """Get a specific teacher by ID."""
    return _to_response(_get_teacher_or_404(teacher_id))


@router.put("/{teacher_id}", response_model=TeacherResponse)
async def update_teacher(teacher_id: int, teacher_data: TeacherUpdate) -> TeacherResponse:
    """Update a teacher. A new password replaces the stored hash."""
    _get_teacher_or_404(teacher_id)
    changes = teacher_data.changes()

    if "password" in changes:
        changes["password_hash"] = hash_password(changes.pop("password"))

    if "email" in changes:
        existing = get_user_by_email(changes["email"])
        if existing is not None and existing.id != teacher_id:
            raise _email_taken(changes["email"])

    try:
        teacher = update_user(teacher_id, changes)
    except sqlite3.IntegrityError as e:
        raise _email_taken(changes.get("email", "")) from e

    if teacher is None:
        raise not_found(f"Teacher {teacher_id}")
    logger.info("teachers.updated", teacher_id=teacher_id, fields=sorted(changes))
    return _to_response(teacher)


@router.delete("/{teacher_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_teacher(teacher_id: int) -> None:
    """Delete a teacher who has no students left. Their plans go with them."""
    _get_teacher_or_404(teacher_id)

    assigned = count_students_for_teacher(teacher_id)
    if assigned:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=f"Teacher still has {assigned} assigned student(s); reassign them first",
        )

    delete_user(teacher_id)
    logger.info("teachers.deleted", teacher_id=teacher_id)
