"""Progress entry endpoints."""

from datetime import date

import structlog
from fastapi import APIRouter, Depends, HTTPException, status

from preprimary.db.progress_repository import (
    RATING_FIELDS,
    ProgressRecord,
    create_progress,
    delete_progress,
    get_progress,
    list_progress_for_student,
    update_progress,
)
from preprimary.db.users_repository import UserRecord
from preprimary.web.deps import get_current_user, load_student, not_found
from preprimary.web.schemas import (
    ProgressCreate,
    ProgressListResponse,
    ProgressResponse,
    ProgressUpdate,
)

logger = structlog.get_logger(__name__)

router = APIRouter(prefix="/api/progress", tags=["progress"])


def _load_entry(progress_id: int, user: UserRecord) -> ProgressRecord:
    """Fetch an entry whose student the user may access."""
    entry = get_progress(progress_id)
    if entry is None:
        raise not_found(f"Progress entry {progress_id}")
    load_student(entry.student_id, user)
    return entry


@router.get("/{student_id}", response_model=ProgressListResponse)
async def list_student_progress(
    student_id: int,
    start_date: date | None = None,
    end_date: date | None = None,
    user: UserRecord = Depends(get_current_user),
) -> ProgressListResponse:
    """Progress entries of a student, newest first, within an optional window."""
    load_student(student_id, user)

    if start_date and end_date and end_date < start_date:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="end_date must be on or after start_date",
        )

    entries = list_progress_for_student(student_id, start_date, end_date)
    return ProgressListResponse(
        entries=[ProgressResponse.model_validate(e) for e in entries],
        count=len(entries),
    )


@router.post("", response_model=ProgressResponse, status_code=status.HTTP_201_CREATED)
async def record_progress(
    progress_data: ProgressCreate,
    user: UserRecord = Depends(get_current_user),
) -> ProgressResponse:
    """Record a progress entry for a student. Date defaults to today."""
    load_student(progress_data.student_id, user)

    data = progress_data.model_dump(mode="json")
    entry = create_progress(
        student_id=progress_data.student_id,
        ratings={field: data[field] for field in RATING_FIELDS},
        entry_date=progress_data.date,
        comments=progress_data.comments,
    )

    logger.info("progress.created", progress_id=entry.id, student_id=entry.student_id)
    return ProgressResponse.model_validate(entry)


@router.put("/{progress_id}", response_model=ProgressResponse)
async def correct_progress(
    progress_id: int,
    progress_data: ProgressUpdate,
    user: UserRecord = Depends(get_current_user),
) -> ProgressResponse:
    """Update a progress entry."""
    _load_entry(progress_id, user)
    changes = progress_data.changes()

    entry = update_progress(progress_id, changes)
    if entry is None:
        raise not_found(f"Progress entry {progress_id}")

    logger.info("progress.updated", progress_id=progress_id, fields=sorted(changes))
    return ProgressResponse.model_validate(entry)


@router.delete("/{progress_id}", status_code=status.HTTP_204_NO_CONTENT)
async def remove_progress(
    progress_id: int, user: UserRecord = Depends(get_current_user)
) -> None:
    """Delete a progress entry."""
    _load_entry(progress_id, user)
    delete_progress(progress_id)
    logger.info("progress.deleted", progress_id=progress_id)
