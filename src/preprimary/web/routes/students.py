"""Student endpoints, including assignment and photo upload."""

import structlog
from fastapi import APIRouter, Depends, File, HTTPException, Query, UploadFile, status

from preprimary.config.app_config import load_app_config
from preprimary.core.access import scoped_teacher_id
from preprimary.core.domain import ClassLevel, LearningAbility, normalize_writing_speed
from preprimary.core.photos import (
    CloudinaryClient,
    InvalidPhotoError,
    PhotoError,
    PhotoTooLargeError,
    PhotoUploadError,
    UnsupportedPhotoTypeError,
    validate_upload,
)
from preprimary.db.students_repository import (
    StudentRecord,
    assign_student_to_teacher,
    create_student,
    delete_student,
    list_students,
    update_student,
)
from preprimary.db.users_repository import UserRecord, get_user
from preprimary.web.deps import (
    get_current_user,
    get_photo_client,
    load_student,
    not_found,
    require_admin,
)
from preprimary.web.schemas import (
    AssignRequest,
    StudentCreate,
    StudentListResponse,
    StudentResponse,
    StudentUpdate,
)

logger = structlog.get_logger(__name__)

router = APIRouter(prefix="/api/students", tags=["students"])


def _require_teacher(teacher_id: int | None) -> int:
    """400 unless teacher_id names an existing teacher."""
    teacher = get_user(teacher_id) if teacher_id is not None else None
    if teacher is None or not teacher.is_teacher:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="A valid teacher_id is required",
        )
    return teacher.id


def _discard_photo(student: StudentRecord) -> None:
    """Remove a student's hosted photo, logging rather than failing."""
    if not student.photo_public_id:
        return
    try:
        CloudinaryClient.from_config().destroy(student.photo_public_id)
    except PhotoError as e:
        logger.warning(
            "students.photo_cleanup_failed", student_id=student.id, error=str(e)
        )


@router.get("", response_model=StudentListResponse)
async def list_all_students(
    class_level: ClassLevel | None = Query(default=None, alias="class"),
    learning_ability: LearningAbility | None = None,
    teacher_id: int | None = None,
    search: str | None = Query(default=None, max_length=100),
    user: UserRecord = Depends(get_current_user),
) -> StudentListResponse:
    """List students. Teachers only see students assigned to them."""
    students = list_students(
        class_level=class_level.value if class_level else None,
        teacher_id=scoped_teacher_id(user, teacher_id),
        learning_ability=learning_ability.value if learning_ability else None,
        search=search,
    )
    return StudentListResponse(
        students=[StudentResponse.model_validate(s) for s in students],
        count=len(students),
    )


@router.post("", response_model=StudentResponse, status_code=status.HTTP_201_CREATED)
async def create_new_student(
    student_data: StudentCreate,
    user: UserRecord = Depends(get_current_user),
) -> StudentResponse:
    """Create a student. A teacher's new students are assigned to them."""
    if user.is_admin:
        teacher_id = _require_teacher(student_data.teacher_id)
    else:
        teacher_id = user.id

    data = student_data.model_dump(mode="json", exclude={"teacher_id"})
    student = create_student(teacher_id=teacher_id, **data)

    logger.info("students.created", student_id=student.id, teacher_id=teacher_id)
    return StudentResponse.model_validate(student)


@router.get("/{student_id}", response_model=StudentResponse)
async def get_one_student(
    student_id: int, user: UserRecord = Depends(get_current_user)
) -> StudentResponse:
    """Get a specific student by ID."""
    return StudentResponse.model_validate(load_student(student_id, user))


@router.put("/{student_id}", response_model=StudentResponse)
async def update_one_student(
    student_id: int,
    student_data: StudentUpdate,
    user: UserRecord = Depends(get_current_user),
) -> StudentResponse:
    """Update a student. Only admins may move a student to another teacher."""
    student = load_student(student_id, user)
    changes = student_data.changes()

    if "teacher_id" in changes and changes["teacher_id"] != student.teacher_id:
        if not user.is_admin:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Only admins can reassign students",
            )
        _require_teacher(changes["teacher_id"])

    class_level = changes.get("class_level", student.class_level)
    writing_speed = changes.get("writing_speed", student.writing_speed)
    changes["writing_speed"] = normalize_writing_speed(class_level, writing_speed)

    updated = update_student(student_id, changes)
    if updated is None:
        raise not_found(f"Student {student_id}")

    logger.info("students.updated", student_id=student_id, fields=sorted(changes))
    return StudentResponse.model_validate(updated)


@router.delete("/{student_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_one_student(
    student_id: int, user: UserRecord = Depends(get_current_user)
) -> None:
    """Delete a student, their progress entries and hosted photo."""
    student = load_student(student_id, user)
    delete_student(student_id)
    _discard_photo(student)
    logger.info("students.deleted", student_id=student_id)


@router.post("/{student_id}/assign", response_model=StudentResponse)
async def assign_student(
    student_id: int,
    assignment: AssignRequest,
    user: UserRecord = Depends(require_admin),
) -> StudentResponse:
    """Assign a student to a teacher (admin only)."""
    student = load_student(student_id, user)

    if not assign_student_to_teacher(student.id, assignment.teacher_id):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Teacher {assignment.teacher_id} not found",
        )

    return StudentResponse.model_validate(load_student(student_id, user))


@router.post("/{student_id}/photo", response_model=StudentResponse)
def upload_student_photo(
    student_id: int,
    photo: UploadFile = File(...),
    user: UserRecord = Depends(get_current_user),
    client: CloudinaryClient = Depends(get_photo_client),
) -> StudentResponse:
    """Upload a photo for a student, replacing any previous one."""
    student = load_student(student_id, user)
    config = load_app_config().photos

    # Read one byte past the limit so oversize files are detected without
    # loading all of them
    data = photo.file.read(config.max_bytes + 1)
    try:
        validate_upload(photo.content_type, len(data), config)
    except UnsupportedPhotoTypeError as e:
        raise HTTPException(
            status_code=status.HTTP_415_UNSUPPORTED_MEDIA_TYPE, detail=str(e)
        ) from e
    except PhotoTooLargeError as e:
        raise HTTPException(
            status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE, detail=str(e)
        ) from e
    except InvalidPhotoError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e)) from e

    try:
        uploaded = client.upload(
            data,
            content_type=photo.content_type,
            filename=photo.filename or f"student-{student_id}",
        )
    except PhotoUploadError as e:
        logger.error("students.photo_upload_failed", student_id=student_id, error=str(e))
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=str(e)) from e

    if student.photo_public_id and student.photo_public_id != uploaded.public_id:
        try:
            client.destroy(student.photo_public_id)
        except PhotoUploadError as e:
            logger.warning("students.photo_cleanup_failed", student_id=student_id, error=str(e))

    updated = update_student(
        student_id,
        {"photo_url": uploaded.url, "photo_public_id": uploaded.public_id},
    )
    if updated is None:
        raise not_found(f"Student {student_id}")

    logger.info("students.photo_uploaded", student_id=student_id, public_id=uploaded.public_id)
    return StudentResponse.model_validate(updated)


@router.delete("/{student_id}/photo", response_model=StudentResponse)
def delete_student_photo(
    student_id: int,
    user: UserRecord = Depends(get_current_user),
    client: CloudinaryClient = Depends(get_photo_client),
) -> StudentResponse:
    """Remove a student's photo."""
    student = load_student(student_id, user)
    if not student.photo_url:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Student has no photo",
        )

    if student.photo_public_id:
        try:
            client.destroy(student.photo_public_id)
        except PhotoUploadError as e:
            raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=str(e)) from e

    updated = update_student(student_id, {"photo_url": None, "photo_public_id": None})
    if updated is None:
        raise not_found(f"Student {student_id}")

    logger.info("students.photo_removed", student_id=student_id)
    return StudentResponse.model_validate(updated)
