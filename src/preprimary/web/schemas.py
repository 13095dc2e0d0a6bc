"""Pydantic schemas for Web API.

Request bodies carry the validation rules for students, teachers, progress
entries and teaching plans; responses are built from repository records.
"""

from __future__ import annotations

import datetime as dt
from typing import Any, ClassVar

from pydantic import BaseModel, Field, field_validator, model_validator

from preprimary.core.domain import (
    ClassLevel,
    LearningAbility,
    PlanType,
    ProgressRating,
    WritingSpeed,
    normalize_writing_speed,
)
from preprimary.utils.validators import check_date_range, normalize_email, validate_email


class PartialUpdate(BaseModel):
    """Base for PUT bodies: only fields the client sent are applied."""

    # Fields that may be explicitly cleared with null
    NULLABLE: ClassVar[tuple[str, ...]] = ()

    def changes(self) -> dict[str, Any]:
        data = self.model_dump(mode="json", exclude_unset=True)
        return {k: v for k, v in data.items() if v is not None or k in self.NULLABLE}


# =============================================================================
# AUTH SCHEMAS
# =============================================================================


class LoginRequest(BaseModel):
    """Request body for logging in."""

    email: str = Field(..., min_length=3, max_length=200)
    password: str = Field(..., min_length=1, max_length=200)


class UserResponse(BaseModel):
    """A user without credentials."""

    id: int
    email: str
    name: str
    role: str
    assigned_classes: list[str] = Field(default_factory=list)
    created_at: str

    model_config = {"from_attributes": True}


class TokenResponse(BaseModel):
    """Response for a successful login."""

    access_token: str
    token_type: str = "bearer"
    user: UserResponse


# =============================================================================
# TEACHER SCHEMAS
# =============================================================================


def _check_email(value: str) -> str:
    if not validate_email(value):
        raise ValueError("Invalid email format")
    return normalize_email(value)


class TeacherCreate(BaseModel):
    """Request body for creating a teacher account."""

    name: str = Field(..., min_length=2, max_length=100)
    email: str = Field(..., max_length=200)
    password: str = Field(..., min_length=6, max_length=200)
    assigned_classes: list[ClassLevel] = Field(default_factory=list)

    @field_validator("email")
    @classmethod
    def email_format(cls, value: str) -> str:
        return _check_email(value)


class TeacherUpdate(PartialUpdate):
    """Request body for updating a teacher. Password is re-hashed if sent."""

    name: str | None = Field(default=None, min_length=2, max_length=100)
    email: str | None = Field(default=None, max_length=200)
    password: str | None = Field(default=None, min_length=6, max_length=200)
    assigned_classes: list[ClassLevel] | None = None

    @field_validator("email")
    @classmethod
    def email_format(cls, value: str | None) -> str | None:
        return None if value is None else _check_email(value)


class TeacherResponse(UserResponse):
    """A teacher with the number of assigned students."""

    student_count: int = 0


class TeacherListResponse(BaseModel):
    teachers: list[TeacherResponse]
    count: int


# =============================================================================
# STUDENT SCHEMAS
# =============================================================================


class StudentCreate(BaseModel):
    """Request body for creating a student.

    teacher_id is required from admins and ignored for teachers, whose new
    students are always assigned to themselves.
    """

    name: str = Field(..., min_length=2, max_length=100)
    age: int = Field(..., ge=3, le=6)
    class_level: ClassLevel
    learning_ability: LearningAbility
    writing_speed: WritingSpeed | None = None
    parent_contact: str | None = Field(default=None, max_length=50)
    notes: str | None = Field(default=None, max_length=1000)
    photo_url: str | None = Field(default=None, max_length=500)
    teacher_id: int | None = None

    @model_validator(mode="after")
    def clear_nursery_writing_speed(self) -> StudentCreate:
        if normalize_writing_speed(self.class_level, self.writing_speed) is None:
            self.writing_speed = None
        return self


class StudentUpdate(PartialUpdate):
    """Request body for updating a student."""

    NULLABLE: ClassVar[tuple[str, ...]] = ("writing_speed", "parent_contact", "notes")

    name: str | None = Field(default=None, min_length=2, max_length=100)
    age: int | None = Field(default=None, ge=3, le=6)
    class_level: ClassLevel | None = None
    learning_ability: LearningAbility | None = None
    writing_speed: WritingSpeed | None = None
    parent_contact: str | None = Field(default=None, max_length=50)
    notes: str | None = Field(default=None, max_length=1000)
    teacher_id: int | None = None


class StudentResponse(BaseModel):
    """Response for a student."""

    id: int
    name: str
    age: int
    class_level: str
    learning_ability: str
    writing_speed: str | None = None
    parent_contact: str | None = None
    notes: str | None = None
    photo_url: str | None = None
    teacher_id: int
    created_at: str
    updated_at: str

    model_config = {"from_attributes": True}


class StudentListResponse(BaseModel):
    """Response for list of students."""

    students: list[StudentResponse]
    count: int


class AssignRequest(BaseModel):
    """Request body for moving a student to another teacher."""

    teacher_id: int


# =============================================================================
# PROGRESS SCHEMAS
# =============================================================================


class ProgressCreate(BaseModel):
    """Request body for recording a progress entry. Date defaults to today."""

    student_id: int
    date: dt.date | None = None
    social_skills: ProgressRating
    pre_literacy: ProgressRating
    pre_numeracy: ProgressRating
    motor_skills: ProgressRating
    emotional_development: ProgressRating
    comments: str | None = Field(default=None, max_length=1000)


class ProgressUpdate(PartialUpdate):
    """Request body for correcting a progress entry. The student cannot change."""

    NULLABLE: ClassVar[tuple[str, ...]] = ("comments",)

    date: dt.date | None = None
    social_skills: ProgressRating | None = None
    pre_literacy: ProgressRating | None = None
    pre_numeracy: ProgressRating | None = None
    motor_skills: ProgressRating | None = None
    emotional_development: ProgressRating | None = None
    comments: str | None = Field(default=None, max_length=1000)


class ProgressResponse(BaseModel):
    """Response for a progress entry."""

    id: int
    student_id: int
    date: str
    social_skills: str
    pre_literacy: str
    pre_numeracy: str
    motor_skills: str
    emotional_development: str
    comments: str | None = None
    created_at: str

    model_config = {"from_attributes": True}


class ProgressListResponse(BaseModel):
    entries: list[ProgressResponse]
    count: int


# =============================================================================
# TEACHING PLAN SCHEMAS
# =============================================================================


class PlanCreate(BaseModel):
    """Request body for creating a teaching plan."""

    type: PlanType
    class_level: ClassLevel
    title: str = Field(..., min_length=3, max_length=200)
    description: str = Field(..., min_length=10, max_length=5000)
    activities: str = Field(..., min_length=10, max_length=5000)
    goals: str = Field(..., min_length=10, max_length=5000)
    start_date: dt.date
    end_date: dt.date

    @model_validator(mode="after")
    def dates_in_order(self) -> PlanCreate:
        check_date_range(self.start_date, self.end_date)
        return self


class PlanUpdate(PartialUpdate):
    """Request body for updating a teaching plan."""

    type: PlanType | None = None
    class_level: ClassLevel | None = None
    title: str | None = Field(default=None, min_length=3, max_length=200)
    description: str | None = Field(default=None, min_length=10, max_length=5000)
    activities: str | None = Field(default=None, min_length=10, max_length=5000)
    goals: str | None = Field(default=None, min_length=10, max_length=5000)
    start_date: dt.date | None = None
    end_date: dt.date | None = None


class PlanResponse(BaseModel):
    """Response for a teaching plan."""

    id: int
    type: str
    class_level: str
    title: str
    description: str
    activities: str
    goals: str
    start_date: str
    end_date: str
    created_by: int
    created_at: str

    model_config = {"from_attributes": True}


class PlanListResponse(BaseModel):
    plans: list[PlanResponse]
    count: int


# =============================================================================
# SUGGESTION, DASHBOARD AND REPORT SCHEMAS
# =============================================================================


class SuggestionRequest(BaseModel):
    """Request for teaching activity ideas."""

    prompt: str = Field(..., min_length=1, max_length=2000)
    class_level: ClassLevel | None = None


class SuggestionResponse(BaseModel):
    suggestion: str
    source: str  # ai | offline


class StatsResponse(BaseModel):
    """Dashboard counts."""

    total_students: int
    class_count: dict[str, int]
    teacher_count: int
    plan_count: int
    progress_count: int


class ActivityResponse(BaseModel):
    kind: str
    description: str
    timestamp: str
    entity_id: int

    model_config = {"from_attributes": True}


class ActivityListResponse(BaseModel):
    activities: list[ActivityResponse]
    count: int


class StudentReportItem(BaseModel):
    student: StudentResponse
    teacher_name: str
    entries: list[ProgressResponse]


class StudentReportResponse(BaseModel):
    """JSON preview of the student progress report."""

    rows: list[StudentReportItem]
    count: int


class PlanReportItem(BaseModel):
    plan: PlanResponse
    teacher_name: str


class PlanReportResponse(BaseModel):
    """JSON preview of the teaching plans report."""

    rows: list[PlanReportItem]
    count: int


class HealthResponse(BaseModel):
    """Health check response."""

    status: str
    version: str
    timestamp: str
