"""Request dependencies: current user, role checks and owned-record lookups."""

from __future__ import annotations

from typing import Callable

from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer

from preprimary.core.access import (
    AccessDenied,
    can_access_plan,
    can_access_student,
    require_role,
)
from preprimary.core.auth import AuthError, decode_access_token
from preprimary.core.photos import CloudinaryClient, PhotoConfigError
from preprimary.db.plans_repository import PlanRecord, get_plan
from preprimary.db.students_repository import StudentRecord, get_student
from preprimary.db.users_repository import UserRecord, get_user

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/auth/login", auto_error=False)


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


def get_current_user(token: str | None = Depends(oauth2_scheme)) -> UserRecord:
    """Resolve the bearer token to a user, or fail with 401."""
    if not token:
        raise _unauthorized("Authentication required")

    try:
        claims = decode_access_token(token)
    except AuthError as e:
        raise _unauthorized(str(e)) from e

    user = get_user(int(claims["sub"]))
    if user is None:
        raise _unauthorized("User no longer exists")

    return user


def require_roles(*roles: str) -> Callable[..., UserRecord]:
    """Dependency factory: current user, who must hold one of roles."""

    def dependency(user: UserRecord = Depends(get_current_user)) -> UserRecord:
        try:
            require_role(user, *roles)
        except AccessDenied as e:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=str(e),
            ) from e
        return user

    return dependency


require_admin = require_roles("admin")


def not_found(what: str) -> HTTPException:
    """404 for a record that is missing, or was deleted mid-request."""
    return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"{what} not found")


def load_student(student_id: int, user: UserRecord) -> StudentRecord:
    """Fetch a student the user may access (404 if missing, 403 if not theirs)."""
    student = get_student(student_id)
    if student is None:
        raise not_found(f"Student {student_id}")
    if not can_access_student(user, student):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="You can only access your own students",
        )
    return student


def load_plan(plan_id: int, user: UserRecord) -> PlanRecord:
    """Fetch a plan the user may access (404 if missing, 403 if not theirs)."""
    plan = get_plan(plan_id)
    if plan is None:
        raise not_found(f"Teaching plan {plan_id}")
    if not can_access_plan(user, plan):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="You can only access your own teaching plans",
        )
    return plan


def get_photo_client() -> CloudinaryClient:
    """Cloudinary client from environment credentials, or 503."""
    try:
        return CloudinaryClient.from_config()
    except PhotoConfigError as e:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=str(e),
        ) from e
