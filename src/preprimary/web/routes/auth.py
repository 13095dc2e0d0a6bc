"""Login and current-user endpoints."""

import structlog
from fastapi import APIRouter, Depends, HTTPException, status

from preprimary.core.auth import authenticate, create_access_token
from preprimary.db.users_repository import UserRecord
from preprimary.web.deps import get_current_user
from preprimary.web.schemas import LoginRequest, TokenResponse, UserResponse

logger = structlog.get_logger(__name__)

router = APIRouter(prefix="/api/auth", tags=["auth"])


@router.post("/login", response_model=TokenResponse)
async def login(credentials: LoginRequest) -> TokenResponse:
    """Exchange email and password for a bearer token."""
    user = authenticate(credentials.email, credentials.password)
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid email or password",
        )

    return TokenResponse(
        access_token=create_access_token(user),
        user=UserResponse.model_validate(user),
    )


@router.get("/me", response_model=UserResponse)
async def me(user: UserRecord = Depends(get_current_user)) -> UserResponse:
    """Return the authenticated user."""
    return UserResponse.model_validate(user)
