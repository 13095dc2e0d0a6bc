"""Password hashing and access tokens.

Tokens are HS256 JWTs carrying the user id (``sub``), email, role and
assigned classes. The signing secret comes from the environment variable
named in the auth config.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Any

import structlog
from jose import ExpiredSignatureError, JWTError, jwt
from passlib.context import CryptContext

from preprimary.config.app_config import AuthConfig, load_app_config
from preprimary.db.users_repository import UserRecord, get_user_by_email

logger = structlog.get_logger(__name__)

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")


class AuthError(Exception):
    """Invalid, expired or malformed credentials."""

    pass


def hash_password(password: str) -> str:
    """Hash a plain password with bcrypt."""
    return pwd_context.hash(password)


def verify_password(plain_password: str, password_hash: str) -> bool:
    """Check a plain password against a stored hash."""
    try:
        return pwd_context.verify(plain_password, password_hash)
    except ValueError:
        # Unrecognized or corrupt hash
        return False


def create_access_token(
    user: UserRecord,
    config: AuthConfig | None = None,
    expires_delta: timedelta | None = None,
) -> str:
    """Issue a signed token for user.

    Args:
        user: Authenticated user
        config: Auth settings (default: loaded app config)
        expires_delta: Token lifetime (default: config.token_hours)

    Returns:
        Encoded JWT
    """
    config = config or load_app_config().auth
    if expires_delta is None:
        expires_delta = timedelta(hours=config.token_hours)

    claims: dict[str, Any] = {
        "sub": str(user.id),
        "email": user.email,
        "role": user.role,
        "classes": user.assigned_classes,
        "exp": datetime.now(timezone.utc) + expires_delta,
    }
    return jwt.encode(claims, config.get_secret(), algorithm=config.algorithm)


def decode_access_token(token: str, config: AuthConfig | None = None) -> dict[str, Any]:
    """Verify a token and return its claims.

    Raises:
        AuthError: If the token is expired, tampered with or lacks a subject
    """
    config = config or load_app_config().auth
    try:
        claims = jwt.decode(token, config.get_secret(), algorithms=[config.algorithm])
    except ExpiredSignatureError as e:
        raise AuthError("Token has expired") from e
    except JWTError as e:
        raise AuthError("Invalid authentication token") from e

    subject = claims.get("sub")
    if subject is None or not str(subject).isdigit():
        raise AuthError("Invalid authentication token")

    return claims


def authenticate(email: str, password: str) -> UserRecord | None:
    """Return the user if email and password match, else None."""
    user = get_user_by_email(email)
    if user is None or not verify_password(password, user.password_hash):
        logger.info("auth.login_failed", email=email)
        return None

    logger.info("auth.login_succeeded", user_id=user.id, role=user.role)
    return user
