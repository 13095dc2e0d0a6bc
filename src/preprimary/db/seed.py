"""Default accounts for a fresh database.

One admin and one teacher per class, all sharing the configured default
password. Seeding only happens while the users table is empty.
"""

from __future__ import annotations

import structlog

from preprimary.config.app_config import load_app_config
from preprimary.core.auth import hash_password
from preprimary.db.users_repository import count_users, create_user

logger = structlog.get_logger(__name__)

DEFAULT_USERS: list[dict] = [
    {
        "email": "admin@school.com",
        "name": "Admin User",
        "role": "admin",
        "assigned_classes": [],
    },
    {
        "email": "teacher1@school.com",
        "name": "Anita Gurung",
        "role": "teacher",
        "assigned_classes": ["Nursery"],
    },
    {
        "email": "teacher2@school.com",
        "name": "Binay Shrestha",
        "role": "teacher",
        "assigned_classes": ["LKG"],
    },
    {
        "email": "teacher3@school.com",
        "name": "Champa Devi",
        "role": "teacher",
        "assigned_classes": ["UKG"],
    },
]


def seed_default_users(password: str | None = None) -> int:
    """Create the default accounts if no user exists yet.

    Args:
        password: Password for every default account
            (default: auth.default_password from config)

    Returns:
        Number of users created
    """
    if count_users() > 0:
        return 0

    password = password or load_app_config().auth.default_password
    password_hash = hash_password(password)

    for user in DEFAULT_USERS:
        create_user(password_hash=password_hash, **user)

    logger.info("database.seeded", users=len(DEFAULT_USERS))
    return len(DEFAULT_USERS)
