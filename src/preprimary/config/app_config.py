"""Application configuration loader.

Loads centralized configuration from data/config/app_config_v1.yaml,
layered over built-in defaults. Secrets never live in the YAML file: the
config only names the environment variables that hold them.

Usage:
    from preprimary.config.app_config import load_app_config

    config = load_app_config()
    secret = config.auth.get_secret()
"""

from __future__ import annotations

import os
import secrets
from dataclasses import dataclass, field
from functools import lru_cache
from pathlib import Path
from typing import Any

import structlog
import yaml

logger = structlog.get_logger(__name__)

# Config file path (relative to project root)
CONFIG_FILE = Path("data/config/app_config_v1.yaml")


@lru_cache(maxsize=1)
def process_secret() -> str:
    """Random signing secret for this process when JWT_SECRET is unset.

    Tokens signed with it stop validating when the server restarts.
    """
    logger.warning("auth.ephemeral_secret_in_use")
    return secrets.token_urlsafe(32)


@dataclass
class SchoolConfig:
    """School identity printed on reports."""

    name: str = "Nepal Central High School"
    address: str = "Narephat, Kathmandu"
    subtitle: str = "Pre-Primary Student Record System"


@dataclass
class AuthConfig:
    """Token settings."""

    secret_env: str = "JWT_SECRET"
    algorithm: str = "HS256"
    token_hours: int = 24
    default_password: str = "lkg123"

    def get_secret(self) -> str:
        """Signing secret from the environment, else a random per-process one."""
        secret = os.environ.get(self.secret_env)
        if not secret:
            return process_secret()
        return secret


@dataclass
class AIConfig:
    """Configuration for the suggestion provider (OpenAI-compatible)."""

    provider: str = "deepseek"
    base_url: str = "https://api.deepseek.com/v1"
    model: str = "deepseek-chat"
    api_key_env: str | None = "DEEPSEEK_API_KEY"
    temperature: float = 0.7
    max_tokens: int = 500
    timeout: int = 60

    def get_api_key(self) -> str | None:
        """Get API key from environment variable."""
        if self.api_key_env:
            return os.environ.get(self.api_key_env)
        return None


@dataclass
class PhotoConfig:
    """Configuration for student photo hosting (Cloudinary)."""

    cloud_name_env: str = "CLOUDINARY_CLOUD_NAME"
    api_key_env: str = "CLOUDINARY_API_KEY"
    api_secret_env: str = "CLOUDINARY_API_SECRET"
    folder: str = "students"
    max_bytes: int = 1024 * 1024
    allowed_types: list[str] = field(
        default_factory=lambda: ["image/jpeg", "image/png", "image/gif", "image/webp"]
    )

    def get_credentials(self) -> tuple[str, str, str] | None:
        """Return (cloud_name, api_key, api_secret) or None if any is missing."""
        values = (
            os.environ.get(self.cloud_name_env, ""),
            os.environ.get(self.api_key_env, ""),
            os.environ.get(self.api_secret_env, ""),
        )
        if not all(values):
            return None
        return values


@dataclass
class AppConfig:
    """Application-wide configuration."""

    school: SchoolConfig = field(default_factory=SchoolConfig)
    auth: AuthConfig = field(default_factory=AuthConfig)
    ai: AIConfig = field(default_factory=AIConfig)
    photos: PhotoConfig = field(default_factory=PhotoConfig)
    paths: dict[str, str] = field(default_factory=dict)

    @property
    def database_path(self) -> Path:
        return Path(self.paths.get("database", "db/preprimary.db"))


# Module-level cache
_cached_config: AppConfig | None = None


def _get_defaults() -> dict[str, Any]:
    """Get default configuration values."""
    return {
        "school": {
            "name": "Nepal Central High School",
            "address": "Narephat, Kathmandu",
            "subtitle": "Pre-Primary Student Record System",
        },
        "auth": {
            "secret_env": "JWT_SECRET",
            "algorithm": "HS256",
            "token_hours": 24,
            "default_password": "lkg123",
        },
        "ai": {
            "provider": "deepseek",
            "base_url": "https://api.deepseek.com/v1",
            "model": "deepseek-chat",
            "api_key_env": "DEEPSEEK_API_KEY",
            "temperature": 0.7,
            "max_tokens": 500,
            "timeout": 60,
        },
        "photos": {
            "folder": "students",
            "max_bytes": 1024 * 1024,
        },
        "paths": {
            "database": "db/preprimary.db",
        },
    }


def _merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Shallow-merge each section of override into base."""
    result = {key: dict(value) for key, value in base.items()}
    for section, values in (override or {}).items():
        if isinstance(values, dict):
            result.setdefault(section, {}).update(values)
    return result


def _parse_config(data: dict[str, Any]) -> AppConfig:
    """Parse configuration dictionary into AppConfig object."""
    school_data = data.get("school", {})
    school = SchoolConfig(
        name=school_data.get("name", SchoolConfig.name),
        address=school_data.get("address", SchoolConfig.address),
        subtitle=school_data.get("subtitle", SchoolConfig.subtitle),
    )

    auth_data = data.get("auth", {})
    auth = AuthConfig(
        secret_env=auth_data.get("secret_env", "JWT_SECRET"),
        algorithm=auth_data.get("algorithm", "HS256"),
        token_hours=int(auth_data.get("token_hours", 24)),
        default_password=auth_data.get("default_password", "lkg123"),
    )

    ai_data = data.get("ai", {})
    ai = AIConfig(
        provider=ai_data.get("provider", "deepseek"),
        base_url=ai_data.get("base_url", "https://api.deepseek.com/v1"),
        model=ai_data.get("model", "deepseek-chat"),
        api_key_env=ai_data.get("api_key_env", "DEEPSEEK_API_KEY"),
        temperature=float(ai_data.get("temperature", 0.7)),
        max_tokens=int(ai_data.get("max_tokens", 500)),
        timeout=int(ai_data.get("timeout", 60)),
    )

    photos_data = data.get("photos", {})
    photos = PhotoConfig(
        folder=photos_data.get("folder", "students"),
        max_bytes=int(photos_data.get("max_bytes", 1024 * 1024)),
    )
    if "allowed_types" in photos_data:
        photos.allowed_types = list(photos_data["allowed_types"])

    return AppConfig(
        school=school,
        auth=auth,
        ai=ai,
        photos=photos,
        paths=data.get("paths", {}),
    )


def load_app_config(force_reload: bool = False) -> AppConfig:
    """Load application config, falling back to defaults.

    Args:
        force_reload: If True, ignore cached config and reload from file.

    Returns:
        AppConfig object with all settings.
    """
    global _cached_config

    if _cached_config is not None and not force_reload:
        return _cached_config

    data = _get_defaults()

    if CONFIG_FILE.exists():
        logger.debug("loading_app_config", source=str(CONFIG_FILE))
        loaded = yaml.safe_load(CONFIG_FILE.read_text(encoding="utf-8")) or {}
        data = _merge(data, loaded)
    else:
        logger.info("using_default_config")

    _cached_config = _parse_config(data)
    return _cached_config


def clear_config_cache() -> None:
    """Clear the configuration cache.

    Useful for testing or when config is modified at runtime.
    """
    global _cached_config
    _cached_config = None
