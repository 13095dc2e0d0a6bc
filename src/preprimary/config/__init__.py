"""Configuration package for the pre-primary record system."""

from preprimary.config.app_config import (
    AIConfig,
    AppConfig,
    AuthConfig,
    PhotoConfig,
    SchoolConfig,
    clear_config_cache,
    load_app_config,
)

__all__ = [
    "AIConfig",
    "AppConfig",
    "AuthConfig",
    "PhotoConfig",
    "SchoolConfig",
    "clear_config_cache",
    "load_app_config",
]
