"""Markdown prompt templates for the suggestion service.

A prompt key is its path under this package without the extension, so
``suggestions/system`` is ``prompts/suggestions/system.md``. Templates use
``{name}`` placeholders. Substitution happens in a single pass, so a value
that itself contains braces (a teacher's request, say) is left alone.
"""

from __future__ import annotations

import re
from functools import lru_cache
from pathlib import Path

import structlog

logger = structlog.get_logger(__name__)

PROMPTS_DIR = Path(__file__).parent

_PLACEHOLDER = re.compile(r"\{([a-z_][a-z0-9_]*)\}")


class PromptNotFoundError(FileNotFoundError):
    """No template file for the requested key."""


@lru_cache(maxsize=32)
def _load(key: str) -> str:
    path = PROMPTS_DIR / f"{key}.md"
    if not path.is_file():
        raise PromptNotFoundError(f"Prompt not found: {key} (looked at {path})")
    logger.debug("prompt_loaded", key=key)
    return path.read_text(encoding="utf-8")


def placeholders(key: str) -> set[str]:
    """Names of the ``{name}`` placeholders a template expects."""
    return set(_PLACEHOLDER.findall(_load(key)))


def get_prompt(key: str, **variables: object) -> str:
    """Render prompt ``key`` with ``variables``.

    Placeholders without a value are kept as written.

    Raises:
        PromptNotFoundError: If no template exists for ``key``
    """

    def fill(match: re.Match[str]) -> str:
        name = match.group(1)
        return str(variables[name]) if name in variables else match.group(0)

    return _PLACEHOLDER.sub(fill, _load(key)).strip()


def list_prompts() -> list[str]:
    keys = (path.relative_to(PROMPTS_DIR).with_suffix("").as_posix() for path in PROMPTS_DIR.rglob("*.md"))
    return sorted(keys)


def clear_cache() -> None:
    """Forget loaded templates (tests edit or add prompt files)."""
    _load.cache_clear()
