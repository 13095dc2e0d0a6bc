"""Prompt templates stored as Markdown files."""

from preprimary.prompts.registry import clear_cache, get_prompt, list_prompts

__all__ = ["get_prompt", "list_prompts", "clear_cache"]
