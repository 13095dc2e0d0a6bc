"""LLM client for OpenAI-compatible providers."""

from preprimary.llm.client import LLMClient, LLMConfig, LLMError

__all__ = ["LLMClient", "LLMConfig", "LLMError"]
