"""Chat completions client for activity suggestions.

DeepSeek speaks the OpenAI chat completions protocol, so the official
``openai`` SDK is pointed at its base URL. Any other compatible server
(OpenAI itself, a local LM Studio) works by changing ``ai.provider`` and
``ai.base_url`` in config.yaml.

SDK exceptions are translated into the small ``LLMError`` hierarchy below;
callers only ever need to catch ``LLMError``.
"""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from typing import Any, Literal

import openai
import structlog
from openai import OpenAI

from preprimary.config.app_config import AIConfig, load_app_config

logger = structlog.get_logger(__name__)

Provider = Literal["deepseek", "openai", "lmstudio"]

# Keys that providers accept without an account
KEYLESS_PROVIDERS: dict[str, str] = {
    "lmstudio": "lm-studio",
}


class LLMError(Exception):
    """Suggestion provider failed."""


class LLMConnectionError(LLMError):
    """Provider unreachable or timed out."""


class LLMResponseError(LLMError):
    """Provider answered without usable text."""


@dataclass
class LLMConfig:
    provider: str = "deepseek"
    base_url: str = "https://api.deepseek.com/v1"
    model: str = "deepseek-chat"
    temperature: float = 0.7
    max_tokens: int = 500
    timeout: int = 60
    api_key: str | None = None

    @classmethod
    def from_app_config(cls, ai: AIConfig | None = None) -> LLMConfig:
        """Build from the ``ai`` section of config.yaml plus the key env var."""
        ai = ai or load_app_config().ai
        return cls(
            provider=ai.provider,
            base_url=ai.base_url,
            model=ai.model,
            temperature=ai.temperature,
            max_tokens=ai.max_tokens,
            timeout=ai.timeout,
            api_key=ai.get_api_key() or KEYLESS_PROVIDERS.get(ai.provider),
        )

    @property
    def has_credentials(self) -> bool:
        return bool(self.api_key)


@dataclass
class Message:
    role: Literal["system", "user", "assistant"]
    content: str

    def as_payload(self) -> dict[str, str]:
        return {"role": self.role, "content": self.content}


@dataclass
class LLMResponse:
    content: str
    model: str
    provider: str
    usage: dict[str, int] = field(default_factory=dict)
    latency_ms: int = 0
    finish_reason: str | None = None

    @property
    def total_tokens(self) -> int:
        return self.usage.get("total_tokens", 0)

    @property
    def truncated(self) -> bool:
        """True when the reply stopped at ``max_tokens``."""
        return self.finish_reason == "length"


class LLMClient:
    """Thin wrapper over ``OpenAI.chat.completions`` with error translation."""

    def __init__(self, config: LLMConfig | None = None, model: str | None = None):
        self.config = config or LLMConfig.from_app_config()
        if model is not None:
            self.config.model = model

        self._client = OpenAI(
            base_url=self.config.base_url,
            api_key=self.config.api_key or "not-needed",
            timeout=self.config.timeout,
        )
        logger.info(
            "llm_client_initialized",
            provider=self.config.provider,
            model=self.config.model,
        )

    def _create(self, payload: dict[str, Any]) -> Any:
        where = f"{self.config.provider} at {self.config.base_url}"
        try:
            return self._client.chat.completions.create(**payload)
        except openai.APIConnectionError as e:
            # Also covers APITimeoutError
            raise LLMConnectionError(f"Could not reach {where}: {e}") from e
        except openai.APIStatusError as e:
            raise LLMError(f"{where} returned HTTP {e.status_code}: {e.message}") from e
        except openai.OpenAIError as e:
            raise LLMError(f"Request to {where} failed: {e}") from e

    def chat(
        self,
        messages: list[Message],
        temperature: float | None = None,
        max_tokens: int | None = None,
    ) -> LLMResponse:
        """Send one chat completion request.

        Raises:
            LLMConnectionError: Provider unreachable
            LLMResponseError: Reply had no text
            LLMError: Any other provider failure
        """
        payload = {
            "model": self.config.model,
            "messages": [m.as_payload() for m in messages],
            "temperature": self.config.temperature if temperature is None else temperature,
            "max_tokens": self.config.max_tokens if max_tokens is None else max_tokens,
        }

        started = time.monotonic()
        completion = self._create(payload)
        latency_ms = int((time.monotonic() - started) * 1000)

        if not completion.choices:
            raise LLMResponseError(f"{self.config.provider} returned no choices")
        choice = completion.choices[0]
        text = choice.message.content or ""
        if not text.strip():
            raise LLMResponseError(f"{self.config.provider} returned an empty reply")

        usage: dict[str, int] = {}
        if completion.usage:
            usage = {
                "prompt_tokens": completion.usage.prompt_tokens,
                "completion_tokens": completion.usage.completion_tokens,
                "total_tokens": completion.usage.total_tokens,
            }

        result = LLMResponse(
            content=text,
            model=completion.model,
            provider=self.config.provider,
            usage=usage,
            latency_ms=latency_ms,
            finish_reason=choice.finish_reason,
        )
        if result.truncated:
            logger.warning("llm_reply_truncated", max_tokens=payload["max_tokens"])
        logger.debug(
            "llm_response",
            model=result.model,
            tokens=result.total_tokens,
            latency_ms=latency_ms,
        )
        return result

    def simple_chat(
        self,
        system_prompt: str,
        user_message: str,
        temperature: float | None = None,
        max_tokens: int | None = None,
    ) -> str:
        """System prompt plus one user turn; returns the reply text."""
        response = self.chat(
            [Message("system", system_prompt), Message("user", user_message)],
            temperature=temperature,
            max_tokens=max_tokens,
        )
        return response.content
