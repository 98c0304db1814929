"""Chat-completion client for the hosted LLM provider."""
from __future__ import annotations

import logging
from typing import Optional

import httpx
import openai

from app.core.config import Settings
from app.core.exceptions import ConfigurationError, MalformedProviderResponse, ProviderError

logger = logging.getLogger(__name__)


class CompletionClient:
    """Send a single user prompt and return the raw completion text.

    The provider speaks the OpenAI chat-completions protocol, so the official SDK
    is pointed at its base URL. Retries are disabled; a failure surfaces once.
    """

    def __init__(
        self,
        api_key: Optional[str],
        base_url: str,
        timeout_seconds: float = 30.0,
        http_client: Optional[httpx.Client] = None,
    ) -> None:
        if not api_key:
            raise ConfigurationError("Missing NVIDIA_API_KEY environment variable")
        self._client = openai.OpenAI(
            api_key=api_key,
            base_url=base_url,
            timeout=timeout_seconds,
            max_retries=0,
            http_client=http_client,
        )

    @classmethod
    def from_settings(cls, settings: Settings) -> "CompletionClient":
        return cls(
            api_key=settings.nvidia_api_key,
            base_url=settings.llm_base_url,
            timeout_seconds=settings.llm_timeout_seconds,
        )

    def complete(self, prompt: str, *, model: str, temperature: float, max_tokens: int) -> str:
        try:
            completion = self._client.chat.completions.create(
                model=model,
                messages=[{"role": "user", "content": prompt}],
                temperature=temperature,
                max_tokens=max_tokens,
            )
        except openai.APIStatusError as exc:
            raise ProviderError(
                f"LLM provider returned HTTP {exc.status_code}",
                status_code=exc.status_code,
            ) from exc
        except openai.APIError as exc:
            # Connection failures and timeouts carry no status code.
            raise ProviderError(f"LLM provider request failed: {exc.__class__.__name__}") from exc

        choices = getattr(completion, "choices", None) or []
        message = getattr(choices[0], "message", None) if choices else None
        content = getattr(message, "content", None)
        if not isinstance(content, str):
            raise MalformedProviderResponse("LLM response has no choices[0].message.content")
        logger.debug("Completion received (model=%s, chars=%d)", model, len(content))
        return content
