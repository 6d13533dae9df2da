"""OpenAI-compatible LLM provider adapter.

Wraps the ``openai`` async client to implement :class:`ILLMProvider`.
When a custom ``base_url`` is configured (Azure proxies, TogetherAI,
Groq, a local vLLM server), the client points at that URL instead of the
default OpenAI endpoint.

Many third-party model hosts expose OpenAI-compatible REST APIs, so this
single adapter covers most hosted models.
"""

from __future__ import annotations

import openai
import structlog

from notekb.interfaces.llm_provider import ILLMProvider
from notekb.utils.errors import ConfigurationError, LLMError

logger = structlog.get_logger(logger_name=__name__)

_DEFAULT_MODEL = "gpt-4o-mini"
_TIMEOUT_SECONDS = 60.0


class OpenAILLMProvider(ILLMProvider):
    """LLM provider backed by an OpenAI-compatible chat completions API.

    The rendered prompt is sent as a single user message; the answering
    instructions already live inside the prompt template.
    """

    def __init__(
        self,
        api_key: str,
        model: str | None = None,
        base_url: str | None = None,
    ) -> None:
        if not api_key:
            raise ConfigurationError(
                message="OPENAI_API_KEY is required for the OpenAI LLM backend",
                provider_name="openai",
            )
        self._api_key = api_key

        # Build client kwargs -- add base_url only when a custom endpoint is
        # configured.
        client_kwargs: dict = {
            "api_key": api_key,
            "timeout": openai.Timeout(_TIMEOUT_SECONDS, connect=5.0),
        }
        if base_url:
            client_kwargs["base_url"] = base_url

        self._client = openai.AsyncOpenAI(**client_kwargs)
        self._text_model = model or _DEFAULT_MODEL
        # Label used in logs and error messages to identify this provider.
        self._provider_label = "openai-compatible" if base_url else "openai"

    # ------------------------------------------------------------------
    # ILLMProvider implementation
    # ------------------------------------------------------------------

    async def complete(
        self,
        prompt: str,
        temperature: float = 0.0,
        max_tokens: int = 1024,
    ) -> str:
        """Generate a text completion via the OpenAI-compatible chat API."""
        try:
            response = await self._client.chat.completions.create(
                model=self._text_model,
                messages=[{"role": "user", "content": prompt}],
                temperature=temperature,
                max_tokens=max_tokens,
            )
        except openai.APITimeoutError as exc:
            raise LLMError(
                message=f"{self._provider_label} timed out after {_TIMEOUT_SECONDS:.0f}s",
                provider_name=self.get_provider_name(),
            ) from exc
        except openai.APIError as exc:
            # Wrap the SDK-specific exception so callers don't need to
            # import openai to catch errors.
            raise LLMError(
                message=f"{self._provider_label} API error: {exc}",
                provider_name=self.get_provider_name(),
            ) from exc

        content = response.choices[0].message.content
        if content is None:
            raise LLMError(
                message=f"{self._provider_label} returned empty response",
                provider_name=self.get_provider_name(),
            )
        logger.info(
            "openai_completion",
            model=self._text_model,
            provider=self._provider_label,
            tokens=response.usage.total_tokens if response.usage else None,
        )
        return content

    def is_available(self) -> bool:
        """Return ``True`` if an API key is configured (doesn't verify it works)."""
        return bool(self._api_key)

    def get_provider_name(self) -> str:
        """Return 'openai' or 'openai-compatible' depending on configuration."""
        return self._provider_label
