"""Ollama LLM provider adapter.

Wraps a local Ollama server via its OpenAI-compatible API endpoint, using
the ``openai`` client library pointed at the Ollama base URL.  Lets notekb
answer questions completely offline with no API costs.

Setup: install Ollama, ``ollama pull llama3.1``, and set
OLLAMA_BASE_URL=http://localhost:11434
"""

from __future__ import annotations

import openai
import structlog

from notekb.interfaces.llm_provider import ILLMProvider
from notekb.utils.errors import LLMError

logger = structlog.get_logger(logger_name=__name__)

_DEFAULT_MODEL = "llama3.1"


class OllamaLLMProvider(ILLMProvider):
    """LLM provider backed by a local Ollama server.

    Ollama exposes an OpenAI-compatible ``/v1`` API, so this adapter
    reuses ``openai.AsyncOpenAI`` pointed at the local URL.
    """

    def __init__(self, base_url: str = "http://localhost:11434", model: str | None = None) -> None:
        self._base_url = base_url
        self._client = openai.AsyncOpenAI(
            base_url=f"{base_url.rstrip('/')}/v1",
            # The openai SDK requires a non-empty key; Ollama ignores it.
            api_key="ollama",
        )
        self._text_model = model or _DEFAULT_MODEL

    # ------------------------------------------------------------------
    # ILLMProvider implementation
    # ------------------------------------------------------------------

    async def complete(
        self,
        prompt: str,
        temperature: float = 0.0,
        max_tokens: int = 1024,
    ) -> str:
        """Generate a text completion via Ollama's OpenAI-compatible API."""
        try:
            response = await self._client.chat.completions.create(
                model=self._text_model,
                messages=[{"role": "user", "content": prompt}],
                temperature=temperature,
                max_tokens=max_tokens,
            )
        except openai.APIError as exc:
            raise LLMError(
                message=f"Ollama API error: {exc}",
                provider_name=self.get_provider_name(),
            ) from exc

        content = response.choices[0].message.content
        if content is None:
            raise LLMError(
                message="Ollama returned empty response",
                provider_name=self.get_provider_name(),
            )
        logger.info("ollama_completion", model=self._text_model)
        return content

    def is_available(self) -> bool:
        """Return ``True`` if the Ollama base URL is configured."""
        return bool(self._base_url)

    def get_provider_name(self) -> str:
        return "ollama"
