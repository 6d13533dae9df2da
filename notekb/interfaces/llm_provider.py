"""Abstract base class for LLM service providers.

Defines the contract for the language model that turns a rendered prompt
(retrieved notes plus the user's question) into an answer.  Implementations
wrap OpenAI (or any OpenAI-compatible endpoint), Anthropic (Claude), or a
local Ollama server.  The QA service only sees this interface.
"""

from __future__ import annotations

from abc import ABC, abstractmethod


# Concrete implementations: OpenAILLMProvider, AnthropicLLMProvider, OllamaLLMProvider
# Located in: notekb/providers/llm/
class ILLMProvider(ABC):
    """Contract for LLM services used by the answering orchestrator."""

    @abstractmethod
    async def complete(
        self,
        prompt: str,
        temperature: float = 0.0,
        max_tokens: int = 1024,
    ) -> str:
        """Generate a text completion for a fully rendered prompt.

        Parameters
        ----------
        prompt:
            The prompt text, already containing the retrieved context and
            the question.
        temperature:
            Sampling temperature (0.0 = deterministic).
        max_tokens:
            Upper bound on the number of tokens in the response.

        Returns
        -------
        str
            The model's text response.

        Raises
        ------
        notekb.utils.errors.LLMError
            If the API call fails or returns an invalid response.
        """

    @abstractmethod
    def get_provider_name(self) -> str:
        """Return a human-readable identifier for this LLM provider.

        Example return values: ``"openai"``, ``"anthropic"``, ``"ollama"``.
        """

    @abstractmethod
    def is_available(self) -> bool:
        """Return ``True`` if the provider is configured.

        Implementations should verify that credentials are present without
        making an inference call.
        """
