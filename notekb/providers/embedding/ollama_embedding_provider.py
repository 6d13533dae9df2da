"""Ollama embedding provider adapter (local/free).

Wraps the Ollama OpenAI-compatible endpoint to implement
:class:`IEmbeddingProvider`.  Defaults to ``nomic-embed-text``
(768 dimensions).  Runs locally with no API key required.
"""

from __future__ import annotations

import httpx
import openai
import structlog

from notekb.interfaces.embedding_provider import IEmbeddingProvider
from notekb.utils.errors import EmbeddingProviderError

logger = structlog.get_logger(logger_name=__name__)

_DEFAULT_MODEL = "nomic-embed-text"

_MODEL_DIMENSIONS: dict[str, int] = {
    "nomic-embed-text": 768,
    "mxbai-embed-large": 1024,
    "all-minilm": 384,
}


class OllamaEmbeddingProvider(IEmbeddingProvider):
    """Embedding provider backed by a model served via Ollama.

    Communicates through the OpenAI-compatible ``/v1`` endpoint that Ollama
    exposes.
    """

    def __init__(self, base_url: str = "http://localhost:11434", model: str | None = None) -> None:
        self._base_url = base_url.rstrip("/")
        self._client = openai.AsyncOpenAI(
            base_url=f"{self._base_url}/v1",
            api_key="ollama",  # Ollama doesn't require a real key
        )
        self._model = model or _DEFAULT_MODEL
        self._dimension = _MODEL_DIMENSIONS.get(self._model.split(":")[0], 768)

    # ------------------------------------------------------------------
    # IEmbeddingProvider implementation
    # ------------------------------------------------------------------

    async def embed(self, texts: list[str]) -> list[list[float]]:
        if not texts:
            return []

        try:
            response = await self._client.embeddings.create(
                input=texts,
                model=self._model,
            )
        except openai.APIError as exc:
            raise EmbeddingProviderError(
                message=f"Ollama embedding API error: {exc}",
                provider_name=self.get_provider_name(),
            ) from exc

        logger.debug("ollama_embedding_batch", model=self._model, batch_size=len(texts))
        items = sorted(response.data, key=lambda item: item.index)
        return [item.embedding for item in items]

    async def embed_single(self, text: str) -> list[float]:
        """Generate an embedding vector for a single text string."""
        result = await self.embed([text])
        return result[0]

    def get_dimension(self) -> int:
        return self._dimension

    def get_provider_name(self) -> str:
        return f"ollama_embedding_{self._model}"

    def is_available(self) -> bool:
        """Return ``True`` if the Ollama server is reachable."""
        if not self._base_url:
            return False
        try:
            response = httpx.get(f"{self._base_url}/api/tags", timeout=3.0)
            return response.status_code == 200
        except (httpx.ConnectError, httpx.TimeoutException):
            return False
