"""Abstract base class for text-embedding service providers.

Defines the contract for generating embedding vectors from text.
Implementations may wrap OpenAI ``text-embedding-3-small``, a local
FastEmbed ONNX model, or ``nomic-embed-text`` served by Ollama.  The
vector store only ever talks to this interface, so embedding backends are
interchangeable.
"""

from __future__ import annotations

from abc import ABC, abstractmethod


# Concrete implementations:
#   OpenAIEmbeddingProvider     -- text-embedding-3-small (requires API key)
#   FastEmbedEmbeddingProvider  -- lightweight ONNX (no PyTorch), fully local
#   OllamaEmbeddingProvider     -- nomic-embed-text via Ollama (local)
# Located in: notekb/providers/embedding/
class IEmbeddingProvider(ABC):
    """Contract for text-embedding services used by the vector store.

    Embeddings are consumed by
    :class:`~notekb.interfaces.vector_store_provider.IVectorStoreProvider`
    both for indexing (batch) and for query-time similarity search (single).
    """

    @abstractmethod
    async def embed(self, texts: list[str]) -> list[list[float]]:
        """Generate embedding vectors for a batch of texts.

        Parameters
        ----------
        texts:
            One or more text strings to embed.

        Returns
        -------
        list[list[float]]
            Embedding vectors corresponding positionally to *texts*.  Each
            inner list has length equal to :meth:`get_dimension`.

        Raises
        ------
        notekb.utils.errors.EmbeddingProviderError
            If the embedding backend fails.
        """

    @abstractmethod
    async def embed_single(self, text: str) -> list[float]:
        """Generate an embedding vector for a single text (e.g. a query)."""

    @abstractmethod
    def get_dimension(self) -> int:
        """Return the dimensionality of the embedding vectors.

        This value must remain constant for the lifetime of the provider
        instance and must match the vectors already stored in a collection.

        Example values: ``1536`` (OpenAI ``text-embedding-3-small``),
        ``768`` (Nomic ``nomic-embed-text``), ``384`` (``bge-small-en-v1.5``).
        """

    @abstractmethod
    def get_provider_name(self) -> str:
        """Return a human-readable identifier for this embedding provider."""

    @abstractmethod
    def is_available(self) -> bool:
        """Return ``True`` if the provider is configured and reachable.

        Implementations should check credentials or installed packages
        without generating an actual embedding.
        """
