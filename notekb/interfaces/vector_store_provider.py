"""Abstract base class for vector-store service providers.

Defines the contract for embedding, persisting and searching document
chunks in a named collection.  The store owns an
:class:`~notekb.interfaces.embedding_provider.IEmbeddingProvider`: callers
hand it plain chunks and plain query strings, never vectors.
"""

from __future__ import annotations

import asyncio
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

from notekb.models.rag import CollectionStats, DocumentChunk, RetrievedChunk

if TYPE_CHECKING:
    from notekb.services.retriever import VectorStoreRetriever


# Concrete implementation: ChromaDBProvider (notekb/providers/vector_store/)
# ChromaDB persists to VECTORSTORE_PERSIST_DIR (default ./data/chromadb).
class IVectorStoreProvider(ABC):
    """Contract for vector-store services used by ingestion and answering.

    Lifecycle: a freshly constructed store is *uninitialized*.
    :meth:`initialize` opens an existing collection (or notes that none
    exists yet); the first successful :meth:`add_documents` batch creates
    it.  :meth:`delete_collection` returns the store to the uninitialized
    state.
    """

    @abstractmethod
    async def initialize(self) -> None:
        """Open the named collection if it exists.  Safe to call repeatedly.

        Raises
        ------
        notekb.utils.errors.ConfigurationError
            If the stored vectors have a different dimension than the
            embedding provider produces.
        """

    @abstractmethod
    async def add_documents(
        self,
        chunks: list[DocumentChunk],
        batch_size: int = 50,
        stop_event: asyncio.Event | None = None,
    ) -> int:
        """Embed and persist *chunks* in order, *batch_size* at a time.

        Parameters
        ----------
        chunks:
            Chunks to store.  Chunks without ``chunk_id`` get a generated one.
        batch_size:
            Maximum number of chunks per embedding call and per write.
        stop_event:
            When set, no further batch is started.

        Returns
        -------
        int
            The number of chunks written.

        Raises
        ------
        notekb.utils.errors.EmbeddingProviderError
            If embedding fails or returns the wrong number of vectors.
        notekb.utils.errors.ConfigurationError
            If a vector has the wrong dimension.
        notekb.utils.errors.RAGError
            If the backend write or collection creation fails.
        """

    @abstractmethod
    async def search(self, query: str, k: int | None = None) -> list[DocumentChunk]:
        """Return up to *k* chunks nearest to *query*, nearest first.

        Raises
        ------
        notekb.utils.errors.NotInitializedError
            If no collection has been opened or created.
        """

    @abstractmethod
    async def search_with_scores(
        self, query: str, k: int | None = None
    ) -> list[RetrievedChunk]:
        """Like :meth:`search` but keeps the raw backend distance per hit."""

    @abstractmethod
    async def describe(self) -> CollectionStats:
        """Return collection name, row count and persist location.  Never raises."""

    @abstractmethod
    async def delete_collection(self) -> None:
        """Drop the named collection.  Deleting a missing collection is a no-op."""

    @abstractmethod
    def is_ready(self) -> bool:
        """Return ``True`` if a collection is currently open."""

    @abstractmethod
    def get_provider_name(self) -> str:
        """Return a human-readable identifier for this vector store."""

    def as_retriever(self, k: int | None = None) -> VectorStoreRetriever:
        """Return a retriever bound to this store with a fixed result width."""
        from notekb.services.retriever import VectorStoreRetriever

        return VectorStoreRetriever(store=self, k=k)
