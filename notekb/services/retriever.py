"""Fixed-width query surface over a vector store."""

from __future__ import annotations

from typing import TYPE_CHECKING

from notekb.models.rag import DocumentChunk, RetrievedChunk

if TYPE_CHECKING:
    from notekb.interfaces.vector_store_provider import IVectorStoreProvider


class VectorStoreRetriever:
    """Returns the top-*k* chunks for a query string.

    Nothing is cached: the store is written incrementally, so every call
    re-embeds the query and searches the current contents.  ``k=None``
    defers to the store's configured retrieval width.
    """

    def __init__(self, store: IVectorStoreProvider, k: int | None = None) -> None:
        self._store = store
        self._k = k

    @property
    def k(self) -> int | None:
        return self._k

    async def get_relevant(self, query: str) -> list[DocumentChunk]:
        return await self._store.search(query, self._k)

    async def get_relevant_with_scores(self, query: str) -> list[RetrievedChunk]:
        return await self._store.search_with_scores(query, self._k)
