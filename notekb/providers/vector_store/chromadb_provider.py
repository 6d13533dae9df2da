"""ChromaDB vector store provider adapter.

Wraps `chromadb.PersistentClient` to implement :class:`IVectorStoreProvider`.
Uses cosine distance for similarity search.  Fully local, free, and
Python-native -- no external service required.

Distance semantics: with ``hnsw:space = cosine`` ChromaDB reports
``1 - cosine_similarity``, a value in ``[0, 2]`` where lower is closer.
Distances are returned raw and are not comparable across backends.
"""

from __future__ import annotations

import asyncio
import os
import random
import string
import time
from typing import Any

# Disable ChromaDB telemetry completely before importing chromadb.
# A version mismatch between ChromaDB's bundled PostHog client and the
# installed version causes "capture() takes 1 positional argument" errors.
#   1. ANONYMIZED_TELEMETRY env var -- respected by some ChromaDB versions
#   2. posthog.disabled = True -- disables the PostHog SDK directly
#   3. Settings(anonymized_telemetry=False) -- passed to PersistentClient
os.environ["ANONYMIZED_TELEMETRY"] = "False"

import posthog

posthog.disabled = True

import chromadb
import structlog
from chromadb.errors import NotFoundError

from notekb.interfaces.embedding_provider import IEmbeddingProvider
from notekb.interfaces.vector_store_provider import IVectorStoreProvider
from notekb.models.rag import CollectionStats, DocumentChunk, RetrievedChunk
from notekb.utils.errors import (
    ConfigurationError,
    EmbeddingProviderError,
    NotInitializedError,
    RAGError,
)

logger = structlog.get_logger(logger_name=__name__)

_ID_ALPHABET = string.digits + string.ascii_lowercase
_ID_SUFFIX_LENGTH = 9


def generate_chunk_id() -> str:
    """Return a process-unique row id: ``doc_<epoch-ms>_<9 base36 chars>``.

    Unique within a process for all practical purposes; not guaranteed
    unique across processes or runs.
    """
    suffix = "".join(random.choices(_ID_ALPHABET, k=_ID_SUFFIX_LENGTH))
    return f"doc_{int(time.time() * 1000)}_{suffix}"


class _NoopEmbeddingFunction(chromadb.EmbeddingFunction[list[str]]):
    """No-op embedding function that prevents ChromaDB from loading a model.

    notekb always passes pre-computed embeddings, so ChromaDB's built-in
    embedding is never invoked.  Without this, ChromaDB downloads and loads
    its default all-MiniLM-L6-v2 ONNX model on collection creation.
    """

    def __call__(self, input: list[str]) -> list[list[float]]:
        raise NotImplementedError(
            "notekb uses pre-computed embeddings; "
            "ChromaDB's built-in embedding should never be called."
        )

    def name(self) -> str:
        """Return function name (required by ChromaDB's EmbeddingFunction protocol)."""
        return "noop_precomputed"


class ChromaDBProvider(IVectorStoreProvider):
    """Vector store provider backed by ChromaDB with local persistence.

    Each collection name maps to one ChromaDB collection under
    *persist_directory*.  The collection is opened by :meth:`initialize`
    and created lazily by the first successful :meth:`add_documents`
    batch, so an empty knowledge base allocates nothing on disk.
    """

    def __init__(
        self,
        embedding_provider: IEmbeddingProvider,
        persist_directory: str = "./data/chromadb",
        collection_name: str = "onenote_collection",
        default_k: int = 4,
    ) -> None:
        if default_k < 1:
            raise ConfigurationError(
                message=f"retrieval width must be >= 1, got {default_k}",
                provider_name="chromadb",
            )
        self._embedding_provider = embedding_provider
        self._persist_directory = persist_directory
        self._collection_name = collection_name
        self._default_k = default_k
        # Passing anonymized_telemetry through Settings is authoritative; the
        # env var alone is ignored by some ChromaDB versions.
        self._client = chromadb.PersistentClient(
            path=persist_directory,
            settings=chromadb.config.Settings(anonymized_telemetry=False),
        )
        self._collection: Any | None = None
        self._initialized = False

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def initialize(self) -> None:
        """Open the persisted collection if it exists, otherwise do nothing.

        Calling this again re-opens the same collection; the observable
        state (:meth:`describe`, :meth:`is_ready`) is unchanged.
        """
        self._initialized = False
        collection = self._open_existing()
        if collection is None:
            self._collection = None
            self._initialized = True
            logger.info(
                "collection_not_found",
                collection=self._collection_name,
                persist_directory=self._persist_directory,
            )
            return

        self._validate_embedding_dimensions(collection)
        self._collection = collection
        self._initialized = True
        logger.info(
            "collection_opened",
            collection=self._collection_name,
            document_count=collection.count(),
        )

    def _open_existing(self) -> Any | None:
        # Newer ChromaDB versions enforce that the embedding function matches
        # the one persisted with the collection.  A collection created by
        # another tool with the default function triggers a ValueError; fall
        # back to opening it with whatever was persisted, which is fine
        # because all embeddings are pre-computed.
        try:
            return self._client.get_collection(
                name=self._collection_name,
                embedding_function=_NoopEmbeddingFunction(),
            )
        except NotFoundError:
            return None
        except ValueError:
            try:
                return self._client.get_collection(name=self._collection_name)
            except (NotFoundError, ValueError):
                return None

    def _create_collection(self) -> Any:
        try:
            collection = self._client.create_collection(
                name=self._collection_name,
                metadata={"hnsw:space": "cosine"},
                embedding_function=_NoopEmbeddingFunction(),
            )
        except Exception as exc:
            raise RAGError(
                message=f"ChromaDB could not create collection '{self._collection_name}': {exc}",
                provider_name=self.get_provider_name(),
            ) from exc
        logger.info(
            "collection_created",
            collection=self._collection_name,
            persist_directory=self._persist_directory,
        )
        return collection

    def _validate_embedding_dimensions(self, collection: Any) -> None:
        """Verify the provider's dimension matches the stored vectors.

        Peeks at a single stored vector and compares its length to the
        provider's declared dimension.  A mismatch means every query would
        produce garbage results.
        """
        try:
            if collection.count() == 0:
                return
            sample = collection.peek(limit=1)
        except Exception as exc:
            logger.warning("embedding_dimension_check_skipped", error=str(exc))
            return

        embeddings = sample.get("embeddings") if sample else None
        if embeddings is None or len(embeddings) == 0:
            return

        stored_dim = len(embeddings[0])
        expected_dim = self._embedding_provider.get_dimension()
        if stored_dim != expected_dim:
            logger.error(
                "embedding_dimension_mismatch",
                stored_dim=stored_dim,
                expected_dim=expected_dim,
                provider=self._embedding_provider.get_provider_name(),
            )
            raise ConfigurationError(
                message=(
                    f"Embedding dimension mismatch: collection '{self._collection_name}' "
                    f"has {stored_dim}-dim vectors but provider "
                    f"'{self._embedding_provider.get_provider_name()}' produces "
                    f"{expected_dim}-dim vectors"
                ),
                provider_name=self.get_provider_name(),
            )

    # ------------------------------------------------------------------
    # IVectorStoreProvider implementation
    # ------------------------------------------------------------------

    async def add_documents(
        self,
        chunks: list[DocumentChunk],
        batch_size: int = 50,
        stop_event: asyncio.Event | None = None,
    ) -> int:
        """Embed and upsert *chunks* in order, one embedding call per batch.

        A batch whose embedding fails is not written; batches already
        written stay durable, and the error propagates to the caller.
        """
        if not chunks:
            logger.warning("add_documents_empty_input", collection=self._collection_name)
            return 0
        if batch_size < 1:
            raise ConfigurationError(
                message=f"batch_size must be >= 1, got {batch_size}",
                provider_name=self.get_provider_name(),
            )
        if not self._initialized:
            await self.initialize()

        expected_dim = self._embedding_provider.get_dimension()
        total_stored = 0
        total_batches = (len(chunks) + batch_size - 1) // batch_size

        for batch_number, start in enumerate(range(0, len(chunks), batch_size), start=1):
            if stop_event is not None and stop_event.is_set():
                logger.info(
                    "add_documents_stopped",
                    collection=self._collection_name,
                    stored=total_stored,
                    remaining=len(chunks) - start,
                )
                break

            batch = chunks[start : start + batch_size]
            vectors = await self._embedding_provider.embed([c.text for c in batch])
            if len(vectors) != len(batch):
                raise EmbeddingProviderError(
                    message=(
                        f"embedding provider returned {len(vectors)} vectors "
                        f"for {len(batch)} texts"
                    ),
                    provider_name=self._embedding_provider.get_provider_name(),
                )
            for vector in vectors:
                if len(vector) != expected_dim:
                    raise ConfigurationError(
                        message=(
                            f"embedding has {len(vector)} dimensions, "
                            f"expected {expected_dim}"
                        ),
                        provider_name=self._embedding_provider.get_provider_name(),
                    )

            prepared = [
                chunk.model_copy(
                    update={
                        "chunk_id": chunk.chunk_id or generate_chunk_id(),
                        "embedding": [float(x) for x in vector],
                    }
                )
                for chunk, vector in zip(batch, vectors, strict=True)
            ]

            if self._collection is None:
                self._collection = self._create_collection()
            self._write_batch(prepared)
            total_stored += len(prepared)

            logger.info(
                "embedding_batch",
                collection=self._collection_name,
                batch=batch_number,
                batches=total_batches,
                batch_size=len(prepared),
                stored=total_stored,
            )

        return total_stored

    def _write_batch(self, chunks: list[DocumentChunk]) -> None:
        metadatas = [self._chunk_to_metadata(c) for c in chunks]
        kwargs: dict[str, Any] = {
            "ids": [c.chunk_id for c in chunks],
            "embeddings": [c.embedding for c in chunks],
            "documents": [c.text for c in chunks],
        }
        # ChromaDB rejects empty metadata dicts.
        if any(metadatas):
            kwargs["metadatas"] = [m or None for m in metadatas]
        try:
            self._collection.upsert(**kwargs)
        except Exception as exc:
            raise RAGError(
                message=f"ChromaDB write failed: {exc}",
                provider_name=self.get_provider_name(),
            ) from exc

    async def search(self, query: str, k: int | None = None) -> list[DocumentChunk]:
        return [hit.chunk for hit in await self.search_with_scores(query, k)]

    async def search_with_scores(
        self, query: str, k: int | None = None
    ) -> list[RetrievedChunk]:
        """Return up to *k* hits ordered by ascending cosine distance."""
        if self._collection is None:
            raise NotInitializedError(provider_name=self.get_provider_name())
        k = self._default_k if k is None else k
        if k < 1:
            raise ValueError(f"k must be >= 1, got {k}")

        query_embedding = await self._embedding_provider.embed_single(query)

        try:
            count = self._collection.count()
            if count == 0:
                return []
            results = self._collection.query(
                query_embeddings=[query_embedding],
                n_results=min(k, count),
                include=["documents", "metadatas", "distances"],
            )
        except Exception as exc:
            raise RAGError(
                message=f"ChromaDB query failed: {exc}",
                provider_name=self.get_provider_name(),
            ) from exc

        ids = results["ids"][0] if results.get("ids") else []
        documents = results["documents"][0] if results.get("documents") else [None] * len(ids)
        metadatas = results["metadatas"][0] if results.get("metadatas") else [None] * len(ids)
        distances = results["distances"][0] if results.get("distances") else [0.0] * len(ids)

        seen: set[str] = set()
        hits: list[RetrievedChunk] = []
        for chunk_id, text, meta, distance in zip(ids, documents, metadatas, distances):
            if chunk_id in seen or not text:
                continue
            seen.add(chunk_id)
            hits.append(
                RetrievedChunk(
                    chunk=DocumentChunk(chunk_id=chunk_id, text=text, metadata=dict(meta or {})),
                    distance=float(distance),
                )
            )
        hits.sort(key=lambda hit: hit.distance)
        hits = hits[:k]

        logger.info(
            "chromadb_query",
            collection=self._collection_name,
            query_length=len(query),
            k=k,
            results_count=len(hits),
            top_distance=hits[0].distance if hits else None,
        )
        return hits

    async def describe(self) -> CollectionStats:
        document_count = 0
        if self._collection is not None:
            try:
                document_count = self._collection.count()
            except Exception as exc:
                logger.warning(
                    "describe_count_failed",
                    collection=self._collection_name,
                    error=str(exc),
                )
        return CollectionStats(
            collection_name=self._collection_name,
            document_count=document_count,
            persist_directory=self._persist_directory,
        )

    async def delete_collection(self) -> None:
        try:
            self._client.delete_collection(name=self._collection_name)
            logger.info("collection_deleted", collection=self._collection_name)
        except (NotFoundError, ValueError):
            logger.info("collection_delete_skipped", collection=self._collection_name)
        except Exception as exc:
            raise RAGError(
                message=f"ChromaDB delete_collection failed: {exc}",
                provider_name=self.get_provider_name(),
            ) from exc
        self._collection = None

    def is_ready(self) -> bool:
        return self._collection is not None

    def get_provider_name(self) -> str:
        return "chromadb"

    # ------------------------------------------------------------------
    # Private helpers
    # ------------------------------------------------------------------

    @staticmethod
    def _chunk_to_metadata(chunk: DocumentChunk) -> dict[str, str | int | float | bool]:
        """Convert chunk metadata to a ChromaDB-compatible dict.

        ChromaDB metadata values must be str, int, float, or bool.
        ``None`` values are dropped and lists become comma-separated strings.
        """
        meta: dict[str, str | int | float | bool] = {}
        for key, value in chunk.metadata.items():
            if value is None:
                continue
            if isinstance(value, (str, int, float, bool)):
                meta[key] = value
            elif isinstance(value, (list, tuple, set)):
                meta[key] = ",".join(str(v) for v in value)
            else:
                meta[key] = str(value)
        return meta
