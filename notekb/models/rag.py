"""RAG pipeline data models for the notekb knowledge base.

Defines Pydantic v2 models for document chunks, retrieval results,
collection statistics, answers and ingestion reports.  All models use a
frozen config: a chunk is never mutated after it has been persisted, and
the store attaches ids and embeddings by copying (``model_copy``).

Flow of data through these models:

    1. INGESTION: OneNoteLoader turns each page into DocumentChunk objects
       (text + provenance metadata, no id, no embedding).
    2. EMBEDDING: the vector store embeds chunks batch by batch and
       attaches ``chunk_id`` and ``embedding`` before writing.
    3. RETRIEVAL: searches return RetrievedChunk (chunk + raw distance).
    4. ANSWERING: QAService returns a QAResult with optional
       SourceExcerpt previews of the retrieved chunks.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator


# ---------------------------------------------------------------------------
# DocumentChunk -- the unit of storage and retrieval.
# ---------------------------------------------------------------------------
class DocumentChunk(BaseModel):
    """A bounded segment of page text plus its provenance metadata.

    ``chunk_id`` and ``embedding`` stay ``None`` until the vector store
    writes the chunk; every persisted chunk has both.
    """

    model_config = ConfigDict(frozen=True)

    chunk_id: str | None = Field(
        default=None,
        description="Unique row identifier; generated at add time when missing.",
    )
    text: str = Field(description="The chunk's textual content (never empty).")
    metadata: dict[str, Any] = Field(
        default_factory=dict,
        description=(
            "Provenance: source, page_id, title, notebook, section, "
            "created_time, last_modified_time, web_url."
        ),
    )
    embedding: list[float] | None = Field(
        default=None,
        description="Embedding vector; populated by the vector store.",
    )

    @field_validator("text")
    @classmethod
    def _non_empty(cls, value: str) -> str:
        if not value:
            raise ValueError("chunk text must not be empty")
        return value


# ---------------------------------------------------------------------------
# RetrievedChunk -- a search hit with its raw backend distance.
# ---------------------------------------------------------------------------
class RetrievedChunk(BaseModel):
    """A chunk returned by a similarity search.

    ``distance`` is the store-native distance (lower is closer).  Its scale
    depends on the backend and metric; ChromaDB with cosine space yields
    ``1 - cosine_similarity`` in ``[0, 2]``.
    """

    model_config = ConfigDict(frozen=True)

    chunk: DocumentChunk
    distance: float = Field(default=0.0, description="Raw backend distance to the query.")


# ---------------------------------------------------------------------------
# CollectionStats -- what describe() reports.
# ---------------------------------------------------------------------------
class CollectionStats(BaseModel):
    """Snapshot of the persisted collection."""

    model_config = ConfigDict(frozen=True)

    collection_name: str
    document_count: int = Field(default=0, ge=0)
    persist_directory: str


# ---------------------------------------------------------------------------
# Answering results.
# ---------------------------------------------------------------------------
class SourceExcerpt(BaseModel):
    """A truncated preview of a retrieved chunk used to attribute an answer."""

    model_config = ConfigDict(frozen=True)

    content: str
    metadata: dict[str, Any] = Field(default_factory=dict)


class QAResult(BaseModel):
    """Question, generated answer and optional source attributions."""

    model_config = ConfigDict(frozen=True)

    question: str
    answer: str
    sources: list[SourceExcerpt] | None = None


# ---------------------------------------------------------------------------
# Ingestion reporting.
# ---------------------------------------------------------------------------
class SkippedPage(BaseModel):
    """A page that could not be fetched or normalized, with the reason."""

    model_config = ConfigDict(frozen=True)

    page_id: str
    title: str = ""
    notebook: str = ""
    section: str = ""
    reason: str


class IngestionReport(BaseModel):
    """Outcome of one ingestion run.

    Returned by :meth:`IngestionService.ingest` and printed by the CLI.
    """

    model_config = ConfigDict(frozen=True)

    chunks_indexed: int = Field(default=0, ge=0)
    pages_loaded: int = Field(default=0, ge=0)
    skipped: list[SkippedPage] = Field(default_factory=list)
    elapsed_seconds: float = Field(default=0.0, ge=0.0)
    cancelled: bool = False

    @property
    def pages_skipped(self) -> int:
        return len(self.skipped)
