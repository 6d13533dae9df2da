"""notekb domain models -- re-exports all public model classes.

The models are organized in two submodules:
    - onenote.py -- content-source records (notebooks, sections, pages)
    - rag.py     -- chunks, retrieval results, answers, ingestion reports
"""

from __future__ import annotations

from notekb.models.onenote import Notebook, OneNotePage, PageInfo, Section
from notekb.models.rag import (
    CollectionStats,
    DocumentChunk,
    IngestionReport,
    QAResult,
    RetrievedChunk,
    SkippedPage,
    SourceExcerpt,
)

__all__ = [
    # onenote
    "Notebook",
    "OneNotePage",
    "PageInfo",
    "Section",
    # rag
    "CollectionStats",
    "DocumentChunk",
    "IngestionReport",
    "QAResult",
    "RetrievedChunk",
    "SkippedPage",
    "SourceExcerpt",
]
