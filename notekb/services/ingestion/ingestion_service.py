"""Orchestrator for the OneNote ingestion pipeline.

Pipeline stages: **traverse -> normalize -> chunk -> embed -> store**.

The loader covers the first three stages and streams chunks; this service
buffers them into batches and hands each batch to the vector store, which
embeds and persists it.  At most one batch of chunks is held in memory.
"""

from __future__ import annotations

import asyncio
import time
from contextlib import aclosing
from typing import TYPE_CHECKING

import structlog

from notekb.models.rag import DocumentChunk, IngestionReport
from notekb.services.ingestion.onenote_loader import OneNoteLoader

if TYPE_CHECKING:
    from notekb.interfaces.vector_store_provider import IVectorStoreProvider

logger = structlog.get_logger(logger_name=__name__)


class IngestionService:
    """Streams OneNote chunks from a loader into a vector store.

    Parameters
    ----------
    loader:
        Produces chunks page by page.
    vector_store:
        Embeds and persists chunks.
    batch_size:
        Number of chunks per embedding call and per write.
    """

    def __init__(
        self,
        loader: OneNoteLoader,
        vector_store: IVectorStoreProvider,
        batch_size: int = 50,
    ) -> None:
        self._loader = loader
        self._vector_store = vector_store
        self._batch_size = batch_size

    async def ingest(
        self,
        notebook_name: str | None = None,
        section_name: str | None = None,
        stop_event: asyncio.Event | None = None,
    ) -> IngestionReport:
        """Load matching pages and index their chunks.

        When *stop_event* is set, ingestion stops before the next page or
        batch; chunks already written stay written and the report is
        marked ``cancelled``.  Embedding and store errors propagate.
        """
        start = time.monotonic()
        indexed = 0
        cancelled = False
        buffer: list[DocumentChunk] = []

        logger.info(
            "ingestion_started",
            notebook=notebook_name,
            section=section_name,
            batch_size=self._batch_size,
        )

        async with aclosing(self._loader.load_lazy(notebook_name, section_name)) as chunks:
            async for chunk in chunks:
                if stop_event is not None and stop_event.is_set():
                    cancelled = True
                    break
                buffer.append(chunk)
                if len(buffer) >= self._batch_size:
                    indexed += await self._flush(buffer)
                    buffer = []

        if buffer and not cancelled:
            if stop_event is not None and stop_event.is_set():
                cancelled = True
            else:
                indexed += await self._flush(buffer)

        report = IngestionReport(
            chunks_indexed=indexed,
            pages_loaded=self._loader.pages_loaded,
            skipped=self._loader.skipped,
            elapsed_seconds=round(time.monotonic() - start, 3),
            cancelled=cancelled,
        )
        logger.info(
            "ingestion_complete",
            chunks_indexed=report.chunks_indexed,
            pages_loaded=report.pages_loaded,
            pages_skipped=report.pages_skipped,
            elapsed_seconds=report.elapsed_seconds,
            cancelled=report.cancelled,
        )
        return report

    async def _flush(self, chunks: list[DocumentChunk]) -> int:
        return await self._vector_store.add_documents(chunks, batch_size=self._batch_size)
