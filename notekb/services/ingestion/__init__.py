"""OneNote ingestion pipeline for the notekb knowledge base.

Pipeline stages: **traverse -> normalize -> chunk -> embed -> store**.

1. **Traverse** (onenote_loader.py / OneNoteLoader) -- walks notebooks,
   sections and pages of an IContentSource, one page at a time.

2. **Normalize** (notekb.utils.text_normalizer) -- turns page HTML into
   whitespace-normalized plain text.

3. **Chunk** (chunker.py / TextChunker) -- splits text into overlapping,
   size-bounded segments at the strongest available separator.

4. **Embed + Store** (via IVectorStoreProvider) -- batches chunks through
   the embedding provider and persists them.

IngestionService (ingestion_service.py) runs all stages and reports the
indexed-chunk count and the skipped pages.
"""

from notekb.services.ingestion.chunker import DEFAULT_SEPARATORS, TextChunker
from notekb.services.ingestion.ingestion_service import IngestionService
from notekb.services.ingestion.onenote_loader import OneNoteLoader

__all__ = [
    "DEFAULT_SEPARATORS",
    "IngestionService",
    "OneNoteLoader",
    "TextChunker",
]
