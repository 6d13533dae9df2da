"""Separator-aware text chunking with exact overlapping windows.

Splits normalized page text into :class:`~notekb.models.rag.DocumentChunk`
objects bounded by a character budget.

The chunking strategy has two design goals:

1. **Semantic boundaries** -- a chunk ends right after the strongest
   separator available inside its window: a paragraph break first, then a
   line break, then sentence-ending punctuation (CJK and Latin), then a
   space, and only as a last resort an arbitrary character boundary.

2. **Exact overlap** -- consecutive chunks share exactly ``chunk_overlap``
   characters, so a sentence straddling a boundary is fully contained in
   at least one chunk when it is shorter than the overlap.

Segments are verbatim slices of the input.  Dropping the first
``chunk_overlap`` characters of every segment after the first and
concatenating reconstructs the original text exactly.
"""

from __future__ import annotations

from collections.abc import Iterator, Sequence
from typing import Any

import structlog

from notekb.models.rag import DocumentChunk
from notekb.utils.errors import ConfigurationError

logger = structlog.get_logger(logger_name=__name__)

DEFAULT_SEPARATORS: tuple[str, ...] = (
    "\n\n",  # paragraph
    "\n",  # line
    "。",
    "！",
    "？",
    ".",
    "!",
    "?",
    " ",
    "",  # character boundary
)


class TextChunker:
    """Splits text into overlapping, size-bounded segments.

    Parameters
    ----------
    chunk_size:
        Maximum number of characters per segment (default 1000).
    chunk_overlap:
        Number of characters shared by consecutive segments (default 200).
        Must be smaller than *chunk_size*.
    separators:
        Separators in priority order.  The empty string stands for "any
        character boundary" and is always tried last, whether or not it
        is listed.
    """

    def __init__(
        self,
        chunk_size: int = 1000,
        chunk_overlap: int = 200,
        separators: Sequence[str] = DEFAULT_SEPARATORS,
    ) -> None:
        if chunk_size <= 0:
            raise ConfigurationError(message=f"chunk_size must be positive, got {chunk_size}")
        if chunk_overlap < 0:
            raise ConfigurationError(
                message=f"chunk_overlap must not be negative, got {chunk_overlap}"
            )
        if chunk_overlap >= chunk_size:
            raise ConfigurationError(
                message=(
                    f"chunk_overlap ({chunk_overlap}) must be smaller than "
                    f"chunk_size ({chunk_size})"
                )
            )
        self._chunk_size = chunk_size
        self._chunk_overlap = chunk_overlap
        seps = [s for s in separators if s]
        self._separators = [*seps, ""]

    @property
    def chunk_size(self) -> int:
        return self._chunk_size

    @property
    def chunk_overlap(self) -> int:
        return self._chunk_overlap

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def split(self, text: str) -> Iterator[str]:
        """Lazily yield the segments of *text*.  Each call starts over."""
        for start, end in self.split_spans(text):
            yield text[start:end]

    def split_spans(self, text: str) -> Iterator[tuple[int, int]]:
        """Lazily yield ``(start, end)`` offsets of the segments of *text*."""
        length = len(text)
        if length == 0:
            return
        start = 0
        while True:
            if length - start <= self._chunk_size:
                yield start, length
                return
            end = self._find_end(text, start)
            yield start, end
            start = end - self._chunk_overlap

    def chunk_document(self, text: str, metadata: dict[str, Any]) -> list[DocumentChunk]:
        """Split *text* into :class:`DocumentChunk` objects.

        Every chunk receives its own copy of *metadata*.  Whitespace-only
        segments carry nothing worth embedding and are skipped.  Empty input
        returns an empty list.
        """
        chunks = [
            DocumentChunk(text=segment, metadata=dict(metadata))
            for segment in self.split(text)
            if segment.strip()
        ]
        logger.debug(
            "text_chunked",
            text_length=len(text),
            chunks=len(chunks),
            chunk_size=self._chunk_size,
        )
        return chunks

    # ------------------------------------------------------------------
    # Private helpers
    # ------------------------------------------------------------------

    def _find_end(self, text: str, start: int) -> int:
        """Return the end offset of the segment starting at *start*.

        The end lies in ``(start + overlap, start + chunk_size]`` so that
        each segment fits the budget and the next one starts strictly after
        this one.  Within that window the end goes right after the last
        occurrence of the highest-priority separator that fits.
        """
        low = start + self._chunk_overlap
        high = start + self._chunk_size
        for separator in self._separators:
            if not separator:
                return high
            index = text.rfind(separator, start, high)
            if index != -1 and index + len(separator) > low:
                return index + len(separator)
        return high
