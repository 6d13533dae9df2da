"""OneNote hierarchy traversal: notebook -> section -> page -> chunks.

:class:`OneNoteLoader` walks an :class:`IContentSource`, normalizes each
page's HTML to text and splits it with a :class:`TextChunker`.  Pages are
processed strictly one after another, so the streaming entry points hold
at most one page in memory.

A page whose content cannot be fetched or normalized is recorded in
:attr:`OneNoteLoader.skipped` and the traversal moves on.  Failures of
the list calls (notebooks, sections, pages) abort the traversal.
"""

from __future__ import annotations

from collections.abc import AsyncIterator

import structlog

from notekb.interfaces.content_source import IContentSource
from notekb.models.onenote import Notebook, OneNotePage, PageInfo, Section
from notekb.models.rag import DocumentChunk, SkippedPage
from notekb.services.ingestion.chunker import TextChunker
from notekb.utils.errors import NormalizationError, SourceFetchError
from notekb.utils.text_normalizer import html_to_text

logger = structlog.get_logger(logger_name=__name__)


class OneNoteLoader:
    """Turns OneNote notebooks into provenance-tagged document chunks.

    Parameters
    ----------
    content_source:
        Lists notebooks, sections and pages and fetches page HTML.
    chunker:
        Splits normalized page text into chunks.

    Filters match display names exactly (case-sensitive); ``None`` means
    every notebook or section.
    """

    def __init__(self, content_source: IContentSource, chunker: TextChunker) -> None:
        self._source = content_source
        self._chunker = chunker
        self._skipped: list[SkippedPage] = []
        self._pages_loaded = 0

    @property
    def skipped(self) -> list[SkippedPage]:
        """Pages skipped during the most recent traversal, with reasons."""
        return list(self._skipped)

    @property
    def pages_loaded(self) -> int:
        """Pages successfully fetched during the most recent traversal."""
        return self._pages_loaded

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    async def iter_pages(
        self,
        notebook_name: str | None = None,
        section_name: str | None = None,
    ) -> AsyncIterator[OneNotePage]:
        """Yield every fetched and normalized page matching the filters."""
        self._skipped = []
        self._pages_loaded = 0

        notebooks = await self._source.list_notebooks()
        matched_notebooks = 0
        for notebook in notebooks:
            if notebook_name is not None and notebook.display_name != notebook_name:
                continue
            matched_notebooks += 1
            logger.info("notebook_loading", notebook=notebook.display_name)

            sections = await self._source.list_sections(notebook.id)
            for section in sections:
                if section_name is not None and section.display_name != section_name:
                    continue
                logger.info(
                    "section_loading",
                    notebook=notebook.display_name,
                    section=section.display_name,
                )

                pages = await self._source.list_pages(section.id)
                for info in pages:
                    page = await self._fetch_page(info, notebook, section)
                    if page is not None:
                        self._pages_loaded += 1
                        yield page

        if notebook_name is not None and matched_notebooks == 0:
            logger.warning("notebook_not_found", notebook=notebook_name)
        logger.info(
            "traversal_complete",
            pages_loaded=self._pages_loaded,
            pages_skipped=len(self._skipped),
        )

    async def load_lazy(
        self,
        notebook_name: str | None = None,
        section_name: str | None = None,
    ) -> AsyncIterator[DocumentChunk]:
        """Yield chunks page by page as the traversal progresses."""
        async for page in self.iter_pages(notebook_name, section_name):
            for chunk in self.chunk_page(page):
                yield chunk

    async def load(
        self,
        notebook_name: str | None = None,
        section_name: str | None = None,
    ) -> list[DocumentChunk]:
        """Return all chunks of all matching pages."""
        return [chunk async for chunk in self.load_lazy(notebook_name, section_name)]

    def chunk_page(self, page: OneNotePage) -> list[DocumentChunk]:
        """Split one page into chunks carrying the page's provenance."""
        chunks = self._chunker.chunk_document(page.content_text, page.provenance())
        logger.info(
            "page_loaded",
            page_id=page.id,
            title=page.title,
            notebook=page.notebook_name,
            section=page.section_name,
            chunks=len(chunks),
        )
        return chunks

    # ------------------------------------------------------------------
    # Private helpers
    # ------------------------------------------------------------------

    async def _fetch_page(
        self, info: PageInfo, notebook: Notebook, section: Section
    ) -> OneNotePage | None:
        try:
            html = await self._source.get_page_content(info.id)
            text = html_to_text(html)
        except (SourceFetchError, NormalizationError) as exc:
            skipped = SkippedPage(
                page_id=info.id,
                title=info.title,
                notebook=notebook.display_name,
                section=section.display_name,
                reason=str(exc),
            )
            self._skipped.append(skipped)
            logger.warning(
                "page_skipped",
                page_id=info.id,
                title=info.title,
                reason=skipped.reason,
            )
            return None

        return OneNotePage.from_info(
            info,
            notebook_name=notebook.display_name,
            section_name=section.display_name,
            content_html=html,
            content_text=text,
        )
