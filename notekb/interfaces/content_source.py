"""Abstract base class for hierarchical note content sources.

A content source exposes the three-level OneNote hierarchy
(notebook -> section -> page) plus the raw markup of each page.  The
loader walks it; it never talks to HTTP directly.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from notekb.models.onenote import Notebook, PageInfo, Section


# Concrete implementation: GraphOneNoteProvider (notekb/providers/content/)
class IContentSource(ABC):
    """Contract for services that list and fetch OneNote content.

    All methods raise :class:`~notekb.utils.errors.SourceFetchError` when
    the remote call fails.  List methods return every item, following any
    server-side paging internally.
    """

    @abstractmethod
    async def list_notebooks(self) -> list[Notebook]:
        """Return all notebooks visible to the signed-in user."""

    @abstractmethod
    async def list_sections(self, notebook_id: str) -> list[Section]:
        """Return the sections of one notebook."""

    @abstractmethod
    async def list_pages(self, section_id: str) -> list[PageInfo]:
        """Return page metadata (no content) for one section."""

    @abstractmethod
    async def get_page_content(self, page_id: str) -> str:
        """Return the raw HTML body of one page."""

    @abstractmethod
    def get_provider_name(self) -> str:
        """Return a human-readable identifier for this content source."""
