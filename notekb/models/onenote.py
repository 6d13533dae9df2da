"""OneNote content-source data models.

Mirrors the three-level OneNote hierarchy exposed by Microsoft Graph:
notebook -> section -> page.  The list records (:class:`Notebook`,
:class:`Section`, :class:`PageInfo`) parse Graph JSON directly through
field aliases (``displayName``, ``createdDateTime``...), while
:class:`OneNotePage` is the fully fetched page the loader hands to the
chunker.  All models are frozen: a page never changes after it is fetched.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    TypeAdapter,
    ValidationError,
    field_validator,
    model_validator,
)

_UNTITLED = "Untitled"

_DATETIME = TypeAdapter(datetime)


class Notebook(BaseModel):
    """A OneNote notebook (top level of the hierarchy)."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: str = Field(description="Opaque Graph identifier of the notebook.")
    display_name: str = Field(default="", alias="displayName")


class Section(BaseModel):
    """A section inside a notebook."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: str = Field(description="Opaque Graph identifier of the section.")
    display_name: str = Field(default="", alias="displayName")


class PageInfo(BaseModel):
    """Page metadata as listed by ``/sections/{id}/pages`` (no content yet)."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: str = Field(description="Opaque Graph identifier of the page.")
    title: str = Field(default="")
    created_time: datetime | None = Field(default=None, alias="createdDateTime")
    last_modified_time: datetime | None = Field(default=None, alias="lastModifiedDateTime")
    web_url: str | None = Field(default=None, alias="webUrl")

    @model_validator(mode="before")
    @classmethod
    def _flatten_links(cls, data: Any) -> Any:
        # Graph nests the browser URL under links.oneNoteWebUrl.href.
        if isinstance(data, dict) and "links" in data:
            data = dict(data)
            links = data.pop("links") or {}
            href = (links.get("oneNoteWebUrl") or {}).get("href")
            if href and not data.get("webUrl"):
                data["webUrl"] = href
        return data

    @field_validator("created_time", "last_modified_time", mode="before")
    @classmethod
    def _lenient_datetime(cls, value: Any) -> Any:
        """Treat unparseable timestamps as missing instead of failing the page."""
        if value in (None, ""):
            return None
        if isinstance(value, datetime):
            return value
        try:
            return _DATETIME.validate_python(value)
        except ValidationError:
            return None

    @field_validator("title", mode="before")
    @classmethod
    def _none_title(cls, value: Any) -> Any:
        return value or ""


class OneNotePage(BaseModel):
    """A fetched and normalized OneNote page.

    Created during traversal and discarded once chunked; pages are never
    persisted themselves, only the chunks derived from them.
    """

    model_config = ConfigDict(frozen=True)

    id: str
    title: str = _UNTITLED
    content_html: str = ""
    content_text: str = ""
    notebook_name: str = ""
    section_name: str = ""
    created_time: datetime | None = None
    last_modified_time: datetime | None = None
    web_url: str | None = None

    @classmethod
    def from_info(
        cls,
        info: PageInfo,
        notebook_name: str,
        section_name: str,
        content_html: str,
        content_text: str,
    ) -> OneNotePage:
        return cls(
            id=info.id,
            title=info.title or _UNTITLED,
            content_html=content_html,
            content_text=content_text,
            notebook_name=notebook_name,
            section_name=section_name,
            created_time=info.created_time,
            last_modified_time=info.last_modified_time,
            web_url=info.web_url,
        )

    def provenance(self) -> dict[str, str]:
        """Return the metadata copied onto every chunk of this page.

        Optional fields are omitted rather than stored as ``None`` so the
        mapping stays valid for stores that only accept scalar values.
        """
        meta: dict[str, str] = {
            "source": "onenote",
            "page_id": self.id,
            "title": self.title,
            "notebook": self.notebook_name,
            "section": self.section_name,
        }
        if self.created_time is not None:
            meta["created_time"] = self.created_time.isoformat()
        if self.last_modified_time is not None:
            meta["last_modified_time"] = self.last_modified_time.isoformat()
        if self.web_url:
            meta["web_url"] = self.web_url
        return meta
