"""Content source implementations (OneNote via Microsoft Graph)."""

from notekb.providers.content.graph_onenote_provider import GraphOneNoteProvider

__all__ = ["GraphOneNoteProvider"]
