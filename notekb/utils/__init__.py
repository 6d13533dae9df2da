"""Utility modules for notekb.

- **errors** -- Domain exception hierarchy rooted at NoteKBError; each stage
  raises its own subclass so callers can handle failures granularly.
- **logging** -- structlog setup with a dual-renderer pattern: coloured
  console output in development, structured JSON in production.
- **text_normalizer** -- BeautifulSoup-based OneNote HTML to plain text.
"""

from notekb.utils.errors import (
    ConfigurationError,
    EmbeddingProviderError,
    LLMError,
    NormalizationError,
    NoteKBError,
    NotConfiguredError,
    NotInitializedError,
    RAGError,
    SourceFetchError,
)
from notekb.utils.logging import configure_logging
from notekb.utils.text_normalizer import html_to_text

__all__ = [
    "ConfigurationError",
    "EmbeddingProviderError",
    "LLMError",
    "NormalizationError",
    "NoteKBError",
    "NotConfiguredError",
    "NotInitializedError",
    "RAGError",
    "SourceFetchError",
    "configure_logging",
    "html_to_text",
]
