"""Custom exception hierarchy for notekb.

All application exceptions inherit from :class:`NoteKBError`, which
carries an optional ``provider_name`` so error handlers can identify which
external service (e.g. "openai", "graph_onenote", "chromadb") caused the
failure.

The hierarchy is organized by the stage that raises it:

    NoteKBError  (base -- catch-all for any notekb error)
    +-- ConfigurationError       (invalid chunking parameters, missing credentials)
    +-- SourceFetchError         (OneNote / Graph request failure)
    +-- NormalizationError       (page markup that cannot be parsed)
    +-- RAGError                 (vector-store failure)
    |   +-- EmbeddingProviderError   (embedding API failure or bad output)
    +-- LLMError                 (any LLM API call failure)
    +-- NotInitializedError      (search before any collection exists)
    +-- NotConfiguredError       (ask before any LLM can be bound)

``SourceFetchError`` and ``NormalizationError`` are recoverable per page:
the loader records them and moves on.  Everything else propagates to the
caller unchanged.
"""


class NoteKBError(Exception):
    """Base exception for all notekb errors.

    Every subclass carries a human-readable ``message`` and an optional
    ``provider_name`` identifying which external service triggered the
    error.  The ``__str__`` method prefixes the provider name in brackets
    for structured log output, e.g. ``[openai] Rate limit exceeded``.
    """

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        provider_name: str | None = None,
    ) -> None:
        self._message = message
        self._provider_name = provider_name
        super().__init__(self._message)

    @property
    def message(self) -> str:
        return self._message

    @property
    def provider_name(self) -> str | None:
        return self._provider_name

    def __str__(self) -> str:
        if self._provider_name:
            return f"[{self._provider_name}] {self._message}"
        return self._message


# ---------------------------------------------------------------------------
# Configuration
# ---------------------------------------------------------------------------

class ConfigurationError(NoteKBError):
    """Raised when configuration is invalid or missing (fatal, never retried)."""

    def __init__(
        self,
        message: str = "Invalid or missing configuration",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


# ---------------------------------------------------------------------------
# Ingestion errors
# ---------------------------------------------------------------------------

class SourceFetchError(NoteKBError):
    """Raised when a content-source request fails (HTTP error, timeout, bad JSON)."""

    def __init__(
        self,
        message: str = "Content source request failed",
        provider_name: str | None = None,
        status_code: int | None = None,
    ) -> None:
        self._status_code = status_code
        super().__init__(message=message, provider_name=provider_name)

    @property
    def status_code(self) -> int | None:
        return self._status_code


class NormalizationError(NoteKBError):
    """Raised when page markup cannot be parsed into plain text."""

    def __init__(
        self,
        message: str = "Content normalization failed",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


# ---------------------------------------------------------------------------
# RAG / vector-store errors
# ---------------------------------------------------------------------------

class RAGError(NoteKBError):
    """Raised when a vector-store operation fails."""

    def __init__(
        self,
        message: str = "RAG pipeline operation failed",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


class EmbeddingProviderError(RAGError):
    """Raised when the embedding provider fails or returns unusable output.

    Fatal for the in-flight batch: nothing from that batch is written.
    """

    def __init__(
        self,
        message: str = "Embedding provider call failed",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


class LLMError(NoteKBError):
    """Raised when an LLM API call fails or returns an empty response."""

    def __init__(
        self,
        message: str = "LLM API call failed",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


# ---------------------------------------------------------------------------
# Missing-setup errors (programmer errors)
# ---------------------------------------------------------------------------

class NotInitializedError(NoteKBError):
    """Raised when the vector store is queried before any collection exists."""

    def __init__(
        self,
        message: str = "Vector store is not initialized or empty; add documents first",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


class NotConfiguredError(NoteKBError):
    """Raised when the QA service is used without a language model binding."""

    def __init__(
        self,
        message: str = "No language model is configured",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)
