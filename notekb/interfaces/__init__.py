"""Public interface definitions for all external service providers.

Every external API or service notekb touches is accessed exclusively
through the abstract base classes defined in this package.  Concrete
adapters live in ``notekb/providers/`` and are wired together in
``notekb/main.py``.

CONCRETE PROVIDER MAP:
    Interface              →  Concrete implementations (in notekb/providers/)
    ─────────────────────────────────────────────────────────────────
    IContentSource         →  GraphOneNoteProvider
    IAuthProvider          →  StaticTokenAuthProvider
    IEmbeddingProvider     →  OpenAIEmbeddingProvider,
                              FastEmbedEmbeddingProvider,
                              OllamaEmbeddingProvider
    ILLMProvider           →  OpenAILLMProvider, AnthropicLLMProvider,
                              OllamaLLMProvider
    IVectorStoreProvider   →  ChromaDBProvider
"""

from notekb.interfaces.auth_provider import IAuthProvider
from notekb.interfaces.content_source import IContentSource
from notekb.interfaces.embedding_provider import IEmbeddingProvider
from notekb.interfaces.llm_provider import ILLMProvider
from notekb.interfaces.vector_store_provider import IVectorStoreProvider

__all__ = [
    "IAuthProvider",
    "IContentSource",
    "IEmbeddingProvider",
    "ILLMProvider",
    "IVectorStoreProvider",
]
