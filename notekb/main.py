"""notekb composition root.

Turns :class:`~notekb.config.settings.Settings` into concrete providers and
wires them into a :class:`KnowledgeBase`.  This is the only module (with
the CLI) that reads settings; every component below it receives plain
constructor arguments.

Providers are chosen by the explicit ``EMBEDDING_BACKEND`` and
``LLM_BACKEND`` settings, never by probing which API keys happen to be
present.  A backend whose credentials are missing raises
:class:`ConfigurationError` right away.
"""

from __future__ import annotations

import asyncio
from collections.abc import Callable

import structlog

from notekb.config.settings import EmbeddingBackend, LLMBackend, Settings
from notekb.interfaces.content_source import IContentSource
from notekb.interfaces.embedding_provider import IEmbeddingProvider
from notekb.interfaces.llm_provider import ILLMProvider
from notekb.interfaces.vector_store_provider import IVectorStoreProvider
from notekb.models.rag import CollectionStats, IngestionReport, RetrievedChunk
from notekb.providers.auth.static_token_provider import StaticTokenAuthProvider
from notekb.providers.content.graph_onenote_provider import GraphOneNoteProvider
from notekb.providers.embedding.ollama_embedding_provider import OllamaEmbeddingProvider
from notekb.providers.embedding.openai_embedding_provider import OpenAIEmbeddingProvider
from notekb.providers.llm.anthropic_provider import AnthropicLLMProvider
from notekb.providers.llm.ollama_provider import OllamaLLMProvider
from notekb.providers.llm.openai_provider import OpenAILLMProvider
from notekb.services.ingestion.chunker import TextChunker
from notekb.services.ingestion.ingestion_service import IngestionService
from notekb.services.ingestion.onenote_loader import OneNoteLoader
from notekb.services.qa_service import QAService
from notekb.utils.errors import ConfigurationError

logger = structlog.get_logger(logger_name=__name__)


# ---------------------------------------------------------------------------
# Provider factories
# ---------------------------------------------------------------------------


def build_embedding_provider(app_settings: Settings) -> IEmbeddingProvider:
    """Build the embedding provider named by ``EMBEDDING_BACKEND``."""
    backend = EmbeddingBackend(app_settings.embedding_backend)
    if backend is EmbeddingBackend.OPENAI:
        return OpenAIEmbeddingProvider(
            api_key=app_settings.openai_api_key,
            model=app_settings.openai_embedding_model,
            base_url=app_settings.openai_base_url or None,
        )
    if backend is EmbeddingBackend.FASTEMBED:
        # fastembed is an optional extra; import only when selected.
        from notekb.providers.embedding.fastembed_embedding_provider import (
            FastEmbedEmbeddingProvider,
        )

        provider = FastEmbedEmbeddingProvider(model_name=app_settings.fastembed_model)
        if not provider.is_available():
            raise ConfigurationError(
                message="EMBEDDING_BACKEND=fastembed requires `pip install notekb[fastembed]`",
                provider_name=provider.get_provider_name(),
            )
        return provider
    return OllamaEmbeddingProvider(
        base_url=app_settings.ollama_base_url,
        model=app_settings.ollama_embedding_model,
    )


def build_llm_provider(
    app_settings: Settings,
    backend: LLMBackend | str | None = None,
) -> ILLMProvider:
    """Build the LLM named by *backend*, or by ``LLM_BACKEND`` when omitted."""
    selected = LLMBackend(backend or app_settings.llm_backend)
    if selected is LLMBackend.OPENAI:
        return OpenAILLMProvider(
            api_key=app_settings.openai_api_key,
            model=app_settings.openai_text_model,
            base_url=app_settings.openai_base_url or None,
        )
    if selected is LLMBackend.ANTHROPIC:
        return AnthropicLLMProvider(
            api_key=app_settings.anthropic_api_key,
            model=app_settings.anthropic_model,
        )
    return OllamaLLMProvider(
        base_url=app_settings.ollama_base_url,
        model=app_settings.ollama_text_model,
    )


def build_content_source(app_settings: Settings) -> IContentSource:
    """Build the Graph OneNote source authorized by ``GRAPH_ACCESS_TOKEN``."""
    return GraphOneNoteProvider(
        auth_provider=StaticTokenAuthProvider(app_settings.graph_access_token),
        endpoint=app_settings.graph_endpoint,
        timeout=app_settings.graph_timeout,
    )


def build_vector_store(
    app_settings: Settings,
    embedding_provider: IEmbeddingProvider | None = None,
) -> IVectorStoreProvider:
    from notekb.providers.vector_store.chromadb_provider import ChromaDBProvider

    return ChromaDBProvider(
        embedding_provider=embedding_provider or build_embedding_provider(app_settings),
        persist_directory=app_settings.vectorstore_persist_dir,
        collection_name=app_settings.vectorstore_collection,
        default_k=app_settings.retrieval_k,
    )


def build_knowledge_base(
    app_settings: Settings,
    llm_backend: LLMBackend | str | None = None,
) -> KnowledgeBase:
    """Wire a :class:`KnowledgeBase` from settings.

    The content source and the LLM are built on first use, so read-only
    commands (``stats``, ``search``) work without a Graph token or an LLM key.
    """
    return KnowledgeBase(
        vector_store=build_vector_store(app_settings),
        chunker=TextChunker(
            chunk_size=app_settings.chunk_size,
            chunk_overlap=app_settings.chunk_overlap,
        ),
        content_source_factory=lambda: build_content_source(app_settings),
        llm_factory=lambda: build_llm_provider(app_settings, llm_backend),
        retrieval_k=app_settings.retrieval_k,
        batch_size=app_settings.embedding_batch_size,
        temperature=app_settings.llm_temperature,
    )


# ---------------------------------------------------------------------------
# KnowledgeBase facade
# ---------------------------------------------------------------------------


class KnowledgeBase:
    """One-stop facade over ingestion, search and question answering.

    Parameters
    ----------
    vector_store:
        Store holding the indexed chunks.
    chunker:
        Chunker used when loading pages.
    content_source_factory:
        Builds the OneNote source for each :meth:`load_from_onenote` call.
    llm_factory:
        Builds the default LLM for :meth:`setup_qa` / :meth:`ask`.
    """

    def __init__(
        self,
        vector_store: IVectorStoreProvider,
        chunker: TextChunker,
        content_source_factory: Callable[[], IContentSource],
        llm_factory: Callable[[], ILLMProvider] | None = None,
        retrieval_k: int = 4,
        batch_size: int = 50,
        temperature: float = 0.0,
    ) -> None:
        self._vector_store = vector_store
        self._chunker = chunker
        self._content_source_factory = content_source_factory
        self._batch_size = batch_size
        self._qa = QAService(
            vector_store=vector_store,
            llm_factory=llm_factory,
            k=retrieval_k,
            temperature=temperature,
        )
        self._initialized = False

    @property
    def vector_store(self) -> IVectorStoreProvider:
        return self._vector_store

    @property
    def qa(self) -> QAService:
        return self._qa

    async def initialize(self) -> None:
        await self._vector_store.initialize()
        self._initialized = True

    async def load_from_onenote(
        self,
        notebook_name: str | None = None,
        section_name: str | None = None,
        stop_event: asyncio.Event | None = None,
    ) -> IngestionReport:
        """Index the matching OneNote pages and report what happened."""
        await self._ensure_initialized()
        source = self._content_source_factory()
        try:
            loader = OneNoteLoader(content_source=source, chunker=self._chunker)
            service = IngestionService(
                loader=loader,
                vector_store=self._vector_store,
                batch_size=self._batch_size,
            )
            return await service.ingest(notebook_name, section_name, stop_event=stop_event)
        finally:
            close = getattr(source, "close", None)
            if close is not None:
                await close()

    async def setup_qa(self, llm: ILLMProvider | None = None) -> None:
        await self._ensure_initialized()
        self._qa.setup(llm)

    async def ask(self, question: str, show_sources: bool = False) -> str:
        """Answer *question*; with *show_sources*, append numbered source lines."""
        await self._ensure_initialized()
        result = await self._qa.ask(question, include_sources=show_sources)
        answer = result.answer
        if show_sources and result.sources:
            lines = [
                f"  {i}. {s.metadata.get('notebook', '')} / "
                f"{s.metadata.get('section', '')} / {s.metadata.get('title', '')}"
                for i, s in enumerate(result.sources, start=1)
            ]
            answer += "\n\nSources:\n" + "\n".join(lines)
        return answer

    async def search(self, query: str, k: int = 5) -> list[RetrievedChunk]:
        await self._ensure_initialized()
        return await self._vector_store.search_with_scores(query, k)

    async def get_stats(self) -> CollectionStats:
        await self._ensure_initialized()
        return await self._vector_store.describe()

    async def delete(self) -> None:
        """Drop every indexed chunk of the configured collection."""
        await self._vector_store.delete_collection()
        logger.info("knowledge_base_deleted")

    async def _ensure_initialized(self) -> None:
        if not self._initialized:
            await self.initialize()
