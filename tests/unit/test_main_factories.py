"""Unit tests for the composition root (notekb.main) and Settings."""

from __future__ import annotations

from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from notekb.config.settings import EmbeddingBackend, LLMBackend, Settings
from notekb.main import (
    KnowledgeBase,
    build_content_source,
    build_embedding_provider,
    build_knowledge_base,
    build_llm_provider,
    build_vector_store,
)
from notekb.models.rag import QAResult, SourceExcerpt
from notekb.providers.content.graph_onenote_provider import GraphOneNoteProvider
from notekb.providers.embedding.ollama_embedding_provider import OllamaEmbeddingProvider
from notekb.providers.embedding.openai_embedding_provider import OpenAIEmbeddingProvider
from notekb.providers.llm.anthropic_provider import AnthropicLLMProvider
from notekb.providers.llm.ollama_provider import OllamaLLMProvider
from notekb.providers.llm.openai_provider import OpenAILLMProvider
from notekb.services.ingestion.chunker import TextChunker
from notekb.utils.errors import ConfigurationError, NotConfiguredError
from tests.conftest import MockVectorStore


def _settings(**overrides) -> Settings:
    defaults = {
        "openai_api_key": "sk-test",
        "openai_base_url": "",
        "anthropic_api_key": "test-anthropic",
        "graph_access_token": "graph-token",
        "ollama_base_url": "http://localhost:11434",
        "embedding_backend": "openai",
        "llm_backend": "openai",
    }
    defaults.update(overrides)
    return Settings(_env_file=None, **defaults)


class TestSettings:
    def test_defaults(self) -> None:
        settings = Settings(_env_file=None)
        assert settings.chunk_size == 1000
        assert settings.chunk_overlap == 200
        assert settings.retrieval_k == 4
        assert settings.embedding_batch_size == 50
        assert settings.vectorstore_collection == "onenote_collection"

    def test_env_override(self, monkeypatch) -> None:
        monkeypatch.setenv("CHUNK_SIZE", "500")
        monkeypatch.setenv("LLM_BACKEND", "anthropic")
        settings = Settings(_env_file=None)
        assert settings.chunk_size == 500
        assert settings.llm_backend is LLMBackend.ANTHROPIC


class TestProviderFactories:
    def test_openai_embedding(self) -> None:
        assert isinstance(build_embedding_provider(_settings()), OpenAIEmbeddingProvider)

    def test_ollama_embedding(self) -> None:
        provider = build_embedding_provider(_settings(embedding_backend="ollama"))
        assert isinstance(provider, OllamaEmbeddingProvider)

    def test_openai_embedding_without_key(self) -> None:
        with pytest.raises(ConfigurationError):
            build_embedding_provider(_settings(openai_api_key=""))

    def test_fastembed_not_installed(self) -> None:
        with patch(
            "notekb.providers.embedding.fastembed_embedding_provider."
            "FastEmbedEmbeddingProvider.is_available",
            return_value=False,
        ):
            with pytest.raises(ConfigurationError):
                build_embedding_provider(_settings(embedding_backend=EmbeddingBackend.FASTEMBED))

    def test_llm_from_settings(self) -> None:
        assert isinstance(build_llm_provider(_settings()), OpenAILLMProvider)
        anthropic_settings = _settings(llm_backend="anthropic")
        assert isinstance(build_llm_provider(anthropic_settings), AnthropicLLMProvider)

    def test_llm_override(self) -> None:
        assert isinstance(build_llm_provider(_settings(), "ollama"), OllamaLLMProvider)

    def test_llm_missing_key(self) -> None:
        with pytest.raises(ConfigurationError):
            build_llm_provider(_settings(anthropic_api_key=""), LLMBackend.ANTHROPIC)

    def test_content_source(self) -> None:
        assert isinstance(build_content_source(_settings()), GraphOneNoteProvider)

    def test_content_source_without_token(self) -> None:
        with pytest.raises(ConfigurationError):
            build_content_source(_settings(graph_access_token=""))

    def test_vector_store_uses_settings(self, tmp_path, mock_embedding) -> None:
        settings = _settings(
            vectorstore_persist_dir=str(tmp_path / "kb"),
            vectorstore_collection="notes",
        )
        store = build_vector_store(settings, mock_embedding)
        assert store.get_provider_name() == "chromadb"
        assert store._collection_name == "notes"

    def test_knowledge_base_builds_without_graph_token(self, tmp_path) -> None:
        settings = _settings(graph_access_token="", vectorstore_persist_dir=str(tmp_path / "kb"))
        kb = build_knowledge_base(settings)
        assert isinstance(kb, KnowledgeBase)


class TestKnowledgeBase:
    def _kb(self, store: MockVectorStore, source=None, llm_factory=None) -> KnowledgeBase:  # noqa: ANN001
        return KnowledgeBase(
            vector_store=store,
            chunker=TextChunker(chunk_size=200, chunk_overlap=20),
            content_source_factory=lambda: source,
            llm_factory=llm_factory,
        )

    @pytest.mark.asyncio
    async def test_load_closes_source(self, mock_source, mock_vector_store) -> None:
        mock_source.close = AsyncMock()
        kb = self._kb(mock_vector_store, mock_source)

        report = await kb.load_from_onenote(notebook_name="Work")

        assert report.chunks_indexed == 2
        mock_source.close.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_ask_formats_sources(self, mock_vector_store) -> None:
        kb = self._kb(mock_vector_store)
        kb.qa.ask = AsyncMock(
            return_value=QAResult(
                question="q",
                answer="Friday.",
                sources=[
                    SourceExcerpt(
                        content="x",
                        metadata={"notebook": "Work", "section": "Meetings", "title": "Standup"},
                    )
                ],
            )
        )

        answer = await kb.ask("q", show_sources=True)

        assert answer == "Friday.\n\nSources:\n  1. Work / Meetings / Standup"

    @pytest.mark.asyncio
    async def test_setup_qa_without_llm(self, mock_vector_store) -> None:
        with pytest.raises(NotConfiguredError):
            await self._kb(mock_vector_store).setup_qa()

    @pytest.mark.asyncio
    async def test_search_and_stats(self, mock_source, mock_vector_store) -> None:
        kb = self._kb(mock_vector_store, mock_source)
        await kb.load_from_onenote()

        hits = await kb.search("bread", k=2)
        stats = await kb.get_stats()

        assert len(hits) == 2
        assert stats.document_count == 3

    @pytest.mark.asyncio
    async def test_delete(self, mock_source, mock_vector_store) -> None:
        kb = self._kb(mock_vector_store, mock_source)
        await kb.load_from_onenote()
        await kb.delete()
        assert (await kb.get_stats()).document_count == 0

    @pytest.mark.asyncio
    async def test_setup_qa_with_factory(self, mock_vector_store) -> None:
        llm = MagicMock()
        llm.get_provider_name.return_value = "mock_llm"
        kb = self._kb(mock_vector_store, llm_factory=lambda: llm)
        await kb.setup_qa()
        assert kb.qa.is_ready is True
