"""Unit tests for embedding provider adapters: OpenAI, Ollama, FastEmbed."""

from __future__ import annotations

from unittest.mock import AsyncMock, MagicMock, patch

import httpx
import pytest

from notekb.utils.errors import ConfigurationError, EmbeddingProviderError


def _embedding_response(vectors: list[list[float]], order: list[int] | None = None) -> MagicMock:
    order = order if order is not None else list(range(len(vectors)))
    response = MagicMock()
    response.data = [MagicMock(index=i, embedding=vectors[i]) for i in order]
    response.usage = MagicMock(total_tokens=7)
    return response


class TestOpenAIEmbeddingProvider:
    def test_requires_api_key(self) -> None:
        from notekb.providers.embedding.openai_embedding_provider import OpenAIEmbeddingProvider

        with pytest.raises(ConfigurationError):
            OpenAIEmbeddingProvider(api_key="")

    def test_known_dimensions(self) -> None:
        from notekb.providers.embedding.openai_embedding_provider import OpenAIEmbeddingProvider

        assert OpenAIEmbeddingProvider(api_key="sk").get_dimension() == 1536
        large = OpenAIEmbeddingProvider(api_key="sk", model="text-embedding-3-large")
        assert large.get_dimension() == 3072

    @pytest.mark.asyncio
    async def test_one_request_per_batch_in_input_order(self) -> None:
        from notekb.providers.embedding.openai_embedding_provider import OpenAIEmbeddingProvider

        mock_client = AsyncMock()
        mock_client.embeddings.create = AsyncMock(
            return_value=_embedding_response([[1.0], [2.0], [3.0]], order=[2, 0, 1])
        )

        with patch(
            "notekb.providers.embedding.openai_embedding_provider.openai.AsyncOpenAI",
            return_value=mock_client,
        ):
            provider = OpenAIEmbeddingProvider(api_key="sk")
            vectors = await provider.embed(["a", "b", "c"])

        assert vectors == [[1.0], [2.0], [3.0]]
        mock_client.embeddings.create.assert_awaited_once()
        assert mock_client.embeddings.create.await_args.kwargs["input"] == ["a", "b", "c"]

    @pytest.mark.asyncio
    async def test_empty_batch_skips_request(self) -> None:
        from notekb.providers.embedding.openai_embedding_provider import OpenAIEmbeddingProvider

        mock_client = AsyncMock()
        with patch(
            "notekb.providers.embedding.openai_embedding_provider.openai.AsyncOpenAI",
            return_value=mock_client,
        ):
            provider = OpenAIEmbeddingProvider(api_key="sk")
            assert await provider.embed([]) == []
        mock_client.embeddings.create.assert_not_called()

    @pytest.mark.asyncio
    async def test_api_error_wrapped(self) -> None:
        import openai

        from notekb.providers.embedding.openai_embedding_provider import OpenAIEmbeddingProvider

        mock_client = AsyncMock()
        mock_client.embeddings.create = AsyncMock(
            side_effect=openai.APIError(message="quota", request=MagicMock(), body=None)
        )
        with patch(
            "notekb.providers.embedding.openai_embedding_provider.openai.AsyncOpenAI",
            return_value=mock_client,
        ):
            provider = OpenAIEmbeddingProvider(api_key="sk")
            with pytest.raises(EmbeddingProviderError):
                await provider.embed_single("text")


class TestOllamaEmbeddingProvider:
    def test_dimension_ignores_tag(self) -> None:
        from notekb.providers.embedding.ollama_embedding_provider import OllamaEmbeddingProvider

        provider = OllamaEmbeddingProvider(model="mxbai-embed-large:latest")
        assert provider.get_dimension() == 1024

    @pytest.mark.asyncio
    async def test_embed_single(self) -> None:
        from notekb.providers.embedding.ollama_embedding_provider import OllamaEmbeddingProvider

        mock_client = AsyncMock()
        mock_client.embeddings.create = AsyncMock(return_value=_embedding_response([[0.5, 0.5]]))
        with patch(
            "notekb.providers.embedding.ollama_embedding_provider.openai.AsyncOpenAI",
            return_value=mock_client,
        ):
            provider = OllamaEmbeddingProvider()
            assert await provider.embed_single("hello") == [0.5, 0.5]

    @pytest.mark.asyncio
    async def test_embed_restores_input_order(self) -> None:
        from notekb.providers.embedding.ollama_embedding_provider import OllamaEmbeddingProvider

        mock_client = AsyncMock()
        mock_client.embeddings.create = AsyncMock(
            return_value=_embedding_response([[1.0], [2.0], [3.0]], order=[2, 0, 1])
        )
        with patch(
            "notekb.providers.embedding.ollama_embedding_provider.openai.AsyncOpenAI",
            return_value=mock_client,
        ):
            provider = OllamaEmbeddingProvider()
            assert await provider.embed(["a", "b", "c"]) == [[1.0], [2.0], [3.0]]

    def test_is_available_when_server_answers(self) -> None:
        from notekb.providers.embedding.ollama_embedding_provider import OllamaEmbeddingProvider

        with patch(
            "notekb.providers.embedding.ollama_embedding_provider.httpx.get",
            return_value=MagicMock(status_code=200),
        ):
            assert OllamaEmbeddingProvider().is_available() is True

    def test_is_unavailable_when_unreachable(self) -> None:
        from notekb.providers.embedding.ollama_embedding_provider import OllamaEmbeddingProvider

        with patch(
            "notekb.providers.embedding.ollama_embedding_provider.httpx.get",
            side_effect=httpx.ConnectError("refused"),
        ):
            assert OllamaEmbeddingProvider().is_available() is False


class TestFastEmbedEmbeddingProvider:
    def test_dimension_and_name(self) -> None:
        from notekb.providers.embedding.fastembed_embedding_provider import (
            FastEmbedEmbeddingProvider,
        )

        provider = FastEmbedEmbeddingProvider()
        assert provider.get_dimension() == 384
        assert provider.get_provider_name() == "fastembed_bge-small-en-v1.5"

    @pytest.mark.asyncio
    async def test_embed_uses_loaded_model(self) -> None:
        from notekb.providers.embedding.fastembed_embedding_provider import (
            FastEmbedEmbeddingProvider,
        )

        vector = MagicMock()
        vector.tolist.return_value = [0.1, 0.2]
        provider = FastEmbedEmbeddingProvider()
        provider._model = MagicMock()
        provider._model.embed.return_value = iter([vector, vector])

        assert await provider.embed(["a", "b"]) == [[0.1, 0.2], [0.1, 0.2]]

    @pytest.mark.asyncio
    async def test_model_failure_wrapped(self) -> None:
        from notekb.providers.embedding.fastembed_embedding_provider import (
            FastEmbedEmbeddingProvider,
        )

        provider = FastEmbedEmbeddingProvider()
        provider._model = MagicMock()
        provider._model.embed.side_effect = RuntimeError("onnx failure")

        with pytest.raises(EmbeddingProviderError):
            await provider.embed(["a"])
