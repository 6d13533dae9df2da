"""Embedding provider implementations.

Three implementations of IEmbeddingProvider:
    1. OpenAIEmbeddingProvider     -- text-embedding-3-small (1536 dims).
       Requires an API key; also works against OpenAI-compatible endpoints.
    2. FastEmbedEmbeddingProvider  -- ONNX-based, no PyTorch needed.
       Fully local. Uses bge-small-en-v1.5 (384 dims).
    3. OllamaEmbeddingProvider     -- nomic-embed-text via Ollama (768 dims).
       Free and local, but requires a running Ollama server.

Note: FastEmbedEmbeddingProvider is imported directly where needed so that
the fastembed extra stays optional.
"""

from notekb.providers.embedding.ollama_embedding_provider import OllamaEmbeddingProvider
from notekb.providers.embedding.openai_embedding_provider import OpenAIEmbeddingProvider

__all__ = ["OllamaEmbeddingProvider", "OpenAIEmbeddingProvider"]
