"""Application settings loaded from environment variables via pydantic-settings.

Settings are read from two sources, in priority order:

  1. **Environment variables** -- e.g. ``OPENAI_API_KEY=sk-abc123``
  2. **.env file** -- key=value lines in the working directory

Field ``openai_api_key`` maps to ``OPENAI_API_KEY`` automatically.

Only the outer layer (``notekb.main`` and the CLI) reads these settings.
Core components (chunker, loader, vector store, QA service) receive plain
values through their constructors and never look at the environment.
"""

from enum import Enum

from pydantic_settings import BaseSettings, SettingsConfigDict


class EmbeddingBackend(str, Enum):
    """Embedding providers selectable through ``EMBEDDING_BACKEND``."""

    OPENAI = "openai"
    FASTEMBED = "fastembed"
    OLLAMA = "ollama"


class LLMBackend(str, Enum):
    """Language-model providers selectable through ``LLM_BACKEND``."""

    OPENAI = "openai"
    ANTHROPIC = "anthropic"
    OLLAMA = "ollama"


class Settings(BaseSettings):
    """notekb settings.

    Environment variables override defaults. Loaded from .env when present.
    """

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # === Microsoft Graph (content source) ===
    # A ready-to-use bearer token; acquiring and refreshing it is the job of
    # whatever tool exports it (az cli, msal device flow, Graph Explorer).
    graph_access_token: str = ""
    graph_endpoint: str = "https://graph.microsoft.com/v1.0"
    graph_timeout: float = 30.0

    # === Provider selection ===
    embedding_backend: EmbeddingBackend = EmbeddingBackend.OPENAI
    llm_backend: LLMBackend = LLMBackend.OPENAI

    # === LLM / embedding providers ===
    openai_api_key: str = ""
    openai_base_url: str = ""  # OpenAI-compatible endpoints (TogetherAI, Azure proxies...)
    openai_text_model: str = "gpt-4o-mini"
    openai_embedding_model: str = "text-embedding-3-small"
    anthropic_api_key: str = ""
    anthropic_model: str = "claude-sonnet-4-20250514"
    ollama_base_url: str = "http://localhost:11434"
    ollama_text_model: str = "llama3.1"
    ollama_embedding_model: str = "nomic-embed-text"
    fastembed_model: str = "BAAI/bge-small-en-v1.5"
    llm_temperature: float = 0.0

    # === Vector store ===
    vectorstore_persist_dir: str = "./data/chromadb"
    vectorstore_collection: str = "onenote_collection"

    # === Chunking / retrieval ===
    chunk_size: int = 1000
    chunk_overlap: int = 200
    retrieval_k: int = 4
    embedding_batch_size: int = 50

    # === App config ===
    app_env: str = "development"
    log_level: str = "INFO"
