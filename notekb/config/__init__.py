"""Configuration module -- exports Settings and the backend enums."""

from notekb.config.settings import EmbeddingBackend, LLMBackend, Settings

__all__ = ["EmbeddingBackend", "LLMBackend", "Settings"]
