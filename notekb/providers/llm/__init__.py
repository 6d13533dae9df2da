"""LLM provider adapters.

Three concrete implementations of ILLMProvider (notekb/interfaces/llm_provider.py):
    - OpenAILLMProvider    -- gpt-4o-mini (also supports OpenAI-compatible APIs)
    - AnthropicLLMProvider -- Claude Sonnet
    - OllamaLLMProvider    -- local models via Ollama server (llama3.1)

notekb.main builds the one named by LLM_BACKEND.
"""

from notekb.providers.llm.anthropic_provider import AnthropicLLMProvider
from notekb.providers.llm.ollama_provider import OllamaLLMProvider
from notekb.providers.llm.openai_provider import OpenAILLMProvider

__all__ = ["OpenAILLMProvider", "AnthropicLLMProvider", "OllamaLLMProvider"]
