"""LLM provider factory."""

from chat_api.services.llm.base import BaseLLMProvider


def get_llm_provider(name: str) -> BaseLLMProvider:
    """Factory function that returns the provider serving a model table entry."""
    if name == "xai":
        from chat_api.services.llm.xai import XAIProvider
        return XAIProvider()
    elif name == "gemini":
        from chat_api.services.llm.gemini import GeminiProvider
        return GeminiProvider()
    else:
        raise ValueError(f"Unknown LLM provider: {name}")


def get_provider_factory():
    """FastAPI dependency; tests override it to inject fake providers."""
    return get_llm_provider
