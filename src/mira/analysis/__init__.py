"""
Módulo de proveedores LLM.

Provee acceso uniforme a Gemini y Groq; el modo léxico no usa LLM.
"""

from mira.analysis.llm_providers import (
    get_llm_provider,
    resolve_provider_kind,
    BaseLLMProvider,
    GeminiProvider,
    GroqProvider,
    LLMResponse,
    ProviderKind,
)

__all__ = [
    "get_llm_provider",
    "resolve_provider_kind",
    "BaseLLMProvider",
    "GeminiProvider",
    "GroqProvider",
    "LLMResponse",
    "ProviderKind",
]
