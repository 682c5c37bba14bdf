"""
Abstracción de proveedores LLM.

Permite switchear entre Gemini, Groq o el modo léxico (sin LLM)
sin cambiar el código del extractor ni del compositor de respuestas.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Sequence

import structlog

from mira.config import Settings, get_settings
from mira.models import ConversationTurn

logger = structlog.get_logger()


class ProviderKind(str, Enum):
    """Variantes cerradas de proveedor de extracción."""

    GEMINI = "gemini"
    GROQ = "groq"
    LEXICAL = "lexical"


@dataclass
class LLMResponse:
    """Respuesta normalizada de cualquier LLM."""
    text: str
    model: str
    provider: str
    tokens_used: Optional[int] = None


class BaseLLMProvider(ABC):
    """Clase base para proveedores de LLM."""

    provider_name: str = "base"
    model: str = "unknown"

    @abstractmethod
    async def generate(
        self,
        system_prompt: str,
        user_prompt: str,
        history: Sequence[ConversationTurn] = (),
        temperature: float = 0.3,
        max_tokens: int = 1024,
        json_output: bool = False,
    ) -> LLMResponse:
        """
        Genera una respuesta del LLM.

        Args:
            system_prompt: Instrucciones del sistema
            user_prompt: Mensaje actual del usuario
            history: Turnos previos ya recortados a la ventana configurada
            temperature: Temperatura de generación (0.0-1.0)
            max_tokens: Máximo de tokens a generar
            json_output: Si True, pide al proveedor una respuesta JSON

        Returns:
            LLMResponse con el texto generado
        """
        pass


class GeminiProvider(BaseLLMProvider):
    """Proveedor de Google Gemini."""

    provider_name = "gemini"

    def __init__(self, api_key: Optional[str] = None, model: Optional[str] = None):
        from google import genai

        settings = get_settings()
        self.api_key = api_key or settings.gemini_api_key
        self.model = model or settings.gemini_model

        if not self.api_key:
            raise ValueError("GEMINI_API_KEY no configurada")

        self.client = genai.Client(api_key=self.api_key)
        logger.info("GeminiProvider inicializado", model=self.model)

    @staticmethod
    def _build_contents(
        system_prompt: str,
        user_prompt: str,
        history: Sequence[ConversationTurn],
    ) -> list[str]:
        # Gemini recibe el historial como texto plano antes del mensaje
        context = ""
        if history:
            lines = [
                f"{'User' if turn.role == 'user' else 'Assistant'}: {turn.content}"
                for turn in history
            ]
            context = "Conversation history:\n" + "\n".join(lines) + "\n\n"
        return [system_prompt, f"{context}User message: {user_prompt}"]

    async def generate(
        self,
        system_prompt: str,
        user_prompt: str,
        history: Sequence[ConversationTurn] = (),
        temperature: float = 0.3,
        max_tokens: int = 1024,
        json_output: bool = False,
    ) -> LLMResponse:
        from google.genai import types

        config = types.GenerateContentConfig(
            temperature=temperature,
            top_p=0.8,
            max_output_tokens=max_tokens,
            response_mime_type="application/json" if json_output else None,
        )
        response = await self.client.aio.models.generate_content(
            model=self.model,
            contents=self._build_contents(system_prompt, user_prompt, history),
            config=config,
        )

        return LLMResponse(
            text=(response.text or "").strip(),
            model=self.model,
            provider=self.provider_name,
        )


class GroqProvider(BaseLLMProvider):
    """
    Proveedor de Groq (LPU inference).

    Modelos disponibles:
    - llama-3.1-8b-instant: Rápido y económico
    - llama-3.3-70b-versatile: Más capaz

    Docs: https://console.groq.com/docs/models
    """

    provider_name = "groq"

    def __init__(self, api_key: Optional[str] = None, model: Optional[str] = None):
        from groq import AsyncGroq

        settings = get_settings()
        self.api_key = api_key or settings.groq_api_key
        self.model = model or settings.groq_model

        if not self.api_key:
            raise ValueError("GROQ_API_KEY no configurada")

        self.client = AsyncGroq(api_key=self.api_key)
        logger.info("GroqProvider inicializado", model=self.model)

    async def generate(
        self,
        system_prompt: str,
        user_prompt: str,
        history: Sequence[ConversationTurn] = (),
        temperature: float = 0.3,
        max_tokens: int = 1024,
        json_output: bool = False,
    ) -> LLMResponse:
        messages = [{"role": "system", "content": system_prompt}]
        messages.extend({"role": turn.role, "content": turn.content} for turn in history)
        messages.append({"role": "user", "content": user_prompt})

        extra = {"response_format": {"type": "json_object"}} if json_output else {}
        response = await self.client.chat.completions.create(
            model=self.model,
            messages=messages,
            temperature=temperature,
            max_tokens=max_tokens,
            **extra,
        )

        text = response.choices[0].message.content or ""
        tokens = response.usage.total_tokens if response.usage else None

        return LLMResponse(
            text=text.strip(),
            model=self.model,
            provider=self.provider_name,
            tokens_used=tokens,
        )


def resolve_provider_kind(provider: Optional[str]) -> ProviderKind:
    """Traduce el selector configurado; valores vacíos o desconocidos -> léxico."""
    if not provider:
        return ProviderKind.LEXICAL
    try:
        return ProviderKind(provider.strip().lower())
    except ValueError:
        logger.warning("Proveedor desconocido, usando modo léxico", provider=provider)
        return ProviderKind.LEXICAL


def get_llm_provider(
    settings: Optional[Settings] = None,
    provider: Optional[str] = None,
) -> Optional[BaseLLMProvider]:
    """
    Factory para obtener el proveedor de LLM configurado.

    Args:
        settings: Settings a usar (default: get_settings())
        provider: 'gemini', 'groq' o 'lexical' (default: settings.llm_provider)

    Returns:
        Instancia del proveedor, o None si corresponde el modo léxico
        (selector léxico/desconocido o credencial faltante)
    """
    settings = settings or get_settings()
    kind = resolve_provider_kind(provider or settings.llm_provider)

    if kind is ProviderKind.LEXICAL:
        return None

    credentials = {
        ProviderKind.GEMINI: (settings.gemini_api_key, settings.gemini_model, GeminiProvider),
        ProviderKind.GROQ: (settings.groq_api_key, settings.groq_model, GroqProvider),
    }
    api_key, model, provider_cls = credentials[kind]
    if not api_key:
        logger.warning("Proveedor sin credencial, usando modo léxico", provider=kind.value)
        return None

    try:
        return provider_cls(api_key=api_key, model=model)
    except ValueError as e:
        logger.warning(
            "No se pudo inicializar el proveedor, usando modo léxico",
            provider=kind.value,
            error=str(e),
        )
        return None
