"""
Compositor de respuestas.

Genera el mensaje para el usuario (LLM con timeout o template) y
las sugerencias de búsqueda que acompañan cada respuesta.
"""

import asyncio
import re
from typing import Optional, Sequence

import structlog

from mira.analysis.llm_providers import BaseLLMProvider, get_llm_provider
from mira.config import (
    ALTERNATE_LOCATIONS,
    ASSISTANT_NAME,
    RESULT_FILLER_SUGGESTIONS,
    NO_RESULTS_SUGGESTIONS,
    Settings,
    get_settings,
)
from mira.extraction.lexical import has_prior_user_turn
from mira.extraction.prompts import get_response_prompt
from mira.models import ConversationTurn, PreferenceRecord

logger = structlog.get_logger()

NO_RESULTS_MESSAGE = (
    "I couldn't find any properties matching your criteria. "
    "Try adjusting your budget, location, or other preferences."
)

GREETING_MESSAGE = (
    f"👋 Hi! I'm Agent {ASSISTANT_NAME}, your AI real estate assistant. "
    "Tell me what you're looking for - budget, location, bedrooms, or amenities!"
)

FOLLOW_UP_MESSAGE = (
    "Tell me what you're looking for - budget, location, bedrooms, or amenities - "
    "and I'll find matching properties."
)

# Frases de presentación que no deben repetirse a mitad de conversación
_SELF_INTRODUCTION_PATTERNS = [
    re.compile(
        rf"^(?:👋\s*)?(?:Hi|Hello|Hey)(?:\s+there)?[!,.]?\s*I'?m\s+(?:Agent\s+)?{ASSISTANT_NAME}"
        r"(?:,?\s+your\s+(?:friendly\s+)?(?:AI\s+)?real\s+estate\s+assistant)?[,.!]?\s*",
        re.IGNORECASE,
    ),
    re.compile(rf"I'?m\s+(?:Agent\s+)?{ASSISTANT_NAME},?\s+your\s+(?:friendly\s+)?(?:AI\s+)?real\s+estate\s+assistant[.!]?\s*", re.IGNORECASE),
]

# Líneas de meta-comentario que algunos modelos agregan
_META_COMMENTARY_PATTERNS = [
    re.compile(
        r"^(?:\*\s*)?(?:Refining|Thinking|Note|Meta|Internal|Reasoning|Analysis|Commentary|Persona|Character)\b.*$",
        re.IGNORECASE | re.MULTILINE,
    ),
    re.compile(r"\((?:refining|thinking|note|internal|reasoning).*?\)", re.IGNORECASE),
]

MIN_REPLY_LENGTH = 10


def format_price(price: float) -> str:
    """$1.25M, $480K o $950."""
    if price >= 1_000_000:
        return f"${price / 1_000_000:.2f}M"
    if price >= 1_000:
        return f"${price / 1_000:.0f}K"
    return f"${price:,.0f}"


def fallback_response(preferences: PreferenceRecord, match_count: int) -> str:
    """Respuesta por template cuando no hay LLM o el LLM falló."""
    if match_count == 0:
        return NO_RESULTS_MESSAGE

    criteria = []
    if preferences.bedrooms:
        plural = "s" if preferences.bedrooms > 1 else ""
        criteria.append(f"{preferences.bedrooms} bedroom{plural}")
    if preferences.budget:
        criteria.append(f"under {format_price(preferences.budget)}")
    if preferences.max_budget:
        criteria.append(f"under {format_price(preferences.max_budget)}")
    if preferences.location:
        criteria.append(f"in {preferences.location}")
    if preferences.amenities:
        criteria.append(f"with {', '.join(preferences.amenities)}")

    criteria_text = " ".join(criteria) if criteria else "your criteria"
    noun = "property" if match_count == 1 else "properties"
    return f"I found {match_count} {noun} matching {criteria_text}. Check them out below!"


def strip_self_introduction(text: str) -> str:
    """Quita "Hi! I'm Mira..." de respuestas en conversaciones en curso."""
    for pattern in _SELF_INTRODUCTION_PATTERNS:
        text = pattern.sub("", text)
    return text.strip()


def clean_generated_text(text: str) -> str:
    """Quita meta-comentarios y saltos de línea de sobra."""
    for pattern in _META_COMMENTARY_PATTERNS:
        text = pattern.sub("", text)
    return re.sub(r"\n{3,}", "\n\n", text).strip()


def build_suggestions(preferences: PreferenceRecord, has_results: bool) -> list[str]:
    """
    Sugerencias de seguimiento.

    Con resultados: siguiente cantidad de dormitorios, otra ubicación,
    presupuesto +20% y sugerencias fijas. Sin resultados: búsquedas amplias.
    """
    if not has_results:
        return list(NO_RESULTS_SUGGESTIONS)

    suggestions = []
    if preferences.bedrooms:
        suggestions.append(f"Show {preferences.bedrooms + 1} bedroom options")
    if preferences.location:
        current = preferences.location.lower()
        other = next((loc for loc in ALTERNATE_LOCATIONS if loc.lower() not in current), None)
        if other:
            suggestions.append(f"Similar properties in {other}")
    if preferences.budget:
        # Redondeo a la decena de mil más cercana (mitades hacia arriba)
        relaxed = int(preferences.budget * 1.2 / 10_000 + 0.5) * 10_000
        suggestions.append(f"Under ${relaxed:,}")
    suggestions.extend(RESULT_FILLER_SUGGESTIONS)
    return suggestions


class ResponseComposer:
    """Genera el texto de respuesta con el proveedor configurado."""

    def __init__(
        self,
        settings: Optional[Settings] = None,
        provider: Optional[BaseLLMProvider] = None,
    ):
        self._settings = settings or get_settings()
        self._provider = provider if provider is not None else get_llm_provider(self._settings)

    async def _generate(
        self,
        message: str,
        preferences: PreferenceRecord,
        match_count: int,
        history: Sequence[ConversationTurn],
    ) -> Optional[str]:
        """Llama al LLM; devuelve None ante error, timeout o texto vacío."""
        if self._provider is None:
            return None

        window = self._settings.history_window
        timeout = self._settings.response_timeout_seconds
        try:
            response = await asyncio.wait_for(
                self._provider.generate(
                    system_prompt=get_response_prompt(
                        preferences, match_count, has_prior_user_turn(history)
                    ),
                    user_prompt=message,
                    history=list(history)[-window:] if window else [],
                    temperature=0.7,
                    max_tokens=500,
                ),
                timeout=timeout,
            )
        except asyncio.TimeoutError:
            logger.warning(
                "Timeout generando respuesta",
                provider=self._provider.provider_name,
                timeout=timeout,
            )
            return None
        except Exception as e:
            logger.warning(
                "Error generando respuesta",
                provider=self._provider.provider_name,
                error=str(e),
            )
            return None

        return clean_generated_text(response.text or "") or None

    async def compose(
        self,
        message: str,
        preferences: PreferenceRecord,
        match_count: int,
        history: Sequence[ConversationTurn] = (),
    ) -> str:
        """
        Respuesta para un turno de búsqueda.

        En conversaciones en curso nunca se vuelve a presentar.
        """
        text = await self._generate(message, preferences, match_count, history)
        if text is None:
            return fallback_response(preferences, match_count)

        if has_prior_user_turn(history):
            text = strip_self_introduction(text)
            if len(text) < MIN_REPLY_LENGTH:
                return fallback_response(preferences, match_count)
        return text

    async def greet(
        self,
        message: str,
        preferences: PreferenceRecord,
        history: Sequence[ConversationTurn] = (),
    ) -> str:
        """Respuesta a un saludo: presentación solo en el primer mensaje."""
        if has_prior_user_turn(history):
            return FOLLOW_UP_MESSAGE

        text = await self._generate(message, preferences, 0, history)
        return text or GREETING_MESSAGE
