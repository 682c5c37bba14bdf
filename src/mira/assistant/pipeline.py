"""
Pipeline conversacional de búsqueda de propiedades.

mensaje + historial -> extracción -> filtro -> ranking -> respuesta
"""

import asyncio
from functools import lru_cache
from typing import Any, Iterable, Optional

import structlog
from pydantic import ValidationError

from mira.assistant.composer import NO_RESULTS_MESSAGE, ResponseComposer, build_suggestions
from mira.config import GREETING_SUGGESTIONS, NO_RESULTS_SUGGESTIONS, Settings, get_settings
from mira.database import CatalogStore, get_catalog_store
from mira.extraction import PreferenceExtractor
from mira.matching import MatchingEngine
from mira.models import ChatResult, ConversationTurn, Intent

logger = structlog.get_logger()


def coerce_history(history: Optional[Iterable[Any]]) -> list[ConversationTurn]:
    """Convierte dicts {role, content} en ConversationTurn, ignorando turnos inválidos."""
    turns: list[ConversationTurn] = []
    for item in history or []:
        if isinstance(item, ConversationTurn):
            turns.append(item)
            continue
        try:
            turns.append(ConversationTurn.model_validate(item))
        except ValidationError:
            logger.debug("Turno de historial ignorado", turn=str(item)[:80])
    return turns


class PropertyAssistant:
    """
    Asistente de búsqueda.

    Combina extractor, catálogo, motor de matching y compositor.
    Salvo la validación del mensaje, process() nunca lanza.
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        extractor: Optional[PreferenceExtractor] = None,
        catalog: Optional[CatalogStore] = None,
        engine: Optional[MatchingEngine] = None,
        composer: Optional[ResponseComposer] = None,
    ):
        self.settings = settings or get_settings()
        self.extractor = extractor or PreferenceExtractor(self.settings)
        self.catalog = catalog or get_catalog_store()
        self.engine = engine or MatchingEngine(self.settings)
        self.composer = composer or ResponseComposer(self.settings)

    async def process(self, message: Any, history: Optional[Iterable[Any]] = None) -> ChatResult:
        """
        Procesa un mensaje del usuario.

        Args:
            message: Texto del usuario
            history: Turnos previos como ConversationTurn o dicts {role, content}

        Returns:
            ChatResult con respuesta, listings (máx. 12), preferencias y sugerencias (máx. 4)

        Raises:
            ValueError: Si el mensaje falta, no es string o está vacío
        """
        if not isinstance(message, str) or not message.strip():
            raise ValueError("Message is required")

        turns = coerce_history(history)
        preferences = await self.extractor.extract(message, turns)

        if preferences.intent is Intent.GREETING:
            text = await self.composer.greet(message, preferences, turns)
            return ChatResult(
                response_text=text,
                listings=[],
                preferences=preferences,
                suggestions=GREETING_SUGGESTIONS[: self.settings.max_suggestions],
            )

        try:
            # La primera carga puede ir a la red (Supabase con reintentos)
            listings = await asyncio.to_thread(self.catalog.list_all)
            matches = self.engine.find_matches(listings, preferences)
            text = await self.composer.compose(message, preferences, len(matches), turns)
            suggestions = build_suggestions(preferences, has_results=bool(matches))
        except Exception as e:
            logger.error("Error en búsqueda", error=str(e), preferences=preferences.to_api_dict())
            return ChatResult(
                response_text=NO_RESULTS_MESSAGE,
                listings=[],
                preferences=preferences,
                suggestions=NO_RESULTS_SUGGESTIONS[: self.settings.max_suggestions],
            )

        return ChatResult(
            response_text=text,
            listings=matches[: self.settings.max_result_listings],
            preferences=preferences,
            suggestions=suggestions[: self.settings.max_suggestions],
        )


@lru_cache
def get_assistant() -> PropertyAssistant:
    """Asistente del proceso (proveedor y catálogo resueltos una sola vez)."""
    return PropertyAssistant()
