"""
Normalización de preferencias.

Se aplica después de cualquier tier de extracción para dejar un
PreferenceRecord canónico y sin intención ambigua.
"""

from typing import Sequence

import structlog

from mira.extraction.lexical import has_prior_user_turn
from mira.models import ConversationTurn, Intent, PreferenceRecord

logger = structlog.get_logger()

# Campos que cuentan como criterio de búsqueda real
SEARCH_FIELDS = (
    "location",
    "budget",
    "min_budget",
    "max_budget",
    "bedrooms",
    "min_bedrooms",
    "max_bedrooms",
    "bathrooms",
    "property_type",
    "amenities",
)


def has_search_criteria(preferences: PreferenceRecord) -> bool:
    """False para una consulta vaga (ningún campo de búsqueda poblado)."""
    for field in SEARCH_FIELDS:
        value = getattr(preferences, field)
        if value is None:
            continue
        if isinstance(value, list) and not value:
            continue
        return True
    return False


def normalize_amenities(amenities: Sequence[str]) -> list[str]:
    """Pasa a minúsculas y quita duplicados manteniendo el orden."""
    seen: list[str] = []
    for amenity in amenities:
        term = amenity.strip().lower()
        if term and term not in seen:
            seen.append(term)
    return seen


def normalize_preferences(
    preferences: PreferenceRecord,
    history: Sequence[ConversationTurn] = (),
) -> PreferenceRecord:
    """
    Devuelve el PreferenceRecord canónico.

    - amenities en minúsculas
    - saludo con criterios poblados -> búsqueda
    - consulta vaga -> saludo, sin ningún otro campo

    Args:
        preferences: Salida cruda de cualquier tier
        history: Turnos previos (solo para logging de contexto)

    Returns:
        Nuevo PreferenceRecord (el original no se modifica)
    """
    amenities = normalize_amenities(preferences.amenities)
    record = preferences.model_copy(update={"amenities": amenities})

    if has_search_criteria(record):
        if record.intent is Intent.GREETING:
            logger.debug("Saludo con criterios de búsqueda, se trata como búsqueda")
            record = record.model_copy(update={"intent": Intent.SEARCH})
        return record

    if record.intent is not Intent.GREETING:
        logger.debug(
            "Consulta vaga, se resuelve como saludo",
            provider_intent=record.intent.value,
            ongoing=has_prior_user_turn(history),
        )
    # Un saludo no lleva ningún otro campo
    return PreferenceRecord(intent=Intent.GREETING)
