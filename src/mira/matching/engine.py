"""
Motor de matching entre preferencias y catálogo.

Implementa:
- Filtro Hard: descarta listings fuera de los criterios
- Ranking: ordena los sobrevivientes por score de relevancia
"""

from typing import Optional, Sequence

import structlog

from mira.config import Settings, get_settings
from mira.matching.filters import filter_listings
from mira.matching.ranking import rank_listings
from mira.models import Listing, PreferenceRecord

logger = structlog.get_logger()


class MatchingEngine:
    """
    Motor de matching con filtros hard + score de relevancia.

    Flujo:
    1. Aplicar filtros hard sobre el catálogo completo
    2. Calcular score de cada sobreviviente
    3. Ordenar por score (estable ante empates)
    """

    def __init__(self, settings: Optional[Settings] = None):
        self.settings = settings or get_settings()

    def find_matches(
        self,
        listings: Sequence[Listing],
        preferences: PreferenceRecord,
    ) -> list[Listing]:
        """
        Encuentra los listings que matchean con las preferencias.

        Args:
            listings: Catálogo completo (solo lectura)
            preferences: Preferencias normalizadas

        Returns:
            Listings filtrados y ordenados por relevancia
        """
        filtered = filter_listings(
            listings,
            preferences,
            amenity_threshold=self.settings.amenity_match_threshold,
        )
        if not filtered:
            logger.info("No hay listings que cumplan los filtros", catalog=len(listings))
            return []

        ranked = rank_listings(filtered, preferences)
        logger.info(
            "Matches encontrados",
            catalog=len(listings),
            total=len(ranked),
            top_id=ranked[0].id,
        )
        return ranked
