"""
Ranking de relevancia.

Score aditivo por listing:
- Cercanía al presupuesto (hasta 30)
- Dormitorios exactos (25)
- Amenities pedidos presentes (10 c/u)
- Cantidad total de amenities (2 c/u)
- Superficie (hasta 10)
"""

from typing import Sequence

from mira.config import (
    AMENITY_MATCH_WEIGHT,
    AMENITY_RICHNESS_WEIGHT,
    BEDROOM_MATCH_BONUS,
    BUDGET_PROXIMITY_WEIGHT,
    SIZE_BONUS_CAP,
    SIZE_BONUS_DIVISOR,
)
from mira.matching.amenities import count_matched_amenities
from mira.models import Listing, PreferenceRecord


def budget_proximity_score(listing: Listing, preferences: PreferenceRecord) -> float:
    target = preferences.budget if preferences.budget is not None else preferences.max_budget
    if not target:
        return 0.0
    distance = min(abs(listing.price - target) / target, 1.0)
    return (1.0 - distance) * BUDGET_PROXIMITY_WEIGHT


def bedroom_score(listing: Listing, preferences: PreferenceRecord) -> float:
    # Solo se consulta uno de los dos campos, con prioridad al exacto
    target = preferences.bedrooms if preferences.bedrooms is not None else preferences.max_bedrooms
    if target is not None and listing.bedrooms == target:
        return float(BEDROOM_MATCH_BONUS)
    return 0.0


def amenity_overlap_score(listing: Listing, preferences: PreferenceRecord) -> float:
    if not preferences.amenities:
        return 0.0
    matched = count_matched_amenities(preferences.amenities, listing.amenities, use_synonyms=False)
    return float(matched * AMENITY_MATCH_WEIGHT)


def size_score(listing: Listing) -> float:
    if not listing.size:
        return 0.0
    return min(listing.size / SIZE_BONUS_DIVISOR, SIZE_BONUS_CAP)


def score_listing(listing: Listing, preferences: PreferenceRecord) -> float:
    """Score total de relevancia de un listing."""
    return (
        budget_proximity_score(listing, preferences)
        + bedroom_score(listing, preferences)
        + amenity_overlap_score(listing, preferences)
        + len(listing.amenities) * AMENITY_RICHNESS_WEIGHT
        + size_score(listing)
    )


def rank_listings(
    listings: Sequence[Listing],
    preferences: PreferenceRecord,
) -> list[Listing]:
    """
    Ordena por score descendente.

    sorted() es estable: a igual score se mantiene el orden de entrada.
    """
    return sorted(listings, key=lambda listing: score_listing(listing, preferences), reverse=True)
