"""
Filtro del catálogo.

Descarta los listings que no cumplen algún criterio del PreferenceRecord.
Función pura: no modifica la entrada y conserva el orden.
"""

import re
from typing import Sequence

from mira.config import AMENITY_MATCH_THRESHOLD
from mira.matching.amenities import amenity_match_ratio
from mira.models import Listing, PreferenceRecord


def location_terms(location: str) -> list[str]:
    """Divide la ubicación pedida en términos de más de 2 caracteres."""
    return [term for term in re.split(r"[\s,]+", location.lower()) if len(term) > 2]


def matches_budget(listing: Listing, preferences: PreferenceRecord) -> bool:
    if preferences.min_budget is not None and listing.price < preferences.min_budget:
        return False
    if preferences.max_budget is not None and listing.price > preferences.max_budget:
        return False
    # budget suelto es un máximo implícito
    if preferences.budget is not None and listing.price > preferences.budget:
        return False
    return True


def matches_location(listing: Listing, preferences: PreferenceRecord) -> bool:
    """Basta con que UN término aparezca en la ubicación ("Miami, FL" -> miami OR fl)."""
    if not preferences.location:
        return True
    listing_location = listing.location.lower()
    terms = location_terms(preferences.location)
    if not terms:
        return preferences.location.strip().lower() in listing_location
    return any(term in listing_location for term in terms)


def matches_bedrooms(listing: Listing, preferences: PreferenceRecord) -> bool:
    # Rango y valor exacto se aplican de forma independiente
    if preferences.min_bedrooms is not None and listing.bedrooms < preferences.min_bedrooms:
        return False
    if preferences.max_bedrooms is not None and listing.bedrooms > preferences.max_bedrooms:
        return False
    if preferences.bedrooms is not None and listing.bedrooms != preferences.bedrooms:
        return False
    return True


def matches_bathrooms(listing: Listing, preferences: PreferenceRecord) -> bool:
    if preferences.bathrooms is None:
        return True
    return listing.bathrooms >= preferences.bathrooms


def matches_property_type(listing: Listing, preferences: PreferenceRecord) -> bool:
    if not preferences.property_type:
        return True
    wanted = preferences.property_type.strip().lower()
    if wanted in listing.title.lower():
        return True
    return bool(listing.description) and wanted in listing.description.lower()


def matches_amenities(
    listing: Listing,
    preferences: PreferenceRecord,
    threshold: float = AMENITY_MATCH_THRESHOLD,
) -> bool:
    if not preferences.amenities:
        return True
    return amenity_match_ratio(preferences.amenities, listing.amenities) >= threshold


def listing_matches(
    listing: Listing,
    preferences: PreferenceRecord,
    amenity_threshold: float = AMENITY_MATCH_THRESHOLD,
) -> bool:
    """True si el listing cumple todos los criterios."""
    return (
        matches_budget(listing, preferences)
        and matches_location(listing, preferences)
        and matches_bedrooms(listing, preferences)
        and matches_bathrooms(listing, preferences)
        and matches_property_type(listing, preferences)
        and matches_amenities(listing, preferences, amenity_threshold)
    )


def filter_listings(
    listings: Sequence[Listing],
    preferences: PreferenceRecord,
    amenity_threshold: float = AMENITY_MATCH_THRESHOLD,
) -> list[Listing]:
    """
    Filtra el catálogo según las preferencias.

    Args:
        listings: Catálogo completo
        preferences: Criterios normalizados
        amenity_threshold: Fracción mínima de amenities pedidos

    Returns:
        Subsecuencia de listings que cumplen todo, en el orden de entrada
    """
    return [
        listing
        for listing in listings
        if listing_matches(listing, preferences, amenity_threshold)
    ]
