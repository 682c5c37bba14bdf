"""
Motor de matching.

Filtra el catálogo según las preferencias extraídas y ordena
los listings resultantes por relevancia.
"""

from mira.matching.engine import MatchingEngine
from mira.matching.filters import filter_listings
from mira.matching.ranking import rank_listings, score_listing

__all__ = [
    "MatchingEngine",
    "filter_listings",
    "rank_listings",
    "score_listing",
]
