"""
Coincidencia difusa de amenities.

Un amenity pedido coincide con uno ofrecido si uno contiene al otro
(en cualquier dirección) o, opcionalmente, si ambos pertenecen al
mismo grupo de sinónimos ("garden" <-> "yard").
"""

from typing import Iterable, Sequence

from mira.config import AMENITY_SYNONYMS

# Cada grupo incluye la clave canónica y sus variantes
SYNONYM_GROUPS: list[tuple[str, ...]] = [
    (canonical, *variants) for canonical, variants in AMENITY_SYNONYMS.items()
]


def _contains_either_way(requested: str, offered: str) -> bool:
    return requested in offered or offered in requested


def _share_synonym_group(requested: str, offered: str) -> bool:
    for group in SYNONYM_GROUPS:
        if any(term in requested for term in group) and any(term in offered for term in group):
            return True
    return False


def amenity_matches(requested: str, offered: str, use_synonyms: bool = True) -> bool:
    """True si el amenity ofrecido satisface el pedido."""
    requested = requested.strip().lower()
    offered = offered.strip().lower()
    if not requested or not offered:
        return False
    if _contains_either_way(requested, offered):
        return True
    return use_synonyms and _share_synonym_group(requested, offered)


def count_matched_amenities(
    requested: Sequence[str],
    offered: Iterable[str],
    use_synonyms: bool = True,
) -> int:
    """Cantidad de amenities pedidos con al menos una coincidencia en el listing."""
    offered = list(offered)
    return sum(
        1
        for wanted in requested
        if any(amenity_matches(wanted, available, use_synonyms) for available in offered)
    )


def amenity_match_ratio(requested: Sequence[str], offered: Iterable[str]) -> float:
    """Fracción (0-1) de amenities pedidos presentes, usando sinónimos."""
    if not requested:
        return 1.0
    return count_matched_amenities(requested, offered, use_synonyms=True) / len(requested)
