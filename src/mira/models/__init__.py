"""
Modelos de datos del sistema.

- PreferenceRecord: criterios de búsqueda extraídos del mensaje
- Listing: propiedad del catálogo (solo lectura)
- ChatResult: salida del pipeline conversacional
"""

from mira.models.preferences import ConversationTurn, Intent, PreferenceRecord
from mira.models.listing import Listing
from mira.models.chat import ChatResult

__all__ = [
    # Extracción
    "Intent",
    "PreferenceRecord",
    "ConversationTurn",
    # Catálogo
    "Listing",
    # Pipeline
    "ChatResult",
]
