"""
Resultado del pipeline conversacional.
"""

from pydantic import BaseModel, Field

from mira.models.listing import Listing
from mira.models.preferences import PreferenceRecord


class ChatResult(BaseModel):
    """Respuesta completa de un turno: texto, listings, preferencias y sugerencias."""

    response_text: str = Field(..., description="Mensaje para el usuario")
    listings: list[Listing] = Field(
        default_factory=list, description="Listings rankeados (ya truncados)"
    )
    preferences: PreferenceRecord = Field(
        default_factory=PreferenceRecord, description="Preferencias extraídas"
    )
    suggestions: list[str] = Field(
        default_factory=list, description="Chips de sugerencia (ya truncados)"
    )

    def to_api_dict(self) -> dict:
        """Convierte al contrato JSON del endpoint de chat."""
        return {
            "responseText": self.response_text,
            "listings": [listing.to_api_dict() for listing in self.listings],
            "preferences": self.preferences.to_api_dict(),
            "suggestions": list(self.suggestions),
        }
