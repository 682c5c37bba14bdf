"""
Listing del catálogo.

Entidad inmutable y de solo lectura para el pipeline: el catálogo
la provee ya desnormalizada (datos básicos + características + imagen).
"""

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from mira.config import DEFAULT_IMAGE_URL


class Listing(BaseModel):
    """Propiedad publicada en el catálogo."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    # Identificación
    id: int = Field(..., gt=0, description="ID positivo del catálogo")
    title: str = Field(..., description="Título del anuncio")
    description: Optional[str] = Field(None, description="Descripción libre (opcional)")

    # Precio y ubicación
    price: float = Field(..., gt=0, description="Precio en dólares")
    location: str = Field(..., description="Ubicación como texto libre")

    # Características físicas
    bedrooms: int = Field(0, ge=0)
    bathrooms: int = Field(0, ge=0)
    size: Optional[float] = Field(
        None, alias="size_sqft", description="Superficie (None si se desconoce)"
    )
    amenities: tuple[str, ...] = Field(default_factory=tuple)

    # Media
    image_url: str = Field(DEFAULT_IMAGE_URL, description="URL de la imagen principal")

    @field_validator("size", mode="before")
    @classmethod
    def _unknown_size(cls, value: Any) -> Optional[float]:
        # El catálogo usa 0 para "sin superficie"
        if value in (None, "", 0):
            return None
        return value

    @field_validator("amenities", mode="before")
    @classmethod
    def _amenity_tuple(cls, value: Any) -> tuple[str, ...]:
        if not value:
            return ()
        return tuple(str(a) for a in value)

    def to_api_dict(self) -> dict:
        """Convierte al formato JSON que consume el frontend."""
        data = self.model_dump(by_alias=True, mode="json")
        data["size_sqft"] = data.pop("size_sqft") or 0
        data["amenities"] = list(self.amenities)
        return data
