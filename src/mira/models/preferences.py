"""
Preferencias de búsqueda y turnos de conversación.

El PreferenceRecord es la salida canónica de la etapa de extracción:
lo producen todos los tiers (Gemini, Groq o léxico) y lo consumen
el filtro, el ranking y el compositor de respuestas.
"""

import re
from enum import Enum
from typing import Any, Literal, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator


class Intent(str, Enum):
    """Intención principal del usuario."""

    SEARCH = "search"
    BROWSE = "browse"
    COMPARE = "compare"
    GET_DETAILS = "get_details"
    GREETING = "greeting"


class ConversationTurn(BaseModel):
    """Un turno previo de la conversación (solo contexto, nunca se muta)."""

    model_config = ConfigDict(frozen=True)

    role: Literal["user", "assistant"]
    content: str


def _coerce_positive_number(value: Any) -> Optional[float]:
    """Convierte números del proveedor ('500,000', 4.5e5, '$480000') o devuelve None."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, str):
        cleaned = re.sub(r"[,$\s]", "", value)
        if not cleaned:
            return None
        try:
            value = float(cleaned)
        except ValueError:
            return None
    if not isinstance(value, (int, float)):
        return None
    if value <= 0:
        return None
    return float(value)


def _coerce_terms(value: Any) -> list[str]:
    if value is None:
        return []
    if isinstance(value, str):
        value = [value]
    if not isinstance(value, (list, tuple, set)):
        return []
    return [str(v).strip() for v in value if v is not None and str(v).strip()]


class PreferenceRecord(BaseModel):
    """
    Criterios de búsqueda estructurados.

    Los nombres de campo aceptan tanto snake_case como el camelCase
    que devuelven los proveedores (minBudget, propertyType, ...).
    Un campo en None (o lista vacía) significa "no especificado".
    """

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    location: Optional[str] = None
    budget: Optional[int] = None
    min_budget: Optional[int] = Field(
        None, validation_alias=AliasChoices("min_budget", "minBudget"), serialization_alias="minBudget"
    )
    max_budget: Optional[int] = Field(
        None, validation_alias=AliasChoices("max_budget", "maxBudget"), serialization_alias="maxBudget"
    )
    bedrooms: Optional[int] = None
    min_bedrooms: Optional[int] = Field(
        None, validation_alias=AliasChoices("min_bedrooms", "minBedrooms"), serialization_alias="minBedrooms"
    )
    max_bedrooms: Optional[int] = Field(
        None, validation_alias=AliasChoices("max_bedrooms", "maxBedrooms"), serialization_alias="maxBedrooms"
    )
    bathrooms: Optional[float] = None
    property_type: Optional[str] = Field(
        None, validation_alias=AliasChoices("property_type", "propertyType"), serialization_alias="propertyType"
    )
    amenities: list[str] = Field(default_factory=list)
    keywords: list[str] = Field(default_factory=list)
    intent: Intent = Intent.SEARCH

    @field_validator("budget", "min_budget", "max_budget", mode="before")
    @classmethod
    def _parse_money(cls, value: Any) -> Optional[int]:
        number = _coerce_positive_number(value)
        return round(number) if number is not None else None

    @field_validator("bedrooms", "min_bedrooms", "max_bedrooms", mode="before")
    @classmethod
    def _parse_rooms(cls, value: Any) -> Optional[int]:
        # 0 dormitorios (monoambiente) es válido
        if value == 0 and not isinstance(value, bool):
            return 0
        number = _coerce_positive_number(value)
        return int(number) if number is not None else None

    @field_validator("bathrooms", mode="before")
    @classmethod
    def _parse_bathrooms(cls, value: Any) -> Optional[float]:
        return _coerce_positive_number(value)

    @field_validator("location", "property_type", mode="before")
    @classmethod
    def _parse_text(cls, value: Any) -> Optional[str]:
        if value is None:
            return None
        text = str(value).strip()
        return text or None

    @field_validator("amenities", "keywords", mode="before")
    @classmethod
    def _parse_terms(cls, value: Any) -> list[str]:
        return _coerce_terms(value)

    @field_validator("intent", mode="before")
    @classmethod
    def _parse_intent(cls, value: Any) -> Intent:
        # Intenciones desconocidas se tratan como búsqueda
        if isinstance(value, Intent):
            return value
        try:
            return Intent(str(value).strip().lower())
        except ValueError:
            return Intent.SEARCH

    def to_api_dict(self) -> dict:
        """Serializa en camelCase omitiendo campos vacíos."""
        data = self.model_dump(by_alias=True, exclude_none=True, mode="json")
        if not self.amenities:
            data.pop("amenities", None)
        if not self.keywords:
            data.pop("keywords", None)
        return data
