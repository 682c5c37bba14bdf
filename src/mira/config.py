"""
Configuración centralizada del asistente.
Carga variables de entorno y define settings globales.
"""

from functools import lru_cache
from pathlib import Path
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

# Encontrar la raíz del proyecto (donde está el .env)
# config.py -> mira/ -> src/ -> project root
_PROJECT_ROOT = Path(__file__).resolve().parent.parent.parent
_ENV_FILE = _PROJECT_ROOT / ".env"


# Umbral de coincidencia parcial de amenities (fracción de amenities pedidos)
AMENITY_MATCH_THRESHOLD = 0.70


class Settings(BaseSettings):
    """Configuración principal de la aplicación."""

    model_config = SettingsConfigDict(
        env_file=str(_ENV_FILE),
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # LLM Provider
    llm_provider: str = Field(
        "lexical",
        description="Proveedor de extracción: 'gemini', 'groq' o 'lexical'",
    )

    # Gemini
    gemini_api_key: Optional[str] = Field(None, description="API key de Google Gemini")
    gemini_model: str = Field("gemini-2.0-flash", description="Modelo de Gemini a usar")

    # Groq
    groq_api_key: Optional[str] = Field(None, description="API key de Groq")
    groq_model: str = Field(
        "llama-3.1-8b-instant",
        description="Modelo de Groq a usar (llama-3.1-8b-instant, llama-3.3-70b-versatile)"
    )

    # Timeouts de llamadas a proveedores (segundos)
    extraction_timeout_seconds: float = Field(
        8.0, gt=0, description="Timeout de la extracción de preferencias"
    )
    response_timeout_seconds: float = Field(
        5.0, gt=0, description="Timeout de la generación de respuesta"
    )

    # Contexto conversacional
    history_window: int = Field(
        6, ge=0, description="Turnos de historial enviados al proveedor"
    )

    # Catálogo
    catalog_source: str = Field(
        "json", description="Origen del catálogo: 'json' o 'supabase'"
    )
    catalog_dir: Path = Field(
        _PROJECT_ROOT / "data", description="Directorio con los JSON del catálogo"
    )

    # Supabase (solo si catalog_source == 'supabase')
    supabase_url: Optional[str] = Field(None, description="URL del proyecto Supabase")
    supabase_key: Optional[str] = Field(None, description="Anon key de Supabase")
    supabase_service_key: Optional[str] = Field(
        None, description="Service role key para operaciones admin"
    )
    supabase_catalog_table: str = Field(
        "properties", description="Tabla con el catálogo desnormalizado"
    )

    # Matching
    amenity_match_threshold: float = Field(
        AMENITY_MATCH_THRESHOLD,
        ge=0.0,
        le=1.0,
        description="Fracción mínima de amenities pedidos que debe tener un listing",
    )

    # Respuesta
    max_result_listings: int = Field(12, ge=1, description="Máximo de listings devueltos")
    max_suggestions: int = Field(4, ge=0, description="Máximo de sugerencias devueltas")

    # Logging
    log_level: str = Field("INFO", description="Nivel de logging")


@lru_cache
def get_settings() -> Settings:
    """Obtiene la configuración cacheada."""
    return Settings()


# Grupos de sinónimos de amenities (clave canónica -> variantes)
AMENITY_SYNONYMS: dict[str, tuple[str, ...]] = {
    "parking": ("garage", "car park", "parking space"),
    "gym": ("fitness", "workout", "exercise"),
    "pool": ("swimming", "swimming pool"),
    "security": ("gated", "guard", "24/7 security"),
    "garden": ("lawn", "yard", "outdoor space"),
}

# Pesos del ranking de relevancia
BUDGET_PROXIMITY_WEIGHT = 30
BEDROOM_MATCH_BONUS = 25
AMENITY_MATCH_WEIGHT = 10
AMENITY_RICHNESS_WEIGHT = 2
SIZE_BONUS_DIVISOR = 500
SIZE_BONUS_CAP = 10

# Sugerencias
ALTERNATE_LOCATIONS = [
    "New York",
    "Miami",
    "California",
    "Texas",
    "Boston",
]

GREETING_SUGGESTIONS = [
    "2 BHK under $500K",
    "Luxury properties with pool",
    "3 bedroom house",
    "Show properties in Miami",
]

NO_RESULTS_SUGGESTIONS = [
    "Show all properties",
    "2 BHK under $500K",
    "Luxury properties",
    "Properties in Miami",
]

RESULT_FILLER_SUGGESTIONS = [
    "Show properties with pool",
    "Properties with parking",
]

DEFAULT_IMAGE_URL = "https://images.pexels.com/photos/106399/pexels-photo-106399.jpeg"

ASSISTANT_NAME = "Mira"
