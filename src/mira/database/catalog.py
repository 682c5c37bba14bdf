"""
Catálogo de propiedades (solo lectura).

El catálogo se carga una única vez y se reutiliza entre requests;
el pipeline nunca lo escribe ni lo refresca.
"""

import json
from abc import ABC, abstractmethod
from functools import lru_cache
from pathlib import Path
from typing import Optional

import structlog
from pydantic import ValidationError
from tenacity import retry, stop_after_attempt, wait_exponential

from mira.config import DEFAULT_IMAGE_URL, Settings, get_settings
from mira.database.supabase_client import SupabaseClient, get_supabase_client
from mira.models import Listing

logger = structlog.get_logger()


class CatalogStore(ABC):
    """Interfaz del catálogo: lectura completa memoizada."""

    def __init__(self):
        self._cache: Optional[list[Listing]] = None

    @abstractmethod
    def _load(self) -> list[Listing]:
        """Carga el catálogo desde el origen. Puede lanzar excepciones."""

    def list_all(self) -> list[Listing]:
        """
        Devuelve todos los listings.

        La primera carga exitosa queda cacheada; si falla se loguea,
        se devuelve un catálogo vacío y el próximo llamado reintenta.
        """
        if self._cache is not None:
            return self._cache
        try:
            listings = self._load()
        except Exception as e:
            logger.error(
                "Error cargando catálogo",
                source=type(self).__name__,
                error=str(e),
            )
            return []
        self._cache = listings
        logger.info("Catálogo cargado", source=type(self).__name__, total=len(listings))
        return listings

    def get(self, listing_id: int) -> Optional[Listing]:
        """Busca un listing por ID."""
        return next((listing for listing in self.list_all() if listing.id == listing_id), None)


def _build_listings(rows: list[dict]) -> list[Listing]:
    """Valida filas ya desnormalizadas; descarta (y loguea) las inválidas."""
    listings = []
    for row in rows:
        try:
            listings.append(Listing.model_validate(row))
        except ValidationError as e:
            logger.warning("Listing inválido descartado", listing_id=row.get("id"), error=str(e))
    return listings


class JsonCatalogStore(CatalogStore):
    """
    Catálogo en tres archivos JSON unidos por ID:

    - property_basics.json: id, title, price, location (+ description)
    - property_characteristics.json: id, bedrooms, bathrooms, size_sqft, amenities
    - property_images.json: id, image_url
    """

    BASICS_FILE = "property_basics.json"
    CHARACTERISTICS_FILE = "property_characteristics.json"
    IMAGES_FILE = "property_images.json"

    def __init__(self, data_dir: Path):
        super().__init__()
        self.data_dir = Path(data_dir)

    def _read(self, filename: str) -> list[dict]:
        path = self.data_dir / filename
        with path.open(encoding="utf-8") as f:
            return json.load(f)

    def _load(self) -> list[Listing]:
        basics = self._read(self.BASICS_FILE)
        characteristics = {item["id"]: item for item in self._read(self.CHARACTERISTICS_FILE)}
        images = {item["id"]: item for item in self._read(self.IMAGES_FILE)}

        rows = []
        for basic in basics:
            extra = characteristics.get(basic.get("id"), {})
            image = images.get(basic.get("id"), {})
            rows.append(
                {
                    **basic,
                    "bedrooms": extra.get("bedrooms") or 0,
                    "bathrooms": extra.get("bathrooms") or 0,
                    "size_sqft": extra.get("size_sqft") or 0,
                    "amenities": extra.get("amenities") or [],
                    "image_url": image.get("image_url") or DEFAULT_IMAGE_URL,
                }
            )
        return _build_listings(rows)


class SupabaseCatalogStore(CatalogStore):
    """Catálogo en una tabla plana de Supabase (mismas columnas que el JSON unido)."""

    def __init__(self, table: str, client: Optional[SupabaseClient] = None):
        super().__init__()
        self.table = table
        self._client = client

    @property
    def client(self) -> SupabaseClient:
        if self._client is None:
            self._client = get_supabase_client()
        return self._client

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=2, max=10),
        reraise=True,
    )
    def _fetch_rows(self) -> list[dict]:
        return self.client.fetch_all(self.table)

    def _load(self) -> list[Listing]:
        rows = self._fetch_rows()
        for row in rows:
            row["image_url"] = row.get("image_url") or DEFAULT_IMAGE_URL
        return _build_listings(rows)


def build_catalog_store(settings: Settings) -> CatalogStore:
    """Crea el catálogo según settings.catalog_source."""
    source = (settings.catalog_source or "json").lower()
    if source == "supabase":
        return SupabaseCatalogStore(table=settings.supabase_catalog_table)
    if source != "json":
        logger.warning("Origen de catálogo desconocido, usando JSON", source=source)
    return JsonCatalogStore(settings.catalog_dir)


@lru_cache
def get_catalog_store() -> CatalogStore:
    """Catálogo del proceso (inicializado en el primer uso)."""
    return build_catalog_store(get_settings())
