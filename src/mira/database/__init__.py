"""
Módulo de base de datos.

Provee acceso de solo lectura al catálogo (JSON local o Supabase).
"""

from mira.database.supabase_client import get_supabase_client, SupabaseClient
from mira.database.catalog import (
    CatalogStore,
    JsonCatalogStore,
    SupabaseCatalogStore,
    build_catalog_store,
    get_catalog_store,
)

__all__ = [
    "get_supabase_client",
    "SupabaseClient",
    "CatalogStore",
    "JsonCatalogStore",
    "SupabaseCatalogStore",
    "build_catalog_store",
    "get_catalog_store",
]
