"""
Cliente de Supabase.

Singleton para conexión a la base de datos (solo lectura del catálogo).
"""

from functools import lru_cache

import structlog
from supabase import create_client, Client

from mira.config import get_settings

logger = structlog.get_logger()


class SupabaseClient:
    """Wrapper del cliente de Supabase con métodos de utilidad."""

    def __init__(self, client: Client):
        self._client = client

    def table(self, name: str):
        """Acceso a una tabla específica."""
        return self._client.table(name)

    def fetch_all(self, table: str, page_size: int = 1000) -> list[dict]:
        """
        Lee todas las filas de una tabla paginando por rango.

        Args:
            table: Nombre de la tabla
            page_size: Filas por request

        Returns:
            Lista de filas como dicts
        """
        rows: list[dict] = []
        start = 0
        while True:
            response = (
                self.table(table)
                .select("*")
                .order("id")
                .range(start, start + page_size - 1)
                .execute()
            )
            page = response.data or []
            rows.extend(page)
            if len(page) < page_size:
                break
            start += page_size
        return rows


@lru_cache
def get_supabase_client() -> SupabaseClient:
    """
    Obtiene el cliente de Supabase (singleton cacheado).

    Returns:
        SupabaseClient configurado

    Raises:
        ValueError: Si las credenciales no están configuradas
    """
    settings = get_settings()

    if not settings.supabase_url or not settings.supabase_key:
        raise ValueError(
            "SUPABASE_URL y SUPABASE_KEY son requeridos para catalog_source=supabase. "
            "Configura las variables de entorno."
        )

    # Usar service key si está disponible
    key = settings.supabase_service_key or settings.supabase_key

    client = create_client(settings.supabase_url, key)
    logger.info("Cliente de Supabase inicializado", url=settings.supabase_url)

    return SupabaseClient(client)
