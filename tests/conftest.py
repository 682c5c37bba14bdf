"""
Fixtures compartidos para los tests.
"""

import asyncio
import threading
from typing import Optional, Sequence

import pytest

from mira.analysis.llm_providers import BaseLLMProvider, LLMResponse
from mira.config import Settings
from mira.database.catalog import CatalogStore
from mira.models import ConversationTurn, Listing


class FakeProvider(BaseLLMProvider):
    """Proveedor en memoria: devuelve un texto fijo, lanza o demora."""

    provider_name = "fake"
    model = "fake-model"

    def __init__(
        self,
        text: str = "",
        error: Optional[Exception] = None,
        delay: float = 0.0,
    ):
        self.text = text
        self.error = error
        self.delay = delay
        self.calls: list[dict] = []

    async def generate(
        self,
        system_prompt: str,
        user_prompt: str,
        history: Sequence[ConversationTurn] = (),
        temperature: float = 0.3,
        max_tokens: int = 1024,
        json_output: bool = False,
    ) -> LLMResponse:
        self.calls.append(
            {
                "system_prompt": system_prompt,
                "user_prompt": user_prompt,
                "history": list(history),
                "json_output": json_output,
            }
        )
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error is not None:
            raise self.error
        return LLMResponse(text=self.text, model=self.model, provider=self.provider_name)


class InMemoryCatalog(CatalogStore):
    """Catálogo con listings fijos (o que falla al cargar)."""

    def __init__(self, listings: Sequence[Listing] = (), error: Optional[Exception] = None):
        super().__init__()
        self.listings = list(listings)
        self.error = error
        self.loads = 0
        self.load_threads: list[int] = []

    def _load(self) -> list[Listing]:
        self.loads += 1
        self.load_threads.append(threading.get_ident())
        if self.error is not None:
            raise self.error
        return list(self.listings)


def build_listing(**overrides) -> Listing:
    data = {
        "id": 1,
        "title": "Test Apartment",
        "description": "Nice apartment",
        "price": 450000,
        "location": "Miami, FL",
        "bedrooms": 2,
        "bathrooms": 1,
        "size_sqft": 1000,
        "amenities": [],
    }
    data.update(overrides)
    return Listing.model_validate(data)


@pytest.fixture
def settings():
    """Settings aislados del .env y de las variables de entorno de proveedores."""
    return Settings(
        _env_file=None,
        llm_provider="lexical",
        gemini_api_key=None,
        groq_api_key=None,
        extraction_timeout_seconds=0.2,
        response_timeout_seconds=0.2,
        history_window=6,
        catalog_source="json",
        amenity_match_threshold=0.70,
        max_result_listings=12,
        max_suggestions=4,
    )


@pytest.fixture
def make_listing():
    return build_listing


@pytest.fixture
def sample_listings():
    return [
        build_listing(
            id=1,
            title="Modern Waterfront Apartment",
            price=480000,
            location="Miami, FL",
            bedrooms=2,
            bathrooms=2,
            size_sqft=1150,
            amenities=["Pool", "Gym", "Parking", "Balcony"],
        ),
        build_listing(
            id=2,
            title="Family House with Backyard",
            price=400000,
            location="Miami, FL",
            bedrooms=3,
            bathrooms=2,
            size_sqft=1800,
            amenities=["Garden", "Parking"],
        ),
        build_listing(
            id=3,
            title="Luxury Penthouse Condo",
            price=1250000,
            location="New York, NY",
            bedrooms=3,
            bathrooms=3,
            size_sqft=2400,
            amenities=["Terrace", "Gym"],
        ),
        build_listing(
            id=7,
            title="Beachside Condo",
            price=520000,
            location="Miami Beach, FL",
            bedrooms=2,
            bathrooms=1,
            size_sqft=980,
            amenities=["Pool", "Balcony"],
        ),
    ]


@pytest.fixture
def fake_provider():
    return FakeProvider


@pytest.fixture
def in_memory_catalog():
    return InMemoryCatalog


@pytest.fixture
def user_history():
    return [
        ConversationTurn(role="user", content="2 bed in Miami"),
        ConversationTurn(role="assistant", content="I found 2 properties in Miami."),
    ]
