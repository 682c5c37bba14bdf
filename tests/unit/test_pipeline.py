"""
Tests para el pipeline conversacional completo
"""
import asyncio
import threading

import pytest

from mira.assistant import PropertyAssistant, coerce_history
from mira.assistant.composer import FOLLOW_UP_MESSAGE, GREETING_MESSAGE, NO_RESULTS_MESSAGE
from mira.config import GREETING_SUGGESTIONS, NO_RESULTS_SUGGESTIONS
from mira.extraction import PreferenceExtractor
from mira.models import Intent


@pytest.fixture
def assistant(settings, sample_listings, in_memory_catalog):
    return PropertyAssistant(settings=settings, catalog=in_memory_catalog(sample_listings))


def test_search_turn(assistant):
    """Test búsqueda en Miami con modo léxico"""
    result = asyncio.run(assistant.process("2 bed under $500K in Miami with pool"))

    assert [listing.id for listing in result.listings] == [1]
    assert result.preferences.to_api_dict() == {
        "location": "miami",
        "budget": 500000,
        "bedrooms": 2,
        "amenities": ["pool"],
        "intent": "search",
    }
    assert result.response_text == (
        "I found 1 property matching 2 bedrooms under $500K in miami with pool. "
        "Check them out below!"
    )
    assert result.suggestions == [
        "Show 3 bedroom options",
        "Similar properties in New York",
        "Under $600,000",
        "Show properties with pool",
    ]


def test_first_greeting(assistant):
    """Test "hi" sin historial"""
    result = asyncio.run(assistant.process("hi"))

    assert result.preferences.intent is Intent.GREETING
    assert result.listings == []
    assert result.response_text == GREETING_MESSAGE
    assert result.suggestions == GREETING_SUGGESTIONS


def test_greeting_mid_conversation(settings, sample_listings, in_memory_catalog, fake_provider):
    """Test "hi" con historial y proveedor que responde search sin criterios"""
    extractor = PreferenceExtractor(settings, provider=fake_provider(text='{"intent": "search"}'))
    assistant = PropertyAssistant(
        settings=settings,
        extractor=extractor,
        catalog=in_memory_catalog(sample_listings),
    )
    history = [
        {"role": "user", "content": "2 bed in Miami"},
        {"role": "assistant", "content": "I found 2 properties."},
    ]

    result = asyncio.run(assistant.process("hi", history))

    assert result.preferences.intent is Intent.GREETING
    assert result.listings == []
    assert result.response_text == FOLLOW_UP_MESSAGE
    assert result.suggestions == GREETING_SUGGESTIONS


@pytest.mark.parametrize("message", ["", "   ", None, 123])
def test_invalid_message(assistant, message):
    """Test mensaje faltante o no string"""
    with pytest.raises(ValueError, match="Message is required"):
        asyncio.run(assistant.process(message))


def test_listings_are_truncated(settings, make_listing, in_memory_catalog):
    """Test máximo de 12 listings"""
    catalog = in_memory_catalog([make_listing(id=i) for i in range(1, 21)])
    assistant = PropertyAssistant(settings=settings, catalog=catalog)

    result = asyncio.run(assistant.process("properties under 10000000"))

    assert len(result.listings) == 12
    assert [listing.id for listing in result.listings] == list(range(1, 13))
    assert result.response_text.startswith("I found 20 properties")


def test_no_results(assistant):
    """Test búsqueda sin resultados"""
    result = asyncio.run(assistant.process("3 bedroom condo in Chicago"))

    assert result.listings == []
    assert result.response_text == NO_RESULTS_MESSAGE
    assert result.suggestions == NO_RESULTS_SUGGESTIONS


def test_catalog_failure_is_not_fatal(settings, in_memory_catalog):
    """Test catálogo que no se puede cargar"""
    catalog = in_memory_catalog(error=OSError("disk unavailable"))
    assistant = PropertyAssistant(settings=settings, catalog=catalog)

    result = asyncio.run(assistant.process("2 bed in Miami"))

    assert result.listings == []
    assert result.response_text == NO_RESULTS_MESSAGE


def test_catalog_loads_off_event_loop_thread(settings, sample_listings, in_memory_catalog):
    """Test que la carga del catálogo no bloquea el event loop"""
    catalog = in_memory_catalog(sample_listings)
    assistant = PropertyAssistant(settings=settings, catalog=catalog)

    result = asyncio.run(assistant.process("2 bed in Miami"))

    assert [listing.id for listing in result.listings] == [1, 7]
    assert catalog.load_threads
    assert threading.get_ident() not in catalog.load_threads


def test_matching_error_returns_no_results(settings, sample_listings, in_memory_catalog):
    """Test error inesperado durante la búsqueda"""

    class BrokenEngine:
        def find_matches(self, listings, preferences):
            raise RuntimeError("boom")

    assistant = PropertyAssistant(
        settings=settings,
        catalog=in_memory_catalog(sample_listings),
        engine=BrokenEngine(),
    )

    result = asyncio.run(assistant.process("2 bed in Miami"))

    assert result.listings == []
    assert result.response_text == NO_RESULTS_MESSAGE
    assert result.suggestions == NO_RESULTS_SUGGESTIONS
    assert result.preferences.bedrooms == 2


def test_coerce_history_skips_invalid_turns():
    """Test historial con turnos inválidos"""
    turns = coerce_history(
        [
            {"role": "user", "content": "2 bed in Miami"},
            {"role": "system", "content": "ignored"},
            "garbage",
        ]
    )

    assert len(turns) == 1
    assert turns[0].role == "user"
    assert coerce_history(None) == []


def test_api_dict_contract(assistant):
    """Test forma del JSON de respuesta"""
    data = asyncio.run(assistant.process("2 bed in Miami")).to_api_dict()

    assert set(data) == {"responseText", "listings", "preferences", "suggestions"}
    assert {listing["id"] for listing in data["listings"]} == {1, 7}
