"""
Tests para el extractor léxico
"""
import pytest

from mira.extraction.lexical import LexicalExtractor, has_prior_user_turn
from mira.models import ConversationTurn, Intent


@pytest.fixture
def extractor():
    return LexicalExtractor()


def test_full_search_message(extractor):
    """Test mensaje con dormitorios, presupuesto, ubicación y amenity"""
    result = extractor.extract("2 bed under $500K in Miami with pool")

    assert result.bedrooms == 2
    assert result.budget == 500000
    assert result.location == "miami"
    assert result.amenities == ["pool"]
    assert result.intent is Intent.SEARCH


def test_budget_range_with_units(extractor):
    """Test rango de presupuesto con unidad en ambos extremos"""
    result = extractor.extract("3 BHK between 300k and 500k")

    assert result.bedrooms == 3
    assert result.min_budget == 300000
    assert result.max_budget == 500000
    assert result.budget is None
    assert result.location is None


def test_budget_range_single_unit_applies_to_both(extractor):
    """Test "300 to 500k": la unidad del segundo extremo aplica a ambos"""
    result = extractor.extract("apartments from 300 to 500k")

    assert result.min_budget == 300000
    assert result.max_budget == 500000


@pytest.mark.parametrize(
    "message,expected",
    [
        ("house under 50 lakhs", 5_000_000),
        ("condo below 2 million", 2_000_000),
        ("anything up to $750,000", 750_000),
        ("max 400 thousand please", 400_000),
    ],
)
def test_budget_units(extractor, message, expected):
    """Test conversión de lakhs, millones, miles y separadores"""
    assert extractor.extract(message).budget == expected


def test_location_after_preposition(extractor):
    """Test ubicación después de near"""
    result = extractor.extract("apartments near Boston")

    assert result.location == "boston"


def test_location_ignores_trailing_punctuation(extractor):
    """Test que la puntuación final no queda en la ubicación"""
    result = extractor.extract("Show me houses in Austin!")

    assert result.location == "austin"


def test_consumed_spans_are_not_reused(extractor):
    """Test que presupuesto y dormitorios no contaminan la ubicación"""
    result = extractor.extract("3 bedrooms under 400000 in Dallas")

    assert result.bedrooms == 3
    assert result.budget == 400000
    assert result.location == "dallas"


def test_location_stops_at_consumed_bedrooms(extractor):
    """Test que la ubicación no se extiende hasta los dormitorios ya leídos"""
    result = extractor.extract("homes near Boston for 2 bed")

    assert result.bedrooms == 2
    assert result.location is None


def test_location_keeps_budget_keyword_as_boundary(extractor):
    """Test "under" sigue cortando la ubicación después de consumir el monto"""
    result = extractor.extract("in Miami under 500k")

    assert result.budget == 500000
    assert result.location == "miami"


@pytest.mark.parametrize(
    "message,bedrooms",
    [
        ("3 bedroom house", 3),
        ("2 beds", 2),
        ("4 BHK", 4),
    ],
)
def test_bedroom_word_is_consumed_whole(extractor, message, bedrooms):
    """Test que el resto de la palabra no queda como ubicación ("room")"""
    result = extractor.extract(message)

    assert result.bedrooms == bedrooms
    assert result.location is None


def test_amenities_follow_vocabulary_order(extractor):
    """Test amenities detectados en el orden del vocabulario"""
    result = extractor.extract("condo with gym and parking in Boston")

    assert result.amenities == ["parking", "gym"]
    assert result.location == "boston"


def test_greeting_without_history(extractor):
    """Test saludo en el primer mensaje"""
    assert extractor.extract("hi").intent is Intent.GREETING
    assert extractor.extract("Hello there").intent is Intent.GREETING


def test_short_vague_message_depends_on_history(extractor):
    """Test mensaje corto y vago: saludo al inicio, búsqueda en conversación"""
    history = [ConversationTurn(role="user", content="2 bed in Miami")]

    assert extractor.detect_intent("ok thanks", has_history=False) is Intent.GREETING
    assert extractor.detect_intent("ok thanks", has_history=True) is Intent.SEARCH
    assert extractor.extract("ok thanks", history).intent is Intent.SEARCH


def test_short_message_with_domain_keyword_is_search(extractor):
    """Test mensaje corto con número o keyword de dominio"""
    assert extractor.detect_intent("2 bhk", has_history=False) is Intent.SEARCH
    assert extractor.detect_intent("any property", has_history=False) is Intent.SEARCH


def test_extract_never_fails(extractor):
    """Test que extractor no falla con texto sin criterios"""
    result = extractor.extract("!!! ???")

    assert result.location is None
    assert result.budget is None
    assert result.amenities == []


def test_has_prior_user_turn():
    """Test historial con solo turnos del asistente"""
    assistant_only = [ConversationTurn(role="assistant", content="Hi!")]
    with_user = assistant_only + [ConversationTurn(role="user", content="hi")]

    assert has_prior_user_turn([]) is False
    assert has_prior_user_turn(assistant_only) is False
    assert has_prior_user_turn(with_user) is True
