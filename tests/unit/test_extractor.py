"""
Tests para el extractor con fallback por tiers
"""
import asyncio

from mira.extraction import ExtractionFailure, LexicalExtractor, PreferenceExtractor
from mira.extraction.normalizer import normalize_preferences
from mira.models import ConversationTurn, Intent

MESSAGE = "2 bed under $500K in Miami with pool"


def _lexical_result(message, history=()):
    return normalize_preferences(LexicalExtractor().extract(message, history), history)


def test_hosted_provider_result_is_used(settings, fake_provider):
    """Test JSON válido del proveedor"""
    provider = fake_provider(
        text='{"location": "Miami", "bedrooms": 2, "amenities": ["Pool"], "intent": "search"}'
    )
    extractor = PreferenceExtractor(settings, provider=provider)

    result = asyncio.run(extractor.extract(MESSAGE))

    assert result.location == "Miami"
    assert result.bedrooms == 2
    assert result.amenities == ["pool"]
    assert provider.calls[0]["json_output"] is True
    assert provider.calls[0]["user_prompt"] == MESSAGE


def test_provider_numbers_are_coerced(settings, fake_provider):
    """Test presupuesto como string y valores no positivos"""
    provider = fake_provider(text='{"maxBudget": "500,000", "budget": 0, "location": "Miami"}')
    extractor = PreferenceExtractor(settings, provider=provider)

    result = asyncio.run(extractor.extract("under 500k in Miami"))

    assert result.max_budget == 500000
    assert result.budget is None


def test_provider_error_falls_back_to_lexical(settings, fake_provider):
    """Test error del proveedor: mismo resultado que el léxico"""
    provider = fake_provider(error=RuntimeError("quota exceeded"))
    extractor = PreferenceExtractor(settings, provider=provider)

    result = asyncio.run(extractor.extract(MESSAGE))

    assert result == _lexical_result(MESSAGE)


def test_timeout_falls_back_to_lexical(settings, fake_provider):
    """Test proveedor que no responde dentro del timeout"""
    provider = fake_provider(text='{"location": "Boston"}', delay=1.0)
    extractor = PreferenceExtractor(settings, provider=provider)

    result = asyncio.run(extractor.extract(MESSAGE))

    assert result == _lexical_result(MESSAGE)
    assert result.location == "miami"


def test_timeout_is_reported_as_failure(settings, fake_provider):
    """Test que el tier hosteado devuelve un ExtractionFailure"""
    provider = fake_provider(text="{}", delay=1.0)
    extractor = PreferenceExtractor(settings, provider=provider)

    outcome = asyncio.run(extractor._extract_hosted(MESSAGE, []))

    assert isinstance(outcome, ExtractionFailure)
    assert outcome.provider == "fake"
    assert outcome.reason == "timeout"


def test_malformed_output_falls_back_to_lexical(settings, fake_provider):
    """Test salida sin JSON"""
    provider = fake_provider(text="Sorry, I can't do that.")
    extractor = PreferenceExtractor(settings, provider=provider)

    outcome = asyncio.run(extractor._extract_hosted(MESSAGE, []))
    result = asyncio.run(extractor.extract(MESSAGE))

    assert isinstance(outcome, ExtractionFailure)
    assert outcome.reason == "malformed_output"
    assert outcome.raw_text == "Sorry, I can't do that."
    assert result == _lexical_result(MESSAGE)


def test_missing_credential_uses_lexical(settings):
    """Test proveedor configurado sin API key"""
    settings = settings.model_copy(update={"llm_provider": "gemini", "gemini_api_key": None})
    extractor = PreferenceExtractor(settings)

    result = asyncio.run(extractor.extract(MESSAGE))

    assert extractor.provider_name == "lexical"
    assert result == _lexical_result(MESSAGE)


def test_history_is_trimmed_to_window(settings, fake_provider):
    """Test que solo se envían los últimos turnos"""
    history = [
        ConversationTurn(role="user" if i % 2 == 0 else "assistant", content=f"turn {i}")
        for i in range(10)
    ]
    provider = fake_provider(text='{"location": "Miami"}')
    extractor = PreferenceExtractor(settings, provider=provider)

    asyncio.run(extractor.extract("and in Miami?", history))

    sent = provider.calls[0]["history"]
    assert len(sent) == 6
    assert sent[0].content == "turn 4"
    assert "ongoing conversation" in provider.calls[0]["system_prompt"]


def test_greeting_mid_conversation_without_criteria(settings, fake_provider, user_history):
    """Test "hi" con historial: el proveedor dice search pero no hay criterios"""
    provider = fake_provider(text='{"intent": "search"}')
    extractor = PreferenceExtractor(settings, provider=provider)

    result = asyncio.run(extractor.extract("hi", user_history))

    assert result.intent is Intent.GREETING
    assert result.to_api_dict() == {"intent": "greeting"}


def test_greeting_with_criteria_is_search(settings, fake_provider):
    """Test saludo del proveedor con ubicación"""
    provider = fake_provider(text='{"intent": "greeting", "location": "Miami"}')
    extractor = PreferenceExtractor(settings, provider=provider)

    result = asyncio.run(extractor.extract("hi, anything in Miami?"))

    assert result.intent is Intent.SEARCH
    assert result.location == "Miami"
