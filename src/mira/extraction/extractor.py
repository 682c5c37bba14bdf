"""
Extractor de preferencias con fallback por tiers.

Flujo:
1. Proveedor hosteado configurado (Gemini o Groq), acotado por timeout
2. Si no hay credencial, falla, vence el timeout o la salida es inválida:
   extractor léxico
3. Normalización del resultado

Ningún tier se reintenta y extract() nunca lanza excepciones.
"""

import asyncio
from dataclasses import dataclass
from typing import Optional, Sequence, Union

import structlog
from pydantic import ValidationError

from mira.analysis.llm_providers import BaseLLMProvider, get_llm_provider
from mira.config import Settings, get_settings
from mira.extraction.json_payload import extract_json_payload
from mira.extraction.lexical import LexicalExtractor, has_prior_user_turn
from mira.extraction.normalizer import normalize_preferences
from mira.extraction.prompts import get_extraction_prompt
from mira.models import ConversationTurn, PreferenceRecord

logger = structlog.get_logger()


@dataclass
class ExtractionFailure:
    """Motivo por el que un tier no produjo preferencias."""

    provider: str
    reason: str
    raw_text: Optional[str] = None


ExtractionOutcome = Union[PreferenceRecord, ExtractionFailure]


class PreferenceExtractor:
    """
    Adaptador de extracción sobre el proveedor configurado.

    El proveedor se resuelve una sola vez al construir la instancia.
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        provider: Optional[BaseLLMProvider] = None,
        lexical: Optional[LexicalExtractor] = None,
    ):
        self._settings = settings or get_settings()
        self._provider = provider if provider is not None else get_llm_provider(self._settings)
        self._lexical = lexical or LexicalExtractor()
        logger.info(
            "PreferenceExtractor inicializado",
            provider=self.provider_name,
            model=getattr(self._provider, "model", None),
        )

    @property
    def provider_name(self) -> str:
        return self._provider.provider_name if self._provider else "lexical"

    async def _extract_hosted(
        self,
        message: str,
        history: Sequence[ConversationTurn],
    ) -> ExtractionOutcome:
        """Tier hosteado: devuelve el record o un ExtractionFailure."""
        provider_name = self._provider.provider_name
        window = self._settings.history_window
        context = list(history)[-window:] if window else []
        timeout = self._settings.extraction_timeout_seconds

        try:
            response = await asyncio.wait_for(
                self._provider.generate(
                    system_prompt=get_extraction_prompt(has_prior_user_turn(history)),
                    user_prompt=message,
                    history=context,
                    temperature=0.3,
                    max_tokens=512,
                    json_output=True,
                ),
                timeout=timeout,
            )
        except asyncio.TimeoutError:
            logger.warning("Timeout en extracción", provider=provider_name, timeout=timeout)
            return ExtractionFailure(provider=provider_name, reason="timeout")
        except Exception as e:
            logger.warning("Error del proveedor en extracción", provider=provider_name, error=str(e))
            return ExtractionFailure(provider=provider_name, reason=f"provider_error: {e}")

        data = extract_json_payload(response.text)
        if data is None:
            return ExtractionFailure(
                provider=provider_name, reason="malformed_output", raw_text=response.text
            )

        try:
            record = PreferenceRecord.model_validate(data)
        except ValidationError as e:
            return ExtractionFailure(
                provider=provider_name, reason=f"invalid_payload: {e}", raw_text=response.text
            )

        logger.debug(
            "Preferencias extraídas",
            provider=provider_name,
            model=response.model,
            preferences=record.to_api_dict(),
        )
        return record

    async def extract(
        self,
        message: str,
        history: Sequence[ConversationTurn] = (),
    ) -> PreferenceRecord:
        """
        Extrae preferencias del mensaje del usuario.

        Args:
            message: Mensaje actual
            history: Turnos previos de la conversación

        Returns:
            PreferenceRecord normalizado (nunca lanza)
        """
        outcome: ExtractionOutcome = ExtractionFailure(provider="none", reason="no_hosted_provider")
        if self._provider is not None:
            outcome = await self._extract_hosted(message, history)

        if isinstance(outcome, ExtractionFailure):
            if self._provider is not None:
                logger.warning(
                    "Usando extractor léxico como fallback",
                    provider=outcome.provider,
                    reason=outcome.reason,
                )
            outcome = self._lexical.extract(message, history)

        preferences = normalize_preferences(outcome, history)
        logger.info(
            "Preferencias normalizadas",
            intent=preferences.intent.value,
            preferences=preferences.to_api_dict(),
        )
        return preferences
