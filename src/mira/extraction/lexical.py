"""
Extractor léxico de preferencias.

Parser determinístico basado en regex: no depende de ningún proveedor,
siempre está disponible y es el último tier de la cadena de fallback.
"""

import re
from typing import Optional, Sequence

import structlog

from mira.models import ConversationTurn, Intent, PreferenceRecord

logger = structlog.get_logger()


def has_prior_user_turn(history: Sequence[ConversationTurn]) -> bool:
    """True si la conversación ya tiene al menos un mensaje del usuario."""
    return any(turn.role == "user" for turn in history)


class LexicalExtractor:
    """Extractor por patrones: presupuesto, rango, dormitorios, ubicación, amenities e intención."""

    BUDGET_PATTERN = re.compile(
        r"(?:under|below|less than|up to|max)\s*\$?\s*(\d[\d,]*)\s*"
        r"(?:(k|lakhs?|thousand|million|m)\b)?",
        flags=re.IGNORECASE,
    )

    BUDGET_RANGE_PATTERN = re.compile(
        r"(?:between|from)\s*\$?\s*(\d[\d,]*)\s*(?:(k|thousand)\b)?\s*"
        r"(?:and|to|-)\s*\$?\s*(\d[\d,]*)\s*(?:(k|thousand)\b)?",
        flags=re.IGNORECASE,
    )

    BEDROOM_PATTERN = re.compile(r"(\d+)\s*(?:bhk|bedrooms?|beds?)\b", flags=re.IGNORECASE)

    LOCATION_PATTERNS: list[re.Pattern] = [
        re.compile(
            r"\b(?:in|at|near|around)\s+([a-z\s,]+?)(?:\s+with|\s+under|\s+below|\s+properties?|$)",
            flags=re.IGNORECASE,
        ),
        re.compile(
            r"properties?\s+(?:in|at|near)\s+([a-z\s,]+?)(?:\s+with|\s+under|\s+below|$)",
            flags=re.IGNORECASE,
        ),
        re.compile(
            r"([a-z\s]+?)\s+(?:properties?|apartments?|house|condo)",
            flags=re.IGNORECASE,
        ),
    ]

    LOCATION_STOP_WORDS = {"any", "the", "for", "rental", "rent", "sale", "buy"}

    AMENITY_VOCABULARY = [
        "parking",
        "gym",
        "pool",
        "swimming pool",
        "garden",
        "balcony",
        "security",
        "elevator",
        "terrace",
    ]

    GREETING_PATTERN = re.compile(
        r"^(?:hi|hello|hey|greetings|good morning|good afternoon|good evening|howdy|sup)\b",
        flags=re.IGNORECASE,
    )

    DOMAIN_KEYWORD_PATTERN = re.compile(r"bhk|bed|room|location|property", flags=re.IGNORECASE)

    # Mensajes más cortos que esto, sin dígitos ni keywords, son ambiguos
    SHORT_MESSAGE_LENGTH = 15

    # Marca de texto ya usado: fuera de las clases [a-z\s,] de los patrones de
    # ubicación, así una captura no puede cruzar un tramo consumido
    CONSUMED_MARK = "\x00"

    @classmethod
    def _consume_span(cls, text: str, start: int, end: int) -> str:
        return text[:start] + cls.CONSUMED_MARK * (end - start) + text[end:]

    @classmethod
    def _consume(cls, text: str, match: re.Match, group: int = 0) -> str:
        """Borra el tramo ya usado para que los pasos siguientes no lo vuelvan a leer."""
        start, end = match.span(group)
        return cls._consume_span(text, start, end)

    @staticmethod
    def _to_int(raw: str) -> Optional[int]:
        digits = raw.replace(",", "")
        return int(digits) if digits else None

    @staticmethod
    def _unit_multiplier(unit: Optional[str]) -> int:
        if not unit:
            return 1
        unit = unit.lower()
        if unit.startswith("lakh"):
            return 100_000
        if unit in ("k", "thousand"):
            return 1_000
        if unit in ("m", "million"):
            return 1_000_000
        return 1

    def _extract_budget(self, text: str, preferences: dict) -> str:
        match = self.BUDGET_PATTERN.search(text)
        if not match:
            return text
        amount = self._to_int(match.group(1))
        if amount:
            preferences["budget"] = amount * self._unit_multiplier(match.group(2))
            logger.debug("Presupuesto extraído", budget=preferences["budget"])
        # "under"/"below" quedan: cortan la ubicación ("in miami under 500k")
        end = match.end(2) if match.group(2) else match.end(1)
        return self._consume_span(text, match.start(1), end)

    def _extract_budget_range(self, text: str, preferences: dict) -> str:
        match = self.BUDGET_RANGE_PATTERN.search(text)
        if not match:
            return text
        low = self._to_int(match.group(1))
        high = self._to_int(match.group(3))
        # Un solo token de unidad aplica a ambos extremos ("300 to 500k")
        multiplier = self._unit_multiplier(match.group(2) or match.group(4))
        if low and high:
            preferences["min_budget"] = low * multiplier
            preferences["max_budget"] = high * multiplier
            logger.debug(
                "Rango de presupuesto extraído",
                min_budget=preferences["min_budget"],
                max_budget=preferences["max_budget"],
            )
        return self._consume(text, match)

    def _extract_bedrooms(self, text: str, preferences: dict) -> str:
        match = self.BEDROOM_PATTERN.search(text)
        if not match:
            return text
        preferences["bedrooms"] = int(match.group(1))
        logger.debug("Dormitorios extraídos", bedrooms=preferences["bedrooms"])
        return self._consume(text, match)

    def _extract_location(self, text: str, preferences: dict) -> str:
        candidate_text = text.rstrip(" .!?")
        for pattern in self.LOCATION_PATTERNS:
            match = pattern.search(candidate_text)
            if not match or not match.group(1):
                continue
            location = match.group(1).strip(" ,")
            if len(location) > 2 and location not in self.LOCATION_STOP_WORDS:
                preferences["location"] = location
                logger.debug("Ubicación extraída", location=location)
                return self._consume(text, match, group=1)
        return text

    def _extract_amenities(self, text: str, preferences: dict) -> None:
        found = [amenity for amenity in self.AMENITY_VOCABULARY if amenity in text]
        if found:
            preferences["amenities"] = found
            logger.debug("Amenities extraídos", amenities=found)

    def detect_intent(self, message: str, has_history: bool) -> Intent:
        """
        Clasifica la intención del mensaje.

        En una conversación en curso, un mensaje corto sin números ni
        keywords de dominio se toma como búsqueda y no como saludo.
        """
        stripped = message.strip()
        if self.GREETING_PATTERN.match(stripped):
            return Intent.GREETING

        is_short_and_vague = (
            len(stripped) < self.SHORT_MESSAGE_LENGTH
            and not re.search(r"\d", stripped)
            and not self.DOMAIN_KEYWORD_PATTERN.search(stripped)
        )
        if is_short_and_vague:
            return Intent.SEARCH if has_history else Intent.GREETING
        return Intent.SEARCH

    def extract(
        self,
        message: str,
        history: Sequence[ConversationTurn] = (),
    ) -> PreferenceRecord:
        """
        Extrae preferencias del mensaje.

        Args:
            message: Mensaje del usuario
            history: Turnos previos (solo se usa para la intención)

        Returns:
            PreferenceRecord parcial; nunca falla
        """
        text = message.lower()
        preferences: dict = {}

        text = self._extract_budget(text, preferences)
        text = self._extract_budget_range(text, preferences)
        text = self._extract_bedrooms(text, preferences)
        text = self._extract_location(text, preferences)
        self._extract_amenities(text, preferences)

        preferences["intent"] = self.detect_intent(message, has_prior_user_turn(history))

        record = PreferenceRecord(**preferences)
        logger.debug("Preferencias extraídas (léxico)", preferences=record.to_api_dict())
        return record
