"""
Asistente conversacional.

Orquesta extracción, matching y composición de la respuesta.
"""

from mira.assistant.composer import ResponseComposer, build_suggestions, format_price
from mira.assistant.pipeline import PropertyAssistant, coerce_history, get_assistant

__all__ = [
    "PropertyAssistant",
    "ResponseComposer",
    "build_suggestions",
    "coerce_history",
    "format_price",
    "get_assistant",
]
