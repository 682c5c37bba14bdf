"""
Módulo de extracción de preferencias.

Convierte el mensaje del usuario (más el historial reciente) en un
PreferenceRecord: proveedor LLM configurado con fallback léxico.
"""

from mira.extraction.extractor import ExtractionFailure, PreferenceExtractor
from mira.extraction.json_payload import extract_json_payload
from mira.extraction.lexical import LexicalExtractor, has_prior_user_turn
from mira.extraction.normalizer import has_search_criteria, normalize_preferences

__all__ = [
    "PreferenceExtractor",
    "ExtractionFailure",
    "LexicalExtractor",
    "extract_json_payload",
    "normalize_preferences",
    "has_search_criteria",
    "has_prior_user_turn",
]
