"""
Recuperación best-effort del JSON que devuelven los LLM.

Los modelos a veces agregan texto antes del JSON, lo envuelven en
bloques markdown, dejan comentarios // o cortan la respuesta antes
de cerrar las llaves.
"""

import json
import re
from typing import Optional

import structlog

logger = structlog.get_logger()


def _strip_markdown(text: str) -> str:
    """Remueve bloques ```json ... ```."""
    if "```" not in text:
        return text
    parts = text.split("```")
    # Un cierre suelto después del JSON deja el objeto en parts[0]
    if "{" not in parts[1]:
        return parts[0].strip()
    text = parts[1]
    if text.lower().startswith("json"):
        text = text[4:]
    return text.strip()


def _fix_json(text: str) -> str:
    """
    Arregla JSON malformado que Llama a veces genera.

    Problemas comunes:
    - Comentarios // dentro del JSON
    - Comas faltantes entre propiedades
    """
    cleaned_lines = []
    for line in text.split("\n"):
        if "//" in line:
            pos = line.find("//")
            before = line[:pos]
            quote_count = before.count('"') - before.count('\\"')
            if quote_count % 2 == 0:
                # No está dentro de un string
                line = before.rstrip()
        cleaned_lines.append(line)
    text = "\n".join(cleaned_lines)

    # Comas faltantes: valor seguido de nueva línea y otra propiedad
    text = re.sub(r'(\d+\.?\d*)\s*\n(\s*")', r"\1,\n\2", text)
    text = re.sub(r'(")\s*\n(\s*")', r"\1,\n\2", text)
    text = re.sub(r'(true|false|null)\s*\n(\s*")', r"\1,\n\2", text)
    text = re.sub(r'(\}|\])\s*\n(\s*")', r"\1,\n\2", text)
    return text


def _fix_truncated_json(text: str) -> str:
    """Intenta arreglar JSON truncado agregando cierres faltantes."""
    open_braces = text.count("{") - text.count("}")
    open_brackets = text.count("[") - text.count("]")

    fixed = text.rstrip().rstrip(",")
    if fixed.count('"') % 2 == 1:
        fixed += '"'

    fixed += "]" * max(open_brackets, 0)
    fixed += "}" * max(open_braces, 0)
    return fixed


def extract_json_payload(raw_text: str) -> Optional[dict]:
    """
    Extrae el objeto JSON de una respuesta de LLM.

    Args:
        raw_text: Texto crudo devuelto por el proveedor

    Returns:
        dict parseado, o None si no se pudo recuperar un objeto JSON
    """
    text = _strip_markdown((raw_text or "").strip())

    # Descartar preámbulo antes de la primera llave
    start = text.find("{")
    if start == -1:
        return None
    text = text[start:]

    # Descartar texto después de la última llave de cierre
    if text.count("{") <= text.count("}"):
        text = text[: text.rfind("}") + 1]

    text = _fix_json(text)
    if not text.rstrip().endswith("}") or text.count("{") > text.count("}"):
        logger.warning("Respuesta parece truncada, intentando arreglar")
        text = _fix_truncated_json(text)

    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        logger.warning("No se pudo parsear JSON del LLM", error=str(e), response=text[:300])
        return None

    if not isinstance(data, dict):
        return None
    return data
