"""
Script para conversar con el asistente desde la terminal.

Uso:
    python -m mira.scripts.run_chat
    python -m mira.scripts.run_chat --message "2 bed under $500K in Miami with pool"
    python -m mira.scripts.run_chat --provider groq --json
"""

import argparse
import asyncio
import json
import sys
from typing import Optional

import structlog

from mira.assistant import PropertyAssistant, format_price
from mira.config import get_settings
from mira.logging_config import configure_logging
from mira.models import ChatResult, ConversationTurn

logger = structlog.get_logger()


def _print_result(result: ChatResult, as_json: bool) -> None:
    if as_json:
        print(json.dumps(result.to_api_dict(), indent=2, ensure_ascii=False))
        return

    print(f"\nMira: {result.response_text}\n")
    for position, listing in enumerate(result.listings, start=1):
        amenities = ", ".join(listing.amenities) or "-"
        print(
            f"  {position:>2}. [{listing.id}] {listing.title} | {format_price(listing.price)} | "
            f"{listing.location} | {listing.bedrooms} bd / {listing.bathrooms} ba | {amenities}"
        )
    if result.suggestions:
        print("\n  Sugerencias: " + " · ".join(result.suggestions))
    print()


async def run_chat(
    message: Optional[str] = None,
    provider: Optional[str] = None,
    as_json: bool = False,
) -> int:
    """
    Ejecuta un turno (si se pasa message) o un loop interactivo.

    Returns:
        Código de salida
    """
    settings = get_settings()
    if provider:
        settings = settings.model_copy(update={"llm_provider": provider})

    assistant = PropertyAssistant(settings=settings)
    history: list[ConversationTurn] = []

    if message is not None:
        try:
            result = await assistant.process(message, history)
        except ValueError as e:
            logger.error("Mensaje inválido", error=str(e))
            return 2
        _print_result(result, as_json)
        return 0

    print("Mira lista. Escribí tu búsqueda (Ctrl+D para salir).")
    while True:
        try:
            line = input("> ")
        except EOFError:
            return 0

        if not line.strip():
            continue

        result = await assistant.process(line, history)
        _print_result(result, as_json)
        history.append(ConversationTurn(role="user", content=line))
        history.append(ConversationTurn(role="assistant", content=result.response_text))


def main():
    """Entry point del script."""
    parser = argparse.ArgumentParser(description="Chat de búsqueda de propiedades")
    parser.add_argument("--message", "-m", help="Mensaje único (sin modo interactivo)")
    parser.add_argument(
        "--provider",
        choices=["gemini", "groq", "lexical"],
        help="Proveedor de extracción (default: LLM_PROVIDER)",
    )
    parser.add_argument("--json", action="store_true", help="Imprimir la respuesta como JSON")
    args = parser.parse_args()

    configure_logging(get_settings().log_level)

    try:
        sys.exit(asyncio.run(run_chat(args.message, args.provider, args.json)))
    except KeyboardInterrupt:
        logger.info("Chat interrumpido por usuario")
        sys.exit(130)


if __name__ == "__main__":
    main()
