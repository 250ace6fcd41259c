"""
Command-line entry point.

Translates an HTML fragment and prints the result:

    subme-translate "<p>Hello <b>World</b></p>" --target ru
    cat post.html | subme-translate --target en --attributes
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys

from subme.errors import SubMeError
from subme.i18n.languages import DEFAULT_LANGUAGE
from subme.logging_config import setup_logging
from subme.providers import ServiceProvider, create_services

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Translate HTML while preserving its structure")
    parser.add_argument("markup", nargs="?", help="HTML to translate (default: read stdin)")
    parser.add_argument("--target", "-t", default=DEFAULT_LANGUAGE.value, help="Target language code")
    parser.add_argument(
        "--attributes",
        "-a",
        action="store_true",
        help="Also translate alt/title/placeholder attributes",
    )
    return parser


async def run(markup: str, target: str, attributes: bool, services: ServiceProvider) -> str:
    try:
        if attributes:
            return await services.markup_translator.translate_markup_with_attributes(markup, target)
        return await services.markup_translator.translate_markup(markup, target)
    finally:
        await services.aclose()


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    args = build_parser().parse_args(argv)
    setup_logging()

    markup = args.markup if args.markup is not None else sys.stdin.read()

    try:
        result = asyncio.run(run(markup, args.target, args.attributes, create_services()))
    except SubMeError as e:
        logger.error(f"Translation failed: {e}")
        return 1

    print(result)
    return 0


if __name__ == "__main__":
    sys.exit(main())
