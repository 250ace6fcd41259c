"""
Markup and document-level translation.

MarkupTranslator translates HTML while keeping its structure: every
text node (and optionally a whitelist of attributes) goes to the smart
translator as a single batch, and results are written back to the same
nodes. The helpers below apply it to post and comment payloads.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any

from subme.i18n.languages import Language
from subme.i18n.markup import MarkupEmitter, SlotCollector, parse_markup
from subme.i18n.translator import SmartTranslator

logger = logging.getLogger(__name__)

DEFAULT_ATTRIBUTES = ["alt", "title", "placeholder"]

# Post fields holding HTML bodies
BODY_FIELDS = ("content", "text")


class MarkupTranslator:
    """
    Structure-preserving HTML translator.

    Usage:
        markup_translator = MarkupTranslator(smart_translator)

        html = await markup_translator.translate_markup("<p>Hello <b>World</b></p>", "ru")
        html = await markup_translator.translate_markup_with_attributes(
            '<img alt="A cat">', "ru"
        )
    """

    def __init__(
        self,
        translator: SmartTranslator,
        attributes: list[str] | None = None,
    ):
        self.translator = translator
        self.attributes = list(attributes) if attributes is not None else list(DEFAULT_ATTRIBUTES)
        self.emitter = MarkupEmitter()

    async def translate_markup(self, markup: str, target: str | Language) -> str:
        """Translate the text content of ``markup`` into ``target``."""
        return await self._translate(markup, target, attributes=[])

    async def translate_markup_with_attributes(
        self,
        markup: str,
        target: str | Language,
        attributes: list[str] | None = None,
    ) -> str:
        """Translate text content plus the given (or configured) attributes."""
        return await self._translate(
            markup, target, attributes=self.attributes if attributes is None else attributes
        )

    async def _translate(self, markup: str, target: str | Language, attributes: list[str]) -> str:
        document = parse_markup(markup)
        slots = SlotCollector(attributes).collect(document)

        if not slots:
            return markup

        translations = await self.translator.auto_translate([slot.text for slot in slots], target)

        for slot, translation in zip(slots, translations):
            slot.write(translation)

        return self.emitter.emit(document)


# =============================================================================
# Payload helpers
# =============================================================================


async def translate_post(
    post: dict[str, Any],
    target: str | Language,
    markup_translator: MarkupTranslator,
) -> dict[str, Any]:
    """
    Translate a post's title and HTML body.

    Returns a new dict; the input is not modified.
    """
    result = post.copy()

    if result.get("title"):
        result["title"] = await markup_translator.translator.translate(result["title"], target)

    for body_field in BODY_FIELDS:
        if result.get(body_field):
            result[body_field] = await markup_translator.translate_markup(result[body_field], target)

    return result


async def translate_posts(
    posts: list[dict[str, Any]],
    target: str | Language,
    markup_translator: MarkupTranslator,
) -> list[dict[str, Any]]:
    """
    Translate a feed of posts.

    All titles go out as one batch; bodies are translated concurrently.
    """
    if not posts:
        return []

    result = [p.copy() for p in posts]

    titled = [i for i, p in enumerate(posts) if p.get("title")]
    if titled:
        titles = await markup_translator.translator.auto_translate(
            [posts[i]["title"] for i in titled], target
        )
        for i, title in zip(titled, titles):
            result[i]["title"] = title

    with_body = [(i, f) for i, p in enumerate(posts) for f in BODY_FIELDS if p.get(f)]
    bodies = await asyncio.gather(
        *(markup_translator.translate_markup(posts[i][f], target) for i, f in with_body)
    )
    for (i, body_field), body in zip(with_body, bodies):
        result[i][body_field] = body

    logger.debug(f"Translated {len(result)} posts to '{target}'")
    return result


async def translate_comments(
    comments: list[dict[str, Any]],
    target: str | Language,
    translator: SmartTranslator,
    text_field: str = "text",
) -> list[dict[str, Any]]:
    """Translate comment texts in one batch."""
    if not comments:
        return []

    result = [c.copy() for c in comments]
    with_text = [i for i, c in enumerate(comments) if c.get(text_field)]
    if with_text:
        translated = await translator.auto_translate([comments[i][text_field] for i in with_text], target)
        for i, text in zip(with_text, translated):
            result[i][text_field] = text

    return result
