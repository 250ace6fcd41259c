"""
Translation with memoization and source-language awareness.

Translator memoizes the metered translate call per (target, text).
SmartTranslator adds detection on top: it groups texts by detected
source language, skips batches that are mostly in the target language
already, and sends one translate call per foreign language group.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from subme.core.mutex import KeyedMutex
from subme.i18n.backends import TranslationBackend
from subme.i18n.detector import LanguageDetector
from subme.i18n.languages import Language, normalize_language_code

logger = logging.getLogger(__name__)


# =============================================================================
# Translation Cache
# =============================================================================


class TranslationCache:
    """
    Permanent (target, text) -> translation map.

    Translations of the same text into the same language are treated as
    stable, so entries never expire; the cache is only cleared wholesale
    or entry by entry.
    """

    def __init__(self):
        self._cache: dict[tuple[str, str], str] = {}

    def _make_key(self, text: str, target: str) -> tuple[str, str]:
        return target, text

    def get(self, text: str, target: str) -> str | None:
        return self._cache.get(self._make_key(text, target))

    def set(self, text: str, target: str, translation: str) -> None:
        self._cache[self._make_key(text, target)] = translation

    def remove(self, text: str, target: str) -> bool:
        return self._cache.pop(self._make_key(text, target), None) is not None

    def clear(self) -> None:
        self._cache.clear()

    def __len__(self) -> int:
        return len(self._cache)


# =============================================================================
# Translator Service
# =============================================================================


class Translator:
    """
    Memoizing batch translator.

    Usage:
        translator = Translator(backend)
        de_texts = await translator.translate_batch(["Hello", "Goodbye"], target="de")
    """

    def __init__(self, backend: TranslationBackend, cache: TranslationCache | None = None):
        self.backend = backend
        self.cache = cache if cache is not None else TranslationCache()

    async def translate_batch(self, texts: list[str], target: str | Language) -> list[str]:
        """
        Translate ``texts`` into ``target``, calling upstream only for misses.

        All misses go out in one call, in their relative order. Nothing is
        cached unless that call succeeds.
        """
        target = normalize_language_code(target)

        results: list[str | None] = [None] * len(texts)
        uncached_indices: list[int] = []
        uncached_texts: list[str] = []

        for i, text in enumerate(texts):
            cached = self.cache.get(text, target)
            if cached is not None:
                results[i] = cached
            else:
                uncached_indices.append(i)
                uncached_texts.append(text)

        if not uncached_texts:
            logger.debug(f"All {len(texts)} texts found in translation cache")
            return results  # type: ignore[return-value]

        logger.info(f"Translating {len(uncached_texts)} texts to '{target}'")
        translations = await self.backend.translate(target, uncached_texts)

        for orig_idx, text, translation in zip(uncached_indices, uncached_texts, translations):
            self.cache.set(text, target, translation.text)
            results[orig_idx] = translation.text

        return results  # type: ignore[return-value]


# =============================================================================
# Source-language aware translation
# =============================================================================


@dataclass
class LanguageGroup:
    """Texts sharing one detected source language, with their input positions."""

    language: str
    indices: list[int] = field(default_factory=list)
    texts: list[str] = field(default_factory=list)

    def add(self, index: int, text: str) -> None:
        self.indices.append(index)
        self.texts.append(text)

    @property
    def length(self) -> int:
        return sum(len(t) for t in self.texts)


def group_by_language(texts: list[str], languages: list[str]) -> list[LanguageGroup]:
    """Partition texts by language, groups ordered by first appearance."""
    groups: dict[str, LanguageGroup] = {}
    for i, (text, lang) in enumerate(zip(texts, languages)):
        if lang not in groups:
            groups[lang] = LanguageGroup(language=lang)
        groups[lang].add(i, text)
    return list(groups.values())


class SmartTranslator(Translator):
    """
    Translator that works out source languages itself.

    Identical concurrent calls (same target, same texts) are serialized
    through the keyed mutex so the second one is served from the caches
    the first one filled.

    Usage:
        translator = SmartTranslator(backend, detector, mutex)

        titles = await translator.auto_translate(["Hello", "Bonjour"], target="ru")
        title = await translator.translate("Hello", target="ru")
    """

    MUTEX_NAME = "autoTranslate"

    def __init__(
        self,
        backend: TranslationBackend,
        detector: LanguageDetector,
        mutex: KeyedMutex,
        cache: TranslationCache | None = None,
    ):
        super().__init__(backend, cache)
        self.detector = detector
        self.mutex = mutex

    async def auto_translate(self, texts: list[str], target: str | Language) -> list[str]:
        """
        Translate ``texts`` to ``target`` with automatic source detection.

        Returns one string per input, in input order. When the texts whose
        detected language already equals ``target`` outweigh the rest by
        character count, the input is returned unchanged and nothing is
        translated at all.
        """
        if not texts:
            return []

        target = normalize_language_code(target)
        texts = list(texts)

        return await self.mutex.run_exclusive(
            self.MUTEX_NAME,
            [target, *texts],
            lambda: self._auto_translate(texts, target),
        )

    async def _auto_translate(self, texts: list[str], target: str) -> list[str]:
        languages = await self.detector.detect_batch(texts)
        groups = group_by_language(texts, languages)

        native = sum(g.length for g in groups if g.language == target)
        foreign = sum(g.length for g in groups if g.language != target)

        if native > foreign:
            logger.info(
                f"Skipping translation to '{target}': {native} native chars vs {foreign} foreign"
            )
            return texts

        results: list[str] = list(texts)
        for group in groups:
            if group.language == target:
                continue

            translations = await self.translate_batch(group.texts, target)
            for index, translation in zip(group.indices, translations):
                results[index] = translation

        return results

    async def translate(self, text: str, target: str | Language) -> str:
        """Translate a single text (convenience wrapper)."""
        return (await self.auto_translate([text], target))[0]
