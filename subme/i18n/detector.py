"""
Cached language detection.

The detect call takes one text at a time, so batches are resolved here:
cache hits are answered locally and every miss becomes its own
concurrent upstream call.
"""

from __future__ import annotations

import asyncio
import logging

from subme.core.cache import BoundedTTLCache, CacheStats
from subme.i18n.backends import TranslationBackend
from subme.i18n.languages import normalize_language_code

logger = logging.getLogger(__name__)

DetectKey = tuple[str, tuple[str, ...]]


class LanguageDetector:
    """
    Language detector with a bounded TTL cache.

    Usage:
        detector = LanguageDetector(backend)

        lang = await detector.detect("Bonjour le monde")        # -> "fr"
        langs = await detector.detect_batch(["Hello", "Привет"])  # -> ["en", "ru"]
    """

    def __init__(
        self,
        backend: TranslationBackend,
        cache: BoundedTTLCache[DetectKey, str] | None = None,
        ttl: float = 3600.0,
        max_size: int = 1000,
        text_limit: int = 100,
    ):
        self.backend = backend
        if cache is None:
            cache = BoundedTTLCache(max_size=max_size, default_ttl=ttl)
        self.cache: BoundedTTLCache[DetectKey, str] = cache
        self.text_limit = text_limit

    def _make_key(self, text: str, hints: list[str] | None) -> DetectKey:
        # Only a prefix is kept to bound key size; texts sharing it share a result.
        return text[: self.text_limit], tuple(sorted(hints or []))

    async def _detect_upstream(self, text: str, hints: list[str] | None) -> str:
        code = await self.backend.detect(text[: self.text_limit], hints or None)
        return normalize_language_code(code)

    async def detect(self, text: str, hints: list[str] | None = None) -> str:
        """Detect the language of one text."""
        key = self._make_key(text, hints)
        cached = self.cache.get(key)
        if cached is not None:
            return cached

        code = await self._detect_upstream(text, hints)
        self.cache.set(key, code)
        return code

    async def detect_batch(self, texts: list[str], hints: list[str] | None = None) -> list[str]:
        """
        Detect languages for many texts.

        Returns one code per input text, in input order. If any upstream
        detection fails the whole batch fails and nothing from it is cached.
        """
        results: list[str | None] = [None] * len(texts)
        miss_indices: list[int] = []

        for i, text in enumerate(texts):
            cached = self.cache.get(self._make_key(text, hints))
            if cached is not None:
                results[i] = cached
            else:
                miss_indices.append(i)

        if not miss_indices:
            return results  # type: ignore[return-value]

        logger.debug(f"Detecting {len(miss_indices)} of {len(texts)} texts upstream")

        detected = await asyncio.gather(
            *(self._detect_upstream(texts[i], hints) for i in miss_indices)
        )

        for i, code in zip(miss_indices, detected):
            self.cache.set(self._make_key(texts[i], hints), code)
            results[i] = code

        return results  # type: ignore[return-value]

    # =========================================================================
    # Cache maintenance
    # =========================================================================

    def remove(self, text: str, hints: list[str] | None = None) -> bool:
        return self.cache.remove(self._make_key(text, hints))

    def clear_cache(self) -> None:
        self.cache.clear()

    def purge_expired(self) -> int:
        return self.cache.purge_expired()

    def cache_stats(self) -> CacheStats:
        return self.cache.stats()
