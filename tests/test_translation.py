"""
Tests for detection, memoized translation and the smart translator.
"""

import asyncio

import pytest

from subme.core.cache import BoundedTTLCache
from subme.errors import UpstreamError
from subme.i18n.detector import LanguageDetector
from subme.i18n.languages import Language, get_language_name, normalize_language_code
from subme.i18n.translator import Translator, group_by_language


# =============================================================================
# Language code Tests
# =============================================================================


class TestLanguageCodes:
    def test_normalize(self):
        assert normalize_language_code("EN") == "en"
        assert normalize_language_code(" en_US ") == "en"
        assert normalize_language_code("zh-TW") == "zh-tw"
        assert normalize_language_code("French") == "fr"
        assert normalize_language_code(Language.RU) == "ru"

    def test_language_name(self):
        assert get_language_name("ru") == "Russian"
        assert get_language_name("xx") == "xx"


# =============================================================================
# LanguageDetector Tests
# =============================================================================


class TestLanguageDetector:
    @pytest.mark.asyncio
    async def test_batch_preserves_order(self, detector):
        langs = await detector.detect_batch(["Bonjour", "Hello", "Hola", "Привет"])
        assert langs == ["fr", "en", "es", "ru"]

    @pytest.mark.asyncio
    async def test_empty_batch(self, detector, backend):
        assert await detector.detect_batch([]) == []
        assert backend.detect_calls == []

    @pytest.mark.asyncio
    async def test_partial_cache_hits(self, detector, backend):
        await detector.detect_batch(["Hello", "Bonjour"])
        backend.detect_calls.clear()

        langs = await detector.detect_batch(["Bonjour", "Hola", "Hello"])

        assert langs == ["fr", "es", "en"]
        assert [text for text, _ in backend.detect_calls] == ["Hola"]

    @pytest.mark.asyncio
    async def test_key_uses_text_prefix(self, detector, backend):
        prefix = "a" * 100
        await detector.detect(prefix + " first tail")
        await detector.detect(prefix + " second tail")

        assert len(backend.detect_calls) == 1
        # Only the prefix is sent upstream
        assert backend.detect_calls[0][0] == prefix

    @pytest.mark.asyncio
    async def test_hints_are_part_of_key(self, detector, backend):
        await detector.detect("Hello", ["en", "fr"])
        await detector.detect("Hello", ["fr", "en"])
        assert len(backend.detect_calls) == 1

        await detector.detect("Hello", ["de"])
        assert len(backend.detect_calls) == 2

    @pytest.mark.asyncio
    async def test_failure_aborts_batch_and_caches_nothing(self, detector, backend):
        backend.fail_detect_on = {"Hola"}

        with pytest.raises(UpstreamError):
            await detector.detect_batch(["Hello", "Hola", "Bonjour"])

        assert len(detector.cache) == 0

    @pytest.mark.asyncio
    async def test_entries_expire(self, backend, clock):
        cache = BoundedTTLCache(max_size=1000, default_ttl=3600.0, clock=clock)
        detector = LanguageDetector(backend, cache=cache)

        await detector.detect("Hello")
        clock.advance(3600.0)
        await detector.detect("Hello")

        assert len(backend.detect_calls) == 2

    @pytest.mark.asyncio
    async def test_codes_are_normalized(self, backend, detector):
        backend.languages["Guten Tag"] = "DE"
        assert await detector.detect("Guten Tag") == "de"

    @pytest.mark.asyncio
    async def test_cache_maintenance(self, detector):
        await detector.detect_batch(["Hello", "Bonjour"])
        assert detector.cache_stats().size == 2

        assert detector.remove("Hello")
        assert detector.purge_expired() == 0

        detector.clear_cache()
        assert detector.cache_stats().size == 0


# =============================================================================
# Translator (memoizing) Tests
# =============================================================================


class TestTranslator:
    @pytest.mark.asyncio
    async def test_second_call_is_served_from_cache(self, backend):
        translator = Translator(backend)

        first = await translator.translate_batch(["Hello"], "ru")
        second = await translator.translate_batch(["Hello"], "ru")

        assert first == second == ["[ru] Hello"]
        assert len(backend.translate_calls) == 1

    @pytest.mark.asyncio
    async def test_only_misses_go_upstream_in_order(self, backend):
        translator = Translator(backend)
        await translator.translate_batch(["b"], "ru")

        result = await translator.translate_batch(["a", "b", "c"], "ru")

        assert result == ["[ru] a", "[ru] b", "[ru] c"]
        assert backend.translate_calls[-1] == ("ru", ["a", "c"])

    @pytest.mark.asyncio
    async def test_cache_is_per_target(self, backend):
        translator = Translator(backend)
        await translator.translate_batch(["Hello"], "ru")
        await translator.translate_batch(["Hello"], "de")

        assert len(backend.translate_calls) == 2
        assert len(translator.cache) == 2

    @pytest.mark.asyncio
    async def test_failure_caches_nothing(self, backend):
        translator = Translator(backend)
        backend.fail_translate = True

        with pytest.raises(UpstreamError):
            await translator.translate_batch(["a", "b"], "ru")

        assert len(translator.cache) == 0

    @pytest.mark.asyncio
    async def test_empty(self, backend):
        translator = Translator(backend)
        assert await translator.translate_batch([], "ru") == []
        assert backend.translate_calls == []

    @pytest.mark.asyncio
    async def test_remove_entry(self, backend):
        translator = Translator(backend)
        await translator.translate_batch(["Hello"], "ru")

        assert translator.cache.remove("Hello", "ru")
        await translator.translate_batch(["Hello"], "ru")
        assert len(backend.translate_calls) == 2


# =============================================================================
# SmartTranslator Tests
# =============================================================================


class TestGrouping:
    def test_groups_keep_indices(self):
        groups = group_by_language(["a", "b", "c", "d"], ["en", "fr", "en", "es"])

        assert [g.language for g in groups] == ["en", "fr", "es"]
        assert groups[0].indices == [0, 2]
        assert groups[0].texts == ["a", "c"]
        assert groups[0].length == 2


class TestSmartTranslator:
    @pytest.mark.asyncio
    async def test_empty_input(self, smart_translator, backend):
        assert await smart_translator.auto_translate([], "en") == []
        assert backend.detect_calls == []

    @pytest.mark.asyncio
    async def test_foreign_majority_translates_foreign_group_only(self, smart_translator, backend):
        # native "hello" (5) < foreign "bonjour" (7)
        result = await smart_translator.auto_translate(["hello", "bonjour"], "en")

        assert result == ["hello", "[en] bonjour"]
        assert backend.translate_calls == [("en", ["bonjour"])]

    @pytest.mark.asyncio
    async def test_native_majority_skips_translation(self, smart_translator, backend):
        # native (17) > foreign "hi" (2)
        texts = ["hello world today", "hi"]
        result = await smart_translator.auto_translate(texts, "en")

        assert result == texts
        assert backend.translate_calls == []

    @pytest.mark.asyncio
    async def test_short_foreign_text_is_left_untranslated_next_to_long_native(
        self, smart_translator, backend
    ):
        # Aggregate counts decide for the whole batch, so "Bonjour" stays as-is.
        backend.languages["This is a long English sentence."] = "en"
        result = await smart_translator.auto_translate(
            ["This is a long English sentence.", "Bonjour"], "en"
        )

        assert result[1] == "Bonjour"
        assert backend.translate_calls == []

    @pytest.mark.asyncio
    async def test_equal_counts_translate(self, smart_translator, backend):
        backend.languages["salut"] = "fr"
        result = await smart_translator.auto_translate(["hello", "salut"], "en")

        assert result == ["hello", "[en] salut"]

    @pytest.mark.asyncio
    async def test_one_call_per_source_language(self, smart_translator, backend):
        texts = ["Hello", "Bonjour", "World", "Привет", "Hola"]
        result = await smart_translator.auto_translate(texts, "ru")

        assert result == ["[ru] Hello", "[ru] Bonjour", "[ru] World", "Привет", "[ru] Hola"]
        assert sorted(backend.translate_calls) == sorted([
            ("ru", ["Hello", "World"]),
            ("ru", ["Bonjour"]),
            ("ru", ["Hola"]),
        ])

    @pytest.mark.asyncio
    async def test_target_is_normalized(self, smart_translator, backend):
        result = await smart_translator.auto_translate(["hello", "bonjour"], "EN")
        assert result == ["hello", "[en] bonjour"]

    @pytest.mark.asyncio
    async def test_identical_concurrent_calls_hit_upstream_once(self, smart_translator, backend):
        texts = ["Hello", "World"]
        first, second = await asyncio.gather(
            smart_translator.auto_translate(texts, "ru"),
            smart_translator.auto_translate(texts, "ru"),
        )

        assert first == second == ["[ru] Hello", "[ru] World"]
        assert len(backend.translate_calls) == 1
        assert len(backend.detect_calls) == 2

    @pytest.mark.asyncio
    async def test_translation_failure_propagates(self, smart_translator, backend, mutex):
        backend.fail_translate = True

        with pytest.raises(UpstreamError):
            await smart_translator.auto_translate(["Hello"], "ru")

        assert len(mutex) == 0

    @pytest.mark.asyncio
    async def test_translate_single(self, smart_translator):
        assert await smart_translator.translate("Bonjour", "ru") == "[ru] Bonjour"
