"""
Shared fixtures: an in-memory translation backend and a controllable clock.
"""

import asyncio

import pytest

from subme.core.cache import BoundedTTLCache
from subme.core.mutex import KeyedMutex
from subme.errors import UpstreamError
from subme.i18n.backends import TranslationBackend, TranslationResult
from subme.i18n.detector import LanguageDetector
from subme.i18n.document import MarkupTranslator
from subme.i18n.translator import SmartTranslator


class FakeBackend(TranslationBackend):
    """
    Deterministic stand-in for the translate/detect API.

    Detection looks texts up in ``languages`` (default language otherwise);
    translation prefixes each text with the target code.
    """

    def __init__(self, languages=None, default_language="en"):
        self.languages = dict(languages or {})
        self.default_language = default_language
        self.translate_calls = []
        self.detect_calls = []
        self.fail_translate = False
        self.fail_detect_on = set()

    async def translate(self, target_language, texts):
        self.translate_calls.append((target_language, list(texts)))
        await asyncio.sleep(0)
        if self.fail_translate:
            raise UpstreamError("HTTP error! status: 500", status_code=500)
        return [
            TranslationResult(
                text=f"[{target_language}] {text}",
                detected_language_code=self.languages.get(text, self.default_language),
            )
            for text in texts
        ]

    async def detect(self, text, hints=None):
        self.detect_calls.append((text, hints))
        await asyncio.sleep(0)
        if text in self.fail_detect_on:
            raise UpstreamError("HTTP error! status: 503", status_code=503)
        return self.languages.get(text, self.default_language)


class FakeClock:
    def __init__(self, now=1000.0):
        self.now = now

    def __call__(self):
        return self.now

    def advance(self, seconds):
        self.now += seconds


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def backend():
    return FakeBackend(
        languages={
            "Hello": "en",
            "World": "en",
            "hello": "en",
            "hello world today": "en",
            "Bonjour": "fr",
            "bonjour": "fr",
            "hi": "fr",
            "Hola": "es",
            "Привет": "ru",
        }
    )


@pytest.fixture
def mutex():
    return KeyedMutex()


@pytest.fixture
def detector(backend):
    return LanguageDetector(backend)


@pytest.fixture
def smart_translator(backend, detector, mutex):
    return SmartTranslator(backend, detector, mutex)


@pytest.fixture
def markup_translator(smart_translator):
    return MarkupTranslator(smart_translator)


@pytest.fixture
def ttl_cache(clock):
    return BoundedTTLCache(max_size=3, default_ttl=10.0, clock=clock)
