"""
Internationalization - cached, source-aware translation.

Design:
1. Detect the source language of every string (cached, TTL + size bound)
2. Skip batches that are already mostly in the target language
3. One translate call per foreign source language, memoized per text
4. HTML is translated node by node with its structure kept intact

Usage:
    from subme.providers import create_services

    services = create_services()
    titles = await services.translator.auto_translate(["Hello", "Bonjour"], "ru")
    html = await services.markup_translator.translate_markup("<p>Hello</p>", "ru")
"""

from subme.i18n.backends import (
    CloudTranslateBackend,
    LLMTranslationBackend,
    TranslationBackend,
    TranslationResult,
)
from subme.i18n.detector import LanguageDetector
from subme.i18n.document import (
    MarkupTranslator,
    translate_comments,
    translate_post,
    translate_posts,
)
from subme.i18n.languages import (
    DEFAULT_LANGUAGE,
    Language,
    get_language_name,
    normalize_language_code,
)
from subme.i18n.translator import (
    LanguageGroup,
    SmartTranslator,
    TranslationCache,
    Translator,
)

__all__ = [
    # Backends
    "TranslationBackend",
    "TranslationResult",
    "CloudTranslateBackend",
    "LLMTranslationBackend",
    # Core translation
    "TranslationCache",
    "Translator",
    "SmartTranslator",
    "LanguageGroup",
    "LanguageDetector",
    # Document-level
    "MarkupTranslator",
    "translate_post",
    "translate_posts",
    "translate_comments",
    # Language utilities
    "Language",
    "DEFAULT_LANGUAGE",
    "get_language_name",
    "normalize_language_code",
]
