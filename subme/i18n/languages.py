"""
Language codes and utilities.

Detection results and requested targets are compared as normalized
ISO 639-1 codes, so "EN", "en_US" and "english" all match "en" where it
matters.
"""

from __future__ import annotations

from enum import Enum


class Language(str, Enum):
    """Languages the client UI ships with."""

    RU = "ru"
    EN = "en"
    ES = "es"
    FR = "fr"
    DE = "de"
    ZH = "zh"
    PT = "pt"
    IT = "it"
    UK = "uk"
    KK = "kk"
    TR = "tr"
    JA = "ja"
    KO = "ko"
    AR = "ar"
    HE = "he"


LANGUAGE_NAMES: dict[str, str] = {
    "ru": "Russian",
    "en": "English",
    "es": "Spanish",
    "fr": "French",
    "de": "German",
    "zh": "Chinese",
    "pt": "Portuguese",
    "it": "Italian",
    "uk": "Ukrainian",
    "kk": "Kazakh",
    "tr": "Turkish",
    "ja": "Japanese",
    "ko": "Korean",
    "ar": "Arabic",
    "he": "Hebrew",
}

# Reverse lookup for names an LLM or a user might return instead of a code
_NAME_TO_CODE: dict[str, str] = {name.lower(): code for code, name in LANGUAGE_NAMES.items()}
_NAME_TO_CODE.update({
    "farsi": "fa",
    "persian": "fa",
    "polish": "pl",
    "dutch": "nl",
})

# Region subtags that change the written language and must be kept
_SIGNIFICANT_REGIONS = {"zh-tw", "zh-hk", "pt-br"}

DEFAULT_LANGUAGE = Language.RU


def normalize_language_code(code: str | Language) -> str:
    """
    Normalize a language code to lowercase ISO 639-1 form.

    ``en_US`` and ``en-us`` become ``en``; ``zh-TW`` stays ``zh-tw``.
    """
    if isinstance(code, Language):
        return code.value

    code = str(code).strip().lower().replace("_", "-")
    if code in _NAME_TO_CODE:
        return _NAME_TO_CODE[code]
    if code in _SIGNIFICANT_REGIONS:
        return code
    return code.split("-", 1)[0]


def get_language_name(code: str) -> str:
    """Get human-readable language name (falls back to the code)."""
    code = normalize_language_code(code)
    return LANGUAGE_NAMES.get(code, code)