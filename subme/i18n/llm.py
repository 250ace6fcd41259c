"""
LLM translation via DSPy.

Supports Gemini (primary), OpenAI, and Anthropic. Only used when
``TRANSLATION_PROVIDER=llm``.
"""

from __future__ import annotations

from functools import lru_cache

import dspy

from subme.config import get_settings
from subme.errors import ConfigurationError


# =============================================================================
# Signatures
# =============================================================================


class TranslateBatch(dspy.Signature):
    """Translate every text into the target language, keeping order and count."""

    texts: list[str] = dspy.InputField(desc="Texts to translate, possibly in different languages")
    target_language: str = dspy.InputField(desc="Target language name (e.g. 'English')")

    translated_texts: list[str] = dspy.OutputField(desc="One translation per input text, same order")
    detected_languages: list[str] = dspy.OutputField(
        desc="ISO 639-1 source language code per input text, same order"
    )


class DetectLanguage(dspy.Signature):
    """Detect the language of text."""

    text: str = dspy.InputField(desc="Text to analyze")
    hints: str = dspy.InputField(desc="Comma-separated likely language codes (may be empty)", default="")

    language_code: str = dspy.OutputField(desc="ISO 639-1 language code (e.g., 'en', 'ru', 'fr')")


# =============================================================================
# LM configuration
# =============================================================================


@lru_cache
def get_lm(provider: str | None = None, model: str | None = None) -> dspy.LM:
    """
    Get configured language model.

    Args:
        provider: 'gemini', 'openai', or 'anthropic'. Defaults to settings.
        model: Model name. Defaults to the provider's model setting.
    """
    settings = get_settings()
    provider = provider or settings.llm_provider

    if provider == "gemini":
        api_key = settings.google_api_key or settings.gemini_api_key
        if not api_key:
            raise ConfigurationError("GOOGLE_API_KEY or GEMINI_API_KEY not set")
        return dspy.LM(model=f"gemini/{model or settings.gemini_model}", api_key=api_key)

    elif provider == "openai":
        if not settings.openai_api_key:
            raise ConfigurationError("OPENAI_API_KEY not set")
        return dspy.LM(model=f"openai/{model or settings.openai_model}", api_key=settings.openai_api_key)

    elif provider == "anthropic":
        if not settings.anthropic_api_key:
            raise ConfigurationError("ANTHROPIC_API_KEY not set")
        return dspy.LM(
            model=f"anthropic/{model or settings.anthropic_model}",
            api_key=settings.anthropic_api_key,
        )

    else:
        raise ConfigurationError(f"Unknown provider: {provider}")
