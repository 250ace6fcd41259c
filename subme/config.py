"""
Application configuration.

Loads settings from environment variables with sensible defaults.
"""

from __future__ import annotations

from functools import lru_cache

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings loaded from environment."""

    # ==========================================================================
    # Environment
    # ==========================================================================

    environment: str = "development"
    debug: bool = True
    log_level: str = "INFO"

    # ==========================================================================
    # Domain REST API
    # ==========================================================================

    api_base_url: str = "http://localhost:5173"
    api_cache_ttl: float = 5.0  # seconds
    request_timeout: float = 10.0

    # ==========================================================================
    # Translation
    # ==========================================================================

    # "cloud" (HTTP translate API) or "llm" (DSPy)
    translation_provider: str = "cloud"

    translate_api_url: str = "https://translate.api.cloud.yandex.net"
    translate_api_key: str = ""
    translate_folder_id: str = ""

    # Language detection cache
    detect_cache_ttl: float = 3600.0
    detect_cache_size: int = 1000
    detect_text_limit: int = 100

    # Attributes translated by the markup translator's attribute variant
    markup_attributes: str = "alt,title,placeholder"

    # ==========================================================================
    # AI / LLM (only used with translation_provider="llm")
    # ==========================================================================

    google_api_key: str = ""
    gemini_api_key: str = ""  # Alias for google_api_key
    gemini_model: str = "gemini-2.0-flash"
    openai_api_key: str = ""
    openai_model: str = "gpt-4o-mini"
    anthropic_api_key: str = ""
    anthropic_model: str = "claude-3-5-haiku-latest"

    llm_provider: str = "gemini"

    # ==========================================================================
    # Helpers
    # ==========================================================================

    @property
    def markup_attributes_list(self) -> list[str]:
        return [a.strip() for a in self.markup_attributes.split(",") if a.strip()]

    @property
    def is_production(self) -> bool:
        return self.environment == "production"

    @property
    def use_llm(self) -> bool:
        """Whether translation goes through the LLM backend."""
        return self.translation_provider.lower() == "llm"

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
