"""
Service container.

All caches and the lock table live for the lifetime of the process.
They are built once by ``create_services`` at startup and handed to
consumers explicitly instead of living in module globals.
"""

from __future__ import annotations

import httpx
from pydantic import BaseModel

from subme.api.client import ResourceClient
from subme.config import Settings, get_settings
from subme.core.mutex import KeyedMutex
from subme.i18n.backends import CloudTranslateBackend, LLMTranslationBackend, TranslationBackend
from subme.i18n.detector import LanguageDetector
from subme.i18n.document import MarkupTranslator
from subme.i18n.translator import SmartTranslator


class ServiceProvider(BaseModel):
    """
    Container for the long-lived services.

    Initialize once at app startup; consumers receive this (or a single
    member) and never construct their own caches.
    """

    model_config = {"arbitrary_types_allowed": True}

    settings: Settings
    mutex: KeyedMutex
    backend: TranslationBackend
    detector: LanguageDetector
    translator: SmartTranslator
    markup_translator: MarkupTranslator
    api: ResourceClient

    async def aclose(self) -> None:
        await self.api.aclose()
        await self.backend.aclose()


def create_backend(settings: Settings) -> TranslationBackend:
    """Pick the translation backend the settings ask for."""
    if settings.use_llm:
        return LLMTranslationBackend(provider=settings.llm_provider)
    return CloudTranslateBackend(
        base_url=settings.translate_api_url,
        api_key=settings.translate_api_key,
        folder_id=settings.translate_folder_id,
        timeout=settings.request_timeout,
    )


def create_services(
    settings: Settings | None = None,
    backend: TranslationBackend | None = None,
    http_client: httpx.AsyncClient | None = None,
) -> ServiceProvider:
    """Build the service graph. One mutex is shared by every consumer."""
    settings = settings or get_settings()
    backend = backend or create_backend(settings)
    mutex = KeyedMutex()

    detector = LanguageDetector(
        backend,
        ttl=settings.detect_cache_ttl,
        max_size=settings.detect_cache_size,
        text_limit=settings.detect_text_limit,
    )
    translator = SmartTranslator(backend, detector, mutex)

    return ServiceProvider(
        settings=settings,
        mutex=mutex,
        backend=backend,
        detector=detector,
        translator=translator,
        markup_translator=MarkupTranslator(translator, attributes=settings.markup_attributes_list),
        api=ResourceClient(
            settings.api_base_url,
            mutex,
            cache_ttl=settings.api_cache_ttl,
            client=http_client,
            timeout=settings.request_timeout,
        ),
    )
