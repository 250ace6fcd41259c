"""
External translation capabilities.

Two calls are consumed by the pipeline:

- translate(target, texts) -> one result per text, same order
- detect(text, hints) -> language code of a single text

The cloud backend talks to the Translate v2 HTTP API; the LLM backend
answers the same contract with DSPy. Both raise UpstreamError on any
failure and never retry.
"""

from __future__ import annotations

import asyncio
import logging
from abc import ABC, abstractmethod
from typing import Any

import dspy
import httpx
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from subme.errors import UpstreamError
from subme.i18n.languages import get_language_name, normalize_language_code
from subme.i18n.llm import DetectLanguage, TranslateBatch, get_lm

logger = logging.getLogger(__name__)


# =============================================================================
# Wire models
# =============================================================================


class TranslationResult(BaseModel):
    """One translated text and the source language the service saw."""

    model_config = ConfigDict(populate_by_name=True)

    text: str
    detected_language_code: str = Field(default="", alias="detectedLanguageCode")


class TranslateResponse(BaseModel):
    translations: list[TranslationResult] = Field(default_factory=list)


class DetectResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    language_code: str = Field(alias="languageCode")


# =============================================================================
# Interface
# =============================================================================


class TranslationBackend(ABC):
    """The external translate/detect capability."""

    @abstractmethod
    async def translate(self, target_language: str, texts: list[str]) -> list[TranslationResult]:
        """Translate ``texts`` in one call. Result order matches input order."""
        pass

    @abstractmethod
    async def detect(self, text: str, hints: list[str] | None = None) -> str:
        """Detect the language code of one text."""
        pass

    async def aclose(self) -> None:
        """Release any resources held by the backend."""
        pass


# =============================================================================
# Cloud Translate API
# =============================================================================


class CloudTranslateBackend(TranslationBackend):
    """
    Translate v2 REST API client.

    POST /translate/v2/translate {folderId, texts, targetLanguageCode}
    POST /translate/v2/detect    {folderId, text, languageCodeHints?}
    """

    TRANSLATE_PATH = "/translate/v2/translate"
    DETECT_PATH = "/translate/v2/detect"

    def __init__(
        self,
        base_url: str,
        api_key: str = "",
        folder_id: str = "",
        client: httpx.AsyncClient | None = None,
        timeout: float = 10.0,
    ):
        self.base_url = base_url.rstrip("/")
        self.api_key = api_key
        self.folder_id = folder_id
        self._client = client or httpx.AsyncClient(timeout=timeout)
        self._owns_client = client is None

    @property
    def headers(self) -> dict[str, str]:
        headers = {"Content-Type": "application/json"}
        if self.api_key:
            headers["Authorization"] = f"Api-Key {self.api_key}"
        return headers

    async def _post(self, path: str, payload: dict[str, Any]) -> Any:
        url = f"{self.base_url}{path}"
        try:
            response = await self._client.post(url, json=payload, headers=self.headers)
        except httpx.HTTPError as e:
            logger.error(f"Request to {url} failed: {e}")
            raise UpstreamError(f"Request to {url} failed: {e}", url=url) from e

        if response.is_error:
            logger.error(f"{url} returned {response.status_code}: {response.text}")
            raise UpstreamError(
                f"HTTP error! status: {response.status_code}",
                status_code=response.status_code,
                url=url,
                detail=response.text,
            )

        try:
            return response.json()
        except ValueError as e:
            raise UpstreamError(f"Invalid JSON from {url}", status_code=response.status_code, url=url) from e

    async def translate(self, target_language: str, texts: list[str]) -> list[TranslationResult]:
        if not texts:
            return []

        payload = {
            "folderId": self.folder_id,
            "texts": texts,
            "targetLanguageCode": target_language,
        }
        data = await self._post(self.TRANSLATE_PATH, payload)

        try:
            parsed = TranslateResponse.model_validate(data)
        except ValidationError as e:
            raise UpstreamError("Malformed translate response", detail=data) from e

        if len(parsed.translations) != len(texts):
            raise UpstreamError(
                f"Translate returned {len(parsed.translations)} results for {len(texts)} texts",
                detail=data,
            )
        return parsed.translations

    async def detect(self, text: str, hints: list[str] | None = None) -> str:
        payload: dict[str, Any] = {"folderId": self.folder_id, "text": text}
        if hints:
            payload["languageCodeHints"] = hints

        data = await self._post(self.DETECT_PATH, payload)

        try:
            return DetectResponse.model_validate(data).language_code
        except ValidationError as e:
            raise UpstreamError("Malformed detect response", detail=data) from e

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()


# =============================================================================
# LLM (DSPy)
# =============================================================================


class LLMTranslationBackend(TranslationBackend):
    """
    Translate/detect through an LLM.

    DSPy predictors are blocking, so each call runs in a worker thread
    with the backend's LM set for that call only.
    """

    def __init__(self, provider: str | None = None, model: str | None = None):
        self.provider = provider
        self.model = model

        # DSPy modules (lazy initialized)
        self._translate_module: dspy.Predict | None = None
        self._detect_module: dspy.Predict | None = None

    @property
    def translate_module(self) -> dspy.Predict:
        if self._translate_module is None:
            self._translate_module = dspy.Predict(TranslateBatch)
        return self._translate_module

    @property
    def detect_module(self) -> dspy.Predict:
        if self._detect_module is None:
            self._detect_module = dspy.Predict(DetectLanguage)
        return self._detect_module

    async def _predict(self, module: dspy.Predict, **kwargs: Any) -> Any:
        lm = get_lm(self.provider, self.model)

        def call():
            with dspy.context(lm=lm):
                return module(**kwargs)

        try:
            return await asyncio.to_thread(call)
        except Exception as e:
            logger.error(f"LLM call failed: {e}")
            raise UpstreamError(f"LLM call failed: {e}") from e

    async def translate(self, target_language: str, texts: list[str]) -> list[TranslationResult]:
        if not texts:
            return []

        result = await self._predict(
            self.translate_module,
            texts=texts,
            target_language=get_language_name(target_language),
        )

        translations = list(result.translated_texts or [])
        if len(translations) != len(texts):
            raise UpstreamError(
                f"LLM returned {len(translations)} translations for {len(texts)} texts"
            )

        detected = list(result.detected_languages or [])
        if len(detected) != len(texts):
            detected = [""] * len(texts)

        return [
            TranslationResult(text=text, detected_language_code=normalize_language_code(lang) if lang else "")
            for text, lang in zip(translations, detected)
        ]

    async def detect(self, text: str, hints: list[str] | None = None) -> str:
        result = await self._predict(
            self.detect_module,
            text=text,
            hints=",".join(hints or []),
        )
        return normalize_language_code(result.language_code)
