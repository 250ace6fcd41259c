"""
Tests for the external translate/detect backends.
"""

import json
from types import SimpleNamespace

import httpx
import pytest

from subme.errors import ConfigurationError, SubMeError, UpstreamError
from subme.i18n.backends import CloudTranslateBackend, LLMTranslationBackend


def make_cloud_backend(handler):
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return CloudTranslateBackend(
        "https://translate.example.com/",
        api_key="secret",
        folder_id="folder-1",
        client=client,
    )


# =============================================================================
# CloudTranslateBackend Tests
# =============================================================================


class TestCloudTranslateBackend:
    @pytest.mark.asyncio
    async def test_translate_request_and_response(self):
        seen = []

        def handler(request):
            seen.append(request)
            return httpx.Response(
                200,
                json={
                    "translations": [
                        {"text": "Привет", "detectedLanguageCode": "en"},
                        {"text": "Мир", "detectedLanguageCode": "en"},
                    ]
                },
            )

        backend = make_cloud_backend(handler)
        results = await backend.translate("ru", ["Hello", "World"])

        assert [r.text for r in results] == ["Привет", "Мир"]
        assert results[0].detected_language_code == "en"

        request = seen[0]
        assert str(request.url) == "https://translate.example.com/translate/v2/translate"
        assert request.headers["Authorization"] == "Api-Key secret"
        assert json.loads(request.content) == {
            "folderId": "folder-1",
            "texts": ["Hello", "World"],
            "targetLanguageCode": "ru",
        }

    @pytest.mark.asyncio
    async def test_empty_batch_sends_nothing(self):
        def handler(request):
            raise AssertionError("no request expected")

        backend = make_cloud_backend(handler)
        assert await backend.translate("ru", []) == []

    @pytest.mark.asyncio
    async def test_non_2xx_raises(self):
        backend = make_cloud_backend(lambda request: httpx.Response(429, text="quota"))

        with pytest.raises(UpstreamError) as exc_info:
            await backend.translate("ru", ["Hello"])

        assert exc_info.value.status_code == 429
        assert exc_info.value.detail == "quota"

    @pytest.mark.asyncio
    async def test_result_count_mismatch_raises(self):
        backend = make_cloud_backend(
            lambda request: httpx.Response(200, json={"translations": [{"text": "x"}]})
        )

        with pytest.raises(UpstreamError):
            await backend.translate("ru", ["a", "b"])

    @pytest.mark.asyncio
    async def test_transport_error_raises(self):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        backend = make_cloud_backend(handler)

        with pytest.raises(UpstreamError) as exc_info:
            await backend.detect("Hello")

        assert exc_info.value.status_code is None

    @pytest.mark.asyncio
    async def test_detect_sends_hints_only_when_given(self):
        bodies = []

        def handler(request):
            bodies.append(json.loads(request.content))
            return httpx.Response(200, json={"languageCode": "fr"})

        backend = make_cloud_backend(handler)

        assert await backend.detect("Bonjour") == "fr"
        assert await backend.detect("Bonjour", ["fr", "en"]) == "fr"

        assert "languageCodeHints" not in bodies[0]
        assert bodies[1]["languageCodeHints"] == ["fr", "en"]

    @pytest.mark.asyncio
    async def test_malformed_detect_response(self):
        backend = make_cloud_backend(lambda request: httpx.Response(200, json={"foo": 1}))

        with pytest.raises(UpstreamError):
            await backend.detect("Hello")


# =============================================================================
# LLMTranslationBackend Tests
# =============================================================================


class TestLLMTranslationBackend:
    @pytest.mark.asyncio
    async def test_translate(self, monkeypatch):
        backend = LLMTranslationBackend(provider="openai")
        calls = []

        async def fake_predict(module, **kwargs):
            calls.append(kwargs)
            return SimpleNamespace(
                translated_texts=["Привет", "Мир"],
                detected_languages=["EN", "en"],
            )

        monkeypatch.setattr(backend, "_predict", fake_predict)
        results = await backend.translate("ru", ["Hello", "World"])

        assert [r.text for r in results] == ["Привет", "Мир"]
        assert [r.detected_language_code for r in results] == ["en", "en"]
        assert calls[0]["target_language"] == "Russian"

    @pytest.mark.asyncio
    async def test_wrong_count_raises(self, monkeypatch):
        backend = LLMTranslationBackend(provider="openai")

        async def fake_predict(module, **kwargs):
            return SimpleNamespace(translated_texts=["only one"], detected_languages=[])

        monkeypatch.setattr(backend, "_predict", fake_predict)

        with pytest.raises(UpstreamError):
            await backend.translate("ru", ["a", "b"])

    @pytest.mark.asyncio
    async def test_detect_normalizes(self, monkeypatch):
        backend = LLMTranslationBackend(provider="openai")

        async def fake_predict(module, **kwargs):
            assert kwargs["hints"] == "fr,en"
            return SimpleNamespace(language_code="French")

        monkeypatch.setattr(backend, "_predict", fake_predict)

        assert await backend.detect("Bonjour", ["fr", "en"]) == "fr"

    @pytest.mark.asyncio
    async def test_unknown_provider_is_a_configuration_error(self):
        backend = LLMTranslationBackend(provider="nonexistent")

        with pytest.raises(ConfigurationError) as exc_info:
            await backend.translate("ru", ["Hello"])

        assert isinstance(exc_info.value, SubMeError)
