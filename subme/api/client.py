"""
Domain REST client with a short-lived response cache.

Every GET is cached by full URL for a few seconds. Any other method
clears the whole cache before it is sent and again when it completes,
and a GET whose request overlapped a write is returned but not cached,
so a read never returns data from before a mutation made through this
client.

Profile, subscription and post fetches also go through the keyed mutex,
so concurrent callers wait for the first fetch and then hit the cache
it filled instead of sending the same request again.

Usage:
    async with ResourceClient("https://sub-me.ru", mutex) as api:
        await api.post("/api/auth/signIn", {"login": "me", "password_hash": "..."})
        profile = await api.get_profile()
"""

from __future__ import annotations

import copy
import logging
from typing import Any

import httpx
from pydantic import BaseModel, ValidationError

from subme.core.cache import BoundedTTLCache
from subme.core.mutex import KeyedMutex
from subme.errors import UpstreamError

logger = logging.getLogger(__name__)

_MISS = object()


class UserProfile(BaseModel):
    """Session owner's profile as returned by /api/user/profile."""

    login: str
    name: str = ""
    profile_photo: str = ""
    registration: str = ""
    is_creator: bool = False
    creator_id: str = ""


class ResourceClient:
    """HTTP client for the domain API. Reads are cached, writes invalidate."""

    PROFILE_PATH = "/api/user/profile"
    SUBSCRIPTIONS_PATH = "/api/user/subscriptions"
    POST_PATH = "/api/post/get/{post_id}"

    CSRF_RESPONSE_HEADER = "X-CSRF-Token"
    CSRF_REQUEST_HEADER = "X-Csrf-Token"

    def __init__(
        self,
        base_url: str,
        mutex: KeyedMutex,
        cache_ttl: float = 5.0,
        cache: BoundedTTLCache[str, Any] | None = None,
        client: httpx.AsyncClient | None = None,
        timeout: float = 10.0,
    ):
        self.base_url = base_url.rstrip("/")
        self.mutex = mutex
        if cache is None:
            cache = BoundedTTLCache(max_size=None, default_ttl=cache_ttl)
        self.cache: BoundedTTLCache[str, Any] = cache
        self.csrf_token: str | None = None
        # Bumped around every write; a GET only caches if no write overlapped it.
        self._generation = 0

        # The client's cookie jar carries the session cookie between calls.
        self._client = client or httpx.AsyncClient(timeout=timeout)
        self._owns_client = client is None

    async def __aenter__(self) -> ResourceClient:
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    # =========================================================================
    # Requests
    # =========================================================================

    async def request(
        self,
        method: str,
        endpoint: str,
        data: Any = None,
        files: dict[str, Any] | None = None,
    ) -> Any:
        """
        Send a request and return the parsed JSON body.

        Empty or non-JSON success bodies parse to ``{}``. Non-2xx responses
        and transport failures raise UpstreamError.
        """
        method = method.upper()
        url = f"{self.base_url}{endpoint}"

        if method == "GET":
            cached = self.cache.get(url, _MISS)
            if cached is not _MISS:
                logger.debug(f"[API Cache] Returning cached data for {url}")
                return copy.deepcopy(cached)
        else:
            self.cache.clear()
            self._generation += 1
        generation = self._generation

        headers = {"Accept": "application/json"}
        if self.csrf_token:
            headers[self.CSRF_REQUEST_HEADER] = self.csrf_token

        kwargs: dict[str, Any] = {}
        if files is not None:
            kwargs["files"] = files
            if data is not None:
                kwargs["data"] = data
        elif data is not None:
            kwargs["json"] = data

        try:
            response = await self._client.request(method, url, headers=headers, **kwargs)
        except httpx.HTTPError as e:
            logger.error(f"{method} {url} failed: {e}")
            raise UpstreamError(f"{method} {url} failed: {e}", url=url) from e
        finally:
            if method != "GET":
                self._generation += 1
                self.cache.clear()

        csrf_token = response.headers.get(self.CSRF_RESPONSE_HEADER)
        if csrf_token:
            self.csrf_token = csrf_token

        body = self._parse_body(response)

        if response.is_error:
            logger.error(f"{method} {url} returned {response.status_code}")
            raise UpstreamError(
                f"API error: {response.status_code} {response.reason_phrase} - {body}",
                status_code=response.status_code,
                url=url,
                detail=body,
            )

        if method == "GET" and generation == self._generation:
            self.cache.set(url, copy.deepcopy(body))
            logger.debug(f"[API Cache] Saved data to cache for {url}")

        return body

    @staticmethod
    def _parse_body(response: httpx.Response) -> Any:
        try:
            return response.json()
        except ValueError:
            return {}

    async def get(self, endpoint: str) -> Any:
        return await self.request("GET", endpoint)

    async def post(self, endpoint: str, data: Any = None, files: dict[str, Any] | None = None) -> Any:
        return await self.request("POST", endpoint, data, files)

    async def put(self, endpoint: str, data: Any = None, files: dict[str, Any] | None = None) -> Any:
        return await self.request("PUT", endpoint, data, files)

    async def delete(self, endpoint: str) -> Any:
        return await self.request("DELETE", endpoint)

    def clear_cache(self) -> None:
        self.cache.clear()

    # =========================================================================
    # Single-flight reads
    # =========================================================================

    async def get_profile(self) -> UserProfile:
        """Fetch the current session's profile."""
        data = await self.mutex.run_exclusive(
            "getProfile", [], lambda: self.get(self.PROFILE_PATH)
        )
        try:
            return UserProfile.model_validate(data)
        except ValidationError as e:
            raise UpstreamError("Malformed profile response", url=self.PROFILE_PATH, detail=data) from e

    async def get_subscriptions(self) -> list[dict[str, Any]]:
        return await self.mutex.run_exclusive(
            "getSubscriptions", [], lambda: self.get(self.SUBSCRIPTIONS_PATH)
        )

    async def get_post(self, post_id: str) -> dict[str, Any]:
        """Fetch a post with its comments."""
        return await self.mutex.run_exclusive(
            "getPost", [post_id], lambda: self.get(self.POST_PATH.format(post_id=post_id))
        )
