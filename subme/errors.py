"""
Exceptions raised by the translation and caching pipeline.

Cache misses are not errors; they are resolved by falling through to
the upstream call.
"""

from __future__ import annotations

from typing import Any


class SubMeError(Exception):
    """Base class for all errors raised by this package."""
    pass


class UpstreamError(SubMeError):
    """
    A call to an external capability failed.

    Covers non-2xx responses, transport errors and malformed bodies from the
    translate, detect and domain REST calls. ``status_code`` is None when no
    response was received.
    """

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        url: str | None = None,
        detail: Any = None,
    ):
        super().__init__(message)
        self.status_code = status_code
        self.url = url
        self.detail = detail


class MarkupParseError(SubMeError):
    """Markup could not be parsed into a tree."""
    pass


class ConfigurationError(SubMeError):
    """Settings are missing or invalid for the requested backend."""
    pass
