"""
Keyed mutex for serializing async work.

Two calls with the same operation name and the same arguments never run
their bodies at the same time. This is serialization, not coalescing:
every waiter still runs its own body once it gets the lock. Callers that
want to avoid repeated upstream work check a cache inside the body.

Usage:
    mutex = KeyedMutex()

    profile = await mutex.run_exclusive("getProfile", [], fetch_profile)
    post = await mutex.run_exclusive("getPost", [post_id], lambda: fetch_post(post_id))
"""

from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, Callable, Iterable, NamedTuple, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


class MutexKey(NamedTuple):
    """Structural lock key, compared by value."""

    name: str
    args: tuple[str, ...]

    @classmethod
    def build(cls, name: str, args: Iterable[str]) -> MutexKey:
        return cls(name, tuple(args))

    def __str__(self) -> str:
        return f"{self.name}:{','.join(self.args)}"


class KeyedMutex:
    """
    Per-key async lock table.

    A key has at most one live lock. The lock is an ``asyncio.Event`` that is
    set (and removed from the table) when the body finishes, success or
    failure. Waiters loop on the table rather than waiting once, so a burst
    of waiters still enters one at a time.
    """

    def __init__(self):
        self._locks: dict[MutexKey, asyncio.Event] = {}

    async def run_exclusive(
        self,
        name: str,
        args: Iterable[str],
        body: Callable[[], Awaitable[T]],
    ) -> T:
        """
        Run ``body`` while holding the lock for ``(name, args)``.

        Exceptions from ``body`` propagate to this caller only; the lock is
        always released.
        """
        key = MutexKey.build(name, args)

        while key in self._locks:
            logger.debug(f"Waiting for lock {key}")
            await self._locks[key].wait()

        released = asyncio.Event()
        self._locks[key] = released
        try:
            return await body()
        finally:
            del self._locks[key]
            released.set()

    def is_locked(self, name: str, args: Iterable[str] = ()) -> bool:
        """Whether a body is currently running under this key."""
        return MutexKey.build(name, args) in self._locks

    def __len__(self) -> int:
        return len(self._locks)
