"""
Single-Flight Cancellable Cache.

Memoizes an asynchronous lookup by key for the duration of one run.
Concurrent requests for the same key share a single underlying fetch, and
every outstanding fetch can be cancelled in one call.

This is a whole-run memoization layer, not a long-lived cache: there is no
eviction beyond ``clear()``.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import Awaitable, Callable, Dict, Generic, Hashable, TypeVar

K = TypeVar("K", bound=Hashable)
V = TypeVar("V")

# fetch(key, cancelled) -> result; ``cancelled`` is set when the entry is released
FetchFn = Callable[[K, asyncio.Event], Awaitable[V]]


@dataclass
class CacheEntry(Generic[V]):
    """
    A pending or completed lookup owned by the cache.

    Attributes:
        task: The shared future for the lookup result.
        cancelled: Cancellation signal handed to the fetch function.
    """

    task: "asyncio.Future[V]"
    cancelled: asyncio.Event


class SingleFlightCache(Generic[K, V]):
    """
    Key-indexed memoization of an async fetch with bulk cancellation.

    Example:
        ```python
        async def fetch(path, cancelled):
            return await asyncio.to_thread(os.listdir, path)

        cache = SingleFlightCache(fetch)
        a, b = await asyncio.gather(cache.get("/src"), cache.get("/src"))
        # fetch ran once
        cache.clear()
        ```
    """

    def __init__(self, fetch: FetchFn):
        self._fetch = fetch
        self._entries: Dict[K, CacheEntry[V]] = {}

    def get(self, key: K) -> "asyncio.Future[V]":
        """
        Return the in-flight or completed result for ``key``.

        Must be called with a running event loop. The first call for a key
        schedules the fetch; later calls return the same future.
        """
        entry = self._entries.get(key)
        if entry is not None:
            return entry.task

        cancelled = asyncio.Event()
        task = asyncio.ensure_future(self._fetch(key, cancelled))
        self._entries[key] = CacheEntry(task=task, cancelled=cancelled)
        return task

    def clear(self) -> None:
        """Signal cancellation on every entry and drop them all without waiting."""
        for entry in self._entries.values():
            entry.cancelled.set()
            entry.task.cancel()
        self._entries.clear()

    def __contains__(self, key: object) -> bool:
        return key in self._entries

    def __len__(self) -> int:
        return len(self._entries)
