"""In-memory content cache keyed by logical content path.

The cache stores the pending fetch itself, not only its result, so concurrent
first requests for one key await a single in-flight fetch. Entries are never
evicted: the route table is finite and content is pinned to one revision.

Failure policy:
- ``cache_failures=True``: a failed fetch is memoised; later lookups observe
  the same failure without re-fetching.
- ``cache_failures=False``: once a fetch fails, the entry is dropped so the
  next lookup starts a new fetch. Waiters already attached to the failed
  fetch still share its outcome.
"""

from __future__ import annotations

import asyncio
import functools
import logging
from collections.abc import Awaitable, Callable, Iterable

logger = logging.getLogger("mdgate.cache")

FetchFn = Callable[[], Awaitable[str]]


class ContentCache:
    """Cache-aside store of Markdown text.

    Attributes:
        cache_failures: Whether failed fetches stay memoised.
    """

    def __init__(self, cache_failures: bool = True):
        self.cache_failures = cache_failures
        self._entries: dict[str, asyncio.Future[str]] = {}

    def __contains__(self, key: object) -> bool:
        return key in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def keys(self) -> list[str]:
        return list(self._entries)

    def _entry(self, key: str, fetch_fn: FetchFn) -> asyncio.Future[str]:
        future = self._entries.get(key)
        if future is None:
            logger.debug("Cache miss for %s", key)
            future = asyncio.ensure_future(fetch_fn())
            self._entries[key] = future
            future.add_done_callback(functools.partial(self._on_done, key))
        return future

    async def get_or_fetch(self, key: str, fetch_fn: FetchFn) -> str:
        """Return cached text for ``key``, starting ``fetch_fn`` on first use.

        Args:
            key: Logical content path.
            fetch_fn: Zero-argument callable returning an awaitable of text.
                Called at most once per stored entry.

        Returns:
            The fetched text.

        Raises:
            Whatever the shared fetch raised, typically ContentUnavailable.
        """
        future = self._entry(key, fetch_fn)
        # A cancelled waiter must not cancel the fetch other waiters share.
        return await asyncio.shield(future)

    def warm(
        self, keys: Iterable[str], fetch_for: Callable[[str], FetchFn]
    ) -> list[asyncio.Future[str]]:
        """Start fetches for ``keys`` without waiting for them.

        Args:
            keys: Logical content paths to prefetch.
            fetch_for: Returns the fetch callable for a key.

        Returns:
            The in-flight (or completed) entries, in key order.
        """
        return [self._entry(key, fetch_for(key)) for key in keys]

    def _on_done(self, key: str, future: asyncio.Future[str]) -> None:
        if self._entries.get(key) is not future:
            return
        # Cancellation is not a fetch outcome; never memoise it.
        if future.cancelled():
            del self._entries[key]
            return
        error = future.exception()
        if error is None:
            return
        logger.warning("Fetch for %s failed: %s", key, error)
        if not self.cache_failures:
            del self._entries[key]
