"""In-memory keyed TTL cache with in-flight request deduplication.

Wraps an async "fetch fresh value" function so repeated calls for the same key
are served from memory until the TTL runs out, and concurrent calls for a key
that isn't cached share a single fetch.

Note: Each uvicorn worker has its own cache instance. With --workers 2,
a value may be fetched twice (once per worker). The cache still eliminates
repeated calls within the same worker.
"""

import asyncio
import logging
import time
from dataclasses import dataclass
from typing import Awaitable, Callable, Generic, TypeVar

logger = logging.getLogger(__name__)

A = TypeVar("A")
V = TypeVar("V")


@dataclass(frozen=True)
class CacheEntry(Generic[V]):
    value: V
    expires_at: float


class KeyedCache(Generic[A, V]):
    """Callable cache around an async producer.

    `await cache(args)` returns the cached value for `generate_key(args)` while
    it is fresh, otherwise awaits `fetch_fresh_value(args)` and stores the
    result for `ttl` seconds. Exceptions from the producer are never cached
    and reach every caller sharing the failed fetch unchanged.

    `generate_key` must be pure: equal arguments must map to the same key and
    distinct arguments to distinct keys. The cache can't verify this.

    A `ttl` of zero or less disables storage; concurrent callers still share
    one in-flight fetch.
    """

    def __init__(
        self,
        generate_key: Callable[[A], str],
        fetch_fresh_value: Callable[[A], Awaitable[V]],
        ttl: float,
        clock: Callable[[], float] = time.monotonic,
        name: str | None = None,
    ):
        self._generate_key = generate_key
        self._fetch_fresh_value = fetch_fresh_value
        self._ttl = ttl
        self._clock = clock
        self.name = name or getattr(fetch_fresh_value, "__name__", "cache")
        self._store: dict[str, CacheEntry[V]] = {}
        self._in_flight: dict[str, asyncio.Task] = {}

    async def __call__(self, args: A) -> V:
        key = self._generate_key(args)

        # No await between the lookups and the registration below.
        entry = self._store.get(key)
        if entry is not None and self._clock() < entry.expires_at:
            logger.debug("%s: hit %s", self.name, key)
            return entry.value

        task = self._in_flight.get(key)
        if task is None:
            logger.debug("%s: miss %s, fetching", self.name, key)
            task = asyncio.create_task(self._refresh(key, args))
            task.add_done_callback(_retrieve_exception)
            self._in_flight[key] = task
        else:
            logger.debug("%s: joining in-flight fetch for %s", self.name, key)

        # Shielded so one caller giving up doesn't cancel the fetch for the rest.
        return await asyncio.shield(task)

    async def _refresh(self, key: str, args: A) -> V:
        try:
            value = await self._fetch_fresh_value(args)
        except Exception as e:
            logger.warning("%s: fetch failed for %s: %s", self.name, key, e)
            raise
        else:
            if self._ttl > 0:
                self._store[key] = CacheEntry(value, self._clock() + self._ttl)
            return value
        finally:
            self._in_flight.pop(key, None)

    def __len__(self) -> int:
        return len(self._store)

    def __contains__(self, key: str) -> bool:
        entry = self._store.get(key)
        return entry is not None and self._clock() < entry.expires_at


def _retrieve_exception(task: asyncio.Task) -> None:
    # Mark the failure as observed when every caller was cancelled before it settled.
    if not task.cancelled():
        task.exception()


def make_cache(
    generate_key: Callable[[A], str],
    fetch_fresh_value: Callable[[A], Awaitable[V]],
    ttl: float,
    *,
    clock: Callable[[], float] = time.monotonic,
    name: str | None = None,
) -> KeyedCache[A, V]:
    """Build a `KeyedCache` around `fetch_fresh_value`."""
    return KeyedCache(generate_key, fetch_fresh_value, ttl, clock=clock, name=name)

