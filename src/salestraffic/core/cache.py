"""Named result-cache regions for read-only service methods.

Each region is an in-process ``cachetools`` cache keyed by a string derived
explicitly from the call arguments. There is no invalidation on data change:
a cached result is served until the region evicts it (LRU, or TTL when
configured) or someone calls ``clear()``.
"""
import asyncio
import datetime
import functools
import logging
from typing import Any, Awaitable, Callable, Dict, Iterable, Optional

from cachetools import LRUCache, TTLCache

logger = logging.getLogger(__name__)

NO_ARGS_KEY = "SimpleKey []"

_MISSING = object()


def date_range_key(start_date: datetime.date, end_date: datetime.date) -> str:
    """Key for a date range: both ISO dates concatenated.

    ``date.isoformat()`` is always ``YYYY-MM-DD`` so the concatenation is
    unambiguous.
    """
    return start_date.isoformat() + end_date.isoformat()


def asin_list_key(asins: Iterable[str]) -> str:
    """Key for a list of ASINs, e.g. ``[B01, B02]``.

    Order matters: the same set requested in another order is another entry.
    """
    return "[" + ", ".join(str(asin) for asin in asins) + "]"


class CacheRegion:
    def __init__(self, name: str, maxsize: int = 128, ttl: Optional[float] = None):
        self.name = name
        if ttl:
            self._store = TTLCache(maxsize=maxsize, ttl=ttl)
        else:
            self._store = LRUCache(maxsize=maxsize)
        self._locks: Dict[str, asyncio.Lock] = {}

    def __len__(self) -> int:
        return len(self._store)

    def __contains__(self, key: str) -> bool:
        return key in self._store

    def get(self, key: str) -> Optional[Any]:
        return self._store.get(key)

    def put(self, key: str, value: Any) -> None:
        self._store[key] = value

    def evict(self, key: str) -> None:
        self._store.pop(key, None)

    def clear(self) -> None:
        self._store.clear()

    async def get_or_compute(self, key: str, factory: Callable[[], Awaitable[Any]]) -> Any:
        value = self._store.get(key, _MISSING)
        if value is not _MISSING:
            logger.debug("Cache hit in %s for key %r", self.name, key)
            return value

        lock = self._locks.setdefault(key, asyncio.Lock())
        try:
            async with lock:
                # Another task may have filled the slot while we waited
                value = self._store.get(key, _MISSING)
                if value is not _MISSING:
                    logger.debug("Cache hit in %s for key %r after wait", self.name, key)
                    return value
                logger.debug("Cache miss in %s for key %r", self.name, key)
                value = await factory()
                self._store[key] = value
                return value
        finally:
            if not lock.locked() and self._locks.get(key) is lock:
                self._locks.pop(key, None)


class CacheManager:
    """Creates and holds cache regions by name, all sized the same way."""

    def __init__(self, maxsize: int = 128, ttl: Optional[float] = None):
        self.maxsize = maxsize
        self.ttl = ttl
        self._regions: Dict[str, CacheRegion] = {}

    def get_region(self, name: str) -> CacheRegion:
        region = self._regions.get(name)
        if region is None:
            region = CacheRegion(name, maxsize=self.maxsize, ttl=self.ttl)
            self._regions[name] = region
        return region

    @property
    def region_names(self) -> list[str]:
        return sorted(self._regions)

    def clear(self) -> None:
        for region in self._regions.values():
            region.clear()


def cached(region: str, key: Optional[Callable[..., str]] = None):
    """Cache the result of an async method in the named region.

    ``key`` receives the method arguments (without ``self``) and returns the
    cache key; methods without arguments use ``NO_ARGS_KEY``. The instance
    must expose a ``cache_manager`` attribute.
    """

    def decorator(func):
        @functools.wraps(func)
        async def wrapper(self, *args, **kwargs):
            cache_key = key(*args, **kwargs) if key is not None else NO_ARGS_KEY
            cache_region = self.cache_manager.get_region(region)
            return await cache_region.get_or_compute(
                cache_key, lambda: func(self, *args, **kwargs)
            )

        wrapper.cache_region = region
        return wrapper

    return decorator
