"""In-process TTL cache with stale fallback for repository reads.

Backed by cachetools.TTLCache. Each repository module owns its cache
instances; nothing is shared across processes.

When the database is unreachable, cached reads fall back to the last value
seen for a key so a scheduled reminder run can still finish.
"""

import asyncio
import functools
import logging
from collections import OrderedDict
from collections.abc import Callable
from typing import Any, TypeVar

from cachetools import TTLCache  # type: ignore[import-untyped]

logger = logging.getLogger(__name__)

# Distinguishes "not cached" from a cached None
_MISSING = object()

F = TypeVar("F", bound=Callable[..., Any])


class AsyncTTLCache:
    """TTL cache plus a bounded last-known-good store.

    ``_cache`` holds fresh values until *ttl* expires. ``_stale`` keeps the
    most recent value per key (LRU, *maxsize* entries) and is only read by
    :func:`cached` after the upstream call has failed.
    """

    def __init__(self, maxsize: int = 128, ttl: float = 60.0):
        self._maxsize = maxsize
        self._cache: TTLCache = TTLCache(maxsize=maxsize, ttl=ttl)
        self._stale: OrderedDict[str, Any] = OrderedDict()
        self._locks: dict[str, asyncio.Lock] = {}

    def _get_lock(self, key: str) -> asyncio.Lock:
        lock = self._locks.get(key)
        if lock is None:
            if len(self._locks) >= self._maxsize * 2:
                for k in [k for k in self._locks if k not in self._stale]:
                    del self._locks[k]
            lock = self._locks[key] = asyncio.Lock()
        return lock

    def get(self, key: str) -> Any:
        """Return the fresh value or ``_MISSING``."""
        return self._cache.get(key, _MISSING)

    def set(self, key: str, value: Any) -> None:
        self._cache[key] = value
        self._stale[key] = value
        self._stale.move_to_end(key)
        while len(self._stale) > self._maxsize:
            self._stale.popitem(last=False)

    def invalidate(self, key: str) -> None:
        """Drop the fresh value; the stale copy survives."""
        self._cache.pop(key, None)

    def clear(self) -> None:
        self._cache.clear()

    def get_stale(self, key: str) -> Any:
        """Return the last-known-good value or ``_MISSING``."""
        value = self._stale.get(key, _MISSING)
        if value is not _MISSING:
            self._stale.move_to_end(key)
        return value


def cached(
    cache: AsyncTTLCache,
    key_func: Callable[..., str],
    *,
    retry: int = 3,
    retry_delay: float = 1.0,
):
    """Cache an async repository read, retrying and falling back to stale data.

    Parameters
    ----------
    cache : AsyncTTLCache
        Cache instance to read and populate.
    key_func : callable
        Called with the decorated function's ``(*args, **kwargs)``; returns
        the cache key.
    retry : int
        Attempts before giving up on the upstream call.
    retry_delay : float
        Base delay in seconds, multiplied by the attempt number.

    Once every attempt has failed the stale value is returned with a warning,
    or the last exception is re-raised when there is none.
    """

    def decorator(func: F) -> F:
        @functools.wraps(func)
        async def wrapper(*args: Any, **kwargs: Any) -> Any:
            cache_key = key_func(*args, **kwargs)

            result = cache.get(cache_key)
            if result is not _MISSING:
                return result

            async with cache._get_lock(cache_key):
                # Another caller may have filled it while we waited
                result = cache.get(cache_key)
                if result is not _MISSING:
                    return result

                last_exc: BaseException | None = None
                for attempt in range(1, retry + 1):
                    try:
                        result = await func(*args, **kwargs)
                        cache.set(cache_key, result)
                        return result
                    except asyncio.CancelledError:
                        raise
                    except Exception as exc:
                        last_exc = exc
                        if attempt < retry:
                            delay = retry_delay * attempt
                            logger.warning(
                                "Read attempt %d/%d failed for %s: %s, retrying in %.1fs",
                                attempt,
                                retry,
                                cache_key,
                                type(exc).__name__,
                                delay,
                            )
                            await asyncio.sleep(delay)

                stale = cache.get_stale(cache_key)
                if stale is not _MISSING:
                    logger.warning(
                        "Returning stale data for %s (%s)",
                        cache_key,
                        type(last_exc).__name__,
                    )
                    return stale

                raise last_exc  # type: ignore[misc]

        return wrapper  # type: ignore[return-value]

    return decorator
