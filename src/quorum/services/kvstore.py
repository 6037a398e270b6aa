"""Small key/value store for client-scoped persisted flags."""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from threading import Lock
from typing import Any, cast

try:  # pragma: no cover - optional dependency
    import redis
except Exception:  # pragma: no cover
    redis = cast("Any", None)

from quorum.core.settings import settings

logger = logging.getLogger(__name__)


class KeyValueStore:
    """String key/value store backed by Redis, or process memory without it.

    A Redis failure drops the store back to memory for the rest of the
    process; callers never see the connection error.
    """

    def __init__(
        self,
        redis_url: str | None = None,
        *,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._redis = None
        self._clock = clock
        url = redis_url if redis_url is not None else settings.redis_url
        if url and redis is not None:
            try:
                self._redis = redis.from_url(url, decode_responses=True)  # type: ignore[no-untyped-call]
            except Exception as err:  # pragma: no cover - redis optional
                logger.warning("Redis unavailable at %s, using memory store: %s", url, err)
                self._redis = None

    def _drop_redis(self, err: Exception) -> None:
        logger.warning("Redis error, falling back to memory store: %s", err)
        self._redis = None

    def get(self, key: str) -> str | None:
        if self._redis is not None:
            try:
                value = self._redis.get(key)
                return None if value is None else str(value)
            except Exception as err:  # pragma: no cover - redis optional
                self._drop_redis(err)
        with _CACHE_LOCK:
            entry = _MEMORY_CACHE.get(key)
            if entry is None:
                return None
            value, expiry = entry
            if expiry is not None and expiry <= self._clock():
                del _MEMORY_CACHE[key]
                return None
            return value

    def set(self, key: str, value: str, *, ttl_seconds: int | None = None) -> None:
        """Store ``value``; with ``ttl_seconds`` the key disappears after that long."""
        if self._redis is not None:
            try:
                self._redis.set(key, value, ex=ttl_seconds)
                return
            except Exception as err:  # pragma: no cover - redis optional
                self._drop_redis(err)
        now = self._clock()
        with _CACHE_LOCK:
            _purge_expired(now)
            _MEMORY_CACHE[key] = (value, now + ttl_seconds if ttl_seconds else None)

    def delete(self, *keys: str) -> None:
        if not keys:
            return
        if self._redis is not None:
            try:
                self._redis.delete(*keys)
                return
            except Exception as err:  # pragma: no cover - redis optional
                self._drop_redis(err)
        with _CACHE_LOCK:
            for key in keys:
                _MEMORY_CACHE.pop(key, None)

    def namespace(self, scope: str) -> KeyValueNamespace:
        """Return a view whose keys are prefixed with ``scope``."""
        return KeyValueNamespace(self, scope)

    @staticmethod
    def clear_memory() -> None:
        with _CACHE_LOCK:
            _MEMORY_CACHE.clear()


class KeyValueNamespace:
    """Keys belonging to one client, like a browser's local storage."""

    def __init__(self, store: KeyValueStore, scope: str) -> None:
        self._store = store
        self.scope = scope

    def _key(self, name: str) -> str:
        return f"kv:{self.scope}:{name}"

    def get(self, name: str) -> str | None:
        return self._store.get(self._key(name))

    def set(self, name: str, value: str, *, ttl_seconds: int | None = None) -> None:
        self._store.set(self._key(name), value, ttl_seconds=ttl_seconds)

    def remove(self, *names: str) -> None:
        self._store.delete(*(self._key(name) for name in names))


# key -> (value, expiry as epoch seconds or None)
_MEMORY_CACHE: dict[str, tuple[str, float | None]] = {}
_CACHE_LOCK = Lock()


def _purge_expired(now: float) -> None:
    expired = [
        key for key, (_, expiry) in _MEMORY_CACHE.items() if expiry is not None and expiry <= now
    ]
    for key in expired:
        del _MEMORY_CACHE[key]


def get_kv_store() -> KeyValueStore:
    """Return a key/value store instance."""
    return KeyValueStore()
