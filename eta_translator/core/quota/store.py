"""
Key-value quota store used for rate-limit and daily usage counters.

The store exposes the minimal contract of an eventually consistent KV
service: ``get(key)`` returning the stored string (or ``None`` when the key is
absent or expired) and ``put(key, value, ttl_seconds)`` which (re)writes the
value and its expiry.  There are no transactions and no compare-and-swap;
callers must tolerate weak consistency.

Two implementations are provided:

* :class:`RedisQuotaStore` – shared store backed by Redis, used whenever a
  Redis host is configured.
* :class:`InMemoryQuotaStore` – process-local store with expiry, used for
  development and tests when no Redis host is configured.
"""

import abc
import time
import logging
import threading

from typing import Dict, Optional, Tuple

try:
    import redis

    REDIS_IS_AVAILABLE = True
except ImportError:
    REDIS_IS_AVAILABLE = False

from eta_translator.base.constants import (
    REDIS_HOST,
    REDIS_PORT,
    REDIS_DB,
    REDIS_PASSWORD,
)


class QuotaStoreI(abc.ABC):
    """Abstract key-value store with per-key expiry."""

    @abc.abstractmethod
    def get(self, key: str) -> Optional[str]:
        """Return the value stored under *key* or ``None`` if absent."""
        raise NotImplementedError

    @abc.abstractmethod
    def put(self, key: str, value: str, ttl_seconds: int) -> None:
        """Store *value* under *key*, expiring after *ttl_seconds*."""
        raise NotImplementedError

    def get_int(self, key: str) -> int:
        """
        Read an integer counter; an absent or unparsable value counts as ``0``.
        """
        value = self.get(key)
        if value is None:
            return 0
        try:
            return int(value)
        except (TypeError, ValueError):
            return 0


class RedisQuotaStore(QuotaStoreI):
    """
    Quota store backed by a Redis server.

    Parameters
    ----------
    redis_host : str, optional
        Hostname or IP address of the Redis server.
    redis_port : int, optional
        TCP port on which Redis is listening.
    redis_password : str, optional
        Password for authenticated Redis connections.
    redis_db : int, optional
        Database index to use.
    redis_client : redis.Redis, optional
        Ready client; when given the connection parameters are ignored.

    Raises
    ------
    RuntimeError
        If the ``redis`` package cannot be imported.
    """

    def __init__(
        self,
        redis_host: str = REDIS_HOST,
        redis_port: int = REDIS_PORT,
        redis_password: Optional[str] = REDIS_PASSWORD,
        redis_db: int = REDIS_DB,
        redis_client=None,
    ):
        if redis_client is None and not REDIS_IS_AVAILABLE:
            raise RuntimeError("Redis is not available. Please install it first.")

        self.redis_client = redis_client or redis.Redis(
            host=redis_host,
            port=redis_port,
            db=redis_db,
            decode_responses=True,
            password=redis_password,
        )

    def get(self, key: str) -> Optional[str]:
        return self.redis_client.get(key)

    def put(self, key: str, value: str, ttl_seconds: int) -> None:
        self.redis_client.set(key, value, ex=int(ttl_seconds))


class InMemoryQuotaStore(QuotaStoreI):
    """
    Process-local quota store.

    Counters are not shared between workers, so limits are enforced per
    process only.  Expired keys are dropped on read and by a sweep over the
    whole store every ``sweep_every`` writes, since most keys (one per
    client and minute) are never read again once their minute has passed.
    """

    def __init__(self, clock=time.time, sweep_every: int = 256):
        self._clock = clock
        self._sweep_every = max(1, sweep_every)
        self._writes = 0
        self._data: Dict[str, Tuple[str, float]] = {}
        self._lock = threading.Lock()

    def get(self, key: str) -> Optional[str]:
        with self._lock:
            item = self._data.get(key)
            if item is None:
                return None
            value, expires_at = item
            if expires_at <= self._clock():
                del self._data[key]
                return None
            return value

    def put(self, key: str, value: str, ttl_seconds: int) -> None:
        with self._lock:
            now = self._clock()
            self._writes += 1
            if self._writes % self._sweep_every == 0:
                self._drop_expired(now)
            self._data[key] = (str(value), now + ttl_seconds)

    def __len__(self) -> int:
        return len(self._data)

    def _drop_expired(self, now: float) -> None:
        expired = [k for k, (_, expires_at) in self._data.items() if expires_at <= now]
        for key in expired:
            del self._data[key]


def prepare_quota_store(logger: Optional[logging.Logger] = None) -> QuotaStoreI:
    """
    Build the quota store for the current configuration: Redis when
    ``REDIS_HOST`` is set, an in-memory store otherwise.
    """
    if REDIS_HOST:
        if logger:
            logger.info(f"Using Redis quota store at {REDIS_HOST}:{REDIS_PORT}")
        return RedisQuotaStore()

    if logger:
        logger.warning(
            "Redis host is not configured, quota counters are kept in memory "
            "and are not shared between workers"
        )
    return InMemoryQuotaStore()
