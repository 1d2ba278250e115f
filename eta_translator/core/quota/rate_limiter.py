"""
Per-client, per-minute request limiter backed by the quota store.

Each client (identified by its address) gets one counter per UTC minute,
stored under ``ratelimit:<client>:<YYYY-MM-DDTHH:MM>``.  A request is
rejected when the counter already reached the threshold; rejection never
touches the counter.  Admission writes ``counter + 1`` and refreshes the
expiry to a little more than one bucket width, so stale buckets disappear
on their own.

The read and the write are two separate store calls.  Concurrent requests
of the same client can both read the same value and be admitted, so the
threshold may be exceeded by a few requests under contention.  This is an
accepted approximation; no distributed lock is taken.
"""

import datetime
import logging

from typing import Optional

from eta_translator.base.constants import (
    RATE_LIMIT_PER_MINUTE,
    RATE_LIMIT_GRACE_SECONDS,
)
from eta_translator.core.errors import RateLimited
from eta_translator.core.quota.store import QuotaStoreI

BUCKET_WIDTH_SECONDS = 60


class RateLimiter:
    def __init__(
        self,
        store: QuotaStoreI,
        threshold: int = RATE_LIMIT_PER_MINUTE,
        grace_seconds: int = RATE_LIMIT_GRACE_SECONDS,
        logger: Optional[logging.Logger] = None,
    ):
        self.store = store
        self.threshold = threshold
        self.ttl_seconds = BUCKET_WIDTH_SECONDS + grace_seconds
        self.logger = logger or logging.getLogger(__name__)

    @staticmethod
    def bucket_key(client_id: str, now: datetime.datetime) -> str:
        """Counter key of *client_id* for the minute containing *now* (UTC)."""
        return f"ratelimit:{client_id}:{_utc(now).strftime('%Y-%m-%dT%H:%M')}"

    def check_and_record(
        self, client_id: str, now: Optional[datetime.datetime] = None
    ) -> int:
        """
        Admit or reject one request of *client_id*.

        Returns
        -------
        int
            The counter value after admission.

        Raises
        ------
        RateLimited
            When the bucket already holds ``threshold`` requests.  The stored
            counter is left unchanged.
        """
        now = now or datetime.datetime.now(datetime.timezone.utc)
        key = self.bucket_key(client_id, now)

        count = self.store.get_int(key)
        if count >= self.threshold:
            self.logger.info(f"Rate limit reached for {client_id} ({count})")
            raise RateLimited("Too many requests, slow down")

        self.store.put(key, str(count + 1), self.ttl_seconds)
        return count + 1


def _utc(now: datetime.datetime) -> datetime.datetime:
    if now.tzinfo is None:
        return now
    return now.astimezone(datetime.timezone.utc)
