"""
Best-effort daily usage counters.

For every admitted request two day-keyed counters are incremented:
``count:<YYYY-MM-DD>`` (requests) and ``chars:<YYYY-MM-DD>`` (characters of
input text).  Recording never fails the request: store errors are logged and
swallowed.  The request pipeline only writes; :meth:`UsageRecorder.read_day`
is the read helper for external readers such as a dashboard or CSV export.
"""

import datetime
import logging

from typing import Any, Dict, Optional

from eta_translator.base.constants import USAGE_COUNTER_TTL
from eta_translator.core.quota.store import QuotaStoreI


class UsageRecorder:
    def __init__(
        self,
        store: QuotaStoreI,
        ttl_seconds: int = USAGE_COUNTER_TTL,
        logger: Optional[logging.Logger] = None,
    ):
        self.store = store
        self.ttl_seconds = ttl_seconds
        self.logger = logger or logging.getLogger(__name__)

    @staticmethod
    def day_of(now: datetime.datetime) -> str:
        if now.tzinfo is not None:
            now = now.astimezone(datetime.timezone.utc)
        return now.strftime("%Y-%m-%d")

    @staticmethod
    def requests_key(day: str) -> str:
        return f"count:{day}"

    @staticmethod
    def chars_key(day: str) -> str:
        return f"chars:{day}"

    def record(self, chars: int, now: Optional[datetime.datetime] = None) -> None:
        """Increment today's request and character counters, ignoring failures."""
        day = self.day_of(now or datetime.datetime.now(datetime.timezone.utc))
        try:
            self._increment(self.requests_key(day), 1)
            self._increment(self.chars_key(day), chars)
        except Exception as e:
            self.logger.warning(f"Usage recording failed for {day}: {e}")

    def read_day(self, day: str) -> Dict[str, Any]:
        return {
            "date": day,
            "requests": self.store.get_int(self.requests_key(day)),
            "characters": self.store.get_int(self.chars_key(day)),
        }

    def _increment(self, key: str, by: int) -> None:
        value = self.store.get_int(key) + by
        self.store.put(key, str(value), self.ttl_seconds)
