"""In-memory quota store for tests and single-process development."""

from __future__ import annotations

import threading
from datetime import UTC, datetime, timedelta
from typing import Callable

from header_forge.quota.base import QUOTA_TTL_S


class InMemoryQuotaStore:
    """Lock-guarded counters with per-key expiry."""

    def __init__(
        self,
        *,
        ttl_s: int = QUOTA_TTL_S,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self.ttl = timedelta(seconds=ttl_s)
        self._clock = clock or (lambda: datetime.now(UTC))
        self._lock = threading.Lock()
        self._counters: dict[str, tuple[int, datetime]] = {}

    def increment(self, key: str, by_amount: int) -> int:
        with self._lock:
            now = self._clock()
            count = self._live_count(key, now)
            count += by_amount
            self._counters[key] = (count, now + self.ttl)
            return count

    def read(self, key: str) -> int:
        with self._lock:
            return self._live_count(key, self._clock())

    def _live_count(self, key: str, now: datetime) -> int:
        entry = self._counters.get(key)
        if entry is None:
            return 0
        count, expires_at = entry
        if expires_at <= now:
            del self._counters[key]
            return 0
        return count
