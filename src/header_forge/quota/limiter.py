"""Daily admission control on top of a quota store."""

from __future__ import annotations

import logging
from datetime import UTC, datetime
from typing import Callable, Literal

from header_forge.errors import QuotaExceeded
from header_forge.quota.base import QuotaStore

logger = logging.getLogger(__name__)

QuotaPolicy = Literal["strict", "soft"]
DEFAULT_DAILY_LIMIT = 10


def date_key(moment: datetime) -> str:
    """Quota window key for ``moment``: the UTC calendar date."""
    if moment.tzinfo is not None:
        moment = moment.astimezone(UTC)
    return moment.strftime("%Y-%m-%d")


class RateLimiter:
    """Reserve-before-work admission against a shared daily counter.

    ``get_remaining`` fails open and reports the full limit when the store is
    unreachable. ``reserve`` fails closed: store errors propagate.

    Under the ``strict`` policy a reservation that pushes the counter past the limit
    is rolled back and rejected, so concurrent callers can never be approved for
    more than ``daily_limit`` in total. The ``soft`` policy only performs the
    pre-check and may overshoot by the size of a racing batch.
    """

    def __init__(
        self,
        store: QuotaStore,
        *,
        daily_limit: int = DEFAULT_DAILY_LIMIT,
        policy: QuotaPolicy = "strict",
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        if daily_limit < 1:
            raise ValueError("daily_limit must be a positive integer")
        if policy not in ("strict", "soft"):
            raise ValueError(f"Unknown quota policy: {policy}")
        self.store = store
        self.daily_limit = daily_limit
        self.policy = policy
        self._clock = clock or (lambda: datetime.now(UTC))

    def current_key(self) -> str:
        return date_key(self._clock())

    def get_remaining(self) -> int:
        key = self.current_key()
        try:
            count = self.store.read(key)
        except Exception as exc:  # noqa: BLE001
            logger.warning(
                "quota event=read_failed key=%s fallback=%d reason=%s",
                key,
                self.daily_limit,
                exc,
            )
            return self.daily_limit
        return max(0, self.daily_limit - count)

    def reserve(self, amount: int) -> None:
        if isinstance(amount, bool) or not isinstance(amount, int) or amount < 1:
            raise ValueError("amount must be a positive integer")

        key = self.current_key()
        count = self.store.read(key)
        if count + amount > self.daily_limit:
            logger.info(
                "quota event=rejected key=%s count=%d requested=%d limit=%d",
                key,
                count,
                amount,
                self.daily_limit,
            )
            raise QuotaExceeded(remaining=self.daily_limit - count, requested=amount)

        new_count = self.store.increment(key, amount)
        if self.policy == "strict" and new_count > self.daily_limit:
            self._rollback(key, amount)
            before = new_count - amount
            logger.info(
                "quota event=rejected_after_race key=%s count=%d requested=%d limit=%d",
                key,
                before,
                amount,
                self.daily_limit,
            )
            raise QuotaExceeded(remaining=self.daily_limit - before, requested=amount)

        logger.info(
            "quota event=reserved key=%s amount=%d count=%d limit=%d",
            key,
            amount,
            new_count,
            self.daily_limit,
        )

    def _rollback(self, key: str, amount: int) -> None:
        try:
            self.store.increment(key, -amount)
        except Exception as exc:  # noqa: BLE001
            logger.warning(
                "quota event=rollback_failed key=%s amount=%d reason=%s",
                key,
                amount,
                exc,
            )
