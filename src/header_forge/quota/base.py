"""Quota store interface: a durable, expiring, atomic day counter."""

from __future__ import annotations

from typing import Protocol

QUOTA_TTL_S = 48 * 60 * 60


class QuotaStore(Protocol):
    def increment(self, key: str, by_amount: int) -> int: ...

    def read(self, key: str) -> int: ...
