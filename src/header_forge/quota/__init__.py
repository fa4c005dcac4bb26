"""Quota stores and daily admission control."""

from header_forge.quota.base import QUOTA_TTL_S, QuotaStore
from header_forge.quota.limiter import RateLimiter, date_key
from header_forge.quota.memory import InMemoryQuotaStore
from header_forge.quota.postgres import PostgresQuotaStore

__all__ = [
    "QUOTA_TTL_S",
    "InMemoryQuotaStore",
    "PostgresQuotaStore",
    "QuotaStore",
    "RateLimiter",
    "date_key",
]
