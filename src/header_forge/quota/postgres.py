"""PostgreSQL-backed quota store with automatic table migration."""

from __future__ import annotations

import logging
import threading
from datetime import UTC, datetime, timedelta
from typing import Any, Callable

from header_forge.errors import StoreUnavailable
from header_forge.quota.base import QUOTA_TTL_S

logger = logging.getLogger(__name__)

_UPSERT_SQL = """
    INSERT INTO quota_windows (window_key, count, expires_at, updated_at)
    VALUES (%(key)s, %(delta)s, %(expires_at)s, %(now)s)
    ON CONFLICT (window_key) DO UPDATE
    SET count = CASE
            WHEN quota_windows.expires_at <= %(now)s THEN EXCLUDED.count
            ELSE quota_windows.count + EXCLUDED.count
        END,
        expires_at = EXCLUDED.expires_at,
        updated_at = EXCLUDED.updated_at
    RETURNING count
"""

_READ_SQL = """
    SELECT count
    FROM quota_windows
    WHERE window_key = %(key)s
      AND expires_at > %(now)s
"""


class PostgresQuotaStore:
    """Atomic day counters in PostgreSQL.

    The upsert is a single statement, so concurrent increments from any number of
    processes serialize on the row lock and never lose updates. The connection is
    opened on first use and reused until ``close()``.
    """

    def __init__(
        self,
        database_url: str,
        *,
        ttl_s: int = QUOTA_TTL_S,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        if not database_url:
            raise ValueError("HEADER_FORGE_DATABASE_URL is required")
        self.database_url = database_url
        self.ttl = timedelta(seconds=ttl_s)
        self._clock = clock or (lambda: datetime.now(UTC))
        self._lock = threading.Lock()
        self._conn: Any = None
        self._migration_pending = False
        self._psycopg, self._dict_row = self._load_psycopg()

    def migrate(self) -> None:
        """Create the table and purge expired rows.

        If this fails, the migration is retried before the next increment or read.
        """
        with self._lock:
            self._migrate_locked()

    def _migrate_locked(self) -> None:
        self._migration_pending = True
        self._execute("""
            CREATE TABLE IF NOT EXISTS quota_windows (
                window_key TEXT PRIMARY KEY,
                count INTEGER NOT NULL DEFAULT 0,
                expires_at TIMESTAMPTZ NOT NULL,
                updated_at TIMESTAMPTZ NOT NULL
            )
            """)
        self._execute("""
            CREATE INDEX IF NOT EXISTS idx_quota_windows_expires_at
            ON quota_windows(expires_at)
            """)
        self._execute(
            "DELETE FROM quota_windows WHERE expires_at <= %(now)s",
            {"now": self._clock()},
        )
        self._migration_pending = False
        logger.info("quota_store event=migrated backend=postgres")

    def increment(self, key: str, by_amount: int) -> int:
        now = self._clock()
        params = {"key": key, "delta": by_amount, "expires_at": now + self.ttl, "now": now}
        with self._lock:
            if self._migration_pending:
                self._migrate_locked()
            row = self._execute(_UPSERT_SQL, params).fetchone()
        if row is None or row.get("count") is None:
            raise StoreUnavailable(f"Quota upsert returned no row for key {key}")
        return int(row["count"])

    def read(self, key: str) -> int:
        with self._lock:
            if self._migration_pending:
                self._migrate_locked()
            row = self._execute(_READ_SQL, {"key": key, "now": self._clock()}).fetchone()
        if row is None:
            return 0
        return int(row["count"])

    def close(self) -> None:
        with self._lock:
            if self._conn is not None:
                self._conn.close()
                self._conn = None

    def _execute(self, sql: str, params: dict[str, Any] | None = None) -> Any:
        try:
            return self._connection().execute(sql, params)
        except self._psycopg.Error as exc:
            # Drop the broken connection; the next call reconnects.
            self._discard_connection()
            raise StoreUnavailable(f"Quota store error: {exc}") from exc

    def _connection(self) -> Any:
        if self._conn is None or self._conn.closed:
            self._conn = self._psycopg.connect(
                self.database_url,
                autocommit=True,
                row_factory=self._dict_row,
            )
            logger.info("quota_store event=connected backend=postgres")
        return self._conn

    def _discard_connection(self) -> None:
        conn, self._conn = self._conn, None
        if conn is None:
            return
        try:
            conn.close()
        except self._psycopg.Error as exc:
            logger.warning("quota_store event=close_failed reason=%s", exc)

    @staticmethod
    def _load_psycopg() -> tuple[Any, Any]:
        try:
            import psycopg
            from psycopg.rows import dict_row
        except ImportError as exc:  # pragma: no cover
            raise RuntimeError(
                "PostgreSQL quota store requires psycopg. "
                'Install with: python -m pip install "psycopg[binary]>=3.2,<4.0"'
            ) from exc
        return psycopg, dict_row
