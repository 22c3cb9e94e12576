"""Postgres audit trail for quarantine and release actions."""

from __future__ import annotations

import json
from functools import partial
from typing import Any

from psycopg.types.json import Json
from psycopg_pool import ConnectionPool


class AuditLogRepository:
    """Append-only writer for the ``billing_separator_audit_log`` table.

    Expected table::

        CREATE TABLE billing_separator_audit_log (
            audit_id   BIGSERIAL PRIMARY KEY,
            account_id TEXT NOT NULL,
            action     TEXT NOT NULL,
            metadata   JSONB NOT NULL DEFAULT '{}',
            created_at TIMESTAMPTZ NOT NULL DEFAULT NOW()
        );
    """

    def __init__(self, pool: ConnectionPool) -> None:
        """Store the connection pool used for all database interactions."""
        self._pool = pool

    def write_audit_event(self, *, account_id: str, action: str, metadata: dict[str, Any]) -> None:
        """Insert one action record keyed by action tag and account id."""
        with self._pool.connection() as conn:
            with conn.cursor() as cur:
                cur.execute(
                    """
                    INSERT INTO billing_separator_audit_log (account_id, action, metadata)
                    VALUES (%s, %s, %s)
                    """,
                    (account_id, action, Json(metadata, dumps=partial(json.dumps, default=str))),
                )
                conn.commit()
