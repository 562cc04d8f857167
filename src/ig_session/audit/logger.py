"""Async audit logger backed by SQLite."""

from __future__ import annotations

import json
from datetime import UTC, datetime
from pathlib import Path
from typing import Any

import aiosqlite

from ig_session.audit.schema import SCHEMA_STATEMENTS


class SessionAuditLogger:
    def __init__(self, db_path: Path) -> None:
        self._db_path = db_path
        self._conn: aiosqlite.Connection | None = None

    @property
    def db_path(self) -> Path:
        return self._db_path

    async def start(self) -> None:
        self._db_path.parent.mkdir(parents=True, exist_ok=True)
        self._conn = await aiosqlite.connect(self._db_path)
        self._conn.row_factory = aiosqlite.Row
        for statement in SCHEMA_STATEMENTS:
            await self._conn.execute(statement)
        await self._conn.commit()

    async def close(self) -> None:
        if self._conn:
            await self._conn.close()
            self._conn = None

    async def _execute(self, query: str, params: tuple[Any, ...]) -> None:
        if not self._conn:
            raise RuntimeError("SessionAuditLogger has not been started")
        await self._conn.execute(query, params)
        await self._conn.commit()

    async def log_session_event(self, identifier: str, event: str, details: dict[str, Any]) -> None:
        await self._execute(
            "INSERT INTO session_events (timestamp, identifier, event, details) VALUES (?, ?, ?, ?)",
            (datetime.now(UTC).isoformat(), identifier, event, json.dumps(details, sort_keys=True)),
        )

    async def log_request(
        self,
        identifier: str,
        *,
        operation: str,
        method: str,
        path: str,
        status_code: int | None,
        error_code: str | None = None,
    ) -> None:
        await self._execute(
            """
            INSERT INTO requests (
                timestamp, identifier, operation, method, path, status_code, outcome, error_code
            ) VALUES (?, ?, ?, ?, ?, ?, ?, ?)
            """,
            (
                datetime.now(UTC).isoformat(),
                identifier,
                operation,
                method,
                path,
                status_code,
                "error" if error_code else "ok",
                error_code,
            ),
        )

    async def fetch_all(self, query: str, params: tuple[Any, ...] = ()) -> list[dict[str, Any]]:
        if not self._conn:
            raise RuntimeError("SessionAuditLogger has not been started")
        async with self._conn.execute(query, params) as cursor:
            rows = await cursor.fetchall()
        return [dict(row) for row in rows]
