"""SQLite-backed local cache for offline documents.

Each operation opens its own short-lived ``aiosqlite`` connection and commits
before returning, so a completed write survives a crash. Failures surface as
``LocalStoreError``; there is no lower tier to fall back to.
"""

import asyncio
import json
import logging
import os
import sqlite3
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator

import aiosqlite

from resomate.sync.records import CacheRecord, EntityKind

logger = logging.getLogger(__name__)

_SCHEMA = (
    """
    CREATE TABLE IF NOT EXISTS records (
        kind TEXT NOT NULL,
        id TEXT NOT NULL,
        payload TEXT NOT NULL,
        last_modified REAL NOT NULL,
        synced INTEGER NOT NULL DEFAULT 0,
        remote_id TEXT,
        PRIMARY KEY (kind, id)
    )
    """,
    "CREATE INDEX IF NOT EXISTS idx_records_kind_synced ON records (kind, synced)",
    "CREATE INDEX IF NOT EXISTS idx_records_kind_modified ON records (kind, last_modified)",
)


class LocalStoreError(RuntimeError):
    """The local store could not be read or written."""


class LocalStore:
    def __init__(self, db_path: str) -> None:
        self.db_path = db_path
        self._schema_ready = False
        self._schema_lock = asyncio.Lock()

    async def put(self, kind: EntityKind, record: CacheRecord) -> None:
        async with self._connect() as conn:
            await conn.execute(
                """
                INSERT INTO records (kind, id, payload, last_modified, synced, remote_id)
                VALUES (?, ?, ?, ?, ?, ?)
                ON CONFLICT (kind, id) DO UPDATE SET
                    payload = excluded.payload,
                    last_modified = excluded.last_modified,
                    synced = excluded.synced,
                    remote_id = COALESCE(excluded.remote_id, records.remote_id)
                """,
                (
                    kind.value,
                    record.id,
                    json.dumps(record.payload, ensure_ascii=False),
                    record.last_modified,
                    int(record.synced),
                    record.remote_id,
                ),
            )
            await conn.commit()

    async def get(self, kind: EntityKind, record_id: str) -> CacheRecord | None:
        async with self._connect() as conn:
            async with conn.execute(
                "SELECT * FROM records WHERE kind = ? AND id = ?",
                (kind.value, record_id),
            ) as cursor:
                row = await cursor.fetchone()
        return self._to_record(row) if row is not None else None

    async def list_records(self, kind: EntityKind) -> list[CacheRecord]:
        """Records of ``kind``, most recently modified first."""
        async with self._connect() as conn:
            async with conn.execute(
                "SELECT * FROM records WHERE kind = ? ORDER BY last_modified DESC",
                (kind.value,),
            ) as cursor:
                rows = await cursor.fetchall()
        return [self._to_record(row) for row in rows]

    async def list_unsynced(self, kind: EntityKind) -> list[CacheRecord]:
        async with self._connect() as conn:
            async with conn.execute(
                "SELECT * FROM records WHERE kind = ? AND synced = 0 ORDER BY last_modified",
                (kind.value,),
            ) as cursor:
                rows = await cursor.fetchall()
        return [self._to_record(row) for row in rows]

    async def mark_synced(
        self,
        kind: EntityKind,
        record_id: str,
        last_modified: float | None = None,
        remote_id: str | None = None,
    ) -> bool:
        """Flag a record as synced.

        With ``last_modified`` set, only the version that was pushed is
        flagged; a newer local write stays unsynced. Returns whether a row
        was updated.
        """
        query = "UPDATE records SET synced = 1, remote_id = COALESCE(?, remote_id) WHERE kind = ? AND id = ?"
        params: tuple[Any, ...] = (remote_id, kind.value, record_id)
        if last_modified is not None:
            query += " AND last_modified = ?"
            params += (last_modified,)
        async with self._connect() as conn:
            cursor = await conn.execute(query, params)
            await conn.commit()
            return cursor.rowcount > 0

    async def delete(self, kind: EntityKind, record_id: str) -> bool:
        async with self._connect() as conn:
            cursor = await conn.execute(
                "DELETE FROM records WHERE kind = ? AND id = ?",
                (kind.value, record_id),
            )
            await conn.commit()
            return cursor.rowcount > 0

    async def clear_all(self) -> None:
        async with self._connect() as conn:
            await conn.execute("DELETE FROM records")
            await conn.commit()
        logger.info("store.cleared path=%s", self.db_path)

    @asynccontextmanager
    async def _connect(self) -> AsyncIterator[aiosqlite.Connection]:
        await self._ensure_schema()
        try:
            async with aiosqlite.connect(self.db_path, timeout=10.0) as conn:
                conn.row_factory = aiosqlite.Row
                yield conn
        except sqlite3.Error as exc:  # aiosqlite.Error is sqlite3.Error
            logger.error("store.error path=%s type=%s detail=%s", self.db_path, exc.__class__.__name__, exc)
            raise LocalStoreError(f"local store failure at {self.db_path}: {exc}") from exc

    async def _ensure_schema(self) -> None:
        if self._schema_ready:
            return
        async with self._schema_lock:
            if self._schema_ready:
                return
            try:
                db_dir = os.path.dirname(self.db_path)
                if db_dir:
                    os.makedirs(db_dir, exist_ok=True)
                async with aiosqlite.connect(self.db_path, timeout=10.0) as conn:
                    for statement in _SCHEMA:
                        await conn.execute(statement)
                    await conn.commit()
            except (OSError, sqlite3.Error) as exc:
                logger.error("store.init_failed path=%s type=%s detail=%s", self.db_path, exc.__class__.__name__, exc)
                raise LocalStoreError(f"cannot initialize local store at {self.db_path}: {exc}") from exc
            self._schema_ready = True
            logger.info("store.ready path=%s", self.db_path)

    @staticmethod
    def _to_record(row: aiosqlite.Row) -> CacheRecord:
        return CacheRecord(
            id=row["id"],
            payload=json.loads(row["payload"]),
            last_modified=row["last_modified"],
            synced=bool(row["synced"]),
            remote_id=row["remote_id"],
        )
