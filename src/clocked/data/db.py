"""Async SQLite connection manager using aiosqlite."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from pathlib import Path
from types import TracebackType
from typing import Any

import aiosqlite

logger = logging.getLogger(__name__)

SCHEMA_VERSION = 1

SCHEMA_SQL = """
CREATE TABLE IF NOT EXISTS project_groups (
    id TEXT PRIMARY KEY,
    name TEXT NOT NULL,
    color TEXT DEFAULT NULL,
    created_at TEXT NOT NULL,
    sort_order INTEGER DEFAULT 0
);

CREATE TABLE IF NOT EXISTS projects (
    path TEXT PRIMARY KEY,
    name TEXT NOT NULL,
    log_dir TEXT NOT NULL DEFAULT '',
    first_activity TEXT NOT NULL,
    last_activity TEXT NOT NULL,
    session_count INTEGER DEFAULT 0,
    message_count INTEGER DEFAULT 0,
    total_time INTEGER DEFAULT 0,
    is_hidden INTEGER DEFAULT 0,
    group_id TEXT DEFAULT NULL REFERENCES project_groups(id) ON DELETE SET NULL,
    merged_into TEXT DEFAULT NULL,
    is_default INTEGER DEFAULT 0
);

CREATE TABLE IF NOT EXISTS sessions (
    id TEXT NOT NULL,
    project_path TEXT NOT NULL REFERENCES projects(path),
    created TEXT NOT NULL,
    modified TEXT NOT NULL,
    duration INTEGER NOT NULL,
    message_count INTEGER DEFAULT 0,
    summary TEXT,
    first_prompt TEXT,
    git_branch TEXT,
    PRIMARY KEY (project_path, id)
);

CREATE TABLE IF NOT EXISTS settings (
    key TEXT PRIMARY KEY,
    value TEXT NOT NULL
);

CREATE INDEX IF NOT EXISTS idx_sessions_project_modified ON sessions(project_path, modified);
CREATE INDEX IF NOT EXISTS idx_sessions_created ON sessions(created);
CREATE INDEX IF NOT EXISTS idx_sessions_modified ON sessions(modified);
CREATE INDEX IF NOT EXISTS idx_projects_group ON projects(group_id);
CREATE INDEX IF NOT EXISTS idx_projects_merged_into ON projects(merged_into);
CREATE INDEX IF NOT EXISTS idx_projects_last_activity ON projects(last_activity);
"""


class StorageError(RuntimeError):
    """The persistence layer failed; the current write was rolled back."""


class Database:
    """Async SQLite connection manager using aiosqlite.

    One connection per instance. Writes go through ``transaction()``, which
    serialises them so a project's row and its sessions land together.
    """

    def __init__(self, db_path: Path) -> None:
        self._db_path = db_path
        self._conn: aiosqlite.Connection | None = None
        self._write_lock = asyncio.Lock()
        self._tx_owner: asyncio.Task[Any] | None = None
        self.schema_rebuilt = False

    async def __aenter__(self) -> Database:
        await self.connect()
        return self

    async def connect(self) -> Database:
        """Connect to SQLite and ensure schema."""
        try:
            self._db_path.parent.mkdir(parents=True, exist_ok=True)
            self._conn = await aiosqlite.connect(str(self._db_path))
            self._conn.row_factory = aiosqlite.Row
            await self._conn.execute("PRAGMA journal_mode=WAL")
            await self._conn.execute("PRAGMA synchronous=NORMAL")
            await self._conn.execute("PRAGMA foreign_keys=ON")
            await self._ensure_schema()
            await self._conn.commit()
        except (aiosqlite.Error, OSError) as exc:
            msg = f"Failed to open database {self._db_path}: {exc}"
            raise StorageError(msg) from exc
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        await self.close()

    async def close(self) -> None:
        """Close the SQLite connection."""
        if self._conn is not None:
            await self._conn.close()
            self._conn = None

    @property
    def conn(self) -> aiosqlite.Connection:
        if self._conn is None:
            msg = "Database not connected. Use 'async with Database(path) as db:'"
            raise RuntimeError(msg)
        return self._conn

    async def execute(self, sql: str, params: tuple[Any, ...] = ()) -> aiosqlite.Cursor:
        """Execute a SQL statement."""
        return await self.conn.execute(sql, params)

    async def execute_many(self, sql: str, params_seq: list[tuple[Any, ...]]) -> None:
        """Execute a SQL statement with many parameter sets."""
        await self.conn.executemany(sql, params_seq)

    async def fetch_all(self, sql: str, params: tuple[Any, ...] = ()) -> list[aiosqlite.Row]:
        """Fetch all rows from a query."""
        cursor = await self.conn.execute(sql, params)
        return await cursor.fetchall()  # type: ignore[return-value]

    async def fetch_one(self, sql: str, params: tuple[Any, ...] = ()) -> aiosqlite.Row | None:
        """Fetch a single row from a query."""
        cursor = await self.conn.execute(sql, params)
        return await cursor.fetchone()  # type: ignore[return-value]

    async def commit(self) -> None:
        """Commit the current transaction."""
        await self.conn.commit()

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator[Database]:
        """Run a block of writes atomically.

        A transaction opened by a task that already holds one joins the outer
        transaction.

        Raises:
            StorageError: if SQLite rejects any statement; nothing is committed.
        """
        current = asyncio.current_task()
        if current is not None and self._tx_owner is current:
            yield self
            return

        async with self._write_lock:
            self._tx_owner = current
            try:
                await self.conn.execute("BEGIN")
                yield self
                await self.conn.commit()
            except aiosqlite.Error as exc:
                await self.conn.rollback()
                raise StorageError(str(exc)) from exc
            except BaseException:
                await self.conn.rollback()
                raise
            finally:
                self._tx_owner = None

    async def _ensure_schema(self) -> None:
        """Rebuild schema when version changes; otherwise ensure all objects exist."""
        self.schema_rebuilt = False
        await self.conn.execute("""
            CREATE TABLE IF NOT EXISTS app_meta (
                key TEXT PRIMARY KEY,
                value TEXT NOT NULL
            )
        """)
        row = await self.fetch_one("SELECT value FROM app_meta WHERE key = 'schema_version'")
        current_version = int(row["value"]) if row and str(row["value"]).isdigit() else 0
        if current_version == SCHEMA_VERSION:
            await self.conn.executescript(SCHEMA_SQL)
            return

        self.schema_rebuilt = True
        logger.info("Rebuilding DB schema from version %s to %s", current_version, SCHEMA_VERSION)
        await self.conn.execute("PRAGMA foreign_keys=OFF")
        await self.conn.executescript("""
            DROP TABLE IF EXISTS sessions;
            DROP TABLE IF EXISTS projects;
            DROP TABLE IF EXISTS project_groups;
            DROP TABLE IF EXISTS settings;
        """)
        await self.conn.execute("PRAGMA foreign_keys=ON")
        await self.conn.executescript(SCHEMA_SQL)
        await self.conn.execute(
            "INSERT OR REPLACE INTO app_meta (key, value) VALUES ('schema_version', ?)",
            (str(SCHEMA_VERSION),),
        )
