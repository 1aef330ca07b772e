"""Protocol definitions for data access."""

from __future__ import annotations

from contextlib import AbstractAsyncContextManager
from typing import Any, Protocol

from clocked.data.sync import ProgressCallback
from clocked.models.sync import SyncResult


class DatabaseProtocol(Protocol):
    """Async database interface."""

    async def execute(self, sql: str, params: tuple[Any, ...] = ()) -> Any: ...

    async def execute_many(self, sql: str, params_seq: list[tuple[Any, ...]]) -> None: ...

    async def fetch_all(self, sql: str, params: tuple[Any, ...] = ()) -> list[Any]: ...

    async def fetch_one(self, sql: str, params: tuple[Any, ...] = ()) -> Any | None: ...

    def transaction(self) -> AbstractAsyncContextManager[Any]: ...


class SyncEngineProtocol(Protocol):
    """Interface for the sync engine."""

    async def sync(self, progress_callback: ProgressCallback | None = None) -> SyncResult: ...
