"""Service container with DI wiring."""

from __future__ import annotations

from dataclasses import dataclass
from types import TracebackType
from typing import TYPE_CHECKING

from clocked.data.db import Database
from clocked.data.store import ProjectStore
from clocked.data.sync import SyncEngine
from clocked.services.group_service import GroupService
from clocked.services.merge import MergeController
from clocked.services.project_service import ProjectService
from clocked.services.session_service import SessionService
from clocked.services.settings_service import SettingsService
from clocked.services.summary_service import SummaryService
from clocked.services.time_split_service import TimeSplitService

if TYPE_CHECKING:
    from clocked.config import Config


@dataclass
class ServiceContainer:
    """Holds all application services. Built once at startup, immutable."""

    config: Config
    db: Database
    store: ProjectStore
    sync_engine: SyncEngine
    merges: MergeController
    project_service: ProjectService
    session_service: SessionService
    group_service: GroupService
    settings_service: SettingsService
    summary_service: SummaryService
    time_split_service: TimeSplitService

    @classmethod
    async def create(cls, config: Config) -> ServiceContainer:
        """Async factory that opens the database and wires all dependencies."""
        db = Database(config.db_path)
        await db.connect()

        store = ProjectStore(db)
        merges = MergeController(store)
        settings_service = SettingsService(store, config)

        return cls(
            config=config,
            db=db,
            store=store,
            sync_engine=SyncEngine(store, config),
            merges=merges,
            project_service=ProjectService(store, merges),
            session_service=SessionService(store, merges),
            group_service=GroupService(store),
            settings_service=settings_service,
            summary_service=SummaryService(store, settings_service),
            time_split_service=TimeSplitService(store, merges, settings_service, config),
        )

    async def __aenter__(self) -> ServiceContainer:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        await self.close()

    async def close(self) -> None:
        """Shut down all services."""
        await self.db.close()
