"""Reconcile the Claude projects directory into the project store."""

from __future__ import annotations

import asyncio
import logging
import weakref
from pathlib import Path
from typing import TYPE_CHECKING

from clocked.data.paths import is_encoded_project_dir
from clocked.data.session_index import ProjectScan, read_project_dir
from clocked.models.sync import SyncResult

if TYPE_CHECKING:
    from collections.abc import Callable

    from clocked.config import Config
    from clocked.data.store import ProjectStore

logger = logging.getLogger(__name__)

type ProgressCallback = Callable[[int, int, str], None]

# One in-flight sync per store, shared by every engine bound to it.
_in_flight: weakref.WeakKeyDictionary[ProjectStore, asyncio.Task[SyncResult]] = (
    weakref.WeakKeyDictionary()
)


class SyncEngine:
    """Scan every project directory and upsert what it finds."""

    def __init__(self, store: ProjectStore, config: Config) -> None:
        self._store = store
        self._config = config

    async def sync(self, progress_callback: ProgressCallback | None = None) -> SyncResult:
        """Run a sync, or join the one already running against this store.

        Concurrent callers receive the same ``SyncResult`` object.

        Raises:
            OSError: if the projects directory exists but cannot be listed.
            StorageError: if a project's write fails; that project is rolled back.
        """
        task = _in_flight.get(self._store)
        if task is None or task.done():
            task = asyncio.ensure_future(self._run(progress_callback))
            _in_flight[self._store] = task
            task.add_done_callback(self._forget)
        else:
            logger.debug("Joining in-flight sync")
        return await asyncio.shield(task)

    def _forget(self, task: asyncio.Task[SyncResult]) -> None:
        if _in_flight.get(self._store) is task:
            del _in_flight[self._store]

    async def _run(self, progress_callback: ProgressCallback | None) -> SyncResult:
        root = self._config.projects_dir
        if not root.is_dir():
            logger.info("Claude projects directory not found: %s", root)
            return SyncResult()

        result = SyncResult(root=str(root))
        project_dirs = _list_project_dirs(root)
        total = len(project_dirs)
        scans = await self._scan_all(project_dirs)

        for i, scan in enumerate(scans):
            if progress_callback:
                progress_callback(i, total, f"Syncing {scan.project_name}...")
            result.errors.extend(scan.errors)
            if not scan.sessions:
                continue
            project = await self._store.write_project_snapshot(
                path=scan.project_path,
                name=scan.project_name,
                log_dir=scan.log_dir,
                sessions=scan.sessions,
            )
            result.projects.append(project)
            result.sessions.extend(scan.sessions)

        if progress_callback:
            progress_callback(total, total, "Sync complete")

        logger.info(
            "Synced %d projects, %d sessions from %s (%d errors)",
            len(result.projects),
            len(result.sessions),
            root,
            len(result.errors),
        )
        return result

    async def _scan_all(self, project_dirs: list[Path]) -> list[ProjectScan]:
        """Read project directories in worker threads, keeping directory order."""
        semaphore = asyncio.Semaphore(max(1, self._config.sync_concurrency))

        async def scan(project_dir: Path) -> ProjectScan:
            async with semaphore:
                return await asyncio.to_thread(read_project_dir, project_dir)

        return list(await asyncio.gather(*(scan(d) for d in project_dirs)))


def _list_project_dirs(root: Path) -> list[Path]:
    return sorted(
        entry for entry in root.iterdir() if entry.is_dir() and is_encoded_project_dir(entry.name)
    )
