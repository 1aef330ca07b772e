"""Flat project merging: members point at one primary, never at each other."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import TYPE_CHECKING

from result import Err, Ok, Result

from clocked.models.projects import MergedInto, Standalone

if TYPE_CHECKING:
    from clocked.data.store import ProjectStore

logger = logging.getLogger(__name__)


class MergeController:
    """Validate and apply merge relations between projects.

    A merge is rejected as a whole when it would leave a chain (a member whose
    primary is itself merged). Validation and the write share one transaction.
    """

    def __init__(self, store: ProjectStore) -> None:
        self._store = store

    async def merge(self, source_paths: Sequence[str], target_path: str) -> Result[int, str]:
        """Merge ``source_paths`` into ``target_path``; returns how many were merged."""
        sources = list(dict.fromkeys(p for p in source_paths if p != target_path))
        if not sources:
            return Ok(0)

        async with self._store.transaction() as store:
            target = await store.get_project(target_path)
            if target is None:
                return Err(f"Target project {target_path} not found")
            if isinstance(target.merge_state, MergedInto):
                return Err(
                    f"Target project {target_path} is already merged into "
                    f"{target.merge_state.primary_path}"
                )

            for path in sources:
                if await store.get_project(path) is None:
                    return Err(f"Source project {path} not found")
                members = await store.list_merged_projects(path)
                if members:
                    return Err(
                        f"Source project {path} has {len(members)} merged project(s); "
                        "unmerge them first"
                    )

            updated = await store.set_merged_into(sources, target_path)

        logger.info("Merged %d project(s) into %s", updated, target_path)
        return Ok(updated)

    async def unmerge(self, path: str) -> Result[bool, str]:
        """Detach one project from its primary. Other members stay merged."""
        async with self._store.transaction() as store:
            project = await store.get_project(path)
            if project is None or isinstance(project.merge_state, Standalone):
                return Ok(False)
            await store.set_merged_into([path], None)

        logger.info("Unmerged %s", path)
        return Ok(True)

    async def member_paths(self, path: str) -> list[str]:
        """The project itself plus every project merged into it."""
        project = await self._store.get_project(path)
        if project is None or isinstance(project.merge_state, MergedInto):
            return [path]
        members = await self._store.list_merged_projects(path)
        return [path, *(m.path for m in members)]
