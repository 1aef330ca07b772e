"""Project service — queries and commands for project data."""

from __future__ import annotations

from collections.abc import Sequence
from typing import TYPE_CHECKING

from result import Err, Ok, Result

from clocked.models.projects import Project

if TYPE_CHECKING:
    from clocked.data.store import ProjectStore
    from clocked.services.merge import MergeController


class ProjectService:
    """Service for project queries and per-project flags."""

    def __init__(self, store: ProjectStore, merges: MergeController) -> None:
        self._store = store
        self._merges = merges

    async def get_all_projects(self, include_hidden: bool = False) -> Result[list[Project], str]:
        """List projects sorted by last activity, newest first."""
        return Ok(await self._store.list_projects(include_hidden=include_hidden))

    async def get_project_by_path(self, path: str) -> Result[Project, str]:
        project = await self._store.get_project(path)
        if project is None:
            return Err(f"Project {path} not found")
        return Ok(project)

    async def get_project_count(self, include_hidden: bool = True) -> Result[int, str]:
        return Ok(await self._store.count_projects(include_hidden=include_hidden))

    async def get_hidden_projects(self) -> Result[list[Project], str]:
        return Ok(await self._store.list_hidden_projects())

    async def set_hidden(self, path: str, hidden: bool) -> Result[None, str]:
        if not await self._store.set_hidden(path, hidden):
            return Err(f"Project {path} not found")
        return Ok(None)

    async def set_group(self, path: str, group_id: str | None) -> Result[None, str]:
        if group_id is not None and await self._store.get_group(group_id) is None:
            return Err(f"Group {group_id} not found")
        if not await self._store.set_group(path, group_id):
            return Err(f"Project {path} not found")
        return Ok(None)

    async def set_default(self, path: str) -> Result[None, str]:
        """Make ``path`` the default project, replacing any previous default."""
        if not await self._store.set_default(path):
            return Err(f"Project {path} not found")
        return Ok(None)

    async def clear_default(self) -> Result[None, str]:
        await self._store.clear_default()
        return Ok(None)

    async def get_default_project(self) -> Result[Project | None, str]:
        return Ok(await self._store.get_default_project())

    async def get_merged_projects(self, primary_path: str) -> Result[list[Project], str]:
        return Ok(await self._store.list_merged_projects(primary_path))

    async def merge_projects(
        self,
        source_paths: Sequence[str],
        target_path: str,
    ) -> Result[int, str]:
        return await self._merges.merge(source_paths, target_path)

    async def unmerge_project(self, path: str) -> Result[bool, str]:
        return await self._merges.unmerge(path)
