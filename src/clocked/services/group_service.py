"""Group service — user-defined project groups."""

from __future__ import annotations

from typing import TYPE_CHECKING

from result import Err, Ok, Result

from clocked.data.store import UNSET, Unset
from clocked.models.projects import ProjectGroup

if TYPE_CHECKING:
    from clocked.data.store import ProjectStore


class GroupService:
    """Service for group CRUD. Deleting a group never deletes its projects."""

    def __init__(self, store: ProjectStore) -> None:
        self._store = store

    async def list_groups(self) -> Result[list[ProjectGroup], str]:
        return Ok(await self._store.list_groups())

    async def create_group(self, name: str, color: str | None = None) -> Result[ProjectGroup, str]:
        name = name.strip()
        if not name:
            return Err("Group name must not be empty")
        return Ok(await self._store.create_group(name, color))

    async def update_group(
        self,
        group_id: str,
        *,
        name: str | Unset = UNSET,
        color: str | None | Unset = UNSET,
        sort_order: int | Unset = UNSET,
    ) -> Result[ProjectGroup, str]:
        if isinstance(name, str):
            name = name.strip()
            if not name:
                return Err("Group name must not be empty")
        group = await self._store.update_group(
            group_id,
            name=name,
            color=color,
            sort_order=sort_order,
        )
        if group is None:
            return Err(f"Group {group_id} not found")
        return Ok(group)

    async def delete_group(self, group_id: str) -> Result[None, str]:
        if not await self._store.delete_group(group_id):
            return Err(f"Group {group_id} not found")
        return Ok(None)
