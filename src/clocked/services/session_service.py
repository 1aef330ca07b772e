"""Session service — queries for session data."""

from __future__ import annotations

from typing import TYPE_CHECKING

from result import Err, Ok, Result

from clocked.models.sessions import Session, SessionPage

if TYPE_CHECKING:
    from clocked.data.store import ProjectStore
    from clocked.services.merge import MergeController


class SessionService:
    """Service for session queries.

    Sessions of a primary project include those of every project merged into it.
    """

    def __init__(self, store: ProjectStore, merges: MergeController) -> None:
        self._store = store
        self._merges = merges

    async def get_sessions_by_project(
        self,
        project_path: str,
        limit: int | None = None,
        offset: int = 0,
    ) -> Result[SessionPage, str]:
        """Sessions of a project (and its merged members), most recent first.

        Returns:
            Ok with the requested page and the unpaginated total.
        """
        if limit is not None and limit < 0:
            return Err(f"limit must not be negative, got {limit}")
        paths = await self._merges.member_paths(project_path)
        sessions, total = await self._store.list_sessions_by_projects(
            paths,
            limit=limit,
            offset=max(offset, 0),
        )
        return Ok(SessionPage(sessions=sessions, total=total))

    async def get_all_sessions(
        self,
        limit: int | None = None,
        offset: int = 0,
    ) -> Result[list[Session], str]:
        return Ok(await self._store.list_sessions(limit=limit, offset=max(offset, 0)))

    async def get_sessions_by_date_range(self, start: str, end: str) -> Result[list[Session], str]:
        """Sessions created between ``start`` and ``end`` (ISO strings, inclusive)."""
        if start > end:
            return Err(f"Start {start} is after end {end}")
        return Ok(await self._store.list_sessions_by_date_range(start, end))

    async def get_session(self, project_path: str, session_id: str) -> Result[Session, str]:
        session = await self._store.get_session(project_path, session_id)
        if session is None:
            return Err(f"Session {session_id} not found")
        return Ok(session)

    async def get_session_count(self) -> Result[int, str]:
        return Ok(await self._store.count_sessions())
