"""Protocol definitions for services."""

from __future__ import annotations

from collections.abc import Sequence
from typing import Protocol

from result import Result

from clocked.models.analytics import MonthlySummary, TimeSplit
from clocked.models.projects import Project
from clocked.models.sessions import Session, SessionPage


class ProjectServiceProtocol(Protocol):
    """Interface for project operations."""

    async def get_all_projects(self, include_hidden: bool = False) -> Result[list[Project], str]: ...

    async def get_project_by_path(self, path: str) -> Result[Project, str]: ...

    async def set_hidden(self, path: str, hidden: bool) -> Result[None, str]: ...

    async def merge_projects(
        self, source_paths: Sequence[str], target_path: str
    ) -> Result[int, str]: ...

    async def unmerge_project(self, path: str) -> Result[bool, str]: ...


class SessionServiceProtocol(Protocol):
    """Interface for session operations."""

    async def get_sessions_by_project(
        self,
        project_path: str,
        limit: int | None = None,
        offset: int = 0,
    ) -> Result[SessionPage, str]: ...

    async def get_sessions_by_date_range(
        self, start: str, end: str
    ) -> Result[list[Session], str]: ...


class SummaryServiceProtocol(Protocol):
    """Interface for monthly summaries."""

    async def get_monthly_summary(
        self, month: str, top_n: int = 5
    ) -> Result[MonthlySummary, str]: ...


class TimeSplitServiceProtocol(Protocol):
    """Interface for time split queries."""

    async def get_time_split(self, project_path: str) -> Result[TimeSplit, str]: ...
