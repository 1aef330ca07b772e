"""Project store: SQL persistence and query access for projects, sessions,
groups and settings."""

from __future__ import annotations

import uuid
from collections.abc import AsyncIterator, Sequence
from contextlib import asynccontextmanager
from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any, Final

from clocked.data._row_helpers import row_bool, row_int, row_opt_str, row_str
from clocked.models.projects import Project, ProjectGroup
from clocked.models.sessions import Session

if TYPE_CHECKING:
    from aiosqlite import Row

    from clocked.data.db import Database


class Unset:
    pass


UNSET: Final = Unset()

_PROJECT_COLUMNS = """
    path, name, log_dir, first_activity, last_activity, session_count,
    message_count, total_time, is_hidden, group_id, merged_into, is_default
"""

_SESSION_COLUMNS = """
    id, project_path, created, modified, duration, message_count,
    summary, first_prompt, git_branch
"""

_UPSERT_SESSION_SQL = """
    INSERT INTO sessions
    (id, project_path, created, modified, duration, message_count,
     summary, first_prompt, git_branch)
    VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
    ON CONFLICT(project_path, id) DO UPDATE SET
        created = excluded.created,
        modified = excluded.modified,
        duration = excluded.duration,
        message_count = excluded.message_count,
        summary = excluded.summary,
        first_prompt = excluded.first_prompt,
        git_branch = excluded.git_branch
"""


class ProjectStore:
    """Persistence boundary for everything sync derives and the user configures.

    Reads run directly on the connection. Writes run inside
    ``Database.transaction()`` so there is a single logical writer.
    """

    def __init__(self, db: Database) -> None:
        self._db = db

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator[ProjectStore]:
        """Group several store writes (and the reads validating them) atomically."""
        async with self._db.transaction():
            yield self

    # -- projects ---------------------------------------------------------

    async def list_projects(self, *, include_hidden: bool = False) -> list[Project]:
        where = "" if include_hidden else "WHERE is_hidden = 0"
        rows = await self._db.fetch_all(
            f"SELECT {_PROJECT_COLUMNS} FROM projects {where} ORDER BY last_activity DESC"
        )
        return [_row_to_project(row) for row in rows]

    async def get_project(self, path: str) -> Project | None:
        row = await self._db.fetch_one(
            f"SELECT {_PROJECT_COLUMNS} FROM projects WHERE path = ?",
            (path,),
        )
        return _row_to_project(row) if row is not None else None

    async def count_projects(self, *, include_hidden: bool = True) -> int:
        where = "" if include_hidden else "WHERE is_hidden = 0"
        row = await self._db.fetch_one(f"SELECT COUNT(*) as cnt FROM projects {where}")
        return int(row["cnt"]) if row else 0

    async def list_hidden_projects(self) -> list[Project]:
        rows = await self._db.fetch_all(
            f"""SELECT {_PROJECT_COLUMNS} FROM projects
                WHERE is_hidden = 1
                ORDER BY last_activity DESC"""
        )
        return [_row_to_project(row) for row in rows]

    async def get_default_project(self) -> Project | None:
        row = await self._db.fetch_one(
            f"SELECT {_PROJECT_COLUMNS} FROM projects WHERE is_default = 1"
        )
        return _row_to_project(row) if row is not None else None

    async def list_merged_projects(self, primary_path: str) -> list[Project]:
        """Projects whose ``merged_into`` points at ``primary_path``."""
        rows = await self._db.fetch_all(
            f"""SELECT {_PROJECT_COLUMNS} FROM projects
                WHERE merged_into = ?
                ORDER BY last_activity DESC""",
            (primary_path,),
        )
        return [_row_to_project(row) for row in rows]

    async def set_hidden(self, path: str, hidden: bool) -> bool:
        return await self._update_project(
            "UPDATE projects SET is_hidden = ? WHERE path = ?",
            (1 if hidden else 0, path),
        )

    async def set_group(self, path: str, group_id: str | None) -> bool:
        return await self._update_project(
            "UPDATE projects SET group_id = ? WHERE path = ?",
            (group_id, path),
        )

    async def set_default(self, path: str) -> bool:
        """Make ``path`` the only default project."""
        async with self._db.transaction():
            await self._db.execute("UPDATE projects SET is_default = 0 WHERE is_default = 1")
            cursor = await self._db.execute(
                "UPDATE projects SET is_default = 1 WHERE path = ?",
                (path,),
            )
            return cursor.rowcount > 0

    async def clear_default(self) -> None:
        async with self._db.transaction():
            await self._db.execute("UPDATE projects SET is_default = 0 WHERE is_default = 1")

    async def set_merged_into(self, paths: Sequence[str], target: str | None) -> int:
        """Point every project in ``paths`` at ``target`` (``None`` unmerges)."""
        if not paths:
            return 0
        placeholders = ",".join("?" for _ in paths)
        async with self._db.transaction():
            cursor = await self._db.execute(
                f"UPDATE projects SET merged_into = ? WHERE path IN ({placeholders})",
                (target, *paths),
            )
            return cursor.rowcount

    async def _update_project(self, sql: str, params: tuple[Any, ...]) -> bool:
        async with self._db.transaction():
            cursor = await self._db.execute(sql, params)
            return cursor.rowcount > 0

    async def write_project_snapshot(
        self,
        *,
        path: str,
        name: str,
        log_dir: str,
        sessions: Sequence[Session],
    ) -> Project:
        """Upsert a project and its sessions, then recompute its aggregates.

        Aggregates are rebuilt from every persisted session row of the project,
        so repeated syncs never double count. User flags are left untouched.
        """
        first_activity = min(s.created for s in sessions) if sessions else ""
        last_activity = max(s.modified for s in sessions) if sessions else ""
        async with self._db.transaction():
            await self._db.execute(
                """INSERT INTO projects (path, name, log_dir, first_activity, last_activity)
                   VALUES (?, ?, ?, ?, ?)
                   ON CONFLICT(path) DO UPDATE SET
                       name = excluded.name,
                       log_dir = excluded.log_dir""",
                (path, name, log_dir, first_activity, last_activity),
            )
            await self._db.execute_many(
                _UPSERT_SESSION_SQL,
                [
                    (
                        s.id,
                        path,
                        s.created,
                        s.modified,
                        s.duration,
                        s.message_count,
                        s.summary,
                        s.first_prompt,
                        s.git_branch,
                    )
                    for s in sessions
                ],
            )
            await self._db.execute(
                """UPDATE projects SET
                       session_count = (
                           SELECT COUNT(*) FROM sessions WHERE project_path = projects.path
                       ),
                       message_count = (
                           SELECT COALESCE(SUM(message_count), 0)
                           FROM sessions WHERE project_path = projects.path
                       ),
                       total_time = (
                           SELECT COALESCE(SUM(duration), 0)
                           FROM sessions WHERE project_path = projects.path
                       ),
                       first_activity = (
                           SELECT COALESCE(MIN(created), '')
                           FROM sessions WHERE project_path = projects.path
                       ),
                       last_activity = (
                           SELECT COALESCE(MAX(modified), '')
                           FROM sessions WHERE project_path = projects.path
                       )
                   WHERE path = ?""",
                (path,),
            )
            row = await self._db.fetch_one(
                f"SELECT {_PROJECT_COLUMNS} FROM projects WHERE path = ?",
                (path,),
            )
        if row is None:
            msg = f"Project {path} vanished while being written"
            raise RuntimeError(msg)
        return _row_to_project(row)

    # -- sessions ---------------------------------------------------------

    async def list_sessions(
        self,
        *,
        limit: int | None = None,
        offset: int = 0,
    ) -> list[Session]:
        """All sessions, most recently modified first."""
        if limit is None:
            rows = await self._db.fetch_all(
                f"SELECT {_SESSION_COLUMNS} FROM sessions ORDER BY modified DESC"
            )
        else:
            rows = await self._db.fetch_all(
                f"""SELECT {_SESSION_COLUMNS} FROM sessions
                    ORDER BY modified DESC
                    LIMIT ? OFFSET ?""",
                (limit, offset),
            )
        return [_row_to_session(row) for row in rows]

    async def list_sessions_by_projects(
        self,
        project_paths: Sequence[str],
        *,
        limit: int | None = None,
        offset: int = 0,
    ) -> tuple[list[Session], int]:
        """Sessions of the given projects, most recently modified first, plus total."""
        if not project_paths:
            return [], 0
        placeholders = ",".join("?" for _ in project_paths)
        where = f"WHERE project_path IN ({placeholders})"

        count_row = await self._db.fetch_one(
            f"SELECT COUNT(*) as cnt FROM sessions {where}",
            tuple(project_paths),
        )
        total = int(count_row["cnt"]) if count_row else 0

        if limit is None:
            rows = await self._db.fetch_all(
                f"SELECT {_SESSION_COLUMNS} FROM sessions {where} ORDER BY modified DESC",
                tuple(project_paths),
            )
        else:
            rows = await self._db.fetch_all(
                f"""SELECT {_SESSION_COLUMNS} FROM sessions {where}
                    ORDER BY modified DESC
                    LIMIT ? OFFSET ?""",
                (*project_paths, limit, offset),
            )
        return [_row_to_session(row) for row in rows], total

    async def list_sessions_by_date_range(self, start: str, end: str) -> list[Session]:
        """Sessions created within ``[start, end]``, newest first."""
        rows = await self._db.fetch_all(
            f"""SELECT {_SESSION_COLUMNS} FROM sessions
                WHERE created >= ? AND created <= ?
                ORDER BY created DESC""",
            (start, end),
        )
        return [_row_to_session(row) for row in rows]

    async def get_session(self, project_path: str, session_id: str) -> Session | None:
        row = await self._db.fetch_one(
            f"SELECT {_SESSION_COLUMNS} FROM sessions WHERE project_path = ? AND id = ?",
            (project_path, session_id),
        )
        return _row_to_session(row) if row is not None else None

    async def count_sessions(self) -> int:
        row = await self._db.fetch_one("SELECT COUNT(*) as cnt FROM sessions")
        return int(row["cnt"]) if row else 0

    # -- monthly projections ----------------------------------------------

    async def get_period_totals(self, start: str, end: str) -> Row | None:
        """Session totals for sessions created in ``[start, end)``."""
        return await self._db.fetch_one(
            """SELECT
                   COUNT(*) as total_sessions,
                   COALESCE(SUM(message_count), 0) as total_messages,
                   COALESCE(SUM(duration), 0) as total_time
               FROM sessions
               WHERE created >= ? AND created < ?""",
            (start, end),
        )

    async def get_daily_rows(self, start: str, end: str) -> list[Row]:
        return await self._db.fetch_all(
            """SELECT
                   substr(created, 1, 10) as day,
                   COUNT(*) as session_count,
                   COALESCE(SUM(duration), 0) as total_time
               FROM sessions
               WHERE created >= ? AND created < ?
               GROUP BY day
               ORDER BY day""",
            (start, end),
        )

    async def get_top_project_rows(self, start: str, end: str, limit: int) -> list[Row]:
        """Projects ranked by session time, merged projects rolled into their primary."""
        return await self._db.fetch_all(
            """SELECT
                   COALESCE(p.merged_into, s.project_path) as primary_path,
                   COALESCE(pp.name, p.name) as name,
                   COUNT(*) as session_count,
                   COALESCE(SUM(s.message_count), 0) as message_count,
                   COALESCE(SUM(s.duration), 0) as total_time
               FROM sessions s
               JOIN projects p ON p.path = s.project_path
               LEFT JOIN projects pp ON pp.path = p.merged_into
               WHERE s.created >= ? AND s.created < ?
               GROUP BY primary_path
               ORDER BY total_time DESC, session_count DESC, primary_path
               LIMIT ?""",
            (start, end, limit),
        )

    # -- groups -----------------------------------------------------------

    async def list_groups(self) -> list[ProjectGroup]:
        rows = await self._db.fetch_all(
            """SELECT id, name, color, created_at, sort_order
               FROM project_groups
               ORDER BY sort_order ASC, name ASC"""
        )
        return [_row_to_group(row) for row in rows]

    async def get_group(self, group_id: str) -> ProjectGroup | None:
        row = await self._db.fetch_one(
            """SELECT id, name, color, created_at, sort_order
               FROM project_groups WHERE id = ?""",
            (group_id,),
        )
        return _row_to_group(row) if row is not None else None

    async def create_group(self, name: str, color: str | None = None) -> ProjectGroup:
        group_id = uuid.uuid4().hex
        created_at = datetime.now(UTC).isoformat()
        async with self._db.transaction():
            row = await self._db.fetch_one(
                "SELECT MAX(sort_order) as max_order FROM project_groups"
            )
            max_order = row["max_order"] if row is not None else None
            sort_order = (max_order if max_order is not None else -1) + 1
            await self._db.execute(
                """INSERT INTO project_groups (id, name, color, created_at, sort_order)
                   VALUES (?, ?, ?, ?, ?)""",
                (group_id, name, color, created_at, sort_order),
            )
        return ProjectGroup(
            id=group_id,
            name=name,
            color=color,
            created_at=created_at,
            sort_order=sort_order,
        )

    async def update_group(
        self,
        group_id: str,
        *,
        name: str | Unset = UNSET,
        color: str | None | Unset = UNSET,
        sort_order: int | Unset = UNSET,
    ) -> ProjectGroup | None:
        """Update the given fields; ``color=None`` clears the color."""
        set_clauses: list[str] = []
        values: list[object] = []
        if not isinstance(name, Unset):
            set_clauses.append("name = ?")
            values.append(name)
        if not isinstance(color, Unset):
            set_clauses.append("color = ?")
            values.append(color)
        if not isinstance(sort_order, Unset):
            set_clauses.append("sort_order = ?")
            values.append(sort_order)

        if set_clauses:
            async with self._db.transaction():
                await self._db.execute(
                    f"UPDATE project_groups SET {', '.join(set_clauses)} WHERE id = ?",
                    (*values, group_id),
                )
        return await self.get_group(group_id)

    async def delete_group(self, group_id: str) -> bool:
        """Delete a group; its projects stay and lose their group assignment."""
        async with self._db.transaction():
            await self._db.execute(
                "UPDATE projects SET group_id = NULL WHERE group_id = ?",
                (group_id,),
            )
            cursor = await self._db.execute(
                "DELETE FROM project_groups WHERE id = ?",
                (group_id,),
            )
            return cursor.rowcount > 0

    # -- settings ---------------------------------------------------------

    async def get_setting(self, key: str) -> str | None:
        row = await self._db.fetch_one("SELECT value FROM settings WHERE key = ?", (key,))
        return str(row["value"]) if row is not None else None

    async def set_setting(self, key: str, value: str) -> None:
        async with self._db.transaction():
            await self._db.execute(
                """INSERT INTO settings (key, value) VALUES (?, ?)
                   ON CONFLICT(key) DO UPDATE SET value = excluded.value""",
                (key, value),
            )

    async def delete_setting(self, key: str) -> bool:
        async with self._db.transaction():
            cursor = await self._db.execute("DELETE FROM settings WHERE key = ?", (key,))
            return cursor.rowcount > 0

    async def list_settings(self) -> dict[str, str]:
        rows = await self._db.fetch_all("SELECT key, value FROM settings ORDER BY key")
        return {str(row["key"]): str(row["value"]) for row in rows}


def _row_to_project(row: object) -> Project:
    r: dict[str, object] = dict(row)  # type: ignore[call-overload]
    return Project(
        path=row_str(r, "path"),
        name=row_str(r, "name", "Unknown"),
        log_dir=row_str(r, "log_dir"),
        first_activity=row_str(r, "first_activity"),
        last_activity=row_str(r, "last_activity"),
        session_count=row_int(r, "session_count"),
        message_count=row_int(r, "message_count"),
        total_time=row_int(r, "total_time"),
        is_hidden=row_bool(r, "is_hidden"),
        group_id=row_opt_str(r, "group_id"),
        merged_into=row_opt_str(r, "merged_into"),
        is_default=row_bool(r, "is_default"),
    )


def _row_to_session(row: object) -> Session:
    r: dict[str, object] = dict(row)  # type: ignore[call-overload]
    return Session(
        id=row_str(r, "id"),
        project_path=row_str(r, "project_path"),
        created=row_str(r, "created"),
        modified=row_str(r, "modified"),
        duration=row_int(r, "duration"),
        message_count=row_int(r, "message_count"),
        summary=row_opt_str(r, "summary"),
        first_prompt=row_opt_str(r, "first_prompt"),
        git_branch=row_opt_str(r, "git_branch"),
    )


def _row_to_group(row: object) -> ProjectGroup:
    r: dict[str, object] = dict(row)  # type: ignore[call-overload]
    return ProjectGroup(
        id=row_str(r, "id"),
        name=row_str(r, "name"),
        color=row_opt_str(r, "color"),
        created_at=row_str(r, "created_at"),
        sort_order=row_int(r, "sort_order"),
    )
