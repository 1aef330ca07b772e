"""Tests for the project store."""

from __future__ import annotations

import time

import pytest

from clocked.data.db import Database, StorageError
from clocked.data.store import ProjectStore
from clocked.models.sessions import Session


def _session(
    session_id: str,
    project_path: str = "/p",
    created: str = "2026-01-15T10:00:00.000Z",
    modified: str = "2026-01-15T10:10:00.000Z",
    duration: int = 600_000,
    message_count: int = 10,
) -> Session:
    return Session(
        id=session_id,
        project_path=project_path,
        created=created,
        modified=modified,
        duration=duration,
        message_count=message_count,
    )


async def _add(store: ProjectStore, path: str, *sessions: Session) -> None:
    await store.write_project_snapshot(
        path=path,
        name=path.rsplit("/", 1)[-1] or "Unknown",
        log_dir=path.replace("/", "-"),
        sessions=list(sessions),
    )


class TestSnapshot:
    @pytest.mark.asyncio
    async def test_aggregates_from_rows(self, store: ProjectStore) -> None:
        project = await store.write_project_snapshot(
            path="/p",
            name="p",
            log_dir="-p",
            sessions=[
                _session("a", created="2026-01-01T00:00:00.000Z",
                         modified="2026-01-01T01:00:00.000Z", message_count=10),
                _session("b", created="2026-01-02T00:00:00.000Z",
                         modified="2026-01-03T00:00:00.000Z", message_count=25),
            ],
        )
        assert project.session_count == 2
        assert project.message_count == 35
        assert project.total_time == 1_200_000
        assert project.first_activity == "2026-01-01T00:00:00.000Z"
        assert project.last_activity == "2026-01-03T00:00:00.000Z"
        assert project.log_dir == "-p"

    @pytest.mark.asyncio
    async def test_upsert_does_not_double_count(self, store: ProjectStore) -> None:
        await _add(store, "/p", _session("a", message_count=10), _session("b", message_count=10))
        await _add(store, "/p", _session("a", message_count=10), _session("b", message_count=20))
        project = await store.get_project("/p")
        assert project is not None
        assert project.session_count == 2
        assert project.message_count == 30

    @pytest.mark.asyncio
    async def test_flags_survive_resync(self, store: ProjectStore) -> None:
        await _add(store, "/p", _session("a"))
        await store.set_hidden("/p", True)
        await store.set_default("/p")
        await _add(store, "/p", _session("a"), _session("b"))
        project = await store.get_project("/p")
        assert project is not None
        assert project.is_hidden
        assert project.is_default
        assert project.session_count == 2

    @pytest.mark.asyncio
    async def test_same_session_id_in_two_projects(self, store: ProjectStore) -> None:
        await _add(store, "/a", _session("shared", project_path="/a"))
        await _add(store, "/b", _session("shared", project_path="/b"))
        assert await store.count_sessions() == 2
        assert await store.get_session("/a", "shared") is not None


class TestProjects:
    @pytest.mark.asyncio
    async def test_list_order_and_hidden(self, store: ProjectStore) -> None:
        await _add(store, "/old", _session("o", modified="2026-01-01T00:00:00.000Z"))
        await _add(store, "/new", _session("n", modified="2026-02-01T00:00:00.000Z"))
        await store.set_hidden("/old", True)

        assert [p.path for p in await store.list_projects()] == ["/new"]
        assert [p.path for p in await store.list_projects(include_hidden=True)] == [
            "/new",
            "/old",
        ]
        assert [p.path for p in await store.list_hidden_projects()] == ["/old"]
        assert await store.count_projects() == 2
        assert await store.count_projects(include_hidden=False) == 1

    @pytest.mark.asyncio
    async def test_unknown_project(self, store: ProjectStore) -> None:
        assert await store.get_project("/nope") is None
        assert await store.set_hidden("/nope", True) is False

    @pytest.mark.asyncio
    async def test_single_default(self, store: ProjectStore) -> None:
        await _add(store, "/a", _session("a"))
        await _add(store, "/b", _session("b"))
        await store.set_default("/a")
        await store.set_default("/b")
        default = await store.get_default_project()
        assert default is not None
        assert default.path == "/b"
        a = await store.get_project("/a")
        assert a is not None and not a.is_default

        await store.clear_default()
        assert await store.get_default_project() is None

    @pytest.mark.asyncio
    async def test_merged_into(self, store: ProjectStore) -> None:
        for path in ("/main", "/x", "/y"):
            await _add(store, path, _session(path[1:]))
        assert await store.set_merged_into(["/x", "/y"], "/main") == 2
        assert {p.path for p in await store.list_merged_projects("/main")} == {"/x", "/y"}
        await store.set_merged_into(["/x"], None)
        assert [p.path for p in await store.list_merged_projects("/main")] == ["/y"]


class TestSessions:
    @pytest.mark.asyncio
    async def test_pagination(self, store: ProjectStore) -> None:
        await _add(
            store,
            "/p",
            *[
                _session(f"s{i}", modified=f"2026-01-{i + 1:02d}T00:00:00.000Z")
                for i in range(5)
            ],
        )
        page, total = await store.list_sessions_by_projects(["/p"], limit=2, offset=1)
        assert total == 5
        assert [s.id for s in page] == ["s3", "s2"]
        everything, _ = await store.list_sessions_by_projects(["/p"])
        assert len(everything) == 5
        assert await store.list_sessions_by_projects([]) == ([], 0)

    @pytest.mark.asyncio
    async def test_list_sessions_all_projects(self, store: ProjectStore) -> None:
        await _add(store, "/a", _session("a", modified="2026-01-01T00:00:00.000Z"))
        await _add(store, "/b", _session("b", modified="2026-01-02T00:00:00.000Z"))
        assert [s.id for s in await store.list_sessions()] == ["b", "a"]
        assert [s.id for s in await store.list_sessions(limit=1, offset=1)] == ["a"]

    @pytest.mark.asyncio
    async def test_date_range_inclusive(self, store: ProjectStore) -> None:
        await _add(
            store,
            "/p",
            _session("jan", created="2026-01-01T00:00:00.000Z"),
            _session("feb", created="2026-02-01T00:00:00.000Z"),
            _session("mar", created="2026-03-01T00:00:00.000Z"),
        )
        found = await store.list_sessions_by_date_range(
            "2026-01-01T00:00:00.000Z", "2026-02-01T00:00:00.000Z"
        )
        assert [s.id for s in found] == ["feb", "jan"]

    @pytest.mark.asyncio
    async def test_thousand_sessions_are_fast(self, store: ProjectStore) -> None:
        sessions = [
            _session(
                f"s{i:04d}",
                created=f"2026-01-01T00:{i // 60 % 60:02d}:{i % 60:02d}.000Z",
                modified=f"2026-01-02T00:{i // 60 % 60:02d}:{i % 60:02d}.000Z",
            )
            for i in range(1000)
        ]
        await _add(store, "/big", *sessions)

        started = time.perf_counter()
        page, total = await store.list_sessions_by_projects(["/big"], limit=50, offset=0)
        assert (time.perf_counter() - started) < 0.1
        assert total == 1000
        assert len(page) == 50

        started = time.perf_counter()
        everything, _ = await store.list_sessions_by_projects(["/big"])
        assert (time.perf_counter() - started) < 0.1
        assert len(everything) == 1000

        started = time.perf_counter()
        assert len(await store.list_sessions()) == 1000
        assert (time.perf_counter() - started) < 0.1


class TestGroups:
    @pytest.mark.asyncio
    async def test_crud(self, store: ProjectStore) -> None:
        first = await store.create_group("Work", "#ff0000")
        second = await store.create_group("Play")
        assert (first.sort_order, second.sort_order) == (0, 1)
        assert [g.name for g in await store.list_groups()] == ["Work", "Play"]

        updated = await store.update_group(first.id, name="Job", color=None)
        assert updated is not None
        assert updated.name == "Job"
        assert updated.color is None

        unchanged = await store.update_group(second.id)
        assert unchanged == second

        assert await store.update_group("missing", name="x") is None

    @pytest.mark.asyncio
    async def test_delete_clears_membership(self, store: ProjectStore) -> None:
        await _add(store, "/p", _session("a"))
        group = await store.create_group("Work")
        assert await store.set_group("/p", group.id)
        assert await store.delete_group(group.id)
        project = await store.get_project("/p")
        assert project is not None
        assert project.group_id is None
        assert await store.delete_group(group.id) is False

    @pytest.mark.asyncio
    async def test_unknown_group_is_rejected(self, store: ProjectStore) -> None:
        await _add(store, "/p", _session("a"))
        with pytest.raises(StorageError):
            await store.set_group("/p", "no-such-group")


class TestSettings:
    @pytest.mark.asyncio
    async def test_roundtrip(self, store: ProjectStore) -> None:
        assert await store.get_setting("theme") is None
        await store.set_setting("theme", "dark")
        await store.set_setting("theme", "light")
        assert await store.get_setting("theme") == "light"
        assert await store.list_settings() == {"theme": "light"}
        assert await store.delete_setting("theme")
        assert await store.list_settings() == {}


class TestTransactions:
    @pytest.mark.asyncio
    async def test_failed_write_rolls_back(self, in_memory_db: Database) -> None:
        store = ProjectStore(in_memory_db)
        with pytest.raises(RuntimeError):
            async with store.transaction():
                await store.set_setting("a", "1")
                raise RuntimeError("boom")
        assert await store.get_setting("a") is None

    @pytest.mark.asyncio
    async def test_schema_version_recorded(self, test_db: Database) -> None:
        row = await test_db.fetch_one("SELECT value FROM app_meta WHERE key = 'schema_version'")
        assert row is not None
        assert test_db.schema_rebuilt is True
