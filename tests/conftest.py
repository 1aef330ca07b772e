"""Shared fixtures for Clocked tests."""

from __future__ import annotations

import json
from collections.abc import AsyncGenerator, Callable
from pathlib import Path
from typing import Any

import pytest

from clocked.config import Config
from clocked.data.db import Database
from clocked.data.paths import encode_project_path
from clocked.data.store import ProjectStore

type ManifestWriter = Callable[..., Path]


def session_entry(
    session_id: str,
    created: str = "2026-01-15T10:00:00.000Z",
    modified: str = "2026-01-15T10:10:00.000Z",
    message_count: int = 10,
    **extra: Any,
) -> dict[str, Any]:
    """A manifest record in the camelCase form Claude Code writes."""
    return {
        "sessionId": session_id,
        "created": created,
        "modified": modified,
        "messageCount": message_count,
        **extra,
    }


def transcript_line(
    role: str,
    timestamp: str,
    uuid: str = "",
    **extra: Any,
) -> str:
    record: dict[str, Any] = {
        "type": "user" if role == "human" else role,
        "timestamp": timestamp,
        "message": {"role": "user" if role == "human" else role, "content": "..."},
        **extra,
    }
    if uuid:
        record["uuid"] = uuid
    return json.dumps(record)


@pytest.fixture
def claude_dir(tmp_path: Path) -> Path:
    """An empty ``.claude/projects`` tree."""
    path = tmp_path / ".claude"
    (path / "projects").mkdir(parents=True)
    return path


@pytest.fixture
def write_manifest(claude_dir: Path) -> ManifestWriter:
    """Write ``sessions-index.json`` for a project path; raw strings are written verbatim."""

    def write(project_path: str, entries: list[Any] | dict[str, Any] | str) -> Path:
        project_dir = claude_dir / "projects" / encode_project_path(project_path)
        project_dir.mkdir(parents=True, exist_ok=True)
        content = entries if isinstance(entries, str) else json.dumps(entries)
        (project_dir / "sessions-index.json").write_text(content, encoding="utf-8")
        return project_dir

    return write


@pytest.fixture
def write_transcript(claude_dir: Path) -> Callable[[str, str, list[str]], Path]:
    """Write a ``<session>.jsonl`` transcript for a project path."""

    def write(project_path: str, session_id: str, lines: list[str]) -> Path:
        project_dir = claude_dir / "projects" / encode_project_path(project_path)
        project_dir.mkdir(parents=True, exist_ok=True)
        path = project_dir / f"{session_id}.jsonl"
        path.write_text("\n".join(lines) + "\n", encoding="utf-8")
        return path

    return write


@pytest.fixture
def test_config(claude_dir: Path, tmp_path: Path) -> Config:
    """Config pointing at temporary test data."""
    return Config(claude_dir=claude_dir, data_dir=tmp_path / "data")


@pytest.fixture
async def test_db(tmp_path: Path) -> AsyncGenerator[Database]:
    """A fresh file-backed test database."""
    db = Database(tmp_path / "test.db")
    await db.__aenter__()
    yield db  # type: ignore[misc]
    await db.__aexit__(None, None, None)


@pytest.fixture
async def in_memory_db() -> AsyncGenerator[Database]:
    """SQLite in-memory database for fast unit/integration tests."""
    db = Database(Path(":memory:"))
    await db.__aenter__()
    yield db  # type: ignore[misc]
    await db.__aexit__(None, None, None)


@pytest.fixture
def store(in_memory_db: Database) -> ProjectStore:
    return ProjectStore(in_memory_db)
