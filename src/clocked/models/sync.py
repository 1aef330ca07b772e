"""Sync result models."""

from __future__ import annotations

from dataclasses import dataclass, field

from clocked.models.projects import Project
from clocked.models.sessions import Session


@dataclass(slots=True)
class SyncResult:
    """Result summary for a sync run."""

    projects: list[Project] = field(default_factory=list)
    sessions: list[Session] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)
    root: str | None = None

    def __repr__(self) -> str:
        return (
            f"SyncResult(projects={len(self.projects)}, sessions={len(self.sessions)}, "
            f"errors={len(self.errors)}, root={self.root!r})"
        )
