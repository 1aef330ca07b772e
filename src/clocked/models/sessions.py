"""Session-level models."""

from __future__ import annotations

from pydantic import BaseModel, Field


class Session(BaseModel):
    """One session of a project, as listed in its session manifest."""

    id: str
    project_path: str
    created: str
    modified: str
    duration: int = 0
    message_count: int = 0
    summary: str | None = None
    first_prompt: str | None = None
    git_branch: str | None = None


class SessionPage(BaseModel):
    """A page of sessions plus the unpaginated total."""

    sessions: list[Session] = Field(default_factory=list)
    total: int = 0
