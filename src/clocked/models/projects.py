"""Project-level models."""

from __future__ import annotations

from dataclasses import dataclass

from pydantic import BaseModel


@dataclass(frozen=True, slots=True)
class Standalone:
    """A project that is not merged into any other project."""


@dataclass(frozen=True, slots=True)
class MergedInto:
    """A project whose sessions are reported under ``primary_path``."""

    primary_path: str


type MergeState = Standalone | MergedInto


class Project(BaseModel):
    """A project discovered from the Claude projects directory."""

    path: str
    name: str = "Unknown"
    log_dir: str = ""
    first_activity: str = ""
    last_activity: str = ""
    session_count: int = 0
    message_count: int = 0
    total_time: int = 0
    is_hidden: bool = False
    group_id: str | None = None
    merged_into: str | None = None
    is_default: bool = False

    @property
    def merge_state(self) -> MergeState:
        if self.merged_into:
            return MergedInto(self.merged_into)
        return Standalone()


class ProjectGroup(BaseModel):
    """A user-defined group of projects."""

    id: str
    name: str
    color: str | None = None
    created_at: str = ""
    sort_order: int = 0
