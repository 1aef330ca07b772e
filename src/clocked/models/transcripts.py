"""Transcript event models."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import StrEnum


class Role(StrEnum):
    """Who produced a transcript message."""

    HUMAN = "human"
    ASSISTANT = "assistant"


@dataclass(frozen=True, slots=True)
class TranscriptEvent:
    """A single timestamped message, stripped of its content."""

    role: Role
    timestamp: datetime
    uuid: str = ""


@dataclass(slots=True)
class Transcript:
    """Chronologically ordered events read from one transcript file."""

    session_id: str
    events: list[TranscriptEvent] = field(default_factory=list)
    skipped_lines: int = 0
    git_branch: str | None = None
