"""Pydantic models for Clocked."""

from clocked.models.analytics import DailyActivity, MonthlySummary, TimeSplit, TopProject
from clocked.models.projects import MergedInto, MergeState, Project, ProjectGroup, Standalone
from clocked.models.sessions import Session, SessionPage
from clocked.models.sync import SyncResult
from clocked.models.transcripts import Role, Transcript, TranscriptEvent

__all__ = [
    "DailyActivity",
    "MergeState",
    "MergedInto",
    "MonthlySummary",
    "Project",
    "ProjectGroup",
    "Role",
    "Session",
    "SessionPage",
    "Standalone",
    "SyncResult",
    "TimeSplit",
    "TopProject",
    "Transcript",
    "TranscriptEvent",
]
