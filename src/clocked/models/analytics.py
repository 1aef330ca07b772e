"""Analytics models."""

from __future__ import annotations

from pydantic import BaseModel, Field


class TimeSplit(BaseModel):
    """Human vs. assistant time derived from transcript timestamps.

    All durations are milliseconds. ``active_time`` is ``human_time +
    claude_time``; idle gaps are reported separately.
    """

    active_time: int = 0
    human_time: int = 0
    claude_time: int = 0
    idle_time: int = 0
    human_percentage: int = 0
    claude_percentage: int = 0
    message_pair_count: int = 0
    gap_count: int = 0


class DailyActivity(BaseModel):
    """Session activity for one calendar day."""

    date: str
    session_count: int = 0
    total_time: int = 0


class TopProject(BaseModel):
    """A project ranked by time spent within a month."""

    path: str
    name: str = "Unknown"
    session_count: int = 0
    message_count: int = 0
    total_time: int = 0
    estimated_cost: float = 0.0


class MonthlySummary(BaseModel):
    """Totals, per-day activity and top projects for one month."""

    month: str
    total_sessions: int = 0
    total_messages: int = 0
    total_active_time: int = 0
    estimated_api_cost: float = 0.0
    usage_percentage: float = 0.0
    value_multiplier: float = 0.0
    daily_activity: list[DailyActivity] = Field(default_factory=list)
    top_projects: list[TopProject] = Field(default_factory=list)
