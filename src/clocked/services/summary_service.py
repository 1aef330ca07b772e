"""Summary service — monthly totals, daily activity and top projects."""

from __future__ import annotations

import calendar
import re
from typing import TYPE_CHECKING

from result import Err, Ok, Result

from clocked.models.analytics import DailyActivity, MonthlySummary, TopProject
from clocked.services.cost import (
    calculate_usage_percentage,
    calculate_value_multiplier,
    estimate_cost,
)

if TYPE_CHECKING:
    from clocked.data.store import ProjectStore
    from clocked.services.settings_service import SettingsService

_MONTH_RE = re.compile(r"^(\d{4})-(0[1-9]|1[0-2])$")


class SummaryService:
    """Service for the monthly dashboard projection.

    Sessions are bucketed by the UTC date of their ``created`` timestamp.
    Sessions of merged projects count towards their primary project.
    """

    def __init__(self, store: ProjectStore, settings: SettingsService) -> None:
        self._store = store
        self._settings = settings

    async def get_monthly_summary(self, month: str, top_n: int = 5) -> Result[MonthlySummary, str]:
        """Summarise one ``YYYY-MM`` month.

        Returns:
            Ok with a summary holding one ``DailyActivity`` per day of the
            month, or Err for a malformed month.
        """
        match = _MONTH_RE.match(month)
        if match is None:
            return Err(f"Invalid month {month!r}, expected YYYY-MM")
        year, mon = int(match.group(1)), int(match.group(2))
        start = f"{year:04d}-{mon:02d}"
        end = f"{year + 1:04d}-01" if mon == 12 else f"{year:04d}-{mon + 1:02d}"

        rate = await self._settings.cost_per_message()
        subscription = await self._settings.subscription_cost()
        totals = await self._store.get_period_totals(start, end)
        total_sessions = int(totals["total_sessions"]) if totals else 0
        total_messages = int(totals["total_messages"]) if totals else 0
        total_time = int(totals["total_time"]) if totals else 0

        by_day = {
            str(row["day"]): (int(row["session_count"]), int(row["total_time"]))
            for row in await self._store.get_daily_rows(start, end)
        }
        days_in_month = calendar.monthrange(year, mon)[1]
        daily: list[DailyActivity] = []
        for day in range(1, days_in_month + 1):
            date = f"{start}-{day:02d}"
            count, day_time = by_day.get(date, (0, 0))
            daily.append(DailyActivity(date=date, session_count=count, total_time=day_time))

        top_projects = [
            TopProject(
                path=str(row["primary_path"]),
                name=str(row["name"] or "Unknown"),
                session_count=int(row["session_count"]),
                message_count=int(row["message_count"]),
                total_time=int(row["total_time"]),
                estimated_cost=estimate_cost(int(row["message_count"]), rate),
            )
            for row in await self._store.get_top_project_rows(start, end, max(top_n, 0))
        ]

        api_cost = estimate_cost(total_messages, rate)
        return Ok(
            MonthlySummary(
                month=start,
                total_sessions=total_sessions,
                total_messages=total_messages,
                total_active_time=total_time,
                estimated_api_cost=api_cost,
                usage_percentage=calculate_usage_percentage(api_cost),
                value_multiplier=calculate_value_multiplier(api_cost, subscription),
                daily_activity=daily,
                top_projects=top_projects,
            )
        )
