"""Time split service — human vs. assistant time for a project."""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path
from typing import TYPE_CHECKING

from result import Err, Ok, Result

from clocked.data.paths import encode_project_path
from clocked.data.transcript import list_transcripts, read_transcript
from clocked.models.analytics import TimeSplit
from clocked.services.time_split import aggregate_time_splits, calculate_time_split

if TYPE_CHECKING:
    from clocked.config import Config
    from clocked.data.store import ProjectStore
    from clocked.services.merge import MergeController
    from clocked.services.settings_service import SettingsService

logger = logging.getLogger(__name__)


class TimeSplitService:
    """Compute time splits on demand from transcripts; nothing is persisted."""

    def __init__(
        self,
        store: ProjectStore,
        merges: MergeController,
        settings: SettingsService,
        config: Config,
    ) -> None:
        self._store = store
        self._merges = merges
        self._settings = settings
        self._config = config

    async def get_time_split(self, project_path: str) -> Result[TimeSplit, str]:
        """Aggregate the split over every transcript of a project and its members."""
        if await self._store.get_project(project_path) is None:
            return Err(f"Project {project_path} not found")

        threshold = await self._settings.idle_threshold_ms()
        splits: list[TimeSplit] = []
        for path in await self._merges.member_paths(project_path):
            project = await self._store.get_project(path)
            log_dir = project.log_dir if project and project.log_dir else encode_project_path(path)
            project_dir = self._config.projects_dir / log_dir
            splits.extend(
                await asyncio.to_thread(_split_project_dir, project_dir, threshold)
            )
        return Ok(aggregate_time_splits(splits))


def _split_project_dir(project_dir: Path, idle_threshold_ms: int) -> list[TimeSplit]:
    splits: list[TimeSplit] = []
    for path in list_transcripts(project_dir):
        try:
            transcript = read_transcript(path)
        except (OSError, UnicodeDecodeError):
            logger.warning("Failed to read transcript %s", path, exc_info=True)
            continue
        splits.append(calculate_time_split(transcript.events, idle_threshold_ms))
    return splits
