"""Configuration for Clocked."""

from dataclasses import dataclass, field
from pathlib import Path

DEFAULT_IDLE_THRESHOLD_MS = 30 * 60 * 1000


@dataclass(frozen=True)
class Config:
    """Application configuration."""

    claude_dir: Path = field(default_factory=lambda: Path.home() / ".claude")
    data_dir: Path = field(default_factory=lambda: Path.home() / ".clocked")
    idle_threshold_ms: int = DEFAULT_IDLE_THRESHOLD_MS
    cost_per_message: float = 0.05
    subscription_cost: float = 100.0
    top_projects: int = 5
    sync_concurrency: int = 8

    @property
    def projects_dir(self) -> Path:
        return self.claude_dir / "projects"

    @property
    def db_path(self) -> Path:
        return self.data_dir / "cache.db"
