"""Configuration for test run analytics."""

import os
from pathlib import Path

from pydantic import BaseModel, Field


def default_data_dir() -> Path:
    """Per-user data directory for analytics history."""
    base = os.environ.get("XDG_DATA_HOME") or Path.home() / ".local" / "share"
    return Path(base) / "test-analytics"


class AnalyticsConfig(BaseModel):
    """Configuration for history storage and aggregation windows."""

    data_dir: Path = Field(default_factory=default_data_dir)
    history_filename: str = "history.json"
    max_runs: int = Field(default=100, ge=1)
    max_test_history: int = Field(default=20, ge=1)
    recent_window: int = Field(default=10, ge=1)
    pattern_max_length: int = Field(default=100, ge=1)
    # Runs, every test record and file tallies join the minimal snapshot
    persist_state: bool = False

    @property
    def history_path(self) -> Path:
        """Location of the persisted history snapshot."""
        return self.data_dir / self.history_filename
