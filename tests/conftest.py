"""Shared fixtures for analytics tests."""

from datetime import datetime, timezone
from pathlib import Path

import pytest

from run_analytics.config import AnalyticsConfig
from run_analytics.recorder import TestAnalytics

FIXED_NOW = datetime(2024, 3, 15, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def now() -> datetime:
    """Fixed current time used by the analytics clock."""
    return FIXED_NOW


@pytest.fixture
def config(tmp_path: Path) -> AnalyticsConfig:
    """Configuration storing history under a temporary directory."""
    return AnalyticsConfig(data_dir=tmp_path / "data")


@pytest.fixture
def analytics(config: AnalyticsConfig, now: datetime) -> TestAnalytics:
    """Analytics instance with a fixed clock."""
    return TestAnalytics(config=config, clock=lambda: now)
