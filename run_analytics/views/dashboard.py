"""Compact dashboard: headline metrics, pass-rate graph and health status."""

import math
from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Literal

from run_analytics.models.history import Metrics
from run_analytics.recorder import TestAnalytics
from run_analytics.views.manifest import ViewManifest

GRAPH_POINTS = 10
GRAPH_HEIGHT = 5
MAX_FLAKY_TESTS = 3
MIN_RECENT_PASS_RATE = 90.0
DECLINE_FACTOR = 0.95


@dataclass(frozen=True, kw_only=True)
class Health:
    """Health classification with every issue that contributed to it."""

    status: Literal["Good", "Declining", "Poor"]
    issues: Sequence[str] = field(default_factory=tuple)


def assess_health(metrics: Metrics) -> Health:
    """Classify suite health.

    ``Poor`` takes precedence over ``Declining``, which takes precedence over
    ``Good``; all triggered issues are listed regardless.
    """
    poor: list[str] = []
    if metrics.recent_pass_rate < MIN_RECENT_PASS_RATE:
        poor.append(f"Recent pass rate below {MIN_RECENT_PASS_RATE:.0f}%")
    if len(metrics.flaky_tests) > MAX_FLAKY_TESTS:
        poor.append("Too many flaky tests")

    declining: list[str] = []
    if metrics.recent_pass_rate < metrics.pass_rate * DECLINE_FACTOR:
        declining.append("Pass rate is trending downward")

    if poor:
        return Health(status="Poor", issues=(*poor, *declining))
    if declining:
        return Health(status="Declining", issues=tuple(declining))
    return Health(status="Good")


def _row(value: float, min_val: float, max_val: float, height: int) -> int:
    normalized = (value - min_val) / (max_val - min_val)
    row = math.floor((1 - normalized) * (height - 1))
    return max(0, min(row, height - 1))


def render_pass_rate_graph(
    points: Sequence[float], height: int = GRAPH_HEIGHT
) -> list[str]:
    """Plot pass-rate percentages as an ASCII point graph.

    The vertical axis spans from 10 points below the lowest value (not below
    0) up to 100. Each point takes two columns; consecutive points are joined
    by a vertical ``|`` run in the column of the later point.
    """
    if not points:
        return []

    max_val = 100.0
    min_val = max(0.0, min(points) - 10)
    width = len(points) * 2
    grid = [[" "] * width for _ in range(height)]

    previous_row: int | None = None
    for x, value in enumerate(points):
        row = _row(value, min_val, max_val, height)
        col = x * 2

        if previous_row is not None:
            if previous_row < row:
                connecting = range(previous_row, row)
            else:
                connecting = range(row + 1, previous_row + 1)
            for r in connecting:
                grid[r][col] = "|"

        grid[row][col] = "o"
        previous_row = row

    lines = ["".join(cells) for cells in grid]
    lines.append("-" * width)
    lines.append(f"{min_val:.0f}%" + " " * (width - 8) + f"{max_val:.0f}%")
    return lines


def render_dashboard(analytics: TestAnalytics) -> list[str]:
    """Render the compact analytics dashboard."""
    metrics = analytics.metrics
    points = [
        run.passed / run.total * 100
        for run in list(analytics.history.runs)[-GRAPH_POINTS:]
        if run.total > 0
    ]

    lines = [
        "Test Analytics Dashboard",
        "=" * 50,
        "",
        "Overview:",
        f"Total Runs:        {metrics.total_runs}",
        f"Overall Pass Rate: {metrics.pass_rate:.1f}%",
        f"Recent Pass Rate:  {metrics.recent_pass_rate:.1f}%",
        f"Flaky Tests:       {len(metrics.flaky_tests)}",
        f"Failure Patterns:  {len(metrics.failure_patterns)}",
        "",
        "Pass Rate Trend:",
    ]
    lines += render_pass_rate_graph(points) or ["Not enough data to display trend"]

    health = assess_health(metrics)
    lines += ["", "Health Status:", health.status]
    if health.issues:
        lines.append("Issues:")
        lines += [f"- {issue}" for issue in health.issues]

    return lines


dashboard_view = ViewManifest(title="Test Analytics Dashboard", render=render_dashboard)
