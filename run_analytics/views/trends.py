"""Trends view: pass-rate and duration series, top flaky tests and patterns."""

from run_analytics.recorder import TestAnalytics
from run_analytics.reporter import format_duration
from run_analytics.views.manifest import ViewManifest
from run_analytics.views.ranking import (
    flaky_by_failure_ratio,
    location,
    patterns_by_count,
)

SERIES_LENGTH = 10
TOP_N = 5


def trend_indicator(current: float, previous: float | None) -> str:
    """Arrow comparing a value to a previous one, with a 5% dead band."""
    if previous is None:
        return "  "
    if current > previous * 1.05:
        return "↗️ "
    if current < previous * 0.95:
        return "↘️ "
    return "→ "


def render_trends(analytics: TestAnalytics) -> list[str]:
    """Render the trends analysis."""
    metrics = analytics.metrics
    recent_runs = [
        run for run in list(analytics.history.runs)[-SERIES_LENGTH:] if run.total > 0
    ]
    recent_runs.reverse()

    pass_rates = [f"{run.passed / run.total * 100:.1f}%" for run in recent_runs]
    durations = [
        "?" if run.duration is None else format_duration(run.duration)
        for run in recent_runs
    ]

    lines = [
        "Test Trends Analysis",
        "=" * 60,
        "",
        "Overall Metrics:",
        f"Total Test Runs:    {metrics.total_runs}",
        f"Average Pass Rate:  {metrics.pass_rate:.1f}% "
        f"{trend_indicator(metrics.recent_pass_rate, metrics.pass_rate)}",
        f"Recent Pass Rate:   {metrics.recent_pass_rate:.1f}%",
        f"Total Duration:     {format_duration(metrics.total_duration)}",
        "",
        "Recent Pass Rates (newest to oldest):",
        " → ".join(pass_rates) if pass_rates else "No data",
        "",
        "Recent Durations (newest to oldest):",
        " → ".join(durations) if durations else "No data",
        "",
        "Flaky Tests:",
        "-" * 60,
    ]

    flaky = flaky_by_failure_ratio(metrics)[:TOP_N]
    for test in flaky:
        lines += [
            f"{test.name or 'Unknown test'} ({test.passes} passes, "
            f"{test.failures} failures, {test.pass_percentage:.1f}% pass rate)",
            f"  File: {location(test)}",
            "",
        ]
    if not flaky:
        lines += ["No flaky tests detected", ""]

    lines += ["Common Failure Patterns:", "-" * 60]

    patterns = patterns_by_count(metrics)[:TOP_N]
    for pattern, count in patterns:
        lines += [f"Occurrences: {count}", f"Pattern: {pattern}", ""]
    if not patterns:
        lines.append("No common failure patterns found")

    return lines


trends_view = ViewManifest(title="Test Trends Analysis", render=render_trends)
