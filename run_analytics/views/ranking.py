"""Orderings shared by the analytics views."""

from collections.abc import Sequence

from run_analytics.models.history import Metrics, TestRecord


def flaky_by_failure_ratio(metrics: Metrics) -> Sequence[TestRecord]:
    """Flaky tests, most frequently failing first."""
    return sorted(
        metrics.flaky_tests.values(), key=lambda t: t.failure_ratio, reverse=True
    )


def patterns_by_count(metrics: Metrics) -> Sequence[tuple[str, int]]:
    """Failure patterns, most common first."""
    return sorted(metrics.failure_patterns.items(), key=lambda p: p[1], reverse=True)


def location(record: TestRecord) -> str:
    """``file:line`` for display, with ``?`` for unknown parts."""
    line = "?" if record.line is None else record.line
    return f"{record.file or '?'}:{line}"
