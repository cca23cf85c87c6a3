"""Recompute derived metrics from the recorded run history."""

from collections import Counter
from collections.abc import Sequence

from run_analytics.models.history import Metrics
from run_analytics.models.run import TestRun


def update_metrics(
    metrics: Metrics, runs: Sequence[TestRun], recent_window: int = 10
) -> None:
    """Recompute run-derived metrics in place.

    Each run weighs the same in ``pass_rate`` regardless of how many tests it
    contained. Runs without tests count toward the overall denominator but
    are left out of ``recent_pass_rate``. Flaky-test and failure-pattern
    tables are left untouched.
    """
    runs = list(runs)
    recent_start = len(runs) - min(recent_window, len(runs))

    total_duration = 0.0
    pass_total = 0.0
    recent_pass_total = 0.0
    recent_count = 0
    frequency: Counter[str] = Counter()

    for index, run in enumerate(runs):
        if (duration := run.duration) is not None:
            total_duration += duration

        if (ratio := run.pass_ratio) is not None:
            pass_total += ratio
            if index >= recent_start:
                recent_pass_total += ratio
                recent_count += 1

        if run.timestamp is not None:
            frequency[run.timestamp.astimezone().strftime("%Y-%m-%d")] += 1

    metrics.total_runs = len(runs)
    metrics.total_duration = total_duration
    metrics.pass_rate = pass_total / len(runs) * 100 if runs else 0.0
    metrics.recent_pass_rate = (
        recent_pass_total / recent_count * 100 if recent_count else 0.0
    )
    metrics.run_frequency = dict(frequency)
