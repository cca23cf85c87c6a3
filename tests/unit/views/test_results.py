"""Tests for the latest results view."""

from run_analytics.recorder import TestAnalytics
from run_analytics.testing.factories import TestRunFactory
from run_analytics.views.results import render_latest_results


def test_without_runs(analytics: TestAnalytics) -> None:
    """Reports that nothing is available."""
    assert render_latest_results(analytics) == ["No test results available"]


def test_renders_latest_run(analytics: TestAnalytics) -> None:
    """Renders the most recently recorded run."""
    analytics.record_run(TestRunFactory.build_with_statuses(["pass"]))
    analytics.record_run(TestRunFactory.build_with_statuses(["pass", "fail"]))

    lines = render_latest_results(analytics)

    assert "Total Tests: 2" in lines
    assert "Failed:      1" in lines
