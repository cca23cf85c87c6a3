"""Results view for the most recently recorded run."""

from run_analytics.recorder import TestAnalytics
from run_analytics.reporter import render_results
from run_analytics.views.manifest import ViewManifest


def render_latest_results(analytics: TestAnalytics) -> list[str]:
    """Render the latest run, if one is known."""
    if not analytics.history.runs:
        return ["No test results available"]
    return render_results(analytics.history.runs[-1])


results_view = ViewManifest(title="Test Results", render=render_latest_results)
