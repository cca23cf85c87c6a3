"""Flaky tests view."""

from run_analytics.recorder import TestAnalytics
from run_analytics.views.manifest import ViewManifest
from run_analytics.views.ranking import flaky_by_failure_ratio, location

STATUS_SYMBOLS = {
    "pass": "✅",
    "fail": "❌",
    "skip": "⏭️",
}

RECENT_RESULTS = 6


def render_flaky_tests(analytics: TestAnalytics) -> list[str]:
    """Render every flagged test with its stats and latest results."""
    flaky = flaky_by_failure_ratio(analytics.metrics)
    lines = [
        "Flaky Tests Analysis",
        "=" * 60,
        "",
        f"Total Flaky Tests: {len(flaky)}",
        "",
    ]

    for test in flaky:
        lines += [
            f"Test: {test.name or 'Unknown test'}",
            f"File: {location(test)}",
            f"Stats: {test.runs} runs, {test.passes} passes, "
            f"{test.failures} failures, {test.pass_percentage:.1f}% pass rate",
        ]
        if test.history:
            recent = reversed(test.history[-RECENT_RESULTS:])
            lines += [
                "Recent results:",
                " ".join(STATUS_SYMBOLS.get(entry.status, "?") for entry in recent),
            ]
        lines.append("-" * 40)

    if not flaky:
        lines.append("No flaky tests detected")

    return lines


flaky_view = ViewManifest(title="Flaky Tests", render=render_flaky_tests)
