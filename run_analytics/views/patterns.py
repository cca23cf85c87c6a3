"""Failure patterns view."""

from run_analytics.recorder import TestAnalytics
from run_analytics.views.manifest import ViewManifest
from run_analytics.views.ranking import patterns_by_count


def render_failure_patterns(analytics: TestAnalytics) -> list[str]:
    """Render every failure pattern with the tests that exhibit it."""
    patterns = patterns_by_count(analytics.metrics)
    lines = [
        "Failure Pattern Analysis",
        "=" * 60,
        "",
        f"Total Unique Patterns: {len(patterns)}",
        "",
    ]

    for pattern, count in patterns:
        lines += [f"Occurrences: {count}", f"Pattern: {pattern}"]

        affected = [
            (test, test.failure_messages[pattern])
            for test in analytics.history.tests.values()
            if pattern in test.failure_messages
        ]
        if affected:
            lines.append("Affected tests:")
            lines += [
                f"- {test.name or 'Unknown'} ({test.file or '?'}) - "
                f"{occurrences} occurrences"
                for test, occurrences in affected
            ]
        lines.append("-" * 40)

    if not patterns:
        lines.append("No failure patterns found")

    return lines


patterns_view = ViewManifest(title="Failure Patterns", render=render_failure_patterns)
