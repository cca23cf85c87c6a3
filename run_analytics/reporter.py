"""Summaries and reports for a single test run."""

import logging
from datetime import datetime
from pathlib import Path

from jinja2 import Environment, FileSystemLoader, select_autoescape

from run_analytics.models.run import TestRun

log = logging.getLogger(__name__)

TEMPLATE_DIR = Path(__file__).parent / "templates"

STATUS_CLASSES = {
    "pass": "passed",
    "fail": "failed",
    "skip": "skipped",
}


def format_duration(seconds: float) -> str:
    """Format a duration for humans (``850 ms``, ``12.30 s``, ``2 min 5 s``)."""
    if seconds < 1:
        return f"{seconds * 1000:.0f} ms"
    if seconds < 60:
        return f"{seconds:.2f} s"
    minutes, remaining = divmod(int(seconds), 60)
    return f"{minutes} min {remaining} s"


def summarize_run(run: TestRun) -> tuple[int, str]:
    """One-line summary of a run and the log level it deserves."""
    summary = (
        f"Tests: {run.total} total, {run.passed} passed, "
        f"{run.failed} failed, {run.skipped} skipped"
    )
    if (duration := run.duration) is not None:
        summary += f" (Duration: {format_duration(duration)})"

    if run.failed > 0:
        return logging.ERROR, summary
    if run.skipped > 0:
        return logging.WARNING, summary
    return logging.INFO, summary


def log_run_summary(log: logging.Logger, run: TestRun) -> None:
    """Log the run summary at a level matching its outcome."""
    level, summary = summarize_run(run)
    log.log(level, "%s", summary)


def render_results(run: TestRun) -> list[str]:
    """Detailed text view of a run, listing every failed test."""
    lines = [
        "Test Results",
        "=" * 50,
        "",
        f"Total Tests: {run.total}",
        f"Passed:      {run.passed}",
        f"Failed:      {run.failed}",
        f"Skipped:     {run.skipped}",
    ]
    if (duration := run.duration) is not None:
        lines.append(f"Duration:    {format_duration(duration)}")

    lines += ["", "Failed Tests:", "-" * 50]

    failed = [test for test in run.tests if test.status == "fail"]
    for test in failed:
        lines += [
            "",
            f"Test:  {test.name}",
            f"File:  {test.file}",
            f"Line:  {test.line or 0}",
        ]
        if test.message:
            lines.append(f"Error: {test.message}")

    if not failed:
        lines += ["", "No failed tests!"]

    return lines


def export_html(run: TestRun, output_dir: Path, now: datetime | None = None) -> Path:
    """Write an HTML report for the run and return its path."""
    now = now or datetime.now()
    output_dir.mkdir(parents=True, exist_ok=True)
    report_file = output_dir / f"test-report-{now:%Y%m%d-%H%M%S}.html"

    env = Environment(
        loader=FileSystemLoader(TEMPLATE_DIR),
        autoescape=select_autoescape(["html", "j2"]),
    )
    template = env.get_template("report.html.j2")
    started = run.start_time or run.timestamp or now
    report_file.write_text(
        template.render(
            run=run,
            date=started.astimezone().strftime("%Y-%m-%d %H:%M:%S"),
            duration=format_duration(run.duration or 0),
            status_classes=STATUS_CLASSES,
        ),
        encoding="utf-8",
    )

    log.info("Test report exported to: %s", report_file)
    return report_file
