"""CLI entry point for test run analytics."""

import argparse
import asyncio
import logging
import sys
from collections.abc import Sequence
from datetime import datetime
from pathlib import Path

from pydantic import ValidationError

from run_analytics.collector import load_junit_report
from run_analytics.config import AnalyticsConfig
from run_analytics.recorder import TestAnalytics
from run_analytics.reporter import export_html, log_run_summary
from run_analytics.runner import run_test_command
from run_analytics.views.loading import ViewNotFoundError, available_views, load_view

EXIT_OK = 0
EXIT_TESTS_FAILED = 1
EXIT_USAGE = 2


def print_view(analytics: TestAnalytics, key: str) -> None:
    """Render a registered view to stdout."""
    view = load_view(key)
    print("\n".join(view.render(analytics)))


def record_report(
    config: AnalyticsConfig,
    report: Path,
    start_time: datetime | None = None,
    end_time: datetime | None = None,
) -> int:
    """Record a JUnit report into the analytics history and return exit code."""
    log = logging.getLogger("run_analytics")

    try:
        test_run = load_junit_report(report, start_time=start_time, end_time=end_time)
    except (FileNotFoundError, ValueError) as e:
        log.error("%s", e)
        return EXIT_USAGE

    analytics = TestAnalytics(config=config)
    analytics.load_history()
    analytics.record_run(test_run)
    log_run_summary(log, test_run)
    return EXIT_OK


async def run(
    config: AnalyticsConfig,
    command: Sequence[str],
    junit_path: Path,
    show: str | None = None,
    html_report_dir: Path | None = None,
) -> int:
    """Run a test command, record its results and return exit code."""
    log = logging.getLogger("run_analytics")

    if show is not None and show not in (views := available_views()):
        log.error("Unknown view '%s'. Available views: %s", show, ", ".join(views))
        return EXIT_USAGE

    analytics = TestAnalytics(config=config)
    analytics.load_history()

    try:
        outcome = await run_test_command(command, junit_path)
    except (FileNotFoundError, ValueError) as e:
        log.error("%s", e)
        return EXIT_USAGE

    analytics.record_run(outcome.run)
    log_run_summary(log, outcome.run)

    if html_report_dir is not None:
        export_html(outcome.run, html_report_dir)

    if show is not None:
        print_view(analytics, show)

    return EXIT_TESTS_FAILED if outcome.run.failed > 0 else EXIT_OK


def show_view(config: AnalyticsConfig, key: str) -> int:
    """Print a view over the persisted history and return exit code."""
    log = logging.getLogger("run_analytics")

    analytics = TestAnalytics(config=config)
    analytics.load_history()
    try:
        print_view(analytics, key)
    except ViewNotFoundError as e:
        log.error("%s", e)
        return EXIT_USAGE
    return EXIT_OK


def export_report(report: Path, output_dir: Path) -> int:
    """Write an HTML report for a JUnit file and return exit code."""
    log = logging.getLogger("run_analytics")

    try:
        test_run = load_junit_report(report)
    except (FileNotFoundError, ValueError) as e:
        log.error("%s", e)
        return EXIT_USAGE

    print(export_html(test_run, output_dir))
    return EXIT_OK


def strip_separator(command: Sequence[str]) -> Sequence[str]:
    """Drop the ``--`` that separates the test command from our options."""
    if command and command[0] == "--":
        return command[1:]
    return command


def build_config(config_json: str | None, data_dir: Path | None) -> AnalyticsConfig:
    """Build configuration from a JSON object and command-line overrides.

    Every invocation is its own process, so full state is persisted unless the
    JSON configuration says otherwise.
    """
    config = (
        AnalyticsConfig.model_validate_json(config_json)
        if config_json
        else AnalyticsConfig()
    )
    updates: dict[str, object] = {}
    if "persist_state" not in config.model_fields_set:
        updates["persist_state"] = True
    if data_dir is not None:
        updates["data_dir"] = data_dir
    return config.model_copy(update=updates)


def build_parser() -> argparse.ArgumentParser:
    """Create the argument parser with all subcommands."""
    parser = argparse.ArgumentParser(
        description="Track test runs, flaky tests and failure patterns"
    )
    parser.add_argument(
        "--data-dir",
        type=Path,
        help="Directory holding history.json (default: per-user data directory)",
    )
    parser.add_argument(
        "--config",
        help="JSON configuration object (e.g. '{\"max_runs\": 50}')",
    )
    parser.add_argument(
        "-v", "--verbose", action="store_true", help="Enable debug logging"
    )

    subparsers = parser.add_subparsers(dest="subcommand", required=True)

    record_parser = subparsers.add_parser("record", help="Record a JUnit XML report")
    record_parser.add_argument("report", type=Path, help="Path to JUnit XML report")
    record_parser.add_argument(
        "--start-time",
        type=datetime.fromisoformat,
        help="ISO 8601 run start (default: derived from the report)",
    )
    record_parser.add_argument(
        "--end-time",
        type=datetime.fromisoformat,
        help="ISO 8601 run end (default: report modification time)",
    )

    run_parser = subparsers.add_parser(
        "run", help="Run a test command and record its JUnit XML report"
    )
    run_parser.add_argument(
        "--junit-xml",
        type=Path,
        required=True,
        help="Path where the test command writes its JUnit XML report",
    )
    run_parser.add_argument("--show", help="View to print after recording")
    run_parser.add_argument(
        "--html-report-dir", type=Path, help="Directory for an HTML report"
    )
    run_parser.add_argument(
        "command", nargs=argparse.REMAINDER, help="Test command, after '--'"
    )

    show_parser = subparsers.add_parser("show", help="Print an analytics view")
    show_parser.add_argument(
        "view", help="View key (trends, flaky, patterns, dashboard, results)"
    )

    export_parser = subparsers.add_parser(
        "export", help="Export a JUnit XML report as HTML"
    )
    export_parser.add_argument("report", type=Path, help="Path to JUnit XML report")
    export_parser.add_argument(
        "--output-dir",
        type=Path,
        default=Path.cwd() / "test-reports",
        help="Directory for the HTML report (default: ./test-reports)",
    )

    return parser


def main() -> None:
    """CLI entry point."""
    parser = build_parser()
    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        stream=sys.stderr,
    )

    try:
        config = build_config(args.config, args.data_dir)
    except ValidationError as e:
        parser.error(f"invalid --config: {e}")

    if args.subcommand == "record":
        exit_code = record_report(config, args.report, args.start_time, args.end_time)
    elif args.subcommand == "run":
        command = strip_separator(args.command)
        if not command:
            parser.error("run: missing test command after '--'")
        exit_code = asyncio.run(
            run(
                config=config,
                command=command,
                junit_path=args.junit_xml,
                show=args.show,
                html_report_dir=args.html_report_dir,
            )
        )
    elif args.subcommand == "show":
        exit_code = show_view(config, args.view)
    else:
        exit_code = export_report(args.report, args.output_dir)

    sys.exit(exit_code)


if __name__ == "__main__":  # pragma: no cover
    main()
