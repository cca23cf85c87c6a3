"""Run a test command and collect the run it produced."""

import asyncio
import logging
from collections.abc import Sequence
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path

from run_analytics.collector import load_junit_report
from run_analytics.models.run import TestRun

log = logging.getLogger(__name__)


@dataclass(frozen=True, kw_only=True)
class CommandOutcome:
    """A finished test command and the run parsed from its report."""

    returncode: int
    run: TestRun


async def run_test_command(
    command: Sequence[str],
    junit_path: Path,
    cwd: Path | None = None,
) -> CommandOutcome:
    """Execute a test command and load the JUnit report it writes.

    A non-zero exit status is expected when tests fail and is only reported.

    Args:
        command: Program and arguments (e.g. ``["pytest", "--junitxml=out.xml"]``)
        junit_path: Where the command writes its JUnit XML report
        cwd: Working directory for the command

    Returns:
        Exit status and the run, timed around the command

    Raises:
        FileNotFoundError: If the command does not exist or wrote no report
        ValueError: If the report cannot be parsed or is left over from an
            earlier run

    """
    if not command:
        raise ValueError("No test command given")

    report = junit_path if cwd is None or junit_path.is_absolute() else cwd / junit_path
    previous_mtime = report.stat().st_mtime_ns if report.exists() else None

    log.info("Running test command: %s", " ".join(command))
    start_time = datetime.now(timezone.utc)
    process = await asyncio.create_subprocess_exec(*command, cwd=cwd)
    returncode = await process.wait()
    end_time = datetime.now(timezone.utc)
    log.info(
        "Test command exited with status %d after %.2fs",
        returncode,
        (end_time - start_time).total_seconds(),
    )

    if report.exists() and report.stat().st_mtime_ns == previous_mtime:
        raise ValueError(f"Report {report} was not rewritten by the test command")

    run = load_junit_report(report, start_time=start_time, end_time=end_time)
    return CommandOutcome(returncode=returncode, run=run)
