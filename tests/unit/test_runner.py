"""Tests for running a test command."""

import os
import sys
from pathlib import Path

import pytest

from run_analytics.runner import run_test_command

REPORT = (
    '<testsuite name="s" tests="2">'
    '<testcase classname="tests.test_a" name="ok"/>'
    '<testcase classname="tests.test_a" name="bad"><failure message="nope"/></testcase>'
    "</testsuite>"
)


def python_command(script: str) -> list[str]:
    """Command running an inline Python script."""
    return [sys.executable, "-c", script]


async def test_collects_report_written_by_command(tmp_path: Path) -> None:
    """Loads the report and times the run around the command."""
    report = tmp_path / "report.xml"
    script = (
        f"import pathlib, sys; pathlib.Path({str(report)!r}).write_text({REPORT!r}); "
        "sys.exit(1)"
    )

    outcome = await run_test_command(python_command(script), report)

    assert outcome.returncode == 1
    assert outcome.run.total == 2
    assert outcome.run.failed == 1
    assert outcome.run.start_time is not None
    assert outcome.run.end_time is not None
    assert outcome.run.end_time >= outcome.run.start_time


async def test_resolves_relative_report_against_cwd(tmp_path: Path) -> None:
    """A relative report path is looked up in the command's directory."""
    script = f"import pathlib; pathlib.Path('out.xml').write_text({REPORT!r})"

    outcome = await run_test_command(
        python_command(script), Path("out.xml"), cwd=tmp_path
    )

    assert outcome.returncode == 0
    assert outcome.run.passed == 1


async def test_raises_when_no_report_written(tmp_path: Path) -> None:
    """Raises FileNotFoundError when the command produced no report."""
    with pytest.raises(FileNotFoundError, match="Report file not found"):
        await run_test_command(python_command("pass"), tmp_path / "missing.xml")


async def test_raises_for_empty_command(tmp_path: Path) -> None:
    """Raises ValueError when no command is given."""
    with pytest.raises(ValueError, match="No test command"):
        await run_test_command([], tmp_path / "report.xml")


async def test_raises_when_report_left_from_earlier_run(tmp_path: Path) -> None:
    """A report the command did not rewrite is not collected again."""
    report = tmp_path / "report.xml"
    report.write_text(REPORT)

    with pytest.raises(ValueError, match="was not rewritten"):
        await run_test_command(python_command("import sys; sys.exit(3)"), report)


async def test_collects_rewritten_report(tmp_path: Path) -> None:
    """A report overwritten by the command replaces the earlier one."""
    report = tmp_path / "report.xml"
    report.write_text("<testsuite/>")
    os.utime(report, (0, 0))
    script = f"import pathlib; pathlib.Path({str(report)!r}).write_text({REPORT!r})"

    outcome = await run_test_command(python_command(script), report)

    assert outcome.run.total == 2
