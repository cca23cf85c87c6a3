"""Collect test runs from JUnit XML reports."""

import logging
import xml.etree.ElementTree as ET
from datetime import datetime, timedelta, timezone
from pathlib import Path

from run_analytics.models.run import TestResult, TestRun, TestStatus

log = logging.getLogger(__name__)


def parse_junit_xml(xml_content: str) -> TestRun:
    """Parse JUnit XML content into a run without timing information.

    Handles both ``<testsuites>`` wrappers and a standalone ``<testsuite>``
    root, as written by pytest, Jest and Vitest.

    Raises:
        ValueError: If the content is not a JUnit XML document

    """
    return _collect(_parse_root(xml_content))


def load_junit_report(
    path: Path,
    start_time: datetime | None = None,
    end_time: datetime | None = None,
) -> TestRun:
    """Load a JUnit XML report file as a run.

    Without explicit times, the run is assumed to have ended when the report
    was written and to have lasted as long as its suites report. Times
    without a timezone are taken as local time.

    Raises:
        FileNotFoundError: If the report does not exist
        ValueError: If the report cannot be parsed

    """
    if not path.is_file():
        raise FileNotFoundError(f"Report file not found: {path}")

    root = _parse_root(path.read_text(encoding="utf-8"))
    run = _collect(root)

    if end_time is None:
        end_time = datetime.fromtimestamp(path.stat().st_mtime, tz=timezone.utc)
    end_time = _aware(end_time)
    if start_time is None:
        start_time = end_time - timedelta(seconds=_suite_seconds(root))
    start_time = _aware(start_time)

    log.debug("Loaded %d test result(s) from %s", run.total, path)
    return run.model_copy(update={"start_time": start_time, "end_time": end_time})


def _aware(value: datetime) -> datetime:
    return value if value.tzinfo is not None else value.astimezone()


def _parse_root(xml_content: str) -> ET.Element:
    try:
        root = ET.fromstring(xml_content)
    except ET.ParseError as e:
        raise ValueError(f"Invalid JUnit XML: {e}") from e

    if root.tag not in ("testsuites", "testsuite"):
        raise ValueError(f"Invalid JUnit XML: unexpected root element <{root.tag}>")
    return root


def _collect(root: ET.Element) -> TestRun:
    results = [
        _parse_testcase(case, suite)
        for suite in root.iter("testsuite")
        for case in suite.findall("testcase")
    ]
    return TestRun.from_results(results)


def _parse_testcase(case: ET.Element, suite: ET.Element) -> TestResult:
    status: TestStatus = "pass"
    message: str | None = None

    for tag in ("failure", "error"):
        if (element := case.find(tag)) is not None:
            status = "fail"
            message = element.get("message") or (element.text or "").strip() or None
            break
    else:
        if case.find("skipped") is not None:
            status = "skip"

    line = case.get("line") or case.get("lineno") or ""
    return TestResult(
        name=case.get("name", "unknown"),
        file=_test_file(case, suite),
        line=int(line) if line.isdigit() else None,
        status=status,
        message=message,
    )


def _test_file(case: ET.Element, suite: ET.Element) -> str:
    """Best-effort path of the file defining a test case.

    Runners that only report a dotted classname get it converted, so
    ``tests.unit.test_cli.TestMain`` becomes ``tests/unit/test_cli.py``.
    """
    if explicit := case.get("file") or suite.get("file"):
        return explicit

    classname = case.get("classname", "")
    for candidate in (classname, suite.get("name", "")):
        if "/" in candidate:
            return candidate

    if not classname:
        return "unknown"

    parts = classname.split(".")
    while len(parts) > 1 and parts[-1][:1].isupper():
        parts.pop()
    return "/".join(parts) + ".py"


def _suite_seconds(root: ET.Element) -> float:
    suites = [root] if root.tag == "testsuite" else root.findall("testsuite")
    total = 0.0
    for suite in suites:
        try:
            total += float(suite.get("time", 0))
        except ValueError:
            continue
    return total
