"""Models for test runs produced by an external test runner."""

from collections.abc import Sequence
from datetime import datetime
from typing import Literal

from pydantic import Field

from run_analytics.models.base import Model

type TestStatus = Literal["pass", "fail", "skip"]


class TestResult(Model):
    """Outcome of a single test within a run."""

    __test__ = False

    name: str = Field(..., description="Human-readable test name")
    file: str = Field(..., description="Path of the file defining the test")
    line: int | None = Field(default=None, description="Line of the test definition")
    status: TestStatus = Field(..., description="Normalized test status")
    message: str | None = Field(default=None, description="Failure message, if any")

    @property
    def test_id(self) -> str:
        """Identity of the test across runs (``file:line``)."""
        return f"{self.file}:{self.line or 0}"


class TestRun(Model):
    """One execution of a test suite (or a subset of it)."""

    __test__ = False

    tests: Sequence[TestResult] = Field(default_factory=list)
    total: int = Field(default=0, ge=0)
    passed: int = Field(default=0, ge=0)
    failed: int = Field(default=0, ge=0)
    skipped: int = Field(default=0, ge=0)
    start_time: datetime | None = None
    end_time: datetime | None = None
    timestamp: datetime | None = Field(
        default=None, description="When the run was recorded"
    )

    @classmethod
    def from_results(
        cls,
        tests: Sequence[TestResult],
        start_time: datetime | None = None,
        end_time: datetime | None = None,
    ) -> "TestRun":
        """Build a run whose counts are derived from its results."""
        return cls(
            tests=list(tests),
            total=len(tests),
            passed=sum(1 for t in tests if t.status == "pass"),
            failed=sum(1 for t in tests if t.status == "fail"),
            skipped=sum(1 for t in tests if t.status == "skip"),
            start_time=start_time,
            end_time=end_time,
        )

    @property
    def duration(self) -> float | None:
        """Wall-clock duration in seconds, when both times are known."""
        if self.start_time is None or self.end_time is None:
            return None
        return (self.end_time - self.start_time).total_seconds()

    @property
    def pass_ratio(self) -> float | None:
        """Fraction of tests that passed, or None for a run without tests."""
        if self.total <= 0:
            return None
        return self.passed / self.total
