"""In-memory analytics state accumulated across recorded runs."""

from collections import deque
from dataclasses import dataclass, field
from datetime import datetime

from run_analytics.models.run import TestRun, TestStatus


@dataclass(frozen=True, kw_only=True)
class HistoryEntry:
    """One observed outcome of a test."""

    timestamp: datetime
    status: TestStatus
    message: str | None = None


@dataclass(kw_only=True)
class TestRecord:
    """Rolling statistics for a single test identity (``file:line``)."""

    __test__ = False

    name: str
    file: str
    line: int | None = None
    runs: int = 0
    passes: int = 0
    failures: int = 0
    history: list[HistoryEntry] = field(default_factory=list)
    last_status: TestStatus | None = None
    flaky: bool = False
    failure_messages: dict[str, int] = field(default_factory=dict)

    @property
    def failure_ratio(self) -> float:
        """Share of runs that failed; 0 before the first run."""
        return self.failures / self.runs if self.runs else 0.0

    @property
    def pass_percentage(self) -> float:
        """Share of runs that passed, as a percentage."""
        return self.passes / max(self.runs, 1) * 100


@dataclass(kw_only=True)
class FileTally:
    """Per-file totals, independent of the per-test table."""

    tests: int = 0
    passes: int = 0
    failures: int = 0
    last_run: datetime | None = None


@dataclass(kw_only=True)
class Metrics:
    """Derived metrics over the recorded run history.

    ``flaky_tests`` and ``failure_patterns`` only ever grow; every other field
    is recomputed from the run history after each recorded run.
    """

    total_runs: int = 0
    total_duration: float = 0.0
    pass_rate: float = 0.0
    recent_pass_rate: float = 0.0
    flaky_tests: dict[str, TestRecord] = field(default_factory=dict)
    failure_patterns: dict[str, int] = field(default_factory=dict)
    run_frequency: dict[str, int] = field(default_factory=dict)


@dataclass(kw_only=True)
class RunHistory:
    """Bounded run history plus the per-test and per-file tables."""

    max_runs: int = 100
    runs: deque[TestRun] = field(init=False)
    files: dict[str, FileTally] = field(default_factory=dict)
    tests: dict[str, TestRecord] = field(default_factory=dict)

    def __post_init__(self) -> None:
        self.runs = deque(maxlen=self.max_runs)
