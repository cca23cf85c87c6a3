"""Record test runs and maintain per-test and per-file statistics."""

import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import datetime, timezone

from run_analytics.config import AnalyticsConfig
from run_analytics.metrics import update_metrics
from run_analytics.models.history import (
    FileTally,
    HistoryEntry,
    Metrics,
    RunHistory,
    TestRecord,
)
from run_analytics.models.run import TestResult, TestRun
from run_analytics.patterns import extract_failure_pattern
from run_analytics.storage import HistorySnapshot, HistoryStore, SavedTest, StoreResult

log = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(kw_only=True)
class TestAnalytics:
    """Owns the analytics state for one process.

    All operations are synchronous and expect to be called from a single
    thread, one finished run at a time.
    """

    __test__ = False

    config: AnalyticsConfig = field(default_factory=AnalyticsConfig)
    clock: Callable[[], datetime] = field(default=_utcnow, repr=False)
    history: RunHistory = field(init=False)
    metrics: Metrics = field(default_factory=Metrics)

    def __post_init__(self) -> None:
        self.history = RunHistory(max_runs=self.config.max_runs)

    @property
    def store(self) -> HistoryStore:
        """Store backing this instance's history file."""
        return HistoryStore(path=self.config.history_path)

    def record_run(self, run: TestRun | None) -> StoreResult | None:
        """Add a finished run to the history and persist the summary.

        Runs without tests are ignored and ``None`` is returned. Otherwise the
        result of saving the snapshot is returned.
        """
        if run is None or not run.tests:
            log.debug("Ignoring run without tests")
            return None

        if run.timestamp is None:
            run = run.model_copy(update={"timestamp": self.clock()})

        self.history.runs.append(run)
        self.update_metrics()

        for result in run.tests:
            self.process_test(result)

        log.info(
            "Recorded run: %d test(s), %d passed, %d failed, %d skipped",
            run.total,
            run.passed,
            run.failed,
            run.skipped,
        )
        return self.save_history()

    def process_test(self, result: TestResult) -> TestRecord:
        """Fold a single test result into its record and file tally."""
        test_id = result.test_id
        record = self.history.tests.get(test_id)
        if record is None:
            record = TestRecord(name=result.name, file=result.file, line=result.line)
            self.history.tests[test_id] = record

        record.runs += 1
        if result.status == "pass":
            record.passes += 1
        elif result.status == "fail":
            record.failures += 1
            pattern = extract_failure_pattern(
                result.message, self.config.pattern_max_length
            )
            record.failure_messages[pattern] = (
                record.failure_messages.get(pattern, 0) + 1
            )
            self.metrics.failure_patterns[pattern] = (
                self.metrics.failure_patterns.get(pattern, 0) + 1
            )

        # Once flagged, a test stays flaky even if later runs are stable
        if record.last_status is not None and record.last_status != result.status:
            if not record.flaky:
                log.info("Test became flaky: %s", test_id)
            record.flaky = True
            self.metrics.flaky_tests[test_id] = record

        record.last_status = result.status
        record.history.append(
            HistoryEntry(
                timestamp=self.clock(), status=result.status, message=result.message
            )
        )
        del record.history[: -self.config.max_test_history]

        tally = self.history.files.setdefault(result.file, FileTally())
        tally.tests += 1
        if result.status == "pass":
            tally.passes += 1
        elif result.status == "fail":
            tally.failures += 1
        tally.last_run = self.clock()

        return record

    def update_metrics(self) -> None:
        """Recompute run-derived metrics from the current history."""
        update_metrics(self.metrics, self.history.runs, self.config.recent_window)

    def snapshot(self) -> HistorySnapshot:
        """Build the document persisted between sessions.

        By default only metrics and the flaky subset are kept. With
        ``persist_state`` the runs, every test record and the file tallies are
        kept as well, so a later process continues where this one stopped.
        """
        persist_state = self.config.persist_state
        return HistorySnapshot(
            metrics=self.metrics,
            tests={
                test_id: SavedTest.from_record(record)
                for test_id, record in self.metrics.flaky_tests.items()
            },
            runs=list(self.history.runs) if persist_state else [],
            records=self.history.tests if persist_state else {},
            files=self.history.files if persist_state else {},
            timestamp=self.clock(),
        )

    def save_history(self) -> StoreResult:
        """Persist the snapshot; failures are logged and returned."""
        result = self.store.save(self.snapshot())
        if not result.ok:
            log.warning("Could not save analytics history: %s", result.error)
        return result

    def load_history(self) -> StoreResult:
        """Restore analytics state from disk, if a snapshot exists.

        A missing or unreadable file leaves the in-memory state untouched.
        """
        result = self.store.load()
        if result.status == "error":
            log.warning("Could not load analytics history: %s", result.error)
        if result.snapshot is None:
            return result

        snapshot = result.snapshot
        self.metrics = snapshot.metrics
        self.history.tests.update(snapshot.records)
        self.history.files.update(snapshot.files)
        for test_id, saved in snapshot.tests.items():
            record = (
                self.history.tests.get(test_id)
                or self.metrics.flaky_tests.get(test_id)
                or saved.to_record()
            )
            self.history.tests[test_id] = record
            if record.flaky:
                self.metrics.flaky_tests[test_id] = record

        self.history.runs.extend(snapshot.runs)
        log.debug(
            "Restored %d run(s), %d test record(s) and %d flaky test(s)",
            len(snapshot.runs),
            len(self.history.tests),
            len(self.metrics.flaky_tests),
        )
        return result
