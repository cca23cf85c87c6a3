"""Tests for history persistence."""

import json
import logging
from datetime import datetime
from pathlib import Path

import pytest

from run_analytics.config import AnalyticsConfig
from run_analytics.models.run import TestResult, TestRun
from run_analytics.recorder import TestAnalytics
from run_analytics.storage import SCHEMA_VERSION, HistorySnapshot, HistoryStore
from run_analytics.testing.factories import TestRunFactory


def record_flaky_history(analytics: TestAnalytics) -> None:
    """Record runs leaving one flaky and one stable test."""
    for status in ("pass", "fail", "pass"):
        analytics.record_run(
            TestRun.from_results(
                [
                    TestResult(
                        name="test_flaky",
                        file="tests/test_a.py",
                        line=3,
                        status=status,
                        message="timeout after 30s" if status == "fail" else None,
                    ),
                    TestResult(
                        name="test_stable",
                        file="tests/test_a.py",
                        line=9,
                        status="pass",
                    ),
                ]
            )
        )


class TestHistoryStore:
    """Tests for HistoryStore."""

    def test_save_creates_directory(self, tmp_path: Path) -> None:
        """Creates missing parent directories before writing."""
        store = HistoryStore(path=tmp_path / "nested" / "dir" / "history.json")

        result = store.save(HistorySnapshot())

        assert result.status == "saved"
        assert store.path.exists()

    def test_load_missing_file(self, tmp_path: Path) -> None:
        """A missing file is reported as missing without a snapshot."""
        result = HistoryStore(path=tmp_path / "history.json").load()

        assert result.status == "missing"
        assert result.ok
        assert result.snapshot is None

    @pytest.mark.parametrize(
        "content",
        [
            "{not json",
            '{"metrics": {"total_runs": "many"}}',
            "",
        ],
    )
    def test_load_corrupt_file(self, tmp_path: Path, content: str) -> None:
        """Corrupt content is reported as an error instead of raised."""
        path = tmp_path / "history.json"
        path.write_text(content)

        result = HistoryStore(path=path).load()

        assert result.status == "error"
        assert not result.ok
        assert result.snapshot is None

    def test_load_rejects_newer_schema(self, tmp_path: Path) -> None:
        """Files written by a newer schema are not interpreted."""
        path = tmp_path / "history.json"
        path.write_text(json.dumps({"schema_version": SCHEMA_VERSION + 1}))

        result = HistoryStore(path=path).load()

        assert result.status == "error"
        assert result.error is not None
        assert "Unsupported schema version" in result.error

    def test_load_without_schema_version(self, tmp_path: Path) -> None:
        """Files without a version tag are read as the current version."""
        path = tmp_path / "history.json"
        path.write_text(json.dumps({"metrics": {"total_runs": 4}, "tests": {}}))

        result = HistoryStore(path=path).load()

        assert result.status == "loaded"
        assert result.snapshot is not None
        assert result.snapshot.metrics.total_runs == 4


class TestSaveHistory:
    """Tests for TestAnalytics.save_history."""

    def test_document_shape(
        self, analytics: TestAnalytics, config: AnalyticsConfig
    ) -> None:
        """Saves metrics plus only the flaky subset of tests."""
        record_flaky_history(analytics)

        document = json.loads(config.history_path.read_text())

        assert document["schema_version"] == SCHEMA_VERSION
        assert set(document) == {
            "schema_version",
            "metrics",
            "tests",
            "runs",
            "records",
            "files",
            "timestamp",
        }
        assert list(document["tests"]) == ["tests/test_a.py:3"]
        assert document["tests"]["tests/test_a.py:3"] == {
            "name": "test_flaky",
            "file": "tests/test_a.py",
            "line": 3,
            "runs": 3,
            "passes": 2,
            "failures": 1,
            "flaky": True,
        }
        assert document["metrics"]["total_runs"] == 3
        assert document["runs"] == []
        assert document["records"] == {}
        assert document["files"] == {}

    def test_persists_state_when_enabled(self, tmp_path: Path) -> None:
        """Runs, records and file tallies are included only when configured."""
        config = AnalyticsConfig(data_dir=tmp_path, persist_state=True)
        analytics = TestAnalytics(config=config)
        analytics.record_run(TestRunFactory.build_with_statuses(["pass", "fail"]))

        document = json.loads(config.history_path.read_text())

        assert len(document["runs"]) == 1
        assert document["runs"][0]["failed"] == 1
        assert set(document["records"]) == {"tests/test_0.py:1", "tests/test_1.py:2"}
        assert document["records"]["tests/test_1.py:2"]["last_status"] == "fail"
        assert document["files"]["tests/test_0.py"]["passes"] == 1


class TestLoadHistory:
    """Tests for TestAnalytics.load_history."""

    def test_round_trip_restores_metrics_and_flaky_tests(
        self, analytics: TestAnalytics, config: AnalyticsConfig, now: datetime
    ) -> None:
        """A fresh instance restores metrics and the flaky subset exactly."""
        record_flaky_history(analytics)
        restored = TestAnalytics(config=config, clock=lambda: now)

        result = restored.load_history()

        assert result.status == "loaded"
        assert restored.metrics == analytics.metrics
        assert set(restored.history.tests) == {"tests/test_a.py:3"}
        assert restored.history.tests["tests/test_a.py:3"] == (
            analytics.history.tests["tests/test_a.py:3"]
        )
        assert (
            restored.history.tests["tests/test_a.py:3"]
            is restored.metrics.flaky_tests["tests/test_a.py:3"]
        )
        assert len(restored.history.runs) == 0

    def test_restored_records_keep_accumulating(
        self, analytics: TestAnalytics, config: AnalyticsConfig
    ) -> None:
        """Tests seen again after a restore continue from the saved counts."""
        record_flaky_history(analytics)
        restored = TestAnalytics(config=config)
        restored.load_history()

        restored.record_run(
            TestRun.from_results(
                [
                    TestResult(
                        name="test_flaky", file="tests/test_a.py", line=3, status="fail"
                    )
                ]
            )
        )

        record = restored.metrics.flaky_tests["tests/test_a.py:3"]
        assert record.runs == 4
        assert record.failures == 2
        assert restored.metrics.failure_patterns["timeout after Ns"] == 1

    def test_restores_persisted_runs(self, tmp_path: Path) -> None:
        """Saved runs are restored within the configured capacity."""
        config = AnalyticsConfig(data_dir=tmp_path, persist_state=True)
        analytics = TestAnalytics(config=config)
        for _ in range(3):
            analytics.record_run(TestRunFactory.build_with_statuses(["pass"]))

        restored = TestAnalytics(config=config.model_copy(update={"max_runs": 2}))
        restored.load_history()

        assert len(restored.history.runs) == 2

    def test_missing_file_is_noop(self, analytics: TestAnalytics) -> None:
        """Without a history file the defaults are kept."""
        result = analytics.load_history()

        assert result.status == "missing"
        assert analytics.metrics.total_runs == 0
        assert analytics.history.tests == {}

    def test_corrupt_file_keeps_state_and_logs(
        self,
        analytics: TestAnalytics,
        config: AnalyticsConfig,
        caplog: pytest.LogCaptureFixture,
    ) -> None:
        """A corrupt file leaves in-memory state untouched and is logged."""
        analytics.record_run(TestRunFactory.build_with_statuses(["pass"]))
        config.history_path.write_text("{corrupt")

        with caplog.at_level(logging.WARNING):
            result = analytics.load_history()

        assert result.status == "error"
        assert analytics.metrics.total_runs == 1
        assert "Could not load analytics history" in caplog.text

    def test_restored_state_detects_flakiness_across_sessions(
        self, tmp_path: Path
    ) -> None:
        """Each session continues from the full state saved by the previous one."""
        config = AnalyticsConfig(data_dir=tmp_path, persist_state=True)
        for status in ("fail", "pass", "fail"):
            session = TestAnalytics(config=config)
            session.load_history()
            session.record_run(
                TestRun.from_results(
                    [
                        TestResult(
                            name="test_m", file="tests/test_m.py", line=3, status=status
                        )
                    ]
                )
            )

        restored = TestAnalytics(config=config)
        restored.load_history()

        record = restored.history.tests["tests/test_m.py:3"]
        assert (record.runs, record.passes, record.failures) == (3, 1, 2)
        assert [entry.status for entry in record.history] == ["fail", "pass", "fail"]
        assert restored.metrics.flaky_tests["tests/test_m.py:3"] is record
        assert restored.metrics.total_runs == 3
        assert restored.history.files["tests/test_m.py"].tests == 3
        assert len(restored.history.runs) == 3
