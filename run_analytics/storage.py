"""JSON persistence of the analytics history snapshot."""

import logging
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Literal

from pydantic import Field, ValidationError

from run_analytics.models.base import Model
from run_analytics.models.history import FileTally, Metrics, TestRecord
from run_analytics.models.run import TestRun

log = logging.getLogger(__name__)

SCHEMA_VERSION = 1


class SavedTest(Model):
    """Reduced form of a flaky test record kept in the snapshot."""

    name: str
    file: str
    line: int | None = None
    runs: int = 0
    passes: int = 0
    failures: int = 0
    flaky: bool = True

    @classmethod
    def from_record(cls, record: TestRecord) -> "SavedTest":
        """Reduce a full record to the persisted subset."""
        return cls(
            name=record.name,
            file=record.file,
            line=record.line,
            runs=record.runs,
            passes=record.passes,
            failures=record.failures,
            flaky=record.flaky,
        )

    def to_record(self) -> TestRecord:
        """Rebuild a record without per-run history."""
        return TestRecord(
            name=self.name,
            file=self.file,
            line=self.line,
            runs=self.runs,
            passes=self.passes,
            failures=self.failures,
            flaky=self.flaky,
        )


class HistorySnapshot(Model):
    """Document written to ``history.json``."""

    schema_version: int = SCHEMA_VERSION
    metrics: Metrics = Field(default_factory=Metrics)
    tests: Mapping[str, SavedTest] = Field(default_factory=dict)
    runs: Sequence[TestRun] = Field(default_factory=list)
    records: Mapping[str, TestRecord] = Field(
        default_factory=dict, description="Every test record, when state is persisted"
    )
    files: Mapping[str, FileTally] = Field(default_factory=dict)
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


@dataclass(frozen=True, kw_only=True)
class StoreResult:
    """Outcome of a save or load; failures are reported, never raised."""

    status: Literal["saved", "loaded", "missing", "error"]
    path: Path
    error: str | None = None
    snapshot: HistorySnapshot | None = None

    @property
    def ok(self) -> bool:
        """Whether the operation left storage in the expected state."""
        return self.status != "error"


@dataclass(frozen=True, kw_only=True)
class HistoryStore:
    """Reads and writes the snapshot file at a fixed path."""

    path: Path

    def save(self, snapshot: HistorySnapshot) -> StoreResult:
        """Write the snapshot, creating the parent directory if needed.

        The file is written in place; an interrupted write can leave it
        truncated, which a later load reports as an error.
        """
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self.path.write_text(snapshot.model_dump_json(indent=2), encoding="utf-8")
        except OSError as e:
            return StoreResult(status="error", path=self.path, error=str(e))

        log.debug("Saved analytics history to %s", self.path)
        return StoreResult(status="saved", path=self.path, snapshot=snapshot)

    def load(self) -> StoreResult:
        """Read and validate the snapshot."""
        try:
            content = self.path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return StoreResult(status="missing", path=self.path)
        except (OSError, UnicodeDecodeError) as e:
            return StoreResult(status="error", path=self.path, error=str(e))

        try:
            snapshot = HistorySnapshot.model_validate_json(content)
        except ValidationError as e:
            return StoreResult(
                status="error",
                path=self.path,
                error=f"Invalid history file: {e.error_count()} validation error(s)",
            )

        if snapshot.schema_version > SCHEMA_VERSION:
            return StoreResult(
                status="error",
                path=self.path,
                error=(
                    f"Unsupported schema version {snapshot.schema_version} "
                    f"(expected <= {SCHEMA_VERSION})"
                ),
            )

        log.debug("Loaded analytics history from %s", self.path)
        return StoreResult(status="loaded", path=self.path, snapshot=snapshot)
