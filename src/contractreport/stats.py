"""Run statistics accumulated from the lifecycle event stream."""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass
from datetime import datetime

from contractreport.types import TestStatus


@dataclass(slots=True)
class RunStats:
    """Counters and timing of one test run."""

    tests_total: int = 0
    passes: int = 0
    failures: int = 0
    errors: int = 0
    skipped: int = 0
    start_time: datetime | None = None
    end_time: datetime | None = None
    duration: float = 0.0


class StatsAggregator:
    """Owns the :class:`RunStats` of a single reporter.

    Never shared between reporters; callers that want to look at the numbers
    get a copy from :meth:`snapshot`.
    """

    _COUNTERS = {
        TestStatus.PASS: "passes",
        TestStatus.FAIL: "failures",
        TestStatus.ERROR: "errors",
        TestStatus.SKIPPED: "skipped",
    }

    def __init__(self) -> None:
        self._stats = RunStats()

    def on_start(self, timestamp: datetime) -> None:
        self._stats.start_time = timestamp

    def on_outcome(self, status: TestStatus) -> None:
        """Count one finished test under exactly one outcome counter."""
        counter = self._COUNTERS[status]
        setattr(self._stats, counter, getattr(self._stats, counter) + 1)
        self._stats.tests_total += 1

    def on_end(self, timestamp: datetime) -> None:
        self._stats.end_time = timestamp
        if self._stats.start_time is None:
            self._stats.duration = 0.0
        else:
            self._stats.duration = (timestamp - self._stats.start_time).total_seconds()

    def snapshot(self) -> RunStats:
        return dataclasses.replace(self._stats)
