"""Base reporter protocol and the shared file reporter machinery."""

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import UTC, datetime
from pathlib import Path
from typing import Any, Protocol

from contractreport.events import EventEmitter
from contractreport.records import TestRecord
from contractreport.sink import OutputSink
from contractreport.stats import RunStats, StatsAggregator
from contractreport.types import Event, TestStatus

logger = logging.getLogger(__name__)

Callback = Callable[[], Any]


class Reporter(Protocol):
    """Protocol defining the interface for report writers.

    ``start`` and ``end`` are async because they touch the file system; the
    optional ``callback`` fires once the reporter is done with the event,
    whether or not its I/O succeeded. Per-test hooks are plain methods.
    """

    async def on_start(self, run_info: Any = None, callback: Callback | None = None) -> None:
        """Called once before any test event."""
        ...

    def on_test_start(self, record: TestRecord) -> None:
        """Called when a test begins."""
        ...

    def on_test_pass(self, record: TestRecord) -> None: ...

    def on_test_fail(self, record: TestRecord) -> None: ...

    def on_test_skip(self, record: TestRecord) -> None: ...

    def on_test_error(self, error: BaseException | str, record: TestRecord) -> None: ...

    async def on_end(self, callback: Callback | None = None) -> None:
        """Called once after the last test event."""
        ...


def utcnow() -> datetime:
    return datetime.now(UTC)


class FileReporter:
    """Common state handling for reporters that produce one file per run.

    The reporter exclusively owns its statistics and the records it has
    seen; :attr:`stats` and :attr:`tests` hand out copies.

    Args:
        emitter: Event channel to subscribe to.
        output_path: Report destination. ``~`` and relative paths are resolved.
            Defaults to :attr:`default_path`.
        details: Render request/response detail for passing tests.
        sink: File-system primitives, replaceable for tests.
    """

    default_path = "./report"

    def __init__(
        self,
        emitter: EventEmitter,
        output_path: str | Path | None = None,
        details: bool = False,
        *,
        sink: OutputSink | None = None,
    ) -> None:
        self.sink = sink or OutputSink()
        self._path = self.sanitized_path(output_path)
        self._details = details
        self._aggregator = StatsAggregator()
        self._tests: list[TestRecord] = []
        self._in_flight: TestRecord | None = None
        self._subscribe(emitter)

    @property
    def path(self) -> Path:
        return self._path

    @property
    def details(self) -> bool:
        return self._details

    @property
    def stats(self) -> RunStats:
        return self._aggregator.snapshot()

    @property
    def tests(self) -> tuple[TestRecord, ...]:
        return tuple(self._tests)

    @classmethod
    def sanitized_path(cls, output_path: str | Path | None) -> Path:
        return Path(output_path or cls.default_path).expanduser().resolve()

    def _subscribe(self, emitter: EventEmitter) -> None:
        emitter.on(Event.START, self.on_start)
        emitter.on(Event.TEST_START, self.on_test_start)
        emitter.on(Event.TEST_PASS, self.on_test_pass)
        emitter.on(Event.TEST_FAIL, self.on_test_fail)
        emitter.on(Event.TEST_SKIP, self.on_test_skip)
        emitter.on(Event.TEST_ERROR, self.on_test_error)
        emitter.on(Event.END, self.on_end)

    async def on_start(self, run_info: Any = None, callback: Callback | None = None) -> None:
        raise NotImplementedError

    async def on_end(self, callback: Callback | None = None) -> None:
        raise NotImplementedError

    def write_entry(self, record: TestRecord) -> None:
        """Persist one finished test."""
        raise NotImplementedError

    def on_test_start(self, record: TestRecord) -> None:
        self._in_flight = record

    def on_test_pass(self, record: TestRecord) -> None:
        self._finish(record, TestStatus.PASS)

    def on_test_fail(self, record: TestRecord) -> None:
        self._finish(record, TestStatus.FAIL)

    def on_test_skip(self, record: TestRecord) -> None:
        self._finish(record, TestStatus.SKIPPED)

    def on_test_error(self, error: BaseException | str, record: TestRecord) -> None:
        self._finish(record, TestStatus.ERROR, error)

    def _finish(
        self, record: TestRecord, status: TestStatus, error: BaseException | str | None = None
    ) -> None:
        """Merge the outcome into the in-flight test, count it and persist it."""
        base = self._in_flight if self._in_flight is not None else record
        self._in_flight = None
        merged = base.merge(record) if base is not record else record
        finished = merged.model_copy(update={"status": status})
        if error is not None:
            finished = finished.with_error(error)

        self._tests.append(finished)
        self._aggregator.on_outcome(status)
        self.write_entry(finished)

    @staticmethod
    def _signal(callback: Callback | None) -> None:
        if callback is not None:
            callback()
