"""Shared fixtures for unit tests."""

from pathlib import Path

import pytest

from contractreport.errors import SinkError
from contractreport.events import EventEmitter
from contractreport.records import HttpExchange, TestRecord
from contractreport.sink import OutputSink
from contractreport.types import Event


class RecordingSink(OutputSink):
    """Real file-system sink that remembers which primitives were used."""

    def __init__(self) -> None:
        self.removed: list[Path] = []
        self.appends: list[tuple[Path, str]] = []
        self.writes: list[tuple[Path, str]] = []

    def remove(self, path: Path) -> None:
        self.removed.append(path)
        super().remove(path)

    def append(self, path: Path, text: str) -> None:
        self.appends.append((path, text))
        super().append(path, text)

    async def write_whole(self, path: Path, text: str) -> None:
        self.writes.append((path, text))
        await super().write_whole(path, text)


class NoDirectorySink(RecordingSink):
    """Sink whose directory creation always fails."""

    async def ensure_directory(self, path: Path) -> SinkError | None:
        return SinkError("create directory for", path, PermissionError(13, "Permission denied"))


class UnreadableSink(RecordingSink):
    """Sink that cannot read back what it appended."""

    async def read_all(self, path: Path) -> str:
        raise SinkError("read", path, OSError(5, "Input/output error"))


class UnwritableSink(RecordingSink):
    """Sink whose whole-file writes always fail."""

    async def write_whole(self, path: Path, text: str) -> None:
        self.writes.append((path, text))
        raise SinkError("write", path, OSError(28, "No space left on device"))


class Callback:
    """Completion callback that counts its invocations."""

    def __init__(self) -> None:
        self.calls = 0

    def __call__(self) -> None:
        self.calls += 1


@pytest.fixture
def emitter() -> EventEmitter:
    return EventEmitter()


@pytest.fixture
def callback() -> Callback:
    return Callback()


@pytest.fixture
def passing_test() -> TestRecord:
    return TestRecord(
        title="Users > GET /users",
        request=HttpExchange(
            method="GET",
            uri="/users",
            headers={"Accept": "application/json"},
            body="",
        ),
        expected=HttpExchange(
            status_code=200,
            headers={"Content-Type": "application/json"},
            body='{ "test": "body" }',
            schema_='{ "type": "object" }',
        ),
        actual=HttpExchange(
            status_code=200,
            headers={"Content-Type": "application/json"},
            body='{"test": "body"}',
        ),
        duration_ms=12,
    )


async def emit_test(emitter: EventEmitter, event: Event, record: TestRecord, error=None) -> None:
    """Emit ``test start`` followed by the outcome event for ``record``."""
    await emitter.emit(Event.TEST_START, record)
    if event is Event.TEST_ERROR:
        await emitter.emit(event, error or RuntimeError("boom"), record)
    else:
        await emitter.emit(event, record)
