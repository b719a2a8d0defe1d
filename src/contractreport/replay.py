"""Drive reporters from a recorded event log.

The log is JSON Lines, one event per line::

    {"event": "start", "run": {"blueprint": "api.apib"}}
    {"event": "test start", "test": {"title": "GET /users"}}
    {"event": "test pass", "test": {"title": "GET /users", "duration": 12}}
    {"event": "test error", "test": {"title": "POST /users"}, "error": "ECONNREFUSED"}
    {"event": "end"}
"""

from __future__ import annotations

import json
import logging
from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from contractreport.errors import ReplayError
from contractreport.events import EventEmitter
from contractreport.records import TestRecord
from contractreport.types import Event

logger = logging.getLogger(__name__)

_TEST_EVENTS = {
    Event.TEST_START,
    Event.TEST_PASS,
    Event.TEST_FAIL,
    Event.TEST_SKIP,
    Event.TEST_ERROR,
}


@dataclass(frozen=True, slots=True)
class RecordedEvent:
    """One line of an event log."""

    event: Event
    record: TestRecord | None = None
    error: str | None = None
    run_info: dict[str, Any] | None = None

    def args(self) -> tuple[Any, ...]:
        """Positional arguments the event is emitted with."""
        if self.event is Event.START:
            return (self.run_info or {},)
        if self.event is Event.TEST_ERROR:
            return (self.error or "Unknown error", self.record)
        if self.event in _TEST_EVENTS:
            return (self.record,)
        return ()


def parse_event(payload: dict[str, Any]) -> RecordedEvent:
    """Build a :class:`RecordedEvent` from a decoded log line."""
    event = Event(payload["event"])
    record = None
    if event in _TEST_EVENTS:
        record = TestRecord.model_validate(payload.get("test") or {})
    return RecordedEvent(
        event=event,
        record=record,
        error=payload.get("error"),
        run_info=payload.get("run"),
    )


def load_events(path: Path) -> list[RecordedEvent]:
    """Read and validate every event in ``path``.

    Raises:
        ReplayError: The log is not UTF-8 or a line is not a valid event.
        OSError: The log cannot be read.
    """
    data = path.read_bytes()
    try:
        text = data.decode("utf-8")
    except UnicodeDecodeError as exc:
        line_number = data.count(b"\n", 0, exc.start) + 1
        raise ReplayError(path, line_number, f"not valid UTF-8: {exc.reason}") from exc

    events: list[RecordedEvent] = []
    for line_number, line in enumerate(text.split("\n"), start=1):
        if not line.strip():
            continue
        try:
            payload = json.loads(line)
            if not isinstance(payload, dict):
                raise ReplayError(path, line_number, "expected a JSON object")
            events.append(parse_event(payload))
        except json.JSONDecodeError as exc:
            raise ReplayError(path, line_number, f"invalid JSON: {exc.msg}") from exc
        except KeyError as exc:
            raise ReplayError(path, line_number, f"missing field {exc}") from exc
        except ValidationError as exc:
            raise ReplayError(path, line_number, f"invalid test record: {exc}") from exc
        except ValueError as exc:
            raise ReplayError(path, line_number, str(exc)) from exc
    return events


async def replay(emitter: EventEmitter, events: Sequence[RecordedEvent]) -> None:
    """Emit ``events`` in order, framing them with ``start``/``end`` if the log lacks them."""
    if not events or events[0].event is not Event.START:
        logger.debug("Event log has no leading 'start', emitting one")
        await emitter.emit(Event.START, {})

    for recorded in events:
        await emitter.emit(recorded.event, *recorded.args())

    if not events or events[-1].event is not Event.END:
        logger.debug("Event log has no trailing 'end', emitting one")
        await emitter.emit(Event.END)
