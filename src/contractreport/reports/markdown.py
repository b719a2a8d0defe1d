"""Buffered Markdown reporter.

The whole document is assembled in memory and committed with a single
atomic write at the end of the run, so the report file either keeps the
previous run's content or holds the complete new document.
"""

from __future__ import annotations

import logging
from enum import Enum
from pathlib import Path
from typing import Any

from contractreport.errors import SinkError
from contractreport.events import EventEmitter
from contractreport.records import TestRecord
from contractreport.reports.base import Callback, FileReporter, utcnow
from contractreport.reports.formatting import MarkdownEntryFormatter
from contractreport.reports.registry import register_format
from contractreport.sink import OutputSink

logger = logging.getLogger(__name__)

TITLE = "Dredd Tests"


class BufferState(Enum):
    IDLE = "idle"
    ACCUMULATING = "accumulating"
    COMMITTED = "committed"


@register_format("markdown")
class MarkdownReporter(FileReporter):
    """Collect Markdown sections in memory and write them once."""

    default_path = "./report.md"

    def __init__(
        self,
        emitter: EventEmitter,
        output_path: str | Path | None = None,
        details: bool = False,
        *,
        sink: OutputSink | None = None,
    ) -> None:
        super().__init__(emitter, output_path, details, sink=sink)
        self.formatter = MarkdownEntryFormatter()
        self.state = BufferState.IDLE
        self._fragments: list[str] = []
        # Existing output is replaced atomically at commit time
        self.sink.prepare(self.path)

    @property
    def buffer(self) -> str:
        return "".join(self._fragments)

    async def on_start(self, run_info: Any = None, callback: Callback | None = None) -> None:
        if self.state is BufferState.IDLE:
            self._begin()
        else:
            logger.warning("Ignoring repeated 'start' for %s", self.path)
        self._signal(callback)

    def write_entry(self, record: TestRecord) -> None:
        if self.state is BufferState.IDLE:
            logger.warning("Received %r before 'start', opening %s now", record.title, self.path)
            self._begin()
        self._fragments.append(self.formatter.format(record, self.details))

    async def on_end(self, callback: Callback | None = None) -> None:
        try:
            if self.state is BufferState.COMMITTED:
                logger.warning("Ignoring repeated 'end' for %s", self.path)
                return
            if self.state is BufferState.IDLE:
                logger.warning("Received 'end' before 'start', opening %s now", self.path)
                self._begin()
            await self._commit()
        finally:
            self._signal(callback)

    def _begin(self) -> None:
        self._aggregator.on_start(utcnow())
        self._fragments.append(f"# {TITLE}\n\n")
        self.state = BufferState.ACCUMULATING

    async def _commit(self) -> None:
        self._aggregator.on_end(utcnow())
        error = await self.sink.ensure_directory(self.path)
        if error is not None:
            logger.error("%s", error)
            return
        try:
            await self.sink.write_whole(self.path, self.buffer)
        except SinkError as exc:
            logger.error("%s", exc)
            return
        self.state = BufferState.COMMITTED
        logger.debug("Wrote %d test(s) to %s", len(self._tests), self.path)
