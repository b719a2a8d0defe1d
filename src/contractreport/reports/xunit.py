"""Streaming xUnit reporter.

Test cases are appended to disk as they finish, so memory use does not
grow with the run. The suite totals are only known at the end: the first
line written is a placeholder ``<testsuite>`` opening tag, and the ``end``
handler rewrites the file with the real totals and the closing tag.
"""

from __future__ import annotations

import logging
from enum import Enum
from pathlib import Path
from typing import Any
from xml.sax.saxutils import quoteattr

from contractreport.errors import SinkError
from contractreport.events import EventEmitter
from contractreport.records import TestRecord
from contractreport.reports.base import Callback, FileReporter, utcnow
from contractreport.reports.formatting import XmlEntryFormatter
from contractreport.reports.registry import register_format
from contractreport.sink import OutputSink
from contractreport.stats import RunStats

logger = logging.getLogger(__name__)

SUITE_NAME = "Dredd Tests"
XML_HEADER = '<?xml version="1.0" encoding="UTF-8"?>'
SUITE_CLOSE = "</testsuite>"


class StreamState(Enum):
    IDLE = "idle"
    OPENED = "opened"
    ACCUMULATING = "accumulating"
    FINALIZING = "finalizing"
    CLOSED = "closed"


def suite_tag(stats: RunStats | None) -> str:
    """Opening ``<testsuite>`` tag; ``None`` renders the placeholder written at start."""
    attrs: dict[str, Any] = {"name": SUITE_NAME}
    if stats is not None:
        started = stats.start_time or stats.end_time
        attrs.update(
            tests=stats.tests_total,
            failures=stats.failures,
            errors=stats.errors,
            skip=stats.skipped,
            timestamp=started.isoformat() if started else "",
            time=f"{stats.duration:.3f}",
        )
    rendered = " ".join(f"{key}={quoteattr(str(value))}" for key, value in attrs.items())
    return f"<testsuite {rendered}>"


@register_format("xunit")
class XUnitReporter(FileReporter):
    """Write an xUnit XML report incrementally, then patch in the totals."""

    default_path = "./report.xml"

    def __init__(
        self,
        emitter: EventEmitter,
        output_path: str | Path | None = None,
        details: bool = False,
        *,
        sink: OutputSink | None = None,
    ) -> None:
        super().__init__(emitter, output_path, details, sink=sink)
        self.formatter = XmlEntryFormatter()
        self.state = StreamState.IDLE
        if self.sink.prepare(self.path):
            self.sink.remove(self.path)

    async def on_start(self, run_info: Any = None, callback: Callback | None = None) -> None:
        try:
            if self.state is StreamState.IDLE:
                await self._open()
            else:
                logger.warning("Ignoring repeated 'start' for %s", self.path)
        finally:
            self._signal(callback)

    def write_entry(self, record: TestRecord) -> None:
        if self.state is StreamState.CLOSED:
            return
        if self.state is StreamState.IDLE:
            logger.warning("Report %s is not open, dropping test case %r", self.path, record.title)
            return

        self.state = StreamState.ACCUMULATING
        try:
            self.sink.append(self.path, self.formatter.format(record, self.details))
        except SinkError as exc:
            logger.error("%s", exc)

    async def on_end(self, callback: Callback | None = None) -> None:
        try:
            if self.state is StreamState.IDLE:
                logger.warning("Received 'end' before 'start', opening %s now", self.path)
                await self._open()
            if self.state in (StreamState.OPENED, StreamState.ACCUMULATING):
                await self._patch()
            else:
                self._aggregator.on_end(utcnow())
        finally:
            self._signal(callback)

    async def _open(self) -> None:
        self._aggregator.on_start(utcnow())
        error = await self.sink.ensure_directory(self.path)
        if error is not None:
            logger.error("%s", error)
            self.state = StreamState.CLOSED
            return

        self.state = StreamState.OPENED
        try:
            self.sink.append(self.path, suite_tag(None) + "\n")
        except SinkError as exc:
            logger.error("%s", exc)

    async def _patch(self) -> None:
        """Rewrite the report with the final totals and the closing tag."""
        self.state = StreamState.FINALIZING
        self._aggregator.on_end(utcnow())
        try:
            data = await self.sink.read_all(self.path)
        except SinkError as exc:
            logger.error("%s", exc)
            self.state = StreamState.CLOSED
            return

        # Everything after the placeholder line is a sequence of complete test cases
        _, newline, fragments = data.partition("\n")
        if not newline:
            logger.error("Report %s has no suite opening line, leaving it unpatched", self.path)
            self.state = StreamState.CLOSED
            return

        document = f"{XML_HEADER}\n{suite_tag(self.stats)}\n{fragments}{SUITE_CLOSE}\n"
        try:
            await self.sink.write_whole(self.path, document)
        except SinkError as exc:
            logger.error("%s", exc)
        self.state = StreamState.CLOSED
