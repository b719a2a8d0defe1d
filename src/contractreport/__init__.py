"""contractreport - report writers for API contract test runs."""

from .events import EventEmitter
from .records import HttpExchange, TestRecord
from .reports import MarkdownReporter, XUnitReporter, build_reporters, find_format
from .stats import RunStats, StatsAggregator
from .types import Event, TestStatus
from .version import __version__


__all__ = [
    # Event stream
    "Event",
    "EventEmitter",
    "HttpExchange",
    "TestRecord",
    "TestStatus",
    # Reporters
    "MarkdownReporter",
    "XUnitReporter",
    "build_reporters",
    "find_format",
    # Statistics
    "RunStats",
    "StatsAggregator",
]
