"""Shared types for contractreport."""

from enum import Enum


class TestStatus(Enum):
    """Outcome of a single contract test."""

    __test__ = False

    PASS = "pass"
    FAIL = "fail"
    SKIPPED = "skipped"
    ERROR = "error"

    @property
    def marker(self) -> str:
        """Status token written verbatim into every report fragment."""
        return _MARKERS[self]


_MARKERS = {
    TestStatus.PASS: "Pass",
    TestStatus.FAIL: "Fail",
    TestStatus.SKIPPED: "Skip",
    TestStatus.ERROR: "Error",
}


class Event(Enum):
    """Lifecycle events emitted by the test execution engine."""

    START = "start"
    TEST_START = "test start"
    TEST_PASS = "test pass"
    TEST_FAIL = "test fail"
    TEST_SKIP = "test skip"
    TEST_ERROR = "test error"
    END = "end"
