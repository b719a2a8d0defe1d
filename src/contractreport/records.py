"""Test records delivered with lifecycle events.

A :class:`TestRecord` is immutable once received. Reporters that need to
combine what they learned at ``test start`` with what arrives on the outcome
event build a new record with :meth:`TestRecord.merge`.
"""

from __future__ import annotations

import traceback

from pydantic import BaseModel, ConfigDict, Field

from contractreport.types import TestStatus


class HttpExchange(BaseModel):
    """One side of an HTTP transaction: a request, an expected or an actual response."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    method: str | None = None
    uri: str | None = None
    status_code: int | None = Field(default=None, alias="statusCode")
    headers: dict[str, str] = Field(default_factory=dict)
    body: str | None = None
    schema_: str | None = Field(default=None, alias="schema")


class TestRecord(BaseModel):
    """A single contract test as seen by reporters.

    Parameters
    ----------
    title:
        Human readable test name, written verbatim into reports.
    status:
        Outcome, or ``None`` while the test is still in flight.
    request, expected, actual:
        HTTP detail rendered when details are enabled or the test failed.
    message:
        Failure message produced by validation.
    error_message:
        Text of the error raised while running the test.
    duration_ms:
        Wall time of the test in milliseconds.
    """

    __test__ = False

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    title: str = ""
    status: TestStatus | None = None
    request: HttpExchange | None = None
    expected: HttpExchange | None = None
    actual: HttpExchange | None = None
    message: str | None = None
    error_message: str | None = Field(default=None, alias="errorMessage")
    duration_ms: float = Field(default=0.0, alias="duration")

    def merge(self, other: TestRecord) -> TestRecord:
        """Return a copy overlaid with every field explicitly set on ``other``."""
        return self.model_copy(update={name: getattr(other, name) for name in other.model_fields_set})

    def with_error(self, error: BaseException | str) -> TestRecord:
        """Return an errored copy carrying the error text and its traceback."""
        if isinstance(error, BaseException):
            text = str(error) or type(error).__name__
            if error.__traceback__ is not None:
                stack = "".join(traceback.format_exception(error))
                text = f"{text}\nStacktrace:\n{stack}"
        else:
            text = error
        return self.model_copy(update={"status": TestStatus.ERROR, "error_message": text})
