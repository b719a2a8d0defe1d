"""Render single test outcomes into report fragments.

Each fragment is self-contained: an XML fragment is one complete
``<testcase>`` element, a Markdown fragment is one complete section. Two
tests with the same title therefore never share or corrupt markup.
"""

from __future__ import annotations

import json
import re
import xml.etree.ElementTree as ET

from contractreport.records import HttpExchange, TestRecord
from contractreport.types import TestStatus

# Characters XML 1.0 does not allow, even escaped
_INVALID_XML_CHARS = re.compile("[\x00-\x08\x0b\x0c\x0e-\x1f\ud800-\udfff\ufffe\uffff]")


def _xml_safe(text: str) -> str:
    return _INVALID_XML_CHARS.sub("", text)


def prettify_body(body: str | None) -> str:
    """Pretty-print JSON bodies; anything else is returned unchanged."""
    if not body:
        return ""
    try:
        return json.dumps(json.loads(body), indent=2, ensure_ascii=False)
    except ValueError:
        return body


def describe_exchange(exchange: HttpExchange | None) -> str:
    """Plain-text dump of a request or response."""
    if exchange is None:
        return ""

    lines: list[str] = []
    if exchange.method or exchange.uri:
        lines.append(" ".join(part for part in (exchange.method, exchange.uri) if part))
    if exchange.status_code is not None:
        lines.append(f"statusCode: {exchange.status_code}")
    if exchange.headers:
        lines.append("headers:")
        lines.extend(f"    {name}: {value}" for name, value in exchange.headers.items())
    body = prettify_body(exchange.body)
    if body:
        lines.append("body:")
        lines.append(body)
    schema = prettify_body(exchange.schema_)
    if schema:
        lines.append("schema:")
        lines.append(schema)
    return "\n".join(lines)


def _seconds(record: TestRecord) -> str:
    return f"{record.duration_ms / 1000:g}"


class XmlEntryFormatter:
    """Render a record as one xUnit ``<testcase>`` element."""

    def format(self, record: TestRecord, details: bool = False) -> str:
        status = record.status or TestStatus.PASS
        testcase = ET.Element(
            "testcase",
            {"name": _xml_safe(record.title), "status": status.marker, "time": _seconds(record)},
        )

        if status is TestStatus.PASS:
            if details:
                system_out = ET.SubElement(testcase, "system-out")
                for tag, exchange in (
                    ("request", record.request),
                    ("expected", record.expected),
                    ("actual", record.actual),
                ):
                    ET.SubElement(system_out, tag).text = _xml_safe(describe_exchange(exchange))
        elif status is TestStatus.SKIPPED:
            ET.SubElement(testcase, "skipped")
        elif status is TestStatus.FAIL:
            failure = ET.SubElement(testcase, "failure", {"message": _xml_safe(record.message or "")})
            failure.text = _xml_safe(self._failure_text(record))
        else:
            error = ET.SubElement(testcase, "error")
            error.text = _xml_safe(f"Error:\n{record.error_message or ''}")

        return ET.tostring(testcase, encoding="unicode") + "\n"

    def _failure_text(self, record: TestRecord) -> str:
        return (
            f"Message:\n{record.message or ''}\n"
            f"Request:\n{describe_exchange(record.request)}\n"
            f"Expected:\n{describe_exchange(record.expected)}\n"
            f"Actual:\n{describe_exchange(record.actual)}"
        )


class MarkdownEntryFormatter:
    """Render a record as one Markdown section."""

    def format(self, record: TestRecord, details: bool = False) -> str:
        status = record.status or TestStatus.PASS
        parts = [f"## {status.marker}: {record.title}\n\n"]

        if status is TestStatus.PASS and details:
            parts.append(self._details(record))
        elif status is TestStatus.FAIL and record.message:
            parts.append(self._quote(record.message))
        elif status is TestStatus.ERROR:
            parts.append(self._fenced(record.error_message or ""))

        return "".join(parts)

    def _details(self, record: TestRecord) -> str:
        sections = []
        for heading, exchange in (
            ("Request", record.request),
            ("Expected", record.expected),
            ("Actual", record.actual),
        ):
            sections.append(f"### {heading}\n\n{self._fenced(describe_exchange(exchange))}")
        return "".join(sections)

    @staticmethod
    def _quote(text: str) -> str:
        return "".join(f"> {line}\n" for line in text.splitlines()) + "\n"

    @staticmethod
    def _fenced(text: str) -> str:
        fence = "```"
        while fence in text:
            fence += "`"
        return f"{fence}\n{text}\n{fence}\n\n"
