"""Tests for report fragment formatting."""

import xml.etree.ElementTree as ET

import pytest

from contractreport.records import HttpExchange, TestRecord
from contractreport.reports.formatting import (
    MarkdownEntryFormatter,
    XmlEntryFormatter,
    describe_exchange,
    prettify_body,
)
from contractreport.types import TestStatus


STATUSES = [
    (TestStatus.PASS, "Pass"),
    (TestStatus.FAIL, "Fail"),
    (TestStatus.SKIPPED, "Skip"),
    (TestStatus.ERROR, "Error"),
]


@pytest.mark.parametrize(("status", "marker"), STATUSES)
def test_status_markers(status, marker):
    assert status.marker == marker


class TestXmlEntryFormatter:
    @pytest.mark.parametrize(("status", "marker"), STATUSES)
    def test_fragment_is_standalone_element(self, status, marker):
        record = TestRecord(title="Users > List", status=status, message="nope", error_message="boom")

        fragment = XmlEntryFormatter().format(record)

        assert fragment.endswith("\n")
        element = ET.fromstring(fragment)
        assert element.tag == "testcase"
        assert element.get("name") == "Users > List"
        assert element.get("status") == marker

    def test_failure_carries_message_and_exchange(self, passing_test):
        record = passing_test.model_copy(update={"status": TestStatus.FAIL, "message": "status mismatch"})

        failure = ET.fromstring(XmlEntryFormatter().format(record)).find("failure")

        assert failure.get("message") == "status mismatch"
        assert "Expected:" in failure.text
        assert "statusCode: 200" in failure.text

    def test_details_only_for_passing_tests(self, passing_test):
        formatter = XmlEntryFormatter()
        passed = passing_test.model_copy(update={"status": TestStatus.PASS})
        skipped = passing_test.model_copy(update={"status": TestStatus.SKIPPED})

        assert ET.fromstring(formatter.format(passed, details=False)).find("system-out") is None
        assert ET.fromstring(formatter.format(skipped, details=True)).find("system-out") is None
        system_out = ET.fromstring(formatter.format(passed, details=True)).findall("system-out")
        assert len(system_out) == 1
        assert [child.tag for child in system_out[0]] == ["request", "expected", "actual"]

    def test_strips_characters_invalid_in_xml(self):
        record = TestRecord(title="bad\x00title\x1b", status=TestStatus.ERROR, error_message="\x07bell")

        element = ET.fromstring(XmlEntryFormatter().format(record))

        assert element.get("name") == "badtitle"
        assert "bell" in element.find("error").text

    def test_time_in_seconds(self):
        record = TestRecord(title="t", status=TestStatus.PASS, duration_ms=250)

        assert ET.fromstring(XmlEntryFormatter().format(record)).get("time") == "0.25"


class TestMarkdownEntryFormatter:
    @pytest.mark.parametrize(("status", "marker"), STATUSES)
    def test_section_heading(self, status, marker):
        fragment = MarkdownEntryFormatter().format(TestRecord(title="Users > List", status=status))

        assert fragment.startswith(f"## {marker}: Users > List\n")

    def test_details_block(self, passing_test):
        record = passing_test.model_copy(update={"status": TestStatus.PASS})

        fragment = MarkdownEntryFormatter().format(record, details=True)

        assert fragment.count("### Request") == 1
        assert "### Expected" in fragment
        assert "### Actual" in fragment

    def test_error_fence_survives_backticks(self):
        record = TestRecord(title="t", status=TestStatus.ERROR, error_message="```inner```")

        fragment = MarkdownEntryFormatter().format(record)

        assert "````\n```inner```\n````" in fragment


class TestExchangeDump:
    def test_prettify_json_body(self):
        assert prettify_body('{"a":1}') == '{\n  "a": 1\n}'

    def test_prettify_leaves_other_bodies(self):
        assert prettify_body("<html></html>") == "<html></html>"
        assert prettify_body(None) == ""

    def test_describe_exchange(self):
        exchange = HttpExchange(
            method="POST",
            uri="/users",
            headers={"Content-Type": "application/json"},
            body='{"name":"x"}',
            schema_='{"type":"object"}',
        )

        text = describe_exchange(exchange)

        assert text.splitlines()[0] == "POST /users"
        assert "    Content-Type: application/json" in text
        assert '"name": "x"' in text
        assert "schema:" in text

    def test_describe_missing_exchange(self):
        assert describe_exchange(None) == ""
