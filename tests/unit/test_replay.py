"""Tests for replaying recorded event logs."""

import json
import xml.etree.ElementTree as ET

import pytest

from contractreport.errors import ReplayError
from contractreport.events import EventEmitter
from contractreport.replay import load_events, parse_event, replay
from contractreport.reports import MarkdownReporter, XUnitReporter
from contractreport.types import Event, TestStatus


def write_log(path, *lines):
    path.write_text("".join(json.dumps(line) + "\n" for line in lines))
    return path


class TestLoadEvents:
    def test_parses_each_line(self, tmp_path):
        log = write_log(
            tmp_path / "events.jsonl",
            {"event": "start", "run": {"blueprint": "api.apib"}},
            {"event": "test start", "test": {"title": "GET /users"}},
            {"event": "test error", "test": {"title": "GET /users"}, "error": "ECONNREFUSED"},
            {"event": "end"},
        )

        events = load_events(log)

        assert [e.event for e in events] == [Event.START, Event.TEST_START, Event.TEST_ERROR, Event.END]
        assert events[0].args() == ({"blueprint": "api.apib"},)
        assert events[2].args()[0] == "ECONNREFUSED"
        assert events[2].record.title == "GET /users"

    def test_skips_blank_lines(self, tmp_path):
        log = tmp_path / "events.jsonl"
        log.write_text('{"event": "start"}\n\n{"event": "end"}\n')

        assert len(load_events(log)) == 2

    @pytest.mark.parametrize(
        ("line", "reason"),
        [
            ("not json", "invalid JSON"),
            ("[1, 2]", "expected a JSON object"),
            ('{"test": {}}', "missing field"),
            ('{"event": "test retry"}', "test retry"),
            ('{"event": "test pass", "test": {"status": "flaky"}}', "invalid test record"),
        ],
    )
    def test_reports_bad_line(self, tmp_path, line, reason):
        log = tmp_path / "events.jsonl"
        log.write_text('{"event": "start"}\n' + line + "\n")

        with pytest.raises(ReplayError, match=reason) as excinfo:
            load_events(log)

        assert excinfo.value.line_number == 2

    def test_reports_undecodable_line(self, tmp_path):
        log = tmp_path / "events.jsonl"
        log.write_bytes(b'{"event": "start"}\n{"event": "\xff\xfe"}\n')

        with pytest.raises(ReplayError, match="not valid UTF-8") as excinfo:
            load_events(log)

        assert excinfo.value.line_number == 2

    def test_status_values(self):
        recorded = parse_event({"event": "test skip", "test": {"title": "t", "status": "skipped"}})

        assert recorded.record.status is TestStatus.SKIPPED


class TestReplay:
    @pytest.mark.asyncio
    async def test_drives_reporters(self, tmp_path):
        log = write_log(
            tmp_path / "events.jsonl",
            {"event": "start"},
            {"event": "test start", "test": {"title": "A"}},
            {"event": "test pass", "test": {"title": "A", "duration": 20}},
            {"event": "test start", "test": {"title": "B"}},
            {"event": "test fail", "test": {"title": "B", "message": "status mismatch"}},
            {"event": "end"},
        )
        emitter = EventEmitter()
        xunit = XUnitReporter(emitter, tmp_path / "report.xml")
        markdown = MarkdownReporter(emitter, tmp_path / "report.md")

        await replay(emitter, load_events(log))

        root = ET.parse(xunit.path).getroot()
        assert root.get("tests") == "2"
        assert root.get("failures") == "1"
        assert markdown.path.read_text().index("## Pass: A") < markdown.path.read_text().index("## Fail: B")

    @pytest.mark.asyncio
    async def test_frames_log_without_start_and_end(self, tmp_path):
        emitter = EventEmitter()
        seen = []
        for event in Event:
            emitter.on(event, lambda *args, event=event: seen.append(event))

        await replay(emitter, [parse_event({"event": "test skip", "test": {"title": "A"}})])

        assert seen == [Event.START, Event.TEST_SKIP, Event.END]

    @pytest.mark.asyncio
    async def test_empty_log_still_finalizes(self, tmp_path):
        emitter = EventEmitter()
        xunit = XUnitReporter(emitter, tmp_path / "report.xml")

        await replay(emitter, [])

        assert ET.parse(xunit.path).getroot().get("tests") == "0"
