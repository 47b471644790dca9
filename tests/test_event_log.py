"""Tests for the JSONL event log."""

from __future__ import annotations

from claim_trail.event_log.writer import EventLog


class TestEventLog:
    def test_emit_and_read(self, tmp_path):
        log = EventLog(tmp_path, "verify-test")
        log.emit(EventLog.make_event(node="normalize", run_id="verify-test", elapsed_s=0.12345))
        log.emit(EventLog.make_event(node="evaluate", run_id="verify-test", elapsed_s=1.0, tokens=300))

        events = log.read_all()
        assert [e["node"] for e in events] == ["normalize", "evaluate"]
        assert events[0]["elapsed_s"] == 0.123
        assert events[1]["tokens"] == 300
        assert log.path == tmp_path / "verify-test" / "events.jsonl"

    def test_corrupt_lines_skipped(self, tmp_path):
        log = EventLog(tmp_path, "run")
        log.emit(EventLog.make_event(node="a", run_id="run", elapsed_s=0))
        with log.path.open("a", encoding="utf-8") as f:
            f.write("{not json\n\n")
        log.emit(EventLog.make_event(node="b", run_id="run", elapsed_s=0))
        assert [e["node"] for e in log.read_all()] == ["a", "b"]

    def test_missing_file(self, tmp_path):
        assert EventLog(tmp_path, "empty").read_all() == []

    def test_summarize(self):
        summary = EventLog.summarize(
            {"claim": "abc", "evidence": [1, 2], "graph": {"a": 1}, "verdict": None, "elapsed": 3.5}
        )
        assert summary == {"claim": 3, "evidence": 2, "graph": 1, "elapsed": 1}
