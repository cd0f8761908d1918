"""Trace event and JSONL logger tests."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from mathsurf.trace import BestEffortTraceLogger, RebuildEventKind, TraceLogger, new_event, read_trace


def test_new_event_shape() -> None:
    event = new_event("request", "rebuild requested", data={"latex": "2+3"}, generation=4)
    assert len(event["event_id"]) == 32
    assert event["ts"].endswith("Z")
    assert event["kind"] == "request"
    assert event["data"] == {"latex": "2+3"}
    assert event["refs"] is None
    assert event["generation"] == 4


def test_new_event_accepts_enum_and_rejects_unknown_kind() -> None:
    assert new_event(RebuildEventKind.DISCARD, "stale")["kind"] == "discard"
    assert "generation" not in new_event(RebuildEventKind.NOTE, "n")
    with pytest.raises(ValueError):
        new_event("transform", "not a rebuild step")


def test_trace_logger_appends_jsonl(tmp_path: Path) -> None:
    path = tmp_path / "nested" / "trace.jsonl"
    with TraceLogger(str(path)) as logger:
        logger.append(new_event("note", "first"))
        logger.extend([new_event("install", "second"), new_event("error", "third")])
        logger.flush()

    lines = path.read_text(encoding="utf-8").splitlines()
    assert len(lines) == 3
    assert json.loads(lines[0])["message"] == "first"
    assert [event["kind"] for event in read_trace(str(path))] == ["note", "install", "error"]

    with TraceLogger(str(path)) as logger:
        logger.append(new_event("note", "appended"))
    assert len(read_trace(str(path))) == 4


def test_best_effort_logger_disables_when_path_is_unusable(tmp_path: Path) -> None:
    blocker = tmp_path / "blocker"
    blocker.write_text("not a directory", encoding="utf-8")
    warnings: list[str] = []

    logger = BestEffortTraceLogger(str(blocker / "trace.jsonl"), warn=warnings.append)
    logger.append(new_event("note", "dropped"))
    logger.close()

    assert not logger.enabled
    assert logger.written == 0
    assert len(warnings) == 1
    assert warnings[0].startswith("WARNING: rebuild trace logging disabled:")


def test_best_effort_logger_stops_after_a_failed_write(tmp_path: Path) -> None:
    path = tmp_path / "trace.jsonl"
    warnings: list[str] = []
    logger = BestEffortTraceLogger(str(path), warn=warnings.append)

    logger.append(new_event("note", "kept"))
    logger.append(new_event("note", "unserializable", data={"value": object()}))
    logger.append(new_event("note", "after failure"))
    logger.close()
    logger.close()

    assert logger.written == 1
    assert logger.disabled_reason is not None
    assert warnings == [f"WARNING: {logger.disabled_reason}"]
    assert [event["message"] for event in read_trace(str(path))] == ["kept"]


def test_best_effort_logger_prints_by_default(tmp_path: Path, capsys) -> None:
    blocker = tmp_path / "blocker"
    blocker.write_text("", encoding="utf-8")
    BestEffortTraceLogger(str(blocker / "trace.jsonl"))
    assert capsys.readouterr().out.startswith("WARNING: rebuild trace logging disabled:")
