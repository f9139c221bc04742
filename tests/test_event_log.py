"""Tests for the append-only event log."""

import json
from pathlib import Path

import pytest

from fairdrop.persistence.event_log import EventKind, EventLog, EventRecord


def _record(n: int, token_id: int = 7) -> EventRecord:
    return EventRecord.create(
        event_id=f"EVT-{n:08d}",
        event_kind=EventKind.TOKEN_REVEALED,
        actor_id="0xabc",
        payload={"token_id": token_id},
    )


class TestEventLog:
    def test_append_and_filter(self) -> None:
        log = EventLog()
        log.append(_record(1))
        log.append(EventRecord.create("EVT-00000002", EventKind.PUBLIC_MINTED, "0xdef", {}))
        assert log.count == 2
        assert len(log.events(EventKind.PUBLIC_MINTED)) == 1
        assert [e.event_id for e in log.events_for("0xabc")] == ["EVT-00000001"]

    def test_duplicate_id(self) -> None:
        log = EventLog()
        log.append(_record(1))
        with pytest.raises(ValueError, match="Duplicate"):
            log.append(_record(1))

    def test_hash_covers_payload(self) -> None:
        assert _record(1, token_id=7).event_hash != _record(1, token_id=8).event_hash
        assert _record(1).event_hash.startswith("sha256:")

    def test_persist_and_reload(self, tmp_path: Path) -> None:
        path = tmp_path / "events.jsonl"
        log = EventLog(path)
        log.append(_record(1))
        log.append(_record(2))

        reloaded = EventLog(path)
        assert reloaded.count == 2
        assert reloaded.last_event == log.last_event

    def test_tampered_file_rejected(self, tmp_path: Path) -> None:
        path = tmp_path / "events.jsonl"
        EventLog(path).append(_record(1))

        data = json.loads(path.read_text(encoding="utf-8"))
        data["payload"]["token_id"] = 999
        path.write_text(json.dumps(data) + "\n", encoding="utf-8")

        with pytest.raises(ValueError, match="integrity check failed"):
            EventLog(path)

    def test_duplicate_on_replay(self, tmp_path: Path) -> None:
        path = tmp_path / "events.jsonl"
        line = _record(1).to_json() + "\n"
        path.write_text(line + line, encoding="utf-8")
        with pytest.raises(ValueError, match="duplicate event ID"):
            EventLog(path)

    def test_events_for_ignores_case(self) -> None:
        log = EventLog()
        log.append(EventRecord.create("EVT-00000001", EventKind.PUBLIC_MINTED, "0xAbC", {}))
        assert log.count == 1
        assert len(log.events_for("0xabc")) == 1
