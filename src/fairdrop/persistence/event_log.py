"""Append-only event log — the notifications emitted by the distribution.

Every successful state change produces one or more records here. Rejected
operations produce none. A record is immutable once written and carries a
SHA-256 over its canonical JSON, so a persisted log can be checked for
tampering when it is read back.

Persistence is one JSON object per line (JSONL).
"""

from __future__ import annotations

import enum
import hashlib
import json
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Iterator, Optional


class EventKind(str, enum.Enum):
    """Classification of distribution events."""
    SALE_PHASE_CHANGED = "sale_phase_changed"
    # Presale
    COMMIT_RECORDED = "commit_recorded"
    TOKEN_REVEALED = "token_revealed"
    # Public sale
    PUBLIC_MINTED = "public_minted"
    # Transfers
    TOKEN_TRANSFERRED = "token_transferred"
    TOKEN_APPROVED = "token_approved"
    BATCH_EXECUTED = "batch_executed"
    # Settlement
    CONTRIBUTION_CREDITED = "contribution_credited"
    WITHDRAWAL_SETTLED = "withdrawal_settled"


_FIELDS = ("event_id", "event_kind", "timestamp_utc", "actor_id", "payload")


def _digest(body: dict[str, Any]) -> str:
    canonical = json.dumps(body, sort_keys=True, ensure_ascii=False).encode("utf-8")
    return "sha256:" + hashlib.sha256(canonical).hexdigest()


@dataclass(frozen=True)
class EventRecord:
    """One emitted notification.

    actor_id is the checksummed principal the event is about. The
    event_hash covers every other field.
    """
    event_id: str
    event_kind: EventKind
    timestamp_utc: str
    actor_id: str
    payload: dict[str, Any]
    event_hash: str

    @staticmethod
    def create(
        event_id: str,
        event_kind: EventKind,
        actor_id: str,
        payload: dict[str, Any],
        timestamp_utc: Optional[datetime] = None,
    ) -> EventRecord:
        stamp = (timestamp_utc or datetime.now(timezone.utc)).strftime("%Y-%m-%dT%H:%M:%SZ")
        body = {
            "event_id": event_id,
            "event_kind": event_kind.value,
            "timestamp_utc": stamp,
            "actor_id": actor_id,
            "payload": payload,
        }
        return EventRecord(
            event_id=event_id,
            event_kind=event_kind,
            timestamp_utc=stamp,
            actor_id=actor_id,
            payload=payload,
            event_hash=_digest(body),
        )

    def body(self) -> dict[str, Any]:
        """The hashed fields, in wire form."""
        return {
            "event_id": self.event_id,
            "event_kind": self.event_kind.value,
            "timestamp_utc": self.timestamp_utc,
            "actor_id": self.actor_id,
            "payload": self.payload,
        }

    def is_intact(self) -> bool:
        return self.event_hash == _digest(self.body())

    def to_json(self) -> str:
        return json.dumps(
            {**self.body(), "event_hash": self.event_hash},
            sort_keys=True,
            ensure_ascii=False,
        )

    @staticmethod
    def from_json(line: str) -> EventRecord:
        data = json.loads(line)
        missing = [name for name in (*_FIELDS, "event_hash") if name not in data]
        if missing:
            raise ValueError(f"Event record missing fields: {missing}")
        return EventRecord(
            event_id=data["event_id"],
            event_kind=EventKind(data["event_kind"]),
            timestamp_utc=data["timestamp_utc"],
            actor_id=data["actor_id"],
            payload=data["payload"],
            event_hash=data["event_hash"],
        )


class EventLog:
    """Append-only record of distribution events, optionally backed by a file.

    Usage:
        log = EventLog(Path("events.jsonl"))
        log.append(EventRecord.create("EVT-00000001", EventKind.TOKEN_REVEALED,
                                      alice, {"token_id": 7}))
        log.events(EventKind.TOKEN_REVEALED)

    Records are never modified or removed. Opening an existing file replays
    it and fails closed: a tampered record or a repeated event ID raises
    ValueError.
    """

    def __init__(self, storage_path: Optional[Path] = None) -> None:
        self._records: list[EventRecord] = []
        self._ids: set[str] = set()
        self._path = storage_path

        if storage_path is not None and storage_path.exists():
            for line_no, record in self._replay(storage_path):
                if record.event_id in self._ids:
                    raise ValueError(
                        f"{storage_path}:{line_no}: duplicate event ID {record.event_id}"
                    )
                if not record.is_intact():
                    raise ValueError(
                        f"{storage_path}:{line_no}: integrity check failed for "
                        f"{record.event_id}"
                    )
                self._records.append(record)
                self._ids.add(record.event_id)

    def append(self, record: EventRecord) -> None:
        """Add a record. Raises ValueError if its event_id is already present."""
        if record.event_id in self._ids:
            raise ValueError(f"Duplicate event ID: {record.event_id}")
        self._records.append(record)
        self._ids.add(record.event_id)
        if self._path is not None:
            with self._path.open("a", encoding="utf-8") as f:
                f.write(record.to_json() + "\n")

    def events(self, kind: Optional[EventKind] = None) -> list[EventRecord]:
        if kind is None:
            return list(self._records)
        return [r for r in self._records if r.event_kind == kind]

    def events_for(self, actor_id: str) -> list[EventRecord]:
        """Records about one principal. Address case is ignored."""
        actor = actor_id.lower()
        return [r for r in self._records if r.actor_id.lower() == actor]

    @property
    def count(self) -> int:
        return len(self._records)

    @property
    def last_event(self) -> Optional[EventRecord]:
        return self._records[-1] if self._records else None

    @staticmethod
    def _replay(path: Path) -> Iterator[tuple[int, EventRecord]]:
        with path.open("r", encoding="utf-8") as f:
            for line_no, line in enumerate(f, 1):
                if line.strip():
                    yield line_no, EventRecord.from_json(line)
