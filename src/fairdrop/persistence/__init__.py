"""Persistence — the append-only event log."""

from fairdrop.persistence.event_log import EventKind, EventLog, EventRecord

__all__ = ["EventKind", "EventLog", "EventRecord"]
