"""Persistence — append-only event log of engine notifications."""

from lprewards.persistence.event_log import EventKind, EventLog, EventRecord

__all__ = [
    "EventKind",
    "EventLog",
    "EventRecord",
]
