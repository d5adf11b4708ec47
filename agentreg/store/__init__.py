"""Record store — the single source of truth for agent records.

The store provides:
- Canonical data: id→record map plus contract sub-records
- Lifecycle: create / merge-patch update / hard delete
- Change events: synchronous, ordered, exception-isolated delivery
- Persistence: one JSON snapshot slot, seed fallback on absence or corruption
"""

from agentreg.store.events import EventKind, StoreEvent
from agentreg.store.models import AgentContract, AgentRecord, AgentStatus, RecordFilter
from agentreg.store.record_store import RecordStore
from agentreg.store.snapshot import FileSnapshotSlot, MemorySnapshotSlot, SnapshotSlot

__all__ = [
    "AgentContract",
    "AgentRecord",
    "AgentStatus",
    "EventKind",
    "FileSnapshotSlot",
    "MemorySnapshotSlot",
    "RecordFilter",
    "RecordStore",
    "SnapshotSlot",
    "StoreEvent",
]
