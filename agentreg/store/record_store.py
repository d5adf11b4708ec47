"""The record store — single source of truth for agent records and contracts.

One ``RecordStore`` instance owns the canonical id→record map. Every read
hands out a deep copy, every mutation is persisted to the snapshot slot and
then announced to subscribers, synchronously and in subscription order.
"""

from __future__ import annotations

import copy
import logging
import uuid
from collections.abc import Callable, Iterable, Mapping
from datetime import datetime, timedelta, timezone
from typing import Any, Optional

from agentreg.errors import (
    DanglingReferenceError,
    PersistenceError,
    ReentrantMutationError,
    StoreClosedError,
)
from agentreg.store.codec import (
    apply_contract_patch,
    apply_record_patch,
    new_contract,
    new_record,
    validate_contract_fields,
    validate_record_fields,
)
from agentreg.store.events import EventDispatcher, EventKind, StoreEvent
from agentreg.store.models import (
    AgentContract,
    AgentRecord,
    AgentStatus,
    RecordFilter,
    StoreStats,
    matches_text,
)
from agentreg.store.seed import seed_contracts, seed_records
from agentreg.store.snapshot import (
    MemorySnapshotSlot,
    SnapshotSlot,
    decode_snapshot,
    encode_snapshot,
)

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]
ChangeListener = Callable[[StoreEvent], object]


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _default_id(prefix: str) -> str:
    return f"{prefix}_{uuid.uuid4().hex[:12]}"


def _parse_timestamp(value: str) -> Optional[datetime]:
    if not value:
        return None
    try:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


class RecordStore:
    """In-process store for agent records with change events and snapshots.

    Lifecycle: construct (loads the snapshot slot or falls back to the seed
    set) → serve → ``close()``.
    """

    def __init__(
        self,
        slot: Optional[SnapshotSlot] = None,
        *,
        enable_persistence: bool = True,
        enable_events: bool = True,
        seed: bool = True,
        clock: Optional[Clock] = None,
        id_factory: Optional[Callable[[str], str]] = None,
    ) -> None:
        self._slot = slot if slot is not None else MemorySnapshotSlot()
        self._persistence = enable_persistence
        self._events_enabled = enable_events
        self._seed = seed
        self._clock = clock or _utcnow
        self._id_factory = id_factory or _default_id

        self._records: dict[str, AgentRecord] = {}
        self._contracts: dict[str, AgentContract] = {}
        self._issued_ids: set[str] = set()
        self._events: EventDispatcher[StoreEvent] = EventDispatcher("store")
        self._closed = False

        self._load()

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def slot(self) -> SnapshotSlot:
        return self._slot

    def close(self) -> None:
        """Dispose the store: drop subscribers and refuse further mutations."""
        self._closed = True
        self._events.clear()

    def __enter__(self) -> RecordStore:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def __len__(self) -> int:
        return len(self._records)

    def __contains__(self, record_id: object) -> bool:
        return record_id in self._records

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _load(self) -> None:
        if not self._persistence:
            self._apply_seed()
            return

        try:
            text = self._slot.read()
        except OSError:
            logger.warning("Could not read snapshot slot '%s'; using seed data", self._slot.key, exc_info=True)
            self._apply_seed()
            return

        if text is None:
            logger.info("No snapshot in slot '%s'; starting from seed data", self._slot.key)
            self._apply_seed()
            self._persist()
            return

        try:
            records, contracts = decode_snapshot(text)
        except PersistenceError as exc:
            logger.warning("Discarding corrupt snapshot in slot '%s': %s", self._slot.key, exc)
            self._apply_seed()
            return

        self._records = records
        self._contracts = contracts
        self._issued_ids.update(records)
        self._issued_ids.update(contracts)
        logger.debug("Loaded %d records and %d contracts", len(records), len(contracts))

    def _apply_seed(self) -> None:
        self._records = {}
        self._contracts = {}
        if not self._seed:
            return
        for record in seed_records():
            self._records[record.id] = record
        for contract in seed_contracts():
            self._contracts[contract.id] = contract
        self._issued_ids.update(self._records)
        self._issued_ids.update(self._contracts)

    def _persist(self) -> None:
        if not self._persistence:
            return
        try:
            text = encode_snapshot(self._records, self._contracts, self._timestamp())
            self._slot.write(text)
        except (OSError, TypeError, ValueError):
            logger.warning("Failed to persist snapshot to slot '%s'", self._slot.key, exc_info=True)

    def _check_writable(self) -> None:
        if self._closed:
            raise StoreClosedError("RecordStore has been closed")
        if self._events.dispatching:
            raise ReentrantMutationError(
                "Change listeners must not mutate the store while events are dispatched"
            )

    def _new_id(self, prefix: str) -> str:
        while True:
            candidate = self._id_factory(prefix)
            if candidate not in self._issued_ids:
                self._issued_ids.add(candidate)
                return candidate

    def _timestamp(self, previous: str = "") -> str:
        now = self._clock()
        if now.tzinfo is None:
            now = now.replace(tzinfo=timezone.utc)
        prev = _parse_timestamp(previous)
        if prev is not None and now <= prev:
            now = prev + timedelta(microseconds=1)
        return now.isoformat()

    def _emit(self, kind: EventKind, subject_id: str, **payload: Any) -> None:
        if not self._events_enabled:
            return
        event = StoreEvent(kind=kind, subject_id=subject_id, timestamp=self._timestamp(), **payload)
        self._events.dispatch(event)

    # ------------------------------------------------------------------
    # Subscription
    # ------------------------------------------------------------------

    def subscribe(self, listener: ChangeListener) -> int:
        """Register a change listener; returns a token for ``unsubscribe``."""
        return self._events.subscribe(listener)

    def unsubscribe(self, token: int) -> bool:
        return self._events.unsubscribe(token)

    # ------------------------------------------------------------------
    # Agent records
    # ------------------------------------------------------------------

    def create(self, fields: Mapping[str, Any]) -> AgentRecord:
        """Create a record from caller-supplied fields and return the stored value.

        Raises ``RecordValidationError`` when ``name`` is missing, an unknown or
        store-assigned field is present, or a value is out of range.
        """
        self._check_writable()
        validate_record_fields(fields, creating=True)
        record_id = self._new_id("agent")
        record = new_record(fields, record_id, self._timestamp())
        self._records[record_id] = record
        self._persist()
        logger.debug("Created agent %s (%s)", record_id, record.name)
        self._emit(EventKind.RECORD_ADDED, record_id, record=copy.deepcopy(record))
        return copy.deepcopy(record)

    def update(self, record_id: str, patch: Mapping[str, Any]) -> bool:
        """Merge-patch a record. Returns ``False`` when the id is unknown."""
        self._check_writable()
        validate_record_fields(patch, creating=False)
        current = self._records.get(record_id)
        if current is None:
            return False
        updated = apply_record_patch(current, patch, self._timestamp(current.updated_at))
        self._records[record_id] = updated
        self._persist()
        logger.debug("Updated agent %s fields=%s", record_id, sorted(patch))
        self._emit(
            EventKind.RECORD_UPDATED,
            record_id,
            record=copy.deepcopy(updated),
            patch=copy.deepcopy(dict(patch)),
        )
        return True

    def delete(self, record_id: str) -> bool:
        """Hard-remove a record. Returns ``False`` when the id is unknown."""
        self._check_writable()
        removed = self._records.pop(record_id, None)
        if removed is None:
            return False
        self._persist()
        logger.debug("Deleted agent %s", record_id)
        self._emit(EventKind.RECORD_DELETED, record_id, record=removed)
        return True

    def get(self, record_id: str) -> Optional[AgentRecord]:
        record = self._records.get(record_id)
        return copy.deepcopy(record) if record is not None else None

    def list(self) -> list[AgentRecord]:
        return [copy.deepcopy(r) for r in self._records.values()]

    def search(self, query: str) -> list[AgentRecord]:
        """Case-insensitive substring search over name, description, capabilities and tags."""
        return [copy.deepcopy(r) for r in self._records.values() if matches_text(r, query)]

    def filter(self, predicates: Optional[RecordFilter] = None, **fields: Any) -> list[AgentRecord]:
        """Records matching every provided predicate.

        Accepts a ``RecordFilter`` or the same predicates as keyword arguments.
        """
        if predicates is None:
            predicates = RecordFilter(**fields)
        return [copy.deepcopy(r) for r in self._records.values() if predicates.matches(r)]

    def get_stats(self) -> StoreStats:
        records = list(self._records.values())
        if not records:
            return StoreStats()
        return StoreStats(
            total_agents=len(records),
            active_agents=sum(1 for r in records if r.status == AgentStatus.ACTIVE),
            inactive_agents=sum(1 for r in records if r.status == AgentStatus.INACTIVE),
            verified_agents=sum(1 for r in records if r.is_verified),
            on_chain_agents=sum(1 for r in records if r.is_on_chain),
            average_rating=sum(r.rating or 0.0 for r in records) / len(records),
        )

    # ------------------------------------------------------------------
    # Bulk operations
    # ------------------------------------------------------------------

    def import_records(self, records: Iterable[AgentRecord]) -> int:
        """Insert or replace records by id without emitting per-record events."""
        self._check_writable()
        count = 0
        for record in records:
            if not isinstance(record, AgentRecord) or not record.id:
                raise TypeError("import_records expects AgentRecord instances with an id")
            self._records[record.id] = copy.deepcopy(record)
            self._issued_ids.add(record.id)
            count += 1
        self._persist()
        logger.info("Imported %d agent records", count)
        return count

    def export_records(self) -> list[AgentRecord]:
        return self.list()

    def clear(self) -> None:
        """Remove every record and contract."""
        self._check_writable()
        self._records.clear()
        self._contracts.clear()
        self._persist()
        self._emit(EventKind.STORE_CLEARED, "")

    # ------------------------------------------------------------------
    # Contracts
    # ------------------------------------------------------------------

    def create_contract(self, fields: Mapping[str, Any]) -> AgentContract:
        """Create a contract for an existing agent.

        Raises ``DanglingReferenceError`` when ``agent_id`` is not in the store.
        """
        self._check_writable()
        validate_contract_fields(fields, creating=True)
        agent_id = fields["agent_id"]
        if agent_id not in self._records:
            raise DanglingReferenceError(
                f"Contract references unknown agent '{agent_id}'", field="agent_id"
            )
        contract_id = self._new_id("contract")
        contract = new_contract(fields, contract_id, self._timestamp())
        self._contracts[contract_id] = contract
        self._persist()
        self._emit(EventKind.CONTRACT_ADDED, contract_id, contract=copy.deepcopy(contract))
        return copy.deepcopy(contract)

    def update_contract(self, contract_id: str, patch: Mapping[str, Any]) -> bool:
        self._check_writable()
        validate_contract_fields(patch, creating=False)
        current = self._contracts.get(contract_id)
        if current is None:
            return False
        updated = apply_contract_patch(current, patch, self._timestamp(current.updated_at))
        self._contracts[contract_id] = updated
        self._persist()
        self._emit(
            EventKind.CONTRACT_UPDATED,
            contract_id,
            contract=copy.deepcopy(updated),
            patch=copy.deepcopy(dict(patch)),
        )
        return True

    def delete_contract(self, contract_id: str) -> bool:
        self._check_writable()
        removed = self._contracts.pop(contract_id, None)
        if removed is None:
            return False
        self._persist()
        self._emit(EventKind.CONTRACT_DELETED, contract_id, contract=removed)
        return True

    def get_contract(self, contract_id: str) -> Optional[AgentContract]:
        contract = self._contracts.get(contract_id)
        return copy.deepcopy(contract) if contract is not None else None

    def list_contracts(self) -> list[AgentContract]:
        return [copy.deepcopy(c) for c in self._contracts.values()]
