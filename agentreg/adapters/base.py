"""Shared adapter plumbing: store event forwarding and not-found handling."""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from typing import Any, Optional

from agentreg.convert import to_contract_view
from agentreg.errors import AgentNotFoundError, ContractNotFoundError
from agentreg.store.events import EventDispatcher, EventKind, StoreEvent
from agentreg.store.models import AgentContract, AgentRecord
from agentreg.store.record_store import RecordStore

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AdapterEvent:
    """A store event re-shaped into one adapter's vocabulary.

    ``item`` is the affected agent (or contract) converted by the adapter,
    ``None`` for ``store_cleared``.
    """

    kind: EventKind
    subject_id: str
    timestamp: str
    item: Any = None
    patch: Optional[Mapping[str, Any]] = None


class StoreAdapter:
    """Base for the consumer facades that sit on top of one ``RecordStore``.

    Subscribes to the store on construction and re-publishes every change
    to its own listeners. Call ``close()`` to detach.
    """

    name = "adapter"

    def __init__(self, store: RecordStore) -> None:
        self._store = store
        self._listeners: EventDispatcher[AdapterEvent] = EventDispatcher(f"{self.name} adapter")
        self._token: Optional[int] = store.subscribe(self._handle_store_event)

    @property
    def store(self) -> RecordStore:
        return self._store

    # ── Change listeners ─────────────────────────────────────

    def add_change_listener(self, listener: Callable[[AdapterEvent], object]) -> int:
        return self._listeners.subscribe(listener)

    def remove_change_listener(self, token: int) -> bool:
        return self._listeners.unsubscribe(token)

    def close(self) -> None:
        if self._token is not None:
            self._store.unsubscribe(self._token)
            self._token = None
        self._listeners.clear()

    def _shape_record(self, record: AgentRecord) -> Any:
        raise NotImplementedError

    def _shape_contract(self, contract: AgentContract) -> Any:
        return to_contract_view(contract, self._store.get(contract.agent_id))

    def _handle_store_event(self, event: StoreEvent) -> None:
        if not len(self._listeners):
            return
        item: Any = None
        if event.record is not None:
            item = self._shape_record(event.record)
        elif event.contract is not None:
            item = self._shape_contract(event.contract)
        self._listeners.dispatch(
            AdapterEvent(
                kind=event.kind,
                subject_id=event.subject_id,
                timestamp=event.timestamp,
                item=item,
                patch=event.patch,
            )
        )

    # ── Lookups ──────────────────────────────────────────────

    def _require_agent(self, agent_id: str) -> AgentRecord:
        record = self._store.get(agent_id)
        if record is None:
            raise AgentNotFoundError(agent_id)
        return record

    def _require_contract(self, contract_id: str) -> AgentContract:
        contract = self._store.get_contract(contract_id)
        if contract is None:
            raise ContractNotFoundError(contract_id)
        return contract

    def _update_agent(self, agent_id: str, patch: Mapping[str, Any]) -> AgentRecord:
        if not self._store.update(agent_id, patch):
            raise AgentNotFoundError(agent_id)
        return self._require_agent(agent_id)

    def _delete_agent(self, agent_id: str) -> None:
        if not self._store.delete(agent_id):
            raise AgentNotFoundError(agent_id)
        logger.debug("%s adapter deleted agent %s", self.name, agent_id)
