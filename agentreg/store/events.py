"""Change events and synchronous, exception-isolated dispatch."""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from enum import Enum
from typing import Any, Generic, Optional, TypeVar

from agentreg.store.models import AgentContract, AgentRecord

logger = logging.getLogger(__name__)


class EventKind(str, Enum):
    """Closed set of change events emitted by the record store."""

    RECORD_ADDED = "record_added"
    RECORD_UPDATED = "record_updated"
    RECORD_DELETED = "record_deleted"
    CONTRACT_ADDED = "contract_added"
    CONTRACT_UPDATED = "contract_updated"
    CONTRACT_DELETED = "contract_deleted"
    STORE_CLEARED = "store_cleared"


@dataclass(frozen=True)
class StoreEvent:
    """One store mutation, delivered to listeners after the mutation is applied.

    ``record`` is the added/updated/removed agent (a copy), ``contract`` the
    same for contract events, and ``patch`` the fields supplied to an update.
    """

    kind: EventKind
    subject_id: str
    timestamp: str
    record: Optional[AgentRecord] = None
    contract: Optional[AgentContract] = None
    patch: Optional[Mapping[str, Any]] = None


T = TypeVar("T")


def _listener_name(listener: Callable[..., Any]) -> str:
    return getattr(listener, "__qualname__", None) or repr(listener)


class EventDispatcher(Generic[T]):
    """Ordered listener registry.

    Listeners run synchronously in subscription order. A listener that raises
    is logged and skipped; the remaining listeners and the publisher carry on.
    """

    def __init__(self, name: str = "events") -> None:
        self._name = name
        self._listeners: dict[int, Callable[[T], object]] = {}
        self._next_token = 1
        self._depth = 0

    def subscribe(self, listener: Callable[[T], object]) -> int:
        if not callable(listener):
            raise TypeError("listener must be callable")
        token = self._next_token
        self._next_token += 1
        self._listeners[token] = listener
        return token

    def unsubscribe(self, token: int) -> bool:
        return self._listeners.pop(token, None) is not None

    def clear(self) -> None:
        self._listeners.clear()

    @property
    def dispatching(self) -> bool:
        return self._depth > 0

    def __len__(self) -> int:
        return len(self._listeners)

    def dispatch(self, event: T) -> None:
        # Snapshot so listeners may unsubscribe while being notified.
        listeners = tuple(self._listeners.values())
        self._depth += 1
        try:
            for listener in listeners:
                try:
                    listener(event)
                except Exception:
                    logger.exception("%s listener %s failed", self._name, _listener_name(listener))
        finally:
            self._depth -= 1
