"""Exception hierarchy shared by the store, adapters and outer surfaces."""

from __future__ import annotations


class AgentRegistryError(Exception):
    """Base class for every error raised by agentreg."""


class RecordValidationError(AgentRegistryError, ValueError):
    """Caller supplied fields that cannot form a valid record or contract."""

    def __init__(self, message: str, field: str = "") -> None:
        super().__init__(message)
        self.field = field


class DanglingReferenceError(RecordValidationError):
    """A contract referenced an agent id that is not in the store."""


class NotFoundError(AgentRegistryError, LookupError):
    """An adapter-level operation targeted an id that does not exist."""

    kind = "record"

    def __init__(self, record_id: str) -> None:
        super().__init__(f"{self.kind.capitalize()} '{record_id}' not found")
        self.record_id = record_id


class AgentNotFoundError(NotFoundError):
    kind = "agent"


class ContractNotFoundError(NotFoundError):
    kind = "contract"


class StoreClosedError(AgentRegistryError, RuntimeError):
    """The store was disposed and no longer accepts mutations."""


class ReentrantMutationError(AgentRegistryError, RuntimeError):
    """A change listener tried to mutate the store while events were dispatched."""


class ConfigError(AgentRegistryError):
    """The configuration file or environment could not be interpreted."""


class PersistenceError(AgentRegistryError):
    """A snapshot could not be decoded. Caught inside the store, never propagated."""
