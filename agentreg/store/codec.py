"""Dict codec and merge-patch for store records.

Records and contracts are closed dataclass structs. Everything that enters
the store from the outside (create fields, update patches, snapshot data)
goes through ``_build`` so unknown keys, bad enum values and values that do
not fit the dataclass annotations are rejected with ``RecordValidationError``
before anything reaches the store.
"""

from __future__ import annotations

import copy
from collections.abc import Mapping
from dataclasses import asdict, fields, is_dataclass
from enum import Enum
from typing import Any, Union, get_args, get_origin, get_type_hints

from agentreg.errors import RecordValidationError
from agentreg.store.models import (
    CONTRACT_FIELDS,
    RECORD_FIELDS,
    STORE_ASSIGNED_FIELDS,
    AgentConfig,
    AgentContract,
    AgentMetadata,
    AgentRecord,
    AgentStats,
    ContractLedger,
    ContractMetadata,
    LedgerAnchor,
    UserBinding,
)

_NESTED: dict[type, dict[str, type]] = {
    AgentRecord: {
        "config": AgentConfig,
        "ledger": LedgerAnchor,
        "metadata": AgentMetadata,
        "stats": AgentStats,
    },
    AgentConfig: {"user_binding": UserBinding},
    AgentContract: {"metadata": ContractMetadata, "ledger": ContractLedger},
}

_NULLABLE_NESTED = {"stats"}
_LIST_OF_TEXT = {"capabilities"}

_TYPE_NAMES = {str: "a string", int: "an integer", float: "a number", bool: "a boolean"}
_HINTS: dict[type, dict[str, Any]] = {}


def to_plain(value: Any) -> Any:
    """Convert dataclasses and enums into JSON-ready builtins."""
    if is_dataclass(value) and not isinstance(value, type):
        value = asdict(value)
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, Mapping):
        return {k: to_plain(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [to_plain(v) for v in value]
    return value


def _hints(cls: type) -> dict[str, Any]:
    hints = _HINTS.get(cls)
    if hints is None:
        hints = _HINTS[cls] = get_type_hints(cls)
    return hints


def _check_type(value: Any, hint: Any, path: str, key: str) -> None:
    """Reject ``value`` unless it fits the dataclass annotation ``hint``.

    Enum-typed values are left to the dataclass ``__post_init__`` coercion.
    """
    if get_origin(hint) is Union:
        if value is None:
            return
        hint = next(a for a in get_args(hint) if a is not type(None))

    if get_origin(hint) is list:
        if not isinstance(value, list):
            raise RecordValidationError(f"{path} must be a list", field=key)
        (item,) = get_args(hint)
        for i, v in enumerate(value):
            _check_type(v, item, f"{path}[{i}]", key)
        return

    expected = _TYPE_NAMES.get(hint)
    if expected is None:
        return
    if isinstance(value, bool):
        ok = hint is bool
    elif hint is float:
        ok = isinstance(value, (int, float))
    else:
        ok = isinstance(value, hint)
    if not ok:
        raise RecordValidationError(
            f"{path} must be {expected}, got {type(value).__name__}", field=key
        )


def _build(cls: type, data: Any, path: str) -> Any:
    if isinstance(data, cls):
        return copy.deepcopy(data)
    if not isinstance(data, Mapping):
        raise RecordValidationError(f"{path} must be a mapping", field=path)

    allowed = {f.name for f in fields(cls)}
    unknown = sorted(set(data) - allowed)
    if unknown:
        raise RecordValidationError(
            f"Unknown field(s) for {path}: {', '.join(unknown)}", field=path
        )

    nested = _NESTED.get(cls, {})
    hints = _hints(cls)
    kwargs: dict[str, Any] = {}
    for key, value in data.items():
        target = nested.get(key)
        if target is not None:
            if value is None:
                if key not in _NULLABLE_NESTED:
                    raise RecordValidationError(f"{path}.{key} may not be null", field=key)
            else:
                value = _build(target, value, f"{path}.{key}")
        else:
            if isinstance(value, (list, tuple)):
                value = list(value)
            _check_type(value, hints[key], f"{path}.{key}", key)
        kwargs[key] = value

    try:
        return cls(**kwargs)
    except TypeError as exc:
        raise RecordValidationError(f"Invalid {path}: {exc}", field=path) from None


def _validate_fields(
    data: Mapping[str, Any],
    *,
    allowed: tuple[str, ...],
    required: tuple[str, ...],
    immutable: tuple[str, ...],
    kind: str,
) -> None:
    if not isinstance(data, Mapping):
        raise RecordValidationError(f"{kind} fields must be a mapping")

    unknown = sorted(set(data) - set(allowed))
    if unknown:
        raise RecordValidationError(
            f"Unknown {kind} field(s): {', '.join(unknown)}", field=unknown[0]
        )

    for name in immutable:
        if name in data:
            raise RecordValidationError(f"{kind} field '{name}' cannot be set by callers", field=name)

    for name in required:
        if name not in data:
            raise RecordValidationError(f"Missing required {kind} field '{name}'", field=name)

    for name in ("name", "agent_id"):
        if name in data and name in allowed:
            value = data[name]
            if not isinstance(value, str) or not value.strip():
                raise RecordValidationError(f"{kind} field '{name}' must be a non-empty string", field=name)

    for name in _LIST_OF_TEXT:
        if name in data:
            value = data[name]
            if isinstance(value, str) or not isinstance(value, (list, tuple, set, frozenset)):
                raise RecordValidationError(f"{kind} field '{name}' must be a list of strings", field=name)
            if not all(isinstance(v, str) for v in value):
                raise RecordValidationError(f"{kind} field '{name}' must be a list of strings", field=name)


# ---------------------------------------------------------------------------
# Agent records
# ---------------------------------------------------------------------------


def validate_record_fields(data: Mapping[str, Any], creating: bool) -> None:
    """Reject create fields or patches that cannot produce a valid record."""
    _validate_fields(
        data,
        allowed=RECORD_FIELDS,
        required=("name",) if creating else (),
        immutable=STORE_ASSIGNED_FIELDS,
        kind="agent",
    )


def new_record(data: Mapping[str, Any], record_id: str, timestamp: str) -> AgentRecord:
    validate_record_fields(data, creating=True)
    merged = dict(data)
    if isinstance(merged.get("capabilities"), (set, frozenset)):
        merged["capabilities"] = sorted(merged["capabilities"])
    merged.update(id=record_id, created_at=timestamp, updated_at=timestamp)
    return _build(AgentRecord, merged, "agent")


def apply_record_patch(record: AgentRecord, patch: Mapping[str, Any], timestamp: str) -> AgentRecord:
    """Merge-patch ``record``: provided top-level fields overwrite, the rest are kept."""
    validate_record_fields(patch, creating=False)
    merged: dict[str, Any] = {name: getattr(record, name) for name in RECORD_FIELDS}
    for name in RECORD_FIELDS:
        if name in patch:
            merged[name] = patch[name]
    if isinstance(merged.get("capabilities"), (set, frozenset)):
        merged["capabilities"] = sorted(merged["capabilities"])
    merged["updated_at"] = timestamp
    return _build(AgentRecord, merged, "agent")


def record_to_dict(record: AgentRecord) -> dict[str, Any]:
    return to_plain(record)


def record_from_dict(data: Mapping[str, Any]) -> AgentRecord:
    return _build(AgentRecord, data, "agent")


# ---------------------------------------------------------------------------
# Contracts
# ---------------------------------------------------------------------------


def validate_contract_fields(data: Mapping[str, Any], creating: bool) -> None:
    _validate_fields(
        data,
        allowed=CONTRACT_FIELDS,
        required=("agent_id",) if creating else (),
        # agent_id is fixed once the contract exists
        immutable=STORE_ASSIGNED_FIELDS if creating else STORE_ASSIGNED_FIELDS + ("agent_id",),
        kind="contract",
    )


def new_contract(data: Mapping[str, Any], contract_id: str, timestamp: str) -> AgentContract:
    validate_contract_fields(data, creating=True)
    merged = dict(data)
    merged.update(id=contract_id, created_at=timestamp, updated_at=timestamp)
    return _build(AgentContract, merged, "contract")


def apply_contract_patch(
    contract: AgentContract, patch: Mapping[str, Any], timestamp: str
) -> AgentContract:
    validate_contract_fields(patch, creating=False)
    merged: dict[str, Any] = {name: getattr(contract, name) for name in CONTRACT_FIELDS}
    for name in CONTRACT_FIELDS:
        if name in patch:
            merged[name] = patch[name]
    merged["updated_at"] = timestamp
    return _build(AgentContract, merged, "contract")


def contract_to_dict(contract: AgentContract) -> dict[str, Any]:
    return to_plain(contract)


def contract_from_dict(data: Mapping[str, Any]) -> AgentContract:
    return _build(AgentContract, data, "contract")
