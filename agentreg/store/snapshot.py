"""Durable snapshot slot for the record store.

The store writes its whole state into a single key-value slot after every
mutation. The payload is JSON::

    {"records": [[id, record], ...], "contracts": [[id, contract], ...],
     "timestamp": "<ISO 8601>"}
"""

from __future__ import annotations

import json
import re
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Optional

from agentreg.errors import PersistenceError, RecordValidationError
from agentreg.store.codec import (
    contract_from_dict,
    contract_to_dict,
    record_from_dict,
    record_to_dict,
)
from agentreg.store.models import AgentContract, AgentRecord

DEFAULT_STORAGE_KEY = "unified_agent_data"


class SnapshotSlot(ABC):
    """A single named durable slot holding one serialized snapshot."""

    key: str = DEFAULT_STORAGE_KEY

    @abstractmethod
    def read(self) -> Optional[str]:
        """Return the stored text, or ``None`` when nothing was written yet."""

    @abstractmethod
    def write(self, text: str) -> None:
        """Replace the stored text (last write wins)."""


class MemorySnapshotSlot(SnapshotSlot):
    """In-process slot, mainly for tests and ephemeral stores."""

    def __init__(self, text: Optional[str] = None, key: str = DEFAULT_STORAGE_KEY) -> None:
        self.key = key
        self.text = text
        self.writes = 0

    def read(self) -> Optional[str]:
        return self.text

    def write(self, text: str) -> None:
        self.text = text
        self.writes += 1


def _safe_filename(name: str) -> str:
    return re.sub(r"[^\w\-.]", "_", name)


class FileSnapshotSlot(SnapshotSlot):
    """JSON file slot stored as ``<base_dir>/<key>.json``."""

    def __init__(self, base_dir: str | Path | None = None, key: str = DEFAULT_STORAGE_KEY) -> None:
        self._base = Path(base_dir) if base_dir else Path.home() / ".agentreg"
        self.key = key
        self.path = self._base / f"{_safe_filename(key)}.json"

    def read(self) -> Optional[str]:
        if not self.path.exists():
            return None
        return self.path.read_text(encoding="utf-8")

    def write(self, text: str) -> None:
        self._base.mkdir(parents=True, exist_ok=True)
        tmp = self.path.with_suffix(".json.tmp")
        tmp.write_text(text, encoding="utf-8")
        tmp.replace(self.path)


# ---------------------------------------------------------------------------
# Encoding
# ---------------------------------------------------------------------------


def encode_snapshot(
    records: dict[str, AgentRecord],
    contracts: dict[str, AgentContract],
    timestamp: str,
) -> str:
    data = {
        "records": [[rid, record_to_dict(r)] for rid, r in records.items()],
        "contracts": [[cid, contract_to_dict(c)] for cid, c in contracts.items()],
        "timestamp": timestamp,
    }
    return json.dumps(data, indent=2, ensure_ascii=False)


def decode_snapshot(text: str) -> tuple[dict[str, AgentRecord], dict[str, AgentContract]]:
    """Parse a snapshot, raising ``PersistenceError`` on any structural problem."""
    try:
        data = json.loads(text)
    except json.JSONDecodeError as exc:
        raise PersistenceError(f"Snapshot is not valid JSON: {exc}") from exc
    if not isinstance(data, dict):
        raise PersistenceError("Snapshot root must be an object")

    records: dict[str, AgentRecord] = {}
    contracts: dict[str, AgentContract] = {}
    try:
        for rid, raw in _pairs(data.get("records", []), "records"):
            record = record_from_dict(raw)
            if record.id != rid:
                raise PersistenceError(f"Record key {rid!r} does not match id {record.id!r}")
            records[rid] = record
        for cid, raw in _pairs(data.get("contracts", []), "contracts"):
            contract = contract_from_dict(raw)
            if contract.id != cid:
                raise PersistenceError(f"Contract key {cid!r} does not match id {contract.id!r}")
            contracts[cid] = contract
    except RecordValidationError as exc:
        raise PersistenceError(f"Snapshot holds an invalid entry: {exc}") from exc
    return records, contracts


def _pairs(entries: object, section: str):
    if not isinstance(entries, list):
        raise PersistenceError(f"Snapshot section '{section}' must be a list")
    for entry in entries:
        if not isinstance(entry, list) or len(entry) != 2 or not isinstance(entry[0], str):
            raise PersistenceError(f"Malformed entry in snapshot section '{section}'")
        yield entry[0], entry[1]
