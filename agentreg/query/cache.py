"""Time-boxed result cache and canonical query fingerprints."""

from __future__ import annotations

import hashlib
import json
import logging
import time
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from typing import Any

from agentreg.query.models import CacheEntryInfo, CacheStats
from agentreg.store.codec import to_plain

logger = logging.getLogger(__name__)

DEFAULT_TTL_SECONDS = 5 * 60


def _canonical(value: Any) -> Any:
    """Drop unset values and order any-of lists so equal queries render equally."""
    if isinstance(value, Mapping):
        result = {}
        for k, v in value.items():
            v = _canonical(v)
            if v is None or v == []:
                continue
            result[str(k)] = v
        return result
    if isinstance(value, list):
        items = [_canonical(v) for v in value]
        return sorted(items, key=lambda v: json.dumps(v, sort_keys=True))
    return value


def fingerprint(namespace: str, **params: Any) -> str:
    """Deterministic cache key for a set of query parameters."""
    payload = _canonical(to_plain(params))
    text = json.dumps(payload, sort_keys=True, separators=(",", ":"))
    digest = hashlib.sha256(text.encode("utf-8")).hexdigest()
    return f"{namespace}:{digest}"


@dataclass
class _Entry:
    value: Any
    stored_at: float
    ttl: float


_MISSING = object()


class TTLCache:
    """Key → value cache whose entries expire ``ttl`` seconds after being stored.

    Expired entries are evicted lazily, on the next lookup of their key or on
    ``purge_expired()``.
    """

    def __init__(
        self,
        default_ttl: float = DEFAULT_TTL_SECONDS,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.default_ttl = default_ttl
        self._clock = clock
        self._entries: dict[str, _Entry] = {}
        self.hits = 0
        self.misses = 0
        self.evictions = 0

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: object) -> bool:
        return key in self._entries

    def _expired(self, entry: _Entry, now: float) -> bool:
        return now - entry.stored_at > entry.ttl

    def get(self, key: str, default: Any = None) -> Any:
        entry = self._entries.get(key)
        if entry is None:
            self.misses += 1
            return default
        if self._expired(entry, self._clock()):
            del self._entries[key]
            self.evictions += 1
            self.misses += 1
            logger.debug("Cache entry %s expired", key)
            return default
        self.hits += 1
        return entry.value

    def lookup(self, key: str) -> tuple[bool, Any]:
        """Return ``(found, value)``; distinguishes a cached ``None`` from a miss."""
        value = self.get(key, _MISSING)
        if value is _MISSING:
            return False, None
        return True, value

    def set(self, key: str, value: Any, ttl: float | None = None) -> None:
        self._entries[key] = _Entry(
            value=value,
            stored_at=self._clock(),
            ttl=self.default_ttl if ttl is None else ttl,
        )

    def delete(self, key: str) -> bool:
        return self._entries.pop(key, None) is not None

    def clear(self) -> None:
        self._entries.clear()

    def purge_expired(self) -> int:
        now = self._clock()
        expired = [k for k, e in self._entries.items() if self._expired(e, now)]
        for key in expired:
            del self._entries[key]
        self.evictions += len(expired)
        return len(expired)

    def stats(self) -> CacheStats:
        now = self._clock()
        return CacheStats(
            size=len(self._entries),
            hits=self.hits,
            misses=self.misses,
            evictions=self.evictions,
            entries=[
                CacheEntryInfo(key=k, age=now - e.stored_at, ttl=e.ttl)
                for k, e in self._entries.items()
            ],
        )
