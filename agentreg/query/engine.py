"""Query engine: the pipeline plus a TTL result cache in front of it."""

from __future__ import annotations

import copy
import logging
import time
from collections.abc import Callable
from dataclasses import replace
from datetime import datetime, timezone
from typing import Optional, Protocol

from agentreg.query.cache import DEFAULT_TTL_SECONDS, TTLCache, fingerprint
from agentreg.query.models import (
    DEFAULT_PAGE_SIZE,
    CacheStats,
    FilterParams,
    QueryResult,
    SearchParams,
    SortParams,
)
from agentreg.query.pipeline import clamp_page, run_pipeline
from agentreg.store.models import AgentRecord

logger = logging.getLogger(__name__)


class RecordSource(Protocol):
    """Anything that can hand out a snapshot of records (usually a RecordStore)."""

    def list(self) -> list[AgentRecord]: ...

    def get(self, record_id: str) -> Optional[AgentRecord]: ...


class QueryEngine:
    """Runs filter → search → sort → paginate over a record source.

    Results are cached by parameter fingerprint for ``ttl_seconds``. Store
    writes do not invalidate the cache unless ``invalidate_on_write`` is set,
    in which case the engine subscribes to the source and clears on every
    change event.
    """

    def __init__(
        self,
        source: RecordSource,
        *,
        ttl_seconds: float = DEFAULT_TTL_SECONDS,
        clock: Optional[Callable[[], float]] = None,
        invalidate_on_write: bool = False,
        default_page_size: int = DEFAULT_PAGE_SIZE,
    ) -> None:
        self._source = source
        self._cache = TTLCache(ttl_seconds, clock or time.monotonic)
        self.default_page_size = default_page_size
        self.invalidate_on_write = invalidate_on_write
        self.pipeline_runs = 0
        self._token: Optional[int] = None
        if invalidate_on_write:
            subscribe = getattr(source, "subscribe", None)
            if subscribe is None:
                raise TypeError("invalidate_on_write needs a source that supports subscribe()")
            self._token = subscribe(self._on_change)

    @property
    def ttl_seconds(self) -> float:
        return self._cache.default_ttl

    def _on_change(self, event: object) -> None:
        if len(self._cache):
            logger.debug("Store changed; dropping %d cached results", len(self._cache))
        self._cache.clear()

    # ── Queries ─────────────────────────────────────────────

    def search(
        self,
        search: Optional[SearchParams] = None,
        sort: Optional[SortParams] = None,
        filters: Optional[FilterParams] = None,
    ) -> QueryResult:
        """Run (or replay from cache) one page of the query pipeline."""
        if search is None:
            search = SearchParams(page_size=self.default_page_size)
        page, page_size = clamp_page(search.page, search.page_size)
        search = replace(search, text=(search.text or "").strip(), page=page, page_size=page_size)
        sort = sort or SortParams()
        filters = filters or FilterParams()

        key = fingerprint("search", search=search, sort=sort, filters=filters)
        found, cached = self._cache.lookup(key)
        if found:
            logger.debug("Query cache hit %s", key)
            return replace(copy.deepcopy(cached), cached=True)

        logger.debug("Query cache miss %s", key)
        items, page_info = run_pipeline(self._source.list(), search, sort, filters)
        self.pipeline_runs += 1
        result = QueryResult(
            items=items,
            page_info=page_info,
            search=search,
            sort=sort,
            filters=filters,
            generated_at=datetime.now(timezone.utc).isoformat(),
        )
        self._cache.set(key, copy.deepcopy(result))
        return result

    def get_details(self, record_id: str) -> Optional[AgentRecord]:
        key = fingerprint("details", id=record_id)
        found, cached = self._cache.lookup(key)
        if found:
            return copy.deepcopy(cached)
        record = self._source.get(record_id)
        if record is None:
            return None
        self._cache.set(key, copy.deepcopy(record))
        return record

    # ── Cache management ────────────────────────────────────

    def clear_cache(self) -> None:
        self._cache.clear()

    def get_cache_stats(self) -> CacheStats:
        return self._cache.stats()

    def purge_expired(self) -> int:
        return self._cache.purge_expired()

    def close(self) -> None:
        if self._token is not None:
            self._source.unsubscribe(self._token)  # type: ignore[attr-defined]
            self._token = None
        self._cache.clear()
