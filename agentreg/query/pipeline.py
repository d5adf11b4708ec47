"""Stateless query pipeline: filter → search → sort → paginate.

The stage order is fixed. Filtering and text search both narrow the
snapshot; sorting and pagination always act on the fully reduced set.
"""

from __future__ import annotations

import math
from datetime import datetime, timezone
from typing import Any, Callable, Optional

from agentreg.query.models import (
    FilterParams,
    PageInfo,
    SearchParams,
    SortField,
    SortOrder,
    SortParams,
)
from agentreg.store.models import AgentRecord, matches_text

_EPOCH = datetime.min.replace(tzinfo=timezone.utc)


def apply_filters(records: list[AgentRecord], filters: Optional[FilterParams]) -> list[AgentRecord]:
    if filters is None:
        return list(records)
    return [r for r in records if filters.matches(r)]


def apply_search(records: list[AgentRecord], text: str) -> list[AgentRecord]:
    if not text:
        return list(records)
    return [r for r in records if matches_text(r, text)]


def _date_key(value: str) -> datetime:
    if not value:
        return _EPOCH
    try:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return _EPOCH
    return parsed if parsed.tzinfo else parsed.replace(tzinfo=timezone.utc)


def _version_key(value: str) -> tuple:
    # "1.10.0" sorts after "1.9.0"; non-numeric parts compare case-insensitively
    return tuple(
        (0, int(part), "") if part.isdigit() else (1, 0, part.casefold())
        for part in value.split(".")
    )


_SORT_KEYS: dict[SortField, Callable[[AgentRecord], Any]] = {
    SortField.NAME: lambda r: r.name.casefold(),
    SortField.CREATED_AT: lambda r: _date_key(r.created_at),
    SortField.UPDATED_AT: lambda r: _date_key(r.updated_at),
    SortField.RATING: lambda r: r.rating or 0.0,
    SortField.STATUS: lambda r: r.status.value,
    SortField.TYPE: lambda r: r.type.casefold(),
    SortField.CAPABILITIES: lambda r: len(r.capabilities),
    SortField.CODE_SIZE: lambda r: r.code_size,
    SortField.CONNECTIONS: lambda r: r.stats.connections if r.stats else 0,
    SortField.VERSION: lambda r: _version_key(r.version),
}


def apply_sort(records: list[AgentRecord], sort: Optional[SortParams]) -> list[AgentRecord]:
    """Stable sort; equal keys keep their snapshot order in both directions."""
    if sort is None:
        return list(records)
    return sorted(records, key=_SORT_KEYS[sort.field], reverse=sort.order == SortOrder.DESC)


def clamp_page(page: int, page_size: int) -> tuple[int, int]:
    return max(1, int(page)), max(1, int(page_size))


def paginate(records: list[AgentRecord], page: int, page_size: int) -> tuple[list[AgentRecord], PageInfo]:
    page, page_size = clamp_page(page, page_size)
    total = len(records)
    total_pages = math.ceil(total / page_size)
    start = (page - 1) * page_size
    info = PageInfo(
        page=page,
        page_size=page_size,
        total=total,
        total_pages=total_pages,
        has_next=page < total_pages,
        has_prev=page > 1,
    )
    return records[start : start + page_size], info


def run_pipeline(
    records: list[AgentRecord],
    search: SearchParams,
    sort: Optional[SortParams],
    filters: Optional[FilterParams],
) -> tuple[list[AgentRecord], PageInfo]:
    reduced = apply_filters(records, filters)
    reduced = apply_search(reduced, search.text)
    reduced = apply_sort(reduced, sort)
    return paginate(reduced, search.page, search.page_size)
