"""Query engine — filter → search → sort → paginate with a TTL result cache."""

from agentreg.query.cache import TTLCache, fingerprint
from agentreg.query.engine import QueryEngine
from agentreg.query.models import (
    CacheStats,
    FilterParams,
    PageInfo,
    QueryResult,
    SearchParams,
    SortField,
    SortOrder,
    SortParams,
)

__all__ = [
    "CacheStats",
    "FilterParams",
    "PageInfo",
    "QueryEngine",
    "QueryResult",
    "SearchParams",
    "SortField",
    "SortOrder",
    "SortParams",
    "TTLCache",
    "fingerprint",
]
