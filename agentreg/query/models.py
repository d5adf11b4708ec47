"""Query parameter and result models for the query engine."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

from agentreg.store.models import AgentRecord, AgentStatus, RecordFilter, coerce_enum

DEFAULT_PAGE_SIZE = 12


class SortField(str, Enum):
    NAME = "name"
    CREATED_AT = "created_at"
    UPDATED_AT = "updated_at"
    RATING = "rating"
    STATUS = "status"
    TYPE = "type"
    CAPABILITIES = "capabilities"  # number of capability tags
    CODE_SIZE = "code_size"
    CONNECTIONS = "connections"
    VERSION = "version"


class SortOrder(str, Enum):
    ASC = "asc"
    DESC = "desc"


@dataclass
class SearchParams:
    """Free-text term plus the requested page."""

    text: str = ""
    page: int = 1
    page_size: int = DEFAULT_PAGE_SIZE


@dataclass
class SortParams:
    field: SortField = SortField.CREATED_AT
    order: SortOrder = SortOrder.DESC

    def __post_init__(self) -> None:
        self.field = coerce_enum(SortField, self.field, "sort field")
        self.order = coerce_enum(SortOrder, self.order, "sort order")


@dataclass
class FilterParams:
    """Independent filter predicates, combined with AND.

    ``None`` (and, for any-of lists, an empty list) means "not applied".
    """

    # Store-level predicates
    status: Optional[AgentStatus] = None
    type: Optional[str] = None
    capabilities: Optional[list[str]] = None
    is_verified: Optional[bool] = None
    is_on_chain: Optional[bool] = None

    # Discovery filters
    statuses: Optional[list[AgentStatus]] = None
    types: Optional[list[str]] = None
    languages: Optional[list[str]] = None
    tags: Optional[list[str]] = None
    networks: Optional[list[str]] = None
    owners: Optional[list[str]] = None
    min_rating: Optional[float] = None
    max_rating: Optional[float] = None
    min_code_size: Optional[int] = None
    max_code_size: Optional[int] = None
    is_featured: Optional[bool] = None
    is_active: Optional[bool] = None

    def __post_init__(self) -> None:
        if self.status is not None:
            self.status = coerce_enum(AgentStatus, self.status, "status")
        if self.statuses:
            self.statuses = [coerce_enum(AgentStatus, s, "statuses") for s in self.statuses]

    def matches(self, record: AgentRecord) -> bool:
        base = RecordFilter(
            status=self.status,
            type=self.type,
            capabilities=self.capabilities,
            is_verified=self.is_verified,
            is_on_chain=self.is_on_chain,
        )
        if not base.matches(record):
            return False
        if self.statuses and record.status not in self.statuses:
            return False
        if self.types and record.type not in self.types:
            return False
        if self.languages and record.language not in self.languages:
            return False
        if self.tags and not any(t in record.metadata.tags for t in self.tags):
            return False
        if self.networks and record.ledger.network not in self.networks:
            return False
        if self.owners and not (
            record.bound_user in self.owners
            or record.config.user_binding.bound_user_id in self.owners
        ):
            return False
        rating = record.rating or 0.0
        if self.min_rating is not None and rating < self.min_rating:
            return False
        if self.max_rating is not None and rating > self.max_rating:
            return False
        if self.min_code_size is not None and record.code_size < self.min_code_size:
            return False
        if self.max_code_size is not None and record.code_size > self.max_code_size:
            return False
        if self.is_featured is not None and record.is_featured != self.is_featured:
            return False
        if self.is_active is not None and (record.status == AgentStatus.ACTIVE) != self.is_active:
            return False
        return True


@dataclass
class PageInfo:
    page: int
    page_size: int
    total: int
    total_pages: int
    has_next: bool
    has_prev: bool


@dataclass
class QueryResult:
    """One page of a full filter → search → sort → paginate run."""

    items: list[AgentRecord]
    page_info: PageInfo
    search: SearchParams = field(default_factory=SearchParams)
    sort: SortParams = field(default_factory=SortParams)
    filters: FilterParams = field(default_factory=FilterParams)
    generated_at: str = ""  # ISO 8601, when the pipeline actually ran
    cached: bool = False


@dataclass
class CacheEntryInfo:
    key: str
    age: float  # seconds
    ttl: float


@dataclass
class CacheStats:
    size: int = 0
    hits: int = 0
    misses: int = 0
    evictions: int = 0
    entries: list[CacheEntryInfo] = field(default_factory=list)
