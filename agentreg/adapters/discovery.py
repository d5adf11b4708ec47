"""Discovery adapter — search, browse and statistics for the agent catalog."""

from __future__ import annotations

from collections import Counter
from collections.abc import Mapping
from dataclasses import asdict
from typing import Any, Optional, Union

from agentreg.adapters.base import StoreAdapter
from agentreg.convert import (
    DiscoveryItem,
    DiscoveryPage,
    DiscoveryStats,
    discovery_item_to_fields,
    to_discovery_item,
)
from agentreg.convert.shapes import Distribution, PageInfoModel
from agentreg.query import CacheStats, FilterParams, QueryEngine, SearchParams, SortParams
from agentreg.store.models import AgentRecord, RecordFilter
from agentreg.store.record_store import RecordStore

TOP_N = 10


def _distribution(counter: Counter, total: int, limit: Optional[int] = None) -> list[Distribution]:
    # most_common keeps first-seen order among equal counts
    return [
        Distribution(label=label, count=count, percentage=count / total * 100)
        for label, count in counter.most_common(limit)
    ]


class DiscoveryAdapter(StoreAdapter):
    """Catalog facade. Paged searches go through the query engine and its cache."""

    name = "discovery"

    def __init__(self, store: RecordStore, engine: Optional[QueryEngine] = None) -> None:
        super().__init__(store)
        self._engine = engine if engine is not None else QueryEngine(store)

    @property
    def engine(self) -> QueryEngine:
        return self._engine

    def _shape_record(self, record: AgentRecord) -> DiscoveryItem:
        return to_discovery_item(record)

    # ── Queries ──────────────────────────────────────────────

    def search_agents(
        self,
        search: Optional[SearchParams] = None,
        sort: Optional[SortParams] = None,
        filters: Optional[FilterParams] = None,
    ) -> DiscoveryPage:
        result = self._engine.search(search, sort, filters)
        return DiscoveryPage(
            items=[to_discovery_item(r) for r in result.items],
            page_info=PageInfoModel(**asdict(result.page_info)),
            cached=result.cached,
            generated_at=result.generated_at,
        )

    def get_agent_details(self, agent_id: str) -> Optional[DiscoveryItem]:
        record = self._store.get(agent_id)
        return to_discovery_item(record) if record is not None else None

    def search(self, text: str) -> list[DiscoveryItem]:
        return [to_discovery_item(r) for r in self._store.search(text)]

    def filter(self, predicates: Optional[RecordFilter] = None, **fields: Any) -> list[DiscoveryItem]:
        return [to_discovery_item(r) for r in self._store.filter(predicates, **fields)]

    def get_statistics(self) -> DiscoveryStats:
        records = self._store.list()
        base = self._store.get_stats()
        if not records:
            return DiscoveryStats()

        total = len(records)
        capabilities: Counter = Counter()
        types: Counter = Counter()
        networks: Counter = Counter()
        statuses: Counter = Counter()
        for r in records:
            capabilities.update(r.capabilities)
            types[r.type] += 1
            if r.is_on_chain and r.ledger.network:
                networks[r.ledger.network] += 1
            statuses[r.status.value] += 1

        return DiscoveryStats(
            total_agents=base.total_agents,
            active_agents=base.active_agents,
            inactive_agents=base.inactive_agents,
            verified_agents=base.verified_agents,
            featured_agents=sum(1 for r in records if r.is_featured),
            on_chain_agents=base.on_chain_agents,
            average_rating=round(base.average_rating, 1),
            total_connections=sum(r.stats.connections for r in records if r.stats),
            top_capabilities=_distribution(capabilities, total, TOP_N),
            top_types=_distribution(types, total, TOP_N),
            network_distribution=_distribution(networks, total),
            status_distribution=_distribution(statuses, total),
        )

    # ── Mutations ────────────────────────────────────────────

    def add_agent(self, agent: Union[DiscoveryItem, Mapping[str, Any]]) -> DiscoveryItem:
        fields = discovery_item_to_fields(agent) if isinstance(agent, DiscoveryItem) else agent
        return to_discovery_item(self._store.create(fields))

    def update_agent(self, agent_id: str, patch: Mapping[str, Any]) -> DiscoveryItem:
        return to_discovery_item(self._update_agent(agent_id, patch))

    def delete_agent(self, agent_id: str) -> None:
        self._delete_agent(agent_id)

    # ── Cache ────────────────────────────────────────────────

    def clear_cache(self) -> None:
        self._engine.clear_cache()

    def get_cache_stats(self) -> CacheStats:
        return self._engine.get_cache_stats()

