"""Composition root: one store, one query engine, the three adapters."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from agentreg.adapters import DiscoveryAdapter, LedgerAdapter, ManagementAdapter
from agentreg.config import Settings, load_settings
from agentreg.ledger.gateway import LedgerGateway, create_gateway
from agentreg.query import QueryEngine
from agentreg.store.record_store import RecordStore
from agentreg.store.snapshot import FileSnapshotSlot, SnapshotSlot

logger = logging.getLogger(__name__)


@dataclass
class Registry:
    """Everything a surface (CLI, HTTP app, view) needs, wired to one store."""

    settings: Settings
    store: RecordStore
    engine: QueryEngine
    discovery: DiscoveryAdapter
    management: ManagementAdapter
    ledger: LedgerAdapter

    def close(self) -> None:
        self.discovery.close()
        self.management.close()
        self.ledger.close()
        self.engine.close()
        self.store.close()

    def __enter__(self) -> Registry:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()


def open_registry(
    settings: Optional[Settings] = None,
    *,
    slot: Optional[SnapshotSlot] = None,
    gateway: Optional[LedgerGateway] = None,
) -> Registry:
    """Construct → load (or seed) the store and wire adapters around it."""
    settings = settings or load_settings()
    if slot is None:
        slot = FileSnapshotSlot(settings.home, key=settings.storage_key)

    store = RecordStore(
        slot,
        enable_persistence=settings.enable_persistence,
        enable_events=settings.enable_events,
        seed=settings.seed_on_empty,
    )
    engine = QueryEngine(
        store,
        ttl_seconds=settings.cache_ttl_seconds,
        invalidate_on_write=settings.invalidate_on_write,
        default_page_size=settings.default_page_size,
    )
    logger.debug("Opened registry at %s with %d agents", settings.home, len(store))
    return Registry(
        settings=settings,
        store=store,
        engine=engine,
        discovery=DiscoveryAdapter(store, engine),
        management=ManagementAdapter(store),
        ledger=LedgerAdapter(store, gateway or create_gateway(settings.ledger_gateway)),
    )
