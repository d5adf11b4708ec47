"""Adapters — consumer-specific facades over one shared record store."""

from agentreg.adapters.base import AdapterEvent, StoreAdapter
from agentreg.adapters.discovery import DiscoveryAdapter
from agentreg.adapters.ledger import LedgerAdapter
from agentreg.adapters.management import ManagementAdapter

__all__ = [
    "AdapterEvent",
    "DiscoveryAdapter",
    "LedgerAdapter",
    "ManagementAdapter",
    "StoreAdapter",
]
