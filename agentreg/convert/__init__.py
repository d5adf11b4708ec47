"""Converter — canonical records to and from each consumer's vocabulary."""

from agentreg.convert.converter import (
    discovery_item_to_fields,
    extract_capabilities,
    ledger_agent_to_fields,
    managed_agent_to_fields,
    to_contract_view,
    to_discovery_item,
    to_ledger_agent,
    to_managed_agent,
)
from agentreg.convert.shapes import (
    AgentDraft,
    ContractRegistration,
    ContractView,
    DiscoveryItem,
    DiscoveryPage,
    DiscoveryStats,
    LedgerAgent,
    ManagedAgent,
    ManagementStats,
)

__all__ = [
    "AgentDraft",
    "ContractRegistration",
    "ContractView",
    "DiscoveryItem",
    "DiscoveryPage",
    "DiscoveryStats",
    "LedgerAgent",
    "ManagedAgent",
    "ManagementStats",
    "discovery_item_to_fields",
    "extract_capabilities",
    "ledger_agent_to_fields",
    "managed_agent_to_fields",
    "to_contract_view",
    "to_discovery_item",
    "to_ledger_agent",
    "to_managed_agent",
]
