"""Pure mappings between canonical records and the adapter shapes.

Canonical → shape is lossless for every field the shape declares. The
reverse direction returns *store fields* (a dict suitable for
``RecordStore.create``/``update``); fields a narrow shape does not carry are
left out so the store defaults, or the existing values on a patch, apply.
"""

from __future__ import annotations

from typing import Any, Optional

from agentreg.convert.shapes import (
    ContractView,
    DiscoveryItem,
    LedgerAgent,
    ManagedAgent,
)
from agentreg.store.codec import contract_to_dict, record_to_dict
from agentreg.store.models import AgentContract, AgentRecord

DEFAULT_CAPABILITY = "Work Assistant"

# keyword (matched case-insensitively as a substring) -> capability tag
CAPABILITY_KEYWORDS: dict[str, str] = {
    "data": "Data Analysis",
    "analy": "Data Analysis",
    "processing": "Data Analysis",
    "image": "Image Processing",
    "vision": "Image Processing",
    "natural language": "Natural Language Processing",
    "text": "Natural Language Processing",
    "language": "Natural Language Processing",
    "security": "Security Monitoring",
    "monitor": "Security Monitoring",
    "protect": "Security Monitoring",
    "automat": "Automation",
    "trading": "Transaction Processing",
    "transaction": "Transaction Processing",
    "blockchain": "Blockchain Operations",
    "verif": "Identity Verification",
    "authenticat": "Identity Verification",
    "generat": "Content Generation",
    "creative": "Content Generation",
}

# Store fields that only the store may set, plus shape-only derived fields.
_NOT_STORE_FIELDS = {"id", "created_at", "updated_at"}
_DISCOVERY_DERIVED = {"permissions", "tags", "categories", "popularity", "connections", "response_time", "uptime"}


def extract_capabilities(description: str) -> list[str]:
    """Infer capability tags from free text, in keyword-table order.

    Falls back to ``["Work Assistant"]`` when no keyword matches.
    """
    text = (description or "").lower()
    found: list[str] = []
    for keyword, capability in CAPABILITY_KEYWORDS.items():
        if keyword in text and capability not in found:
            found.append(capability)
    return found or [DEFAULT_CAPABILITY]


def _to_fields(shape: Any, exclude: set[str]) -> dict[str, Any]:
    return shape.model_dump(mode="json", exclude=exclude | _NOT_STORE_FIELDS)


# ── Discovery ────────────────────────────────────────────


def to_discovery_item(record: AgentRecord) -> DiscoveryItem:
    data = record_to_dict(record)
    stats = record.stats
    data.update(
        permissions=data["config"]["permissions"],
        tags=list(record.metadata.tags),
        categories=list(record.metadata.categories),
        popularity=stats.popularity if stats else None,
        connections=stats.connections if stats else None,
        response_time=stats.response_time if stats else None,
        uptime=stats.uptime if stats else None,
    )
    return DiscoveryItem.model_validate(data)


def discovery_item_to_fields(item: DiscoveryItem) -> dict[str, Any]:
    """Store fields for a discovery item; derived shortcuts are dropped."""
    return _to_fields(item, _DISCOVERY_DERIVED)


# ── Management ───────────────────────────────────────────


def to_managed_agent(record: AgentRecord) -> ManagedAgent:
    data = record_to_dict(record)
    data["permissions"] = data["config"]["permissions"]
    return ManagedAgent.model_validate(data)


def managed_agent_to_fields(agent: ManagedAgent) -> dict[str, Any]:
    """Store fields for a managed agent.

    ``config.permissions`` is authoritative over the top-level copy. The
    management shape carries no capabilities, so they are inferred from the
    description.
    """
    fields = _to_fields(agent, {"permissions"})
    fields["capabilities"] = extract_capabilities(agent.description)
    return fields


# ── Ledger ───────────────────────────────────────────────


def to_ledger_agent(record: AgentRecord) -> LedgerAgent:
    data = record_to_dict(record)
    data["owner"] = record.bound_user
    return LedgerAgent.model_validate(data)


def ledger_agent_to_fields(agent: LedgerAgent) -> dict[str, Any]:
    fields = _to_fields(agent, {"owner"})
    fields["bound_user"] = agent.owner
    return fields


def to_contract_view(contract: AgentContract, agent: Optional[AgentRecord] = None) -> ContractView:
    data = contract_to_dict(contract)
    if agent is not None:
        data["agent"] = to_ledger_agent(agent)
    return ContractView.model_validate(data)
