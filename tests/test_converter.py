"""Tests for the record <-> adapter shape converter."""

from agentreg.convert import (
    ContractView,
    DiscoveryItem,
    discovery_item_to_fields,
    extract_capabilities,
    ledger_agent_to_fields,
    managed_agent_to_fields,
    to_contract_view,
    to_discovery_item,
    to_ledger_agent,
    to_managed_agent,
)
from agentreg.store import MemorySnapshotSlot, RecordStore
from agentreg.store.codec import record_to_dict
from agentreg.store.models import AgentStatus, Permission, VerificationStatus
from agentreg.store.seed import seed_contracts, seed_records

_STORE_ASSIGNED = ("id", "created_at", "updated_at")


def _seed(record_id: str):
    return next(r for r in seed_records() if r.id == record_id)


def _comparable(record) -> dict:
    data = record_to_dict(record)
    for key in _STORE_ASSIGNED:
        data.pop(key)
    return data


def test_extract_capabilities_in_keyword_order():
    assert extract_capabilities("Monitors security of blockchain transactions") == [
        "Security Monitoring",
        "Transaction Processing",
        "Blockchain Operations",
    ]
    assert extract_capabilities("Generates images from text") == [
        "Image Processing",
        "Natural Language Processing",
        "Content Generation",
    ]


def test_extract_capabilities_fallback():
    assert extract_capabilities("") == ["Work Assistant"]
    assert extract_capabilities("hello world") == ["Work Assistant"]


def test_discovery_item_carries_derived_fields():
    item = to_discovery_item(_seed("bc-agent-001"))

    assert item.id == "bc-agent-001"
    assert item.tags == ["AI", "Assistant", "Blockchain"]
    assert item.categories == ["AI Assistant"]
    assert item.connections == 45
    assert item.popularity == 90
    assert item.permissions == [Permission.READ, Permission.WRITE, Permission.EXECUTE]
    assert item.ledger.network == "Ethereum"
    assert item.ledger.verification_status == VerificationStatus.VERIFIED


def test_discovery_item_without_stats():
    store = RecordStore(MemorySnapshotSlot(), seed=False)
    item = to_discovery_item(store.create({"name": "bare"}))
    assert item.stats is None
    assert item.connections is None
    assert item.tags == []


def test_discovery_round_trip_preserves_record():
    original = _seed("agent_002")
    fields = discovery_item_to_fields(to_discovery_item(original))

    for key in _STORE_ASSIGNED + ("permissions", "tags", "connections"):
        assert key not in fields

    store = RecordStore(MemorySnapshotSlot(), seed=False)
    recreated = store.create(fields)
    assert _comparable(recreated) == _comparable(original)


def test_discovery_item_ignores_unknown_keys():
    item = DiscoveryItem.model_validate({"id": "x", "name": "n", "favourite_colour": "blue"})
    assert "favourite_colour" not in item.model_dump()


def test_managed_agent_mapping():
    record = _seed("agent_001")
    agent = to_managed_agent(record)

    assert agent.language == "typescript"
    assert agent.code_size == 256
    assert agent.permissions == record.permissions
    assert agent.status == AgentStatus.ACTIVE

    fields = managed_agent_to_fields(agent)
    assert "permissions" not in fields
    assert fields["config"]["permissions"] == ["read", "write", "execute"]
    assert fields["capabilities"] == ["Data Analysis"]


def test_ledger_agent_owner_is_bound_user():
    record = _seed("bc-agent-001")
    agent = to_ledger_agent(record)

    assert agent.owner == record.bound_user
    assert agent.model == "GPT-4"
    assert agent.ledger.is_on_chain

    fields = ledger_agent_to_fields(agent)
    assert fields["bound_user"] == record.bound_user
    assert "owner" not in fields
    assert fields["ledger"]["block_number"] == 18000000


def test_contract_view_embeds_agent():
    contract = seed_contracts()[0]

    view = to_contract_view(contract, _seed(contract.agent_id))
    assert isinstance(view, ContractView)
    assert view.agent.id == "bc-agent-001"
    assert view.ledger.network == "Ethereum"

    assert to_contract_view(contract).agent is None
