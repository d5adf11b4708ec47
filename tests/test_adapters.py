"""Tests for the discovery, management and ledger adapters."""

import pytest

from agentreg.adapters import DiscoveryAdapter, LedgerAdapter, ManagementAdapter
from agentreg.convert import AgentDraft, ContractView, DiscoveryItem, ManagedAgent
from agentreg.errors import AgentNotFoundError, ContractNotFoundError, RecordValidationError
from agentreg.ledger import DeterministicLedgerGateway
from agentreg.query import QueryEngine, SearchParams
from agentreg.store import EventKind, MemorySnapshotSlot, RecordStore
from agentreg.store.models import AgentStatus, ContractStatus, VerificationStatus


def _seeded_store() -> RecordStore:
    return RecordStore(MemorySnapshotSlot())


# ── Discovery ────────────────────────────────────────────────────────


def test_discovery_search_agents_uses_engine_cache():
    store = _seeded_store()
    discovery = DiscoveryAdapter(store, QueryEngine(store))

    first = discovery.search_agents(SearchParams(text="agent"))
    second = discovery.search_agents(SearchParams(text="agent"))

    assert first.page_info.total == 2
    assert not first.cached
    assert second.cached
    assert discovery.get_cache_stats().hits == 1

    discovery.clear_cache()
    assert discovery.get_cache_stats().size == 0


def test_discovery_details():
    discovery = DiscoveryAdapter(_seeded_store())
    item = discovery.get_agent_details("agent_001")
    assert isinstance(item, DiscoveryItem)
    assert item.name == "Data Processing Agent"
    assert discovery.get_agent_details("missing") is None


def test_discovery_details_follow_writes_immediately():
    store = _seeded_store()
    discovery = DiscoveryAdapter(store, QueryEngine(store))
    assert discovery.get_agent_details("agent_001").name == "Data Processing Agent"

    discovery.update_agent("agent_001", {"name": "Renamed"})
    assert discovery.get_agent_details("agent_001").name == "Renamed"

    discovery.delete_agent("agent_001")
    assert discovery.get_agent_details("agent_001") is None
    assert discovery.get_cache_stats().size == 0


def test_discovery_statistics_on_seed_data():
    stats = DiscoveryAdapter(_seeded_store()).get_statistics()

    assert stats.total_agents == 3
    assert stats.active_agents == 3
    assert stats.on_chain_agents == 1
    assert stats.total_connections == 85
    assert stats.average_rating == 0.0
    assert stats.top_capabilities[0].label == "Work Assistant"
    assert stats.top_capabilities[0].count == 3
    assert stats.top_capabilities[0].percentage == 100.0
    assert [d.label for d in stats.network_distribution] == ["Ethereum"]
    assert [(d.label, d.count) for d in stats.status_distribution] == [("active", 3)]


def test_discovery_statistics_empty_store():
    store = RecordStore(MemorySnapshotSlot(), seed=False)
    stats = DiscoveryAdapter(store).get_statistics()
    assert stats.total_agents == 0
    assert stats.top_capabilities == []


def test_discovery_mutations():
    store = _seeded_store()
    discovery = DiscoveryAdapter(store)

    item = discovery.add_agent({"name": "Data Bot", "capabilities": ["analytics"]})
    assert store.get(item.id).name == "Data Bot"

    updated = discovery.update_agent(item.id, {"is_featured": True})
    assert updated.is_featured

    discovery.delete_agent(item.id)
    assert store.get(item.id) is None


def test_discovery_add_agent_from_item():
    store = _seeded_store()
    discovery = DiscoveryAdapter(store)
    template = discovery.get_agent_details("agent_002")

    copy = discovery.add_agent(template)
    assert copy.id != "agent_002"
    assert copy.name == template.name
    assert copy.metadata.tags == template.metadata.tags


def test_discovery_not_found_and_validation_errors():
    discovery = DiscoveryAdapter(_seeded_store())
    with pytest.raises(AgentNotFoundError):
        discovery.update_agent("missing", {"name": "x"})
    with pytest.raises(AgentNotFoundError):
        discovery.delete_agent("missing")
    with pytest.raises(RecordValidationError):
        discovery.update_agent("agent_001", {"status": "asleep"})


def test_discovery_search_and_filter_helpers():
    discovery = DiscoveryAdapter(_seeded_store())
    assert [i.id for i in discovery.search("security")] == ["agent_002"]
    assert [i.id for i in discovery.filter(is_on_chain=True)] == ["bc-agent-001"]


# ── Management ───────────────────────────────────────────────────────


def test_management_create_agent_from_draft():
    store = _seeded_store()
    management = ManagementAdapter(store)

    agent = management.create_agent(
        AgentDraft(
            name="Vision Bot",
            description="Image recognition for automated quality checks",
            language="python",
            code_size=128,
            permissions=["read", "execute"],
            user_binding={"bound_user_id": "user_777"},
        )
    )

    assert isinstance(agent, ManagedAgent)
    assert agent.status == AgentStatus.ACTIVE
    assert agent.bound_user == "user_777"
    assert agent.bound_at
    assert agent.code_hash.startswith("0x")
    assert len(agent.profile_hash) == 66

    record = store.get(agent.id)
    assert record.capabilities == ["Image Processing", "Automation"]
    assert record.type == "AI Assistant"
    assert record.metadata.tags == ["New Agent"]
    assert record.metadata.categories == ["AI Assistant"]


def test_management_create_agent_keeps_explicit_capabilities():
    store = _seeded_store()
    agent = ManagementAdapter(store).create_agent({"name": "Custom", "capabilities": ["Bespoke"]})
    assert store.get(agent.id).capabilities == ["Bespoke"]
    assert agent.bound_at == ""


def test_management_status_and_delete():
    store = _seeded_store()
    management = ManagementAdapter(store)

    assert management.update_agent_status("agent_001", "inactive").status == AgentStatus.INACTIVE
    with pytest.raises(RecordValidationError):
        management.update_agent_status("agent_001", "sleeping")
    with pytest.raises(AgentNotFoundError):
        management.update_agent_status("missing", "active")

    management.delete_agent("agent_001")
    with pytest.raises(AgentNotFoundError):
        management.get_agent("agent_001")


def test_management_filter_agents():
    management = ManagementAdapter(_seeded_store())

    assert [a.id for a in management.filter_agents(status="active", language="python")] == ["agent_002"]
    assert [a.id for a in management.filter_agents(search="blockchain")] == ["bc-agent-001"]
    assert len(management.filter_agents()) == 3
    assert management.filter_agents(status="stopped") == []


def test_management_stats():
    stats = ManagementAdapter(_seeded_store()).get_agent_stats()
    assert stats.total_agents == 3
    assert stats.total_connections == 85
    assert stats.average_code_size == (256 + 384 + 0) / 3
    assert stats.average_calls == (15420 + 8900 + 25600) / 3


def test_management_stats_empty_store():
    store = RecordStore(MemorySnapshotSlot(), seed=False)
    stats = ManagementAdapter(store).get_agent_stats()
    assert stats.total_agents == 0
    assert stats.average_calls == 0


# ── Ledger ───────────────────────────────────────────────────────────


def test_register_agent_contract():
    store = _seeded_store()
    ledger = LedgerAdapter(store, DeterministicLedgerGateway())

    view = ledger.register_agent_contract({"agent_id": "agent_001", "contract_name": "Data Identity"})

    assert isinstance(view, ContractView)
    assert view.status == ContractStatus.ACTIVE
    assert view.owner_address == "user_123"
    assert view.agent.id == "agent_001"
    assert view.ledger.network == "Ethereum Testnet"
    assert view.metadata.compliance == ["GDPR", "SOC2", "ISO27001"]
    assert len(ledger.fetch_agent_contracts()) == 2


def test_register_contract_for_missing_agent():
    store = _seeded_store()
    gateway = DeterministicLedgerGateway()
    ledger = LedgerAdapter(store, gateway)

    with pytest.raises(AgentNotFoundError):
        ledger.register_agent_contract({"agent_id": "missing", "contract_name": "x"})
    assert len(store.list_contracts()) == 1


class _DeletingGateway(DeterministicLedgerGateway):
    """Removes the agent while the registration is in flight."""

    def __init__(self, store):
        super().__init__()
        self.store = store

    def register_contract(self, record, contract_name):
        receipt = super().register_contract(record, contract_name)
        self.store.delete(record.id)
        return receipt

    def anchor(self, record):
        receipt = super().anchor(record)
        self.store.delete(record.id)
        return receipt


def test_agent_deleted_during_registration_leaves_no_contract():
    store = _seeded_store()
    ledger = LedgerAdapter(store, _DeletingGateway(store))

    with pytest.raises(AgentNotFoundError):
        ledger.register_agent_contract({"agent_id": "agent_002", "contract_name": "late"})
    assert [c.agent_id for c in store.list_contracts()] == ["bc-agent-001"]


def test_agent_deleted_during_anchor_is_not_found():
    store = _seeded_store()
    ledger = LedgerAdapter(store, _DeletingGateway(store))
    with pytest.raises(AgentNotFoundError):
        ledger.anchor_agent("agent_002")
    assert "agent_002" not in store


def test_contract_status_and_delete():
    store = _seeded_store()
    ledger = LedgerAdapter(store)

    view = ledger.update_agent_contract_status("contract-001", "suspended")
    assert view.status == ContractStatus.SUSPENDED
    assert ledger.get_agent_contract("contract-001").status == ContractStatus.SUSPENDED

    with pytest.raises(ContractNotFoundError):
        ledger.update_agent_contract_status("missing", "active")

    ledger.delete_agent_contract("contract-001")
    with pytest.raises(ContractNotFoundError):
        ledger.delete_agent_contract("contract-001")


def test_anchor_agent():
    store = _seeded_store()
    ledger = LedgerAdapter(store, DeterministicLedgerGateway(start_block=500))

    first = ledger.anchor_agent("agent_001")
    second = ledger.anchor_agent("agent_002")

    assert first.ledger.is_on_chain
    assert first.ledger.verification_status == VerificationStatus.VERIFIED
    assert first.ledger.block_number == 501
    assert second.ledger.block_number == 502
    assert store.get("agent_001").is_on_chain
    assert len(ledger.get_available_agents()) == 3


# ── Change forwarding ────────────────────────────────────────────────


def test_adapters_see_each_others_changes():
    store = _seeded_store()
    discovery = DiscoveryAdapter(store)
    management = ManagementAdapter(store)
    events = []
    management.add_change_listener(events.append)

    discovery.update_agent("agent_001", {"status": "inactive"})

    assert len(events) == 1
    event = events[0]
    assert event.kind == EventKind.RECORD_UPDATED
    assert event.subject_id == "agent_001"
    assert isinstance(event.item, ManagedAgent)
    assert event.item.status == AgentStatus.INACTIVE
    assert event.patch == {"status": "inactive"}
    assert management.get_agent("agent_001").status == AgentStatus.INACTIVE


def test_ledger_adapter_forwards_contract_events():
    store = _seeded_store()
    ledger = LedgerAdapter(store)
    events = []
    ledger.add_change_listener(events.append)

    ledger.register_agent_contract({"agent_id": "agent_002", "contract_name": "Security Identity"})

    assert events[-1].kind == EventKind.CONTRACT_ADDED
    assert isinstance(events[-1].item, ContractView)
    assert events[-1].item.agent.id == "agent_002"


def test_closed_adapter_stops_forwarding():
    store = _seeded_store()
    management = ManagementAdapter(store)
    events = []
    token = management.add_change_listener(events.append)

    assert management.remove_change_listener(token)
    store.update("agent_001", {"name": "unheard"})
    assert events == []

    management.add_change_listener(events.append)
    management.close()
    store.update("agent_001", {"name": "still unheard"})
    assert events == []
