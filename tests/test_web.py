"""Tests for the HTTP API."""

import tempfile

from fastapi.testclient import TestClient

from agentreg.config import Settings
from agentreg.ledger import DeterministicLedgerGateway
from agentreg.runtime import open_registry
from agentreg.store import MemorySnapshotSlot
from agentreg.web import create_app


def _client(tmpdir: str) -> TestClient:
    registry = open_registry(
        Settings(home=tmpdir, ledger_gateway="deterministic"),
        slot=MemorySnapshotSlot(),
        gateway=DeterministicLedgerGateway(),
    )
    return TestClient(create_app(registry))


def test_health_and_root():
    with tempfile.TemporaryDirectory() as tmpdir:
        client = _client(tmpdir)
        assert client.get("/health").json() == {"status": "healthy", "agents": 3}
        assert client.get("/").json()["docs"] == "/docs"


def test_agent_crud():
    with tempfile.TemporaryDirectory() as tmpdir:
        client = _client(tmpdir)

        resp = client.post("/api/agents", json={"name": "Data Bot", "capabilities": ["analytics"]})
        assert resp.status_code == 201
        agent_id = resp.json()["id"]

        resp = client.get(f"/api/agents/{agent_id}")
        assert resp.status_code == 200
        assert resp.json()["capabilities"] == ["analytics"]

        resp = client.patch(f"/api/agents/{agent_id}", json={"status": "inactive"})
        assert resp.status_code == 200
        assert resp.json()["status"] == "inactive"
        assert resp.json()["name"] == "Data Bot"

        assert [a["id"] for a in client.get("/api/agents", params={"status": "inactive"}).json()] == [agent_id]

        assert client.delete(f"/api/agents/{agent_id}").json() == {"ok": True}
        assert client.get(f"/api/agents/{agent_id}").status_code == 404
        assert client.delete(f"/api/agents/{agent_id}").status_code == 404


def test_agent_validation_errors():
    with tempfile.TemporaryDirectory() as tmpdir:
        client = _client(tmpdir)

        assert client.post("/api/agents", json={"description": "nameless"}).status_code == 422
        assert client.post("/api/agents", json={"name": "x", "colour": "blue"}).status_code == 422
        assert client.patch("/api/agents/agent_001", json={"id": "other"}).status_code == 422
        assert client.patch("/api/agents/missing", json={"name": "x"}).status_code == 404


def test_wrongly_typed_agent_is_rejected_before_storing():
    with tempfile.TemporaryDirectory() as tmpdir:
        client = _client(tmpdir)

        assert client.post("/api/agents", json={"name": "x", "description": None}).status_code == 422
        assert client.post("/api/agents", json={"name": "x", "metadata": {"tags": [1]}}).status_code == 422
        assert client.patch("/api/agents/agent_001", json={"version": 2}).status_code == 422

        resp = client.get("/api/agents/search", params={"sort": "version"})
        assert resp.status_code == 200
        assert resp.json()["page_info"]["total"] == 3
        assert client.get("/health").json()["agents"] == 3


def test_search_endpoint():
    with tempfile.TemporaryDirectory() as tmpdir:
        client = _client(tmpdir)

        resp = client.get("/api/agents/search", params={"text": "agent", "sort": "name", "order": "asc"})
        assert resp.status_code == 200
        body = resp.json()
        assert [i["id"] for i in body["items"]] == ["agent_001", "agent_002"]
        assert body["cached"] is False

        again = client.get("/api/agents/search", params={"text": "agent", "sort": "name", "order": "asc"})
        assert again.json()["cached"] is True

        resp = client.get("/api/agents/search", params={"networks": "Ethereum", "page_size": 5})
        assert [i["id"] for i in resp.json()["items"]] == ["bc-agent-001"]

        resp = client.get("/api/agents/search", params={"languages": "python,typescript", "on_chain": "false"})
        assert resp.json()["page_info"]["total"] == 2

        assert client.get("/api/agents/search", params={"sort": "colour"}).status_code == 422


def test_stats_endpoint():
    with tempfile.TemporaryDirectory() as tmpdir:
        body = _client(tmpdir).get("/api/agents/stats").json()
        assert body["total_agents"] == 3
        assert body["total_connections"] == 85


def test_management_endpoints():
    with tempfile.TemporaryDirectory() as tmpdir:
        client = _client(tmpdir)

        resp = client.post(
            "/api/management/agents",
            json={"name": "Trader", "description": "Automated trading", "language": "python"},
        )
        assert resp.status_code == 201
        agent = resp.json()
        assert agent["status"] == "active"

        resp = client.put(f"/api/management/agents/{agent['id']}/status", json={"status": "stopped"})
        assert resp.json()["status"] == "stopped"

        assert client.put("/api/management/agents/missing/status", json={"status": "active"}).status_code == 404
        assert client.get("/api/management/stats").json()["total_agents"] == 4
        assert len(client.get("/api/management/agents").json()) == 4

        assert client.delete(f"/api/management/agents/{agent['id']}").json() == {"ok": True}
        assert client.get(f"/api/management/agents/{agent['id']}").status_code == 404


def test_ledger_endpoints():
    with tempfile.TemporaryDirectory() as tmpdir:
        client = _client(tmpdir)

        resp = client.post(
            "/api/ledger/contracts",
            json={"agent_id": "agent_002", "contract_name": "Security Identity"},
        )
        assert resp.status_code == 201
        contract = resp.json()
        assert contract["status"] == "active"
        assert contract["agent"]["id"] == "agent_002"

        resp = client.put(f"/api/ledger/contracts/{contract['id']}/status", json={"status": "terminated"})
        assert resp.json()["status"] == "terminated"
        assert len(client.get("/api/ledger/contracts").json()) == 2

        resp = client.post("/api/ledger/contracts", json={"agent_id": "missing", "contract_name": "x"})
        assert resp.status_code == 404

        resp = client.post("/api/ledger/agents/agent_001/anchor")
        assert resp.status_code == 200
        assert resp.json()["ledger"]["is_on_chain"] is True
        assert resp.json()["ledger"]["verification_status"] == "verified"

        assert client.delete(f"/api/ledger/contracts/{contract['id']}").json() == {"ok": True}
        assert client.get(f"/api/ledger/contracts/{contract['id']}").status_code == 404


def test_query_cache_endpoints():
    with tempfile.TemporaryDirectory() as tmpdir:
        client = _client(tmpdir)
        client.get("/api/agents/search")
        client.get("/api/agents/search", params={"text": "agent"})

        stats = client.get("/api/query/cache").json()
        assert stats["size"] == 2
        assert stats["misses"] == 2

        assert client.post("/api/query/cache/purge").json() == {"purged": 0}
        assert client.delete("/api/query/cache").json() == {"ok": True}
        assert client.get("/api/query/cache").json()["size"] == 0
