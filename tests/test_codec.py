"""Tests for the record codec and merge-patch."""

import pytest

from agentreg.errors import RecordValidationError
from agentreg.store.codec import (
    apply_record_patch,
    contract_from_dict,
    contract_to_dict,
    record_from_dict,
    record_to_dict,
)
from agentreg.store.models import AgentStatus, Permission, VerificationStatus
from agentreg.store.seed import seed_contracts, seed_records


def _seed(record_id: str):
    return next(r for r in seed_records() if r.id == record_id)


def test_record_dict_is_json_ready():
    data = record_to_dict(_seed("bc-agent-001"))
    assert data["status"] == "active"
    assert data["config"]["permissions"] == ["read", "write", "execute"]
    assert data["config"]["user_binding"]["binding_method"] == "multiFactor"
    assert data["ledger"]["verification_status"] == "verified"


def test_seed_records_survive_dict_conversion():
    for record in seed_records():
        assert record_from_dict(record_to_dict(record)) == record
    for contract in seed_contracts():
        assert contract_from_dict(contract_to_dict(contract)) == contract


def test_from_dict_coerces_enums():
    record = record_from_dict(
        {
            "id": "x",
            "name": "coerced",
            "status": "inactive",
            "config": {"permissions": ["admin", "read-only"]},
            "ledger": {"is_on_chain": True, "verification_status": "pending"},
        }
    )
    assert record.status == AgentStatus.INACTIVE
    assert record.permissions == [Permission.ADMIN, Permission.READ_ONLY]
    assert record.ledger.verification_status == VerificationStatus.PENDING


def test_from_dict_rejects_unknown_nested_keys():
    with pytest.raises(RecordValidationError):
        record_from_dict({"id": "x", "name": "n", "ledger": {"chain": "eth"}})
    with pytest.raises(RecordValidationError):
        record_from_dict({"id": "x", "name": "n", "config": {"user_binding": {"pin": "1234"}}})


def test_nullable_nested_fields():
    assert record_from_dict({"id": "x", "name": "n", "stats": None}).stats is None
    with pytest.raises(RecordValidationError):
        record_from_dict({"id": "x", "name": "n", "config": None})


def test_field_types_follow_annotations():
    with pytest.raises(RecordValidationError) as exc_info:
        record_from_dict({"id": "x", "name": "n", "metadata": {"tags": ["ok", 2]}})
    assert exc_info.value.field == "tags"
    assert "agent.metadata.tags[1]" in str(exc_info.value)

    with pytest.raises(RecordValidationError):
        record_from_dict({"id": "x", "name": "n", "ledger": {"is_on_chain": 1}})
    with pytest.raises(RecordValidationError):
        contract_from_dict({"id": "c", "agent_id": "a", "ledger": {"gas_used": "lots"}})

    assert record_from_dict({"id": "x", "name": "n", "rating": None}).rating is None


def test_patch_keeps_absent_fields():
    record = _seed("agent_002")
    patched = apply_record_patch(record, {"status": "stopped"}, "2024-02-01T00:00:00+00:00")

    assert patched.status == AgentStatus.STOPPED
    assert patched.name == record.name
    assert patched.capabilities == record.capabilities
    assert patched.stats == record.stats
    assert patched.created_at == record.created_at
    assert patched.updated_at == "2024-02-01T00:00:00+00:00"


def test_patch_replaces_nested_values_whole():
    record = _seed("agent_002")
    patched = apply_record_patch(record, {"metadata": {"tags": ["only"]}}, "2024-02-01T00:00:00+00:00")

    assert patched.metadata.tags == ["only"]
    assert patched.metadata.categories == []


def test_patch_does_not_touch_the_original():
    record = _seed("agent_001")
    apply_record_patch(record, {"capabilities": ["New"]}, "2024-02-01T00:00:00+00:00")
    assert record.capabilities == ["Data Analysis", "Work Assistant"]


def test_capabilities_must_be_a_list_of_text():
    record = _seed("agent_001")
    with pytest.raises(RecordValidationError):
        apply_record_patch(record, {"capabilities": "Data Analysis"}, "2024-02-01T00:00:00+00:00")
    with pytest.raises(RecordValidationError):
        apply_record_patch(record, {"capabilities": [1, 2]}, "2024-02-01T00:00:00+00:00")
