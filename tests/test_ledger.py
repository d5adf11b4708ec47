"""Tests for the ledger gateways."""

import pytest

from agentreg.errors import ConfigError
from agentreg.ledger import (
    DeterministicLedgerGateway,
    SimulatedLedgerGateway,
    create_gateway,
)
from agentreg.store.models import VerificationStatus
from agentreg.store.seed import seed_records


def _record():
    return seed_records()[0]


def test_deterministic_gateway_is_reproducible():
    a = DeterministicLedgerGateway().anchor(_record())
    b = DeterministicLedgerGateway().anchor(_record())
    assert a == b


def test_deterministic_receipts_are_well_formed():
    receipt = DeterministicLedgerGateway().register_contract(_record(), "Identity")

    assert receipt.transaction_hash.startswith("0x")
    assert len(receipt.transaction_hash) == 66
    assert len(receipt.contract_address) == 42
    assert len(receipt.owner_address) == 42
    assert 50_000 <= receipt.gas_used < 50_000 + 0x10000
    assert receipt.chain_id == 11155111


def test_deterministic_blocks_increase_and_hashes_differ():
    gateway = DeterministicLedgerGateway(start_block=10)
    first = gateway.anchor(_record())
    second = gateway.anchor(_record())

    assert (first.block_number, second.block_number) == (11, 12)
    assert first.transaction_hash != second.transaction_hash


def test_deterministic_verify_knows_its_own_transactions():
    gateway = DeterministicLedgerGateway()
    receipt = gateway.anchor(_record())

    assert gateway.verify(receipt.transaction_hash) == VerificationStatus.VERIFIED
    assert DeterministicLedgerGateway().verify(receipt.transaction_hash) == VerificationStatus.UNVERIFIED


def test_anchor_fields():
    receipt = DeterministicLedgerGateway(network="Testnet", chain_id=5).anchor(_record())
    fields = receipt.anchor_fields()
    assert fields["is_on_chain"] is True
    assert fields["network"] == "Testnet"
    assert fields["chain_id"] == 5
    assert fields["block_number"] == receipt.block_number


def test_simulated_gateway():
    gateway = SimulatedLedgerGateway()
    receipt = gateway.anchor(_record())

    assert len(receipt.transaction_hash) == 66
    assert len(receipt.contract_address) == 42
    assert gateway.verify(receipt.transaction_hash) == VerificationStatus.VERIFIED
    assert gateway.verify("0xabc") == VerificationStatus.FAILED


def test_create_gateway():
    assert isinstance(create_gateway("deterministic"), DeterministicLedgerGateway)
    assert isinstance(create_gateway("simulated"), SimulatedLedgerGateway)
    with pytest.raises(ConfigError):
        create_gateway("mainnet")
