"""Ledger gateways: produce anchor data for agents and contracts.

No gateway talks to a real network. ``DeterministicLedgerGateway`` is
reproducible for tests; ``SimulatedLedgerGateway`` produces random
placeholders for demos.
"""

from __future__ import annotations

import hashlib
import logging
import secrets
from abc import ABC, abstractmethod
from dataclasses import dataclass

from agentreg.errors import ConfigError
from agentreg.store.models import AgentRecord, VerificationStatus

logger = logging.getLogger(__name__)

DEFAULT_NETWORK = "Ethereum Testnet"
DEFAULT_CHAIN_ID = 11155111


@dataclass(frozen=True)
class LedgerReceipt:
    """What a ledger hands back after anchoring or registering."""

    network: str
    chain_id: int
    block_number: int
    transaction_hash: str
    contract_address: str
    owner_address: str
    gas_used: int

    def anchor_fields(self) -> dict:
        """``LedgerAnchor`` fields for an agent anchored by this receipt."""
        return {
            "is_on_chain": True,
            "network": self.network,
            "chain_id": self.chain_id,
            "block_number": self.block_number,
            "transaction_hash": self.transaction_hash,
            "contract_address": self.contract_address,
            "gas_used": self.gas_used,
        }


class LedgerGateway(ABC):
    """Pluggable ledger capability used by the ledger adapter."""

    name: str = "ledger"

    @abstractmethod
    def anchor(self, record: AgentRecord) -> LedgerReceipt:
        """Anchor an agent record on the ledger."""

    @abstractmethod
    def register_contract(self, record: AgentRecord, contract_name: str) -> LedgerReceipt:
        """Deploy an identity contract for an agent."""

    @abstractmethod
    def verify(self, transaction_hash: str) -> VerificationStatus:
        """Report the verification status of a previously issued transaction."""


class DeterministicLedgerGateway(LedgerGateway):
    """Hashes its inputs with a sequence counter; block numbers only go up."""

    name = "deterministic"

    def __init__(
        self,
        network: str = DEFAULT_NETWORK,
        chain_id: int = DEFAULT_CHAIN_ID,
        start_block: int = 1_000_000,
    ) -> None:
        self.network = network
        self.chain_id = chain_id
        self._block = start_block
        self._sequence = 0
        self._issued: set[str] = set()

    def _digest(self, *parts: str) -> str:
        text = "|".join((self.network, str(self._sequence)) + parts)
        return hashlib.sha256(text.encode("utf-8")).hexdigest()

    def _receipt(self, *parts: str) -> LedgerReceipt:
        self._sequence += 1
        self._block += 1
        tx = "0x" + self._digest("tx", *parts)
        receipt = LedgerReceipt(
            network=self.network,
            chain_id=self.chain_id,
            block_number=self._block,
            transaction_hash=tx,
            contract_address="0x" + self._digest("contract", *parts)[:40],
            owner_address="0x" + self._digest("owner", *parts)[:40],
            gas_used=50_000 + int(self._digest("gas", *parts)[:4], 16),
        )
        self._issued.add(tx)
        return receipt

    def anchor(self, record: AgentRecord) -> LedgerReceipt:
        return self._receipt("anchor", record.id, record.name)

    def register_contract(self, record: AgentRecord, contract_name: str) -> LedgerReceipt:
        return self._receipt("register", record.id, contract_name)

    def verify(self, transaction_hash: str) -> VerificationStatus:
        if transaction_hash in self._issued:
            return VerificationStatus.VERIFIED
        return VerificationStatus.UNVERIFIED


class SimulatedLedgerGateway(LedgerGateway):
    """Random placeholder addresses and hashes."""

    name = "simulated"

    def __init__(self, network: str = DEFAULT_NETWORK, chain_id: int = DEFAULT_CHAIN_ID) -> None:
        self.network = network
        self.chain_id = chain_id

    def _receipt(self) -> LedgerReceipt:
        return LedgerReceipt(
            network=self.network,
            chain_id=self.chain_id,
            block_number=secrets.randbelow(1_000_000),
            transaction_hash="0x" + secrets.token_hex(32),
            contract_address="0x" + secrets.token_hex(20),
            owner_address="0x" + secrets.token_hex(20),
            gas_used=50_000 + secrets.randbelow(100_000),
        )

    def anchor(self, record: AgentRecord) -> LedgerReceipt:
        logger.debug("Simulating ledger anchor for %s", record.id)
        return self._receipt()

    def register_contract(self, record: AgentRecord, contract_name: str) -> LedgerReceipt:
        logger.debug("Simulating contract registration '%s' for %s", contract_name, record.id)
        return self._receipt()

    def verify(self, transaction_hash: str) -> VerificationStatus:
        if transaction_hash.startswith("0x") and len(transaction_hash) == 66:
            return VerificationStatus.VERIFIED
        return VerificationStatus.FAILED


GATEWAYS: dict[str, type[LedgerGateway]] = {
    DeterministicLedgerGateway.name: DeterministicLedgerGateway,
    SimulatedLedgerGateway.name: SimulatedLedgerGateway,
}


def create_gateway(name: str) -> LedgerGateway:
    try:
        return GATEWAYS[name]()
    except KeyError:
        raise ConfigError(
            f"Unknown ledger gateway '{name}'; expected one of: {', '.join(sorted(GATEWAYS))}"
        ) from None
