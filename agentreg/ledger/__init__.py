"""Ledger gateways used to anchor agents and register identity contracts."""

from agentreg.ledger.gateway import (
    DeterministicLedgerGateway,
    LedgerGateway,
    LedgerReceipt,
    SimulatedLedgerGateway,
    create_gateway,
)

__all__ = [
    "DeterministicLedgerGateway",
    "LedgerGateway",
    "LedgerReceipt",
    "SimulatedLedgerGateway",
    "create_gateway",
]
