"""Ledger adapter — identity contracts and on-chain anchoring of agents."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from datetime import datetime, timezone
from typing import Any, Optional, Union

from agentreg.adapters.base import StoreAdapter
from agentreg.convert import ContractRegistration, ContractView, LedgerAgent, to_contract_view, to_ledger_agent
from agentreg.ledger.gateway import DeterministicLedgerGateway, LedgerGateway
from agentreg.store.models import AgentRecord, ContractStatus, SyncStatus, coerce_enum
from agentreg.store.record_store import RecordStore

logger = logging.getLogger(__name__)


class LedgerAdapter(StoreAdapter):
    """Contract registry facade.

    Gateway calls happen before the store is touched; the agent is looked up
    again afterwards so a record deleted in between is reported as not found
    instead of producing a dangling contract.
    """

    name = "ledger"

    def __init__(self, store: RecordStore, gateway: Optional[LedgerGateway] = None) -> None:
        super().__init__(store)
        self._gateway = gateway if gateway is not None else DeterministicLedgerGateway()

    @property
    def gateway(self) -> LedgerGateway:
        return self._gateway

    def _shape_record(self, record: AgentRecord) -> LedgerAgent:
        return to_ledger_agent(record)

    def _view(self, contract_id: str) -> ContractView:
        contract = self._require_contract(contract_id)
        return to_contract_view(contract, self._store.get(contract.agent_id))

    # ── Contracts ────────────────────────────────────────────

    def fetch_agent_contracts(self) -> list[ContractView]:
        return [to_contract_view(c, self._store.get(c.agent_id)) for c in self._store.list_contracts()]

    def get_agent_contract(self, contract_id: str) -> ContractView:
        return self._view(contract_id)

    def register_agent_contract(
        self, form: Union[ContractRegistration, Mapping[str, Any]]
    ) -> ContractView:
        if not isinstance(form, ContractRegistration):
            form = ContractRegistration.model_validate(form)
        agent = self._require_agent(form.agent_id)
        receipt = self._gateway.register_contract(agent, form.contract_name)

        agent = self._require_agent(form.agent_id)
        contract = self._store.create_contract(
            {
                "agent_id": agent.id,
                "contract_address": receipt.contract_address,
                "contract_name": form.contract_name,
                "owner_address": agent.bound_user or receipt.owner_address,
                "permission": form.permission,
                "status": ContractStatus.ACTIVE,
                "metadata": {
                    "tags": list(form.tags),
                    "description": form.description,
                    "security_level": form.security_level,
                    "compliance": list(form.compliance),
                },
                "ledger": {
                    "network": receipt.network,
                    "block_number": receipt.block_number,
                    "transaction_hash": receipt.transaction_hash,
                    "gas_used": receipt.gas_used,
                },
            }
        )
        logger.info("Registered contract %s for agent %s", contract.id, agent.id)
        return to_contract_view(contract, agent)

    def update_agent_contract_status(
        self, contract_id: str, status: Union[ContractStatus, str]
    ) -> ContractView:
        status = coerce_enum(ContractStatus, status, "status")
        if not self._store.update_contract(contract_id, {"status": status}):
            self._require_contract(contract_id)
        return self._view(contract_id)

    def delete_agent_contract(self, contract_id: str) -> None:
        if not self._store.delete_contract(contract_id):
            self._require_contract(contract_id)

    # ── Agents ───────────────────────────────────────────────

    def get_available_agents(self) -> list[LedgerAgent]:
        return [to_ledger_agent(r) for r in self._store.list()]

    def anchor_agent(self, agent_id: str) -> LedgerAgent:
        """Anchor an agent on the ledger and record the result on its ledger anchor."""
        agent = self._require_agent(agent_id)
        receipt = self._gateway.anchor(agent)
        verification = self._gateway.verify(receipt.transaction_hash)

        self._require_agent(agent_id)
        now = datetime.now(timezone.utc).isoformat()
        ledger = dict(
            receipt.anchor_fields(),
            verification_status=verification,
            verification_date=now,
            last_synced_at=now,
            sync_status=SyncStatus.SYNCED,
        )
        logger.info("Anchored agent %s at block %d", agent_id, receipt.block_number)
        return to_ledger_agent(self._update_agent(agent_id, {"ledger": ledger}))
