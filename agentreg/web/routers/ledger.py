"""Ledger router -- identity contracts and agent anchoring."""

from __future__ import annotations

from fastapi import APIRouter, Depends, status

from agentreg.convert import ContractRegistration, ContractView, LedgerAgent
from agentreg.runtime import Registry
from agentreg.web.deps import get_registry
from agentreg.web.models import ContractStatusUpdate

router = APIRouter(prefix="/api/ledger", tags=["ledger"])


@router.get(
    "/contracts",
    response_model=list[ContractView],
    summary="List identity contracts",
)
async def list_contracts(reg: Registry = Depends(get_registry)):
    return reg.ledger.fetch_agent_contracts()


@router.post(
    "/contracts",
    response_model=ContractView,
    status_code=status.HTTP_201_CREATED,
    summary="Register a contract for an agent",
)
async def register_contract(body: ContractRegistration, reg: Registry = Depends(get_registry)):
    return reg.ledger.register_agent_contract(body)


@router.get(
    "/contracts/{contract_id}",
    response_model=ContractView,
    summary="Get one contract",
)
async def get_contract(contract_id: str, reg: Registry = Depends(get_registry)):
    return reg.ledger.get_agent_contract(contract_id)


@router.put(
    "/contracts/{contract_id}/status",
    response_model=ContractView,
    summary="Change a contract's status",
)
async def update_contract_status(
    contract_id: str,
    body: ContractStatusUpdate,
    reg: Registry = Depends(get_registry),
):
    return reg.ledger.update_agent_contract_status(contract_id, body.status)


@router.delete(
    "/contracts/{contract_id}",
    summary="Delete a contract",
)
async def delete_contract(contract_id: str, reg: Registry = Depends(get_registry)):
    reg.ledger.delete_agent_contract(contract_id)
    return {"ok": True}


@router.get(
    "/agents",
    response_model=list[LedgerAgent],
    summary="Agents available for registration",
)
async def available_agents(reg: Registry = Depends(get_registry)):
    return reg.ledger.get_available_agents()


@router.post(
    "/agents/{agent_id}/anchor",
    response_model=LedgerAgent,
    summary="Anchor an agent on the ledger",
)
async def anchor_agent(agent_id: str, reg: Registry = Depends(get_registry)):
    return reg.ledger.anchor_agent(agent_id)
