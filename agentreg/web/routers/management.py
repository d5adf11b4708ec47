"""Management router -- agent lifecycle in the management vocabulary."""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Query, status

from agentreg.convert import AgentDraft, ManagedAgent, ManagementStats
from agentreg.runtime import Registry
from agentreg.store.models import AgentStatus
from agentreg.web.deps import get_registry
from agentreg.web.models import AgentStatusUpdate

router = APIRouter(prefix="/api/management", tags=["management"])


@router.get(
    "/agents",
    response_model=list[ManagedAgent],
    summary="List or filter managed agents",
)
async def list_agents(
    status_filter: Optional[AgentStatus] = Query(None, alias="status"),
    language: Optional[str] = Query(None),
    search: Optional[str] = Query(None),
    reg: Registry = Depends(get_registry),
):
    return reg.management.filter_agents(status=status_filter, language=language, search=search)


@router.post(
    "/agents",
    response_model=ManagedAgent,
    status_code=status.HTTP_201_CREATED,
    summary="Create an agent from a draft",
)
async def create_agent(body: AgentDraft, reg: Registry = Depends(get_registry)):
    return reg.management.create_agent(body)


@router.get(
    "/agents/{agent_id}",
    response_model=ManagedAgent,
    summary="Get one managed agent",
)
async def get_agent(agent_id: str, reg: Registry = Depends(get_registry)):
    return reg.management.get_agent(agent_id)


@router.put(
    "/agents/{agent_id}/status",
    response_model=ManagedAgent,
    summary="Change an agent's status",
)
async def update_status(agent_id: str, body: AgentStatusUpdate, reg: Registry = Depends(get_registry)):
    return reg.management.update_agent_status(agent_id, body.status)


@router.delete(
    "/agents/{agent_id}",
    summary="Delete an agent",
)
async def delete_agent(agent_id: str, reg: Registry = Depends(get_registry)):
    reg.management.delete_agent(agent_id)
    return {"ok": True}


@router.get(
    "/stats",
    response_model=ManagementStats,
    summary="Management statistics",
)
async def management_stats(reg: Registry = Depends(get_registry)):
    return reg.management.get_agent_stats()
