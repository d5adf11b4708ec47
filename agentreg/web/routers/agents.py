"""Agents router -- discovery CRUD, search and statistics."""

from __future__ import annotations

from typing import Any, Optional

from fastapi import APIRouter, Body, Depends, HTTPException, Query, status

from agentreg.convert import DiscoveryItem, DiscoveryPage, DiscoveryStats
from agentreg.query.models import FilterParams, SearchParams, SortField, SortOrder, SortParams
from agentreg.runtime import Registry
from agentreg.store.models import AgentStatus
from agentreg.web.deps import get_registry

router = APIRouter(prefix="/api/agents", tags=["agents"])


def _split(value: Optional[str]) -> Optional[list[str]]:
    """Parse a comma-separated query parameter; ``None`` when absent or empty."""
    if not value:
        return None
    items = [v.strip() for v in value.split(",") if v.strip()]
    return items or None


@router.get(
    "",
    response_model=list[DiscoveryItem],
    summary="List all agents",
)
async def list_agents(
    status_filter: Optional[AgentStatus] = Query(None, alias="status"),
    reg: Registry = Depends(get_registry),
):
    """List every agent, optionally restricted to one status."""
    return reg.discovery.filter(status=status_filter)


@router.get(
    "/search",
    response_model=DiscoveryPage,
    summary="Search agents",
)
async def search_agents(
    text: str = Query("", description="Free-text search"),
    statuses: Optional[str] = Query(None, alias="status", description="Comma-separated statuses"),
    types: Optional[str] = Query(None, alias="type", description="Comma-separated types"),
    capabilities: Optional[str] = Query(None, description="Comma-separated capabilities (any-of)"),
    tags: Optional[str] = Query(None, description="Comma-separated tags (any-of)"),
    languages: Optional[str] = Query(None, description="Comma-separated languages"),
    networks: Optional[str] = Query(None, description="Comma-separated ledger networks"),
    owners: Optional[str] = Query(None, description="Comma-separated bound users"),
    verified: Optional[bool] = Query(None),
    on_chain: Optional[bool] = Query(None),
    featured: Optional[bool] = Query(None),
    min_rating: Optional[float] = Query(None),
    max_rating: Optional[float] = Query(None),
    sort: SortField = Query(SortField.CREATED_AT),
    order: SortOrder = Query(SortOrder.DESC),
    page: int = Query(1),
    page_size: Optional[int] = Query(None),
    reg: Registry = Depends(get_registry),
):
    """Run the full filter → search → sort → paginate pipeline."""
    filters = FilterParams(
        statuses=_split(statuses),
        types=_split(types),
        capabilities=_split(capabilities),
        tags=_split(tags),
        languages=_split(languages),
        networks=_split(networks),
        owners=_split(owners),
        is_verified=verified,
        is_on_chain=on_chain,
        is_featured=featured,
        min_rating=min_rating,
        max_rating=max_rating,
    )
    params = SearchParams(text=text, page=page, page_size=page_size or reg.settings.default_page_size)
    return reg.discovery.search_agents(params, SortParams(sort, order), filters)


@router.get(
    "/stats",
    response_model=DiscoveryStats,
    summary="Registry statistics",
)
async def agent_stats(reg: Registry = Depends(get_registry)):
    """Totals plus capability, type, network and status distributions."""
    return reg.discovery.get_statistics()


@router.get(
    "/{agent_id}",
    response_model=DiscoveryItem,
    summary="Get one agent",
)
async def get_agent(agent_id: str, reg: Registry = Depends(get_registry)):
    item = reg.discovery.get_agent_details(agent_id)
    if item is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Agent '{agent_id}' not found",
        )
    return item


@router.post(
    "",
    response_model=DiscoveryItem,
    status_code=status.HTTP_201_CREATED,
    summary="Create an agent",
)
async def create_agent(fields: dict[str, Any] = Body(...), reg: Registry = Depends(get_registry)):
    """Create an agent from record fields. ``name`` is required."""
    return reg.discovery.add_agent(fields)


@router.patch(
    "/{agent_id}",
    response_model=DiscoveryItem,
    summary="Merge-patch an agent",
)
async def update_agent(
    agent_id: str,
    patch: dict[str, Any] = Body(...),
    reg: Registry = Depends(get_registry),
):
    """Overwrite the supplied top-level fields and keep the rest."""
    return reg.discovery.update_agent(agent_id, patch)


@router.delete(
    "/{agent_id}",
    summary="Delete an agent",
)
async def delete_agent(agent_id: str, reg: Registry = Depends(get_registry)):
    reg.discovery.delete_agent(agent_id)
    return {"ok": True}
