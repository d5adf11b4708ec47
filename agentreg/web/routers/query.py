"""Query router -- result cache inspection and maintenance."""

from __future__ import annotations

from dataclasses import asdict

from fastapi import APIRouter, Depends

from agentreg.runtime import Registry
from agentreg.web.deps import get_registry
from agentreg.web.models import CacheStatsResponse, PurgeResponse

router = APIRouter(prefix="/api/query", tags=["query"])


@router.get(
    "/cache",
    response_model=CacheStatsResponse,
    summary="Cache statistics",
)
async def cache_stats(reg: Registry = Depends(get_registry)):
    return CacheStatsResponse.model_validate(asdict(reg.engine.get_cache_stats()))


@router.delete(
    "/cache",
    summary="Clear the result cache",
)
async def clear_cache(reg: Registry = Depends(get_registry)):
    reg.engine.clear_cache()
    return {"ok": True}


@router.post(
    "/cache/purge",
    response_model=PurgeResponse,
    summary="Evict expired cache entries",
)
async def purge_cache(reg: Registry = Depends(get_registry)):
    return PurgeResponse(purged=reg.engine.purge_expired())
