"""Pydantic request/response models that are specific to the HTTP API.

Agent, contract and page shapes come from ``agentreg.convert``; this module
only adds request bodies and mirrors of the engine's dataclasses.
"""

from __future__ import annotations

from pydantic import BaseModel, Field

from agentreg.store.models import AgentStatus, ContractStatus


class AgentStatusUpdate(BaseModel):
    status: AgentStatus


class ContractStatusUpdate(BaseModel):
    status: ContractStatus


class CacheEntryResponse(BaseModel):
    """Mirrors agentreg.query.models.CacheEntryInfo."""

    key: str
    age: float
    ttl: float


class CacheStatsResponse(BaseModel):
    """Mirrors agentreg.query.models.CacheStats."""

    size: int = 0
    hits: int = 0
    misses: int = 0
    evictions: int = 0
    entries: list[CacheEntryResponse] = Field(default_factory=list)


class PurgeResponse(BaseModel):
    purged: int = 0
