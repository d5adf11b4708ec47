"""Pydantic shapes for each consumer vocabulary.

Sub-models mirror the store dataclasses field for field so a canonical
record can be validated straight into them and dumped back as store fields.
"""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from agentreg.store.models import (
    AgentStatus,
    BindingMethod,
    BindingStrength,
    ContractStatus,
    Permission,
    SecurityLevel,
    SyncStatus,
    VerificationFrequency,
    VerificationStatus,
)


class _Shape(BaseModel):
    # Canonical dicts carry more fields than most shapes declare.
    model_config = ConfigDict(extra="ignore")


# ---------------------------------------------------------------------------
# Shared sub-models
# ---------------------------------------------------------------------------


class UserBindingModel(_Shape):
    """Mirrors agentreg.store.models.UserBinding."""

    bound_user_id: str = ""
    binding_method: BindingMethod = BindingMethod.FACE_BIOMETRICS
    binding_strength: BindingStrength = BindingStrength.BASIC
    verification_frequency: VerificationFrequency = VerificationFrequency.ONCE
    fallback_allowed: bool = True


class AgentConfigModel(_Shape):
    """Mirrors agentreg.store.models.AgentConfig."""

    permissions: list[Permission] = Field(default_factory=list)
    user_binding: UserBindingModel = Field(default_factory=UserBindingModel)


class LedgerAnchorModel(_Shape):
    """Mirrors agentreg.store.models.LedgerAnchor."""

    is_on_chain: bool = False
    network: Optional[str] = None
    block_number: Optional[int] = None
    transaction_hash: Optional[str] = None
    contract_address: Optional[str] = None
    chain_id: Optional[int] = None
    gas_used: Optional[int] = None
    verification_status: VerificationStatus = VerificationStatus.UNVERIFIED
    verification_date: Optional[str] = None
    last_synced_at: Optional[str] = None
    sync_status: SyncStatus = SyncStatus.SYNCED


class AgentStatsModel(_Shape):
    """Mirrors agentreg.store.models.AgentStats."""

    total_calls: int = 0
    success_rate: float = 0.0
    average_response_time: float = 0.0
    error_rate: float = 0.0
    uptime_percentage: float = 0.0
    connections: int = 0
    response_time: float = 0.0
    uptime: float = 0.0
    popularity: int = 0


class AgentMetadataModel(_Shape):
    """Mirrors agentreg.store.models.AgentMetadata."""

    tags: list[str] = Field(default_factory=list)
    categories: list[str] = Field(default_factory=list)
    security_level: SecurityLevel = SecurityLevel.MEDIUM
    compliance: list[str] = Field(default_factory=list)
    website: str = ""
    documentation: str = ""


class PageInfoModel(_Shape):
    page: int = 1
    page_size: int = 12
    total: int = 0
    total_pages: int = 0
    has_next: bool = False
    has_prev: bool = False


# ---------------------------------------------------------------------------
# Discovery vocabulary
# ---------------------------------------------------------------------------


class DiscoveryItem(_Shape):
    """An agent as the discovery surface sees it.

    Carries every canonical field. ``tags``, ``categories`` and the stats
    shortcuts (``popularity``, ``connections``, ``response_time``,
    ``uptime``) are derived copies and are ignored on the way back.
    """

    id: str
    name: str
    description: str = ""
    version: str = "1.0.0"
    type: str = "Custom"
    capabilities: list[str] = Field(default_factory=list)
    status: AgentStatus = AgentStatus.ACTIVE
    config: AgentConfigModel = Field(default_factory=AgentConfigModel)
    permissions: list[Permission] = Field(default_factory=list)
    ledger: LedgerAnchorModel = Field(default_factory=LedgerAnchorModel)
    metadata: AgentMetadataModel = Field(default_factory=AgentMetadataModel)
    stats: Optional[AgentStatsModel] = None
    code_hash: str = ""
    profile_hash: str = ""
    model: str = ""
    api_endpoint: str = ""
    language: str = ""
    code_size: int = 0
    bound_user: str = ""
    bound_at: str = ""
    rating: Optional[float] = None
    review_count: int = 0
    is_verified: bool = False
    is_featured: bool = False
    last_activity: str = ""
    created_at: str = ""
    updated_at: str = ""

    # Derived
    tags: list[str] = Field(default_factory=list)
    categories: list[str] = Field(default_factory=list)
    popularity: Optional[int] = None
    connections: Optional[int] = None
    response_time: Optional[float] = None
    uptime: Optional[float] = None


class DiscoveryPage(_Shape):
    """One page of discovery search results."""

    items: list[DiscoveryItem] = Field(default_factory=list)
    page_info: PageInfoModel = Field(default_factory=PageInfoModel)
    cached: bool = False
    generated_at: str = ""


class Distribution(_Shape):
    label: str
    count: int
    percentage: float


class DiscoveryStats(_Shape):
    total_agents: int = 0
    active_agents: int = 0
    inactive_agents: int = 0
    verified_agents: int = 0
    featured_agents: int = 0
    on_chain_agents: int = 0
    average_rating: float = 0.0
    total_connections: int = 0
    top_capabilities: list[Distribution] = Field(default_factory=list)
    top_types: list[Distribution] = Field(default_factory=list)
    network_distribution: list[Distribution] = Field(default_factory=list)
    status_distribution: list[Distribution] = Field(default_factory=list)


# ---------------------------------------------------------------------------
# Management vocabulary
# ---------------------------------------------------------------------------


class ManagedAgent(_Shape):
    """An agent as the management surface sees it (code-centric, no ledger)."""

    id: str
    name: str
    description: str = ""
    code_hash: str = ""
    profile_hash: str = ""
    status: AgentStatus = AgentStatus.ACTIVE
    bound_user: str = ""
    bound_at: str = ""
    code_size: int = 0
    language: str = ""
    config: AgentConfigModel = Field(default_factory=AgentConfigModel)
    permissions: list[Permission] = Field(default_factory=list)
    created_at: str = ""
    updated_at: str = ""


class AgentDraft(_Shape):
    """Input for ``ManagementAdapter.create_agent``."""

    name: str
    description: str = ""
    language: str = ""
    code_size: int = 0
    type: str = "AI Assistant"
    capabilities: Optional[list[str]] = None
    permissions: list[Permission] = Field(default_factory=list)
    user_binding: UserBindingModel = Field(default_factory=UserBindingModel)
    bound_user: str = ""
    tags: list[str] = Field(default_factory=lambda: ["New Agent"])


class ManagementStats(_Shape):
    total_agents: int = 0
    active_agents: int = 0
    inactive_agents: int = 0
    average_calls: float = 0.0
    average_code_size: float = 0.0
    total_connections: int = 0


# ---------------------------------------------------------------------------
# Ledger vocabulary
# ---------------------------------------------------------------------------


class LedgerAgent(_Shape):
    """An agent as the ledger-registration surface sees it."""

    id: str
    name: str
    type: str = "Custom"
    capabilities: list[str] = Field(default_factory=list)
    description: str = ""
    version: str = "1.0.0"
    model: str = ""
    api_endpoint: str = ""
    status: AgentStatus = AgentStatus.ACTIVE
    owner: str = ""
    ledger: LedgerAnchorModel = Field(default_factory=LedgerAnchorModel)
    created_at: str = ""
    updated_at: str = ""


class ContractMetadataModel(_Shape):
    tags: list[str] = Field(default_factory=list)
    description: str = ""
    security_level: SecurityLevel = SecurityLevel.MEDIUM
    compliance: list[str] = Field(default_factory=list)


class ContractLedgerModel(_Shape):
    network: str = ""
    block_number: int = 0
    transaction_hash: str = ""
    gas_used: int = 0


class ContractView(_Shape):
    id: str
    agent_id: str
    contract_address: str = ""
    contract_name: str = ""
    owner_address: str = ""
    permission: Permission = Permission.ADMIN
    status: ContractStatus = ContractStatus.PENDING
    metadata: ContractMetadataModel = Field(default_factory=ContractMetadataModel)
    ledger: ContractLedgerModel = Field(default_factory=ContractLedgerModel)
    created_at: str = ""
    updated_at: str = ""
    agent: Optional[LedgerAgent] = None


class ContractRegistration(_Shape):
    """Input for ``LedgerAdapter.register_agent_contract``."""

    agent_id: str
    contract_name: str
    permission: Permission = Permission.ADMIN
    description: str = ""
    tags: list[str] = Field(default_factory=list)
    security_level: SecurityLevel = SecurityLevel.MEDIUM
    compliance: list[str] = Field(default_factory=lambda: ["GDPR", "SOC2", "ISO27001"])
