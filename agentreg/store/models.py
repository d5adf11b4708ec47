"""Canonical store data models — agent records, contracts, filters, stats."""

from __future__ import annotations

from dataclasses import dataclass, field, fields
from enum import Enum
from typing import Iterable, Optional, TypeVar

from agentreg.errors import RecordValidationError


class AgentStatus(str, Enum):
    """Lifecycle status of an agent record."""

    ACTIVE = "active"
    INACTIVE = "inactive"
    STOPPED = "stopped"
    ERROR = "error"
    DRAFT = "draft"
    DEPRECATED = "deprecated"


class Permission(str, Enum):
    READ = "read"
    WRITE = "write"
    EXECUTE = "execute"
    ADMIN = "admin"
    READ_ONLY = "read-only"
    READ_WRITE = "read-write"


class BindingMethod(str, Enum):
    """How an agent is bound to its owning subject."""

    FACE_BIOMETRICS = "faceBiometrics"
    MULTI_FACTOR = "multiFactor"
    NONE = "none"


class BindingStrength(str, Enum):
    BASIC = "basic"
    ENHANCED = "enhanced"
    STRICT = "strict"


class VerificationFrequency(str, Enum):
    ONCE = "once"
    DAILY = "daily"
    PER_REQUEST = "perRequest"


class VerificationStatus(str, Enum):
    VERIFIED = "verified"
    PENDING = "pending"
    FAILED = "failed"
    UNVERIFIED = "unverified"


class SyncStatus(str, Enum):
    SYNCED = "synced"
    SYNCING = "syncing"
    FAILED = "failed"


class SecurityLevel(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class ContractStatus(str, Enum):
    PENDING = "pending"
    ACTIVE = "active"
    SUSPENDED = "suspended"
    TERMINATED = "terminated"


E = TypeVar("E", bound=Enum)


def coerce_enum(enum_cls: type[E], value: object, field_name: str) -> E:
    """Return ``value`` as a member of ``enum_cls`` or raise a validation error."""
    if isinstance(value, enum_cls):
        return value
    try:
        return enum_cls(value)
    except ValueError:
        allowed = ", ".join(m.value for m in enum_cls)
        raise RecordValidationError(
            f"Invalid {field_name} {value!r}; expected one of: {allowed}",
            field=field_name,
        ) from None


def unique(values: Iterable[str]) -> list[str]:
    """De-duplicate while keeping first-seen order."""
    seen: set[str] = set()
    result: list[str] = []
    for v in values:
        if v not in seen:
            seen.add(v)
            result.append(v)
    return result


# ---------------------------------------------------------------------------
# Agent record sub-structures
# ---------------------------------------------------------------------------


@dataclass
class UserBinding:
    """Binding between an agent and the subject that owns it."""

    bound_user_id: str = ""
    binding_method: BindingMethod = BindingMethod.FACE_BIOMETRICS
    binding_strength: BindingStrength = BindingStrength.BASIC
    verification_frequency: VerificationFrequency = VerificationFrequency.ONCE
    fallback_allowed: bool = True

    def __post_init__(self) -> None:
        self.binding_method = coerce_enum(BindingMethod, self.binding_method, "binding_method")
        self.binding_strength = coerce_enum(BindingStrength, self.binding_strength, "binding_strength")
        self.verification_frequency = coerce_enum(
            VerificationFrequency, self.verification_frequency, "verification_frequency"
        )


@dataclass
class AgentConfig:
    """Permission set plus user binding."""

    permissions: list[Permission] = field(default_factory=list)
    user_binding: UserBinding = field(default_factory=UserBinding)

    def __post_init__(self) -> None:
        self.permissions = unique(
            coerce_enum(Permission, p, "permissions") for p in self.permissions
        )


# Fields that only carry meaning while a record is anchored on a ledger.
CHAIN_FIELDS = (
    "network",
    "block_number",
    "transaction_hash",
    "contract_address",
    "chain_id",
    "gas_used",
    "verification_date",
    "last_synced_at",
)


@dataclass
class LedgerAnchor:
    """Optional on-chain registration of an agent.

    When ``is_on_chain`` is false every chain-specific field is cleared and
    the status fields fall back to their defaults, so an off-chain anchor
    always compares equal to ``LedgerAnchor()``.
    """

    is_on_chain: bool = False
    network: Optional[str] = None
    block_number: Optional[int] = None
    transaction_hash: Optional[str] = None
    contract_address: Optional[str] = None
    chain_id: Optional[int] = None
    gas_used: Optional[int] = None
    verification_status: VerificationStatus = VerificationStatus.UNVERIFIED
    verification_date: Optional[str] = None  # ISO 8601
    last_synced_at: Optional[str] = None  # ISO 8601
    sync_status: SyncStatus = SyncStatus.SYNCED

    def __post_init__(self) -> None:
        self.is_on_chain = bool(self.is_on_chain)
        if not self.is_on_chain:
            for name in CHAIN_FIELDS:
                setattr(self, name, None)
            self.verification_status = VerificationStatus.UNVERIFIED
            self.sync_status = SyncStatus.SYNCED
            return
        self.verification_status = coerce_enum(
            VerificationStatus, self.verification_status, "verification_status"
        )
        self.sync_status = coerce_enum(SyncStatus, self.sync_status, "sync_status")


@dataclass
class AgentStats:
    """Usage statistics derived by consumers; the store never writes these."""

    total_calls: int = 0
    success_rate: float = 0.0
    average_response_time: float = 0.0
    error_rate: float = 0.0
    uptime_percentage: float = 0.0
    connections: int = 0
    response_time: float = 0.0
    uptime: float = 0.0
    popularity: int = 0


@dataclass
class AgentMetadata:
    tags: list[str] = field(default_factory=list)
    categories: list[str] = field(default_factory=list)
    security_level: SecurityLevel = SecurityLevel.MEDIUM
    compliance: list[str] = field(default_factory=list)
    website: str = ""
    documentation: str = ""

    def __post_init__(self) -> None:
        self.security_level = coerce_enum(SecurityLevel, self.security_level, "security_level")


# ---------------------------------------------------------------------------
# Agent record
# ---------------------------------------------------------------------------


@dataclass
class AgentRecord:
    """The canonical agent entity owned by the record store."""

    # Identity (store-assigned)
    id: str
    name: str

    # Descriptive
    description: str = ""
    version: str = "1.0.0"
    type: str = "Custom"
    capabilities: list[str] = field(default_factory=list)
    status: AgentStatus = AgentStatus.ACTIVE

    # Binding and anchoring
    config: AgentConfig = field(default_factory=AgentConfig)
    ledger: LedgerAnchor = field(default_factory=LedgerAnchor)
    metadata: AgentMetadata = field(default_factory=AgentMetadata)
    stats: Optional[AgentStats] = None

    # Technical
    code_hash: str = ""
    profile_hash: str = ""
    model: str = ""
    api_endpoint: str = ""
    language: str = ""
    code_size: int = 0
    bound_user: str = ""
    bound_at: str = ""

    # Quality signals
    rating: Optional[float] = None
    review_count: int = 0
    is_verified: bool = False
    is_featured: bool = False
    last_activity: str = ""

    # Timestamps (store-assigned, ISO 8601 UTC)
    created_at: str = ""
    updated_at: str = ""

    def __post_init__(self) -> None:
        self.status = coerce_enum(AgentStatus, self.status, "status")
        self.capabilities = unique(self.capabilities)

    @property
    def is_on_chain(self) -> bool:
        return self.ledger.is_on_chain

    @property
    def permissions(self) -> list[Permission]:
        return self.config.permissions


RECORD_FIELDS: tuple[str, ...] = tuple(f.name for f in fields(AgentRecord))
STORE_ASSIGNED_FIELDS: tuple[str, ...] = ("id", "created_at", "updated_at")


# ---------------------------------------------------------------------------
# Contracts
# ---------------------------------------------------------------------------


@dataclass
class ContractMetadata:
    tags: list[str] = field(default_factory=list)
    description: str = ""
    security_level: SecurityLevel = SecurityLevel.MEDIUM
    compliance: list[str] = field(default_factory=list)

    def __post_init__(self) -> None:
        self.security_level = coerce_enum(SecurityLevel, self.security_level, "security_level")


@dataclass
class ContractLedger:
    network: str = ""
    block_number: int = 0
    transaction_hash: str = ""
    gas_used: int = 0


@dataclass
class AgentContract:
    """An identity contract registered for exactly one agent record."""

    id: str
    agent_id: str
    contract_address: str = ""
    contract_name: str = ""
    owner_address: str = ""
    permission: Permission = Permission.ADMIN
    status: ContractStatus = ContractStatus.PENDING
    metadata: ContractMetadata = field(default_factory=ContractMetadata)
    ledger: ContractLedger = field(default_factory=ContractLedger)
    created_at: str = ""
    updated_at: str = ""

    def __post_init__(self) -> None:
        self.permission = coerce_enum(Permission, self.permission, "permission")
        self.status = coerce_enum(ContractStatus, self.status, "status")


CONTRACT_FIELDS: tuple[str, ...] = tuple(f.name for f in fields(AgentContract))


# ---------------------------------------------------------------------------
# Filtering, search and stats
# ---------------------------------------------------------------------------


@dataclass
class RecordFilter:
    """Predicate set for ``RecordStore.filter``; ``None`` fields are not applied."""

    status: Optional[AgentStatus] = None
    type: Optional[str] = None
    capabilities: Optional[list[str]] = None  # any-of
    is_verified: Optional[bool] = None
    is_on_chain: Optional[bool] = None

    def __post_init__(self) -> None:
        if self.status is not None:
            self.status = coerce_enum(AgentStatus, self.status, "status")

    def matches(self, record: AgentRecord) -> bool:
        if self.status is not None and record.status != self.status:
            return False
        if self.type is not None and record.type != self.type:
            return False
        if self.capabilities and not any(c in record.capabilities for c in self.capabilities):
            return False
        if self.is_verified is not None and record.is_verified != self.is_verified:
            return False
        if self.is_on_chain is not None and record.is_on_chain != self.is_on_chain:
            return False
        return True


def matches_text(record: AgentRecord, term: str) -> bool:
    """Case-insensitive substring match over name, description, capabilities and tags.

    Surrounding whitespace in ``term`` is ignored; a blank term matches everything.
    """
    needle = (term or "").strip().lower()
    if not needle:
        return True
    if needle in record.name.lower() or needle in record.description.lower():
        return True
    if any(needle in cap.lower() for cap in record.capabilities):
        return True
    return any(needle in tag.lower() for tag in record.metadata.tags)


@dataclass
class StoreStats:
    total_agents: int = 0
    active_agents: int = 0
    inactive_agents: int = 0
    verified_agents: int = 0
    on_chain_agents: int = 0
    average_rating: float = 0.0
