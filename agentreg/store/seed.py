"""Built-in seed records loaded when no snapshot is available."""

from __future__ import annotations

from agentreg.store.models import (
    AgentConfig,
    AgentContract,
    AgentMetadata,
    AgentRecord,
    AgentStats,
    AgentStatus,
    BindingMethod,
    BindingStrength,
    ContractLedger,
    ContractMetadata,
    ContractStatus,
    LedgerAnchor,
    Permission,
    SecurityLevel,
    SyncStatus,
    UserBinding,
    VerificationFrequency,
    VerificationStatus,
)


def seed_records() -> list[AgentRecord]:
    """Return a fresh copy of the seed agents."""
    return [
        AgentRecord(
            id="agent_001",
            name="Data Processing Agent",
            description=(
                "Agent dedicated to data analysis tasks, supporting large-scale "
                "data processing and real-time analytics"
            ),
            type="Data Processing",
            capabilities=["Data Analysis", "Work Assistant"],
            status=AgentStatus.ACTIVE,
            code_hash="0xabcdef1234567890abcdef1234567890abcdef12",
            profile_hash="0x1234567890abcdef1234567890abcdef12345678",
            version="1.0.0",
            language="typescript",
            code_size=256,
            bound_user="user_123",
            bound_at="2024-01-15T11:00:00+00:00",
            config=AgentConfig(
                permissions=[Permission.READ, Permission.WRITE, Permission.EXECUTE],
                user_binding=UserBinding(
                    bound_user_id="user_001",
                    binding_method=BindingMethod.FACE_BIOMETRICS,
                    binding_strength=BindingStrength.BASIC,
                    verification_frequency=VerificationFrequency.ONCE,
                    fallback_allowed=True,
                ),
            ),
            ledger=LedgerAnchor(is_on_chain=False),
            metadata=AgentMetadata(
                tags=["data processing", "analytics", "real-time"],
                categories=["Data Processing"],
                security_level=SecurityLevel.MEDIUM,
                compliance=["GDPR"],
            ),
            stats=AgentStats(
                total_calls=15420,
                success_rate=96.5,
                average_response_time=150,
                error_rate=3.5,
                uptime_percentage=98.2,
                connections=25,
                response_time=150,
                uptime=98.2,
                popularity=75,
            ),
            last_activity="2024-01-20T14:30:00+00:00",
            created_at="2024-01-15T11:00:00+00:00",
            updated_at="2024-01-20T14:30:00+00:00",
        ),
        AgentRecord(
            id="agent_002",
            name="Security Monitor Agent",
            description=(
                "Security agent monitoring system state, providing real-time "
                "threat detection and protection"
            ),
            type="Security",
            capabilities=["Security Monitoring", "Work Assistant"],
            status=AgentStatus.ACTIVE,
            code_hash="0x9876543210fedcba9876543210fedcba98765432",
            profile_hash="0x8765432109abcdef8765432109abcdef87654321",
            version="2.1.0",
            language="python",
            code_size=384,
            bound_user="user_123",
            bound_at="2024-01-16T09:30:00+00:00",
            config=AgentConfig(
                permissions=[Permission.READ, Permission.EXECUTE],
                user_binding=UserBinding(
                    bound_user_id="user_002",
                    binding_method=BindingMethod.FACE_BIOMETRICS,
                    binding_strength=BindingStrength.ENHANCED,
                    verification_frequency=VerificationFrequency.DAILY,
                    fallback_allowed=False,
                ),
            ),
            metadata=AgentMetadata(
                tags=["security", "monitoring", "protection"],
                categories=["Security"],
                security_level=SecurityLevel.HIGH,
                compliance=["SOC2", "ISO27001"],
            ),
            stats=AgentStats(
                total_calls=8900,
                success_rate=99.1,
                average_response_time=200,
                error_rate=0.9,
                uptime_percentage=99.8,
                connections=15,
                response_time=200,
                uptime=99.8,
                popularity=85,
            ),
            last_activity="2024-01-21T16:45:00+00:00",
            created_at="2024-01-16T09:30:00+00:00",
            updated_at="2024-01-21T16:45:00+00:00",
        ),
        AgentRecord(
            id="bc-agent-001",
            name="Blockchain AI Assistant",
            description="Ledger-backed AI assistant offering personal and work assistance",
            type="AI Assistant",
            capabilities=["Personal Assistant", "Work Assistant"],
            status=AgentStatus.ACTIVE,
            version="1.0.0",
            model="GPT-4",
            api_endpoint="https://api.blockchain-ai.com",
            bound_user="0x1234567890abcdef1234567890abcdef12345678",
            config=AgentConfig(
                permissions=[Permission.READ, Permission.WRITE, Permission.EXECUTE],
                user_binding=UserBinding(
                    bound_user_id="0x1234567890abcdef1234567890abcdef12345678",
                    binding_method=BindingMethod.MULTI_FACTOR,
                    binding_strength=BindingStrength.STRICT,
                    verification_frequency=VerificationFrequency.DAILY,
                    fallback_allowed=False,
                ),
            ),
            ledger=LedgerAnchor(
                is_on_chain=True,
                contract_address="0xabcdef1234567890abcdef1234567890abcdef12",
                network="Ethereum",
                block_number=18000000,
                transaction_hash="0x" + "1" * 64,
                gas_used=150000,
                chain_id=1,
                verification_status=VerificationStatus.VERIFIED,
                verification_date="2024-01-01T00:00:00+00:00",
                last_synced_at="2024-01-15T00:00:00+00:00",
                sync_status=SyncStatus.SYNCED,
            ),
            metadata=AgentMetadata(
                website="https://blockchain-ai.com",
                tags=["AI", "Assistant", "Blockchain"],
                categories=["AI Assistant"],
                security_level=SecurityLevel.HIGH,
                compliance=["GDPR", "CCPA", "SOC2"],
            ),
            stats=AgentStats(
                total_calls=25600,
                success_rate=97.8,
                average_response_time=250,
                error_rate=2.2,
                uptime_percentage=99.5,
                connections=45,
                response_time=250,
                uptime=99.5,
                popularity=90,
            ),
            last_activity="2024-01-15T00:00:00+00:00",
            created_at="2024-01-01T00:00:00+00:00",
            updated_at="2024-01-15T00:00:00+00:00",
        ),
    ]


def seed_contracts() -> list[AgentContract]:
    return [
        AgentContract(
            id="contract-001",
            agent_id="bc-agent-001",
            contract_address="0xabcdef1234567890abcdef1234567890abcdef12",
            contract_name="Blockchain AI Assistant Contract",
            owner_address="0x1234567890abcdef1234567890abcdef12345678",
            permission=Permission.ADMIN,
            status=ContractStatus.ACTIVE,
            metadata=ContractMetadata(
                tags=["AI", "Assistant", "Blockchain"],
                description="Identity contract for the ledger-backed AI assistant",
                security_level=SecurityLevel.HIGH,
                compliance=["GDPR", "CCPA", "SOC2"],
            ),
            ledger=ContractLedger(
                network="Ethereum",
                block_number=18000000,
                transaction_hash="0x" + "1" * 64,
                gas_used=150000,
            ),
            created_at="2024-01-01T00:00:00+00:00",
            updated_at="2024-01-15T00:00:00+00:00",
        )
    ]
