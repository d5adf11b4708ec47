"""Management adapter — create, list and operate agents by code and status."""

from __future__ import annotations

import hashlib
from collections.abc import Mapping
from datetime import datetime, timezone
from typing import Any, Optional, Union

from agentreg.adapters.base import StoreAdapter
from agentreg.convert import AgentDraft, ManagedAgent, ManagementStats, extract_capabilities, to_managed_agent
from agentreg.store.models import AgentRecord, AgentStatus, coerce_enum


def _content_hash(*parts: object) -> str:
    text = "|".join(str(p) for p in parts)
    return "0x" + hashlib.sha256(text.encode("utf-8")).hexdigest()


class ManagementAdapter(StoreAdapter):
    name = "management"

    def _shape_record(self, record: AgentRecord) -> ManagedAgent:
        return to_managed_agent(record)

    def fetch_agents(self) -> list[ManagedAgent]:
        return [to_managed_agent(r) for r in self._store.list()]

    def get_agent(self, agent_id: str) -> ManagedAgent:
        return to_managed_agent(self._require_agent(agent_id))

    def create_agent(self, draft: Union[AgentDraft, Mapping[str, Any]]) -> ManagedAgent:
        """Register a new agent from a management draft.

        Capabilities are inferred from the description unless the draft lists
        them. Code and profile hashes are derived from the draft content.
        """
        if not isinstance(draft, AgentDraft):
            draft = AgentDraft.model_validate(draft)
        binding = draft.user_binding.model_dump(mode="json")
        bound_user = draft.bound_user or binding["bound_user_id"]
        fields: dict[str, Any] = {
            "name": draft.name,
            "description": draft.description,
            "type": draft.type,
            "capabilities": draft.capabilities or extract_capabilities(draft.description),
            "status": AgentStatus.ACTIVE,
            "code_hash": _content_hash("code", draft.name, draft.language, draft.code_size),
            "profile_hash": _content_hash("profile", draft.name, draft.description),
            "language": draft.language,
            "code_size": draft.code_size,
            "bound_user": bound_user,
            "bound_at": datetime.now(timezone.utc).isoformat() if bound_user else "",
            "config": {
                "permissions": [p.value for p in draft.permissions],
                "user_binding": binding,
            },
            "metadata": {
                "tags": list(draft.tags),
                "categories": [draft.type],
            },
        }
        return to_managed_agent(self._store.create(fields))

    def update_agent_status(self, agent_id: str, status: Union[AgentStatus, str]) -> ManagedAgent:
        status = coerce_enum(AgentStatus, status, "status")
        return to_managed_agent(self._update_agent(agent_id, {"status": status}))

    def delete_agent(self, agent_id: str) -> None:
        self._delete_agent(agent_id)

    def search_agents(self, query: str) -> list[ManagedAgent]:
        return [to_managed_agent(r) for r in self._store.search(query)]

    def filter_agents(
        self,
        status: Optional[Union[AgentStatus, str]] = None,
        language: Optional[str] = None,
        search: Optional[str] = None,
    ) -> list[ManagedAgent]:
        records = self._store.search(search) if search else self._store.list()
        if status:
            wanted = coerce_enum(AgentStatus, status, "status")
            records = [r for r in records if r.status == wanted]
        if language:
            records = [r for r in records if r.language == language]
        return [to_managed_agent(r) for r in records]

    def get_agent_stats(self) -> ManagementStats:
        records = self._store.list()
        base = self._store.get_stats()
        count = len(records) or 1
        return ManagementStats(
            total_agents=base.total_agents,
            active_agents=base.active_agents,
            inactive_agents=base.inactive_agents,
            average_calls=sum(r.stats.total_calls for r in records if r.stats) / count,
            average_code_size=sum(r.code_size for r in records) / count,
            total_connections=sum(r.stats.connections for r in records if r.stats),
        )
