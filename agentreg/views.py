"""View-model state container for a discovery screen.

Holds the current search/sort/filter parameters and the last page shown.
Any store change marks that page stale; the caller decides when to
``refresh()``.
"""

from __future__ import annotations

from collections import deque
from dataclasses import dataclass, replace
from datetime import datetime, timezone
from typing import Optional

from agentreg.adapters.base import AdapterEvent
from agentreg.adapters.discovery import DiscoveryAdapter
from agentreg.convert import DiscoveryPage
from agentreg.query.models import DEFAULT_PAGE_SIZE, FilterParams, SearchParams, SortParams

DEFAULT_HISTORY_LIMIT = 10


@dataclass(frozen=True)
class SearchHistoryEntry:
    text: str
    result_count: int
    timestamp: str


class DiscoveryView:
    def __init__(
        self,
        adapter: DiscoveryAdapter,
        *,
        page_size: int = DEFAULT_PAGE_SIZE,
        history_limit: int = DEFAULT_HISTORY_LIMIT,
    ) -> None:
        self._adapter = adapter
        self.search = SearchParams(page_size=page_size)
        self.sort = SortParams()
        self.filters = FilterParams()
        self.page: Optional[DiscoveryPage] = None
        self.stale = True
        self.last_event: Optional[AdapterEvent] = None
        self._history: deque[SearchHistoryEntry] = deque(maxlen=history_limit)
        self._token: Optional[int] = adapter.add_change_listener(self._on_change)

    @property
    def history(self) -> list[SearchHistoryEntry]:
        """Most recent search first."""
        return list(reversed(self._history))

    def _on_change(self, event: AdapterEvent) -> None:
        self.stale = True
        self.last_event = event

    def refresh(self) -> DiscoveryPage:
        self.page = self._adapter.search_agents(self.search, self.sort, self.filters)
        self.stale = False
        return self.page

    def set_search(self, text: str) -> DiscoveryPage:
        self.search = replace(self.search, text=text, page=1)
        page = self.refresh()
        if text.strip():
            self._history.append(
                SearchHistoryEntry(
                    text=text.strip(),
                    result_count=page.page_info.total,
                    timestamp=datetime.now(timezone.utc).isoformat(),
                )
            )
        return page

    def set_sort(self, sort: SortParams) -> DiscoveryPage:
        self.sort = sort
        return self.refresh()

    def set_filters(self, filters: FilterParams) -> DiscoveryPage:
        self.filters = filters
        self.search = replace(self.search, page=1)
        return self.refresh()

    def go_to_page(self, page: int) -> DiscoveryPage:
        self.search = replace(self.search, page=max(1, page))
        return self.refresh()

    def clear_history(self) -> None:
        self._history.clear()

    def close(self) -> None:
        if self._token is not None:
            self._adapter.remove_change_listener(self._token)
            self._token = None
