"""Tests for the discovery view state container."""

from agentreg.adapters import DiscoveryAdapter
from agentreg.query import FilterParams, QueryEngine, SortField, SortOrder, SortParams
from agentreg.store import EventKind, MemorySnapshotSlot, RecordStore
from agentreg.views import DiscoveryView


def _view(**kwargs):
    store = RecordStore(MemorySnapshotSlot())
    engine = QueryEngine(store, invalidate_on_write=True)
    return store, DiscoveryView(DiscoveryAdapter(store, engine), **kwargs)


def test_refresh_clears_stale_flag():
    store, view = _view()
    assert view.stale
    assert view.page is None

    page = view.refresh()
    assert not view.stale
    assert page.page_info.total == 3
    assert view.page is page


def test_store_changes_mark_view_stale():
    store, view = _view()
    view.refresh()

    store.create({"name": "Newcomer"})

    assert view.stale
    assert view.last_event.kind == EventKind.RECORD_ADDED
    assert view.last_event.item.name == "Newcomer"
    assert view.refresh().page_info.total == 4


def test_set_search_records_history():
    store, view = _view(history_limit=2)

    page = view.set_search("security")
    assert page.page_info.total == 1
    view.set_search("   ")
    view.set_search("agent")
    view.set_search("blockchain")

    assert [h.text for h in view.history] == ["blockchain", "agent"]
    assert view.history[1].result_count == 2

    view.clear_history()
    assert view.history == []


def test_paging_and_filters():
    store, view = _view(page_size=1)

    assert view.go_to_page(2).page_info.page == 2
    assert view.go_to_page(0).page_info.page == 1

    view.go_to_page(3)
    page = view.set_filters(FilterParams(is_on_chain=True))
    assert page.page_info.page == 1
    assert [i.id for i in page.items] == ["bc-agent-001"]

    view.set_search("")
    view.set_filters(FilterParams())
    page = view.set_sort(SortParams(field=SortField.NAME, order=SortOrder.ASC))
    assert page.items[0].name == "Blockchain AI Assistant"


def test_closed_view_ignores_changes():
    store, view = _view()
    view.refresh()
    view.close()

    store.create({"name": "Unseen"})
    assert not view.stale
