"""Tests for the debouncer and the dashboard controller."""
import asyncio

import pytest

from bookdash.dashboard import Dashboard
from bookdash.debounce import Debouncer
from bookdash.errors import SourceUnavailable
from bookdash.models import BookRecord, COLUMNS
from bookdash.store import CollectionStore


class StaticAssembler:
    """Assembler fake returning fixed records or raising."""

    def __init__(self, records=None, error=None):
        self.records = records or []
        self.error = error

    async def assemble(self):
        if self.error:
            raise self.error
        return list(self.records)


def make_records(count=25):
    authors = ["Smith", "Jones", "Blacksmith", "Brown", "Jonesy"]
    return [
        BookRecord(i, f"Book {i:02d}", authors[i % len(authors)], 1900 + (i * 7) % 30)
        for i in range(count)
    ]


def loaded_dashboard(records=None, **kwargs):
    dashboard = Dashboard(StaticAssembler(make_records() if records is None else records), **kwargs)
    asyncio.run(dashboard.load())
    return dashboard


def test_debouncer_delivers_only_last_value():
    """A burst of input produces a single delivery of the final value."""
    received = []

    async def scenario():
        debouncer = Debouncer(received.append, delay=0.05)
        for value in ("s", "sm", "smi"):
            debouncer.call(value)
            await asyncio.sleep(0.01)
        assert debouncer.pending
        await asyncio.sleep(0.1)
        assert not debouncer.pending

    asyncio.run(scenario())

    assert received == ["smi"]


def test_debouncer_separate_bursts():
    """Bursts separated by a quiet period are each delivered."""
    received = []

    async def scenario():
        debouncer = Debouncer(received.append, delay=0.02)
        debouncer.call("a")
        await asyncio.sleep(0.06)
        debouncer.call("b")
        debouncer.call("bc")
        await asyncio.sleep(0.06)

    asyncio.run(scenario())

    assert received == ["a", "bc"]


def test_debouncer_cancel_drops_pending():
    """A cancelled value is never delivered."""
    received = []

    async def scenario():
        debouncer = Debouncer(received.append, delay=0.02)
        debouncer.call("x")
        debouncer.cancel()
        await asyncio.sleep(0.05)

    asyncio.run(scenario())

    assert received == []


def test_load_populates_view():
    """After loading, the first page is rendered."""
    dashboard = loaded_dashboard()
    view = dashboard.render()

    assert view["loading"] is False
    assert view["error"] is None
    assert len(view["page_records"]) == 10
    assert view["total_pages"] == 3
    assert view["can_go_next"] is True
    assert view["can_go_prev"] is False
    assert [c["id"] for c in view["columns"]] == [c.id for c in COLUMNS]
    assert all(c["sortable"] for c in view["columns"])


def test_load_failure_shows_empty_error_state():
    """A failed primary fetch leaves an empty collection and an error."""
    dashboard = Dashboard(StaticAssembler(error=SourceUnavailable("search down")))
    asyncio.run(dashboard.load())
    view = dashboard.render()

    assert view["loading"] is False
    assert view["error"] == "search down"
    assert view["page_records"] == []
    assert view["total_pages"] == 1


def test_failed_reload_discards_previous_collection():
    """No partial or stale collection is shown after a failed reload."""
    dashboard = loaded_dashboard()
    dashboard.assembler = StaticAssembler(error=SourceUnavailable("gone"))
    asyncio.run(dashboard.load())

    assert len(dashboard.store) == 0


def test_reload_resets_view_state():
    """Reloading returns search, sort and page to defaults."""
    dashboard = loaded_dashboard()
    dashboard.apply_search("smith")
    dashboard.on_sort_toggle("title")
    asyncio.run(dashboard.load())

    assert dashboard.state.search_query == ""
    assert dashboard.state.sort_by == ()
    assert dashboard.state.page_index == 0


def test_search_resets_to_first_page():
    """Applying a search jumps back to the first page."""
    dashboard = loaded_dashboard()
    dashboard.on_page_change(2)
    page = dashboard.apply_search("jones")

    assert page.page_index == 0
    assert {r.author_name for r in page.records} == {"Jones", "Jonesy"}


def test_debounced_search_input():
    """Keystrokes reach the view only after the quiet period."""
    dashboard = loaded_dashboard(debounce_delay=0.02)

    async def scenario():
        dashboard.on_search_input("b")
        dashboard.on_search_input("br")
        assert dashboard.state.search_query == ""
        await asyncio.sleep(0.06)

    asyncio.run(scenario())

    assert dashboard.state.search_query == "br"
    assert {r["author_name"] for r in dashboard.render()["page_records"]} == {"Brown"}


def test_page_navigation_is_clamped():
    """Paging past either end stays on the first or last page."""
    dashboard = loaded_dashboard()

    assert dashboard.on_page_change(-1).page_index == 0
    assert dashboard.on_page_change(10).page_index == 2
    assert dashboard.state.page_index == 2
    assert dashboard.render()["can_go_next"] is False


def test_page_size_growth_keeps_index_in_range():
    """Fewer pages after a size change leaves the index in range."""
    dashboard = loaded_dashboard()
    dashboard.on_page_change(2)
    dashboard.on_page_size_change(50)

    assert dashboard.state.page_index == 0
    assert dashboard.page.total_pages == 1


def test_page_size_change_keeps_top_row():
    """Changing page size keeps the first visible row on screen."""
    dashboard = loaded_dashboard(make_records(100))
    dashboard.on_page_change(3)
    page = dashboard.on_page_size_change(20)

    assert page.page_index == 1
    assert page.records[0].record_id == 20


def test_invalid_page_size():
    """Only the enumerated sizes are accepted."""
    dashboard = loaded_dashboard()

    with pytest.raises(ValueError):
        dashboard.on_page_size_change(7)


def test_sort_toggle_through_dashboard():
    """Header clicks cycle ascending, descending, unsorted."""
    dashboard = loaded_dashboard()
    unsorted = [r["title"] for r in dashboard.render()["page_records"]]

    dashboard.on_sort_toggle("title")
    dashboard.on_sort_toggle("title")
    view = dashboard.render()
    assert view["page_records"][0]["title"] == "Book 24"
    assert view["sort_by"] == [{"column_id": "title", "descending": True}]

    dashboard.on_sort_toggle("title")
    assert [r["title"] for r in dashboard.render()["page_records"]] == unsorted


def test_edit_save_round_trip():
    """Saved edits show up in the next render."""
    dashboard = loaded_dashboard()
    dashboard.on_edit_open(0)
    dashboard.on_edit_field("author_name", "Smithson")

    assert dashboard.on_edit_save() is True
    assert dashboard.render()["page_records"][0]["author_name"] == "Smithson"


def test_edit_cancel_leaves_collection():
    """Cancelling leaves the collection exactly as it was."""
    dashboard = loaded_dashboard()
    before = dashboard.store.snapshot()
    dashboard.on_edit_open(1)
    dashboard.on_edit_field("title", "Changed")
    dashboard.on_edit_cancel()

    assert dashboard.store.snapshot() == before


def test_edit_open_missing_key():
    """Opening an unknown record does nothing."""
    dashboard = loaded_dashboard()

    assert dashboard.on_edit_open(999) is None
    assert not dashboard.session.is_open


def test_edit_uses_title_keys_when_configured():
    """A title-keyed store edits by title."""
    store = CollectionStore(key_func=lambda r: r.title)
    dashboard = Dashboard(StaticAssembler(make_records(3)), store=store)
    asyncio.run(dashboard.load())

    dashboard.on_edit_open("Book 01")
    dashboard.on_edit_save(BookRecord(1, "Book 01", "Someone"))

    assert store.get_by_key("Book 01").author_name == "Someone"


def test_zero_page_size_is_rejected():
    """A zero page size is refused like any other unlisted size."""
    dashboard = Dashboard(store=CollectionStore([BookRecord(0, "A")]))

    with pytest.raises(ValueError):
        dashboard.on_page_size_change(0)
    assert dashboard.state.page_size == 10


def test_loading_until_first_load_settles():
    """A dashboard with an assembler reports loading before load() runs."""
    dashboard = Dashboard(StaticAssembler(make_records(3)))

    assert dashboard.render()["loading"] is True

    asyncio.run(dashboard.load())

    assert dashboard.render()["loading"] is False


def test_unexpected_assembly_error_clears_loading():
    """Loading ends even when assembly raises something unexpected."""
    dashboard = Dashboard(StaticAssembler(error=RuntimeError("bug")))

    with pytest.raises(RuntimeError):
        asyncio.run(dashboard.load())
    assert dashboard.loading is False
