"""Dashboard controller: the boundary between the core and the view layer.

The view layer reads ``render()`` and reports user actions through the
``on_*`` hooks. All state lives here or in the CollectionStore; every hook
re-derives the current page and re-clamps the page index.
"""
import dataclasses
from typing import Any, Callable, Dict, List, Optional
import logging

from bookdash.debounce import Debouncer
from bookdash.errors import SourceUnavailable
from bookdash.models import (
    BookRecord, COLUMNS, DEFAULT_PAGE_SIZE, PAGE_SIZE_OPTIONS, Page, ViewState
)
from bookdash.session import EditSession
from bookdash.store import CollectionStore
from bookdash.view import derive, toggle_sort

logger = logging.getLogger(__name__)


class Dashboard:
    """Loads the collection and drives search, sort, paging and editing."""

    def __init__(
        self,
        assembler=None,
        store: Optional[CollectionStore] = None,
        page_size: int = DEFAULT_PAGE_SIZE,
        debounce_delay: float = 0.3
    ):
        """
        Args:
            assembler: Object with an ``assemble()`` coroutine (RecordAssembler)
            store: Collection store, a fresh one if omitted
            page_size: Initial page size, one of PAGE_SIZE_OPTIONS
            debounce_delay: Quiet period before search input applies
        """
        self.assembler = assembler
        self.store = store if store is not None else CollectionStore()
        self.default_page_size = page_size
        self.state = ViewState(page_size=page_size)
        self.session = EditSession(self.store)
        # Nothing to show until the first load settles
        self.loading = assembler is not None
        self.error: Optional[str] = None
        self._debouncer = Debouncer(self.apply_search, debounce_delay)
        self.page: Page = self._derive()

    # -- loading --------------------------------------------------------

    async def load(self):
        """Assemble the collection; a failed primary fetch leaves it empty."""
        self._begin_load()
        try:
            records = await self.assembler.assemble()
        except SourceUnavailable as e:
            self._fail_load(e)
        else:
            self._finish_load(records)
        finally:
            self.loading = False

    def load_blocking(self, assemble: Callable[[], List[BookRecord]]):
        """Same as ``load`` for a blocking assemble function."""
        self._begin_load()
        try:
            records = assemble()
        except SourceUnavailable as e:
            self._fail_load(e)
        else:
            self._finish_load(records)
        finally:
            self.loading = False

    def _begin_load(self):
        self.loading = True
        self.error = None
        self._debouncer.cancel()

    def _finish_load(self, records: List[BookRecord]):
        self.store.replace_all(records)
        self.state = ViewState(page_size=self.default_page_size)
        self.loading = False
        self._refresh()

    def _fail_load(self, error: SourceUnavailable):
        logger.error(f"Loading books failed: {error}")
        self.store.replace_all(())
        self.state = ViewState(page_size=self.default_page_size)
        self.error = str(error)
        self.loading = False
        self._refresh()

    # -- view -----------------------------------------------------------

    def _derive(self) -> Page:
        return derive(self.store.snapshot(), self.state)

    def _refresh(self) -> Page:
        self.page = self._derive()
        if self.page.page_index != self.state.page_index:
            self.state = dataclasses.replace(self.state, page_index=self.page.page_index)
        return self.page

    def render(self) -> Dict[str, Any]:
        page = self._refresh()
        return {
            "loading": self.loading,
            "error": self.error,
            "page_records": [record.to_dict() for record in page.records],
            "page_index": page.page_index,
            "page_size": self.state.page_size,
            "total_pages": page.total_pages,
            "total_records": page.total_records,
            "can_go_prev": page.can_go_prev,
            "can_go_next": page.can_go_next,
            "sort_by": [dataclasses.asdict(key) for key in self.state.sort_by],
            "search_query": self.state.search_query,
            "columns": [dataclasses.asdict(column) for column in COLUMNS],
            "page_size_options": list(PAGE_SIZE_OPTIONS),
        }

    # -- hooks ----------------------------------------------------------

    def on_search_input(self, raw: str):
        """Raw keystroke input; applied after the debounce delay."""
        self._debouncer.call(raw)

    def apply_search(self, query: str) -> Page:
        self.state = dataclasses.replace(self.state, search_query=query, page_index=0)
        return self._refresh()

    def on_sort_toggle(self, column_id: str) -> Page:
        self.state = dataclasses.replace(
            self.state, sort_by=toggle_sort(self.state.sort_by, column_id)
        )
        return self._refresh()

    def on_page_change(self, delta: int) -> Page:
        page_index = max(0, self.state.page_index + delta)
        self.state = dataclasses.replace(self.state, page_index=page_index)
        return self._refresh()

    def on_page_size_change(self, size: int) -> Page:
        if size not in PAGE_SIZE_OPTIONS:
            raise ValueError(f"page_size must be one of {PAGE_SIZE_OPTIONS}, got {size}")
        # Keep the first visible row on screen
        top_row = self.state.page_index * self.state.page_size
        self.state = dataclasses.replace(
            self.state, page_size=size, page_index=top_row // size
        )
        return self._refresh()

    def on_edit_open(self, key: Any) -> Optional[BookRecord]:
        record = self.store.get_by_key(key)
        if record is None:
            logger.warning(f"No record to edit for key {key!r}")
            return None
        return self.session.open(record)

    def on_edit_field(self, name: str, value: Any) -> BookRecord:
        return self.session.set_field(name, value)

    def on_edit_save(self, draft: Optional[BookRecord] = None) -> bool:
        updated = self.session.save(draft)
        self._refresh()
        return updated

    def on_edit_cancel(self):
        self.session.cancel()
