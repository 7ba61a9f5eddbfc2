"""Derive the visible table page from the collection and view state.

Every function here is pure: inputs are never modified and the same inputs
always give the same page.
"""
import math
from numbers import Number
from typing import Any, Sequence, Tuple

from bookdash.models import BookRecord, COLUMN_IDS, Page, SortKey, ViewState


def filter_records(records: Sequence[BookRecord], query: str) -> Tuple[BookRecord, ...]:
    """Keep records whose author name contains ``query``, ignoring case."""
    if not query:
        return tuple(records)
    needle = query.lower()
    return tuple(r for r in records if needle in str(r.author_name).lower())


def _sort_value(value: Any) -> Tuple:
    # numbers < strings < missing
    if isinstance(value, Number) and not isinstance(value, bool):
        return (0, value)
    if value is None:
        return (2, "")
    return (1, str(value).lower())


def sort_records(
    records: Sequence[BookRecord],
    sort_by: Sequence[SortKey]
) -> Tuple[BookRecord, ...]:
    """Stable sort on the active (first) sort key; no key keeps the order."""
    if not sort_by:
        return tuple(records)
    active = sort_by[0]
    return tuple(sorted(
        records,
        key=lambda r: _sort_value(getattr(r, active.column_id)),
        reverse=active.descending,
    ))


def toggle_sort(sort_by: Sequence[SortKey], column_id: str) -> Tuple[SortKey, ...]:
    """
    Advance the sort cycle for a column header click.

    A new column starts ascending, the same column then goes descending and
    finally back to unsorted.
    """
    if column_id not in COLUMN_IDS:
        raise ValueError(f"Unknown column: {column_id}")
    if not sort_by or sort_by[0].column_id != column_id:
        return (SortKey(column_id),)
    if not sort_by[0].descending:
        return (SortKey(column_id, descending=True),)
    return ()


def page_count(total: int, page_size: int) -> int:
    return max(1, math.ceil(total / page_size))


def clamp_page_index(page_index: int, total_pages: int) -> int:
    return min(max(page_index, 0), total_pages - 1)


def paginate(records: Sequence[BookRecord], page_index: int, page_size: int) -> Page:
    total_pages = page_count(len(records), page_size)
    page_index = clamp_page_index(page_index, total_pages)
    start = page_index * page_size
    return Page(
        records=tuple(records[start:start + page_size]),
        page_index=page_index,
        total_pages=total_pages,
        total_records=len(records),
    )


def derive(records: Sequence[BookRecord], state: ViewState) -> Page:
    """Filter, then sort, then slice out the current page."""
    visible = filter_records(records, state.search_query)
    visible = sort_records(visible, state.sort_by)
    return paginate(visible, state.page_index, state.page_size)
