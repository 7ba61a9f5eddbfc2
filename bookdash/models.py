"""Data models for dashboard records and view state."""
from dataclasses import dataclass, field, fields
from typing import Optional, List, Tuple, Union

UNKNOWN = "Unknown"
NOT_AVAILABLE = "N/A"

PAGE_SIZE_OPTIONS = (10, 20, 30, 40, 50, 100)
DEFAULT_PAGE_SIZE = 10


@dataclass(frozen=True)
class AuthorDetails:
    """Enrichment data derived from an author's profile and works."""
    birth_date: str = UNKNOWN
    top_work: str = NOT_AVAILABLE


@dataclass(frozen=True)
class BookRecord:
    """Flat, fully populated book row shown in the dashboard.

    ``record_id`` is assigned at assembly time (position in the search
    response) and never changes, so edits can target a record even when
    two books share a title.
    """
    record_id: int
    title: str
    author_name: str = UNKNOWN
    first_publish_year: Optional[int] = None
    ratings_average: Union[float, str] = NOT_AVAILABLE
    subject: str = NOT_AVAILABLE
    author_birth_date: str = UNKNOWN
    author_top_work: str = NOT_AVAILABLE

    @classmethod
    def field_names(cls) -> List[str]:
        return [f.name for f in fields(cls)]

    def to_dict(self) -> dict:
        return {name: getattr(self, name) for name in self.field_names()}


@dataclass(frozen=True)
class Column:
    """Table column exposed to the view layer."""
    id: str
    label: str
    sortable: bool = True


COLUMNS: Tuple[Column, ...] = (
    Column("title", "Title"),
    Column("author_name", "Author"),
    Column("first_publish_year", "First Publish Year"),
    Column("ratings_average", "Average Rating"),
    Column("subject", "Subject"),
    Column("author_birth_date", "Author Birth Date"),
    Column("author_top_work", "Author Top Work"),
)

COLUMN_IDS = tuple(column.id for column in COLUMNS)


@dataclass(frozen=True)
class SortKey:
    """Active sort column and direction."""
    column_id: str
    descending: bool = False


@dataclass(frozen=True)
class ViewState:
    """Search, sort and pagination state of the table."""
    search_query: str = ""
    sort_by: Tuple[SortKey, ...] = ()
    page_index: int = 0
    page_size: int = DEFAULT_PAGE_SIZE

    def __post_init__(self):
        if self.page_size not in PAGE_SIZE_OPTIONS:
            raise ValueError(
                f"page_size must be one of {PAGE_SIZE_OPTIONS}, got {self.page_size}"
            )
        if self.page_index < 0:
            raise ValueError(f"page_index must be non-negative, got {self.page_index}")


@dataclass(frozen=True)
class Page:
    """One derived window of the filtered and sorted collection."""
    records: Tuple[BookRecord, ...]
    page_index: int
    total_pages: int
    total_records: int
    can_go_prev: bool = field(init=False)
    can_go_next: bool = field(init=False)

    def __post_init__(self):
        object.__setattr__(self, "can_go_prev", self.page_index > 0)
        object.__setattr__(self, "can_go_next", self.page_index < self.total_pages - 1)
