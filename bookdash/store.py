"""In-memory record collection with point updates."""
from typing import Any, Callable, Iterable, Optional, Tuple
import logging

from bookdash.errors import EditTargetMissing
from bookdash.models import BookRecord

logger = logging.getLogger(__name__)


def by_record_id(record: BookRecord) -> Any:
    return record.record_id


def by_title(record: BookRecord) -> Any:
    return record.title


class CollectionStore:
    """Owns the assembled collection.

    The collection is held as a tuple and only ever replaced, never mutated
    in place, so a snapshot handed to the view stays valid.
    """

    def __init__(
        self,
        records: Iterable[BookRecord] = (),
        key_func: Callable[[BookRecord], Any] = by_record_id
    ):
        self.key_func = key_func
        self._records: Tuple[BookRecord, ...] = tuple(records)

    def __len__(self) -> int:
        return len(self._records)

    def snapshot(self) -> Tuple[BookRecord, ...]:
        return self._records

    def replace_all(self, records: Iterable[BookRecord]):
        self._records = tuple(records)
        logger.info(f"Collection replaced ({len(self._records)} records)")

    def get_by_key(self, key: Any) -> Optional[BookRecord]:
        for record in self._records:
            if self.key_func(record) == key:
                return record
        return None

    def replace_by_key(self, key: Any, record: BookRecord):
        """
        Replace the first record whose key equals ``key``.

        Raises:
            EditTargetMissing: if no record matches
        """
        for index, current in enumerate(self._records):
            if self.key_func(current) == key:
                self._records = self._records[:index] + (record,) + self._records[index + 1:]
                return
        raise EditTargetMissing(key)

    def update_by_key(self, key: Any, record: BookRecord) -> bool:
        """
        Like replace_by_key, but a missing target is a no-op.

        Returns:
            True if a record was replaced
        """
        try:
            self.replace_by_key(key, record)
        except EditTargetMissing as e:
            logger.debug(f"Ignoring stale edit: {e}")
            return False
        return True
