"""Single-record edit session."""
import dataclasses
from enum import Enum
from typing import Any, Optional
import logging

from bookdash.models import BookRecord
from bookdash.store import CollectionStore

logger = logging.getLogger(__name__)

READ_ONLY_FIELDS = ("record_id",)


class EditState(Enum):
    CLOSED = "closed"
    OPEN = "open"
    SAVED = "saved"
    CANCELLED = "cancelled"


class EditSession:
    """Edits one record at a time against a draft copy.

    The original record in the store is untouched until ``save``; ``save``
    and ``cancel`` both return the session to CLOSED, leaving the outcome
    in ``last_outcome``.
    """

    def __init__(self, store: CollectionStore):
        self.store = store
        self.state = EditState.CLOSED
        self.last_outcome: Optional[EditState] = None
        self.original: Optional[BookRecord] = None
        self.draft: Optional[BookRecord] = None

    @property
    def is_open(self) -> bool:
        return self.state is EditState.OPEN

    def open(self, record: BookRecord) -> BookRecord:
        if self.is_open:
            raise RuntimeError("Another record is already being edited")
        self.original = record
        self.draft = dataclasses.replace(record)
        self.state = EditState.OPEN
        logger.debug(f"Editing record {record.record_id}: {record.title}")
        return self.draft

    def set_field(self, name: str, value: Any) -> BookRecord:
        self._require_open()
        if name not in BookRecord.field_names() or name in READ_ONLY_FIELDS:
            raise ValueError(f"Field {name!r} cannot be edited")
        self.draft = dataclasses.replace(self.draft, **{name: value})
        return self.draft

    def save(self, draft: Optional[BookRecord] = None) -> bool:
        """
        Write the whole draft back to the store.

        Args:
            draft: Replacement draft, e.g. one built by the view layer

        Returns:
            True if the store still held the original record
        """
        self._require_open()
        if draft is not None:
            self.draft = dataclasses.replace(draft, record_id=self.original.record_id)
        updated = self.store.update_by_key(self.store.key_func(self.original), self.draft)
        self._close(EditState.SAVED)
        return updated

    def cancel(self):
        self._require_open()
        self._close(EditState.CANCELLED)

    def _require_open(self):
        if not self.is_open:
            raise RuntimeError("No record is being edited")

    def _close(self, outcome: EditState):
        self.last_outcome = outcome
        self.original = None
        self.draft = None
        self.state = EditState.CLOSED
