# src/giraffe/store/attributes.py
from __future__ import annotations
from typing import TYPE_CHECKING, Iterable, List, Optional

from ..errors import UnknownRecord
from ..models import Attr
from .handle import StoreHandle

if TYPE_CHECKING:
    from .records import RecordStore


class AttributeTable:
    """
    Multi-valued key/value pairs per record.

    Stored as an arena of (record_id, key, value) rows whose `seq` column is
    the insertion position; `(record_id, seq)` is indexed so one record's
    attributes come back in the order they were added.
    """

    def __init__(self, handle: StoreHandle, records: "RecordStore"):
        self.handle = handle
        self.records = records
        self._checked: Optional[int] = None

    def _check_record(self, record_id: int) -> None:
        # entries arrive grouped by record, so one lookup per record is enough
        if record_id == self._checked:
            return
        if not self.records.exists(record_id):
            raise UnknownRecord(record_id)
        self._checked = record_id

    def add(self, record_id: int, key: str, value: str) -> None:
        self._check_record(record_id)
        self.handle.execute(
            "INSERT INTO attribute (record_id, key, value) VALUES (?, ?, ?)",
            (record_id, key, value),
        )

    def add_many(self, record_id: int, pairs: Iterable[Attr]) -> int:
        """Append pairs in order. Returns how many were added."""
        self._check_record(record_id)
        rows = [(record_id, k, v) for k, v in pairs]
        if rows:
            self.handle.executemany(
                "INSERT INTO attribute (record_id, key, value) VALUES (?, ?, ?)", rows
            )
        return len(rows)

    def get_all(self, record_id: int) -> List[Attr]:
        rows = self.handle.fetchall(
            "SELECT key, value FROM attribute WHERE record_id = ? ORDER BY seq",
            (record_id,),
        )
        return [(k, v) for k, v in rows]

    def count(self) -> int:
        return self.handle.fetchone("SELECT COUNT(*) FROM attribute")[0]

    def destroy_all(self) -> None:
        """Only called from RecordStore.destroy_all, inside its transaction."""
        self.handle.execute("DELETE FROM attribute")
        self._checked = None

    def has_key(self, key: str) -> bool:
        return self.handle.fetchone("SELECT 1 FROM attribute WHERE key = ? LIMIT 1", (key,)) is not None
