# src/giraffe/store/records.py
from __future__ import annotations
from typing import Iterator, Optional

from ..errors import NotFound
from ..index.interval_index import drop_intervals
from ..models import AnnotationRecord
from .attributes import AttributeTable
from .handle import StoreHandle

_COLUMNS = "id, seqname, source, feature_type, start_pos, end_pos, score, strand, frame"


def _to_record(row: tuple) -> AnnotationRecord:
    rid, seqname, source, ftype, start, end, score, strand, frame = row
    return AnnotationRecord(
        id=rid,
        seqname=seqname,
        source=source,
        feature_type=ftype,
        start=start,
        end=end,
        score=score,
        strand=strand,
        frame=frame,
    )


class RecordStore:
    """
    Fixed fields of every annotation, keyed by a store-assigned id.

    Records are immutable once created. Ids come from an AUTOINCREMENT key,
    so they are never handed out twice for the lifetime of the store file,
    even after destroy_all().
    """

    def __init__(self, handle: StoreHandle):
        self.handle = handle
        self.attributes = AttributeTable(handle, self)

    def create(
        self,
        seqname: str,
        source: str,
        feature_type: str,
        start: int,
        end: int,
        score: Optional[float] = None,
        strand: Optional[str] = None,
        frame: Optional[int] = None,
    ) -> int:
        cur = self.handle.execute(
            "INSERT INTO record (seqname, source, feature_type, start_pos, end_pos, score, strand, frame) "
            "VALUES (?, ?, ?, ?, ?, ?, ?, ?)",
            (seqname, source, feature_type, start, end, score, strand, frame),
        )
        return cur.lastrowid

    def get(self, record_id: int) -> AnnotationRecord:
        row = self.handle.fetchone(f"SELECT {_COLUMNS} FROM record WHERE id = ?", (record_id,))
        if row is None:
            raise NotFound(record_id)
        return _to_record(row)

    def exists(self, record_id: int) -> bool:
        return self.handle.fetchone("SELECT 1 FROM record WHERE id = ?", (record_id,)) is not None

    def iterate(self) -> Iterator[AnnotationRecord]:
        """Records in creation order; every call starts a new scan."""
        for row in self.handle.iterate(f"SELECT {_COLUMNS} FROM record ORDER BY id"):
            yield _to_record(row)

    def count(self) -> int:
        return self.handle.fetchone("SELECT COUNT(*) FROM record")[0]

    def destroy_all(self) -> None:
        """Remove every record together with its attributes and intervals."""
        with self.handle.transaction():
            self.attributes.destroy_all()
            drop_intervals(self.handle)
            self.handle.execute("DELETE FROM record")
