# src/giraffe/index/interval_index.py
from __future__ import annotations
from collections import defaultdict
from typing import TYPE_CHECKING, Dict, Iterable, List, Sequence, Tuple

import numpy as np

from ..errors import IndexNotReady, IndexSealed

if TYPE_CHECKING:
    from ..store.handle import StoreHandle

# Type hints for clarity
PendingEntry = Tuple[int, int, int]  # (start, end, record_id)


class Partition:
    """
    Query-ready layout of one sequence's intervals.

    Intervals are sorted by (start, end, record_id). `max_end[i]` is the
    largest end among intervals 0..i, so it is non-decreasing and can be
    bisected like `starts`.

    For a coordinate c:
      - intervals at index >= searchsorted(starts, c, "right") start after c;
      - intervals at index <  searchsorted(max_end, c, "left") all end before c.
    Only the window between the two bounds needs an explicit end check.
    """

    __slots__ = ("starts", "ends", "ids", "max_end")

    def __init__(self, entries: Sequence[PendingEntry]):
        arr = np.asarray(entries, dtype=np.int64).reshape(-1, 3)
        order = np.lexsort((arr[:, 2], arr[:, 1], arr[:, 0]))
        arr = arr[order]
        self.starts = np.ascontiguousarray(arr[:, 0])
        self.ends = np.ascontiguousarray(arr[:, 1])
        self.ids = np.ascontiguousarray(arr[:, 2])
        self.max_end = np.maximum.accumulate(self.ends) if len(arr) else self.ends.copy()

    def __len__(self) -> int:
        return len(self.starts)

    def _window(self, coords: np.ndarray) -> Tuple[np.ndarray, np.ndarray]:
        hi = np.searchsorted(self.starts, coords, side="right")
        lo = np.searchsorted(self.max_end, coords, side="left")
        return lo, hi

    def stab(self, coord: int) -> List[int]:
        lo, hi = self._window(np.asarray([coord], dtype=np.int64))
        lo, hi = int(lo[0]), int(hi[0])
        if lo >= hi:
            return []
        mask = self.ends[lo:hi] >= coord
        return self.ids[lo:hi][mask].tolist()

    def stab_many(self, coords: Sequence[int]) -> List[List[int]]:
        """Vectorised bounds for a batch of coordinates; one list of ids per coordinate."""
        c = np.asarray(coords, dtype=np.int64)
        if len(c) == 0:
            return []
        lo, hi = self._window(c)
        out: List[List[int]] = []
        for coord, a, b in zip(c.tolist(), lo.tolist(), hi.tolist()):
            if a >= b:
                out.append([])
                continue
            mask = self.ends[a:b] >= coord
            out.append(self.ids[a:b][mask].tolist())
        return out


class IntervalIndex:
    """
    Closed intervals partitioned by sequence name, each tagged with a record id.

    Two phases: insert()/insert_many() append to an unordered log, then
    finalize() builds one Partition per sequence and seals the index.
    Inserting after finalize raises IndexSealed; stabbing before it raises
    IndexNotReady. A finalized index is read-only and may be shared between
    threads.
    """

    def __init__(self):
        self._log: Dict[str, List[PendingEntry]] = defaultdict(list)
        self._partitions: Dict[str, Partition] = {}
        self._sealed = False

    @property
    def sealed(self) -> bool:
        return self._sealed

    def insert(self, seqname: str, start: int, end: int, record_id: int) -> None:
        if self._sealed:
            raise IndexSealed(f"cannot insert {seqname}:{start}-{end} into a finalized index")
        self._log[seqname].append((start, end, record_id))

    def insert_many(self, seqname: str, entries: Iterable[PendingEntry]) -> None:
        if self._sealed:
            raise IndexSealed(f"cannot insert into partition {seqname} of a finalized index")
        self._log[seqname].extend(entries)

    def finalize(self) -> None:
        if self._sealed:
            raise IndexSealed("index is already finalized")
        self._partitions = {s: Partition(entries) for s, entries in self._log.items()}
        self._log = defaultdict(list)
        self._sealed = True

    def _require_sealed(self) -> None:
        if not self._sealed:
            raise IndexNotReady("finalize() the index before querying it")

    def stab(self, seqname: str, coordinate: int) -> List[int]:
        """Record ids of every interval on `seqname` with start <= coordinate <= end."""
        self._require_sealed()
        part = self._partitions.get(seqname)
        if part is None:
            return []
        return part.stab(coordinate)

    def stab_many(self, seqname: str, coordinates: Sequence[int]) -> List[List[int]]:
        self._require_sealed()
        part = self._partitions.get(seqname)
        if part is None:
            return [[] for _ in coordinates]
        return part.stab_many(coordinates)

    def seqnames(self) -> List[str]:
        if self._sealed:
            return list(self._partitions)
        return list(self._log)

    def __len__(self) -> int:
        if self._sealed:
            return sum(len(p) for p in self._partitions.values())
        return sum(len(v) for v in self._log.values())

    def intervals(self) -> Iterable[Tuple[str, int, int, int]]:
        """(seqname, start, end, record_id) in partition layout order."""
        self._require_sealed()
        for seqname, part in self._partitions.items():
            for s, e, rid in zip(part.starts.tolist(), part.ends.tolist(), part.ids.tolist()):
                yield seqname, s, e, rid

    # -------- persistence --------

    def save(self, handle: "StoreHandle") -> int:
        """Write the finalized intervals into the store's interval table."""
        rows = list(self.intervals())
        handle.executemany(
            "INSERT INTO interval (seqname, start_pos, end_pos, record_id) VALUES (?, ?, ?, ?)",
            rows,
        )
        return len(rows)

    @classmethod
    def load(cls, handle: "StoreHandle") -> "IntervalIndex":
        """Rebuild and finalize the index from a store's interval table."""
        df = handle.read_frame(
            "SELECT seqname, start_pos, end_pos, record_id FROM interval ORDER BY seqname, start_pos"
        )
        index = cls()
        for seqname, grp in df.groupby("seqname", sort=False):
            entries = grp[["start_pos", "end_pos", "record_id"]].to_numpy(dtype=np.int64)
            index.insert_many(str(seqname), map(tuple, entries.tolist()))
        index.finalize()
        return index


def drop_intervals(handle: "StoreHandle") -> None:
    handle.execute("DELETE FROM interval")
