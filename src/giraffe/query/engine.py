# src/giraffe/query/engine.py
from __future__ import annotations
import logging
import sys
from concurrent.futures import ThreadPoolExecutor
from contextlib import contextmanager
from pathlib import Path
from typing import Dict, Iterable, Iterator, List, Optional, TextIO, Tuple, Union

from ..errors import GiraffeError
from ..index.interval_index import IntervalIndex
from ..io.gff import PLACEHOLDER, GFF3Writer, Source
from ..io.points import read_query_points
from ..models import QueryPoint, ResolvedRecord
from ..store.handle import StoreHandle
from ..store.records import RecordStore

log = logging.getLogger("giraffe")
if not log.handlers:
    h = logging.StreamHandler(sys.stderr)
    h.setFormatter(logging.Formatter("[%(asctime)s] %(levelname)s: %(message)s"))
    log.addHandler(h)
log.setLevel(logging.INFO)

DEFAULT_PROVENANCE_KEY = "query_hits"

# Type hints for clarity
Provenance = Dict[int, List[int]]  # record_id -> matching coordinates, in processing order


def group_points(points: Iterable[QueryPoint]) -> Dict[str, List[int]]:
    """seqname -> coordinates, both in first-seen order; duplicates kept."""
    groups: Dict[str, List[int]] = {}
    for p in points:
        groups.setdefault(p.seqname, []).append(p.coordinate)
    return groups


class OverlapQueryEngine:
    """
    Resolves query points against a finalized IntervalIndex.

    Each matched record is emitted once, in the order it was first hit,
    carrying every coordinate that hit it. With `provenance_key` set, those
    coordinates are also appended as a space-joined attribute, after the
    stored ones. If stored attributes already use that key, GFF3 output
    merges both under it (stored values first); `hits` stays separate.
    """

    def __init__(
        self,
        records: RecordStore,
        index: IntervalIndex,
        provenance_key: Optional[str] = DEFAULT_PROVENANCE_KEY,
        threads: int = 1,
    ):
        self.records = records
        self.index = index
        self.provenance_key = provenance_key
        self.threads = max(1, threads)

    def _stab_group(self, item: Tuple[str, List[int]]) -> List[List[int]]:
        seqname, coords = item
        return self.index.stab_many(seqname, coords)

    def collect_hits(self, points: Iterable[QueryPoint]) -> Provenance:
        groups = list(group_points(points).items())
        if self.threads > 1 and len(groups) > 1:
            # partitions are read-only after finalize; map() keeps group order
            with ThreadPoolExecutor(max_workers=min(self.threads, len(groups))) as ex:
                results = list(ex.map(self._stab_group, groups))
        else:
            results = [self._stab_group(g) for g in groups]

        hits: Provenance = {}
        for (_, coords), per_coord in zip(groups, results):
            for coord, ids in zip(coords, per_coord):
                for rid in ids:
                    hits.setdefault(rid, []).append(coord)
        return hits

    def resolve(self, points: Iterable[QueryPoint]) -> Iterator[ResolvedRecord]:
        hits = self.collect_hits(points)
        for rid, coords in hits.items():
            record = self.records.get(rid)
            attributes = self.records.attributes.get_all(rid)
            if self.provenance_key:
                attributes.append((self.provenance_key, " ".join(str(c) for c in coords)))
            yield ResolvedRecord(record=record, attributes=attributes, hits=coords)


@contextmanager
def open_output(target: Union[str, Path, TextIO, None]) -> Iterator[TextIO]:
    if target is None or target == "-":
        yield sys.stdout
    elif isinstance(target, (str, Path)):
        with open(target, "w", encoding="utf-8", newline="") as f:
            yield f
    else:
        yield target


def query_paths(
    store_path: str | Path,
    query_source: Source = None,
    output: Union[str, Path, TextIO, None] = None,
    provenance_key: Optional[str] = DEFAULT_PROVENANCE_KEY,
    frame_placeholder: str = PLACEHOLDER,
    threads: int = 1,
) -> int:
    """
    Library entry point: stab every query point against the store and write
    the matched annotations as GFF3. Returns the number of records written.
    """
    with StoreHandle(store_path, readonly=True) as handle:
        index = IntervalIndex.load(handle)
        log.info("Loaded %d intervals on %d sequences from %s", len(index), len(index.seqnames()), store_path)
        engine = OverlapQueryEngine(RecordStore(handle), index, provenance_key=provenance_key, threads=threads)
        if provenance_key and engine.records.attributes.has_key(provenance_key):
            log.warning(
                "Stored attributes already use '%s'; provenance values will be merged into it. "
                "Use --provenance-key to pick another name.", provenance_key
            )
        points = list(read_query_points(query_source))
        log.info("Query points: %d", len(points))
        with open_output(output) as out:
            writer = GFF3Writer(out, frame_placeholder=frame_placeholder)
            for res in engine.resolve(points):
                writer.write(res)
    log.info("Matched records: %d", writer.count)
    return writer.count


def query_cmd(args) -> None:
    """
    CLI entry point (compatible with other giraffe subcommands).
    """
    try:
        query_paths(
            store_path=args.db,
            query_source=args.input,
            output=args.output,
            provenance_key=None if args.no_provenance else args.provenance_key,
            frame_placeholder=args.frame_placeholder,
            threads=args.threads,
        )
    except GiraffeError as e:
        log.error("Query failed: %s", e)
        sys.exit(1)
