# src/giraffe/build/pipeline.py
from __future__ import annotations
import logging
import sys
from pathlib import Path
from typing import Iterable, Optional

from ..errors import BuildError, CodecError, GiraffeError, InvalidInterval
from ..index.interval_index import IntervalIndex
from ..io.gff import Source, read_gff3
from ..models import AnnotationEntry
from ..store.handle import StoreHandle
from ..store.records import RecordStore

log = logging.getLogger("giraffe")
if not log.handlers:
    h = logging.StreamHandler(sys.stderr)
    h.setFormatter(logging.Formatter("[%(asctime)s] %(levelname)s: %(message)s"))
    log.addHandler(h)
log.setLevel(logging.INFO)

DEFAULT_DB = "anno.db"
PROGRESS_EVERY = 100_000


class BuildPipeline:
    """
    Loads annotation entries into a store as one transaction.

    build() replaces whatever the store held before. Either every entry ends
    up as a record with its attributes and interval, and the interval index
    is finalized, or nothing changes.
    """

    def __init__(self, handle: StoreHandle):
        self.handle = handle
        self.records = RecordStore(handle)
        self.index: Optional[IntervalIndex] = None

    def _ingest(self, entry: AnnotationEntry, index: IntervalIndex) -> int:
        if entry.start > entry.end:
            raise InvalidInterval(entry.seqname, entry.start, entry.end)
        rid = self.records.create(
            entry.seqname,
            entry.source,
            entry.feature_type,
            entry.start,
            entry.end,
            score=entry.score,
            strand=entry.strand,
            frame=entry.frame,
        )
        index.insert(entry.seqname, entry.start, entry.end, rid)
        self.records.attributes.add_many(rid, entry.attributes)
        return rid

    def build(self, entries: Iterable[AnnotationEntry]) -> int:
        """Returns the number of records built; raises BuildError on bad input."""
        index = IntervalIndex()
        n = 0
        with self.handle.transaction():
            self.records.destroy_all()
            it = iter(entries)
            while True:
                try:
                    entry = next(it)
                except StopIteration:
                    break
                except CodecError as e:
                    raise BuildError(n + 1, e) from e
                try:
                    self._ingest(entry, index)
                except InvalidInterval as e:
                    raise BuildError(n + 1, e) from e
                n += 1
                if n % PROGRESS_EVERY == 0:
                    log.info("Ingested %d entries ...", n)
            index.finalize()
            index.save(self.handle)
        self.index = index
        log.info("Built %d records on %d sequences.", n, len(index.seqnames()))
        return n


def build_paths(source: Source, store_path: str | Path = DEFAULT_DB) -> int:
    """
    Library entry point: build the store at `store_path` from a GFF3 source
    (path, .gz path, open stream, or '-'/None for stdin).
    """
    log.info("GFF3: %s", source if source is not None else "-")
    log.info("DB: %s", store_path)
    with StoreHandle(store_path) as handle:
        return BuildPipeline(handle).build(read_gff3(source))


def build_cmd(args) -> None:
    """
    CLI entry point (compatible with other giraffe subcommands).
    """
    try:
        build_paths(args.input, args.output)
    except GiraffeError as e:
        log.error("Build failed: %s", e)
        sys.exit(1)
