# src/giraffe/io/gff.py
"""
GFF3 reading and writing.

Reading yields AnnotationEntry objects lazily, one per feature line, and
raises CodecError (with the line number) on the first malformed line.
Writing renders ResolvedRecord objects back into the same nine columns.
"""
from __future__ import annotations
import gzip
import sys
from contextlib import contextmanager
from pathlib import Path
from typing import IO, Iterator, List, Optional, TextIO, Union
from urllib.parse import unquote

from ..errors import CodecError
from ..models import AnnotationEntry, Attr, ResolvedRecord

PLACEHOLDER = "."
GFF3_HEADER = "##gff-version 3"
MAX_COORD = 2**63 - 1  # stored as SQLite INTEGER / numpy int64

Source = Union[str, Path, IO[str], None]

# Characters with a reserved meaning in column 9 (and tabs/newlines anywhere)
_ESCAPES = {c: f"%{ord(c):02X}" for c in "%;=,&\t\n\r"}
_ESCAPE_TABLE = str.maketrans(_ESCAPES)


# -------- utilities --------

def open_maybe_gzip(path: str | Path):
    path = str(path)
    return gzip.open(path, "rt", encoding="utf-8") if path.endswith(".gz") else open(path, "r", encoding="utf-8")


@contextmanager
def open_source(source: Source) -> Iterator[TextIO]:
    """Yield a text stream for a path, an open stream, or stdin ('-' or None)."""
    if source is None or source == "-":
        yield sys.stdin
    elif isinstance(source, (str, Path)):
        with open_maybe_gzip(source) as f:
            yield f
    else:
        yield source


def escape(text: str) -> str:
    return text.translate(_ESCAPE_TABLE)


def _fmt_score(x: Optional[float]) -> str:
    if x is None:
        return PLACEHOLDER
    if float(x).is_integer():
        return str(int(x))
    return repr(float(x))


# -------- parsing --------

def parse_attributes(field: str, ln: Optional[int] = None) -> List[Attr]:
    """
    "ID=g1;Parent=t1,t2" -> [("ID", "g1"), ("Parent", "t1"), ("Parent", "t2")]
    Values are percent-decoded. "." or "" means no attributes.
    """
    out: List[Attr] = []
    if field in ("", PLACEHOLDER):
        return out
    for chunk in field.split(";"):
        chunk = chunk.strip()
        if not chunk:
            continue
        if "=" not in chunk:
            raise CodecError(f"attribute without '=': {chunk!r}", ln)
        key, value = chunk.split("=", 1)
        key = unquote(key.strip())
        if not key:
            raise CodecError(f"attribute with empty key: {chunk!r}", ln)
        for v in value.split(","):
            out.append((key, unquote(v)))
    return out


def parse_line(line: str, ln: Optional[int] = None) -> AnnotationEntry:
    parts = line.rstrip("\r\n").split("\t")
    if len(parts) != 9:
        raise CodecError(f"expected 9 tab-separated columns, found {len(parts)}", ln)
    seqname, source, ftype, start_s, end_s, score_s, strand_s, frame_s, attrs = parts

    seqname = unquote(seqname)
    if not seqname or seqname == PLACEHOLDER:
        raise CodecError("missing sequence name", ln)
    try:
        start = int(start_s)
        end = int(end_s)
    except ValueError:
        raise CodecError(f"non-integer coordinates: {start_s!r}, {end_s!r}", ln) from None
    for v in (start, end):
        if not 0 <= v <= MAX_COORD:
            raise CodecError(f"coordinate out of range 0..{MAX_COORD}: {v}", ln)

    score: Optional[float] = None
    if score_s != PLACEHOLDER:
        try:
            score = float(score_s)
        except ValueError:
            raise CodecError(f"invalid score: {score_s!r}", ln) from None

    if strand_s in ("+", "-"):
        strand: Optional[str] = strand_s
    elif strand_s in (PLACEHOLDER, "?"):
        strand = None
    else:
        raise CodecError(f"invalid strand: {strand_s!r}", ln)

    if frame_s in ("0", "1", "2"):
        frame: Optional[int] = int(frame_s)
    elif frame_s == PLACEHOLDER:
        frame = None
    else:
        raise CodecError(f"invalid frame: {frame_s!r}", ln)

    return AnnotationEntry(
        seqname=seqname,
        source="" if source == PLACEHOLDER else unquote(source),
        feature_type=unquote(ftype),
        start=start,
        end=end,
        score=score,
        strand=strand,
        frame=frame,
        attributes=parse_attributes(attrs, ln),
    )


def iter_gff3(stream: TextIO) -> Iterator[AnnotationEntry]:
    lines = iter(stream)
    ln = 0
    while True:
        try:
            line = next(lines)
        except StopIteration:
            return
        except UnicodeDecodeError as e:
            # decoding is buffered, so the line is the first one not yet read
            raise CodecError(f"input is not valid UTF-8: {e}", ln + 1) from e
        ln += 1
        s = line.strip()
        if not s:
            continue
        if s.startswith("#"):
            if s.upper().startswith("##FASTA"):
                return
            continue
        yield parse_line(line, ln)


def read_gff3(source: Source = None) -> Iterator[AnnotationEntry]:
    """Lazily decode a GFF3 path (.gz ok), stream, or stdin."""
    with open_source(source) as f:
        yield from iter_gff3(f)


# -------- writing --------

def format_attributes(attributes: List[Attr]) -> str:
    """Group values per key (first-seen key order) as key=v1,v2;key2=v3."""
    if not attributes:
        return PLACEHOLDER
    grouped: dict = {}
    for k, v in attributes:
        grouped.setdefault(k, []).append(escape(v))
    return ";".join(f"{escape(k)}={','.join(vs)}" for k, vs in grouped.items())


def format_record(res: ResolvedRecord, frame_placeholder: str = PLACEHOLDER) -> str:
    r = res.record
    cols = [
        escape(r.seqname),
        escape(r.source) if r.source else PLACEHOLDER,
        escape(r.feature_type),
        str(r.start),
        str(r.end),
        _fmt_score(r.score),
        r.strand if r.strand else PLACEHOLDER,
        str(r.frame) if r.frame is not None else frame_placeholder,
        format_attributes(res.attributes),
    ]
    return "\t".join(cols)


class GFF3Writer:
    """Writes the header once, then one line per record in call order."""

    def __init__(self, stream: TextIO, frame_placeholder: str = PLACEHOLDER):
        self.stream = stream
        self.frame_placeholder = frame_placeholder
        self.count = 0
        self.stream.write(GFF3_HEADER + "\n")

    def write(self, res: ResolvedRecord) -> None:
        self.stream.write(format_record(res, self.frame_placeholder) + "\n")
        self.count += 1
