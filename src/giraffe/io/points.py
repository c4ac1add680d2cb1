# src/giraffe/io/points.py
from __future__ import annotations
import io
from typing import Iterator, TextIO

import pandas as pd

from ..errors import CodecError
from ..models import QueryPoint
from .gff import MAX_COORD, Source, open_source

CHUNK_ROWS = 100_000


class _SkipComments(io.TextIOBase):
    """Read-only view of a text stream without the lines starting with '#'."""

    def __init__(self, stream: TextIO):
        self._lines = (line for line in stream if not line.startswith("#"))
        self._buf = ""

    def readable(self) -> bool:
        return True

    def read(self, size: int = -1) -> str:
        while size is None or size < 0 or len(self._buf) < size:
            line = next(self._lines, None)
            if line is None:
                break
            self._buf += line
        if size is None or size < 0:
            out, self._buf = self._buf, ""
        else:
            out, self._buf = self._buf[:size], self._buf[size:]
        return out


def _is_missing(x) -> bool:
    return x is None or (isinstance(x, float) and pd.isna(x)) or str(x).strip() == ""


def parse_coordinate(token, row: int) -> int:
    t = str(token).strip()
    if not (t.isascii() and t.isdigit()):
        raise CodecError(f"coordinate must be a non-negative integer, got {t!r}", row)
    value = int(t)
    if value > MAX_COORD:
        raise CodecError(f"coordinate out of range 0..{MAX_COORD}: {t}", row)
    return value


def iter_points(frame: pd.DataFrame, first_row: int) -> Iterator[QueryPoint]:
    if frame.shape[1] < 2:
        raise CodecError("expected two tab-separated columns (seqname, coordinate)", first_row)
    for i, (seqname, coord) in enumerate(zip(frame.iloc[:, 0], frame.iloc[:, 1]), first_row):
        if _is_missing(seqname) or _is_missing(coord):
            raise CodecError("missing seqname or coordinate", i)
        yield QueryPoint(str(seqname).strip(), parse_coordinate(coord, i))


def read_query_points(source: Source = None, chunksize: int = CHUNK_ROWS) -> Iterator[QueryPoint]:
    """
    Decode a headerless two-column TSV (seqname, coordinate).
    Lines starting with '#' and blank lines are ignored; extra columns are ignored.
    Row numbers in errors count data rows only.
    """
    with open_source(source) as f:
        try:
            reader = pd.read_csv(
                _SkipComments(f),
                sep="\t",
                header=None,
                usecols=[0, 1],
                dtype=str,
                skip_blank_lines=True,
                keep_default_na=False,
                chunksize=chunksize,
            )
        except pd.errors.EmptyDataError:
            return
        except ValueError as e:
            # one-column tables surface as a usecols mismatch; UnicodeDecodeError is a ValueError too
            raise CodecError(f"malformed query table: {e}") from e
        row = 1
        with reader:
            while True:
                try:
                    chunk = next(reader)
                except (StopIteration, pd.errors.EmptyDataError):
                    return
                except ValueError as e:
                    raise CodecError(f"malformed query table: {e}") from e
                yield from iter_points(chunk, row)
                row += len(chunk)
