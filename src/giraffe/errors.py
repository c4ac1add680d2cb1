# src/giraffe/errors.py
from __future__ import annotations
from typing import Optional


class GiraffeError(Exception):
    """Base class for failures reported to the user."""


class CodecError(GiraffeError):
    """Malformed annotation line or query-point row."""

    def __init__(self, message: str, line: Optional[int] = None):
        self.line = line
        if line is not None:
            message = f"line {line}: {message}"
        super().__init__(message)


class InvalidInterval(GiraffeError):
    def __init__(self, seqname: str, start: int, end: int):
        self.seqname = seqname
        self.start = start
        self.end = end
        super().__init__(f"invalid interval {seqname}:{start}-{end} (start > end)")


class StorageError(GiraffeError):
    """The underlying SQLite store failed."""


class IndexSealed(GiraffeError):
    """Insert or finalize attempted on a finalized interval index."""


class IndexNotReady(GiraffeError):
    """Query attempted before the interval index was finalized."""


class BuildError(GiraffeError):
    """
    A build aborted. `position` is the 1-based ordinal of the offending
    entry and `cause` the original decode/validation error.
    """

    def __init__(self, position: int, cause: Exception):
        self.position = position
        self.cause = cause
        super().__init__(f"entry {position}: {cause}")


class InternalError(AssertionError):
    """Broken invariant between the record store, attributes and index."""


class UnknownRecord(InternalError):
    def __init__(self, record_id: int):
        self.record_id = record_id
        super().__init__(f"attribute references unknown record id {record_id}")


class NotFound(InternalError):
    def __init__(self, record_id: int):
        self.record_id = record_id
        super().__init__(f"no record with id {record_id}")
