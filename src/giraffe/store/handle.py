# src/giraffe/store/handle.py
from __future__ import annotations
import sqlite3
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Iterable, Iterator, List, Optional

import pandas as pd

from ..errors import StorageError

MEMORY = ":memory:"

SCHEMA = """
CREATE TABLE IF NOT EXISTS record (
    id           INTEGER PRIMARY KEY AUTOINCREMENT,
    seqname      TEXT NOT NULL,
    source       TEXT NOT NULL,
    feature_type TEXT NOT NULL,
    start_pos    INTEGER NOT NULL,
    end_pos      INTEGER NOT NULL,
    score        REAL,
    strand       TEXT,
    frame        INTEGER
);
CREATE TABLE IF NOT EXISTS attribute (
    seq       INTEGER PRIMARY KEY AUTOINCREMENT,
    record_id INTEGER NOT NULL,
    key       TEXT NOT NULL,
    value     TEXT NOT NULL
);
CREATE INDEX IF NOT EXISTS attribute_record ON attribute (record_id, seq);
CREATE TABLE IF NOT EXISTS interval (
    record_id INTEGER PRIMARY KEY,
    seqname   TEXT NOT NULL,
    start_pos INTEGER NOT NULL,
    end_pos   INTEGER NOT NULL
);
CREATE INDEX IF NOT EXISTS interval_partition ON interval (seqname, start_pos);
"""


class StoreHandle:
    """
    One session's connection to an annotation store (a SQLite file).

    Open it for a single build or query, pass it to the components that need
    it, and close it afterwards. Read-only handles never create the file.
    """

    def __init__(self, path: str | Path = MEMORY, readonly: bool = False):
        self.path = str(path)
        self.readonly = readonly
        self._conn: Optional[sqlite3.Connection] = None
        self._in_transaction = False

    # -------- lifecycle --------

    def open(self) -> "StoreHandle":
        try:
            if self.readonly:
                if self.path == MEMORY or not Path(self.path).exists():
                    raise StorageError(f"Store not found: {self.path}")
                uri = Path(self.path).resolve().as_uri() + "?mode=ro"
                self._conn = sqlite3.connect(uri, uri=True, isolation_level=None)
            else:
                self._conn = sqlite3.connect(self.path, isolation_level=None)
                self._conn.executescript(SCHEMA)
        except sqlite3.Error as e:
            raise StorageError(f"Cannot open store {self.path}: {e}") from e
        return self

    def close(self) -> None:
        if self._conn is not None:
            self._conn.close()
            self._conn = None

    def __enter__(self) -> "StoreHandle":
        return self.open()

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        self.close()

    @property
    def connection(self) -> sqlite3.Connection:
        if self._conn is None:
            raise StorageError("Store handle is not open.")
        return self._conn

    # -------- transactions --------

    @contextmanager
    def transaction(self) -> Iterator[None]:
        """All writes inside the block commit together or not at all. Re-entrant."""
        conn = self.connection
        if self._in_transaction:
            yield
            return
        self._execute_raw(conn, "BEGIN IMMEDIATE")
        self._in_transaction = True
        try:
            yield
            self._execute_raw(conn, "COMMIT")
        except BaseException:
            if conn.in_transaction:
                conn.execute("ROLLBACK")
            raise
        finally:
            self._in_transaction = False

    @property
    def in_transaction(self) -> bool:
        return self._in_transaction

    # -------- statements --------

    @staticmethod
    def _execute_raw(conn: sqlite3.Connection, sql: str, params: Iterable[Any] = ()) -> sqlite3.Cursor:
        try:
            return conn.execute(sql, tuple(params))
        except sqlite3.Error as e:
            raise StorageError(str(e)) from e

    def execute(self, sql: str, params: Iterable[Any] = ()) -> sqlite3.Cursor:
        return self._execute_raw(self.connection, sql, params)

    def executemany(self, sql: str, rows: Iterable[Iterable[Any]]) -> None:
        try:
            self.connection.executemany(sql, rows)
        except sqlite3.Error as e:
            raise StorageError(str(e)) from e

    def fetchone(self, sql: str, params: Iterable[Any] = ()) -> Optional[tuple]:
        return self.execute(sql, params).fetchone()

    def fetchall(self, sql: str, params: Iterable[Any] = ()) -> List[tuple]:
        return self.execute(sql, params).fetchall()

    def iterate(self, sql: str, params: Iterable[Any] = ()) -> Iterator[tuple]:
        """Stream rows from a fresh cursor."""
        cur = self.execute(sql, params)
        while True:
            try:
                rows = cur.fetchmany(1000)
            except sqlite3.Error as e:
                raise StorageError(str(e)) from e
            if not rows:
                return
            yield from rows

    def read_frame(self, sql: str, params: Iterable[Any] = ()) -> pd.DataFrame:
        try:
            return pd.read_sql_query(sql, self.connection, params=tuple(params))
        except (sqlite3.Error, pd.errors.DatabaseError) as e:
            raise StorageError(str(e)) from e
