# astryx/core/db/base.py
from __future__ import annotations
import os, sqlite3, threading
from contextlib import contextmanager

from astryx.core.errors import StoreUnavailable

def _connect(path: str):
    con = sqlite3.connect(path, check_same_thread=False, isolation_level=None, timeout=5.0)
    con.row_factory = sqlite3.Row
    con.execute("PRAGMA journal_mode=WAL;")
    con.execute("PRAGMA foreign_keys=ON;")
    con.execute("PRAGMA synchronous=NORMAL;")
    con.execute("PRAGMA temp_store=MEMORY;")
    con.execute("PRAGMA cache_size=-20000;")
    con.execute("PRAGMA busy_timeout=5000;")
    return con


class Database:
    """Store handle: one SQLite connection per thread, built once at boot and
    passed to whoever needs it (engine, repositories)."""

    def __init__(self, path: str):
        self.path = os.path.abspath(path)
        os.makedirs(os.path.dirname(self.path), exist_ok=True)
        self._tls = threading.local()

    @classmethod
    def from_settings(cls, settings) -> "Database":
        return cls(os.path.join(settings.data_dir, settings.db_name))

    def get_conn(self) -> sqlite3.Connection:
        con = getattr(self._tls, "con", None)
        if con is None:
            try:
                con = _connect(self.path)
            except sqlite3.Error as e:
                raise StoreUnavailable(f"cannot open {self.path}: {e}") from e
            self._tls.con = con
        return con

    @contextmanager
    def atomic(self, immediate: bool = True):
        """BEGIN IMMEDIATE takes the write lock up front: two writers on the
        same file are serialized for the whole read-validate-write sequence."""
        con = self.get_conn()
        try:
            con.execute("BEGIN IMMEDIATE;" if immediate else "BEGIN;")
        except sqlite3.OperationalError as e:
            raise StoreUnavailable(str(e)) from e
        try:
            yield con
            con.execute("COMMIT;")
        except Exception:
            con.execute("ROLLBACK;")
            raise

    def close(self) -> None:
        con = getattr(self._tls, "con", None)
        if con is not None:
            con.close()
            self._tls.con = None
