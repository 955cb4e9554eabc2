from __future__ import annotations

import re
import sqlite3
import threading
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Iterator, Optional, Sequence
from urllib.parse import urlparse

from workforce_api.config import Config
from workforce_api.schema import get_schema_sql


def _debug(msg: str) -> None:
    print(f"[db] {msg}")


def _detect_dialect(dsn: str) -> str:
    """Return 'postgres' or 'sqlite'."""
    s = (dsn or "").strip()
    if not s:
        return "sqlite"
    try:
        scheme = urlparse(s).scheme.lower()
    except ValueError:
        scheme = ""
    if scheme in ("postgres", "postgresql"):
        return "postgres"
    # Allow sqlite:///path style, but default is file path.
    return "sqlite"


# Quoted literals/identifiers (with doubled-quote escapes) or a bare placeholder.
_QMARK_TOKEN = re.compile(r"""'(?:[^']|'')*'|"(?:[^"]|"")*"|\?""")


def _qmark_to_pct(sql: str) -> str:
    """Rewrite sqlite `?` placeholders as psycopg2 `%s`.

    Question marks inside quoted strings are left alone.
    """
    return _QMARK_TOKEN.sub(lambda m: "%s" if m.group(0) == "?" else m.group(0), sql)


_SCHEMA_LOCK_KEY = 70411

_PG_INTEGRITY_CODES = {
    "23505": "unique",
    "23503": "foreign_key",
    "23502": "not_null",
    "23514": "check",
}


def integrity_kind(exc: BaseException) -> Optional[str]:
    """Classify a driver constraint violation.

    Returns 'unique', 'foreign_key', 'not_null', 'check' or 'integrity' for
    constraint errors from sqlite3 / psycopg2, None for anything else.
    """
    if isinstance(exc, sqlite3.IntegrityError):
        msg = str(exc).upper()
        if "UNIQUE" in msg or "PRIMARY KEY" in msg:
            return "unique"
        if "FOREIGN KEY" in msg:
            return "foreign_key"
        if "NOT NULL" in msg:
            return "not_null"
        if "CHECK" in msg:
            return "check"
        return "integrity"

    # psycopg2 errors expose the SQLSTATE as .pgcode
    code = str(getattr(exc, "pgcode", None) or "")
    if code in _PG_INTEGRITY_CODES:
        return _PG_INTEGRITY_CODES[code]
    if code.startswith("23"):
        return "integrity"
    return None


class PGCursor:
    def __init__(self, cur: Any):
        self._cur = cur

    def execute(self, sql: str, params: Sequence[Any] | None = None) -> "PGCursor":
        self._cur.execute(_qmark_to_pct(sql), tuple(params or ()))
        return self

    def fetchone(self) -> Any:
        return self._cur.fetchone()

    def fetchall(self) -> Any:
        return self._cur.fetchall()

    @property
    def rowcount(self) -> int:
        return int(self._cur.rowcount or 0)

    def close(self) -> None:
        self._cur.close()


class PGConnection:
    """A tiny adapter that makes psycopg2 connections look like sqlite3 connections."""

    dialect = "postgres"

    def __init__(self, conn: Any):
        self._conn = conn

    def execute(self, sql: str, params: Sequence[Any] | None = None) -> PGCursor:
        wrapper = PGCursor(self._conn.cursor())
        wrapper.execute(sql, params)
        return wrapper

    def commit(self) -> None:
        self._conn.commit()

    def rollback(self) -> None:
        self._conn.rollback()

    @property
    def closed(self) -> bool:
        return bool(self._conn.closed)


class Database:
    """Process-wide storage handle.

    Owns the only shared resource of the API: a bounded set of connections.
    Callers hold a connection for one unit of work via `connect()`; the
    semaphore makes extra callers wait instead of opening more connections.

    - SQLite: a short-lived connection per unit of work (WAL + NORMAL sync).
    - Postgres: psycopg2 ThreadedConnectionPool (RealDictCursor rows).
    """

    def __init__(
        self,
        dsn: str,
        *,
        pool_size: int = 10,
        connect_timeout: int = 10,
        statement_timeout_ms: int = 0,
    ):
        self.dsn = (dsn or "").strip()
        self.dialect = _detect_dialect(self.dsn)
        self.pool_size = max(1, int(pool_size))
        self.connect_timeout = max(1, int(connect_timeout))
        self.statement_timeout_ms = max(0, int(statement_timeout_ms))
        self._slots = threading.BoundedSemaphore(self.pool_size)
        self._pool: Any = None
        self._pool_lock = threading.Lock()

    @classmethod
    def from_config(cls, cfg: Config) -> "Database":
        return cls(
            cfg.DB_DSN,
            pool_size=cfg.DB_POOL_SIZE,
            connect_timeout=cfg.DB_CONNECT_TIMEOUT_SECONDS,
            statement_timeout_ms=cfg.DB_STATEMENT_TIMEOUT_MS,
        )

    # -----------------------------
    # Postgres
    # -----------------------------

    def _pg_pool(self) -> Any:
        with self._pool_lock:
            if self._pool is not None:
                return self._pool
            try:
                import psycopg2.extras
                import psycopg2.pool
            except ImportError as e:
                raise RuntimeError(
                    "Postgres selected but psycopg2 is not installed. "
                    "Install psycopg2-binary and try again."
                ) from e

            kwargs: dict[str, Any] = {
                # RealDictCursor makes fetchone()/fetchall() rows act like dicts.
                "cursor_factory": psycopg2.extras.RealDictCursor,
                "connect_timeout": self.connect_timeout,
            }
            if self.statement_timeout_ms:
                kwargs["options"] = f"-c statement_timeout={self.statement_timeout_ms}"
            self._pool = psycopg2.pool.ThreadedConnectionPool(1, self.pool_size, self.dsn, **kwargs)
            _debug(f"Opened Postgres pool (max {self.pool_size} connections)")
            return self._pool

    @contextmanager
    def _connect_postgres(self) -> Iterator[PGConnection]:
        pool = self._pg_pool()
        raw = pool.getconn()
        conn = PGConnection(raw)
        try:
            yield conn
            conn.commit()
        except Exception:
            if not conn.closed:
                conn.rollback()
            raise
        finally:
            pool.putconn(raw, close=conn.closed)

    # -----------------------------
    # SQLite
    # -----------------------------

    def _sqlite_path(self) -> str:
        path = self.dsn or "./workforce.sqlite"
        if path.lower().startswith("sqlite:///"):
            path = path[len("sqlite:///") :]
        return path

    @contextmanager
    def _connect_sqlite(self) -> Iterator[sqlite3.Connection]:
        path = self._sqlite_path()
        Path(path).parent.mkdir(parents=True, exist_ok=True)
        conn = sqlite3.connect(path, timeout=self.connect_timeout, check_same_thread=False)
        conn.row_factory = sqlite3.Row
        # WAL lets readers run alongside the single writer; FK checks are per connection.
        for pragma in (
            "journal_mode=WAL",
            "synchronous=NORMAL",
            f"busy_timeout={self.connect_timeout * 1000}",
            "foreign_keys=ON",
        ):
            conn.execute(f"PRAGMA {pragma}")
        try:
            yield conn
            conn.commit()
        except Exception:
            conn.rollback()
            raise
        finally:
            conn.close()

    # -----------------------------
    # Public
    # -----------------------------

    @contextmanager
    def connect(self) -> Iterator[Any]:
        """Borrow a connection for one unit of work.

        Commits on normal exit, rolls back if the block raises.
        """
        with self._slots:
            if self.dialect == "postgres":
                with self._connect_postgres() as conn:
                    yield conn
            else:
                with self._connect_sqlite() as conn:
                    yield conn

    def close(self) -> None:
        with self._pool_lock:
            if self._pool is not None:
                self._pool.closeall()
                self._pool = None


def init_db(db: Database) -> None:
    """Create missing tables and indexes. Safe to call on every start."""
    _debug(f"Initializing DB ({db.dialect}) at {db.dsn}")
    schema_sql = get_schema_sql(db.dialect)
    with db.connect() as conn:
        if db.dialect != "postgres":
            conn.executescript(schema_sql)
            return

        # Several API processes may boot at once, serialize the DDL.
        conn.execute("SELECT pg_advisory_lock(?)", (_SCHEMA_LOCK_KEY,))
        try:
            for stmt in schema_sql.split(";"):
                if stmt.strip():
                    conn.execute(stmt)
        finally:
            conn.execute("SELECT pg_advisory_unlock(?)", (_SCHEMA_LOCK_KEY,))
