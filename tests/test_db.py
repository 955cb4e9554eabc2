import sqlite3
import threading

import pytest

from workforce_api.db import Database, _detect_dialect, _qmark_to_pct, init_db, integrity_kind
from workforce_api.schema import get_schema_sql


def test_qmark_to_pct_skips_string_literals():
    sql = "SELECT * FROM t WHERE a=? AND b='?' AND c=\"?\" AND d=?"
    assert _qmark_to_pct(sql) == "SELECT * FROM t WHERE a=%s AND b='?' AND c=\"?\" AND d=%s"


def test_qmark_to_pct_handles_escaped_quotes():
    assert _qmark_to_pct("SELECT 'it''s ?', ?") == "SELECT 'it''s ?', %s"


def test_detect_dialect():
    assert _detect_dialect("postgresql://u:p@localhost/db") == "postgres"
    assert _detect_dialect("postgres://localhost/db") == "postgres"
    assert _detect_dialect("./workforce.sqlite") == "sqlite"
    assert _detect_dialect("") == "sqlite"


def _sqlite_error(sql_setup, sql_fail):
    conn = sqlite3.connect(":memory:")
    conn.execute("PRAGMA foreign_keys = ON")
    for stmt in sql_setup:
        conn.execute(stmt)
    try:
        conn.execute(sql_fail)
    except sqlite3.IntegrityError as e:
        return e
    finally:
        conn.close()
    raise AssertionError("expected IntegrityError")


def test_integrity_kind_sqlite():
    unique = _sqlite_error(
        ["CREATE TABLE t (x TEXT UNIQUE)", "INSERT INTO t VALUES ('a')"],
        "INSERT INTO t VALUES ('a')",
    )
    assert integrity_kind(unique) == "unique"

    fk = _sqlite_error(
        ["CREATE TABLE p (id INTEGER PRIMARY KEY)", "CREATE TABLE c (p_id INTEGER REFERENCES p(id))"],
        "INSERT INTO c VALUES (5)",
    )
    assert integrity_kind(fk) == "foreign_key"

    not_null = _sqlite_error(["CREATE TABLE t (x TEXT NOT NULL)"], "INSERT INTO t VALUES (NULL)")
    assert integrity_kind(not_null) == "not_null"

    check = _sqlite_error(["CREATE TABLE t (x INTEGER CHECK (x > 0))"], "INSERT INTO t VALUES (0)")
    assert integrity_kind(check) == "check"


def test_integrity_kind_postgres_codes():
    class FakePgError(Exception):
        def __init__(self, pgcode):
            super().__init__(pgcode)
            self.pgcode = pgcode

    assert integrity_kind(FakePgError("23505")) == "unique"
    assert integrity_kind(FakePgError("23503")) == "foreign_key"
    assert integrity_kind(FakePgError("23P01")) == "integrity"
    assert integrity_kind(FakePgError("42P01")) is None
    assert integrity_kind(RuntimeError("boom")) is None


def test_postgres_schema_is_derived():
    pg = get_schema_sql("postgres")
    assert "AUTOINCREMENT" not in pg
    assert "BIGSERIAL PRIMARY KEY" in pg
    assert "PRAGMA" not in pg
    assert get_schema_sql("sqlite").lstrip().startswith("PRAGMA")


def test_connect_rolls_back_on_error(tmp_path):
    db = Database(str(tmp_path / "rb.sqlite"))
    init_db(db)

    with pytest.raises(RuntimeError):
        with db.connect() as conn:
            conn.execute(
                "INSERT INTO departments (code, name, created_at) VALUES (?,?,?)",
                ("X", "X", "2024-01-01T00:00:00Z"),
            )
            raise RuntimeError("abort")

    with db.connect() as conn:
        n = conn.execute("SELECT COUNT(*) AS n FROM departments").fetchone()["n"]
    assert n == 0


def test_init_db_is_idempotent(tmp_path):
    db = Database(str(tmp_path / "twice.sqlite"))
    init_db(db)
    init_db(db)


def test_concurrent_units_of_work(tmp_path):
    db = Database(str(tmp_path / "concurrent.sqlite"), pool_size=3)
    init_db(db)
    errors = []

    def worker(i):
        try:
            with db.connect() as conn:
                conn.execute(
                    "INSERT INTO departments (code, name, created_at) VALUES (?,?,?)",
                    (f"D{i}", f"Dept {i}", "2024-01-01T00:00:00Z"),
                )
        except Exception as e:  # collected and asserted below
            errors.append(e)

    threads = [threading.Thread(target=worker, args=(i,)) for i in range(12)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert errors == []
    with db.connect() as conn:
        n = conn.execute("SELECT COUNT(*) AS n FROM departments").fetchone()["n"]
    assert n == 12
