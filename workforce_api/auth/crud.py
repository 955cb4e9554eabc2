from __future__ import annotations

from typing import Any, Dict, List, Optional

from workforce_api.config import Config
from workforce_api.db import Database
from workforce_api.util.time import utcnow_iso

from .security import hash_password, verify_password


_PUBLIC_COLUMNS = "id, username, email, role, created_at"


def normalize_email(email: str) -> str:
    return (email or "").strip().lower()


def public_user(row: Any | Dict[str, Any]) -> Dict[str, Any]:
    d = dict(row)
    d.pop("password_hash", None)
    return d


def get_user_by_email(conn: Any, email: str) -> Optional[Any]:
    e = normalize_email(email)
    if not e:
        return None
    return conn.execute(
        "SELECT * FROM users WHERE email=?",
        (e,),
    ).fetchone()


def get_user_by_id(conn: Any, user_id: int) -> Optional[Any]:
    return conn.execute(
        "SELECT * FROM users WHERE id=?",
        (int(user_id),),
    ).fetchone()


def list_users(conn: Any) -> List[Dict[str, Any]]:
    rows = conn.execute(f"SELECT {_PUBLIC_COLUMNS} FROM users ORDER BY id").fetchall()
    return [dict(r) for r in rows]


def verify_user_credentials(db: Database, email: str, password: str) -> Optional[Any]:
    """Return the user row when the password matches.

    The row is read in its own unit of work, the PBKDF2 check runs after the
    connection is handed back.
    """
    with db.connect() as conn:
        row = get_user_by_email(conn, email)
    if row is None:
        return None
    if not verify_password(password, str(row["password_hash"])):
        return None
    return row


def create_user(
    conn: Any,
    *,
    username: str,
    email: str,
    password_hash: str,
    role: str = "user",
) -> int:
    """Insert a user and return its id.

    Takes an already computed `hash_password()` value so callers can hash
    before borrowing a connection.

    Email uniqueness is left to the storage layer; callers translate the
    constraint violation.
    """
    e = normalize_email(email)
    if not e:
        raise ValueError("email_blank")
    role = (role or "").strip() or "user"

    rows = conn.execute(
        """
        INSERT INTO users (username, email, password_hash, role, created_at)
        VALUES (?,?,?,?,?)
        RETURNING id
        """,
        ((username or "").strip(), e, password_hash, role, utcnow_iso()),
    ).fetchall()
    return int(rows[0]["id"])


def bootstrap_admin_if_needed(db: Database, cfg: Config) -> Optional[Dict[str, Any]]:
    """Seed an admin account on a fresh database.

    Does nothing once any user exists, or when the bootstrap email or password
    is configured empty. Returns the created user (without hash) or None.
    """

    email = normalize_email(cfg.AUTH_BOOTSTRAP_ADMIN_EMAIL)
    password = cfg.AUTH_BOOTSTRAP_ADMIN_PASSWORD
    if not email or not password:
        return None
    password_hash = hash_password(password)

    with db.connect() as conn:
        n = conn.execute("SELECT COUNT(*) AS n FROM users").fetchone()["n"]
        if int(n) > 0:
            return None

        user_id = create_user(
            conn,
            username=cfg.AUTH_BOOTSTRAP_ADMIN_USERNAME or "admin",
            email=email,
            password_hash=password_hash,
            role="admin",
        )
        return public_user(get_user_by_id(conn, user_id))
