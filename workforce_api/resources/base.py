"""Generic list/get/create/update/delete over one table.

Each resource is a `Resource` description (table, joins, searchable columns,
writable fields); the functions below turn it into parameterized SQL. They
take an open connection and leave error translation to the caller.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple, Type

from pydantic import BaseModel

from workforce_api.errors import ValidationError
from workforce_api.resources.models import MAX_ID
from workforce_api.util.pagination import Pagination
from workforce_api.util.time import utcnow_iso


_POSITIVE_INT = re.compile(r"^\+?\d{1,19}$")


@dataclass(frozen=True)
class Resource:
    name: str
    plural: str
    table: str
    alias: str
    columns: str
    from_sql: str
    model: Type[BaseModel]
    required: Tuple[str, ...]
    search_columns: Tuple[str, ...] = ()
    update_model: Optional[Type[BaseModel]] = None
    base_where: Optional[str] = None
    order_by: Optional[str] = None
    bool_fields: Tuple[str, ...] = ()
    touch_on_update: Optional[str] = None
    duplicate_message: str = "Record already exists"

    @property
    def title(self) -> str:
        return self.name[:1].upper() + self.name[1:]

    @property
    def patch_model(self) -> Type[BaseModel]:
        return self.update_model or self.model

    @property
    def in_use_message(self) -> str:
        return f"{self.title} is still referenced by other records"

    def default_order(self) -> str:
        return self.order_by or f"{self.alias}.id"

    def row_to_dict(self, row: Any) -> Dict[str, Any]:
        d = dict(row)
        for f in self.bool_fields:
            if d.get(f) is not None:
                d[f] = bool(d[f])
        return d


def parse_id(raw: Any, res: Resource) -> int:
    """Path ids must be positive integers; anything else is a 400."""
    s = str(raw if raw is not None else "").strip()
    if not _POSITIVE_INT.match(s) or not 1 <= int(s) <= MAX_ID:
        raise ValidationError(f"Invalid {res.name} id", kind="InvalidId")
    return int(s)


def like_pattern(term: str) -> str:
    """Wrap a search term for `LIKE ... ESCAPE '\\'`, matching it literally."""
    escaped = term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    return f"%{escaped}%"


def search_filter(
    columns: Sequence[str],
    search: Optional[str],
    *,
    base_where: Optional[str] = None,
) -> Tuple[str, List[Any]]:
    """Build the WHERE clause shared by a list query and its COUNT query."""
    clauses: List[str] = []
    params: List[Any] = []

    if base_where:
        clauses.append(f"({base_where})")

    term = (search or "").strip()
    if term and columns:
        like = like_pattern(term)
        clauses.append(
            "(" + " OR ".join(f"LOWER({c}) LIKE LOWER(?) ESCAPE '\\'" for c in columns) + ")"
        )
        params.extend([like] * len(columns))

    if not clauses:
        return "", params
    return "WHERE " + " AND ".join(clauses), params


def list_page(
    conn: Any,
    res: Resource,
    p: Pagination,
    search: Optional[str],
) -> Tuple[List[Dict[str, Any]], int]:
    where_sql, params = search_filter(res.search_columns, search, base_where=res.base_where)

    total = conn.execute(
        f"SELECT COUNT(*) AS total FROM {res.from_sql} {where_sql}",
        tuple(params),
    ).fetchone()["total"]

    rows = conn.execute(
        f"""
        SELECT {res.columns}
        FROM {res.from_sql}
        {where_sql}
        ORDER BY {res.default_order()}
        LIMIT ? OFFSET ?
        """,
        (*params, p.limit, p.offset),
    ).fetchall()

    return [res.row_to_dict(r) for r in rows], int(total or 0)


def fetch_row(conn: Any, res: Resource, row_id: int) -> Optional[Dict[str, Any]]:
    row = conn.execute(
        f"""
        SELECT {res.columns}
        FROM {res.from_sql}
        WHERE {res.alias}.id = ?
        LIMIT 1
        """,
        (int(row_id),),
    ).fetchone()
    if row is None:
        return None
    return res.row_to_dict(row)


def _to_db(value: Any) -> Any:
    # Booleans are stored as 0/1 on every engine.
    if isinstance(value, bool):
        return int(value)
    return value


def _is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def missing_fields(res: Resource, data: Mapping[str, Any]) -> List[str]:
    return [f for f in res.required if _is_blank(data.get(f))]


def insert_row(conn: Any, res: Resource, data: Mapping[str, Any]) -> int:
    missing = missing_fields(res, data)
    if missing:
        raise ValidationError(
            "Missing required fields: " + ", ".join(missing),
            kind="MissingFields",
        )

    fields = [f for f in res.model.model_fields if f in data]
    cols = fields + ["created_at"]
    values = [_to_db(data[f]) for f in fields] + [utcnow_iso()]

    # fetchall() steps the statement to completion before the commit.
    rows = conn.execute(
        f"""
        INSERT INTO {res.table} ({", ".join(cols)})
        VALUES ({", ".join("?" for _ in cols)})
        RETURNING id
        """,
        tuple(values),
    ).fetchall()
    return int(rows[0]["id"])


def update_row(conn: Any, res: Resource, row_id: int, patch: Mapping[str, Any]) -> int:
    """Apply a partial update; returns the number of rows touched.

    Presence in `patch` is what marks a field for update, so falsy values
    are written as-is.
    """
    fields = [f for f in res.patch_model.model_fields if f in patch]
    if not fields:
        raise ValidationError("No fields to update", kind="NoFields")

    sets = [f"{f}=?" for f in fields]
    params: List[Any] = [_to_db(patch[f]) for f in fields]
    if res.touch_on_update:
        sets.append(f"{res.touch_on_update}=?")
        params.append(utcnow_iso())
    params.append(int(row_id))

    cur = conn.execute(
        f"UPDATE {res.table} SET {', '.join(sets)} WHERE id=?",
        tuple(params),
    )
    return cur.rowcount


def delete_row(conn: Any, res: Resource, row_id: int) -> int:
    cur = conn.execute(f"DELETE FROM {res.table} WHERE id=?", (int(row_id),))
    return cur.rowcount
