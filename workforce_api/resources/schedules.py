"""Schedule roster views.

The roster pages over *active employees* (ordered by name) and attaches each
employee's schedule rows inside a date window, so a page always holds
`limit` employees no matter how many shifts each one has.
"""

from __future__ import annotations

from datetime import date
from typing import Any, Dict, List, Optional, Tuple

from workforce_api.errors import ValidationError
from workforce_api.util.pagination import Pagination

from .base import search_filter


ROSTER_SEARCH_COLUMNS = ("name", "email")
ROSTER_BASE_WHERE = "status = 'active'"


def parse_date_range(start: Optional[str], end: Optional[str]) -> Tuple[str, str]:
    if not (start or "").strip() or not (end or "").strip():
        raise ValidationError("start and end date are required", kind="MissingFields")
    try:
        d0 = date.fromisoformat(str(start).strip())
        d1 = date.fromisoformat(str(end).strip())
    except ValueError:
        raise ValidationError("start and end must be dates (YYYY-MM-DD)", kind="InvalidDate")
    if d1 < d0:
        raise ValidationError("end date must not be before start date", kind="InvalidDate")
    return d0.isoformat(), d1.isoformat()


def roster_page(
    conn: Any,
    p: Pagination,
    search: Optional[str],
    start: str,
    end: str,
) -> Tuple[List[Dict[str, Any]], int]:
    where_sql, params = search_filter(ROSTER_SEARCH_COLUMNS, search, base_where=ROSTER_BASE_WHERE)

    total = conn.execute(
        f"SELECT COUNT(*) AS total FROM employees {where_sql}",
        tuple(params),
    ).fetchone()["total"]

    employees = conn.execute(
        f"""
        SELECT id, name
        FROM employees
        {where_sql}
        ORDER BY name, id
        LIMIT ? OFFSET ?
        """,
        (*params, p.limit, p.offset),
    ).fetchall()

    if not employees:
        return [], int(total or 0)

    employee_ids = [int(e["id"]) for e in employees]
    placeholders = ",".join("?" for _ in employee_ids)

    schedules = conn.execute(
        f"""
        SELECT
          s.id,
          s.employee_id,
          s.work_date,
          s.status,
          s.notes,
          sh.id AS shift_id,
          sh.name AS shift_name,
          sh.start_time,
          sh.end_time
        FROM schedules s
        LEFT JOIN shifts sh ON sh.id = s.shift_id
        WHERE s.employee_id IN ({placeholders})
          AND s.work_date BETWEEN ? AND ?
        ORDER BY s.employee_id, s.work_date
        """,
        (*employee_ids, start, end),
    ).fetchall()

    by_employee: Dict[int, List[Dict[str, Any]]] = {eid: [] for eid in employee_ids}
    for row in schedules:
        by_employee[int(row["employee_id"])].append(dict(row))

    data = [
        {
            "employee_id": int(e["id"]),
            "name": e["name"],
            "schedules": by_employee[int(e["id"])],
        }
        for e in employees
    ]
    return data, int(total or 0)


def employee_exists(conn: Any, employee_id: int) -> bool:
    row = conn.execute("SELECT 1 FROM employees WHERE id=?", (int(employee_id),)).fetchone()
    return row is not None


def schedules_for_employee(conn: Any, employee_id: int) -> List[Dict[str, Any]]:
    rows = conn.execute(
        """
        SELECT
          s.id,
          e.id AS employee_id,
          e.name AS employee_name,
          sh.id AS shift_id,
          sh.name AS shift_name,
          sh.start_time,
          sh.end_time,
          s.work_date,
          s.status,
          s.notes,
          s.created_at,
          s.updated_at
        FROM schedules s
        JOIN employees e ON s.employee_id = e.id
        LEFT JOIN shifts sh ON s.shift_id = sh.id
        WHERE s.employee_id = ?
        ORDER BY s.work_date, s.id
        """,
        (int(employee_id),),
    ).fetchall()
    return [dict(r) for r in rows]
