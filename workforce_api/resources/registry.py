from __future__ import annotations

from typing import Dict

from .base import Resource
from .models import (
    AttendanceIn,
    DepartmentIn,
    EmployeeIn,
    HolidayIn,
    LeaveIn,
    ScheduleIn,
    ScheduleUpdate,
    ShiftIn,
)


DEPARTMENTS = Resource(
    name="department",
    plural="departments",
    table="departments",
    alias="d",
    columns="d.id, d.code, d.name, d.created_at",
    from_sql="departments d",
    model=DepartmentIn,
    required=("code", "name"),
    search_columns=("d.code", "d.name"),
    duplicate_message="Department code already exists",
)

EMPLOYEES = Resource(
    name="employee",
    plural="employees",
    table="employees",
    alias="e",
    columns="""
        e.id,
        e.name,
        e.email,
        e.title,
        e.status,
        d.id AS department_id,
        d.name AS department_name,
        d.code AS department_code,
        e.created_at
    """,
    from_sql="employees e JOIN departments d ON e.department_id = d.id",
    model=EmployeeIn,
    required=("name", "email", "title", "status", "department_id"),
    search_columns=("e.name", "e.email"),
    duplicate_message="Email already exists",
)

SHIFTS = Resource(
    name="shift",
    plural="shifts",
    table="shifts",
    alias="s",
    columns="s.id, s.name, s.start_time, s.end_time, s.total_minutes, s.is_overnight, s.created_at",
    from_sql="shifts s",
    model=ShiftIn,
    required=("name", "start_time", "end_time", "total_minutes", "is_overnight"),
    search_columns=("s.name",),
    bool_fields=("is_overnight",),
)

ATTENDANCES = Resource(
    name="attendance",
    plural="attendances",
    table="attendances",
    alias="a",
    columns="""
        a.id,
        e.id AS employee_id,
        e.name AS employee_name,
        s.id AS shift_id,
        s.name AS shift_name,
        a.work_date,
        a.clock_in,
        a.clock_out,
        a.status,
        a.created_at
    """,
    from_sql="""
        attendances a
        JOIN employees e ON a.employee_id = e.id
        JOIN shifts s ON a.shift_id = s.id
    """,
    model=AttendanceIn,
    # clock_out stays empty until the employee clocks out.
    required=("employee_id", "shift_id", "work_date", "clock_in", "status"),
    search_columns=("e.name", "a.work_date"),
)

LEAVES = Resource(
    name="leave",
    plural="leaves",
    table="leaves",
    alias="l",
    columns="""
        l.id,
        e.id AS employee_id,
        e.name AS employee_name,
        l.start_date,
        l.end_date,
        l.type,
        l.status,
        l.reason,
        l.approved_by,
        l.approved_at,
        l.created_at,
        l.updated_at
    """,
    from_sql="leaves l JOIN employees e ON l.employee_id = e.id",
    model=LeaveIn,
    required=("employee_id", "start_date", "end_date", "type", "status", "reason"),
    search_columns=("e.name", "l.start_date"),
    touch_on_update="updated_at",
)

SCHEDULES = Resource(
    name="schedule",
    plural="schedules",
    table="schedules",
    alias="s",
    columns="""
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
    """,
    from_sql="""
        schedules s
        JOIN employees e ON s.employee_id = e.id
        LEFT JOIN shifts sh ON s.shift_id = sh.id
    """,
    model=ScheduleIn,
    update_model=ScheduleUpdate,
    required=("employee_id", "shift_id", "work_date"),
    touch_on_update="updated_at",
    duplicate_message="Employee already has a schedule on this date",
)

HOLIDAYS = Resource(
    name="holiday",
    plural="holidays",
    table="holidays",
    alias="h",
    columns="h.id, h.name, h.holiday_date, h.is_national, h.created_at",
    from_sql="holidays h",
    model=HolidayIn,
    required=("name", "holiday_date", "is_national"),
    search_columns=("h.name",),
    order_by="h.holiday_date, h.id",
    bool_fields=("is_national",),
)


RESOURCES: Dict[str, Resource] = {
    r.plural: r
    for r in (DEPARTMENTS, EMPLOYEES, SHIFTS, ATTENDANCES, LEAVES, SCHEDULES, HOLIDAYS)
}
