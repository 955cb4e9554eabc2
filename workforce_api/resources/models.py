"""Request bodies for the resource routers.

Every field is optional at the schema level: the same model parses POST and
PATCH bodies. Which fields a create needs is declared on the Resource, and a
PATCH only touches the fields present in the body (`exclude_unset`), so an
explicit "", 0 or false is a real update.
"""

from __future__ import annotations

from datetime import date, datetime, time
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field


EmployeeStatus = Literal["active", "inactive", "terminated"]
AttendanceStatus = Literal["incomplete", "complete"]
LeaveType = Literal["annual", "sick", "unpaid", "special"]
LeaveStatus = Literal["pending", "approved", "rejected", "cancelled"]
ScheduleStatus = Literal["scheduled", "off", "holiday"]

# Largest key a signed 64-bit INTEGER column holds.
MAX_ID = 2**63 - 1


class _Body(BaseModel):
    model_config = ConfigDict(extra="ignore")


class DepartmentIn(_Body):
    code: Optional[str] = None
    name: Optional[str] = None


class EmployeeIn(_Body):
    name: Optional[str] = None
    email: Optional[str] = None
    title: Optional[str] = None
    status: Optional[EmployeeStatus] = None
    department_id: Optional[int] = Field(default=None, gt=0, le=MAX_ID)


class ShiftIn(_Body):
    name: Optional[str] = None
    start_time: Optional[time] = None
    end_time: Optional[time] = None
    total_minutes: Optional[int] = Field(default=None, ge=0, le=MAX_ID)
    is_overnight: Optional[bool] = None


class AttendanceIn(_Body):
    employee_id: Optional[int] = Field(default=None, gt=0, le=MAX_ID)
    shift_id: Optional[int] = Field(default=None, gt=0, le=MAX_ID)
    work_date: Optional[date] = None
    clock_in: Optional[datetime] = None
    clock_out: Optional[datetime] = None
    status: Optional[AttendanceStatus] = None


class LeaveIn(_Body):
    employee_id: Optional[int] = Field(default=None, gt=0, le=MAX_ID)
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    type: Optional[LeaveType] = None
    status: Optional[LeaveStatus] = None
    reason: Optional[str] = None


class ScheduleIn(_Body):
    employee_id: Optional[int] = Field(default=None, gt=0, le=MAX_ID)
    shift_id: Optional[int] = Field(default=None, gt=0, le=MAX_ID)
    work_date: Optional[date] = None
    status: Optional[ScheduleStatus] = None
    notes: Optional[str] = None


class ScheduleUpdate(_Body):
    # A schedule never moves to another employee.
    shift_id: Optional[int] = Field(default=None, gt=0, le=MAX_ID)
    work_date: Optional[date] = None
    status: Optional[ScheduleStatus] = None
    notes: Optional[str] = None


class HolidayIn(_Body):
    name: Optional[str] = None
    holiday_date: Optional[date] = None
    is_national: Optional[bool] = None

