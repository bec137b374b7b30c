"""Attendance Pydantic v2 schemas — self-service, reports, auto-checkout.

Naming conventions:
  - *Request   → request bodies (write)
  - *Out       → response bodies (read)
  - *Row       → one line of an admin report
"""

from __future__ import annotations

import uuid
from datetime import date, datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from staffdesk.common.constants import CheckStatus, DayStatus


# ═════════════════════════════════════════════════════════════════════
# Self-service
# ═════════════════════════════════════════════════════════════════════


class CheckInRequest(BaseModel):
    location: str = Field(..., max_length=255, description="Where the employee is working from")

    @field_validator("location")
    @classmethod
    def _location_not_blank(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Location is required.")
        return v


class AttendanceRecordOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    profile_id: uuid.UUID
    date: date
    check_in: Optional[datetime] = None
    check_out: Optional[datetime] = None
    location: Optional[str] = None
    auto_checked_out: bool = False

    # Filled by service
    worked_minutes: Optional[int] = None


class TodayOut(BaseModel):
    date: date
    status: CheckStatus
    record: Optional[AttendanceRecordOut] = None
    worked_minutes: Optional[int] = None


# ═════════════════════════════════════════════════════════════════════
# Admin reports
# ═════════════════════════════════════════════════════════════════════


class MonthlyAttendanceRow(BaseModel):
    profile_id: uuid.UUID
    name: str
    present_days: int = 0
    approved_leave_days: int = 0
    pending_leave_days: int = 0
    absent_days: int = 0
    worked_minutes: int = 0
    sick_leave_balance: Decimal
    casual_leave_balance: Decimal


class MonthlyReportOut(BaseModel):
    month: str
    start_date: date
    end_date: date
    rows: list[MonthlyAttendanceRow]


class DailyAttendanceRow(BaseModel):
    profile_id: uuid.UUID
    name: str
    status: Optional[DayStatus] = None
    check_in: Optional[datetime] = None
    check_out: Optional[datetime] = None
    location: Optional[str] = None


class DailyReportOut(BaseModel):
    date: date
    non_working: bool
    rows: list[DailyAttendanceRow]


# ═════════════════════════════════════════════════════════════════════
# Auto-checkout
# ═════════════════════════════════════════════════════════════════════


class AutoCheckoutCandidate(BaseModel):
    record_id: uuid.UUID
    profile_id: uuid.UUID
    name: str
    check_in: datetime


class AutoCheckoutPreviewOut(BaseModel):
    date: date
    count: int
    employees: list[AutoCheckoutCandidate]


class AutoCheckoutResultOut(BaseModel):
    date: date
    count: int
    checkout_time: datetime
