"""Attendance router — check in/out, admin reports, auto-checkout.

Self-service endpoints are for employees; reports are admin-only. The
auto-checkout pair also accepts the scheduler's bearer secret.
"""


from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from staffdesk.attendance.schemas import (
    AttendanceRecordOut,
    AutoCheckoutPreviewOut,
    AutoCheckoutResultOut,
    CheckInRequest,
    DailyReportOut,
    MonthlyReportOut,
    TodayOut,
)
from staffdesk.attendance.service import AttendanceService
from staffdesk.auth.dependencies import (
    require_admin,
    require_employee,
    require_scheduler_or_admin,
)
from staffdesk.common.constants import MONTH_PATTERN
from staffdesk.database import get_db
from staffdesk.profiles.models import Profile

router = APIRouter(prefix="", tags=["attendance"])


# ── POST /check-in ──────────────────────────────────────────────────

@router.post("/check-in", response_model=AttendanceRecordOut, status_code=201)
async def check_in(
    body: CheckInRequest,
    employee: Profile = Depends(require_employee),
    db: AsyncSession = Depends(get_db),
):
    """Record today's check-in with the employee's work location."""
    return await AttendanceService.check_in(db, employee.id, location=body.location)


# ── POST /check-out ─────────────────────────────────────────────────

@router.post("/check-out", response_model=AttendanceRecordOut)
async def check_out(
    employee: Profile = Depends(require_employee),
    db: AsyncSession = Depends(get_db),
):
    return await AttendanceService.check_out(db, employee.id)


# ── GET /today ──────────────────────────────────────────────────────

@router.get("/today", response_model=TodayOut)
async def today(
    employee: Profile = Depends(require_employee),
    db: AsyncSession = Depends(get_db),
):
    return await AttendanceService.get_today(db, employee.id)


# ── GET /monthly ────────────────────────────────────────────────────

@router.get("/monthly", response_model=MonthlyReportOut)
async def monthly_report(
    month: Optional[str] = Query(None, pattern=MONTH_PATTERN, description="YYYY-MM; defaults to the current month"),
    admin: Profile = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    """Per-employee monthly totals. Weekends and holidays are excluded."""
    return await AttendanceService.get_monthly_report(db, month)


# ── GET /daily ──────────────────────────────────────────────────────

@router.get("/daily", response_model=DailyReportOut)
async def daily_report(
    day: Optional[date] = Query(None, alias="date", description="Defaults to today"),
    admin: Profile = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    return await AttendanceService.get_daily_report(db, day)


# ── GET /auto-checkout ──────────────────────────────────────────────

@router.get("/auto-checkout", response_model=AutoCheckoutPreviewOut)
async def preview_auto_checkout(
    actor: Optional[Profile] = Depends(require_scheduler_or_admin),
    db: AsyncSession = Depends(get_db),
):
    """Employees who would be checked out by the next sweep."""
    return await AttendanceService.preview_auto_checkout(db)


# ── POST /auto-checkout ─────────────────────────────────────────────

@router.post("/auto-checkout", response_model=AutoCheckoutResultOut)
async def run_auto_checkout(
    actor: Optional[Profile] = Depends(require_scheduler_or_admin),
    db: AsyncSession = Depends(get_db),
):
    return await AttendanceService.run_auto_checkout(
        db, actor_id=actor.id if actor else None,
    )
