"""Attendance service layer — check in/out, admin reports, auto-checkout.

Business logic:
  - One record per employee per local date; check-in once, check-out once
  - Monthly and daily admin views built by ``attendance.reports``
  - Auto-checkout sweep as a single self-excluding UPDATE
"""

from __future__ import annotations

import logging
import uuid
from datetime import date
from typing import Optional

from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from staffdesk.attendance import reports
from staffdesk.attendance.models import AttendanceRecord
from staffdesk.attendance.schemas import (
    AttendanceRecordOut,
    AutoCheckoutCandidate,
    AutoCheckoutPreviewOut,
    AutoCheckoutResultOut,
    DailyReportOut,
    MonthlyReportOut,
    TodayOut,
)
from staffdesk.common import clock
from staffdesk.common.audit import create_audit_entry
from staffdesk.common.constants import CheckStatus, LeaveStatus, UserRole
from staffdesk.common.exceptions import StateConflictError, ValidationException
from staffdesk.config import settings
from staffdesk.holidays.calendar import holiday_calendar
from staffdesk.leave.models import LeaveRequest
from staffdesk.profiles.models import Profile

logger = logging.getLogger(__name__)


# ═════════════════════════════════════════════════════════════════════
# AttendanceService
# ═════════════════════════════════════════════════════════════════════


class AttendanceService:
    """Async attendance operations: self-service, reports, sweep."""

    # ── Helpers ─────────────────────────────────────────────────────

    @staticmethod
    def _build_record_response(record: AttendanceRecord) -> AttendanceRecordOut:
        out = AttendanceRecordOut.model_validate(record)
        out.check_in = clock.as_utc(record.check_in)
        out.check_out = clock.as_utc(record.check_out)
        out.worked_minutes = reports.worked_minutes(record.check_in, record.check_out)
        return out

    @staticmethod
    async def _get_record(
        db: AsyncSession,
        profile_id: uuid.UUID,
        day: date,
        *,
        for_update: bool = False,
    ) -> Optional[AttendanceRecord]:
        query = select(AttendanceRecord).where(
            AttendanceRecord.profile_id == profile_id,
            AttendanceRecord.date == day,
        )
        if for_update:
            query = query.with_for_update()
        result = await db.execute(query)
        return result.scalars().first()

    @staticmethod
    async def _load_employees(db: AsyncSession, on_or_before: date) -> list[Profile]:
        result = await db.execute(
            select(Profile)
            .where(
                Profile.role == UserRole.employee,
                Profile.is_active.is_(True),
                Profile.enrolled_on <= on_or_before,
            )
            .order_by(Profile.name)
        )
        return list(result.scalars().all())

    @staticmethod
    async def _load_leaves(db: AsyncSession, start: date, end: date) -> list[LeaveRequest]:
        """Approved and pending requests overlapping ``[start, end]``."""
        result = await db.execute(
            select(LeaveRequest).where(
                LeaveRequest.status.in_([LeaveStatus.approved, LeaveStatus.pending]),
                LeaveRequest.from_date <= end,
                LeaveRequest.to_date >= start,
            )
        )
        return list(result.scalars().all())

    # ── Check in ────────────────────────────────────────────────────

    @staticmethod
    async def check_in(
        db: AsyncSession,
        profile_id: uuid.UUID,
        *,
        location: str,
    ) -> AttendanceRecordOut:
        """Create today's record. A second check-in on the same date conflicts."""

        now = clock.utc_now()
        today = clock.local_today()

        if await AttendanceService._get_record(db, profile_id, today) is not None:
            raise StateConflictError("check_in", "Already checked in today.")

        record = AttendanceRecord(
            profile_id=profile_id,
            date=today,
            check_in=now,
            location=location,
            auto_checked_out=False,
        )
        db.add(record)
        try:
            await db.flush()
        except IntegrityError:
            # Lost a race with a concurrent check-in for the same date
            raise StateConflictError("check_in", "Already checked in today.")

        await create_audit_entry(
            db,
            action="check_in",
            entity_type="attendance_record",
            entity_id=record.id,
            actor_id=profile_id,
            new_values={"timestamp": now.isoformat(), "location": location},
        )
        logger.info("Profile %s checked in for %s", profile_id, today)
        return AttendanceService._build_record_response(record)

    # ── Check out ───────────────────────────────────────────────────

    @staticmethod
    async def check_out(
        db: AsyncSession,
        profile_id: uuid.UUID,
    ) -> AttendanceRecordOut:
        """Stamp today's check-out time."""

        now = clock.utc_now()
        today = clock.local_today()

        record = await AttendanceService._get_record(db, profile_id, today, for_update=True)
        if record is None or record.check_in is None:
            raise ValidationException(
                {"check_out": ["No check-in found for today. Please check in first."]}
            )
        if record.check_out is not None:
            raise StateConflictError("check_out", "Already checked out today.")

        record.check_out = now
        record.updated_at = now
        await db.flush()

        await create_audit_entry(
            db,
            action="check_out",
            entity_type="attendance_record",
            entity_id=record.id,
            actor_id=profile_id,
            new_values={"timestamp": now.isoformat()},
        )
        logger.info("Profile %s checked out for %s", profile_id, today)
        return AttendanceService._build_record_response(record)

    # ── Today ───────────────────────────────────────────────────────

    @staticmethod
    async def get_today(db: AsyncSession, profile_id: uuid.UUID) -> TodayOut:
        today = clock.local_today()
        record = await AttendanceService._get_record(db, profile_id, today)
        if record is None or record.check_in is None:
            return TodayOut(date=today, status=CheckStatus.not_checked_in)

        out = AttendanceService._build_record_response(record)
        status = CheckStatus.checked_out if record.check_out else CheckStatus.checked_in
        return TodayOut(
            date=today,
            status=status,
            record=out,
            worked_minutes=out.worked_minutes,
        )

    # ── Monthly report ──────────────────────────────────────────────

    @staticmethod
    async def get_monthly_report(
        db: AsyncSession,
        month: Optional[str] = None,
    ) -> MonthlyReportOut:
        """Present / leave / absent counts per employee for one month."""

        today = clock.local_today()
        month = month or today.strftime("%Y-%m")
        try:
            start, end = reports.month_bounds(month)
        except ValueError as exc:
            raise ValidationException({"month": [str(exc)]})

        people = await AttendanceService._load_employees(db, end)
        result = await db.execute(
            select(AttendanceRecord).where(
                AttendanceRecord.date >= start,
                AttendanceRecord.date <= end,
            )
        )
        records = result.scalars().all()
        leaves = await AttendanceService._load_leaves(db, start, end)

        rows = reports.build_monthly_report(
            people,
            records,
            leaves,
            start=start,
            end=end,
            today=today,
            is_non_working=holiday_calendar.is_non_working,
        )
        return MonthlyReportOut(month=month, start_date=start, end_date=end, rows=rows)

    # ── Daily report ────────────────────────────────────────────────

    @staticmethod
    async def get_daily_report(
        db: AsyncSession,
        day: Optional[date] = None,
    ) -> DailyReportOut:
        today = clock.local_today()
        day = day or today

        people = await AttendanceService._load_employees(db, day)
        result = await db.execute(
            select(AttendanceRecord).where(AttendanceRecord.date == day)
        )
        records = result.scalars().all()
        leaves = await AttendanceService._load_leaves(db, day, day)

        rows = reports.build_daily_report(
            people,
            records,
            leaves,
            day=day,
            today=today,
            is_non_working=holiday_calendar.is_non_working,
        )
        return DailyReportOut(
            date=day,
            non_working=holiday_calendar.is_non_working(day),
            rows=rows,
        )

    # ── Auto-checkout ───────────────────────────────────────────────

    @staticmethod
    async def preview_auto_checkout(db: AsyncSession) -> AutoCheckoutPreviewOut:
        """Today's open records that the sweep would close."""

        today = clock.local_today()
        result = await db.execute(
            select(AttendanceRecord)
            .where(
                AttendanceRecord.date == today,
                AttendanceRecord.check_in.is_not(None),
                AttendanceRecord.check_out.is_(None),
            )
            .options(selectinload(AttendanceRecord.profile))
        )
        records = result.scalars().all()
        employees = [
            AutoCheckoutCandidate(
                record_id=r.id,
                profile_id=r.profile_id,
                name=r.profile.name,
                check_in=clock.as_utc(r.check_in),
            )
            for r in records
        ]
        return AutoCheckoutPreviewOut(date=today, count=len(employees), employees=employees)

    @staticmethod
    async def run_auto_checkout(
        db: AsyncSession,
        *,
        actor_id: Optional[uuid.UUID] = None,
    ) -> AutoCheckoutResultOut:
        """Close every open record for today at the configured local time.

        The WHERE clause excludes rows it has already updated, so repeated
        or overlapping runs close each record at most once.
        """

        today = clock.local_today()
        checkout_at = clock.local_at(today, settings.auto_checkout_time)

        result = await db.execute(
            update(AttendanceRecord)
            .where(
                AttendanceRecord.date == today,
                AttendanceRecord.check_in.is_not(None),
                AttendanceRecord.check_out.is_(None),
            )
            .values(
                check_out=checkout_at,
                auto_checked_out=True,
                updated_at=clock.utc_now(),
            )
            .execution_options(synchronize_session=False)
        )
        count = result.rowcount or 0

        await create_audit_entry(
            db,
            action="auto_checkout",
            entity_type="attendance_record",
            actor_id=actor_id,
            new_values={
                "date": today.isoformat(),
                "checkout_time": checkout_at.isoformat(),
                "count": count,
            },
        )
        logger.info("Auto-checkout for %s closed %d record(s) at %s", today, count, checkout_at)
        return AutoCheckoutResultOut(date=today, count=count, checkout_time=checkout_at)
