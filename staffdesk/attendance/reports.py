"""Attendance report builders.

Pure functions over already-loaded rows: no database access and no clock
reads, so callers pass ``today`` and the non-working-day predicate in.

Every (employee, date) pair resolves to exactly one ``DayStatus`` using a
fixed priority: non-working day, approved leave, pending leave, then
attendance. Leave is reported even for future dates; attendance never is.
"""

from __future__ import annotations

import calendar
import re
import uuid
from collections import defaultdict
from datetime import date, datetime, timedelta
from decimal import Decimal
from typing import Callable, Iterable, Iterator, Optional, Protocol, Sequence

from staffdesk.attendance.schemas import DailyAttendanceRow, MonthlyAttendanceRow
from staffdesk.common import clock
from staffdesk.common.constants import MONTH_PATTERN, DayStatus, LeaveStatus

NonWorkingPredicate = Callable[[date], bool]


class _Person(Protocol):
    id: uuid.UUID
    name: str
    enrolled_on: date
    sick_leave_balance: Decimal
    casual_leave_balance: Decimal


class _Record(Protocol):
    profile_id: uuid.UUID
    date: date
    check_in: Optional[datetime]
    check_out: Optional[datetime]
    location: Optional[str]


class _Leave(Protocol):
    profile_id: uuid.UUID
    from_date: date
    to_date: date
    status: LeaveStatus


# ── Date helpers ────────────────────────────────────────────────────

def month_bounds(month: str) -> tuple[date, date]:
    """First and last day of a ``YYYY-MM`` month."""
    if not re.match(MONTH_PATTERN, month):
        raise ValueError(f"Invalid month '{month}', expected YYYY-MM.")
    year, mon = (int(p) for p in month.split("-"))
    return date(year, mon, 1), date(year, mon, calendar.monthrange(year, mon)[1])


def iter_days(start: date, end: date) -> Iterator[date]:
    """Every date in ``[start, end]``."""
    day = start
    while day <= end:
        yield day
        day += timedelta(days=1)


def worked_minutes(
    check_in: Optional[datetime],
    check_out: Optional[datetime],
) -> Optional[int]:
    """Whole minutes between check-in and check-out, never negative.

    None unless both timestamps exist.
    """
    if check_in is None or check_out is None:
        return None
    seconds = (clock.as_utc(check_out) - clock.as_utc(check_in)).total_seconds()
    return max(0, int(seconds // 60))


# ── Classification ──────────────────────────────────────────────────

def _covers(leave: _Leave, day: date, status: LeaveStatus) -> bool:
    return leave.status == status and leave.from_date <= day <= leave.to_date


def classify_day(
    day: date,
    *,
    today: date,
    is_non_working: NonWorkingPredicate,
    leaves: Sequence[_Leave] = (),
    record: Optional[_Record] = None,
) -> Optional[DayStatus]:
    """Status of one employee on one date; None for unclassified future days."""
    if is_non_working(day):
        return DayStatus.non_working
    if any(_covers(lv, day, LeaveStatus.approved) for lv in leaves):
        return DayStatus.approved_leave
    if any(_covers(lv, day, LeaveStatus.pending) for lv in leaves):
        return DayStatus.pending_leave
    if day > today:
        return None
    if record is not None and record.check_in is not None:
        return DayStatus.present if record.check_out is not None else DayStatus.checked_in
    return DayStatus.absent


def _group_leaves(leaves: Iterable[_Leave]) -> dict[uuid.UUID, list[_Leave]]:
    grouped: dict[uuid.UUID, list[_Leave]] = defaultdict(list)
    for leave in leaves:
        if leave.status in (LeaveStatus.approved, LeaveStatus.pending):
            grouped[leave.profile_id].append(leave)
    return grouped


# ── Monthly aggregate ───────────────────────────────────────────────

def build_monthly_report(
    people: Iterable[_Person],
    records: Iterable[_Record],
    leaves: Iterable[_Leave],
    *,
    start: date,
    end: date,
    today: date,
    is_non_working: NonWorkingPredicate,
) -> list[MonthlyAttendanceRow]:
    """Per-employee day counts for ``[start, end]``.

    Employees enrolled after ``end`` are left out, and days before an
    employee's enrolment date are not counted.
    """
    by_key = {(r.profile_id, r.date): r for r in records}
    leaves_by_person = _group_leaves(leaves)
    rows: list[MonthlyAttendanceRow] = []

    for person in people:
        if person.enrolled_on > end:
            continue
        row = MonthlyAttendanceRow(
            profile_id=person.id,
            name=person.name,
            sick_leave_balance=person.sick_leave_balance,
            casual_leave_balance=person.casual_leave_balance,
        )
        own_leaves = leaves_by_person.get(person.id, [])

        for day in iter_days(max(start, person.enrolled_on), end):
            record = by_key.get((person.id, day))
            status = classify_day(
                day,
                today=today,
                is_non_working=is_non_working,
                leaves=own_leaves,
                record=record,
            )
            if status is None or status is DayStatus.non_working:
                continue
            if status is DayStatus.approved_leave:
                row.approved_leave_days += 1
            elif status is DayStatus.pending_leave:
                row.pending_leave_days += 1
            elif status is DayStatus.absent:
                row.absent_days += 1
            else:
                row.present_days += 1
                row.worked_minutes += worked_minutes(record.check_in, record.check_out) or 0

        rows.append(row)
    return rows


# ── Single-day view ─────────────────────────────────────────────────

def build_daily_report(
    people: Iterable[_Person],
    records: Iterable[_Record],
    leaves: Iterable[_Leave],
    *,
    day: date,
    today: date,
    is_non_working: NonWorkingPredicate,
) -> list[DailyAttendanceRow]:
    """Status of every employee enrolled on or before ``day``."""
    by_person = {r.profile_id: r for r in records if r.date == day}
    leaves_by_person = _group_leaves(leaves)
    rows: list[DailyAttendanceRow] = []

    for person in people:
        if person.enrolled_on > day:
            continue
        record = by_person.get(person.id)
        status = classify_day(
            day,
            today=today,
            is_non_working=is_non_working,
            leaves=leaves_by_person.get(person.id, []),
            record=record,
        )
        row = DailyAttendanceRow(profile_id=person.id, name=person.name, status=status)
        if record is not None and record.check_in is not None:
            row.check_in = clock.as_utc(record.check_in)
            row.check_out = clock.as_utc(record.check_out)
            row.location = record.location
        rows.append(row)
    return rows
