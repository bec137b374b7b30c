"""Attendance module tests — check-in/out, today view, auto-checkout sweep.

Tests exercise both the service layer (direct DB) and the HTTP API (via router).
"""

from __future__ import annotations

from datetime import date, datetime, time, timezone
from unittest.mock import patch

import pytest
from sqlalchemy import select

from staffdesk.attendance.models import AttendanceRecord
from staffdesk.attendance.service import AttendanceService
from staffdesk.common import clock
from staffdesk.common.audit import AuditTrail
from staffdesk.config import settings
from tests.conftest import TestSessionFactory, headers_for, make_profile

TODAY = date(2026, 3, 2)


@pytest.fixture(autouse=True)
def _fixed_today():
    with patch("staffdesk.common.clock.local_today", return_value=TODAY):
        yield


async def _record_for(profile_id) -> AttendanceRecord | None:
    async with TestSessionFactory() as session:
        result = await session.execute(
            select(AttendanceRecord).where(
                AttendanceRecord.profile_id == profile_id,
                AttendanceRecord.date == TODAY,
            )
        )
        return result.scalars().first()


async def _open_record(db, profile, day=TODAY) -> AttendanceRecord:
    record = AttendanceRecord(
        profile_id=profile.id,
        date=day,
        check_in=datetime(day.year, day.month, day.day, 3, 15, tzinfo=timezone.utc),
        location="Head office",
    )
    db.add(record)
    await db.flush()
    return record


# ── Check in ────────────────────────────────────────────────────────


async def test_check_in(client, employee, employee_headers):
    resp = await client.post(
        "/api/v1/attendance/check-in",
        json={"location": "  Kandy branch "},
        headers=employee_headers,
    )
    assert resp.status_code == 201
    data = resp.json()
    assert data["date"] == TODAY.isoformat()
    assert data["location"] == "Kandy branch"
    assert data["check_out"] is None
    assert data["worked_minutes"] is None

    record = await _record_for(employee.id)
    assert record is not None
    assert record.auto_checked_out is False


async def test_second_check_in_conflicts(client, employee, employee_headers):
    await client.post("/api/v1/attendance/check-in", json={"location": "Head office"}, headers=employee_headers)
    resp = await client.post("/api/v1/attendance/check-in", json={"location": "Elsewhere"}, headers=employee_headers)
    assert resp.status_code == 409
    assert "check_in" in resp.json()["errors"]

    record = await _record_for(employee.id)
    assert record.location == "Head office"


async def test_check_in_requires_location(client, employee_headers):
    resp = await client.post("/api/v1/attendance/check-in", json={"location": "   "}, headers=employee_headers)
    assert resp.status_code == 422
    resp = await client.post("/api/v1/attendance/check-in", json={}, headers=employee_headers)
    assert resp.status_code == 422


async def test_check_in_writes_audit_entry(db, employee):
    out = await AttendanceService.check_in(db, employee.id, location="Head office")
    result = await db.execute(
        select(AuditTrail).where(AuditTrail.entity_id == out.id, AuditTrail.action == "check_in")
    )
    assert result.scalars().first() is not None


# ── Check out ───────────────────────────────────────────────────────


async def test_check_out(client, employee, employee_headers):
    await client.post("/api/v1/attendance/check-in", json={"location": "Head office"}, headers=employee_headers)
    resp = await client.post("/api/v1/attendance/check-out", headers=employee_headers)
    assert resp.status_code == 200
    data = resp.json()
    assert data["check_out"] is not None
    assert data["worked_minutes"] == 0
    assert data["auto_checked_out"] is False


async def test_check_out_without_check_in(client, employee_headers):
    resp = await client.post("/api/v1/attendance/check-out", headers=employee_headers)
    assert resp.status_code == 422
    assert "check_out" in resp.json()["errors"]


async def test_check_out_twice_conflicts(client, employee, employee_headers):
    await client.post("/api/v1/attendance/check-in", json={"location": "Head office"}, headers=employee_headers)
    first = await client.post("/api/v1/attendance/check-out", headers=employee_headers)
    resp = await client.post("/api/v1/attendance/check-out", headers=employee_headers)
    assert resp.status_code == 409

    record = await _record_for(employee.id)
    assert clock.as_utc(record.check_out).isoformat().startswith(first.json()["check_out"][:19])


# ── Today ───────────────────────────────────────────────────────────


async def test_today_progression(client, employee_headers):
    resp = await client.get("/api/v1/attendance/today", headers=employee_headers)
    assert resp.json()["status"] == "not_checked_in"
    assert resp.json()["record"] is None

    await client.post("/api/v1/attendance/check-in", json={"location": "Head office"}, headers=employee_headers)
    resp = await client.get("/api/v1/attendance/today", headers=employee_headers)
    assert resp.json()["status"] == "checked_in"

    await client.post("/api/v1/attendance/check-out", headers=employee_headers)
    resp = await client.get("/api/v1/attendance/today", headers=employee_headers)
    data = resp.json()
    assert data["status"] == "checked_out"
    assert data["worked_minutes"] is not None


async def test_yesterdays_record_is_not_today(client, db, employee, employee_headers):
    await _open_record(db, employee, day=date(2026, 2, 27))
    await db.commit()
    resp = await client.get("/api/v1/attendance/today", headers=employee_headers)
    assert resp.json()["status"] == "not_checked_in"


# ── Auto-checkout ───────────────────────────────────────────────────


async def test_auto_checkout_closes_open_records_once(client, db, admin_headers):
    first = await make_profile(db, name="Amal", email="amal@staffdesk.com")
    second = await make_profile(db, name="Bimal", email="bimal@staffdesk.com")
    done = await make_profile(db, name="Chamal", email="chamal@staffdesk.com")
    await _open_record(db, first)
    await _open_record(db, second)
    closed = await _open_record(db, done)
    closed.check_out = datetime(2026, 3, 2, 11, 0, tzinfo=timezone.utc)
    # An open record from an earlier day is left alone
    await _open_record(db, first, day=date(2026, 2, 27))
    await db.commit()

    resp = await client.post("/api/v1/attendance/auto-checkout", headers=admin_headers)
    assert resp.status_code == 200
    data = resp.json()
    assert data["count"] == 2
    assert data["date"] == TODAY.isoformat()

    resp = await client.post("/api/v1/attendance/auto-checkout", headers=admin_headers)
    assert resp.json()["count"] == 0

    expected = clock.local_at(TODAY, settings.auto_checkout_time)
    for person in (first, second):
        record = await _record_for(person.id)
        assert record.auto_checked_out is True
        assert clock.as_utc(record.check_out) == expected

    record = await _record_for(done.id)
    assert record.auto_checked_out is False
    assert clock.as_utc(record.check_out) == datetime(2026, 3, 2, 11, 0, tzinfo=timezone.utc)


def test_auto_checkout_time_is_local_wall_clock():
    # Asia/Colombo is UTC+05:30
    assert clock.local_at(TODAY, time(18, 0)) == datetime(2026, 3, 2, 12, 30, tzinfo=timezone.utc)


async def test_auto_checkout_preview(client, db, admin_headers):
    person = await make_profile(db, name="Amal", email="amal@staffdesk.com")
    await _open_record(db, person)
    await db.commit()

    resp = await client.get("/api/v1/attendance/auto-checkout", headers=admin_headers)
    assert resp.status_code == 200
    data = resp.json()
    assert data["count"] == 1
    assert data["employees"][0]["name"] == "Amal"

    # Preview changes nothing
    record = await _record_for(person.id)
    assert record.check_out is None


async def test_auto_checkout_with_scheduler_secret(client, db, monkeypatch):
    monkeypatch.setattr(settings, "CRON_SECRET", "scheduler-secret")
    person = await make_profile(db, email="amal@staffdesk.com")
    await _open_record(db, person)
    await db.commit()

    resp = await client.post(
        "/api/v1/attendance/auto-checkout",
        headers={"Authorization": "Bearer scheduler-secret"},
    )
    assert resp.status_code == 200
    assert resp.json()["count"] == 1


async def test_auto_checkout_wrong_secret(client, monkeypatch):
    monkeypatch.setattr(settings, "CRON_SECRET", "scheduler-secret")
    resp = await client.post(
        "/api/v1/attendance/auto-checkout",
        headers={"Authorization": "Bearer not-the-secret"},
    )
    assert resp.status_code == 401


async def test_auto_checkout_secret_disabled_when_unset(client, monkeypatch):
    monkeypatch.setattr(settings, "CRON_SECRET", "")
    resp = await client.post("/api/v1/attendance/auto-checkout", headers={"Authorization": "Bearer "})
    assert resp.status_code == 401


async def test_employee_cannot_run_auto_checkout(client, db, employee_headers):
    resp = await client.post("/api/v1/attendance/auto-checkout", headers=employee_headers)
    assert resp.status_code == 403


async def test_auto_checkout_audit_names_admin(db, admin):
    await AttendanceService.run_auto_checkout(db, actor_id=admin.id)
    result = await db.execute(select(AuditTrail).where(AuditTrail.action == "auto_checkout"))
    entry = result.scalars().first()
    assert entry.actor_id == admin.id
    assert entry.new_values["count"] == 0


async def test_other_employee_records_are_separate(client, db, employee, employee_headers):
    other = await make_profile(db, email="other@staffdesk.com")
    other_headers = await headers_for(db, other)

    await client.post("/api/v1/attendance/check-in", json={"location": "Head office"}, headers=employee_headers)
    resp = await client.post("/api/v1/attendance/check-in", json={"location": "Galle"}, headers=other_headers)
    assert resp.status_code == 201
