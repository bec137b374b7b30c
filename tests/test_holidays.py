"""Holiday calendar tests — date expansion, category filter, admin maintenance."""

from __future__ import annotations

from datetime import date
from types import SimpleNamespace

import pytest

from staffdesk.common.exceptions import ConflictError
from staffdesk.holidays.calendar import NonWorkingDayCalendar, holiday_calendar, holiday_dates
from staffdesk.holidays.models import Holiday
from staffdesk.holidays.schemas import HolidayCreate
from staffdesk.holidays.service import HolidayService


def _entry(start, end=None, categories=("Mercantile",)):
    return SimpleNamespace(start_date=start, end_date=end, categories=list(categories))


# ── Expansion ───────────────────────────────────────────────────────


def test_end_date_is_exclusive():
    assert holiday_dates(_entry(date(2026, 4, 13), date(2026, 4, 15))) == [
        date(2026, 4, 13),
        date(2026, 4, 14),
    ]


def test_missing_end_is_single_day():
    assert holiday_dates(_entry(date(2026, 5, 1))) == [date(2026, 5, 1)]


def test_non_increasing_end_is_single_day():
    assert holiday_dates(_entry(date(2026, 5, 1), date(2026, 5, 1))) == [date(2026, 5, 1)]
    assert holiday_dates(_entry(date(2026, 5, 1), date(2026, 4, 30))) == [date(2026, 5, 1)]


def test_only_configured_category_counts():
    cal = NonWorkingDayCalendar("Mercantile")
    cal.replace([
        _entry(date(2026, 1, 15), date(2026, 1, 16), ["Public", "Bank", "Mercantile"]),
        _entry(date(2026, 1, 20), date(2026, 1, 21), ["Bank"]),
        _entry(date(2026, 1, 22), None, []),
    ])
    assert cal.is_holiday(date(2026, 1, 15))
    assert not cal.is_holiday(date(2026, 1, 20))
    assert not cal.is_holiday(date(2026, 1, 22))
    assert cal.dates == frozenset({date(2026, 1, 15)})


def test_weekends_are_non_working():
    cal = NonWorkingDayCalendar("Mercantile")
    assert cal.is_weekend(date(2026, 1, 10))       # Saturday
    assert cal.is_weekend(date(2026, 1, 11))       # Sunday
    assert not cal.is_weekend(date(2026, 1, 12))   # Monday
    assert cal.is_non_working(date(2026, 1, 10))
    assert not cal.is_non_working(date(2026, 1, 12))


def test_replace_swaps_whole_set():
    cal = NonWorkingDayCalendar("Mercantile")
    cal.replace([_entry(date(2026, 2, 4))])
    first = cal.dates
    cal.replace([_entry(date(2026, 3, 3))])
    assert date(2026, 2, 4) in first
    assert not cal.is_holiday(date(2026, 2, 4))
    assert cal.is_holiday(date(2026, 3, 3))


async def test_load_from_database(db):
    db.add(Holiday(
        uid="2026-02-04-independence",
        summary="Independence Day",
        categories=["Public", "Bank", "Mercantile"],
        start_date=date(2026, 2, 4),
        end_date=date(2026, 2, 5),
    ))
    await db.flush()

    cal = NonWorkingDayCalendar("Mercantile")
    await cal.load(db)
    assert cal.is_non_working(date(2026, 2, 4))


# ── API ─────────────────────────────────────────────────────────────


async def test_admin_adds_holiday_and_calendar_refreshes(client, admin_headers):
    resp = await client.post(
        "/api/v1/holidays",
        json={
            "summary": "Sinhala and Tamil New Year",
            "categories": ["Public", "Mercantile"],
            "start_date": "2026-04-13",
            "end_date": "2026-04-15",
        },
        headers=admin_headers,
    )
    assert resp.status_code == 201
    assert resp.json()["uid"]
    assert holiday_calendar.is_holiday(date(2026, 4, 13))
    assert holiday_calendar.is_holiday(date(2026, 4, 14))
    assert not holiday_calendar.is_holiday(date(2026, 4, 15))


async def test_duplicate_uid_conflicts(client, admin_headers):
    body = {"summary": "May Day", "categories": ["Mercantile"], "start_date": "2026-05-01", "uid": "mayday-2026"}
    assert (await client.post("/api/v1/holidays", json=body, headers=admin_headers)).status_code == 201
    resp = await client.post("/api/v1/holidays", json=body, headers=admin_headers)
    assert resp.status_code == 409


async def test_delete_holiday_removes_date(client, admin_headers):
    resp = await client.post(
        "/api/v1/holidays",
        json={"summary": "May Day", "categories": ["Mercantile"], "start_date": "2026-05-01"},
        headers=admin_headers,
    )
    holiday_id = resp.json()["id"]
    assert holiday_calendar.is_holiday(date(2026, 5, 1))

    resp = await client.delete(f"/api/v1/holidays/{holiday_id}", headers=admin_headers)
    assert resp.status_code == 200
    assert not holiday_calendar.is_holiday(date(2026, 5, 1))


async def test_reload_picks_up_direct_inserts(client, db, admin_headers):
    db.add(Holiday(
        uid="vesak-2026",
        summary="Vesak Full Moon Poya Day",
        categories=["Public", "Bank", "Mercantile"],
        start_date=date(2026, 5, 1),
        end_date=date(2026, 5, 3),
    ))
    await db.commit()
    assert not holiday_calendar.is_holiday(date(2026, 5, 1))

    resp = await client.post("/api/v1/holidays/reload", headers=admin_headers)
    assert resp.status_code == 200
    assert resp.json() == {"category": "Mercantile", "dates": 2}
    assert holiday_calendar.is_holiday(date(2026, 5, 2))


async def test_list_holidays_by_year(client, db, employee_headers):
    db.add_all([
        Holiday(uid="a", summary="Duruthu Poya", categories=["Public"], start_date=date(2026, 1, 3)),
        Holiday(uid="b", summary="Christmas", categories=["Mercantile"], start_date=date(2025, 12, 25)),
    ])
    await db.commit()

    resp = await client.get("/api/v1/holidays?year=2026", headers=employee_headers)
    assert resp.status_code == 200
    assert [h["summary"] for h in resp.json()] == ["Duruthu Poya"]


async def test_employee_cannot_add_holiday(client, employee_headers):
    resp = await client.post(
        "/api/v1/holidays",
        json={"summary": "Made up", "categories": ["Mercantile"], "start_date": "2026-06-01"},
        headers=employee_headers,
    )
    assert resp.status_code == 403
    assert not holiday_calendar.is_holiday(date(2026, 6, 1))


async def test_end_before_start_rejected(client, admin_headers):
    resp = await client.post(
        "/api/v1/holidays",
        json={"summary": "Backwards", "categories": ["Mercantile"], "start_date": "2026-05-02", "end_date": "2026-05-01"},
        headers=admin_headers,
    )
    assert resp.status_code == 422
    assert not holiday_calendar.is_holiday(date(2026, 5, 2))


async def test_end_equal_to_start_is_single_day(client, admin_headers):
    resp = await client.post(
        "/api/v1/holidays",
        json={"summary": "May Day", "categories": ["Mercantile"], "start_date": "2026-05-01", "end_date": "2026-05-01"},
        headers=admin_headers,
    )
    assert resp.status_code == 201
    assert holiday_calendar.dates == frozenset({date(2026, 5, 1)})


async def test_concurrent_duplicate_uid_is_conflict(db):
    # A row with the same uid lands between the existence check and the insert
    with db.sync_session.no_autoflush:
        db.add(Holiday(uid="mayday-2026", summary="May Day", categories=["Mercantile"], start_date=date(2026, 5, 1)))
        with pytest.raises(ConflictError):
            await HolidayService.create_holiday(
                db,
                HolidayCreate(summary="May Day", categories=["Mercantile"], start_date=date(2026, 5, 1), uid="mayday-2026"),
            )
    await db.rollback()
