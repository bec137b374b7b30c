"""Holidays router — calendar listing for everyone, maintenance for admins."""


import uuid
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from staffdesk.auth.dependencies import get_current_user, require_admin
from staffdesk.database import get_db
from staffdesk.holidays.calendar import holiday_calendar
from staffdesk.holidays.schemas import CalendarReloadOut, HolidayCreate, HolidayOut
from staffdesk.holidays.service import HolidayService
from staffdesk.profiles.models import Profile

router = APIRouter(prefix="", tags=["holidays"])


@router.get("", response_model=list[HolidayOut])
async def list_holidays(
    year: Optional[int] = Query(None, ge=1970, le=2999),
    profile: Profile = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await HolidayService.list_holidays(db, year=year)


@router.post("", response_model=HolidayOut, status_code=201)
async def create_holiday(
    body: HolidayCreate,
    admin: Profile = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    return await HolidayService.create_holiday(db, body, actor_id=admin.id)


@router.delete("/{holiday_id}")
async def delete_holiday(
    holiday_id: uuid.UUID,
    admin: Profile = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    await HolidayService.delete_holiday(db, holiday_id, actor_id=admin.id)
    return {"message": "Holiday deleted."}


@router.post("/reload", response_model=CalendarReloadOut)
async def reload_calendar(
    admin: Profile = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    """Rebuild the non-working-day lookup from the database."""
    count = await HolidayService.reload_calendar(db)
    return CalendarReloadOut(category=holiday_calendar.category, dates=count)
