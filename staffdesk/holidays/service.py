"""Holiday service — admin calendar maintenance.

Every change rebuilds the in-memory calendar from the session, which
already sees the flushed change.
"""

from __future__ import annotations

import logging
import uuid
from datetime import date
from typing import Optional, Sequence

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from staffdesk.common.audit import create_audit_entry
from staffdesk.common.exceptions import ConflictError, NotFoundException
from staffdesk.holidays.calendar import holiday_calendar
from staffdesk.holidays.models import Holiday
from staffdesk.holidays.schemas import HolidayCreate

logger = logging.getLogger(__name__)


class HolidayService:
    """Async CRUD for holidays plus calendar refresh."""

    @staticmethod
    async def list_holidays(
        db: AsyncSession,
        *,
        year: Optional[int] = None,
    ) -> Sequence[Holiday]:
        query = select(Holiday).order_by(Holiday.start_date)
        if year is not None:
            query = query.where(
                Holiday.start_date >= date(year, 1, 1),
                Holiday.start_date < date(year + 1, 1, 1),
            )
        result = await db.execute(query)
        return result.scalars().all()

    @staticmethod
    async def create_holiday(
        db: AsyncSession,
        data: HolidayCreate,
        *,
        actor_id: Optional[uuid.UUID] = None,
    ) -> Holiday:
        uid = data.uid or f"{data.start_date.isoformat()}-{uuid.uuid4().hex[:12]}"
        existing = await db.execute(select(Holiday.id).where(Holiday.uid == uid))
        if existing.first() is not None:
            raise ConflictError("uid", uid)

        holiday = Holiday(
            uid=uid,
            summary=data.summary,
            categories=data.categories,
            start_date=data.start_date,
            end_date=data.end_date,
        )
        db.add(holiday)
        try:
            await db.flush()
        except IntegrityError:
            # Lost a race with a concurrent insert of the same uid
            raise ConflictError("uid", uid)

        await create_audit_entry(
            db,
            action="create",
            entity_type="holiday",
            entity_id=holiday.id,
            actor_id=actor_id,
            new_values=data.model_dump(mode="json"),
        )
        await holiday_calendar.load(db)
        logger.info("Holiday %s added for %s", data.summary, data.start_date)
        return holiday

    @staticmethod
    async def delete_holiday(
        db: AsyncSession,
        holiday_id: uuid.UUID,
        *,
        actor_id: Optional[uuid.UUID] = None,
    ) -> None:
        result = await db.execute(select(Holiday).where(Holiday.id == holiday_id))
        holiday = result.scalars().first()
        if holiday is None:
            raise NotFoundException("Holiday", str(holiday_id))

        old_values = {
            "uid": holiday.uid,
            "summary": holiday.summary,
            "start_date": holiday.start_date.isoformat(),
        }
        await db.delete(holiday)
        await db.flush()

        await create_audit_entry(
            db,
            action="delete",
            entity_type="holiday",
            entity_id=holiday_id,
            actor_id=actor_id,
            old_values=old_values,
        )
        await holiday_calendar.load(db)
        logger.info("Holiday %s removed", old_values["summary"])

    @staticmethod
    async def reload_calendar(db: AsyncSession) -> int:
        """Rebuild the in-memory calendar; returns the number of dates."""
        await holiday_calendar.load(db)
        return len(holiday_calendar.dates)
