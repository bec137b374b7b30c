"""Process-wide non-working-day lookup.

Holiday rows are expanded once into a frozen set of dates; lookups after
that are pure in-memory membership tests. ``replace`` swaps the whole set
in a single assignment, so readers never observe a half-built calendar.
"""

from __future__ import annotations

import logging
from datetime import date, timedelta
from typing import Iterable, Optional, Protocol

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from staffdesk.config import settings
from staffdesk.holidays.models import Holiday

logger = logging.getLogger(__name__)


class HolidayLike(Protocol):
    categories: list
    start_date: date
    end_date: Optional[date]


def holiday_dates(entry: HolidayLike) -> list[date]:
    """Dates covered by one entry over ``[start, end)``.

    A missing or non-increasing end date means the single start day.
    """
    start, end = entry.start_date, entry.end_date
    if end is None or end <= start:
        return [start]
    return [start + timedelta(days=i) for i in range((end - start).days)]


class NonWorkingDayCalendar:
    def __init__(self, category: str) -> None:
        self.category = category
        self._dates: frozenset[date] = frozenset()

    def replace(self, holidays: Iterable[HolidayLike]) -> None:
        dates: set[date] = set()
        for entry in holidays:
            if self.category not in (entry.categories or []):
                continue
            dates.update(holiday_dates(entry))
        self._dates = frozenset(dates)
        logger.info("Holiday calendar loaded: %d %s dates", len(self._dates), self.category)

    async def load(self, db: AsyncSession) -> None:
        result = await db.execute(select(Holiday))
        self.replace(result.scalars().all())

    @property
    def dates(self) -> frozenset[date]:
        return self._dates

    @staticmethod
    def is_weekend(day: date) -> bool:
        return day.weekday() >= 5

    def is_holiday(self, day: date) -> bool:
        return day in self._dates

    def is_non_working(self, day: date) -> bool:
        return self.is_weekend(day) or self.is_holiday(day)


holiday_calendar = NonWorkingDayCalendar(settings.HOLIDAY_CATEGORY)
