"""Work summary service — per-month task counters, seeded with default work types."""

from __future__ import annotations

import logging
import uuid
from typing import Optional, Sequence

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from staffdesk.common import clock
from staffdesk.common.constants import DEFAULT_WORK_TYPES
from staffdesk.common.exceptions import ForbiddenException, NotFoundException
from staffdesk.profiles.service import ProfileService
from staffdesk.work_summary.models import WorkSummaryEntry
from staffdesk.work_summary.schemas import WorkSummaryEntryOut, WorkSummaryOut

logger = logging.getLogger(__name__)


def current_month() -> str:
    return clock.local_today().strftime("%Y-%m")


class WorkSummaryService:
    """Async operations on work summary entries."""

    # ── Helpers ─────────────────────────────────────────────────────

    @staticmethod
    async def _entries(
        db: AsyncSession,
        profile_id: uuid.UUID,
        month: str,
    ) -> Sequence[WorkSummaryEntry]:
        result = await db.execute(
            select(WorkSummaryEntry)
            .where(
                WorkSummaryEntry.profile_id == profile_id,
                WorkSummaryEntry.month == month,
            )
            .order_by(WorkSummaryEntry.created_at, WorkSummaryEntry.work)
        )
        return result.scalars().all()

    @staticmethod
    async def _get_owned(
        db: AsyncSession,
        entry_id: uuid.UUID,
        profile_id: uuid.UUID,
    ) -> WorkSummaryEntry:
        result = await db.execute(select(WorkSummaryEntry).where(WorkSummaryEntry.id == entry_id))
        entry = result.scalars().first()
        if entry is None:
            raise NotFoundException("WorkSummaryEntry", str(entry_id))
        if entry.profile_id != profile_id:
            raise ForbiddenException("You can only change your own work summary.")
        return entry

    @staticmethod
    def _build_summary(
        profile_id: uuid.UUID,
        month: str,
        entries: Sequence[WorkSummaryEntry],
        *,
        employee_name: Optional[str] = None,
    ) -> WorkSummaryOut:
        items = [WorkSummaryEntryOut.model_validate(e) for e in entries]
        return WorkSummaryOut(
            profile_id=profile_id,
            employee_name=employee_name,
            month=month,
            entries=items,
            total_handled_tasks=sum(i.handled_tasks for i in items),
        )

    # ── Self-service ────────────────────────────────────────────────

    @staticmethod
    async def get_current(db: AsyncSession, profile_id: uuid.UUID) -> WorkSummaryOut:
        """This month's entries; seeds the default work types on first access."""

        month = current_month()
        entries = await WorkSummaryService._entries(db, profile_id, month)
        if not entries:
            db.add_all(
                WorkSummaryEntry(profile_id=profile_id, month=month, work=work, handled_tasks=0)
                for work in DEFAULT_WORK_TYPES
            )
            await db.flush()
            entries = await WorkSummaryService._entries(db, profile_id, month)
            logger.info("Seeded %d work types for %s in %s", len(entries), profile_id, month)
        return WorkSummaryService._build_summary(profile_id, month, entries)

    @staticmethod
    async def add_work_type(
        db: AsyncSession,
        profile_id: uuid.UUID,
        work: str,
    ) -> WorkSummaryEntryOut:
        entry = WorkSummaryEntry(
            profile_id=profile_id,
            month=current_month(),
            work=work,
            handled_tasks=0,
        )
        db.add(entry)
        await db.flush()
        return WorkSummaryEntryOut.model_validate(entry)

    @staticmethod
    async def set_handled_tasks(
        db: AsyncSession,
        entry_id: uuid.UUID,
        profile_id: uuid.UUID,
        handled_tasks: int,
    ) -> WorkSummaryEntryOut:
        entry = await WorkSummaryService._get_owned(db, entry_id, profile_id)
        entry.handled_tasks = handled_tasks
        entry.updated_at = clock.utc_now()
        await db.flush()
        return WorkSummaryEntryOut.model_validate(entry)

    @staticmethod
    async def delete_entry(
        db: AsyncSession,
        entry_id: uuid.UUID,
        profile_id: uuid.UUID,
    ) -> None:
        entry = await WorkSummaryService._get_owned(db, entry_id, profile_id)
        await db.delete(entry)
        await db.flush()

    # ── Admin ───────────────────────────────────────────────────────

    @staticmethod
    async def get_for_employee(
        db: AsyncSession,
        profile_id: uuid.UUID,
        month: Optional[str] = None,
    ) -> WorkSummaryOut:
        employee = await ProfileService.get_employee(db, profile_id)
        month = month or current_month()
        entries = await WorkSummaryService._entries(db, profile_id, month)
        return WorkSummaryService._build_summary(
            profile_id, month, entries, employee_name=employee.name,
        )
