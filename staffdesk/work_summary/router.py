"""Work summary router — employee counters and the admin per-employee view."""


import uuid
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from staffdesk.auth.dependencies import require_admin, require_employee
from staffdesk.common.constants import MONTH_PATTERN
from staffdesk.database import get_db
from staffdesk.profiles.models import Profile
from staffdesk.work_summary.schemas import (
    HandledTasksUpdate,
    WorkSummaryEntryOut,
    WorkSummaryOut,
    WorkTypeCreate,
)
from staffdesk.work_summary.service import WorkSummaryService

router = APIRouter(prefix="", tags=["work-summary"])


@router.get("", response_model=WorkSummaryOut)
async def my_work_summary(
    employee: Profile = Depends(require_employee),
    db: AsyncSession = Depends(get_db),
):
    """Current month's work summary for the caller."""
    return await WorkSummaryService.get_current(db, employee.id)


@router.post("", response_model=WorkSummaryEntryOut, status_code=201)
async def add_work_type(
    body: WorkTypeCreate,
    employee: Profile = Depends(require_employee),
    db: AsyncSession = Depends(get_db),
):
    return await WorkSummaryService.add_work_type(db, employee.id, body.work)


@router.patch("/{entry_id}", response_model=WorkSummaryEntryOut)
async def set_handled_tasks(
    entry_id: uuid.UUID,
    body: HandledTasksUpdate,
    employee: Profile = Depends(require_employee),
    db: AsyncSession = Depends(get_db),
):
    return await WorkSummaryService.set_handled_tasks(
        db, entry_id, employee.id, body.handled_tasks,
    )


@router.delete("/{entry_id}")
async def delete_entry(
    entry_id: uuid.UUID,
    employee: Profile = Depends(require_employee),
    db: AsyncSession = Depends(get_db),
):
    await WorkSummaryService.delete_entry(db, entry_id, employee.id)
    return {"message": "Entry deleted."}


@router.get("/employees/{profile_id}", response_model=WorkSummaryOut)
async def employee_work_summary(
    profile_id: uuid.UUID,
    month: Optional[str] = Query(None, pattern=MONTH_PATTERN),
    admin: Profile = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    """An employee's entries for a month, with the total handled tasks."""
    return await WorkSummaryService.get_for_employee(db, profile_id, month)
