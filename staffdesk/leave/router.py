"""Leave router — submit, cancel, review, listings.

Employees submit and cancel their own requests; admins approve or reject.
"""


import uuid
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from staffdesk.auth.dependencies import require_admin, require_employee
from staffdesk.common.constants import LeaveStatus
from staffdesk.common.pagination import PaginatedResponse, PaginationParams
from staffdesk.database import get_db
from staffdesk.leave.schemas import LeaveRequestCreate, LeaveRequestOut, LeaveReviewRequest
from staffdesk.leave.service import LeaveService
from staffdesk.profiles.models import Profile

router = APIRouter(prefix="", tags=["leave"])


# ── POST / ──────────────────────────────────────────────────────────

@router.post("", response_model=LeaveRequestOut, status_code=201)
async def submit_leave(
    body: LeaveRequestCreate,
    employee: Profile = Depends(require_employee),
    db: AsyncSession = Depends(get_db),
):
    """Apply for leave. The amount is reserved from the balance immediately."""
    return await LeaveService.submit_leave(db, employee.id, body)


# ── GET /mine ───────────────────────────────────────────────────────

@router.get("/mine", response_model=list[LeaveRequestOut])
async def my_leaves(
    employee: Profile = Depends(require_employee),
    db: AsyncSession = Depends(get_db),
):
    return await LeaveService.list_mine(db, employee.id)


# ── GET / ───────────────────────────────────────────────────────────

@router.get("", response_model=PaginatedResponse[LeaveRequestOut])
async def all_leaves(
    status: Optional[LeaveStatus] = Query(None),
    pagination: PaginationParams = Depends(),
    admin: Profile = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    """Every leave request, newest first."""
    return await LeaveService.list_all(db, pagination, status=status)


# ── POST /{id}/cancel ───────────────────────────────────────────────

@router.post("/{request_id}/cancel", response_model=LeaveRequestOut)
async def cancel_leave(
    request_id: uuid.UUID,
    employee: Profile = Depends(require_employee),
    db: AsyncSession = Depends(get_db),
):
    """Cancel an own pending request and restore its balance."""
    return await LeaveService.cancel_leave(db, request_id, employee.id)


# ── POST /{id}/approve ──────────────────────────────────────────────

@router.post("/{request_id}/approve", response_model=LeaveRequestOut)
async def approve_leave(
    request_id: uuid.UUID,
    body: Optional[LeaveReviewRequest] = None,
    admin: Profile = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    return await LeaveService.approve_leave(
        db, request_id, admin.id, remarks=body.remarks if body else None,
    )


# ── POST /{id}/reject ───────────────────────────────────────────────

@router.post("/{request_id}/reject", response_model=LeaveRequestOut)
async def reject_leave(
    request_id: uuid.UUID,
    body: Optional[LeaveReviewRequest] = None,
    admin: Profile = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    """Reject a pending request and restore its balance."""
    return await LeaveService.reject_leave(
        db, request_id, admin.id, remarks=body.remarks if body else None,
    )
