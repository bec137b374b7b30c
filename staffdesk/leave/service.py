"""Leave service layer — balance ledger and review workflow.

Business logic:
  - Submission reserves the requested amount from the matching balance
  - Rejection or cancellation returns exactly the reserved amount
  - Approval leaves balances untouched
  - Status and balance are written in the same transaction, with the
    request and profile rows locked for the duration
"""

from __future__ import annotations

import logging
import uuid
from datetime import date
from decimal import Decimal
from typing import Optional

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from staffdesk.common import clock
from staffdesk.common.audit import create_audit_entry
from staffdesk.common.constants import HALF_DAY_AMOUNT, LeaveKind, LeaveStatus
from staffdesk.common.exceptions import (
    ForbiddenException,
    InsufficientBalanceException,
    NotFoundException,
    ValidationException,
)
from staffdesk.common.pagination import PaginationMeta, PaginationParams
from staffdesk.leave.models import LeaveRequest
from staffdesk.leave.schemas import LeaveRequestCreate, LeaveRequestOut
from staffdesk.profiles.models import Profile

logger = logging.getLogger(__name__)


# ═════════════════════════════════════════════════════════════════════
# LeaveService
# ═════════════════════════════════════════════════════════════════════


class LeaveService:
    """Async leave operations: submit, cancel, approve, reject, list."""

    # ─────────────────────────────────────────────────────────────────
    # Helpers
    # ─────────────────────────────────────────────────────────────────

    @staticmethod
    def calculate_days(from_date: date, to_date: date, is_half_day: bool) -> Decimal:
        """Amount reserved by a request: 0.5 for a half day, else inclusive calendar days."""
        if is_half_day:
            return Decimal(HALF_DAY_AMOUNT)
        return Decimal((to_date - from_date).days + 1)

    @staticmethod
    async def _lock_profile(db: AsyncSession, profile_id: uuid.UUID) -> Profile:
        result = await db.execute(
            select(Profile)
            .where(Profile.id == profile_id)
            .with_for_update()
            .execution_options(populate_existing=True)
        )
        profile = result.scalars().first()
        if profile is None:
            raise NotFoundException("Profile", str(profile_id))
        return profile

    @staticmethod
    async def _lock_request(db: AsyncSession, request_id: uuid.UUID) -> LeaveRequest:
        result = await db.execute(
            select(LeaveRequest)
            .where(LeaveRequest.id == request_id)
            .options(selectinload(LeaveRequest.profile))
            .with_for_update()
            .execution_options(populate_existing=True)
        )
        leave_req = result.scalars().first()
        if leave_req is None:
            raise NotFoundException("LeaveRequest", str(request_id))
        return leave_req

    @staticmethod
    def _ensure_pending(leave_req: LeaveRequest, action: str) -> None:
        if leave_req.status != LeaveStatus.pending:
            raise ValidationException(
                {"status": [
                    f"Cannot {action} a leave request with status '{leave_req.status.value}'."
                ]}
            )

    @staticmethod
    async def _restore_balance(db: AsyncSession, leave_req: LeaveRequest) -> Decimal:
        """Give the reserved amount back to the balance it came from."""
        profile = await LeaveService._lock_profile(db, leave_req.profile_id)
        kind = LeaveKind(leave_req.leave_type)
        restored = profile.balance_of(kind) + Decimal(leave_req.days)
        profile.set_balance_of(kind, restored)
        profile.updated_at = clock.utc_now()
        return restored

    @staticmethod
    def _build_request_response(
        leave_req: LeaveRequest,
        *,
        employee_name: Optional[str] = None,
        remaining_balance: Optional[Decimal] = None,
    ) -> LeaveRequestOut:
        out = LeaveRequestOut.model_validate(leave_req)
        out.employee_name = employee_name
        out.remaining_balance = remaining_balance
        return out

    # ─────────────────────────────────────────────────────────────────
    # Submit
    # ─────────────────────────────────────────────────────────────────

    @staticmethod
    async def submit_leave(
        db: AsyncSession,
        profile_id: uuid.UUID,
        data: LeaveRequestCreate,
    ) -> LeaveRequestOut:
        """Reserve balance and store the request as pending.

        Nothing is written when the amount exceeds the current balance.
        """

        if data.from_date < clock.local_today():
            raise ValidationException({"from_date": ["Leave cannot start in the past."]})

        amount = LeaveService.calculate_days(data.from_date, data.to_date, data.is_half_day)
        profile = await LeaveService._lock_profile(db, profile_id)
        available = profile.balance_of(data.leave_type)
        if amount > available:
            raise InsufficientBalanceException(data.leave_type.value, available, amount)

        remaining = available - amount
        profile.set_balance_of(data.leave_type, remaining)
        profile.updated_at = clock.utc_now()

        leave_req = LeaveRequest(
            profile_id=profile_id,
            from_date=data.from_date,
            to_date=data.to_date,
            reason=data.reason,
            leave_type=data.leave_type,
            is_half_day=data.is_half_day,
            half_day_period=data.half_day_period,
            days=amount,
            status=LeaveStatus.pending,
        )
        db.add(leave_req)
        await db.flush()
        await db.refresh(leave_req)

        await create_audit_entry(
            db,
            action="submit",
            entity_type="leave_request",
            entity_id=leave_req.id,
            actor_id=profile_id,
            old_values={f"{data.leave_type.value}_leave_balance": str(available)},
            new_values={
                "status": LeaveStatus.pending.value,
                "days": str(amount),
                f"{data.leave_type.value}_leave_balance": str(remaining),
            },
        )
        logger.info(
            "Leave %s submitted by %s: %s %s day(s), %s -> %s",
            leave_req.id, profile_id, amount, data.leave_type.value, available, remaining,
        )
        return LeaveService._build_request_response(
            leave_req, employee_name=profile.name, remaining_balance=remaining,
        )

    # ─────────────────────────────────────────────────────────────────
    # Cancel
    # ─────────────────────────────────────────────────────────────────

    @staticmethod
    async def cancel_leave(
        db: AsyncSession,
        request_id: uuid.UUID,
        profile_id: uuid.UUID,
    ) -> LeaveRequestOut:
        """Withdraw an own pending request and return its reserved amount."""

        leave_req = await LeaveService._lock_request(db, request_id)
        if leave_req.profile_id != profile_id:
            raise ForbiddenException("You can only cancel your own leave requests.")
        LeaveService._ensure_pending(leave_req, "cancel")

        now = clock.utc_now()
        restored = await LeaveService._restore_balance(db, leave_req)
        leave_req.status = LeaveStatus.cancelled
        leave_req.cancelled_at = now
        leave_req.updated_at = now
        await db.flush()

        await create_audit_entry(
            db,
            action="cancel",
            entity_type="leave_request",
            entity_id=leave_req.id,
            actor_id=profile_id,
            old_values={"status": LeaveStatus.pending.value},
            new_values={"status": LeaveStatus.cancelled.value, "restored": str(leave_req.days)},
        )
        logger.info("Leave %s cancelled; %s day(s) restored", leave_req.id, leave_req.days)
        return LeaveService._build_request_response(
            leave_req, employee_name=leave_req.profile.name, remaining_balance=restored,
        )

    # ─────────────────────────────────────────────────────────────────
    # Approve
    # ─────────────────────────────────────────────────────────────────

    @staticmethod
    async def approve_leave(
        db: AsyncSession,
        request_id: uuid.UUID,
        reviewer_id: uuid.UUID,
        *,
        remarks: Optional[str] = None,
    ) -> LeaveRequestOut:
        """Approve a pending request. The balance was already reserved."""

        leave_req = await LeaveService._lock_request(db, request_id)
        LeaveService._ensure_pending(leave_req, "approve")

        now = clock.utc_now()
        leave_req.status = LeaveStatus.approved
        leave_req.reviewed_by = reviewer_id
        leave_req.reviewed_at = now
        leave_req.reviewer_remarks = remarks
        leave_req.updated_at = now
        await db.flush()

        await create_audit_entry(
            db,
            action="approve",
            entity_type="leave_request",
            entity_id=leave_req.id,
            actor_id=reviewer_id,
            old_values={"status": LeaveStatus.pending.value},
            new_values={"status": LeaveStatus.approved.value, "remarks": remarks},
        )
        logger.info("Leave %s approved by %s", leave_req.id, reviewer_id)
        return LeaveService._build_request_response(
            leave_req, employee_name=leave_req.profile.name,
        )

    # ─────────────────────────────────────────────────────────────────
    # Reject
    # ─────────────────────────────────────────────────────────────────

    @staticmethod
    async def reject_leave(
        db: AsyncSession,
        request_id: uuid.UUID,
        reviewer_id: uuid.UUID,
        *,
        remarks: Optional[str] = None,
    ) -> LeaveRequestOut:
        """Reject a pending request and return its reserved amount."""

        leave_req = await LeaveService._lock_request(db, request_id)
        LeaveService._ensure_pending(leave_req, "reject")

        now = clock.utc_now()
        restored = await LeaveService._restore_balance(db, leave_req)
        leave_req.status = LeaveStatus.rejected
        leave_req.reviewed_by = reviewer_id
        leave_req.reviewed_at = now
        leave_req.reviewer_remarks = remarks
        leave_req.updated_at = now
        await db.flush()

        await create_audit_entry(
            db,
            action="reject",
            entity_type="leave_request",
            entity_id=leave_req.id,
            actor_id=reviewer_id,
            old_values={"status": LeaveStatus.pending.value},
            new_values={
                "status": LeaveStatus.rejected.value,
                "remarks": remarks,
                "restored": str(leave_req.days),
            },
        )
        logger.info("Leave %s rejected by %s; %s day(s) restored", leave_req.id, reviewer_id, leave_req.days)
        return LeaveService._build_request_response(
            leave_req, employee_name=leave_req.profile.name, remaining_balance=restored,
        )

    # ─────────────────────────────────────────────────────────────────
    # List
    # ─────────────────────────────────────────────────────────────────

    @staticmethod
    async def list_mine(db: AsyncSession, profile_id: uuid.UUID) -> list[LeaveRequestOut]:
        result = await db.execute(
            select(LeaveRequest)
            .where(LeaveRequest.profile_id == profile_id)
            .order_by(LeaveRequest.created_at.desc(), LeaveRequest.from_date.desc())
        )
        return [LeaveService._build_request_response(r) for r in result.scalars().all()]

    @staticmethod
    async def list_all(
        db: AsyncSession,
        pagination: PaginationParams,
        *,
        status: Optional[LeaveStatus] = None,
    ) -> dict:
        """All requests, newest first, with employee names."""

        query = select(LeaveRequest)
        if status:
            query = query.where(LeaveRequest.status == status)

        count_q = select(func.count()).select_from(query.subquery())
        total = (await db.execute(count_q)).scalar_one()

        query = (
            query.options(selectinload(LeaveRequest.profile))
            .order_by(LeaveRequest.created_at.desc(), LeaveRequest.from_date.desc())
        )
        result = await db.execute(query.offset(pagination.offset).limit(pagination.page_size))
        requests = result.scalars().all()

        return {
            "data": [
                LeaveService._build_request_response(r, employee_name=r.profile.name)
                for r in requests
            ],
            "meta": PaginationMeta.build(pagination.page, pagination.page_size, total),
        }
