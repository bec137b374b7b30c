"""Leave ORM model: LeaveRequest."""

from __future__ import annotations

import uuid
from datetime import date, datetime
from decimal import Decimal
from typing import Optional

import sqlalchemy as sa
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship

from staffdesk.common.constants import HalfDayPeriod, LeaveKind, LeaveStatus
from staffdesk.database import Base
from staffdesk.profiles.models import Profile


class LeaveRequest(Base):
    """A leave application; ``days`` is the amount reserved from the balance."""

    __tablename__ = "leave_requests"
    __table_args__ = (
        sa.CheckConstraint("to_date >= from_date", name="ck_leave_requests_range"),
        sa.Index("ix_leave_requests_profile_status", "profile_id", "status"),
        sa.Index("ix_leave_requests_dates", "from_date", "to_date"),
    )

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
    )
    profile_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        sa.ForeignKey("profiles.id", ondelete="CASCADE"),
        nullable=False,
    )
    from_date: Mapped[date] = mapped_column(sa.Date, nullable=False)
    to_date: Mapped[date] = mapped_column(sa.Date, nullable=False)
    reason: Mapped[str] = mapped_column(sa.Text, nullable=False)
    leave_type: Mapped[LeaveKind] = mapped_column(
        sa.Enum(LeaveKind, name="leave_kind"), nullable=False
    )
    is_half_day: Mapped[bool] = mapped_column(sa.Boolean, nullable=False, default=False)
    half_day_period: Mapped[Optional[HalfDayPeriod]] = mapped_column(
        sa.Enum(HalfDayPeriod, name="half_day_period")
    )
    days: Mapped[Decimal] = mapped_column(sa.Numeric(5, 1), nullable=False)
    status: Mapped[LeaveStatus] = mapped_column(
        sa.Enum(LeaveStatus, name="leave_status"),
        nullable=False,
        default=LeaveStatus.pending,
    )
    reviewed_by: Mapped[Optional[uuid.UUID]] = mapped_column(
        UUID(as_uuid=True), sa.ForeignKey("profiles.id")
    )
    reviewed_at: Mapped[Optional[datetime]] = mapped_column(sa.DateTime(timezone=True))
    reviewer_remarks: Mapped[Optional[str]] = mapped_column(sa.Text)
    cancelled_at: Mapped[Optional[datetime]] = mapped_column(sa.DateTime(timezone=True))
    created_at: Mapped[datetime] = mapped_column(
        sa.DateTime(timezone=True), server_default=sa.func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        sa.DateTime(timezone=True), server_default=sa.func.now()
    )

    # Relationships
    profile: Mapped[Profile] = relationship(foreign_keys=[profile_id])
    reviewer: Mapped[Optional[Profile]] = relationship(foreign_keys=[reviewed_by])

    def __repr__(self) -> str:
        return f"<LeaveRequest {self.profile_id} {self.from_date}..{self.to_date} {self.status.value}>"
