"""Profile ORM model: one row per login identity, employee or admin.

The two leave balances live directly on the profile. They are read and
written only through ``balance_of`` / ``set_balance_of`` so that the
leave kind → column mapping stays in one place.
"""

from __future__ import annotations

import uuid
from datetime import date, datetime
from decimal import Decimal

import sqlalchemy as sa
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column

from staffdesk.common.constants import LeaveKind, UserRole
from staffdesk.database import Base


class Profile(Base):
    __tablename__ = "profiles"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
    )
    email: Mapped[str] = mapped_column(sa.String(255), unique=True, nullable=False)
    name: Mapped[str] = mapped_column(sa.String(200), nullable=False)
    password_hash: Mapped[str] = mapped_column(sa.String(255), nullable=False)
    role: Mapped[UserRole] = mapped_column(
        sa.Enum(UserRole, name="user_role"),
        nullable=False,
        default=UserRole.employee,
    )
    enrolled_on: Mapped[date] = mapped_column(sa.Date, nullable=False)
    sick_leave_balance: Mapped[Decimal] = mapped_column(
        sa.Numeric(5, 1), nullable=False, default=Decimal("0")
    )
    casual_leave_balance: Mapped[Decimal] = mapped_column(
        sa.Numeric(5, 1), nullable=False, default=Decimal("0")
    )
    is_active: Mapped[bool] = mapped_column(sa.Boolean, nullable=False, default=True)
    created_at: Mapped[datetime] = mapped_column(
        sa.DateTime(timezone=True), server_default=sa.func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        sa.DateTime(timezone=True), server_default=sa.func.now()
    )

    __table_args__ = (
        sa.Index("ix_profiles_role_name", "role", "name"),
    )

    def balance_of(self, kind: LeaveKind) -> Decimal:
        kind = LeaveKind(kind)
        if kind is LeaveKind.sick:
            return Decimal(self.sick_leave_balance or 0)
        if kind is LeaveKind.casual:
            return Decimal(self.casual_leave_balance or 0)
        raise ValueError(f"Unknown leave kind: {kind!r}")

    def set_balance_of(self, kind: LeaveKind, value: Decimal) -> None:
        kind = LeaveKind(kind)
        if kind is LeaveKind.sick:
            self.sick_leave_balance = value
        elif kind is LeaveKind.casual:
            self.casual_leave_balance = value
        else:
            raise ValueError(f"Unknown leave kind: {kind!r}")

    def __repr__(self) -> str:
        return f"<Profile {self.email} ({self.role.value if self.role else '?'})>"
