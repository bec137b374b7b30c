"""Work summary ORM model: monthly handled-task counters per work type."""

from __future__ import annotations

import uuid
from datetime import datetime

import sqlalchemy as sa
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column

from staffdesk.database import Base


class WorkSummaryEntry(Base):
    __tablename__ = "work_summary_entries"
    __table_args__ = (
        sa.CheckConstraint("handled_tasks >= 0", name="ck_work_summary_handled_tasks"),
        sa.Index("ix_work_summary_profile_month", "profile_id", "month"),
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
    month: Mapped[str] = mapped_column(sa.String(7), nullable=False)
    work: Mapped[str] = mapped_column(sa.String(255), nullable=False)
    handled_tasks: Mapped[int] = mapped_column(sa.Integer, nullable=False, default=0)
    created_at: Mapped[datetime] = mapped_column(
        sa.DateTime(timezone=True), server_default=sa.func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        sa.DateTime(timezone=True), server_default=sa.func.now()
    )
