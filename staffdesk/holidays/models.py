"""Holiday ORM model."""

from __future__ import annotations

import uuid
from datetime import date, datetime
from typing import Optional

import sqlalchemy as sa
from sqlalchemy.dialects.postgresql import JSONB, UUID
from sqlalchemy.orm import Mapped, mapped_column

from staffdesk.database import Base


class Holiday(Base):
    """A calendar entry; ``end_date`` is exclusive, as in iCalendar exports."""

    __tablename__ = "holidays"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
    )
    uid: Mapped[str] = mapped_column(sa.String(255), unique=True, nullable=False)
    summary: Mapped[str] = mapped_column(sa.String(255), nullable=False)
    categories: Mapped[list] = mapped_column(JSONB, nullable=False, default=list)
    start_date: Mapped[date] = mapped_column(sa.Date, nullable=False, index=True)
    end_date: Mapped[Optional[date]] = mapped_column(sa.Date)
    created_at: Mapped[datetime] = mapped_column(
        sa.DateTime(timezone=True), server_default=sa.func.now()
    )

    def __repr__(self) -> str:
        return f"<Holiday {self.start_date} {self.summary}>"
