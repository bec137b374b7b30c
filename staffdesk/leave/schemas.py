"""Leave Pydantic v2 schemas — request / response validation.

Naming conventions:
  - *Create / *Request  → request bodies (write)
  - *Out                → response bodies (read)
"""

from __future__ import annotations

import uuid
from datetime import date, datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from staffdesk.common.constants import HalfDayPeriod, LeaveKind, LeaveStatus


# ═════════════════════════════════════════════════════════════════════
# Leave Request: Create
# ═════════════════════════════════════════════════════════════════════


class LeaveRequestCreate(BaseModel):
    """Payload for applying for leave."""

    from_date: date = Field(..., description="Leave start date (inclusive)")
    to_date: date = Field(..., description="Leave end date (inclusive)")
    reason: str = Field(..., max_length=1000)
    leave_type: LeaveKind
    is_half_day: bool = False
    half_day_period: Optional[HalfDayPeriod] = None

    @field_validator("reason")
    @classmethod
    def _reason_not_blank(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Please enter a reason.")
        return v

    @model_validator(mode="after")
    def validate_dates(self) -> "LeaveRequestCreate":
        if self.to_date < self.from_date:
            raise ValueError("To date cannot be before From date.")
        if self.is_half_day:
            if self.from_date != self.to_date:
                raise ValueError("A half-day leave must start and end on the same date.")
            if self.half_day_period is None:
                raise ValueError("half_day_period is required for a half-day leave.")
        elif self.half_day_period is not None:
            raise ValueError("half_day_period is only allowed for a half-day leave.")
        return self


class LeaveReviewRequest(BaseModel):
    remarks: Optional[str] = Field(None, max_length=1000)


# ═════════════════════════════════════════════════════════════════════
# Leave Request: Response
# ═════════════════════════════════════════════════════════════════════


class LeaveRequestOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    profile_id: uuid.UUID
    employee_name: Optional[str] = None
    from_date: date
    to_date: date
    reason: str
    leave_type: LeaveKind
    is_half_day: bool
    half_day_period: Optional[HalfDayPeriod] = None
    days: Decimal
    status: LeaveStatus
    reviewed_by: Optional[uuid.UUID] = None
    reviewed_at: Optional[datetime] = None
    reviewer_remarks: Optional[str] = None
    cancelled_at: Optional[datetime] = None
    created_at: Optional[datetime] = None

    # Balance left on the affected kind after this operation; set by service
    remaining_balance: Optional[Decimal] = None
