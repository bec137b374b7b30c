"""Holiday Pydantic v2 schemas."""

from __future__ import annotations

import uuid
from datetime import date
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


class HolidayCreate(BaseModel):
    summary: str = Field(..., min_length=1, max_length=255)
    categories: list[str] = Field(default_factory=list)
    start_date: date
    end_date: Optional[date] = Field(
        None, description="Exclusive end; omit for a single-day holiday"
    )
    uid: Optional[str] = Field(None, max_length=255)

    @field_validator("categories")
    @classmethod
    def _strip_categories(cls, v: list[str]) -> list[str]:
        return [c.strip() for c in v if c.strip()]

    @model_validator(mode="after")
    def _end_not_before_start(self) -> "HolidayCreate":
        if self.end_date is not None and self.end_date < self.start_date:
            raise ValueError("end_date cannot be before start_date.")
        return self


class HolidayOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    uid: str
    summary: str
    categories: list[str]
    start_date: date
    end_date: Optional[date] = None


class CalendarReloadOut(BaseModel):
    category: str
    dates: int
