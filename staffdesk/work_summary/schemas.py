"""Work summary Pydantic v2 schemas."""

from __future__ import annotations

import uuid
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class WorkTypeCreate(BaseModel):
    work: str = Field(..., max_length=255)

    @field_validator("work")
    @classmethod
    def _work_not_blank(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Work type is required.")
        return v


class HandledTasksUpdate(BaseModel):
    handled_tasks: int = Field(..., ge=0)


class WorkSummaryEntryOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    month: str
    work: str
    handled_tasks: int


class WorkSummaryOut(BaseModel):
    profile_id: uuid.UUID
    employee_name: Optional[str] = None
    month: str
    entries: list[WorkSummaryEntryOut]
    total_handled_tasks: int
