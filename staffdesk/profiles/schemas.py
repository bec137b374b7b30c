"""Profile Pydantic v2 schemas."""

from __future__ import annotations

import uuid
from datetime import date, datetime
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator

from staffdesk.common.constants import MAX_PASSWORD_BYTES, UserRole
from staffdesk.config import settings


class EmployeeCreate(BaseModel):
    """Payload for provisioning a new employee account."""

    name: str = Field(..., max_length=200)
    email: EmailStr
    temporary_password: str = Field(..., max_length=72)

    @field_validator("name")
    @classmethod
    def _name_not_blank(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Name is required.")
        return v

    @field_validator("email")
    @classmethod
    def _lower_email(cls, v: str) -> str:
        return v.strip().lower()

    @field_validator("temporary_password")
    @classmethod
    def _password_length(cls, v: str) -> str:
        if len(v) < settings.MIN_TEMP_PASSWORD_LENGTH:
            raise ValueError(
                f"Password must be at least {settings.MIN_TEMP_PASSWORD_LENGTH} characters."
            )
        if len(v.encode("utf-8")) > MAX_PASSWORD_BYTES:
            raise ValueError(f"Password must be at most {MAX_PASSWORD_BYTES} bytes when UTF-8 encoded.")
        return v


class ProfileOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    name: str
    email: str
    role: UserRole
    enrolled_on: date
    sick_leave_balance: Decimal
    casual_leave_balance: Decimal
    is_active: bool
    created_at: datetime
