"""Profile service — account provisioning and admin listings."""

from __future__ import annotations

import logging
import uuid
from decimal import Decimal
from typing import Optional, Sequence

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from staffdesk.auth.service import hash_password
from staffdesk.common import clock
from staffdesk.common.audit import create_audit_entry
from staffdesk.common.constants import UserRole
from staffdesk.common.exceptions import ConflictError, NotFoundException
from staffdesk.config import settings
from staffdesk.profiles.models import Profile
from staffdesk.profiles.schemas import EmployeeCreate

logger = logging.getLogger(__name__)


class ProfileService:
    """Async operations on profiles."""

    @staticmethod
    async def create_profile(
        db: AsyncSession,
        *,
        name: str,
        email: str,
        password: str,
        role: UserRole = UserRole.employee,
        actor_id: Optional[uuid.UUID] = None,
    ) -> Profile:
        """Create a login identity with opening leave balances."""

        email = email.strip().lower()
        existing = await db.execute(select(Profile.id).where(Profile.email == email))
        if existing.first() is not None:
            raise ConflictError("email", email)

        profile = Profile(
            name=name,
            email=email,
            password_hash=hash_password(password),
            role=role,
            enrolled_on=clock.local_today(),
            sick_leave_balance=Decimal(str(settings.DEFAULT_SICK_LEAVE_BALANCE)),
            casual_leave_balance=Decimal(str(settings.DEFAULT_CASUAL_LEAVE_BALANCE)),
            is_active=True,
        )
        db.add(profile)
        try:
            await db.flush()
        except IntegrityError as exc:
            if "email" in str(exc.orig):
                raise ConflictError("email", email)
            raise
        await db.refresh(profile)

        await create_audit_entry(
            db,
            action="create",
            entity_type="profile",
            entity_id=profile.id,
            actor_id=actor_id,
            new_values={"name": name, "email": email, "role": role.value},
        )
        logger.info("Provisioned %s account %s", role.value, email)
        return profile

    @staticmethod
    async def create_employee(
        db: AsyncSession,
        data: EmployeeCreate,
        *,
        actor_id: Optional[uuid.UUID] = None,
    ) -> Profile:
        return await ProfileService.create_profile(
            db,
            name=data.name,
            email=data.email,
            password=data.temporary_password,
            role=UserRole.employee,
            actor_id=actor_id,
        )

    @staticmethod
    async def list_employees(db: AsyncSession) -> Sequence[Profile]:
        """Active employees ordered by name."""
        result = await db.execute(
            select(Profile)
            .where(Profile.role == UserRole.employee, Profile.is_active.is_(True))
            .order_by(Profile.name)
        )
        return result.scalars().all()

    @staticmethod
    async def get_employee(db: AsyncSession, profile_id: uuid.UUID) -> Profile:
        result = await db.execute(
            select(Profile).where(
                Profile.id == profile_id, Profile.role == UserRole.employee,
            )
        )
        profile = result.scalars().first()
        if profile is None:
            raise NotFoundException("Employee", str(profile_id))
        return profile
