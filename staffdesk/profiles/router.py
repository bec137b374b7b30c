"""Employees router — admin account provisioning and lookup."""


import uuid

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from staffdesk.auth.dependencies import require_admin
from staffdesk.database import get_db
from staffdesk.profiles.models import Profile
from staffdesk.profiles.schemas import EmployeeCreate, ProfileOut
from staffdesk.profiles.service import ProfileService

router = APIRouter(prefix="", tags=["employees"])


@router.post("", response_model=ProfileOut, status_code=201)
async def create_employee(
    body: EmployeeCreate,
    admin: Profile = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    """Provision an employee account with a temporary password."""
    return await ProfileService.create_employee(db, body, actor_id=admin.id)


@router.get("", response_model=list[ProfileOut])
async def list_employees(
    admin: Profile = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    return await ProfileService.list_employees(db)


@router.get("/{profile_id}", response_model=ProfileOut)
async def get_employee(
    profile_id: uuid.UUID,
    admin: Profile = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    return await ProfileService.get_employee(db, profile_id)
