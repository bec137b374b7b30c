"""Auth dependencies — JWT validation, role enforcement, scheduler secret."""

from __future__ import annotations

import hmac
import logging
import uuid
from typing import Callable, Optional

from fastapi import Depends, Request
from fastapi.exceptions import HTTPException
from jose import ExpiredSignatureError, JWTError, jwt
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from staffdesk.auth.service import get_session_for_token
from staffdesk.common.constants import UserRole
from staffdesk.common.exceptions import ForbiddenException
from staffdesk.config import settings
from staffdesk.database import get_db
from staffdesk.profiles.models import Profile

logger = logging.getLogger(__name__)


def _extract_bearer(request: Request) -> str:
    """Extract Bearer token from Authorization header."""
    auth_header = request.headers.get("Authorization")
    if not auth_header or not auth_header.startswith("Bearer "):
        raise HTTPException(status_code=401, detail="Missing or invalid Authorization header.")
    return auth_header[7:]


async def _resolve_profile(request: Request, db: AsyncSession, token: str) -> Profile:
    """Decode the JWT, verify its session, and load the active profile."""
    try:
        payload = jwt.decode(
            token,
            settings.JWT_SECRET,
            algorithms=[settings.JWT_ALGORITHM],
        )
    except ExpiredSignatureError:
        raise HTTPException(status_code=401, detail="Token has expired.")
    except JWTError:
        raise HTTPException(status_code=401, detail="Invalid token.")

    if payload.get("type") != "access":
        raise HTTPException(status_code=401, detail="Invalid token type.")

    if await get_session_for_token(db, token) is None:
        raise HTTPException(status_code=401, detail="Session invalid or expired.")

    try:
        profile_id = uuid.UUID(payload["sub"])
    except (KeyError, ValueError):
        raise HTTPException(status_code=401, detail="Invalid token subject.")

    result = await db.execute(
        select(Profile).where(Profile.id == profile_id, Profile.is_active.is_(True))
    )
    profile = result.scalars().first()
    if profile is None:
        raise HTTPException(status_code=401, detail="User account is inactive or not found.")

    # The stored role wins over the token claim (it may have changed since login)
    request.state.user_role = profile.role
    request.state.access_token = token
    return profile


# ── Core dependency ─────────────────────────────────────────────────

async def get_current_user(
    request: Request,
    db: AsyncSession = Depends(get_db),
) -> Profile:
    """Validate JWT, verify session, return the authenticated Profile."""
    return await _resolve_profile(request, db, _extract_bearer(request))


# ── Role-based dependency ───────────────────────────────────────────

def require_role(*allowed_roles: UserRole) -> Callable:
    """Return a FastAPI dependency that enforces role membership.

    Roles are not hierarchical: admin accounts do not use employee
    self-service endpoints and employees never reach admin ones.
    """

    async def _check(profile: Profile = Depends(get_current_user)) -> Profile:
        if profile.role not in allowed_roles:
            logger.warning(
                "Profile %s with role %s denied; required %s",
                profile.id, profile.role.value, [r.value for r in allowed_roles],
            )
            raise ForbiddenException(
                detail=f"Role '{profile.role.value}' is not permitted. "
                       f"Required: {[r.value for r in allowed_roles]}.",
            )
        return profile

    return _check


require_employee = require_role(UserRole.employee)
require_admin = require_role(UserRole.admin)


# ── Scheduler-or-admin dependency ───────────────────────────────────

async def require_scheduler_or_admin(
    request: Request,
    db: AsyncSession = Depends(get_db),
) -> Optional[Profile]:
    """Accept the configured CRON_SECRET bearer, or an admin access token.

    Returns None when the caller is the scheduler, else the admin profile.
    """
    token = _extract_bearer(request)
    if settings.CRON_SECRET and hmac.compare_digest(
        token.encode(), settings.CRON_SECRET.encode(),
    ):
        return None

    profile = await _resolve_profile(request, db, token)
    if profile.role is not UserRole.admin:
        logger.warning("Profile %s attempted a scheduler-only action", profile.id)
        raise ForbiddenException(detail="Only administrators or the scheduler may run this.")
    return profile
