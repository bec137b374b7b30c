"""Auth router — password login, logout, current user profile."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Request
from fastapi.exceptions import HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from staffdesk.auth.dependencies import get_current_user
from staffdesk.auth.schemas import LoginRequest, MeResponse, TokenResponse, UserInfo
from staffdesk.auth.service import authenticate, issue_session, revoke_session
from staffdesk.common.audit import create_audit_entry
from staffdesk.common.rate_limit import LOGIN_RATE_LIMIT, limiter
from staffdesk.database import get_db
from staffdesk.profiles.models import Profile

router = APIRouter(prefix="", tags=["auth"])


# ── POST /login ─────────────────────────────────────────────────────

@router.post("/login", response_model=TokenResponse)
@limiter.limit(LOGIN_RATE_LIMIT)
async def login(
    body: LoginRequest,
    request: Request,
    db: AsyncSession = Depends(get_db),
):
    profile = await authenticate(db, body.email, body.password)
    if profile is None:
        raise HTTPException(status_code=401, detail="Invalid email or password.")

    ip = request.client.host if request.client else None
    user_agent = request.headers.get("user-agent")
    access_token, expires_in = await issue_session(
        db, profile, ip_address=ip, user_agent=user_agent,
    )

    await create_audit_entry(
        db,
        action="login",
        entity_type="user_session",
        entity_id=profile.id,
        actor_id=profile.id,
        new_values={"ip": ip, "user_agent": user_agent},
    )

    return TokenResponse(
        access_token=access_token,
        expires_in=expires_in,
        user=UserInfo.model_validate(profile),
    )


# ── POST /logout ────────────────────────────────────────────────────

@router.post("/logout")
async def logout(
    request: Request,
    profile: Profile = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    await revoke_session(db, request.state.access_token)
    return {"message": "Logged out."}


# ── GET /me ─────────────────────────────────────────────────────────

@router.get("/me", response_model=MeResponse)
async def me(profile: Profile = Depends(get_current_user)):
    """Current profile including both leave balances."""
    return MeResponse.model_validate(profile)
