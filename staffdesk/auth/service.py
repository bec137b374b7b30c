"""Auth service — password hashing, JWT issue, session lifecycle."""

from __future__ import annotations

import hashlib
import logging
from datetime import timedelta
from typing import Optional

import bcrypt
from jose import jwt
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from staffdesk.auth.models import UserSession
from staffdesk.common import clock
from staffdesk.config import settings
from staffdesk.profiles.models import Profile

logger = logging.getLogger(__name__)


# ── Passwords ───────────────────────────────────────────────────────

def hash_password(password: str) -> str:
    salt = bcrypt.gensalt(rounds=settings.BCRYPT_ROUNDS)
    return bcrypt.hashpw(password.encode("utf-8"), salt).decode("utf-8")


def verify_password(password: str, hashed_password: str) -> bool:
    try:
        return bcrypt.checkpw(password.encode("utf-8"), hashed_password.encode("utf-8"))
    except ValueError:
        # Malformed hash or password longer than bcrypt accepts
        return False


# ── JWT helpers ─────────────────────────────────────────────────────

def hash_token(token: str) -> str:
    return hashlib.sha256(token.encode()).hexdigest()


def create_access_token(profile: Profile) -> tuple[str, int]:
    """Return (token, expires_in_seconds) for a profile."""
    expires_in = settings.JWT_EXPIRY_HOURS * 3600
    payload = {
        "sub": str(profile.id),
        "role": profile.role.value,
        "type": "access",
        "exp": clock.utc_now() + timedelta(seconds=expires_in),
    }
    token = jwt.encode(payload, settings.JWT_SECRET, algorithm=settings.JWT_ALGORITHM)
    return token, expires_in


# ── Login / logout ──────────────────────────────────────────────────

async def authenticate(db: AsyncSession, email: str, password: str) -> Optional[Profile]:
    """Return the active profile matching the credentials, else None."""
    result = await db.execute(
        select(Profile).where(
            Profile.email == email.strip().lower(),
            Profile.is_active.is_(True),
        )
    )
    profile = result.scalars().first()
    if profile is None or not verify_password(password, profile.password_hash):
        logger.warning("Failed login for %s", email)
        return None
    return profile


async def issue_session(
    db: AsyncSession,
    profile: Profile,
    *,
    ip_address: Optional[str] = None,
    user_agent: Optional[str] = None,
) -> tuple[str, int]:
    """Create an access token and persist its session row."""
    token, expires_in = create_access_token(profile)
    db.add(
        UserSession(
            profile_id=profile.id,
            token_hash=hash_token(token),
            ip_address=ip_address,
            user_agent=user_agent,
            expires_at=clock.utc_now() + timedelta(seconds=expires_in),
            is_revoked=False,
        )
    )
    await db.flush()
    logger.info("Session issued for profile %s", profile.id)
    return token, expires_in


async def revoke_session(db: AsyncSession, token: str) -> bool:
    """Mark the session backing *token* as revoked. Returns False if unknown."""
    result = await db.execute(
        select(UserSession).where(UserSession.token_hash == hash_token(token))
    )
    session = result.scalars().first()
    if session is None:
        return False
    session.is_revoked = True
    await db.flush()
    return True


async def get_session_for_token(db: AsyncSession, token: str) -> Optional[UserSession]:
    """Return the live (not revoked, not expired) session for *token*."""
    result = await db.execute(
        select(UserSession).where(
            UserSession.token_hash == hash_token(token),
            UserSession.is_revoked.is_(False),
        )
    )
    session = result.scalars().first()
    if session is None or clock.as_utc(session.expires_at) <= clock.utc_now():
        return None
    return session
