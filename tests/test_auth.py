"""Auth module tests — password login, JWT claims, sessions, role checks."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

from jose import jwt
from sqlalchemy import select

from staffdesk.auth.models import UserSession
from staffdesk.auth.service import hash_password, hash_token, verify_password
from staffdesk.common.constants import UserRole
from staffdesk.config import settings
from tests.conftest import TestSessionFactory, make_profile


# ── Password hashing ────────────────────────────────────────────────


def test_password_hash_roundtrip():
    hashed = hash_password("correct horse")
    assert hashed != "correct horse"
    assert verify_password("correct horse", hashed)
    assert not verify_password("wrong horse", hashed)


def test_verify_password_malformed_hash():
    assert verify_password("anything", "not-a-bcrypt-hash") is False


# ── Login ───────────────────────────────────────────────────────────


async def test_login_returns_token_and_user(client, employee):
    resp = await client.post(
        "/api/v1/auth/login",
        json={"email": "nimal@staffdesk.com", "password": "password123"},
    )
    assert resp.status_code == 200
    data = resp.json()
    assert data["token_type"] == "bearer"
    assert data["expires_in"] == settings.JWT_EXPIRY_HOURS * 3600
    assert data["user"]["email"] == "nimal@staffdesk.com"
    assert data["user"]["role"] == "employee"


async def test_login_email_is_case_insensitive(client, employee):
    resp = await client.post(
        "/api/v1/auth/login",
        json={"email": "  Nimal@StaffDesk.com ", "password": "password123"},
    )
    assert resp.status_code == 200


async def test_login_token_claims(client, employee):
    resp = await client.post(
        "/api/v1/auth/login",
        json={"email": "nimal@staffdesk.com", "password": "password123"},
    )
    token = resp.json()["access_token"]
    payload = jwt.decode(token, settings.JWT_SECRET, algorithms=[settings.JWT_ALGORITHM])
    assert payload["sub"] == str(employee.id)
    assert payload["role"] == UserRole.employee.value
    assert payload["type"] == "access"
    assert "exp" in payload


async def test_login_persists_session(client, employee):
    resp = await client.post(
        "/api/v1/auth/login",
        json={"email": "nimal@staffdesk.com", "password": "password123"},
    )
    token = resp.json()["access_token"]

    async with TestSessionFactory() as session:
        result = await session.execute(
            select(UserSession).where(UserSession.token_hash == hash_token(token))
        )
        row = result.scalars().first()
    assert row is not None
    assert row.profile_id == employee.id
    assert row.is_revoked is False


async def test_login_wrong_password(client, employee):
    resp = await client.post(
        "/api/v1/auth/login",
        json={"email": "nimal@staffdesk.com", "password": "nope-nope"},
    )
    assert resp.status_code == 401


async def test_login_unknown_email(client):
    resp = await client.post(
        "/api/v1/auth/login",
        json={"email": "ghost@staffdesk.com", "password": "password123"},
    )
    assert resp.status_code == 401


async def test_login_inactive_account(client, db):
    await make_profile(db, email="gone@staffdesk.com", is_active=False)
    await db.commit()
    resp = await client.post(
        "/api/v1/auth/login",
        json={"email": "gone@staffdesk.com", "password": "password123"},
    )
    assert resp.status_code == 401


# ── /me and logout ──────────────────────────────────────────────────


async def test_me_includes_balances(client, employee_headers):
    resp = await client.get("/api/v1/auth/me", headers=employee_headers)
    assert resp.status_code == 200
    data = resp.json()
    assert data["name"] == "Nimal Perera"
    assert float(data["sick_leave_balance"]) == 7
    assert float(data["casual_leave_balance"]) == 14


async def test_me_without_token(client):
    resp = await client.get("/api/v1/auth/me")
    assert resp.status_code == 401


async def test_me_with_garbage_token(client):
    resp = await client.get(
        "/api/v1/auth/me", headers={"Authorization": "Bearer not.a.jwt"},
    )
    assert resp.status_code == 401


async def test_me_with_unknown_session(client, employee):
    """A correctly signed token with no session row is rejected."""
    token = jwt.encode(
        {
            "sub": str(employee.id),
            "role": "employee",
            "type": "access",
            "exp": datetime.now(timezone.utc) + timedelta(hours=1),
        },
        settings.JWT_SECRET,
        algorithm=settings.JWT_ALGORITHM,
    )
    resp = await client.get("/api/v1/auth/me", headers={"Authorization": f"Bearer {token}"})
    assert resp.status_code == 401


async def test_me_with_expired_token(client, db, employee):
    token = jwt.encode(
        {
            "sub": str(employee.id),
            "role": "employee",
            "type": "access",
            "exp": datetime.now(timezone.utc) - timedelta(hours=1),
        },
        settings.JWT_SECRET,
        algorithm=settings.JWT_ALGORITHM,
    )
    db.add(
        UserSession(
            profile_id=employee.id,
            token_hash=hash_token(token),
            expires_at=datetime.now(timezone.utc) + timedelta(hours=1),
            is_revoked=False,
        )
    )
    await db.commit()

    resp = await client.get("/api/v1/auth/me", headers={"Authorization": f"Bearer {token}"})
    assert resp.status_code == 401
    assert "expired" in resp.json()["detail"].lower()


async def test_logout_revokes_session(client, employee_headers):
    resp = await client.post("/api/v1/auth/logout", headers=employee_headers)
    assert resp.status_code == 200

    resp = await client.get("/api/v1/auth/me", headers=employee_headers)
    assert resp.status_code == 401


# ── Role checks ─────────────────────────────────────────────────────


async def test_employee_cannot_call_admin_endpoint(client, employee_headers):
    resp = await client.get("/api/v1/employees", headers=employee_headers)
    assert resp.status_code == 403
    assert resp.headers["content-type"].startswith("application/problem+json")


async def test_admin_cannot_use_employee_self_service(client, admin_headers):
    resp = await client.post(
        "/api/v1/attendance/check-in",
        json={"location": "Head office"},
        headers=admin_headers,
    )
    assert resp.status_code == 403


async def test_health_check(client):
    resp = await client.get("/api/v1/health")
    assert resp.status_code == 200
    assert resp.json()["status"] == "healthy"
