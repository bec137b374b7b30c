#!/usr/bin/env python3
"""Provision an administrator account.

Employees are created by admins through the API; the first admin has to
come from somewhere, so this script writes one directly to the database
configured by DATABASE_URL.

Usage:
    python scripts/create_admin.py --email hr@company.lk --name "HR Admin"
    python scripts/create_admin.py --email hr@company.lk --name "HR Admin" --password s3cret!

Exit codes:
    0 = account created
    1 = invalid input or email already registered
"""

import argparse
import asyncio
import getpass
import logging
import sys

from staffdesk.common.constants import MAX_PASSWORD_BYTES, UserRole
from staffdesk.common.exceptions import ConflictError
from staffdesk.common.log_config import configure_logging
from staffdesk.config import settings
from staffdesk.database import async_session_factory, engine
from staffdesk.profiles.service import ProfileService

logger = logging.getLogger("create_admin")


async def create_admin(email: str, name: str, password: str) -> bool:
    try:
        async with async_session_factory() as session:
            try:
                profile = await ProfileService.create_profile(
                    session,
                    name=name,
                    email=email,
                    password=password,
                    role=UserRole.admin,
                )
                await session.commit()
            except ConflictError as exc:
                await session.rollback()
                logger.error("%s", exc.detail)
                return False
        logger.info("Admin %s created with id %s", profile.email, profile.id)
        return True
    finally:
        await engine.dispose()


def main():
    parser = argparse.ArgumentParser(
        description="Create a StaffDesk administrator",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("--email", required=True, help="Login email")
    parser.add_argument("--name", required=True, help="Display name")
    parser.add_argument("--password", help="Password (prompted when omitted)")
    args = parser.parse_args()

    configure_logging()

    password = args.password or getpass.getpass("Password: ")
    if len(password) < settings.MIN_TEMP_PASSWORD_LENGTH:
        logger.error(
            "Password must be at least %d characters.", settings.MIN_TEMP_PASSWORD_LENGTH,
        )
        sys.exit(1)
    if len(password.encode("utf-8")) > MAX_PASSWORD_BYTES:
        logger.error("Password must be at most %d bytes when UTF-8 encoded.", MAX_PASSWORD_BYTES)
        sys.exit(1)
    if not args.name.strip():
        logger.error("Name is required.")
        sys.exit(1)

    ok = asyncio.run(create_admin(args.email, args.name.strip(), password))
    sys.exit(0 if ok else 1)


if __name__ == "__main__":
    main()
