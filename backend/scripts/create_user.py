#!/usr/bin/env python3
"""
User Provisioning Script

Creates (or updates) a user and prints a bearer token for the API.
User administration lives outside the service; this is the minimal way to
get a working account for local use and demos.

Usage:
    # Domain-scoped user
    python scripts/create_user.py --email dev@example.com --domain Fullstack

    # Super admin (sees every resume, bypasses the eligibility gate)
    python scripts/create_user.py --email admin@example.com --role SUPER_ADMIN

    # Token for an existing user
    python scripts/create_user.py --email dev@example.com --token-only
"""

import asyncio
import argparse
import logging
import sys
from pathlib import Path
from typing import Optional

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from sqlalchemy import select

from app.auth import create_access_token
from app.database import async_session, init_db
from app.logging_config import setup_logging
from app.models import ADMIN_DOMAIN, User, UserRole
from app.schemas.analysis import Domain

logger = logging.getLogger(__name__)

DOMAIN_CHOICES = [d.value for d in Domain] + [ADMIN_DOMAIN]


async def upsert_user(email: str, name: str, role: str, domain: Optional[str] = None) -> User:
    async with async_session() as session:
        result = await session.execute(select(User).where(User.email == email))
        user = result.scalar_one_or_none()

        if user is None:
            user = User(email=email, name=name or email.split("@")[0], role=role, domain=domain)
            session.add(user)
            logger.info(f"Creating user {email}")
        else:
            user.role = role
            user.domain = domain
            if name:
                user.name = name
            logger.info(f"Updating user {email}")

        await session.commit()
        await session.refresh(user)
        return user


async def main() -> None:
    parser = argparse.ArgumentParser(description="Create a user and print an API token")
    parser.add_argument("--email", required=True, help="User email (unique)")
    parser.add_argument("--name", default="", help="Display name")
    parser.add_argument("--role", choices=[r.value for r in UserRole], default=UserRole.USER.value)
    parser.add_argument("--domain", choices=DOMAIN_CHOICES, help="Configured domain")
    parser.add_argument("--token-only", action="store_true", help="Only print a token for an existing user")

    args = parser.parse_args()
    setup_logging()
    await init_db()

    if args.token_only:
        async with async_session() as session:
            result = await session.execute(select(User).where(User.email == args.email))
            user = result.scalar_one_or_none()
        if user is None:
            logger.error(f"No user with email {args.email}")
            sys.exit(1)
    else:
        user = await upsert_user(args.email, args.name, args.role, args.domain)

    print(create_access_token(user.id))


if __name__ == "__main__":
    asyncio.run(main())
