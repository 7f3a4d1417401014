#!/usr/bin/env python3
"""Seed the database with one demo license and its owner account.

Usage:
    python scripts/seed_demo.py [username] [password]
"""

import asyncio
import sys
from pathlib import Path

# Ensure project root is on path
sys.path.insert(0, str(Path(__file__).resolve().parent.parent / "src"))

from sqlalchemy import select

from ghostguard.common.config import get_settings
from ghostguard.common.database import DatabaseManager
from ghostguard.identity.models import CustomerModel
from ghostguard.identity.resolver import IdentityResolver
from ghostguard.identity.service import AccountService
from ghostguard.licensing.service import LicenseAuthority


async def seed_demo(username: str = "demo", password: str = "demo") -> None:
    settings = get_settings()
    db = DatabaseManager(settings)
    await db.init()
    await db.create_all()

    authority = LicenseAuthority(settings)
    accounts = AccountService(IdentityResolver())

    async with db.get_session() as session:
        result = await session.execute(
            select(CustomerModel).where(CustomerModel.username == username)
        )
        existing = result.scalar_one_or_none()
        if existing:
            print(f"  [skip] {username} already exists ({existing.license_key})")
        else:
            license_obj = await authority.issue_license(session)
            customer = await accounts.create_customer(
                session, username, password, license_obj.license_key,
            )
            print(f"  [created] license {license_obj.license_key}")
            print(f"  [created] owner {customer.username}, dashboard token {customer.id}")

    await db.close()
    print("\nDone.")


if __name__ == "__main__":
    asyncio.run(seed_demo(*sys.argv[1:3]))
