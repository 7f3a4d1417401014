"""Account service for owner logins, customer creation and panel admins."""

from typing import Any

from sqlalchemy import delete, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from ghostguard.common.exceptions import (
    LicenseNotFoundError,
    MissingFieldsError,
    UnauthorizedError,
)
from ghostguard.common.security import random_token, sha256_hex
from ghostguard.identity.models import CustomerModel, PanelAdminModel
from ghostguard.identity.resolver import AdminIdentity, IdentityResolver
from ghostguard.licensing.models import LicenseModel

INVITE_TOKEN_BYTES = 24


def hash_password(password: str) -> str:
    """Unsalted SHA-256 hex, compatible with digests already stored."""
    return sha256_hex(password)


class AccountService:
    """Owner accounts and the delegated admins they invite."""

    def __init__(self, resolver: IdentityResolver):
        self.resolver = resolver

    # ── Owners ──

    async def login(
        self, session: AsyncSession, username: str | None, password: str | None
    ) -> CustomerModel:
        if not username or not password:
            raise MissingFieldsError()
        result = await session.execute(
            select(CustomerModel).where(
                CustomerModel.username == username,
                CustomerModel.password == hash_password(password),
            )
        )
        customer = result.scalar_one_or_none()
        if customer is None:
            raise UnauthorizedError("Invalid username or password")
        return customer

    async def create_customer(
        self,
        session: AsyncSession,
        username: str | None,
        password: str | None,
        license_key: str | None,
    ) -> CustomerModel:
        if not username or not password or not license_key:
            raise MissingFieldsError()

        result = await session.execute(
            select(LicenseModel.id).where(LicenseModel.license_key == license_key)
        )
        if result.scalar_one_or_none() is None:
            raise LicenseNotFoundError()

        customer = CustomerModel(
            username=username,
            password=hash_password(password),
            license_key=license_key,
        )
        session.add(customer)
        await session.flush()
        return customer

    # ── Panel admins ──

    async def list_admins(self, session: AsyncSession, token: str | None) -> list[PanelAdminModel]:
        owner = await self.resolver.require_owner(session, token)
        result = await session.execute(
            select(PanelAdminModel)
            .where(PanelAdminModel.license_key == owner.license_key)
            .order_by(PanelAdminModel.created_at.desc())
        )
        return list(result.scalars().all())

    async def add_admin(
        self,
        session: AsyncSession,
        token: str | None,
        name: str | None,
        steam: str | None = None,
        discord: str | None = None,
        role: str | None = None,
    ) -> tuple[PanelAdminModel, str]:
        """Invite an admin. Returns (model, raw_invite_token); the raw token is never stored."""
        owner = await self.resolver.require_owner(session, token)
        if not name:
            raise MissingFieldsError("name is required", code="MISSING_NAME")

        invite_token = random_token(INVITE_TOKEN_BYTES)
        admin = PanelAdminModel(
            license_key=owner.license_key,
            name=name,
            steam=steam or None,
            discord=discord or None,
            role=role or "admin",
            active=True,
            token_hash=sha256_hex(invite_token),
        )
        session.add(admin)
        await session.flush()
        return admin, invite_token

    async def remove_admin(self, session: AsyncSession, token: str | None, admin_id: str | None) -> None:
        owner = await self.resolver.require_owner(session, token)
        if not admin_id:
            raise MissingFieldsError("id is required", code="MISSING_ID")
        await session.execute(
            delete(PanelAdminModel).where(
                PanelAdminModel.id == admin_id,
                PanelAdminModel.license_key == owner.license_key,
            )
        )

    async def set_admin_active(
        self, session: AsyncSession, token: str | None, admin_id: str | None, active: Any
    ) -> None:
        owner = await self.resolver.require_owner(session, token)
        if not admin_id or not isinstance(active, bool):
            raise MissingFieldsError()
        await session.execute(
            update(PanelAdminModel)
            .where(
                PanelAdminModel.id == admin_id,
                PanelAdminModel.license_key == owner.license_key,
            )
            .values(active=active)
        )

    async def admin_login(self, session: AsyncSession, token: str | None) -> AdminIdentity:
        if not token:
            raise MissingFieldsError()
        identity = await self.resolver.resolve(session, token)
        if not isinstance(identity, AdminIdentity):
            raise UnauthorizedError()
        return identity
