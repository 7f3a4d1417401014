"""Bearer token -> owner or delegated admin identity."""

from dataclasses import dataclass
from typing import Literal, Union

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ghostguard.common.exceptions import ForbiddenError, UnauthorizedError
from ghostguard.common.security import sha256_hex
from ghostguard.identity.models import CustomerModel, PanelAdminModel


@dataclass(frozen=True)
class OwnerIdentity:
    license_key: str
    customer: CustomerModel
    kind: Literal["customer"] = "customer"


@dataclass(frozen=True)
class AdminIdentity:
    license_key: str
    admin: PanelAdminModel
    kind: Literal["admin"] = "admin"


Identity = Union[OwnerIdentity, AdminIdentity]


class IdentityResolver:
    """Resolves dashboard tokens.

    Probe order is fixed: owner record id first, then the SHA-256 digest of
    the token against active panel admins. Owner tokens and admin digests are
    not expected to collide, so no further disambiguation happens.
    """

    async def resolve(self, session: AsyncSession, token: str | None) -> Identity | None:
        if not token:
            return None

        customer = await session.get(CustomerModel, token)
        if customer is not None:
            return OwnerIdentity(license_key=customer.license_key, customer=customer)

        result = await session.execute(
            select(PanelAdminModel).where(
                PanelAdminModel.token_hash == sha256_hex(token),
                PanelAdminModel.active.is_(True),
            )
        )
        admin = result.scalar_one_or_none()
        if admin is not None:
            return AdminIdentity(license_key=admin.license_key, admin=admin)

        return None

    async def require(self, session: AsyncSession, token: str | None) -> Identity:
        identity = await self.resolve(session, token)
        if identity is None:
            raise UnauthorizedError()
        return identity

    async def require_owner(self, session: AsyncSession, token: str | None) -> OwnerIdentity:
        """Owner-only operations look up the customer record directly."""
        if not token:
            raise UnauthorizedError()
        customer = await session.get(CustomerModel, token)
        if customer is None:
            raise UnauthorizedError()
        return OwnerIdentity(license_key=customer.license_key, customer=customer)

    async def require_tenant(
        self, session: AsyncSession, token: str | None, license_key: str,
    ) -> Identity:
        """Resolve ``token`` and insist it belongs to ``license_key``."""
        identity = await self.require(session, token)
        if identity.license_key != license_key:
            raise ForbiddenError()
        return identity
