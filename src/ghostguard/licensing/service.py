"""License authority."""

from datetime import timedelta
from typing import Any

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from ghostguard.common.config import GhostGuardSettings
from ghostguard.common.exceptions import (
    HwidMismatchError,
    LicenseExpiredError,
    LicenseInactiveError,
    LicenseNotFoundError,
    MissingFieldsError,
    UnknownLicenseError,
)
from ghostguard.common.logging import get_logger
from ghostguard.common.models import as_utc, isoformat, utcnow
from ghostguard.identity.resolver import IdentityResolver
from ghostguard.licensing.keygen import LicenseAssertion, generate_license_key, sign_assertion
from ghostguard.licensing.models import STATUS_ACTIVE, LicenseModel

logger = get_logger("licensing")


class LicenseAuthority:
    """Core licensing operations."""

    def __init__(self, settings: GhostGuardSettings, resolver: IdentityResolver | None = None):
        self.settings = settings
        self.resolver = resolver or IdentityResolver()

    async def get_license(
        self, session: AsyncSession, license_key: str
    ) -> LicenseModel | None:
        result = await session.execute(
            select(LicenseModel).where(LicenseModel.license_key == license_key)
        )
        return result.scalar_one_or_none()

    # ── Verification ──

    async def verify(
        self,
        session: AsyncSession,
        license_key: str | None,
        hwid: str | None = None,
    ) -> dict[str, Any]:
        """
        Agent-side license check:
        1. Lookup
        2. Status + expiry
        3. Hardware binding (first presented hwid is bound)
        4. Touch last_seen and sign an assertion

        Rejections raise LicenseRejectedError subclasses whose code is the reason.
        """
        if not license_key:
            raise MissingFieldsError("license_key is required", code="MISSING_KEY")

        license_obj = await self.get_license(session, license_key)
        if license_obj is None:
            raise UnknownLicenseError()

        if license_obj.status != STATUS_ACTIVE:
            raise LicenseInactiveError(license_obj.status)

        now = utcnow()
        expires = as_utc(license_obj.expires_at)
        if expires and expires < now:
            raise LicenseExpiredError()

        if license_obj.hwid:
            if hwid and license_obj.hwid != hwid:
                raise HwidMismatchError()
        elif hwid:
            license_obj.hwid = hwid
            logger.info("bound hwid", extra={"license_key": license_key})

        license_obj.last_seen = now
        await session.flush()

        assertion = LicenseAssertion.issue(
            license_key=license_obj.license_key,
            status=license_obj.status,
            expires_at=isoformat(expires),
        )
        signed = sign_assertion(assertion, self.settings.license_secret)
        return {
            "valid": True,
            "payload": signed["payload"],
            "signature": signed["signature"],
        }

    # ── Issuance ──

    async def issue_license(
        self, session: AsyncSession, days_valid: int = 0
    ) -> LicenseModel:
        """Create an ACTIVE license. ``days_valid <= 0`` means permanent."""
        expires_at = None
        if days_valid > 0:
            expires_at = utcnow() + timedelta(days=days_valid)

        license_obj = LicenseModel(
            license_key=generate_license_key(self.settings.license_prefix),
            status=STATUS_ACTIVE,
            expires_at=expires_at,
            hwid=None,
        )
        session.add(license_obj)
        await session.flush()
        return license_obj

    async def list_licenses(self, session: AsyncSession) -> list[LicenseModel]:
        result = await session.execute(
            select(LicenseModel).order_by(LicenseModel.created_at.desc())
        )
        return list(result.scalars().all())

    # ── Status toggles (status is free text, not validated) ──

    async def set_status(
        self, session: AsyncSession, license_key: str | None, status: str | None
    ) -> None:
        if not license_key or not status:
            raise MissingFieldsError()
        await session.execute(
            update(LicenseModel)
            .where(LicenseModel.license_key == license_key)
            .values(status=status)
        )

    async def set_status_via_owner_token(
        self, session: AsyncSession, token: str | None, status: str | None
    ) -> str:
        """Owner toggles their own license. Returns the affected license key."""
        if not token or not status:
            raise MissingFieldsError()
        owner = await self.resolver.require_owner(session, token)
        await self.set_status(session, owner.license_key, status)
        return owner.license_key

    async def owner_dashboard(self, session: AsyncSession, token: str | None) -> dict[str, Any]:
        owner = await self.resolver.require_owner(session, token)
        license_obj = await self.get_license(session, owner.license_key)
        if license_obj is None:
            raise LicenseNotFoundError()
        return {
            "license_key": license_obj.license_key,
            "status": license_obj.status,
            "expires_at": isoformat(license_obj.expires_at),
        }
