"""Ban directory: create, list, check, attach evidence to and lift bans."""

import time
from typing import Any

from sqlalchemy import or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from ghostguard.bans.models import BanIdentifierModel, BanModel
from ghostguard.bans.rules import (
    compute_expires_at,
    new_ban_id,
    normalize_identifiers,
    parse_data_uri,
    parse_timestamp,
)
from ghostguard.common.config import GhostGuardSettings
from ghostguard.common.exceptions import (
    BanNotFoundError,
    FeatureDisabledError,
    ForbiddenError,
    InvalidIdentifiersError,
    InvalidImageDataError,
    MissingFieldsError,
    PublicUrlFailedError,
    UploadFailedError,
)
from ghostguard.common.logging import get_logger
from ghostguard.common.models import utcnow
from ghostguard.identity.resolver import IdentityResolver
from ghostguard.live.commands import Command, CommandQueue
from ghostguard.storage.blob import BlobStore, BlobStoreError

logger = get_logger("bans")


class BanDirectory:
    """Core ban operations.

    Bans are soft-lifted: ``expires_at`` is moved to now and the record stays
    for history. A ban is active while ``expires_at`` is null or in the future.
    """

    def __init__(
        self,
        settings: GhostGuardSettings,
        commands: CommandQueue,
        blob_store: BlobStore,
        resolver: IdentityResolver | None = None,
    ):
        self.settings = settings
        self.commands = commands
        self.blob_store = blob_store
        self.resolver = resolver or IdentityResolver()

    async def get_ban(self, session: AsyncSession, ban_id: str) -> BanModel | None:
        result = await session.execute(select(BanModel).where(BanModel.ban_id == ban_id))
        return result.scalar_one_or_none()

    # ── Create / list ──

    async def create(
        self,
        session: AsyncSession,
        license_key: str | None,
        player_id: str | None,
        reason: str | None = None,
        duration: str | None = None,
        ban_id: str | None = None,
        evidence_url: str | None = None,
        banned_by: str | None = None,
        identifiers: Any = None,
        created_at: Any = None,
        expires_at: Any = None,
    ) -> BanModel:
        if not license_key or not player_id:
            raise MissingFieldsError()

        final_duration = duration or "P"
        try:
            final_created_at = parse_timestamp(created_at) or utcnow()
            final_expires_at = compute_expires_at(final_duration, expires_at)
        except ValueError as exc:
            raise MissingFieldsError(f"Invalid timestamp: {exc}") from exc

        ban = BanModel(
            ban_id=ban_id or new_ban_id(),
            license_key=license_key,
            player_id=str(player_id),
            reason=reason or "No reason",
            duration=final_duration,
            created_at=final_created_at,
            expires_at=final_expires_at,
            banned_by=banned_by or "GhostGuard",
            evidence_url=evidence_url or None,
            identifiers=[
                BanIdentifierModel(license_key=license_key, value=value)
                for value in normalize_identifiers(identifiers)
            ],
        )
        session.add(ban)
        await session.flush()
        logger.info(
            "ban created %s for %s (expires %s)",
            ban.ban_id, ban.player_id, ban.expires_at or "never",
            extra={"license_key": license_key},
        )
        return ban

    async def list_bans(self, session: AsyncSession, license_key: str) -> list[BanModel]:
        result = await session.execute(
            select(BanModel)
            .where(BanModel.license_key == license_key)
            .order_by(BanModel.created_at.desc())
        )
        return list(result.scalars().all())

    # ── Check ──

    async def check(
        self, session: AsyncSession, license_key: str | None, identifiers: Any,
    ) -> BanModel | None:
        """Return the newest active ban matching any identifier, or None."""
        if not license_key:
            raise MissingFieldsError()
        if not isinstance(identifiers, list):
            raise InvalidIdentifiersError()

        values = normalize_identifiers(identifiers)
        if not values:
            return None

        now = utcnow()
        result = await session.execute(
            select(BanModel)
            .join(BanIdentifierModel, BanIdentifierModel.ban_pk == BanModel.id)
            .where(
                BanIdentifierModel.license_key == license_key,
                BanIdentifierModel.value.in_(values),
                or_(BanModel.expires_at.is_(None), BanModel.expires_at > now),
            )
            .order_by(BanModel.created_at.desc())
            .limit(1)
        )
        return result.scalars().first()

    # ── Evidence ──

    async def attach_evidence(
        self,
        session: AsyncSession,
        license_key: str | None,
        ban_id: str | None,
        image_data: str | None,
    ) -> str:
        """Upload a data-URI screenshot and store its public URL on the ban."""
        if not license_key or not ban_id or not image_data:
            raise MissingFieldsError()

        image = parse_data_uri(image_data)
        if image is None:
            raise InvalidImageDataError()

        ban = await self.get_ban(session, ban_id)
        if ban is None or ban.license_key != license_key:
            raise BanNotFoundError()

        bucket = self.settings.evidence_bucket
        object_path = f"{license_key}/{ban_id}-{int(time.time() * 1000)}.{image.extension}"
        try:
            await self.blob_store.upload(bucket, object_path, image.data, image.mime)
        except BlobStoreError as exc:
            logger.error(
                "evidence upload failed for %s: %s", ban_id, exc,
                extra={"license_key": license_key},
            )
            raise UploadFailedError() from exc

        public_url = self.blob_store.public_url(bucket, object_path)
        if not public_url:
            raise PublicUrlFailedError()

        ban.evidence_url = public_url
        await session.flush()
        return public_url

    # ── Lift ──

    async def lift(self, session: AsyncSession, ban_id: str, requester_token: str | None) -> BanModel:
        """
        Authorized soft-lift:
        1. Resolve the requester (owner or panel admin)
        2. Load the ban and insist it belongs to the requester's tenant
        3. Expire it now and commit
        4. Queue one ``unban`` command for the tenant's agent
        """
        identity = await self.resolver.require(session, requester_token)

        ban = await self.get_ban(session, ban_id)
        if ban is None:
            raise BanNotFoundError()
        if ban.license_key != identity.license_key:
            raise ForbiddenError()

        ban.expires_at = utcnow()
        await session.commit()

        self.commands.push(ban.license_key, Command(type="unban", payload={"ban_id": ban_id}))
        logger.info(
            "ban %s lifted by %s", ban_id, identity.kind,
            extra={"license_key": ban.license_key},
        )
        return ban

    async def lift_unchecked(self, session: AsyncSession, ban_id: str) -> None:
        """Deprecated: soft-lift by ban id with no authorization and no agent command."""
        if not self.settings.enable_legacy_unban:
            raise FeatureDisabledError()

        ban = await self.get_ban(session, ban_id)
        logger.warning(
            "legacy unauthenticated unban used for %s", ban_id,
            extra={"license_key": ban.license_key if ban else None},
        )
        if ban is not None:
            ban.expires_at = utcnow()
            await session.flush()
