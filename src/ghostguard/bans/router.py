"""Ban API router."""

from fastapi import APIRouter, Header

from ghostguard.bans.schemas import (
    BanCheckRequest,
    BanCheckResponse,
    BanListResponse,
    BanView,
    CreateBanRequest,
    CreateBanResponse,
    EvidenceRequest,
    EvidenceResponse,
)
from ghostguard.common.schemas import SuccessResponse
from ghostguard.common.security import bearer_token

router = APIRouter(prefix="/api/server")


def _get_service():
    from ghostguard.deps import get_ban_directory
    return get_ban_directory()


def _get_db():
    from ghostguard.deps import get_db
    return get_db()


@router.post("/ban", response_model=CreateBanResponse)
async def create_ban(body: CreateBanRequest):
    svc = _get_service()
    db = _get_db()
    async with db.get_session() as session:
        ban = await svc.create(
            session,
            license_key=body.license_key,
            player_id=body.resolved_player,
            reason=body.reason,
            duration=body.duration,
            ban_id=body.ban_id,
            evidence_url=body.evidence_url,
            banned_by=body.banned_by,
            identifiers=body.identifiers,
            created_at=body.created_at,
            expires_at=body.expires_at,
        )
        return CreateBanResponse(ban_id=ban.ban_id)


@router.get("/bans/{license_key}", response_model=BanListResponse)
async def list_bans(license_key: str):
    svc = _get_service()
    db = _get_db()
    async with db.get_session() as session:
        bans = await svc.list_bans(session, license_key)
        return BanListResponse(data=[BanView.from_model(b) for b in bans])


@router.post("/ban/check", response_model=BanCheckResponse)
async def check_ban(body: BanCheckRequest):
    svc = _get_service()
    db = _get_db()
    async with db.get_session() as session:
        ban = await svc.check(session, body.license_key, body.identifiers)
        return BanCheckResponse(
            banned=ban is not None,
            ban=BanView.from_model(ban) if ban else None,
        )


@router.post("/ban/evidence", response_model=EvidenceResponse)
async def attach_evidence(body: EvidenceRequest):
    svc = _get_service()
    db = _get_db()
    async with db.get_session() as session:
        url = await svc.attach_evidence(session, body.license_key, body.ban_id, body.image_data)
        return EvidenceResponse(evidence_url=url)


@router.delete("/unban/{ban_id}", response_model=SuccessResponse)
async def lift_ban(ban_id: str, authorization: str | None = Header(None)):
    svc = _get_service()
    db = _get_db()
    async with db.get_session() as session:
        await svc.lift(session, ban_id, bearer_token(authorization))
        return SuccessResponse()


@router.delete("/ban/{ban_id}", response_model=SuccessResponse, deprecated=True)
async def lift_ban_legacy(ban_id: str):
    """Unauthenticated unban kept for old agents. Prefer ``DELETE /unban/{ban_id}``."""
    svc = _get_service()
    db = _get_db()
    async with db.get_session() as session:
        await svc.lift_unchecked(session, ban_id)
        return SuccessResponse()
