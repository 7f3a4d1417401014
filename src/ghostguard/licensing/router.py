"""Licensing API router."""

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from ghostguard.common.exceptions import LicenseRejectedError, MissingFieldsError
from ghostguard.common.logging import get_logger
from ghostguard.common.schemas import SuccessResponse
from ghostguard.common.security import require_admin_secret
from ghostguard.licensing.schemas import (
    CreateLicenseRequest,
    CreateLicenseResponse,
    LicenseListResponse,
    LicenseSummary,
    OwnerDashboardResponse,
    OwnerLicenseView,
    OwnerToggleRequest,
    OwnerTokenRequest,
    ToggleLicenseRequest,
    VerifyRequest,
    VerifyResponse,
)

logger = get_logger("licensing")

router = APIRouter()


def _get_service():
    from ghostguard.deps import get_license_authority
    return get_license_authority()


def _get_db():
    from ghostguard.deps import get_db
    return get_db()


# ── Agent ──

@router.post("/api/license/verify", response_model=VerifyResponse)
async def verify_license(body: VerifyRequest):
    svc = _get_service()
    db = _get_db()
    try:
        async with db.get_session() as session:
            return await svc.verify(session, body.license_key, hwid=body.hwid)
    except MissingFieldsError as e:
        return JSONResponse(status_code=400, content={"valid": False, "reason": e.code})
    except LicenseRejectedError as e:
        return VerifyResponse(valid=False, reason=e.code)
    except (SQLAlchemyError, TimeoutError) as e:
        # agents read valid/reason on every path
        logger.error("license verify failed: %s: %s", type(e).__name__, e)
        return JSONResponse(status_code=500, content={"valid": False, "reason": "DB_ERROR"})


# ── Owner ──

@router.post("/customer/dashboard", response_model=OwnerDashboardResponse)
async def owner_dashboard(body: OwnerTokenRequest):
    svc = _get_service()
    db = _get_db()
    async with db.get_session() as session:
        data = await svc.owner_dashboard(session, body.token)
        return OwnerDashboardResponse(data=OwnerLicenseView(**data))


@router.post("/customer/toggle", response_model=SuccessResponse)
async def owner_toggle(body: OwnerToggleRequest):
    svc = _get_service()
    db = _get_db()
    async with db.get_session() as session:
        await svc.set_status_via_owner_token(session, body.token, body.status)
        return SuccessResponse()


# ── Operator ──

@router.post("/admin/create-license", response_model=CreateLicenseResponse)
async def create_license(body: CreateLicenseRequest, _=Depends(require_admin_secret)):
    svc = _get_service()
    db = _get_db()
    async with db.get_session() as session:
        license_obj = await svc.issue_license(session, days_valid=body.days_valid)
        return CreateLicenseResponse(license_key=license_obj.license_key)


@router.get("/admin/licenses", response_model=LicenseListResponse)
async def list_licenses(_=Depends(require_admin_secret)):
    svc = _get_service()
    db = _get_db()
    async with db.get_session() as session:
        licenses = await svc.list_licenses(session)
        return LicenseListResponse(
            data=[LicenseSummary.model_validate(lic) for lic in licenses]
        )


@router.post("/admin/toggle-license", response_model=SuccessResponse)
async def toggle_license(body: ToggleLicenseRequest, _=Depends(require_admin_secret)):
    svc = _get_service()
    db = _get_db()
    async with db.get_session() as session:
        await svc.set_status(session, body.license_key, body.status)
        return SuccessResponse()
