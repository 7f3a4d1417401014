"""Detection settings API router."""

from fastapi import APIRouter

from ghostguard.detections.schemas import (
    DetectionSettingsResponse,
    DetectionSettingsView,
    UpdateDetectionRequest,
)

router = APIRouter()


def _get_service():
    from ghostguard.deps import get_detection_service
    return get_detection_service()


def _get_db():
    from ghostguard.deps import get_db
    return get_db()


@router.get("/api/server/detections/{license_key}", response_model=DetectionSettingsResponse)
async def get_detections(license_key: str):
    svc = _get_service()
    settings = await svc.get(license_key)
    return DetectionSettingsResponse(settings=DetectionSettingsView(**settings))


@router.post("/api/dashboard/detections", response_model=DetectionSettingsResponse)
async def update_detection(body: UpdateDetectionRequest):
    svc = _get_service()
    db = _get_db()
    async with db.get_session() as session:
        settings = await svc.update(session, body.token, body.license_key, body.key, body.value)
        return DetectionSettingsResponse(settings=DetectionSettingsView(**settings))
