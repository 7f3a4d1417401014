"""Telemetry API router: heartbeats, live status, command polling and logs."""

from typing import Optional

from fastapi import APIRouter, Query

from ghostguard.common.schemas import SuccessResponse
from ghostguard.telemetry.schemas import (
    ActionRequest,
    ActionResponse,
    ActionsResponse,
    CommandView,
    HeartbeatRequest,
    LogEventView,
    LogRequest,
    LogsResponse,
    PlayersResponse,
    StatusResponse,
)

router = APIRouter()


def _get_service():
    from ghostguard.deps import get_telemetry_service
    return get_telemetry_service()


def _get_db():
    from ghostguard.deps import get_db
    return get_db()


# ── Liveness ──

@router.post("/api/server/heartbeat", response_model=SuccessResponse)
async def heartbeat(body: HeartbeatRequest):
    svc = _get_service()
    await svc.heartbeat(body.license_key, body.players, body.version, body.uptime)
    return SuccessResponse()


@router.get("/api/server/players/{license_key}", response_model=PlayersResponse)
async def players(license_key: str):
    svc = _get_service()
    return PlayersResponse(players=svc.roster(license_key))


@router.get(
    "/api/server/status/{license_key}",
    response_model=StatusResponse,
    response_model_exclude_unset=True,
)
async def status(license_key: str):
    svc = _get_service()
    return StatusResponse(**svc.status(license_key))


# ── Commands ──

@router.post("/api/dashboard/action", response_model=ActionResponse)
async def push_action(body: ActionRequest):
    svc = _get_service()
    db = _get_db()
    async with db.get_session() as session:
        command = await svc.push_action(session, body.token, body.type, body.payload)
        return ActionResponse(id=command.id)


@router.get("/api/server/actions/{license_key}", response_model=ActionsResponse)
async def poll_actions(license_key: str):
    svc = _get_service()
    commands = svc.poll_actions(license_key)
    return ActionsResponse(actions=[CommandView(**c.to_dict()) for c in commands])


# ── Logs ──

@router.post("/api/server/log", response_model=SuccessResponse)
async def ingest_log(body: LogRequest):
    svc = _get_service()
    await svc.ingest_log(
        body.license_key,
        body.message,
        level=body.level,
        type=body.type,
        title=body.title,
        meta=body.meta,
    )
    return SuccessResponse()


@router.get("/api/server/logs/{license_key}", response_model=LogsResponse)
async def read_logs(license_key: str, limit: Optional[int] = Query(None)):
    svc = _get_service()
    events = [LogEventView(**e) for e in await svc.read_logs(license_key, limit)]
    return LogsResponse(data=events, logs=events)
