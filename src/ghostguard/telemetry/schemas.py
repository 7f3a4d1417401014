"""Pydantic schemas for heartbeat, command, and log endpoints."""

from typing import Any, Optional

from pydantic import BaseModel, Field


class HeartbeatRequest(BaseModel):
    license_key: Optional[str] = None
    players: Any = None
    version: Any = None
    uptime: Any = None


class PlayersResponse(BaseModel):
    success: bool = True
    players: list[Any]


class StatusResponse(BaseModel):
    online: bool
    players: int
    uptime: float
    version: Optional[str] = None
    last_seen: Optional[int] = None  # epoch ms; absent for unknown tenants


class ActionRequest(BaseModel):
    token: Optional[str] = None
    type: Optional[str] = None
    payload: Any = None


class ActionResponse(BaseModel):
    success: bool = True
    id: str


class CommandView(BaseModel):
    id: str
    type: str
    payload: Any = Field(default_factory=dict)
    created_at: str


class ActionsResponse(BaseModel):
    success: bool = True
    actions: list[CommandView]


class LogRequest(BaseModel):
    license_key: Optional[str] = None
    level: Optional[str] = None
    type: Optional[str] = None
    title: Optional[str] = None
    message: Any = None
    meta: Any = None


class LogEventView(BaseModel):
    id: str
    time: Optional[str] = None
    level: str
    type: str
    title: str
    message: str
    meta: Any = None


class LogsResponse(BaseModel):
    """Logs are returned under both ``data`` and ``logs`` for older dashboards."""

    success: bool = True
    data: list[LogEventView]
    logs: list[LogEventView]
