"""Shared Pydantic schemas for GhostGuard."""

from pydantic import BaseModel


class HealthResponse(BaseModel):
    ok: bool = True
    ts: int


class VersionResponse(BaseModel):
    version: str
    download: str
    notes: str


class SuccessResponse(BaseModel):
    success: bool = True
