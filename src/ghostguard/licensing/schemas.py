"""Pydantic schemas for licensing endpoints."""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel


# ── Verification ──

class VerifyRequest(BaseModel):
    license_key: Optional[str] = None
    hwid: Optional[str] = None


class VerifyResponse(BaseModel):
    valid: bool
    reason: Optional[str] = None
    payload: Optional[str] = None  # exact signed string
    signature: Optional[str] = None


# ── Admin ──

class CreateLicenseRequest(BaseModel):
    days_valid: int = 0


class CreateLicenseResponse(BaseModel):
    success: bool = True
    license_key: str


class ToggleLicenseRequest(BaseModel):
    license_key: Optional[str] = None
    status: Optional[str] = None


class LicenseSummary(BaseModel):
    id: str
    license_key: str
    status: str
    expires_at: Optional[datetime]
    hwid: Optional[str]
    last_seen: Optional[datetime]
    created_at: datetime

    model_config = {"from_attributes": True}


class LicenseListResponse(BaseModel):
    success: bool = True
    data: list[LicenseSummary]


# ── Owner ──

class OwnerTokenRequest(BaseModel):
    token: Optional[str] = None


class OwnerToggleRequest(BaseModel):
    token: Optional[str] = None
    status: Optional[str] = None


class OwnerLicenseView(BaseModel):
    license_key: str
    status: str
    expires_at: Optional[str]


class OwnerDashboardResponse(BaseModel):
    success: bool = True
    data: OwnerLicenseView
