"""Pydantic schemas for detection settings."""

from typing import Any, Optional

from pydantic import BaseModel


class DetectionSettingsView(BaseModel):
    license_key: str
    noclip: bool
    speed: bool
    explosions: bool
    vehicleSpam: bool
    blacklistedVehicle: bool
    godmode: bool
    updated_at: Optional[str] = None


class DetectionSettingsResponse(BaseModel):
    success: bool = True
    settings: DetectionSettingsView


class UpdateDetectionRequest(BaseModel):
    token: Optional[str] = None
    license_key: Optional[str] = None
    key: Optional[str] = None
    value: Any = None
