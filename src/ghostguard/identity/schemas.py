"""Pydantic schemas for login and panel admin endpoints."""

from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel


class LoginRequest(BaseModel):
    username: Optional[str] = None
    password: Optional[str] = None


class LoginResponse(BaseModel):
    success: bool = True
    license_key: str
    token: str


class CreateCustomerRequest(BaseModel):
    username: Optional[str] = None
    password: Optional[str] = None
    license_key: Optional[str] = None


class CustomerView(BaseModel):
    id: str
    username: str
    license_key: str
    created_at: datetime

    model_config = {"from_attributes": True}


class CreateCustomerResponse(BaseModel):
    success: bool = True
    customer: CustomerView


# ── Panel admins ──

class PanelAdminView(BaseModel):
    id: str
    name: str
    steam: Optional[str] = None
    discord: Optional[str] = None
    role: str
    active: bool
    created_at: datetime

    model_config = {"from_attributes": True}


class OwnerRequest(BaseModel):
    token: Optional[str] = None


class AddAdminRequest(BaseModel):
    token: Optional[str] = None
    name: Optional[str] = None
    steam: Optional[str] = None
    discord: Optional[str] = None
    role: Optional[str] = None


class RemoveAdminRequest(BaseModel):
    token: Optional[str] = None
    id: Optional[str] = None


class ToggleAdminRequest(BaseModel):
    token: Optional[str] = None
    id: Optional[str] = None
    active: Any = None  # must be a real boolean; checked by the service


class AdminListResponse(BaseModel):
    success: bool = True
    data: list[PanelAdminView]


class AddAdminResponse(BaseModel):
    success: bool = True
    admin: PanelAdminView
    invite_token: str


class AdminLoginRequest(BaseModel):
    token: Optional[str] = None


class AdminProfile(BaseModel):
    id: str
    name: str
    role: str


class AdminLoginResponse(BaseModel):
    success: bool = True
    license_key: str
    admin: AdminProfile
    token: str
