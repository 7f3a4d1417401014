"""Pydantic schemas for ban endpoints."""

from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel, Field

from ghostguard.bans.models import BanModel
from ghostguard.common.models import as_utc


class CreateBanRequest(BaseModel):
    license_key: Optional[str] = None
    player: Optional[str | int] = None
    player_id: Optional[str | int] = None
    reason: Optional[str] = None
    duration: Optional[str] = None
    ban_id: Optional[str] = None
    evidence_url: Optional[str] = None
    banned_by: Optional[str] = None
    identifiers: Any = None
    created_at: Any = None
    expires_at: Any = None

    @property
    def resolved_player(self) -> Optional[str | int]:
        """Agents send ``player``; newer callers may send ``player_id``."""
        return self.player or self.player_id


class CreateBanResponse(BaseModel):
    success: bool = True
    ban_id: str


class BanView(BaseModel):
    ban_id: str
    license_key: str
    player_id: str
    reason: str
    duration: str
    created_at: datetime
    expires_at: Optional[datetime] = None
    banned_by: str
    evidence_url: Optional[str] = None
    identifiers: list[str] = Field(default_factory=list)

    @classmethod
    def from_model(cls, ban: BanModel) -> "BanView":
        return cls(
            ban_id=ban.ban_id,
            license_key=ban.license_key,
            player_id=ban.player_id,
            reason=ban.reason,
            duration=ban.duration,
            created_at=as_utc(ban.created_at),
            expires_at=as_utc(ban.expires_at),
            banned_by=ban.banned_by,
            evidence_url=ban.evidence_url,
            identifiers=ban.identifier_values,
        )


class BanListResponse(BaseModel):
    success: bool = True
    data: list[BanView]


class BanCheckRequest(BaseModel):
    license_key: Optional[str] = None
    identifiers: Any = None  # list shape is checked by the service


class BanCheckResponse(BaseModel):
    success: bool = True
    banned: bool
    ban: Optional[BanView] = None


class EvidenceRequest(BaseModel):
    license_key: Optional[str] = None
    ban_id: Optional[str] = None
    image_data: Optional[str] = None


class EvidenceResponse(BaseModel):
    success: bool = True
    evidence_url: str
