"""SQLAlchemy model for per-license detection toggles."""

from datetime import datetime

from sqlalchemy import Boolean, DateTime, String
from sqlalchemy.orm import Mapped, mapped_column

from ghostguard.common.models import Base, isoformat, utcnow

# Wire key (as the agent and dashboard spell it) -> model attribute.
DETECTION_KEYS: dict[str, str] = {
    "noclip": "noclip",
    "speed": "speed",
    "explosions": "explosions",
    "vehicleSpam": "vehicle_spam",
    "blacklistedVehicle": "blacklisted_vehicle",
    "godmode": "godmode",
}


class DetectionSettingsModel(Base):
    __tablename__ = "detection_settings"

    license_key: Mapped[str] = mapped_column(String(64), primary_key=True)
    noclip: Mapped[bool] = mapped_column(Boolean, default=True)
    speed: Mapped[bool] = mapped_column(Boolean, default=True)
    explosions: Mapped[bool] = mapped_column(Boolean, default=True)
    vehicle_spam: Mapped[bool] = mapped_column("vehicleSpam", Boolean, default=True)
    blacklisted_vehicle: Mapped[bool] = mapped_column("blacklistedVehicle", Boolean, default=True)
    godmode: Mapped[bool] = mapped_column(Boolean, default=True)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, nullable=False
    )

    def to_dict(self) -> dict:
        data = {"license_key": self.license_key}
        for wire_key, attr in DETECTION_KEYS.items():
            value = getattr(self, attr)
            data[wire_key] = True if value is None else value
        data["updated_at"] = isoformat(self.updated_at)
        return data
