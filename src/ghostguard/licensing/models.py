"""SQLAlchemy models for licensing."""

from datetime import datetime

from sqlalchemy import DateTime, String
from sqlalchemy.orm import Mapped, mapped_column

from ghostguard.common.models import Base, TimestampMixin, generate_uuid

STATUS_ACTIVE = "ACTIVE"


class LicenseModel(Base, TimestampMixin):
    __tablename__ = "licenses"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=generate_uuid)
    license_key: Mapped[str] = mapped_column(String(64), unique=True, nullable=False, index=True)
    # Free text; anything other than ACTIVE makes the license unusable.
    status: Mapped[str] = mapped_column(String(50), default=STATUS_ACTIVE, nullable=False)
    expires_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    hwid: Mapped[str | None] = mapped_column(String(255), nullable=True)
    last_seen: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
