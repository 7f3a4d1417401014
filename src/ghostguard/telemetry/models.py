"""SQLAlchemy models mirroring agent telemetry.

Both tables are written best-effort; the in-memory live state is the source
of truth for status, the log table is preferred for reads when reachable.
"""

from datetime import datetime
from typing import Any

from sqlalchemy import JSON, Boolean, DateTime, Float, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from ghostguard.common.models import Base, TimestampMixin, utcnow


class ServerStatusModel(Base):
    __tablename__ = "server_status"

    license_key: Mapped[str] = mapped_column(String(64), primary_key=True)
    online: Mapped[bool] = mapped_column(Boolean, default=True)
    players: Mapped[int] = mapped_column(Integer, default=0)
    version: Mapped[str | None] = mapped_column(String(50), nullable=True)
    uptime: Mapped[float] = mapped_column(Float, default=0.0)
    last_seen: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, nullable=False
    )


class ServerLogModel(Base, TimestampMixin):
    __tablename__ = "server_logs"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    license_key: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    level: Mapped[str | None] = mapped_column(String(20), nullable=True)
    type_: Mapped[str | None] = mapped_column("type", String(50), nullable=True)
    title: Mapped[str | None] = mapped_column(String(255), nullable=True)
    message: Mapped[str] = mapped_column(Text, nullable=False)
    meta: Mapped[Any] = mapped_column(JSON, nullable=True)
