"""SQLAlchemy models for bans."""

from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, Index, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from ghostguard.common.models import Base, TimestampMixin, generate_uuid


class BanModel(Base, TimestampMixin):
    """A ban is never deleted; lifting sets ``expires_at`` to the lift time."""

    __tablename__ = "bans"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=generate_uuid)
    ban_id: Mapped[str] = mapped_column(String(100), unique=True, nullable=False, index=True)
    license_key: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    player_id: Mapped[str] = mapped_column(String(255), nullable=False)
    reason: Mapped[str] = mapped_column(Text, default="No reason")
    duration: Mapped[str] = mapped_column(String(50), default="P")
    expires_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    banned_by: Mapped[str] = mapped_column(String(255), default="GhostGuard")
    evidence_url: Mapped[str | None] = mapped_column(Text, nullable=True)

    identifiers: Mapped[list["BanIdentifierModel"]] = relationship(
        back_populates="ban",
        cascade="all, delete-orphan",
        lazy="selectin",
    )

    @property
    def identifier_values(self) -> list[str]:
        return [i.value for i in self.identifiers]


class BanIdentifierModel(Base):
    """One device fingerprint of a ban, denormalized with the tenant for the lookup index."""

    __tablename__ = "ban_identifiers"
    __table_args__ = (
        UniqueConstraint("ban_pk", "value", name="uq_ban_identifier"),
        Index("ix_ban_identifiers_tenant_value", "license_key", "value"),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=generate_uuid)
    ban_pk: Mapped[str] = mapped_column(
        String(36), ForeignKey("bans.id", ondelete="CASCADE"), nullable=False
    )
    license_key: Mapped[str] = mapped_column(String(64), nullable=False)
    value: Mapped[str] = mapped_column(String(255), nullable=False)

    ban: Mapped["BanModel"] = relationship(back_populates="identifiers")
