"""SQLAlchemy models for dashboard identities."""

from sqlalchemy import Boolean, ForeignKey, String
from sqlalchemy.orm import Mapped, mapped_column

from ghostguard.common.models import Base, TimestampMixin, generate_uuid


class CustomerModel(Base, TimestampMixin):
    """License owner. ``id`` doubles as the owner's dashboard token."""

    __tablename__ = "customers"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=generate_uuid)
    username: Mapped[str] = mapped_column(String(255), unique=True, nullable=False, index=True)
    password: Mapped[str] = mapped_column(String(64), nullable=False)  # sha256 hex
    license_key: Mapped[str] = mapped_column(
        String(64), ForeignKey("licenses.license_key"), nullable=False, index=True
    )


class PanelAdminModel(Base, TimestampMixin):
    """Delegated admin invited by an owner; only the invite token's digest is stored."""

    __tablename__ = "panel_admins"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=generate_uuid)
    license_key: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    steam: Mapped[str | None] = mapped_column(String(255), nullable=True)
    discord: Mapped[str | None] = mapped_column(String(255), nullable=True)
    role: Mapped[str] = mapped_column(String(50), default="admin", nullable=False)
    active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    token_hash: Mapped[str] = mapped_column(String(64), unique=True, nullable=False, index=True)
