"""SQLAlchemy models for database schema."""

from datetime import datetime
from typing import Any
from uuid import uuid4

from sqlalchemy import Boolean, DateTime, ForeignKey, Index, String, Text
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship
from sqlalchemy.sql import func

from src.core.database.json_type import JSONType


def _new_id() -> str:
    return str(uuid4())


def _iso(value: datetime | None) -> str | None:
    return value.isoformat() if value else None


class Base(DeclarativeBase):
    """Base class for all SQLAlchemy models using SQLAlchemy 2.0 declarative style."""

    pass


class Client(Base):
    """A business using the platform, owning campaigns and PINs."""

    __tablename__ = "clients"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_new_id)
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    slug: Mapped[str] = mapped_column(String(100), unique=True, nullable=False)
    admin_pin: Mapped[str] = mapped_column(String(20), nullable=False)
    staff_pin: Mapped[str] = mapped_column(String(20), nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, server_default=func.now())

    campaigns: Mapped[list["Campaign"]] = relationship(
        "Campaign",
        back_populates="client",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="Campaign.created_at",
    )

    def to_dict(self, include_campaigns: bool = False) -> dict[str, Any]:
        data = {
            "id": self.id,
            "name": self.name,
            "slug": self.slug,
            "created_at": _iso(self.created_at),
        }
        if include_campaigns:
            data["campaigns"] = [
                {"id": c.id, "name": c.name, "is_active": c.is_active} for c in self.campaigns
            ]
        return data


class Campaign(Base):
    """A pass program belonging to a client."""

    __tablename__ = "campaigns"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_new_id)
    client_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("clients.id", ondelete="CASCADE"), nullable=False, index=True
    )
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    # Validated through src.core.schemas.CampaignConfig
    config: Mapped[dict | None] = mapped_column(JSONType, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, server_default=func.now())

    client: Mapped["Client"] = relationship("Client", back_populates="campaigns")

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "client_id": self.client_id,
            "name": self.name,
            "is_active": self.is_active,
            "config": self.config or {},
            "created_at": _iso(self.created_at),
        }


class Pass(Base):
    """An issued wallet pass."""

    __tablename__ = "passes"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_new_id)
    campaign_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("campaigns.id", ondelete="CASCADE"), nullable=False, index=True
    )
    serial_number: Mapped[str] = mapped_column(String(100), unique=True, nullable=False)
    # Validated through src.core.schemas.PassState
    current_state: Mapped[dict | None] = mapped_column(JSONType, nullable=True)
    last_scanned_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, server_default=func.now())

    campaign: Mapped["Campaign"] = relationship("Campaign")

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "serial_number": self.serial_number,
            "current_state": self.current_state or {},
            "last_scanned_at": _iso(self.last_scanned_at),
            "created_at": _iso(self.created_at),
        }


class PushRequest(Base):
    """A notification blast awaiting an operator decision."""

    __tablename__ = "push_requests"
    __table_args__ = (Index("idx_push_requests_created", "created_at"),)

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_new_id)
    campaign_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("campaigns.id", ondelete="CASCADE"), nullable=False, index=True
    )
    message: Mapped[str] = mapped_column(Text, nullable=False)
    edited_message: Mapped[str | None] = mapped_column(Text, nullable=True)
    edited_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    scheduled_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    # pending, scheduled, approved, rejected
    status: Mapped[str] = mapped_column(String(20), nullable=False, default="pending")
    rejection_reason: Mapped[str | None] = mapped_column(Text, nullable=True)
    # Decision timestamp for both approvals and rejections
    approved_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, server_default=func.now())

    campaign: Mapped["Campaign"] = relationship("Campaign")

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "serial_number": self.serial_number,
            "current_state": self.current_state or {},
            "last_scanned_at": _iso(self.last_scanned_at),
            "created_at": _iso(self.created_at),
        }

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "campaign_id": self.campaign_id,
            "message": self.message,
            "edited_message": self.edited_message,
            "edited_at": _iso(self.edited_at),
            "scheduled_at": _iso(self.scheduled_at),
            "status": self.status,
            "rejection_reason": self.rejection_reason,
            "approved_at": _iso(self.approved_at),
            "created_at": _iso(self.created_at),
        }


class DynamicRoute(Base):
    """Short QR code mapped to a campaign start page."""

    __tablename__ = "dynamic_routes"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_new_id)
    client_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("clients.id", ondelete="CASCADE"), unique=True, nullable=False
    )
    # Always stored uppercase
    code: Mapped[str] = mapped_column(String(20), unique=True, nullable=False)
    target_slug: Mapped[str] = mapped_column(String(100), nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True, onupdate=func.now())

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "client_id": self.client_id,
            "code": self.code,
            "target_slug": self.target_slug,
            "is_active": self.is_active,
            "created_at": _iso(self.created_at),
            "updated_at": _iso(self.updated_at),
        }


class AutomationRule(Base):
    """Scheduled message rule attached to a campaign."""

    __tablename__ = "automation_rules"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_new_id)
    campaign_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("campaigns.id", ondelete="CASCADE"), nullable=False, index=True
    )
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    # birthday, weekday_schedule, inactivity, custom
    rule_type: Mapped[str] = mapped_column(String(30), nullable=False)
    config: Mapped[dict | None] = mapped_column(JSONType, nullable=True)
    message_template: Mapped[str] = mapped_column(Text, nullable=False)
    is_enabled: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True, onupdate=func.now())

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "campaign_id": self.campaign_id,
            "name": self.name,
            "rule_type": self.rule_type,
            "config": self.config or {},
            "message_template": self.message_template,
            "is_enabled": self.is_enabled,
            "created_at": _iso(self.created_at),
            "updated_at": _iso(self.updated_at),
        }


class ClientSession(Base):
    """Server-side record behind an auth_<slug> cookie."""

    __tablename__ = "client_sessions"

    token: Mapped[str] = mapped_column(String(64), primary_key=True)
    client_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("clients.id", ondelete="CASCADE"), nullable=False, index=True
    )
    # admin or staff
    role: Mapped[str] = mapped_column(String(10), nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, server_default=func.now())
    expires_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, index=True)
