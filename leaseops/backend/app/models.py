# app/models.py
from __future__ import annotations

import enum
from datetime import datetime

from sqlalchemy import (
    Boolean,
    DateTime,
    Enum,
    Float,
    Integer,
    String,
    Text,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    pass


# -----------------------------
# Core enums
# -----------------------------
class PropertyType(str, enum.Enum):
    house = "house"
    apartment = "apartment"
    duplex = "duplex"
    townhouse = "townhouse"
    condo = "condo"


class PropertyStatus(str, enum.Enum):
    available = "available"
    coming_soon = "coming_soon"
    in_screening = "in_screening"
    rented = "rented"
    maintenance = "maintenance"


class OutboxStatus(str, enum.Enum):
    pending = "pending"
    delivered = "delivered"
    failed = "failed"


# -----------------------------
# Models
# -----------------------------
class Property(Base):
    __tablename__ = "properties"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    organization_id: Mapped[str] = mapped_column(String(64), index=True)

    address: Mapped[str] = mapped_column(String(255))
    city: Mapped[str] = mapped_column(String(80))
    state: Mapped[str] = mapped_column(String(2))
    zip_code: Mapped[str] = mapped_column(String(10))

    bedrooms: Mapped[int] = mapped_column(Integer, default=0)
    bathrooms: Mapped[float] = mapped_column(Float, default=0.0)
    square_feet: Mapped[int | None] = mapped_column(Integer, nullable=True)
    property_type: Mapped[PropertyType] = mapped_column(Enum(PropertyType), default=PropertyType.house)

    rent_price: Mapped[float] = mapped_column(Float, default=0.0)
    deposit_amount: Mapped[float | None] = mapped_column(Float, nullable=True)
    application_fee: Mapped[float | None] = mapped_column(Float, nullable=True)

    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    pet_policy: Mapped[str | None] = mapped_column(Text, nullable=True)
    year_built: Mapped[int | None] = mapped_column(Integer, nullable=True)

    # JSON list of image URLs
    photos_json: Mapped[str] = mapped_column(Text, default="[]")

    status: Mapped[PropertyStatus] = mapped_column(
        Enum(PropertyStatus), default=PropertyStatus.available, index=True
    )
    section_8_accepted: Mapped[bool] = mapped_column(Boolean, default=True)
    hud_inspection_ready: Mapped[bool] = mapped_column(Boolean, default=True)
    special_notes: Mapped[str | None] = mapped_column(Text, nullable=True)

    # Provenance of the last import/sync
    source_listing_id: Mapped[str | None] = mapped_column(String(40), nullable=True)
    source_url: Mapped[str | None] = mapped_column(Text, nullable=True)

    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)


class OutboxEvent(Base):
    __tablename__ = "outbox_events"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    event_type: Mapped[str] = mapped_column(String(120), index=True)
    payload_json: Mapped[str] = mapped_column(Text)

    status: Mapped[OutboxStatus] = mapped_column(Enum(OutboxStatus), default=OutboxStatus.pending, index=True)
    attempts: Mapped[int] = mapped_column(Integer, default=0)

    next_attempt_at: Mapped[datetime | None] = mapped_column(DateTime, nullable=True, index=True)
    delivered_at: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)
    last_error: Mapped[str | None] = mapped_column(Text, nullable=True)

    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)
