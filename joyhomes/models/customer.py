"""Customer (lead) model."""

from __future__ import annotations

import uuid
from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import DateTime, ForeignKey, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from joyhomes.database import Base
from joyhomes.utils.dates import utcnow

if TYPE_CHECKING:
    from joyhomes.models.booking import Booking
    from joyhomes.models.user import User


class Customer(Base):
    """A lead or buyer tracked by the sales team."""

    __tablename__ = "customers"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    code: Mapped[str] = mapped_column(String(30), unique=True, nullable=False, index=True)
    full_name: Mapped[str] = mapped_column(String(200), nullable=False, index=True)
    phone: Mapped[str] = mapped_column(String(20), nullable=False, index=True)
    email: Mapped[str | None] = mapped_column(String(255))
    source: Mapped[str | None] = mapped_column(String(30))  # FACEBOOK, REFERRAL, WALK_IN, ...
    status: Mapped[str] = mapped_column(
        String(20), default="NEW"
    )  # NEW, CONTACTED, INTERESTED, NEGOTIATING, WON, LOST
    notes: Mapped[str | None] = mapped_column(Text)
    assigned_to_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid, ForeignKey("users.id"), index=True
    )

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, onupdate=utcnow
    )

    # Relationships
    assigned_to: Mapped["User | None"] = relationship("User", back_populates="customers")
    bookings: Mapped[list["Booking"]] = relationship("Booking", back_populates="customer")
