"""Inventory models: projects and their property units."""

from __future__ import annotations

import uuid
from datetime import datetime
from decimal import Decimal
from typing import TYPE_CHECKING

from sqlalchemy import (
    BigInteger,
    DateTime,
    ForeignKey,
    Integer,
    Numeric,
    String,
    Text,
    UniqueConstraint,
    Uuid,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from joyhomes.database import Base
from joyhomes.utils.dates import utcnow

if TYPE_CHECKING:
    from joyhomes.models.booking import Booking


class Project(Base):
    """A real-estate development."""

    __tablename__ = "projects"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    code: Mapped[str] = mapped_column(String(30), unique=True, nullable=False, index=True)
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    developer: Mapped[str | None] = mapped_column(String(200))
    location: Mapped[str | None] = mapped_column(Text)
    status: Mapped[str] = mapped_column(
        String(20), default="SELLING"
    )  # UPCOMING, SELLING, SOLD_OUT, COMPLETED
    # Percent of agreed price; bookings fall back to the configured default when unset
    commission_rate: Mapped[Decimal | None] = mapped_column(Numeric(5, 2))

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, onupdate=utcnow
    )

    # Relationships
    properties: Mapped[list["Property"]] = relationship("Property", back_populates="project")


class Property(Base):
    """A sellable inventory unit.

    ``status`` mirrors the lifecycle of the active booking that holds it.
    ``version`` is checked and incremented on every UPDATE so that two
    requests racing on the same unit cannot silently overwrite each other.
    """

    __tablename__ = "properties"
    __table_args__ = (UniqueConstraint("project_id", "code", name="uq_properties_project_code"),)

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    project_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("projects.id"), nullable=False, index=True
    )
    code: Mapped[str] = mapped_column(String(30), nullable=False, index=True)
    building: Mapped[str | None] = mapped_column(String(50))
    floor: Mapped[int | None] = mapped_column(Integer)
    area: Mapped[Decimal | None] = mapped_column(Numeric(10, 2))  # m2
    bedrooms: Mapped[int | None] = mapped_column(Integer)
    direction: Mapped[str | None] = mapped_column(String(20))
    price: Mapped[int] = mapped_column(BigInteger, nullable=False)  # VND
    status: Mapped[str] = mapped_column(
        String(20), nullable=False, default="AVAILABLE", index=True
    )  # AVAILABLE, HOLD, BOOKED, SOLD, UNAVAILABLE
    version: Mapped[int] = mapped_column(Integer, nullable=False)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, onupdate=utcnow
    )

    # Relationships
    project: Mapped["Project"] = relationship("Project", back_populates="properties")
    bookings: Mapped[list["Booking"]] = relationship("Booking", back_populates="property")

    __mapper_args__ = {"version_id_col": version}
