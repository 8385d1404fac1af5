"""Booking and ledger database models."""

from __future__ import annotations

import uuid
from datetime import datetime
from decimal import Decimal
from typing import TYPE_CHECKING

from sqlalchemy import BigInteger, Boolean, DateTime, ForeignKey, Integer, Numeric, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from joyhomes.database import Base
from joyhomes.utils.dates import utcnow

if TYPE_CHECKING:
    from joyhomes.models.customer import Customer
    from joyhomes.models.inventory import Project, Property
    from joyhomes.models.user import User


class Booking(Base):
    """Reservation of one property by one customer."""

    __tablename__ = "bookings"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    code: Mapped[str] = mapped_column(
        String(20), unique=True, nullable=False, index=True
    )  # BK-YYYYMMDD-XXXX
    property_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("properties.id"), nullable=False, index=True
    )
    project_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("projects.id"), nullable=False, index=True
    )
    customer_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("customers.id"), nullable=False, index=True
    )
    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("users.id"), nullable=False, index=True
    )  # sales owner

    # Money (whole VND)
    agreed_price: Mapped[int] = mapped_column(BigInteger, nullable=False)
    deposit_amount: Mapped[int] = mapped_column(BigInteger, nullable=False, default=0)
    deposit_date: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))

    # Commission (rate fixed at creation from the project)
    commission_rate: Mapped[Decimal] = mapped_column(Numeric(5, 2), nullable=False)
    commission_amount: Mapped[int] = mapped_column(BigInteger, nullable=False)

    # Status
    status: Mapped[str] = mapped_column(
        String(20), nullable=False, default="PENDING", index=True
    )  # PENDING, APPROVED, DEPOSITED, CONTRACTED, COMPLETED, CANCELLED, REFUNDED

    # Contract
    contract_number: Mapped[str | None] = mapped_column(String(50))
    contract_date: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
    handover_date: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))

    notes: Mapped[str | None] = mapped_column(Text)
    version: Mapped[int] = mapped_column(Integer, nullable=False)

    # Timestamps
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, index=True
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, onupdate=utcnow
    )

    # Relationships
    property: Mapped["Property"] = relationship("Property", back_populates="bookings")
    project: Mapped["Project"] = relationship("Project")
    customer: Mapped["Customer"] = relationship("Customer", back_populates="bookings")
    user: Mapped["User"] = relationship("User", back_populates="bookings")
    transactions: Mapped[list["Transaction"]] = relationship(
        "Transaction",
        back_populates="booking",
        order_by="Transaction.created_at.desc()",
    )

    __mapper_args__ = {"version_id_col": version}


class Transaction(Base):
    """Ledger entry for a booking.

    Entries are never deleted; cancelling one flips its status.
    """

    __tablename__ = "transactions"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    code: Mapped[str] = mapped_column(
        String(20), unique=True, nullable=False, index=True
    )  # TXN-YYYYMMDD-XXXX
    booking_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("bookings.id"), nullable=False, index=True
    )
    type: Mapped[str] = mapped_column(String(20), nullable=False)  # DEPOSIT, PAYMENT, REFUND, COMMISSION
    amount: Mapped[int] = mapped_column(BigInteger, nullable=False)
    payment_method: Mapped[str | None] = mapped_column(String(20))  # CASH, BANK_TRANSFER, CARD, OTHER
    payment_date: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
    status: Mapped[str] = mapped_column(
        String(20), nullable=False, default="CONFIRMED"
    )  # CONFIRMED, CANCELLED
    notes: Mapped[str | None] = mapped_column(Text)
    # Set when the entry advanced the booking and was added to its deposit_amount
    applied_to_deposit: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    created_by: Mapped[str] = mapped_column(String(64), nullable=False, default="system")

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, onupdate=utcnow
    )

    # Relationships
    booking: Mapped["Booking"] = relationship("Booking", back_populates="transactions")
