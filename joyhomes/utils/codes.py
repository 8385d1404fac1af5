"""Human-readable code generation for bookings, ledger entries and customers."""

import random
import string
from datetime import datetime

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from joyhomes.utils.dates import utcnow

CODE_ALPHABET = string.ascii_uppercase + string.digits


def _dated_code(prefix: str, now: datetime | None = None) -> str:
    date_part = (now or utcnow()).strftime("%Y%m%d")
    random_part = "".join(random.choices(CODE_ALPHABET, k=4))
    return f"{prefix}-{date_part}-{random_part}"


async def _unique_code(db: AsyncSession, column, prefix: str) -> str:
    while True:
        code = _dated_code(prefix)
        result = await db.execute(select(column).where(column == code))
        if result.scalar_one_or_none() is None:
            return code


async def generate_booking_code(db: AsyncSession) -> str:
    """Generate a unique booking code like ``BK-20260118-A3B7``.

    Args:
        db: Database session for uniqueness check

    Returns:
        str: Unique booking code
    """
    from joyhomes.models.booking import Booking

    return await _unique_code(db, Booking.code, "BK")


async def generate_transaction_code(db: AsyncSession) -> str:
    """Generate a unique ledger entry code like ``TXN-20260118-K9M2``."""
    from joyhomes.models.booking import Transaction

    return await _unique_code(db, Transaction.code, "TXN")


async def generate_customer_code(db: AsyncSession) -> str:
    """Generate a unique customer code like ``KH-20260118-7QX1``."""
    from joyhomes.models.customer import Customer

    return await _unique_code(db, Customer.code, "KH")
