"""Ledger entry endpoints."""

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from joyhomes.api.deps import get_db
from joyhomes.core.permissions import require_transactions_write
from joyhomes.models.booking import Transaction
from joyhomes.models.user import User
from joyhomes.schemas.booking import TransactionCancelRequest, TransactionResponse
from joyhomes.services.booking_service import booking_service

router = APIRouter()


@router.post("/{transaction_id}/cancel", response_model=TransactionResponse)
async def cancel_transaction(
    transaction_id: UUID,
    request: TransactionCancelRequest,
    current_user: Annotated[User, Depends(require_transactions_write)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> Transaction:
    """Cancel a ledger entry. Entries are never deleted."""
    return await booking_service.cancel_transaction(
        db, transaction_id, request.reason, current_user.id
    )
