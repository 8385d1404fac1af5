"""Immutability enforcement for ledger records using SQLAlchemy events."""

import logging

from sqlalchemy import event, inspect

from joyhomes.core.exceptions import ValidationError

logger = logging.getLogger(__name__)

# Ledger columns that may never change once written
FROZEN_TRANSACTION_FIELDS = (
    "booking_id",
    "type",
    "amount",
    "code",
    "created_by",
    "applied_to_deposit",
)

_registered = False


class ImmutabilityViolationError(ValidationError):
    """Raised when attempting to modify immutable ledger records."""

    def __init__(self, model_name: str, operation: str, record_id: str):
        self.model_name = model_name
        self.operation = operation
        self.record_id = record_id
        super().__init__(
            f"Immutability violation: Cannot {operation} {model_name} record {record_id}."
        )


def _violation(model_name: str, operation: str, record_id: str) -> ImmutabilityViolationError:
    logger.error(
        "IMMUTABILITY_VIOLATION: Attempted to %s %s record_id=%s",
        operation,
        model_name,
        record_id,
    )
    return ImmutabilityViolationError(model_name, operation, record_id)


def register_immutability_enforcement() -> None:
    """Register SQLAlchemy event listeners for ledger immutability.

    Must be called once after models are imported.
    """
    global _registered
    if _registered:
        return

    from joyhomes.models.activity import ActivityLog
    from joyhomes.models.booking import Transaction

    # ============ Transaction: status/notes only, never deleted ============

    @event.listens_for(Transaction, "before_update")
    def prevent_transaction_rewrite(mapper, connection, target):
        state = inspect(target)
        changed = [
            name for name in FROZEN_TRANSACTION_FIELDS
            if state.attrs[name].history.has_changes()
        ]
        if changed:
            raise _violation("Transaction", f"UPDATE {', '.join(changed)} of", str(target.id))

    @event.listens_for(Transaction, "before_delete")
    def prevent_transaction_delete(mapper, connection, target):
        raise _violation("Transaction", "DELETE", str(target.id))

    # ============ ActivityLog: Append-Only ============

    @event.listens_for(ActivityLog, "before_update")
    def prevent_activity_update(mapper, connection, target):
        raise _violation("ActivityLog", "UPDATE", str(target.id))

    @event.listens_for(ActivityLog, "before_delete")
    def prevent_activity_delete(mapper, connection, target):
        raise _violation("ActivityLog", "DELETE", str(target.id))

    _registered = True
    logger.info("Immutability enforcement registered for ledger records")
