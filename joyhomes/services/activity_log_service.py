"""Activity trail service."""

from datetime import datetime
from enum import Enum
from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from joyhomes.models.activity import ActivityLog


class ActivityAction(str, Enum):
    CREATE = "CREATE"
    UPDATE = "UPDATE"
    DELETE = "DELETE"
    APPROVE = "APPROVE"
    CANCEL = "CANCEL"


class EntityType(str, Enum):
    CUSTOMER = "CUSTOMER"
    BOOKING = "BOOKING"
    TRANSACTION = "TRANSACTION"
    PROJECT = "PROJECT"
    PROPERTY = "PROPERTY"
    USER = "USER"


class ActivityLogService:
    """Service for append-only activity logging."""

    async def log_activity(
        self,
        db: AsyncSession,
        user_id: UUID,
        action: ActivityAction,
        entity_type: EntityType,
        entity_id: UUID | str,
    ) -> ActivityLog:
        """Record an action in the caller's transaction.

        Args:
            db: Database session
            user_id: User performing the action
            action: What was done
            entity_type: Kind of entity acted on
            entity_id: Entity ID

        Returns:
            Created activity log entry
        """
        entry = ActivityLog(
            user_id=user_id,
            action=action.value,
            entity_type=entity_type.value,
            entity_id=str(entity_id),
        )
        db.add(entry)
        return entry

    async def get_activity_logs(
        self,
        db: AsyncSession,
        user_id: UUID | None = None,
        entity_type: str | None = None,
        entity_id: str | None = None,
        action: str | None = None,
        start_date: datetime | None = None,
        end_date: datetime | None = None,
        page: int = 1,
        limit: int = 50,
    ) -> tuple[list[ActivityLog], int]:
        """List activity newest first, with the unpaginated total."""
        query = select(ActivityLog)
        if user_id:
            query = query.where(ActivityLog.user_id == user_id)
        if entity_type:
            query = query.where(ActivityLog.entity_type == entity_type)
        if entity_id:
            query = query.where(ActivityLog.entity_id == entity_id)
        if action:
            query = query.where(ActivityLog.action == action)
        if start_date and end_date:
            query = query.where(ActivityLog.created_at.between(start_date, end_date))

        count_result = await db.execute(select(func.count()).select_from(query.subquery()))
        total = count_result.scalar() or 0

        query = (
            query.options(selectinload(ActivityLog.user))
            .order_by(ActivityLog.created_at.desc())
            .offset((page - 1) * limit)
            .limit(limit)
        )
        result = await db.execute(query)
        return list(result.scalars().all()), total


activity_log_service = ActivityLogService()
