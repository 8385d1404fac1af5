"""Activity trail endpoints."""

from datetime import datetime
from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from joyhomes.api.deps import get_db
from joyhomes.core.permissions import require_users_read
from joyhomes.models.user import User
from joyhomes.schemas.activity import ActivityLogListResponse, ActivityLogResponse
from joyhomes.schemas.common import Pagination
from joyhomes.services.activity_log_service import activity_log_service

router = APIRouter()


@router.get("", response_model=ActivityLogListResponse)
async def list_activity_logs(
    current_user: Annotated[User, Depends(require_users_read)],
    db: Annotated[AsyncSession, Depends(get_db)],
    user_id: Annotated[UUID | None, Query(alias="userId")] = None,
    entity_type: Annotated[str | None, Query(alias="entityType")] = None,
    entity_id: Annotated[str | None, Query(alias="entityId")] = None,
    action: str | None = None,
    start_date: Annotated[datetime | None, Query(alias="startDate")] = None,
    end_date: Annotated[datetime | None, Query(alias="endDate")] = None,
    page: Annotated[int, Query(ge=1)] = 1,
    limit: Annotated[int, Query(ge=1, le=100)] = 50,
) -> ActivityLogListResponse:
    """Browse the activity trail, newest first."""
    logs, total = await activity_log_service.get_activity_logs(
        db,
        user_id=user_id,
        entity_type=entity_type,
        entity_id=entity_id,
        action=action,
        start_date=start_date,
        end_date=end_date,
        page=page,
        limit=limit,
    )
    return ActivityLogListResponse(
        logs=[ActivityLogResponse.model_validate(log) for log in logs],
        pagination=Pagination.build(page, limit, total),
    )
