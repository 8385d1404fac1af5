"""Activity log schemas."""

from datetime import datetime
from uuid import UUID

from joyhomes.schemas.common import CamelModel, Pagination


class ActivityLogResponse(CamelModel):
    id: UUID
    user_id: UUID
    action: str
    entity_type: str
    entity_id: str
    created_at: datetime


class ActivityLogListResponse(CamelModel):
    logs: list[ActivityLogResponse]
    pagination: Pagination
