"""Project and property inventory endpoints."""

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from joyhomes.api.deps import get_db
from joyhomes.core.exceptions import ConflictError, NotFoundError
from joyhomes.core.permissions import require_properties_read, require_properties_write
from joyhomes.domain.booking_state import PropertyStatus
from joyhomes.models.inventory import Project, Property
from joyhomes.models.user import User
from joyhomes.schemas.common import Pagination
from joyhomes.schemas.inventory import (
    ProjectCreate,
    ProjectResponse,
    PropertyCreate,
    PropertyListResponse,
    PropertyResponse,
)
from joyhomes.services.activity_log_service import (
    ActivityAction,
    EntityType,
    activity_log_service,
)
from joyhomes.services.booking_service import PROPERTY_NOT_FOUND

router = APIRouter()

PROJECT_NOT_FOUND = "Dự án không tồn tại"


@router.get("/projects", response_model=list[ProjectResponse])
async def list_projects(
    current_user: Annotated[User, Depends(require_properties_read)],
    db: Annotated[AsyncSession, Depends(get_db)],
):
    """List all projects."""
    result = await db.execute(select(Project).order_by(Project.name))
    return result.scalars().all()


@router.post("/projects", response_model=ProjectResponse, status_code=status.HTTP_201_CREATED)
async def create_project(
    data: ProjectCreate,
    current_user: Annotated[User, Depends(require_properties_write)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> Project:
    """Create a project."""
    existing = await db.execute(select(Project.id).where(Project.code == data.code))
    if existing.scalar_one_or_none() is not None:
        raise ConflictError(f'Mã dự án "{data.code}" đã tồn tại')

    project = Project(**data.model_dump())
    db.add(project)
    await db.flush()

    await activity_log_service.log_activity(
        db, current_user.id, ActivityAction.CREATE, EntityType.PROJECT, project.id
    )
    return project


@router.get("/properties", response_model=PropertyListResponse)
async def list_properties(
    current_user: Annotated[User, Depends(require_properties_read)],
    db: Annotated[AsyncSession, Depends(get_db)],
    project_id: Annotated[UUID | None, Query(alias="projectId")] = None,
    property_status: Annotated[PropertyStatus | None, Query(alias="status")] = None,
    page: Annotated[int, Query(ge=1)] = 1,
    limit: Annotated[int, Query(ge=1, le=100)] = 20,
) -> PropertyListResponse:
    """List inventory units, filterable by project and status."""
    query = select(Property)
    if project_id:
        query = query.where(Property.project_id == project_id)
    if property_status:
        query = query.where(Property.status == property_status.value)

    count_result = await db.execute(select(func.count()).select_from(query.subquery()))
    total = count_result.scalar() or 0

    result = await db.execute(
        query.order_by(Property.code).offset((page - 1) * limit).limit(limit)
    )
    return PropertyListResponse(
        properties=[PropertyResponse.model_validate(p) for p in result.scalars().all()],
        pagination=Pagination.build(page, limit, total),
    )


@router.post("/properties", response_model=PropertyResponse, status_code=status.HTTP_201_CREATED)
async def create_property(
    data: PropertyCreate,
    current_user: Annotated[User, Depends(require_properties_write)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> Property:
    """Add a unit to a project."""
    if await db.get(Project, data.project_id) is None:
        raise NotFoundError(detail=PROJECT_NOT_FOUND)

    existing = await db.execute(
        select(Property.id).where(
            Property.project_id == data.project_id, Property.code == data.code
        )
    )
    if existing.scalar_one_or_none() is not None:
        raise ConflictError(f'Mã sản phẩm "{data.code}" đã tồn tại trong dự án')

    prop = Property(**data.model_dump(exclude={"status"}), status=data.status.value)
    db.add(prop)
    await db.flush()

    await activity_log_service.log_activity(
        db, current_user.id, ActivityAction.CREATE, EntityType.PROPERTY, prop.id
    )
    return prop


@router.get("/properties/{property_id}", response_model=PropertyResponse)
async def get_property(
    property_id: UUID,
    current_user: Annotated[User, Depends(require_properties_read)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> Property:
    """Get an inventory unit by ID."""
    prop = await db.get(Property, property_id)
    if prop is None:
        raise NotFoundError(detail=PROPERTY_NOT_FOUND)
    return prop
