"""Project and property schemas."""

from datetime import datetime
from decimal import Decimal
from uuid import UUID

from pydantic import Field

from joyhomes.domain.booking_state import PropertyStatus
from joyhomes.schemas.common import CamelModel, Pagination


class ProjectCreate(CamelModel):
    """Schema for creating a project."""

    code: str = Field(..., min_length=1, max_length=30)
    name: str = Field(..., min_length=1, max_length=200)
    developer: str | None = Field(None, max_length=200)
    location: str | None = None
    commission_rate: Decimal | None = Field(None, ge=0, le=100, decimal_places=2)


class ProjectResponse(CamelModel):
    id: UUID
    code: str
    name: str
    developer: str | None
    location: str | None
    status: str
    commission_rate: float | None
    created_at: datetime


class PropertyCreate(CamelModel):
    """Schema for adding a unit to a project."""

    project_id: UUID
    code: str = Field(..., min_length=1, max_length=30)
    building: str | None = Field(None, max_length=50)
    floor: int | None = None
    area: Decimal | None = Field(None, gt=0)
    bedrooms: int | None = Field(None, ge=0)
    direction: str | None = Field(None, max_length=20)
    price: int = Field(..., gt=0)
    status: PropertyStatus = PropertyStatus.AVAILABLE


class PropertyResponse(CamelModel):
    id: UUID
    project_id: UUID
    code: str
    building: str | None
    floor: int | None
    area: float | None
    bedrooms: int | None
    direction: str | None
    price: int
    status: str
    created_at: datetime


class PropertyListResponse(CamelModel):
    properties: list[PropertyResponse]
    pagination: Pagination
