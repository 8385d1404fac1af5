"""Customer endpoints."""

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy import func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from joyhomes.api.deps import get_db
from joyhomes.core.exceptions import AuthorizationError, NotFoundError
from joyhomes.core.permissions import (
    can_access_own_only,
    require_customers_read,
    require_customers_write,
)
from joyhomes.models.customer import Customer
from joyhomes.models.user import User
from joyhomes.schemas.common import Pagination
from joyhomes.schemas.customer import CustomerCreate, CustomerListResponse, CustomerResponse
from joyhomes.services.activity_log_service import (
    ActivityAction,
    EntityType,
    activity_log_service,
)
from joyhomes.services.booking_service import CUSTOMER_NOT_FOUND
from joyhomes.utils.codes import generate_customer_code

router = APIRouter()


@router.get("", response_model=CustomerListResponse)
async def list_customers(
    current_user: Annotated[User, Depends(require_customers_read)],
    db: Annotated[AsyncSession, Depends(get_db)],
    search: str | None = None,
    page: Annotated[int, Query(ge=1)] = 1,
    limit: Annotated[int, Query(ge=1, le=100)] = 20,
) -> CustomerListResponse:
    """List customers. SALES users see only customers assigned to them."""
    query = select(Customer)
    if search:
        pattern = f"%{search}%"
        query = query.where(
            or_(
                Customer.full_name.ilike(pattern),
                Customer.phone.ilike(pattern),
                Customer.code.ilike(pattern),
            )
        )
    if can_access_own_only(current_user.role, "customers"):
        query = query.where(Customer.assigned_to_id == current_user.id)

    count_result = await db.execute(select(func.count()).select_from(query.subquery()))
    total = count_result.scalar() or 0

    result = await db.execute(
        query.order_by(Customer.created_at.desc()).offset((page - 1) * limit).limit(limit)
    )
    customers = result.scalars().all()

    return CustomerListResponse(
        customers=[CustomerResponse.model_validate(c) for c in customers],
        pagination=Pagination.build(page, limit, total),
    )


@router.post("", response_model=CustomerResponse, status_code=status.HTTP_201_CREATED)
async def create_customer(
    data: CustomerCreate,
    current_user: Annotated[User, Depends(require_customers_write)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> Customer:
    """Create a customer, assigned to the caller unless stated otherwise."""
    customer = Customer(
        code=await generate_customer_code(db),
        full_name=data.full_name,
        phone=data.phone,
        email=data.email,
        source=data.source,
        notes=data.notes,
        assigned_to_id=data.assigned_to_id or current_user.id,
    )
    db.add(customer)
    await db.flush()

    await activity_log_service.log_activity(
        db, current_user.id, ActivityAction.CREATE, EntityType.CUSTOMER, customer.id
    )
    return customer


@router.get("/{customer_id}", response_model=CustomerResponse)
async def get_customer(
    customer_id: UUID,
    current_user: Annotated[User, Depends(require_customers_read)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> Customer:
    """Get a customer by ID."""
    customer = await db.get(Customer, customer_id)
    if customer is None:
        raise NotFoundError(detail=CUSTOMER_NOT_FOUND)
    if (
        can_access_own_only(current_user.role, "customers")
        and customer.assigned_to_id != current_user.id
    ):
        raise AuthorizationError("Bạn không có quyền xem khách hàng này")
    return customer
