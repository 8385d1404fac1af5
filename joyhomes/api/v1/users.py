"""User endpoints."""

from typing import Annotated

from fastapi import APIRouter, Depends

from joyhomes.api.deps import get_current_user
from joyhomes.models.user import User
from joyhomes.schemas.user import UserResponse

router = APIRouter()


@router.get("/me", response_model=UserResponse)
async def get_my_profile(
    current_user: Annotated[User, Depends(get_current_user)],
) -> User:
    """Get current user's profile."""
    return current_user
