"""API dependencies for authentication and common operations."""

from typing import Annotated, Any, TypeVar
from uuid import UUID

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError
from sqlalchemy.ext.asyncio import AsyncSession

from joyhomes.core.exceptions import AuthenticationError, ValidationError
from joyhomes.core.security import assert_role_current, verify_token
from joyhomes.database import get_db
from joyhomes.models.user import User

# Security scheme
security = HTTPBearer()

SchemaT = TypeVar("SchemaT", bound=BaseModel)


async def get_current_user(
    credentials: Annotated[HTTPAuthorizationCredentials, Depends(security)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> User:
    """Active user behind a bearer access token minted for their current role."""
    payload = verify_token(credentials.credentials, token_type="access")
    user_id = payload.get("sub")
    if not user_id:
        raise AuthenticationError("Invalid token payload")

    try:
        user = await db.get(User, UUID(user_id))
    except ValueError:
        raise AuthenticationError("Invalid token payload")

    if not user:
        raise AuthenticationError("User not found")
    if not user.is_active:
        raise AuthenticationError("User account is deactivated")
    assert_role_current(payload, user)

    return user


def parse_body(schema: type[SchemaT], body: dict[str, Any]) -> SchemaT:
    """Validate a raw JSON body against a schema, raising a 400 with the issue list."""
    try:
        return schema.model_validate(body)
    except PydanticValidationError as e:
        raise ValidationError(
            "Validation failed",
            errors=e.errors(include_url=False, include_context=False, include_input=False),
        )
