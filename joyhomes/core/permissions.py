"""Role-based access control and permissions."""

from enum import Enum
from typing import Any, Callable

from fastapi import Depends

from joyhomes.api.deps import get_current_user
from joyhomes.core.exceptions import AuthorizationError
from joyhomes.models.user import User


class UserRole(str, Enum):
    """User roles in the CRM."""

    ADMIN = "ADMIN"
    MANAGER = "MANAGER"
    SALES = "SALES"
    ACCOUNTANT = "ACCOUNTANT"
    MARKETING = "MARKETING"
    SUPPORT = "SUPPORT"


class Permission(str, Enum):
    """System permissions."""

    USERS_READ = "users:read"
    USERS_WRITE = "users:write"

    CUSTOMERS_READ = "customers:read"
    CUSTOMERS_WRITE = "customers:write"
    CUSTOMERS_DELETE = "customers:delete"

    PROPERTIES_READ = "properties:read"
    PROPERTIES_WRITE = "properties:write"

    # Booking creation vs. lifecycle management (approve, cancel, status, edit)
    BOOKINGS_READ = "bookings:read"
    BOOKINGS_WRITE = "bookings:write"
    BOOKINGS_MANAGE = "bookings:manage"

    TRANSACTIONS_READ = "transactions:read"
    TRANSACTIONS_WRITE = "transactions:write"

    REPORTS_READ = "reports:read"


# Role to permissions mapping
ROLE_PERMISSIONS: dict[UserRole, set[Permission]] = {
    UserRole.ADMIN: {perm for perm in Permission},
    UserRole.MANAGER: {
        Permission.USERS_READ,
        Permission.CUSTOMERS_READ,
        Permission.CUSTOMERS_WRITE,
        Permission.PROPERTIES_READ,
        Permission.PROPERTIES_WRITE,
        Permission.BOOKINGS_READ,
        Permission.BOOKINGS_WRITE,
        Permission.BOOKINGS_MANAGE,
        Permission.TRANSACTIONS_READ,
        Permission.TRANSACTIONS_WRITE,
        Permission.REPORTS_READ,
    },
    UserRole.SALES: {
        Permission.CUSTOMERS_READ,
        Permission.CUSTOMERS_WRITE,
        Permission.PROPERTIES_READ,
        Permission.BOOKINGS_READ,
        Permission.BOOKINGS_WRITE,
    },
    UserRole.ACCOUNTANT: {
        Permission.CUSTOMERS_READ,
        Permission.PROPERTIES_READ,
        Permission.BOOKINGS_READ,
        Permission.TRANSACTIONS_READ,
        Permission.TRANSACTIONS_WRITE,
        Permission.REPORTS_READ,
    },
    UserRole.MARKETING: {
        Permission.CUSTOMERS_READ,
        Permission.PROPERTIES_READ,
        Permission.REPORTS_READ,
    },
    UserRole.SUPPORT: {
        Permission.CUSTOMERS_READ,
        Permission.PROPERTIES_READ,
        Permission.BOOKINGS_READ,
    },
}

# Resources a SALES user may only see when they own them
OWN_ONLY_RESOURCES = {"customers", "bookings"}


def _as_role(role: str | UserRole) -> UserRole | None:
    if isinstance(role, UserRole):
        return role
    try:
        return UserRole(role)
    except ValueError:
        return None


def has_permission(role: str | UserRole, permission: Permission) -> bool:
    """Check if a role has a specific permission."""
    user_role = _as_role(role)
    if user_role is None:
        return False
    return permission in ROLE_PERMISSIONS.get(user_role, set())


def can_access_own_only(role: str | UserRole, resource: str) -> bool:
    """Check if a role is limited to its own records for a resource."""
    return _as_role(role) == UserRole.SALES and resource in OWN_ONLY_RESOURCES


def get_role_permissions(role: str | UserRole) -> set[Permission]:
    """Get all permissions for a role."""
    user_role = _as_role(role)
    return set(ROLE_PERMISSIONS.get(user_role, set())) if user_role else set()


def check_permission(user: User, permission: Permission) -> None:
    """Raise if the user's role lacks a permission."""
    if not has_permission(user.role, permission):
        raise AuthorizationError(f"Permission '{permission.value}' is required for this action")


def require_permission(permission: Permission) -> Callable[..., Any]:
    """Dependency to require a specific permission."""

    async def permission_checker(current_user: User = Depends(get_current_user)) -> User:
        check_permission(current_user, permission)
        return current_user

    return permission_checker


# Convenience dependencies
require_bookings_read = require_permission(Permission.BOOKINGS_READ)
require_bookings_write = require_permission(Permission.BOOKINGS_WRITE)
require_transactions_write = require_permission(Permission.TRANSACTIONS_WRITE)
require_customers_read = require_permission(Permission.CUSTOMERS_READ)
require_customers_write = require_permission(Permission.CUSTOMERS_WRITE)
require_properties_read = require_permission(Permission.PROPERTIES_READ)
require_properties_write = require_permission(Permission.PROPERTIES_WRITE)
require_users_read = require_permission(Permission.USERS_READ)
require_reports_read = require_permission(Permission.REPORTS_READ)
