"""Role capabilities."""

from types import SimpleNamespace

import pytest

from joyhomes.core.exceptions import AuthorizationError
from joyhomes.core.permissions import (
    Permission,
    UserRole,
    can_access_own_only,
    check_permission,
    get_role_permissions,
    has_permission,
)


class TestRolePermissions:
    def test_admin_has_everything(self):
        assert get_role_permissions(UserRole.ADMIN) == set(Permission)

    @pytest.mark.parametrize(
        "role,permission,expected",
        [
            ("MANAGER", Permission.BOOKINGS_MANAGE, True),
            ("MANAGER", Permission.TRANSACTIONS_WRITE, True),
            ("SALES", Permission.BOOKINGS_WRITE, True),
            ("SALES", Permission.BOOKINGS_MANAGE, False),
            ("SALES", Permission.TRANSACTIONS_WRITE, False),
            ("ACCOUNTANT", Permission.TRANSACTIONS_WRITE, True),
            ("ACCOUNTANT", Permission.BOOKINGS_WRITE, False),
            ("MARKETING", Permission.BOOKINGS_READ, False),
            ("SUPPORT", Permission.BOOKINGS_READ, True),
        ],
    )
    def test_capabilities(self, role, permission, expected):
        assert has_permission(role, permission) is expected

    def test_unknown_role_has_nothing(self):
        assert not has_permission("INTERN", Permission.BOOKINGS_READ)
        assert get_role_permissions("INTERN") == set()


class TestOwnOnly:
    def test_sales_limited_to_own_bookings_and_customers(self):
        assert can_access_own_only("SALES", "bookings")
        assert can_access_own_only(UserRole.SALES, "customers")
        assert not can_access_own_only("SALES", "properties")

    def test_other_roles_see_everything(self):
        assert not can_access_own_only("MANAGER", "bookings")
        assert not can_access_own_only("ACCOUNTANT", "bookings")


class TestCheckPermission:
    def test_denied_raises_403(self):
        user = SimpleNamespace(role="SALES")
        with pytest.raises(AuthorizationError) as exc_info:
            check_permission(user, Permission.BOOKINGS_MANAGE)
        assert exc_info.value.status_code == 403

    def test_allowed_passes(self):
        check_permission(SimpleNamespace(role="MANAGER"), Permission.BOOKINGS_MANAGE)
