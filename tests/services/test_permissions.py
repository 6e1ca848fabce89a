"""
Tests for the role-to-permission table.

Validates:
- Every role resolves; admin holds everything; viewer only reads
- Missing or unknown roles hold nothing
- Sales may sell but not delete; stock managers never touch documents
"""

import pytest

from billing_services.permissions import (
    EDIT_PERMISSIONS,
    ROLE_PERMISSIONS,
    Permission,
    Role,
    can_edit,
    get_permissions,
    has_any_permission,
    is_admin,
    role_display_name,
    role_has_permission,
)


class TestRoleHasPermission:

    @pytest.mark.parametrize("permission", list(Permission))
    def test_admin_holds_everything(self, permission):
        assert role_has_permission(Role.ADMIN, permission)

    @pytest.mark.parametrize("permission", list(Permission))
    def test_viewer_reads_only(self, permission):
        expected = permission.value.endswith(":read")
        assert role_has_permission(Role.VIEWER, permission) is expected

    def test_none_role_holds_nothing(self):
        assert not role_has_permission(None, Permission.INVOICES_READ)

    def test_unknown_role_holds_nothing(self):
        assert not role_has_permission("superuser", Permission.INVOICES_READ)

    def test_unknown_permission(self):
        assert not role_has_permission(Role.ADMIN, "invoices:approve")

    def test_string_forms(self):
        assert role_has_permission("sales", "invoices:create")

    def test_sales(self):
        assert role_has_permission(Role.SALES, Permission.INVOICES_CREATE)
        assert role_has_permission(Role.SALES, Permission.QUOTATIONS_UPDATE)
        assert not role_has_permission(Role.SALES, Permission.INVOICES_DELETE)
        assert not role_has_permission(Role.SALES, Permission.PURCHASES_CREATE)
        assert not role_has_permission(Role.SALES, Permission.USERS_READ)

    def test_stock_manager(self):
        assert role_has_permission(Role.STOCK_MANAGER, Permission.STOCK_UPDATE)
        assert role_has_permission(Role.STOCK_MANAGER, Permission.PRODUCTS_DELETE)
        assert not role_has_permission(Role.STOCK_MANAGER, Permission.INVOICES_READ)


class TestHelpers:

    def test_every_role_has_an_entry(self):
        assert set(ROLE_PERMISSIONS) == set(Role)

    def test_has_any_permission(self):
        assert has_any_permission(
            Role.STOCK_MANAGER, [Permission.INVOICES_READ, Permission.STOCK_READ]
        )
        assert not has_any_permission(Role.VIEWER, [Permission.INVOICES_CREATE])
        assert not has_any_permission(Role.ADMIN, [])

    def test_can_edit(self):
        assert can_edit(Role.ADMIN)
        assert can_edit(Role.SALES)
        assert can_edit(Role.STOCK_MANAGER)
        assert not can_edit(Role.VIEWER)
        assert not can_edit(None)

    def test_edit_permissions_never_read(self):
        assert not any(p.value.endswith(":read") for p in EDIT_PERMISSIONS)

    def test_stock_update_alone_is_not_editing(self):
        assert Permission.STOCK_UPDATE not in EDIT_PERMISSIONS
        assert len(EDIT_PERMISSIONS) == 24

    def test_is_admin(self):
        assert is_admin("admin")
        assert not is_admin(Role.SALES)
        assert not is_admin(None)

    def test_get_permissions(self):
        assert get_permissions(None) == frozenset()
        assert get_permissions(Role.ADMIN) == frozenset(Permission)

    def test_display_names(self):
        assert role_display_name(Role.STOCK_MANAGER) == "Stock Manager"
        assert role_display_name("unknown") == "unknown"
