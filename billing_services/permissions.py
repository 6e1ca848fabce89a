"""
billing_services.permissions -- Static role-to-permission table.

Responsibility:
    Answer "may this role do this?" for every mutating or reading action
    the application offers.  A closed set of roles maps to a fixed set of
    permissions; lookups are pure.

Architecture position:
    Services layer.  Consulted by ``AuthContext`` and, through it, by the
    document services before any mutation.

Invariants:
    - A missing role (None) holds no permission.
    - The table is a module constant; nothing mutates it at runtime.
"""

from __future__ import annotations

from enum import Enum
from typing import Iterable


class Role(str, Enum):
    """User roles, as issued by the backend."""

    ADMIN = "admin"
    STOCK_MANAGER = "stock_manager"
    SALES = "sales"
    VIEWER = "viewer"


class Permission(str, Enum):
    """<resource>:<verb> permissions."""

    PRODUCTS_READ = "products:read"
    PRODUCTS_CREATE = "products:create"
    PRODUCTS_UPDATE = "products:update"
    PRODUCTS_DELETE = "products:delete"
    INVOICES_READ = "invoices:read"
    INVOICES_CREATE = "invoices:create"
    INVOICES_UPDATE = "invoices:update"
    INVOICES_DELETE = "invoices:delete"
    PURCHASES_READ = "purchases:read"
    PURCHASES_CREATE = "purchases:create"
    PURCHASES_UPDATE = "purchases:update"
    PURCHASES_DELETE = "purchases:delete"
    QUOTATIONS_READ = "quotations:read"
    QUOTATIONS_CREATE = "quotations:create"
    QUOTATIONS_UPDATE = "quotations:update"
    QUOTATIONS_DELETE = "quotations:delete"
    CLIENTS_READ = "clients:read"
    CLIENTS_CREATE = "clients:create"
    CLIENTS_UPDATE = "clients:update"
    CLIENTS_DELETE = "clients:delete"
    SUPPLIERS_READ = "suppliers:read"
    SUPPLIERS_CREATE = "suppliers:create"
    SUPPLIERS_UPDATE = "suppliers:update"
    SUPPLIERS_DELETE = "suppliers:delete"
    CATEGORIES_READ = "categories:read"
    CATEGORIES_CREATE = "categories:create"
    CATEGORIES_UPDATE = "categories:update"
    CATEGORIES_DELETE = "categories:delete"
    STOCK_READ = "stock:read"
    STOCK_UPDATE = "stock:update"
    USERS_READ = "users:read"
    USERS_CREATE = "users:create"
    USERS_UPDATE = "users:update"
    USERS_DELETE = "users:delete"
    REPORTS_READ = "reports:read"
    REPORTS_EXPORT = "reports:export"
    DASHBOARD_READ = "dashboard:read"


P = Permission

ROLE_PERMISSIONS: dict[Role, frozenset[Permission]] = {
    Role.ADMIN: frozenset(Permission),
    Role.STOCK_MANAGER: frozenset({
        P.PRODUCTS_READ, P.PRODUCTS_CREATE, P.PRODUCTS_UPDATE, P.PRODUCTS_DELETE,
        P.STOCK_READ, P.STOCK_UPDATE,
        P.CATEGORIES_READ, P.CATEGORIES_CREATE, P.CATEGORIES_UPDATE, P.CATEGORIES_DELETE,
        P.DASHBOARD_READ,
    }),
    Role.SALES: frozenset({
        P.PRODUCTS_READ,
        P.INVOICES_READ, P.INVOICES_CREATE, P.INVOICES_UPDATE,
        P.PURCHASES_READ,
        P.QUOTATIONS_READ, P.QUOTATIONS_CREATE, P.QUOTATIONS_UPDATE,
        P.CLIENTS_READ, P.CLIENTS_CREATE, P.CLIENTS_UPDATE,
        P.SUPPLIERS_READ,
        P.CATEGORIES_READ,
        P.STOCK_READ,
        P.REPORTS_READ, P.REPORTS_EXPORT,
        P.DASHBOARD_READ,
    }),
    Role.VIEWER: frozenset(p for p in Permission if p.value.endswith(":read")),
}

# Any of these makes a role an editor; adjusting stock alone does not
EDIT_PERMISSIONS: frozenset[Permission] = frozenset({
    P.PRODUCTS_CREATE, P.PRODUCTS_UPDATE, P.PRODUCTS_DELETE,
    P.INVOICES_CREATE, P.INVOICES_UPDATE, P.INVOICES_DELETE,
    P.PURCHASES_CREATE, P.PURCHASES_UPDATE, P.PURCHASES_DELETE,
    P.QUOTATIONS_CREATE, P.QUOTATIONS_UPDATE, P.QUOTATIONS_DELETE,
    P.CLIENTS_CREATE, P.CLIENTS_UPDATE, P.CLIENTS_DELETE,
    P.SUPPLIERS_CREATE, P.SUPPLIERS_UPDATE, P.SUPPLIERS_DELETE,
    P.CATEGORIES_CREATE, P.CATEGORIES_UPDATE, P.CATEGORIES_DELETE,
    P.USERS_CREATE, P.USERS_UPDATE, P.USERS_DELETE,
})

ROLE_DISPLAY_NAMES: dict[Role, str] = {
    Role.ADMIN: "Administrator",
    Role.STOCK_MANAGER: "Stock Manager",
    Role.SALES: "Sales",
    Role.VIEWER: "Viewer",
}


def _as_role(role: Role | str | None) -> Role | None:
    if role is None or isinstance(role, Role):
        return role
    try:
        return Role(role)
    except ValueError:
        return None


def _as_permission(permission: Permission | str) -> Permission | None:
    if isinstance(permission, Permission):
        return permission
    try:
        return Permission(permission)
    except ValueError:
        return None


def role_has_permission(role: Role | str | None, permission: Permission | str) -> bool:
    """True iff the role holds the permission.  Unknown roles hold nothing."""
    resolved = _as_role(role)
    if resolved is None:
        return False
    perm = _as_permission(permission)
    return perm is not None and perm in ROLE_PERMISSIONS[resolved]


def has_any_permission(
    role: Role | str | None,
    permissions: Iterable[Permission | str],
) -> bool:
    return any(role_has_permission(role, p) for p in permissions)


def can_edit(role: Role | str | None) -> bool:
    """True iff the role may create, update or delete anything."""
    return has_any_permission(role, EDIT_PERMISSIONS)


def is_admin(role: Role | str | None) -> bool:
    return _as_role(role) is Role.ADMIN


def get_permissions(role: Role | str | None) -> frozenset[Permission]:
    resolved = _as_role(role)
    if resolved is None:
        return frozenset()
    return ROLE_PERMISSIONS[resolved]


def role_display_name(role: Role | str) -> str:
    resolved = _as_role(role)
    if resolved is None:
        return str(role)
    return ROLE_DISPLAY_NAMES[resolved]
