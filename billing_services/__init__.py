"""
Billing Services - who may do what, and how amounts are shown.

    permissions   role to permission table
    session       the signed-in user and its permission checks
    formatting    currency and number display
"""

from billing_services.formatting import (
    format_currency,
    format_currency_with_decimals,
    format_number,
)
from billing_services.permissions import Permission, Role, role_has_permission
from billing_services.session import AuthContext, InMemoryTokenStore, User

__all__ = [
    "AuthContext",
    "InMemoryTokenStore",
    "Permission",
    "Role",
    "User",
    "format_currency",
    "format_currency_with_decimals",
    "format_number",
    "role_has_permission",
]
