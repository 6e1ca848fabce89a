"""
Purchases Module.

Purchase orders placed with suppliers: creation, ordering, receiving,
payments and cancellation.
"""

from billing_modules.purchases.models import (
    Purchase,
    PurchaseStatus,
    PurchaseSummary,
    summarize_purchases,
)
from billing_modules.purchases.workflows import PURCHASE_WORKFLOW

__all__ = [
    "PURCHASE_WORKFLOW",
    "Purchase",
    "PurchaseStatus",
    "PurchaseSummary",
    "summarize_purchases",
]
