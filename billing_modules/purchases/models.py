"""
Purchase Domain Models (``billing_modules.purchases.models``).

Frozen value objects for purchase orders and the purchase list summary.
Line amounts are unit costs; totals follow the same A/B bracket split as
invoices.
"""

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from enum import Enum
from typing import Any, Iterable
from uuid import UUID

from billing_engines.totals import PayloadLayout
from billing_modules._document_models import DocumentLine, Payment, stored_totals


class PurchaseStatus(Enum):
    """Purchase order lifecycle states."""
    DRAFT = "draft"
    ORDERED = "ordered"
    RECEIVED = "received"
    PARTIAL = "partial"
    PAID = "paid"
    CANCELLED = "cancelled"


@dataclass(frozen=True)
class Purchase:
    """A purchase order placed with a supplier."""
    id: UUID
    purchase_number: str
    supplier_id: str
    supplier_name: str
    purchase_date: date
    due_date: date | None
    currency: str
    payment_terms: str
    subtotal: Decimal
    total_discount: Decimal
    total_tax: Decimal
    total_bracket_a: Decimal
    total_bracket_b: Decimal
    tax_bracket_a: Decimal
    tax_bracket_b: Decimal
    grand_total: Decimal
    rounded_amount: Decimal
    amount_paid: Decimal = Decimal("0")
    status: PurchaseStatus = PurchaseStatus.DRAFT
    supplier_tin: str | None = None
    supplier_address: str | None = None
    supplier_invoice_number: str | None = None
    expected_delivery_date: date | None = None
    received_date: date | None = None
    stock_added: bool = False
    terms: str | None = None
    notes: str | None = None
    cancellation_reason: str | None = None
    lines: tuple[DocumentLine, ...] = field(default_factory=tuple)
    payments: tuple[Payment, ...] = field(default_factory=tuple)

    @property
    def balance(self) -> Decimal:
        return self.rounded_amount - self.amount_paid

    def to_payload(self) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "purchaseNumber": self.purchase_number,
            "supplier": self.supplier_id,
            "supplierName": self.supplier_name,
            "supplierTin": self.supplier_tin,
            "supplierAddress": self.supplier_address,
            "supplierInvoiceNumber": self.supplier_invoice_number,
            "currency": self.currency,
            "paymentTerms": self.payment_terms,
            "items": [line.to_payload("unitCost") for line in self.lines],
            "purchaseDate": self.purchase_date.isoformat(),
            "dueDate": self.due_date.isoformat() if self.due_date else None,
            "expectedDeliveryDate": (
                self.expected_delivery_date.isoformat()
                if self.expected_delivery_date else None
            ),
            "receivedDate": self.received_date.isoformat() if self.received_date else None,
            "stockAdded": self.stock_added,
            "terms": self.terms,
            "notes": self.notes,
            "status": self.status.value,
            "amountPaid": self.amount_paid,
            "balance": self.balance,
            "payments": [p.to_payload() for p in self.payments],
        }
        payload.update(stored_totals(self).as_payload(PayloadLayout.BRACKETED))
        return payload


@dataclass(frozen=True)
class PurchaseSummary:
    """Figures of the purchase list page cards."""
    count: int
    total: Decimal  # rounded amounts of all non-cancelled purchases
    paid: Decimal  # amount paid on fully paid purchases
    due: Decimal  # outstanding on open purchases


def summarize_purchases(purchases: Iterable[Purchase]) -> PurchaseSummary:
    count = 0
    total = paid = due = Decimal("0")
    for purchase in purchases:
        count += 1
        if purchase.status is PurchaseStatus.CANCELLED:
            continue
        total += purchase.rounded_amount
        if purchase.status is PurchaseStatus.PAID:
            paid += purchase.amount_paid
        else:
            due += purchase.balance
    return PurchaseSummary(count=count, total=total, paid=paid, due=due)
