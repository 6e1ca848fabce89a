"""
Invoice Domain Models (``billing_modules.invoices.models``).

Responsibility
--------------
Frozen value objects for sales invoices: the invoice with its lines and
payments, the fiscal receipt metadata stamped on it after printing, and
the list-page summary.

Invariants enforced
-------------------
* All models are ``frozen=True``.
* All monetary fields use ``Decimal`` -- NEVER ``float``.
* ``balance == rounded_amount - amount_paid``.
"""

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from enum import Enum
from typing import Any, Iterable
from uuid import UUID

from billing_engines.totals import PayloadLayout
from billing_modules._document_models import DocumentLine, Payment, stored_totals


class InvoiceStatus(Enum):
    """Invoice lifecycle states."""
    DRAFT = "draft"
    CONFIRMED = "confirmed"
    PARTIAL = "partial"
    PAID = "paid"
    CANCELLED = "cancelled"


@dataclass(frozen=True)
class ReceiptMetadata:
    """Fiscal receipt data returned by the sales data controller."""
    sdc_id: str | None = None
    receipt_number: str | None = None
    receipt_signature: str | None = None
    internal_data: str | None = None
    mrc_code: str | None = None

    @property
    def is_empty(self) -> bool:
        return not any((
            self.sdc_id,
            self.receipt_number,
            self.receipt_signature,
            self.internal_data,
            self.mrc_code,
        ))

    def to_payload(self) -> dict[str, Any]:
        return {
            "sdcId": self.sdc_id,
            "receiptNumber": self.receipt_number,
            "receiptSignature": self.receipt_signature,
            "internalData": self.internal_data,
            "mrcCode": self.mrc_code,
        }


@dataclass(frozen=True)
class Invoice:
    """A sales invoice."""
    id: UUID
    invoice_number: str
    client_id: str
    customer_name: str
    invoice_date: date
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
    status: InvoiceStatus = InvoiceStatus.DRAFT
    customer_tin: str | None = None
    customer_address: str | None = None
    quotation_id: UUID | None = None
    terms: str | None = None
    notes: str | None = None
    cancellation_reason: str | None = None
    receipt: ReceiptMetadata = field(default_factory=ReceiptMetadata)
    lines: tuple[DocumentLine, ...] = field(default_factory=tuple)
    payments: tuple[Payment, ...] = field(default_factory=tuple)

    @property
    def balance(self) -> Decimal:
        return self.rounded_amount - self.amount_paid

    def to_payload(self) -> dict[str, Any]:
        """The invoice under the persistence API's field names."""
        payload: dict[str, Any] = {
            "invoiceNumber": self.invoice_number,
            "client": self.client_id,
            "quotation": str(self.quotation_id) if self.quotation_id else None,
            "currency": self.currency,
            "paymentTerms": self.payment_terms,
            "customerTin": self.customer_tin,
            "customerName": self.customer_name,
            "customerAddress": self.customer_address,
            "items": [line.to_payload("unitPrice") for line in self.lines],
            "invoiceDate": self.invoice_date.isoformat(),
            "dueDate": self.due_date.isoformat() if self.due_date else None,
            "terms": self.terms,
            "notes": self.notes,
            "status": self.status.value,
            "amountPaid": self.amount_paid,
            "balance": self.balance,
            "payments": [p.to_payload() for p in self.payments],
        }
        payload.update(stored_totals(self).as_payload(PayloadLayout.BRACKETED))
        if not self.receipt.is_empty:
            payload.update(self.receipt.to_payload())
        return payload


@dataclass(frozen=True)
class InvoiceSummary:
    """Figures of the invoice list page cards."""
    count: int
    revenue: Decimal  # grand totals of paid invoices
    pending: Decimal  # outstanding on confirmed and partial invoices
    draft_amount: Decimal  # grand totals of drafts


def summarize_invoices(invoices: Iterable[Invoice]) -> InvoiceSummary:
    count = 0
    revenue = pending = draft_amount = Decimal("0")
    for invoice in invoices:
        count += 1
        if invoice.status is InvoiceStatus.PAID:
            revenue += invoice.grand_total
        elif invoice.status in (InvoiceStatus.CONFIRMED, InvoiceStatus.PARTIAL):
            pending += invoice.grand_total - invoice.amount_paid
        elif invoice.status is InvoiceStatus.DRAFT:
            draft_amount += invoice.grand_total
    return InvoiceSummary(
        count=count,
        revenue=revenue,
        pending=pending,
        draft_amount=draft_amount,
    )
