"""
Quotation Domain Models (``billing_modules.quotations.models``).

Quotations carry one tax rate per line and are presented without the A/B
bracket split, but their figures come from the same engine as invoices
and purchases.
"""

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from enum import Enum
from typing import Any, Iterable
from uuid import UUID

from billing_engines.totals import PayloadLayout
from billing_modules._document_models import DocumentLine, stored_totals


class QuotationStatus(Enum):
    """Quotation lifecycle states."""
    DRAFT = "draft"
    SENT = "sent"
    APPROVED = "approved"
    REJECTED = "rejected"
    EXPIRED = "expired"
    CONVERTED = "converted"


@dataclass(frozen=True)
class Quotation:
    """A price offer made to a client."""
    id: UUID
    quotation_number: str
    client_id: str
    customer_name: str
    quotation_date: date
    valid_until: date
    currency: str
    subtotal: Decimal
    total_discount: Decimal
    total_tax: Decimal
    total_bracket_a: Decimal
    total_bracket_b: Decimal
    tax_bracket_a: Decimal
    tax_bracket_b: Decimal
    grand_total: Decimal
    rounded_amount: Decimal
    status: QuotationStatus = QuotationStatus.DRAFT
    company_tin: str | None = None
    converted_invoice_id: UUID | None = None
    terms: str | None = None
    notes: str | None = None
    lines: tuple[DocumentLine, ...] = field(default_factory=tuple)

    def is_expired(self, today: date) -> bool:
        return self.valid_until < today

    def to_payload(self) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "quotationNumber": self.quotation_number,
            "client": self.client_id,
            "companyTin": self.company_tin,
            "currency": self.currency,
            "items": [line.to_payload("unitPrice", flat=True) for line in self.lines],
            "quotationDate": self.quotation_date.isoformat(),
            "validUntil": self.valid_until.isoformat(),
            "terms": self.terms,
            "notes": self.notes,
            "status": self.status.value,
            "convertedInvoice": (
                str(self.converted_invoice_id) if self.converted_invoice_id else None
            ),
        }
        payload.update(stored_totals(self).as_payload(PayloadLayout.FLAT))
        return payload


@dataclass(frozen=True)
class QuotationSummary:
    """Figures of the quotation list page cards."""
    count: int
    pending_count: int  # draft or sent
    accepted_count: int  # approved or converted
    total_value: Decimal


_PENDING = (QuotationStatus.DRAFT, QuotationStatus.SENT)
_ACCEPTED = (QuotationStatus.APPROVED, QuotationStatus.CONVERTED)


def summarize_quotations(quotations: Iterable[Quotation]) -> QuotationSummary:
    count = pending = accepted = 0
    total_value = Decimal("0")
    for quotation in quotations:
        count += 1
        total_value += quotation.grand_total
        if quotation.status in _PENDING:
            pending += 1
        elif quotation.status in _ACCEPTED:
            accepted += 1
    return QuotationSummary(
        count=count,
        pending_count=pending,
        accepted_count=accepted,
        total_value=total_value,
    )
