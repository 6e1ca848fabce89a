"""
Shared Document Models (``billing_modules._document_models``).

Responsibility
--------------
Frozen value objects common to invoices, purchases and quotations: the
form row a caller submits (``DocumentLineInput``), the persisted line
(``DocumentLine``) and a recorded payment (``Payment``).

Invariants enforced
-------------------
* All models are ``frozen=True``.
* All monetary fields use ``Decimal`` -- NEVER ``float``.
"""

from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Any
from uuid import UUID

from billing_engines.totals import DocumentTotals, TaxCode


@dataclass(frozen=True)
class DocumentLineInput:
    """
    One row of a document form.

    ``unit_amount`` is the unit price on sales documents and the unit cost
    on purchases; None takes it from the catalog product.  ``tax_code``
    None means "the document kind's default".  ``tax_rate``, when given,
    must be the rate the schedule holds for the row's code.
    """
    product_id: str
    quantity: Decimal
    unit_amount: Decimal | None = None
    discount: Decimal = Decimal("0")
    tax_code: TaxCode | str | None = None
    item_code: str | None = None
    tax_rate: Decimal | None = None


@dataclass(frozen=True)
class DocumentLine:
    """A persisted document line with its computed figures."""
    id: UUID
    line_number: int
    product_id: str
    item_code: str
    description: str
    quantity: Decimal
    unit: str
    unit_amount: Decimal
    discount: Decimal
    tax_code: TaxCode
    tax_rate: Decimal
    tax_amount: Decimal
    line_subtotal: Decimal
    total_with_tax: Decimal

    def to_input(self) -> DocumentLineInput:
        """The form row this line was built from."""
        return DocumentLineInput(
            product_id=self.product_id,
            quantity=self.quantity,
            unit_amount=self.unit_amount,
            discount=self.discount,
            tax_code=self.tax_code,
            item_code=self.item_code,
        )

    def to_payload(self, amount_field: str = "unitPrice", flat: bool = False) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "product": self.product_id,
            "itemCode": self.item_code,
            "description": self.description,
            "quantity": self.quantity,
            "unit": self.unit,
            amount_field: self.unit_amount,
            "discount": self.discount,
        }
        if flat:
            payload["taxRate"] = self.tax_rate
            payload["subtotal"] = self.line_subtotal
            payload["total"] = self.total_with_tax
            return payload
        payload.update({
            "taxCode": self.tax_code.value,
            "taxRate": self.tax_rate,
            "taxAmount": self.tax_amount,
            "subtotal": self.line_subtotal,
            "totalWithTax": self.total_with_tax,
        })
        return payload


@dataclass(frozen=True)
class Payment:
    """A payment recorded against an invoice or a purchase."""
    id: UUID
    amount: Decimal
    payment_method: str
    paid_on: date
    reference: str | None = None
    notes: str | None = None

    def to_payload(self) -> dict[str, Any]:
        return {
            "amount": self.amount,
            "paymentMethod": self.payment_method,
            "paidOn": self.paid_on.isoformat(),
            "reference": self.reference,
            "notes": self.notes,
        }


def stored_totals(document: Any) -> DocumentTotals:
    """The DocumentTotals a persisted document was saved with (lines omitted)."""
    return DocumentTotals(
        total_bracket_a=document.total_bracket_a,
        total_bracket_b=document.total_bracket_b,
        tax_bracket_a=document.tax_bracket_a,
        tax_bracket_b=document.tax_bracket_b,
        subtotal=document.subtotal,
        total_discount=document.total_discount,
        total_tax=document.total_tax,
        grand_total=document.grand_total,
        rounded_total=document.rounded_amount,
        currency=document.currency,
    )
