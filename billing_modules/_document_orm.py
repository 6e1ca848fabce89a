"""
Shared Document ORM Columns (``billing_modules._document_orm``).

Responsibility
--------------
Declarative mixins holding the columns every document kind stores the
same way: computed totals, line figures and payments.  Concrete models in
``invoices/orm.py``, ``purchases/orm.py`` and ``quotations/orm.py`` combine
them with ``TrackedBase`` and add their own header columns and foreign
keys.

Architecture position
---------------------
**Modules layer** -- persistence.  Imports from ``billing_kernel.db`` and
the engines' result types.  MUST NOT be imported by ``billing_kernel``.
"""

from datetime import date
from decimal import Decimal

from sqlalchemy import Date
from sqlalchemy.orm import Mapped, mapped_column

from billing_engines.totals import DocumentTotals, LineItemResult, TaxCode
from billing_kernel.db.types import (
    Currency,
    ExternalRef,
    Label,
    LongText,
    Money,
    Quantity,
    Rate,
    ShortCode,
)
from billing_modules._document_models import DocumentLine, Payment

_ZERO = Decimal("0")


class DocumentTotalsColumns:
    """
    Header columns carrying the engine's document totals.

    Guarantees:
        - Totals are only ever written together, from one DocumentTotals.
        - status stored as string enum value.
    """

    status: Mapped[ShortCode] = mapped_column(default="draft")
    currency: Mapped[Currency] = mapped_column(nullable=False)
    subtotal: Mapped[Money] = mapped_column(default=_ZERO)
    total_discount: Mapped[Money] = mapped_column(default=_ZERO)
    total_tax: Mapped[Money] = mapped_column(default=_ZERO)
    total_bracket_a: Mapped[Money] = mapped_column(default=_ZERO)
    total_bracket_b: Mapped[Money] = mapped_column(default=_ZERO)
    tax_bracket_a: Mapped[Money] = mapped_column(default=_ZERO)
    tax_bracket_b: Mapped[Money] = mapped_column(default=_ZERO)
    grand_total: Mapped[Money] = mapped_column(default=_ZERO)
    rounded_amount: Mapped[Money] = mapped_column(default=_ZERO)
    terms: Mapped[LongText | None] = mapped_column(nullable=True)
    notes: Mapped[LongText | None] = mapped_column(nullable=True)

    def apply_totals(self, totals: DocumentTotals) -> None:
        self.currency = totals.currency
        self.subtotal = totals.subtotal
        self.total_discount = totals.total_discount
        self.total_tax = totals.total_tax
        self.total_bracket_a = totals.total_bracket_a
        self.total_bracket_b = totals.total_bracket_b
        self.tax_bracket_a = totals.tax_bracket_a
        self.tax_bracket_b = totals.tax_bracket_b
        self.grand_total = totals.grand_total
        self.rounded_amount = totals.rounded_total


class PaymentTrackingColumns:
    """Header columns for documents that are paid in one or more instalments."""

    payment_terms: Mapped[ShortCode] = mapped_column(default="cash")
    due_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    amount_paid: Mapped[Money] = mapped_column(default=_ZERO)
    cancellation_reason: Mapped[LongText | None] = mapped_column(nullable=True)

    @property
    def balance(self) -> Decimal:
        """Outstanding amount: rounded_amount - amount_paid."""
        return self.rounded_amount - (self.amount_paid or _ZERO)


class DocumentLineColumns:
    """
    Columns of one document line.

    Guarantees:
        - Figures come from the engine's LineItemResult, never recomputed.
        - line_number is 1-based, in form order.
    """

    line_number: Mapped[int] = mapped_column(nullable=False)
    product_id: Mapped[ExternalRef] = mapped_column(nullable=False)
    item_code: Mapped[ShortCode] = mapped_column(default="")
    description: Mapped[Label] = mapped_column(default="")
    quantity: Mapped[Quantity] = mapped_column(nullable=False)
    unit: Mapped[ShortCode] = mapped_column(default="pcs")
    unit_amount: Mapped[Money] = mapped_column(nullable=False)
    discount: Mapped[Money] = mapped_column(default=_ZERO)
    tax_code: Mapped[ShortCode] = mapped_column(nullable=False)
    tax_rate: Mapped[Rate] = mapped_column(default=_ZERO)
    tax_amount: Mapped[Money] = mapped_column(default=_ZERO)
    line_subtotal: Mapped[Money] = mapped_column(nullable=False)
    total_with_tax: Mapped[Money] = mapped_column(nullable=False)

    def fill(
        self,
        line_number: int,
        product_id: str,
        item_code: str,
        description: str,
        unit: str,
        quantity: Decimal,
        unit_amount: Decimal,
        result: LineItemResult,
    ) -> None:
        self.line_number = line_number
        self.product_id = product_id
        self.item_code = item_code
        self.description = description
        self.unit = unit
        self.quantity = quantity
        self.unit_amount = unit_amount
        self.discount = result.discount
        self.tax_code = result.tax_code.value
        self.tax_rate = result.tax_rate
        self.tax_amount = result.tax_amount
        self.line_subtotal = result.line_subtotal
        self.total_with_tax = result.total_with_tax

    def to_dto(self) -> DocumentLine:
        """Convert ORM model to frozen dataclass."""
        return DocumentLine(
            id=self.id,
            line_number=self.line_number,
            product_id=self.product_id,
            item_code=self.item_code,
            description=self.description,
            quantity=self.quantity,
            unit=self.unit,
            unit_amount=self.unit_amount,
            discount=self.discount,
            tax_code=TaxCode.parse(self.tax_code),
            tax_rate=self.tax_rate,
            tax_amount=self.tax_amount,
            line_subtotal=self.line_subtotal,
            total_with_tax=self.total_with_tax,
        )


class PaymentColumns:
    """Columns of one recorded payment."""

    amount: Mapped[Money] = mapped_column(nullable=False)
    payment_method: Mapped[ShortCode] = mapped_column(nullable=False)
    paid_on: Mapped[date] = mapped_column(Date, nullable=False)
    reference: Mapped[Label | None] = mapped_column(nullable=True)
    notes: Mapped[LongText | None] = mapped_column(nullable=True)

    def to_dto(self) -> Payment:
        """Convert ORM model to frozen dataclass."""
        return Payment(
            id=self.id,
            amount=self.amount,
            payment_method=self.payment_method,
            paid_on=self.paid_on,
            reference=self.reference,
            notes=self.notes,
        )
