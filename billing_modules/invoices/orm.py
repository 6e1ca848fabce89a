"""
Invoice ORM Models (``billing_modules.invoices.orm``).

Responsibility
--------------
SQLAlchemy persistence models for sales invoices.  Maps the frozen
dataclasses from ``models.py`` to the ``invoices``, ``invoice_lines`` and
``invoice_payments`` tables.

Architecture position
---------------------
**Modules layer** -- persistence.  Imports from ``billing_kernel.db`` and
the shared document column mixins.  MUST NOT be imported by
``billing_kernel``.
"""

from datetime import date
from uuid import UUID

from sqlalchemy import Date, ForeignKey, Index, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from billing_kernel.db.base import TrackedBase
from billing_kernel.db.types import ExternalRef, Label, LongText, ShortCode
from billing_modules._document_orm import (
    DocumentLineColumns,
    DocumentTotalsColumns,
    PaymentColumns,
    PaymentTrackingColumns,
)


class InvoiceModel(DocumentTotalsColumns, PaymentTrackingColumns, TrackedBase):
    """
    ORM model for sales invoices.

    Maps to the ``Invoice`` frozen dataclass.  Lines and payments are stored
    in child tables.

    Guarantees:
        - invoice_number is unique (uq_invoices_invoice_number).
        - Monetary fields use Decimal (Numeric(38,9)).
        - status stored as string enum value.
    """

    __tablename__ = "invoices"

    __table_args__ = (
        UniqueConstraint("invoice_number", name="uq_invoices_invoice_number"),
        Index("idx_invoices_client_id", "client_id"),
        Index("idx_invoices_status", "status"),
        Index("idx_invoices_due_date", "due_date"),
        Index("idx_invoices_quotation_id", "quotation_id"),
    )

    invoice_number: Mapped[ShortCode] = mapped_column(nullable=False)
    client_id: Mapped[ExternalRef] = mapped_column(nullable=False)
    customer_name: Mapped[Label] = mapped_column(nullable=False)
    customer_tin: Mapped[ShortCode | None] = mapped_column(nullable=True)
    customer_address: Mapped[Label | None] = mapped_column(nullable=True)
    quotation_id: Mapped[UUID | None] = mapped_column(nullable=True)
    invoice_date: Mapped[date] = mapped_column(Date, nullable=False)

    # Fiscal receipt metadata
    sdc_id: Mapped[ShortCode | None] = mapped_column(nullable=True)
    receipt_number: Mapped[ShortCode | None] = mapped_column(nullable=True)
    receipt_signature: Mapped[Label | None] = mapped_column(nullable=True)
    internal_data: Mapped[LongText | None] = mapped_column(nullable=True)
    mrc_code: Mapped[ShortCode | None] = mapped_column(nullable=True)

    lines: Mapped[list["InvoiceLineModel"]] = relationship(
        back_populates="invoice",
        cascade="all, delete-orphan",
        order_by="InvoiceLineModel.line_number",
        lazy="selectin",
    )
    payments: Mapped[list["InvoicePaymentModel"]] = relationship(
        back_populates="invoice",
        cascade="all, delete-orphan",
        order_by="InvoicePaymentModel.paid_on",
        lazy="selectin",
    )

    def to_dto(self):
        """Convert ORM model to frozen dataclass."""
        from billing_modules.invoices.models import Invoice, InvoiceStatus, ReceiptMetadata

        return Invoice(
            id=self.id,
            invoice_number=self.invoice_number,
            client_id=self.client_id,
            customer_name=self.customer_name,
            invoice_date=self.invoice_date,
            due_date=self.due_date,
            currency=self.currency,
            payment_terms=self.payment_terms,
            subtotal=self.subtotal,
            total_discount=self.total_discount,
            total_tax=self.total_tax,
            total_bracket_a=self.total_bracket_a,
            total_bracket_b=self.total_bracket_b,
            tax_bracket_a=self.tax_bracket_a,
            tax_bracket_b=self.tax_bracket_b,
            grand_total=self.grand_total,
            rounded_amount=self.rounded_amount,
            amount_paid=self.amount_paid,
            status=InvoiceStatus(self.status),
            customer_tin=self.customer_tin,
            customer_address=self.customer_address,
            quotation_id=self.quotation_id,
            terms=self.terms,
            notes=self.notes,
            cancellation_reason=self.cancellation_reason,
            receipt=ReceiptMetadata(
                sdc_id=self.sdc_id,
                receipt_number=self.receipt_number,
                receipt_signature=self.receipt_signature,
                internal_data=self.internal_data,
                mrc_code=self.mrc_code,
            ),
            lines=tuple(line.to_dto() for line in self.lines),
            payments=tuple(p.to_dto() for p in self.payments),
        )

    def __repr__(self) -> str:
        return (
            f"<InvoiceModel {self.invoice_number} "
            f"status={self.status} total={self.rounded_amount}>"
        )


class InvoiceLineModel(DocumentLineColumns, TrackedBase):
    """
    ORM model for invoice lines.

    Guarantees:
        - invoice_id FK to invoices.id.
        - unit_amount holds the unit price.
    """

    __tablename__ = "invoice_lines"

    __table_args__ = (
        Index("idx_invoice_lines_invoice_id", "invoice_id"),
        Index("idx_invoice_lines_product_id", "product_id"),
    )

    invoice_id: Mapped[UUID] = mapped_column(
        ForeignKey("invoices.id"), nullable=False
    )

    invoice: Mapped["InvoiceModel"] = relationship(back_populates="lines")

    def __repr__(self) -> str:
        return f"<InvoiceLineModel line={self.line_number} total={self.total_with_tax}>"


class InvoicePaymentModel(PaymentColumns, TrackedBase):
    """ORM model for payments recorded against an invoice."""

    __tablename__ = "invoice_payments"

    __table_args__ = (
        Index("idx_invoice_payments_invoice_id", "invoice_id"),
    )

    invoice_id: Mapped[UUID] = mapped_column(
        ForeignKey("invoices.id"), nullable=False
    )

    invoice: Mapped["InvoiceModel"] = relationship(back_populates="payments")

    def __repr__(self) -> str:
        return f"<InvoicePaymentModel amount={self.amount} method={self.payment_method}>"
