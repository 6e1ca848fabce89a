"""
Purchase ORM Models (``billing_modules.purchases.orm``).

Maps ``Purchase`` to the ``purchases``, ``purchase_lines`` and
``purchase_payments`` tables.  Line ``unit_amount`` holds the unit cost.
"""

from datetime import date
from uuid import UUID

from sqlalchemy import Date, ForeignKey, Index, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from billing_kernel.db.base import TrackedBase
from billing_kernel.db.types import ExternalRef, Label, ShortCode
from billing_modules._document_orm import (
    DocumentLineColumns,
    DocumentTotalsColumns,
    PaymentColumns,
    PaymentTrackingColumns,
)


class PurchaseModel(DocumentTotalsColumns, PaymentTrackingColumns, TrackedBase):
    """
    ORM model for purchase orders.

    Guarantees:
        - purchase_number is unique (uq_purchases_purchase_number).
        - stock_added flips once, when the goods are received.
    """

    __tablename__ = "purchases"

    __table_args__ = (
        UniqueConstraint("purchase_number", name="uq_purchases_purchase_number"),
        Index("idx_purchases_supplier_id", "supplier_id"),
        Index("idx_purchases_status", "status"),
    )

    purchase_number: Mapped[ShortCode] = mapped_column(nullable=False)
    supplier_id: Mapped[ExternalRef] = mapped_column(nullable=False)
    supplier_name: Mapped[Label] = mapped_column(nullable=False)
    supplier_tin: Mapped[ShortCode | None] = mapped_column(nullable=True)
    supplier_address: Mapped[Label | None] = mapped_column(nullable=True)
    supplier_invoice_number: Mapped[ShortCode | None] = mapped_column(nullable=True)
    purchase_date: Mapped[date] = mapped_column(Date, nullable=False)
    expected_delivery_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    received_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    stock_added: Mapped[bool] = mapped_column(default=False)

    lines: Mapped[list["PurchaseLineModel"]] = relationship(
        back_populates="purchase",
        cascade="all, delete-orphan",
        order_by="PurchaseLineModel.line_number",
        lazy="selectin",
    )
    payments: Mapped[list["PurchasePaymentModel"]] = relationship(
        back_populates="purchase",
        cascade="all, delete-orphan",
        order_by="PurchasePaymentModel.paid_on",
        lazy="selectin",
    )

    def to_dto(self):
        from billing_modules.purchases.models import Purchase, PurchaseStatus

        return Purchase(
            id=self.id,
            purchase_number=self.purchase_number,
            supplier_id=self.supplier_id,
            supplier_name=self.supplier_name,
            purchase_date=self.purchase_date,
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
            status=PurchaseStatus(self.status),
            supplier_tin=self.supplier_tin,
            supplier_address=self.supplier_address,
            supplier_invoice_number=self.supplier_invoice_number,
            expected_delivery_date=self.expected_delivery_date,
            received_date=self.received_date,
            stock_added=self.stock_added,
            terms=self.terms,
            notes=self.notes,
            cancellation_reason=self.cancellation_reason,
            lines=tuple(line.to_dto() for line in self.lines),
            payments=tuple(p.to_dto() for p in self.payments),
        )

    def __repr__(self) -> str:
        return (
            f"<PurchaseModel {self.purchase_number} "
            f"status={self.status} total={self.rounded_amount}>"
        )


class PurchaseLineModel(DocumentLineColumns, TrackedBase):
    """ORM model for purchase lines."""

    __tablename__ = "purchase_lines"

    __table_args__ = (
        Index("idx_purchase_lines_purchase_id", "purchase_id"),
    )

    purchase_id: Mapped[UUID] = mapped_column(
        ForeignKey("purchases.id"), nullable=False
    )

    purchase: Mapped["PurchaseModel"] = relationship(back_populates="lines")


class PurchasePaymentModel(PaymentColumns, TrackedBase):
    """ORM model for payments made to the supplier."""

    __tablename__ = "purchase_payments"

    __table_args__ = (
        Index("idx_purchase_payments_purchase_id", "purchase_id"),
    )

    purchase_id: Mapped[UUID] = mapped_column(
        ForeignKey("purchases.id"), nullable=False
    )

    purchase: Mapped["PurchaseModel"] = relationship(back_populates="payments")
