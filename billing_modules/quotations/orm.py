"""
Quotation ORM Models (``billing_modules.quotations.orm``).

Maps ``Quotation`` to the ``quotations`` and ``quotation_lines`` tables.
Quotations are never paid, so only the totals columns are mixed in.
"""

from datetime import date
from uuid import UUID

from sqlalchemy import Date, ForeignKey, Index, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from billing_kernel.db.base import TrackedBase
from billing_kernel.db.types import ExternalRef, Label, ShortCode
from billing_modules._document_orm import DocumentLineColumns, DocumentTotalsColumns


class QuotationModel(DocumentTotalsColumns, TrackedBase):
    """
    ORM model for quotations.

    Guarantees:
        - quotation_number is unique (uq_quotations_quotation_number).
        - converted_invoice_id is set exactly when status is ``converted``.
    """

    __tablename__ = "quotations"

    __table_args__ = (
        UniqueConstraint("quotation_number", name="uq_quotations_quotation_number"),
        Index("idx_quotations_client_id", "client_id"),
        Index("idx_quotations_status", "status"),
    )

    quotation_number: Mapped[ShortCode] = mapped_column(nullable=False)
    client_id: Mapped[ExternalRef] = mapped_column(nullable=False)
    customer_name: Mapped[Label] = mapped_column(nullable=False)
    company_tin: Mapped[ShortCode | None] = mapped_column(nullable=True)
    quotation_date: Mapped[date] = mapped_column(Date, nullable=False)
    valid_until: Mapped[date] = mapped_column(Date, nullable=False)
    converted_invoice_id: Mapped[UUID | None] = mapped_column(nullable=True)

    lines: Mapped[list["QuotationLineModel"]] = relationship(
        back_populates="quotation",
        cascade="all, delete-orphan",
        order_by="QuotationLineModel.line_number",
        lazy="selectin",
    )

    def to_dto(self):
        from billing_modules.quotations.models import Quotation, QuotationStatus

        return Quotation(
            id=self.id,
            quotation_number=self.quotation_number,
            client_id=self.client_id,
            customer_name=self.customer_name,
            quotation_date=self.quotation_date,
            valid_until=self.valid_until,
            currency=self.currency,
            subtotal=self.subtotal,
            total_discount=self.total_discount,
            total_tax=self.total_tax,
            total_bracket_a=self.total_bracket_a,
            total_bracket_b=self.total_bracket_b,
            tax_bracket_a=self.tax_bracket_a,
            tax_bracket_b=self.tax_bracket_b,
            grand_total=self.grand_total,
            rounded_amount=self.rounded_amount,
            status=QuotationStatus(self.status),
            company_tin=self.company_tin,
            converted_invoice_id=self.converted_invoice_id,
            terms=self.terms,
            notes=self.notes,
            lines=tuple(line.to_dto() for line in self.lines),
        )

    def __repr__(self) -> str:
        return f"<QuotationModel {self.quotation_number} status={self.status}>"


class QuotationLineModel(DocumentLineColumns, TrackedBase):
    """ORM model for quotation lines."""

    __tablename__ = "quotation_lines"

    __table_args__ = (
        Index("idx_quotation_lines_quotation_id", "quotation_id"),
    )

    quotation_id: Mapped[UUID] = mapped_column(
        ForeignKey("quotations.id"), nullable=False
    )

    quotation: Mapped["QuotationModel"] = relationship(back_populates="lines")
