"""
Invoice Module Service - builds, persists and advances sales invoices.

Thin glue layer that:
1. Resolves form rows against the catalog and checks stock
2. Calls the Document Totals Engine for every figure on the invoice
3. Persists the invoice, its lines and its payments
4. Moves the invoice through INVOICE_WORKFLOW

All computation lives in the engine.  The caller owns the transaction
boundary: this service flushes, the caller commits (``session_scope()``).

Usage:
    service = InvoiceService(session, auth, catalog, directory)
    invoice = service.create(
        client_id="c-1",
        lines=[DocumentLineInput("p-1", Decimal("2"), Decimal("1000"), tax_code="B")],
    )
    service.confirm(invoice.id)
    service.record_payment(invoice.id, Decimal("2360"), "cash")
"""

from __future__ import annotations

from datetime import date
from decimal import Decimal
from typing import Sequence
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.orm import Session

from billing_config import get_active_config
from billing_config.schema import BillingConfig
from billing_engines.totals import DocumentTotals, TaxCode
from billing_kernel.domain.values import ZERO
from billing_kernel.exceptions import DocumentNotFoundError
from billing_kernel.logging_config import LogContext, get_logger
from billing_modules._document_helpers import (
    build_line_models,
    check_stock,
    due_date_for,
    next_document_number,
    prepare_lines,
    require_currency,
    require_party,
    require_status,
    settle_payment,
)
from billing_modules._document_models import DocumentLineInput
from billing_modules.directory.models import Catalog, PartyDirectory
from billing_modules.invoices.models import (
    Invoice,
    InvoiceStatus,
    InvoiceSummary,
    ReceiptMetadata,
    summarize_invoices,
)
from billing_modules.invoices.orm import (
    InvoiceLineModel,
    InvoiceModel,
    InvoicePaymentModel,
)
from billing_modules.invoices.workflows import (
    DELETABLE_STATES,
    INVOICE_WORKFLOW,
    RECEIPT_STATES,
)
from billing_services.permissions import Permission
from billing_services.session import AuthContext

logger = get_logger("modules.invoices.service")

NUMBER_PREFIX = "INV"

# Product field a row without a unit price is filled from
CATALOG_AMOUNT = "unit_price"


class InvoiceService:
    """
    Sales invoice operations.

    Every call checks the caller's permission through ``auth`` before
    touching the session.
    """

    def __init__(
        self,
        session: Session,
        auth: AuthContext,
        catalog: Catalog,
        directory: PartyDirectory,
        config: BillingConfig | None = None,
    ):
        self._session = session
        self._auth = auth
        self._catalog = catalog
        self._directory = directory
        self._config = config or get_active_config()
        self._calculator = self._config.calculator()

    # =========================================================================
    # Creation
    # =========================================================================

    def preview(
        self,
        lines: Sequence[DocumentLineInput],
        currency: str | None = None,
    ) -> DocumentTotals:
        """Totals of an invoice form without saving it."""
        self._auth.require(Permission.INVOICES_READ)
        prepared = prepare_lines(lines, self._catalog, TaxCode.A, CATALOG_AMOUNT)
        return self._calculator.compute(
            [p.item for p in prepared],
            currency=require_currency(self._config, currency),
        )

    def create(
        self,
        client_id: str,
        lines: Sequence[DocumentLineInput],
        currency: str | None = None,
        payment_terms: str | None = None,
        invoice_date: date | None = None,
        due_date: date | None = None,
        terms: str | None = None,
        notes: str | None = None,
        quotation_id: UUID | None = None,
    ) -> Invoice:
        """
        Create a draft invoice.

        Raises:
            EmptyRequiredFieldError: no client, no lines, or a line without
                a product.
            InsufficientStockError: a line asks for more than is in stock.
            InvalidLineItemError / InconsistentTaxCodeError: from the engine.
            InvalidCurrencyError: currency not accepted.
            InvalidPaymentError: unknown payment terms.
        """
        self._auth.require(Permission.INVOICES_CREATE)

        client = self._directory.get_client(client_id) if client_id else None
        require_party(client_id, client, "client")
        prepared = prepare_lines(lines, self._catalog, TaxCode.A, CATALOG_AMOUNT)
        check_stock(prepared)

        doc_currency = require_currency(self._config, currency)
        totals = self._calculator.compute([p.item for p in prepared], currency=doc_currency)

        terms_code = payment_terms or client.payment_terms
        issued_on = invoice_date or date.today()
        if due_date is None:
            due_date = due_date_for(self._config, issued_on, terms_code)

        model = InvoiceModel(
            invoice_number=next_document_number(
                self._session, InvoiceModel.invoice_number, NUMBER_PREFIX
            ),
            client_id=client.id,
            customer_name=client.name,
            customer_tin=client.tax_id,
            customer_address=client.address,
            quotation_id=quotation_id,
            invoice_date=issued_on,
            due_date=due_date,
            payment_terms=terms_code,
            status=InvoiceStatus.DRAFT.value,
            amount_paid=ZERO,
            terms=terms if terms is not None else self._config.default_terms_text,
            notes=notes,
            created_by_id=self._auth.actor_id,
        )
        model.apply_totals(totals)
        model.lines = build_line_models(
            InvoiceLineModel, prepared, totals, self._auth.actor_id
        )

        self._session.add(model)
        self._session.flush()

        logger.info("invoice_created", extra={
            "invoice_id": str(model.id),
            "invoice_number": model.invoice_number,
            "client_id": client.id,
            "line_count": len(prepared),
            "currency": doc_currency,
            "rounded_amount": str(totals.rounded_total),
            "quotation_id": str(quotation_id) if quotation_id else None,
        })
        return model.to_dto()

    # =========================================================================
    # Queries
    # =========================================================================

    def get(self, invoice_id: UUID) -> Invoice:
        self._auth.require(Permission.INVOICES_READ)
        return self._load(invoice_id).to_dto()

    def list_invoices(self, status: InvoiceStatus | None = None) -> list[Invoice]:
        self._auth.require(Permission.INVOICES_READ)
        stmt = select(InvoiceModel).order_by(InvoiceModel.invoice_number)
        if status is not None:
            stmt = stmt.where(InvoiceModel.status == status.value)
        return [m.to_dto() for m in self._session.scalars(stmt)]

    def summary(self) -> InvoiceSummary:
        return summarize_invoices(self.list_invoices())

    def available_actions(self, invoice_id: UUID) -> tuple[str, ...]:
        """Actions the invoice's status offers, as shown on its detail view."""
        self._auth.require(Permission.INVOICES_READ)
        status = self._load(invoice_id).status
        actions = INVOICE_WORKFLOW.available_actions(status)
        if status in DELETABLE_STATES:
            actions += ("delete",)
        return actions

    # =========================================================================
    # Lifecycle
    # =========================================================================

    def confirm(self, invoice_id: UUID) -> Invoice:
        return self._transition(invoice_id, "confirm")

    def cancel(self, invoice_id: UUID, reason: str) -> Invoice:
        return self._transition(invoice_id, "cancel", reason=reason)

    def record_payment(
        self,
        invoice_id: UUID,
        amount: Decimal,
        payment_method: str,
        reference: str | None = None,
        notes: str | None = None,
        paid_on: date | None = None,
    ) -> Invoice:
        """
        Record a payment; the invoice becomes ``partial`` or ``paid``.

        Raises:
            InvalidTransitionError: invoice is not confirmed or partial.
            InvalidPaymentError: amount not positive, or method not accepted.
            OverpaymentError: amount exceeds the balance.
        """
        self._auth.require(Permission.INVOICES_UPDATE)
        model = self._load(invoice_id)

        with LogContext.bind(document_id=str(model.id)):
            settlement = settle_payment(
                INVOICE_WORKFLOW,
                model.status,
                model.rounded_amount,
                model.amount_paid,
                amount,
                payment_method,
                self._config.invoice_payment_methods,
            )
            model.payments.append(InvoicePaymentModel(
                amount=settlement.amount,
                payment_method=payment_method,
                paid_on=paid_on or date.today(),
                reference=reference,
                notes=notes,
                created_by_id=self._auth.actor_id,
            ))
            from_status = model.status
            model.amount_paid = settlement.amount_paid
            model.status = settlement.new_status
            model.updated_by_id = self._auth.actor_id
            self._session.flush()

            logger.info("invoice_payment_recorded", extra={
                "invoice_number": model.invoice_number,
                "amount": str(settlement.amount),
                "payment_method": payment_method,
                "balance": str(settlement.balance),
                "from_status": from_status,
                "to_status": model.status,
            })
        return model.to_dto()

    def save_receipt_metadata(self, invoice_id: UUID, receipt: ReceiptMetadata) -> Invoice:
        """Stamp fiscal receipt data on a confirmed (or later) invoice."""
        self._auth.require(Permission.INVOICES_UPDATE)
        model = self._load(invoice_id)
        require_status(INVOICE_WORKFLOW, model.status, RECEIPT_STATES, "save_receipt_metadata")

        model.sdc_id = receipt.sdc_id
        model.receipt_number = receipt.receipt_number
        model.receipt_signature = receipt.receipt_signature
        model.internal_data = receipt.internal_data
        model.mrc_code = receipt.mrc_code
        model.updated_by_id = self._auth.actor_id
        self._session.flush()

        logger.info("invoice_receipt_saved", extra={
            "invoice_number": model.invoice_number,
            "receipt_number": receipt.receipt_number,
        })
        return model.to_dto()

    def delete(self, invoice_id: UUID) -> None:
        """Delete a draft invoice."""
        self._auth.require(Permission.INVOICES_DELETE)
        model = self._load(invoice_id)
        require_status(INVOICE_WORKFLOW, model.status, DELETABLE_STATES, "delete")
        self._session.delete(model)
        self._session.flush()
        logger.info("invoice_deleted", extra={"invoice_number": model.invoice_number})

    # =========================================================================
    # Internals
    # =========================================================================

    def _load(self, invoice_id: UUID) -> InvoiceModel:
        model = self._session.get(InvoiceModel, invoice_id)
        if model is None:
            raise DocumentNotFoundError("invoice", str(invoice_id))
        return model

    def _transition(self, invoice_id: UUID, action: str, reason: str | None = None) -> Invoice:
        self._auth.require(Permission.INVOICES_UPDATE)
        model = self._load(invoice_id)
        transition = INVOICE_WORKFLOW.resolve(model.status, action)

        from_status = model.status
        model.status = transition.to_state
        if action == "cancel":
            model.cancellation_reason = reason
        model.updated_by_id = self._auth.actor_id
        self._session.flush()

        logger.info("invoice_status_changed", extra={
            "invoice_id": str(model.id),
            "invoice_number": model.invoice_number,
            "action": action,
            "from_status": from_status,
            "to_status": model.status,
        })
        return model.to_dto()
