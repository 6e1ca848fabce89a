"""
Quotation Module Service - drafts quotations and converts them to invoices.

Quotations run through the same Document Totals Engine as invoices; their
rows default to tax code B and they are shown without the bracket split.
Conversion hands the quotation's lines to ``InvoiceService.create`` so the
resulting invoice is checked for stock and numbered like any other.
The caller owns the transaction boundary.
"""

from __future__ import annotations

from datetime import date, timedelta
from typing import TYPE_CHECKING, Sequence
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.orm import Session

from billing_config import get_active_config
from billing_config.schema import BillingConfig
from billing_engines.totals import DocumentTotals, TaxCode
from billing_kernel.exceptions import DocumentNotFoundError
from billing_kernel.logging_config import LogContext, get_logger
from billing_modules._document_helpers import (
    build_line_models,
    next_document_number,
    prepare_lines,
    require_currency,
    require_party,
    require_status,
)
from billing_modules._document_models import DocumentLineInput
from billing_modules.directory.models import Catalog, PartyDirectory
from billing_modules.invoices.models import Invoice
from billing_modules.quotations.models import (
    Quotation,
    QuotationStatus,
    QuotationSummary,
    summarize_quotations,
)
from billing_modules.quotations.orm import QuotationLineModel, QuotationModel
from billing_modules.quotations.workflows import (
    DELETABLE_STATES,
    QUOTATION_WORKFLOW,
    UPDATABLE_STATES,
)
from billing_services.permissions import Permission
from billing_services.session import AuthContext

if TYPE_CHECKING:
    from billing_modules.invoices.service import InvoiceService

logger = get_logger("modules.quotations.service")

NUMBER_PREFIX = "QT"
CATALOG_AMOUNT = "unit_price"

# Due date of an invoice converted from a quotation, when none is given
CONVERTED_INVOICE_DUE_DAYS = 30


class QuotationService:
    """Quotation operations, permission-checked through ``auth``."""

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
        self._default_tax_code = TaxCode.parse(self._config.quotation_default_tax_code)

    def preview(
        self,
        lines: Sequence[DocumentLineInput],
        currency: str | None = None,
    ) -> DocumentTotals:
        self._auth.require(Permission.QUOTATIONS_READ)
        prepared = prepare_lines(lines, self._catalog, self._default_tax_code, CATALOG_AMOUNT)
        return self._calculator.compute(
            [p.item for p in prepared],
            currency=require_currency(self._config, currency),
        )

    def create(
        self,
        client_id: str,
        lines: Sequence[DocumentLineInput],
        currency: str | None = None,
        quotation_date: date | None = None,
        valid_until: date | None = None,
        company_tin: str | None = None,
        terms: str | None = None,
        notes: str | None = None,
    ) -> Quotation:
        """
        Create a draft quotation.

        ``valid_until`` defaults to the quotation date plus the configured
        validity period.

        Raises:
            EmptyRequiredFieldError: no client, no lines, or a line without
                a product.
            InvalidLineItemError / InconsistentTaxCodeError: from the engine.
            InvalidCurrencyError: currency not accepted.
        """
        self._auth.require(Permission.QUOTATIONS_CREATE)

        client = self._directory.get_client(client_id) if client_id else None
        require_party(client_id, client, "client")
        prepared = prepare_lines(lines, self._catalog, self._default_tax_code, CATALOG_AMOUNT)

        doc_currency = require_currency(self._config, currency)
        totals = self._calculator.compute([p.item for p in prepared], currency=doc_currency)

        issued_on = quotation_date or date.today()
        if valid_until is None:
            valid_until = issued_on + timedelta(days=self._config.quotation_validity_days)

        model = QuotationModel(
            quotation_number=next_document_number(
                self._session, QuotationModel.quotation_number, NUMBER_PREFIX
            ),
            client_id=client.id,
            customer_name=client.name,
            company_tin=company_tin if company_tin is not None else client.tax_id,
            quotation_date=issued_on,
            valid_until=valid_until,
            status=QuotationStatus.DRAFT.value,
            terms=terms if terms is not None else self._config.default_terms_text,
            notes=notes,
            created_by_id=self._auth.actor_id,
        )
        model.apply_totals(totals)
        model.lines = build_line_models(
            QuotationLineModel, prepared, totals, self._auth.actor_id
        )

        self._session.add(model)
        self._session.flush()

        logger.info("quotation_created", extra={
            "quotation_id": str(model.id),
            "quotation_number": model.quotation_number,
            "client_id": client.id,
            "line_count": len(prepared),
            "grand_total": str(totals.grand_total),
        })
        return model.to_dto()

    def update(
        self,
        quotation_id: UUID,
        lines: Sequence[DocumentLineInput],
        valid_until: date | None = None,
        company_tin: str | None = None,
        terms: str | None = None,
        notes: str | None = None,
    ) -> Quotation:
        """
        Replace the lines of a draft or sent quotation and recompute it.

        Header fields left as None keep their current value.
        """
        self._auth.require(Permission.QUOTATIONS_UPDATE)
        model = self._load(quotation_id)
        require_status(QUOTATION_WORKFLOW, model.status, UPDATABLE_STATES, "update")

        prepared = prepare_lines(lines, self._catalog, self._default_tax_code, CATALOG_AMOUNT)
        totals = self._calculator.compute([p.item for p in prepared], currency=model.currency)

        model.apply_totals(totals)
        model.lines = build_line_models(
            QuotationLineModel, prepared, totals, self._auth.actor_id
        )
        if valid_until is not None:
            model.valid_until = valid_until
        if company_tin is not None:
            model.company_tin = company_tin
        if terms is not None:
            model.terms = terms
        if notes is not None:
            model.notes = notes
        model.updated_by_id = self._auth.actor_id
        self._session.flush()

        logger.info("quotation_updated", extra={
            "quotation_number": model.quotation_number,
            "line_count": len(prepared),
            "grand_total": str(totals.grand_total),
        })
        return model.to_dto()

    def get(self, quotation_id: UUID) -> Quotation:
        self._auth.require(Permission.QUOTATIONS_READ)
        return self._load(quotation_id).to_dto()

    def list_quotations(self, status: QuotationStatus | None = None) -> list[Quotation]:
        self._auth.require(Permission.QUOTATIONS_READ)
        stmt = select(QuotationModel).order_by(QuotationModel.quotation_number)
        if status is not None:
            stmt = stmt.where(QuotationModel.status == status.value)
        return [m.to_dto() for m in self._session.scalars(stmt)]

    def summary(self) -> QuotationSummary:
        return summarize_quotations(self.list_quotations())

    def available_actions(self, quotation_id: UUID) -> tuple[str, ...]:
        self._auth.require(Permission.QUOTATIONS_READ)
        status = self._load(quotation_id).status
        actions = QUOTATION_WORKFLOW.available_actions(status)
        if status in UPDATABLE_STATES:
            actions += ("update",)
        if status in DELETABLE_STATES:
            actions += ("delete",)
        return actions

    def send(self, quotation_id: UUID) -> Quotation:
        return self._transition(quotation_id, "send")

    def approve(self, quotation_id: UUID) -> Quotation:
        return self._transition(quotation_id, "approve")

    def reject(self, quotation_id: UUID) -> Quotation:
        return self._transition(quotation_id, "reject")

    def expire(self, quotation_id: UUID) -> Quotation:
        return self._transition(quotation_id, "expire")

    def convert_to_invoice(
        self,
        quotation_id: UUID,
        invoice_service: InvoiceService,
        due_date: date | None = None,
    ) -> Invoice:
        """
        Create a draft invoice from an approved quotation.

        The invoice takes the quotation's client, currency, lines, terms
        and notes; its due date defaults to thirty days from today.

        Raises:
            InvalidTransitionError: quotation is not approved.
            InsufficientStockError: from invoice creation.
        """
        self._auth.require(Permission.QUOTATIONS_UPDATE)
        model = self._load(quotation_id)
        transition = QUOTATION_WORKFLOW.resolve(model.status, "convert")

        with LogContext.bind(document_id=str(model.id)):
            quotation = model.to_dto()
            invoice = invoice_service.create(
                client_id=quotation.client_id,
                lines=[line.to_input() for line in quotation.lines],
                currency=quotation.currency,
                due_date=due_date or date.today() + timedelta(days=CONVERTED_INVOICE_DUE_DAYS),
                terms=quotation.terms,
                notes=quotation.notes,
                quotation_id=quotation.id,
            )

            model.status = transition.to_state
            model.converted_invoice_id = invoice.id
            model.updated_by_id = self._auth.actor_id
            self._session.flush()

            logger.info("quotation_converted", extra={
                "quotation_number": model.quotation_number,
                "invoice_id": str(invoice.id),
                "invoice_number": invoice.invoice_number,
            })
        return invoice

    def delete(self, quotation_id: UUID) -> None:
        """Delete a draft quotation."""
        self._auth.require(Permission.QUOTATIONS_DELETE)
        model = self._load(quotation_id)
        require_status(QUOTATION_WORKFLOW, model.status, DELETABLE_STATES, "delete")
        self._session.delete(model)
        self._session.flush()
        logger.info("quotation_deleted", extra={"quotation_number": model.quotation_number})

    def _load(self, quotation_id: UUID) -> QuotationModel:
        model = self._session.get(QuotationModel, quotation_id)
        if model is None:
            raise DocumentNotFoundError("quotation", str(quotation_id))
        return model

    def _transition(self, quotation_id: UUID, action: str) -> Quotation:
        self._auth.require(Permission.QUOTATIONS_UPDATE)
        model = self._load(quotation_id)
        transition = QUOTATION_WORKFLOW.resolve(model.status, action)

        from_status = model.status
        model.status = transition.to_state
        model.updated_by_id = self._auth.actor_id
        self._session.flush()

        logger.info("quotation_status_changed", extra={
            "quotation_id": str(model.id),
            "quotation_number": model.quotation_number,
            "action": action,
            "from_status": from_status,
            "to_status": model.status,
        })
        return model.to_dto()
