"""
Purchase Module Service - builds, persists and advances purchase orders.

Same shape as the invoice service: lines resolved against the catalog,
figures from the Document Totals Engine, status from PURCHASE_WORKFLOW.
Purchases do not check stock; receiving a purchase marks its goods as
added to stock.  The caller owns the transaction boundary.
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
from billing_modules.purchases.models import (
    Purchase,
    PurchaseStatus,
    PurchaseSummary,
    summarize_purchases,
)
from billing_modules.purchases.orm import (
    PurchaseLineModel,
    PurchaseModel,
    PurchasePaymentModel,
)
from billing_modules.purchases.workflows import DELETABLE_STATES, PURCHASE_WORKFLOW
from billing_services.permissions import Permission
from billing_services.session import AuthContext

logger = get_logger("modules.purchases.service")

NUMBER_PREFIX = "PO"

# Rows without a unit cost are bought at the product's cost
CATALOG_AMOUNT = "unit_cost"


class PurchaseService:
    """Purchase order operations, permission-checked through ``auth``."""

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

    def preview(
        self,
        lines: Sequence[DocumentLineInput],
        currency: str | None = None,
    ) -> DocumentTotals:
        self._auth.require(Permission.PURCHASES_READ)
        prepared = prepare_lines(lines, self._catalog, TaxCode.A, CATALOG_AMOUNT)
        return self._calculator.compute(
            [p.item for p in prepared],
            currency=require_currency(self._config, currency),
        )

    def create(
        self,
        supplier_id: str,
        lines: Sequence[DocumentLineInput],
        currency: str | None = None,
        payment_terms: str | None = None,
        purchase_date: date | None = None,
        due_date: date | None = None,
        expected_delivery_date: date | None = None,
        supplier_invoice_number: str | None = None,
        terms: str | None = None,
        notes: str | None = None,
    ) -> Purchase:
        """
        Create a draft purchase order.

        Raises:
            EmptyRequiredFieldError: no supplier, no lines, or a line
                without a product.
            InvalidLineItemError / InconsistentTaxCodeError: from the engine.
            InvalidCurrencyError: currency not accepted.
            InvalidPaymentError: unknown payment terms.
        """
        self._auth.require(Permission.PURCHASES_CREATE)

        supplier = self._directory.get_supplier(supplier_id) if supplier_id else None
        require_party(supplier_id, supplier, "supplier")
        prepared = prepare_lines(lines, self._catalog, TaxCode.A, CATALOG_AMOUNT)

        doc_currency = require_currency(self._config, currency)
        totals = self._calculator.compute([p.item for p in prepared], currency=doc_currency)

        terms_code = payment_terms or supplier.payment_terms
        ordered_on = purchase_date or date.today()
        if due_date is None:
            due_date = due_date_for(self._config, ordered_on, terms_code)

        model = PurchaseModel(
            purchase_number=next_document_number(
                self._session, PurchaseModel.purchase_number, NUMBER_PREFIX
            ),
            supplier_id=supplier.id,
            supplier_name=supplier.name,
            supplier_tin=supplier.tax_id,
            supplier_address=supplier.address,
            supplier_invoice_number=supplier_invoice_number,
            purchase_date=ordered_on,
            expected_delivery_date=expected_delivery_date,
            due_date=due_date,
            payment_terms=terms_code,
            status=PurchaseStatus.DRAFT.value,
            amount_paid=ZERO,
            stock_added=False,
            terms=terms,
            notes=notes,
            created_by_id=self._auth.actor_id,
        )
        model.apply_totals(totals)
        model.lines = build_line_models(
            PurchaseLineModel, prepared, totals, self._auth.actor_id
        )

        self._session.add(model)
        self._session.flush()

        logger.info("purchase_created", extra={
            "purchase_id": str(model.id),
            "purchase_number": model.purchase_number,
            "supplier_id": supplier.id,
            "line_count": len(prepared),
            "currency": doc_currency,
            "rounded_amount": str(totals.rounded_total),
        })
        return model.to_dto()

    def get(self, purchase_id: UUID) -> Purchase:
        self._auth.require(Permission.PURCHASES_READ)
        return self._load(purchase_id).to_dto()

    def list_purchases(self, status: PurchaseStatus | None = None) -> list[Purchase]:
        self._auth.require(Permission.PURCHASES_READ)
        stmt = select(PurchaseModel).order_by(PurchaseModel.purchase_number)
        if status is not None:
            stmt = stmt.where(PurchaseModel.status == status.value)
        return [m.to_dto() for m in self._session.scalars(stmt)]

    def summary(self) -> PurchaseSummary:
        return summarize_purchases(self.list_purchases())

    def available_actions(self, purchase_id: UUID) -> tuple[str, ...]:
        self._auth.require(Permission.PURCHASES_READ)
        status = self._load(purchase_id).status
        actions = PURCHASE_WORKFLOW.available_actions(status)
        if status in DELETABLE_STATES:
            actions += ("delete",)
        return actions

    def order(self, purchase_id: UUID) -> Purchase:
        return self._transition(purchase_id, "order")

    def receive(self, purchase_id: UUID, received_date: date | None = None) -> Purchase:
        """Mark the goods as received and added to stock."""
        return self._transition(purchase_id, "receive", received_date=received_date)

    def cancel(self, purchase_id: UUID, reason: str) -> Purchase:
        return self._transition(purchase_id, "cancel", reason=reason)

    def record_payment(
        self,
        purchase_id: UUID,
        amount: Decimal,
        payment_method: str,
        reference: str | None = None,
        notes: str | None = None,
        paid_on: date | None = None,
    ) -> Purchase:
        """
        Record a payment to the supplier.

        Raises:
            InvalidTransitionError: purchase is not received or partial.
            InvalidPaymentError: amount not positive, or method not accepted.
            OverpaymentError: amount exceeds the balance.
        """
        self._auth.require(Permission.PURCHASES_UPDATE)
        model = self._load(purchase_id)

        with LogContext.bind(document_id=str(model.id)):
            settlement = settle_payment(
                PURCHASE_WORKFLOW,
                model.status,
                model.rounded_amount,
                model.amount_paid,
                amount,
                payment_method,
                self._config.purchase_payment_methods,
            )
            model.payments.append(PurchasePaymentModel(
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

            logger.info("purchase_payment_recorded", extra={
                "purchase_number": model.purchase_number,
                "amount": str(settlement.amount),
                "payment_method": payment_method,
                "balance": str(settlement.balance),
                "from_status": from_status,
                "to_status": model.status,
            })
        return model.to_dto()

    def delete(self, purchase_id: UUID) -> None:
        """Delete a draft purchase."""
        self._auth.require(Permission.PURCHASES_DELETE)
        model = self._load(purchase_id)
        require_status(PURCHASE_WORKFLOW, model.status, DELETABLE_STATES, "delete")
        self._session.delete(model)
        self._session.flush()
        logger.info("purchase_deleted", extra={"purchase_number": model.purchase_number})

    def _load(self, purchase_id: UUID) -> PurchaseModel:
        model = self._session.get(PurchaseModel, purchase_id)
        if model is None:
            raise DocumentNotFoundError("purchase", str(purchase_id))
        return model

    def _transition(
        self,
        purchase_id: UUID,
        action: str,
        reason: str | None = None,
        received_date: date | None = None,
    ) -> Purchase:
        self._auth.require(Permission.PURCHASES_UPDATE)
        model = self._load(purchase_id)
        transition = PURCHASE_WORKFLOW.resolve(model.status, action)

        from_status = model.status
        model.status = transition.to_state
        if action == "receive":
            model.received_date = received_date or date.today()
            model.stock_added = True
        elif action == "cancel":
            model.cancellation_reason = reason
        model.updated_by_id = self._auth.actor_id
        self._session.flush()

        logger.info("purchase_status_changed", extra={
            "purchase_id": str(model.id),
            "purchase_number": model.purchase_number,
            "action": action,
            "from_status": from_status,
            "to_status": model.status,
        })
        return model.to_dto()
