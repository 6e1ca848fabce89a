"""
Tests for the list-page summary cards of invoices, purchases and quotations.
"""

from decimal import Decimal

from billing_modules._document_models import DocumentLineInput
from billing_modules.invoices.models import summarize_invoices
from billing_modules.purchases.models import summarize_purchases
from billing_modules.quotations.models import summarize_quotations


def _row(quantity, amount, product_id="p-widget", tax_code="B"):
    return DocumentLineInput(
        product_id=product_id,
        quantity=Decimal(quantity),
        unit_amount=Decimal(amount),
        tax_code=tax_code,
    )


class TestInvoiceSummary:

    def test_empty(self):
        summary = summarize_invoices([])
        assert summary.count == 0
        assert summary.revenue == Decimal("0")

    def test_by_status(self, invoice_service):
        paid = invoice_service.create("client-1", [_row("1", "1000")])  # 1180
        invoice_service.confirm(paid.id)
        invoice_service.record_payment(paid.id, Decimal("1180"), "cash")

        partial = invoice_service.create("client-1", [_row("2", "1000")])  # 2360
        invoice_service.confirm(partial.id)
        invoice_service.record_payment(partial.id, Decimal("360"), "cash")

        invoice_service.create("client-1", [_row("1", "500", tax_code="A")])  # draft 500

        cancelled = invoice_service.create("client-1", [_row("1", "100")])
        invoice_service.cancel(cancelled.id, "duplicate")

        summary = invoice_service.summary()
        assert summary.count == 4
        assert summary.revenue == Decimal("1180")
        assert summary.pending == Decimal("2000")
        assert summary.draft_amount == Decimal("500")


class TestPurchaseSummary:

    def test_by_status(self, purchase_service):
        paid = purchase_service.create("supplier-1", [_row("1", "1000")])  # 1180
        purchase_service.receive(paid.id)
        purchase_service.record_payment(paid.id, Decimal("1180"), "cash")

        open_purchase = purchase_service.create("supplier-1", [_row("1", "500", tax_code="A")])
        purchase_service.receive(open_purchase.id)
        purchase_service.record_payment(open_purchase.id, Decimal("200"), "cash")

        cancelled = purchase_service.create("supplier-1", [_row("10", "1000")])
        purchase_service.cancel(cancelled.id, "wrong supplier")

        summary = purchase_service.summary()
        assert summary.count == 3
        assert summary.total == Decimal("1680")
        assert summary.paid == Decimal("1180")
        assert summary.due == Decimal("300")

    def test_empty(self):
        summary = summarize_purchases([])
        assert summary.total == summary.paid == summary.due == Decimal("0")


class TestQuotationSummary:

    def test_by_status(self, quotation_service):
        quotation_service.create("client-1", [_row("1", "1000")])  # 1180
        sent = quotation_service.create("client-1", [_row("1", "500")])  # 590
        quotation_service.send(sent.id)
        approved = quotation_service.create("client-1", [_row("1", "100")])  # 118
        quotation_service.send(approved.id)
        quotation_service.approve(approved.id)
        rejected = quotation_service.create("client-1", [_row("1", "10")])  # 11.8
        quotation_service.send(rejected.id)
        quotation_service.reject(rejected.id)

        summary = quotation_service.summary()
        assert summary.count == 4
        assert summary.pending_count == 2
        assert summary.accepted_count == 1
        assert summary.total_value == Decimal("1899.8")

    def test_empty(self):
        summary = summarize_quotations([])
        assert summary.count == 0
        assert summary.total_value == Decimal("0")
