"""
Tests for the Invoice Module Service.

Validates:
- Creation: totals from the engine, numbering, due dates, header defaults
- Form validation: client, lines, products, stock, currency, payment terms
- Lifecycle: confirm, payments (partial, paid, overpayment), cancel, delete
- Fiscal receipt metadata
- Permission checks
- Persistence payload field names
"""

from datetime import date, timedelta
from decimal import Decimal
from uuid import uuid4

import pytest
from sqlalchemy import update

from billing_kernel.exceptions import (
    DocumentNotFoundError,
    EmptyRequiredFieldError,
    InsufficientStockError,
    InvalidCurrencyError,
    InvalidLineItemError,
    InvalidPaymentError,
    InvalidTransitionError,
    OverpaymentError,
    PermissionDeniedError,
)
from billing_engines.totals import TaxCode
from billing_modules._document_models import DocumentLineInput
from billing_modules.invoices.models import InvoiceStatus, ReceiptMetadata
from billing_modules.invoices.orm import InvoiceModel

DOC_DATE = date(2026, 3, 2)


@pytest.fixture
def invoice(invoice_service, line):
    """A draft invoice: 2 x 1000 at B plus 1 x 500 less 100 at A."""
    return invoice_service.create(
        client_id="client-1",
        lines=[
            line(),
            DocumentLineInput(
                product_id="p-gadget",
                quantity=Decimal("1"),
                unit_amount=Decimal("500"),
                discount=Decimal("100"),
                tax_code="A",
            ),
        ],
        invoice_date=DOC_DATE,
    )


class TestCreate:

    def test_totals(self, invoice):
        assert invoice.subtotal == Decimal("2500")
        assert invoice.total_discount == Decimal("100")
        assert invoice.total_bracket_a == Decimal("400")
        assert invoice.total_bracket_b == Decimal("2000")
        assert invoice.tax_bracket_b == Decimal("360")
        assert invoice.total_tax == Decimal("360")
        assert invoice.grand_total == Decimal("2760")
        assert invoice.rounded_amount == Decimal("2760.00")
        assert invoice.balance == Decimal("2760")

    def test_header(self, invoice):
        assert invoice.invoice_number == "INV-000001"
        assert invoice.status is InvoiceStatus.DRAFT
        assert invoice.customer_name == "Kigali Traders"
        assert invoice.customer_tin == "101234567"
        assert invoice.currency == "FRW"
        assert invoice.payment_terms == "credit_30"
        assert invoice.due_date == DOC_DATE + timedelta(days=30)
        assert invoice.terms == "Payment due within 30 days"

    def test_lines(self, invoice):
        first, second = invoice.lines
        assert first.line_number == 1
        assert first.description == "Widget - 2 pcs"
        assert first.item_code == "WID-001"
        assert first.tax_code is TaxCode.B
        assert first.tax_amount == Decimal("360")
        assert first.total_with_tax == Decimal("2360")
        assert second.tax_code is TaxCode.A
        assert second.total_with_tax == Decimal("400")

    def test_numbers_increase(self, invoice_service, invoice, line):
        second = invoice_service.create("client-1", [line()], invoice_date=DOC_DATE)
        assert second.invoice_number == "INV-000002"

    def test_numbers_past_six_digits(self, session, invoice_service, invoice, line):
        session.execute(
            update(InvoiceModel)
            .where(InvoiceModel.id == invoice.id)
            .values(invoice_number="INV-999999")
        )
        seventh_digit = invoice_service.create("client-1", [line()], invoice_date=DOC_DATE)
        assert seventh_digit.invoice_number == "INV-1000000"
        following = invoice_service.create("client-1", [line()], invoice_date=DOC_DATE)
        assert following.invoice_number == "INV-1000001"

    def test_line_priced_from_catalog(self, invoice_service):
        row = DocumentLineInput("p-widget", Decimal("2"), tax_code="B")
        created = invoice_service.create("client-1", [row], invoice_date=DOC_DATE)
        assert created.lines[0].unit_amount == Decimal("1000")
        assert created.grand_total == Decimal("2360")

    def test_rows_default_to_code_a(self, invoice_service, line):
        created = invoice_service.create("client-1", [line(tax_code=None)])
        assert created.lines[0].tax_code is TaxCode.A
        assert created.total_tax == Decimal("0")
        assert created.total_bracket_a == Decimal("2000")

    def test_cash_client_due_same_day(self, invoice_service, line):
        created = invoice_service.create("client-cash", [line()], invoice_date=DOC_DATE)
        assert created.due_date == DOC_DATE

    def test_explicit_terms_and_due_date(self, invoice_service, line):
        due = date(2026, 12, 31)
        created = invoice_service.create(
            "client-1", [line()], payment_terms="credit_7", due_date=due, terms="Net 7",
        )
        assert created.due_date == due
        assert created.payment_terms == "credit_7"
        assert created.terms == "Net 7"

    def test_currency(self, invoice_service, line):
        created = invoice_service.create("client-1", [line()], currency="usd")
        assert created.currency == "USD"

    def test_logs_creation(self, invoice_service, line, captured_logs):
        invoice_service.create("client-1", [line()])
        messages = [r["message"] for r in captured_logs()]
        assert "invoice_created" in messages
        assert "document_totals_computed" in messages


class TestCreateValidation:

    def test_missing_client(self, invoice_service, line):
        with pytest.raises(EmptyRequiredFieldError) as exc_info:
            invoice_service.create("", [line()])
        assert exc_info.value.field_name == "client"

    def test_unknown_client(self, invoice_service, line):
        with pytest.raises(EmptyRequiredFieldError):
            invoice_service.create("client-404", [line()])

    def test_no_lines(self, invoice_service):
        with pytest.raises(EmptyRequiredFieldError) as exc_info:
            invoice_service.create("client-1", [])
        assert exc_info.value.field_name == "items"

    def test_line_without_product(self, invoice_service, line):
        blank = DocumentLineInput(product_id="", quantity=Decimal("1"), unit_amount=Decimal("1"))
        with pytest.raises(EmptyRequiredFieldError) as exc_info:
            invoice_service.create("client-1", [line(), blank])
        assert exc_info.value.field_name == "product"
        assert exc_info.value.line_index == 1

    def test_unknown_product(self, invoice_service):
        row = DocumentLineInput(product_id="p-404", quantity=Decimal("1"), unit_amount=Decimal("1"))
        with pytest.raises(EmptyRequiredFieldError):
            invoice_service.create("client-1", [row])

    def test_insufficient_stock(self, invoice_service):
        row = DocumentLineInput(product_id="p-gadget", quantity=Decimal("6"), unit_amount=Decimal("500"))
        with pytest.raises(InsufficientStockError) as exc_info:
            invoice_service.create("client-1", [row])
        assert exc_info.value.product_name == "Gadget"
        assert exc_info.value.available == "5"
        assert exc_info.value.required == "6"

    def test_discount_above_subtotal(self, invoice_service, line):
        with pytest.raises(InvalidLineItemError) as exc_info:
            invoice_service.create("client-1", [line(), line("1", "100", "150")])
        assert exc_info.value.line_index == 1

    def test_currency_not_accepted(self, invoice_service, line):
        with pytest.raises(InvalidCurrencyError):
            invoice_service.create("client-1", [line()], currency="GBP")

    def test_unknown_payment_terms(self, invoice_service, line):
        with pytest.raises(InvalidPaymentError):
            invoice_service.create("client-1", [line()], payment_terms="credit_90")

    def test_nothing_persisted_on_failure(self, invoice_service, line):
        with pytest.raises(InvalidLineItemError):
            invoice_service.create("client-1", [line("1", "100", "150")])
        assert invoice_service.list_invoices() == []


class TestPreview:

    def test_matches_created_totals(self, invoice_service, line):
        rows = [line(), line("3", "250", "50", "None")]
        preview = invoice_service.preview(rows)
        created = invoice_service.create("client-1", rows)
        assert preview.grand_total == created.grand_total
        assert preview.total_bracket_b == created.total_bracket_b

    def test_does_not_check_stock(self, invoice_service):
        row = DocumentLineInput(product_id="p-cable", quantity=Decimal("10"), unit_amount=Decimal("250"))
        assert invoice_service.preview([row]).subtotal == Decimal("2500")

    def test_unit_price_from_catalog(self, invoice_service):
        row = DocumentLineInput("p-widget", Decimal("2"), unit_amount=None, tax_code="B")
        preview = invoice_service.preview([row])
        assert preview.subtotal == Decimal("2000")
        assert preview.grand_total == Decimal("2360")

    def test_explicit_unit_price_wins(self, invoice_service):
        row = DocumentLineInput("p-widget", Decimal("1"), Decimal("900"), tax_code="A")
        assert invoice_service.preview([row]).subtotal == Decimal("900")


class TestPayments:

    def test_partial_then_paid(self, invoice_service, invoice):
        invoice_service.confirm(invoice.id)

        partial = invoice_service.record_payment(invoice.id, Decimal("1000"), "cash")
        assert partial.status is InvoiceStatus.PARTIAL
        assert partial.amount_paid == Decimal("1000")
        assert partial.balance == Decimal("1760")

        paid = invoice_service.record_payment(
            invoice.id, Decimal("1760"), "mobile_money", reference="MM-77",
        )
        assert paid.status is InvoiceStatus.PAID
        assert paid.balance == Decimal("0")
        assert [p.amount for p in paid.payments] == [Decimal("1000"), Decimal("1760")]
        assert paid.payments[1].reference == "MM-77"

    def test_full_payment_in_one(self, invoice_service, invoice):
        invoice_service.confirm(invoice.id)
        paid = invoice_service.record_payment(invoice.id, Decimal("2760"), "bank_transfer")
        assert paid.status is InvoiceStatus.PAID

    def test_overpayment(self, invoice_service, invoice):
        invoice_service.confirm(invoice.id)
        with pytest.raises(OverpaymentError):
            invoice_service.record_payment(invoice.id, Decimal("2760.01"), "cash")

    def test_draft_takes_no_payment(self, invoice_service, invoice):
        with pytest.raises(InvalidTransitionError):
            invoice_service.record_payment(invoice.id, Decimal("10"), "cash")

    def test_paid_takes_no_payment(self, invoice_service, invoice):
        invoice_service.confirm(invoice.id)
        invoice_service.record_payment(invoice.id, Decimal("2760"), "cash")
        with pytest.raises(InvalidTransitionError):
            invoice_service.record_payment(invoice.id, Decimal("1"), "cash")

    @pytest.mark.parametrize("amount", [Decimal("0"), Decimal("-5"), "abc", 10.0])
    def test_invalid_amount(self, invoice_service, invoice, amount):
        invoice_service.confirm(invoice.id)
        with pytest.raises(InvalidPaymentError):
            invoice_service.record_payment(invoice.id, amount, "cash")

    def test_method_not_accepted(self, invoice_service, invoice):
        invoice_service.confirm(invoice.id)
        with pytest.raises(InvalidPaymentError):
            invoice_service.record_payment(invoice.id, Decimal("10"), "credit")


class TestLifecycle:

    def test_available_actions(self, invoice_service, invoice):
        assert invoice_service.available_actions(invoice.id) == ("confirm", "cancel", "delete")
        invoice_service.confirm(invoice.id)
        assert invoice_service.available_actions(invoice.id) == ("record_payment", "cancel")

    def test_cancel_records_reason(self, invoice_service, invoice):
        cancelled = invoice_service.cancel(invoice.id, "client withdrew")
        assert cancelled.status is InvoiceStatus.CANCELLED
        assert cancelled.cancellation_reason == "client withdrew"

    def test_cancel_paid_rejected(self, invoice_service, invoice):
        invoice_service.confirm(invoice.id)
        invoice_service.record_payment(invoice.id, Decimal("2760"), "cash")
        with pytest.raises(InvalidTransitionError):
            invoice_service.cancel(invoice.id, "too late")

    def test_confirm_twice_rejected(self, invoice_service, invoice):
        invoice_service.confirm(invoice.id)
        with pytest.raises(InvalidTransitionError):
            invoice_service.confirm(invoice.id)

    def test_delete_draft(self, admin_invoice_service, invoice):
        admin_invoice_service.delete(invoice.id)
        with pytest.raises(DocumentNotFoundError):
            admin_invoice_service.get(invoice.id)

    def test_delete_confirmed_rejected(self, admin_invoice_service, invoice):
        admin_invoice_service.confirm(invoice.id)
        with pytest.raises(InvalidTransitionError):
            admin_invoice_service.delete(invoice.id)

    def test_unknown_invoice(self, invoice_service):
        with pytest.raises(DocumentNotFoundError):
            invoice_service.get(uuid4())


class TestReceiptMetadata:

    RECEIPT = ReceiptMetadata(
        sdc_id="SDC010000123",
        receipt_number="42/118",
        receipt_signature="ABCD-EFGH",
        internal_data="XYZ123",
        mrc_code="MRC01",
    )

    def test_draft_rejected(self, invoice_service, invoice):
        with pytest.raises(InvalidTransitionError):
            invoice_service.save_receipt_metadata(invoice.id, self.RECEIPT)

    def test_saved_after_confirm(self, invoice_service, invoice):
        invoice_service.confirm(invoice.id)
        saved = invoice_service.save_receipt_metadata(invoice.id, self.RECEIPT)
        assert saved.receipt == self.RECEIPT
        assert saved.to_payload()["sdcId"] == "SDC010000123"


class TestPermissions:

    def test_viewer_cannot_create(self, viewer_invoice_service, line):
        with pytest.raises(PermissionDeniedError):
            viewer_invoice_service.create("client-1", [line()])

    def test_viewer_can_list(self, viewer_invoice_service, invoice):
        assert [i.id for i in viewer_invoice_service.list_invoices()] == [invoice.id]

    def test_sales_cannot_delete(self, invoice_service, invoice):
        with pytest.raises(PermissionDeniedError):
            invoice_service.delete(invoice.id)


class TestQueries:

    def test_list_by_status(self, invoice_service, invoice, line):
        other = invoice_service.create("client-1", [line()])
        invoice_service.confirm(other.id)
        drafts = invoice_service.list_invoices(InvoiceStatus.DRAFT)
        confirmed = invoice_service.list_invoices(InvoiceStatus.CONFIRMED)
        assert [i.id for i in drafts] == [invoice.id]
        assert [i.id for i in confirmed] == [other.id]


class TestPayload:

    def test_field_names(self, invoice):
        payload = invoice.to_payload()
        assert payload["invoiceNumber"] == "INV-000001"
        assert payload["client"] == "client-1"
        assert payload["totalAEx"] == Decimal("400")
        assert payload["totalB18"] == Decimal("2000")
        assert payload["totalTaxB"] == Decimal("360")
        assert payload["roundedAmount"] == Decimal("2760")
        assert payload["invoiceDate"] == "2026-03-02"
        assert "sdcId" not in payload

    def test_item_fields(self, invoice):
        item = invoice.to_payload()["items"][0]
        assert item["product"] == "p-widget"
        assert item["unitPrice"] == Decimal("1000")
        assert item["taxCode"] == "B"
        assert item["taxRate"] == Decimal("18")
        assert item["totalWithTax"] == Decimal("2360")
