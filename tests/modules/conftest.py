"""Service fixtures for the document module tests."""

from decimal import Decimal

import pytest

from billing_modules._document_models import DocumentLineInput
from billing_modules.invoices.service import InvoiceService
from billing_modules.purchases.service import PurchaseService
from billing_modules.quotations.service import QuotationService


def widget_line(quantity="2", amount="1000", discount="0", tax_code="B"):
    return DocumentLineInput(
        product_id="p-widget",
        quantity=Decimal(quantity),
        unit_amount=Decimal(amount),
        discount=Decimal(discount),
        tax_code=tax_code,
    )


@pytest.fixture
def line():
    """Factory for widget form rows."""
    return widget_line


@pytest.fixture
def invoice_service(session, sales_auth, catalog, directory, billing_config):
    return InvoiceService(session, sales_auth, catalog, directory, billing_config)


@pytest.fixture
def admin_invoice_service(session, admin_auth, catalog, directory, billing_config):
    return InvoiceService(session, admin_auth, catalog, directory, billing_config)


@pytest.fixture
def viewer_invoice_service(session, viewer_auth, catalog, directory, billing_config):
    return InvoiceService(session, viewer_auth, catalog, directory, billing_config)


@pytest.fixture
def purchase_service(session, admin_auth, catalog, directory, billing_config):
    return PurchaseService(session, admin_auth, catalog, directory, billing_config)


@pytest.fixture
def sales_purchase_service(session, sales_auth, catalog, directory, billing_config):
    return PurchaseService(session, sales_auth, catalog, directory, billing_config)


@pytest.fixture
def quotation_service(session, sales_auth, catalog, directory, billing_config):
    return QuotationService(session, sales_auth, catalog, directory, billing_config)
