"""
Invoices Module.

Sales invoices: creation from form rows, confirmation, payments,
cancellation and fiscal receipt metadata.  Totals come from the shared
Document Totals Engine.
"""

from billing_modules.invoices.models import (
    Invoice,
    InvoiceStatus,
    InvoiceSummary,
    ReceiptMetadata,
    summarize_invoices,
)
from billing_modules.invoices.workflows import INVOICE_WORKFLOW

__all__ = [
    "INVOICE_WORKFLOW",
    "Invoice",
    "InvoiceStatus",
    "InvoiceSummary",
    "ReceiptMetadata",
    "summarize_invoices",
]
