"""
Quotations Module.

Price offers to clients: drafting, sending, the client's answer, expiry
and conversion into a draft invoice.
"""

from billing_modules.quotations.models import (
    Quotation,
    QuotationStatus,
    QuotationSummary,
    summarize_quotations,
)
from billing_modules.quotations.workflows import QUOTATION_WORKFLOW

__all__ = [
    "QUOTATION_WORKFLOW",
    "Quotation",
    "QuotationStatus",
    "QuotationSummary",
    "summarize_quotations",
]
