"""
Billing Engines - pure calculation engines.

Engines have no I/O and no database access.  Configuration (tax schedule,
rounding) is passed in by the caller.

Engines:
    - totals: document totals and A/B tax bracket split
"""

from billing_engines.totals import (
    DEFAULT_ROUNDING,
    DEFAULT_TAX_SCHEDULE,
    DocumentTotals,
    DocumentTotalsCalculator,
    LineItem,
    LineItemResult,
    PayloadLayout,
    RoundingMode,
    RoundingPolicy,
    TaxBracket,
    TaxCode,
    TaxSchedule,
    calculate_item_preview_total,
    compute_document_totals,
    compute_line_total,
)
from billing_engines.tracer import traced_engine

__all__ = [
    "DEFAULT_ROUNDING",
    "DEFAULT_TAX_SCHEDULE",
    "DocumentTotals",
    "DocumentTotalsCalculator",
    "LineItem",
    "LineItemResult",
    "PayloadLayout",
    "RoundingMode",
    "RoundingPolicy",
    "TaxBracket",
    "TaxCode",
    "TaxSchedule",
    "calculate_item_preview_total",
    "compute_document_totals",
    "compute_line_total",
    "traced_engine",
]
