"""
Billing configuration schema.

Frozen dataclasses the YAML loader parses into.  The runtime holds one
``BillingConfig`` and hands the pieces the engines and services need
(tax schedule, rounding, payment terms, payment methods) to them
explicitly.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal

from billing_engines.totals import (
    DocumentTotalsCalculator,
    RoundingPolicy,
    TaxBracket,
    TaxCode,
    TaxSchedule,
)


@dataclass(frozen=True)
class TaxCodeDef:
    """One tax code as configured."""

    code: str  # "A" or "B"
    label: str
    rate_percent: Decimal


@dataclass(frozen=True)
class PaymentTermDef:
    """Payment term: code, label and days until due."""

    code: str
    label: str
    days: int


@dataclass(frozen=True)
class BillingConfig:
    """
    The active billing configuration.

    ``checksum`` is the SHA-256 of the canonical JSON of the source data and
    identifies the configuration a document was computed under.
    """

    config_id: str
    version: int
    tax_codes: tuple[TaxCodeDef, ...]
    rounding: RoundingPolicy
    default_currency: str
    currencies: tuple[str, ...]
    payment_terms: tuple[PaymentTermDef, ...]
    invoice_payment_methods: tuple[str, ...]
    purchase_payment_methods: tuple[str, ...]
    default_terms_text: str = ""
    quotation_default_tax_code: str = "B"
    quotation_validity_days: int = 30
    checksum: str = field(default="", compare=False)

    def tax_code(self, code: str) -> TaxCodeDef | None:
        for definition in self.tax_codes:
            if definition.code == code:
                return definition
        return None

    def tax_schedule(self) -> TaxSchedule:
        """Build the engine's tax schedule from the configured A and B codes."""
        a = self.tax_code(TaxCode.A.value)
        b = self.tax_code(TaxCode.B.value)
        return TaxSchedule(
            bracket_a=TaxBracket(TaxCode.A, a.rate_percent, a.label),
            bracket_b=TaxBracket(TaxCode.B, b.rate_percent, b.label),
        )

    def calculator(self) -> DocumentTotalsCalculator:
        return DocumentTotalsCalculator(self.tax_schedule(), self.rounding)

    def payment_term_days(self, code: str) -> int | None:
        for term in self.payment_terms:
            if term.code == code:
                return term.days
        return None
