"""
Document Totals Engine - per-line and document-level monetary aggregates.

Computes the figures shown on, and persisted with, every invoice, purchase
and quotation: line net amounts and tax, the A/B tax bracket split, subtotal,
total discount, total tax, grand total and the rounded total.

Pure functions with no I/O.  The tax schedule and rounding policy are passed
in; the module-level functions use the standard schedule (A = 0 %, B = 18 %)
and half-up rounding to 2 places.

Tax codes:
    A     zero-rated but reported: net goes to bracket A, tax is 0
    B     standard VAT: net goes to bracket B, tax at the B rate
    None  not applicable: counted in subtotal, discount and grand total,
          never in a bracket

Usage:
    from decimal import Decimal
    from billing_engines.totals import LineItem, TaxCode, compute_document_totals

    totals = compute_document_totals([
        LineItem(quantity=Decimal("2"), unit_amount=Decimal("1000"), tax_code=TaxCode.B),
        LineItem(quantity=Decimal("1"), unit_amount=Decimal("500"),
                 discount=Decimal("100"), tax_code=TaxCode.A),
    ])
    print(totals.grand_total)       # 2760
    print(totals.rounded_total)     # 2760.00
"""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from decimal import ROUND_HALF_EVEN, ROUND_HALF_UP, Decimal
from enum import Enum
from typing import Any, Iterable, Sequence

from billing_engines.tracer import traced_engine
from billing_kernel.domain.values import ZERO, Currency, Money, round_amount, to_decimal
from billing_kernel.exceptions import InconsistentTaxCodeError, InvalidLineItemError
from billing_kernel.logging_config import get_logger

logger = get_logger("engines.totals")

ENGINE_VERSION = "1.0"

_HUNDRED = Decimal("100")


class TaxCode(str, Enum):
    """Tax classification of a line."""

    A = "A"  # Zero-rated, reported in bracket A
    B = "B"  # Standard VAT, bracket B
    NONE = "None"  # Not applicable, excluded from both brackets

    @classmethod
    def parse(cls, value: TaxCode | str | None) -> TaxCode:
        """Accept a TaxCode, its string value, or None/'' for NONE."""
        if isinstance(value, TaxCode):
            return value
        if value is None or str(value).strip() == "":
            return cls.NONE
        normalized = str(value).strip()
        for member in cls:
            if member.value.lower() == normalized.lower():
                return member
        raise ValueError(f"Unknown tax code: {value!r}")


class RoundingMode(str, Enum):
    """Rounding rule for the rounded total."""

    HALF_UP = "half_up"  # Ties away from zero: 0.005 -> 0.01, -0.005 -> -0.01
    HALF_EVEN = "half_even"  # Banker's rounding

    @property
    def decimal_rounding(self) -> str:
        if self is RoundingMode.HALF_EVEN:
            return ROUND_HALF_EVEN
        return ROUND_HALF_UP


class PayloadLayout(str, Enum):
    """Field layout used when totals are merged into a document payload."""

    BRACKETED = "bracketed"  # Invoices and purchases: A/B split fields
    FLAT = "flat"  # Quotations: no bracket split


@dataclass(frozen=True)
class RoundingPolicy:
    """How ``rounded_total`` is derived from ``grand_total``."""

    mode: RoundingMode = RoundingMode.HALF_UP
    decimal_places: int = 2

    def __post_init__(self) -> None:
        if not isinstance(self.mode, RoundingMode):
            object.__setattr__(self, "mode", RoundingMode(self.mode))
        if self.decimal_places < 0:
            raise ValueError("decimal_places cannot be negative")

    def apply(self, value: Decimal) -> Decimal:
        return round_amount(value, self.decimal_places, self.mode.decimal_rounding)


@dataclass(frozen=True)
class TaxBracket:
    """Rate and display label of one reported tax code."""

    code: TaxCode
    rate_percent: Decimal
    label: str = ""

    def __post_init__(self) -> None:
        if self.code is TaxCode.NONE:
            raise ValueError("Tax code None cannot be a reporting bracket")
        if self.rate_percent < ZERO:
            raise ValueError("Tax rate cannot be negative")


@dataclass(frozen=True)
class TaxSchedule:
    """
    The reporting brackets in force.

    Bracket A must exist and be zero-rated.  Bracket B carries the standard
    VAT rate.  Lines coded None never reach a bracket.
    """

    bracket_a: TaxBracket
    bracket_b: TaxBracket

    def __post_init__(self) -> None:
        if self.bracket_a.code is not TaxCode.A or self.bracket_b.code is not TaxCode.B:
            raise ValueError("Schedule brackets must be coded A and B")
        if self.bracket_a.rate_percent != ZERO:
            raise ValueError("Bracket A is zero-rated")

    def rate_for(self, code: TaxCode) -> Decimal:
        if code is TaxCode.A:
            return self.bracket_a.rate_percent
        if code is TaxCode.B:
            return self.bracket_b.rate_percent
        return ZERO

    def label_for(self, code: TaxCode) -> str:
        if code is TaxCode.A:
            return self.bracket_a.label or "A"
        if code is TaxCode.B:
            return self.bracket_b.label or "B"
        return "None"


DEFAULT_TAX_SCHEDULE = TaxSchedule(
    bracket_a=TaxBracket(TaxCode.A, Decimal("0"), "A (0%)"),
    bracket_b=TaxBracket(TaxCode.B, Decimal("18"), "B (18%)"),
)

DEFAULT_ROUNDING = RoundingPolicy()

DEFAULT_CURRENCY = "FRW"


def _coerce_amount(name: str, value: Any) -> Decimal:
    try:
        return to_decimal(value)
    except (TypeError, ValueError) as e:
        raise InvalidLineItemError(f"{name}: {e}") from e


@dataclass(frozen=True)
class LineItem:
    """
    One document row as entered by the user.

    Amounts are converted to Decimal on construction; binary floats are
    rejected.  ``tax_rate`` is optional: when given it must agree with the
    schedule rate of ``tax_code`` at computation time.
    """

    quantity: Decimal
    unit_amount: Decimal
    discount: Decimal = ZERO
    tax_code: TaxCode = TaxCode.A
    tax_rate: Decimal | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "quantity", _coerce_amount("quantity", self.quantity))
        object.__setattr__(self, "unit_amount", _coerce_amount("unit_amount", self.unit_amount))
        object.__setattr__(self, "discount", _coerce_amount("discount", self.discount))
        try:
            object.__setattr__(self, "tax_code", TaxCode.parse(self.tax_code))
        except ValueError as e:
            raise InvalidLineItemError(str(e)) from e
        if self.tax_rate is not None:
            object.__setattr__(self, "tax_rate", _coerce_amount("tax_rate", self.tax_rate))

    @property
    def line_subtotal(self) -> Decimal:
        """quantity * unit_amount, before discount."""
        return self.quantity * self.unit_amount


@dataclass(frozen=True)
class LineItemResult:
    """Computed figures for one line."""

    line_subtotal: Decimal
    discount: Decimal
    net_amount: Decimal
    tax_code: TaxCode
    tax_rate: Decimal
    tax_amount: Decimal
    total_with_tax: Decimal


@dataclass(frozen=True)
class DocumentTotals:
    """
    Document-level aggregates.

    Identity: grand_total == subtotal - total_discount + total_tax, exactly.
    ``rounded_total`` is rounded once from grand_total.
    """

    total_bracket_a: Decimal
    total_bracket_b: Decimal
    tax_bracket_a: Decimal
    tax_bracket_b: Decimal
    subtotal: Decimal
    total_discount: Decimal
    total_tax: Decimal
    grand_total: Decimal
    rounded_total: Decimal
    currency: str = DEFAULT_CURRENCY
    lines: tuple[LineItemResult, ...] = field(default_factory=tuple)

    @property
    def line_count(self) -> int:
        return len(self.lines)

    @property
    def rounded_money(self) -> Money:
        return Money.of(self.rounded_total, self.currency)

    def as_payload(self, layout: PayloadLayout = PayloadLayout.BRACKETED) -> dict[str, Decimal]:
        """Totals under the field names the persistence API expects."""
        if layout is PayloadLayout.FLAT:
            return {
                "subtotal": self.subtotal,
                "totalDiscount": self.total_discount,
                "totalTax": self.total_tax,
                "grandTotal": self.grand_total,
            }
        return {
            "subtotal": self.subtotal,
            "totalDiscount": self.total_discount,
            "totalTax": self.total_tax,
            "totalAEx": self.total_bracket_a,
            "totalB18": self.total_bracket_b,
            "totalTaxA": self.tax_bracket_a,
            "totalTaxB": self.tax_bracket_b,
            "grandTotal": self.grand_total,
            "roundedAmount": self.rounded_total,
        }


class DocumentTotalsCalculator:
    """
    Compute line and document totals under one tax schedule and rounding
    policy.

    Pure - no I/O, no database access, no shared mutable state.  One
    instance may be used from any number of callers.
    """

    def __init__(
        self,
        schedule: TaxSchedule = DEFAULT_TAX_SCHEDULE,
        rounding: RoundingPolicy = DEFAULT_ROUNDING,
    ):
        self.schedule = schedule
        self.rounding = rounding

    def compute_line(self, item: LineItem, line_index: int | None = None) -> LineItemResult:
        """
        Validate one line and compute its net amount, tax and total.

        Raises:
            InvalidLineItemError: quantity not positive, negative amounts,
                or discount larger than quantity * unit_amount.
            InconsistentTaxCodeError: explicit tax_rate differs from the
                schedule rate of the line's tax code.
        """
        if item.quantity <= ZERO:
            raise InvalidLineItemError(
                f"quantity must be positive, got {item.quantity}", line_index
            )
        if item.unit_amount < ZERO:
            raise InvalidLineItemError(
                f"unit amount cannot be negative, got {item.unit_amount}", line_index
            )
        if item.discount < ZERO:
            raise InvalidLineItemError(
                f"discount cannot be negative, got {item.discount}", line_index
            )

        line_subtotal = item.line_subtotal
        net_amount = line_subtotal - item.discount
        if net_amount < ZERO:
            raise InvalidLineItemError(
                f"discount {item.discount} exceeds line subtotal {line_subtotal}",
                line_index,
            )

        rate = self.schedule.rate_for(item.tax_code)
        if item.tax_rate is not None and item.tax_rate != rate:
            raise InconsistentTaxCodeError(
                tax_code=item.tax_code.value,
                tax_rate=str(item.tax_rate),
                expected_rate=str(rate),
                line_index=line_index,
            )

        tax_amount = net_amount * rate / _HUNDRED
        return LineItemResult(
            line_subtotal=line_subtotal,
            discount=item.discount,
            net_amount=net_amount,
            tax_code=item.tax_code,
            tax_rate=rate,
            tax_amount=tax_amount,
            total_with_tax=net_amount + tax_amount,
        )

    def compute(
        self,
        items: Iterable[LineItem],
        currency: str = DEFAULT_CURRENCY,
    ) -> DocumentTotals:
        """
        Aggregate a document's lines.

        An empty sequence yields all-zero totals.

        Raises:
            InvalidLineItemError / InconsistentTaxCodeError from any line.
            InvalidCurrencyError: unknown currency code.
        """
        t0 = time.monotonic()
        currency_code = Currency(currency).code

        results: list[LineItemResult] = []
        total_a = total_b = tax_a = tax_b = ZERO
        subtotal = total_discount = ZERO

        for index, item in enumerate(items):
            result = self.compute_line(item, line_index=index)
            results.append(result)

            subtotal += result.line_subtotal
            total_discount += result.discount

            if result.tax_code is TaxCode.A:
                total_a += result.net_amount
                tax_a += result.tax_amount
            elif result.tax_code is TaxCode.B:
                total_b += result.net_amount
                tax_b += result.tax_amount

        total_tax = tax_a + tax_b
        grand_total = subtotal - total_discount + total_tax
        rounded_total = self.rounding.apply(grand_total)

        totals = DocumentTotals(
            total_bracket_a=total_a,
            total_bracket_b=total_b,
            tax_bracket_a=tax_a,
            tax_bracket_b=tax_b,
            subtotal=subtotal,
            total_discount=total_discount,
            total_tax=total_tax,
            grand_total=grand_total,
            rounded_total=rounded_total,
            currency=currency_code,
            lines=tuple(results),
        )

        duration_ms = round((time.monotonic() - t0) * 1000, 2)
        logger.debug("document_totals_computed", extra={
            "line_count": len(results),
            "currency": currency_code,
            "subtotal": str(subtotal),
            "total_tax": str(total_tax),
            "grand_total": str(grand_total),
            "rounded_total": str(rounded_total),
            "rounding_mode": self.rounding.mode.value,
            "duration_ms": duration_ms,
        })
        return totals

    def preview(self, item: LineItem) -> Decimal:
        """Total with tax of one row, as shown while the row is being edited."""
        return self.compute_line(item).total_with_tax


_default_calculator = DocumentTotalsCalculator()


@traced_engine("line_total", ENGINE_VERSION, fingerprint_fields=("item",))
def compute_line_total(item: LineItem) -> LineItemResult:
    """Compute one line under the standard schedule."""
    return _default_calculator.compute_line(item)


@traced_engine("document_totals", ENGINE_VERSION, fingerprint_fields=("items", "currency"))
def compute_document_totals(
    items: Sequence[LineItem],
    currency: str = DEFAULT_CURRENCY,
) -> DocumentTotals:
    """Compute document totals under the standard schedule and rounding."""
    return _default_calculator.compute(items, currency=currency)


def calculate_item_preview_total(item: LineItem) -> Decimal:
    """Live per-row total; always equal to compute_line_total(item).total_with_tax."""
    return compute_line_total(item).total_with_tax
