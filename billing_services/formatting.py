"""Display formatting for amounts shown on lists, documents and summaries."""

from __future__ import annotations

from decimal import Decimal

from billing_kernel.domain.values import ZERO, round_amount, to_decimal

DISPLAY_CURRENCY = "FRW"

# Grouped number display keeps at most this many fraction digits
_NUMBER_MAX_PLACES = 3

Amount = Decimal | int | str | None


def _grouped(value: Decimal, places: int) -> str:
    rounded = round_amount(abs(value), places)
    text = f"{rounded:,.{places}f}"
    return f"-{text}" if value < 0 and rounded != 0 else text


def format_currency(value: Amount, currency: str = DISPLAY_CURRENCY) -> str:
    """'FRW 1,235' -- whole units, half-up.  None renders as zero."""
    amount = ZERO if value is None else to_decimal(value)
    text = _grouped(amount, 0)
    if text.startswith("-"):
        return f"-{currency} {text[1:]}"
    return f"{currency} {text}"


def format_currency_with_decimals(value: Amount, currency: str = DISPLAY_CURRENCY) -> str:
    """'FRW 1,234.50' -- always two decimals."""
    amount = ZERO if value is None else to_decimal(value)
    text = _grouped(amount, 2)
    if text.startswith("-"):
        return f"-{currency} {text[1:]}"
    return f"{currency} {text}"


def format_number(value: Amount) -> str:
    """'1,234.5' -- thousands grouped, trailing zeros dropped."""
    amount = ZERO if value is None else to_decimal(value)
    text = _grouped(amount, _NUMBER_MAX_PLACES)
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    return text
