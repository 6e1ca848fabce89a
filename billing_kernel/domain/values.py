"""
Values -- amounts, currencies and the two sanctioned Decimal helpers.

Responsibility:
    ``to_decimal`` is the one way caller input (form fields, YAML, API
    payloads) becomes a Decimal; ``round_amount`` is the one way an amount
    is rounded.  ``Currency`` and ``Money`` pair amounts with a registered
    currency for display and comparison.

Architecture position:
    Kernel > Domain -- pure, zero I/O.  Depends only on
    billing_kernel.domain.currency and billing_kernel.exceptions.

Invariants enforced:
    - Binary floats never become amounts.
    - Currency codes are registered, uppercased and stripped.
    - Money arithmetic and comparison never mix currencies.

Failure modes:
    - TypeError when a float or bool reaches ``to_decimal``.
    - ValueError on text that is not a finite number.
    - InvalidCurrencyError / CurrencyMismatchError from Currency and Money.
"""

from __future__ import annotations

import operator
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Callable

from billing_kernel.domain.currency import CurrencyRegistry
from billing_kernel.exceptions import CurrencyMismatchError, InvalidCurrencyError

ZERO = Decimal("0")


def to_decimal(value: Decimal | int | str) -> Decimal:
    """
    Raises:
        TypeError: value is a float or a bool.
        ValueError: value is not a finite number.
    """
    if isinstance(value, (bool, float)):
        raise TypeError(f"Binary floating point amounts are not accepted: {value!r}")
    if isinstance(value, Decimal):
        result = value
    else:
        try:
            result = Decimal(str(value).strip())
        except InvalidOperation as e:
            raise ValueError(f"Invalid amount: {value!r}") from e
    if not result.is_finite():
        raise ValueError(f"Amount must be finite: {value!r}")
    return result


def round_amount(
    value: Decimal,
    decimal_places: int = 2,
    rounding: str = ROUND_HALF_UP,
) -> Decimal:
    """
    Quantize to ``decimal_places``.

    The default ROUND_HALF_UP rounds ties away from zero, so 2.345 -> 2.35
    and -0.005 -> -0.01.
    """
    exponent = Decimal(1).scaleb(-decimal_places)
    return value.quantize(exponent, rounding=rounding)


@dataclass(frozen=True, slots=True)
class Currency:
    """A registered currency code."""

    code: str

    def __post_init__(self) -> None:
        normalized = self.code.upper().strip() if self.code else ""
        if not CurrencyRegistry.is_valid(normalized):
            raise InvalidCurrencyError(str(self.code))
        object.__setattr__(self, "code", normalized)

    @property
    def decimal_places(self) -> int:
        return CurrencyRegistry.get_decimal_places(self.code)

    @property
    def name(self) -> str:
        return CurrencyRegistry.get_info(self.code).name

    def __str__(self) -> str:
        return self.code


@dataclass(frozen=True, slots=True)
class Money:
    """
    An amount in one currency.

    Never rounds on its own; ``round()`` goes to the currency's minor unit
    unless told otherwise.
    """

    amount: Decimal
    currency: Currency

    def __post_init__(self) -> None:
        object.__setattr__(self, "amount", to_decimal(self.amount))
        if isinstance(self.currency, str):
            object.__setattr__(self, "currency", Currency(self.currency))
        elif not isinstance(self.currency, Currency):
            raise TypeError(f"currency must be Currency or str, got {type(self.currency)}")

    @classmethod
    def of(cls, amount: Decimal | str | int, currency: str | Currency) -> Money:
        return cls(amount=amount, currency=currency)

    @classmethod
    def zero(cls, currency: str | Currency) -> Money:
        return cls(amount=ZERO, currency=currency)

    @property
    def is_zero(self) -> bool:
        return self.amount == ZERO

    def round(self, decimal_places: int | None = None, rounding: str = ROUND_HALF_UP) -> Money:
        places = self.currency.decimal_places if decimal_places is None else decimal_places
        return Money(round_amount(self.amount, places, rounding), self.currency)

    def _same_currency(self, other: Money) -> None:
        if self.currency != other.currency:
            raise CurrencyMismatchError(self.currency.code, other.currency.code)

    def _combine(self, other: object, op: Callable[[Decimal, Decimal], object]):
        if not isinstance(other, Money):
            return NotImplemented
        self._same_currency(other)
        return op(self.amount, other.amount)

    def __add__(self, other: Money) -> Money:
        total = self._combine(other, operator.add)
        return total if total is NotImplemented else Money(total, self.currency)

    def __sub__(self, other: Money) -> Money:
        diff = self._combine(other, operator.sub)
        return diff if diff is NotImplemented else Money(diff, self.currency)

    def __neg__(self) -> Money:
        return Money(-self.amount, self.currency)

    def __mul__(self, factor: Decimal | int | str) -> Money:
        if isinstance(factor, (bool, float)) or not isinstance(factor, (Decimal, int, str)):
            return NotImplemented
        return Money(self.amount * to_decimal(factor), self.currency)

    __rmul__ = __mul__

    def __lt__(self, other: Money) -> bool:
        return self._combine(other, operator.lt)

    def __le__(self, other: Money) -> bool:
        return self._combine(other, operator.le)

    def __gt__(self, other: Money) -> bool:
        return self._combine(other, operator.gt)

    def __ge__(self, other: Money) -> bool:
        return self._combine(other, operator.ge)

    def __str__(self) -> str:
        return f"{self.amount} {self.currency.code}"
