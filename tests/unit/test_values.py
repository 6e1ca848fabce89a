"""
Unit tests for Money, Currency and decimal handling.

Verifies:
- Float prohibition at the input boundary
- Rounding determinism (ties away from zero)
- Currency validation and same-currency arithmetic
"""

from decimal import ROUND_HALF_EVEN, Decimal

import pytest

from billing_kernel.domain.currency import CurrencyRegistry
from billing_kernel.domain.values import Currency, Money, round_amount, to_decimal
from billing_kernel.exceptions import CurrencyMismatchError, InvalidCurrencyError


class TestToDecimal:

    def test_string(self):
        assert to_decimal("100.50") == Decimal("100.50")

    def test_int(self):
        assert to_decimal(7) == Decimal("7")

    def test_decimal_passthrough(self):
        value = Decimal("1.23")
        assert to_decimal(value) is value

    def test_float_rejected(self):
        with pytest.raises(TypeError):
            to_decimal(0.1)

    def test_bool_rejected(self):
        with pytest.raises(TypeError):
            to_decimal(True)

    def test_garbage_rejected(self):
        with pytest.raises(ValueError):
            to_decimal("abc")

    def test_infinity_rejected(self):
        with pytest.raises(ValueError):
            to_decimal("Infinity")


class TestRoundAmount:

    def test_half_up_positive(self):
        assert round_amount(Decimal("2.345")) == Decimal("2.35")

    def test_half_up_negative_away_from_zero(self):
        assert round_amount(Decimal("-0.005")) == Decimal("-0.01")

    def test_half_even(self):
        assert round_amount(Decimal("2.345"), 2, ROUND_HALF_EVEN) == Decimal("2.34")

    def test_zero_places(self):
        assert round_amount(Decimal("1234.5"), 0) == Decimal("1235")


class TestCurrency:

    def test_normalizes(self):
        assert Currency(" usd ").code == "USD"

    def test_unknown(self):
        with pytest.raises(InvalidCurrencyError):
            Currency("XYZ")

    def test_local_franc_has_no_minor_unit(self):
        assert Currency("FRW").decimal_places == 0
        assert CurrencyRegistry.is_valid("RWF")

    def test_name(self):
        assert Currency("FRW").name == "Rwandan Franc"


class TestMoney:

    def test_of(self):
        money = Money.of("10.50", "USD")
        assert money.amount == Decimal("10.50")
        assert money.currency == Currency("USD")

    def test_float_rejected(self):
        with pytest.raises(TypeError):
            Money.of(10.5, "USD")

    def test_add_same_currency(self):
        assert Money.of("1", "FRW") + Money.of("2", "FRW") == Money.of("3", "FRW")

    def test_add_mismatch(self):
        with pytest.raises(CurrencyMismatchError):
            Money.of("1", "FRW") + Money.of("1", "USD")

    def test_round_to_minor_unit(self):
        assert Money.of("1234.5", "FRW").round().amount == Decimal("1235")
        assert Money.of("12.345", "USD").round().amount == Decimal("12.35")

    def test_multiply(self):
        assert (Money.of("100", "FRW") * Decimal("0.18")).amount == Decimal("18.00")

    def test_compare(self):
        assert Money.of("1", "USD") < Money.of("2", "USD")
        assert Money.zero("USD").is_zero
