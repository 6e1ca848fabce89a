"""
Tests for billing configuration loading and validation.

Covers:
- The packaged defaults load and build the standard calculator
- Every validation rule raises ConfigError naming the source file
- get_active_config caching and the BILLING_CONFIG_PATH override
"""

from dataclasses import fields
from decimal import Decimal

import pytest
import yaml

from billing_config import (
    CONFIG_PATH_ENV,
    DEFAULT_CONFIG_PATH,
    get_active_config,
    load_config,
)
from billing_config.loader import compute_checksum, parse_decimal
from billing_engines.totals import LineItem, RoundingMode, TaxCode
from billing_kernel.exceptions import ConfigError


def _base_data() -> dict:
    with open(DEFAULT_CONFIG_PATH) as f:
        return yaml.safe_load(f)


def _write(tmp_path, data, name="billing.yaml"):
    path = tmp_path / name
    path.write_text(yaml.safe_dump(data))
    return path


class TestDefaultConfig:

    def test_loads(self, billing_config):
        assert billing_config.config_id == "rw-default"
        assert billing_config.default_currency == "FRW"
        assert "USD" in billing_config.currencies
        assert billing_config.rounding.mode is RoundingMode.HALF_UP
        assert billing_config.rounding.decimal_places == 2

    def test_tax_codes(self, billing_config):
        assert billing_config.tax_code("A").rate_percent == Decimal("0")
        assert billing_config.tax_code("B").rate_percent == Decimal("18")
        assert billing_config.tax_code("B").label == "B (18%)"
        assert billing_config.tax_code("C") is None

    def test_tax_code_fields(self, billing_config):
        assert {f.name for f in fields(billing_config.tax_code("B"))} == {
            "code", "label", "rate_percent",
        }

    def test_payment_terms(self, billing_config):
        assert billing_config.payment_term_days("cash") == 0
        assert billing_config.payment_term_days("credit_30") == 30
        assert billing_config.payment_term_days("credit_90") is None

    def test_calculator_matches_standard_rates(self, billing_config):
        totals = billing_config.calculator().compute([
            LineItem(quantity=Decimal("2"), unit_amount=Decimal("1000"), tax_code=TaxCode.B),
        ])
        assert totals.grand_total == Decimal("2360")

    def test_documents_section(self, billing_config):
        assert billing_config.quotation_default_tax_code == "B"
        assert billing_config.quotation_validity_days == 30
        assert billing_config.default_terms_text == "Payment due within 30 days"
        assert "credit" in billing_config.purchase_payment_methods
        assert "credit" not in billing_config.invoice_payment_methods

    def test_checksum_is_stable(self, billing_config):
        assert billing_config.checksum == load_config(DEFAULT_CONFIG_PATH).checksum
        assert len(billing_config.checksum) == 64


class TestValidation:

    def _assert_invalid(self, tmp_path, data, fragment):
        path = _write(tmp_path, data)
        with pytest.raises(ConfigError) as exc_info:
            load_config(path)
        assert fragment in exc_info.value.reason
        assert exc_info.value.source == str(path)

    def test_custom_b_rate(self, tmp_path):
        data = _base_data()
        data["tax_codes"][1]["rate_percent"] = "16"
        config = load_config(_write(tmp_path, data))
        assert config.tax_schedule().rate_for(TaxCode.B) == Decimal("16")

    def test_a_must_be_zero(self, tmp_path):
        data = _base_data()
        data["tax_codes"][0]["rate_percent"] = "5"
        self._assert_invalid(tmp_path, data, "zero-rated")

    def test_missing_b(self, tmp_path):
        data = _base_data()
        data["tax_codes"] = data["tax_codes"][:1]
        self._assert_invalid(tmp_path, data, "not configured")

    def test_unknown_tax_code(self, tmp_path):
        data = _base_data()
        data["tax_codes"].append({"code": "C", "rate_percent": "5"})
        self._assert_invalid(tmp_path, data, "unknown tax code")

    def test_duplicate_tax_code(self, tmp_path):
        data = _base_data()
        data["tax_codes"].append(dict(data["tax_codes"][1]))
        self._assert_invalid(tmp_path, data, "duplicate tax code")

    def test_negative_rate(self, tmp_path):
        data = _base_data()
        data["tax_codes"][1]["rate_percent"] = "-1"
        self._assert_invalid(tmp_path, data, "negative")

    def test_non_numeric_rate(self, tmp_path):
        data = _base_data()
        data["tax_codes"][1]["rate_percent"] = "eighteen"
        self._assert_invalid(tmp_path, data, "must be a number")

    def test_unknown_currency(self, tmp_path):
        data = _base_data()
        data["currencies"]["accepted"].append("XYZ")
        self._assert_invalid(tmp_path, data, "unknown currency")

    def test_default_currency_not_accepted(self, tmp_path):
        data = _base_data()
        data["currencies"]["default"] = "GBP"
        self._assert_invalid(tmp_path, data, "not an accepted currency")

    def test_unknown_rounding_mode(self, tmp_path):
        data = _base_data()
        data["rounding"]["mode"] = "ceiling"
        self._assert_invalid(tmp_path, data, "unknown rounding mode")

    def test_duplicate_payment_terms(self, tmp_path):
        data = _base_data()
        data["payment_terms"].append(dict(data["payment_terms"][0]))
        self._assert_invalid(tmp_path, data, "duplicate payment term")

    def test_negative_term_days(self, tmp_path):
        data = _base_data()
        data["payment_terms"][1]["days"] = -7
        self._assert_invalid(tmp_path, data, "non-negative integer")

    def test_empty_payment_methods(self, tmp_path):
        data = _base_data()
        data["payment_methods"]["invoice"] = []
        self._assert_invalid(tmp_path, data, "payment methods")

    def test_bad_quotation_tax_code(self, tmp_path):
        data = _base_data()
        data["documents"]["quotation_default_tax_code"] = "Q"
        self._assert_invalid(tmp_path, data, "Unknown tax code")

    def test_missing_section(self, tmp_path):
        data = _base_data()
        del data["payment_methods"]
        self._assert_invalid(tmp_path, data, "missing required key")

    def test_half_even_rounding(self, tmp_path):
        data = _base_data()
        data["rounding"]["mode"] = "half_even"
        config = load_config(_write(tmp_path, data))
        totals = config.calculator().compute([
            LineItem(quantity=Decimal("1"), unit_amount=Decimal("0.125")),
        ])
        assert totals.rounded_total == Decimal("0.12")

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_config(tmp_path / "absent.yaml")


class TestHelpers:

    def test_parse_decimal_from_yaml_float_literal(self):
        assert parse_decimal(18.0, "rate") == Decimal("18.0")

    def test_parse_decimal_rejects_bool(self):
        with pytest.raises(ConfigError):
            parse_decimal(True, "rate")

    def test_checksum_ignores_key_order(self):
        assert compute_checksum({"a": 1, "b": 2}) == compute_checksum({"b": 2, "a": 1})


@pytest.mark.usefixtures("_reset_config_cache")
class TestActiveConfig:

    def test_default_path(self, monkeypatch):
        monkeypatch.delenv(CONFIG_PATH_ENV, raising=False)
        config = get_active_config()
        assert config.config_id == "rw-default"
        assert get_active_config() is config

    def test_env_override(self, monkeypatch, tmp_path):
        data = _base_data()
        data["config_id"] = "custom"
        monkeypatch.setenv(CONFIG_PATH_ENV, str(_write(tmp_path, data)))
        assert get_active_config().config_id == "custom"
