"""
Configuration Loader (``billing_config.loader``).

Responsibility
--------------
Loads a billing YAML file and parses it into the frozen dataclasses of
``billing_config.schema``.  Runtime callers go through
``billing_config.get_active_config()``; ``load_config`` is exposed for
tests and tooling that need a specific file.

Invariants enforced
-------------------
* Every parse or validation problem raises ``ConfigError`` naming the
  source file; no silent defaults for required sections.
* Rates are parsed from their YAML text into ``Decimal``, never through
  binary float arithmetic.
* ``compute_checksum`` produces a deterministic SHA-256 hash for
  configuration identity and change detection.

Failure modes
-------------
* Missing YAML file  -> ``FileNotFoundError`` propagates.
* Malformed YAML  -> ``yaml.YAMLError`` propagates.
* Missing keys, bad values, inconsistent sections  -> ``ConfigError``.
"""

from __future__ import annotations

import hashlib
import json
from decimal import Decimal, InvalidOperation
from pathlib import Path
from typing import Any

import yaml

from billing_config.schema import BillingConfig, PaymentTermDef, TaxCodeDef
from billing_engines.totals import RoundingMode, RoundingPolicy, TaxCode
from billing_kernel.domain.currency import CurrencyRegistry
from billing_kernel.exceptions import ConfigError
from billing_kernel.logging_config import get_logger

logger = get_logger("config.loader")

_REPORTED_CODES = (TaxCode.A.value, TaxCode.B.value)


def load_yaml_file(path: Path) -> dict[str, Any]:
    """
    Load a single YAML file and return its contents as a dict.

    Raises:
        FileNotFoundError: if the file does not exist.
        yaml.YAMLError: if the file contains invalid YAML.
    """
    with open(path) as f:
        return yaml.safe_load(f) or {}


def parse_decimal(value: Any, what: str) -> Decimal:
    """Parse a YAML scalar (str, int or float literal) into Decimal."""
    if isinstance(value, bool) or value is None:
        raise ConfigError(f"{what} must be a number, got {value!r}")
    try:
        result = Decimal(str(value))
    except InvalidOperation as e:
        raise ConfigError(f"{what} must be a number, got {value!r}") from e
    if not result.is_finite():
        raise ConfigError(f"{what} must be finite, got {value!r}")
    return result


def parse_tax_code(data: dict[str, Any]) -> TaxCodeDef:
    """Parse a TaxCodeDef from a dict."""
    code = str(data["code"]).strip()
    return TaxCodeDef(
        code=code,
        label=data.get("label", code),
        rate_percent=parse_decimal(data["rate_percent"], f"rate_percent of tax code {code}"),
    )


def parse_rounding(data: dict[str, Any]) -> RoundingPolicy:
    """Parse the rounding section; defaults to half_up with 2 places."""
    mode = data.get("mode", RoundingMode.HALF_UP.value)
    try:
        rounding_mode = RoundingMode(mode)
    except ValueError as e:
        raise ConfigError(f"unknown rounding mode {mode!r}") from e
    places = data.get("decimal_places", 2)
    if not isinstance(places, int) or isinstance(places, bool) or places < 0:
        raise ConfigError(f"decimal_places must be a non-negative integer, got {places!r}")
    return RoundingPolicy(mode=rounding_mode, decimal_places=places)


def parse_payment_term(data: dict[str, Any]) -> PaymentTermDef:
    """Parse a PaymentTermDef from a dict."""
    days = data["days"]
    if not isinstance(days, int) or isinstance(days, bool) or days < 0:
        raise ConfigError(f"days of payment term {data['code']!r} must be a non-negative integer")
    return PaymentTermDef(
        code=str(data["code"]),
        label=data.get("label", str(data["code"])),
        days=days,
    )


def validate_billing_config(config: BillingConfig) -> None:
    """
    Check cross-section consistency.

    Raises:
        ConfigError: on the first problem found.
    """
    seen: set[str] = set()
    for definition in config.tax_codes:
        if definition.code not in _REPORTED_CODES:
            raise ConfigError(f"unknown tax code {definition.code!r}")
        if definition.code in seen:
            raise ConfigError(f"duplicate tax code {definition.code!r}")
        seen.add(definition.code)
        if definition.rate_percent < 0:
            raise ConfigError(f"tax code {definition.code} has a negative rate")
    missing = [code for code in _REPORTED_CODES if code not in seen]
    if missing:
        raise ConfigError(f"tax codes not configured: {', '.join(missing)}")
    if config.tax_code(TaxCode.A.value).rate_percent != 0:
        raise ConfigError("tax code A is zero-rated")

    for code in config.currencies:
        if not CurrencyRegistry.is_valid(code):
            raise ConfigError(
                f"unknown currency {code!r}; known: {', '.join(sorted(CurrencyRegistry.all_codes()))}"
            )
    if config.default_currency not in config.currencies:
        raise ConfigError(
            f"default currency {config.default_currency!r} is not an accepted currency"
        )

    term_codes = [term.code for term in config.payment_terms]
    if len(term_codes) != len(set(term_codes)):
        raise ConfigError("duplicate payment term codes")

    if not config.invoice_payment_methods or not config.purchase_payment_methods:
        raise ConfigError("payment methods must be configured for invoices and purchases")

    try:
        TaxCode.parse(config.quotation_default_tax_code)
    except ValueError as e:
        raise ConfigError(str(e)) from e
    if config.quotation_validity_days < 0:
        raise ConfigError("quotation_validity_days cannot be negative")


def parse_billing_config(data: dict[str, Any]) -> BillingConfig:
    """
    Parse and validate a BillingConfig from the loaded YAML dict.

    Raises:
        ConfigError: missing section or invalid value.
    """
    try:
        currencies = data["currencies"]
        methods = data["payment_methods"]
        documents = data.get("documents", {})
        config = BillingConfig(
            config_id=str(data.get("config_id", "default")),
            version=int(data.get("version", 1)),
            tax_codes=tuple(parse_tax_code(t) for t in data["tax_codes"]),
            rounding=parse_rounding(data.get("rounding", {})),
            default_currency=str(currencies["default"]).upper(),
            currencies=tuple(str(c).upper() for c in currencies["accepted"]),
            payment_terms=tuple(parse_payment_term(t) for t in data.get("payment_terms", [])),
            invoice_payment_methods=tuple(methods["invoice"]),
            purchase_payment_methods=tuple(methods["purchase"]),
            default_terms_text=documents.get("default_terms_text", ""),
            quotation_default_tax_code=str(documents.get("quotation_default_tax_code", "B")),
            quotation_validity_days=int(documents.get("quotation_validity_days", 30)),
            checksum=compute_checksum(data),
        )
    except KeyError as e:
        raise ConfigError(f"missing required key {e.args[0]!r}") from e
    except (TypeError, ValueError) as e:
        raise ConfigError(str(e)) from e

    validate_billing_config(config)
    return config


def load_config(path: Path | str) -> BillingConfig:
    """
    Load, parse and validate a billing configuration file.

    Raises:
        FileNotFoundError: if the file does not exist.
        yaml.YAMLError: if the file contains invalid YAML.
        ConfigError: if the contents are invalid; ``source`` names the file.
    """
    path = Path(path)
    data = load_yaml_file(path)
    try:
        config = parse_billing_config(data)
    except ConfigError as e:
        logger.error("billing_config_invalid", extra={
            "source": str(path),
            "reason": e.reason,
        })
        raise ConfigError(e.reason, source=str(path)) from e

    logger.info("billing_config_loaded", extra={
        "source": str(path),
        "config_id": config.config_id,
        "version": config.version,
        "checksum": config.checksum,
        "default_currency": config.default_currency,
        "rounding_mode": config.rounding.mode.value,
    })
    return config


def compute_checksum(data: dict[str, Any]) -> str:
    """
    Compute SHA-256 checksum of canonical JSON serialization.

    Identical ``data`` always produces identical checksums.
    """
    canonical = json.dumps(data, sort_keys=True, default=str)
    return hashlib.sha256(canonical.encode()).hexdigest()
