"""Billing kernel domain layer: pure value objects, zero I/O."""

from billing_kernel.domain.currency import CurrencyInfo, CurrencyRegistry
from billing_kernel.domain.values import (
    ZERO,
    Currency,
    Money,
    round_amount,
    to_decimal,
)
from billing_kernel.domain.workflow import Guard, Transition, Workflow

__all__ = [
    "ZERO",
    "Currency",
    "CurrencyInfo",
    "CurrencyRegistry",
    "Guard",
    "Money",
    "Transition",
    "Workflow",
    "round_amount",
    "to_decimal",
]
