"""
Shared Document Helpers (``billing_modules._document_helpers``).

Responsibility
--------------
The steps every document service performs the same way, written once:

* turning form rows into engine line items against the catalog
  (``prepare_lines``), including the required-field checks the form makes
  before any computation;
* the invoice stock check (``check_stock``);
* numbering (``next_document_number``) and due dates (``due_date_for``);
* payment validation and settlement (``settle_payment``);
* status checks for actions that are not transitions (``require_status``).

Architecture position
---------------------
**Modules layer** -- shared glue.  Imports from engines, kernel and
``billing_config``'s schema type; MUST NOT be imported by the kernel.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, timedelta
from decimal import Decimal
from typing import Iterable, Sequence

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from billing_config.schema import BillingConfig
from billing_engines.totals import LineItem, TaxCode
from billing_kernel.domain.values import ZERO, to_decimal
from billing_kernel.domain.workflow import Workflow
from billing_kernel.exceptions import (
    EmptyRequiredFieldError,
    InsufficientStockError,
    InvalidCurrencyError,
    InvalidLineItemError,
    InvalidPaymentError,
    InvalidTransitionError,
    OverpaymentError,
)
from billing_kernel.logging_config import get_logger
from billing_modules._document_models import DocumentLineInput
from billing_modules.directory.models import Catalog, Product

logger = get_logger("modules.documents")

DEFAULT_UNIT = "pcs"

NUMBER_WIDTH = 6


@dataclass(frozen=True)
class PreparedLine:
    """A form row resolved against the catalog, ready for the engine."""
    product: Product
    item: LineItem
    item_code: str
    unit: str
    description: str


def _plain(value: Decimal) -> str:
    """2.000 -> '2', 1.50 -> '1.5', 100 -> '100'."""
    normalized = value.normalize()
    return f"{normalized:f}"


def describe_line(product: Product, quantity: Decimal) -> str:
    """'<name> - <quantity> <unit>' as printed on documents."""
    unit = product.unit or DEFAULT_UNIT
    return f"{product.name} - {_plain(quantity)} {unit}"


def prepare_lines(
    lines: Sequence[DocumentLineInput],
    catalog: Catalog,
    default_tax_code: TaxCode,
    catalog_amount: str = "unit_price",
) -> list[PreparedLine]:
    """
    Resolve form rows against the catalog.

    A row without ``unit_amount`` takes the product's ``catalog_amount``
    field: ``unit_price`` on sales documents, ``unit_cost`` on purchases.

    Raises:
        EmptyRequiredFieldError: no rows, or a row without a (known) product.
        InvalidLineItemError: a row's amounts are not valid numbers.
    """
    if not lines:
        raise EmptyRequiredFieldError("items")

    prepared: list[PreparedLine] = []
    for index, row in enumerate(lines):
        if not row.product_id:
            raise EmptyRequiredFieldError("product", line_index=index)
        product = catalog.get_product(row.product_id)
        if product is None:
            logger.warning("document_line_unknown_product", extra={
                "product_id": row.product_id,
                "line_index": index,
            })
            raise EmptyRequiredFieldError("product", line_index=index)

        tax_code = default_tax_code if row.tax_code is None else row.tax_code
        unit_amount = row.unit_amount
        if unit_amount is None:
            unit_amount = getattr(product, catalog_amount)
        try:
            item = LineItem(
                quantity=row.quantity,
                unit_amount=unit_amount,
                discount=row.discount,
                tax_code=tax_code,
                tax_rate=row.tax_rate,
            )
        except InvalidLineItemError as e:
            raise InvalidLineItemError(e.reason, line_index=index) from e

        prepared.append(PreparedLine(
            product=product,
            item=item,
            item_code=row.item_code or product.sku or "",
            unit=product.unit or DEFAULT_UNIT,
            description=describe_line(product, item.quantity),
        ))
    return prepared


def check_stock(prepared: Iterable[PreparedLine]) -> None:
    """
    Raises:
        InsufficientStockError: the first line whose quantity exceeds the
            product's stock on hand.
    """
    for line in prepared:
        if line.product.current_stock < line.item.quantity:
            raise InsufficientStockError(
                product_name=line.product.name,
                available=_plain(line.product.current_stock),
                required=_plain(line.item.quantity),
            )


def require_currency(config: BillingConfig, currency: str | None) -> str:
    """The document currency: the given one if accepted, else the default."""
    if currency is None:
        return config.default_currency
    code = currency.upper().strip()
    if code not in config.currencies:
        raise InvalidCurrencyError(currency)
    return code


def due_date_for(
    config: BillingConfig,
    document_date: date,
    payment_terms: str,
) -> date:
    """Document date plus the payment term's days."""
    days = config.payment_term_days(payment_terms)
    if days is None:
        raise InvalidPaymentError(f"unknown payment terms {payment_terms!r}")
    return document_date + timedelta(days=days)


def format_document_number(prefix: str, sequence: int) -> str:
    return f"{prefix}-{sequence:0{NUMBER_WIDTH}d}"


def next_document_number(session: Session, number_column, prefix: str) -> str:
    """
    Next number in the table's sequence: INV-000001, INV-000002, ...

    Suffixes are zero-padded to at least NUMBER_WIDTH digits, so the longest
    number is the highest and equal lengths compare as text.
    """
    current = session.scalar(
        select(number_column)
        .where(number_column.like(f"{prefix}-%"))
        .order_by(func.length(number_column).desc(), number_column.desc())
        .limit(1)
    )
    sequence = 1
    if current:
        sequence = int(current.rsplit("-", 1)[1]) + 1
    return format_document_number(prefix, sequence)


@dataclass(frozen=True)
class PaymentSettlement:
    """Outcome of applying one payment to a document."""
    amount: Decimal
    amount_paid: Decimal
    balance: Decimal
    new_status: str


BALANCE_SETTLED = "balance_settled"


def settle_payment(
    workflow: Workflow,
    status: str,
    rounded_amount: Decimal,
    amount_paid: Decimal,
    amount: Decimal | int | str,
    payment_method: str,
    allowed_methods: Sequence[str],
) -> PaymentSettlement:
    """
    Validate a payment and work out the document's next status.

    Raises:
        InvalidTransitionError: the status does not accept payments.
        InvalidPaymentError: amount not positive, or method not allowed.
        OverpaymentError: amount exceeds the outstanding balance.
    """
    if not workflow.can(status, "record_payment"):
        raise InvalidTransitionError(workflow.name, status, "record_payment")

    try:
        value = to_decimal(amount)
    except (TypeError, ValueError) as e:
        raise InvalidPaymentError(str(e)) from e
    if value <= ZERO:
        raise InvalidPaymentError(f"amount must be positive, got {value}")
    if payment_method not in allowed_methods:
        raise InvalidPaymentError(f"payment method {payment_method!r} is not accepted")

    balance = rounded_amount - amount_paid
    if value > balance:
        raise OverpaymentError(str(value), str(balance))

    new_paid = amount_paid + value
    new_balance = rounded_amount - new_paid
    guards = (BALANCE_SETTLED,) if new_balance == ZERO else ()
    transition = workflow.resolve(status, "record_payment", satisfied_guards=guards)
    return PaymentSettlement(
        amount=value,
        amount_paid=new_paid,
        balance=new_balance,
        new_status=transition.to_state,
    )


def require_status(
    workflow: Workflow,
    status: str,
    allowed: Iterable[str],
    action: str,
) -> None:
    """For actions that are not transitions (delete, update, receipts)."""
    if status not in tuple(allowed):
        raise InvalidTransitionError(workflow.name, status, action)


def require_party(party_id: str | None, party, field_name: str) -> None:
    """The header party (client or supplier) must be selected and known."""
    if not party_id or party is None:
        raise EmptyRequiredFieldError(field_name)


def build_line_models(line_model, prepared: Sequence[PreparedLine], totals, actor_id: str) -> list:
    """ORM line rows for ``prepared``, numbered from 1, figures from ``totals``."""
    models = []
    for number, (line, result) in enumerate(zip(prepared, totals.lines), start=1):
        row = line_model(created_by_id=actor_id)
        row.fill(
            line_number=number,
            product_id=line.product.id,
            item_code=line.item_code,
            description=line.description,
            unit=line.unit,
            quantity=line.item.quantity,
            unit_amount=line.item.unit_amount,
            result=result,
        )
        models.append(row)
    return models
