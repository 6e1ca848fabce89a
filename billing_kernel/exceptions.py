"""
Typed Exception Hierarchy for the Billing Kernel.

===============================================================================
WHY TYPED EXCEPTIONS
===============================================================================

Every failure a caller can act on has its own class. Callers catch by type,
read structured attributes, and surface the machine-readable ``code`` to the
form or API that triggered the computation:

    try:
        totals = compute_document_totals(items)
    except InvalidLineItemError as e:
        form.flag_row(e.line_index, e.reason)
    except InconsistentTaxCodeError as e:
        form.reset_tax_rate(e.line_index, e.expected_rate)

All errors in this module are local, synchronous and non-retryable: the
caller fixes the input and recomputes. Nothing here models a transient
system fault.

===============================================================================
EXCEPTION HIERARCHY
===============================================================================

    BillingKernelError (base)
    |
    +-- LineItemError
    |   +-- InvalidLineItemError
    |   +-- InconsistentTaxCodeError
    |
    +-- DocumentError
    |   +-- EmptyRequiredFieldError
    |   +-- InsufficientStockError
    |   +-- DocumentNotFoundError
    |
    +-- WorkflowError
    |   +-- InvalidTransitionError
    |
    +-- PaymentError
    |   +-- InvalidPaymentError
    |   +-- OverpaymentError
    |
    +-- CurrencyError
    |   +-- InvalidCurrencyError
    |   +-- CurrencyMismatchError
    |
    +-- AccessError
    |   +-- NotAuthenticatedError
    |   +-- PermissionDeniedError
    |
    +-- ConfigError

===============================================================================
ERROR CODES - QUICK REFERENCE
===============================================================================

Category        | Code                        | When Raised
----------------|-----------------------------|-----------------------------------------
Line item       | INVALID_LINE_ITEM           | Bad quantity/amount/discount, net < 0
                | INCONSISTENT_TAX_CODE       | tax_rate disagrees with tax_code
----------------|-----------------------------|-----------------------------------------
Document        | EMPTY_REQUIRED_FIELD        | Party/product/lines missing
                | INSUFFICIENT_STOCK          | Invoice quantity exceeds stock on hand
                | DOCUMENT_NOT_FOUND          | No document with that id
----------------|-----------------------------|-----------------------------------------
Workflow        | INVALID_TRANSITION          | Action not allowed from current status
----------------|-----------------------------|-----------------------------------------
Payment         | INVALID_PAYMENT             | Non-positive amount, unknown method
                | OVERPAYMENT                 | Amount exceeds outstanding balance
----------------|-----------------------------|-----------------------------------------
Currency        | INVALID_CURRENCY            | Unknown currency code
                | CURRENCY_MISMATCH           | Mixed currencies in one operation
----------------|-----------------------------|-----------------------------------------
Access          | NOT_AUTHENTICATED           | No user bound to the auth context
                | PERMISSION_DENIED           | Role lacks the required permission
----------------|-----------------------------|-----------------------------------------
Config          | CONFIG_ERROR                | Billing configuration is invalid

===============================================================================
"""


class BillingKernelError(Exception):
    """
    Base exception for all billing kernel errors.

    All subclasses must have a ``code`` class attribute for machine-readable
    error identification.
    """

    code: str = "BILLING_KERNEL_ERROR"


# Line item exceptions


class LineItemError(BillingKernelError):
    """Base exception for line item validation errors."""

    code: str = "LINE_ITEM_ERROR"


class InvalidLineItemError(LineItemError):
    """Line item violates its own constraints (quantity, amounts, discount)."""

    code: str = "INVALID_LINE_ITEM"

    def __init__(self, reason: str, line_index: int | None = None):
        self.reason = reason
        self.line_index = line_index
        where = f" (line {line_index})" if line_index is not None else ""
        super().__init__(f"Invalid line item{where}: {reason}")


class InconsistentTaxCodeError(LineItemError):
    """Explicit tax rate does not match the rate of the tax code."""

    code: str = "INCONSISTENT_TAX_CODE"

    def __init__(
        self,
        tax_code: str,
        tax_rate: str,
        expected_rate: str,
        line_index: int | None = None,
    ):
        self.tax_code = tax_code
        self.tax_rate = tax_rate
        self.expected_rate = expected_rate
        self.line_index = line_index
        super().__init__(
            f"Tax rate {tax_rate}% is inconsistent with tax code {tax_code} "
            f"(expected {expected_rate}%)"
        )


# Document exceptions


class DocumentError(BillingKernelError):
    """Base exception for document assembly and lookup errors."""

    code: str = "DOCUMENT_ERROR"


class EmptyRequiredFieldError(DocumentError):
    """A field the calling form must fill before computing is empty."""

    code: str = "EMPTY_REQUIRED_FIELD"

    def __init__(self, field_name: str, line_index: int | None = None):
        self.field_name = field_name
        self.line_index = line_index
        where = f" on line {line_index}" if line_index is not None else ""
        super().__init__(f"Required field is empty: {field_name}{where}")


class InsufficientStockError(DocumentError):
    """Requested quantity exceeds the product's stock on hand."""

    code: str = "INSUFFICIENT_STOCK"

    def __init__(self, product_name: str, available: str, required: str):
        self.product_name = product_name
        self.available = available
        self.required = required
        super().__init__(
            f"Insufficient stock for {product_name}. "
            f"Available: {available}, Required: {required}"
        )


class DocumentNotFoundError(DocumentError):
    """No document of the given kind with the given id."""

    code: str = "DOCUMENT_NOT_FOUND"

    def __init__(self, document_kind: str, document_id: str):
        self.document_kind = document_kind
        self.document_id = document_id
        super().__init__(f"{document_kind} not found: {document_id}")


# Workflow exceptions


class WorkflowError(BillingKernelError):
    """Base exception for document lifecycle errors."""

    code: str = "WORKFLOW_ERROR"


class InvalidTransitionError(WorkflowError):
    """The action is not available from the document's current status."""

    code: str = "INVALID_TRANSITION"

    def __init__(self, workflow_name: str, from_state: str, action: str):
        self.workflow_name = workflow_name
        self.from_state = from_state
        self.action = action
        super().__init__(
            f"Action '{action}' is not allowed for {workflow_name} "
            f"in status '{from_state}'"
        )


# Payment exceptions


class PaymentError(BillingKernelError):
    """Base exception for payment recording errors."""

    code: str = "PAYMENT_ERROR"


class InvalidPaymentError(PaymentError):
    """Payment amount or method is not acceptable."""

    code: str = "INVALID_PAYMENT"

    def __init__(self, reason: str):
        self.reason = reason
        super().__init__(f"Invalid payment: {reason}")


class OverpaymentError(PaymentError):
    """Payment amount exceeds the outstanding balance."""

    code: str = "OVERPAYMENT"

    def __init__(self, amount: str, balance: str):
        self.amount = amount
        self.balance = balance
        super().__init__(f"Payment {amount} exceeds outstanding balance {balance}")


# Currency exceptions


class CurrencyError(BillingKernelError):
    """Base exception for currency errors."""

    code: str = "CURRENCY_ERROR"


class InvalidCurrencyError(CurrencyError):
    """Currency code is not known to the registry."""

    code: str = "INVALID_CURRENCY"

    def __init__(self, currency: str):
        self.currency = currency
        super().__init__(f"Invalid currency code: {currency}")


class CurrencyMismatchError(CurrencyError):
    """Two amounts in one operation carry different currencies."""

    code: str = "CURRENCY_MISMATCH"

    def __init__(self, expected: str, received: str):
        self.expected = expected
        self.received = received
        super().__init__(f"Currency mismatch: expected {expected}, received {received}")


# Access exceptions


class AccessError(BillingKernelError):
    """Base exception for authentication and authorization errors."""

    code: str = "ACCESS_ERROR"


class NotAuthenticatedError(AccessError):
    """No user is bound to the auth context."""

    code: str = "NOT_AUTHENTICATED"

    def __init__(self):
        super().__init__("Not authenticated")


class PermissionDeniedError(AccessError):
    """The acting role does not hold the required permission."""

    code: str = "PERMISSION_DENIED"

    def __init__(self, role: str | None, permission: str):
        self.role = role
        self.permission = permission
        super().__init__(f"Role '{role}' lacks permission '{permission}'")


# Configuration exceptions


class ConfigError(BillingKernelError):
    """Billing configuration failed validation."""

    code: str = "CONFIG_ERROR"

    def __init__(self, reason: str, source: str | None = None):
        self.reason = reason
        self.source = source
        where = f" in {source}" if source else ""
        super().__init__(f"Invalid billing configuration{where}: {reason}")
